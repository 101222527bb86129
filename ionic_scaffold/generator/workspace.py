"""Workspace metadata I/O.

A workspace is the directory that holds ``workspace.json`` (project
registry and targets), ``nx.json`` (tags and implicit dependencies) and the
root ``package.json``.  The generator only ever touches these three files
through :class:`Workspace`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..utils import load_json, save_json

WORKSPACE_JSON = "workspace.json"
NX_JSON = "nx.json"
PACKAGE_JSON = "package.json"


class Workspace:
    """In-memory view of the workspace metadata files.

    Changes are buffered until :meth:`save` is called.  Missing files start
    as empty skeletons so the generator can run against a bare directory.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.workspace_json = self._read(WORKSPACE_JSON, {"version": 2, "projects": {}})
        self.nx_json = self._read(NX_JSON, {"npmScope": self.root.name, "projects": {}})
        self.package_json = self._read(
            PACKAGE_JSON,
            {"name": self.root.name, "version": "0.0.0", "dependencies": {}, "devDependencies": {}},
        )
        self.workspace_json.setdefault("projects", {})
        self.nx_json.setdefault("projects", {})

    def _read(self, name: str, default: dict[str, Any]) -> dict[str, Any]:
        path = self.root / name
        if not path.exists():
            return default
        return load_json(path)

    # -- Queries -------------------------------------------------------------

    def has_project(self, name: str) -> bool:
        return name in self.workspace_json["projects"] or name in self.nx_json["projects"]

    def project(self, name: str) -> dict[str, Any]:
        """Return the ``workspace.json`` entry for *name*.

        Raises:
            KeyError: If the project is not registered.
        """
        return self.workspace_json["projects"][name]

    def project_tags(self, name: str) -> list[str]:
        return list(self.nx_json["projects"].get(name, {}).get("tags", []))

    @property
    def project_names(self) -> list[str]:
        return sorted(self.workspace_json["projects"])

    # -- Mutations -----------------------------------------------------------

    def add_project(
        self,
        name: str,
        config: dict[str, Any],
        *,
        tags: list[str] | None = None,
        implicit_dependencies: list[str] | None = None,
    ) -> None:
        """Register a project in ``workspace.json`` and ``nx.json``.

        Raises:
            ValueError: If a project with the same name already exists.
        """
        if self.has_project(name):
            raise ValueError(f"Project {name!r} already exists in the workspace")
        self.workspace_json["projects"][name] = config
        nx_entry: dict[str, Any] = {"tags": list(tags or [])}
        if implicit_dependencies:
            nx_entry["implicitDependencies"] = list(implicit_dependencies)
        self.nx_json["projects"][name] = nx_entry
        if not self.workspace_json.get("defaultProject"):
            self.workspace_json["defaultProject"] = name

    def add_dependencies(
        self,
        dependencies: dict[str, str],
        dev_dependencies: dict[str, str],
    ) -> list[str]:
        """Add npm packages to ``package.json`` without overriding existing pins.

        Returns the names of packages that were actually added.
        """
        added: list[str] = []
        for section, packages in (
            ("dependencies", dependencies),
            ("devDependencies", dev_dependencies),
        ):
            current = self.package_json.setdefault(section, {})
            for package, version in packages.items():
                if package in self.package_json.get("dependencies", {}) or package in self.package_json.get(
                    "devDependencies", {}
                ):
                    continue
                current[package] = version
                added.append(package)
            self.package_json[section] = dict(sorted(current.items()))
        return added

    def save(self) -> list[Path]:
        """Write all three metadata files back to disk."""
        written: list[Path] = []
        for name, data in (
            (WORKSPACE_JSON, self.workspace_json),
            (NX_JSON, self.nx_json),
            (PACKAGE_JSON, self.package_json),
        ):
            path = self.root / name
            save_json(data, path)
            written.append(path)
        return written


# ---------------------------------------------------------------------------
# Empty workspace skeleton
# ---------------------------------------------------------------------------

_ROOT_ESLINTRC: dict[str, Any] = {
    "root": True,
    "ignorePatterns": ["**/*"],
    "plugins": ["@nrwl/nx"],
    "overrides": [
        {
            "files": ["*.ts", "*.tsx", "*.js", "*.jsx"],
            "rules": {
                "@nrwl/nx/enforce-module-boundaries": [
                    "error",
                    {
                        "enforceBuildableLibDependency": True,
                        "allow": [],
                        "depConstraints": [{"sourceTag": "*", "onlyDependOnLibsWithTags": ["*"]}],
                    },
                ]
            },
        },
        {"files": ["*.ts", "*.tsx"], "extends": ["plugin:@nrwl/nx/typescript"], "rules": {}},
        {"files": ["*.js", "*.jsx"], "extends": ["plugin:@nrwl/nx/javascript"], "rules": {}},
    ],
}

_ROOT_TSLINT: dict[str, Any] = {
    "rulesDirectory": ["node_modules/@nrwl/workspace/src/tslint"],
    "linterOptions": {"exclude": ["**/*"]},
    "rules": {"nx-enforce-module-boundaries": [True, {"allow": [], "depConstraints": []}]},
}

_TSCONFIG_BASE: dict[str, Any] = {
    "compileOnSave": False,
    "compilerOptions": {
        "rootDir": ".",
        "sourceMap": True,
        "declaration": False,
        "moduleResolution": "node",
        "emitDecoratorMetadata": True,
        "experimentalDecorators": True,
        "importHelpers": True,
        "target": "es2015",
        "module": "esnext",
        "lib": ["es2017", "dom"],
        "skipLibCheck": True,
        "skipDefaultLibCheck": True,
        "baseUrl": ".",
        "paths": {},
    },
    "exclude": ["node_modules", "tmp"],
}

_JEST_PRESET = "const nxPreset = require('@nrwl/jest/preset');\n\nmodule.exports = { ...nxPreset };\n"


def init_workspace(root: str | Path, npm_scope: str = "proj") -> Workspace:
    """Write a minimal empty workspace into *root* and return it.

    Existing metadata files are left untouched.
    """
    root_path = Path(root)
    root_path.mkdir(parents=True, exist_ok=True)

    defaults: dict[str, dict[str, Any]] = {
        WORKSPACE_JSON: {"version": 2, "projects": {}},
        NX_JSON: {
            "npmScope": npm_scope,
            "affected": {"defaultBase": "main"},
            "implicitDependencies": {
                "workspace.json": "*",
                "package.json": {"dependencies": "*", "devDependencies": "*"},
                "tsconfig.base.json": "*",
                "nx.json": "*",
            },
            "projects": {},
        },
        PACKAGE_JSON: {
            "name": npm_scope,
            "version": "0.0.0",
            "license": "MIT",
            "scripts": {"nx": "nx"},
            "private": True,
            "dependencies": {},
            "devDependencies": {},
        },
        ".eslintrc": _ROOT_ESLINTRC,
        "tslint.json": _ROOT_TSLINT,
        "tsconfig.base.json": _TSCONFIG_BASE,
    }
    for name, data in defaults.items():
        path = root_path / name
        if not path.exists():
            save_json(data, path)

    return Workspace(root_path)


def ensure_jest_preset(root: str | Path) -> Path | None:
    """Write the workspace-level ``jest.preset.js`` if it is missing.

    Returns the path when the file was created, ``None`` otherwise.
    """
    path = Path(root) / "jest.preset.js"
    if path.exists():
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_JEST_PRESET, encoding="utf-8")
    return path
