"""Ionic React application generator.

Takes ``ApplicationOptions`` and produces an Ionic React application (plus
an optional Cypress e2e project) inside a workspace, registering both in the
workspace metadata.

The set of files is decided by :meth:`ApplicationGenerator.plan`, which is a
pure function of the options: the same options always yield the same
relative paths in the same order.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from .cypress_gen import CypressGenerator, lint_target
from .options import ApplicationOptions, NormalizedOptions, normalize_options
from .templates import TemplateRenderer
from .workspace import Workspace, ensure_jest_preset


class GeneratorError(Exception):
    """Raised when the workspace cannot accept the requested application."""


# ---------------------------------------------------------------------------
# npm package versions
# ---------------------------------------------------------------------------

IONIC_DEPENDENCIES: dict[str, str] = {
    "@ionic/react": "^5.5.0",
    "@ionic/react-router": "^5.5.0",
    "ionicons": "^5.2.3",
    "react-router-dom": "^5.2.0",
}

STYLE_DEPENDENCIES: dict[str, tuple[dict[str, str], dict[str, str]]] = {
    "css": ({}, {}),
    "scss": ({}, {"sass": "^1.29.0"}),
    "less": ({}, {"less": "^3.12.2"}),
    "styl": ({}, {"stylus": "^0.54.8"}),
    "styled-components": (
        {"styled-components": "^5.2.1"},
        {"@types/styled-components": "^5.1.4", "babel-plugin-styled-components": "^1.12.0"},
    ),
    "@emotion/styled": (
        {"@emotion/react": "^11.1.1", "@emotion/styled": "^11.0.0"},
        {"@emotion/babel-plugin": "^11.0.0"},
    ),
}

JEST_DEV_DEPENDENCIES: dict[str, str] = {
    "@nrwl/jest": "^11.0.0",
    "@testing-library/react": "^11.2.2",
    "babel-jest": "^26.6.3",
    "jest": "^26.6.3",
}

CYPRESS_DEV_DEPENDENCIES: dict[str, str] = {
    "@nrwl/cypress": "^11.0.0",
    "cypress": "^6.0.1",
}

CAPACITOR_DEPENDENCIES: tuple[dict[str, str], dict[str, str]] = (
    {"@capacitor/core": "^2.4.4"},
    {"@capacitor/cli": "^2.4.4", "@nxtend/capacitor": "^11.0.0"},
)

DEFAULT_APP_ID = "io.ionic.starter"

JSON_FILE_NAMES: frozenset[str] = frozenset({".eslintrc", ".babelrc"})


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class PlannedFile(BaseModel):
    """A single file the generator will write."""

    template: str = Field(..., description="Template key relative to the template root")
    path: str = Field(..., description="Output path relative to the workspace root")
    e2e: bool = Field(default=False, description="Belongs to the e2e project")


class GenerationResult(BaseModel):
    """What a generator run produced."""

    project_name: str
    project_root: str
    e2e_project_name: Optional[str] = None
    files: list[str] = Field(default_factory=list)
    formatted: list[str] = Field(default_factory=list)
    dependencies_added: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ApplicationGenerator:
    """Generates an Ionic React application into a workspace.

    Given ``ApplicationOptions``, produces:
    - the Ionic app shell (index.html, manifest, icons, theme, pages)
    - style files for CSS preprocessors, or global-style components for
      styled libraries
    - Jest configuration and a smoke spec (``unit_test_runner="jest"``)
    - a Cypress e2e project (``e2e_test_runner="cypress"``)
    - a Capacitor config (``capacitor=True``)
    """

    def __init__(
        self,
        options: ApplicationOptions,
        workspace_root: str | Path,
        *,
        apps_dir: str = "apps",
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.options = options
        self.workspace_root = Path(workspace_root)
        self.norm: NormalizedOptions = normalize_options(options, apps_dir)
        self.renderer = renderer or TemplateRenderer()
        self.cypress_gen = CypressGenerator(self.renderer)

    # -- Public API --------------------------------------------------------

    def plan(self) -> list[PlannedFile]:
        """Return every file to generate, in a stable order."""
        norm = self.norm
        opts = self.options
        tokens = self._path_tokens()

        groups = ["app", f"lint/{opts.linter}"]
        groups.append("styled" if opts.uses_styled_library else "styles")
        if opts.unit_test_runner == "jest":
            groups.append("jest")
        if opts.capacitor:
            groups.append("capacitor")

        planned: list[PlannedFile] = []
        for group in groups:
            for template_key, rel in self.renderer.plan_group(group, tokens):
                planned.append(
                    PlannedFile(template=template_key, path=f"{norm.project_root}/{rel}")
                )

        if opts.e2e_test_runner == "cypress":
            for template_key, path in self.cypress_gen.plan(norm, tokens):
                planned.append(PlannedFile(template=template_key, path=path, e2e=True))

        return planned

    async def generate(self) -> GenerationResult:
        """Write the application into the workspace.

        Raises:
            GeneratorError: If the project (or its e2e project) is already
                registered in the workspace.
        """
        norm = self.norm
        workspace = await asyncio.to_thread(Workspace, self.workspace_root)
        self._check_workspace(workspace)

        base = self._build_context()
        app_ctx = self._app_context(base)
        e2e_ctx = self.cypress_gen.context(norm, base)

        written: list[str] = []
        for planned in self.plan():
            ctx = e2e_ctx if planned.e2e else app_ctx
            await self.renderer.write(planned.template, self.workspace_root / planned.path, ctx)
            written.append(planned.path)

        # Workspace registration
        workspace.add_project(
            norm.project_name,
            self.project_config(),
            tags=norm.parsed_tags,
        )
        e2e_name: Optional[str] = None
        if self.options.e2e_test_runner == "cypress":
            e2e_name = norm.e2e_project_name
            workspace.add_project(
                e2e_name,
                self.cypress_gen.project_config(norm),
                tags=[],
                implicit_dependencies=[norm.project_name],
            )

        deps, dev_deps = self.dependencies()
        added = workspace.add_dependencies(deps, dev_deps)
        await asyncio.to_thread(workspace.save)

        if self.options.unit_test_runner == "jest":
            await asyncio.to_thread(ensure_jest_preset, self.workspace_root)

        formatted: list[str] = []
        if not self.options.skip_format:
            formatted = await asyncio.to_thread(self._format_json_files, written)

        return GenerationResult(
            project_name=norm.project_name,
            project_root=norm.project_root,
            e2e_project_name=e2e_name,
            files=written,
            formatted=formatted,
            dependencies_added=added,
        )

    # -- Workspace entries -------------------------------------------------

    def project_config(self) -> dict[str, Any]:
        """Build the ``workspace.json`` entry for the application."""
        norm = self.norm
        root = norm.project_root
        src = norm.source_root
        ext = norm.script_extension
        comp = norm.component_extension
        output_path = f"dist/{root}"

        targets: dict[str, Any] = {
            "build": {
                "executor": "@nrwl/web:build",
                "outputs": ["{options.outputPath}"],
                "options": {
                    "outputPath": output_path,
                    "index": f"{src}/index.html",
                    "main": f"{src}/main.{comp}",
                    "polyfills": f"{src}/polyfills.{ext}",
                    "tsConfig": f"{root}/tsconfig.app.json",
                    "assets": [f"{src}/assets", f"{src}/manifest.json"],
                    "styles": [],
                    "scripts": [],
                    "webpackConfig": "@nrwl/react/plugins/webpack",
                },
                "configurations": {
                    "production": {
                        "fileReplacements": [
                            {
                                "replace": f"{src}/environments/environment.{ext}",
                                "with": f"{src}/environments/environment.prod.{ext}",
                            }
                        ],
                        "optimization": True,
                        "outputHashing": "all",
                        "sourceMap": False,
                        "extractCss": True,
                        "namedChunks": False,
                        "extractLicenses": True,
                        "vendorChunk": False,
                    }
                },
            },
            "serve": {
                "executor": "@nrwl/web:dev-server",
                "options": {"buildTarget": f"{norm.project_name}:build"},
                "configurations": {
                    "production": {"buildTarget": f"{norm.project_name}:build:production"}
                },
            },
            "lint": lint_target(
                self.options.linter,
                root,
                [f"{root}/tsconfig.app.json", f"{root}/tsconfig.spec.json"]
                if self.options.unit_test_runner == "jest"
                else [f"{root}/tsconfig.app.json"],
            ),
        }
        if self.options.unit_test_runner == "jest":
            targets["test"] = {
                "executor": "@nrwl/jest:jest",
                "outputs": [f"coverage/{root}"],
                "options": {"jestConfig": f"{root}/jest.config.js", "passWithNoTests": True},
            }
        if self.options.capacitor:
            targets["cap"] = {
                "executor": "@nxtend/capacitor:cap",
                "options": {"cmd": "--help"},
            }

        return {
            "root": root,
            "sourceRoot": src,
            "projectType": "application",
            "targets": targets,
        }

    def dependencies(self) -> tuple[dict[str, str], dict[str, str]]:
        """Return the ``(dependencies, devDependencies)`` the app needs."""
        deps = dict(IONIC_DEPENDENCIES)
        dev_deps: dict[str, str] = {}
        if not self.options.js:
            dev_deps["@types/react-router-dom"] = "^5.1.6"

        style_deps, style_dev = STYLE_DEPENDENCIES[self.options.style]
        deps.update(style_deps)
        dev_deps.update(style_dev)

        if self.options.unit_test_runner == "jest":
            dev_deps.update(JEST_DEV_DEPENDENCIES)
        if self.options.e2e_test_runner == "cypress":
            dev_deps.update(CYPRESS_DEV_DEPENDENCIES)
        if self.options.capacitor:
            cap_deps, cap_dev = CAPACITOR_DEPENDENCIES
            deps.update(cap_deps)
            dev_deps.update(cap_dev)
        return deps, dev_deps

    # -- Context building --------------------------------------------------

    def _path_tokens(self) -> dict[str, str]:
        norm = self.norm
        return {
            "app_file_name": norm.app_file_name,
            "home_file_name": norm.home_file_name,
            "explore_container_file_name": norm.explore_container_file_name,
            "component_ext": norm.component_extension,
            "script_ext": norm.script_extension,
            "style": norm.style_extension or "",
        }

    def _build_context(self) -> dict[str, Any]:
        """Build the Jinja2 template context shared by every file."""
        norm = self.norm
        opts = self.options
        return {
            "name": to_display_name(opts.name),
            "project_name": norm.project_name,
            "project_root": norm.project_root,
            "e2e_project_name": norm.e2e_project_name,
            "e2e_project_root": norm.e2e_project_root,
            "class_name": norm.class_name,
            "style": opts.style,
            "style_extension": norm.style_extension,
            "styled_library": opts.uses_styled_library,
            "js": opts.js,
            "class_component": opts.class_component,
            "unit_test_runner": opts.unit_test_runner,
            "e2e_test_runner": opts.e2e_test_runner,
            "linter": opts.linter,
            "capacitor": opts.capacitor,
            "app_id": DEFAULT_APP_ID,
            "app_file_name": norm.app_file_name,
            "home_file_name": norm.home_file_name,
            "explore_container_file_name": norm.explore_container_file_name,
            "component_extension": norm.component_extension,
            "script_extension": norm.script_extension,
        }

    def _app_context(self, base: dict[str, Any]) -> dict[str, Any]:
        """Template context for files under the application root."""
        offset = self.norm.offset_from_root(self.norm.project_root)
        if self.options.linter == "eslint":
            lint_extends = ["plugin:@nrwl/nx/react", f"{offset}.eslintrc"]
        else:
            lint_extends = [f"{offset}tslint.json"]
        return {
            **base,
            "offset": offset,
            "root": self.norm.project_root,
            "lint_extends": lint_extends,
            "lint_env": {},
        }

    def _check_workspace(self, workspace: Workspace) -> None:
        norm = self.norm
        names = [norm.project_name]
        if self.options.e2e_test_runner == "cypress":
            names.append(norm.e2e_project_name)
        for name in names:
            if workspace.has_project(name):
                raise GeneratorError(f"Project {name!r} already exists in {self.workspace_root}")

    # -- Formatting --------------------------------------------------------

    def _format_json_files(self, paths: list[str]) -> list[str]:
        """Re-indent every generated JSON file with two spaces."""
        formatted: list[str] = []
        for rel in paths:
            path = self.workspace_root / rel
            if path.suffix != ".json" and path.name not in JSON_FILE_NAMES:
                continue
            data = json.loads(path.read_text(encoding="utf-8"))
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
            formatted.append(rel)
        return formatted


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_display_name(name: str) -> str:
    """Turn ``my-ionic-app`` into ``My Ionic App`` for titles and manifests."""
    return " ".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)
