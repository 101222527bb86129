"""ionic-scaffold configuration.

Centralised, typed configuration for the generator and the verification
pipeline. All settings use Pydantic v2 models so they can be validated at
construction time and serialised to/from JSON or environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class TimeoutConfig(BaseModel):
    """Per-command timeouts, in seconds, for the external task runner."""

    workspace: int = Field(default=600, ge=10, description="Workspace creation and plugin install")
    generate: int = Field(default=180, ge=10)
    build: int = Field(default=180, ge=10)
    lint: int = Field(default=180, ge=10)
    test: int = Field(default=180, ge=10)
    e2e: int = Field(default=180, ge=10)

    def for_step(self, step: str) -> int:
        """Return the timeout for *step*, falling back to the build timeout."""
        return int(getattr(self, step, self.build))


class Config(BaseModel):
    """Global ionic-scaffold configuration.

    Instances are typically created once by the CLI entry point and then
    passed to ``NxRunner`` and ``VerificationPipeline``.
    """

    workspace_dir: Path = Field(default=Path("./tmp/nx-e2e/proj"))
    apps_dir: str = Field(default="apps")
    plugin: str = Field(default="@nxtend/ionic-react")
    plugin_dist: Path = Field(default=Path("dist/packages/ionic-react"))
    npx: str = Field(default="npx", description="Executable used to invoke nx")
    package_manager: str = Field(
        default="npm", description="Package manager that installs workspace dependencies"
    )
    use_plugin_generator: bool = Field(
        default=False,
        description="Run `nx generate <plugin>:app` instead of the built-in generator",
    )
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    # ------------------------------------------------------------------
    # Derived paths (read-only properties)
    # ------------------------------------------------------------------

    @property
    def reports_dir(self) -> Path:
        """Directory that stores verification reports."""
        return self.workspace_dir / ".ionic-scaffold" / "reports"

    @property
    def workspace_json_path(self) -> Path:
        return self.workspace_dir / "workspace.json"

    @property
    def nx_json_path(self) -> Path:
        return self.workspace_dir / "nx.json"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to ``<reports_dir>/../config.json``.

        Returns:
            The resolved path where the file was written.
        """
        target = path or (self.reports_dir.parent / "config.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            IONIC_SCAFFOLD_WORKSPACE, IONIC_SCAFFOLD_APPS_DIR,
            IONIC_SCAFFOLD_PLUGIN, IONIC_SCAFFOLD_PLUGIN_DIST,
            IONIC_SCAFFOLD_NPX, IONIC_SCAFFOLD_PACKAGE_MANAGER,
            IONIC_SCAFFOLD_USE_PLUGIN,
            IONIC_SCAFFOLD_TIMEOUT (applied to every command except
            workspace creation).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("IONIC_SCAFFOLD_WORKSPACE"):
            kwargs["workspace_dir"] = Path(os.environ["IONIC_SCAFFOLD_WORKSPACE"])
        if os.environ.get("IONIC_SCAFFOLD_APPS_DIR"):
            kwargs["apps_dir"] = os.environ["IONIC_SCAFFOLD_APPS_DIR"]
        if os.environ.get("IONIC_SCAFFOLD_PLUGIN"):
            kwargs["plugin"] = os.environ["IONIC_SCAFFOLD_PLUGIN"]
        if os.environ.get("IONIC_SCAFFOLD_PLUGIN_DIST"):
            kwargs["plugin_dist"] = Path(os.environ["IONIC_SCAFFOLD_PLUGIN_DIST"])
        if os.environ.get("IONIC_SCAFFOLD_NPX"):
            kwargs["npx"] = os.environ["IONIC_SCAFFOLD_NPX"]
        if os.environ.get("IONIC_SCAFFOLD_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["IONIC_SCAFFOLD_PACKAGE_MANAGER"]
        if os.environ.get("IONIC_SCAFFOLD_USE_PLUGIN"):
            kwargs["use_plugin_generator"] = os.environ["IONIC_SCAFFOLD_USE_PLUGIN"].lower() in (
                "1",
                "true",
                "yes",
            )

        timeout_kwargs: dict[str, Any] = {}
        if os.environ.get("IONIC_SCAFFOLD_TIMEOUT"):
            seconds = int(os.environ["IONIC_SCAFFOLD_TIMEOUT"])
            timeout_kwargs = {
                step: seconds for step in ("generate", "build", "lint", "test", "e2e")
            }

        return cls(timeouts=TimeoutConfig(**timeout_kwargs), **kwargs)
