"""Generation request model and normalisation.

``ApplicationOptions`` mirrors the flags accepted by the application
generator. ``normalize_options`` derives every name, path and extension the
templates need, so that the generated file set is a pure function of the
options record.
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..utils import to_kebab_case, to_pascal_case

Style = Literal["css", "scss", "styl", "less", "styled-components", "@emotion/styled"]
UnitTestRunner = Literal["jest", "none"]
E2ETestRunner = Literal["cypress", "none"]
Linter = Literal["eslint", "tslint"]

STYLED_LIBRARIES: frozenset[str] = frozenset({"styled-components", "@emotion/styled"})

_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]*$")


class OptionsError(ValueError):
    """Raised when a generation request is invalid."""


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------


class ApplicationOptions(BaseModel):
    """Options for the Ionic React application generator."""

    name: str = Field(..., description="Application name")
    style: Style = Field(default="css")
    skip_format: bool = Field(default=False)
    unit_test_runner: UnitTestRunner = Field(default="jest")
    e2e_test_runner: E2ETestRunner = Field(default="cypress")
    linter: Linter = Field(default="eslint")
    js: bool = Field(default=False, description="Generate JavaScript instead of TypeScript")
    capacitor: bool = Field(default=False, description="Add Capacitor native-shell integration")
    directory: Optional[str] = Field(default=None, description="Subdirectory under the apps dir")
    tags: Optional[list[str]] = Field(default=None, description="Tags added to nx.json")
    pascal_case_files: bool = Field(default=False)
    class_component: bool = Field(default=False)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        value = value.strip()
        if not _NAME_PATTERN.match(value):
            raise ValueError(
                f"Invalid application name {value!r}: must start with a letter "
                "and contain only letters, digits and hyphens"
            )
        return value

    @field_validator("directory")
    @classmethod
    def _validate_directory(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        segments = [s for s in value.strip().strip("/").split("/") if s]
        if not segments:
            return None
        for segment in segments:
            if not _NAME_PATTERN.match(segment):
                raise ValueError(f"Invalid directory segment {segment!r} in {value!r}")
        return "/".join(segments)

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: object) -> object:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return [str(tag).strip() for tag in value if str(tag).strip()]
        return value

    @model_validator(mode="after")
    def _check_exclusive_options(self) -> "ApplicationOptions":
        if self.js and self.linter == "tslint":
            raise ValueError("--js cannot be combined with --linter tslint")
        return self

    @classmethod
    def parse(cls, **kwargs: object) -> "ApplicationOptions":
        """Validate *kwargs*, converting Pydantic errors to ``OptionsError``."""
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
                for err in exc.errors()
            )
            raise OptionsError(messages) from exc

    @property
    def uses_styled_library(self) -> bool:
        return self.style in STYLED_LIBRARIES


# ---------------------------------------------------------------------------
# Normalised options
# ---------------------------------------------------------------------------


class NormalizedOptions(BaseModel):
    """Every derived value the templates and the workspace updater need."""

    options: ApplicationOptions
    project_name: str
    project_directory: str
    project_root: str
    e2e_project_name: str
    e2e_project_root: str
    parsed_tags: list[str]
    class_name: str
    component_extension: str
    script_extension: str
    style_extension: Optional[str]
    app_file_name: str
    home_file_name: str
    explore_container_file_name: str

    @property
    def source_root(self) -> str:
        return f"{self.project_root}/src"

    def offset_from_root(self, root: str) -> str:
        """Relative path from *root* back to the workspace root."""
        depth = len([p for p in root.split("/") if p])
        return "../" * depth


def normalize_options(options: ApplicationOptions, apps_dir: str = "apps") -> NormalizedOptions:
    """Derive names, paths and extensions from *options*."""
    name = to_kebab_case(options.name)
    if options.directory:
        directory = "/".join(to_kebab_case(s) for s in options.directory.split("/"))
        project_directory = f"{directory}/{name}"
    else:
        project_directory = name

    project_name = project_directory.replace("/", "-")
    project_root = f"{apps_dir.strip('/')}/{project_directory}"

    if options.pascal_case_files:
        app_file, home_file, explore_file = "App", "Home", "ExploreContainer"
    else:
        app_file, home_file, explore_file = "app", "home", "explore-container"

    return NormalizedOptions(
        options=options,
        project_name=project_name,
        project_directory=project_directory,
        project_root=project_root,
        e2e_project_name=f"{project_name}-e2e",
        e2e_project_root=f"{project_root}-e2e",
        parsed_tags=list(options.tags or []),
        class_name=to_pascal_case(name),
        component_extension="js" if options.js else "tsx",
        script_extension="js" if options.js else "ts",
        style_extension=None if options.uses_styled_library else options.style,
        app_file_name=app_file,
        home_file_name=home_file,
        explore_container_file_name=explore_file,
    )
