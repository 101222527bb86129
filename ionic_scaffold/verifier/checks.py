"""Filesystem assertions over a generated application.

The expected and forbidden file sets are computed here from the options
alone, independently of the generator's own plan, so a regression in the
templates shows up as a missing or unexpected file.
"""

from __future__ import annotations

from pathlib import Path

from ..generator.options import ApplicationOptions, normalize_options


class FileAssertionError(AssertionError):
    """Raised when generated files do not match expectations."""

    def __init__(self, missing: list[str], unexpected: list[str] | None = None) -> None:
        self.missing = list(missing)
        self.unexpected = list(unexpected or [])
        parts: list[str] = []
        if self.missing:
            parts.append("missing: " + ", ".join(self.missing))
        if self.unexpected:
            parts.append("unexpected: " + ", ".join(self.unexpected))
        super().__init__("; ".join(parts) or "file check failed")


class MissingFilesError(FileAssertionError):
    """Raised by :func:`check_files_exist` when any path is absent."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(missing)


def check_files_exist(root: str | Path, *paths: str) -> None:
    """Assert every path (relative to *root*) exists.

    Raises:
        MissingFilesError: Listing every missing path, not just the first.
    """
    base = Path(root)
    missing = [p for p in paths if not (base / p).exists()]
    if missing:
        raise MissingFilesError(missing)


def expected_files(options: ApplicationOptions, apps_dir: str = "apps") -> list[str]:
    """Paths (relative to the workspace) that must exist after generation."""
    norm = normalize_options(options, apps_dir)
    root = norm.project_root
    comp = norm.component_extension

    files = [
        f"{root}/ionic.config.json",
        f"{root}/.eslintrc" if options.linter == "eslint" else f"{root}/tslint.json",
        f"{root}/src/index.html",
        f"{root}/src/manifest.json",
        f"{root}/src/assets/icon/favicon.png",
        f"{root}/src/assets/icon/icon.png",
        f"{root}/src/app/{norm.app_file_name}.{comp}",
        f"{root}/src/app/pages/{norm.home_file_name}.{comp}",
        f"{root}/src/app/components/{norm.explore_container_file_name}.{comp}",
    ]

    if options.unit_test_runner == "jest":
        files += [
            f"{root}/jest.config.js",
            f"{root}/src/app/__mocks__/fileMock.js",
        ]

    if not options.uses_styled_library:
        files += _style_files(options, apps_dir)

    if options.capacitor:
        files.append(f"{root}/capacitor.config.json")

    if options.e2e_test_runner == "cypress":
        files.append(f"{norm.e2e_project_root}/cypress.json")

    return files


def forbidden_files(options: ApplicationOptions, apps_dir: str = "apps") -> list[str]:
    """Paths (relative to the workspace) that must not exist after generation."""
    norm = normalize_options(options, apps_dir)
    root = norm.project_root

    files: list[str] = []
    if options.unit_test_runner == "none":
        files += [
            f"{root}/jest.config.js",
            f"{root}/src/app/__mocks__/fileMock.js",
        ]
    if options.uses_styled_library:
        files += _style_files(options, apps_dir)
    if not options.capacitor:
        files.append(f"{root}/capacitor.config.json")
    if options.e2e_test_runner == "none":
        files.append(f"{norm.e2e_project_root}/cypress.json")
    return files


def verify_generated_files(
    workspace_root: str | Path,
    options: ApplicationOptions,
    apps_dir: str = "apps",
) -> list[str]:
    """Assert expected files exist and forbidden files do not.

    Returns:
        The list of expected files that were checked.

    Raises:
        FileAssertionError: With both the missing and the unexpected paths.
    """
    base = Path(workspace_root)
    expected = expected_files(options, apps_dir)
    missing = [p for p in expected if not (base / p).exists()]
    unexpected = [p for p in forbidden_files(options, apps_dir) if (base / p).exists()]
    if missing or unexpected:
        raise FileAssertionError(missing, unexpected)
    return expected


def _style_files(options: ApplicationOptions, apps_dir: str = "apps") -> list[str]:
    """Style sheets named with the raw ``style`` option as extension."""
    norm = normalize_options(options, apps_dir)
    root = norm.project_root
    return [
        f"{root}/src/app/components/{norm.explore_container_file_name}.{options.style}",
        f"{root}/src/app/pages/{norm.home_file_name}.{options.style}",
        f"{root}/src/app/theme/variables.{options.style}",
    ]
