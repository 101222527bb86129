"""Unit tests for filesystem assertions (ionic_scaffold.verifier.checks).

Tests cover:
- check_files_exist reports every missing path
- expected_files / forbidden_files for each option that changes the file set
- verify_generated_files against hand-built trees
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ionic_scaffold.generator.options import ApplicationOptions
from ionic_scaffold.verifier.checks import (
    FileAssertionError,
    MissingFilesError,
    check_files_exist,
    expected_files,
    forbidden_files,
    verify_generated_files,
)

pytestmark = pytest.mark.unit


def _touch(root: Path, *paths: str) -> None:
    for rel in paths:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


# ---------------------------------------------------------------------------
# check_files_exist
# ---------------------------------------------------------------------------


class TestCheckFilesExist:
    def test_all_present(self, tmp_path: Path):
        _touch(tmp_path, "a.txt", "b/c.txt")
        check_files_exist(tmp_path, "a.txt", "b/c.txt")

    def test_lists_every_missing_path(self, tmp_path: Path):
        _touch(tmp_path, "a.txt")
        with pytest.raises(MissingFilesError) as exc_info:
            check_files_exist(tmp_path, "a.txt", "x.txt", "y/z.txt")
        assert exc_info.value.missing == ["x.txt", "y/z.txt"]
        assert "x.txt" in str(exc_info.value)
        assert "y/z.txt" in str(exc_info.value)

    def test_is_assertion_error(self):
        assert issubclass(MissingFilesError, AssertionError)


# ---------------------------------------------------------------------------
# expected_files / forbidden_files
# ---------------------------------------------------------------------------


class TestExpectedFiles:
    def test_defaults(self):
        files = expected_files(ApplicationOptions(name="my-app"))
        for rel in (
            "apps/my-app/ionic.config.json",
            "apps/my-app/.eslintrc",
            "apps/my-app/src/index.html",
            "apps/my-app/src/manifest.json",
            "apps/my-app/src/assets/icon/favicon.png",
            "apps/my-app/src/assets/icon/icon.png",
            "apps/my-app/src/app/app.tsx",
            "apps/my-app/src/app/pages/home.tsx",
            "apps/my-app/src/app/components/explore-container.tsx",
            "apps/my-app/jest.config.js",
            "apps/my-app/src/app/__mocks__/fileMock.js",
            "apps/my-app/src/app/components/explore-container.css",
            "apps/my-app/src/app/pages/home.css",
            "apps/my-app/src/app/theme/variables.css",
            "apps/my-app-e2e/cypress.json",
        ):
            assert rel in files, rel

    def test_tslint(self):
        files = expected_files(ApplicationOptions(name="my-app", linter="tslint"))
        assert "apps/my-app/tslint.json" in files
        assert "apps/my-app/.eslintrc" not in files

    def test_js_and_pascal_case(self):
        files = expected_files(ApplicationOptions(name="my-app", js=True, pascal_case_files=True))
        assert "apps/my-app/src/app/App.js" in files
        assert "apps/my-app/src/app/pages/Home.js" in files
        assert "apps/my-app/src/app/components/ExploreContainer.css" in files

    def test_directory(self):
        files = expected_files(ApplicationOptions(name="my-app", directory="subdir"))
        assert "apps/subdir/my-app/src/index.html" in files

    def test_custom_apps_dir(self):
        files = expected_files(ApplicationOptions(name="my-app"), apps_dir="projects")
        assert "projects/my-app/src/index.html" in files
        assert "projects/my-app/src/app/theme/variables.css" in files

    def test_styled_library_expects_no_style_files(self):
        files = expected_files(ApplicationOptions(name="my-app", style="styled-components"))
        assert not any(f.endswith(".styled-components") for f in files)

    def test_capacitor(self):
        assert "apps/my-app/capacitor.config.json" in expected_files(
            ApplicationOptions(name="my-app", capacitor=True)
        )


class TestForbiddenFiles:
    def test_defaults_forbid_capacitor_only(self):
        assert forbidden_files(ApplicationOptions(name="my-app")) == [
            "apps/my-app/capacitor.config.json"
        ]

    def test_unit_runner_none_forbids_jest_files(self):
        files = forbidden_files(ApplicationOptions(name="my-app", unit_test_runner="none"))
        assert "apps/my-app/jest.config.js" in files
        assert "apps/my-app/src/app/__mocks__/fileMock.js" in files

    def test_styled_library_forbids_style_files(self):
        files = forbidden_files(ApplicationOptions(name="my-app", style="styled-components"))
        assert "apps/my-app/src/app/pages/home.styled-components" in files

    def test_e2e_none_forbids_cypress_config(self):
        files = forbidden_files(ApplicationOptions(name="my-app", e2e_test_runner="none"))
        assert "apps/my-app-e2e/cypress.json" in files


# ---------------------------------------------------------------------------
# verify_generated_files
# ---------------------------------------------------------------------------


class TestVerifyGeneratedFiles:
    def test_passes_on_complete_tree(self, tmp_path: Path):
        options = ApplicationOptions(name="my-app")
        _touch(tmp_path, *expected_files(options))
        assert verify_generated_files(tmp_path, options) == expected_files(options)

    def test_reports_missing_and_unexpected(self, tmp_path: Path):
        options = ApplicationOptions(name="my-app", unit_test_runner="none")
        expected = expected_files(options)
        _touch(tmp_path, *expected[1:])
        _touch(tmp_path, "apps/my-app/jest.config.js")

        with pytest.raises(FileAssertionError) as exc_info:
            verify_generated_files(tmp_path, options)
        assert exc_info.value.missing == [expected[0]]
        assert exc_info.value.unexpected == ["apps/my-app/jest.config.js"]
        assert "missing" in str(exc_info.value)
        assert "unexpected" in str(exc_info.value)
