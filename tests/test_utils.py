"""Unit tests for utility functions (ionic_scaffold.utils).

Tests cover:
- run_command (success, failure, timeout, env vars, mocked subprocess)
- case conversion helpers
- uniq
- load_json / save_json (use tmp_path)
- format_duration
- Rich output helpers
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from ionic_scaffold.utils import (
    STEP_COLORS,
    format_duration,
    load_json,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    run_command,
    save_json,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
    uniq,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "print('hello')"]
        )
        assert returncode == 0
        assert stdout == "hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_command(self):
        returncode, _, _ = await run_command(
            [sys.executable, "-c", "import sys; sys.exit(3)"]
        )
        assert returncode == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_timeout(self):
        returncode, stdout, stderr = await run_command(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=1
        )
        assert returncode == -1
        assert "timed out" in stderr

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_command_with_env(self):
        returncode, stdout, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.environ['FORCE_COLOR'])"],
            env={"FORCE_COLOR": "0"},
        )
        assert returncode == 0
        assert stdout == "0"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_streams_are_decoded_and_stripped(self, mock_subprocess):
        proc = mock_subprocess(stdout="  Built at: 12:00  \n", stderr="warn\n", returncode=0)
        with patch("asyncio.create_subprocess_exec", return_value=proc) as exec_mock:
            returncode, stdout, stderr = await run_command(["npx", "nx", "build", "app"])

        assert returncode == 0
        assert stdout == "Built at: 12:00"
        assert stderr == "warn"
        assert exec_mock.call_args.args == ("npx", "nx", "build", "app")


# ---------------------------------------------------------------------------
# Case helpers
# ---------------------------------------------------------------------------


class TestCaseHelpers:
    @pytest.mark.unit
    def test_kebab_case(self):
        assert to_kebab_case("ExploreContainer") == "explore-container"
        assert to_kebab_case("my_app") == "my-app"
        assert to_kebab_case("my-app") == "my-app"

    @pytest.mark.unit
    def test_pascal_case(self):
        assert to_pascal_case("explore-container") == "ExploreContainer"
        assert to_pascal_case("ionic-react123") == "IonicReact123"

    @pytest.mark.unit
    def test_camel_case(self):
        assert to_camel_case("explore-container") == "exploreContainer"
        assert to_camel_case("") == ""

    @pytest.mark.unit
    def test_snake_case(self):
        assert to_snake_case("ExploreContainer") == "explore_container"


# ---------------------------------------------------------------------------
# uniq
# ---------------------------------------------------------------------------


class TestUniq:
    @pytest.mark.unit
    def test_prefix_and_numeric_suffix(self):
        name = uniq("ionic-react")
        assert re.fullmatch(r"ionic-react\d+", name)

    @pytest.mark.unit
    def test_suffix_comes_from_random(self):
        with patch("ionic_scaffold.utils.random.randint", return_value=4821937):
            assert uniq("app") == "app4821937"


# ---------------------------------------------------------------------------
# load_json / save_json
# ---------------------------------------------------------------------------


class TestJsonIO:
    @pytest.mark.unit
    def test_load_json_dict(self, tmp_path: Path):
        path = tmp_path / "nx.json"
        path.write_text(json.dumps({"projects": {}}))
        assert load_json(path) == {"projects": {}}

    @pytest.mark.unit
    def test_load_json_rejects_non_object(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError, match="expected a JSON object"):
            load_json(path)

    @pytest.mark.unit
    def test_load_json_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_save_json_creates_parents_and_trailing_newline(self, tmp_path: Path):
        path = tmp_path / "a" / "b" / "out.json"
        save_json({"b": 1}, path)
        text = path.read_text(encoding="utf-8")
        assert text == '{\n  "b": 1\n}\n'


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-1) == "0.0s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichHelpers:
    @pytest.mark.unit
    def test_step_colors_cover_every_step(self):
        assert set(STEP_COLORS) == {"generate", "files", "build", "lint", "test", "e2e"}

    @pytest.mark.unit
    def test_helpers_print_without_error(self):
        with patch("ionic_scaffold.utils.console") as mock_console:
            print_step_header("build", "Build application")
            print_summary_table({"build": "passed"})
            print_success("ok")
            print_error("bad")
            print_warning("hmm")
        assert mock_console.print.call_count >= 5
