"""Shared pytest fixtures for the ionic-scaffold test suite.

Provides reusable fixtures for:
- Empty workspaces written by ``init_workspace``
- Default and variant ``ApplicationOptions``
- Configuration pointing at temporary directories
- Mock subprocess helpers and task-runner stand-ins
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ionic_scaffold.config import Config
from ionic_scaffold.generator import ApplicationOptions, init_workspace
from ionic_scaffold.verifier.results import CommandResult

INSTALL_OK = CommandResult(command="npm install", stdout="added 1187 packages in 41s")


# ---------------------------------------------------------------------------
# Workspaces
# ---------------------------------------------------------------------------

@pytest.fixture
def workspace_dir(tmp_path: Path) -> Path:
    """Empty workspace skeleton in a temp directory (auto-cleanup)."""
    root = tmp_path / "proj"
    init_workspace(root)
    yield root


@pytest.fixture
def config(workspace_dir: Path) -> Config:
    """Config whose workspace is the temporary skeleton."""
    return Config(workspace_dir=workspace_dir)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

@pytest.fixture
def default_options() -> ApplicationOptions:
    """Options with every default (css, jest, cypress, eslint, TypeScript)."""
    return ApplicationOptions(name="my-app")


@pytest.fixture
def make_options():
    """Factory for ``ApplicationOptions`` with keyword overrides.

    Usage:
        def test_js(make_options):
            options = make_options(js=True)
    """
    def factory(**overrides: Any) -> ApplicationOptions:
        fields: dict[str, Any] = {"name": "my-app"}
        fields.update(overrides)
        return ApplicationOptions(**fields)

    return factory


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def passing_outputs() -> dict[str, CommandResult]:
    """Command results carrying every step's success marker, keyed by step."""
    return {
        "build": CommandResult(command="nx build", stdout="Hash: 1\nBuilt at: 12:00\n"),
        "lint": CommandResult(command="nx lint", stdout="Linting...\nAll files pass linting.\n"),
        "test": CommandResult(
            command="nx test",
            stderr="PASS src/app/app.spec.tsx\nTest Suites: 1 passed, 1 total\n",
        ),
        "e2e": CommandResult(command="nx e2e", stdout="All specs passed!  00:04  1  1\n"),
    }


@pytest.fixture
def mock_runner(passing_outputs: dict[str, CommandResult]) -> MagicMock:
    """An ``NxRunner`` stand-in whose commands all succeed.

    ``run_nx_command`` dispatches on the first word of the command so tests
    can replace individual entries of ``passing_outputs``.
    """
    runner = MagicMock()

    async def _run(command: str, *, timeout: int | None = None) -> CommandResult:
        step = command.split()[0]
        return passing_outputs.get(step, CommandResult(command=command))

    runner.run_nx_command = AsyncMock(side_effect=_run)
    runner.install_dependencies = AsyncMock(return_value=INSTALL_OK)
    runner.ensure_workspace = AsyncMock(return_value=None)
    return runner


@pytest.fixture
def offline_install():
    """Stub out ``NxRunner.install_dependencies`` so no package manager runs."""
    with patch(
        "ionic_scaffold.verifier.runner.NxRunner.install_dependencies",
        AsyncMock(return_value=INSTALL_OK),
    ) as install:
        yield install
