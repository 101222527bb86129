"""Workspace task-runner invocation.

Every build, lint, test and e2e check goes through the workspace's ``nx``
CLI.  :class:`NxRunner` wraps those invocations, capturing stdout, stderr and
exit status into :class:`CommandResult` without raising on failure.
"""

from __future__ import annotations

import asyncio
import shlex
import shutil
import time
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import TimeoutConfig
from ..generator.options import ApplicationOptions
from ..utils import run_command
from .results import CommandResult

console = Console()

# Colour codes would otherwise break substring matching on the output.
_CHILD_ENV: dict[str, str] = {
    "FORCE_COLOR": "0",
    "NX_DAEMON": "false",
    "CI": "true",
}


class WorkspaceError(RuntimeError):
    """Raised when a fresh workspace cannot be created."""


# ---------------------------------------------------------------------------
# Command line builders
# ---------------------------------------------------------------------------


def _flag_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_generate_command(plugin: str, options: ApplicationOptions) -> str:
    """Render the ``generate <plugin>:app`` command line for *options*.

    Every option is passed explicitly so the plugin's own defaults never
    come into play; ``directory`` and ``tags`` are only added when set.
    """
    parts = [
        "generate",
        f"{plugin}:app",
        options.name,
        "--style", options.style,
        "--skipFormat", _flag_value(options.skip_format),
        "--unitTestRunner", options.unit_test_runner,
        "--e2eTestRunner", options.e2e_test_runner,
        "--linter", options.linter,
        "--pascalCaseFiles", _flag_value(options.pascal_case_files),
        "--classComponent", _flag_value(options.class_component),
        "--js", _flag_value(options.js),
        "--capacitor", _flag_value(options.capacitor),
    ]
    if options.directory:
        parts += ["--directory", options.directory]
    if options.tags:
        parts += ["--tags", ",".join(options.tags)]
    return shlex.join(parts)


# ---------------------------------------------------------------------------
# NxRunner
# ---------------------------------------------------------------------------


class NxRunner:
    """Runs ``nx`` commands inside a workspace.

    Parameters
    ----------
    workspace_dir:
        Root of the workspace (the directory holding ``nx.json``).
    npx:
        Executable used to launch ``nx`` and ``create-nx-workspace``.
    package_manager:
        Executable that installs packages into the workspace.
    timeouts:
        Per-step timeouts in seconds.
    """

    def __init__(
        self,
        workspace_dir: str | Path,
        *,
        npx: str = "npx",
        package_manager: str = "npm",
        timeouts: Optional[TimeoutConfig] = None,
    ) -> None:
        self.workspace_dir = Path(workspace_dir).resolve()
        self.npx = npx
        self.package_manager = package_manager
        self.timeouts = timeouts or TimeoutConfig()

    # -- Public API ----------------------------------------------------------

    async def run_nx_command(
        self,
        command: str,
        *,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """Run ``npx nx <command>`` in the workspace.

        The timeout defaults to the configured value for the command's first
        word (``build``, ``lint``, ``test``, ``e2e``, ``generate``).
        """
        args = shlex.split(command)
        if timeout is None:
            timeout = self.timeouts.for_step(args[0] if args else "build")
        return await self._run([self.npx, "nx", *args], self.workspace_dir, timeout)

    async def ensure_workspace(self, plugin: str, dist_path: str | Path) -> None:
        """Create a fresh, empty workspace and install *plugin* from *dist_path*.

        Any previous workspace at the same location is removed first.

        Raises:
            WorkspaceError: If workspace creation or plugin installation fails.
        """
        dist = Path(dist_path).resolve()
        parent = self.workspace_dir.parent
        name = self.workspace_dir.name

        if self.workspace_dir.exists():
            await asyncio.to_thread(shutil.rmtree, self.workspace_dir)
        await asyncio.to_thread(parent.mkdir, parents=True, exist_ok=True)

        console.print(f"[dim]Creating workspace {self.workspace_dir}[/dim]")
        created = await self._run(
            [
                self.npx,
                "create-nx-workspace",
                name,
                "--preset=empty",
                "--nxCloud=false",
                "--interactive=false",
                f"--packageManager={self.package_manager}",
            ],
            parent,
            self.timeouts.workspace,
        )
        if not created.succeeded:
            raise WorkspaceError(
                f"create-nx-workspace failed (rc={created.returncode}): "
                f"{(created.stderr or created.stdout)[:500]}"
            )

        console.print(f"[dim]Installing {plugin} from {dist}[/dim]")
        installed = await self._run(
            [self.package_manager, "install", "--save-dev", str(dist)],
            self.workspace_dir,
            self.timeouts.workspace,
        )
        if not installed.succeeded:
            raise WorkspaceError(
                f"Installing {plugin} failed (rc={installed.returncode}): "
                f"{(installed.stderr or installed.stdout)[:500]}"
            )

    async def install_dependencies(self) -> CommandResult:
        """Install the packages listed in the workspace's ``package.json``."""
        console.print(f"[dim]Installing workspace dependencies with {self.package_manager}[/dim]")
        return await self._run(
            [self.package_manager, "install"],
            self.workspace_dir,
            self.timeouts.workspace,
        )

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    async def _run(args: list[str], cwd: Path, timeout: int) -> CommandResult:
        start = time.monotonic()
        returncode, stdout, stderr = await run_command(
            args, cwd=cwd, timeout=timeout, env=_CHILD_ENV
        )
        return CommandResult(
            command=shlex.join(args),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=round(time.monotonic() - start, 3),
        )
