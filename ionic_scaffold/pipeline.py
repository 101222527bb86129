"""ionic-scaffold verification pipeline and CLI.

Runs the six verification steps against one generated application:

generate -- Render the app (in-process, or through ``nx generate``).
files    -- Assert the expected file set and the ``nx.json`` tags.
build    -- ``nx build <project>``, stdout must contain ``Built at``.
lint     -- ``nx lint <project>``, stdout must contain ``All files pass linting``.
test     -- ``nx test <project>``, stderr must report one passing suite.
e2e      -- ``nx e2e <project>-e2e --headless``, stdout must contain ``All specs passed!``.

The first failing step stops the run.

Usage::

    python -m ionic_scaffold init ./tmp/nx-e2e/proj
    python -m ionic_scaffold generate my-app --style scss --workspace ./tmp/nx-e2e/proj
    python -m ionic_scaffold verify my-app --uniq --capacitor --steps generate,files
"""

from __future__ import annotations

import asyncio
import sys
import time
import traceback
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.panel import Panel

from ionic_scaffold.config import Config
from ionic_scaffold.generator import (
    ApplicationGenerator,
    ApplicationOptions,
    GeneratorError,
    OptionsError,
    Workspace,
    init_workspace,
    normalize_options,
)
from ionic_scaffold.utils import (
    console,
    format_duration,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    uniq,
)
from ionic_scaffold.verifier import (
    CommandResult,
    FileAssertionError,
    NxRunner,
    StepResult,
    VerificationReport,
    WorkspaceError,
    build_generate_command,
    verify_generated_files,
)

# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

STEPS: tuple[str, ...] = ("generate", "files", "build", "lint", "test", "e2e")

STEP_DESCRIPTIONS: dict[str, str] = {
    "generate": "Generate application",
    "files": "Check generated files",
    "build": "Build application",
    "lint": "Lint application",
    "test": "Run unit tests",
    "e2e": "Run e2e tests",
}

# step -> (stream, success marker)
STEP_MARKERS: dict[str, tuple[str, str]] = {
    "build": ("stdout", "Built at"),
    "lint": ("stdout", "All files pass linting"),
    "test": ("stderr", "Test Suites: 1 passed, 1 total"),
    "e2e": ("stdout", "All specs passed!"),
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class VerificationError(Exception):
    """Raised when a verification step fails."""

    def __init__(
        self,
        step: str,
        message: str,
        command: Optional[CommandResult] = None,
    ) -> None:
        self.step = step
        self.message = message
        self.command = command
        super().__init__(f"{step}: {message}")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class VerificationPipeline:
    """Generates an application and verifies it step by step.

    Attributes:
        config: Global configuration (workspace location, plugin, timeouts).
        runner: Task-runner wrapper used for every external command.
    """

    def __init__(self, config: Config, runner: Optional[NxRunner] = None) -> None:
        self.config = config
        self.runner = runner or NxRunner(
            config.workspace_dir,
            npx=config.npx,
            package_manager=config.package_manager,
            timeouts=config.timeouts,
        )

    async def run(
        self,
        options: ApplicationOptions,
        *,
        steps: Optional[Sequence[str]] = None,
    ) -> VerificationReport:
        """Run the selected steps (all of them by default) for *options*.

        Returns:
            The ``VerificationReport``, also saved under ``config.reports_dir``.
        """
        selected = [s for s in STEPS if steps is None or s in steps]
        norm = normalize_options(options, self.config.apps_dir)
        report = VerificationReport(
            project_name=norm.project_name,
            options=options.model_dump(),
        )
        run_start = time.monotonic()

        console.print(
            Panel(
                f"[bold bright_cyan]ionic-scaffold verification[/bold bright_cyan]\n"
                f"Project   : {norm.project_name}\n"
                f"Workspace : {self.config.workspace_dir.resolve()}\n"
                f"Steps     : {', '.join(selected)}",
                title="[bold]Verification Start[/bold]",
                border_style="bright_cyan",
            )
        )

        for step in selected:
            print_step_header(step, STEP_DESCRIPTIONS[step])
            step_start = time.monotonic()

            skip_reason = self._skip_reason(step, options)
            if skip_reason:
                print_warning(f"Skipping {step}: {skip_reason}")
                report.steps.append(
                    StepResult(step=step, skipped=True, message=skip_reason)
                )
                continue

            try:
                command = await self._run_step(step, options)
                elapsed = time.monotonic() - step_start
                report.steps.append(
                    StepResult(
                        step=step,
                        command=command,
                        duration_seconds=round(elapsed, 3),
                    )
                )
                print_success(f"{step} passed in {format_duration(elapsed)}")

            except VerificationError as exc:
                elapsed = time.monotonic() - step_start
                report.steps.append(
                    StepResult(
                        step=step,
                        passed=False,
                        message=exc.message,
                        command=exc.command,
                        duration_seconds=round(elapsed, 3),
                    )
                )
                print_error(f"{step} FAILED after {format_duration(elapsed)}: {exc.message}")
                if exc.command is not None:
                    _print_command_output(exc.command)
                break

            except Exception as exc:
                elapsed = time.monotonic() - step_start
                tb = traceback.format_exc()
                report.steps.append(
                    StepResult(
                        step=step,
                        passed=False,
                        message=f"{type(exc).__name__}: {exc}",
                        duration_seconds=round(elapsed, 3),
                    )
                )
                print_error(f"{step} FAILED after {format_duration(elapsed)}: {exc}")
                console.print(f"[dim]{tb}[/dim]")
                break

        report_path = self.config.reports_dir / f"{norm.project_name}.json"
        await asyncio.to_thread(report.save, report_path)

        self._print_final_summary(report, time.monotonic() - run_start, report_path)
        return report

    # ------------------------------------------------------------------
    # Step dispatch
    # ------------------------------------------------------------------

    @staticmethod
    def _skip_reason(step: str, options: ApplicationOptions) -> str:
        if step == "test" and options.unit_test_runner == "none":
            return "unit test runner is none"
        if step == "e2e" and options.e2e_test_runner == "none":
            return "e2e test runner is none"
        return ""

    async def _run_step(
        self,
        step: str,
        options: ApplicationOptions,
    ) -> Optional[CommandResult]:
        norm = normalize_options(options, self.config.apps_dir)
        if step == "generate":
            return await self.generate(options)
        if step == "files":
            await self.check_files(options)
            return None
        if step == "e2e":
            command = f"e2e {norm.e2e_project_name} --headless"
        else:
            command = f"{step} {norm.project_name}"
        return await self.run_marked(step, command)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def generate(self, options: ApplicationOptions) -> Optional[CommandResult]:
        """Generate the application into the workspace.

        The in-process generator only records new packages in
        ``package.json``; they are installed before the step completes.

        Raises:
            VerificationError: If the generator, the ``nx generate`` command
                or the dependency install fails.
        """
        if self.config.use_plugin_generator:
            result = await self.runner.run_nx_command(
                build_generate_command(self.config.plugin, options)
            )
            if not result.succeeded:
                raise VerificationError(
                    "generate",
                    f"nx generate exited with code {result.returncode}",
                    result,
                )
            return result

        generator = ApplicationGenerator(
            options,
            self.config.workspace_dir,
            apps_dir=self.config.apps_dir,
        )
        try:
            generated = await generator.generate()
        except GeneratorError as exc:
            raise VerificationError("generate", str(exc)) from exc
        console.print(
            f"  [green]+[/green] {len(generated.files)} file(s) written for "
            f"{generated.project_name}"
        )
        if not generated.dependencies_added:
            return None

        installed = await self.runner.install_dependencies()
        if not installed.succeeded:
            raise VerificationError(
                "generate",
                f"dependency install exited with code {installed.returncode}",
                installed,
            )
        return installed

    async def check_files(self, options: ApplicationOptions) -> list[str]:
        """Assert the generated file set and the project's tags.

        Raises:
            VerificationError: On missing or unexpected files, or when the
                tags in ``nx.json`` differ from the requested ones.
        """
        root = self.config.workspace_dir
        try:
            checked = await asyncio.to_thread(
                verify_generated_files, root, options, self.config.apps_dir
            )
        except FileAssertionError as exc:
            raise VerificationError("files", str(exc)) from exc
        console.print(f"  [green]+[/green] {len(checked)} expected file(s) present")

        norm = normalize_options(options, self.config.apps_dir)
        workspace = await asyncio.to_thread(Workspace, root)
        tags = workspace.project_tags(norm.project_name)
        if tags != norm.parsed_tags:
            raise VerificationError(
                "files",
                f"nx.json tags for {norm.project_name} are {tags}, expected {norm.parsed_tags}",
            )
        return checked

    async def run_marked(self, step: str, command: str) -> CommandResult:
        """Run *command* and require exit 0 plus the step's success marker.

        Raises:
            VerificationError: Carrying the ``CommandResult`` for diagnosis.
        """
        stream, marker = STEP_MARKERS[step]
        result = await self.runner.run_nx_command(command)
        if not result.succeeded:
            raise VerificationError(
                step, f"`nx {command}` exited with code {result.returncode}", result
            )
        if marker not in result.stream(stream):
            raise VerificationError(
                step, f"{stream} of `nx {command}` does not contain {marker!r}", result
            )
        return result

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_final_summary(
        self,
        report: VerificationReport,
        total_elapsed: float,
        report_path: Path,
    ) -> None:
        rows: dict[str, str] = {}
        for step in report.steps:
            if step.skipped:
                rows[step.step] = f"skipped ({step.message})"
            elif step.passed:
                rows[step.step] = f"passed ({format_duration(step.duration_seconds)})"
            else:
                rows[step.step] = f"FAILED: {step.message}"
        print_summary_table(rows, title=f"Verification of {report.project_name}")

        if report.overall_passed:
            border_style = "bold green"
            status_text = "[bold green]VERIFICATION PASSED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]VERIFICATION FAILED[/bold red]"

        console.print(
            Panel(
                "\n".join([
                    status_text,
                    "",
                    f"Duration : {format_duration(total_elapsed)}",
                    f"Report   : {report_path}",
                ]),
                title="[bold]Verification Complete[/bold]",
                border_style=border_style,
            )
        )


def _print_command_output(result: CommandResult, limit: int = 2000) -> None:
    """Dump the tail of a failed command's output."""
    for name in ("stdout", "stderr"):
        text = result.stream(name)
        if text:
            console.print(f"[dim]--- {name} ---[/dim]")
            console.print(text[-limit:], markup=False, highlight=False)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(value)


def _add_option_arguments(parser: Any) -> None:
    """Register the application-generator flags on *parser*."""
    parser.add_argument("name", help="Application name")
    parser.add_argument(
        "--style",
        default="css",
        choices=["css", "scss", "styl", "less", "styled-components", "@emotion/styled"],
    )
    parser.add_argument("--unit-test-runner", default="jest", choices=["jest", "none"])
    parser.add_argument("--e2e-test-runner", default="cypress", choices=["cypress", "none"])
    parser.add_argument("--linter", default="eslint", choices=["eslint", "tslint"])
    parser.add_argument("--directory", default=None, help="Subdirectory under the apps dir")
    parser.add_argument("--tags", default=None, help="Comma-separated tags for nx.json")
    for flag in ("--skip-format", "--js", "--capacitor", "--pascal-case-files", "--class-component"):
        parser.add_argument(
            flag,
            nargs="?",
            const=True,
            default=False,
            type=_parse_bool,
            metavar="BOOL",
        )
    parser.add_argument(
        "--workspace", "-w",
        default=None,
        help="Workspace root (default: $IONIC_SCAFFOLD_WORKSPACE or ./tmp/nx-e2e/proj)",
    )


def _options_from_args(args: Any) -> ApplicationOptions:
    name = uniq(args.name) if getattr(args, "uniq", False) else args.name
    return ApplicationOptions.parse(
        name=name,
        style=args.style,
        skip_format=args.skip_format,
        unit_test_runner=args.unit_test_runner,
        e2e_test_runner=args.e2e_test_runner,
        linter=args.linter,
        js=args.js,
        capacitor=args.capacitor,
        directory=args.directory,
        tags=args.tags,
        pascal_case_files=args.pascal_case_files,
        class_component=args.class_component,
    )


async def _cmd_generate(config: Config, options: ApplicationOptions, dry_run: bool) -> None:
    generator = ApplicationGenerator(options, config.workspace_dir, apps_dir=config.apps_dir)
    if dry_run:
        for planned in generator.plan():
            console.print(planned.path, markup=False, highlight=False)
        return
    result = await generator.generate()
    print_summary_table(
        {
            "Project": result.project_name,
            "Root": result.project_root,
            "E2E project": result.e2e_project_name or "-",
            "Files": str(len(result.files)),
            "Dependencies added": ", ".join(result.dependencies_added) or "-",
        },
        title="Generated",
    )


async def _cmd_verify(
    config: Config,
    options: ApplicationOptions,
    steps: Optional[list[str]],
    create_workspace: bool,
) -> VerificationReport:
    pipeline = VerificationPipeline(config)
    if create_workspace:
        await pipeline.runner.ensure_workspace(config.plugin, config.plugin_dist)
    return await pipeline.run(options, steps=steps)


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``python -m ionic_scaffold``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="ionic-scaffold",
        description="ionic-scaffold -- Ionic React application generator and verifier",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  ionic-scaffold init ./tmp/nx-e2e/proj\n"
            "  ionic-scaffold generate my-app --style scss --capacitor\n"
            "  ionic-scaffold verify my-app --uniq --js --steps generate,files\n"
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)

    init_parser = sub.add_parser("init", help="Write an empty workspace skeleton")
    init_parser.add_argument("workspace", help="Workspace root to create")
    init_parser.add_argument("--npm-scope", default="proj")

    gen_parser = sub.add_parser("generate", help="Generate an application")
    _add_option_arguments(gen_parser)
    gen_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the planned files without writing anything",
    )

    verify_parser = sub.add_parser("verify", help="Generate and verify an application")
    _add_option_arguments(verify_parser)
    verify_parser.add_argument(
        "--steps",
        default=",".join(STEPS),
        help=f"Comma-separated steps to run (default: {','.join(STEPS)})",
    )
    verify_parser.add_argument(
        "--uniq",
        action="store_true",
        help="Append a random suffix to the application name",
    )
    verify_parser.add_argument(
        "--use-plugin",
        action="store_true",
        help="Generate through `nx generate <plugin>:app` instead of in-process",
    )
    verify_parser.add_argument(
        "--create-workspace",
        action="store_true",
        help="Create a fresh workspace and install the plugin build first",
    )

    args = parser.parse_args(argv)

    if args.command == "init":
        workspace = init_workspace(Path(args.workspace), npm_scope=args.npm_scope)
        print_success(f"Workspace ready at {workspace.root.resolve()}")
        return

    config = Config.from_env()
    if args.workspace:
        config.workspace_dir = Path(args.workspace)

    try:
        options = _options_from_args(args)
    except OptionsError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    if args.command == "generate":
        try:
            asyncio.run(_cmd_generate(config, options, args.dry_run))
        except GeneratorError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            sys.exit(1)
        return

    steps = [s.strip() for s in args.steps.split(",") if s.strip()]
    unknown = [s for s in steps if s not in STEPS]
    if unknown:
        console.print(f"[bold red]Error:[/bold red] Unknown step(s): {', '.join(unknown)}")
        sys.exit(1)
    if args.use_plugin:
        config.use_plugin_generator = True

    try:
        report = asyncio.run(_cmd_verify(config, options, steps, args.create_workspace))
    except WorkspaceError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(1)

    if report.overall_passed:
        console.print("[bold green]Verification completed successfully![/bold green]")
    else:
        console.print("[bold red]Verification failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
