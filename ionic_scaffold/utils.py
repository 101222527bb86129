"""Shared utility functions for ionic-scaffold.

Provides async process execution, JSON I/O for workspace metadata, name
helpers, and Rich-based progress reporting used by both the generator and
the verification pipeline.
"""

from __future__ import annotations

import asyncio
import json
import os
import random
import re
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async process execution
# ---------------------------------------------------------------------------


def _decode(raw: bytes | None) -> str:
    return (raw or b"").decode("utf-8", errors="replace").strip()


async def run_command(
    args: list[str],
    cwd: str | Path | None = None,
    timeout: int = 180,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run *args* as a child process and capture both streams.

    Args:
        args: Executable followed by its arguments.  No shell is involved.
        cwd: Working directory for the child process.
        timeout: Seconds before the process is killed.
        env: Extra variables layered over the current environment.

    Returns:
        ``(returncode, stdout, stderr)`` with both streams decoded and
        stripped.  A timeout yields returncode ``-1`` and a message on stderr.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env={**os.environ, **env} if env else None,
    )
    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"Command timed out after {timeout}s: {' '.join(args)}"

    return process.returncode or 0, _decode(out), _decode(err)


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------


def to_kebab_case(value: str) -> str:
    """Convert ``SomeThing``, ``some_thing`` or ``Some Thing`` to ``some-thing``.

    Examples::

        to_kebab_case("ExploreContainer") -> "explore-container"
        to_kebab_case("my_app")           -> "my-app"
    """
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1-\2", value.strip())
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", s1)
    return re.sub(r"[^a-zA-Z0-9]+", "-", s2).lower().strip("-")


def to_pascal_case(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    return "".join(word.capitalize() for word in to_kebab_case(value).split("-") if word)


def to_camel_case(value: str) -> str:
    pascal = to_pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def to_snake_case(value: str) -> str:
    return to_kebab_case(value).replace("-", "_")


def uniq(prefix: str) -> str:
    """Return *prefix* with a random numeric suffix.

    Used to give every generated project in a run its own name, e.g.
    ``uniq("ionic-react") -> "ionic-react4821937"``.
    """
    return f"{prefix}{random.randint(0, 9_999_999)}"


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Read a JSON object from *path*.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the top-level value is not an object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Write *data* indented by two spaces with a trailing newline.

    Parent directories are created automatically.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Human-readable duration.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 60:
        return f"{max(seconds, 0.0):.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STEP_COLORS: dict[str, str] = {
    "generate": "bright_cyan",
    "files": "bright_green",
    "build": "bright_yellow",
    "lint": "bright_magenta",
    "test": "bright_blue",
    "e2e": "bright_red",
}


def print_step_header(step: str, description: str) -> None:
    """Print a full-width rule announcing a verification step."""
    color = STEP_COLORS.get(step, "white")
    console.print()
    console.print(Rule(f"[bold {color}] {step.upper()}: {description} [/bold {color}]", style=color))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value table."""
    table = Table(title=title, header_style="bold cyan")
    table.add_column("Step", style="dim", no_wrap=True)
    table.add_column("Result")
    for key, value in data.items():
        table.add_row(key, str(value))
    console.print(table)


def print_success(message: str) -> None:
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    console.print(f"[bold yellow]{message}[/bold yellow]")
