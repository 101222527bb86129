"""Verification results collection and reporting.

Provides Pydantic v2 models for every level of a verification run: a single
external command, a pipeline step, and the aggregated report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field


# ---------------------------------------------------------------------------
# External command
# ---------------------------------------------------------------------------

class CommandResult(BaseModel):
    """Captured outcome of one task-runner invocation."""

    command: str = Field(..., description="Command line as executed")
    returncode: int = Field(default=0)
    stdout: str = Field(default="")
    stderr: str = Field(default="")
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @computed_field  # type: ignore[misc]
    @property
    def succeeded(self) -> bool:
        """True when the process exited with status 0."""
        return self.returncode == 0

    def stream(self, name: str) -> str:
        """Return ``stdout`` or ``stderr`` by name."""
        if name not in ("stdout", "stderr"):
            raise ValueError(f"Unknown stream {name!r}")
        return getattr(self, name)


# ---------------------------------------------------------------------------
# Pipeline step
# ---------------------------------------------------------------------------

class StepResult(BaseModel):
    """Result of one verification step (generate, files, build ...)."""

    step: str = Field(..., description="Step name")
    passed: bool = Field(default=True)
    skipped: bool = Field(default=False)
    message: str = Field(default="", description="Failure reason or skip reason")
    command: Optional[CommandResult] = Field(default=None)
    duration_seconds: float = Field(default=0.0, ge=0.0)


# ---------------------------------------------------------------------------
# Aggregated report
# ---------------------------------------------------------------------------

class VerificationReport(BaseModel):
    """Complete verification run for one generated application."""

    project_name: str = Field(..., description="Workspace project that was verified")
    options: dict[str, Any] = Field(default_factory=dict, description="Generation options used")
    steps: list[StepResult] = Field(default_factory=list)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="ISO-8601 timestamp of when the run started",
    )

    @computed_field  # type: ignore[misc]
    @property
    def overall_passed(self) -> bool:
        """True when at least one step ran and none failed."""
        return bool(self.steps) and all(s.passed for s in self.steps)

    @property
    def failed_step(self) -> Optional[StepResult]:
        for step in self.steps:
            if not step.passed:
                return step
        return None

    def step(self, name: str) -> Optional[StepResult]:
        for step in self.steps:
            if step.step == name:
                return step
        return None

    # -- Serialisation helpers -----------------------------------------------

    def to_json(self, indent: int = 2) -> str:
        """Serialise the full report to a JSON string."""
        return self.model_dump_json(indent=indent)

    def save(self, path: Path) -> None:
        """Persist the report to a JSON file, creating parent directories as needed."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "VerificationReport":
        """Load a previously-saved report from a JSON file."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    # -- Summary helpers -----------------------------------------------------

    def summary_text(self) -> str:
        """Human-readable multi-line summary."""
        lines: list[str] = []
        status = "PASSED" if self.overall_passed else "FAILED"
        lines.append(f"Verification of {self.project_name}  [{status}]  {self.timestamp}")
        lines.append("-" * 60)
        for step in self.steps:
            if step.skipped:
                mark = "skip"
            else:
                mark = "ok" if step.passed else "FAIL"
            detail = f"  {step.message}" if step.message else ""
            lines.append(
                f"  {step.step:10s}  ({step.duration_seconds:.1f}s)  [{mark}]{detail}"
            )
        lines.append("-" * 60)
        return "\n".join(lines)
