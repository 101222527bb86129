"""ionic-scaffold -- Verifier module.

Checks a generated application: file-set assertions, then build, lint,
unit-test and e2e runs through the workspace task runner.

Public API
----------
.. autoclass:: NxRunner
.. autoclass:: CommandResult
.. autoclass:: StepResult
.. autoclass:: VerificationReport
.. autofunction:: check_files_exist
.. autofunction:: verify_generated_files
"""

from .checks import (
    FileAssertionError,
    MissingFilesError,
    check_files_exist,
    expected_files,
    forbidden_files,
    verify_generated_files,
)
from .results import CommandResult, StepResult, VerificationReport
from .runner import NxRunner, WorkspaceError, build_generate_command

__all__ = [
    # Checks
    "FileAssertionError",
    "MissingFilesError",
    "check_files_exist",
    "expected_files",
    "forbidden_files",
    "verify_generated_files",
    # Runner
    "NxRunner",
    "WorkspaceError",
    "build_generate_command",
    # Results
    "CommandResult",
    "StepResult",
    "VerificationReport",
]
