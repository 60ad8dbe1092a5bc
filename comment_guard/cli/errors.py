"""Errors the CLI reports to the user.

Each error carries a category, an exit code and, where there is an
obvious next step, a suggestion printed under the message.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SUPPORTED_EXTENSIONS = ".js .jsx .mjs .cjs .ts .tsx .mts .cts"

_RED = "\033[91m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def _paint(text: str, code: str, use_color: bool) -> str:
    return f"{code}{text}{_RESET}" if use_color else text


class ErrorCategory(Enum):
    CONFIGURATION = "configuration"
    FILE_SYSTEM = "file_system"
    VALIDATION = "validation"
    LINTING = "linting"
    RUNTIME = "runtime"


@dataclass
class CLIError(Exception):
    """An error with enough context to tell the user what to do next.

    Attributes:
        category: Which part of the run failed.
        message: One-line description shown after ``Error:``.
        suggestion: Follow-up action shown after ``Suggestion:``.
        details: Extra key/value context, one indented line each.
        exit_code: Process exit status when this error ends the command.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        lines = [f"{_paint('Error:', _RED, use_color)} {self.message}"]
        if self.suggestion:
            lines.append(f"{_paint('Suggestion:', _CYAN, use_color)} {self.suggestion}")
        lines.extend(
            _paint(f"  {key}: {value}", _DIM, use_color)
            for key, value in (self.details or {}).items()
        )
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class ConfigurationError(CLIError):
    """A guard.config.json could not be read or merged."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=suggestion
            or "Check the config file is valid JSON with 'preset' and 'rules' keys",
            details={"config_file": config_file} if config_file else None,
        )


class UnknownPresetError(CLIError):
    """The requested preset is not in the registry."""

    def __init__(self, name: str, available: list[str]):
        choices = ", ".join(available)
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=f"Unknown preset: {name}",
            suggestion=f"Use one of: {choices}. Run 'comment-guard presets' to see descriptions",
            details={"preset": name},
            exit_code=2,
        )


class ConfigExistsError(CLIError):
    """``init`` found a config file and was not told to replace it."""

    def __init__(self, path: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Config file already exists: {path}",
            suggestion="Pass --force to overwrite it",
            details={"path": path},
        )


class LintPathError(CLIError):
    """A lint target is missing, unsupported, or holds no source files."""

    def __init__(self, path: str, reason: str = "No lintable files found"):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"{reason}: {path}",
            suggestion=f"Supported extensions: {SUPPORTED_EXTENSIONS}",
            details={"path": path},
            exit_code=2,
        )


class ValidationError(CLIError):
    """Bad command-line input."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            category=ErrorCategory.VALIDATION,
            message=message,
            suggestion=suggestion or "Check the command syntax with --help",
            exit_code=2,
        )


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Turn an exception into the text to print and the exit status.

    CLIError subclasses keep their own exit code; anything else exits 1.
    With ``verbose`` the traceback is appended.
    """
    if isinstance(error, CLIError):
        message, exit_code = error.format(use_color=use_color), error.exit_code
    else:
        message, exit_code = f"{_paint('Error:', _RED, use_color)} {error}", 1

    if verbose:
        message += "\n\nTraceback:\n" + "".join(traceback.format_exception(error))
    return message, exit_code
