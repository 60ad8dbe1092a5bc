"""Terminal output for comment-guard.

Lint findings print as ``path:line:col  severity  message  rule-id``
followed by a summary line, or as a JSON array with ``--format json``.
Color follows https://no-color.org/: ``NO_COLOR`` wins over
``FORCE_COLOR``, which wins over TTY detection.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, TextIO

import click

if TYPE_CHECKING:
    from ..rules.base import Violation
    from ..rules.engine import LintResult

ANSI = {
    "green": "\033[92m",
    "red": "\033[91m",
    "yellow": "\033[93m",
    "blue": "\033[94m",
    "bold": "\033[1m",
    "dim": "\033[2m",
}
ANSI_RESET = "\033[0m"


class Marker(NamedTuple):
    glyph: str
    color: str
    plain: str


MARKERS = {
    "success": Marker("✓", "green", "[OK]"),
    "error": Marker("✗", "red", "[FAIL]"),
    "warning": Marker("⚠", "yellow", "[WARN]"),
    "info": Marker("ℹ", "blue", "[INFO]"),
}

SEVERITY_COLORS = {"error": "red", "warn": "yellow"}


def should_use_color(
    explicit_flag: bool | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Decide whether to emit ANSI colors.

    Args:
        explicit_flag: True or False from the command line, None to detect.
        stream: Stream whose TTY status decides the default; stdout if unset.
    """
    if explicit_flag is not None:
        return explicit_flag
    # NO_COLOR applies even when set to an empty string
    if "NO_COLOR" in os.environ:
        return False
    if "FORCE_COLOR" in os.environ:
        return True
    target = stream if stream is not None else sys.stdout
    isatty = getattr(target, "isatty", None)
    return isatty() if isatty is not None else True


@dataclass
class OutputConfig:
    """How the CLI writes to the terminal.

    Attributes:
        use_color: Emit ANSI colors and unicode markers.
        quiet: Hide informational lines; findings and errors still print.
        verbose: Show tracebacks for unexpected errors.
        stream: Write here instead of stdout/stderr.
    """

    use_color: bool = True
    quiet: bool = False
    verbose: bool = False
    stream: TextIO | None = None

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
    ) -> OutputConfig:
        return cls(
            use_color=should_use_color(explicit_flag=False if no_color else None),
            quiet=quiet,
            verbose=verbose,
        )


class OutputManager:
    """Writes CLI messages and lint reports.

    Example:
        >>> OutputManager(OutputConfig(use_color=False)).success("Wrote guard.config.json")
        [OK] Wrote guard.config.json
    """

    def __init__(self, config: OutputConfig | None = None):
        self.config = config or OutputConfig()

    def _paint(self, text: str, color: str) -> str:
        if not self.config.use_color or color not in ANSI:
            return text
        return f"{ANSI[color]}{text}{ANSI_RESET}"

    def _marker(self, kind: str) -> str:
        marker = MARKERS.get(kind, MARKERS["info"])
        return self._paint(marker.glyph, marker.color) if self.config.use_color else marker.plain

    def _emit(
        self,
        message: str,
        kind: str | None = None,
        err: bool = False,
        force: bool = False,
    ) -> None:
        """Write one line, prefixed with a marker when ``kind`` is given.

        Quiet mode drops the line unless it goes to stderr or ``force`` is set.
        """
        if self.config.quiet and not (err or force):
            return
        if kind is not None:
            message = f"{self._marker(kind)} {message}"
        click.echo(message, file=self.config.stream, err=err)

    def success(self, message: str, force: bool = False) -> None:
        self._emit(message, "success", force=force)

    def error(self, message: str) -> None:
        self._emit(message, "error", err=True)

    def warning(self, message: str, force: bool = False) -> None:
        self._emit(message, "warning", force=force)

    def info(self, message: str) -> None:
        self._emit(message, "info")

    def plain(self, message: str, force: bool = False) -> None:
        self._emit(message, force=force)

    def header(self, title: str) -> None:
        self._emit(self._paint(title, "bold"))
        self._emit("=" * len(title))

    def violation_line(self, violation: Violation, path: str) -> str:
        severity = violation.severity.value
        label = self._paint(severity.ljust(5), SEVERITY_COLORS.get(severity, "dim"))
        location = f"{path}:{violation.line}:{violation.column + 1}"
        return f"{location}  {label}  {violation.message}  {self._paint(violation.rule_id, 'dim')}"

    def lint_report(self, results: list[LintResult]) -> None:
        """Print each finding, any rule crashes, then a summary line."""
        for result in results:
            path = result.file_path or "<text>"
            for violation in result.violations:
                self._emit(self.violation_line(violation, path), force=True)
            for crash in result.errors:
                self.error(f"{path}: rule {crash.rule_id} crashed: {crash.error_message}")

        errors = sum(result.error_count for result in results)
        warnings = sum(result.warning_count for result in results)
        fixable = sum(result.fixable_count for result in results)

        if not errors and not warnings:
            self.success(f"{len(results)} file(s) checked, no problems")
            return

        summary = f"{errors + warnings} problem(s) ({errors} error(s), {warnings} warning(s))"
        if fixable:
            summary += f", {fixable} fixable with --fix"
        self._emit(summary, "error" if errors else "warning", force=True)

    def lint_json(self, results: list[LintResult]) -> None:
        """Dump results as a JSON array. Printed even in quiet mode."""
        payload = [result.to_dict() for result in results]
        click.echo(json.dumps(payload, indent=2), file=self.config.stream)
