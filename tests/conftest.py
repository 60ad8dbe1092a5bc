"""
Shared fixtures for the comment-guard test suite.

Provides:
- Parsed sources for JavaScript and TypeScript snippets
- Single-rule lint and fix helpers
- A preset registry
- Isolation from the user's global configuration directory
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from comment_guard.analysis.parser import SourceParser
from comment_guard.analysis.source import SourceFile
from comment_guard.guard_logging import ROOT_LOGGER_NAME
from comment_guard.presets import PresetRegistry, build_default_registry
from comment_guard.rules.base import BaseRule, Severity
from comment_guard.rules.config import LintConfigLoader, RuleSetting
from comment_guard.rules.engine import LintResult, RuleEngine

LintFn = Callable[..., LintResult]


def run_rule(
    rule: BaseRule,
    text: str,
    options: Mapping[str, Any] | None = None,
    language: str = "javascript",
    severity: str = "warn",
    fix: bool = False,
) -> LintResult:
    """Lint text with a single rule enabled."""
    engine = RuleEngine()
    engine.register(rule)
    settings = {rule.rule_id: RuleSetting(Severity.parse(severity), dict(options or {}))}
    if fix:
        return engine.fix_text(text, language=language, settings=settings)
    return engine.lint_text(text, language=language, settings=settings)


@pytest.fixture
def parser() -> SourceParser:
    return SourceParser()


@pytest.fixture
def parse(parser: SourceParser) -> Callable[..., SourceFile]:
    """Parse a snippet: parse(text, language="javascript")."""

    def _parse(text: str, language: str = "javascript") -> SourceFile:
        return parser.parse(text, language=language)

    return _parse


@pytest.fixture
def lint() -> LintFn:
    """Lint with one rule: lint(rule, text, options=None, language=..., severity=...)."""

    def _lint(rule: BaseRule, text: str, options=None, language="javascript", severity="warn"):
        return run_rule(rule, text, options, language=language, severity=severity)

    return _lint


@pytest.fixture
def fix() -> LintFn:
    """Lint and apply fixes with one rule; the result carries `output`."""

    def _fix(rule: BaseRule, text: str, options=None, language="javascript"):
        return run_rule(rule, text, options, language=language, fix=True)

    return _fix


@pytest.fixture
def registry() -> PresetRegistry:
    return build_default_registry()


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path_factory, monkeypatch) -> Path:
    """Point the global config directory at an empty temporary directory."""
    global_dir = tmp_path_factory.mktemp("global-config")
    monkeypatch.setattr(LintConfigLoader, "GLOBAL_CONFIG_DIR", global_dir)
    return global_dir


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging so later tests see records through caplog."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
