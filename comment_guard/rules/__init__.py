"""
Comment rule engine.

Rules live in category directories (format, tech_debt, documentation,
analysis) and are discovered automatically by RuleDiscovery.
"""

from .base import (
    BaseRule,
    RuleConfigurationError,
    RuleContext,
    RuleMeta,
    RuleOptions,
    Severity,
    TextEdit,
    Violation,
)
from .config import LintConfig, LintConfigLoader, RuleSetting
from .discovery import RuleDiscovery, discover_rules
from .engine import LintResult, RuleEngine, RuleError, create_rule_engine

__all__ = [
    "BaseRule",
    "LintConfig",
    "LintConfigLoader",
    "LintResult",
    "RuleConfigurationError",
    "RuleContext",
    "RuleDiscovery",
    "RuleEngine",
    "RuleError",
    "RuleMeta",
    "RuleOptions",
    "RuleSetting",
    "Severity",
    "TextEdit",
    "Violation",
    "create_rule_engine",
    "discover_rules",
]
