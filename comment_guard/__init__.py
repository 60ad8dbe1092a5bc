"""comment-guard: lint rules for source-code comments."""

__version__ = "0.1.0"

from .presets import Preset, PresetNotFoundError, PresetRegistry, build_default_registry
from .rules import (
    BaseRule,
    LintConfig,
    LintResult,
    RuleEngine,
    Severity,
    Violation,
    create_rule_engine,
)

__all__ = [
    "BaseRule",
    "LintConfig",
    "LintResult",
    "Preset",
    "PresetNotFoundError",
    "PresetRegistry",
    "RuleEngine",
    "Severity",
    "Violation",
    "__version__",
    "build_default_registry",
    "create_rule_engine",
]
