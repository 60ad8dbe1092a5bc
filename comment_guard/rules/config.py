"""
Lint settings and the guard.config.json files they come from.

A config names a preset, then overrides individual rules with either a
severity ("off", "warn", "error") or a [severity, options] pair. Files
found in the home directory, the project and a local override are
merged in that order.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .base import Severity

if TYPE_CHECKING:
    from ..presets import PresetRegistry

logger = logging.getLogger(__name__)


@dataclass
class RuleSetting:
    """Severity and options for a single rule."""

    severity: Severity = Severity.WARN
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def enabled(self) -> bool:
        return self.severity != Severity.OFF

    @classmethod
    def from_value(cls, value: Any) -> "RuleSetting":
        """Create a RuleSetting from `severity` or `[severity, options]`.

        Raises:
            ValueError: If the value has an unknown shape or severity
        """
        if isinstance(value, RuleSetting):
            return value
        if isinstance(value, (list, tuple)):
            if not value or len(value) > 2:
                raise ValueError(f"Invalid rule setting: {value!r}")
            options = value[1] if len(value) == 2 else {}
            if not isinstance(options, Mapping):
                raise ValueError(f"Rule options must be an object: {options!r}")
            return cls(severity=Severity.parse(value[0]), options=dict(options))
        if isinstance(value, Mapping):
            return cls(
                severity=Severity.parse(value.get("severity", "warn")),
                options=dict(value.get("options", {})),
            )
        return cls(severity=Severity.parse(value))

    def to_value(self) -> Any:
        """Convert back to the `severity` / `[severity, options]` form."""
        if self.options:
            return [self.severity.value, dict(self.options)]
        return self.severity.value


@dataclass
class PerformanceConfig:
    """Thread pool settings used when linting several files."""

    parallel_execution: bool = True
    max_parallel_workers: int = 4

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PerformanceConfig":
        return cls(
            parallel_execution=data.get("parallelExecution", True),
            max_parallel_workers=data.get("maxParallelWorkers", 4),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "parallelExecution": self.parallel_execution,
            "maxParallelWorkers": self.max_parallel_workers,
        }


@dataclass
class LintConfig:
    """Configuration for a lint run."""

    preset: str | None = None
    continue_on_error: bool = True
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)

    # Effective per-rule settings (preset rules with overrides applied)
    rules: dict[str, RuleSetting] = field(default_factory=dict)

    # Name of the processor for non-JS files, e.g. "comment-guard/.vue"
    processor: str | None = None

    def is_rule_enabled(self, rule_id: str) -> bool:
        """Check if a rule is configured with a severity other than off."""
        setting = self.rules.get(rule_id)
        return setting is not None and setting.enabled

    def get_rule_setting(self, rule_id: str) -> RuleSetting:
        """Get settings for a rule (off if not configured)."""
        return self.rules.get(rule_id, RuleSetting(severity=Severity.OFF))

    def get_rule_options(self, rule_id: str) -> dict[str, Any]:
        return self.get_rule_setting(rule_id).options

    @classmethod
    def from_preset(cls, name: str, registry: "PresetRegistry") -> "LintConfig":
        """Create a LintConfig holding a preset's flattened rule map."""
        preset = registry.get(name)
        return cls(
            preset=name,
            processor=preset.processor,
            rules={
                rule_id: RuleSetting.from_value(value)
                for rule_id, value in preset.rules.items()
            },
        )

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        registry: "PresetRegistry | None" = None,
    ) -> "LintConfig":
        """Create LintConfig from dictionary.

        A "preset" key is resolved through the registry first; the
        "rules" map is overlaid on top of it.

        Raises:
            PresetNotFoundError: If the preset is unknown
            ValueError: If a rule setting is malformed
        """
        preset_name = data.get("preset")
        if preset_name and registry is not None:
            config = cls.from_preset(preset_name, registry)
        else:
            config = cls(preset=preset_name)

        config.continue_on_error = data.get("continueOnError", True)
        config.processor = data.get("processor", config.processor)

        if "performance" in data:
            config.performance = PerformanceConfig.from_dict(data["performance"])

        for rule_id, value in data.get("rules", {}).items():
            config.rules[rule_id] = RuleSetting.from_value(value)

        return config

    def to_dict(self, expand: bool = True) -> dict[str, Any]:
        """Serialize in guard.config.json shape.

        Args:
            expand: Write the effective rule map; otherwise only the preset
                and engine settings are kept.
        """
        result: dict[str, Any] = {}
        if self.preset:
            result["preset"] = self.preset
        result["continueOnError"] = self.continue_on_error
        result["performance"] = self.performance.to_dict()
        if self.processor:
            result["processor"] = self.processor
        if expand:
            result["rules"] = {k: v.to_value() for k, v in self.rules.items()}
        return result

    def merge(self, other: "LintConfig") -> "LintConfig":
        """Return a new config with other layered on top of this one.

        Rule settings are merged per rule id; engine settings come from other.
        """
        return LintConfig(
            preset=other.preset or self.preset,
            continue_on_error=other.continue_on_error,
            performance=PerformanceConfig(**vars(other.performance)),
            rules={**self.rules, **other.rules},
            processor=other.processor or self.processor,
        )


class LintConfigLoader:
    """Loads lint configuration from guard.config.json files."""

    CONFIG_FILENAME = "guard.config.json"
    LOCAL_CONFIG_FILENAME = "guard.config.local.json"
    PROJECT_CONFIG_DIR = ".comment-guard"
    GLOBAL_CONFIG_DIR = Path.home() / ".comment-guard"

    def __init__(
        self,
        project_path: Path | None = None,
        registry: "PresetRegistry | None" = None,
    ):
        """
        Args:
            project_path: Directory searched for config files; the CWD by default.
            registry: Resolves "preset" keys. Without one, presets are recorded
                by name only.
        """
        self.project_path = project_path or Path.cwd()
        self.registry = registry

    def project_config_paths(self) -> list[Path]:
        """Candidate project config files, lowest precedence first."""
        return [
            self.project_path / self.PROJECT_CONFIG_DIR / self.CONFIG_FILENAME,
            self.project_path / self.CONFIG_FILENAME,
            self.project_path / self.LOCAL_CONFIG_FILENAME,
        ]

    def load(self) -> LintConfig:
        """Merge every config file that exists, later files winning.

        1. Global config (~/.comment-guard/guard.config.json)
        2. Project config (<project>/.comment-guard/guard.config.json,
           then <project>/guard.config.json)
        3. Local config (<project>/guard.config.local.json)
        """
        config = LintConfig()
        for path in [self.GLOBAL_CONFIG_DIR / self.CONFIG_FILENAME, *self.project_config_paths()]:
            if not path.exists():
                continue
            layer = self.load_file(path)
            if layer is not None:
                logger.debug(f"Merged config layer {path}")
                config = config.merge(layer)
        return config

    def load_file(self, path: Path) -> LintConfig | None:
        """Read one config file. Unreadable or malformed JSON yields None."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring config {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config {path}: top level must be an object")
            return None
        return LintConfig.from_dict(data, self.registry)

    def save(self, config: LintConfig, local: bool = False, expand: bool = True) -> Path:
        """Write config to guard.config.json (or the local file) in the project.

        Returns:
            The path written.
        """
        target = self.project_path / (self.LOCAL_CONFIG_FILENAME if local else self.CONFIG_FILENAME)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(config.to_dict(expand=expand), indent=2) + "\n", encoding="utf-8")
        return target


def get_default_config(registry: "PresetRegistry") -> LintConfig:
    """The configuration used when no preset or config file is given."""
    return LintConfig.from_preset("recommended", registry)
