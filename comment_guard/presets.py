"""
Named rule bundles ("presets") with single inheritance.

A PresetRegistry is built once by `build_default_registry()` and handed
to whatever needs it (the CLI, `LintConfig.from_preset`). Every preset
is flattened along its inheritance chain at build time, frozen, and
returned as the same instance on every lookup.

Inheritance:
    minimal
      ├── recommended
      │     ├── strict
      │     │     └── typescript-strict
      │     ├── typescript
      │     ├── react
      │     ├── vue
      │     └── svelte
      └── markdown
    analysis (standalone)
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

PLUGIN_NAME = "comment-guard"

TYPESCRIPT_FILES = ("**/*.ts", "**/*.tsx", "**/*.mts", "**/*.cts")

# Rule value: severity string, or (severity, options)
RuleValue = str | tuple[str, Mapping[str, Any]]


class PresetNotFoundError(KeyError):
    """Raised when a preset name is not in the registry."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown preset '{self.name}'. Available: {', '.join(self.available)}"


@dataclass(frozen=True)
class PresetDefinition:
    """A preset as written: its own rules plus an optional parent."""

    name: str
    rules: dict[str, RuleValue] = field(default_factory=dict)
    extends: str | None = None
    files: tuple[str, ...] | None = None
    processor: str | None = None
    language_options: dict[str, Any] | None = None
    description: str = ""


@dataclass(frozen=True)
class Preset:
    """A flattened, read-only preset."""

    name: str
    plugins: tuple[str, ...]
    rules: Mapping[str, RuleValue]
    files: tuple[str, ...] | None = None
    processor: str | None = None
    language_options: Mapping[str, Any] | None = None
    description: str = ""

    @property
    def config_name(self) -> str:
        return f"{PLUGIN_NAME}/{self.name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {
            "name": self.config_name,
            "plugins": list(self.plugins),
            "rules": {
                rule_id: value if isinstance(value, str) else [value[0], dict(value[1])]
                for rule_id, value in self.rules.items()
            },
        }
        if self.files is not None:
            result["files"] = list(self.files)
        if self.processor is not None:
            result["processor"] = self.processor
        if self.language_options is not None:
            result["languageOptions"] = _thaw(self.language_options)
        return result


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class PresetRegistry:
    """Immutable collection of flattened presets.

    Example usage:
        registry = build_default_registry()
        strict = registry.get("strict")
        registry.inheritance_chain("typescript-strict")
        # ['minimal', 'recommended', 'strict', 'typescript-strict']
    """

    def __init__(self, definitions: list[PresetDefinition]):
        """Flatten every definition along its inheritance chain.

        Raises:
            ValueError: On duplicate names, unknown parents or cycles
        """
        self._definitions: dict[str, PresetDefinition] = {}
        for definition in definitions:
            if definition.name in self._definitions:
                raise ValueError(f"Duplicate preset: {definition.name}")
            self._definitions[definition.name] = definition

        self._chains = {name: self._resolve_chain(name) for name in self._definitions}
        self._presets: Mapping[str, Preset] = MappingProxyType(
            {name: self._flatten(name) for name in self._definitions}
        )
        logger.debug(f"Built {len(self._presets)} presets")

    def _resolve_chain(self, name: str) -> tuple[str, ...]:
        chain = [name]
        current = self._definitions[name]
        while current.extends is not None:
            parent = current.extends
            if parent not in self._definitions:
                raise ValueError(f"Preset '{current.name}' extends unknown preset '{parent}'")
            if parent in chain:
                raise ValueError(f"Preset inheritance cycle: {' -> '.join([*chain, parent])}")
            chain.append(parent)
            current = self._definitions[parent]
        return tuple(reversed(chain))

    def _flatten(self, name: str) -> Preset:
        rules: dict[str, RuleValue] = {}
        files = processor = language_options = None
        for ancestor in self._chains[name]:
            definition = self._definitions[ancestor]
            rules.update(definition.rules)
            if definition.files is not None:
                files = definition.files
            if definition.processor is not None:
                processor = definition.processor
            if definition.language_options is not None:
                language_options = definition.language_options

        return Preset(
            name=name,
            plugins=(PLUGIN_NAME,),
            rules=_freeze(rules),
            files=files,
            processor=processor,
            language_options=_freeze(language_options) if language_options else None,
            description=self._definitions[name].description,
        )

    def get(self, name: str) -> Preset:
        """Look up a preset by name.

        Raises:
            PresetNotFoundError: If no preset has this name
        """
        try:
            return self._presets[name]
        except KeyError:
            raise PresetNotFoundError(name, self.names()) from None

    def parent(self, name: str) -> str | None:
        self.get(name)
        return self._definitions[name].extends

    def inheritance_chain(self, name: str) -> list[str]:
        """Preset names from the root ancestor down to `name`."""
        self.get(name)
        return list(self._chains[name])

    def names(self) -> list[str]:
        return list(self._presets)

    def __contains__(self, name: object) -> bool:
        return name in self._presets

    def __iter__(self) -> Iterator[Preset]:
        return iter(self._presets.values())

    def __len__(self) -> int:
        return len(self._presets)


def _with_severity(rules: Mapping[str, RuleValue], severity: str) -> dict[str, RuleValue]:
    return {
        rule_id: severity if isinstance(value, str) else (severity, value[1])
        for rule_id, value in rules.items()
    }


MINIMAL_RULES: dict[str, RuleValue] = {
    "enforce-todo-format": "warn",
    "enforce-fixme-format": "warn",
    "enforce-note-format": "warn",
    "no-commented-code": "warn",
}

RECOMMENDED_RULES: dict[str, RuleValue] = {
    "accessibility-todo-format": "warn",
    "enforce-comment-length": ("warn", {"maxLength": 120}),
    "enforce-capitalization": "warn",
    "comment-spacing": "warn",
    "ban-specific-words": ("warn", {"includeDefaults": True}),
}

STRICT_RULES: dict[str, RuleValue] = {
    **_with_severity({**MINIMAL_RULES, **RECOMMENDED_RULES}, "error"),
    "no-obvious-comments": ("error", {"sensitivity": "medium"}),
    "valid-jsdoc": "error",
    "require-explanation-comments": ("warn", {"requireFor": ["regex", "bitwise"]}),
    "require-jsdoc": "warn",
    "jsdoc-type-syntax": ("warn", {"prefer": "typescript"}),
    "require-file-header": ("warn", {"requiredTags": ["@file"]}),
}

REACT_RULES: dict[str, RuleValue] = {
    "require-alt-text-comments": "warn",
    "screen-reader-context": "warn",
}

ANALYSIS_RULES: dict[str, RuleValue] = {
    "stale-comment-detection": "warn",
    "todo-aging-warnings": ("warn", {"maxAgeDays": 30}),
    "comment-code-ratio": ("warn", {"minRatio": 0.05, "maxRatio": 0.4}),
}


def default_definitions() -> list[PresetDefinition]:
    """The built-in presets."""
    return [
        PresetDefinition(
            name="minimal",
            rules=MINIMAL_RULES,
            description="Structured TODO/FIXME/NOTE comments and commented-out code",
        ),
        PresetDefinition(
            name="recommended",
            extends="minimal",
            rules=RECOMMENDED_RULES,
            description="Balanced defaults for most projects",
        ),
        PresetDefinition(
            name="strict",
            extends="recommended",
            rules=STRICT_RULES,
            description="Recommended as errors, plus documentation requirements",
        ),
        PresetDefinition(
            name="analysis",
            rules=ANALYSIS_RULES,
            description="Stale references, TODO aging and comment ratio",
        ),
        PresetDefinition(
            name="typescript",
            extends="recommended",
            files=TYPESCRIPT_FILES,
            rules={
                "valid-tsdoc": "warn",
                "jsdoc-type-syntax": ("warn", {"prefer": "typescript"}),
            },
            description="Recommended plus TSDoc validation and TypeScript type names",
        ),
        PresetDefinition(
            name="typescript-strict",
            extends="strict",
            files=TYPESCRIPT_FILES,
            rules={"valid-tsdoc": "error"},
            description="Strict plus TSDoc validation as errors",
        ),
        PresetDefinition(
            name="react",
            extends="recommended",
            files=("**/*.jsx", "**/*.tsx"),
            rules=REACT_RULES,
            language_options={"parserOptions": {"ecmaFeatures": {"jsx": True}}},
            description="Recommended plus accessibility comments for JSX and TSX",
        ),
        PresetDefinition(
            name="vue",
            extends="recommended",
            files=("**/*.vue",),
            processor=f"{PLUGIN_NAME}/.vue",
            description="Recommended for Vue single-file components",
        ),
        PresetDefinition(
            name="svelte",
            extends="recommended",
            files=("**/*.svelte",),
            processor=f"{PLUGIN_NAME}/.svelte",
            description="Recommended for Svelte components",
        ),
        PresetDefinition(
            name="markdown",
            extends="minimal",
            files=("**/*.md",),
            processor=f"{PLUGIN_NAME}/.md",
            rules={"no-commented-code": "off", "require-file-header": "off"},
            description="Relaxed rules for code blocks in documentation",
        ),
    ]


def build_default_registry() -> PresetRegistry:
    """Build the registry of built-in presets."""
    return PresetRegistry(default_definitions())
