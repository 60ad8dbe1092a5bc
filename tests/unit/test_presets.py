"""Unit tests for the preset registry."""

import pytest

from comment_guard.presets import (
    PresetDefinition,
    PresetNotFoundError,
    PresetRegistry,
    build_default_registry,
)
from comment_guard.rules.engine import RuleEngine

PRESET_NAMES = [
    "minimal",
    "recommended",
    "strict",
    "analysis",
    "typescript",
    "typescript-strict",
    "react",
    "vue",
    "svelte",
    "markdown",
]


class TestDefaultRegistry:
    """Tests for the built-in presets."""

    def test_names(self, registry):
        assert registry.names() == PRESET_NAMES
        assert len(registry) == 10
        assert [preset.name for preset in registry] == PRESET_NAMES

    def test_lookup_is_identity_stable(self, registry):
        assert registry.get("strict") is registry.get("strict")

    def test_unknown_preset(self, registry):
        with pytest.raises(PresetNotFoundError) as excinfo:
            registry.get("nope")

        assert isinstance(excinfo.value, KeyError)
        assert excinfo.value.available == PRESET_NAMES
        assert str(excinfo.value).startswith("Unknown preset 'nope'. Available: minimal,")
        assert "nope" not in registry

    @pytest.mark.parametrize(
        "name,chain",
        [
            ("minimal", ["minimal"]),
            ("typescript-strict", ["minimal", "recommended", "strict", "typescript-strict"]),
            ("markdown", ["minimal", "markdown"]),
            ("analysis", ["analysis"]),
        ],
    )
    def test_inheritance_chain(self, registry, name, chain):
        assert registry.inheritance_chain(name) == chain

    def test_parent(self, registry):
        assert registry.parent("react") == "recommended"
        assert registry.parent("minimal") is None

    def test_recommended_inherits_minimal(self, registry):
        rules = registry.get("recommended").rules
        assert rules["enforce-todo-format"] == "warn"
        assert rules["accessibility-todo-format"] == "warn"

    def test_strict_rules(self, registry):
        rules = registry.get("strict").rules

        assert rules["enforce-todo-format"] == "error"
        assert rules["no-commented-code"] == "error"
        assert rules["accessibility-todo-format"] == "error"
        assert rules["valid-jsdoc"] == "error"
        severity, options = rules["no-obvious-comments"]
        assert severity == "error"
        assert options["sensitivity"] == "medium"

    def test_recommended_comment_style_rules(self, registry):
        rules = registry.get("recommended").rules
        assert rules["enforce-comment-length"][1]["maxLength"] == 120
        assert rules["enforce-capitalization"] == "warn"
        assert rules["comment-spacing"] == "warn"
        assert rules["ban-specific-words"][0] == "warn"
        assert "require-jsdoc" not in rules

    def test_strict_documentation_rules(self, registry):
        rules = registry.get("strict").rules
        assert rules["enforce-comment-length"][0] == "error"
        assert rules["enforce-comment-length"][1]["maxLength"] == 120
        assert rules["require-jsdoc"] == "warn"
        assert rules["require-file-header"][1]["requiredTags"] == ("@file",)
        assert rules["require-explanation-comments"][1]["requireFor"] == ("regex", "bitwise")
        assert rules["jsdoc-type-syntax"][1]["prefer"] == "typescript"

    def test_react_accessibility_rules(self, registry):
        rules = registry.get("react").rules
        assert rules["require-alt-text-comments"] == "warn"
        assert rules["screen-reader-context"] == "warn"
        assert rules["comment-spacing"] == "warn"
        assert "require-alt-text-comments" not in registry.get("recommended").rules

    def test_typescript_prefers_lowercase_types(self, registry):
        rules = registry.get("typescript").rules
        assert rules["valid-tsdoc"] == "warn"
        assert rules["jsdoc-type-syntax"][1]["prefer"] == "typescript"

    def test_typescript_strict_overrides(self, registry):
        preset = registry.get("typescript-strict")
        assert preset.rules["valid-tsdoc"] == "error"
        assert preset.rules["valid-jsdoc"] == "error"
        assert "**/*.ts" in preset.files

    def test_markdown_disables_commented_code(self, registry):
        preset = registry.get("markdown")
        assert preset.rules["no-commented-code"] == "off"
        assert preset.rules["require-file-header"] == "off"
        assert preset.processor == "comment-guard/.md"

    def test_analysis_is_standalone(self, registry):
        rules = registry.get("analysis").rules
        assert "enforce-todo-format" not in rules
        assert rules["todo-aging-warnings"][1]["maxAgeDays"] == 30

    def test_presets_are_read_only(self, registry):
        preset = registry.get("strict")
        with pytest.raises(TypeError):
            preset.rules["valid-jsdoc"] = "off"
        with pytest.raises(TypeError):
            preset.rules["no-obvious-comments"][1]["sensitivity"] = "low"
        with pytest.raises(AttributeError):
            preset.name = "other"

    def test_every_rule_is_registered(self, registry):
        engine = RuleEngine()
        engine.load_rules()

        for preset in registry:
            for rule_id in preset.rules:
                assert engine.get_rule(rule_id) is not None, f"{preset.name}: {rule_id}"

    def test_fresh_registries_are_independent(self):
        assert build_default_registry().get("minimal") is not build_default_registry().get("minimal")


class TestPresetToDict:
    def test_strict(self, registry):
        data = registry.get("strict").to_dict()

        assert data["name"] == "comment-guard/strict"
        assert data["plugins"] == ["comment-guard"]
        assert data["rules"]["no-obvious-comments"] == ["error", {"sensitivity": "medium"}]
        assert "files" not in data

    def test_react_language_options(self, registry):
        data = registry.get("react").to_dict()
        assert data["files"] == ["**/*.jsx", "**/*.tsx"]
        assert data["languageOptions"] == {"parserOptions": {"ecmaFeatures": {"jsx": True}}}
        assert isinstance(data["languageOptions"]["parserOptions"], dict)


class TestRegistryValidation:
    """Tests for malformed preset definitions."""

    def test_duplicate(self):
        with pytest.raises(ValueError, match="Duplicate preset"):
            PresetRegistry([PresetDefinition("a"), PresetDefinition("a")])

    def test_unknown_parent(self):
        with pytest.raises(ValueError, match="unknown preset 'ghost'"):
            PresetRegistry([PresetDefinition("a", extends="ghost")])

    def test_cycle(self):
        with pytest.raises(ValueError, match="cycle"):
            PresetRegistry([PresetDefinition("a", extends="b"), PresetDefinition("b", extends="a")])

    def test_child_overrides_parent(self):
        registry = PresetRegistry(
            [
                PresetDefinition("base", rules={"x": "warn", "y": "warn"}, files=("*.js",)),
                PresetDefinition("child", extends="base", rules={"y": "off"}),
            ]
        )
        child = registry.get("child")
        assert dict(child.rules) == {"x": "warn", "y": "off"}
        assert child.files == ("*.js",)
