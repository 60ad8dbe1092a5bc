"""Unit tests for comment_guard.rules.discovery module."""

import logging
from pathlib import Path

from comment_guard.rules.discovery import RuleDiscovery, discover_rules

ALL_RULE_IDS = {
    "enforce-todo-format",
    "enforce-fixme-format",
    "enforce-note-format",
    "accessibility-todo-format",
    "no-commented-code",
    "no-obvious-comments",
    "valid-jsdoc",
    "valid-tsdoc",
    "comment-code-ratio",
    "todo-aging-warnings",
    "stale-comment-detection",
    "issue-tracker-integration",
    "enforce-comment-length",
    "enforce-capitalization",
    "comment-spacing",
    "ban-specific-words",
    "require-jsdoc",
    "jsdoc-type-syntax",
    "require-file-header",
    "require-explanation-comments",
    "require-alt-text-comments",
    "screen-reader-context",
}


class TestRuleDiscovery:
    """Tests for discovering the built-in rules."""

    def test_discover_all(self):
        discovery = RuleDiscovery()
        rules = discovery.discover_all()

        assert set(rules) == ALL_RULE_IDS
        assert discovery.discovery_errors == []

    def test_discover_category(self):
        rules = RuleDiscovery().discover_category("format")
        assert set(rules) == {
            "enforce-todo-format",
            "enforce-fixme-format",
            "enforce-note-format",
            "accessibility-todo-format",
            "enforce-comment-length",
            "enforce-capitalization",
            "comment-spacing",
        }

    def test_discover_accessibility_category(self):
        rules = RuleDiscovery().discover_category("accessibility")
        assert set(rules) == {"require-alt-text-comments", "screen-reader-context"}

    def test_categories_match_rule_category(self):
        discovery = RuleDiscovery()
        for category in discovery.RULE_CATEGORIES:
            for rule_class in discovery.discover_category(category).values():
                assert rule_class().category == category

    def test_get_rule_class(self):
        discovery = RuleDiscovery()
        discovery.discover_all()
        assert discovery.get_rule_class("valid-jsdoc").__name__ == "ValidJsdocRule"
        assert discovery.get_rule_class("missing") is None

    def test_missing_category_directory(self, tmp_path: Path):
        assert RuleDiscovery(tmp_path).discover_category("format") == {}

    def test_discover_rules_with_categories(self):
        rules = discover_rules(categories=["documentation"])
        assert set(rules) == {"valid-jsdoc", "valid-tsdoc"}


class TestExternalRuleDirectory:
    """Tests for loading rules from another directory."""

    def test_loads_rule_from_file(self, tmp_path: Path):
        category = tmp_path / "format"
        category.mkdir()
        (category / "custom_rule.py").write_text(
            "from comment_guard.rules.base import BaseRule\n"
            "\n"
            "class CustomRule(BaseRule):\n"
            "    rule_id = 'custom-rule'\n"
            "    name = 'Custom'\n"
            "    category = 'format'\n"
            "\n"
            "    def create(self, context):\n"
            "        return {}\n"
        )
        (category / "_private.py").write_text("raise RuntimeError('never imported')\n")

        rules = RuleDiscovery(tmp_path).discover_all()
        assert list(rules) == ["custom-rule"]

    def test_broken_module_is_recorded(self, tmp_path: Path, caplog):
        category = tmp_path / "analysis"
        category.mkdir()
        (category / "broken.py").write_text("import does_not_exist_anywhere\n")

        discovery = RuleDiscovery(tmp_path)
        with caplog.at_level(logging.WARNING, logger="comment_guard.rules.discovery"):
            assert discovery.discover_all() == {}

        assert len(discovery.discovery_errors) == 1
        assert any("broken.py" in r.getMessage() for r in caplog.records)
        assert all(r.levelno >= logging.WARNING for r in caplog.records)

    def test_module_failing_at_import_time(self, tmp_path: Path, caplog):
        category = tmp_path / "analysis"
        category.mkdir()
        (category / "bad_annotation.py").write_text("value: None | None = None\n")

        with caplog.at_level(logging.WARNING, logger="comment_guard.rules.discovery"):
            RuleDiscovery(tmp_path).discover_all()
        assert "bad_annotation.py" in caplog.text
