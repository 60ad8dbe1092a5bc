"""Unit tests for the ban-specific-words rule."""

import pytest

from comment_guard.rules.tech_debt.banned_words import (
    BannedWordsOptions,
    BanSpecificWordsRule,
    word_pattern,
)


@pytest.fixture
def rule() -> BanSpecificWordsRule:
    return BanSpecificWordsRule()


def message_ids(lint, rule, text, options=None):
    return [v.message_id for v in lint(rule, text, options).violations]


class TestWordPattern:
    def test_whole_word(self):
        pattern = word_pattern("hack", whole_word=True, case_sensitive=False)
        assert pattern.search("a HACK here")
        assert not pattern.search("hackathon")

    def test_hyphenated_compounds_excluded(self):
        pattern = word_pattern("xxx", whole_word=True, case_sensitive=False)
        assert not pattern.search("TODO (TICKET-XXX): tidy")
        assert pattern.search("XXX: tidy")

    def test_substring_mode(self):
        assert word_pattern("hack", whole_word=False, case_sensitive=False).search("hackathon")

    def test_case_sensitive(self):
        assert not word_pattern("hack", whole_word=True, case_sensitive=True).search("Hack")


class TestBannedWordsOptions:
    def test_word_list_merges_defaults(self):
        options = BannedWordsOptions.model_validate(
            {"bannedWords": ["legacy", {"word": "foo", "replacement": "bar"}]}
        )
        words = [entry.word for entry in options.word_list()]
        assert words[-2:] == ["legacy", "foo"]
        assert "hack" in words

    def test_defaults_can_be_dropped(self):
        options = BannedWordsOptions.model_validate(
            {"bannedWords": ["legacy"], "includeDefaults": False}
        )
        assert [entry.word for entry in options.word_list()] == ["legacy"]

    def test_unknown_entry_key_rejected(self):
        with pytest.raises(ValueError):
            BannedWordsOptions.model_validate({"bannedWords": [{"word": "a", "why": "b"}]})


class TestBanSpecificWordsRule:
    """Tests for ban-specific-words."""

    def test_word_with_replacement(self, lint, rule):
        result = lint(rule, "// Quick hack for the parser\n")
        assert [v.message_id for v in result.violations] == ["bannedWordWithReplacement"]
        assert result.violations[0].message == (
            "The word 'hack' is banned. Consider using 'workaround' instead. "
            "Use 'workaround' with explanation"
        )

    def test_word_without_replacement(self, lint, rule):
        result = lint(rule, "// Obviously the obvious choice\n")
        assert [v.message_id for v in result.violations] == ["bannedWord"]
        assert result.violations[0].fix is None

    def test_default_reason_for_custom_word(self, lint, rule):
        result = lint(rule, "// legacy path\n", {"bannedWords": ["legacy"]})
        assert result.violations[0].message == (
            "The word 'legacy' is banned in comments. This word/phrase is not recommended."
        )

    def test_one_finding_per_comment(self, lint, rule):
        assert message_ids(lint, rule, "// hack around the whitelist\n") == [
            "bannedWordWithReplacement"
        ]

    def test_fixer_placeholders_not_flagged(self, lint, rule):
        text = "// TODO (TICKET-XXX): tidy\n// FIXME (BUG-XXX): crash\n"
        assert message_ids(lint, rule, text) == []

    @pytest.mark.parametrize(
        "text",
        [
            "// See https://example.com/hack/guide\n",
            "// Calls `hack()` on purpose\n",
            "/*\n * ```\n * hack();\n * ```\n */\n",
        ],
    )
    def test_ignored_spans(self, lint, rule, text):
        assert message_ids(lint, rule, text) == []

    def test_ignored_spans_can_be_disabled(self, lint, rule):
        text = "// Calls `hack()` on purpose\n"
        assert message_ids(lint, rule, text, {"ignoreInlineCode": False}) == [
            "bannedWordWithReplacement"
        ]

    def test_later_occurrence_outside_ignored_span(self, lint, rule):
        text = "// Calls `hack()`, a hack\n"
        assert message_ids(lint, rule, text) == ["bannedWordWithReplacement"]

    def test_ignore_regex(self, lint, rule):
        text = "// master branch only\n"
        assert message_ids(lint, rule, text) == ["bannedWordWithReplacement"]
        assert message_ids(lint, rule, text, {"ignoreRegex": "master branch"}) == []

    def test_fix_replaces_every_occurrence(self, fix, rule):
        result = fix(rule, "// Add to whitelist, then check the whitelist\n")
        assert result.output == "// Add to allowlist, then check the allowlist\n"

    def test_fix_block_comment(self, fix, rule):
        result = fix(rule, "/* kludge for IE */\n")
        assert result.output == "/* workaround for IE */\n"
