"""Unit tests for the no-obvious-comments rule."""

import pytest

from comment_guard.rules.patterns import StatementCategory
from comment_guard.rules.tech_debt.obvious_comments import (
    ObviousCommentsRule,
    describe_statement,
    find_adjacent_statement,
    is_obvious,
    normalize_text,
)


def flagged_lines(lint, text, options=None):
    return [v.line for v in lint(ObviousCommentsRule(), text, options).violations]


class TestNormalizeText:
    def test_normalize(self):
        assert normalize_text("  Increment   the Counter!! ") == "increment the counter"


class TestIsObvious:
    """Tests for the matching heuristic."""

    def test_exact_match(self):
        assert is_obvious("increment i", ["increment i"])

    def test_prefix_with_short_remainder(self):
        assert is_obvious("return result now", ["return result"])

    def test_long_comment_never_obvious(self):
        text = "return the value that we computed earlier in this long function"
        assert not is_obvious(text, ["return value"])

    def test_word_overlap_medium(self):
        assert is_obvious("iterate over the items", ["loop through", "iterate over items"])

    def test_low_sensitivity_requires_near_exact(self):
        assert not is_obvious("the counter increment i", ["increment i"], "low")
        assert is_obvious("increment i", ["increment i"], "low")

    def test_high_sensitivity_containment(self):
        assert is_obvious("now call fetchData", ["call fetchData"], "high")
        assert not is_obvious("now call fetchData", ["call fetchData"], "low")


class TestDescribeStatement:
    """Tests for statement categorisation."""

    @pytest.mark.parametrize(
        "code,category,fields",
        [
            ("i++;", StatementCategory.UPDATE, {"name": "i"}),
            ("--count;", StatementCategory.UPDATE, {"name": "count"}),
            ("return total;", StatementCategory.RETURN, {"name": "total"}),
            ("fetchData(url);", StatementCategory.CALL, {"name": "fetchData"}),
            ("api.load();", StatementCategory.CALL, {"name": "load"}),
            ("const x = 5;", StatementCategory.DECLARATION, {"kind": "const", "name": "x", "value": "5"}),
            ("x = 'a';", StatementCategory.ASSIGNMENT, {"name": "x", "value": "a"}),
            ("if (a) {}", StatementCategory.CONDITIONAL, {}),
            ("for (;;) {}", StatementCategory.FOR_LOOP, {}),
            ("while (a) {}", StatementCategory.WHILE_LOOP, {}),
            ("function build() {}", StatementCategory.FUNCTION, {"name": "build"}),
            ("class Widget {}", StatementCategory.CLASS, {"name": "Widget"}),
            ("throw err;", StatementCategory.THROW, {}),
        ],
    )
    def test_categories(self, parse, code, category, fields):
        source = parse(code)
        statement = source.root.named_children[0]
        described = describe_statement(statement, source)
        assert described.category == category
        assert described.fields == fields

    def test_return_inside_function(self, parse):
        source = parse("function f() { return 1; }")
        node = next(n for n in source.walk() if n.type == "return_statement")
        assert describe_statement(node, source).fields == {"value": "1"}

    def test_unknown_statement(self, parse):
        source = parse("debugger;")
        assert describe_statement(source.root.named_children[0], source) is None


class TestFindAdjacentStatement:
    def test_leading_comment(self, parse):
        source = parse("let i = 0;\n// increment i\ni++;\n")
        comment = source.get_all_comments()[0]
        assert find_adjacent_statement(comment, source).type == "expression_statement"

    def test_trailing_comment(self, parse):
        source = parse("i++; // increment i\nfoo();\n")
        comment = source.get_all_comments()[0]
        node = find_adjacent_statement(comment, source)
        assert source.node_text(node) == "i++;"

    def test_blank_line_gap(self, parse):
        source = parse("// increment i\n\ni++;\n")
        assert find_adjacent_statement(source.get_all_comments()[0], source) is None


class TestObviousCommentsRule:
    """Tests for no-obvious-comments through the engine."""

    def test_increment_and_decrement(self, lint):
        text = "let i = 0;\n// increment i\ni++;\n// increment i\ni--;\n"
        assert flagged_lines(lint, text) == [2, 4]

    def test_message(self, lint):
        (violation,) = lint(ObviousCommentsRule(), "// return result\nreturn result;\n").violations
        assert violation.message == (
            "Comment 'return result' appears to restate the code. "
            "Comments should explain 'why', not 'what'."
        )

    def test_trailing_comment(self, lint):
        text = "let i = 0;\ni++; // increment i\n"
        assert flagged_lines(lint, text) == [2]
        assert flagged_lines(lint, text, {"checkTrailingComments": False}) == []

    def test_leading_toggle(self, lint):
        text = "// increment i\ni++;\n"
        assert flagged_lines(lint, text, {"checkLeadingComments": False}) == []

    def test_why_comments_pass(self, lint):
        text = (
            "// increment because the API counts from one\ni++;\n"
            "// Workaround for Safari focus bug\nfocus();\n"
        )
        assert flagged_lines(lint, text) == []

    def test_doc_comments_ignored(self, lint):
        assert flagged_lines(lint, "/** function build */\nfunction build() {}\n") == []

    def test_block_comment_first_line(self, lint):
        assert flagged_lines(lint, "/*\n * call fetchData\n */\nfetchData();\n") == [1]

    def test_declaration(self, lint):
        assert flagged_lines(lint, "// set x to 5\nconst x = 5;\n") == [1]

    def test_ignore_patterns(self, lint):
        text = "// increment i\ni++;\n"
        assert flagged_lines(lint, text, {"ignorePatterns": ["^increment"]}) == []

    def test_unrelated_comment(self, lint):
        assert flagged_lines(lint, "// keeps the cache warm\nfetchData();\n") == []

    def test_long_comment_truncated_in_message(self, lint):
        name = "aVeryLongFunctionNameThatKeepsGoingAndGoingForever"
        text = f"// call {name}\n{name}();\n"
        (violation,) = lint(ObviousCommentsRule(), text).violations
        assert violation.data["comment"].endswith("...")
        assert len(violation.data["comment"]) == 50
