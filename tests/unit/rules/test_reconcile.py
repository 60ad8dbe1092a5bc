"""Unit tests for doc comment reconciliation."""

from comment_guard.analysis.doc_comments import parse_doc_comment
from comment_guard.analysis.functions import ParameterDescriptor
from comment_guard.rules.documentation.reconcile import (
    JsdocOptions,
    find_order_mismatches,
    missing_param_fix,
    missing_returns_fix,
    reconcile,
)


def params(*names: str) -> list[ParameterDescriptor]:
    return [ParameterDescriptor(name, index) for index, name in enumerate(names)]


def doc_for(*lines: str):
    return parse_doc_comment("*\n" + "".join(f" * {line}\n" for line in lines) + " ")


def ids(findings):
    return [(f.message_id, f.name) for f in findings]


class TestReconcile:
    """Tests for reconcile findings."""

    def test_matching_signature(self):
        doc = doc_for("@param {number} a - first", "@returns {number} sum")
        assert reconcile(doc, params("a"), True, JsdocOptions()) == []

    def test_missing_and_extra(self):
        doc = doc_for("@param {number} a", "@param {number} z")
        findings = reconcile(doc, params("a", "b"), False, JsdocOptions())
        assert ids(findings) == [("missingParam", "b"), ("extraParam", "z")]

    def test_duplicate_reported_once(self):
        doc = doc_for("@param {number} x", "@param {number} x")
        findings = reconcile(doc, params("x"), False, JsdocOptions())
        assert ids(findings) == [("duplicateParam", "x")]

    def test_order_mismatch_exactly_two(self):
        doc = doc_for("@param {number} b", "@param {number} a", "@param {number} c")
        findings = reconcile(doc, params("a", "b", "c"), False, JsdocOptions())

        assert ids(findings) == [("paramOrderMismatch", "a"), ("paramOrderMismatch", "b")]
        assert findings[0].data == {"name": "a", "expected": "1", "actual": "2"}
        assert findings[1].data == {"name": "b", "expected": "2", "actual": "1"}

    def test_missing_tag_does_not_shift_order(self):
        doc = doc_for("@param {number} a", "@param {number} c")
        findings = reconcile(doc, params("a", "b", "c"), False, JsdocOptions())
        assert ids(findings) == [("missingParam", "b")]

    def test_checks_can_be_disabled(self):
        doc = doc_for("@param {number} b", "@param {number} a")
        options = JsdocOptions(check_param_names=False, check_param_order=False)
        assert reconcile(doc, params("a", "b", "c"), False, options) == []

    def test_type_and_description_policy(self):
        doc = doc_for("@param a", "@returns")
        options = JsdocOptions(require_param_description=True, require_return_description=True)
        findings = reconcile(doc, params("a"), True, options)
        assert [f.message_id for f in findings] == [
            "missingParamType",
            "missingParamDescription",
            "missingReturnType",
            "missingReturnDescription",
        ]

    def test_missing_returns(self):
        findings = reconcile(doc_for("Summary."), [], True, JsdocOptions())
        assert ids(findings) == [("missingReturns", None)]

    def test_unnecessary_returns_only_when_enabled(self):
        doc = doc_for("@returns {number} x")
        assert reconcile(doc, [], False, JsdocOptions()) == []
        options = JsdocOptions(check_unnecessary_returns=True)
        assert ids(reconcile(doc, [], False, options)) == [("unnecessaryReturns", None)]

    def test_idempotent(self):
        doc = doc_for("@param {number} b", "@param x", "@param {number} b")
        signature = params("a", "b")
        first = reconcile(doc, signature, True, JsdocOptions())
        assert reconcile(doc, signature, True, JsdocOptions()) == first


class TestFindOrderMismatches:
    def test_only_common_names_compared(self):
        assert find_order_mismatches({"x": 0, "a": 1}, {"a": 0, "y": 1}) == []


class TestFixes:
    """Tests for doc comment edits."""

    def test_missing_param_inserted_before_returns(self, parse):
        text = "/**\n * Adds.\n * @param {number} a\n * @returns {number} sum\n */\n"
        source = parse(text)
        comment = source.get_all_comments()[0]

        output = missing_param_fix(comment, "b").apply(text)
        assert output == (
            "/**\n * Adds.\n * @param {number} a\n * @param {*} b - [description]\n"
            " * @returns {number} sum\n */\n"
        )

    def test_missing_param_appended_without_returns(self, parse):
        text = "  /**\n   * Adds.\n   */\n"
        comment = parse(text).get_all_comments()[0]
        output = missing_param_fix(comment, "x").apply(text)
        assert output == "  /**\n   * Adds.\n   * @param {*} x - [description]\n   */\n"

    def test_missing_returns_appended(self, parse):
        text = "/**\n * @param {number} a\n */\n"
        comment = parse(text).get_all_comments()[0]
        output = missing_returns_fix(comment).apply(text)
        assert output == "/**\n * @param {number} a\n * @returns {*} [description]\n */\n"

    def test_single_line_comment_expanded(self, parse):
        text = "/** Adds. */\n"
        comment = parse(text).get_all_comments()[0]
        output = missing_param_fix(comment, "a").apply(text)
        assert output == "/**\n * Adds.\n * @param {*} a - [description]\n */\n"

    def test_fixed_comment_reconciles(self, parse):
        text = "/**\n * @param {number} a\n */\n"
        comment = parse(text).get_all_comments()[0]
        fixed = parse(missing_param_fix(comment, "b").apply(text)).get_all_comments()[0]

        doc = parse_doc_comment(fixed.value)
        assert reconcile(doc, params("a", "b"), False, JsdocOptions()) == []
