"""
JSDoc validation rule.

Checks that the doc comment of each function, arrow function, function
expression and class method matches its signature: parameter names,
order, types and descriptions, and the presence of `@returns`.
"""

import logging

from tree_sitter import Node

from ...analysis.doc_comments import find_attached_doc, try_parse_doc_comment
from ...analysis.functions import function_returns_value, get_function_parameters
from ..base import BaseRule, RuleContext, TextEdit, Visitor
from .reconcile import JsdocOptions, missing_param_fix, missing_returns_fix, reconcile

logger = logging.getLogger(__name__)

FUNCTION_VISIT_TYPES = (
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
)


class ValidJsdocRule(BaseRule):
    """Validate JSDoc comments match function signatures."""

    Options = JsdocOptions

    messages = {
        "missingParam": "Missing JSDoc @param for '{{name}}'.",
        "extraParam": "JSDoc @param '{{name}}' does not match any function parameter.",
        "paramOrderMismatch": (
            "JSDoc @param '{{name}}' should appear at position {{expected}}, not {{actual}}."
        ),
        "missingReturns": "Function returns a value but is missing JSDoc @returns.",
        "unnecessaryReturns": "Function does not return a value but has JSDoc @returns.",
        "missingParamDescription": "JSDoc @param '{{name}}' is missing a description.",
        "missingReturnDescription": "JSDoc @returns is missing a description.",
        "missingParamType": "JSDoc @param '{{name}}' is missing a type.",
        "missingReturnType": "JSDoc @returns is missing a type.",
        "duplicateParam": "Duplicate JSDoc @param for '{{name}}'.",
    }

    @property
    def rule_id(self) -> str:
        return "valid-jsdoc"

    @property
    def name(self) -> str:
        return "Valid JSDoc"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Validate JSDoc comments match function signatures"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: JsdocOptions = context.options
        source = context.source

        def validate(node: Node) -> None:
            comment = find_attached_doc(node, source)
            if comment is None:
                return
            doc = try_parse_doc_comment(comment)
            if doc is None:
                logger.debug(f"Skipping malformed doc comment at line {comment.start_line}")
                return

            findings = reconcile(
                doc,
                get_function_parameters(node, source),
                function_returns_value(node),
                options,
            )
            for finding in findings:
                fix: TextEdit | None = None
                if finding.message_id == "missingParam":
                    fix = missing_param_fix(comment, finding.name)
                elif finding.message_id == "missingReturns":
                    fix = missing_returns_fix(comment)
                context.report(finding.message_id, comment, data=finding.data, fix=fix)

        return {node_type: validate for node_type in FUNCTION_VISIT_TYPES}
