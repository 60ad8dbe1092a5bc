"""
Explanation comment rule.

Code that is hard to read at a glance needs a comment on the line
above its statement: deep nesting of control flow, regular expression
literals, bitwise operations, chained ternaries, long `&&`/`||` chains
and recursive calls. Comments such as `// loop items` that merely name
the construct do not count.
"""

import re
from typing import Literal

from pydantic import Field, field_validator
from tree_sitter import Node

from ...analysis.source import SourceFile
from ..base import BaseRule, RuleContext, RuleOptions, Visitor
from ..patterns import compile_pattern

Construct = Literal["regex", "bitwise", "ternary", "recursion", "complex-condition"]

NESTING_TYPES = frozenset(
    {
        "if_statement",
        "for_statement",
        "for_in_statement",
        "while_statement",
        "do_statement",
        "switch_statement",
        "try_statement",
    }
)
STATEMENT_CONTAINERS = frozenset({"program", "statement_block"})
BITWISE_OPERATORS = frozenset({"&", "|", "^", "<<", ">>", ">>>"})
LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})
FUNCTION_EXPRESSION_TYPES = frozenset({"function_expression", "function", "arrow_function"})

TRIVIAL_PATTERNS = [
    re.compile(r"^(check|if|loop|return|set|get|call|do|run)\s", re.IGNORECASE),
    re.compile(r"^(increment|decrement)\s", re.IGNORECASE),
    re.compile(r"^(for|while|switch|try)\s", re.IGNORECASE),
]
MIN_EXPLANATION_LENGTH = 5


class ExplanationOptions(RuleOptions):
    """Options for require-explanation-comments."""

    nesting_depth: int = Field(default=3, ge=1)
    require_for: list[Construct] = Field(default_factory=lambda: ["regex", "bitwise", "ternary"])
    ternary_chain_length: int = Field(default=2, ge=1)
    condition_complexity: int = Field(default=3, ge=1)
    ignore_patterns: list[str] = Field(default_factory=list)
    ignore_regex: str | None = None

    @field_validator("ignore_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            compile_pattern(pattern)
        return value

    @field_validator("ignore_regex")
    @classmethod
    def _check_ignore_regex(cls, value: str | None) -> str | None:
        return compile_pattern(value)


def unparenthesized(node: Node | None) -> Node | None:
    while node is not None and node.type == "parenthesized_expression":
        inner = [child for child in node.named_children if child.type != "comment"]
        node = inner[0] if inner else None
    return node


def syntactic_parent(node: Node) -> Node | None:
    """Parent, skipping any parentheses around the node."""
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        parent = parent.parent
    return parent


def operator_of(node: Node, source: SourceFile) -> str | None:
    operator = node.child_by_field_name("operator")
    return source.node_text(operator) if operator is not None else None


def enclosing_statement(node: Node) -> Node:
    """The ancestor sitting directly in the program or a block."""
    current = node
    while current.parent is not None and current.parent.type not in STATEMENT_CONTAINERS:
        current = current.parent
    return current


def ternary_chain_length(node: Node | None) -> int:
    node = unparenthesized(node)
    if node is None or node.type != "ternary_expression":
        return 0
    return 1 + max(
        ternary_chain_length(node.child_by_field_name("consequence")),
        ternary_chain_length(node.child_by_field_name("alternative")),
    )


def logical_operator_count(node: Node | None, source: SourceFile) -> int:
    node = unparenthesized(node)
    if node is None or node.type != "binary_expression":
        return 0
    if operator_of(node, source) not in LOGICAL_OPERATORS:
        return 0
    return (
        1
        + logical_operator_count(node.child_by_field_name("left"), source)
        + logical_operator_count(node.child_by_field_name("right"), source)
    )


def containing_function_name(node: Node, source: SourceFile) -> str | None:
    current = node.parent
    while current is not None:
        if current.type in ("function_declaration", "function_expression", "method_definition"):
            name = current.child_by_field_name("name")
            if name is not None:
                return source.node_text(name)
        if current.type == "variable_declarator":
            value = current.child_by_field_name("value")
            name = current.child_by_field_name("name")
            if value is not None and value.type in FUNCTION_EXPRESSION_TYPES and name is not None:
                return source.node_text(name)
        current = current.parent
    return None


def callee_name(call: Node, source: SourceFile) -> str | None:
    callee = call.child_by_field_name("function")
    if callee is None:
        return None
    if callee.type == "identifier":
        return source.node_text(callee)
    if callee.type == "member_expression":
        prop = callee.child_by_field_name("property")
        return source.node_text(prop) if prop is not None else None
    return None


class RequireExplanationCommentsRule(BaseRule):
    """Require explanatory comments for complex code patterns."""

    Options = ExplanationOptions

    messages = {
        "deepNesting": (
            "Code at nesting depth {{depth}} (max: {{max}}) requires an explanatory comment."
        ),
        "regexNeedsComment": "Regular expressions should have a comment explaining the pattern.",
        "bitwiseNeedsComment": (
            "Bitwise operation '{{operator}}' should have a comment explaining its purpose."
        ),
        "ternaryChainNeedsComment": (
            "Chained ternary expressions ({{length}} levels) should have a comment "
            "explaining the logic."
        ),
        "complexConditionNeedsComment": (
            "Complex conditional ({{count}} operators) should have an explanatory comment."
        ),
        "recursionNeedsComment": (
            "Recursive function calls should have a comment explaining the recursion."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "require-explanation-comments"

    @property
    def name(self) -> str:
        return "Require Explanation Comments"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Require explanatory comments for complex code patterns"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: ExplanationOptions = context.options
        source = context.source
        wanted = set(options.require_for)
        ignore = [re.compile(p) for p in options.ignore_patterns]
        strip = re.compile(options.ignore_regex, re.IGNORECASE) if options.ignore_regex else None
        recursion_statements: set[int] = set()

        def meaningful(text: str) -> bool:
            text = text.strip()
            if strip is not None:
                text = strip.sub("", text).strip()
            if len(text) < MIN_EXPLANATION_LENGTH:
                return False
            return not any(pattern.search(text) for pattern in TRIVIAL_PATTERNS)

        def explained(node: Node) -> bool:
            line = node.start_point[0] + 1
            return any(
                line - comment.end_line <= 1 and meaningful(comment.value)
                for comment in source.get_comments_before(node)
            )

        def ignored(node: Node) -> bool:
            text = source.node_text(node)
            return any(pattern.search(text) for pattern in ignore)

        def check_nesting(node: Node) -> None:
            depth = 1
            ancestor = node.parent
            while ancestor is not None:
                if ancestor.type in NESTING_TYPES:
                    depth += 1
                ancestor = ancestor.parent
            if depth > options.nesting_depth and not explained(node):
                context.report(
                    "deepNesting", node, data={"depth": depth, "max": options.nesting_depth}
                )

        def report_unexplained(node: Node, message_id: str, data: dict | None = None) -> None:
            if ignored(node) or explained(enclosing_statement(node)):
                return
            context.report(message_id, node, data=data)

        def check_regex(node: Node) -> None:
            report_unexplained(node, "regexNeedsComment")

        def check_binary(node: Node) -> None:
            operator = operator_of(node, source)
            parent = syntactic_parent(node)
            parent_operator = (
                operator_of(parent, source)
                if parent is not None and parent.type == "binary_expression"
                else None
            )
            if "bitwise" in wanted and operator in BITWISE_OPERATORS:
                if parent_operator not in BITWISE_OPERATORS:
                    report_unexplained(node, "bitwiseNeedsComment", {"operator": operator})
            elif "complex-condition" in wanted and operator in LOGICAL_OPERATORS:
                if parent_operator in LOGICAL_OPERATORS:
                    return
                count = logical_operator_count(node, source)
                if count >= options.condition_complexity:
                    report_unexplained(node, "complexConditionNeedsComment", {"count": count})

        def check_unary(node: Node) -> None:
            if operator_of(node, source) != "~":
                return
            parent = syntactic_parent(node)
            if parent is not None and parent.type == "unary_expression":
                if operator_of(parent, source) == "~":
                    return
            report_unexplained(node, "bitwiseNeedsComment", {"operator": "~"})

        def check_ternary(node: Node) -> None:
            parent = syntactic_parent(node)
            if parent is not None and parent.type == "ternary_expression":
                return
            length = ternary_chain_length(node)
            if length >= options.ternary_chain_length:
                report_unexplained(node, "ternaryChainNeedsComment", {"length": length})

        def check_call(node: Node) -> None:
            name = containing_function_name(node, source)
            if name is None or callee_name(node, source) != name or ignored(node):
                return
            statement = enclosing_statement(node)
            if statement.id in recursion_statements or explained(statement):
                return
            recursion_statements.add(statement.id)
            context.report("recursionNeedsComment", node)

        visitors: dict[str, Visitor] = {node_type: check_nesting for node_type in NESTING_TYPES}
        if "regex" in wanted:
            visitors["regex"] = check_regex
        if wanted & {"bitwise", "complex-condition"}:
            visitors["binary_expression"] = check_binary
        if "bitwise" in wanted:
            visitors["unary_expression"] = check_unary
        if "ternary" in wanted:
            visitors["ternary_expression"] = check_ternary
        if "recursion" in wanted:
            visitors["call_expression"] = check_call
        return visitors
