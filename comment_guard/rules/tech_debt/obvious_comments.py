"""
Obvious comment detection rule.

Flags comments that merely restate the statement they sit on or above,
such as `// increment i` before `i++;`. The adjacent statement is
described by category (see `rules.patterns.OBVIOUS_TEMPLATES`) and the
comment's normalized text is compared against the category's phrasings.
"""

import re
from dataclasses import dataclass, field
from typing import Literal

from pydantic import Field, field_validator
from tree_sitter import Node

from ...analysis.comment_text import first_comment_line
from ...analysis.source import Comment, SourceFile
from ..base import BaseRule, RuleContext, RuleOptions, Visitor
from ..patterns import (
    StatementCategory,
    compile_pattern,
    is_exempt_from_obvious_check,
    render_templates,
)

Sensitivity = Literal["low", "medium", "high"]

MAX_OBVIOUS_WORDS = 8
MAX_REMAINDER_LENGTH = 5
NON_ALNUM = re.compile(r"[^a-z0-9\s]")
WHITESPACE = re.compile(r"\s+")

LITERAL_TYPES = frozenset({"number", "string", "true", "false", "null"})

SIMPLE_CATEGORIES = {
    "if_statement": StatementCategory.CONDITIONAL,
    "for_statement": StatementCategory.FOR_LOOP,
    "for_in_statement": StatementCategory.FOR_LOOP,
    "while_statement": StatementCategory.WHILE_LOOP,
    "do_statement": StatementCategory.WHILE_LOOP,
    "switch_statement": StatementCategory.SWITCH,
    "try_statement": StatementCategory.TRY,
    "throw_statement": StatementCategory.THROW,
    "break_statement": StatementCategory.BREAK,
    "continue_statement": StatementCategory.CONTINUE,
}

FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
    }
)
CLASS_TYPES = frozenset({"class_declaration", "class", "abstract_class_declaration"})


@dataclass(frozen=True)
class StatementDescription:
    """Category of a statement plus the fields its templates use."""

    category: StatementCategory
    fields: dict[str, str] = field(default_factory=dict)

    def descriptions(self) -> list[str]:
        return render_templates(self.category, self.fields)


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = NON_ALNUM.sub(" ", text.lower())
    return WHITESPACE.sub(" ", text).strip()


def _first_named(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _literal_value(node: Node | None, source: SourceFile) -> str | None:
    if node is None or node.type not in LITERAL_TYPES:
        return None
    text = source.node_text(node)
    if node.type == "string":
        return text[1:-1]
    return text


def _identifier(node: Node | None, source: SourceFile) -> str | None:
    if node is None or node.type != "identifier":
        return None
    return source.node_text(node)


def describe_statement(node: Node | None, source: SourceFile) -> StatementDescription | None:
    """Describe a statement for obvious-comment matching.

    Args:
        node: Statement or expression adjacent to a comment
        source: SourceFile the node belongs to

    Returns:
        StatementDescription, or None for statements with no templates
    """
    if node is None:
        return None
    node_type = node.type

    if node_type in ("expression_statement", "parenthesized_expression"):
        return describe_statement(_first_named(node), source)

    if node_type == "export_statement":
        return describe_statement(node.child_by_field_name("declaration"), source)

    if node_type == "update_expression":
        name = _identifier(node.child_by_field_name("argument"), source)
        return StatementDescription(StatementCategory.UPDATE, {"name": name or "value"})

    if node_type == "return_statement":
        fields = {}
        argument = _first_named(node)
        name = _identifier(argument, source)
        if name is not None:
            fields["name"] = name
        value = _literal_value(argument, source)
        if value is not None:
            fields["value"] = value
        return StatementDescription(StatementCategory.RETURN, fields)

    if node_type == "call_expression":
        callee = node.child_by_field_name("function")
        name = "function"
        if callee is not None and callee.type == "identifier":
            name = source.node_text(callee)
        elif callee is not None and callee.type == "member_expression":
            prop = callee.child_by_field_name("property")
            if prop is not None:
                name = source.node_text(prop)
        return StatementDescription(StatementCategory.CALL, {"name": name})

    if node_type in ("lexical_declaration", "variable_declaration"):
        fields = {"kind": source.node_text(node.children[0]) if node.children else "var"}
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if declarators:
            name = _identifier(declarators[0].child_by_field_name("name"), source)
            if name is not None:
                fields["name"] = name
                value = _literal_value(declarators[0].child_by_field_name("value"), source)
                if value is not None:
                    fields["value"] = value
        return StatementDescription(StatementCategory.DECLARATION, fields)

    if node_type in ("assignment_expression", "augmented_assignment_expression"):
        name = _identifier(node.child_by_field_name("left"), source)
        fields = {"name": name or "variable"}
        value = _literal_value(node.child_by_field_name("right"), source)
        if value is not None:
            fields["value"] = value
        return StatementDescription(StatementCategory.ASSIGNMENT, fields)

    if node_type in FUNCTION_TYPES:
        name = _identifier(node.child_by_field_name("name"), source)
        return StatementDescription(StatementCategory.FUNCTION, {"name": name or "function"})

    if node_type in CLASS_TYPES:
        name_node = node.child_by_field_name("name")
        name = source.node_text(name_node) if name_node is not None else "class"
        return StatementDescription(StatementCategory.CLASS, {"name": name})

    category = SIMPLE_CATEGORIES.get(node_type)
    if category is not None:
        return StatementDescription(category)
    return None


def is_obvious(comment_text: str, descriptions: list[str], sensitivity: Sensitivity = "medium") -> bool:
    """Whether a comment merely paraphrases one of the descriptions.

    Args:
        comment_text: First line of the comment
        descriptions: Rendered templates for the adjacent statement
        sensitivity: low (near-exact), medium (default) or high

    Returns:
        True if the comment restates the statement
    """
    comment = normalize_text(comment_text)
    if len(comment.split(" ")) > MAX_OBVIOUS_WORDS:
        return False

    comment_words = {w for w in comment.split(" ") if len(w) > 2}

    for description in descriptions:
        desc = normalize_text(description)
        if not desc:
            continue

        if comment == desc:
            return True

        if comment.startswith(desc):
            remainder = comment[len(desc):].strip()
            if len(remainder) < MAX_REMAINDER_LENGTH:
                return True

        if sensitivity == "high" and desc in comment and len(desc) >= len(comment) * 0.5:
            return True

        if sensitivity != "low":
            desc_words = [w for w in desc.split(" ") if len(w) > 2]
            if desc_words:
                overlap = sum(1 for w in desc_words if w in comment_words) / len(desc_words)
                if overlap >= 0.8 and len(desc_words) >= 2:
                    return True
                if sensitivity == "high" and overlap >= 0.6:
                    return True

    return False


def _outermost_starting_at(node: Node, start_byte: int) -> Node:
    current = node
    parent = current.parent
    while parent is not None and parent.type != "program" and parent.start_byte == start_byte:
        current = parent
        parent = current.parent
    return current


def _outermost_ending_before(node: Node, end_byte: int) -> Node:
    current = node
    parent = current.parent
    while parent is not None and parent.type != "program" and parent.end_byte <= end_byte:
        current = parent
        parent = current.parent
    return current


def is_trailing_comment(comment: Comment, source: SourceFile) -> bool:
    """Whether code precedes the comment on its first line."""
    before = source.get_token_before(comment)
    return before is not None and before.loc.end_line == comment.start_line


def find_adjacent_statement(comment: Comment, source: SourceFile) -> Node | None:
    """The statement a comment trails, or the one directly below it."""
    if is_trailing_comment(comment, source):
        before = source.get_token_before(comment)
        node = source.node_for_token(before)
        return _outermost_ending_before(node, before.end_byte)

    after = source.get_token_after(comment)
    if after is None or after.loc.start_line > comment.end_line + 1:
        return None
    node = source.node_for_token(after)
    return _outermost_starting_at(node, after.start_byte)


class ObviousCommentOptions(RuleOptions):
    sensitivity: Sensitivity = "medium"
    check_leading_comments: bool = True
    check_trailing_comments: bool = True
    ignore_patterns: list[str] = Field(default_factory=list)

    @field_validator("ignore_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return [compile_pattern(pattern) for pattern in value]


class ObviousCommentsRule(BaseRule):
    """Disallow comments that simply restate the code."""

    Options = ObviousCommentOptions

    messages = {
        "obviousComment": (
            "Comment '{{comment}}' appears to restate the code. "
            "Comments should explain 'why', not 'what'."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "no-obvious-comments"

    @property
    def name(self) -> str:
        return "Obvious Comments"

    @property
    def category(self) -> str:
        return "tech_debt"

    @property
    def description(self) -> str:
        return "Disallow comments that simply restate the code"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: ObviousCommentOptions = context.options
        ignore = [re.compile(p) for p in options.ignore_patterns]
        source = context.source

        def check_comment(comment: Comment) -> None:
            if comment.is_doc:
                return
            text = first_comment_line(comment)
            if is_exempt_from_obvious_check(text):
                return
            if any(pattern.search(text) for pattern in ignore):
                return

            trailing = is_trailing_comment(comment, source)
            if trailing and not options.check_trailing_comments:
                return
            if not trailing and not options.check_leading_comments:
                return

            described = describe_statement(find_adjacent_statement(comment, source), source)
            if described is None:
                return

            if is_obvious(text, described.descriptions(), options.sensitivity):
                shown = text[:47] + "..." if len(text) > 50 else text
                context.report("obviousComment", comment, data={"comment": shown})

        def check_program(_node) -> None:
            for comment in context.comments:
                check_comment(comment)

        return {"program": check_program}
