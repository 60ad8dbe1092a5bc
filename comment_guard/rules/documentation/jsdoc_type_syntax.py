"""
JSDoc type syntax rule.

Keeps the primitive type names inside `{...}` of doc comments in one
style: lowercase TypeScript primitives (`string`) or the capitalized
JSDoc wrappers (`String`). One finding is reported per comment; its fix
rewrites every inconsistent name in that comment.
"""

import re
from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from ...analysis.source import Comment
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor

TYPESCRIPT_TYPE_MAP = {
    "String": "string",
    "Number": "number",
    "Boolean": "boolean",
    "Symbol": "symbol",
    "BigInt": "bigint",
}
JSDOC_TYPE_MAP = {preferred: actual for actual, preferred in TYPESCRIPT_TYPE_MAP.items()}

TYPE_EXPRESSION = re.compile(r"\{([^}]+)\}")
TYPE_NAME = re.compile(r"\b([A-Za-z][A-Za-z0-9]*)\b")


class TypeSyntaxOptions(RuleOptions):
    """Options for jsdoc-type-syntax."""

    prefer: Literal["typescript", "jsdoc"] = "typescript"
    type_map: dict[str, str] = Field(default_factory=dict)


@dataclass(frozen=True)
class TypeReplacement:
    actual: str
    preferred: str
    start: int
    end: int


def find_replacements(value: str, type_map: dict[str, str]) -> list[TypeReplacement]:
    """Type names in `{...}` expressions that the map rewrites."""
    found = []
    for expression in TYPE_EXPRESSION.finditer(value):
        offset = expression.start(1)
        for name in TYPE_NAME.finditer(expression.group(1)):
            actual = name.group(1)
            preferred = type_map.get(actual)
            if preferred and preferred != actual:
                start, end = offset + name.start(1), offset + name.end(1)
                found.append(TypeReplacement(actual, preferred, start, end))
    return found


def rewrite_fix(comment: Comment, replacements: list[TypeReplacement]) -> TextEdit:
    value = comment.value
    for item in sorted(replacements, key=lambda r: r.start, reverse=True):
        value = value[: item.start] + item.preferred + value[item.end :]
    return TextEdit(comment.start, comment.end, f"/*{value}*/")


class JsdocTypeSyntaxRule(BaseRule):
    """Enforce consistent primitive type names in JSDoc."""

    Options = TypeSyntaxOptions

    messages = {
        "preferTypescriptType": "Use '{{preferred}}' instead of '{{actual}}' for type consistency.",
        "preferJsdocType": "Use '{{preferred}}' instead of '{{actual}}' for type consistency.",
    }

    @property
    def rule_id(self) -> str:
        return "jsdoc-type-syntax"

    @property
    def name(self) -> str:
        return "JSDoc Type Syntax"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Enforce consistent type syntax in JSDoc comments"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: TypeSyntaxOptions = context.options
        if options.prefer == "typescript":
            type_map = {**TYPESCRIPT_TYPE_MAP, **options.type_map}
            message_id = "preferTypescriptType"
        else:
            type_map = {**JSDOC_TYPE_MAP, **options.type_map}
            message_id = "preferJsdocType"

        def check_program(_node) -> None:
            for comment in context.comments:
                if not comment.is_doc:
                    continue
                replacements = find_replacements(comment.value, type_map)
                if not replacements:
                    continue
                first = replacements[0]
                context.report(
                    message_id,
                    comment,
                    data={"actual": first.actual, "preferred": first.preferred},
                    fix=rewrite_fix(comment, replacements),
                )

        return {"program": check_program}
