"""
TSDoc validation rule.

Validates the tags used in documentation of TypeScript declarations:
unknown and banned tags, `@typeParam` names against the declaration's
generic parameters, and `@remarks` on exported API.
"""

from pydantic import Field
from tree_sitter import Node

from ...analysis.doc_comments import (
    TYPE_PARAM_TAGS,
    find_attached_doc,
    is_known_tag,
    try_parse_doc_comment,
)
from ...analysis.functions import get_type_parameter_names
from ..base import BaseRule, RuleContext, RuleOptions, Visitor

DEFAULT_BAN_REASON = "This tag is not allowed."

DECLARATION_TYPES = (
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "class_declaration",
    "abstract_class_declaration",
    "class",
    "method_definition",
    "interface_declaration",
    "type_alias_declaration",
    "enum_declaration",
)


class BannedTag(RuleOptions):
    tag: str
    reason: str | None = None


class TsdocOptions(RuleOptions):
    """Options for valid-tsdoc."""

    require_type_param: bool = False
    allowed_tags: list[str] = Field(default_factory=list)
    banned_tags: list[str | BannedTag] = Field(default_factory=list)
    require_remarks: bool = False

    def banned_reasons(self) -> dict[str, str]:
        """Banned tag name -> reason shown in the message."""
        reasons = {}
        for entry in self.banned_tags:
            if isinstance(entry, str):
                reasons[entry] = DEFAULT_BAN_REASON
            else:
                reasons[entry.tag] = entry.reason or DEFAULT_BAN_REASON
        return reasons


def is_public_api(node: Node) -> bool:
    """Whether a declaration is exported, directly or through a variable."""
    parent = node.parent
    if parent is None:
        return False
    if parent.type == "export_statement":
        return True
    if parent.type == "variable_declarator":
        declaration = parent.parent
        return (
            declaration is not None
            and declaration.parent is not None
            and declaration.parent.type == "export_statement"
        )
    return False


class ValidTsdocRule(BaseRule):
    """Validate TSDoc-specific tags in TypeScript documentation."""

    Options = TsdocOptions

    messages = {
        "missingTypeParam": (
            "Generic type parameter '{{name}}' should be documented with @typeParam."
        ),
        "unknownTag": "Unknown documentation tag '@{{tag}}'. Use a standard JSDoc or TSDoc tag.",
        "bannedTag": "Tag '@{{tag}}' is not allowed. {{reason}}",
        "duplicateTypeParam": "Duplicate @typeParam for '{{name}}'.",
        "missingRemarks": "Public API should include @remarks section for detailed documentation.",
        "invalidTypeParamName": (
            "@typeParam '{{docName}}' does not match any type parameter. Available: {{available}}."
        ),
    }

    @property
    def rule_id(self) -> str:
        return "valid-tsdoc"

    @property
    def name(self) -> str:
        return "Valid TSDoc"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Validate TSDoc-specific tags in TypeScript documentation"

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: TsdocOptions = context.options
        source = context.source
        allowed = set(options.allowed_tags)
        banned = options.banned_reasons()

        def validate(node: Node) -> None:
            comment = find_attached_doc(node, source)
            if comment is None:
                return
            doc = try_parse_doc_comment(comment)
            if doc is None:
                return

            type_params = get_type_parameter_names(node, source)
            documented: set[str] = set()

            for tag in doc.tags:
                tag_name = tag.tag_name
                if tag_name in banned:
                    context.report(
                        "bannedTag", comment, data={"tag": tag_name, "reason": banned[tag_name]}
                    )
                    continue

                if not is_known_tag(tag_name) and tag_name not in allowed:
                    context.report("unknownTag", comment, data={"tag": tag_name})

                if tag_name not in TYPE_PARAM_TAGS or not tag.param_name:
                    continue

                if tag.param_name in documented:
                    context.report("duplicateTypeParam", comment, data={"name": tag.param_name})
                documented.add(tag.param_name)

                if type_params and tag.param_name not in type_params:
                    context.report(
                        "invalidTypeParamName",
                        comment,
                        data={"docName": tag.param_name, "available": ", ".join(type_params)},
                    )

            if options.require_type_param:
                for name in type_params:
                    if name not in documented:
                        context.report("missingTypeParam", comment, data={"name": name})

            if options.require_remarks and is_public_api(node) and not doc.has_tag("remarks"):
                context.report("missingRemarks", comment)

        return {node_type: validate for node_type in DECLARATION_TYPES}
