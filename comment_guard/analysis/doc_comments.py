"""
Parsing of JSDoc/TSDoc comments into ordered tag lists.

A doc comment is parsed into a ParsedDocComment holding one DocTag per
`@tag` occurrence, in order of appearance. Tag syntax that cannot be
parsed (an unclosed `{type}` or `[name]`) raises DocCommentSyntaxError;
callers treat that as "no doc comment present".
"""

import re
from dataclasses import dataclass

from tree_sitter import Node

from .source import Comment, SourceFile

PARAM_TAGS = frozenset({"param", "arg", "argument"})
RETURN_TAGS = frozenset({"returns", "return"})
TYPE_PARAM_TAGS = frozenset({"typeParam", "template"})

TSDOC_TAGS = frozenset(
    {
        "typeParam",
        "remarks",
        "defaultValue",
        "privateRemarks",
        "sealed",
        "virtual",
        "override",
        "eventProperty",
        "beta",
        "alpha",
        "public",
        "internal",
        "packageDocumentation",
        "decorator",
        "inheritDoc",
        "label",
        "link",
    }
)

JSDOC_TAGS = frozenset(
    {
        "param", "parameter", "arg", "argument",
        "returns", "return",
        "type", "typedef",
        "property", "prop",
        "callback",
        "template",
        "class", "constructor",
        "extends", "augments",
        "implements",
        "private", "protected", "public",
        "static",
        "readonly",
        "abstract",
        "async",
        "generator",
        "global",
        "inner",
        "instance",
        "memberof",
        "module",
        "namespace",
        "requires",
        "see",
        "since",
        "throws", "exception",
        "todo",
        "deprecated",
        "example",
        "file", "fileoverview", "overview",
        "author",
        "version",
        "license",
        "copyright",
        "ignore",
        "enum",
        "event",
        "fires", "emits",
        "listens",
        "exports",
        "external", "host",
        "function", "func", "method",
        "var", "member",
        "constant", "const",
        "default", "defaultvalue",
        "description", "desc",
        "kind",
        "lends",
        "name",
        "summary",
        "this",
        "variation",
        "yields", "yield",
    }
)

TAG_LINE = re.compile(r"^@([A-Za-z][\w-]*)\s*(.*)$")
LEADING_DECORATION = re.compile(r"^\s*\*\s?")


class DocCommentSyntaxError(ValueError):
    """Raised for tag syntax the parser cannot make sense of."""


@dataclass(frozen=True)
class DocTag:
    """One `@tag` occurrence inside a doc comment."""

    tag_name: str
    param_name: str | None
    type_text: str | None
    description: str | None
    source_position: int
    line_index: int = 0
    optional: bool = False
    default: str | None = None


@dataclass(frozen=True)
class ParsedDocComment:
    """Ordered tags of one doc comment. Never mutated after construction."""

    tags: tuple[DocTag, ...]
    raw_body: str
    description: str = ""

    @property
    def param_tags(self) -> list[DocTag]:
        return [t for t in self.tags if t.tag_name in PARAM_TAGS]

    @property
    def return_tags(self) -> list[DocTag]:
        return [t for t in self.tags if t.tag_name in RETURN_TAGS]

    @property
    def type_param_tags(self) -> list[DocTag]:
        return [t for t in self.tags if t.tag_name in TYPE_PARAM_TAGS]

    def has_tag(self, tag_name: str) -> bool:
        return any(t.tag_name == tag_name for t in self.tags)


def is_known_tag(tag_name: str) -> bool:
    """Whether a tag belongs to the JSDoc or TSDoc vocabulary."""
    return tag_name in JSDOC_TAGS or tag_name in TSDOC_TAGS


def clean_doc_lines(value: str) -> list[str]:
    """Strip `*` decoration from each line of a doc comment body."""
    lines = value.split("\n")
    cleaned = []
    for index, line in enumerate(lines):
        if index == 0 and line.startswith("*"):
            line = line[1:]
        else:
            line = LEADING_DECORATION.sub("", line)
        cleaned.append(line.strip())
    return cleaned


def _split_type(rest: str) -> tuple[str | None, str]:
    if not rest.startswith("{"):
        return None, rest
    depth = 0
    for index, char in enumerate(rest):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                type_text = rest[1:index].strip()
                return type_text or None, rest[index + 1 :].lstrip()
    raise DocCommentSyntaxError(f"Unclosed type expression: {rest}")


def _split_name(rest: str) -> tuple[str | None, bool, str | None, str]:
    """Split `[name=default]` or `name` off the front of a tag body."""
    if not rest:
        return None, False, None, ""
    if rest.startswith("["):
        close = rest.find("]")
        if close == -1:
            raise DocCommentSyntaxError(f"Unclosed optional name: {rest}")
        inner = rest[1:close].strip()
        name, _, default = inner.partition("=")
        return name.strip() or None, True, default.strip() or None, rest[close + 1 :]
    parts = rest.split(None, 1)
    return parts[0], False, None, parts[1] if len(parts) > 1 else ""


def _clean_description(text: str) -> str | None:
    text = text.strip()
    if text.startswith("-"):
        text = text[1:].strip()
    return text or None


def _build_tag(
    tag_name: str, rest: str, position: int, line_index: int
) -> DocTag:
    if tag_name in PARAM_TAGS or tag_name in TYPE_PARAM_TAGS:
        type_text, remainder = _split_type(rest)
        name, optional, default, remainder = _split_name(remainder)
        return DocTag(
            tag_name=tag_name,
            param_name=name,
            type_text=type_text,
            description=_clean_description(remainder),
            source_position=position,
            line_index=line_index,
            optional=optional,
            default=default,
        )

    if tag_name in RETURN_TAGS:
        type_text, remainder = _split_type(rest)
        return DocTag(
            tag_name=tag_name,
            param_name=None,
            type_text=type_text,
            description=_clean_description(remainder),
            source_position=position,
            line_index=line_index,
        )

    return DocTag(
        tag_name=tag_name,
        param_name=None,
        type_text=None,
        description=rest.strip() or None,
        source_position=position,
        line_index=line_index,
    )


def parse_doc_comment(value: str) -> ParsedDocComment:
    """Parse the body of a `/** ... */` comment.

    Args:
        value: Comment text without the `/*` and `*/` delimiters

    Returns:
        ParsedDocComment with tags in order of appearance

    Raises:
        DocCommentSyntaxError: If a tag's type or name cannot be parsed
    """
    lines = clean_doc_lines(value)

    # Collect (tag_name, body, line_index) first so continuation lines join
    raw_tags: list[list] = []
    description_lines: list[str] = []
    for line_index, line in enumerate(lines):
        match = TAG_LINE.match(line)
        if match:
            raw_tags.append([match[1], match[2], line_index])
        elif raw_tags:
            if line:
                raw_tags[-1][1] = f"{raw_tags[-1][1]} {line}".strip()
        elif line:
            description_lines.append(line)

    tags = tuple(
        _build_tag(tag_name, body, position, line_index)
        for position, (tag_name, body, line_index) in enumerate(raw_tags)
    )
    return ParsedDocComment(
        tags=tags,
        raw_body=value,
        description=" ".join(description_lines),
    )


def try_parse_doc_comment(comment: Comment) -> ParsedDocComment | None:
    """Parse a doc comment, or None if it is not one or is malformed."""
    if not comment.is_doc:
        return None
    try:
        return parse_doc_comment(comment.value)
    except DocCommentSyntaxError:
        return None


def find_doc_comment(node: Node, source: SourceFile) -> Comment | None:
    """Find the doc comment attached to a node.

    The closest `/** */` comment directly before the node (no token in
    between) that ends at most one line above it.
    """
    node_line = node.start_point[0] + 1
    for comment in reversed(source.get_comments_before(node)):
        if comment.is_doc and node_line - comment.end_line <= 1:
            return comment
    return None


# Wrappers whose leading doc comment belongs to the declaration they hold
DOC_OWNER_TYPES = frozenset(
    {
        "export_statement",
        "variable_declarator",
        "lexical_declaration",
        "variable_declaration",
        "field_definition",
        "public_field_definition",
    }
)


def find_attached_doc(node: Node, source: SourceFile) -> Comment | None:
    """The doc comment of a declaration, looking through wrappers.

    `export function f() {}`, `const f = () => {}` and the class field
    `run = () => {}` carry their doc comment before the whole statement.
    """
    current: Node | None = node
    while current is not None:
        comment = find_doc_comment(current, source)
        if comment is not None:
            return comment
        parent = current.parent
        if parent is None or parent.type not in DOC_OWNER_TYPES:
            return None
        current = parent
    return None
