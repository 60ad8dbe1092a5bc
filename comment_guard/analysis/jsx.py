"""
JSX element queries shared by the accessibility rules.

Works on the tree-sitter JavaScript and TSX grammars, where an element
is either a `jsx_element` (opening tag, children, closing tag) or a
`jsx_self_closing_element`.
"""

from collections.abc import Callable

from tree_sitter import Node

from .source import COMMENT_NODE_TYPES, Comment, SourceFile

JSX_ELEMENT_TYPES = ("jsx_element", "jsx_self_closing_element")

JSX_LANGUAGES = ["javascript", "tsx"]

# Attribute value that is only known at runtime, e.g. role={kind}
DYNAMIC = object()

# Sibling JSX comments this far back still explain an element
SIBLING_COMMENT_REACH = 2


def opening_tag(element: Node) -> Node | None:
    """The node holding an element's name and attributes."""
    if element.type == "jsx_self_closing_element":
        return element
    tag = element.child_by_field_name("open_tag")
    if tag is not None:
        return tag
    for child in element.named_children:
        if child.type == "jsx_opening_element":
            return child
    return None


def element_name(element: Node, source: SourceFile) -> str:
    """Tag name; `Icons.Close` yields "Close"."""
    tag = opening_tag(element)
    if tag is None:
        return ""
    name = tag.child_by_field_name("name")
    if name is None:
        return ""
    return source.node_text(name).rsplit(".", 1)[-1]


def _attributes(element: Node) -> list[Node]:
    tag = opening_tag(element)
    if tag is None:
        return []
    return [child for child in tag.named_children if child.type == "jsx_attribute"]


def _attribute_name(attribute: Node, source: SourceFile) -> str:
    return source.node_text(attribute.named_children[0]) if attribute.named_child_count else ""


def find_attribute(element: Node, name: str, source: SourceFile) -> Node | None:
    for attribute in _attributes(element):
        if _attribute_name(attribute, source) == name:
            return attribute
    return None


def _literal(node: Node, source: SourceFile):
    text = source.node_text(node)
    if node.type == "string":
        return text[1:-1]
    if node.type == "number":
        return text
    if node.type == "true":
        return True
    if node.type == "false":
        return False
    if node.type == "unary_expression" and text.startswith("-"):
        argument = node.child_by_field_name("argument")
        if argument is not None and argument.type == "number":
            return "-" + source.node_text(argument)
    return DYNAMIC


def attribute_value(element: Node, name: str, source: SourceFile):
    """Static value of a JSX attribute.

    Returns None when the attribute is absent, True for a bare attribute
    (`<div hidden>`), the string or boolean for literal values, and
    DYNAMIC for any other expression.
    """
    attribute = find_attribute(element, name, source)
    if attribute is None:
        return None
    values = attribute.named_children[1:]
    if not values:
        return True
    value = values[0]
    if value.type == "jsx_expression":
        inner = [child for child in value.named_children if child.type not in COMMENT_NODE_TYPES]
        return _literal(inner[0], source) if len(inner) == 1 else DYNAMIC
    return _literal(value, source)


def is_comment_container(node: Node) -> bool:
    """`{/* ... */}` inside JSX children."""
    return (
        node.type == "jsx_expression"
        and node.named_child_count > 0
        and all(child.type in COMMENT_NODE_TYPES for child in node.named_children)
    )


def _comments_inside(node: Node, source: SourceFile) -> list[Comment]:
    start, end = source.node_range(node)
    return [c for c in source.get_all_comments() if c.start >= start and c.end <= end]


def comments_near(element: Node, source: SourceFile) -> list[Comment]:
    """Comments that can explain an element.

    Leading comments of the element or of the `{...}` around it, plus
    JSX comments among the closest preceding siblings.
    """
    comments = list(source.get_comments_before(element))
    parent = element.parent
    if parent is not None and parent.type == "jsx_expression":
        comments.extend(source.get_comments_before(parent))

    if parent is not None and parent.type == "jsx_element":
        siblings = [
            child
            for child in parent.named_children
            if child.type not in ("jsx_opening_element", "jsx_closing_element")
            and child.type not in COMMENT_NODE_TYPES
        ]
        index = next(i for i, child in enumerate(siblings) if child.id == element.id)
        for sibling in reversed(siblings[max(index - SIBLING_COMMENT_REACH, 0) : index]):
            if is_comment_container(sibling):
                comments.extend(_comments_inside(sibling, source))
    return comments


def has_explaining_comment(
    element: Node,
    source: SourceFile,
    min_length: int,
    excluded: Callable[[str], bool],
) -> bool:
    """Whether a nearby comment is long enough and not filtered out."""
    for comment in comments_near(element, source):
        text = comment.value.strip()
        if len(text) >= min_length and not excluded(text):
            return True
    return False


def has_visible_text(element: Node, source: SourceFile) -> bool:
    """Literal text anywhere among the element's children."""
    if element.type != "jsx_element":
        return False
    for child in element.named_children:
        if child.type == "jsx_text" and source.node_text(child).strip():
            return True
        if child.type == "jsx_element" and has_visible_text(child, source):
            return True
    return False
