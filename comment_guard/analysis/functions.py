"""
Function and symbol queries over the tree-sitter syntax tree.

Provides parameter extraction for functions and methods, return-value
detection that stops at nested function and class boundaries, and
collection of the symbol names declared or imported in a file.
"""

from dataclasses import dataclass

from tree_sitter import Node

from .source import SourceFile

FUNCTION_NODE_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

CLASS_NODE_TYPES = frozenset({"class_declaration", "class", "abstract_class_declaration"})

# Nested scopes a return-value scan never enters
RETURN_SCAN_STOP_TYPES = FUNCTION_NODE_TYPES | CLASS_NODE_TYPES | {"class_body"}

MAX_SCAN_DEPTH = 512


@dataclass(frozen=True)
class ParameterDescriptor:
    """A formal parameter; position is its index in the declared list."""

    name: str
    position: int
    has_default: bool = False
    is_rest: bool = False


def _named_children(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != "comment"]


def get_parameter_list(function_node: Node) -> Node | None:
    """Return the formal_parameters node (or single arrow parameter)."""
    params = function_node.child_by_field_name("parameters")
    if params is None and function_node.type == "arrow_function":
        params = function_node.child_by_field_name("parameter")
    return params


def _describe(node: Node, source: SourceFile, position: int) -> ParameterDescriptor:
    node_type = node.type

    if node_type == "identifier":
        return ParameterDescriptor(source.node_text(node), position)

    if node_type == "assignment_pattern":
        left = node.child_by_field_name("left")
        inner = _describe(left, source, position) if left is not None else None
        name = inner.name if inner else "param"
        return ParameterDescriptor(name, position, has_default=True)

    if node_type == "rest_pattern":
        targets = _named_children(node)
        if targets and targets[0].type == "identifier":
            return ParameterDescriptor(source.node_text(targets[0]), position, is_rest=True)
        return ParameterDescriptor("args", position, is_rest=True)

    if node_type == "object_pattern":
        return ParameterDescriptor("options", position)

    if node_type == "array_pattern":
        return ParameterDescriptor("array", position)

    if node_type in ("required_parameter", "optional_parameter"):
        pattern = node.child_by_field_name("pattern")
        if pattern is None:
            return ParameterDescriptor("param", position)
        inner = _describe(pattern, source, position)
        has_default = inner.has_default or node.child_by_field_name("value") is not None
        return ParameterDescriptor(
            inner.name, position, has_default=has_default, is_rest=inner.is_rest
        )

    return ParameterDescriptor("param", position)


def get_function_parameters(
    function_node: Node, source: SourceFile
) -> list[ParameterDescriptor]:
    """Extract the ordered formal parameters of a function or method.

    Args:
        function_node: Function, arrow function or method_definition node
        source: SourceFile the node belongs to

    Returns:
        ParameterDescriptors in declaration order
    """
    params = get_parameter_list(function_node)
    if params is None:
        return []
    if params.type == "identifier":
        return [ParameterDescriptor(source.node_text(params), 0)]

    descriptors = []
    for child in _named_children(params):
        # TypeScript `this` parameters are not real arguments
        if child.type == "required_parameter":
            pattern = child.child_by_field_name("pattern")
            if pattern is not None and pattern.type == "this":
                continue
        descriptors.append(_describe(child, source, len(descriptors)))
    return descriptors


def function_returns_value(function_node: Node) -> bool:
    """Whether a function returns a value.

    An arrow function with an expression body always counts. Otherwise
    the body is scanned for a `return` carrying an argument, without
    entering nested functions or classes.
    """
    body = function_node.child_by_field_name("body")
    if body is None:
        return False
    if function_node.type == "arrow_function" and body.type != "statement_block":
        return True

    stack = [(child, 1) for child in body.children]
    while stack:
        node, depth = stack.pop()
        if node.type in RETURN_SCAN_STOP_TYPES:
            continue
        if node.type == "return_statement":
            if _named_children(node):
                return True
            continue
        if depth < MAX_SCAN_DEPTH:
            stack.extend((child, depth + 1) for child in node.children)
    return False


def get_type_parameter_names(node: Node, source: SourceFile) -> list[str]:
    """Names of the generic type parameters declared on a node."""
    type_params = node.child_by_field_name("type_parameters")
    if type_params is None:
        for child in node.named_children:
            if child.type == "type_parameters":
                type_params = child
                break
    if type_params is None:
        return []

    names = []
    for param in _named_children(type_params):
        if param.type != "type_parameter":
            continue
        name_node = param.child_by_field_name("name")
        if name_node is None and param.named_children:
            name_node = param.named_children[0]
        if name_node is not None:
            names.append(source.node_text(name_node))
    return names


def _collect_pattern_names(node: Node, source: SourceFile, names: set[str]) -> None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in ("identifier", "shorthand_property_identifier_pattern"):
            names.add(source.node_text(current))
            continue
        if current.type == "pair_pattern":
            value = current.child_by_field_name("value")
            if value is not None:
                stack.append(value)
            continue
        if current.type == "assignment_pattern":
            left = current.child_by_field_name("left")
            if left is not None:
                stack.append(left)
            continue
        if current.type == "object_assignment_pattern":
            left = current.child_by_field_name("left")
            if left is not None:
                stack.append(left)
            continue
        if current.type in ("required_parameter", "optional_parameter"):
            pattern = current.child_by_field_name("pattern")
            if pattern is not None:
                stack.append(pattern)
            continue
        stack.extend(current.named_children)


_NAMED_DECLARATIONS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "class_declaration",
        "abstract_class_declaration",
        "class",
        "method_definition",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
        "field_definition",
        "public_field_definition",
    }
)


def collect_declared_names(source: SourceFile) -> set[str]:
    """Collect every symbol name declared or imported in a file.

    Covers functions, methods, classes, variables (including
    destructuring), parameters, imports and TypeScript
    interface/type/enum declarations.
    """
    names: set[str] = set()

    for node in source.walk():
        node_type = node.type

        if node_type in _NAMED_DECLARATIONS:
            name_node = node.child_by_field_name("name")
            if name_node is None:
                name_node = node.child_by_field_name("property")
            if name_node is not None:
                names.add(source.node_text(name_node).lstrip("#"))

        elif node_type == "variable_declarator":
            name_node = node.child_by_field_name("name")
            if name_node is not None:
                _collect_pattern_names(name_node, source, names)

        elif node_type == "formal_parameters":
            _collect_pattern_names(node, source, names)

        elif node_type == "arrow_function":
            single = node.child_by_field_name("parameter")
            if single is not None:
                names.add(source.node_text(single))

        elif node_type == "catch_clause":
            param = node.child_by_field_name("parameter")
            if param is not None:
                _collect_pattern_names(param, source, names)

        elif node_type == "import_specifier":
            name_node = node.child_by_field_name("alias")
            if name_node is None:
                name_node = node.child_by_field_name("name")
            if name_node is not None:
                names.add(source.node_text(name_node))

        elif node_type == "import_clause":
            for child in node.named_children:
                if child.type == "identifier":
                    names.add(source.node_text(child))

        elif node_type == "namespace_import":
            for child in node.named_children:
                if child.type == "identifier":
                    names.add(source.node_text(child))

    return names
