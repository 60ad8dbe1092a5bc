"""
Require JSDoc comments on exported functions and classes.

Covers `export function`, `export const f = () => {}`, `export default`,
exported classes and their methods, and CommonJS `module.exports` /
`exports.name` assignments. The fix inserts a template doc comment with
one `@param` line per parameter and `@returns` when the function returns
a value.
"""

import re

from pydantic import Field
from tree_sitter import Node

from ...analysis.doc_comments import find_doc_comment
from ...analysis.functions import (
    CLASS_NODE_TYPES,
    ParameterDescriptor,
    function_returns_value,
    get_function_parameters,
)
from ...analysis.source import SourceFile
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor

FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
FUNCTION_EXPRESSION_TYPES = frozenset({"function_expression", "function", "generator_function"})
VARIABLE_DECLARATION_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
# module.exports, module.exports.name, exports.name
MODULE_EXPORT_TARGET = re.compile(r"^(module\.exports|(module\.)?exports\.[A-Za-z_\$][\w\$]*)$")


class RequireTargets(RuleOptions):
    """Which exported constructs need a doc comment."""

    function_declaration: bool = Field(default=True, alias="FunctionDeclaration")
    arrow_function_expression: bool = Field(default=True, alias="ArrowFunctionExpression")
    function_expression: bool = Field(default=True, alias="FunctionExpression")
    class_declaration: bool = Field(default=True, alias="ClassDeclaration")
    method_definition: bool = Field(default=True, alias="MethodDefinition")


class RequireJsdocOptions(RuleOptions):
    """Options for require-jsdoc."""

    require: RequireTargets = Field(default_factory=RequireTargets)
    exempt_empty_functions: bool = False
    min_line_count: int = Field(default=0, ge=0)


def param_line(param: ParameterDescriptor) -> str:
    if param.is_rest:
        return f"@param {{...*}} {param.name} - [description]"
    if param.has_default:
        return f"@param {{*}} [{param.name}] - [description]"
    return f"@param {{*}} {param.name} - [description]"


def jsdoc_template(node: Node, source: SourceFile, indent: str) -> str:
    """A placeholder doc comment for a function or class."""
    body = ["[Description]"]
    if node.type not in CLASS_NODE_TYPES:
        body += [param_line(p) for p in get_function_parameters(node, source)]
        if function_returns_value(node):
            body.append("@returns {*} [description]")
    lines = [f"{indent}/**"] + [f"{indent} * {line}" for line in body] + [f"{indent} */"]
    return "\n".join(lines) + "\n"


def exported_name(left: Node, source: SourceFile) -> str | None:
    """`name` from `exports.name` or `module.exports.name`."""
    target = left.child_by_field_name("object")
    prop = left.child_by_field_name("property")
    if target is None or prop is None:
        return None
    if target.type == "member_expression" or source.node_text(target) == "exports":
        return source.node_text(prop).strip("'\"")
    return None


def is_module_export(left: Node, source: SourceFile) -> bool:
    return bool(MODULE_EXPORT_TARGET.match(re.sub(r"\s+", "", source.node_text(left))))


class RequireJsdocRule(BaseRule):
    """Require JSDoc comments for exported functions."""

    Options = RequireJsdocOptions

    messages = {
        "missingJSDoc": "Exported function '{{name}}' requires a JSDoc comment.",
        "missingJSDocDefault": "Default exported function requires a JSDoc comment.",
        "missingJSDocAnonymous": "Exported anonymous function requires a JSDoc comment.",
        "missingJSDocMethod": "Exported method '{{name}}' requires a JSDoc comment.",
        "missingJSDocClass": "Exported class '{{name}}' requires a JSDoc comment.",
    }

    @property
    def rule_id(self) -> str:
        return "require-jsdoc"

    @property
    def name(self) -> str:
        return "Require JSDoc"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Require JSDoc comments for exported functions"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: RequireJsdocOptions = context.options
        require = options.require
        source = context.source

        def skipped(function: Node) -> bool:
            if options.exempt_empty_functions:
                body = function.child_by_field_name("body")
                if body is not None and body.type == "statement_block":
                    if not [c for c in body.named_children if c.type != "comment"]:
                        return True
            lines = function.end_point[0] - function.start_point[0] + 1
            return 0 < options.min_line_count and lines < options.min_line_count

        def template_fix(anchor: Node, documented: Node) -> TextEdit:
            line = anchor.start_point[0] + 1
            text = source.lines[line - 1]
            indent = text[: len(text) - len(text.lstrip())]
            start = source.offset_of_line(line)
            return TextEdit(start, start, jsdoc_template(documented, source, indent))

        def report(anchor: Node, documented: Node, message_id: str, name: str | None = None):
            if find_doc_comment(anchor, source) is not None:
                return
            data = {"name": name} if name is not None else None
            context.report(message_id, anchor, data=data, fix=template_fix(anchor, documented))

        def check_class(anchor: Node, klass: Node, with_methods: bool) -> None:
            if require.class_declaration:
                name = klass.child_by_field_name("name")
                label = source.node_text(name) if name is not None else "anonymous"
                report(anchor, klass, "missingJSDocClass", label)
            if not (with_methods and require.method_definition):
                return
            body = klass.child_by_field_name("body")
            for member in body.named_children if body is not None else []:
                if member.type != "method_definition" or skipped(member):
                    continue
                key = member.child_by_field_name("name")
                label = source.node_text(key).strip("'\"") if key is not None else "anonymous"
                report(member, member, "missingJSDocMethod", label)

        def check_variables(anchor: Node, declaration: Node) -> None:
            for declarator in declaration.named_children:
                if declarator.type != "variable_declarator":
                    continue
                value = declarator.child_by_field_name("value")
                if value is None or not wanted_expression(value) or skipped(value):
                    continue
                name = declarator.child_by_field_name("name")
                label = source.node_text(name) if name is not None else "anonymous"
                report(anchor, value, "missingJSDoc", label)

        def wanted_expression(node: Node) -> bool:
            if node.type == "arrow_function":
                return require.arrow_function_expression
            return node.type in FUNCTION_EXPRESSION_TYPES and require.function_expression

        def check_default(node: Node, exported: Node) -> None:
            if exported.type in FUNCTION_DECLARATION_TYPES:
                if require.function_declaration and not skipped(exported):
                    name = exported.child_by_field_name("name")
                    if name is not None:
                        report(node, exported, "missingJSDoc", source.node_text(name))
                    else:
                        report(node, exported, "missingJSDocDefault")
            elif exported.type in CLASS_NODE_TYPES:
                check_class(node, exported, with_methods=False)
            elif wanted_expression(exported) and not skipped(exported):
                report(node, exported, "missingJSDocDefault")

        def check_export(node: Node) -> None:
            declaration = node.child_by_field_name("declaration")
            if any(child.type == "default" for child in node.children):
                exported = declaration or node.child_by_field_name("value")
                if exported is not None:
                    check_default(node, exported)
                return
            if declaration is None:
                return
            if declaration.type in FUNCTION_DECLARATION_TYPES:
                if not require.function_declaration or skipped(declaration):
                    return
                name = declaration.child_by_field_name("name")
                if name is not None:
                    report(node, declaration, "missingJSDoc", source.node_text(name))
                else:
                    report(node, declaration, "missingJSDocAnonymous")
            elif declaration.type in CLASS_NODE_TYPES:
                check_class(node, declaration, with_methods=True)
            elif declaration.type in VARIABLE_DECLARATION_TYPES:
                check_variables(node, declaration)

        def check_assignment(node: Node) -> None:
            left = node.child_by_field_name("left")
            right = node.child_by_field_name("right")
            if left is None or right is None or left.type != "member_expression":
                return
            if not is_module_export(left, source):
                return
            if not wanted_expression(right) or skipped(right):
                return
            statement = node
            if node.parent is not None and node.parent.type == "expression_statement":
                statement = node.parent
            name = exported_name(left, source)
            if name:
                report(statement, right, "missingJSDoc", name)
            else:
                report(statement, right, "missingJSDocDefault")

        return {
            "export_statement": check_export,
            "assignment_expression": check_assignment,
        }
