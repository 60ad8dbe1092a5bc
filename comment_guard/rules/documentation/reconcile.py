"""
Reconciliation of a parsed doc comment against a function signature.

`reconcile` compares the `@param`/`@returns` tags of a ParsedDocComment
with the function's formal parameters and return behaviour and returns
the findings in a fixed order:

1. duplicate `@param` names
2. missing and extra names (checkParamNames)
3. order mismatches (checkParamOrder)
4. type/description policy for params, then returns
5. missing (or, when enabled, unnecessary) `@returns`

It is a pure function of its inputs; fixes are built separately from
the comment text.
"""

import re
from dataclasses import dataclass, field

from ...analysis.doc_comments import DocTag, ParsedDocComment
from ...analysis.functions import ParameterDescriptor
from ...analysis.source import Comment
from ..base import RuleOptions, TextEdit

DECORATION_PREFIX = re.compile(r"^\s*\*")


class JsdocOptions(RuleOptions):
    """Options for valid-jsdoc."""

    require_param_description: bool = False
    require_return_description: bool = False
    require_param_type: bool = True
    require_return_type: bool = True
    check_param_names: bool = True
    check_param_order: bool = True
    check_unnecessary_returns: bool = False


@dataclass(frozen=True)
class DocFinding:
    """One reconciliation result, before it is reported."""

    message_id: str
    data: dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.data.get("name")


def _first_positions(names: list[str | None]) -> dict[str, int]:
    """Map each name to the index of its first occurrence."""
    positions: dict[str, int] = {}
    for index, name in enumerate(names):
        if name is not None and name not in positions:
            positions[name] = index
    return positions


def find_duplicates(param_tags: list[DocTag]) -> list[DocFinding]:
    findings = []
    seen: set[str] = set()
    for tag in param_tags:
        if tag.param_name is None:
            continue
        if tag.param_name in seen:
            findings.append(DocFinding("duplicateParam", {"name": tag.param_name}))
        seen.add(tag.param_name)
    return findings


def find_order_mismatches(
    doc_positions: dict[str, int], formal_positions: dict[str, int]
) -> list[DocFinding]:
    """Report parameters whose relative order differs between doc and signature.

    Only names present in both are compared, each side indexed in its own
    order, so a tag missing on one side never shifts the others.
    """
    formal_common = [n for n in formal_positions if n in doc_positions]
    doc_common = sorted(
        (n for n in doc_positions if n in formal_positions),
        key=lambda n: doc_positions[n],
    )
    doc_rank = {name: rank for rank, name in enumerate(doc_common)}

    findings = []
    for rank, name in enumerate(formal_common):
        if doc_rank[name] != rank:
            findings.append(
                DocFinding(
                    "paramOrderMismatch",
                    {
                        "name": name,
                        "expected": str(formal_positions[name] + 1),
                        "actual": str(doc_positions[name] + 1),
                    },
                )
            )
    return findings


def reconcile(
    doc: ParsedDocComment,
    params: list[ParameterDescriptor],
    returns_value: bool,
    options: JsdocOptions,
) -> list[DocFinding]:
    """Reconcile a doc comment with a function signature.

    Args:
        doc: Parsed doc comment
        params: Formal parameters in declaration order
        returns_value: Whether the function returns a value
        options: Checks to run

    Returns:
        DocFindings in check order
    """
    param_tags = doc.param_tags
    return_tags = doc.return_tags

    findings = find_duplicates(param_tags)

    doc_positions = _first_positions([t.param_name for t in param_tags])
    formal_positions = _first_positions([p.name for p in params])

    if options.check_param_names:
        for name in formal_positions:
            if name not in doc_positions:
                findings.append(DocFinding("missingParam", {"name": name}))
        for name in doc_positions:
            if name not in formal_positions:
                findings.append(DocFinding("extraParam", {"name": name}))

    if options.check_param_order:
        findings.extend(find_order_mismatches(doc_positions, formal_positions))

    for tag in param_tags:
        name = tag.param_name or ""
        if options.require_param_type and not tag.type_text:
            findings.append(DocFinding("missingParamType", {"name": name}))
        if options.require_param_description and not tag.description:
            findings.append(DocFinding("missingParamDescription", {"name": name}))

    for tag in return_tags:
        if options.require_return_type and not tag.type_text:
            findings.append(DocFinding("missingReturnType"))
        if options.require_return_description and not tag.description:
            findings.append(DocFinding("missingReturnDescription"))

    if returns_value and not return_tags:
        findings.append(DocFinding("missingReturns"))
    elif options.check_unnecessary_returns and not returns_value and return_tags:
        findings.append(DocFinding("unnecessaryReturns"))

    return findings


def _insert_doc_line(comment: Comment, tag_line: str, before_returns: bool) -> TextEdit:
    lines = comment.value.split("\n")

    if len(lines) == 1:
        # Expand `/** summary */` into a multi-line block
        body = lines[0][1:].strip()
        indent = " " * comment.loc.start_column
        parts = [f"{indent} * {body}"] if body else []
        new_line = f"{indent} * {tag_line}"
        if before_returns and "@return" in body:
            parts.insert(0, new_line)
        else:
            parts.append(new_line)
        replacement = "\n".join(["/**", *parts, f"{indent} */"])
        return TextEdit(comment.start, comment.end, replacement)

    insert_at = len(lines) - 1
    if before_returns:
        for index, line in enumerate(lines):
            if "@returns" in line or "@return" in line:
                insert_at = index
                break

    match = DECORATION_PREFIX.match(lines[1])
    indent = match.group(0) if match else " *"
    lines.insert(insert_at, f"{indent} {tag_line}")
    return TextEdit(comment.start, comment.end, "/*" + "\n".join(lines) + "*/")


def missing_param_fix(comment: Comment, name: str) -> TextEdit:
    """Insert `@param {*} name - [description]` before the returns tag."""
    return _insert_doc_line(comment, f"@param {{*}} {name} - [description]", True)


def missing_returns_fix(comment: Comment) -> TextEdit:
    """Append `@returns {*} [description]` as the last body line."""
    return _insert_doc_line(comment, "@returns {*} [description]", False)
