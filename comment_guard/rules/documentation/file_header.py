"""
File header rule.

Requires a header comment at the top of each file, optionally after a
shebang line. The header must use the configured style and carry the
required tags (`@file` by default). A missing header is fixed by
inserting the style's template with `{filename}`, `{date}`, `{year}` and
`{author}` filled in.
"""

import datetime
import re
from typing import Literal

from pydantic import Field

from ...analysis.source import Comment, SourceFile, SourceRange
from ..base import BaseRule, RuleContext, RuleOptions, TextEdit, Visitor

HeaderStyle = Literal["jsdoc", "block", "line"]

DEFAULT_TEMPLATES = {
    "jsdoc": "/**\n * @file {filename}\n */",
    "block": "/*\n * @file {filename}\n */",
    "line": "// @file {filename}",
}

TAG_PATTERN = re.compile(r"@([a-zA-Z]+)")


class FileHeaderOptions(RuleOptions):
    """Options for require-file-header."""

    style: HeaderStyle = "jsdoc"
    required_tags: list[str] = Field(default_factory=lambda: ["@file"])
    template: str | None = None
    allow_shebang: bool = True
    max_lines_before_header: int = Field(default=0, ge=0)


def comment_style(comment: Comment) -> str:
    if not comment.is_block:
        return "line"
    return "jsdoc" if comment.is_doc else "block"


def render_template(template: str, filename: str, today: datetime.date) -> str:
    return (
        template.replace("{filename}", filename)
        .replace("{date}", today.isoformat())
        .replace("{year}", str(today.year))
        .replace("{author}", "[Author]")
    )


def has_shebang(source: SourceFile) -> bool:
    return bool(source.lines) and source.lines[0].startswith("#!")


class RequireFileHeaderRule(BaseRule):
    """Require a header comment at the top of each file."""

    Options = FileHeaderOptions

    messages = {
        "missingHeader": "File is missing a header comment.",
        "missingTag": "File header is missing required tag '{{tag}}'.",
        "invalidHeaderStyle": "File header should use {{expected}} style, not {{actual}}.",
        "headerTooFarFromStart": "File header must be within the first {{max}} lines.",
    }

    @property
    def rule_id(self) -> str:
        return "require-file-header"

    @property
    def name(self) -> str:
        return "Require File Header"

    @property
    def category(self) -> str:
        return "documentation"

    @property
    def description(self) -> str:
        return "Require a header comment at the top of each file"

    @property
    def fixable(self) -> bool:
        return True

    def create(self, context: RuleContext) -> dict[str, Visitor]:
        options: FileHeaderOptions = context.options
        source = context.source
        shebang = options.allow_shebang and has_shebang(source)
        expected_line = 2 if shebang else 1

        def candidates() -> list[Comment]:
            return [c for c in context.comments if not (shebang and c.start_line == 1)]

        def line_header() -> list[Comment]:
            """Consecutive line comments starting near the top."""
            found: list[Comment] = []
            for comment in candidates():
                if comment.is_block:
                    continue
                if not found:
                    if comment.start_line > expected_line + options.max_lines_before_header:
                        break
                    found.append(comment)
                elif comment.start_line == found[-1].end_line + 1:
                    found.append(comment)
                else:
                    break
            return found

        def insert_fix() -> TextEdit:
            filename = source.file_path.name if source.file_path else "<input>"
            template = options.template or DEFAULT_TEMPLATES[options.style]
            header = render_template(template, filename, datetime.date.today()) + "\n\n"
            if not shebang:
                return TextEdit(0, 0, header)
            if len(source.lines) > 1:
                start = source.offset_of_line(2)
                return TextEdit(start, start, header)
            end = len(source.content)
            return TextEdit(end, end, "\n" + header)

        def check_program(_node) -> None:
            if options.style == "line":
                header = line_header()
            else:
                header = candidates()[:1]

            if not header:
                loc = SourceRange(expected_line, 0, expected_line, 0)
                context.report("missingHeader", loc, fix=insert_fix())
                return

            first, last = header[0], header[-1]
            loc = SourceRange(
                first.loc.start_line, first.loc.start_column, last.loc.end_line, last.loc.end_column
            )
            max_line = expected_line + options.max_lines_before_header
            if first.start_line > max_line:
                context.report(
                    "headerTooFarFromStart",
                    loc,
                    data={"max": options.max_lines_before_header + 1},
                )
                return

            actual = comment_style(first)
            if options.style != "line" and actual != options.style:
                context.report(
                    "invalidHeaderStyle", loc, data={"expected": options.style, "actual": actual}
                )

            text = "\n".join(comment.value for comment in header)
            tags = {f"@{name}" for name in TAG_PATTERN.findall(text)}
            for tag in options.required_tags:
                if tag not in tags:
                    context.report("missingTag", loc, data={"tag": tag})

        return {"program": check_program}
