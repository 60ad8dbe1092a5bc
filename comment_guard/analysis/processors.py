"""Processors that pull lintable code out of non-JS files.

A processor turns a Vue, Svelte or Markdown file into one or more
CodeBlocks. Script and fenced-code blocks are the original text with
everything outside the block blanked to spaces, so lines, columns and
fix ranges line up with the original file unchanged. HTML comments from
templates become a synthetic block of line comments, one per comment;
findings there are moved back onto the HTML comment and lose their fix.
"""

import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from ..presets import PLUGIN_NAME
from .source import SourceRange

if TYPE_CHECKING:
    from ..rules.base import Violation

logger = logging.getLogger(__name__)

HTML_COMMENT_PATTERN = re.compile(r"<!--(.*?)-->", re.DOTALL)
SCRIPT_PATTERN = re.compile(r"<script([^>]*)>(.*?)</script>", re.DOTALL | re.IGNORECASE)
STYLE_PATTERN = re.compile(r"<style[^>]*>.*?</style>", re.DOTALL | re.IGNORECASE)
# Outermost template; nested <template v-if> blocks stay inside it
VUE_TEMPLATE_PATTERN = re.compile(r"<template[^>]*>(.*)</template>", re.DOTALL)
SCRIPT_LANG_PATTERN = re.compile(r"""\blang\s*=\s*["']?(\w+)""")
FENCE_PATTERN = re.compile(r"```(\w+)?[^\n]*\n(.*?)```", re.DOTALL)

SCRIPT_LANGUAGES = {"ts": "typescript", "typescript": "typescript", "tsx": "tsx"}

FENCE_LANGUAGES = {
    "js": "javascript",
    "javascript": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
}


def position_of(text: str, offset: int) -> tuple[int, int]:
    """1-based line and 0-based column of a character offset."""
    line_start = text.rfind("\n", 0, offset) + 1
    return text.count("\n", 0, offset) + 1, offset - line_start


def mask_outside(text: str, start: int, end: int) -> str:
    """Blank every character outside [start, end) except line breaks."""

    def blank(part: str) -> str:
        return re.sub(r"[^\r\n]", " ", part)

    return blank(text[:start]) + text[start:end] + blank(text[end:])


@dataclass(frozen=True)
class CodeBlock:
    """A piece of a processed file, parsed and linted on its own.

    Attributes:
        text: Source handed to the parser.
        language: Grammar name for the parser.
        label: Prefix added to every message from this block.
        origins: For synthetic blocks, the original range of each line.
            None when the block is position-aligned with the file.
    """

    text: str
    language: str = "javascript"
    label: str | None = None
    origins: tuple[SourceRange, ...] | None = None

    def adopt(self, violation: "Violation") -> "Violation":
        """Rewrite a finding from this block in terms of the original file."""
        changes: dict = {}
        if self.label:
            changes["message"] = f"{self.label} {violation.message}"
        if self.origins is not None:
            index = min(max(violation.line - 1, 0), len(self.origins) - 1)
            changes["loc"] = self.origins[index]
            changes["fix"] = None
        return replace(violation, **changes) if changes else violation


class Processor:
    """Splits one kind of file into CodeBlocks."""

    name: str = ""
    SUPPORTED_EXTENSIONS: list[str] = []

    def can_handle(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.SUPPORTED_EXTENSIONS

    def blocks(self, text: str) -> list[CodeBlock]:
        raise NotImplementedError

    def _script_blocks(self, text: str) -> list[CodeBlock]:
        found = []
        for match in SCRIPT_PATTERN.finditer(text):
            lang = SCRIPT_LANG_PATTERN.search(match.group(1))
            tag = lang.group(1).lower() if lang else ""
            language = SCRIPT_LANGUAGES.get(tag, "javascript")
            found.append(CodeBlock(mask_outside(text, match.start(2), match.end(2)), language))
        return found

    def _comment_block(
        self, text: str, spans: list[tuple[int, int]], label: str
    ) -> list[CodeBlock]:
        """One synthetic line comment per HTML comment inside the spans."""
        lines: list[str] = []
        origins: list[SourceRange] = []
        for span_start, span_end in spans:
            for match in HTML_COMMENT_PATTERN.finditer(text, span_start, span_end):
                start_line, start_column = position_of(text, match.start())
                end_line, end_column = position_of(text, match.end())
                lines.append(f"// {' '.join(match.group(1).split())}")
                origins.append(SourceRange(start_line, start_column, end_line, end_column))
        if not lines:
            return []
        return [CodeBlock("\n".join(lines) + "\n", label=label, origins=tuple(origins))]


class VueProcessor(Processor):
    """<script> blocks plus HTML comments in the <template>."""

    name = f"{PLUGIN_NAME}/.vue"
    SUPPORTED_EXTENSIONS = [".vue"]

    def blocks(self, text: str) -> list[CodeBlock]:
        found = self._script_blocks(text)
        template = VUE_TEMPLATE_PATTERN.search(text)
        if template:
            found += self._comment_block(
                text, [(template.start(1), template.end(1))], "[Vue template]"
            )
        return found


class SvelteProcessor(Processor):
    """<script> blocks plus HTML comments in the markup around them."""

    name = f"{PLUGIN_NAME}/.svelte"
    SUPPORTED_EXTENSIONS = [".svelte"]

    def blocks(self, text: str) -> list[CodeBlock]:
        found = self._script_blocks(text)
        excluded = sorted(
            [m.span() for m in SCRIPT_PATTERN.finditer(text)]
            + [m.span() for m in STYLE_PATTERN.finditer(text)]
        )
        markup = []
        last_end = 0
        for start, end in excluded:
            if start > last_end:
                markup.append((last_end, start))
            last_end = max(last_end, end)
        if last_end < len(text):
            markup.append((last_end, len(text)))
        return found + self._comment_block(text, markup, "[Svelte template]")


class MarkdownProcessor(Processor):
    """Fenced JavaScript and TypeScript code blocks.

    Fences in other languages, or without a language, are ignored.
    """

    name = f"{PLUGIN_NAME}/.md"
    SUPPORTED_EXTENSIONS = [".md", ".markdown"]

    def blocks(self, text: str) -> list[CodeBlock]:
        found = []
        for match in FENCE_PATTERN.finditer(text):
            tag = (match.group(1) or "").lower()
            language = FENCE_LANGUAGES.get(tag)
            if language is None:
                continue
            found.append(
                CodeBlock(
                    mask_outside(text, match.start(2), match.end(2)),
                    language,
                    label=f"[Markdown {tag} block]",
                )
            )
        return found


PROCESSORS: dict[str, Processor] = {
    processor.name: processor
    for processor in (VueProcessor(), SvelteProcessor(), MarkdownProcessor())
}


def get_processor(name: str | None) -> Processor | None:
    """Look up a processor by its config name, e.g. "comment-guard/.vue"."""
    if name is None:
        return None
    processor = PROCESSORS.get(name)
    if processor is None:
        logger.warning(f"Unknown processor '{name}'")
    return processor
