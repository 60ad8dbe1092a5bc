"""
Source file wrapper over a tree-sitter tree.

This module exposes the queries rules need from a parsed file:
the comment stream, the tokens surrounding a comment or node,
and conversions from tree-sitter byte positions to character
offsets and line/column locations.
"""

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from tree_sitter import Node

COMMENT_NODE_TYPES = frozenset({"comment", "html_comment"})


class CommentKind(Enum):
    """Comment delimiter style."""

    LINE = "Line"
    BLOCK = "Block"


@dataclass(frozen=True)
class SourceRange:
    """A span in the source: 1-based lines, 0-based character columns."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def to_dict(self) -> dict[str, int]:
        return {
            "line": self.start_line,
            "column": self.start_column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
        }


@dataclass(frozen=True)
class Comment:
    """A comment extracted from source. Immutable for the lint pass."""

    kind: CommentKind
    raw_text: str
    value: str
    start: int
    end: int
    loc: SourceRange

    @property
    def is_block(self) -> bool:
        return self.kind == CommentKind.BLOCK

    @property
    def is_doc(self) -> bool:
        """Whether this is a `/** ... */` documentation comment."""
        return self.is_block and self.value.startswith("*")

    @property
    def start_line(self) -> int:
        return self.loc.start_line

    @property
    def end_line(self) -> int:
        return self.loc.end_line

    @property
    def line_span(self) -> int:
        """Number of physical lines the comment occupies."""
        return self.loc.end_line - self.loc.start_line + 1


@dataclass(frozen=True)
class Token:
    """A non-comment leaf token."""

    type: str
    text: str
    start: int
    end: int
    loc: SourceRange
    start_byte: int = 0
    end_byte: int = 0


class SourceFile:
    """A parsed JS/TS file with host-style queries.

    Example usage:
        source = parse_source("// TODO: x\\nlet a = 1;")
        for comment in source.get_all_comments():
            before = source.get_token_before(comment)
    """

    def __init__(
        self,
        content: str,
        tree: Any,
        language: str = "javascript",
        file_path: Path | None = None,
    ):
        self.content = content
        self.tree = tree
        self.language = language
        self.file_path = file_path
        self._bytes = content.encode("utf-8")
        self._is_ascii = len(self._bytes) == len(content)
        self.lines = [line.rstrip("\r") for line in content.split("\n")]
        self._line_byte_starts = self._compute_line_byte_starts()
        self._char_offsets: list[int] | None = None
        self._comments: list[Comment] | None = None
        self._tokens: list[Token] | None = None
        self._token_starts: list[int] = []
        self._token_ends: list[int] = []

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def is_typescript(self) -> bool:
        return self.language in ("typescript", "tsx")

    def _compute_line_byte_starts(self) -> list[int]:
        starts = [0]
        for index, byte in enumerate(self._bytes):
            if byte == 0x0A:
                starts.append(index + 1)
        return starts

    # Positions

    def _build_char_offsets(self) -> list[int]:
        """Character index for every byte offset, plus one past the end.

        Continuation bytes map to the index of the character they belong to.
        """
        offsets = [0] * (len(self._bytes) + 1)
        position = 0
        for index, char in enumerate(self.content):
            width = len(char.encode("utf-8"))
            offsets[position : position + width] = [index] * width
            position += width
        offsets[position] = len(self.content)
        return offsets

    def char_offset(self, byte_offset: int) -> int:
        """Convert a UTF-8 byte offset to a character offset."""
        if self._is_ascii:
            return byte_offset
        if self._char_offsets is None:
            self._char_offsets = self._build_char_offsets()
        return self._char_offsets[byte_offset]

    def _char_column(self, row: int, byte_column: int) -> int:
        if self._is_ascii:
            return byte_column
        line_start = self._line_byte_starts[row]
        return self.char_offset(line_start + byte_column) - self.char_offset(line_start)

    def node_range(self, node: Node) -> tuple[int, int]:
        """Character offsets (start, end) of a node."""
        return self.char_offset(node.start_byte), self.char_offset(node.end_byte)

    def node_location(self, node: Node) -> SourceRange:
        """Line/column span of a node."""
        start_row, start_col = node.start_point
        end_row, end_col = node.end_point
        return SourceRange(
            start_line=start_row + 1,
            start_column=self._char_column(start_row, start_col),
            end_line=end_row + 1,
            end_column=self._char_column(end_row, end_col),
        )

    def node_text(self, node: Node | None) -> str:
        """Extract text from a tree-sitter node."""
        if node is None:
            return ""
        return self._bytes[node.start_byte : node.end_byte].decode("utf-8")

    def offset_of_line(self, line: int) -> int:
        """Character offset where a 1-based line starts."""
        return self.char_offset(self._line_byte_starts[line - 1])

    def program_location(self) -> SourceRange:
        """Location used for file-level reports."""
        return SourceRange(1, 0, 1, 0)

    # Traversal

    def walk(self, node: Node | None = None) -> Iterator[Node]:
        """Pre-order traversal over explicit child lists."""
        stack = [node if node is not None else self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    # Comments

    def get_all_comments(self) -> list[Comment]:
        """All comments in source order."""
        if self._comments is None:
            comments = [
                self._make_comment(node)
                for node in self.walk()
                if node.type in COMMENT_NODE_TYPES
            ]
            comments.sort(key=lambda c: c.start)
            self._comments = comments
        return self._comments

    def _make_comment(self, node: Node) -> Comment:
        raw_text = self.node_text(node)
        if raw_text.startswith("/*"):
            kind = CommentKind.BLOCK
            value = raw_text[2:-2] if raw_text.endswith("*/") else raw_text[2:]
        else:
            kind = CommentKind.LINE
            value = raw_text[2:] if raw_text.startswith("//") else raw_text
        start, end = self.node_range(node)
        return Comment(
            kind=kind,
            raw_text=raw_text,
            value=value,
            start=start,
            end=end,
            loc=self.node_location(node),
        )

    def get_comments_before(self, node: Node) -> list[Comment]:
        """Comments directly before a node, with no token in between."""
        node_start = self.char_offset(node.start_byte)
        previous = self.get_token_before(node)
        floor = previous.end if previous else 0
        return [
            c for c in self.get_all_comments() if c.end <= node_start and c.start >= floor
        ]

    # Tokens

    @property
    def tokens(self) -> list[Token]:
        """Non-comment leaf tokens in source order."""
        if self._tokens is None:
            tokens = []
            for node in self.walk():
                if node.child_count or node.type in COMMENT_NODE_TYPES:
                    continue
                if node.end_byte <= node.start_byte:
                    continue
                start, end = self.node_range(node)
                tokens.append(
                    Token(
                        type=node.type,
                        text=self.node_text(node),
                        start=start,
                        end=end,
                        loc=self.node_location(node),
                        start_byte=node.start_byte,
                        end_byte=node.end_byte,
                    )
                )
            tokens.sort(key=lambda t: t.start)
            self._tokens = tokens
            self._token_starts = [t.start for t in tokens]
            self._token_ends = [t.end for t in tokens]
        return self._tokens

    def _span_of(self, item: "Comment | Node") -> tuple[int, int]:
        if isinstance(item, Comment):
            return item.start, item.end
        return self.node_range(item)

    def get_token_before(self, item: "Comment | Node") -> Token | None:
        """The last token ending at or before the item's start."""
        tokens = self.tokens
        start, _ = self._span_of(item)
        index = bisect_right(self._token_ends, start) - 1
        return tokens[index] if index >= 0 else None

    def get_token_after(self, item: "Comment | Node") -> Token | None:
        """The first token starting at or after the item's end."""
        tokens = self.tokens
        _, end = self._span_of(item)
        index = bisect_left(self._token_starts, end)
        return tokens[index] if index < len(tokens) else None

    def node_for_token(self, token: Token) -> Node:
        """The smallest syntax node covering a token."""
        return self.root.descendant_for_byte_range(token.start_byte, token.end_byte)
