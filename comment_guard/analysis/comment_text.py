"""Plain text of a comment with block decoration removed."""

import re

from .source import Comment

# Leading whitespace and one `*` of a block comment line
BLOCK_DECORATION = re.compile(r"^\s*\*?\s?")


def comment_lines(comment: Comment) -> list[str]:
    """Stripped lines of a comment; block lines lose their leading `*`."""
    if not comment.is_block:
        return [comment.value.strip()]
    return [BLOCK_DECORATION.sub("", line).strip() for line in comment.value.split("\n")]


def first_comment_line(comment: Comment) -> str:
    """The first non-empty line of a comment, without block decoration."""
    for line in comment_lines(comment):
        if line:
            return line
    return ""


def joined_comment_text(comment: Comment) -> str:
    """All lines of a comment joined with single spaces between lines."""
    return " ".join(comment_lines(comment)).strip()
