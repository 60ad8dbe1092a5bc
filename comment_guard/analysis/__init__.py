"""Source parsing and syntax-tree queries used by the comment rules."""

from .parser import SourceParser, detect_language, parse_source
from .source import Comment, CommentKind, SourceFile, SourceRange, Token

__all__ = [
    "Comment",
    "CommentKind",
    "SourceFile",
    "SourceParser",
    "SourceRange",
    "Token",
    "detect_language",
    "parse_source",
]
