"""Tree-sitter parser selection for JavaScript and TypeScript sources."""

import logging
from pathlib import Path
from typing import Any

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Parser

from .source import SourceFile

logger = logging.getLogger(__name__)

EXTENSION_LANGUAGES = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

SUPPORTED_LANGUAGES = ("javascript", "typescript", "tsx")


def detect_language(file_path: Path | str) -> str | None:
    """Map a file extension to a grammar name, or None if unsupported."""
    return EXTENSION_LANGUAGES.get(Path(file_path).suffix.lower())


class SourceParser:
    """Parse JS/TS source text with the matching tree-sitter grammar.

    Parsers are created lazily per grammar and reused across files.
    """

    SUPPORTED_EXTENSIONS = list(EXTENSION_LANGUAGES)

    def __init__(self) -> None:
        self._parsers: dict[str, Parser] = {}

    def _language_for(self, language: str) -> Any:
        if language == "javascript":
            return tsjs.language()
        if language == "typescript":
            return tsts.language_typescript()
        if language == "tsx":
            return tsts.language_tsx()
        raise ValueError(f"Unsupported language: {language}")

    def get_parser(self, language: str) -> Parser:
        """Get (or create) the parser for a grammar name."""
        parser = self._parsers.get(language)
        if parser is None:
            parser = Parser(Language(self._language_for(language)))
            self._parsers[language] = parser
            logger.debug(f"Created tree-sitter parser for {language}")
        return parser

    def can_parse(self, file_path: Path) -> bool:
        """True for .js/.ts family extensions this parser has a grammar for."""
        return file_path.suffix.lower() in EXTENSION_LANGUAGES

    def parse(
        self,
        content: str,
        language: str = "javascript",
        file_path: Path | None = None,
    ) -> SourceFile:
        """Parse source text into a SourceFile.

        Args:
            content: Source text
            language: Grammar name (javascript, typescript, tsx)
            file_path: Optional path, used for reporting only

        Returns:
            SourceFile wrapping the tree and its comment stream
        """
        tree = self.get_parser(language).parse(bytes(content, "utf8"))
        if tree.root_node.has_error:
            logger.debug(f"Syntax errors detected in {file_path or '<text>'}")
        return SourceFile(content, tree, language=language, file_path=file_path)

    def parse_file(self, file_path: Path) -> SourceFile:
        """Read and parse a file, choosing the grammar from its extension."""
        language = detect_language(file_path)
        if language is None:
            raise ValueError(f"Unsupported file type: {file_path}")
        content = file_path.read_text(encoding="utf-8")
        return self.parse(content, language=language, file_path=file_path)


_default_parser: SourceParser | None = None


def parse_source(
    content: str,
    language: str = "javascript",
    file_path: Path | None = None,
) -> SourceFile:
    """Parse source text with a shared SourceParser."""
    global _default_parser
    if _default_parser is None:
        _default_parser = SourceParser()
    return _default_parser.parse(content, language=language, file_path=file_path)
