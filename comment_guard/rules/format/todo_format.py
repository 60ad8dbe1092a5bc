"""
Format rules for TODO, FIXME and NOTE comments.

Each rule requires `PREFIX (reference): description` and offers a fix
inserting a placeholder reference.
"""

from .structured import StructuredCommentRule


class TodoFormatRule(StructuredCommentRule):
    """Enforce `TODO (reference): description`."""

    messages = {
        "invalidTodoFormat": (
            "TODO comments must be in the format 'TODO (reference): description'."
        ),
    }
    message_id = "invalidTodoFormat"
    default_pattern = r"^TODO\b\s*\(([^)]+)\):"
    placeholder = "TICKET-XXX"

    @property
    def rule_id(self) -> str:
        return "enforce-todo-format"

    @property
    def name(self) -> str:
        return "TODO Format"

    @property
    def description(self) -> str:
        return "Enforce a standard format for TODO comments"

    @property
    def prefixes(self) -> tuple[str, ...]:
        return ("TODO",)


class FixmeFormatRule(StructuredCommentRule):
    """Enforce `FIXME (reference): description`."""

    messages = {
        "invalidFixmeFormat": (
            "FIXME comments must be in the format 'FIXME (reference): description'."
        ),
    }
    message_id = "invalidFixmeFormat"
    default_pattern = r"^FIXME\s*\(([^)]+)\):"
    placeholder = "BUG-XXX"

    @property
    def rule_id(self) -> str:
        return "enforce-fixme-format"

    @property
    def name(self) -> str:
        return "FIXME Format"

    @property
    def description(self) -> str:
        return "Enforce a standard format for FIXME comments"

    @property
    def prefixes(self) -> tuple[str, ...]:
        return ("FIXME",)


class NoteFormatRule(StructuredCommentRule):
    """Enforce `NOTE (reference): description`."""

    messages = {
        "invalidNoteFormat": (
            "NOTE comments must be in the format 'NOTE (reference): description'."
        ),
    }
    message_id = "invalidNoteFormat"
    default_pattern = r"^NOTE\s*\(([^)]+)\):"
    placeholder = "author"

    @property
    def rule_id(self) -> str:
        return "enforce-note-format"

    @property
    def name(self) -> str:
        return "NOTE Format"

    @property
    def description(self) -> str:
        return "Enforce a standard format for NOTE comments"

    @property
    def prefixes(self) -> tuple[str, ...]:
        return ("NOTE",)
