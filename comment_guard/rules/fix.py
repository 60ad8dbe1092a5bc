"""
Applying autofix text edits to source text.

Edits are applied in source order; an edit overlapping one already
accepted is skipped and left for a later pass.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .base import TextEdit, Violation

logger = logging.getLogger(__name__)

MAX_FIX_PASSES = 10


@dataclass
class FixResult:
    """Outcome of applying fixes to one text."""

    output: str
    applied: list[TextEdit] = field(default_factory=list)
    skipped: list[TextEdit] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


def apply_edits(text: str, edits: Iterable[TextEdit]) -> FixResult:
    """Apply non-overlapping edits to text.

    Args:
        text: Original text
        edits: Edits to apply, in any order

    Returns:
        FixResult with the new text and the applied/skipped edits
    """
    ordered = sorted(edits, key=lambda e: (e.range_start, e.range_end))
    accepted: list[TextEdit] = []
    skipped: list[TextEdit] = []
    last_end = -1

    for edit in ordered:
        if edit.range_start < last_end or edit.range_end < edit.range_start:
            skipped.append(edit)
            continue
        accepted.append(edit)
        last_end = edit.range_end

    output = text
    for edit in reversed(accepted):
        output = edit.apply(output)

    if skipped:
        logger.debug(f"Skipped {len(skipped)} overlapping fixes")

    return FixResult(output=output, applied=accepted, skipped=skipped)


def apply_fixes(text: str, violations: Iterable[Violation]) -> FixResult:
    """Apply the fixes attached to violations."""
    return apply_edits(text, [v.fix for v in violations if v.fix is not None])
