"""
Export directives for results documents.

Two independent verdict bitmasks decide what an exported results document
contains: ``reported`` selects which verdict categories appear at all, and the
content mask selects which of those are exported with full supporting detail
(criteria trees, tests and tested items) instead of thin id/verdict records.
Both start empty: nothing is exported unless explicitly enabled.
"""

from enum import Enum
from typing import Iterable, Union

from .verdict import ALL_VERDICTS_MASK, Verdict, verdict_mask


class ContentLevel(Enum):
    """Amount of detail exported per reported definition."""
    THIN = "thin"
    FULL = "full"


VerdictSelection = Union[int, Verdict, Iterable[Verdict]]


def _to_mask(selection: VerdictSelection) -> int:
    if isinstance(selection, Verdict):
        return selection.bit
    if isinstance(selection, int):
        if selection & ~ALL_VERDICTS_MASK:
            raise ValueError(f"Invalid verdict mask: {selection}")
        return selection
    return verdict_mask(selection)


class ResultDirectives:
    """Export policy for a results model."""

    def __init__(self):
        self.reported_mask = 0
        self.full_content_mask = 0

    @classmethod
    def report_everything(cls) -> 'ResultDirectives':
        """All six categories reported with full content."""
        directives = cls()
        directives.set_reported(ALL_VERDICTS_MASK, True)
        directives.set_content(ALL_VERDICTS_MASK, ContentLevel.FULL)
        return directives

    def set_reported(self, selection: VerdictSelection, reported: bool) -> None:
        mask = _to_mask(selection)
        if reported:
            self.reported_mask |= mask
        else:
            self.reported_mask &= ~mask

    def set_content(self, selection: VerdictSelection, content: ContentLevel) -> None:
        mask = _to_mask(selection)
        if content == ContentLevel.FULL:
            self.full_content_mask |= mask
        else:
            self.full_content_mask &= ~mask

    def is_reported(self, verdict: Verdict) -> bool:
        return bool(self.reported_mask & verdict.bit)

    def get_content(self, verdict: Verdict) -> ContentLevel:
        return ContentLevel.FULL if self.full_content_mask & verdict.bit else ContentLevel.THIN

    def __repr__(self) -> str:
        return (f"ResultDirectives(reported=0x{self.reported_mask:02x}, "
                f"full_content=0x{self.full_content_mask:02x})")
