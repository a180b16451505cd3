"""
Verdict domain model.

A verdict is the outcome of evaluating one definition (or one test, criteria
node or state comparison) against collected system characteristics.
"""

from enum import Enum
from typing import Iterable


class Verdict(Enum):
    """
    The six possible evaluation outcomes.

    Member values are the OVAL result bits, so sets of verdicts can be held
    as an integer mask (see ResultDirectives).
    """
    TRUE = 1
    FALSE = 2
    UNKNOWN = 4
    ERROR = 8
    NOT_EVALUATED = 16
    NOT_APPLICABLE = 32

    @property
    def text(self) -> str:
        """Text used in verdict lines and result documents."""
        return _VERDICT_TEXT[self]

    @property
    def bit(self) -> int:
        return self.value

    @classmethod
    def from_text(cls, text: str) -> 'Verdict':
        """Parse the result document spelling of a verdict."""
        normalized = text.strip().lower()
        for verdict, verdict_text in _VERDICT_TEXT.items():
            if verdict_text == normalized:
                return verdict
        raise ValueError(f"Unknown verdict: {text}")

    def negate(self) -> 'Verdict':
        """Swap TRUE and FALSE; every other verdict is unchanged."""
        if self is Verdict.TRUE:
            return Verdict.FALSE
        if self is Verdict.FALSE:
            return Verdict.TRUE
        return self


_VERDICT_TEXT = {
    Verdict.TRUE: "true",
    Verdict.FALSE: "false",
    Verdict.UNKNOWN: "unknown",
    Verdict.ERROR: "error",
    Verdict.NOT_EVALUATED: "not evaluated",
    Verdict.NOT_APPLICABLE: "not applicable",
}

# Order used by the aggregate report
REPORT_ORDER = (
    Verdict.TRUE,
    Verdict.FALSE,
    Verdict.ERROR,
    Verdict.UNKNOWN,
    Verdict.NOT_EVALUATED,
    Verdict.NOT_APPLICABLE,
)

# Order used by the result document directives element
DIRECTIVES_ORDER = (
    Verdict.TRUE,
    Verdict.FALSE,
    Verdict.UNKNOWN,
    Verdict.ERROR,
    Verdict.NOT_EVALUATED,
    Verdict.NOT_APPLICABLE,
)

ALL_VERDICTS_MASK = sum(v.bit for v in Verdict)


def verdict_mask(verdicts: Iterable[Verdict]) -> int:
    """Fold verdicts into a bitmask."""
    mask = 0
    for verdict in verdicts:
        mask |= verdict.bit
    return mask
