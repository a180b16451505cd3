"""
Result aggregation for full sweeps.

The engine reports each evaluated definition to a VerdictObserver; the
ResultAggregate observer counts verdicts per category and optionally prints
one line per definition.
"""

import sys
from typing import Dict, List, Optional, Protocol, TextIO

from oval_core.logic.models import REPORT_ORDER, Verdict


class VerdictObserver(Protocol):
    """Receives one call per definition, in definition document order."""

    def on_verdict(self, definition_id: str, verdict: Verdict) -> None:
        ...


_REPORT_LABELS = {
    Verdict.TRUE: "TRUE:",
    Verdict.FALSE: "FALSE:",
    Verdict.ERROR: "ERROR:",
    Verdict.UNKNOWN: "UNKNOWN:",
    Verdict.NOT_EVALUATED: "NOT EVALUATED:",
    Verdict.NOT_APPLICABLE: "NOT APPLICABLE:",
}


def format_verdict_line(definition_id: str, verdict: Verdict) -> str:
    return f"Definition {definition_id}: {verdict.text}"


class ResultAggregate:
    """
    Six verdict counters filled during a full sweep.

    Args:
        verbosity: Per-definition lines are printed when verbosity >= 0
        output: Stream for the per-definition lines and the report
    """

    def __init__(self, verbosity: int = 0, output: Optional[TextIO] = None):
        self.verbosity = verbosity
        self.output = output
        self.counts: Dict[Verdict, int] = {verdict: 0 for verdict in Verdict}
        self.order: List[str] = []

    @property
    def stream(self) -> TextIO:
        return self.output if self.output is not None else sys.stdout

    def on_verdict(self, definition_id: str, verdict: Verdict) -> None:
        if not isinstance(verdict, Verdict):
            raise TypeError(f"Invalid verdict {verdict!r} for {definition_id}")

        self.counts[verdict] += 1
        self.order.append(definition_id)
        if self.verbosity >= 0:
            print(format_verdict_line(definition_id, verdict), file=self.stream)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def result_true(self) -> int:
        return self.counts[Verdict.TRUE]

    @property
    def result_false(self) -> int:
        return self.counts[Verdict.FALSE]

    @property
    def result_error(self) -> int:
        return self.counts[Verdict.ERROR]

    @property
    def result_unknown(self) -> int:
        return self.counts[Verdict.UNKNOWN]

    @property
    def result_neval(self) -> int:
        return self.counts[Verdict.NOT_EVALUATED]

    @property
    def result_napp(self) -> int:
        return self.counts[Verdict.NOT_APPLICABLE]

    def is_success(self) -> bool:
        """A sweep passes when no definition is FALSE or UNKNOWN."""
        return self.result_false == 0 and self.result_unknown == 0

    def format_report(self) -> List[str]:
        lines = ["===== REPORT ====="]
        for verdict in REPORT_ORDER:
            lines.append(f"{_REPORT_LABELS[verdict]:<16}{self.counts[verdict]:>6}")
        return lines

    def print_report(self) -> None:
        for line in self.format_report():
            print(line, file=self.stream)

    def to_dict(self) -> Dict[str, int]:
        return {
            'true': self.result_true,
            'false': self.result_false,
            'error': self.result_error,
            'unknown': self.result_unknown,
            'neval': self.result_neval,
            'napp': self.result_napp,
        }


def is_targeted_success(verdict: Verdict) -> bool:
    """
    Success policy for a single targeted definition: everything except FALSE
    and UNKNOWN passes, ERROR included.
    """
    return verdict not in (Verdict.FALSE, Verdict.UNKNOWN)
