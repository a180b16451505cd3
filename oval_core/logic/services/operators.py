"""
Verdict combination tables.

Implements the OVAL operator, check and existence tables. Each combination
counts the child verdicts and decides from the counts; NOT_APPLICABLE children
are ignored unless every child is NOT_APPLICABLE.
"""

from collections import Counter
from typing import Iterable

from oval_core.logic.models import Check, ExistenceCheck, ItemStatus, Operator, Verdict


def _counts(verdicts: Iterable[Verdict]) -> Counter:
    return Counter(verdicts)


def _fallback(counts: Counter) -> Verdict:
    """Shared tail of every table once TRUE/FALSE could not decide."""
    if counts[Verdict.ERROR]:
        return Verdict.ERROR
    if counts[Verdict.UNKNOWN]:
        return Verdict.UNKNOWN
    if counts[Verdict.NOT_EVALUATED]:
        return Verdict.NOT_EVALUATED
    return Verdict.NOT_APPLICABLE


def _undecided(counts: Counter) -> bool:
    return bool(counts[Verdict.ERROR] or counts[Verdict.UNKNOWN] or counts[Verdict.NOT_EVALUATED])


def combine_and(verdicts: Iterable[Verdict]) -> Verdict:
    counts = _counts(verdicts)
    if counts[Verdict.FALSE]:
        return Verdict.FALSE
    if counts[Verdict.TRUE] and not _undecided(counts):
        return Verdict.TRUE
    return _fallback(counts)


def combine_or(verdicts: Iterable[Verdict]) -> Verdict:
    counts = _counts(verdicts)
    if counts[Verdict.TRUE]:
        return Verdict.TRUE
    if counts[Verdict.FALSE] and not _undecided(counts):
        return Verdict.FALSE
    return _fallback(counts)


def combine_one(verdicts: Iterable[Verdict]) -> Verdict:
    counts = _counts(verdicts)
    trues = counts[Verdict.TRUE]
    if trues >= 2:
        return Verdict.FALSE
    if _undecided(counts):
        return _fallback(counts)
    if trues == 1:
        return Verdict.TRUE
    if counts[Verdict.FALSE]:
        return Verdict.FALSE
    return Verdict.NOT_APPLICABLE


def combine_xor(verdicts: Iterable[Verdict]) -> Verdict:
    counts = _counts(verdicts)
    if _undecided(counts):
        return _fallback(counts)
    if counts[Verdict.TRUE] % 2 == 1:
        return Verdict.TRUE
    if counts[Verdict.TRUE] or counts[Verdict.FALSE]:
        return Verdict.FALSE
    return Verdict.NOT_APPLICABLE


def combine_none_satisfy(verdicts: Iterable[Verdict]) -> Verdict:
    counts = _counts(verdicts)
    if counts[Verdict.TRUE]:
        return Verdict.FALSE
    if counts[Verdict.FALSE] and not _undecided(counts):
        return Verdict.TRUE
    return _fallback(counts)


_OPERATOR_TABLE = {
    Operator.AND: combine_and,
    Operator.OR: combine_or,
    Operator.ONE: combine_one,
    Operator.XOR: combine_xor,
}

_CHECK_TABLE = {
    Check.ALL: combine_and,
    Check.AT_LEAST_ONE: combine_or,
    Check.ONLY_ONE: combine_one,
    Check.NONE_SATISFY: combine_none_satisfy,
    Check.NONE_EXIST: combine_none_satisfy,
}


def apply_operator(operator: Operator, verdicts: Iterable[Verdict], negate: bool = False) -> Verdict:
    """Combine child verdicts with a logical operator, then apply negation."""
    verdict = _OPERATOR_TABLE[operator](list(verdicts))
    return verdict.negate() if negate else verdict


def apply_check(check: Check, verdicts: Iterable[Verdict]) -> Verdict:
    """Combine per-item (or per-value) verdicts according to a check attribute."""
    return _CHECK_TABLE[check](list(verdicts))


def apply_existence(check: ExistenceCheck, statuses: Iterable[ItemStatus]) -> Verdict:
    """Decide whether the collected items satisfy a check_existence attribute."""
    counts = Counter(statuses)
    exists = counts[ItemStatus.EXISTS]
    does_not_exist = counts[ItemStatus.DOES_NOT_EXIST]
    errors = counts[ItemStatus.ERROR]
    not_collected = counts[ItemStatus.NOT_COLLECTED]

    if check == ExistenceCheck.ALL_EXIST:
        if does_not_exist:
            return Verdict.FALSE
        if errors:
            return Verdict.ERROR
        if not_collected:
            return Verdict.UNKNOWN
        return Verdict.TRUE if exists else Verdict.FALSE

    if check == ExistenceCheck.ANY_EXIST:
        if exists:
            return Verdict.TRUE
        if errors:
            return Verdict.ERROR
        if not_collected:
            return Verdict.UNKNOWN
        return Verdict.TRUE

    if check == ExistenceCheck.AT_LEAST_ONE_EXISTS:
        if exists:
            return Verdict.TRUE
        if errors:
            return Verdict.ERROR
        if not_collected:
            return Verdict.UNKNOWN
        return Verdict.FALSE

    if check == ExistenceCheck.NONE_EXIST:
        if exists:
            return Verdict.FALSE
        if errors:
            return Verdict.ERROR
        if not_collected:
            return Verdict.UNKNOWN
        return Verdict.TRUE

    # ONLY_ONE_EXISTS
    if exists >= 2:
        return Verdict.FALSE
    if errors:
        return Verdict.ERROR
    if not_collected:
        return Verdict.UNKNOWN
    return Verdict.TRUE if exists == 1 else Verdict.FALSE
