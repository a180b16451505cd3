"""
Entity comparison.

Compares a state entity against collected item values according to the
entity's datatype and operation.
"""

import re
from typing import Callable, Dict, List, Tuple

from oval_core.logic.models import Entity, Verdict
from .operators import apply_check


class ComparisonError(ValueError):
    """A value could not be converted or the operation is not defined for the datatype."""
    pass


_VERSION_SPLIT = re.compile(r'[.\-_:~+]')


def _parse_int(value: str) -> int:
    text = value.strip()
    try:
        if text.lower().startswith(('0x', '0o', '0b')):
            return int(text, 0)
        return int(text)
    except ValueError:
        raise ComparisonError(f"Not an integer: {value!r}")


def _parse_float(value: str) -> float:
    try:
        return float(value.strip())
    except ValueError:
        raise ComparisonError(f"Not a float: {value!r}")


def _parse_boolean(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ('true', '1'):
        return True
    if normalized in ('false', '0'):
        return False
    raise ComparisonError(f"Not a boolean: {value!r}")


def _parse_version(value: str) -> Tuple:
    parts = []
    for part in _VERSION_SPLIT.split(value.strip()):
        if part == "":
            continue
        # Numeric parts sort before alphanumeric ones at the same position
        parts.append((0, int(part), "") if part.isdigit() else (1, 0, part))
    return tuple(parts)


def _compare_versions(left: Tuple, right: Tuple) -> int:
    length = max(len(left), len(right))
    padded_left = left + ((0, 0, ""),) * (length - len(left))
    padded_right = right + ((0, 0, ""),) * (length - len(right))
    if padded_left < padded_right:
        return -1
    if padded_left > padded_right:
        return 1
    return 0


_ORDERING_OPERATIONS: Dict[str, Callable[[int], bool]] = {
    'equals': lambda c: c == 0,
    'not equal': lambda c: c != 0,
    'greater than': lambda c: c > 0,
    'less than': lambda c: c < 0,
    'greater than or equal': lambda c: c >= 0,
    'less than or equal': lambda c: c <= 0,
}


def _cmp(left, right) -> int:
    return (left > right) - (left < right)


def compare_values(collected: str, expected: str, operation: str = "equals",
                   datatype: str = "string") -> bool:
    """
    Compare one collected value against the expected value.

    Raises:
        ComparisonError: If the values cannot be converted or the operation
            is not supported for the datatype
    """
    operation = operation.lower()
    datatype = datatype.lower()

    if operation == 'pattern match':
        try:
            return re.search(expected, collected) is not None
        except re.error as e:
            raise ComparisonError(f"Invalid pattern {expected!r}: {e}")

    if datatype == 'string':
        if operation == 'case insensitive equals':
            return collected.lower() == expected.lower()
        if operation == 'case insensitive not equal':
            return collected.lower() != expected.lower()
        if operation in ('equals', 'not equal'):
            return _ORDERING_OPERATIONS[operation](_cmp(collected, expected))
        raise ComparisonError(f"Operation '{operation}' not supported for string")

    if datatype == 'boolean':
        if operation not in ('equals', 'not equal'):
            raise ComparisonError(f"Operation '{operation}' not supported for boolean")
        return _ORDERING_OPERATIONS[operation](_cmp(_parse_boolean(collected), _parse_boolean(expected)))

    if datatype == 'int':
        left, right = _parse_int(collected), _parse_int(expected)
        if operation == 'bitwise and':
            return (left & right) == right
        if operation == 'bitwise or':
            return (left | right) == right
        if operation not in _ORDERING_OPERATIONS:
            raise ComparisonError(f"Operation '{operation}' not supported for int")
        return _ORDERING_OPERATIONS[operation](_cmp(left, right))

    if datatype == 'float':
        if operation not in _ORDERING_OPERATIONS:
            raise ComparisonError(f"Operation '{operation}' not supported for float")
        return _ORDERING_OPERATIONS[operation](_cmp(_parse_float(collected), _parse_float(expected)))

    if datatype in ('version', 'evr_string', 'debian_evr_string'):
        if operation not in _ORDERING_OPERATIONS:
            raise ComparisonError(f"Operation '{operation}' not supported for {datatype}")
        return _ORDERING_OPERATIONS[operation](
            _compare_versions(_parse_version(collected), _parse_version(expected))
        )

    raise ComparisonError(f"Unsupported datatype: {datatype}")


def compare_entity(entity: Entity, collected_values: List[str]) -> Verdict:
    """
    Evaluate one state entity against every collected value of the matching
    item entity, combining per-value verdicts with the entity's entity_check.
    """
    if entity.var_ref:
        # Variables are not resolved by this engine
        return Verdict.NOT_EVALUATED

    if not collected_values:
        return Verdict.ERROR

    expected = entity.value if entity.value is not None else ""
    verdicts = []
    for value in collected_values:
        try:
            matched = compare_values(value, expected, entity.operation, entity.datatype)
            verdicts.append(Verdict.TRUE if matched else Verdict.FALSE)
        except ComparisonError:
            verdicts.append(Verdict.ERROR)

    return apply_check(entity.entity_check, verdicts)
