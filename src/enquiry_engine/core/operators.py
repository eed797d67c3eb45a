"""Condition operators shared by scoring rules and status transitions."""

import logging
from enum import Enum
from numbers import Real
from typing import Any, Callable, Dict, FrozenSet, Mapping, Union

logger = logging.getLogger(__name__)

# Marks a field that is absent from the record (as opposed to present with None)
MISSING = object()


class Operator(Enum):
    """Comparison operators available in rule and condition definitions."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IN = "in"
    NOT_IN = "not_in"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


# Scoring rules accept the full operator set
SCORING_OPERATORS: FrozenSet[Operator] = frozenset(Operator)

# Transition conditions use the narrower status-type dialect
TRANSITION_OPERATORS: FrozenSet[Operator] = frozenset({
    Operator.EQUALS,
    Operator.NOT_EQUALS,
    Operator.CONTAINS,
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.IN,
    Operator.NOT_IN,
})

# Operators that can match a field the record does not have
PRESENCE_OPERATORS: FrozenSet[Operator] = frozenset({Operator.EXISTS, Operator.NOT_EXISTS})


def coerce_operator(operator: Union[Operator, str]) -> Operator:
    """Return the Operator for an enum member or its stored string value.

    Raises ValueError for unknown operator strings.
    """
    if isinstance(operator, Operator):
        return operator
    return Operator(operator)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def strict_equals(actual: Any, expected: Any) -> bool:
    """Equality without type coercion.

    Numbers compare by value regardless of int/float, booleans only equal
    booleans, and every other value must share the expected type. Lists and
    dicts are compared element by element under the same rules.
    """
    if _is_number(actual) and _is_number(expected):
        return actual == expected
    if type(actual) is not type(expected):
        return False
    if isinstance(actual, (list, tuple)):
        return len(actual) == len(expected) and all(
            strict_equals(a, e) for a, e in zip(actual, expected)
        )
    if isinstance(actual, dict):
        return actual.keys() == expected.keys() and all(
            strict_equals(actual[key], expected[key]) for key in actual
        )
    return actual == expected


def _contains(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str) and expected in actual


def _not_contains(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str) and expected not in actual


def _comparable(actual: Any, expected: Any) -> bool:
    if _is_number(actual) and _is_number(expected):
        return True
    return isinstance(actual, str) and isinstance(expected, str)


def _greater_than(actual: Any, expected: Any) -> bool:
    return _comparable(actual, expected) and actual > expected


def _less_than(actual: Any, expected: Any) -> bool:
    return _comparable(actual, expected) and actual < expected


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _member_of(actual: Any, expected: Any) -> bool:
    return any(strict_equals(actual, item) for item in expected)


def _in(actual: Any, expected: Any) -> bool:
    return _is_sequence(expected) and _member_of(actual, expected)


def _not_in(actual: Any, expected: Any) -> bool:
    return _is_sequence(expected) and not _member_of(actual, expected)


def _exists(actual: Any, expected: Any) -> bool:
    return actual is not MISSING and actual is not None


def _not_exists(actual: Any, expected: Any) -> bool:
    return actual is MISSING or actual is None


_EVALUATORS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: strict_equals,
    Operator.NOT_EQUALS: lambda actual, expected: not strict_equals(actual, expected),
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: _not_contains,
    Operator.GREATER_THAN: _greater_than,
    Operator.LESS_THAN: _less_than,
    Operator.IN: _in,
    Operator.NOT_IN: _not_in,
    Operator.EXISTS: _exists,
    Operator.NOT_EXISTS: _not_exists,
}


def evaluate_condition(
    record: Mapping[str, Any],
    field_name: str,
    operator: Union[Operator, str],
    value: Any = None,
) -> bool:
    """Evaluate one (field, operator, value) predicate against a record.

    Never raises for data problems: an absent field, an unknown operator or
    mismatched types all evaluate to False. ``exists``/``not_exists`` are the
    only operators that can match an absent field.
    """
    try:
        op = coerce_operator(operator)
    except ValueError:
        logger.debug(f"Unknown operator {operator!r} on field '{field_name}' treated as non-match")
        return False

    actual = record.get(field_name, MISSING)
    if actual is MISSING and op not in PRESENCE_OPERATORS:
        return False

    try:
        return bool(_EVALUATORS[op](actual, value))
    except TypeError:
        # e.g. unhashable or unorderable values nested inside sequences
        logger.debug(f"Type mismatch evaluating {op.value} on field '{field_name}'")
        return False
