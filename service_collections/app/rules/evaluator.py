"""
In-memory execution of compiled predicates.

Storage backends translate predicates into their own query language; this
module evaluates the same structure against plain recipe dicts, which is
what rule previews and tests run on.  Comparisons against a missing value
never match, mirroring SQL NULL handling.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping

from shared.errors import ValidationError
from .models import Predicate

Recipe = Mapping[str, Any]


def _compare(operator: str) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is None:
            return False
        try:
            if operator == "lt":
                return actual < expected
            if operator == "lte":
                return actual <= expected
            if operator == "gt":
                return actual > expected
            return actual >= expected
        except TypeError:
            return False
    return check


_FILTERS: Dict[str, Callable[[Any, Any], bool]] = {
    "equals": lambda actual, expected: actual == expected,
    "not": lambda actual, expected: actual is not None and actual != expected,
    "in": lambda actual, expected: actual is not None and actual in expected,
    "notIn": lambda actual, expected: actual is not None and actual not in expected,
    "lt": _compare("lt"),
    "lte": _compare("lte"),
    "gt": _compare("gt"),
    "gte": _compare("gte"),
}


def matches_predicate(predicate: Predicate, recipe: Recipe) -> bool:
    """Return True when *recipe* satisfies *predicate*; ``{}`` matches everything."""
    for key, condition in predicate.items():
        if key == "AND":
            if not all(matches_predicate(part, recipe) for part in _as_list(condition)):
                return False
        elif key == "OR":
            if not any(matches_predicate(part, recipe) for part in _as_list(condition)):
                return False
        elif key == "NOT":
            if any(matches_predicate(part, recipe) for part in _as_list(condition)):
                return False
        elif _is_relation_filter(condition):
            if not _matches_relation(condition, recipe.get(key) or []):
                return False
        elif not _matches_field(condition, recipe.get(key)):
            return False
    return True


def filter_recipes(predicate: Predicate, recipes: Iterable[Recipe]) -> List[Recipe]:
    """Return the recipes matching *predicate*, keeping their order."""
    return [recipe for recipe in recipes if matches_predicate(predicate, recipe)]


def _as_list(value: Any) -> List[Predicate]:
    if isinstance(value, Mapping):
        return [value]
    return list(value)


def _is_relation_filter(condition: Any) -> bool:
    return isinstance(condition, Mapping) and bool(condition) and set(condition) <= {"some", "none", "every"}


def _matches_relation(condition: Mapping[str, Any], related: Iterable[Recipe]) -> bool:
    related = list(related)
    for quantifier, where in condition.items():
        hits = [matches_predicate(where, item) for item in related]
        if quantifier == "some" and not any(hits):
            return False
        if quantifier == "none" and any(hits):
            return False
        if quantifier == "every" and not all(hits):
            return False
    return True


def _matches_field(condition: Any, actual: Any) -> bool:
    if not isinstance(condition, Mapping):
        return actual == condition

    # Nested record, e.g. {"tag": {"type": "taste"}} against a tag association
    if not set(condition) <= set(_FILTERS):
        if not isinstance(actual, Mapping):
            return False
        return matches_predicate(condition, actual)

    for operator, expected in condition.items():
        if operator == "not" and isinstance(expected, Mapping):
            if _matches_field(expected, actual):
                return False
            continue
        if operator in ("in", "notIn") and not isinstance(expected, (list, tuple, set)):
            raise ValidationError(
                f"Filter '{operator}' expects a list",
                details={"operator": operator, "value": expected}
            )
        if not _FILTERS[operator](actual, expected):
            return False
    return True
