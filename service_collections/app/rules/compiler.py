"""
Rule predicate compiler for the Collections Service.

Turns a collection rule configuration into a backend-agnostic ``where``
structure:

- groups are always combined with AND
- conditions inside a group follow the group's logic (AND / OR)
- exclude conditions are ORed together and negated
- empty groups and empty exclude lists contribute nothing

The compiler is a pure function of its arguments: no I/O, no logging.
"""

from typing import Any, List, Mapping, Optional, Union
import math
from numbers import Real

from shared.errors import ValidationError
from .models import (
    RuleConfig, RuleCondition, RuleGroup, RuleOperator, RuleField,
    AutoRuleConfig, CompileContext, Predicate,
    KNOWN_LOGIC, KNOWN_TAG_TYPES, RELATION_FIELDS, NUMERIC_FIELDS,
    RANGE_OPERATORS, LIST_OPERATORS,
    parse_rule_config, parse_context,
)

AND = "AND"
OR = "OR"
NOT = "NOT"


def compile_rule_predicate(
    rules: Union[RuleConfig, Mapping[str, Any]],
    context: Union[CompileContext, Mapping[str, Any], None] = None,
) -> Predicate:
    """Compile *rules* into a predicate, using *context* for id exclusions.

    Raises :class:`ValidationError` for malformed, non-empty conditions and
    for group logic other than AND / OR.
    """
    config = parse_rule_config(rules)
    ctx = parse_context(context)

    if isinstance(config, AutoRuleConfig):
        return _compile_auto(config)

    where: Predicate = {}

    group_predicates: List[Predicate] = []
    for index, group in enumerate(config.groups):
        group_predicate = _compile_group(group, index)
        if group_predicate is not None:
            group_predicates.append(group_predicate)
    if group_predicates:
        where[AND] = group_predicates

    exclude_leaves = [
        _compile_condition(condition, f"exclude[{index}]")
        for index, condition in enumerate(config.exclude)
    ]
    if exclude_leaves:
        where[NOT] = {OR: exclude_leaves}

    if ctx.excluded_recipe_ids:
        where["id"] = {"notIn": list(ctx.excluded_recipe_ids)}

    return where


def _compile_auto(config: AutoRuleConfig) -> Predicate:
    if not isinstance(config.field, str) or not config.field:
        raise ValidationError(
            "Auto rule requires a field",
            details={"field": config.field}
        )
    return {config.field: config.value}


def _compile_group(group: RuleGroup, index: int) -> Optional[Predicate]:
    if group.logic not in KNOWN_LOGIC:
        raise ValidationError(
            f"groups[{index}]: logic must be AND or OR, got {group.logic!r}",
            details={"group": index, "logic": group.logic}
        )
    if not group.conditions:
        return None

    leaves = [
        _compile_condition(condition, f"groups[{index}].conditions[{position}]")
        for position, condition in enumerate(group.conditions)
    ]
    return {group.logic: leaves}


def _compile_condition(condition: RuleCondition, location: str) -> Predicate:
    field = condition.field
    operator = condition.operator

    if field == RuleField.TAG.value:
        return _tag_leaf(condition, location)
    if field == RuleField.TAG_ID.value:
        return _tag_id_leaf(condition, location)
    if field in RELATION_FIELDS:
        return _relation_leaf(condition, location)
    if field in NUMERIC_FIELDS:
        return _numeric_leaf(condition, location)

    raise _condition_error(location, condition, f"unsupported field {field!r} with operator {operator!r}")


def _tag_leaf(condition: RuleCondition, location: str) -> Predicate:
    if condition.tag_type is None:
        raise _condition_error(location, condition, "tag condition requires tagType")
    if condition.tag_type not in KNOWN_TAG_TYPES:
        raise _condition_error(location, condition, f"unknown tagType {condition.tag_type!r}")
    if condition.operator != RuleOperator.EQ.value:
        raise _condition_error(location, condition, f"tag conditions only support 'eq', got {condition.operator!r}")
    _require_scalar(condition, location)

    return {"tags": {"some": {"tag": {"type": condition.tag_type}, "tagId": condition.value}}}


def _tag_id_leaf(condition: RuleCondition, location: str) -> Predicate:
    operator = condition.operator
    if operator in (RuleOperator.EQ.value, RuleOperator.NEQ.value):
        _require_scalar(condition, location)
        membership = {"tagId": condition.value}
    elif operator in LIST_OPERATORS:
        membership = {"tagId": {"in": _require_list(condition, location)}}
    else:
        raise _condition_error(location, condition, f"operator {operator!r} is not supported for tagId")

    quantifier = "some" if operator in (RuleOperator.EQ.value, RuleOperator.IN.value) else "none"
    return {"tags": {quantifier: membership}}


def _relation_leaf(condition: RuleCondition, location: str) -> Predicate:
    field = condition.field
    operator = condition.operator

    if operator == RuleOperator.EQ.value:
        _require_scalar(condition, location)
        return {field: condition.value}
    if operator == RuleOperator.NEQ.value:
        _require_scalar(condition, location)
        return {field: {"not": condition.value}}
    if operator == RuleOperator.IN.value:
        return {field: {"in": _require_list(condition, location)}}
    if operator == RuleOperator.NIN.value:
        return {field: {"notIn": _require_list(condition, location)}}

    raise _condition_error(location, condition, f"operator {operator!r} is not supported for {field}")


def _numeric_leaf(condition: RuleCondition, location: str) -> Predicate:
    field = condition.field
    operator = condition.operator

    if operator not in RANGE_OPERATORS and operator not in (RuleOperator.EQ.value, RuleOperator.NEQ.value):
        raise _condition_error(location, condition, f"operator {operator!r} is not supported for {field}")
    if not is_number(condition.value):
        raise _condition_error(location, condition, f"{field} requires a numeric value, got {condition.value!r}")

    if operator == RuleOperator.EQ.value:
        return {field: condition.value}
    if operator == RuleOperator.NEQ.value:
        return {field: {"not": condition.value}}
    return {field: {operator: condition.value}}


def is_number(value: Any) -> bool:
    """True for finite ints and floats; booleans are not numbers here."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _require_scalar(condition: RuleCondition, location: str) -> None:
    if condition.value is None or isinstance(condition.value, (list, tuple, dict)):
        raise _condition_error(location, condition, f"{condition.field} requires a single value")


def _require_list(condition: RuleCondition, location: str) -> List[Any]:
    if not isinstance(condition.value, (list, tuple)):
        raise _condition_error(
            location, condition, f"operator {condition.operator!r} requires a list value"
        )
    return list(condition.value)


def _condition_error(location: str, condition: RuleCondition, reason: str) -> ValidationError:
    return ValidationError(
        f"{location}: {reason}",
        details={
            "location": location,
            "condition": condition.model_dump(by_alias=True, exclude_none=True),
        }
    )
