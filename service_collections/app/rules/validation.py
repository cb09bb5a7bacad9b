"""
Rule configuration validation.

``validate_rule_config`` never raises: every problem is collected so the
admin UI can show them all at once.
"""

from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from shared.errors import ValidationError
from .compiler import is_number
from .models import (
    RuleConfig, RuleCondition, AutoRuleConfig,
    AUTO_FIELDS, KNOWN_FIELDS, KNOWN_OPERATORS, KNOWN_LOGIC, KNOWN_TAG_TYPES,
    NUMERIC_FIELDS, RELATION_FIELDS, TAG_FIELDS,
    NUMERIC_OPERATORS, RELATION_OPERATORS, TAG_OPERATORS,
    RANGE_OPERATORS, LIST_OPERATORS,
    parse_rule_config,
)


class RuleValidationResult(BaseModel):
    """Outcome of validating a rule configuration."""
    valid: bool = Field(..., description="True when no problems were found")
    errors: List[str] = Field(default_factory=list, description="Human-readable problems, in input order")


def validate_rule_config(
    rules: Union[RuleConfig, Mapping[str, Any]],
    max_groups: Optional[int] = None,
    max_conditions: Optional[int] = None,
) -> RuleValidationResult:
    """Validate *rules* and report every problem found."""
    try:
        config = parse_rule_config(rules)
    except ValidationError as exc:
        errors = [exc.message]
        errors.extend(exc.details.get("errors", []))
        return RuleValidationResult(valid=False, errors=errors)

    if isinstance(config, AutoRuleConfig):
        errors = _validate_auto(config)
    else:
        errors = []
        if max_groups is not None and len(config.groups) > max_groups:
            errors.append(f"Too many groups: {len(config.groups)} (maximum {max_groups})")

        for group_number, group in enumerate(config.groups, start=1):
            if group.logic not in KNOWN_LOGIC:
                errors.append(f"Group {group_number}: logic must be AND or OR, got {group.logic!r}")
            if max_conditions is not None and len(group.conditions) > max_conditions:
                errors.append(
                    f"Group {group_number}: too many conditions: {len(group.conditions)} (maximum {max_conditions})"
                )
            for condition_number, condition in enumerate(group.conditions, start=1):
                prefix = f"Group {group_number} condition {condition_number}"
                errors.extend(f"{prefix}: {problem}" for problem in validate_condition(condition))

        if max_conditions is not None and len(config.exclude) > max_conditions:
            errors.append(f"Too many exclude conditions: {len(config.exclude)} (maximum {max_conditions})")
        for exclude_number, condition in enumerate(config.exclude, start=1):
            errors.extend(f"Exclude {exclude_number}: {problem}" for problem in validate_condition(condition))

    return RuleValidationResult(valid=not errors, errors=errors)


def _validate_auto(config: AutoRuleConfig) -> List[str]:
    errors = []
    if not config.field:
        errors.append("Auto rule requires a field")
    elif config.field not in AUTO_FIELDS:
        errors.append(f"Invalid auto rule field: {config.field!r}")
    if config.value is None or config.value == "":
        errors.append("Auto rule requires a value")
    return errors


def validate_condition(condition: RuleCondition) -> List[str]:
    """Return the problems of a single condition; empty when it is valid."""
    errors = []
    field = condition.field
    operator = condition.operator

    if not field:
        errors.append("field is required")
    elif field not in KNOWN_FIELDS:
        errors.append(f"unknown field {field!r}")

    if not operator:
        errors.append("operator is required")
    elif operator not in KNOWN_OPERATORS:
        errors.append(f"unknown operator {operator!r}")

    if condition.value is None:
        errors.append("value is required")

    if field in TAG_FIELDS:
        if not condition.tag_type:
            errors.append("tag conditions require tagType")
        elif condition.tag_type not in KNOWN_TAG_TYPES:
            errors.append(f"unknown tagType {condition.tag_type!r}")

    if operator in KNOWN_OPERATORS:
        if field in TAG_FIELDS and operator not in TAG_OPERATORS:
            errors.append(f"tag fields do not support operator {operator!r}")
        elif field in RELATION_FIELDS and operator not in RELATION_OPERATORS:
            errors.append(f"relation field {field} does not support operator {operator!r}")
        elif field in NUMERIC_FIELDS and operator not in NUMERIC_OPERATORS:
            errors.append(f"numeric field {field} does not support operator {operator!r}")

    if condition.value is not None:
        if field in NUMERIC_FIELDS or operator in RANGE_OPERATORS:
            if not is_number(condition.value):
                errors.append(f"{field} requires a numeric value, got {condition.value!r}")
        elif operator in LIST_OPERATORS:
            if not isinstance(condition.value, (list, tuple)):
                errors.append(f"operator {operator!r} requires a list value")
        elif isinstance(condition.value, (list, tuple, dict)):
            errors.append(f"operator {operator!r} requires a single value")

    return errors
