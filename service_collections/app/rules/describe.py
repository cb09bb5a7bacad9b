"""
Human-readable summaries of rule configurations for the admin list views.
"""

from typing import Any, Mapping, Union

from .models import RuleConfig, RuleCondition, AutoRuleConfig, GroupLogic, parse_rule_config

FIELD_LABELS = {
    "cuisineId": "Cuisine",
    "locationId": "Region",
    "tagId": "Tag",
    "tag": "Tag",
    "cookTime": "Cook time",
    "prepTime": "Prep time",
    "difficulty": "Difficulty",
    "servings": "Servings",
}

OPERATOR_LABELS = {
    "eq": "=",
    "neq": "!=",
    "in": "in",
    "nin": "not in",
    "lt": "<",
    "lte": "<=",
    "gt": ">",
    "gte": ">=",
}

NO_RULES = "No rules (matches everything)"


def describe_rule_config(rules: Union[RuleConfig, Mapping[str, Any]]) -> str:
    """Summarise *rules*, e.g. ``(Tag[crowd] = low-fat OR Tag[taste] = light) AND (Cook time <= 30)``."""
    config = parse_rule_config(rules)

    if isinstance(config, AutoRuleConfig):
        return f"Auto match on {FIELD_LABELS.get(config.field, config.field)}"

    if not config.groups and not config.exclude:
        return NO_RULES

    group_descriptions = []
    for group in config.groups:
        if not group.conditions:
            continue
        joiner = " OR " if group.logic == GroupLogic.OR.value else " AND "
        group_descriptions.append(
            "(" + joiner.join(describe_condition(condition) for condition in group.conditions) + ")"
        )

    description = " AND ".join(group_descriptions) if group_descriptions else NO_RULES
    if config.exclude:
        excluded = ", ".join(describe_condition(condition) for condition in config.exclude)
        description += f" excluding: {excluded}"
    return description


def describe_condition(condition: RuleCondition) -> str:
    field = FIELD_LABELS.get(condition.field, condition.field)
    if condition.tag_type:
        field = f"{field}[{condition.tag_type}]"
    operator = OPERATOR_LABELS.get(condition.operator, condition.operator)
    if isinstance(condition.value, (list, tuple)):
        value = ", ".join(str(item) for item in condition.value)
    else:
        value = str(condition.value)
    return f"{field} {operator} {value}"
