"""
Rule data models for the Collections Service.

A collection's rule configuration is either an ``auto`` rule (one direct
attribute match) or a ``custom`` rule made of condition groups plus exclude
conditions.  Fields are kept loosely typed so malformed admin input still
parses and can be reported by the validator instead of failing at the
schema level.
"""

from typing import Any, Dict, List, Literal, Mapping, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ValidationError


class RuleMode(str, Enum):
    """Rule configuration modes."""
    AUTO = "auto"
    CUSTOM = "custom"


class GroupLogic(str, Enum):
    """How conditions inside one group are combined."""
    AND = "AND"
    OR = "OR"


class RuleField(str, Enum):
    """Recipe attributes a condition can match."""
    TAG = "tag"
    TAG_ID = "tagId"
    CUISINE_ID = "cuisineId"
    LOCATION_ID = "locationId"
    COOK_TIME = "cookTime"
    PREP_TIME = "prepTime"
    DIFFICULTY = "difficulty"
    SERVINGS = "servings"


class RuleOperator(str, Enum):
    """Condition operators."""
    EQ = "eq"
    NEQ = "neq"
    IN = "in"
    NIN = "nin"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"


class TagType(str, Enum):
    """Tag taxonomies a ``tag`` condition is scoped to."""
    SCENE = "scene"
    METHOD = "method"
    TASTE = "taste"
    CROWD = "crowd"
    OCCASION = "occasion"


AUTO_FIELDS = frozenset({RuleField.CUISINE_ID.value, RuleField.LOCATION_ID.value, RuleField.TAG_ID.value})
TAG_FIELDS = frozenset({RuleField.TAG.value})
RELATION_FIELDS = frozenset({RuleField.TAG_ID.value, RuleField.CUISINE_ID.value, RuleField.LOCATION_ID.value})
NUMERIC_FIELDS = frozenset({
    RuleField.COOK_TIME.value,
    RuleField.PREP_TIME.value,
    RuleField.DIFFICULTY.value,
    RuleField.SERVINGS.value,
})
KNOWN_FIELDS = TAG_FIELDS | RELATION_FIELDS | NUMERIC_FIELDS

KNOWN_OPERATORS = frozenset(op.value for op in RuleOperator)
RANGE_OPERATORS = frozenset({RuleOperator.LT.value, RuleOperator.LTE.value, RuleOperator.GT.value, RuleOperator.GTE.value})
LIST_OPERATORS = frozenset({RuleOperator.IN.value, RuleOperator.NIN.value})
TAG_OPERATORS = frozenset({RuleOperator.EQ.value})
RELATION_OPERATORS = frozenset({RuleOperator.EQ.value, RuleOperator.NEQ.value}) | LIST_OPERATORS
NUMERIC_OPERATORS = frozenset({RuleOperator.EQ.value, RuleOperator.NEQ.value}) | RANGE_OPERATORS

KNOWN_TAG_TYPES = frozenset(tag_type.value for tag_type in TagType)
KNOWN_LOGIC = frozenset(logic.value for logic in GroupLogic)

# Output of the compiler: nested AND / OR / NOT wrappers over field leaves.
# The empty dict is the predicate that matches everything.
Predicate = Dict[str, Any]


class _RuleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RuleCondition(_RuleModel):
    """Single condition: ``field operator value``, scoped by ``tagType`` for tags."""
    field: Optional[str] = Field(None, description="Recipe attribute to match")
    operator: Optional[str] = Field(None, description="Comparison operator")
    value: Any = Field(None, description="Operand: id, number or list of ids")
    tag_type: Optional[str] = Field(None, alias="tagType", description="Tag taxonomy, required for tag fields")


class RuleGroup(_RuleModel):
    """Conditions combined by the group's own logic."""
    logic: Optional[str] = Field(None, description="AND or OR")
    conditions: List[RuleCondition] = Field(default_factory=list)

    @field_validator("conditions", mode="before")
    @classmethod
    def _null_conditions(cls, value: Any) -> Any:
        return [] if value is None else value


class AutoRuleConfig(_RuleModel):
    """Direct equality shortcut, e.g. every recipe of one cuisine."""
    mode: Literal["auto"] = "auto"
    field: Optional[str] = None
    value: Any = None


class CustomRuleConfig(_RuleModel):
    """Groups are ANDed together; exclude conditions are ORed and negated."""
    mode: Literal["custom"] = "custom"
    groups: List[RuleGroup] = Field(default_factory=list)
    exclude: List[RuleCondition] = Field(default_factory=list)

    @field_validator("groups", "exclude", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return [] if value is None else value


RuleConfig = Union[AutoRuleConfig, CustomRuleConfig]

EMPTY_RULE = CustomRuleConfig()


class CompileContext(_RuleModel):
    """Ambient collection values available to the compiler."""
    cuisine_id: Optional[str] = Field(None, alias="cuisineId")
    location_id: Optional[str] = Field(None, alias="locationId")
    tag_id: Optional[str] = Field(None, alias="tagId")
    excluded_recipe_ids: List[str] = Field(default_factory=list, alias="excludedRecipeIds")

    @field_validator("excluded_recipe_ids", mode="before")
    @classmethod
    def _null_ids(cls, value: Any) -> Any:
        return [] if value is None else value


def parse_rule_config(payload: Union[RuleConfig, Mapping[str, Any]]) -> RuleConfig:
    """Coerce *payload* into a rule config model.

    Raises :class:`ValidationError` when the payload is not shaped like a rule
    configuration at all (unknown mode, non-list groups, ...).  Semantic
    problems such as an invalid group logic are left for the validator and
    the compiler to report.
    """
    if isinstance(payload, (AutoRuleConfig, CustomRuleConfig)):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Rule configuration must be an object",
            details={"received": type(payload).__name__}
        )

    mode = payload.get("mode")
    model = None
    if isinstance(mode, str):
        model = {RuleMode.AUTO.value: AutoRuleConfig, RuleMode.CUSTOM.value: CustomRuleConfig}.get(mode)
    if model is None:
        raise ValidationError(
            f"Unknown rule mode: {mode!r}",
            details={"mode": mode, "allowed": sorted(m.value for m in RuleMode)}
        )
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Malformed rule configuration",
            details={"errors": [_format_pydantic_error(error) for error in exc.errors()]}
        ) from exc


def parse_context(payload: Union[CompileContext, Mapping[str, Any], None]) -> CompileContext:
    """Coerce *payload* into a compile context; ``None`` is the empty context."""
    if payload is None:
        return CompileContext()
    if isinstance(payload, CompileContext):
        return payload
    try:
        return CompileContext.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Malformed compile context",
            details={"errors": [_format_pydantic_error(error) for error in exc.errors()]}
        ) from exc


def _format_pydantic_error(error: Mapping[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()))
    return f"{location}: {error.get('msg')}" if location else str(error.get("msg"))
