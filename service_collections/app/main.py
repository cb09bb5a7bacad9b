"""
Collections service for the Recipe Collections backend.

Exposes the collection rule engine and the qualification calculator to the
admin backend: rule validation, predicate compilation, rule previews against
recipe snapshots and publish-readiness checks.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from shared.base_service import BaseService
from shared.errors import ConfigurationError, ValidationError
from shared.logging import set_collection_context

from .rules.compiler import compile_rule_predicate
from .rules.describe import describe_rule_config
from .rules.evaluator import filter_recipes
from .rules.validation import validate_rule_config, RuleValidationResult
from .qualification.calculator import assess_collection, get_qualified_status_info

PUBLISHED = "published"


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    collection_id: Optional[str] = Field(None, alias="collectionId", description="Collection the request is made for")


class RulesRequest(_Request):
    """Request body carrying a rule configuration."""
    rules: Dict[str, Any] = Field(..., description="Rule configuration (auto or custom mode)")


class CompileRequest(RulesRequest):
    """Request body for predicate compilation."""
    context: Optional[Dict[str, Any]] = Field(None, description="cuisineId / locationId / tagId / excludedRecipeIds")


class PreviewRequest(CompileRequest):
    """Request body for a rule preview over recipe snapshots."""
    recipes: List[Dict[str, Any]] = Field(default_factory=list, description="Recipe records to match")


class QualificationRequest(_Request):
    """Request body for a qualification check."""
    published_count: int = Field(..., ge=0, alias="publishedCount")
    target_count: Optional[int] = Field(None, ge=0, alias="targetCount")
    min_required: Optional[int] = Field(None, ge=0, alias="minRequired")


class CollectionsService(BaseService):
    """Collections service implementation."""

    def __init__(self):
        super().__init__("collections", 8013)
        self._setup_collections_routes()

    def _setup_collections_routes(self):
        """Set up collection rule routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "collections",
                "message": "Recipe Collections - Collections Service",
                "version": "1.0.0",
                "capabilities": ["rule_validation", "rule_compilation", "rule_preview", "qualification"]
            }

        @self.app.post("/collections/rules/validate", response_model=RuleValidationResult)
        async def validate_rules(request: RulesRequest):
            """Report every problem of a rule configuration."""
            set_collection_context(request.collection_id)
            return self.validate(request.rules)

        @self.app.post("/collections/rules/compile")
        async def compile_rules(request: CompileRequest):
            """Compile a rule configuration into a storage predicate."""
            set_collection_context(request.collection_id)
            where = self.compile(request.rules, request.context)
            return {
                "where": where,
                "description": describe_rule_config(request.rules),
            }

        @self.app.post("/collections/rules/preview")
        async def preview_rules(request: PreviewRequest):
            """Count the published recipes a rule configuration would select."""
            set_collection_context(request.collection_id)
            where = self.compile(request.rules, request.context)
            published = [recipe for recipe in request.recipes if recipe.get("status") == PUBLISHED]
            matched = filter_recipes(where, published)

            self.logger.info(
                "Rule preview",
                candidates=len(published),
                matched=len(matched)
            )
            return {
                "count": len(matched),
                "hasRules": bool(where),
                "recipeIds": [recipe.get("id") for recipe in matched],
            }

        @self.app.post("/collections/qualification")
        async def qualification(request: QualificationRequest):
            """Compute progress and qualification status from recipe counts."""
            set_collection_context(request.collection_id)
            target_count = request.target_count
            if target_count is None:
                target_count = self.config.default_target_count
            min_required = request.min_required
            if min_required is None:
                min_required = self.config.default_min_required

            report = assess_collection(
                request.published_count,
                target_count,
                min_required,
                near_threshold=self.config.near_threshold
            )
            self.metrics.increment_counter("qualification_checks_total", status=report.status.value)

            payload = report.model_dump(by_alias=True, mode="json")
            payload["statusInfo"] = get_qualified_status_info(report.status).model_dump()
            return payload

    def validate(self, rules: Dict[str, Any]) -> RuleValidationResult:
        """Validate *rules* within the configured size bounds."""
        result = validate_rule_config(
            rules,
            max_groups=self.config.max_rule_groups,
            max_conditions=self.config.max_group_conditions
        )
        self.metrics.increment_counter("rule_validations_total", result="valid" if result.valid else "invalid")
        if not result.valid:
            self.logger.info("Rule configuration rejected", error_count=len(result.errors))
        return result

    def compile(self, rules: Dict[str, Any], context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Validate, then compile *rules*; raises ConfigurationError or ValidationError."""
        result = self.validate(rules)
        if not result.valid:
            self.metrics.increment_counter("rule_compilations_total", outcome="rejected")
            raise ConfigurationError(errors=result.errors)

        mode = str(rules.get("mode"))
        with self.metrics.time_operation("rule_compile_duration_seconds", mode=mode):
            try:
                where = compile_rule_predicate(rules, context)
            except ValidationError:
                self.metrics.increment_counter("rule_compilations_total", outcome="error")
                raise

        self.metrics.increment_counter("rule_compilations_total", outcome="ok")
        self.logger.debug(
            "Rule compiled",
            mode=mode,
            groups=len(rules.get("groups") or []),
            excludes=len(rules.get("exclude") or [])
        )
        return where


def create_app():
    """Create collections service application."""
    service = CollectionsService()
    return service.app


if __name__ == "__main__":
    service = CollectionsService()
    service.run()
