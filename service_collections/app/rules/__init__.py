"""
Collection rules package.

Compiles the rule configuration of a recipe collection into a storage
agnostic predicate. Modules of interest:

- models: Rule config, group, condition and compile context models.
- compiler: ``compile_rule_predicate`` (groups AND, group logic, NOT excludes).
- validation: ``validate_rule_config``, accumulating every problem found.
- describe: Human-readable rule summaries.
- evaluator: In-memory execution of compiled predicates for previews.
"""

from .compiler import compile_rule_predicate
from .validation import validate_rule_config, RuleValidationResult

__all__ = ["compile_rule_predicate", "validate_rule_config", "RuleValidationResult"]
