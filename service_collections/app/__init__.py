"""
Collections Service package for the Recipe Collections backend.

Curated collection pages group recipes by rule. This package provides:

- app.main: API surface for rule validation, compilation, previews and health.
- app.rules: Rule models, predicate compiler, validator and evaluator.
- app.qualification: Progress and publish-readiness classification.

Guidelines:
- Rule compilation and qualification are pure; storage and auth live elsewhere.
- Validate admin input before persisting it; compile only validated rules.
"""
