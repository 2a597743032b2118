"""
Rules service package for the Audience Rules platform.

This package manages personalization rules and decides which users a
rule's audience targets. It provides:

- app.main: API surface for rule CRUD, condition testing and templates.
- app.conditions: Condition tree model, attribute registry and evaluator.
- app.content: Content templates and tokenized copy rendering.
- app.persistence: JSON file storage for rule documents.

Guidelines:
- Evaluation is pure and never raises; problems become trace entries.
- Keep the trace complete so authors can see why a user matched.
"""
