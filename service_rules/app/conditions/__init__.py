"""
Audience condition package.

Defines the condition tree model, the attribute registry the leaves refer
to, and the evaluator that decides whether a user record matches a tree.

Modules of interest:
- models: Node types, trace entries and result containers.
- attributes: Attribute registry and comparison operator catalogue.
- evaluator: Recursive evaluation with a post-order trace.
- validation: Authoring-time checks and audience summaries.
- samples: Sample users for interactive testing.
"""

from .attributes import ATTRIBUTE_REGISTRY, AttributeRegistry, get_attribute_by_id
from .evaluator import compare_values, evaluate_condition, evaluate_node
from .models import (
    AttributeDefinition, Condition, ConditionGroup, ConditionNode, ConditionTestResult,
    NodeEvaluation, TraceEntry, UnrecognizedNode, node_from_dict, node_to_dict,
)

__all__ = [
    "ATTRIBUTE_REGISTRY",
    "AttributeDefinition",
    "AttributeRegistry",
    "Condition",
    "ConditionGroup",
    "ConditionNode",
    "ConditionTestResult",
    "NodeEvaluation",
    "TraceEntry",
    "UnrecognizedNode",
    "compare_values",
    "evaluate_condition",
    "evaluate_node",
    "get_attribute_by_id",
    "node_from_dict",
    "node_to_dict",
]
