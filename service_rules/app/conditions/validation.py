"""
Authoring-time checks and audience summaries for condition trees.

Unlike evaluation, validation reports every problem in the tree at once so
the editor can list them before a rule is saved.
"""

from typing import Any, Optional

from .attributes import ATTRIBUTE_REGISTRY, AttributeRegistry, operator_label
from .models import (
    Condition, ConditionGroup, ConditionNode, GroupOperator, ValidationResult,
)

DEFAULT_MAX_DEPTH = 5


def validate_condition_tree(root: ConditionNode, max_depth: int = DEFAULT_MAX_DEPTH) -> ValidationResult:
    """Collect errors and warnings for every node, parents before children."""
    validation = ValidationResult()
    _validate_node(root, 0, max_depth, validation)
    return validation


def _validate_node(node: Any, depth: int, max_depth: int, validation: ValidationResult) -> None:
    node_id = getattr(node, "id", "")

    if depth > max_depth:
        validation.errors.append(f"Node {node_id}: Maximum nesting depth of {max_depth} exceeded")

    if isinstance(node, Condition):
        if not node.attribute_id:
            validation.errors.append(f"Condition {node_id}: No attribute selected")
        if not node.comparison:
            validation.errors.append(f"Condition {node_id}: No comparison operator selected")
        if node.value is None or node.value == "":
            validation.errors.append(f"Condition {node_id}: No value specified")
        return

    if isinstance(node, ConditionGroup):
        if not node.operator:
            validation.errors.append(f"Group {node_id}: No operator selected")
        if not node.children:
            validation.warnings.append(f"Group {node_id}: No child conditions")
        if node.operator == GroupOperator.NOT and node.children and len(node.children) > 1:
            validation.errors.append(f"Group {node_id}: NOT operator can only have one child")
        for child in node.children or ():
            _validate_node(child, depth + 1, max_depth, validation)
        return

    validation.errors.append(f"Node {node_id}: Unrecognized node type")


def summarize_condition(root: ConditionNode, registry: AttributeRegistry = ATTRIBUTE_REGISTRY) -> str:
    """Render a tree as a one-line audience summary."""
    return _summarize(root, registry, nested=False)


def _summarize(node: Any, registry: AttributeRegistry, nested: bool) -> str:
    if isinstance(node, Condition):
        return describe_condition(node, registry)

    if isinstance(node, ConditionGroup):
        operator = getattr(node.operator, "value", node.operator)
        children = list(node.children or ())
        if operator == GroupOperator.NOT.value:
            inner = _summarize(children[0], registry, nested=False) if len(children) == 1 else "Invalid NOT group"
            return f"NOT ({inner})"
        if not children:
            return "Everyone" if operator == GroupOperator.AND.value else "No one"
        parts = [_summarize(child, registry, nested=True) for child in children]
        text = f" {operator or '?'} ".join(parts)
        if nested and len(parts) > 1:
            return f"({text})"
        return text

    return "Invalid condition"


def describe_condition(node: Condition, registry: AttributeRegistry = ATTRIBUTE_REGISTRY) -> str:
    """Human-readable preview of a single leaf, e.g. ``Risk Profile is one of [Balanced, Aggressive]``."""
    attribute = registry.get(node.attribute_id)
    if attribute is None or not node.comparison or node.value is None or node.value == "":
        return "Incomplete condition"
    label: Optional[str] = operator_label(getattr(node.comparison, "value", node.comparison))
    return f"{attribute.label} {label} {_value_text(node.value)}"


def _value_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_value_text(item) for item in value) + "]"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)

