"""
Condition tree evaluation.

Evaluates a condition tree against a sectioned user record and records a
human-readable trace, children before parents, siblings in order. The
evaluator never raises for incomplete or malformed trees: every anomaly
becomes a ``False`` result plus a trace entry explaining it, so a rule can
be tested while it is still being authored.

Equality is strict and never coerces: ``"5"`` does not equal ``5`` and
``True`` does not equal ``1``. Only ``greater_than``/``less_than`` on number
attributes coerce their operands.
"""

import math
import re
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from shared.logging import get_logger

from .attributes import ATTRIBUTE_REGISTRY, AttributeRegistry
from .models import (
    AttributeGroup, ComparisonOperator, Condition, ConditionGroup, ConditionNode,
    ConditionTestResult, FieldType, GroupOperator, NodeEvaluation, TraceEntry, UserRecord,
)

logger = get_logger("rules.evaluator")

# User record sections the evaluator reads attribute values from.
RESOLVABLE_GROUPS: Tuple[str, ...] = (
    AttributeGroup.CUSTOMER.value,
    AttributeGroup.ACTIVITY.value,
    AttributeGroup.CUSTOM.value,
)

_DECIMAL_LITERAL = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_PREFIXED_LITERAL = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


def evaluate_condition(
    node: Condition,
    user: UserRecord,
    registry: AttributeRegistry = ATTRIBUTE_REGISTRY,
) -> Tuple[bool, str]:
    """Evaluate a single leaf. Returns ``(result, reason)``."""
    if not node.is_complete():
        return False, "Incomplete condition configuration"

    attribute = registry.get(node.attribute_id)
    if attribute is None:
        return False, f"Unknown attribute: {format_value(node.attribute_id)}"

    if attribute.group not in RESOLVABLE_GROUPS:
        return False, f"Unknown attribute group: {attribute.group}"

    actual = _section_value(user, attribute.group, attribute.id)
    if actual is None:
        return False, f"Missing value for {attribute.label}"

    result = compare_values(actual, node.value, node.comparison, attribute.type)
    reason = (
        f"{attribute.label} ({format_value(actual)}) {format_value(node.comparison)} "
        f"{format_value(node.value)} → {format_value(result)}"
    )
    return result, reason


def compare_values(actual: Any, expected: Any, operator: Any, field_type: Any) -> bool:
    """Compare an attribute value against a rule operand."""
    if operator == ComparisonOperator.EQUALS:
        return _strict_equals(actual, expected)

    if operator == ComparisonOperator.NOT_EQUALS:
        return not _strict_equals(actual, expected)

    if operator == ComparisonOperator.GREATER_THAN:
        if field_type == FieldType.NUMBER:
            return to_number(actual) > to_number(expected)
        return False

    if operator == ComparisonOperator.LESS_THAN:
        if field_type == FieldType.NUMBER:
            return to_number(actual) < to_number(expected)
        return False

    if operator == ComparisonOperator.CONTAINS:
        if _is_array(actual):
            return _includes(actual, expected)
        if isinstance(actual, str):
            # a non-string operand cannot be a substring
            if not isinstance(expected, str):
                return False
            return expected.lower() in actual.lower()
        return False

    # the rule operand is the candidate set for in / not_in
    if operator == ComparisonOperator.IN:
        if _is_array(expected):
            return _includes(expected, actual)
        return False

    if operator == ComparisonOperator.NOT_IN:
        if _is_array(expected):
            return not _includes(expected, actual)
        return False

    return False


def evaluate_node(
    node: ConditionNode,
    user: UserRecord,
    registry: AttributeRegistry = ATTRIBUTE_REGISTRY,
) -> NodeEvaluation:
    """Recursively evaluate ``node`` against ``user``.

    Every child of a group is evaluated, even once the group's result is
    settled, so the trace is complete.
    """
    trace: List[TraceEntry] = []

    if isinstance(node, Condition):
        result, reason = evaluate_condition(node, user, registry)
        trace.append(TraceEntry(node.id, result, reason))
        return NodeEvaluation(result, trace)

    if isinstance(node, ConditionGroup) and node.children is not None and node.operator:
        operator = node.operator

        if operator == GroupOperator.AND:
            result = True
            for child in node.children:
                child_eval = evaluate_node(child, user, registry)
                trace.extend(child_eval.trace)
                if not child_eval.result:
                    result = False

        elif operator == GroupOperator.OR:
            result = False
            for child in node.children:
                child_eval = evaluate_node(child, user, registry)
                trace.extend(child_eval.trace)
                if child_eval.result:
                    result = True

        elif operator == GroupOperator.NOT:
            if len(node.children) != 1:
                trace.append(TraceEntry(node.id, False, "NOT operator must have exactly one child"))
                return NodeEvaluation(False, trace)
            child_eval = evaluate_node(node.children[0], user, registry)
            trace.extend(child_eval.trace)
            result = not child_eval.result

        else:
            result = False
            trace.append(TraceEntry(node.id, False, f"Unknown operator: {format_value(operator)}"))

        trace.append(TraceEntry(node.id, result, f"{format_value(operator)} group → {format_value(result)}"))
        return NodeEvaluation(result, trace)

    trace.append(TraceEntry(_node_id(node), False, "Invalid node configuration"))
    return NodeEvaluation(False, trace)


def test_condition(
    root: ConditionNode,
    user: UserRecord,
    registry: AttributeRegistry = ATTRIBUTE_REGISTRY,
) -> ConditionTestResult:
    """Evaluate ``root`` for one user."""
    evaluation = evaluate_node(root, user, registry)
    return ConditionTestResult(user=user, matches=evaluation.result, evaluation_trace=evaluation.trace)


def test_condition_against_users(
    root: ConditionNode,
    users: Sequence[UserRecord],
    registry: AttributeRegistry = ATTRIBUTE_REGISTRY,
) -> List[ConditionTestResult]:
    """Evaluate ``root`` for each user independently, preserving input order."""
    results = [test_condition(root, user, registry) for user in users]
    logger.debug(
        "Condition tested against users",
        node_id=_node_id(root),
        users=len(results),
        matches=sum(1 for r in results if r.matches)
    )
    return results


# Not pytest tests, despite the names.
test_condition.__test__ = False
test_condition_against_users.__test__ = False


def format_value(value: Any) -> str:
    """Render a value the way the authoring UI prints it in traces.

    Booleans are lowercase, integral floats drop the fraction and arrays
    are comma-joined without brackets.
    """
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if _is_array(value):
        return ",".join("" if item is None else format_value(item) for item in value)
    if isinstance(value, Mapping):
        return "[object Object]"
    return str(value)


def to_number(value: Any) -> float:
    """Numeric coercion; unparseable input becomes NaN."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        return _int_to_float(value)
    if value is None:
        return 0.0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if text in ("Infinity", "+Infinity"):
            return math.inf
        if text == "-Infinity":
            return -math.inf
        if _DECIMAL_LITERAL.match(text):
            return float(text)
        if _PREFIXED_LITERAL.match(text):
            return _int_to_float(int(text, 0))
        return math.nan
    if _is_array(value):
        return to_number(format_value(value))
    return math.nan


def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def _section_value(user: UserRecord, group: str, attribute_id: str) -> Any:
    if not isinstance(user, Mapping):
        return None
    section = user.get(group)
    if not isinstance(section, Mapping):
        return None
    return section.get(attribute_id)


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    # arrays and objects are only equal to themselves
    return left is right


def _same_value_zero(left: Any, right: Any) -> bool:
    if isinstance(left, float) and isinstance(right, float) and math.isnan(left) and math.isnan(right):
        return True
    return _strict_equals(left, right)


def _includes(items: Sequence[Any], candidate: Any) -> bool:
    return any(_same_value_zero(item, candidate) for item in items)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _node_id(node: Any) -> str:
    node_id: Optional[Any] = getattr(node, "id", None)
    if node_id is None and isinstance(node, Mapping):
        node_id = node.get("id")
    return "" if node_id is None else str(node_id)
