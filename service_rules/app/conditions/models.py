"""
Condition tree data models.

Nodes are immutable values. A tree is a ``ConditionGroup`` whose children
are further groups or ``Condition`` leaves; anything the authoring UI sends
that fits neither shape becomes an ``UnrecognizedNode`` so that evaluation
can report it instead of failing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union


class GroupOperator(str, Enum):
    """Boolean operators for group nodes."""
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class ComparisonOperator(str, Enum):
    """Leaf comparison operators."""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CONTAINS = "contains"
    IN = "in"
    NOT_IN = "not_in"


class FieldType(str, Enum):
    """Declared value types of attributes."""
    BOOLEAN = "boolean"
    ENUM = "enum"
    MULTI_SELECT = "multi-select"
    NUMBER = "number"
    STRING = "string"


class AttributeGroup(str, Enum):
    """Sections of a user record."""
    CUSTOMER = "customer"
    ACTIVITY = "activity"
    CUSTOM = "custom"
    INVESTMENT = "investment"
    DIGITAL = "digital"


@dataclass(frozen=True)
class AttributeDefinition:
    """A targetable user attribute."""
    id: str
    label: str
    type: str
    group: str
    options: Tuple[str, ...] = ()
    featured: bool = False
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "group": self.group,
            "featured": self.featured,
            "description": self.description,
        }
        if self.options:
            data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class Condition:
    """Leaf node comparing one user attribute against ``value``."""
    id: str
    attribute_id: Optional[str] = None
    comparison: Optional[str] = None
    value: Any = None
    type: str = field(default="condition", init=False)

    def is_complete(self) -> bool:
        return bool(self.attribute_id) and bool(self.comparison) and not _is_blank(self.value)


@dataclass(frozen=True)
class ConditionGroup:
    """Group node combining its children with AND, OR or NOT.

    ``operator`` and ``children`` may be None while a rule is mid-edit.
    """
    id: str
    operator: Optional[str] = None
    children: Optional[Tuple["ConditionNode", ...]] = None
    type: str = field(default="group", init=False)


@dataclass(frozen=True)
class UnrecognizedNode:
    """A node whose ``type`` is neither ``group`` nor ``condition``."""
    id: str
    type: Optional[str] = None


ConditionNode = Union[ConditionGroup, Condition, UnrecognizedNode]

# section name -> attribute id -> value
UserRecord = Mapping[str, Any]


@dataclass(frozen=True)
class TraceEntry:
    """One line of an evaluation trace."""
    node_id: str
    result: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"nodeId": self.node_id, "result": self.result, "reason": self.reason}


class NodeEvaluation(NamedTuple):
    """Result of evaluating a (sub)tree: the boolean plus its post-order trace."""
    result: bool
    trace: List[TraceEntry]


@dataclass
class ConditionTestResult:
    """Evaluation of one root node against one user."""
    user: UserRecord
    matches: bool
    evaluation_trace: List[TraceEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user,
            "matches": self.matches,
            "evaluationTrace": [entry.to_dict() for entry in self.evaluation_trace],
        }


@dataclass
class ValidationResult:
    """Authoring-time validation outcome for a condition tree."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def node_from_dict(data: Any) -> ConditionNode:
    """Build a node from its stored JSON shape.

    Shape problems never raise; they surface as ``UnrecognizedNode`` or as a
    group with ``None`` operator/children.
    """
    if not isinstance(data, Mapping):
        return UnrecognizedNode(id="", type=None)

    node_id = str(data.get("id", ""))
    node_type = data.get("type")

    if node_type == "condition":
        return Condition(
            id=node_id,
            attribute_id=data.get("attributeId"),
            comparison=data.get("comparison"),
            value=data.get("value"),
        )

    if node_type == "group":
        raw_children = data.get("children")
        children = None
        if isinstance(raw_children, (list, tuple)):
            children = tuple(node_from_dict(child) for child in raw_children)
        return ConditionGroup(id=node_id, operator=data.get("operator"), children=children)

    return UnrecognizedNode(id=node_id, type=node_type if isinstance(node_type, str) else None)


def node_to_dict(node: ConditionNode) -> Dict[str, Any]:
    """Inverse of ``node_from_dict``."""
    if isinstance(node, Condition):
        return {
            "id": node.id,
            "type": "condition",
            "attributeId": node.attribute_id,
            "comparison": _plain(node.comparison),
            "value": node.value,
        }
    if isinstance(node, ConditionGroup):
        data: Dict[str, Any] = {"id": node.id, "type": "group", "operator": _plain(node.operator)}
        if node.children is not None:
            data["children"] = [node_to_dict(child) for child in node.children]
        return data
    return {"id": node.id, "type": node.type}


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value
