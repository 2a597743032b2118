"""
Attribute registry and comparison operator catalogue.

The registry is a read-only table built once at import. Lookups are by id;
the catalogue tells the authoring UI which comparisons make sense for a
field type (the evaluator does not enforce it).
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import AttributeDefinition, AttributeGroup, ComparisonOperator, FieldType


CUSTOMER_ATTRIBUTES: Tuple[AttributeDefinition, ...] = (
    AttributeDefinition(
        id="targeted_lead",
        label="Has Targeted Lead",
        type=FieldType.BOOLEAN.value,
        group=AttributeGroup.CUSTOMER.value,
        featured=True,
        description="Customer has an active targeted lead recommendation",
    ),
    AttributeDefinition(
        id="offering_types",
        label="Offering Types",
        type=FieldType.MULTI_SELECT.value,
        group=AttributeGroup.CUSTOMER.value,
        options=("Investment", "Loan", "Insurance", "Savings"),
        description="Types of financial products the customer is interested in",
    ),
    AttributeDefinition(
        id="aum_band",
        label="Assets Under Management",
        type=FieldType.ENUM.value,
        group=AttributeGroup.CUSTOMER.value,
        options=("<1M", "1–5M", "5–20M", "20M+"),
        description="Customer's total assets under management band",
    ),
    AttributeDefinition(
        id="risk_band",
        label="Risk Profile",
        type=FieldType.ENUM.value,
        group=AttributeGroup.CUSTOMER.value,
        options=("Cautious", "Balanced", "Aggressive"),
        description="Customer's investment risk tolerance",
    ),
    AttributeDefinition(
        id="customer_tier",
        label="Customer Tier",
        type=FieldType.ENUM.value,
        group=AttributeGroup.CUSTOMER.value,
        options=("Bronze", "Silver", "Gold", "Platinum"),
        description="Customer relationship tier based on value and engagement",
    ),
    AttributeDefinition(
        id="account_age_months",
        label="Account Age (Months)",
        type=FieldType.NUMBER.value,
        group=AttributeGroup.CUSTOMER.value,
        description="Number of months since account was opened",
    ),
)

ACTIVITY_ATTRIBUTES: Tuple[AttributeDefinition, ...] = (
    AttributeDefinition(
        id="last_login_days",
        label="Days Since Last Login",
        type=FieldType.NUMBER.value,
        group=AttributeGroup.ACTIVITY.value,
        description="Number of days since the user last logged in",
    ),
    AttributeDefinition(
        id="page_views_30d",
        label="Page Views (30 days)",
        type=FieldType.NUMBER.value,
        group=AttributeGroup.ACTIVITY.value,
        description="Total page views in the last 30 days",
    ),
    AttributeDefinition(
        id="product_interactions",
        label="Product Interactions",
        type=FieldType.MULTI_SELECT.value,
        group=AttributeGroup.ACTIVITY.value,
        options=("Viewed Details", "Added to Watchlist", "Calculated Returns", "Downloaded Brochure"),
        description="Types of interactions with products in the last 30 days",
    ),
    AttributeDefinition(
        id="has_recent_transaction",
        label="Has Recent Transaction",
        type=FieldType.BOOLEAN.value,
        group=AttributeGroup.ACTIVITY.value,
        description="Has made a transaction in the last 30 days",
    ),
    AttributeDefinition(
        id="session_duration_avg",
        label="Average Session Duration (min)",
        type=FieldType.NUMBER.value,
        group=AttributeGroup.ACTIVITY.value,
        description="Average session duration in minutes over the last 30 days",
    ),
)

CUSTOM_ATTRIBUTES: Tuple[AttributeDefinition, ...] = (
    AttributeDefinition(
        id="marketing_segment",
        label="Marketing Segment",
        type=FieldType.ENUM.value,
        group=AttributeGroup.CUSTOM.value,
        options=("High-Value", "Growth", "Retention", "Acquisition"),
        description="Custom marketing segmentation",
    ),
    AttributeDefinition(
        id="campaign_tags",
        label="Campaign Tags",
        type=FieldType.MULTI_SELECT.value,
        group=AttributeGroup.CUSTOM.value,
        options=("Q4-Promo", "New-Year", "Wealth-Focus", "Digital-First"),
        description="Custom campaign targeting tags",
    ),
    AttributeDefinition(
        id="custom_score",
        label="Custom Score",
        type=FieldType.NUMBER.value,
        group=AttributeGroup.CUSTOM.value,
        description="Custom scoring metric (0-100)",
    ),
    AttributeDefinition(
        id="feature_flags",
        label="Feature Flags",
        type=FieldType.MULTI_SELECT.value,
        group=AttributeGroup.CUSTOM.value,
        options=("beta-features", "premium-ui", "advanced-analytics", "mobile-enhanced"),
        description="Active feature flags for the user",
    ),
)


class AttributeRegistry:
    """Read-only id -> AttributeDefinition table."""

    def __init__(self, attributes: Iterable[AttributeDefinition]):
        self._attributes: Dict[str, AttributeDefinition] = {}
        for attribute in attributes:
            if attribute.id in self._attributes:
                raise ValueError(f"Duplicate attribute id {attribute.id}")
            self._attributes[attribute.id] = attribute

    def get(self, attribute_id: Optional[str]) -> Optional[AttributeDefinition]:
        if not isinstance(attribute_id, str):
            return None
        return self._attributes.get(attribute_id)

    def by_group(self, group: str) -> List[AttributeDefinition]:
        return [attr for attr in self._attributes.values() if attr.group == group]

    def featured(self) -> List[AttributeDefinition]:
        return [attr for attr in self._attributes.values() if attr.featured]

    def __contains__(self, attribute_id: object) -> bool:
        return attribute_id in self._attributes

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self._attributes.values())

    def __len__(self) -> int:
        return len(self._attributes)


ATTRIBUTE_REGISTRY = AttributeRegistry(CUSTOMER_ATTRIBUTES + ACTIVITY_ATTRIBUTES + CUSTOM_ATTRIBUTES)


def get_attribute_by_id(attribute_id: Optional[str]) -> Optional[AttributeDefinition]:
    """Look up an attribute in the default registry."""
    return ATTRIBUTE_REGISTRY.get(attribute_id)


@dataclass(frozen=True)
class OperatorOption:
    """A comparison operator as offered to rule authors."""
    value: str
    label: str
    types: Tuple[str, ...]

    def to_dict(self):
        return {"value": self.value, "label": self.label, "types": list(self.types)}


COMPARISON_OPERATORS: Tuple[OperatorOption, ...] = (
    OperatorOption(
        ComparisonOperator.EQUALS.value, "equals (=)",
        (FieldType.BOOLEAN.value, FieldType.ENUM.value, FieldType.STRING.value, FieldType.NUMBER.value),
    ),
    OperatorOption(
        ComparisonOperator.NOT_EQUALS.value, "does not equal (≠)",
        (FieldType.BOOLEAN.value, FieldType.ENUM.value, FieldType.STRING.value, FieldType.NUMBER.value),
    ),
    OperatorOption(ComparisonOperator.GREATER_THAN.value, "greater than (>)", (FieldType.NUMBER.value,)),
    OperatorOption(ComparisonOperator.LESS_THAN.value, "less than (<)", (FieldType.NUMBER.value,)),
    OperatorOption(
        ComparisonOperator.CONTAINS.value, "contains",
        (FieldType.MULTI_SELECT.value, FieldType.STRING.value),
    ),
    OperatorOption(
        ComparisonOperator.IN.value, "is one of",
        (FieldType.ENUM.value, FieldType.MULTI_SELECT.value),
    ),
    OperatorOption(
        ComparisonOperator.NOT_IN.value, "is not one of",
        (FieldType.ENUM.value, FieldType.MULTI_SELECT.value),
    ),
)


def operators_for_type(field_type: str) -> List[OperatorOption]:
    """Comparison operators applicable to a field type, in catalogue order."""
    return [op for op in COMPARISON_OPERATORS if field_type in op.types]


def operator_label(comparison: Optional[str]) -> Optional[str]:
    """Display label for a comparison, or the raw value if unknown."""
    for op in COMPARISON_OPERATORS:
        if op.value == comparison:
            return op.label
    return comparison
