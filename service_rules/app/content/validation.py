"""
Authoring-time checks for a rule's content and fallback blocks.

Both blocks are validated in their stored JSON shape (camelCase keys), so a
rule can be checked before or after it is saved.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..conditions.evaluator import to_number
from ..conditions.models import ValidationResult

MIN_PRIORITY = 1
MAX_PRIORITY = 100
MIN_TOTAL_YIELD = 1
MAX_TOTAL_YIELD = 5


class FallbackScenario(str, Enum):
    """When a rule falls back to default content."""
    INELIGIBLE_AUDIENCE = "ineligible_audience"
    EMPTY_SUPPLY = "empty_supply"


class FallbackOption(str, Enum):
    CMS_CONTENT = "cms_content"
    DEFAULT_TILE = "default_tile"
    NONE = "none"


# Scenario -> key of its block in the fallback configuration
FALLBACK_SCENARIO_KEYS = {
    FallbackScenario.INELIGIBLE_AUDIENCE: "ineligibleAudience",
    FallbackScenario.EMPTY_SUPPLY: "emptySupply",
}


@dataclass
class ContentValidationResult(ValidationResult):
    has_content: bool = False
    priority_conflicts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "hasContent": self.has_content,
            "priorityConflicts": list(self.priority_conflicts),
        }


@dataclass
class FallbackValidationResult(ValidationResult):
    has_fallbacks: bool = False
    scenario_errors: Dict[str, List[str]] = field(
        default_factory=lambda: {scenario.value: [] for scenario in FallbackScenario}
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "hasFallbacks": self.has_fallbacks,
            "scenarioErrors": {scenario: list(errors) for scenario, errors in self.scenario_errors.items()},
        }


def validate_content_configuration(content: Optional[Mapping[str, Any]]) -> ContentValidationResult:
    """Check the content sources, priority and tile budget of a rule.

    CMS is the primary source and must stay enabled. Offering content only
    counts once one of its sources is switched on. Priority and total yield
    are checked only when present.
    """
    content = _block(content)
    cms = _block(content.get("cms"))
    offering = _block(content.get("offering"))
    validation = ContentValidationResult()

    if not cms.get("enabled"):
        validation.errors.append("CMS content source must be enabled as primary content")
    else:
        validation.has_content = True
        if not cms.get("selectedTemplate"):
            validation.warnings.append("No CMS template selected")

    if offering.get("enabled"):
        sources = (_block(offering.get("targetedLead")), _block(offering.get("productReco")))
        if any(source.get("enabled") for source in sources):
            validation.has_content = True
        else:
            validation.warnings.append("Offering content enabled but no sources selected")

    if _out_of_range(content.get("priority"), MIN_PRIORITY, MAX_PRIORITY):
        validation.errors.append(f"Priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")

    if _out_of_range(content.get("totalMaxYield"), MIN_TOTAL_YIELD, MAX_TOTAL_YIELD):
        validation.errors.append(f"Total max yield must be between {MIN_TOTAL_YIELD} and {MAX_TOTAL_YIELD} tiles")

    return validation


def validate_fallback_configuration(fallback: Optional[Mapping[str, Any]]) -> FallbackValidationResult:
    """Check each enabled fallback scenario has the content its option needs."""
    fallback = _block(fallback)
    validation = FallbackValidationResult()
    any_enabled = False

    for scenario, key in FALLBACK_SCENARIO_KEYS.items():
        config = _block(fallback.get(key))
        if not config.get("enabled"):
            continue

        any_enabled = True
        errors = validation.scenario_errors[scenario.value]
        scenario_content = _block(config.get("content"))
        option = scenario_content.get("option")

        if option == FallbackOption.CMS_CONTENT.value and not scenario_content.get("cmsTemplate"):
            errors.append("CMS template required when using CMS content option")
        if option == FallbackOption.DEFAULT_TILE.value:
            tile = _block(scenario_content.get("defaultTileContent"))
            if not tile.get("title"):
                errors.append("Default tile title is required")

    validation.has_fallbacks = any_enabled
    for errors in validation.scenario_errors.values():
        validation.errors.extend(errors)

    if not any_enabled:
        validation.warnings.append("No fallback scenarios configured - users may see empty content")

    return validation


def _block(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _out_of_range(value: Any, low: int, high: int) -> bool:
    # Absent values are not checked; unparseable ones never compare
    if value is None:
        return False
    number = to_number(value)
    if math.isnan(number):
        return False
    return number < low or number > high
