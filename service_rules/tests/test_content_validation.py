"""
Unit tests for content and fallback configuration checks.
"""

import pytest

from service_rules.app.content.validation import (
    validate_content_configuration, validate_fallback_configuration,
)


def content_config(**overrides):
    config = {
        "cms": {"enabled": True, "maxYield": 3, "selectedTemplate": {"id": "cms_hero_banner"}},
        "offering": {"enabled": False},
        "priority": 1,
        "totalMaxYield": 3,
    }
    config.update(overrides)
    return config


def scenario(enabled=True, **content):
    return {"enabled": enabled, "content": {"option": "none", **content}}


class TestValidateContentConfiguration:
    """Test cases for validate_content_configuration."""

    def test_valid_configuration(self):
        validation = validate_content_configuration(content_config())

        assert validation.is_valid is True
        assert validation.warnings == []
        assert validation.has_content is True
        assert validation.to_dict() == {
            "isValid": True, "errors": [], "warnings": [], "hasContent": True, "priorityConflicts": [],
        }

    def test_cms_must_be_enabled(self):
        validation = validate_content_configuration(content_config(cms={"enabled": False}))

        assert validation.errors == ["CMS content source must be enabled as primary content"]
        assert validation.has_content is False

    def test_missing_cms_template_is_a_warning(self):
        validation = validate_content_configuration(content_config(cms={"enabled": True, "maxYield": 3}))

        assert validation.is_valid is True
        assert validation.warnings == ["No CMS template selected"]

    def test_offering_without_sources(self):
        validation = validate_content_configuration(content_config(
            offering={"enabled": True, "targetedLead": {"enabled": False}},
        ))

        assert validation.is_valid is True
        assert validation.warnings == ["Offering content enabled but no sources selected"]

    def test_offering_source_counts_as_content(self):
        validation = validate_content_configuration(content_config(
            cms={"enabled": False},
            offering={"enabled": True, "productReco": {"enabled": True, "maxYield": 2}},
        ))

        assert validation.has_content is True
        assert validation.is_valid is False

    @pytest.mark.parametrize("priority", [0, 101, "150"])
    def test_priority_range(self, priority):
        validation = validate_content_configuration(content_config(priority=priority))
        assert validation.errors == ["Priority must be between 1 and 100"]

    @pytest.mark.parametrize("total", [0, 6])
    def test_total_max_yield_range(self, total):
        validation = validate_content_configuration(content_config(totalMaxYield=total))
        assert validation.errors == ["Total max yield must be between 1 and 5 tiles"]

    def test_absent_priority_and_yield_are_not_checked(self):
        config = content_config()
        del config["priority"], config["totalMaxYield"]

        assert validate_content_configuration(config).is_valid is True

    def test_missing_block(self):
        validation = validate_content_configuration(None)
        assert validation.errors == ["CMS content source must be enabled as primary content"]


class TestValidateFallbackConfiguration:
    """Test cases for validate_fallback_configuration."""

    def test_nothing_enabled_is_a_warning(self):
        validation = validate_fallback_configuration({
            "ineligibleAudience": scenario(enabled=False),
            "emptySupply": scenario(enabled=False),
        })

        assert validation.is_valid is True
        assert validation.has_fallbacks is False
        assert validation.warnings == ["No fallback scenarios configured - users may see empty content"]

    def test_cms_option_requires_template(self):
        validation = validate_fallback_configuration({
            "ineligibleAudience": scenario(option="cms_content"),
            "emptySupply": scenario(enabled=False),
        })

        assert validation.has_fallbacks is True
        assert validation.errors == ["CMS template required when using CMS content option"]
        assert validation.scenario_errors == {
            "ineligible_audience": ["CMS template required when using CMS content option"],
            "empty_supply": [],
        }

    def test_default_tile_requires_title(self):
        validation = validate_fallback_configuration({
            "emptySupply": scenario(option="default_tile", defaultTileContent={"title": "", "description": "x"}),
        })

        assert validation.to_dict()["scenarioErrors"] == {
            "ineligible_audience": [],
            "empty_supply": ["Default tile title is required"],
        }
        assert validation.to_dict()["hasFallbacks"] is True
        assert validation.to_dict()["isValid"] is False

    def test_errors_are_collected_in_scenario_order(self):
        validation = validate_fallback_configuration({
            "emptySupply": scenario(option="cms_content"),
            "ineligibleAudience": scenario(option="default_tile"),
        })

        assert validation.errors == [
            "Default tile title is required",
            "CMS template required when using CMS content option",
        ]

    def test_complete_scenarios(self):
        validation = validate_fallback_configuration({
            "ineligibleAudience": scenario(option="cms_content", cmsTemplate={"id": "cms_news_brief"}),
            "emptySupply": scenario(option="default_tile", defaultTileContent={"title": "Explore our funds"}),
        })

        assert validation.is_valid is True
        assert validation.warnings == []

    def test_disabled_scenario_is_not_checked(self):
        validation = validate_fallback_configuration({
            "ineligibleAudience": scenario(enabled=False, option="cms_content"),
            "emptySupply": scenario(option="none"),
        })

        assert validation.is_valid is True
        assert validation.has_fallbacks is True
