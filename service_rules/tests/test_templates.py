"""
Unit tests for content templates and tokenized copy.
"""

import pytest

from service_rules.app.content.templates import (
    ALL_CONTENT_TEMPLATES, ContentSourceType, get_template, render_tokenized_copy, templates_for_source,
)


class TestTemplateCatalogue:
    """Test cases for the template catalogue."""

    def test_counts_per_source(self):
        assert len(templates_for_source("CMS")) == 3
        assert len(templates_for_source("TargetedLead")) == 3
        assert len(templates_for_source("ProductReco")) == 4
        assert len(templates_for_source()) == len(ALL_CONTENT_TEMPLATES) == 10

    def test_unknown_source(self):
        assert templates_for_source("Billboard") == []

    def test_ids_are_unique(self):
        ids = [t.id for t in ALL_CONTENT_TEMPLATES]
        assert len(ids) == len(set(ids))

    def test_get_template(self):
        template = get_template("lead_premium_showcase")

        assert template.source_type == ContentSourceType.TARGETED_LEAD
        assert template.to_dict()["sourceType"] == "TargetedLead"
        assert "expectedReturn" in template.to_dict()["tokenFields"]
        assert get_template("missing") is None


class TestRenderTokenizedCopy:
    """Test cases for render_tokenized_copy."""

    def test_sample_value(self):
        rendered = render_tokenized_copy("Read {{cms.title}} now", ContentSourceType.CMS)
        assert rendered == "Read Market Insights for Q4 2025 now"

    def test_key_is_last_path_segment(self):
        rendered = render_tokenized_copy("{{lead.offer.riskLevel}}", ContentSourceType.TARGETED_LEAD)
        assert rendered == "Moderate"

    def test_array_values_are_comma_joined(self):
        rendered = render_tokenized_copy("{{keyPoints}}", ContentSourceType.CMS)
        assert rendered == "Tech sector up 12%,Banking resilience noted,Green bonds trending"

    def test_fallback(self):
        rendered = render_tokenized_copy("Hi {{user.nickname| there }}!", ContentSourceType.CMS)
        assert rendered == "Hi there!"

    def test_unresolved_token_is_kept(self):
        template = "Hi {{user.nickname}}, {{user.city|}}"
        assert render_tokenized_copy(template, ContentSourceType.CMS) == template

    def test_source_type_as_string(self):
        assert render_tokenized_copy("{{productName}}", "ProductReco") == "KPlus Growth Fund"

    def test_custom_data(self):
        rendered = render_tokenized_copy(
            "{{name}} / {{count}} / {{empty|none}}",
            ContentSourceType.CMS,
            {"name": "Ploy", "count": 0, "empty": ""},
        )
        assert rendered == "Ploy / {{count}} / none"

    def test_values_print_like_the_editor(self):
        rendered = render_tokenized_copy(
            "{{flag}} / {{yield}} / {{rate}} / {{tags}}",
            ContentSourceType.CMS,
            {"flag": True, "yield": 5.0, "rate": 4.25, "tags": ["a", True, 2.0]},
        )
        assert rendered == "true / 5 / 4.25 / a,true,2"

    def test_unknown_source_type(self):
        with pytest.raises(ValueError):
            render_tokenized_copy("{{title}}", "Billboard")
