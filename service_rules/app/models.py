"""
Request models for the rules HTTP API.

Bodies use the authoring UI's camelCase keys; Python attributes are
snake_case through an alias generator.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .content.templates import ContentSourceType


class CamelModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RulePayload(CamelModel):
    """Rule fields for create and update.

    Unknown keys are kept so the document can carry editor-specific data.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: Optional[str] = Field(None, description="Rule name")
    status: Optional[str] = Field(None, description="Draft, Active, Scheduled or Inactive")
    priority: Optional[int] = Field(None, ge=1, le=100, description="Rule priority")
    audience_summary: Optional[str] = Field(None, description="Human-readable audience summary")
    content_sources: Optional[List[str]] = Field(None, description="Content source types")
    start_date: Optional[str] = Field(None, description="ISO-8601 start date")
    end_date: Optional[str] = Field(None, description="ISO-8601 end date")
    audience: Optional[Dict[str, Any]] = Field(None, description="Audience block with rootNode")
    content: Optional[Dict[str, Any]] = Field(None, description="Content configuration")
    fallback: Optional[Dict[str, Any]] = Field(None, description="Fallback content")
    content_files: Optional[List[Dict[str, Any]]] = Field(None, description="Uploaded content files")

    def to_document(self) -> Dict[str, Any]:
        """Only the keys the client actually sent, in camelCase."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class ConditionTestRequest(CamelModel):
    """Evaluate a condition tree against sample or supplied users."""
    root_node: Dict[str, Any] = Field(..., description="Root condition node")
    user_ids: Optional[List[str]] = Field(None, description="Restrict to these sample users")
    users: Optional[List[Dict[str, Any]]] = Field(None, description="Evaluate these users instead of the samples")


class RuleTestRequest(CamelModel):
    """Evaluate a stored rule's audience."""
    user_ids: Optional[List[str]] = Field(None, description="Restrict to these sample users")


class ConditionValidateRequest(CamelModel):
    """Validate a condition tree."""
    root_node: Dict[str, Any] = Field(..., description="Root condition node")
    max_depth: Optional[int] = Field(None, ge=1, description="Override the configured nesting limit")


class TemplateRenderRequest(CamelModel):
    """Render tokenized copy with a source type's sample data."""
    template: str = Field(..., description="Copy containing {{path|fallback}} tokens")
    source_type: ContentSourceType = Field(..., description="Content source type")
    data: Optional[Dict[str, Any]] = Field(None, description="Token values overriding the sample data")


class RuleValidateRequest(CamelModel):
    """Validate the authored blocks of a rule before saving it."""
    content: Optional[Dict[str, Any]] = Field(None, description="Content configuration")
    fallback: Optional[Dict[str, Any]] = Field(None, description="Fallback configuration")
    root_node: Optional[Dict[str, Any]] = Field(None, description="Root condition node of the audience")
