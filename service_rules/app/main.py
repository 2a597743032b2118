"""
Rules service for the Audience Rules platform.

Stores personalization rules, serves the attribute catalogue and templates
to the authoring UI, and evaluates audience condition trees against sample
users with a full trace.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import NotFoundError, ValidationError
from shared.logging import set_rule_context

from .conditions import evaluator
from .conditions.attributes import ATTRIBUTE_REGISTRY, operators_for_type
from .conditions.models import node_from_dict
from .conditions.samples import SAMPLE_USERS
from .conditions.validation import summarize_condition, validate_condition_tree
from .content.templates import (
    SAMPLE_TOKEN_DATA, get_template, render_tokenized_copy, templates_for_source,
)
from .content.validation import validate_content_configuration, validate_fallback_configuration
from .models import (
    ConditionTestRequest, ConditionValidateRequest, RulePayload, RuleTestRequest, RuleValidateRequest,
    TemplateRenderRequest,
)
from .persistence.json_store import JsonRuleStore, to_iso


class RulesService(BaseService):
    """Rules service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__("rules", config=config)

        self.store = JsonRuleStore(
            self.config.data_file,
            version=self.config.document_version,
            default_duration_days=self.config.default_rule_duration_days,
            default_priority=self.config.default_rule_priority,
        )

        self._setup_rules_routes()

    def _setup_rules_routes(self):
        """Set up rules-specific routes."""

        @self.app.get("/api/health")
        async def api_health():
            return {
                "success": True,
                "message": "Rules API is running",
                "timestamp": to_iso(datetime.now(timezone.utc)),
            }

        @self.app.get("/api/rules")
        async def list_rules():
            """List all rules with the document meta block."""
            document = await self.store.list_rules()
            self.metrics.set_gauge("stored_rules", len(document["rules"]))
            return {"success": True, "rules": document["rules"], "meta": document["meta"]}

        @self.app.post("/api/rules/validate")
        async def validate_rule(request: Optional[RuleValidateRequest] = None):
            """Check a rule's content, fallback and audience blocks together."""
            request = request or RuleValidateRequest()
            content = validate_content_configuration(request.content)
            fallback = validate_fallback_configuration(request.fallback)
            response = {
                "success": True,
                "isValid": content.is_valid and fallback.is_valid,
                "content": content.to_dict(),
                "fallback": fallback.to_dict(),
            }

            if request.root_node is not None:
                root = node_from_dict(request.root_node)
                audience = validate_condition_tree(root, self.config.max_condition_depth)
                response["audience"] = {**audience.to_dict(), "summary": summarize_condition(root)}
                response["isValid"] = response["isValid"] and audience.is_valid

            return response

        @self.app.get("/api/rules/{rule_id}")
        async def get_rule(rule_id: str):
            set_rule_context(rule_id)
            rule = await self.store.get_rule(rule_id)
            return {"success": True, "rule": rule}

        @self.app.post("/api/rules", status_code=201)
        async def create_rule(payload: Optional[RulePayload] = None):
            """Create a rule; omitted fields take their defaults."""
            rule = await self.store.create_rule((payload or RulePayload()).to_document())
            set_rule_context(rule["id"])
            self.metrics.record_business_event("rule_created")
            return {"success": True, "rule": rule}

        @self.app.put("/api/rules/{rule_id}")
        async def update_rule(rule_id: str, payload: RulePayload):
            """Shallow-merge the sent fields into the stored rule."""
            set_rule_context(rule_id)
            rule = await self.store.update_rule(rule_id, payload.to_document())
            self.metrics.record_business_event("rule_updated")
            return {"success": True, "rule": rule}

        @self.app.delete("/api/rules/{rule_id}")
        async def delete_rule(rule_id: str):
            set_rule_context(rule_id)
            rule = await self.store.delete_rule(rule_id)
            self.metrics.record_business_event("rule_deleted")
            return {"success": True, "rule": rule, "message": "Rule deleted successfully"}

        @self.app.post("/api/rules/{rule_id}/duplicate", status_code=201)
        async def duplicate_rule(rule_id: str):
            set_rule_context(rule_id)
            rule = await self.store.duplicate_rule(rule_id)
            self.metrics.record_business_event("rule_duplicated")
            return {"success": True, "rule": rule}

        @self.app.post("/api/rules/{rule_id}/test")
        async def test_rule(rule_id: str, request: Optional[RuleTestRequest] = None):
            """Evaluate a stored rule's audience against the sample users."""
            set_rule_context(rule_id)
            rule = await self.store.get_rule(rule_id)
            audience = rule.get("audience") or {}
            root = audience.get("rootNode") if isinstance(audience, dict) else None
            if root is None:
                raise ValidationError("Rule has no audience condition", {"rule_id": rule_id})

            users = self._select_sample_users(request.user_ids if request else None)
            results = self._run_condition_test(root, users)
            return {"success": True, "ruleId": rule_id, **results}

        @self.app.get("/api/attributes")
        async def list_attributes(group: Optional[str] = Query(None, description="Filter by attribute group")):
            attributes = ATTRIBUTE_REGISTRY.by_group(group) if group else list(ATTRIBUTE_REGISTRY)
            return {"success": True, "attributes": [a.to_dict() for a in attributes]}

        @self.app.get("/api/attributes/{attribute_id}/operators")
        async def attribute_operators(attribute_id: str):
            """Comparison operators offered for an attribute's type."""
            attribute = ATTRIBUTE_REGISTRY.get(attribute_id)
            if attribute is None:
                raise NotFoundError("attribute", attribute_id)
            return {
                "success": True,
                "attributeId": attribute.id,
                "type": attribute.type,
                "operators": [op.to_dict() for op in operators_for_type(attribute.type)],
            }

        @self.app.get("/api/sample-users")
        async def sample_users():
            return {"success": True, "users": SAMPLE_USERS}

        @self.app.post("/api/conditions/test")
        async def test_conditions(request: ConditionTestRequest):
            """Evaluate a condition tree against sample or supplied users."""
            if request.users is not None:
                users = request.users
            else:
                users = self._select_sample_users(request.user_ids)
            return {"success": True, **self._run_condition_test(request.root_node, users)}

        @self.app.post("/api/conditions/validate")
        async def validate_conditions(request: ConditionValidateRequest):
            root = node_from_dict(request.root_node)
            validation = validate_condition_tree(root, request.max_depth or self.config.max_condition_depth)
            return {
                "success": True,
                **validation.to_dict(),
                "summary": summarize_condition(root),
            }

        @self.app.get("/api/templates")
        async def list_templates(source_type: Optional[str] = Query(None, alias="sourceType")):
            templates = templates_for_source(source_type)
            return {"success": True, "templates": [t.to_dict() for t in templates]}

        @self.app.get("/api/templates/{template_id}")
        async def get_content_template(template_id: str):
            template = get_template(template_id)
            if template is None:
                raise NotFoundError("template", template_id)
            return {
                "success": True,
                "template": template.to_dict(),
                "sampleData": SAMPLE_TOKEN_DATA[template.source_type],
            }

        @self.app.post("/api/templates/render")
        async def render_template(request: TemplateRenderRequest):
            rendered = render_tokenized_copy(request.template, request.source_type, request.data)
            return {"success": True, "rendered": rendered}

    def _select_sample_users(self, user_ids: Optional[List[str]]) -> List[Dict[str, Any]]:
        """Sample users in roster order, optionally restricted to ``user_ids``."""
        if not user_ids:
            return list(SAMPLE_USERS)

        known = {user["user_id"] for user in SAMPLE_USERS}
        unknown = [user_id for user_id in user_ids if user_id not in known]
        if unknown:
            raise ValidationError("Unknown sample user ids", {"user_ids": unknown})

        wanted = set(user_ids)
        return [user for user in SAMPLE_USERS if user["user_id"] in wanted]

    def _run_condition_test(self, root_node: Dict[str, Any], users: List[Dict[str, Any]]) -> Dict[str, Any]:
        root = node_from_dict(root_node)
        with self.metrics.time_operation("condition_evaluation_duration_seconds"):
            results = evaluator.test_condition_against_users(root, users)

        matched = sum(1 for result in results if result.matches)
        self.metrics.record_condition_evaluations(matched, len(results) - matched)

        self.logger.info(
            "Condition tested",
            node_id=root.id,
            users=len(results),
            matched=matched
        )

        return {
            "results": [result.to_dict() for result in results],
            "matchedCount": matched,
            "totalUsers": len(results),
        }

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check rule store availability."""
        dependencies = {}

        try:
            dependencies["rule_store"] = "ok" if await self.store.health_check() else "error"
        except OSError:
            dependencies["rule_store"] = "error"

        return dependencies

    async def start(self):
        """Start rules service components."""
        await self.store.start()
        stats = await self.store.get_rule_stats()
        self.metrics.set_gauge("stored_rules", stats["total_rules"])
        self.logger.info("Rules service started", total_rules=stats["total_rules"])

    async def stop(self):
        """Stop rules service components."""
        await self.store.stop()
        self.logger.info("Rules service stopped")


def create_app(config: Optional[ServiceConfig] = None):
    """Create rules service application."""
    service = RulesService(config)
    return service.app


if __name__ == "__main__":
    service = RulesService()
    service.run()
