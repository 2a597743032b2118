"""Rule document persistence."""

from .json_store import JsonRuleStore

__all__ = ["JsonRuleStore"]
