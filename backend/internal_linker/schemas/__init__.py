"""Schemas layer - Pydantic models for engine results."""

from internal_linker.schemas.linking import (
    AuditResult,
    AuditRuleResult,
    RewritePreview,
    RunStats,
)

__all__ = [
    "AuditResult",
    "AuditRuleResult",
    "RewritePreview",
    "RunStats",
]
