"""Pydantic v2 schemas for internal linking results.

- RunStats: Aggregate counts returned by one batch sweep
- AuditRuleResult / AuditResult: Outcome of post-insertion link checks
- RewritePreview: Single-article rewrite returned to admin tooling
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# BATCH RUN STATS
# =============================================================================


class RunStats(BaseModel):
    """Aggregate result of one batch linking sweep.

    Every visited article lands in exactly one of updated, skipped or errors.
    """

    total: int = Field(0, ge=0, description="Articles visited by the sweep")
    updated: int = Field(0, ge=0, description="Articles whose new body was persisted")
    skipped: int = Field(
        0, ge=0, description="Articles with an empty body or no new links"
    )
    errors: int = Field(0, ge=0, description="Articles whose write failed")
    cancelled: bool = Field(
        False,
        description="True when the sweep stopped early at its deadline",
    )
    duration_ms: float = Field(0.0, ge=0, description="Wall-clock duration")

    @model_validator(mode="after")
    def check_counts_add_up(self) -> "RunStats":
        """Ensure total equals updated + skipped + errors."""
        if self.total != self.updated + self.skipped + self.errors:
            raise ValueError(
                f"total ({self.total}) must equal updated + skipped + errors "
                f"({self.updated} + {self.skipped} + {self.errors})"
            )
        return self


# =============================================================================
# LINK AUDIT
# =============================================================================


class AuditRuleResult(BaseModel):
    """Result of a single audit rule."""

    rule: str = Field(..., description="Rule name")
    passed: bool = Field(..., description="Whether the rule passed")
    message: str = Field("", description="Human-readable detail")


class AuditResult(BaseModel):
    """Result of auditing one rewritten body."""

    passed: bool = Field(..., description="True if every rule passed")
    rules: list[AuditRuleResult] = Field(default_factory=list)

    @property
    def failing_rules(self) -> list[str]:
        return [r.rule for r in self.rules if not r.passed]


# =============================================================================
# REWRITE PREVIEW
# =============================================================================


class RewritePreview(BaseModel):
    """Rewritten body for one article, not persisted."""

    model_config = ConfigDict(from_attributes=True)

    article_id: int = Field(..., description="Article id")
    slug: str = Field(..., description="Article slug")
    changed: bool = Field(..., description="Whether the body would change")
    body: str = Field(..., description="Rewritten (or original) body")
