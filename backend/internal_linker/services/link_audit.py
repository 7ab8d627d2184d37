"""Post-insertion audit of rewritten article bodies.

LinkAuditor parses the original and rewritten bodies with BeautifulSoup
and checks the hard rules every rewrite must satisfy before it may be
persisted. A rewrite that fails any rule is discarded by the caller.

Rules:
- link_budget: no more than max_links new anchors
- no_self_links: no inserted link points at the article itself
- no_duplicate_links: no target linked twice in one pass
- no_nested_links: no new <a> nested inside another <a>
- text_preserved: visible text is identical before and after
"""

from collections import Counter
from collections.abc import Sequence

from bs4 import BeautifulSoup

from internal_linker.core.logging import get_logger
from internal_linker.schemas.linking import AuditResult, AuditRuleResult
from internal_linker.services.link_insertion import MAX_LINKS, LinkCandidate

logger = get_logger(__name__)


def _count_nested_anchors(soup: BeautifulSoup) -> int:
    return sum(1 for a_tag in soup.find_all("a") if a_tag.find_parent("a") is not None)


class LinkAuditor:
    """Validates a rewritten body against the link insertion rules."""

    def __init__(self, max_links: int = MAX_LINKS) -> None:
        self.max_links = max_links

    def audit(
        self,
        original_body: str,
        new_body: str,
        links: Sequence[LinkCandidate],
        exclude_id: int | None,
    ) -> AuditResult:
        """Run all rules for one rewrite.

        Args:
            original_body: Body before insertion.
            new_body: Body after insertion.
            links: Links the inserter reports having placed.
            exclude_id: Id of the article being rewritten.

        Returns:
            AuditResult with one entry per rule.
        """
        original_soup = BeautifulSoup(original_body, "html.parser")
        new_soup = BeautifulSoup(new_body, "html.parser")

        rules = [
            self._check_budget(original_soup, new_soup, links),
            self._check_no_self_links(links, exclude_id),
            self._check_no_duplicate_links(links),
            self._check_no_nested_links(original_soup, new_soup),
            self._check_text_preserved(original_soup, new_soup),
        ]
        result = AuditResult(passed=all(r.passed for r in rules), rules=rules)

        logger.debug(
            "Link audit completed",
            extra={
                "exclude_id": exclude_id,
                "passed": result.passed,
                "failing_rules": result.failing_rules,
            },
        )
        return result

    def _check_budget(
        self,
        original_soup: BeautifulSoup,
        new_soup: BeautifulSoup,
        links: Sequence[LinkCandidate],
    ) -> AuditRuleResult:
        """link_budget: at most max_links new anchors, all accounted for."""
        added = len(new_soup.find_all("a")) - len(original_soup.find_all("a"))
        if added > self.max_links:
            return AuditRuleResult(
                rule="link_budget",
                passed=False,
                message=f"{added} anchors added (max {self.max_links})",
            )
        if added != len(links):
            return AuditRuleResult(
                rule="link_budget",
                passed=False,
                message=f"{added} anchors added but {len(links)} links reported",
            )
        return AuditRuleResult(
            rule="link_budget",
            passed=True,
            message=f"{added} anchors added",
        )

    def _check_no_self_links(
        self, links: Sequence[LinkCandidate], exclude_id: int | None
    ) -> AuditRuleResult:
        """no_self_links: source != target."""
        if exclude_id is not None and any(
            link.target_article.id == exclude_id for link in links
        ):
            return AuditRuleResult(
                rule="no_self_links",
                passed=False,
                message=f"Article {exclude_id} links to itself",
            )
        return AuditRuleResult(
            rule="no_self_links", passed=True, message="No self-links found"
        )

    def _check_no_duplicate_links(
        self, links: Sequence[LinkCandidate]
    ) -> AuditRuleResult:
        """no_duplicate_links: each target linked at most once."""
        target_counts = Counter(link.target_article.id for link in links)
        duplicates = {tid: n for tid, n in target_counts.items() if n > 1}
        if duplicates:
            return AuditRuleResult(
                rule="no_duplicate_links",
                passed=False,
                message="; ".join(
                    f"Target {tid} linked {n}x" for tid, n in duplicates.items()
                ),
            )
        return AuditRuleResult(
            rule="no_duplicate_links", passed=True, message="No duplicate target links"
        )

    def _check_no_nested_links(
        self, original_soup: BeautifulSoup, new_soup: BeautifulSoup
    ) -> AuditRuleResult:
        """no_nested_links: no new anchor inside an anchor."""
        before = _count_nested_anchors(original_soup)
        after = _count_nested_anchors(new_soup)
        if after > before:
            return AuditRuleResult(
                rule="no_nested_links",
                passed=False,
                message=f"{after - before} new nested anchors",
            )
        return AuditRuleResult(
            rule="no_nested_links", passed=True, message="No nested anchors added"
        )

    def _check_text_preserved(
        self, original_soup: BeautifulSoup, new_soup: BeautifulSoup
    ) -> AuditRuleResult:
        """text_preserved: links wrap existing text, never change it."""
        if original_soup.get_text() != new_soup.get_text():
            return AuditRuleResult(
                rule="text_preserved",
                passed=False,
                message="Visible text changed during link insertion",
            )
        return AuditRuleResult(
            rule="text_preserved", passed=True, message="Visible text unchanged"
        )
