"""Services layer - internal linking pipeline and its entry points.

Services coordinate between the article store and the pure text
components. They contain no direct database access - that's delegated
to repositories.
"""

from internal_linker.services.article_linking import (
    ArticleLinkingService,
    RewriteResult,
)
from internal_linker.services.batch_linking import BatchLinkingJob, JobState
from internal_linker.services.candidate_finder import CandidateFinder
from internal_linker.services.internal_linking import (
    build_linking_service,
    get_article_store,
    rewrite_article_by_id,
    rewrite_with_internal_links,
    run_batch_internal_linking,
)
from internal_linker.services.keyword_extraction import (
    STOP_WORDS,
    Keyword,
    KeywordExtractor,
    get_keyword_extractor,
)
from internal_linker.services.link_audit import LinkAuditor
from internal_linker.services.link_insertion import (
    MAX_LINKS,
    LinkCandidate,
    LinkInserter,
    existing_link_targets,
    linkable_spans,
)

__all__ = [
    # Article linking
    "ArticleLinkingService",
    "RewriteResult",
    # Batch
    "BatchLinkingJob",
    "JobState",
    # Candidates
    "CandidateFinder",
    # Entry points
    "build_linking_service",
    "get_article_store",
    "rewrite_article_by_id",
    "rewrite_with_internal_links",
    "run_batch_internal_linking",
    # Keywords
    "STOP_WORDS",
    "Keyword",
    "KeywordExtractor",
    "get_keyword_extractor",
    # Insertion and audit
    "MAX_LINKS",
    "LinkAuditor",
    "LinkCandidate",
    "LinkInserter",
    "existing_link_targets",
    "linkable_spans",
]
