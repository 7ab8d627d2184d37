"""Keyword extraction for internal link discovery.

Derives ranked keyword sets from an article title and from an HTML body.
Keywords are plain lowercase words: no stemming, no phrase detection,
ranked by raw term frequency only.

Features:
- Title keywords in first-seen order (deduplicated)
- Body keywords ranked by frequency, ties broken by first appearance
- Markup stripped before tokenizing so attribute values never leak in
- Shared stop-list of function words and site filler words
"""

import re
from collections import Counter
from dataclasses import dataclass

from internal_linker.core.logging import get_logger

logger = get_logger(__name__)

# Shortest word considered a keyword
DEFAULT_MIN_KEYWORD_LENGTH = 4

# Number of body keywords used for candidate retrieval
DEFAULT_CONTENT_KEYWORD_LIMIT = 20

# Words never used as keywords: function words plus the site's filler vocabulary
STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "about",
        "an",
        "and",
        "are",
        "at",
        "be",
        "been",
        "being",
        "by",
        "can",
        "could",
        "did",
        "do",
        "does",
        "for",
        "from",
        "game",
        "games",
        "gaming",
        "had",
        "has",
        "have",
        "in",
        "is",
        "may",
        "might",
        "must",
        "on",
        "play",
        "shall",
        "should",
        "that",
        "the",
        "these",
        "this",
        "those",
        "to",
        "was",
        "were",
        "will",
        "with",
        "would",
    }
)

# Word characters are ASCII only
_TAG_PATTERN = re.compile(r"<[^>]*>")
_NON_WORD_PATTERN = re.compile(r"[^\w\s]", re.ASCII)


@dataclass(frozen=True)
class Keyword:
    """A normalized body word and how often it occurs."""

    text: str
    frequency: int


class KeywordExtractor:
    """Extracts title and body keywords used to find and place links."""

    def __init__(
        self,
        min_length: int = DEFAULT_MIN_KEYWORD_LENGTH,
        stop_words: frozenset[str] = STOP_WORDS,
    ) -> None:
        self.min_length = min_length
        self.stop_words = stop_words

    def _is_keyword(self, word: str) -> bool:
        return len(word) >= self.min_length and word not in self.stop_words

    def title_keywords(self, title: str) -> list[str]:
        """Extract keywords from a title.

        Punctuation is removed (not replaced), so "Dragon's" becomes
        "dragons". Order follows the title; duplicates are dropped.

        Args:
            title: Article title (may be empty).

        Returns:
            Ordered, deduplicated list of keywords. Empty for an empty title.
        """
        if not title:
            return []

        clean = _NON_WORD_PATTERN.sub("", title.lower())
        words = [w for w in clean.split() if self._is_keyword(w)]
        return list(dict.fromkeys(words))

    def rank_content_keywords(
        self, body: str, limit: int = DEFAULT_CONTENT_KEYWORD_LIMIT
    ) -> list[Keyword]:
        """Rank the words of an HTML body by frequency.

        Tags are replaced with a space before tokenizing, punctuation is
        replaced with a space, and the stop-list and length filter apply.

        Args:
            body: HTML fragment.
            limit: Maximum number of keywords to return.

        Returns:
            Keywords sorted by descending frequency; ties keep the order in
            which the words first appear. Empty when nothing qualifies.
        """
        if not body or limit <= 0:
            return []

        plain = _TAG_PATTERN.sub(" ", body)
        clean = _NON_WORD_PATTERN.sub(" ", plain.lower())

        counts: Counter[str] = Counter(
            w for w in clean.split() if self._is_keyword(w)
        )
        # most_common() keeps first-seen order among equal counts
        return [Keyword(text=w, frequency=n) for w, n in counts.most_common(limit)]

    def content_keywords(
        self, body: str, limit: int = DEFAULT_CONTENT_KEYWORD_LIMIT
    ) -> list[str]:
        """Top body keywords by frequency (see rank_content_keywords)."""
        return [k.text for k in self.rank_content_keywords(body, limit)]

    def combined_keywords(
        self,
        title: str,
        body: str,
        limit: int = DEFAULT_CONTENT_KEYWORD_LIMIT,
    ) -> list[str]:
        """Title keywords followed by body keywords, deduplicated."""
        combined = self.title_keywords(title) + self.content_keywords(body, limit)
        keywords = list(dict.fromkeys(combined))
        logger.debug(
            "Extracted combined keywords",
            extra={"keyword_count": len(keywords)},
        )
        return keywords


# Singleton instance and getter
_keyword_extractor: KeywordExtractor | None = None


def get_keyword_extractor() -> KeywordExtractor:
    """Get the default KeywordExtractor instance."""
    global _keyword_extractor
    if _keyword_extractor is None:
        _keyword_extractor = KeywordExtractor()
    return _keyword_extractor
