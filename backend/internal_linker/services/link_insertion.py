"""Markup-safe internal link insertion.

LinkInserter rewrites an HTML body in a single greedy pass, wrapping the
first plain-text occurrence of one title keyword per candidate article in
an <a> tag. It never matches inside a tag, inside an existing <a> element,
inside raw-text elements (<script>, <style>, <textarea>) or inside a
character reference such as &hellip;.

The guard is an explicit linear scan over tag and text tokens rather than
a DOM rewrite, so everything outside the inserted anchors is returned
byte-for-byte unchanged.
"""

import html
import re
from collections.abc import Sequence
from dataclasses import dataclass

from internal_linker.core.logging import get_logger
from internal_linker.models.article import Article
from internal_linker.services.keyword_extraction import (
    KeywordExtractor,
    get_keyword_extractor,
)

logger = get_logger(__name__)

# Maximum anchors inserted into one body per pass
MAX_LINKS = 5

DEFAULT_URL_PREFIX = "/blog/"
DEFAULT_CSS_CLASS = "internal-link"

# Elements whose content is not HTML text
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style", "textarea"})

# Comments first so a '>' inside a comment does not end it early.
# Quoted attribute values may contain '>'; a '<' not followed by a
# name is text.
_MARKUP_PATTERN = re.compile(
    r"""<!--.*?-->|<[/!?]?[A-Za-z](?:"[^"]*"|'[^']*'|[^'">])*>""", re.DOTALL
)
_TAG_NAME_PATTERN = re.compile(r"<\s*(/)?\s*([A-Za-z][A-Za-z0-9-]*)")
_ENTITY_PATTERN = re.compile(r"&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);")
_HREF_PATTERN = re.compile(
    r"""\shref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""", re.IGNORECASE
)
_RAW_TEXT_END_PATTERNS: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"</\s*{name}\s*>", re.IGNORECASE) for name in RAW_TEXT_ELEMENTS
}


@dataclass(frozen=True)
class LinkCandidate:
    """A link placed into a body: the target and the keyword that matched."""

    target_article: Article
    matched_keyword: str


def linkable_spans(body: str) -> list[tuple[int, int]]:
    """Return (start, end) offsets of text runs that may receive a link.

    Text is linkable when it lies outside every tag, outside any open <a>
    element and outside raw-text elements. An <a> that is never closed
    makes the rest of the body unlinkable.
    """
    spans: list[tuple[int, int]] = []
    pos = 0
    anchor_depth = 0
    length = len(body)

    while pos < length:
        match = _MARKUP_PATTERN.search(body, pos)
        if match is None:
            if anchor_depth == 0:
                spans.append((pos, length))
            break

        if match.start() > pos and anchor_depth == 0:
            spans.append((pos, match.start()))
        pos = match.end()

        tag = match.group()
        name_match = _TAG_NAME_PATTERN.match(tag)
        if name_match is None:
            # comment, doctype or processing instruction
            continue

        closing = name_match.group(1) is not None
        name = name_match.group(2).lower()

        if name == "a":
            if closing:
                anchor_depth = max(0, anchor_depth - 1)
            elif not tag[:-1].rstrip().endswith("/"):
                anchor_depth += 1
        elif name in RAW_TEXT_ELEMENTS and not closing:
            end = _RAW_TEXT_END_PATTERNS[name].search(body, pos)
            pos = end.end() if end else length

    return spans


def existing_link_targets(body: str) -> set[str]:
    """Return the href of every <a> element already present in body."""
    targets: set[str] = set()
    for match in _MARKUP_PATTERN.finditer(body):
        tag = match.group()
        name_match = _TAG_NAME_PATTERN.match(tag)
        if (
            name_match is None
            or name_match.group(1) is not None
            or name_match.group(2).lower() != "a"
        ):
            continue
        href = _HREF_PATTERN.search(tag)
        if href is not None:
            value = next(g for g in href.groups() if g is not None)
            targets.add(html.unescape(value))
    return targets


def _find_in_text(body: str, keyword: str) -> re.Match[str] | None:
    """Find the first whole-word, case-insensitive keyword hit in linkable text."""
    pattern = re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE | re.ASCII)

    for start, end in linkable_spans(body):
        entities = [
            (m.start(), m.end()) for m in _ENTITY_PATTERN.finditer(body, start, end)
        ]
        for match in pattern.finditer(body, start, end):
            inside_entity = any(
                e_start < match.end() and match.start() < e_end
                for e_start, e_end in entities
            )
            if not inside_entity:
                return match
    return None


class LinkInserter:
    """Inserts links to candidate articles into an HTML body."""

    def __init__(
        self,
        max_links: int = MAX_LINKS,
        url_prefix: str = DEFAULT_URL_PREFIX,
        css_class: str | None = DEFAULT_CSS_CLASS,
        extractor: KeywordExtractor | None = None,
    ) -> None:
        self.max_links = max_links
        self.url_prefix = url_prefix
        self.css_class = css_class
        self.extractor = extractor or get_keyword_extractor()

    def href_for(self, article: Article) -> str:
        return f"{self.url_prefix}{article.slug}"

    def build_anchor(self, article: Article, text: str) -> str:
        """Build the anchor markup wrapping text with a link to article."""
        attrs = [f'href="{html.escape(self.href_for(article))}"']
        if self.css_class:
            attrs.append(f'class="{html.escape(self.css_class)}"')
        attrs.append(f'title="{html.escape(article.title)}"')
        return f"<a {' '.join(attrs)}>{text}</a>"

    def insert_links(
        self,
        body: str,
        candidates: Sequence[Article],
        exclude_id: int | None,
    ) -> str:
        """Insert at most one link per candidate into body.

        See insert_links_with_report for the algorithm.
        """
        new_body, _ = self.insert_links_with_report(body, candidates, exclude_id)
        return new_body

    def insert_links_with_report(
        self,
        body: str,
        candidates: Sequence[Article],
        exclude_id: int | None,
    ) -> tuple[str, list[LinkCandidate]]:
        """Insert links and report which candidates were linked.

        Candidates are visited in order. For each, its title keywords are
        tried in title order; the first keyword found in linkable text has
        its first occurrence wrapped in an anchor (original casing kept),
        and the pass moves to the next candidate. Stops after max_links
        insertions.

        Candidates the body already links to (same href) are skipped, so
        rewriting an already-linked body adds nothing.

        Args:
            body: HTML body to rewrite.
            candidates: Link targets, highest priority first.
            exclude_id: Id of the article being rewritten (never linked).

        Returns:
            Tuple of (new_body, links). new_body is body unchanged when
            nothing matched.
        """
        result = body
        links: list[LinkCandidate] = []
        linked_ids: set[int] = set()
        already_linked = existing_link_targets(body)

        for candidate in candidates:
            if len(links) >= self.max_links:
                break

            if exclude_id is not None and candidate.id == exclude_id:
                continue
            if not candidate.is_published:
                continue
            if candidate.id in linked_ids:
                continue
            if self.href_for(candidate) in already_linked:
                continue

            for keyword in self.extractor.title_keywords(candidate.title):
                match = _find_in_text(result, keyword)
                if match is None:
                    continue

                anchor = self.build_anchor(candidate, match.group())
                result = result[: match.start()] + anchor + result[match.end() :]
                links.append(LinkCandidate(target_article=candidate, matched_keyword=keyword))
                linked_ids.add(candidate.id)

                logger.debug(
                    "Internal link inserted",
                    extra={
                        "exclude_id": exclude_id,
                        "target_id": candidate.id,
                        "keyword": keyword,
                        "offset": match.start(),
                    },
                )
                break

        return result, links
