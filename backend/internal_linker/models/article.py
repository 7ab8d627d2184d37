"""Article model for blog posts read and rewritten by the linking engine.

The article store is owned by the host CMS; this mapping covers the
blog_posts table columns the engine touches plus the descriptive fields
needed to create fixtures:
- slug: Unique URL-safe identifier, used to build link hrefs
- title: Display title, source of link keywords
- body: HTML fragment (stored in the 'content' column)
- status: 'draft' or 'published' (only published articles are linked)
- published_at: Ordering key for candidate retrieval (newest first)
- updated_at: Bumped whenever the engine persists a rewritten body
"""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import DateTime, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from internal_linker.core.database import Base


class ArticleStatus(str, Enum):
    """Publication status of an article."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Article(Base):
    """Article model for long-form blog posts.

    Attributes:
        id: Integer primary key
        title: Article title
        slug: Unique URL slug
        body: HTML body fragment
        excerpt: Short summary shown in listings
        author: Author display name
        status: 'draft' or 'published'
        published_at: Timestamp of first publication (None for drafts)
        created_at: Timestamp when record was created
        updated_at: Timestamp when record was last updated
    """

    __tablename__ = "blog_posts"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    body: Mapped[str] = mapped_column(
        "content",
        Text,
        nullable=False,
        default="",
    )

    excerpt: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    author: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ArticleStatus.DRAFT.value,
        server_default=text("'draft'"),
        index=True,
    )

    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED.value

    def __repr__(self) -> str:
        return f"<Article(id={self.id!r}, slug={self.slug!r}, status={self.status!r})>"
