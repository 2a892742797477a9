"""
SQLAlchemy models for the Newsdesk database.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Enum, Boolean, Index, UniqueConstraint
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.dialects.postgresql import UUID, JSONB
import uuid

from newsdesk.schemas import NewsStatus, SentimentEnum


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class NewsArticle(Base):
    """
    A news article, human- or machine-authored.

    Lifecycle: draft -> pending_approval -> published; machine-authored
    articles that never reach published are removed after the retention
    window, and any article past expires_at is removed.
    """
    __tablename__ = "news_articles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Core content
    title = Column(String(200), nullable=False)
    slug = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    summary = Column(Text, nullable=True)
    cover_image = Column(Text, nullable=True)  # Durable (re-hosted) URL only

    # Topic metadata
    category = Column(String(50), nullable=False, default="World")
    country = Column(String(50), nullable=False, default="Global")
    tags = Column(JSONB, nullable=False, default=list)  # Includes quality_score:{n}
    source_url = Column(Text, nullable=True)

    # Workflow
    status = Column(
        Enum(NewsStatus, name="news_status", values_callable=_enum_values),
        nullable=False,
        default=NewsStatus.DRAFT,
    )
    author_id = Column(String(100), nullable=False)
    is_trending = Column(Boolean, default=False, nullable=False)
    generation_mode = Column(String(30), nullable=True)  # Switchboard mode, for audit

    # Editorial strategy
    sentiment = Column(
        Enum(SentimentEnum, name="news_sentiment", values_callable=_enum_values),
        nullable=False,
        default=SentimentEnum.NEUTRAL,
    )
    market_entities = Column(JSONB, nullable=False, default=list)
    impact_score = Column(Integer, nullable=True)
    meta_description = Column(Text, nullable=True)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    published_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("slug", name="uq_news_articles_slug"),
        Index("ix_news_articles_title", "title"),
        Index("ix_news_articles_status", "status"),
        Index("ix_news_articles_created_at", "created_at"),
        Index("ix_news_articles_expires_at", "expires_at"),
    )
