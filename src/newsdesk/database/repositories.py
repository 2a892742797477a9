"""
Repository pattern for database operations.

Provides clean abstraction over SQLAlchemy for the news article store.
"""

from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.database.models import NewsArticle
from newsdesk.schemas import Candidate, NewsStatus


class PersistenceFailure(Exception):
    """Raised when the store rejects a write."""
    pass


class NewsArticleRepository:
    """Repository for NewsArticle operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, article_id: UUID) -> Optional[NewsArticle]:
        result = await self.session.execute(
            select(NewsArticle).where(NewsArticle.id == article_id)
        )
        return result.scalar_one_or_none()

    async def find_by_title(self, title: str) -> Optional[NewsArticle]:
        """Get the first article with exactly this title."""
        result = await self.session.execute(
            select(NewsArticle).where(NewsArticle.title == title).limit(1)
        )
        return result.scalars().first()

    async def create(self, candidate: Candidate) -> NewsArticle:
        """
        Insert a candidate.

        Raises:
            PersistenceFailure: If the status is invalid or the insert is rejected
        """
        if candidate.status not in NewsStatus:
            raise PersistenceFailure(f"Invalid status on insert: {candidate.status!r}")

        data = candidate.model_dump(exclude_none=True)
        if candidate.generation_mode is not None:
            data["generation_mode"] = candidate.generation_mode.value
        if candidate.status == NewsStatus.PUBLISHED:
            data["published_at"] = candidate.created_at or datetime.utcnow()

        article = NewsArticle(**data)
        self.session.add(article)
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Insert rejected for {candidate.slug!r}: {str(e)}")
        await self.session.refresh(article)
        return article

    async def list_by_status(self, status: NewsStatus, skip: int = 0, limit: int = 20) -> List[NewsArticle]:
        result = await self.session.execute(
            select(NewsArticle)
            .where(NewsArticle.status == status)
            .order_by(NewsArticle.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def set_status(self, article: NewsArticle, status: NewsStatus) -> NewsArticle:
        article.status = status
        article.updated_at = datetime.utcnow()
        if status == NewsStatus.PUBLISHED and article.published_at is None:
            article.published_at = article.updated_at
        await self.session.flush()
        return article

    async def delete(self, article: NewsArticle) -> None:
        await self.session.delete(article)
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        """Delete articles whose expires_at has passed."""
        result = await self.session.execute(
            delete(NewsArticle).where(NewsArticle.expires_at < now)
        )
        return result.rowcount or 0

    async def delete_stale_machine_articles(self, author_id: str, before: datetime) -> int:
        """Delete machine-authored articles created before a cutoff that were never published."""
        result = await self.session.execute(
            delete(NewsArticle).where(
                NewsArticle.author_id == author_id,
                NewsArticle.created_at < before,
                NewsArticle.status != NewsStatus.PUBLISHED,
            )
        )
        return result.rowcount or 0


class SqlNewsStore:
    """
    Persistence collaborator used by the automation services.

    Opens a short-lived session per operation and commits it, so a failed
    iteration never leaves a half-written transaction behind.
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        if session_factory is None:
            from newsdesk.database.session import AsyncSessionFactory
            session_factory = AsyncSessionFactory
        self.session_factory = session_factory

    async def find_by_title(self, title: str) -> Optional[NewsArticle]:
        async with self.session_factory() as session:
            return await NewsArticleRepository(session).find_by_title(title)

    async def insert(self, candidate: Candidate) -> Candidate:
        async with self.session_factory() as session:
            repo = NewsArticleRepository(session)
            try:
                await repo.create(candidate)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceFailure(f"Commit rejected for {candidate.slug!r}: {str(e)}")
            except PersistenceFailure:
                await session.rollback()
                raise
        return candidate

    async def delete_expired(self, now: datetime) -> int:
        async with self.session_factory() as session:
            deleted = await NewsArticleRepository(session).delete_expired(now)
            await session.commit()
            return deleted

    async def delete_stale_machine_articles(self, author_id: str, before: datetime) -> int:
        async with self.session_factory() as session:
            deleted = await NewsArticleRepository(session).delete_stale_machine_articles(author_id, before)
            await session.commit()
            return deleted
