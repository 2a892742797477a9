"""
Newsdesk FastAPI application.

Main entry point for the automation API server.
"""

import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.database.models import NewsArticle
from newsdesk.database.repositories import NewsArticleRepository, PersistenceFailure
from newsdesk.database.session import get_db
from newsdesk.schemas import NewsStatus
from newsdesk.services.scheduler import (
    MAX_INGESTS_PER_RUN,
    SchedulerConfig,
    SchedulerServiceError,
    scheduler_service,
)
from newsdesk.services.switchboard import Switchboard


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Create FastAPI application
app = FastAPI(
    title="Newsdesk API",
    description="Autonomous news generation and publishing pipeline",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GenerateNewsRequest(BaseModel):
    """Request body for single-topic generation."""
    title: str = Field(..., min_length=1, max_length=200)
    category: str = "World"
    country: str = "Global"
    status: NewsStatus = NewsStatus.PENDING_APPROVAL
    source_url: Optional[str] = None


class ResearchRequest(BaseModel):
    """Request body for an editor research brief."""
    topic: str = Field(..., min_length=1, max_length=200)


class SchedulerSettingsRequest(BaseModel):
    """Request body for scheduler settings updates."""
    enabled: bool
    auto_publish: bool = True
    ingests_per_run: int = 1
    cron_minute: int = 0


def article_to_dict(article: NewsArticle) -> Dict[str, Any]:
    return {
        "id": str(article.id),
        "title": article.title,
        "slug": article.slug,
        "summary": article.summary,
        "cover_image": article.cover_image,
        "category": article.category,
        "country": article.country,
        "tags": article.tags or [],
        "source_url": article.source_url,
        "status": article.status.value,
        "author_id": article.author_id,
        "generation_mode": article.generation_mode,
        "sentiment": article.sentiment.value if article.sentiment else None,
        "impact_score": article.impact_score,
        "created_at": article.created_at.isoformat() if article.created_at else None,
        "published_at": article.published_at.isoformat() if article.published_at else None,
    }


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Initialize services on application startup."""
    logger.info("Starting scheduler service...")
    scheduler_service.start()
    logger.info("Scheduler service started (enabled: %s)", scheduler_service.config.enabled)


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up services on application shutdown."""
    logger.info("Shutting down scheduler service...")
    scheduler_service.shutdown()
    logger.info("Scheduler service stopped")


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns basic service status.
    """
    return {
        "status": "healthy",
        "service": "newsdesk-api",
        "version": "0.1.0"
    }


@app.get("/api/cron/news-automation")
async def cron_news_automation(authorization: Optional[str] = Header(None)):
    """
    External cron trigger for the automation cycle.

    Requires `Authorization: Bearer <CRON_SECRET>` when CRON_SECRET is set.
    Runs the roaming cycle (when auto-publish is enabled) and maintenance.
    """
    if settings.CRON_SECRET and authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        result = await scheduler_service.run_automation_cycle()
    except SchedulerServiceError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception:
        logger.exception("Cron automation failed")
        raise HTTPException(status_code=500, detail="Automation cycle failed")

    return {"success": True, "result": result}


@app.post("/api/admin/news/generate")
async def admin_generate_news(request: GenerateNewsRequest):
    """
    Generate one article for a given topic (admin only).

    A requested `published` status is downgraded when the article does not
    clear the quality gate.

    Raises:
        HTTPException: 409 if an article with this title exists, 500 on failure
    """
    try:
        roaming = scheduler_service.build_roaming()
        candidate = await roaming.generate_single(
            title=request.title,
            category=request.category,
            country=request.country,
            status=request.status,
            source_url=request.source_url,
        )
    except PersistenceFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    except Exception:
        logger.exception("Single-topic generation failed")
        raise HTTPException(status_code=500, detail="Failed to generate article")

    if candidate is None:
        raise HTTPException(status_code=409, detail="An article with this title already exists")

    return {
        "success": True,
        "article": {
            "title": candidate.title,
            "slug": candidate.slug,
            "status": candidate.status.value,
            "generation_mode": candidate.generation_mode.value if candidate.generation_mode else None,
            "tags": candidate.tags,
        },
    }


@app.post("/api/admin/news/research")
async def admin_research_news(request: ResearchRequest):
    """
    Build a context brief for editors (admin only).

    Falls back to a generic brief when no provider answers; nothing is persisted.
    """
    try:
        brief = await Switchboard.from_settings().research(request.topic)
    except Exception:
        logger.exception("Research brief failed")
        raise HTTPException(status_code=500, detail="Failed to build research brief")

    return {"success": True, "topic": request.topic, "brief": brief.model_dump()}


@app.get("/api/admin/news/pending")
async def admin_list_pending_news(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum number of records to return"),
    db: AsyncSession = Depends(get_db)
):
    """List articles awaiting approval (admin only)."""
    repo = NewsArticleRepository(db)
    articles = await repo.list_by_status(NewsStatus.PENDING_APPROVAL, skip=skip, limit=limit)
    return {
        "items": [article_to_dict(a) for a in articles],
        "skip": skip,
        "limit": limit,
    }


@app.post("/api/admin/news/{article_id}/approve")
async def admin_approve_news(article_id: UUID, db: AsyncSession = Depends(get_db)):
    """Publish a pending article (admin only)."""
    repo = NewsArticleRepository(db)
    article = await repo.get_by_id(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")

    article = await repo.set_status(article, NewsStatus.PUBLISHED)
    await db.commit()
    return {"success": True, "article": article_to_dict(article)}


@app.post("/api/admin/news/{article_id}/reject")
async def admin_reject_news(article_id: UUID, db: AsyncSession = Depends(get_db)):
    """
    Reject a pending article (admin only).

    The article goes back to draft; retention cleanup removes it later.
    """
    repo = NewsArticleRepository(db)
    article = await repo.get_by_id(article_id)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")

    article = await repo.set_status(article, NewsStatus.DRAFT)
    await db.commit()
    return {"success": True, "article": article_to_dict(article)}


@app.get("/api/admin/scheduler/settings")
async def admin_get_scheduler_settings():
    """
    Get current scheduler configuration (admin only).

    Returns:
        Scheduler configuration, next run time and the last cycle summary
    """
    next_run = scheduler_service.next_run_time()
    return {
        **scheduler_service.config.to_dict(),
        "next_run_time": next_run.isoformat() if next_run else None,
        "last_run": scheduler_service.last_run,
    }


@app.put("/api/admin/scheduler/settings")
async def admin_update_scheduler_settings(request: SchedulerSettingsRequest):
    """
    Update scheduler configuration (admin only).

    Raises:
        HTTPException: If configuration is invalid
    """
    if request.ingests_per_run < 1 or request.ingests_per_run > MAX_INGESTS_PER_RUN:
        raise HTTPException(
            status_code=400,
            detail=f"ingests_per_run must be between 1 and {MAX_INGESTS_PER_RUN}"
        )

    if request.cron_minute < 0 or request.cron_minute > 59:
        raise HTTPException(
            status_code=400,
            detail="cron_minute must be between 0 and 59"
        )

    config = SchedulerConfig(
        enabled=request.enabled,
        auto_publish=request.auto_publish,
        ingests_per_run=request.ingests_per_run,
        cron_minute=request.cron_minute,
    )
    scheduler_service.configure(config)

    return {
        "success": True,
        "message": "Scheduler settings updated",
        "settings": config.to_dict(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.SERVICE_HOST, port=settings.SERVICE_PORT)
