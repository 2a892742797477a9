"""
News automation: the roaming engine and single-topic generation.

The roaming engine repeatedly samples a (country, category) topic, scrapes
source facts for it, drives the Switchboard, drops duplicates, scores the
assembled candidate with the quality gate and persists what passes.

One failing iteration never aborts the batch: every exception raised
inside an iteration is logged and the loop moves on.
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from newsdesk.config import Settings, settings as default_settings
from newsdesk.schemas import (
    Candidate,
    NewsStatus,
    RevenueDecision,
    RevenueEvaluation,
    SwitchboardResult,
)
from newsdesk.services.quality_gate import (
    evaluate,
    format_for_commercial_readability,
    generate_slug,
    optimize_headline,
)
from newsdesk.services.scraper import first_source_url, is_empty_briefing


logger = logging.getLogger(__name__)


COUNTRIES = [
    "Global", "USA", "UK", "China", "India", "Japan", "Germany", "France", "Brazil",
    "Canada", "Australia", "Russia", "South Korea", "Mexico", "Indonesia", "Saudi Arabia",
    "Turkey", "UAE", "Singapore", "Israel", "Nigeria", "South Africa", "Egypt", "Nepal",
]
CATEGORIES = [
    "World", "Politics", "Business", "Tech", "Culture", "Science", "Environment", "Finance", "Health",
]


class RoamingScheduler:
    """
    Autonomous batch publisher.

    Collaborators are injected so tests can substitute them:
        switchboard: object with async generate(topic, region, source_material, generate_image)
        scraper: object with async scrape_targeted_news(query) -> str
        store: object with async find_by_title(title) and async insert(candidate)
    """

    def __init__(
        self,
        switchboard,
        scraper,
        store,
        config: Optional[Settings] = None,
        min_score: Optional[int] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_concurrent: Optional[int] = None,
        author_id: Optional[str] = None
    ):
        config = config or default_settings
        self.switchboard = switchboard
        self.scraper = scraper
        self.store = store
        self.min_score = config.NEWS_REVENUE_MIN_SCORE if min_score is None else min_score
        self.rng = rng or random.Random()
        self.clock = clock or datetime.utcnow
        self.max_concurrent = max(1, max_concurrent or config.ROAMING_MAX_CONCURRENT)
        self.author_id = author_id or config.NEWS_BOT_AUTHOR_ID
        self.retention = timedelta(days=config.NEWS_RETENTION_DAYS)
        self._insert_lock = asyncio.Lock()

    async def run_cycle(self, count: int, stop_event: Optional[asyncio.Event] = None) -> List[Candidate]:
        """
        Run `count` roaming iterations.

        Args:
            count: Number of iterations to attempt
            stop_event: When set, no further iterations start

        Returns:
            The candidates that were actually persisted
        """
        logger.info("[Roaming] Waking up, target ingests: %d", count)

        if self.max_concurrent == 1:
            results = []
            for number in range(1, count + 1):
                if stop_event is not None and stop_event.is_set():
                    logger.info("[Roaming] Stop requested, ending cycle before iteration %d", number)
                    break
                results.append(await self._guarded_iteration(number))
        else:
            semaphore = asyncio.Semaphore(self.max_concurrent)

            async def worker(number: int) -> Optional[Candidate]:
                async with semaphore:
                    if stop_event is not None and stop_event.is_set():
                        return None
                    return await self._guarded_iteration(number)

            results = await asyncio.gather(*(worker(n) for n in range(1, count + 1)))

        persisted = [candidate for candidate in results if candidate is not None]
        logger.info("[Roaming] Cycle complete, persisted %d of %d", len(persisted), count)
        return persisted

    async def _guarded_iteration(self, number: int) -> Optional[Candidate]:
        try:
            return await self.run_iteration(number)
        except Exception:
            logger.exception("[Roaming] Iteration %d failed", number)
            return None

    async def run_iteration(self, number: int) -> Optional[Candidate]:
        """One roaming iteration. Returns the persisted candidate, or None when skipped."""
        country = self.rng.choice(COUNTRIES)
        category = self.rng.choice(CATEGORIES)
        query = f"{category} news in {country}"
        logger.info("[Roaming] Iteration %d: scouting %r", number, query)

        source_material = await self.scraper.scrape_targeted_news(query)
        if is_empty_briefing(source_material):
            logger.info("[Roaming] Iteration %d found no events, skipping", number)
            return None

        result: SwitchboardResult = await self.switchboard.generate(
            topic=f"Latest insights regarding {query}",
            region=country,
            source_material=source_material,
            generate_image=True,
        )
        logger.info("[Roaming] Iteration %d generated via %s mode", number, result.mode.value)

        title = optimize_headline(result.draft.print_headline, category, country)
        if await self._is_duplicate(result.draft.print_headline, title):
            logger.info("[Roaming] Iteration %d produced a duplicate headline, skipping", number)
            return None

        candidate = self.build_candidate(
            result,
            title=title,
            category=category,
            country=country,
            summary=result.strategy.editorial_summary or result.draft.executive_summary,
            source_url=first_source_url(source_material) or f"{result.mode.value}: {query}",
            status=NewsStatus.PUBLISHED,
        )

        evaluation = evaluate(candidate, self.min_score)
        if evaluation.decision == RevenueDecision.SKIP:
            logger.info(
                "[Roaming] Iteration %d skipped (quality score %d): %s",
                number, evaluation.score, "; ".join(evaluation.reasons)
            )
            return None

        status = NewsStatus.PUBLISHED
        if evaluation.decision == RevenueDecision.PENDING_APPROVAL:
            status = NewsStatus.PENDING_APPROVAL
        candidate = self.apply_evaluation(candidate, evaluation, status)

        if not await self._persist(candidate):
            logger.info("[Roaming] Iteration %d lost a duplicate race, skipping", number)
            return None

        logger.info(
            "[Roaming] Iteration %d persisted %r as %s (quality %d)",
            number, candidate.title, candidate.status.value, evaluation.score
        )
        return candidate

    async def generate_single(
        self,
        title: str,
        category: str = "World",
        country: str = "Global",
        status: NewsStatus = NewsStatus.PENDING_APPROVAL,
        source_url: Optional[str] = None,
        author_id: Optional[str] = None
    ) -> Optional[Candidate]:
        """
        Generate and persist one article for a given topic.

        A requested `published` status is only honoured when the quality gate
        says publish; otherwise it becomes pending_approval or draft.

        Returns:
            The persisted candidate, or None when an article with this title exists
        """
        if await self.store.find_by_title(title):
            logger.info("Article %r already exists, skipping generation", title)
            return None

        result: SwitchboardResult = await self.switchboard.generate(
            topic=title,
            region=country,
            generate_image=True,
        )
        candidate = self.build_candidate(
            result,
            title=optimize_headline(result.draft.print_headline or title, category, country),
            category=category,
            country=country,
            summary=result.draft.executive_summary or result.draft.subheadline,
            source_url=source_url or f"{result.mode.value}: {title}",
            status=status,
            author_id=author_id,
        )

        evaluation = evaluate(candidate, self.min_score)
        final_status = status
        if status == NewsStatus.PUBLISHED and evaluation.decision != RevenueDecision.PUBLISH:
            if evaluation.decision == RevenueDecision.PENDING_APPROVAL:
                final_status = NewsStatus.PENDING_APPROVAL
            else:
                final_status = NewsStatus.DRAFT
        candidate = self.apply_evaluation(candidate, evaluation, final_status)

        if not await self._persist(candidate):
            return None
        logger.info("Generated %r via %s mode as %s", candidate.title, result.mode.value, candidate.status.value)
        return candidate

    def build_candidate(
        self,
        result: SwitchboardResult,
        title: str,
        category: str,
        country: str,
        summary: str,
        source_url: str,
        status: NewsStatus,
        author_id: Optional[str] = None
    ) -> Candidate:
        """Assemble a candidate; title, content and slug are never empty."""
        draft, strategy = result.draft, result.strategy
        now = self.clock()
        return Candidate(
            title=title,
            slug=generate_slug(title, self.rng),
            content=format_for_commercial_readability(draft.body_markdown, summary),
            summary=summary or "",
            cover_image=draft.cover_image_url,
            category=category,
            country=country,
            tags=list(strategy.operational_tags),
            source_url=source_url,
            status=status,
            author_id=author_id or self.author_id,
            is_trending=True,
            sentiment=strategy.sentiment,
            market_entities=list(strategy.market_entities),
            impact_score=strategy.impact_score,
            generation_mode=result.mode,
            meta_description=strategy.meta_description,
            created_at=now,
            updated_at=now,
            expires_at=now + self.retention,
        )

    @staticmethod
    def apply_evaluation(candidate: Candidate, evaluation: RevenueEvaluation, status: NewsStatus) -> Candidate:
        return candidate.model_copy(update={
            "status": status,
            "tags": candidate.tags + [f"quality_score:{evaluation.score}"],
        })

    async def _is_duplicate(self, *titles: str) -> bool:
        for title in dict.fromkeys(t for t in titles if t):
            if await self.store.find_by_title(title):
                return True
        return False

    async def _persist(self, candidate: Candidate) -> bool:
        if self.max_concurrent == 1:
            await self.store.insert(candidate)
            return True

        # Concurrent iterations: repeat the duplicate check right before the write
        async with self._insert_lock:
            if await self.store.find_by_title(candidate.title):
                return False
            await self.store.insert(candidate)
            return True


async def run_maintenance(
    store,
    now: Optional[datetime] = None,
    config: Optional[Settings] = None
) -> int:
    """
    Apply the retention policy.

    Deletes explicitly expired articles and machine-authored articles older
    than the retention window that never reached published.

    Returns:
        Number of articles deleted
    """
    config = config or default_settings
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=config.NEWS_RETENTION_DAYS)

    expired = await store.delete_expired(now)
    stale = await store.delete_stale_machine_articles(config.NEWS_BOT_AUTHOR_ID, cutoff)
    logger.info("Maintenance removed %d expired and %d stale machine-authored articles", expired, stale)
    return expired + stale
