"""
Unit tests for the roaming engine, single-topic generation and maintenance.

Collaborators are replaced with in-memory doubles; the rng and clock are
seeded so candidate assembly is reproducible.
"""

import asyncio
import random
from datetime import datetime, timedelta

import pytest
from unittest.mock import AsyncMock, MagicMock

from newsdesk.config import Settings
from newsdesk.database.repositories import PersistenceFailure
from newsdesk.schemas import GenerationMode, NewsStatus
from newsdesk.services.automation import (
    CATEGORIES,
    COUNTRIES,
    RoamingScheduler,
    run_maintenance,
)
from newsdesk.services.scraper import NO_EVENTS_SENTINEL, ScrapeError


NOW = datetime(2026, 10, 18, 9, 0, 0)

BRIEFING = (
    'TARGETED NEWS BRIEFING FOR "Business news in UK" (Last 24 Hours):\n\n'
    "Title: Exporters rebound\nContext: Volumes up.\nLink: https://example.com/exports"
)


@pytest.fixture
def config():
    return Settings(
        NEWS_REVENUE_MIN_SCORE=62,
        ROAMING_MAX_CONCURRENT=1,
        NEWS_RETENTION_DAYS=7,
        NEWS_BOT_AUTHOR_ID="global-intelligence-bot",
    )


@pytest.fixture
def scraper():
    scraper = MagicMock()
    scraper.scrape_targeted_news = AsyncMock(return_value=BRIEFING)
    return scraper


@pytest.fixture
def switchboard(make_result):
    """Switchboard double that writes a new headline on every call."""
    switchboard = MagicMock()
    counter = {"n": 0}

    async def generate(topic, region, source_material=None, generate_image=False):
        counter["n"] += 1
        return make_result(headline=f"Exporters post strongest quarter in years, report {counter['n']}")

    switchboard.generate = AsyncMock(side_effect=generate)
    return switchboard


def roaming(switchboard, scraper, store, config, **kwargs):
    return RoamingScheduler(
        switchboard=switchboard,
        scraper=scraper,
        store=store,
        config=config,
        rng=random.Random(42),
        clock=lambda: NOW,
        **kwargs
    )


class TestRunCycle:
    """Batch behaviour of the roaming engine."""

    @pytest.mark.asyncio
    async def test_failing_iteration_does_not_abort_batch(self, switchboard, scraper, news_store, config):
        scraper.scrape_targeted_news = AsyncMock(side_effect=[
            BRIEFING, BRIEFING, ScrapeError("feed down"), BRIEFING, BRIEFING,
        ])

        persisted = await roaming(switchboard, scraper, news_store, config).run_cycle(5)

        assert len(persisted) == 4
        assert scraper.scrape_targeted_news.await_count == 5
        assert switchboard.generate.await_count == 4
        assert [c.title for c in news_store.articles] == [
            f"Exporters post strongest quarter in years, report {n}" for n in (1, 2, 3, 4)
        ]

    @pytest.mark.asyncio
    async def test_persisted_candidate_fields(self, switchboard, scraper, news_store, config):
        [candidate] = await roaming(switchboard, scraper, news_store, config).run_cycle(1)

        assert candidate.status == NewsStatus.PUBLISHED
        assert candidate.category in CATEGORIES
        assert candidate.country in COUNTRIES
        assert candidate.source_url == "https://example.com/exports"
        assert candidate.author_id == "global-intelligence-bot"
        assert candidate.generation_mode == GenerationMode.MULTI_AGENT
        assert candidate.tags[:3] == ["Business", "Trade", "Exports"]
        assert candidate.tags[-1] == "quality_score:100"
        assert candidate.summary.startswith("Exporters across the region")
        assert "<h2>Why This Matters</h2>" in candidate.content
        assert candidate.slug.startswith("exporters-post-strongest-quarter")
        assert candidate.created_at == NOW
        assert candidate.expires_at == NOW + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_topic_and_region_passed_to_switchboard(self, switchboard, scraper, news_store, config):
        await roaming(switchboard, scraper, news_store, config).run_cycle(1)

        query = scraper.scrape_targeted_news.await_args.args[0]
        kwargs = switchboard.generate.await_args.kwargs
        assert kwargs["topic"] == f"Latest insights regarding {query}"
        assert query.endswith(f" news in {kwargs['region']}")
        assert kwargs["source_material"] == BRIEFING
        assert kwargs["generate_image"] is True

    @pytest.mark.asyncio
    async def test_no_events_skips_generation(self, switchboard, scraper, news_store, config):
        scraper.scrape_targeted_news = AsyncMock(return_value=NO_EVENTS_SENTINEL)

        persisted = await roaming(switchboard, scraper, news_store, config).run_cycle(3)

        assert persisted == []
        switchboard.generate.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_headline_is_skipped(self, switchboard, scraper, config, store_with_titles):
        store = store_with_titles("Exporters post strongest quarter in years, report 1")
        store.insert = AsyncMock()

        persisted = await roaming(switchboard, scraper, store, config).run_cycle(1)

        assert persisted == []
        store.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_borderline_candidate_is_pending(self, switchboard, scraper, news_store, config, make_result):
        # 50 + 12 - 8 + 16 + 8 + 0 - 4 = 74
        switchboard.generate = AsyncMock(return_value=make_result(
            editorial_summary="Short summary.", tags=["Trade", "UK"], impact_score=40,
        ))

        [candidate] = await roaming(switchboard, scraper, news_store, config, min_score=80).run_cycle(1)

        assert candidate.status == NewsStatus.PENDING_APPROVAL
        assert "quality_score:74" in candidate.tags

    @pytest.mark.asyncio
    async def test_low_quality_candidate_is_skipped(self, switchboard, scraper, news_store, config, make_result):
        switchboard.generate = AsyncMock(return_value=make_result(
            editorial_summary="Short summary.", tags=["Trade", "UK"], impact_score=40,
        ))

        persisted = await roaming(switchboard, scraper, news_store, config, min_score=100).run_cycle(1)

        assert persisted == []
        assert news_store.articles == []

    @pytest.mark.asyncio
    async def test_provenance_label_without_source_link(self, switchboard, scraper, news_store, config):
        scraper.scrape_targeted_news = AsyncMock(return_value="Title: Exporters rebound\nContext: Volumes up.")

        [candidate] = await roaming(switchboard, scraper, news_store, config, min_score=0).run_cycle(1)

        assert candidate.source_url.startswith("Multi-Agent: ")
        assert " news in " in candidate.source_url

    @pytest.mark.asyncio
    async def test_persistence_failure_is_isolated(self, switchboard, scraper, news_store, config):
        inserted = []

        async def flaky_insert(candidate):
            if not inserted:
                inserted.append(None)
                raise PersistenceFailure("duplicate slug")
            news_store.articles.append(candidate)

        news_store.insert = AsyncMock(side_effect=flaky_insert)

        persisted = await roaming(switchboard, scraper, news_store, config).run_cycle(2)

        assert len(persisted) == 1
        assert len(news_store.articles) == 1

    @pytest.mark.asyncio
    async def test_stop_event_ends_cycle(self, switchboard, scraper, news_store, config):
        stop_event = asyncio.Event()
        original = switchboard.generate.side_effect

        async def generate_then_stop(*args, **kwargs):
            stop_event.set()
            return await original(*args, **kwargs)

        switchboard.generate = AsyncMock(side_effect=generate_then_stop)

        persisted = await roaming(switchboard, scraper, news_store, config).run_cycle(5, stop_event=stop_event)

        assert len(persisted) == 1
        assert scraper.scrape_targeted_news.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_cycle_never_persists_duplicates(
        self, scraper, news_store, config, make_result
    ):
        switchboard = MagicMock()
        switchboard.generate = AsyncMock(return_value=make_result())

        persisted = await roaming(switchboard, scraper, news_store, config, max_concurrent=3).run_cycle(4)

        assert len(persisted) == 1
        assert len(news_store.articles) == 1

    @pytest.mark.asyncio
    async def test_concurrent_cycle_persists_distinct_articles(self, switchboard, scraper, news_store, config):
        persisted = await roaming(switchboard, scraper, news_store, config, max_concurrent=2).run_cycle(4)

        assert len(persisted) == 4
        assert len({c.title for c in news_store.articles}) == 4


class TestGenerateSingle:
    """Single-topic generation."""

    @pytest.mark.asyncio
    async def test_requested_published_is_kept_when_gate_publishes(self, switchboard, scraper, news_store, config):
        candidate = await roaming(switchboard, scraper, news_store, config).generate_single(
            "Exporters rebound", category="Business", country="UK",
            status=NewsStatus.PUBLISHED, source_url="https://example.com/exports",
        )

        assert candidate.status == NewsStatus.PUBLISHED
        assert candidate.category == "Business"
        assert news_store.articles == [candidate]
        kwargs = switchboard.generate.await_args.kwargs
        assert kwargs["topic"] == "Exporters rebound"
        assert kwargs["region"] == "UK"

    @pytest.mark.asyncio
    async def test_requested_published_is_downgraded_to_pending(self, switchboard, scraper, news_store, config):
        # No source URL: 50 + 12 + 10 + 16 - 10 + 6 + 6 = 90
        candidate = await roaming(switchboard, scraper, news_store, config, min_score=95).generate_single(
            "Exporters rebound", status=NewsStatus.PUBLISHED,
        )

        assert candidate.status == NewsStatus.PENDING_APPROVAL
        assert candidate.source_url == "Multi-Agent: Exporters rebound"

    @pytest.mark.asyncio
    async def test_requested_published_is_downgraded_to_draft(
        self, switchboard, scraper, news_store, config, make_result
    ):
        # No source URL, two tags: 50 + 12 + 10 + 16 - 10 + 0 + 6 = 84
        switchboard.generate = AsyncMock(return_value=make_result(tags=["Trade", "UK"]))

        candidate = await roaming(switchboard, scraper, news_store, config, min_score=100).generate_single(
            "Exporters rebound", status=NewsStatus.PUBLISHED,
        )

        assert candidate.status == NewsStatus.DRAFT

    @pytest.mark.asyncio
    async def test_non_published_status_is_kept(self, switchboard, scraper, news_store, config):
        candidate = await roaming(switchboard, scraper, news_store, config, min_score=100).generate_single(
            "Exporters rebound", status=NewsStatus.DRAFT,
        )

        assert candidate.status == NewsStatus.DRAFT

    @pytest.mark.asyncio
    async def test_existing_title_is_not_regenerated(self, switchboard, scraper, config, store_with_titles):
        store = store_with_titles("Exporters rebound")

        assert await roaming(switchboard, scraper, store, config).generate_single("Exporters rebound") is None
        switchboard.generate.assert_not_called()


class TestMaintenance:

    @pytest.mark.asyncio
    async def test_deletes_expired_and_stale_machine_articles(self, config):
        store = MagicMock()
        store.delete_expired = AsyncMock(return_value=2)
        store.delete_stale_machine_articles = AsyncMock(return_value=3)

        deleted = await run_maintenance(store, now=NOW, config=config)

        assert deleted == 5
        store.delete_expired.assert_awaited_once_with(NOW)
        store.delete_stale_machine_articles.assert_awaited_once_with(
            "global-intelligence-bot", NOW - timedelta(days=7)
        )
