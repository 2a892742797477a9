"""
Unit tests for the Switchboard.

Tests the layered fallback (multi-agent, legacy, sanitizer), the refinement
branch, the fail-open recovery of Critic/Editor/Artist and image re-hosting.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from newsdesk.agents.base import ProviderUnavailable
from newsdesk.config import Settings
from newsdesk.schemas import (
    ContextBrief,
    Critique,
    Draft,
    EditorialStrategy,
    GenerationMode,
    ImageAsset,
    SentimentEnum,
)
from newsdesk.services.llm_client import LLMClient
from newsdesk.services.storage import ImageStorage
from newsdesk.services.switchboard import Switchboard


BRIEFING = (
    'TARGETED NEWS BRIEFING FOR "Tech news in Japan" (Last 24 Hours):\n\n'
    "Title: Chip output rises\nContext: Output rose 4%.\nLink: https://example.com/chips"
)


def unavailable(name):
    return AsyncMock(side_effect=ProviderUnavailable(name, []))


@pytest.fixture
def initial_draft():
    return Draft(print_headline="Chip output rises in Japan", body_markdown="Output rose 4%.")


@pytest.fixture
def refined_draft():
    return Draft(print_headline="Japan chip output up 4%", body_markdown="Output rose 4% in September.")


@pytest.fixture
def strategy():
    return EditorialStrategy(
        editorial_summary="Chips up.",
        operational_tags=["Tech", "Japan", "Chips"],
        sentiment=SentimentEnum.BULLISH,
        impact_score=70,
    )


@pytest.fixture
def agents(initial_draft, refined_draft, strategy):
    """Agent doubles for a fully working multi-agent path."""
    mocks = {name: MagicMock() for name in ("author", "critic", "refiner", "editor", "artist", "legacy_writer")}
    mocks["author"].run = AsyncMock(return_value=initial_draft)
    mocks["critic"].run = AsyncMock(return_value=Critique(quality_score=95))
    mocks["refiner"].run = AsyncMock(return_value=refined_draft)
    mocks["editor"].run = AsyncMock(return_value=strategy)
    mocks["artist"].run = AsyncMock(
        return_value=ImageAsset(url="https://provider.example.com/tmp.png", prompt="p")
    )
    mocks["legacy_writer"].run = unavailable("legacy_writer")
    return mocks


@pytest.fixture
def storage():
    storage = MagicMock()
    storage.persist_external_image = AsyncMock(return_value="https://cdn.example.com/news-images/auto/1.png")
    return storage


def build(agents, storage, researcher=None):
    return Switchboard(storage=storage, researcher=researcher, **agents)


class TestMultiAgentPath:
    """L1 behaviour."""

    @pytest.mark.asyncio
    async def test_high_score_skips_refiner(self, agents, storage, initial_draft, strategy):
        result = await build(agents, storage).generate("Tech news in Japan", "Japan", BRIEFING)

        assert result.mode == GenerationMode.MULTI_AGENT
        assert result.draft == initial_draft
        assert result.strategy == strategy
        agents["refiner"].run.assert_not_called()

    @pytest.mark.asyncio
    async def test_low_score_triggers_refinement(self, agents, storage, refined_draft):
        agents["critic"].run = AsyncMock(return_value=Critique(
            quality_score=70, feedback="Tighten.", hallucinations=["invented quote"]
        ))

        result = await build(agents, storage).generate("Tech news in Japan", "Japan", BRIEFING)

        assert result.mode == GenerationMode.MULTI_AGENT_ELITE
        assert result.draft == refined_draft
        feedback = agents["refiner"].run.call_args.args[0]["feedback"]
        assert "Tighten." in feedback
        assert "invented quote" in feedback

    @pytest.mark.asyncio
    async def test_hallucinations_trigger_refinement_even_with_high_score(self, agents, storage):
        agents["critic"].run = AsyncMock(return_value=Critique(quality_score=96, hallucinations=["x"]))

        result = await build(agents, storage).generate("Tech news in Japan", "Japan")

        assert result.mode == GenerationMode.MULTI_AGENT_ELITE

    @pytest.mark.asyncio
    async def test_critic_failure_accepts_draft(self, agents, storage, initial_draft):
        agents["critic"].run = unavailable("critic")

        result = await build(agents, storage).generate("Tech news in Japan", "Japan", BRIEFING)

        assert result.mode == GenerationMode.MULTI_AGENT
        assert result.draft == initial_draft
        agents["refiner"].run.assert_not_called()

    @pytest.mark.asyncio
    async def test_refiner_failure_keeps_initial_draft(self, agents, storage, initial_draft):
        agents["critic"].run = AsyncMock(return_value=Critique(quality_score=40))
        agents["refiner"].run = unavailable("refiner")

        result = await build(agents, storage).generate("Tech news in Japan", "Japan")

        assert result.mode == GenerationMode.MULTI_AGENT
        assert result.draft == initial_draft

    @pytest.mark.asyncio
    async def test_editor_failure_uses_generic_strategy(self, agents, storage, initial_draft):
        agents["editor"].run = unavailable("editor")

        result = await build(agents, storage).generate("Tech news in Japan", "Japan")

        assert result.strategy.operational_tags == ["Global", "Intelligence", "Automated"]
        assert initial_draft.print_headline in result.strategy.editorial_summary
        assert result.strategy.sentiment == SentimentEnum.NEUTRAL
        assert result.strategy.headline_variants.print == initial_draft.print_headline
        assert result.strategy.headline_variants.digital == f"Intel: {initial_draft.print_headline}"


class TestCoverImage:
    """Artist and storage handling."""

    @pytest.mark.asyncio
    async def test_durable_url_is_attached(self, agents, storage):
        result = await build(agents, storage).generate("Tech news in Japan", "Japan", generate_image=True)

        assert result.draft.cover_image_url == "https://cdn.example.com/news-images/auto/1.png"
        storage.persist_external_image.assert_awaited_once_with("https://provider.example.com/tmp.png")

    @pytest.mark.asyncio
    async def test_storage_failure_leaves_cover_empty(self, agents, storage):
        storage.persist_external_image = AsyncMock(return_value=None)

        result = await build(agents, storage).generate("Tech news in Japan", "Japan", generate_image=True)

        assert result.draft.cover_image_url is None
        assert result.mode == GenerationMode.MULTI_AGENT

    @pytest.mark.asyncio
    async def test_artist_failure_is_not_fatal(self, agents, storage):
        agents["artist"].run = unavailable("artist")

        result = await build(agents, storage).generate("Tech news in Japan", "Japan", generate_image=True)

        assert result.draft.cover_image_url is None
        storage.persist_external_image.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_image_requested(self, agents, storage):
        await build(agents, storage).generate("Tech news in Japan", "Japan")

        agents["artist"].run.assert_not_called()


class TestFallbackLayers:
    """L2 and L3."""

    @pytest.mark.asyncio
    async def test_author_failure_uses_legacy_writer(self, agents, storage, initial_draft):
        agents["author"].run = unavailable("author")
        agents["legacy_writer"].run = AsyncMock(return_value=initial_draft)
        agents["editor"].run = unavailable("editor")

        result = await build(agents, storage).generate("Finance news in UK", "UK")

        assert result.mode == GenerationMode.AI
        assert result.strategy.operational_tags[0] == "Finance"
        agents["critic"].run.assert_not_called()

    @pytest.mark.asyncio
    async def test_author_and_legacy_failure_sanitizes(self, agents, storage):
        agents["author"].run = unavailable("author")

        result = await build(agents, storage).generate(
            "Latest insights regarding Tech news in Japan", "Japan", BRIEFING, generate_image=True
        )

        assert result.mode == GenerationMode.SANITIZED
        assert result.draft.print_headline == "Tech: Japan"
        assert "### Chip output rises" in result.draft.body_markdown
        agents["artist"].run.assert_not_called()

    @pytest.mark.asyncio
    async def test_unexpected_error_still_yields_result(self, agents, storage):
        agents["author"].run = AsyncMock(side_effect=RuntimeError("boom"))

        result = await build(agents, storage).generate("Tech news in Japan", "Japan")

        assert result.mode == GenerationMode.SANITIZED

    @pytest.mark.asyncio
    async def test_no_credentials_at_all_is_sanitized(self):
        empty_settings = Settings(SUPABASE_URL=None, SUPABASE_SERVICE_ROLE_KEY=None)
        switchboard = Switchboard.from_settings(
            llm_client=LLMClient(config=empty_settings, providers={}),
            storage=ImageStorage(config=empty_settings),
        )

        result = await switchboard.generate(
            "Latest insights regarding Finance news in UK", "UK", BRIEFING, generate_image=True
        )

        assert result.mode == GenerationMode.SANITIZED
        assert result.draft.body_markdown
        assert result.strategy.operational_tags[0] == "Finance"
        assert result.strategy.headline_variants.print == "Finance: UK"
        assert result.strategy.headline_variants.digital == "Deep Dive: Finance: UK"


class TestResearch:

    @pytest.mark.asyncio
    async def test_researcher_result_is_returned(self, agents, storage):
        brief = ContextBrief(background="bg", key_players="kp", whats_new="new", why_it_matters="why")
        researcher = MagicMock()
        researcher.run = AsyncMock(return_value=brief)

        assert await build(agents, storage, researcher).research("Chips") == brief

    @pytest.mark.asyncio
    async def test_generic_brief_when_unavailable(self, agents, storage):
        researcher = MagicMock()
        researcher.run = unavailable("researcher")

        brief = await build(agents, storage, researcher).research("Chips")

        assert "Chips" in brief.background
        assert brief.why_it_matters
