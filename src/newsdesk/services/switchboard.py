"""
Switchboard for the Newsdesk multi-agent system.

Coordinates the agent roles into a layered fallback strategy that always
returns a usable draft:

L1  Multi-agent path: Author -> Critic -> (Refiner) -> Editor -> (Artist)
    mode "Multi-Agent-Elite" when the Refiner rewrote the draft,
    "Multi-Agent" otherwise
L2  Legacy single-provider path (mode "AI") when the Author is unavailable
L3  Deterministic sanitizer (mode "Sanitized"), zero external calls

Critic, Refiner, Editor and Artist failures are recovered locally with safe
defaults. Only an Author failure moves the request to the next layer.
"""

import logging
from typing import Optional

from newsdesk.agents.artist import ArtistAgent
from newsdesk.agents.author import AuthorAgent
from newsdesk.agents.base import ProviderUnavailable
from newsdesk.agents.critic import CriticAgent
from newsdesk.agents.editor import EditorAgent
from newsdesk.agents.legacy_writer import LegacyWriterAgent
from newsdesk.agents.refiner import RefinerAgent
from newsdesk.agents.researcher import ResearcherAgent
from newsdesk.schemas import (
    ContextBrief,
    Draft,
    EditorialStrategy,
    GenerationMode,
    SwitchboardResult,
)
from newsdesk.services import sanitizer
from newsdesk.services.llm_client import LLMClient
from newsdesk.services.storage import ImageStorage


logger = logging.getLogger(__name__)


class Switchboard:
    """
    Orchestrates the agent roles for one article.

    Owns the in-flight Draft, Critique and EditorialStrategy objects; none
    of them outlive a generate() call except through the returned result.
    """

    def __init__(
        self,
        author: AuthorAgent,
        critic: CriticAgent,
        refiner: RefinerAgent,
        editor: EditorAgent,
        artist: ArtistAgent,
        legacy_writer: LegacyWriterAgent,
        storage: ImageStorage,
        researcher: Optional[ResearcherAgent] = None
    ):
        self.author = author
        self.critic = critic
        self.refiner = refiner
        self.editor = editor
        self.artist = artist
        self.legacy_writer = legacy_writer
        self.storage = storage
        self.researcher = researcher

    @classmethod
    def from_settings(
        cls,
        llm_client: Optional[LLMClient] = None,
        storage: Optional[ImageStorage] = None
    ) -> "Switchboard":
        """Build the production agent graph sharing one provider registry."""
        llm_client = llm_client or LLMClient()
        return cls(
            author=AuthorAgent(llm_client),
            critic=CriticAgent(llm_client),
            refiner=RefinerAgent(llm_client),
            editor=EditorAgent(llm_client),
            artist=ArtistAgent(llm_client),
            legacy_writer=LegacyWriterAgent(llm_client),
            storage=storage or ImageStorage(),
            researcher=ResearcherAgent(llm_client),
        )

    async def generate(
        self,
        topic: str,
        region: str,
        source_material: Optional[str] = None,
        generate_image: bool = False
    ) -> SwitchboardResult:
        """
        Produce a draft and its editorial strategy.

        Args:
            topic: What to write about
            region: Country or region of interest
            source_material: Scraped briefing (optional)
            generate_image: Whether to run the Artist and re-host its image

        Returns:
            SwitchboardResult with draft, strategy and the mode that produced them
        """
        try:
            return await self._run_multi_agent(topic, region, source_material, generate_image)
        except Exception as e:
            logger.warning("[Switchboard] L1 multi-agent path unavailable (%s), falling back to legacy path", e)

        try:
            return await self._run_legacy(topic, region, source_material, generate_image)
        except Exception as e:
            logger.warning("[Switchboard] L2 legacy path unavailable (%s), activating sanitizer", e)

        return self.sanitize(topic, region, source_material)

    async def _run_multi_agent(
        self,
        topic: str,
        region: str,
        source_material: Optional[str],
        generate_image: bool
    ) -> SwitchboardResult:
        logger.info("[Switchboard] L1: drafting %r", topic)
        draft: Draft = await self.author.run({
            "topic": topic,
            "region": region,
            "source_material": source_material,
        })

        mode = GenerationMode.MULTI_AGENT
        try:
            critique = await self.critic.run({
                "draft": draft,
                "source_material": source_material or "N/A",
            })
        except ProviderUnavailable as e:
            logger.warning("[Switchboard] Critic unavailable (%s), accepting draft as is", e)
            critique = None

        if critique is not None and critique.needs_refinement:
            logger.info(
                "[Switchboard] Critic score %s with %s hallucination(s), refining",
                critique.quality_score, len(critique.hallucinations)
            )
            feedback = critique.feedback
            if critique.hallucinations:
                feedback += "\nRemove unsupported claims: " + "; ".join(critique.hallucinations)
            try:
                draft = await self.refiner.run({"draft": draft, "feedback": feedback})
                mode = GenerationMode.MULTI_AGENT_ELITE
            except ProviderUnavailable as e:
                logger.warning("[Switchboard] Refiner unavailable (%s), keeping initial draft", e)

        strategy = await self._run_editor(draft, topic, fallback=sanitizer.generic_strategy)
        draft = await self._attach_cover_image(draft, topic, generate_image)

        logger.info("[Switchboard] Generated %r via %s mode", draft.print_headline, mode.value)
        return SwitchboardResult(draft=draft, strategy=strategy, mode=mode)

    async def _run_legacy(
        self,
        topic: str,
        region: str,
        source_material: Optional[str],
        generate_image: bool
    ) -> SwitchboardResult:
        logger.info("[Switchboard] L2: legacy single-provider path for %r", topic)
        draft: Draft = await self.legacy_writer.run({
            "topic": topic,
            "region": region,
            "source_material": source_material,
        })
        strategy = await self._run_editor(
            draft, topic,
            fallback=lambda title: sanitizer.deterministic_strategy(title, topic),
        )
        draft = await self._attach_cover_image(draft, topic, generate_image)

        logger.info("[Switchboard] Generated %r via %s mode", draft.print_headline, GenerationMode.AI.value)
        return SwitchboardResult(draft=draft, strategy=strategy, mode=GenerationMode.AI)

    def sanitize(self, topic: str, region: str, source_material: Optional[str] = None) -> SwitchboardResult:
        """L3: deterministic report, no external calls."""
        draft = sanitizer.deterministic_draft(topic, region, source_material)
        strategy = sanitizer.deterministic_strategy(draft.print_headline, topic)
        logger.info("[Switchboard] Generated %r via %s mode", draft.print_headline, GenerationMode.SANITIZED.value)
        return SwitchboardResult(draft=draft, strategy=strategy, mode=GenerationMode.SANITIZED)

    async def _run_editor(self, draft: Draft, topic: str, fallback) -> EditorialStrategy:
        title = draft.print_headline or topic
        try:
            return await self.editor.run({
                "content": draft.body_markdown or "Synthetic knowledge gathering in progress.",
                "title": title,
            })
        except ProviderUnavailable as e:
            logger.warning("[Switchboard] Editor unavailable (%s), using generic strategy", e)
            return fallback(title)

    async def _attach_cover_image(self, draft: Draft, topic: str, generate_image: bool) -> Draft:
        if not generate_image:
            return draft

        try:
            asset = await self.artist.run({
                "headline": draft.print_headline or topic,
                "summary": draft.executive_summary or "Global Intelligence Summary",
            })
            durable_url = await self.storage.persist_external_image(asset.url)
        except Exception as e:
            logger.warning("[Switchboard] Artist step failed (%s), continuing without cover image", e)
            return draft

        if not durable_url:
            logger.warning("[Switchboard] Image could not be re-hosted, continuing without cover image")
            return draft
        return draft.model_copy(update={"cover_image_url": durable_url})

    async def research(self, topic: str) -> ContextBrief:
        """Context brief for editors; a generic brief when no provider answers."""
        if self.researcher is not None:
            try:
                return await self.researcher.run({"topic": topic})
            except ProviderUnavailable as e:
                logger.warning("[Switchboard] Researcher unavailable (%s), returning generic brief", e)

        return ContextBrief(
            background=f"Global background assessment for {topic}.",
            key_players="International actors and regional interests.",
            whats_new="Real-time movements identified by intelligence network.",
            why_it_matters="Significant impact on regional stability and global markets.",
        )
