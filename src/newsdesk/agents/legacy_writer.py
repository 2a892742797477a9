"""
Legacy single-provider writer.

The pre-swarm generation path: one OpenAI call that drafts the article.
Used by the Switchboard when the Author agent is unavailable. When the
provider is configured but its answer is unusable, the deterministic
sanitizer draft is returned instead.
"""

import logging
from typing import Dict, Any

from newsdesk.agents.author import DRAFT_SCHEMA
from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute, ProviderUnavailable
from newsdesk.schemas import Draft
from newsdesk.services import sanitizer
from newsdesk.services.llm_client import OPENAI


logger = logging.getLogger(__name__)


class LegacyWriterAgent(BaseAgent):
    """Single-provider draft writer with a built-in deterministic fallback."""

    agent_name = "legacy_writer"
    result_model = Draft
    system_prompt = (
        "You are a professional news editor. Write factual, neutral news "
        "articles in JSON format."
    )
    routes = (
        ProviderRoute(OPENAI, "gpt-4o-mini"),
    )

    async def execute(self, input_data: Dict[str, Any]) -> Draft:
        topic = input_data.get("topic", "")
        if not topic:
            raise AgentExecutionError("No topic provided to LegacyWriterAgent")

        if not any(self.llm_client.is_configured(r.provider) for r in self.routes):
            raise ProviderUnavailable(self.agent_name, [])

        region = input_data.get("region") or "Global"
        source_material = input_data.get("source_material")
        user_message = f"""
Write a news article.
Topic: {topic}
Region: {region}
Tone: Analytical
Depth: Standard
Source Material: {source_material or "N/A"}

Return ONLY a JSON object with:
{DRAFT_SCHEMA}
"""
        try:
            return await self.call_llm(user_message)
        except ProviderUnavailable as e:
            logger.warning("[legacy_writer] %s; using deterministic draft", e)
            return sanitizer.deterministic_draft(topic, region, source_material)
