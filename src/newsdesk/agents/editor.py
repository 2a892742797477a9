"""
Editor Agent for the Newsdesk pipeline.

Extracts SEO and editorial metadata (tags, headline variants, sentiment,
market entities, impact score) from a finished article.
"""

from typing import Dict, Any

from newsdesk.agents.base import BaseAgent, ProviderRoute
from newsdesk.schemas import EditorialStrategy
from newsdesk.services.llm_client import GROQ, OPENROUTER, ANTHROPIC


# Articles are long; the metadata only needs the opening
MAX_CONTENT_CHARS = 6000


class EditorAgent(BaseAgent):
    """Agent that produces the EditorialStrategy for an article."""

    agent_name = "editor"
    result_model = EditorialStrategy
    system_prompt = (
        'You are "The Editor", a high-speed news analyst. '
        "You extract professional publishing metadata from articles."
    )
    routes = (
        ProviderRoute(GROQ, "llama-3.1-70b-versatile"),
        ProviderRoute(OPENROUTER, "openrouter/auto"),
        ProviderRoute(ANTHROPIC, "claude-3-5-haiku-latest"),
    )
    temperature = 0.3

    async def execute(self, input_data: Dict[str, Any]) -> EditorialStrategy:
        """
        Extract editorial metadata.

        Args:
            input_data: Dict containing:
                - content: Article body
                - title: Article headline

        Returns:
            Validated EditorialStrategy
        """
        title = input_data.get("title") or "Unspecified Article"
        content = (input_data.get("content") or "")[:MAX_CONTENT_CHARS]

        user_message = f"""
Extract professional metadata.
Title: {title} | Content: {content}

Return ONLY a JSON object:
{{
  "editorial_summary": "string",
  "operational_tags": ["string"],
  "internal_linking": [],
  "headline_variants": {{ "print": "string", "digital": "string" }},
  "meta_description": "string",
  "sentiment": "Bullish|Bearish|Neutral",
  "market_entities": ["string"],
  "impact_score": 0-100
}}
"""
        return await self.call_llm(user_message)
