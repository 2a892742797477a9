"""
Author Agent for the Newsdesk pipeline.

First agent in the pipeline. Drafts a complete news article from a topic,
a region and the scraped source material.
"""

from typing import Dict, Any

from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute
from newsdesk.schemas import Draft
from newsdesk.services.llm_client import GEMINI, OPENROUTER, ANTHROPIC


DRAFT_SCHEMA = """{
  "print_headline": "string",
  "digital_headline": "string",
  "subheadline": "string",
  "executive_summary": "string",
  "body": "string (markdown)",
  "suggested_tier": "string"
}"""


class AuthorAgent(BaseAgent):
    """
    Agent that writes the first draft.

    Produces print and digital headlines, a subheadline, an executive
    summary and a markdown body grounded in the source material.
    """

    agent_name = "author"
    result_model = Draft
    system_prompt = (
        'You are "The Author", a world-class news journalist for Terai Times. '
        "You write accurate, neutral, well-structured news articles and only "
        "state facts supported by the source material you are given."
    )
    routes = (
        ProviderRoute(GEMINI, "gemini-1.5-flash"),
        ProviderRoute(OPENROUTER, "google/gemma-2-9b-it:free"),
        ProviderRoute(ANTHROPIC, "claude-3-5-haiku-latest"),
    )

    async def execute(self, input_data: Dict[str, Any]) -> Draft:
        """
        Draft an article.

        Args:
            input_data: Dict containing:
                - topic: Topic to write about
                - region: Country or region of interest
                - source_material: Scraped briefing (optional)

        Returns:
            Validated Draft
        """
        topic = input_data.get("topic", "")
        if not topic:
            raise AgentExecutionError("No topic provided to AuthorAgent")

        user_message = f"""
Draft a professional news article based on the following:
Topic: {topic}
Region: {input_data.get("region") or "Global"}
Source Material: {input_data.get("source_material") or "N/A"}

Return ONLY a JSON object with:
{DRAFT_SCHEMA}
"""
        return await self.call_llm(user_message)
