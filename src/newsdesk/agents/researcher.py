"""
Researcher Agent for the Newsdesk pipeline.

Produces a context brief (background, key players, what's new, why it
matters) for editors. The brief is editorial input only.
"""

from typing import Dict, Any

from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute
from newsdesk.schemas import ContextBrief
from newsdesk.services.llm_client import GEMINI, OPENROUTER, ANTHROPIC


class ResearcherAgent(BaseAgent):
    """Agent that writes a context brief for a topic."""

    agent_name = "researcher"
    result_model = ContextBrief
    system_prompt = (
        'You are "The Researcher", an intelligence analyst for Terai Times. '
        "You explain the background and significance of news topics."
    )
    routes = (
        ProviderRoute(GEMINI, "gemini-1.5-flash"),
        ProviderRoute(OPENROUTER, "google/gemma-2-9b-it:free"),
        ProviderRoute(ANTHROPIC, "claude-3-5-haiku-latest"),
    )

    async def execute(self, input_data: Dict[str, Any]) -> ContextBrief:
        topic = input_data.get("topic", "")
        if not topic:
            raise AgentExecutionError("No topic provided to ResearcherAgent")

        user_message = f"""
Provide a deep context brief for the following topic: {topic}

Return ONLY a JSON object:
{{
  "background": "Deep historical/contextual background",
  "key_players": "Primary actors, organizations, or countries involved",
  "whats_new": "The latest specific movements identified",
  "why_it_matters": "The strategic geopolitical or market significance"
}}
"""
        return await self.call_llm(user_message)
