"""
Critic Agent for the Newsdesk pipeline.

Second agent in the pipeline. Fact-checks the Author's draft against the
source material and scores it; the score drives the refinement branch.
"""

import json
from typing import Dict, Any

from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute
from newsdesk.schemas import Critique, Draft
from newsdesk.services.llm_client import DEEPSEEK, OPENROUTER, ANTHROPIC


class CriticAgent(BaseAgent):
    """
    Agent that peer-reviews a draft.

    Detects hallucinations (facts not in the source), tone problems and
    formatting errors, and returns a 0-100 quality score.
    """

    agent_name = "critic"
    result_model = Critique
    system_prompt = (
        'You are "The Critic", a rigorous fact-checker for Terai Times. '
        "You compare drafts against their source material and report every "
        "claim the source does not support."
    )
    routes = (
        ProviderRoute(DEEPSEEK, "deepseek-chat"),
        ProviderRoute(OPENROUTER, "google/gemma-2-9b-it:free"),
        ProviderRoute(ANTHROPIC, "claude-3-5-haiku-latest"),
    )
    temperature = 0.2

    async def execute(self, input_data: Dict[str, Any]) -> Critique:
        """
        Review a draft.

        Args:
            input_data: Dict containing:
                - draft: Draft under review
                - source_material: Scraped briefing the draft should rely on

        Returns:
            Validated Critique
        """
        draft = input_data.get("draft")
        if not isinstance(draft, Draft):
            raise AgentExecutionError("No draft provided to CriticAgent")

        user_message = f"""
Review this news draft against the provided Source Material.
Detect any hallucinations (facts not in source), tone issues, or formatting errors.

DRAFT:
{json.dumps(draft.model_dump(exclude={"cover_image_url"}), indent=2)}

SOURCE MATERIAL:
{input_data.get("source_material") or "N/A"}

Return ONLY a JSON object:
{{
  "quality_score": 0-100,
  "feedback": "Concise editing feedback",
  "hallucinations": ["any unsupported facts found"]
}}
"""
        return await self.call_llm(user_message)
