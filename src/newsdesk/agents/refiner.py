"""
Refiner Agent for the Newsdesk pipeline.

Third agent in the pipeline, only invoked when the Critic asks for changes.
Applies the critic's feedback to the draft.
"""

import json
from typing import Dict, Any

from newsdesk.agents.author import DRAFT_SCHEMA
from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute
from newsdesk.schemas import Draft
from newsdesk.services.llm_client import GEMINI, OPENROUTER, ANTHROPIC


class RefinerAgent(BaseAgent):
    """Agent that rewrites a draft according to editorial feedback."""

    agent_name = "refiner"
    result_model = Draft
    system_prompt = (
        'You are "The Refiner", a senior copy editor for Terai Times. '
        "You correct drafts according to reviewer feedback and remove any "
        "unsupported claims."
    )
    routes = (
        ProviderRoute(GEMINI, "gemini-1.5-pro"),
        ProviderRoute(OPENROUTER, "meta-llama/llama-3-8b-instruct:free"),
        ProviderRoute(ANTHROPIC, "claude-3-5-sonnet-latest"),
    )

    async def execute(self, input_data: Dict[str, Any]) -> Draft:
        """
        Refine a draft.

        Args:
            input_data: Dict containing:
                - draft: Draft to correct
                - feedback: Critic feedback (hallucinations included)

        Returns:
            Refined Draft; fields the provider left empty keep the original value
        """
        original = input_data.get("draft")
        if not isinstance(original, Draft):
            raise AgentExecutionError("No draft provided to RefinerAgent")

        user_message = f"""
Incorporate the following feedback into the article draft.
Feedback: {input_data.get("feedback") or "Tighten the prose and remove unsupported claims."}
Original Draft: {json.dumps(original.model_dump(exclude={"cover_image_url"}))}

Return the corrected, high-quality JSON object with the same fields:
{DRAFT_SCHEMA}
"""
        refined = await self.call_llm(user_message)

        merged = original.model_dump()
        for field, value in refined.model_dump().items():
            if value:
                merged[field] = value
        merged["cover_image_url"] = original.cover_image_url
        return Draft.model_validate(merged)
