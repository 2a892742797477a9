"""
Artist Agent for the Newsdesk pipeline.

Generates a cover image for an article:
1. Optionally asks a text provider to turn the headline into a photographic prompt
2. Calls the image provider with that prompt

The returned URL is ephemeral; the Switchboard re-hosts it before use.
"""

import logging
from typing import Dict, Any

from newsdesk.agents.base import BaseAgent, AgentExecutionError, ProviderRoute, ProviderUnavailable
from newsdesk.schemas import ImageAsset
from newsdesk.services.llm_client import GEMINI, OPENROUTER, LLMClientError


logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 1000


class ArtistAgent(BaseAgent):
    """Agent that produces a cover image for a headline."""

    agent_name = "artist"
    result_model = ImageAsset
    system_prompt = (
        "You write prompts for a photorealistic image model. "
        "Return only the prompt text."
    )
    # Routes used for prompt enhancement only
    routes = (
        ProviderRoute(GEMINI, "gemini-1.5-flash"),
        ProviderRoute(OPENROUTER, "google/gemma-2-9b-it:free"),
    )
    max_tokens = 300

    @staticmethod
    def default_prompt(headline: str) -> str:
        return (
            f"A professional, cinematic news photograph depicting: {headline}. "
            "High quality, photorealistic, neutral journalism style. No text, no logos."
        )

    async def enhance_prompt(self, headline: str, summary: str) -> str:
        """Ask the first working text route for a richer prompt; keep the fixed one otherwise."""
        user_message = f"""
Headline: {headline}
Summary: {summary}

Turn this news into a detailed photographic prompt for an image model.
Style: Professional Photojournalism, cinematic lighting, realistic textures.
Avoid: Text, cartoonish elements, or excessive gore.
Return ONLY the prompt string.
"""
        for route in self.routes:
            if not self.llm_client.is_configured(route.provider):
                continue
            try:
                response = await self.llm_client.call(
                    provider=route.provider,
                    model_name=route.model_name,
                    system_prompt=self.system_prompt,
                    user_message=user_message,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    json_mode=False,
                )
                enhanced = (response.get("content") or "").strip()
                if enhanced:
                    return enhanced[:MAX_PROMPT_CHARS]
            except LLMClientError as e:
                logger.warning("[artist] prompt enhancement via %s failed: %s", route.provider, e)

        return self.default_prompt(headline)

    async def execute(self, input_data: Dict[str, Any]) -> ImageAsset:
        """
        Generate an image.

        Args:
            input_data: Dict containing:
                - headline: Article headline
                - summary: Article summary

        Returns:
            ImageAsset with the provider's (ephemeral) URL
        """
        headline = input_data.get("headline", "")
        if not headline:
            raise AgentExecutionError("No headline provided to ArtistAgent")

        if not self.llm_client.can_generate_images:
            logger.warning("[artist] image provider not configured, skipping image generation")
            raise ProviderUnavailable(self.agent_name, [])

        prompt = await self.enhance_prompt(headline, input_data.get("summary") or "")

        try:
            url = await self.llm_client.generate_image(prompt)
        except LLMClientError as e:
            logger.warning("[artist] image provider failed: %s", e)
            raise ProviderUnavailable(self.agent_name, ["openai"])

        return ImageAsset(url=url, prompt=prompt)
