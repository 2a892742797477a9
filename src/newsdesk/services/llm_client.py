"""
LLM provider clients for the Newsdesk agents.

Provides a unified interface over the interchangeable text and image
providers (Gemini, OpenRouter, DeepSeek, Groq, OpenAI, Anthropic) with
typed errors and an explicit timeout on every call.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional

import httpx
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from newsdesk.config import Settings, settings as default_settings


logger = logging.getLogger(__name__)


GEMINI = "gemini"
OPENROUTER = "openrouter"
DEEPSEEK = "deepseek"
GROQ = "groq"
OPENAI = "openai"
ANTHROPIC = "anthropic"

OPENAI_COMPATIBLE_BASE_URLS = {
    OPENROUTER: "https://openrouter.ai/api/v1",
    DEEPSEEK: "https://api.deepseek.com/v1",
    GROQ: "https://api.groq.com/openai/v1",
    OPENAI: None,  # SDK default
}

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class LLMClientError(Exception):
    """Base exception for LLM client errors."""
    pass


class LLMNotConfiguredError(LLMClientError):
    """Raised when a provider has no credential configured."""
    pass


class LLMTimeoutError(LLMClientError):
    """Raised when LLM call exceeds timeout."""
    pass


class LLMProviderError(LLMClientError):
    """Raised when LLM provider returns an error."""
    pass


class ProviderClient(ABC):
    """One external text-generation provider."""

    name: str = ""

    @abstractmethod
    async def generate(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
        timeout: int = 30
    ) -> Dict[str, Any]:
        """
        Generate a completion.

        Returns:
            Dict containing:
                - content: Generated text
                - usage: Token usage stats
                - model: Model used

        Raises:
            LLMTimeoutError: If call exceeds timeout
            LLMProviderError: If provider returns error or no content
        """


class GeminiClient(ProviderClient):
    """Google Gemini via the public generateContent REST endpoint."""

    name = GEMINI

    def __init__(self, api_key: str, http_client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.http_client = http_client

    async def generate(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
        timeout: int = 30
    ) -> Dict[str, Any]:
        url = f"{GEMINI_BASE_URL}/models/{model_name}:generateContent"
        generation_config: Dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if json_mode:
            generation_config["response_mime_type"] = "application/json"

        payload = {
            "contents": [{"parts": [{"text": user_message}]}],
            "generationConfig": generation_config,
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        client = self.http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=timeout,
            )
        except httpx.TimeoutException:
            raise LLMTimeoutError(f"Gemini call exceeded timeout of {timeout}s")
        except httpx.HTTPError as e:
            raise LLMProviderError(f"Gemini API error: {str(e)}")
        finally:
            if self.http_client is None:
                await client.aclose()

        if response.status_code >= 400:
            raise LLMProviderError(
                f"Gemini API error ({response.status_code}): {response.text[:400]}"
            )

        try:
            data = response.json()
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise LLMProviderError("Gemini API returned no candidate text")

        usage = data.get("usageMetadata", {})
        return {
            "content": content,
            "usage": {
                "input_tokens": usage.get("promptTokenCount", 0),
                "output_tokens": usage.get("candidatesTokenCount", 0),
            },
            "model": model_name,
        }


class OpenAICompatibleClient(ProviderClient):
    """OpenAI, OpenRouter, DeepSeek and Groq share the chat completions API."""

    def __init__(self, name: str, api_key: str, base_url: Optional[str] = None):
        self.name = name
        default_headers = None
        if name == OPENROUTER:
            default_headers = {
                "HTTP-Referer": "https://terai-times.com",
                "X-Title": "Terai Times Newsdesk",
            }
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            default_headers=default_headers,
            max_retries=0,
        )

    async def generate(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
        timeout: int = 30
    ) -> Dict[str, Any]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_message})

        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=model_name,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(f"{self.name} call exceeded timeout of {timeout}s")
        except Exception as e:
            raise LLMProviderError(f"{self.name} API error: {str(e)}")

        if not response.choices or not response.choices[0].message.content:
            raise LLMProviderError(f"{self.name} API returned an empty completion")

        usage = response.usage
        return {
            "content": response.choices[0].message.content,
            "usage": {
                "input_tokens": usage.prompt_tokens if usage else 0,
                "output_tokens": usage.completion_tokens if usage else 0,
            },
            "model": response.model,
        }


class AnthropicClient(ProviderClient):
    """Anthropic Claude models."""

    name = ANTHROPIC

    def __init__(self, api_key: str):
        self.client = AsyncAnthropic(api_key=api_key, max_retries=0)

    async def generate(
        self,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
        timeout: int = 30
    ) -> Dict[str, Any]:
        try:
            response = await asyncio.wait_for(
                self.client.messages.create(
                    model=model_name,
                    system=system_prompt,
                    messages=[
                        {"role": "user", "content": user_message}
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(f"Anthropic call exceeded timeout of {timeout}s")
        except Exception as e:
            raise LLMProviderError(f"Anthropic API error: {str(e)}")

        if not response.content:
            raise LLMProviderError("Anthropic API returned an empty message")

        return {
            "content": response.content[0].text,
            "usage": {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
            "model": response.model,
        }


class OpenAIImageClient:
    """DALL-E image generation. Returned URLs are ephemeral."""

    name = OPENAI

    def __init__(self, api_key: str, model_name: str = "dall-e-3"):
        self.model_name = model_name
        self.client = AsyncOpenAI(api_key=api_key, max_retries=0)

    async def generate_image(self, prompt: str, timeout: int = 60) -> str:
        try:
            response = await asyncio.wait_for(
                self.client.images.generate(
                    model=self.model_name,
                    prompt=prompt,
                    n=1,
                    size="1024x1024",
                    quality="standard",
                ),
                timeout=timeout
            )
        except asyncio.TimeoutError:
            raise LLMTimeoutError(f"Image generation exceeded timeout of {timeout}s")
        except Exception as e:
            raise LLMProviderError(f"Image API error: {str(e)}")

        if not response.data or not response.data[0].url:
            raise LLMProviderError("Image API returned no URL")
        return response.data[0].url


class LLMClient:
    """
    Registry of the providers that have credentials configured.

    Agents address providers by family name; a provider without a
    credential is simply absent and never called.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        providers: Optional[Dict[str, ProviderClient]] = None,
        image_client: Optional[OpenAIImageClient] = None
    ):
        self.config = config or default_settings
        if providers is not None:
            self.providers = dict(providers)
            self.image_client = image_client
            return

        self.providers: Dict[str, ProviderClient] = {}
        if self.config.GOOGLE_AI_API_KEY:
            self.providers[GEMINI] = GeminiClient(self.config.GOOGLE_AI_API_KEY)
        if self.config.ANTHROPIC_API_KEY:
            self.providers[ANTHROPIC] = AnthropicClient(self.config.ANTHROPIC_API_KEY)

        credentials = {
            OPENROUTER: self.config.OPENROUTER_API_KEY,
            DEEPSEEK: self.config.DEEPSEEK_API_KEY,
            GROQ: self.config.GROQ_API_KEY,
            OPENAI: self.config.OPENAI_API_KEY,
        }
        for name, api_key in credentials.items():
            if api_key:
                self.providers[name] = OpenAICompatibleClient(
                    name, api_key, OPENAI_COMPATIBLE_BASE_URLS[name]
                )

        self.image_client = image_client
        if self.image_client is None and self.config.OPENAI_API_KEY:
            self.image_client = OpenAIImageClient(self.config.OPENAI_API_KEY)

    def is_configured(self, provider: str) -> bool:
        return provider.lower() in self.providers

    @property
    def can_generate_images(self) -> bool:
        return self.image_client is not None

    async def call(
        self,
        provider: str,
        model_name: str,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = True,
        timeout: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Unified interface for calling any configured provider.

        Raises:
            LLMNotConfiguredError: If the provider has no credential
            LLMTimeoutError: If call exceeds timeout
            LLMProviderError: If provider returns error
        """
        if timeout is None:
            timeout = self.config.PROVIDER_TIMEOUT

        client = self.providers.get(provider.lower())
        if client is None:
            raise LLMNotConfiguredError(f"Provider '{provider}' not configured")

        logger.debug("LLM request provider=%s model=%s", provider, model_name)
        return await client.generate(
            model_name=model_name,
            system_prompt=system_prompt,
            user_message=user_message,
            temperature=temperature,
            max_tokens=max_tokens,
            json_mode=json_mode,
            timeout=timeout
        )

    async def generate_image(self, prompt: str, timeout: Optional[int] = None) -> str:
        if self.image_client is None:
            raise LLMNotConfiguredError("Image provider not configured")
        if timeout is None:
            timeout = self.config.PROVIDER_TIMEOUT * 2
        return await self.image_client.generate_image(prompt, timeout=timeout)
