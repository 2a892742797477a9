"""
Shared fixtures for the Newsdesk test suite.

Provides scripted provider clients, an in-memory news store and canned
switchboard results so the pipeline can be exercised without network or
database access.
"""

from typing import Any, Dict, List, Optional

import pytest

from newsdesk.schemas import (
    Draft,
    EditorialStrategy,
    GenerationMode,
    SentimentEnum,
    SwitchboardResult,
)
from newsdesk.services.llm_client import LLMClient, ProviderClient


LONG_BODY = (
    "Regional exporters reported a stronger quarter as shipping volumes recovered "
    "and input costs eased across the main manufacturing corridors. "
) * 8


class ScriptedProvider(ProviderClient):
    """Provider that replays canned responses; exceptions in the script are raised."""

    def __init__(self, name: str, responses: List[Any]):
        self.name = name
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

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
        self.calls.append({
            "model_name": model_name,
            "user_message": user_message,
            "json_mode": json_mode,
        })
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return {"content": response, "usage": {}, "model": model_name}


class InMemoryNewsStore:
    """News store double keyed by title."""

    def __init__(self, existing_titles=()):
        self.articles = []
        self.titles = set(existing_titles)

    async def find_by_title(self, title: str) -> Optional[str]:
        return title if title in self.titles else None

    async def insert(self, candidate):
        self.articles.append(candidate)
        self.titles.add(candidate.title)
        return candidate

    async def delete_expired(self, now) -> int:
        return 0

    async def delete_stale_machine_articles(self, author_id, before) -> int:
        return 0


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def llm_client_with():
    """Build an LLMClient around the given provider doubles."""
    def build(*providers: ScriptedProvider, image_client=None) -> LLMClient:
        return LLMClient(providers={p.name: p for p in providers}, image_client=image_client)
    return build


@pytest.fixture
def news_store():
    return InMemoryNewsStore()


@pytest.fixture
def make_result():
    """Factory for switchboard results that clear the quality gate by default."""
    def build(
        headline: str = "Exporters post strongest quarter since the pandemic",
        editorial_summary: str = (
            "Exporters across the region reported their strongest quarter in years, "
            "helped by recovering shipping volumes and easing input costs."
        ),
        tags: Optional[List[str]] = None,
        impact_score: int = 75,
        body: str = LONG_BODY,
        mode: GenerationMode = GenerationMode.MULTI_AGENT,
        cover_image_url: Optional[str] = None,
    ) -> SwitchboardResult:
        draft = Draft(
            print_headline=headline,
            digital_headline=f"{headline} (digital)",
            subheadline="Shipping volumes recover",
            executive_summary=editorial_summary,
            body_markdown=body,
            cover_image_url=cover_image_url,
        )
        strategy = EditorialStrategy(
            editorial_summary=editorial_summary,
            operational_tags=tags if tags is not None else ["Business", "Trade", "Exports"],
            meta_description="Exporters report a strong quarter.",
            sentiment=SentimentEnum.BULLISH,
            market_entities=["Port Authority"],
            impact_score=impact_score,
        )
        return SwitchboardResult(draft=draft, strategy=strategy, mode=mode)
    return build


@pytest.fixture
def store_with_titles():
    """Factory for stores that already hold the given titles."""
    def build(*titles: str) -> InMemoryNewsStore:
        return InMemoryNewsStore(existing_titles=titles)
    return build
