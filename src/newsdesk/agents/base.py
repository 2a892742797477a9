"""
Base Agent class for the Newsdesk multi-agent pipeline.

Provides the provider fall-through loop shared by every role: each agent
holds a priority-ordered list of provider routes, tries them in order and
fails with ProviderUnavailable only when every configured route failed.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from newsdesk.services.llm_client import LLMClient, LLMClientError


logger = logging.getLogger(__name__)


def extract_json_from_response(raw_content: str) -> str:
    """
    Extract JSON object from LLM response, handling markdown code blocks and extra text.

    LLMs often wrap JSON in markdown code blocks or add explanatory text around the JSON.
    This function extracts just the first balanced JSON object.

    Args:
        raw_content: Raw LLM response text

    Returns:
        Extracted JSON string ready for json.loads()

    Raises:
        ValueError: If no JSON object found in content
    """
    content = (raw_content or "").strip()

    # Try to extract JSON from markdown code block
    if "```json" in content:
        start = content.find("```json") + 7
        end = content.find("```", start)
        if end > start:
            content = content[start:end].strip()
    elif "```" in content:
        start = content.find("```") + 3
        end = content.find("```", start)
        if end > start:
            content = content[start:end].strip()

    start = content.find("{")
    if start == -1:
        raise ValueError("No JSON object found in response")

    # Find the matching closing brace, ignoring braces inside strings
    brace_count = 0
    in_string = False
    escaped = False
    for i in range(start, len(content)):
        char = content[i]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            brace_count += 1
        elif char == "}":
            brace_count -= 1
            if brace_count == 0:
                return content[start:i + 1]

    raise ValueError("No matching closing brace found for JSON object")


class AgentError(Exception):
    """Base exception for agent errors."""
    pass


class AgentExecutionError(AgentError):
    """Raised when agent execution fails."""
    pass


class ProviderUnavailable(AgentExecutionError):
    """Raised when no configured provider produced a usable result."""

    def __init__(
        self,
        agent_name: str,
        attempted: Sequence[str],
        reason: Optional[str] = None
    ):
        self.agent_name = agent_name
        self.attempted = list(attempted)
        if reason:
            detail = reason
        elif self.attempted:
            detail = f"all providers failed ({', '.join(self.attempted)})"
        else:
            detail = "no provider configured"
        super().__init__(f"Agent '{agent_name}': {detail}")


class ParseFailure(AgentError):
    """Raised when a provider responded but the payload failed validation."""
    pass


@dataclass(frozen=True)
class ProviderRoute:
    """One provider/model pair in an agent's priority list."""
    provider: str
    model_name: str


class BaseAgent(ABC):
    """
    Base class for all agents in the pipeline.

    Each agent:
    1. Builds a role-specific prompt from its input
    2. Tries its provider routes in priority order, skipping unconfigured ones
    3. Parses and validates the response against its result model
    4. Falls through to the next route on any provider or parse failure
    """

    agent_name: str = ""
    result_model: Optional[Type[BaseModel]] = None
    system_prompt: str = ""
    routes: Sequence[ProviderRoute] = ()
    temperature: float = 0.7
    max_tokens: int = 4096

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        routes: Optional[Sequence[ProviderRoute]] = None
    ):
        """
        Initialize the agent.

        Args:
            llm_client: Provider registry (built from settings when omitted)
            routes: Override of the class-level provider priority list
        """
        self.llm_client = llm_client or LLMClient()
        if routes is not None:
            self.routes = tuple(routes)

    def parse_output(self, raw_content: str) -> BaseModel:
        """
        Parse provider text into the agent's result model.

        Raises:
            ParseFailure: If no JSON object is present or validation fails
        """
        try:
            parsed = json.loads(extract_json_from_response(raw_content))
        except ValueError as e:
            raise ParseFailure(f"{self.agent_name} returned invalid JSON: {str(e)}")

        if not isinstance(parsed, dict):
            raise ParseFailure(f"{self.agent_name} returned a non-object JSON payload")

        try:
            return self.result_model.model_validate(parsed)
        except ValidationError as e:
            raise ParseFailure(
                f"{self.agent_name} output failed validation: {e.error_count()} error(s)"
            )

    async def call_llm(self, user_message: str) -> BaseModel:
        """
        Try each configured route until one returns a valid result.

        Raises:
            ProviderUnavailable: If every configured route failed or none is configured
        """
        attempted: List[str] = []
        for route in self.routes:
            if not self.llm_client.is_configured(route.provider):
                continue

            attempted.append(route.provider)
            try:
                response = await self.llm_client.call(
                    provider=route.provider,
                    model_name=route.model_name,
                    system_prompt=self.system_prompt,
                    user_message=user_message,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
                return self.parse_output(response["content"])
            except (LLMClientError, ParseFailure) as e:
                logger.warning(
                    "[%s] provider %s (%s) failed, trying next: %s",
                    self.agent_name, route.provider, route.model_name, e
                )

        raise ProviderUnavailable(self.agent_name, attempted)

    @abstractmethod
    async def execute(self, input_data: Dict[str, Any]) -> Any:
        """
        Execute agent logic.

        Args:
            input_data: Role-specific input

        Returns:
            Validated, role-specific result

        Raises:
            ProviderUnavailable: If no provider produced a usable result
        """
        pass

    async def run(self, input_data: Dict[str, Any]) -> Any:
        """
        Main entry point to run the agent.

        Returns:
            The role's result model

        Raises:
            ProviderUnavailable: The only failure a caller has to handle
        """
        try:
            return await self.execute(input_data)
        except ProviderUnavailable:
            raise
        except (AgentError, LLMClientError, KeyError, TypeError, ValueError) as e:
            logger.warning("[%s] failed with unexpected error: %s", self.agent_name, e)
            raise ProviderUnavailable(self.agent_name, [], reason=str(e)) from e
