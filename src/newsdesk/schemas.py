"""
Pipeline data model for the Newsdesk content engine.

Provider output is free-form text; every role validates the JSON it extracts
against one of these models. Defaults live here so that a partially filled
payload becomes a well-formed result (or is rejected) in one place.
"""

import enum
from datetime import datetime
from typing import List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)


class GenerationMode(str, enum.Enum):
    """Switchboard layer that produced a draft."""
    MULTI_AGENT_ELITE = "Multi-Agent-Elite"
    MULTI_AGENT = "Multi-Agent"
    AI = "AI"
    SANITIZED = "Sanitized"


class SentimentEnum(str, enum.Enum):
    """Market sentiment reported by the Editor."""
    BULLISH = "Bullish"
    BEARISH = "Bearish"
    NEUTRAL = "Neutral"


class NewsStatus(str, enum.Enum):
    """Lifecycle status of a persisted article."""
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    PUBLISHED = "published"


class RevenueDecision(str, enum.Enum):
    """Quality gate outcome."""
    PUBLISH = "publish"
    PENDING_APPROVAL = "pending_approval"
    SKIP = "skip"


def _clamp_score(value) -> int:
    try:
        score = int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"score is not numeric: {value!r}")
    return max(0, min(100, score))


def _string_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(item) for item in value if item is not None and str(item).strip()]


class Draft(BaseModel):
    """Article draft produced by the Author (or Refiner / fallbacks)."""

    print_headline: str = ""
    digital_headline: str = ""
    subheadline: str = ""
    executive_summary: str = ""
    body_markdown: str = Field(
        default="",
        validation_alias=AliasChoices("body_markdown", "body"),
    )
    suggested_tier: str = "Standard"
    cover_image_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("cover_image_url", "cover_image"),
    )

    @field_validator(
        "print_headline", "digital_headline", "subheadline",
        "executive_summary", "body_markdown", "suggested_tier",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return ""
        return str(value).strip()

    @model_validator(mode="after")
    def _require_headline_and_body(self) -> "Draft":
        if not self.body_markdown:
            raise ValueError("draft body is empty")
        if not self.print_headline and not self.digital_headline:
            raise ValueError("draft has no headline")
        if not self.print_headline:
            self.print_headline = self.digital_headline
        if not self.digital_headline:
            self.digital_headline = self.print_headline
        if not self.suggested_tier:
            self.suggested_tier = "Standard"
        return self


class ContextBrief(BaseModel):
    """Research brief for editors. Never persisted."""

    background: str = ""
    key_players: str = ""
    whats_new: str = ""
    why_it_matters: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _flatten(cls, value):
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return str(value)


class Critique(BaseModel):
    """Critic verdict on a draft."""

    quality_score: int
    feedback: str = ""
    hallucinations: List[str] = Field(default_factory=list)

    @field_validator("quality_score", mode="before")
    @classmethod
    def _clamp(cls, value):
        return _clamp_score(value)

    @field_validator("feedback", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value)

    @field_validator("hallucinations", mode="before")
    @classmethod
    def _list(cls, value):
        return _string_list(value)

    @property
    def needs_refinement(self) -> bool:
        return self.quality_score < 90 or bool(self.hallucinations)


class HeadlineVariants(BaseModel):
    print: str = ""
    digital: str = ""


class EditorialStrategy(BaseModel):
    """SEO and editorial metadata extracted by the Editor."""

    editorial_summary: str = ""
    operational_tags: List[str] = Field(default_factory=list)
    internal_linking: List[str] = Field(default_factory=list)
    headline_variants: HeadlineVariants = Field(default_factory=HeadlineVariants)
    meta_description: str = ""
    sentiment: SentimentEnum = SentimentEnum.NEUTRAL
    market_entities: List[str] = Field(default_factory=list)
    impact_score: int = 50

    @field_validator("editorial_summary", "meta_description", mode="before")
    @classmethod
    def _text(cls, value):
        return "" if value is None else str(value).strip()

    @field_validator("operational_tags", "internal_linking", "market_entities", mode="before")
    @classmethod
    def _list(cls, value):
        return _string_list(value)

    @field_validator("headline_variants", mode="before")
    @classmethod
    def _variants(cls, value):
        if isinstance(value, (dict, HeadlineVariants)):
            return value
        return {}

    @field_validator("sentiment", mode="before")
    @classmethod
    def _sentiment(cls, value):
        for member in SentimentEnum:
            if str(value or "").strip().lower() == member.value.lower():
                return member
        return SentimentEnum.NEUTRAL

    @field_validator("impact_score", mode="before")
    @classmethod
    def _impact(cls, value):
        if value is None:
            return 50
        return _clamp_score(value)


class ImageAsset(BaseModel):
    """Ephemeral image produced by the Artist."""

    url: str
    prompt: str


class SwitchboardResult(BaseModel):
    draft: Draft
    strategy: EditorialStrategy
    mode: GenerationMode


class Candidate(BaseModel):
    """Assembled, not-yet-persisted article."""

    title: str
    slug: str
    content: str
    summary: str = ""
    cover_image: Optional[str] = None
    category: str = "World"
    country: str = "Global"
    tags: List[str] = Field(default_factory=list)
    source_url: str = ""
    status: NewsStatus = NewsStatus.PENDING_APPROVAL
    author_id: str = ""
    is_trending: bool = True
    sentiment: SentimentEnum = SentimentEnum.NEUTRAL
    market_entities: List[str] = Field(default_factory=list)
    impact_score: Optional[int] = None
    generation_mode: Optional[GenerationMode] = None
    meta_description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


class RevenueEvaluation(BaseModel):
    score: int
    decision: RevenueDecision
    reasons: List[str] = Field(default_factory=list)
