"""
Deterministic sanitizer: the zero-external-call fallback path.

Reformats scraped source material into a structured report with fixed
string transformations and derives a generic editorial strategy from the
topic. Every function here is total on string input.
"""

import re
from typing import Optional

from newsdesk.schemas import Draft, EditorialStrategy, HeadlineVariants, SentimentEnum


STRATEGY_CATEGORIES = ["Finance", "Tech", "Politics", "Business", "World", "Culture", "Science", "Health"]

DEFAULT_HEADLINE = "Global News Update"
EMPTY_SOURCE_BODY = "No direct source material available for this briefing."

_BRIEFING_HEADER = re.compile(r"TARGETED NEWS BRIEFING FOR.*?\n\n", re.DOTALL)
_LINK_LINE = re.compile(r"^Link: (\S+)\s*$", re.MULTILINE)


def headline_from_topic(topic: Optional[str]) -> str:
    headline = (topic or "").replace("Latest insights regarding ", "").replace(" news in ", ": ")
    headline = " ".join(headline.split())
    return headline or DEFAULT_HEADLINE


def sanitize_source_material(source_material: Optional[str]) -> str:
    """Turn a scraper briefing into markdown."""
    if not source_material or not source_material.strip():
        return EMPTY_SOURCE_BODY

    body = _BRIEFING_HEADER.sub("", source_material, count=1)
    body = body.replace("Title: ", "### ")
    body = body.replace("Context: ", "\n\n")
    body = _LINK_LINE.sub(r"[Read the source](\1)", body)
    body = body.replace("---", "\n\n")
    body = re.sub(r"\n{3,}", "\n\n", body).strip()
    return body or EMPTY_SOURCE_BODY


def deterministic_draft(topic: str, region: Optional[str], source_material: Optional[str] = None) -> Draft:
    """Build a report from the source material without calling any provider."""
    headline = headline_from_topic(topic)
    region = region or "Global"
    body = sanitize_source_material(source_material)

    return Draft(
        print_headline=headline,
        digital_headline=f"Intelligence Report: {headline}",
        subheadline=f"Verified updates spanning {region} and surrounding markets.",
        executive_summary=(
            f"Autonomous intelligence gathering has identified key movements regarding {headline}. "
            "This synthesized report provides raw factual anchors retrieved from verified global sources."
        ),
        body_markdown=(
            f"## Intelligence Briefing\n\n{body}\n\n---\n\n"
            "*This report was synthesized using the Terai Times Deterministic Sanitizer protocol.*"
        ),
        suggested_tier="Standard",
    )


def detect_category(topic: Optional[str]) -> str:
    lowered = (topic or "").lower()
    for category in STRATEGY_CATEGORIES:
        if category.lower() in lowered:
            return category
    return "World"


def deterministic_strategy(title: Optional[str], topic: Optional[str]) -> EditorialStrategy:
    """Keyword-matched strategy used on the sanitizer path and when the legacy Editor fails."""
    title = title or headline_from_topic(topic)
    return EditorialStrategy(
        editorial_summary=f"Automated summary of movements regarding {title}.",
        operational_tags=[detect_category(topic), "Automated", "Intelligence", "Global"],
        internal_linking=[],
        headline_variants=HeadlineVariants(print=title, digital=f"Deep Dive: {title}"),
        meta_description=f"Latest intelligence and verified movements regarding {title}. Reported by Terai Times.",
        sentiment=SentimentEnum.NEUTRAL,
        market_entities=[],
        impact_score=50,
    )


def generic_strategy(title: Optional[str]) -> EditorialStrategy:
    """Substitute for a failed Editor on the multi-agent path."""
    title = title or DEFAULT_HEADLINE
    return EditorialStrategy(
        editorial_summary=f"Autonomous intelligence metadata for: {title}",
        operational_tags=["Global", "Intelligence", "Automated"],
        internal_linking=[],
        headline_variants=HeadlineVariants(print=title, digital=f"Intel: {title}"),
        meta_description=f"Latest global movements regarding {title}.",
        sentiment=SentimentEnum.NEUTRAL,
        market_entities=[],
        impact_score=50,
    )
