"""
Quality gate ("revenue mode") for autonomous publishing.

evaluate() scores a candidate article and decides whether it may be
published automatically, routed to human review, or dropped. It is a pure
function: no I/O, no clock, no randomness, and it never raises.

Also holds the deterministic headline/body transforms and the slug builder
applied while assembling candidates.
"""

import random
import re
from typing import Any, List, Optional

from newsdesk.schemas import RevenueDecision, RevenueEvaluation


DEFAULT_MIN_SCORE = 62
REVIEW_BAND = 12

MAX_HEADLINE_CHARS = 86
MIN_HEADLINE_CHARS = 32
MIN_UNPREFIXED_HEADLINE_CHARS = 18
MIN_SUMMARY_CHARS = 90
MIN_BODY_CHARS = 700
MIN_TAGS = 3
MIN_IMPACT_SCORE = 60

LOW_QUALITY_PATTERNS = [
    re.compile(r"lorem ipsum", re.IGNORECASE),
    re.compile(r"click here", re.IGNORECASE),
    re.compile(r"no direct news events found", re.IGNORECASE),
    re.compile(r"untitled", re.IGNORECASE),
]

_SOURCE_URL_RE = re.compile(r"^https?://\S+")
_SLUG_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"


def normalize_whitespace(text: Any) -> str:
    if text is None:
        return ""
    return " ".join(str(text).split())


def _field(candidate: Any, name: str) -> Any:
    if isinstance(candidate, dict):
        return candidate.get(name)
    return getattr(candidate, name, None)


def _impact(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _tag_count(value: Any) -> int:
    if isinstance(value, (list, tuple, set)):
        return len(value)
    return 0


def evaluate(candidate: Any, min_score: int = DEFAULT_MIN_SCORE) -> RevenueEvaluation:
    """
    Score a candidate article.

    Scoring starts at 50; each independent check adds or subtracts a fixed
    delta and the total is clamped to [0, 100].

    Args:
        candidate: Candidate model or dict with title, summary, content,
            source_url, tags and impact_score
        min_score: Auto-publish threshold

    Returns:
        RevenueEvaluation with score, decision and the reasons collected
    """
    score = 50
    reasons: List[str] = []

    title = normalize_whitespace(_field(candidate, "title"))
    summary = normalize_whitespace(_field(candidate, "summary"))
    content = normalize_whitespace(_field(candidate, "content"))
    source_url = normalize_whitespace(_field(candidate, "source_url"))

    if MIN_HEADLINE_CHARS <= len(title) <= MAX_HEADLINE_CHARS:
        score += 12
    else:
        score -= 10
        reasons.append(
            f"Headline length not in optimal range ({MIN_HEADLINE_CHARS}-{MAX_HEADLINE_CHARS} chars)."
        )

    if len(summary) >= MIN_SUMMARY_CHARS:
        score += 10
    else:
        score -= 8
        reasons.append("Summary is too short for commercial-quality context.")

    if len(content) >= MIN_BODY_CHARS:
        score += 16
    else:
        score -= 14
        reasons.append("Body is too short for high-value retention.")

    if _SOURCE_URL_RE.match(source_url):
        score += 8
    else:
        score -= 10
        reasons.append("Missing verifiable source URL.")

    if _tag_count(_field(candidate, "tags")) >= MIN_TAGS:
        score += 6
    else:
        reasons.append("Insufficient topical tags for discovery/SEO.")

    impact = _impact(_field(candidate, "impact_score"))
    if impact is not None:
        if impact >= MIN_IMPACT_SCORE:
            score += 6
        else:
            score -= 4
            reasons.append("Declared impact score below threshold.")

    haystack = f"{title} {summary} {content}"
    for pattern in LOW_QUALITY_PATTERNS:
        if pattern.search(haystack):
            score -= 18
            reasons.append(f"Low-quality signal detected: {pattern.pattern}")

    score = max(0, min(100, score))

    if score >= min_score:
        return RevenueEvaluation(score=score, decision=RevenueDecision.PUBLISH, reasons=reasons)
    if score >= min_score - REVIEW_BAND:
        reasons.append("borderline, routed to review")
        return RevenueEvaluation(score=score, decision=RevenueDecision.PENDING_APPROVAL, reasons=reasons)
    reasons.append("quality too low")
    return RevenueEvaluation(score=score, decision=RevenueDecision.SKIP, reasons=reasons)


def optimize_headline(title: Optional[str], category: Optional[str] = None, country: Optional[str] = None) -> str:
    """
    Make a headline fit for listing pages.

    Short headlines get a "{category} • {country}" prefix; anything longer
    than 86 characters is cut with an ellipsis.
    """
    clean = normalize_whitespace(title) or "Global News Update"
    prefix = " • ".join(part for part in (category, country) if part)

    if len(clean) >= MIN_UNPREFIXED_HEADLINE_CHARS or not prefix:
        candidate = clean
    else:
        candidate = f"{prefix}: {clean}"

    if len(candidate) <= MAX_HEADLINE_CHARS:
        return candidate
    return f"{candidate[:MAX_HEADLINE_CHARS - 3].strip()}..."


def format_for_commercial_readability(content: Optional[str], summary: Optional[str] = None) -> str:
    """Wrap the article body in the house report layout (HTML)."""
    clean_summary = normalize_whitespace(summary)
    clean_body = normalize_whitespace(content)

    lead = clean_summary or clean_body[:220]
    body = clean_body or "Verified details are being compiled by the newsroom."

    return (
        f"<p><strong>Executive Brief:</strong> {lead}</p>\n"
        "<h2>Why This Matters</h2>\n"
        f"<p>{body}</p>\n"
        "<h2>What To Watch Next</h2>\n"
        "<p>Our editorial desk is monitoring verified updates and will refresh "
        "this report as new facts are confirmed.</p>"
    )


def generate_slug(title: Optional[str], rng: Optional[random.Random] = None) -> str:
    """URL-friendly slug with a random 5-character suffix."""
    rng = rng or random.Random()
    safe_title = (title or "untitled-news").lower()
    slug = re.sub(r"[^\w\s-]", "", safe_title)
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug).strip("-") or "news"
    suffix = "".join(rng.choice(_SLUG_ALPHABET) for _ in range(5))
    return f"{slug}-{suffix}"
