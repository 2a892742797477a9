"""
Targeted news scraper.

Fetches the latest items for a query from the Google News RSS search and
fuses them into a text briefing that the Author agent (or the sanitizer)
uses as source material.
"""

import html
import logging
import re
from typing import List, Optional
from urllib.parse import quote_plus

import feedparser
import httpx

from newsdesk.config import Settings, settings as default_settings


logger = logging.getLogger(__name__)

GOOGLE_NEWS_RSS = "https://news.google.com/rss/search?q={query}&hl=en-US&gl=US&ceid=US:en"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
NO_EVENTS_SENTINEL = "No direct news events found for this specific query in the last 24 hours."
MAX_ITEMS = 5

_TAG_RE = re.compile(r"<[^>]*>?")
_URL_RE = re.compile(r"https?://\S+")


class ScrapeError(Exception):
    """Raised when the news source cannot be fetched."""
    pass


def is_empty_briefing(briefing: Optional[str]) -> bool:
    """True for the 'no events found' sentinel (or nothing at all)."""
    return not briefing or "no direct news events found" in briefing.lower()


def first_source_url(briefing: Optional[str]) -> Optional[str]:
    match = _URL_RE.search(briefing or "")
    return match.group(0) if match else None


def clean_html(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text or "")).strip()


class NewsScraper:
    """Scrape collaborator: query in, briefing string out."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or default_settings
        self.http_client = http_client

    def build_briefing(self, query: str, feed_text: str) -> str:
        feed = feedparser.parse(feed_text)
        items: List[str] = []
        for entry in feed.entries[:MAX_ITEMS]:
            title = clean_html(getattr(entry, "title", ""))
            if not title:
                continue
            context = clean_html(getattr(entry, "summary", ""))
            item = f"Title: {title}\nContext: {context}"
            link = getattr(entry, "link", "")
            if link:
                item += f"\nLink: {link}"
            items.append(item)

        if not items:
            return NO_EVENTS_SENTINEL

        header = f'TARGETED NEWS BRIEFING FOR "{query}" (Last 24 Hours):\n\n'
        return header + "\n\n---\n\n".join(items)

    async def scrape_targeted_news(self, query: str) -> str:
        """
        Fetch a briefing for a query.

        Returns:
            Multi-item briefing, or NO_EVENTS_SENTINEL when nothing was found

        Raises:
            ScrapeError: If the feed cannot be fetched
        """
        logger.info("Targeted scan for %r", query)
        url = GOOGLE_NEWS_RSS.format(query=quote_plus(f"{query} when:24h"))

        client = self.http_client or httpx.AsyncClient()
        try:
            response = await client.get(
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=self.config.SCRAPE_TIMEOUT,
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ScrapeError(f"Google News RSS fetch failed for {query!r}: {str(e)}")
        finally:
            if self.http_client is None:
                await client.aclose()

        briefing = self.build_briefing(query, response.text)
        if briefing == NO_EVENTS_SENTINEL:
            logger.info("No events found for %r", query)
        return briefing
