"""
Agent roles for the Newsdesk switchboard.

Each role is a single-purpose LLM call with its own ordered provider routes:
- AuthorAgent - Drafts the article from topic, region and scraped facts
- CriticAgent - Scores the draft and lists unsupported claims
- RefinerAgent - Rewrites the draft against the critic's feedback
- EditorAgent - Produces sentiment, entities, impact and SEO metadata
- ArtistAgent - Produces a cover image
- ResearcherAgent - Builds a context brief for editors
- LegacyWriterAgent - Single-provider writer used when the Author is unavailable
"""

from newsdesk.agents.artist import ArtistAgent
from newsdesk.agents.author import AuthorAgent
from newsdesk.agents.critic import CriticAgent
from newsdesk.agents.editor import EditorAgent
from newsdesk.agents.legacy_writer import LegacyWriterAgent
from newsdesk.agents.refiner import RefinerAgent
from newsdesk.agents.researcher import ResearcherAgent

__all__ = [
    "AuthorAgent",
    "CriticAgent",
    "RefinerAgent",
    "EditorAgent",
    "ArtistAgent",
    "ResearcherAgent",
    "LegacyWriterAgent",
]
