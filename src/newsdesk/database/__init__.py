"""Database package for Newsdesk."""

from .models import (
    Base,
    NewsArticle,
)
from .repositories import (
    NewsArticleRepository,
    PersistenceFailure,
    SqlNewsStore,
)

__all__ = [
    "Base",
    "NewsArticle",
    "NewsArticleRepository",
    "PersistenceFailure",
    "SqlNewsStore",
]
