"""create news_articles table

Revision ID: e41f7a9c2b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

- Creates news_articles with status/sentiment enums
- Unique slug; title index backs the duplicate-headline lookup
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, JSONB


# revision identifiers, used by Alembic.
revision: str = 'e41f7a9c2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


news_status = sa.Enum('draft', 'pending_approval', 'published', name='news_status')
news_sentiment = sa.Enum('Bullish', 'Bearish', 'Neutral', name='news_sentiment')


def upgrade() -> None:
    """Create the news article store."""

    op.create_table(
        'news_articles',
        sa.Column('id', UUID(), nullable=False, server_default=sa.text('gen_random_uuid()')),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('cover_image', sa.Text(), nullable=True),
        sa.Column('category', sa.String(50), nullable=False, server_default='World'),
        sa.Column('country', sa.String(50), nullable=False, server_default='Global'),
        sa.Column('tags', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('source_url', sa.Text(), nullable=True),
        sa.Column('status', news_status, nullable=False, server_default='draft'),
        sa.Column('author_id', sa.String(100), nullable=False),
        sa.Column('is_trending', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('generation_mode', sa.String(30), nullable=True),
        sa.Column('sentiment', news_sentiment, nullable=False, server_default='Neutral'),
        sa.Column('market_entities', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('impact_score', sa.Integer(), nullable=True),
        sa.Column('meta_description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug', name='uq_news_articles_slug'),
    )

    op.create_index('ix_news_articles_title', 'news_articles', ['title'])
    op.create_index('ix_news_articles_status', 'news_articles', ['status'])
    op.create_index('ix_news_articles_created_at', 'news_articles', ['created_at'])
    op.create_index('ix_news_articles_expires_at', 'news_articles', ['expires_at'])


def downgrade() -> None:
    """Drop the news article store."""

    op.drop_index('ix_news_articles_expires_at', table_name='news_articles')
    op.drop_index('ix_news_articles_created_at', table_name='news_articles')
    op.drop_index('ix_news_articles_status', table_name='news_articles')
    op.drop_index('ix_news_articles_title', table_name='news_articles')
    op.drop_table('news_articles')
    news_sentiment.drop(op.get_bind(), checkfirst=True)
    news_status.drop(op.get_bind(), checkfirst=True)
