"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - urls table: Short token / custom alias to long URL mappings
    - url_analytics table: One row per redirect, joined to urls by alias string
    """
    bind = op.get_bind()
    inspector = inspect(bind)
    existing_tables = inspector.get_table_names()

    if 'urls' not in existing_tables:
        op.create_table(
            'urls',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('long_url', sa.Text(), nullable=False),
            sa.Column('short_url', sa.String(length=50), nullable=False),
            sa.Column('custom_alias', sa.String(length=50), nullable=True),
            sa.Column('topic', sa.String(length=50), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )

        # Unique indexes enforce global uniqueness of tokens and custom aliases
        op.create_index('ix_urls_short_url', 'urls', ['short_url'], unique=True)
        op.create_index('ix_urls_custom_alias', 'urls', ['custom_alias'], unique=True)
        op.create_index('ix_urls_topic', 'urls', ['topic'])

    if 'url_analytics' not in existing_tables:
        # No foreign key: events keep their alias even if it matches no URL
        op.create_table(
            'url_analytics',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('alias', sa.String(length=50), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
            sa.Column('user_agent', sa.Text(), nullable=True),
            sa.Column('ip_address', sa.String(length=50), nullable=True),
            sa.Column('geolocation', sa.Text(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

        op.create_index('ix_url_analytics_alias', 'url_analytics', ['alias'])
        op.create_index('ix_url_analytics_timestamp', 'url_analytics', ['timestamp'])


def downgrade() -> None:
    """
    Drop all tables and indexes.
    """
    op.drop_index('ix_url_analytics_timestamp', table_name='url_analytics')
    op.drop_index('ix_url_analytics_alias', table_name='url_analytics')
    op.drop_table('url_analytics')

    op.drop_index('ix_urls_topic', table_name='urls')
    op.drop_index('ix_urls_custom_alias', table_name='urls')
    op.drop_index('ix_urls_short_url', table_name='urls')
    op.drop_table('urls')
