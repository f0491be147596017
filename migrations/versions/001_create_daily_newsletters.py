"""Create daily_newsletters

Revision ID: 001_daily_newsletters
Revises:
Create Date: 2025-06-01

One row per publish date. publish_date is the upsert conflict target.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_daily_newsletters'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'daily_newsletters',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('publish_date', sa.Date, nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('hook', sa.Text, nullable=False, server_default=''),
        sa.Column('sections', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('conclusion', sa.Text, nullable=False, server_default=''),
        sa.Column('sources', postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('audio_url', sa.String(1000), nullable=True),
        sa.Column('audio_duration_seconds', sa.Integer, nullable=True),
        sa.Column('generation_status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime, nullable=False, server_default=sa.text('now()')),
        sa.UniqueConstraint('publish_date', name='uq_daily_newsletters_publish_date'),
    )

    op.create_index('ix_daily_newsletters_publish_date_desc', 'daily_newsletters', [sa.text('publish_date DESC')])
    op.create_index('ix_daily_newsletters_status', 'daily_newsletters', ['generation_status'])
    op.create_index('ix_daily_newsletters_created_at', 'daily_newsletters', ['created_at'])

    print("Created daily_newsletters")


def downgrade() -> None:
    op.drop_index('ix_daily_newsletters_created_at', table_name='daily_newsletters')
    op.drop_index('ix_daily_newsletters_status', table_name='daily_newsletters')
    op.drop_index('ix_daily_newsletters_publish_date_desc', table_name='daily_newsletters')
    op.drop_table('daily_newsletters')
