"""create score_entry leaderboard table

Revision ID: 3c7a9e21b4d0
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c7a9e21b4d0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'score_entry' in set(insp.get_table_names()):
        return
    op.create_table(
        'score_entry',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('difficulty', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_score_entry_difficulty', 'score_entry', ['difficulty'])


def downgrade():
    op.drop_index('ix_score_entry_difficulty', table_name='score_entry')
    op.drop_table('score_entry')
