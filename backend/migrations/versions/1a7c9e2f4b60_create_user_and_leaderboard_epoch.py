"""create user and leaderboard_epoch tables

Revision ID: 1a7c9e2f4b60
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a7c9e2f4b60'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = set(insp.get_table_names())
    if 'user' not in tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('display_name', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('game_types', sa.Text(), nullable=True),
            sa.Column('distinct_game_types', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_reward', sa.Float(), nullable=False, server_default='0'),
            sa.Column('rank', sa.Integer(), nullable=False, server_default='1'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)
    if 'leaderboard_epoch' not in tables:
        op.create_table(
            'leaderboard_epoch',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('end_time', sa.Float(), nullable=False),
        )


def downgrade():
    op.drop_table('leaderboard_epoch')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
