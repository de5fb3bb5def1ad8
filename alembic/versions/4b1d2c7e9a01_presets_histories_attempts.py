"""presets, session histories and attempts

Revision ID: 4b1d2c7e9a01
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# define the enum type once so we can create/drop it explicitly
training_mode = sa.Enum('time', 'reps', name='training_mode')


# revision identifiers, used by Alembic.
revision: str = '4b1d2c7e9a01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1) presets
    op.create_table(
        'presets',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('mode', training_mode, nullable=False, server_default='time'),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('rest_time', sa.Integer(), nullable=False),
        sa.Column('adjustment', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )

    # 2) session_histories
    op.create_table(
        'session_histories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('preset_id', sa.Integer(), sa.ForeignKey('presets.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('date', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, index=True),
        sa.Column('total_accumulated', sa.Float(), nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('attempt_count', sa.Integer(), nullable=False),
        sa.Column('session_duration', sa.Integer(), nullable=False),
    )

    # 3) session_attempts
    op.create_table(
        'session_attempts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('history_id', sa.Integer(), sa.ForeignKey('session_histories.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('adjustment', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_counted', sa.Float(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )


def downgrade() -> None:
    # drop child tables in reverse order
    op.drop_table('session_attempts')
    op.drop_table('session_histories')
    op.drop_table('presets')

    # finally drop enum type (no-op on SQLite)
    training_mode.drop(op.get_bind(), checkfirst=True)
