"""create_progress_bars

Revision ID: 0001
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'progress_bars',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('current_value', sa.Float, nullable=False, server_default='0'),
        sa.Column('target_value', sa.Float, nullable=False, server_default='0'),
        sa.Column('bar_type', sa.String(20), nullable=False, server_default='manual'),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('target_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('time_based_type', sa.String(20), nullable=True),
        sa.Column('is_completed', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_overdue', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Filtro por tipo e varredura por janela de datas
    op.create_index('ix_progress_bars_bar_type', 'progress_bars', ['bar_type'])
    op.create_index('idx_progress_bars_dates', 'progress_bars', ['start_date', 'target_date'])


def downgrade():
    op.drop_index('idx_progress_bars_dates', table_name='progress_bars')
    op.drop_index('ix_progress_bars_bar_type', table_name='progress_bars')
    op.drop_table('progress_bars')
