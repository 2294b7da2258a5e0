"""initial tables: users, confirmed schedule, day comments

Revision ID: 0001
Revises: 
Create Date: 2026-01-12

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active_flag', sa.Boolean(), nullable=False, server_default=sa.text('1')),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('schedule',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('switch_date', sa.Date(), nullable=False),
        sa.Column('parent_after', sa.String(length=64), nullable=False),
    )
    op.create_index('ix_schedule_switch_date', 'schedule', ['switch_date'], unique=True)

    op.create_table('day_comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('author', sa.String(length=64), nullable=False),
    )
    op.create_index('ix_day_comments_date', 'day_comments', ['date'], unique=True)

def downgrade():
    op.drop_index('ix_day_comments_date', table_name='day_comments')
    op.drop_table('day_comments')
    op.drop_index('ix_schedule_switch_date', table_name='schedule')
    op.drop_table('schedule')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
