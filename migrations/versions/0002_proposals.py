"""proposals with normalized draft rows and comment log"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "proposals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner", sa.String(length=64), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_sent", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("last_updated_by", sa.String(length=64), nullable=True),
        sa.Column("jennifer_accepted", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("klas_accepted", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_proposals_is_active", "proposals", ["is_active"])

    op.create_table(
        "proposal_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("proposal_id", sa.Integer(), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("switch_date", sa.Date(), nullable=False),
        sa.Column("parent_after", sa.String(length=64), nullable=False),
    )
    op.create_index("ix_proposal_entries_proposal_position", "proposal_entries", ["proposal_id", "position"])

    op.create_table(
        "proposal_day_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("proposal_id", sa.Integer(), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("author", sa.String(length=64), nullable=False),
    )
    op.create_index("ix_proposal_day_comments_proposal_id", "proposal_day_comments", ["proposal_id"])

    op.create_table(
        "proposal_comments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("proposal_id", sa.Integer(), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("author", sa.String(length=64), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_proposal_comments_proposal_id", "proposal_comments", ["proposal_id"])

def downgrade():
    op.drop_table("proposal_comments")
    op.drop_table("proposal_day_comments")
    op.drop_table("proposal_entries")
    op.drop_index("ix_proposals_is_active", table_name="proposals")
    op.drop_table("proposals")
