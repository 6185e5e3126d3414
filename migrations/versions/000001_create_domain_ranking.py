"""create domain_ranking table

Revision ID: 000001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "domain_ranking",
        sa.Column("global_rank", sa.BigInteger(), nullable=False),
        sa.Column("tld_rank", sa.BigInteger(), nullable=False),
        sa.Column("domain", sa.String(length=255), nullable=False),
        sa.Column("tld", sa.String(length=63), nullable=False),
        sa.Column("ref_subnets", sa.BigInteger(), nullable=False),
        sa.Column("ref_ips", sa.BigInteger(), nullable=False),
        sa.Column("idn_domain", sa.String(length=255), nullable=False),
        sa.Column("idn_tld", sa.String(length=63), nullable=False),
        sa.Column("prev_global_rank", sa.BigInteger(), nullable=False),
        sa.Column("prev_tld_rank", sa.BigInteger(), nullable=False),
        sa.Column("prev_ref_subnets", sa.BigInteger(), nullable=False),
        sa.Column("prev_ref_ips", sa.BigInteger(), nullable=False),
    )
    op.create_index("idx_domain_ranking_domain", "domain_ranking", ["domain"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_domain_ranking_domain", table_name="domain_ranking")
    op.drop_table("domain_ranking")
