"""Scope components to their owner and add image_url

Revision ID: 0003_component_owner
Revises: 0002_users
Create Date: 2025-10-01

Existing rows get user_id = NULL.  Every API query filters on the caller's
id, so those rows stay unreachable until they are assigned an owner with
bin/claim_components.py.
"""

from alembic import op
import sqlalchemy as sa

revision = "0003_component_owner"
down_revision = "0002_users"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("components") as batch:
        batch.add_column(sa.Column("image_url", sa.String(512), nullable=True))
        batch.add_column(sa.Column("user_id", sa.Integer(), nullable=True))
        batch.create_foreign_key(
            "fk_components_user_id",
            "users",
            ["user_id"],
            ["id"],
            ondelete="CASCADE",
        )
        batch.create_index("ix_components_user_id", ["user_id"])


def downgrade() -> None:
    with op.batch_alter_table("components") as batch:
        batch.drop_index("ix_components_user_id")
        batch.drop_constraint("fk_components_user_id", type_="foreignkey")
        batch.drop_column("user_id")
        batch.drop_column("image_url")
