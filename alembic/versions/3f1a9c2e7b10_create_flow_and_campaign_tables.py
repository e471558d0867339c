"""create flow and campaign tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-19 10:12:41.503218

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1a9c2e7b10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "flows",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_flows_status", "flows", ["status"])
    op.create_index("idx_flows_created_at", "flows", ["created_at"])

    op.create_table(
        "flow_nodes",
        sa.Column("flow_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("id", sa.String(length=100), primary_key=True, nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("position_x", sa.Float(), nullable=False, server_default="0"),
        sa.Column("position_y", sa.Float(), nullable=False, server_default="0"),
        sa.Column("position_index", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["flow_id"], ["flows.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "flow_edges",
        sa.Column("flow_id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("id", sa.String(length=100), primary_key=True, nullable=False),
        sa.Column("source", sa.String(length=100), nullable=False),
        sa.Column("target", sa.String(length=100), nullable=False),
        sa.Column("source_handle", sa.String(length=100), nullable=True),
        sa.Column("position_index", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["flow_id"], ["flows.id"], ondelete="CASCADE"),
    )

    op.create_table(
        "message_templates",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=512), nullable=False, unique=True),
        sa.Column("language", sa.String(length=20), nullable=False, server_default="pt_BR"),
        sa.Column(
            "parameter_format", sa.String(length=20), nullable=False, server_default="positional"
        ),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="APPROVED"),
        sa.Column("components", sa.JSON(), nullable=False),
        sa.Column("spec_hash", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "campaigns",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("template_name", sa.String(length=512), nullable=False),
        sa.Column("template_snapshot", sa.JSON(), nullable=True),
        sa.Column("template_variables", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("recipients", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("sent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("skipped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_campaigns_status", "campaigns", ["status"])
    op.create_index("idx_campaigns_created_at", "campaigns", ["created_at"])

    op.create_table(
        "campaign_contacts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("campaign_id", sa.String(length=36), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("contact_id", sa.String(length=36), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("message_id", sa.String(length=128), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("skip_code", sa.String(length=64), nullable=True),
        sa.Column("skip_reason", sa.Text(), nullable=True),
        sa.Column("sending_at", sa.DateTime(), nullable=True),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("failed_at", sa.DateTime(), nullable=True),
        sa.Column("skipped_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["campaign_id"], ["campaigns.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("campaign_id", "phone", name="uq_campaign_contacts_campaign_phone"),
    )
    op.create_index(
        "idx_campaign_contacts_campaign_status", "campaign_contacts", ["campaign_id", "status"]
    )
    op.create_index("idx_campaign_contacts_campaign_seq", "campaign_contacts", ["campaign_id", "seq"])


def downgrade() -> None:
    op.drop_index("idx_campaign_contacts_campaign_seq", table_name="campaign_contacts")
    op.drop_index("idx_campaign_contacts_campaign_status", table_name="campaign_contacts")
    op.drop_table("campaign_contacts")
    op.drop_index("idx_campaigns_created_at", table_name="campaigns")
    op.drop_index("idx_campaigns_status", table_name="campaigns")
    op.drop_table("campaigns")
    op.drop_table("message_templates")
    op.drop_table("flow_edges")
    op.drop_table("flow_nodes")
    op.drop_index("idx_flows_created_at", table_name="flows")
    op.drop_index("idx_flows_status", table_name="flows")
    op.drop_table("flows")
