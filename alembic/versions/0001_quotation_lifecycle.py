"""quotation / project / invoice lifecycle tables

Revision ID: 0001_quotation_lifecycle
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_quotation_lifecycle"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _jsonb_list(name: str) -> sa.Column:
    return sa.Column(name, postgresql.JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False)


def _money(name: str) -> sa.Column:
    return sa.Column(name, sa.Numeric(14, 2), server_default=sa.text("0"), nullable=False)


def _client_document_columns() -> list:
    return [
        sa.Column("client_name", sa.String(length=100), nullable=False),
        sa.Column("client_address", sa.String(length=500), nullable=False),
        sa.Column("client_number", sa.String(length=32), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        _jsonb_list("items"),
        _money("subtotal"),
        _money("discount"),
        _money("grand_total"),
        _jsonb_list("terms"),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("username", sa.String(length=128), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("display_name", sa.String(length=128), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "counters",
        sa.Column("name", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("value", sa.BigInteger(), server_default=sa.text("0"), nullable=False),
    )

    op.create_table(
        "quotations",
        sa.Column("quotation_number", sa.String(length=16), primary_key=True, nullable=False),
        *_client_document_columns(),
        _jsonb_list("site_images"),
        sa.Column("acceptance_state", sa.String(length=16), server_default=sa.text("'pending'"), nullable=False),
        _jsonb_list("history"),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.CheckConstraint(
            "acceptance_state IN ('pending', 'accepted', 'rejected')", name="ck_quotations_state"
        ),
        sa.CheckConstraint("grand_total >= 0", name="ck_quotations_grand_total"),
    )
    op.create_index("ix_quotations_state", "quotations", ["acceptance_state"])
    op.create_index("ix_quotations_created", "quotations", ["created_at"])

    op.create_table(
        "projects",
        sa.Column("project_id", sa.String(length=16), primary_key=True, nullable=False),
        sa.Column("quotation_number", sa.String(length=16), nullable=False),
        *_client_document_columns(),
        _jsonb_list("extra_work"),
        _jsonb_list("payment_history"),
        _jsonb_list("site_images"),
        _money("amount_due"),
        sa.Column("status", sa.String(length=16), server_default=sa.text("'ongoing'"), nullable=False),
        _jsonb_list("history"),
        sa.Column("created_by", sa.String(length=128), nullable=False),
        sa.UniqueConstraint("quotation_number", name="uq_projects_quotation_number"),
        sa.CheckConstraint("status IN ('ongoing', 'completed')", name="ck_projects_status"),
    )
    op.create_index("ix_projects_status", "projects", ["status"])
    op.create_index("ix_projects_created", "projects", ["created_at"])

    op.create_table(
        "invoices",
        sa.Column("invoice_id", sa.String(length=16), primary_key=True, nullable=False),
        sa.Column("project_id", sa.String(length=16), nullable=False),
        sa.Column("quotation_number", sa.String(length=16), nullable=False),
        *_client_document_columns(),
        _jsonb_list("extra_work"),
        _jsonb_list("payment_history"),
        _money("amount_due"),
        sa.Column("access_token", sa.String(length=64), nullable=False),
        sa.UniqueConstraint("project_id", name="uq_invoices_project_id"),
        sa.UniqueConstraint("access_token", name="uq_invoices_access_token"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("actor_id", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.String(length=32), nullable=False),
        sa.Column("request_id", sa.String(length=128), nullable=True),
        sa.Column("details_json", postgresql.JSONB, server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_audit_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_created_at", "audit_logs", ["created_at"])

    # audit rows are append-only
    op.execute(
        """
        CREATE OR REPLACE FUNCTION audit_logs_block_mutation() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'audit_logs is append-only';
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    op.execute(
        """
        CREATE TRIGGER audit_logs_no_update_delete
        BEFORE UPDATE OR DELETE ON audit_logs
        FOR EACH ROW EXECUTE FUNCTION audit_logs_block_mutation();
        """
    )


def downgrade():
    op.execute("DROP TRIGGER IF EXISTS audit_logs_no_update_delete ON audit_logs;")
    op.execute("DROP FUNCTION IF EXISTS audit_logs_block_mutation();")
    op.drop_index("ix_audit_created_at", table_name="audit_logs")
    op.drop_index("ix_audit_entity", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_table("invoices")
    op.drop_index("ix_projects_created", table_name="projects")
    op.drop_index("ix_projects_status", table_name="projects")
    op.drop_table("projects")
    op.drop_index("ix_quotations_created", table_name="quotations")
    op.drop_index("ix_quotations_state", table_name="quotations")
    op.drop_table("quotations")
    op.drop_table("counters")
    op.drop_table("users")
