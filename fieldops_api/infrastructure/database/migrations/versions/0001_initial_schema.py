"""Initial fieldops schema.

This migration introduces:
- property table holding the pipeline state of every address
- document table for field evidence (bills, signatures, photos)
- extraction_session, extraction_run and extraction_run_item for batch
  customer data extraction against one shared portal session
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ============================================
    # PROPERTY
    # ============================================
    op.create_table(
        "property",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("address_full", sa.Text(), nullable=False),
        sa.Column("street_number", sa.Text(), nullable=True),
        sa.Column("street_name", sa.Text(), nullable=True),
        sa.Column("zip_code", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("state", sa.Text(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'PENDING_SCRAPE'")),
        sa.Column("customer_name", sa.Text(), nullable=True),
        sa.Column("customer_phone", sa.Text(), nullable=True),
        sa.Column("customer_email", sa.Text(), nullable=True),
        sa.Column("data_extracted", sa.Boolean(), nullable=False, server_default=sa.text("FALSE")),
        sa.Column("extracted_at", sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column("sce_case_id", sa.Text(), nullable=True),
        sa.Column("failure_reason", sa.Text(), nullable=True, comment="Why the property was failed, kept for audit"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("address_full", name="UQ_property_address_full"),
    )
    op.create_index("IDX_property_status_created_at", "property", ["status", "created_at"], unique=False)
    op.create_index("IDX_property_status_updated_at", "property", ["status", "updated_at"], unique=False)

    # ============================================
    # DOCUMENT
    # ============================================
    op.create_table(
        "document",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("property_id", sa.BigInteger(), nullable=False),
        sa.Column("doc_type", sa.Text(), nullable=False, comment="BILL, SIGNATURE, PHOTO or OTHER"),
        sa.Column("file_name", sa.Text(), nullable=False),
        sa.Column("file_path", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.ForeignKeyConstraint(["property_id"], ["property.id"], ondelete="CASCADE"),
    )
    op.create_index("IDX_document_property_id", "document", ["property_id"], unique=False)

    # ============================================
    # EXTRACTION SESSION / RUN / RUN ITEM
    # ============================================
    op.create_table(
        "extraction_session",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("encrypted_state", sa.Text(), nullable=False, comment="AES-GCM payload iv.tag.ciphertext"),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=False), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("TRUE")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
    )

    op.create_table(
        "extraction_run",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("session_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("total_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("processed_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("success_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("failure_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("error_summary", sa.Text(), nullable=True),
        sa.Column("started_at", sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column("finished_at", sa.TIMESTAMP(timezone=False), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.ForeignKeyConstraint(["session_id"], ["extraction_session.id"]),
    )
    op.create_index("IDX_extraction_run_status", "extraction_run", ["status"], unique=False)

    op.create_table(
        "extraction_run_item",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("run_id", sa.BigInteger(), nullable=False),
        sa.Column("property_id", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default=sa.text("'QUEUED'")),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=False), server_default=sa.text("NOW()"), nullable=False),
        sa.ForeignKeyConstraint(["run_id"], ["extraction_run.id"], ondelete="CASCADE"),
    )
    op.create_index("IDX_extraction_run_item_run_id_status", "extraction_run_item", ["run_id", "status"], unique=False)


def downgrade() -> None:
    op.drop_index("IDX_extraction_run_item_run_id_status", table_name="extraction_run_item")
    op.drop_table("extraction_run_item")

    op.drop_index("IDX_extraction_run_status", table_name="extraction_run")
    op.drop_table("extraction_run")
    op.drop_table("extraction_session")

    op.drop_index("IDX_document_property_id", table_name="document")
    op.drop_table("document")

    op.drop_index("IDX_property_status_updated_at", table_name="property")
    op.drop_index("IDX_property_status_created_at", table_name="property")
    op.drop_table("property")
