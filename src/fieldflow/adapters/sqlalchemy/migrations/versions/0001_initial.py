"""Initial schema: source configuration, staff enrichment and field lineage.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

ENUM_LENGTH = 32


def upgrade() -> None:
    op.create_table(
        "data_source",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_data_source"),
    )
    op.create_table(
        "tab_mapping",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("data_source_id", sa.String(), nullable=False),
        sa.Column("tab_name", sa.String(), nullable=False),
        sa.Column("primary_entity", sa.String(length=ENUM_LENGTH), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(
            ["data_source_id"],
            ["data_source.id"],
            name="fk_tab_mapping_data_source_id_data_source",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tab_mapping"),
    )
    op.create_index("ix_tab_mapping_data_source_id", "tab_mapping", ["data_source_id"])
    op.create_table(
        "column_mapping",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tab_mapping_id", sa.String(), nullable=False),
        sa.Column("source_column", sa.String(), nullable=False),
        sa.Column("authority", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("category", sa.String(length=ENUM_LENGTH), nullable=True),
        sa.Column("target_field", sa.String(), nullable=True),
        sa.Column("is_key", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["tab_mapping_id"],
            ["tab_mapping.id"],
            name="fk_column_mapping_tab_mapping_id_tab_mapping",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_column_mapping"),
    )
    op.create_index("ix_column_mapping_tab_mapping_id", "column_mapping", ["tab_mapping_id"])
    op.create_table(
        "staff",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("source_data", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_staff"),
    )
    op.create_table(
        "entity_external_id",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("external_metadata", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_entity_external_id"),
        sa.UniqueConstraint(
            "entity_type",
            "source",
            "external_id",
            name="uq_entity_external_id_entity_external_id_entity_type",
        ),
    )
    op.create_index(
        "ix_entity_external_id_source", "entity_external_id", ["entity_type", "source"]
    )
    op.create_table(
        "directory_snapshot",
        sa.Column("google_user_id", sa.String(), nullable=False),
        sa.Column("primary_email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("given_name", sa.String(), nullable=True),
        sa.Column("family_name", sa.String(), nullable=True),
        sa.Column("org_unit_path", sa.String(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("is_delegated_admin", sa.Boolean(), nullable=False),
        sa.Column("is_suspended", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("thumbnail_photo_url", sa.String(), nullable=True),
        sa.Column("aliases", sa.JSON(), nullable=False),
        sa.Column("non_editable_aliases", sa.JSON(), nullable=False),
        sa.Column("creation_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("cost_center", sa.String(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("manager_email", sa.String(), nullable=True),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("google_user_id", name="pk_directory_snapshot"),
    )
    op.create_table(
        "field_lineage",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("field_name", sa.String(), nullable=False),
        sa.Column("source_type", sa.String(length=ENUM_LENGTH), nullable=False),
        sa.Column("source_ref", sa.String(), nullable=False),
        sa.Column("previous_value", sa.String(), nullable=True),
        sa.Column("new_value", sa.String(), nullable=True),
        sa.Column("changed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sync_run_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_field_lineage"),
    )
    op.create_index(
        "ix_field_lineage_entity",
        "field_lineage",
        ["entity_type", "entity_id", "changed_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_field_lineage_entity", table_name="field_lineage")
    op.drop_table("field_lineage")
    op.drop_table("directory_snapshot")
    op.drop_index("ix_entity_external_id_source", table_name="entity_external_id")
    op.drop_table("entity_external_id")
    op.drop_table("staff")
    op.drop_index("ix_column_mapping_tab_mapping_id", table_name="column_mapping")
    op.drop_table("column_mapping")
    op.drop_index("ix_tab_mapping_data_source_id", table_name="tab_mapping")
    op.drop_table("tab_mapping")
    op.drop_table("data_source")
