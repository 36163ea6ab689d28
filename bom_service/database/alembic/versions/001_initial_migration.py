"""Initial migration

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""

from typing import List, Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _base_columns() -> List[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _user_fk(column: str) -> sa.Column:
    return sa.Column(
        column,
        sa.Integer(),
        sa.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )


def _company_table(table: str) -> None:
    op.create_table(
        table,
        *_base_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.Column("website_url", sa.String(length=512), nullable=True),
        sa.Column("logo_url", sa.String(length=512), nullable=True),
        sa.Column("contact_info", sa.JSON(), nullable=True),
        _user_fk("created_by"),
        _user_fk("updated_by"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )


def _custom_field_values_table(table: str, owner_column: str, owner: str) -> None:
    op.create_table(
        table,
        *_base_columns(),
        sa.Column(
            owner_column,
            sa.Integer(),
            sa.ForeignKey(f"{owner}.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "field_id",
            sa.Integer(),
            sa.ForeignKey("custom_fields.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value", sa.TEXT(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            owner_column, "field_id", name=f"uq_{owner_column[:-3]}_custom_field"
        ),
    )
    op.create_index(f"ix_{table}_{owner_column}", table, [owner_column])


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("username", sa.String(length=50), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=512), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("username"),
    )

    # Create sessions table
    op.create_table(
        "sessions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])

    # Create categories table
    op.create_table(
        "categories",
        *_base_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "parent_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True
        ),
        sa.Column("path", sa.String(length=1024), nullable=True),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        _user_fk("created_by"),
        _user_fk("updated_by"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        _user_fk("deleted_by"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_categories_parent_id", "categories", ["parent_id"])
    op.create_index("ix_categories_path", "categories", ["path"])

    root_where = sa.text("parent_id IS NULL AND is_deleted = false")
    child_where = sa.text("is_deleted = false")
    op.create_index(
        "uq_category_root_name",
        "categories",
        ["name"],
        unique=True,
        postgresql_where=root_where,
        sqlite_where=root_where,
    )
    op.create_index(
        "uq_category_parent_name",
        "categories",
        ["parent_id", "name"],
        unique=True,
        postgresql_where=child_where,
        sqlite_where=child_where,
    )

    # Create manufacturers and suppliers tables
    _company_table("manufacturers")
    _company_table("suppliers")

    # Create custom field tables
    op.create_table(
        "custom_fields",
        *_base_columns(),
        sa.Column("field_name", sa.String(length=255), nullable=False),
        sa.Column("data_type", sa.String(length=20), nullable=False),
        sa.Column("applies_to", sa.String(length=20), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "field_name", "applies_to", name="uq_custom_field_target"
        ),
    )
    _custom_field_values_table("category_custom_fields", "category_id", "categories")
    _custom_field_values_table(
        "manufacturer_custom_fields", "manufacturer_id", "manufacturers"
    )
    _custom_field_values_table("supplier_custom_fields", "supplier_id", "suppliers")

    # Create projects table
    op.create_table(
        "projects",
        *_base_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column(
            "owner_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("owner_id", "name", name="uq_project_owner_name"),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    # Create parts and part_versions tables
    op.create_table(
        "parts",
        *_base_columns(),
        sa.Column(
            "creator_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("global_part_number", sa.String(length=255), nullable=True),
        sa.Column("current_version_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("global_part_number"),
    )
    op.create_index("ix_parts_creator_id", "parts", ["creator_id"])

    op.create_table(
        "part_versions",
        *_base_columns(),
        sa.Column(
            "part_id",
            sa.Integer(),
            sa.ForeignKey("parts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("version", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("short_description", sa.String(length=512), nullable=True),
        sa.Column("full_description", sa.TEXT(), nullable=True),
        sa.Column("functional_description", sa.TEXT(), nullable=True),
        sa.Column("notes", sa.TEXT(), nullable=True),
        sa.Column("revision_notes", sa.TEXT(), nullable=True),
        sa.Column("lifecycle_status", sa.String(length=20), nullable=False),
        sa.Column("released_at", sa.DateTime(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("weight_unit", sa.String(length=10), nullable=True),
        sa.Column("tolerance", sa.Float(), nullable=True),
        sa.Column("tolerance_unit", sa.String(length=20), nullable=True),
        sa.Column("dimensions", sa.JSON(), nullable=True),
        sa.Column("dimensions_unit", sa.String(length=10), nullable=True),
        sa.Column("operating_temperature_min", sa.Float(), nullable=True),
        sa.Column("operating_temperature_max", sa.Float(), nullable=True),
        sa.Column("storage_temperature_min", sa.Float(), nullable=True),
        sa.Column("storage_temperature_max", sa.Float(), nullable=True),
        sa.Column("temperature_unit", sa.String(length=5), nullable=True),
        sa.Column("package_type", sa.String(length=20), nullable=True),
        sa.Column("package_case", sa.String(length=100), nullable=True),
        sa.Column("mounting_style", sa.String(length=20), nullable=True),
        sa.Column("termination_style", sa.String(length=100), nullable=True),
        sa.Column("technical_specifications", sa.JSON(), nullable=True),
        sa.Column("properties", sa.JSON(), nullable=True),
        sa.Column("electrical_properties", sa.JSON(), nullable=True),
        sa.Column("mechanical_properties", sa.JSON(), nullable=True),
        sa.Column("thermal_properties", sa.JSON(), nullable=True),
        sa.Column("material_composition", sa.JSON(), nullable=True),
        sa.Column("environmental_data", sa.JSON(), nullable=True),
        _user_fk("created_by"),
        _user_fk("updated_by"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("part_id", "version", name="uq_part_version"),
    )
    op.create_index("ix_part_versions_part_id", "part_versions", ["part_id"])
    op.create_foreign_key(
        "fk_parts_current_version_id",
        "parts",
        "part_versions",
        ["current_version_id"],
        ["id"],
        ondelete="SET NULL",
    )

    # Create part version link tables
    op.create_table(
        "part_version_categories",
        *_base_columns(),
        sa.Column(
            "part_version_id",
            sa.Integer(),
            sa.ForeignKey("part_versions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "part_version_id", "category_id", name="uq_part_version_category"
        ),
    )
    op.create_index(
        "ix_part_version_categories_part_version_id",
        "part_version_categories",
        ["part_version_id"],
    )
    op.create_index(
        "ix_part_version_categories_category_id",
        "part_version_categories",
        ["category_id"],
    )

    op.create_table(
        "manufacturer_parts",
        *_base_columns(),
        sa.Column(
            "part_version_id",
            sa.Integer(),
            sa.ForeignKey("part_versions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "manufacturer_id",
            sa.Integer(),
            sa.ForeignKey("manufacturers.id"),
            nullable=False,
        ),
        sa.Column("manufacturer_part_number", sa.String(length=255), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.Column("is_recommended", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "part_version_id",
            "manufacturer_id",
            "manufacturer_part_number",
            name="uq_manufacturer_part_number",
        ),
    )
    op.create_index(
        "ix_manufacturer_parts_part_version_id",
        "manufacturer_parts",
        ["part_version_id"],
    )
    op.create_index(
        "ix_manufacturer_parts_manufacturer_id",
        "manufacturer_parts",
        ["manufacturer_id"],
    )

    op.create_table(
        "supplier_parts",
        *_base_columns(),
        sa.Column(
            "part_version_id",
            sa.Integer(),
            sa.ForeignKey("part_versions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id"), nullable=False
        ),
        sa.Column("supplier_part_number", sa.String(length=255), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=True),
        sa.Column("stock_quantity", sa.Integer(), nullable=True),
        sa.Column("lead_time_days", sa.Integer(), nullable=True),
        sa.Column("is_preferred", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_supplier_parts_part_version_id", "supplier_parts", ["part_version_id"]
    )
    op.create_index("ix_supplier_parts_supplier_id", "supplier_parts", ["supplier_id"])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table("supplier_parts")
    op.drop_table("manufacturer_parts")
    op.drop_table("part_version_categories")
    op.drop_constraint("fk_parts_current_version_id", "parts", type_="foreignkey")
    op.drop_table("part_versions")
    op.drop_table("parts")
    op.drop_table("projects")
    op.drop_table("supplier_custom_fields")
    op.drop_table("manufacturer_custom_fields")
    op.drop_table("category_custom_fields")
    op.drop_table("custom_fields")
    op.drop_table("suppliers")
    op.drop_table("manufacturers")
    op.drop_index("uq_category_parent_name", table_name="categories")
    op.drop_index("uq_category_root_name", table_name="categories")
    op.drop_table("categories")
    op.drop_table("sessions")
    op.drop_table("users")
