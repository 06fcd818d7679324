"""cemetery allocation and burial request schema

Revision ID: 4b7e2c9a1d30
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4b7e2c9a1d30"
down_revision = None
branch_labels = None
depends_on = None


organization_type = sa.Enum("FUNERARIA", "CEMENTERIO", name="organization_type")
site_status = sa.Enum("ACTIVE", "INACTIVE", name="site_status")
space_status = sa.Enum("AVAILABLE", "RESERVED", "OCCUPIED", "LOCKED", name="space_status")
burial_request_status = sa.Enum("PENDING", "APPROVED", "REJECTED", "ASSIGNED", name="burial_request_status")


def _structure_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=30), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "organization",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False, unique=True),
        sa.Column("code", sa.String(length=30), nullable=False, unique=True),
        sa.Column("type", organization_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(length=120), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "membership",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user_account.id"), nullable=False),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organization.id"), nullable=False),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="admin"),
        sa.UniqueConstraint("user_id", "org_id", name="uq_membership_user_org"),
    )
    op.create_table(
        "cemetery_site",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organization_id",
            sa.Integer(),
            sa.ForeignKey("organization.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("code", sa.String(length=30), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("status", site_status, nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("organization_id", "code", name="uq_cemetery_site_org_code"),
    )
    op.create_table(
        "cemetery_area",
        *_structure_columns(),
        sa.Column(
            "site_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_site.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.UniqueConstraint("site_id", "code", name="uq_cemetery_area_site_code"),
    )
    op.create_table(
        "cemetery_sector",
        *_structure_columns(),
        sa.Column(
            "area_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_area.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.UniqueConstraint("area_id", "code", name="uq_cemetery_sector_area_code"),
    )
    op.create_table(
        "cemetery_subsector",
        *_structure_columns(),
        sa.Column(
            "sector_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_sector.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.UniqueConstraint("sector_id", "code", name="uq_cemetery_subsector_sector_code"),
    )
    op.create_table(
        "cemetery_plot_type",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(length=30), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("default_capacity_spaces", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "cemetery_plot",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "subsector_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_subsector.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("plot_type_id", sa.Integer(), sa.ForeignKey("cemetery_plot_type.id"), nullable=False),
        sa.Column("code", sa.String(length=30), nullable=False),
        sa.Column("row_label", sa.String(length=20), nullable=True),
        sa.Column("column_label", sa.String(length=20), nullable=True),
        sa.Column("capacity_spaces", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("subsector_id", "code", name="uq_cemetery_plot_subsector_code"),
        sa.CheckConstraint("capacity_spaces > 0", name="ck_cemetery_plot_capacity"),
    )
    op.create_table(
        "cemetery_space",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "plot_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_plot.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("status", space_status, nullable=False, server_default="AVAILABLE"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("plot_id", "position", name="uq_cemetery_space_plot_position"),
        sa.CheckConstraint("position > 0", name="ck_cemetery_space_position"),
    )
    op.create_table(
        "deceased_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organization.id"), nullable=False),
        sa.Column("site_id", sa.Integer(), sa.ForeignKey("cemetery_site.id"), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("identifier", sa.String(length=30), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("date_of_death", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("plot_id", sa.Integer(), sa.ForeignKey("cemetery_plot.id"), nullable=False),
        sa.Column(
            "space_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_space.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    with op.batch_alter_table("deceased_record", schema=None) as batch_op:
        batch_op.create_index("ix_deceased_record_org_site", ["organization_id", "site_id"])
        batch_op.create_index("ix_deceased_record_full_name", ["full_name"])
        batch_op.create_index("ix_deceased_record_identifier", ["identifier"])

    op.create_table(
        "burial_request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("funeral_org_id", sa.Integer(), sa.ForeignKey("organization.id"), nullable=False),
        sa.Column("cemetery_org_id", sa.Integer(), sa.ForeignKey("organization.id"), nullable=False),
        sa.Column("cemetery_site_id", sa.Integer(), sa.ForeignKey("cemetery_site.id"), nullable=False),
        sa.Column("deceased_full_name", sa.String(length=200), nullable=False),
        sa.Column("date_of_death", sa.Date(), nullable=False),
        sa.Column(
            "requested_plot_type_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_plot_type.id"),
            nullable=True,
        ),
        sa.Column("requested_date", sa.Date(), nullable=True),
        sa.Column("status", burial_request_status, nullable=False, server_default="PENDING"),
        sa.Column(
            "assigned_plot_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_plot.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "assigned_space_id",
            sa.Integer(),
            sa.ForeignKey("cemetery_space.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    with op.batch_alter_table("burial_request", schema=None) as batch_op:
        batch_op.create_index("ix_burial_request_cemetery_site", ["cemetery_org_id", "cemetery_site_id"])
        batch_op.create_index("ix_burial_request_funeral", ["funeral_org_id"])


def downgrade():
    with op.batch_alter_table("burial_request", schema=None) as batch_op:
        batch_op.drop_index("ix_burial_request_funeral")
        batch_op.drop_index("ix_burial_request_cemetery_site")
    op.drop_table("burial_request")

    with op.batch_alter_table("deceased_record", schema=None) as batch_op:
        batch_op.drop_index("ix_deceased_record_identifier")
        batch_op.drop_index("ix_deceased_record_full_name")
        batch_op.drop_index("ix_deceased_record_org_site")
    op.drop_table("deceased_record")

    op.drop_table("cemetery_space")
    op.drop_table("cemetery_plot")
    op.drop_table("cemetery_plot_type")
    op.drop_table("cemetery_subsector")
    op.drop_table("cemetery_sector")
    op.drop_table("cemetery_area")
    op.drop_table("cemetery_site")
    op.drop_table("membership")
    op.drop_table("user_account")
    op.drop_table("organization")

    bind = op.get_bind()
    for enum_type in (burial_request_status, space_status, site_status, organization_type):
        enum_type.drop(bind, checkfirst=True)
