"""Create the vendors table or bring a legacy one to the canonical layout.

Older databases were filled by a header-less spreadsheet import that named
columns field_0 … field_15 by position. Each legacy column is renamed to its
canonical name; when both exist, non-null legacy values fill the canonical
column's NULLs and the legacy column is dropped.

Revision ID: 0001_vendors_table
Revises:
Create Date: 2025-01-15 10:00:00
"""
from __future__ import annotations

import logging

from alembic import op
import sqlalchemy as sa

revision = "0001_vendors_table"
down_revision = None
branch_labels = None
depends_on = None

logger = logging.getLogger("alembic.runtime.migration")

TABLE = "vendors"

# Fixed positional mapping; never reorder or edit existing entries.
LEGACY_COLUMN_RULES: list[tuple[str, str]] = [
    ("field_0", "name"),
    ("field_1", "transport_name"),
    ("field_2", "visiting_card"),
    ("field_3", "owner_broker"),
    ("field_4", "vendor_state"),
    ("field_5", "vendor_city"),
    ("field_6", "whatsapp_number"),
    ("field_7", "alternate_number"),
    ("field_8", "vehicle_type"),
    ("field_9", "main_service_state"),
    ("field_10", "main_service_city"),
    ("field_11", "return_service"),
    ("field_12", "any_association"),
    ("field_13", "association_name"),
    ("field_14", "verification"),
    ("field_15", "notes"),  # moved into vendor_notes by 0002
]


def _vendor_columns(*, for_existing_table: bool = False) -> list[sa.Column]:
    """Canonical columns (without ``id``). Columns added to an existing table
    must accept the rows already there, so required text columns become
    nullable in that case."""
    required = not for_existing_table
    return [
        sa.Column("name", sa.String(255), nullable=not required),
        sa.Column("transport_name", sa.String(255), nullable=not required),
        sa.Column("visiting_card", sa.String(255), nullable=True),
        sa.Column("owner_broker", sa.String(255), nullable=True),
        sa.Column("vendor_state", sa.String(255), nullable=True),
        sa.Column("vendor_city", sa.String(255), nullable=True),
        sa.Column("whatsapp_number", sa.String(20), nullable=True),
        sa.Column("alternate_number", sa.String(20), nullable=True),
        sa.Column("vehicle_type", sa.String(255), nullable=True),
        sa.Column("main_service_state", sa.String(255), nullable=True),
        sa.Column("main_service_city", sa.String(255), nullable=True),
        sa.Column("return_service", sa.String(1), nullable=False, server_default="N"),
        sa.Column("any_association", sa.String(1), nullable=False, server_default="N"),
        sa.Column("association_name", sa.String(255), nullable=True),
        sa.Column("verification", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table(TABLE):
        op.create_table(
            TABLE,
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            *_vendor_columns(),
        )
        logger.info("Created table %s", TABLE)
        return

    existing = {col["name"] for col in inspector.get_columns(TABLE)}
    renames: list[tuple[str, str]] = []
    drops: list[str] = []

    for legacy, canonical in LEGACY_COLUMN_RULES:
        if legacy not in existing:
            continue
        if canonical not in existing:
            renames.append((legacy, canonical))
            continue
        vendors = sa.table(TABLE, sa.column(legacy), sa.column(canonical))
        op.execute(
            vendors.update()
            .where(vendors.c[canonical].is_(None))
            .where(vendors.c[legacy].is_not(None))
            .values({canonical: vendors.c[legacy]})
        )
        drops.append(legacy)

    present = existing | {canonical for _, canonical in renames}
    missing = [
        col for col in _vendor_columns(for_existing_table=True) if col.name not in present
    ]

    if not (renames or drops or missing):
        return

    with op.batch_alter_table(TABLE) as batch_op:
        for legacy, canonical in renames:
            batch_op.alter_column(legacy, new_column_name=canonical)
        for legacy in drops:
            batch_op.drop_column(legacy)
        for column in missing:
            batch_op.add_column(column)

    logger.info(
        "Migrated legacy %s layout: renamed %s, merged %s, added %s",
        TABLE,
        [f"{old}->{new}" for old, new in renames] or "none",
        drops or "none",
        [col.name for col in missing] or "none",
    )


def downgrade() -> None:
    op.drop_table(TABLE)
