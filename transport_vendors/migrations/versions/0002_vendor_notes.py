"""Move vendor notes into their own append-only table.

Earlier layouts kept notes in ``vendors.notes`` as free text or as JSON text
holding a list of ``{"comment", "timestamp"}`` objects. Every stored value is
normalised into one row per note; a bare text value becomes a single note
stamped with the vendor's updated_at (or created_at). The old column is then
dropped.

Revision ID: 0002_vendor_notes
Revises: 0001_vendors_table
Create Date: 2025-01-15 10:30:00
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from alembic import op
import sqlalchemy as sa

from transport_vendors.services.notes import normalize_legacy_notes

revision = "0002_vendor_notes"
down_revision = "0001_vendors_table"
branch_labels = None
depends_on = None

logger = logging.getLogger("alembic.runtime.migration")


def _legacy_notes(bind) -> list[dict]:
    vendors = sa.table(
        "vendors",
        sa.column("id", sa.Integer),
        sa.column("notes"),
        sa.column("created_at", sa.DateTime()),
        sa.column("updated_at", sa.DateTime()),
    )
    rows = bind.execute(
        sa.select(vendors.c.id, vendors.c.notes, vendors.c.created_at, vendors.c.updated_at)
        .where(vendors.c.notes.is_not(None))
        .order_by(vendors.c.id)
    ).all()

    note_rows: list[dict] = []
    for row in rows:
        fallback = row.updated_at or row.created_at or datetime.now(timezone.utc)
        for note in normalize_legacy_notes(row.notes, fallback):
            note_rows.append(
                {"vendor_id": row.id, "comment": note["comment"], "created_at": note["timestamp"]}
            )
    return note_rows


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    vendor_columns = {col["name"] for col in inspector.get_columns("vendors")}
    note_rows: list[dict] = []
    if "notes" in vendor_columns:
        note_rows = _legacy_notes(bind)
        # Drop before vendor_notes exists so SQLite's table rebuild cannot
        # cascade into it
        with op.batch_alter_table("vendors") as batch_op:
            batch_op.drop_column("notes")

    if not inspector.has_table("vendor_notes"):
        op.create_table(
            "vendor_notes",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column(
                "vendor_id",
                sa.Integer,
                sa.ForeignKey("vendors.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("comment", sa.Text, nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            ),
        )
        op.create_index("ix_vendor_notes_vendor_id", "vendor_notes", ["vendor_id"])

    if note_rows:
        notes_table = sa.table(
            "vendor_notes",
            sa.column("vendor_id", sa.Integer),
            sa.column("comment", sa.Text),
            sa.column("created_at", sa.DateTime(timezone=True)),
        )
        op.bulk_insert(notes_table, note_rows)
        logger.info("Moved %d legacy note(s) into vendor_notes", len(note_rows))


def downgrade() -> None:
    op.drop_index("ix_vendor_notes_vendor_id", table_name="vendor_notes")
    op.drop_table("vendor_notes")
    with op.batch_alter_table("vendors") as batch_op:
        batch_op.add_column(sa.Column("notes", sa.Text, nullable=True))
