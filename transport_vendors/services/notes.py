"""Vendor notes service — append-only, timestamped comments.

Appending is a plain INSERT into ``vendor_notes``, so two requests adding a
comment to the same vendor at the same moment both keep their entry.

:func:`normalize_legacy_notes` converts the shapes older databases stored in
the single ``vendors.notes`` column (plain text, JSON text, JSON arrays) into
an ordered list of ``{"comment", "timestamp"}`` dicts; the schema migration
uses it when moving those values into ``vendor_notes``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from transport_vendors.core.exceptions import NotFoundError, ValidationError
from transport_vendors.domain.note import VendorNote
from transport_vendors.repositories.note import VendorNoteRepository
from transport_vendors.repositories.vendor import VendorRepository

logger = logging.getLogger(__name__)

_COMMENT_KEYS = ("comment", "text", "note")


def _parse_timestamp(value: Any, fallback: datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return fallback
    return fallback


def normalize_legacy_notes(value: Any, fallback_timestamp: datetime | None = None) -> list[dict]:
    """Return *value* as an ordered list of ``{"comment": str, "timestamp": datetime}``.

    A bare string becomes a one-element list stamped with *fallback_timestamp*.
    Blank comments are dropped. ``None`` and empty strings give ``[]``.
    """
    fallback = fallback_timestamp or datetime.now(timezone.utc)

    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text[0] in "[{":
            try:
                parsed = json.loads(text)
            except ValueError:
                parsed = None
            if isinstance(parsed, (list, dict)):
                return normalize_legacy_notes(parsed, fallback)
        return [{"comment": text, "timestamp": fallback}]

    if isinstance(value, dict):
        comment = next(
            (str(value[k]).strip() for k in _COMMENT_KEYS if value.get(k) is not None), ""
        )
        if not comment:
            return []
        return [{"comment": comment, "timestamp": _parse_timestamp(value.get("timestamp"), fallback)}]

    if isinstance(value, (list, tuple)):
        notes: list[dict] = []
        for item in value:
            if isinstance(item, (list, tuple)):
                continue
            notes.extend(normalize_legacy_notes(item, fallback))
        return notes

    return normalize_legacy_notes(str(value), fallback)


class NoteService:
    def __init__(self, session: AsyncSession):
        self._vendors = VendorRepository(session)
        self._notes = VendorNoteRepository(session)

    async def _ensure_vendor(self, vendor_id: int) -> None:
        if not await self._vendors.exists(vendor_id):
            raise NotFoundError("Vendor", vendor_id)

    async def list_notes(self, vendor_id: int) -> list[VendorNote]:
        await self._ensure_vendor(vendor_id)
        return await self._notes.list_for_vendor(vendor_id)

    async def append_note(self, vendor_id: int, comment: str) -> list[VendorNote]:
        """Add *comment* to the end of the vendor's notes and return all notes."""
        comment = (comment or "").strip()
        if not comment:
            raise ValidationError("Comment is required")
        await self._ensure_vendor(vendor_id)

        await self._notes.create(vendor_id=vendor_id, comment=comment)
        await self._vendors.touch(vendor_id)
        logger.info("Added note to vendor %s", vendor_id)
        return await self._notes.list_for_vendor(vendor_id)
