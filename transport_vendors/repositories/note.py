"""Vendor note repository — inserts and ordered reads of the comment log."""

from __future__ import annotations

from sqlalchemy import select

from transport_vendors.domain.note import VendorNote
from transport_vendors.repositories.base import BaseRepository


class VendorNoteRepository(BaseRepository[VendorNote]):
    model = VendorNote

    async def list_for_vendor(self, vendor_id: int) -> list[VendorNote]:
        result = await self._session.execute(
            select(VendorNote)
            .where(VendorNote.vendor_id == vendor_id)
            .order_by(VendorNote.id.asc())
        )
        return list(result.scalars().all())
