"""Vendor repository — queries specific to transport vendor rows."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, update

from transport_vendors.domain.vendor import Vendor
from transport_vendors.repositories.base import BaseRepository


class VendorRepository(BaseRepository[Vendor]):
    model = Vendor

    async def find_by_identity(
        self, name: str, transport_name: str, *, exclude_id: int | None = None
    ) -> Vendor | None:
        """Case-insensitive lookup on the (name, transport_name) pair."""
        q = self._base_query().where(
            func.lower(Vendor.name) == func.lower(name),
            func.lower(Vendor.transport_name) == func.lower(transport_name),
        )
        if exclude_id is not None:
            q = q.where(Vendor.id != exclude_id)
        result = await self._session.execute(q.limit(1))
        return result.scalars().first()

    async def exists(self, vendor_id: int) -> bool:
        result = await self._session.execute(
            self._base_query().with_only_columns(Vendor.id).where(Vendor.id == vendor_id)
        )
        return result.first() is not None

    async def touch(self, vendor_id: int) -> None:
        """Bump updated_at without loading the row."""
        await self._session.execute(
            update(Vendor)
            .where(Vendor.id == vendor_id)
            .values(updated_at=datetime.now(timezone.utc))
        )
