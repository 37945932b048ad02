"""Vendor service — CRUD over transport vendors with the uniqueness rule.

Rule: No FastAPI here. Routers call this service, this service calls the
repositories, the repositories call the DB.

The duplicate check and the following write are separate statements, so two
requests creating the same (name, transport_name) at the same instant can
both pass the check.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from transport_vendors.core.exceptions import DuplicateError, NotFoundError
from transport_vendors.domain.vendor import Vendor
from transport_vendors.repositories.vendor import VendorRepository
from transport_vendors.schemas.vendor import VendorCreate, VendorFields, VendorUpdate

logger = logging.getLogger(__name__)


def duplicate_error(existing: Vendor) -> DuplicateError:
    return DuplicateError(
        f"Vendor '{existing.name}' with transport '{existing.transport_name}' already exists",
        existing={
            "id": existing.id,
            "name": existing.name,
            "transport_name": existing.transport_name,
        },
    )


class VendorService:
    def __init__(self, session: AsyncSession):
        self._repo = VendorRepository(session)

    async def _check_unique(self, data: VendorFields, exclude_id: int | None = None) -> None:
        existing = await self._repo.find_by_identity(
            data.name, data.transport_name, exclude_id=exclude_id
        )
        if existing is not None:
            raise duplicate_error(existing)

    async def list_vendors(self) -> list[Vendor]:
        return await self._repo.list(order_by="created_at", order="desc")

    async def get_vendor(self, vendor_id: int) -> Vendor:
        vendor = await self._repo.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    async def create_vendor(self, data: VendorCreate) -> Vendor:
        await self._check_unique(data)
        vendor = await self._repo.create(**data.model_dump(), notes=[])
        logger.info("Created vendor %s (%s / %s)", vendor.id, vendor.name, vendor.transport_name)
        return vendor

    async def update_vendor(self, vendor_id: int, data: VendorUpdate) -> Vendor:
        vendor = await self.get_vendor(vendor_id)  # raises 404 if missing
        await self._check_unique(data, exclude_id=vendor_id)
        # model_dump() carries core fields only, so notes are left as they are
        return await self._repo.update(vendor, **data.model_dump())

    async def delete_vendor(self, vendor_id: int) -> None:
        deleted = await self._repo.delete(vendor_id)
        if not deleted:
            raise NotFoundError("Vendor", vendor_id)
        logger.info("Deleted vendor %s", vendor_id)
