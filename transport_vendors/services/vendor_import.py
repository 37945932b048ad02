"""Bulk vendor import from an uploaded spreadsheet or CSV file.

Rows are processed one at a time and each successful row is committed on
its own, so a bad row never rolls back the rows before it and later rows see
earlier ones in the duplicate check. Row numbers in messages count the header
as row 1, so the first data row is row 2.
"""


import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from transport_vendors.core.config import settings
from transport_vendors.core.exceptions import InvalidFileError, ValidationError
from transport_vendors.domain.note import VendorNote
from transport_vendors.repositories.vendor import VendorRepository
from transport_vendors.schemas.vendor import (
    OPTIONAL_FIELDS,
    ImportRowError,
    ImportSummary,
    blank_to_none,
    normalize_flag,
)
from transport_vendors.services.spreadsheet import detect_file_format, map_row, read_rows

logger = logging.getLogger(__name__)

HEADER_ROWS = 1


class VendorImportService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = VendorRepository(session)

    def _validate_upload(
        self, filename: str | None, content_type: str | None, contents: bytes
    ) -> str:
        fmt = detect_file_format(filename, content_type)
        if not contents:
            raise InvalidFileError("Uploaded file is empty.")
        if len(contents) > settings.max_upload_size_bytes:
            raise InvalidFileError(
                f"File size exceeds the {settings.max_upload_size_mb}MB limit."
            )
        return fmt

    async def import_file(
        self, filename: str | None, content_type: str | None, contents: bytes
    ) -> ImportSummary:
        fmt = self._validate_upload(filename, content_type, contents)
        rows = await asyncio.to_thread(read_rows, contents, fmt)
        if not rows:
            raise ValidationError("The uploaded file is empty")

        ids: list[int] = []
        errors: list[ImportRowError] = []
        for index, raw in enumerate(rows):
            row_number = index + 1 + HEADER_ROWS
            message = await self._import_row(map_row(raw), ids)
            if message:
                errors.append(ImportRowError(row=row_number, message=f"Row {row_number}: {message}"))

        total, imported = len(rows), len(ids)
        if errors:
            summary = (
                f"Import completed: {imported} of {total} vendor(s) imported, "
                f"{len(errors)} error(s)"
            )
        else:
            summary = f"Successfully imported {imported} vendor(s)"
        logger.info("Vendor import from %s: %s", filename or "<upload>", summary)

        return ImportSummary(
            message=summary, total=total, imported=imported, ids=ids, errors=errors,
        )

    async def _import_row(self, fields: dict[str, str], ids: list[int]) -> str | None:
        """Insert one mapped row; return an error message instead of raising."""
        name = blank_to_none(fields.get("name"))
        transport_name = blank_to_none(fields.get("transport_name"))
        if not name or not transport_name:
            return "Name and Transport Name are required"

        existing = await self._repo.find_by_identity(name, transport_name)
        if existing is not None:
            return (
                f"Vendor '{name}' with transport '{transport_name}' already exists "
                f"(id {existing.id})"
            )

        values = {field: blank_to_none(fields.get(field)) for field in OPTIONAL_FIELDS}
        for flag in ("return_service", "any_association"):
            values[flag] = normalize_flag((fields.get(flag) or "").strip().upper())
        comment = blank_to_none(fields.get("notes"))
        notes = [VendorNote(comment=comment)] if comment else []

        try:
            vendor = await self._repo.create(
                name=name, transport_name=transport_name, notes=notes, **values
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            reason = str(getattr(exc, "orig", None) or exc.__class__.__name__)
            logger.warning("Import row for %s / %s failed: %s", name, transport_name, reason)
            return reason
        ids.append(vendor.id)
        return None
