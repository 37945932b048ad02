"""Vendor router — CRUD, notes, spreadsheet import and the import template.

Pattern:
  1. Declare a router with prefix and tags
  2. Inject the DB session via Depends
  3. Instantiate the service with the session
  4. Call service methods and shape the response

Fixed paths (``/import``, ``/export-template``) are declared before
``/{vendor_id}`` so they are never read as an id.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, Path, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from transport_vendors.db.base import get_db
from transport_vendors.schemas.common import MessageResponse
from transport_vendors.schemas.vendor import (
    ImportSummary,
    NoteCreate,
    NoteOut,
    VendorCreate,
    VendorOut,
    VendorUpdate,
    VendorWriteResponse,
)
from transport_vendors.services.notes import NoteService
from transport_vendors.services.spreadsheet import XLSX_MEDIA_TYPE, build_import_template
from transport_vendors.services.vendor import VendorService
from transport_vendors.services.vendor_import import VendorImportService

router = APIRouter(prefix="/vendors", tags=["Vendors"])

TEMPLATE_FILENAME = "vendors_import_template.xlsx"

# Ids are 32-bit integers in the store; larger values are rejected as invalid input
MAX_VENDOR_ID = 2**31 - 1
VENDOR_ID = Path(..., ge=1, le=MAX_VENDOR_ID, description="Vendor id")


# ------------------------------------------------------------------
# Collection endpoints
# ------------------------------------------------------------------

@router.get("", response_model=list[VendorOut])
async def list_vendors(session: AsyncSession = Depends(get_db)):
    """List all vendors, newest first, each with its notes."""
    vendors = await VendorService(session).list_vendors()
    return [VendorOut.model_validate(v) for v in vendors]


@router.post("", response_model=VendorWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    body: VendorCreate,
    session: AsyncSession = Depends(get_db),
):
    """Create a new vendor. 409 when the name / transport name pair is taken."""
    vendor = await VendorService(session).create_vendor(body)
    return VendorWriteResponse(message="Vendor created successfully", id=vendor.id)


@router.get("/export-template")
async def export_template():
    """Download an .xlsx file with the import headers and sample rows."""
    content = await asyncio.to_thread(build_import_template)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.post("/import", response_model=ImportSummary)
async def import_vendors(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
):
    """Bulk-create vendors from an .xlsx, .xls or .csv upload (max 5MB by default)."""
    contents = await file.read()
    return await VendorImportService(session).import_file(
        file.filename, file.content_type, contents
    )


# ------------------------------------------------------------------
# Item endpoints
# ------------------------------------------------------------------

@router.get("/{vendor_id}", response_model=VendorOut)
async def get_vendor(
    vendor_id: int = VENDOR_ID,
    session: AsyncSession = Depends(get_db),
):
    vendor = await VendorService(session).get_vendor(vendor_id)
    return VendorOut.model_validate(vendor)


@router.put("/{vendor_id}", response_model=VendorWriteResponse)
async def update_vendor(
    *,
    vendor_id: int = VENDOR_ID,
    body: VendorUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Replace the core fields of a vendor. Notes are left untouched."""
    vendor = await VendorService(session).update_vendor(vendor_id, body)
    return VendorWriteResponse(message="Vendor updated successfully", id=vendor.id)


@router.delete("/{vendor_id}", response_model=MessageResponse)
async def delete_vendor(
    vendor_id: int = VENDOR_ID,
    session: AsyncSession = Depends(get_db),
):
    await VendorService(session).delete_vendor(vendor_id)
    return MessageResponse(message="Vendor deleted successfully")


# ------------------------------------------------------------------
# Notes
# ------------------------------------------------------------------

@router.get("/{vendor_id}/notes", response_model=list[NoteOut])
async def list_notes(
    vendor_id: int = VENDOR_ID,
    session: AsyncSession = Depends(get_db),
):
    notes = await NoteService(session).list_notes(vendor_id)
    return [NoteOut.model_validate(n) for n in notes]


@router.post("/{vendor_id}/notes", response_model=list[NoteOut])
async def append_note(
    *,
    vendor_id: int = VENDOR_ID,
    body: NoteCreate,
    session: AsyncSession = Depends(get_db),
):
    """Append a comment; returns the vendor's full notes list, oldest first."""
    notes = await NoteService(session).append_note(vendor_id, body.comment)
    return [NoteOut.model_validate(n) for n in notes]
