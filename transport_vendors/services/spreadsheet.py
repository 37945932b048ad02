"""Spreadsheet / CSV handling for vendor imports.

Responsibilities:
  - Deciding whether an upload is an accepted format (.xlsx, .xls, .csv)
  - Reading the first sheet into a list of ``{header: cell text}`` rows (pandas)
  - Mapping the many historical header spellings onto vendor fields
  - Building the downloadable import template (openpyxl)
"""


import io
import logging
import re

import pandas as pd
from openpyxl.utils import get_column_letter

from transport_vendors.core.exceptions import InvalidFileError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Accepted formats
# ---------------------------------------------------------------------------

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MEDIA_TYPE = "application/vnd.ms-excel"

_ALLOWED_CONTENT_TYPES: dict[str, str] = {
    XLSX_MEDIA_TYPE: "xlsx",
    XLS_MEDIA_TYPE: "xls",
    "text/csv": "csv",
    "application/csv": "csv",
}
_ALLOWED_EXTENSIONS: dict[str, str] = {
    ".xlsx": "xlsx",
    ".xls": "xls",
    ".csv": "csv",
}


def detect_file_format(filename: str | None, content_type: str | None) -> str:
    """Return ``'xlsx'``, ``'xls'`` or ``'csv'``.

    The extension decides when it is recognised (browsers label CSV files as
    ``application/vnd.ms-excel`` on some platforms); otherwise the declared
    content type does. Raises :class:`InvalidFileError` when neither matches.
    """
    name = (filename or "").lower()
    for ext, fmt in _ALLOWED_EXTENSIONS.items():
        if name.endswith(ext):
            return fmt

    media_type = (content_type or "").split(";")[0].strip().lower()
    fmt = _ALLOWED_CONTENT_TYPES.get(media_type)
    if fmt is None:
        accepted = ", ".join(sorted(_ALLOWED_EXTENSIONS))
        raise InvalidFileError(
            f"Unsupported file type '{content_type}'. Accepted formats: {accepted}"
        )
    return fmt


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _read_frame(contents: bytes, fmt: str) -> pd.DataFrame:
    buffer = io.BytesIO(contents)
    if fmt == "csv":
        try:
            return pd.read_csv(
                buffer, dtype=str, keep_default_na=False, encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame()
    engine = "openpyxl" if fmt == "xlsx" else "xlrd"
    return pd.read_excel(
        buffer, sheet_name=0, dtype=str, keep_default_na=False, engine=engine,
    )


def read_rows(contents: bytes, fmt: str) -> list[dict[str, str]]:
    """Parse the first sheet into header → text rows, skipping blank rows."""
    try:
        frame = _read_frame(contents, fmt)
    except Exception as exc:
        logger.warning("Could not parse %s upload: %s", fmt, exc)
        raise InvalidFileError(f"Could not read the uploaded {fmt.upper()} file: {exc}") from exc

    rows: list[dict[str, str]] = []
    for record in frame.to_dict(orient="records"):
        row = {str(k): str(v).strip() for k, v in record.items() if v is not None}
        if any(row.values()):
            rows.append(row)
    return rows


# ---------------------------------------------------------------------------
# Header mapping
# ---------------------------------------------------------------------------

# Normalised header spellings seen in vendor sheets over time
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "vendor_name", "contact_name"),
    "transport_name": ("transport_name", "transport", "transporter_name", "company_name"),
    "visiting_card": ("visiting_card", "visiting_card_details", "business_card"),
    "owner_broker": ("owner_broker", "owner_or_broker", "owner", "broker"),
    "vendor_state": ("vendor_state", "state"),
    "vendor_city": ("vendor_city", "city"),
    "whatsapp_number": (
        "whatsapp_number", "whatsapp_no", "whatsapp", "whats_app_number", "whatsapp_mobile",
    ),
    "alternate_number": (
        "alternate_number", "alternate_no", "alternative_number", "alt_number", "alternate_mobile",
    ),
    "vehicle_type": ("vehicle_type", "vehicle_types", "vehicle"),
    "main_service_state": ("main_service_state", "service_state"),
    "main_service_city": ("main_service_city", "service_city"),
    "return_service": ("return_service",),
    "any_association": ("any_association", "association"),
    "association_name": ("association_name",),
    "verification": ("verification", "verification_status", "verified"),
    "notes": ("notes", "note", "comment", "comments", "remarks"),
}

_HEADER_LOOKUP: dict[str, str] = {
    alias: field for field, aliases in FIELD_ALIASES.items() for alias in aliases
}


def normalize_header(header: object) -> str:
    """'WhatsApp Number' / 'Owner/Broker ' → 'whatsapp_number' / 'owner_broker'."""
    return re.sub(r"[^a-z0-9]+", "_", str(header).strip().lower()).strip("_")


def map_row(row: dict[str, str]) -> dict[str, str]:
    """Map a parsed row onto vendor field names; unknown headers are dropped.

    When two headers resolve to the same field the first non-blank value wins.
    """
    mapped: dict[str, str] = {}
    for header, value in row.items():
        field = _HEADER_LOOKUP.get(normalize_header(header))
        if field and not mapped.get(field):
            mapped[field] = value
    return mapped


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------

TEMPLATE_COLUMNS: list[tuple[str, int]] = [
    ("Name", 15),
    ("Transport Name", 25),
    ("Visiting Card", 20),
    ("Owner/Broker", 15),
    ("Vendor State", 15),
    ("Vendor City", 15),
    ("WhatsApp Number", 18),
    ("Alternate Number", 18),
    ("Vehicle Type", 15),
    ("Main Service State", 20),
    ("Main Service City", 20),
    ("Return Service", 15),
    ("Any Association", 18),
    ("Association Name", 25),
    ("Verification", 15),
    ("Notes", 30),
]

SAMPLE_ROWS: list[list[str]] = [
    [
        "John Doe", "ABC Transport Services", "Visiting Card Details", "John Doe",
        "Tamil Nadu", "Chennai", "9876543210", "9876543211", "Truck",
        "Tamil Nadu", "Chennai", "Y", "Y", "Transport Association", "Verified",
        "Prefers weekly settlement",
    ],
    [
        "Jane Smith", "XYZ Logistics", "", "Jane Smith",
        "Karnataka", "Bangalore", "9876543220", "", "Container",
        "Karnataka", "Bangalore", "N", "N", "", "Pending",
        "",
    ],
    [
        "Raj Kumar", "Fast Track Transport", "Card Info", "Raj Kumar",
        "Maharashtra", "Mumbai", "9876543230", "9876543231", "Truck",
        "Maharashtra", "Mumbai", "Y", "Y", "Mumbai Transport Union", "Verified",
        "",
    ],
]


def build_import_template() -> bytes:
    """Return an .xlsx workbook with the expected headers and sample rows."""
    frame = pd.DataFrame(SAMPLE_ROWS, columns=[title for title, _ in TEMPLATE_COLUMNS])
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, index=False, sheet_name="Vendors")
        sheet = writer.sheets["Vendors"]
        for idx, (_, width) in enumerate(TEMPLATE_COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(idx)].width = width
    return buffer.getvalue()
