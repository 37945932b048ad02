from __future__ import annotations

import io
from pathlib import Path

import pandas as pd
from sqlalchemy.exc import OperationalError

from conftest import xlsx_upload
from transport_vendors.core.config import settings
from transport_vendors.repositories.vendor import VendorRepository
from transport_vendors.services.spreadsheet import XLS_MEDIA_TYPE

COLUMNS = ["Name", "Transport Name", "WhatsApp Number", "Return Service", "Notes"]


def _row(name, transport, phone="", flag="", notes=""):
    return {
        "Name": name,
        "Transport Name": transport,
        "WhatsApp Number": phone,
        "Return Service": flag,
        "Notes": notes,
    }


def test_valid_rows_import_and_missing_name_is_reported(client):
    rows = [
        _row("John Doe", "ABC Transport", "9876543210", "Y"),
        _row("Jane Smith", "XYZ Logistics"),
        _row("Raj Kumar", "Fast Track Transport"),
        _row("", "Nameless Movers", "9876543299"),
    ]

    response = client.post("/api/vendors/import", files=xlsx_upload(rows, COLUMNS))

    assert response.status_code == 200
    summary = response.json()
    assert summary["total"] == 4
    assert summary["imported"] == 3
    assert len(summary["ids"]) == 3
    assert summary["errors"] == [
        {"row": 5, "message": "Row 5: Name and Transport Name are required"}
    ]
    assert len(client.get("/api/vendors").json()) == 3


def test_row_duplicating_persisted_vendor_is_skipped(client, create_vendor):
    existing_id = create_vendor(name="John Doe", transport_name="ABC Transport")
    rows = [_row("john doe", "ABC TRANSPORT"), _row("Jane Smith", "XYZ Logistics")]

    summary = client.post("/api/vendors/import", files=xlsx_upload(rows, COLUMNS)).json()

    assert summary["imported"] == 1
    [error] = summary["errors"]
    assert error["row"] == 2
    assert "already exists" in error["message"]
    assert f"id {existing_id}" in error["message"]
    assert len(client.get("/api/vendors").json()) == 2


def test_duplicate_within_the_same_file_is_skipped(client):
    rows = [_row("John Doe", "ABC Transport"), _row("JOHN DOE", "abc transport")]

    summary = client.post("/api/vendors/import", files=xlsx_upload(rows, COLUMNS)).json()

    assert summary["imported"] == 1
    assert [e["row"] for e in summary["errors"]] == [3]


def test_flags_and_notes_are_normalized(client):
    rows = [
        _row("A", "One", flag="y", notes="met at depot"),
        _row("B", "Two", flag="maybe"),
    ]

    summary = client.post("/api/vendors/import", files=xlsx_upload(rows, COLUMNS)).json()
    first_id, second_id = summary["ids"]

    first = client.get(f"/api/vendors/{first_id}").json()
    second = client.get(f"/api/vendors/{second_id}").json()
    assert first["return_service"] == "Y"
    assert first["any_association"] == "N"
    assert [n["comment"] for n in first["notes"]] == ["met at depot"]
    assert first["notes"][0]["timestamp"]
    assert second["return_service"] == "N"
    assert second["notes"] == []


def test_csv_with_alternate_header_spellings(client):
    csv_text = (
        "name,transport_name,Whatsapp Number,Owner/Broker,comments\n"
        "John Doe,ABC Transport,9876543210,Broker Bob,prefers calls\n"
    )
    files = {"file": ("vendors.csv", csv_text.encode(), "text/csv")}

    summary = client.post("/api/vendors/import", files=files).json()

    assert summary["imported"] == 1
    vendor = client.get(f"/api/vendors/{summary['ids'][0]}").json()
    assert vendor["whatsapp_number"] == "9876543210"
    assert vendor["owner_broker"] == "Broker Bob"
    assert [n["comment"] for n in vendor["notes"]] == ["prefers calls"]


def test_one_failing_insert_does_not_abort_the_batch(client, monkeypatch):
    original_create = VendorRepository.create

    async def flaky_create(self, **kwargs):
        if kwargs.get("name") == "Boom":
            raise OperationalError("INSERT INTO vendors", {}, Exception("disk I/O error"))
        return await original_create(self, **kwargs)

    monkeypatch.setattr(VendorRepository, "create", flaky_create)
    rows = [_row("A", "One"), _row("Boom", "Two"), _row("C", "Three")]

    summary = client.post("/api/vendors/import", files=xlsx_upload(rows, COLUMNS)).json()

    assert summary["imported"] == 2
    assert summary["errors"] == [{"row": 3, "message": "Row 3: disk I/O error"}]
    names = sorted(v["name"] for v in client.get("/api/vendors").json())
    assert names == ["A", "C"]


def test_header_only_file_is_reported_empty(client):
    files = {"file": ("vendors.csv", b"Name,Transport Name\n", "text/csv")}

    response = client.post("/api/vendors/import", files=files)

    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "VALIDATION_ERROR",
        "message": "The uploaded file is empty",
    }


def test_zero_byte_upload_is_rejected(client):
    files = {"file": ("vendors.csv", b"", "text/csv")}
    response = client.post("/api/vendors/import", files=files)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE"


def test_unsupported_file_type_is_rejected(client):
    files = {"file": ("vendors.txt", b"Name,Transport Name\nA,B\n", "text/plain")}
    response = client.post("/api/vendors/import", files=files)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE"
    assert client.get("/api/vendors").json() == []


def test_oversized_file_is_rejected(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_size_mb", 0)
    files = {"file": ("vendors.csv", b"Name,Transport Name\nA,B\n", "text/csv")}

    response = client.post("/api/vendors/import", files=files)

    assert response.status_code == 400
    assert "limit" in response.json()["error"]["message"]


def test_corrupt_spreadsheet_is_rejected(client):
    files = {"file": ("vendors.xlsx", b"this is not a zip archive", "application/octet-stream")}
    response = client.post("/api/vendors/import", files=files)
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE"


def test_missing_file_is_rejected(client):
    assert client.post("/api/vendors/import").status_code == 400


def test_export_template_downloads_importable_workbook(client):
    response = client.get("/api/vendors/export-template")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert "vendors_import_template.xlsx" in response.headers["content-disposition"]

    frame = pd.read_excel(io.BytesIO(response.content), engine="openpyxl")
    assert list(frame.columns[:2]) == ["Name", "Transport Name"]

    files = {"file": ("template.xlsx", response.content, "application/octet-stream")}
    summary = client.post("/api/vendors/import", files=files).json()
    assert summary["errors"] == []
    assert summary["imported"] == len(frame)


def test_legacy_xls_workbook_is_imported(client):
    contents = (Path(__file__).parent / "fixtures" / "vendors_legacy.xls").read_bytes()
    files = {"file": ("vendors_legacy.xls", contents, XLS_MEDIA_TYPE)}

    summary = client.post("/api/vendors/import", files=files).json()

    assert summary["total"] == 2
    assert summary["imported"] == 2
    assert summary["errors"] == []
    first = client.get(f"/api/vendors/{summary['ids'][0]}").json()
    assert first["name"] == "Suresh Patel"
    assert first["transport_name"] == "Gujarat Roadways"
    assert first["whatsapp_number"] == "9812345670"
    assert first["return_service"] == "Y"
    second = client.get(f"/api/vendors/{summary['ids'][1]}").json()
    assert second["name"] == "Anil Mehta"
    assert second["return_service"] == "N"
