from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path

# Point the app at a throwaway SQLite file before any transport_vendors import
_DB_DIR = Path(tempfile.mkdtemp(prefix="transport-vendors-tests-"))
_DB_PATH = _DB_DIR / "vendors_test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["APP_ENV"] = "test"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "true"

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from transport_vendors.main import create_app
from transport_vendors.services.spreadsheet import XLSX_MEDIA_TYPE


@pytest.fixture()
def client() -> TestClient:
    """App client on a fresh database; the schema comes from the startup migration."""
    _DB_PATH.unlink(missing_ok=True)
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def create_vendor(client: TestClient):
    def _create(name: str = "John Doe", transport_name: str = "ABC Transport", **fields) -> int:
        response = client.post(
            "/api/vendors", json={"name": name, "transport_name": transport_name, **fields}
        )
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create


def xlsx_bytes(rows: list[dict[str, str]], columns: list[str] | None = None) -> bytes:
    frame = pd.DataFrame(rows, columns=columns)
    buffer = io.BytesIO()
    frame.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def xlsx_upload(rows: list[dict[str, str]], columns: list[str] | None = None) -> dict:
    return {"file": ("vendors.xlsx", xlsx_bytes(rows, columns), XLSX_MEDIA_TYPE)}
