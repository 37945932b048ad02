from __future__ import annotations

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from transport_vendors.services.vendor import VendorService


def test_create_then_get_returns_record_with_empty_notes(client):
    payload = {
        "name": "John Doe",
        "transport_name": "ABC Transport",
        "vendor_state": "Tamil Nadu",
        "vendor_city": "Chennai",
        "whatsapp_number": 9876543210,
        "return_service": "Y",
    }
    created = client.post("/api/vendors", json=payload)
    assert created.status_code == 201
    assert created.json() == {"message": "Vendor created successfully", "id": 1}

    vendor = client.get("/api/vendors/1").json()
    assert vendor["id"] == 1
    assert vendor["name"] == "John Doe"
    assert vendor["transport_name"] == "ABC Transport"
    assert vendor["vendor_city"] == "Chennai"
    assert vendor["whatsapp_number"] == "9876543210"
    assert vendor["return_service"] == "Y"
    assert vendor["any_association"] == "N"
    assert vendor["visiting_card"] is None
    assert vendor["notes"] == []
    assert vendor["created_at"] and vendor["updated_at"]


def test_blank_optional_fields_are_stored_as_null(client, create_vendor):
    vendor_id = create_vendor(visiting_card="   ", verification="")
    vendor = client.get(f"/api/vendors/{vendor_id}").json()
    assert vendor["visiting_card"] is None
    assert vendor["verification"] is None


def test_flags_collapse_to_n_unless_exactly_y_or_n(client, create_vendor):
    vendor_id = create_vendor(return_service="y", any_association="maybe")
    vendor = client.get(f"/api/vendors/{vendor_id}").json()
    assert vendor["return_service"] == "N"
    assert vendor["any_association"] == "N"


def test_duplicate_differing_only_in_case_is_rejected(client, create_vendor):
    first_id = create_vendor(name="John Doe", transport_name="ABC Transport")

    response = client.post(
        "/api/vendors", json={"name": "JOHN DOE", "transport_name": "abc transport"}
    )

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["code"] == "DUPLICATE"
    assert error["existing"] == {
        "id": first_id,
        "name": "John Doe",
        "transport_name": "ABC Transport",
    }
    assert len(client.get("/api/vendors").json()) == 1


def test_same_name_with_other_transport_is_allowed(client, create_vendor):
    create_vendor(name="John Doe", transport_name="ABC Transport")
    create_vendor(name="John Doe", transport_name="XYZ Logistics")
    assert len(client.get("/api/vendors").json()) == 2


def test_missing_or_blank_required_fields_return_400(client):
    missing = client.post("/api/vendors", json={"transport_name": "ABC Transport"})
    blank = client.post("/api/vendors", json={"name": "  ", "transport_name": "ABC Transport"})

    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "name" in missing.json()["error"]["message"]
    assert blank.status_code == 400


def test_get_unknown_vendor_returns_404(client):
    response = client.get("/api/vendors/999")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_non_numeric_id_is_a_validation_error(client):
    assert client.get("/api/vendors/abc").status_code == 400


def test_id_beyond_integer_range_is_rejected_cleanly(client):
    huge = "99999999999999999999"

    for response in (
        client.get(f"/api/vendors/{huge}"),
        client.delete(f"/api/vendors/{huge}"),
        client.put(f"/api/vendors/{huge}", json={"name": "A", "transport_name": "B"}),
        client.get(f"/api/vendors/{huge}/notes"),
    ):
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_zero_id_is_rejected(client):
    assert client.get("/api/vendors/0").status_code == 400


def test_list_is_newest_first(client, create_vendor):
    first = create_vendor(name="A", transport_name="One")
    second = create_vendor(name="B", transport_name="Two")
    third = create_vendor(name="C", transport_name="Three")

    ids = [v["id"] for v in client.get("/api/vendors").json()]
    assert ids == [third, second, first]


def test_update_replaces_core_fields(client, create_vendor):
    vendor_id = create_vendor(vehicle_type="Container", vendor_city="Chennai")

    response = client.put(
        f"/api/vendors/{vendor_id}",
        json={"name": "John Doe", "transport_name": "ABC Transport", "vehicle_type": "Truck"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Vendor updated successfully", "id": vendor_id}
    vendor = client.get(f"/api/vendors/{vendor_id}").json()
    assert vendor["vehicle_type"] == "Truck"
    assert vendor["vendor_city"] is None


def test_update_to_another_vendors_identity_is_rejected(client, create_vendor):
    create_vendor(name="John Doe", transport_name="ABC Transport")
    other_id = create_vendor(name="Jane Smith", transport_name="XYZ Logistics")

    response = client.put(
        f"/api/vendors/{other_id}",
        json={"name": "john doe", "transport_name": "ABC TRANSPORT"},
    )

    assert response.status_code == 409


def test_update_keeping_own_identity_is_not_a_duplicate(client, create_vendor):
    vendor_id = create_vendor(name="John Doe", transport_name="ABC Transport")
    response = client.put(
        f"/api/vendors/{vendor_id}",
        json={"name": "John Doe", "transport_name": "abc transport"},
    )
    assert response.status_code == 200


def test_update_unknown_vendor_returns_404(client):
    response = client.put(
        "/api/vendors/42", json={"name": "John Doe", "transport_name": "ABC Transport"}
    )
    assert response.status_code == 404


def test_delete_removes_vendor_from_list(client, create_vendor):
    keep = create_vendor(name="Keep", transport_name="Me")
    gone = create_vendor(name="Drop", transport_name="Me")
    client.post(f"/api/vendors/{gone}/notes", json={"comment": "to be removed"})

    response = client.delete(f"/api/vendors/{gone}")

    assert response.status_code == 200
    assert response.json() == {"message": "Vendor deleted successfully"}
    assert [v["id"] for v in client.get("/api/vendors").json()] == [keep]
    assert client.get(f"/api/vendors/{gone}").status_code == 404


def test_delete_unknown_vendor_returns_404(client):
    assert client.delete("/api/vendors/7").status_code == 404


def test_note_then_update_scenario(client):
    created = client.post(
        "/api/vendors", json={"name": "John Doe", "transport_name": "ABC Transport"}
    )
    assert created.status_code == 201
    vendor_id = created.json()["id"]
    assert vendor_id == 1
    assert client.get("/api/vendors/1").json()["notes"] == []

    notes = client.post("/api/vendors/1/notes", json={"comment": "called, interested"}).json()
    assert [n["comment"] for n in notes] == ["called, interested"]
    stamped = notes[0]["timestamp"]

    updated = client.put(
        "/api/vendors/1",
        json={
            "name": "John Doe",
            "transport_name": "ABC Transport",
            "vehicle_type": "Truck",
            "notes": [],
        },
    )
    assert updated.status_code == 200

    vendor = client.get("/api/vendors/1").json()
    assert vendor["vehicle_type"] == "Truck"
    assert vendor["notes"] == [{"comment": "called, interested", "timestamp": stamped}]


def test_store_unreachable_maps_to_503_with_hint(client, monkeypatch):
    async def refuse(self):
        raise OperationalError("SELECT", {}, ConnectionRefusedError("Connection refused"))

    monkeypatch.setattr(VendorService, "list_vendors", refuse)

    response = client.get("/api/vendors")

    assert response.status_code == 503
    error = response.json()["error"]
    assert error["code"] == "STORE_UNAVAILABLE"
    assert "DB_HOST" in error["hint"]


def test_other_store_errors_map_to_500_with_driver_message(client, monkeypatch):
    async def broken(self):
        raise OperationalError("SELECT", {}, Exception("no such column: vendors.verification"))

    monkeypatch.setattr(VendorService, "list_vendors", broken)

    response = client.get("/api/vendors")

    assert response.status_code == 500
    assert response.json()["error"] == {
        "code": "STORE_ERROR",
        "message": "no such column: vendors.verification",
    }


def test_generic_sqlalchemy_error_is_500(client, monkeypatch):
    async def broken(self):
        raise SQLAlchemyError("mapper failure")

    monkeypatch.setattr(VendorService, "list_vendors", broken)

    response = client.get("/api/vendors")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "STORE_ERROR"
