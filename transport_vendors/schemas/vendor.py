"""Vendor Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import field_validator

from transport_vendors.schemas.common import ApiModel

FLAG_VALUES = ("Y", "N")

OPTIONAL_FIELDS: tuple[str, ...] = (
    "visiting_card",
    "owner_broker",
    "vendor_state",
    "vendor_city",
    "whatsapp_number",
    "alternate_number",
    "vehicle_type",
    "main_service_state",
    "main_service_city",
    "association_name",
    "verification",
)


def normalize_flag(value: object) -> str:
    """Collapse anything other than exactly "Y" or "N" to "N"."""
    return value if value in FLAG_VALUES else "N"


def blank_to_none(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class VendorFields(ApiModel):
    """Core vendor fields shared by create and update (``notes`` is never accepted)."""

    name: str
    transport_name: str
    visiting_card: str | None = None
    owner_broker: str | None = None
    vendor_state: str | None = None
    vendor_city: str | None = None
    whatsapp_number: str | None = None
    alternate_number: str | None = None
    vehicle_type: str | None = None
    main_service_state: str | None = None
    main_service_city: str | None = None
    return_service: str | None = "N"
    any_association: str | None = "N"
    association_name: str | None = None
    verification: str | None = None

    @field_validator("name", "transport_name")
    @classmethod
    def _required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator(*OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _optional_text(cls, value: object) -> str | None:
        return blank_to_none(value)

    @field_validator("return_service", "any_association", mode="after")
    @classmethod
    def _flag(cls, value: str | None) -> str:
        return normalize_flag(value)


class VendorCreate(VendorFields):
    pass


class VendorUpdate(VendorFields):
    """Full replacement of the core fields. Notes are only changed via the notes endpoint."""


class NoteCreate(ApiModel):
    comment: str


class NoteOut(ApiModel):
    comment: str
    timestamp: datetime


class VendorOut(ApiModel):
    id: int
    name: str | None = None
    transport_name: str | None = None
    visiting_card: str | None = None
    owner_broker: str | None = None
    vendor_state: str | None = None
    vendor_city: str | None = None
    whatsapp_number: str | None = None
    alternate_number: str | None = None
    vehicle_type: str | None = None
    main_service_state: str | None = None
    main_service_city: str | None = None
    return_service: str = "N"
    any_association: str = "N"
    association_name: str | None = None
    verification: str | None = None
    notes: list[NoteOut] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("return_service", "any_association", mode="before")
    @classmethod
    def _flag(cls, value: object) -> str:
        return normalize_flag(value)


class VendorWriteResponse(ApiModel):
    message: str
    id: int


class ImportRowError(ApiModel):
    row: int
    message: str


class ImportSummary(ApiModel):
    message: str
    total: int
    imported: int
    ids: list[int] = []
    errors: list[ImportRowError] = []
