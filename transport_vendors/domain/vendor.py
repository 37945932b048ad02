"""SQLAlchemy ORM model for transport vendors.

Rows are identified by an auto-increment integer id. The ``(name,
transport_name)`` pair is unique case-insensitively; that rule is enforced
by the service layer before every insert and update, not by an index, so
legacy tables holding duplicates still migrate.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_vendors.db.base import Base
from transport_vendors.domain.mixins import TimestampMixin


class Vendor(Base, TimestampMixin):
    __tablename__ = "vendors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    transport_name: Mapped[str] = mapped_column(String(255), nullable=False)

    visiting_card: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    owner_broker: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    vendor_state: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    vendor_city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    whatsapp_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    alternate_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    vehicle_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    main_service_state: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    main_service_city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # "Y" | "N"
    return_service: Mapped[str] = mapped_column(
        String(1), default="N", server_default="N", nullable=False
    )
    any_association: Mapped[str] = mapped_column(
        String(1), default="N", server_default="N", nullable=False
    )
    association_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    verification: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Append-only comment log, oldest first
    notes: Mapped[List["VendorNote"]] = relationship(
        back_populates="vendor",
        order_by="VendorNote.id",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
