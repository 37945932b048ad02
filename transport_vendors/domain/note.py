"""SQLAlchemy ORM model for vendor notes.

Each note is its own row, so appending a comment is a single INSERT and
never rewrites the comments already stored for the vendor.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from transport_vendors.db.base import Base
from transport_vendors.domain.mixins import _now


class VendorNote(Base):
    __tablename__ = "vendor_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vendor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False, index=True
    )
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    # Set server-side at append time; stored as created_at
    timestamp: Mapped[datetime] = mapped_column(
        "created_at",
        DateTime(timezone=True),
        default=_now,
        server_default=func.now(),
        nullable=False,
    )

    vendor: Mapped["Vendor"] = relationship(back_populates="notes")
