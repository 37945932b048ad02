"""Domain package — all ORM models are imported here so Alembic and the mapper registry see them.

Folder intent:
  vendor.py  — transport vendor records
  note.py    — append-only comments attached to a vendor
  mixins.py  — shared TimestampMixin
"""

from transport_vendors.domain.note import VendorNote
from transport_vendors.domain.vendor import Vendor

__all__ = [
    "Vendor",
    "VendorNote",
]
