"""Services package — all business logic lives here, never in routers.

Files:
  vendor.py         — vendor CRUD and the (name, transport_name) uniqueness rule
  notes.py          — append-only vendor notes, legacy notes normalisation
  spreadsheet.py    — upload format checks, sheet parsing, header mapping, template
  vendor_import.py  — row-by-row bulk import with per-row error collection

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
