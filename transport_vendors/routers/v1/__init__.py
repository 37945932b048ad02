"""v1 router package.

Files:
  vendors.py  — vendor CRUD, notes, import and template download

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to transport_vendors/services/.
"""
