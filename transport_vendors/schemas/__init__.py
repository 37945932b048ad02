"""Pydantic schemas package.

Folder intent:
  common.py  — ApiModel base, MessageResponse, HealthResponse
  vendor.py  — vendor, note, and import-summary schemas
"""
