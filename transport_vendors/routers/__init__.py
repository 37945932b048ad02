"""Routers package — HTTP endpoint definitions.

Files:
  v1/  — vendor API routes, mounted under /api
"""
