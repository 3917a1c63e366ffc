"""Pydantic schemas package.

Folder intent:
  common.py       — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  vendor.py       — vendor registration/profile/admin DTOs
  catalog.py      — categories, subcategories, bundles
  maintenance.py  — expiration / recount job results
"""
