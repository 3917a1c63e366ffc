"""v1 router package — all /api/v1/* endpoints live here.

Files:
  vendors.py  — vendor registration, profile and admin lifecycle
  catalog.py  — categories, subcategories, bundles
  admin.py    — maintenance job triggers

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to app/services/.
"""
