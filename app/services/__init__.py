"""Services package — all business logic lives here, never in routers.

Files:
  vendor.py        — registration, profile updates, approval workflow, maintenance
  counter_sync.py  — approved-vendor counter planning, application and recount
  subscription.py  — duration resolution and subscription end-date arithmetic
  catalog.py       — categories, subcategories, bundles
  slug.py          — URL slug helpers

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
