"""Maintenance jobs, run by an external scheduler (cron, k8s CronJob, ...).

Files:
  vendor_expiration.py  — expire approved vendors past their subscription end date
  recount.py            — rebuild every vendor/subscriber counter from scratch

Each job opens its own session via :func:`app.db.base.session_scope` and can be
run with ``python -m app.jobs.<name>``.
"""
