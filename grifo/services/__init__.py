"""Services package: all business logic lives here, never in routers.

Files:
  auth.py         portal / mobile user login, token refresh, password change
  client.py       client-portal accounts and opaque sessions
  company.py      tenants and per-tenant stats
  user.py         users of a tenant
  property.py     properties with inspection counts
  inspection.py   inspection scheduling and status workflow
  contest.py      contests raised against inspections
  contest_link.py single-use public contest links (staff issue, public submit)
  upload.py       object write + metadata row, with compensating cleanup
  storage.py      object storage backends (S3, local disk)
  sync.py         sync operation lifecycle (trigger, cancel, retry, status)
  sync_worker.py  in-process runner for queued sync operations
  dashboard.py    aggregates for the dashboard
  report.py       management reports with grouped statistics

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
