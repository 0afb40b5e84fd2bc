"""v1 router package: all /api/v1/* endpoints live here.

Files:
  auth.py         portal / mobile user login, token refresh, password change
  clients.py      client portal (session tokens) and client administration
  companies.py    tenants
  users.py        users of a tenant
  properties.py   properties
  inspections.py  inspections
  contests.py     contests against inspection results
  uploads.py      multipart uploads and file metadata
  sync.py         sync operations
  dashboard.py    aggregates
  reports.py      management reports (inspections, contest resolution, 30-day summary)

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to grifo/services/.
"""

from fastapi import APIRouter

from grifo.routers.v1.auth import router as auth_router
from grifo.routers.v1.clients import router as clients_router
from grifo.routers.v1.companies import router as companies_router
from grifo.routers.v1.contests import router as contests_router
from grifo.routers.v1.dashboard import router as dashboard_router
from grifo.routers.v1.inspections import router as inspections_router
from grifo.routers.v1.properties import router as properties_router
from grifo.routers.v1.reports import router as reports_router
from grifo.routers.v1.sync import router as sync_router
from grifo.routers.v1.uploads import router as uploads_router
from grifo.routers.v1.users import router as users_router

api_router = APIRouter()
for _router in (
    auth_router,
    clients_router,
    companies_router,
    users_router,
    properties_router,
    inspections_router,
    contests_router,
    uploads_router,
    sync_router,
    dashboard_router,
    reports_router,
):
    api_router.include_router(_router)
