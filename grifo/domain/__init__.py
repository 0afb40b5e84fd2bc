"""Domain package: all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  company.py     Tenants
  user.py        Portal / mobile users (one company each)
  client.py      Client-portal accounts and their opaque sessions
  property.py    Properties owned by a company
  inspection.py  Inspections, the contests raised against them and public contest links
  upload.py      Uploaded file metadata
  sync.py        Sync operations (durable job status)
  audit.py       Immutable audit trail (never updated or deleted)
  mixins.py      Shared TimestampMixin, TenantMixin, AuditMixin
"""

from grifo.domain.audit import AuditTrail
from grifo.domain.client import Client, ClientSession
from grifo.domain.company import Company
from grifo.domain.inspection import Contest, ContestLink, Inspection
from grifo.domain.property import Property
from grifo.domain.sync import SyncOperation
from grifo.domain.upload import Upload
from grifo.domain.user import User

__all__ = [
    "AuditTrail",
    "Client",
    "ClientSession",
    "Company",
    "Contest",
    "ContestLink",
    "Inspection",
    "Property",
    "SyncOperation",
    "Upload",
    "User",
]
