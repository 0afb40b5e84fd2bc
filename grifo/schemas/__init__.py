"""Pydantic schemas package.

Folder intent:
  common.py      ApiModel / RequestModel bases and shared field types
  auth.py        user login and token responses
  client.py      client-portal registration, sessions and profile
  company.py     tenants
  user.py        users
  property.py    properties and their list/detail projections
  inspection.py  inspections
  contest.py     contests
  upload.py      upload metadata
  sync.py        sync operations
  health.py      health check responses
"""
