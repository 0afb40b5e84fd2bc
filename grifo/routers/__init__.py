"""Routers package: HTTP endpoint definitions.

Files:
  health.py  unauthenticated health checks (/health)
  public.py  public contest links (/api/public/*)
  v1/        versioned API routes (/api/v1/*)
"""
