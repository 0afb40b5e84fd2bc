"""Health check response models."""

from pydantic import BaseModel


class LivenessOut(BaseModel):
    status: str = "healthy"
    timestamp: str
    uptime: float
    pid: int
    version: str
    environment: str


class ReadinessOut(BaseModel):
    status: str
    timestamp: str
    checks: dict[str, str]


class EnvCheckOut(BaseModel):
    status: str
    timestamp: str
    variables: dict[str, bool]
    missing: list[str]
