"""Mobile data-access layer: async API client with primary/secondary fallback."""

from grifo.client.api import GrifoClient
from grifo.client.fallback import ApiError, Backend, BackendChain, BackendUnavailable

__all__ = ["ApiError", "Backend", "BackendChain", "BackendUnavailable", "GrifoClient"]
