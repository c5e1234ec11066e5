"""API routes package."""

from .health_routes import router as health_router
from .voter_routes import router as voter_router, get_voter_service

__all__ = ["health_router", "voter_router", "get_voter_service"]
