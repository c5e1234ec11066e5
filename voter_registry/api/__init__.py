"""API 엔드포인트 패키지 - export only."""

from .routes import health_router, voter_router, get_voter_service

__all__ = ["health_router", "voter_router", "get_voter_service"]
