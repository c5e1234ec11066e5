"""비즈니스 로직 서비스 - export only."""

from .voter_service import VoterService, summarize_loaded

__all__ = ["VoterService", "summarize_loaded"]
