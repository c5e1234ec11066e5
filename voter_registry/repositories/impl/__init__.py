"""Repositories implementation package."""

from typing import Optional

from voter_registry.core.config import Settings, settings as default_settings
from voter_registry.core.logging import logger

from .memory_store import InMemoryVoterStore
from .postgrest_store import PostgrestVoterStore
from .sqlalchemy_store import SqlAlchemyVoterStore


def create_store(settings: Optional[Settings] = None):
    """설정의 store_backend 에 맞는 저장소 생성"""
    settings = settings or default_settings
    backend = settings.store_backend

    if backend == "postgrest":
        if not settings.postgrest_url:
            raise ValueError("postgrest_url is required for the postgrest backend")
        logger.info("Using PostgREST voter store")
        return PostgrestVoterStore(
            settings.postgrest_url,
            api_key=settings.postgrest_api_key,
            table=settings.voter_table,
            timeout_s=settings.store_timeout_s,
        )

    if backend == "sqlalchemy":
        from voter_registry.core.database import create_db_engine, init_db, make_session_factory

        engine = create_db_engine(settings.database_url)
        init_db(engine)
        logger.info("Using SQLAlchemy voter store")
        return SqlAlchemyVoterStore(make_session_factory(engine))

    logger.info("Using in-memory voter store")
    return InMemoryVoterStore()


__all__ = ["InMemoryVoterStore", "PostgrestVoterStore", "SqlAlchemyVoterStore", "create_store"]
