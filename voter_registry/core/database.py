"""데이터베이스 연결 및 세션 관리 (SQLAlchemy 저장소 전용)"""
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from voter_registry.core.config import settings
from voter_registry.core.logging import logger

# SQLAlchemy Base
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """URL에 맞는 엔진 생성

    SQLite 는 to_thread 워커 스레드에서 접근하므로 check_same_thread 를 끕니다.
    """
    if database_url.startswith("sqlite"):
        path = make_url(database_url).database
        if path and path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """설정 기반 엔진 (lazy singleton)"""
    return create_db_engine(settings.database_url)


def make_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine or get_engine())


def init_db(engine: Optional[Engine] = None) -> None:
    """데이터베이스 테이블 초기화"""
    # 모델 등록
    from voter_registry.repositories import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine or get_engine())
        logger.info("Database tables initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise


@contextmanager
def get_db_context(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context Manager: DB 세션 제공 (성공 시 commit, 실패 시 rollback)"""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
