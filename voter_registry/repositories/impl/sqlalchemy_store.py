"""SQLAlchemy 유권자 저장소 - DB 접근 로직

동기 Session 을 asyncio.to_thread 로 실행합니다.
DB 드라이버 오류는 SQLSTATE 코드를 가진 StoreError 로 정규화합니다.
"""
import asyncio
from datetime import date
from typing import Any, Callable, Optional

from sqlalchemy import and_, asc, desc, func, or_, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from voter_registry.core.database import get_db_context
from voter_registry.core.exceptions import StoreError, StoreNotFoundException
from voter_registry.core.logging import logger
from voter_registry.engine.filters import Predicate, PredicateKind
from voter_registry.repositories.models import Voter
from voter_registry.repositories.store import (
    STORE_ASSIGNED_FIELDS,
    StoreQuery,
    StoreResponse,
)


# 드라이버가 SQLSTATE 를 주지 않을 때(SQLite) 메시지로 추정
_SQLITE_CODES = (
    ("unique constraint failed", "23505"),
    ("foreign key constraint failed", "23503"),
    ("no such table", "42P01"),
)


def to_store_error(exc: SQLAlchemyError) -> StoreError:
    """SQLAlchemy 예외 → StoreError(code=SQLSTATE)"""
    orig = getattr(exc, "orig", None)
    message = str(orig) if orig is not None else str(exc)
    # psycopg2: pgcode, psycopg3: sqlstate
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if not code:
        lowered = message.lower()
        for marker, sqlstate in _SQLITE_CODES:
            if marker in lowered:
                code = sqlstate
                break
    return StoreError(message, code=code, details={"exception": type(exc).__name__})


class SqlAlchemyVoterStore:
    """유권자 데이터 액세스 레이어"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def _run(self, operation: str, fn: Callable[[Session], Any]) -> Any:
        def work() -> Any:
            with get_db_context(self.session_factory) as db:
                return fn(db)

        try:
            return await asyncio.to_thread(work)
        except StoreError:
            raise
        except (IntegrityError, DBAPIError) as e:
            logger.warning(f"[SqlStore] {operation} failed: {type(e).__name__}")
            raise to_store_error(e)
        except SQLAlchemyError as e:
            logger.error(f"[SqlStore] {operation} failed: {e}")
            raise StoreError(str(e), details={"exception": type(e).__name__})

    # ------------------------------------------------------------------
    # 쿼리 구성
    # ------------------------------------------------------------------

    def _clause(self, predicate: Predicate):
        if predicate.kind is PredicateKind.ANY_OF:
            return or_(*(self._clause(p) for p in predicate.predicates))

        column = getattr(Voter, predicate.column)
        if predicate.kind is PredicateKind.SUBSTRING:
            return column.icontains(predicate.value, autoescape=True)
        return column == predicate.value

    def _select(self, db: Session, query: StoreQuery) -> StoreResponse:
        q = db.query(Voter)
        for predicate in query.predicates:
            q = q.filter(self._clause(predicate))

        total: Optional[int] = None
        if query.count:
            total = q.with_entities(func.count(Voter.id)).scalar() or 0

        if query.after is not None:
            cursor = query.after
            q = q.filter(or_(
                Voter.created_at < cursor.created_at,
                and_(Voter.created_at == cursor.created_at, Voter.id < cursor.id),
            ))

        q = q.order_by(*[
            desc(getattr(Voter, column)) if descending else asc(getattr(Voter, column))
            for column, descending in query.order
        ])
        if query.offset:
            q = q.offset(query.offset)
        if query.limit is not None:
            q = q.limit(query.limit)

        return StoreResponse(rows=[voter.to_dict() for voter in q.all()], count=total)

    @staticmethod
    def _coerce(values: dict[str, Any]) -> dict[str, Any]:
        payload = {
            k: v for k, v in values.items()
            if k not in STORE_ASSIGNED_FIELDS and k in Voter.__table__.columns
        }
        if isinstance(payload.get("data_nascimento"), str):
            payload["data_nascimento"] = date.fromisoformat(payload["data_nascimento"])
        return payload

    @staticmethod
    def _get(db: Session, record_id: str) -> Voter:
        voter = db.query(Voter).filter(Voter.id == record_id).first()
        if voter is None:
            raise StoreNotFoundException(record_id)
        return voter

    # ------------------------------------------------------------------
    # VoterStore
    # ------------------------------------------------------------------

    async def select(self, query: StoreQuery) -> StoreResponse:
        return await self._run("select", lambda db: self._select(db, query))

    async def select_one(self, record_id: str) -> dict[str, Any]:
        return await self._run("select_one", lambda db: self._get(db, record_id).to_dict())

    async def insert(self, values: dict[str, Any]) -> dict[str, Any]:
        def work(db: Session) -> dict[str, Any]:
            voter = Voter(**self._coerce(values))
            db.add(voter)
            db.flush()
            db.refresh(voter)
            logger.info(f"Voter created: {voter.id}")
            return voter.to_dict()

        return await self._run("insert", work)

    async def update(self, record_id: str, values: dict[str, Any]) -> dict[str, Any]:
        def work(db: Session) -> dict[str, Any]:
            voter = self._get(db, record_id)
            for key, value in self._coerce(values).items():
                setattr(voter, key, value)
            db.flush()
            db.refresh(voter)
            return voter.to_dict()

        return await self._run("update", work)

    async def delete(self, record_id: str) -> dict[str, Any]:
        def work(db: Session) -> dict[str, Any]:
            voter = self._get(db, record_id)
            row = voter.to_dict()
            db.delete(voter)
            return row

        return await self._run("delete", work)

    async def ping(self) -> bool:
        await self._run("ping", lambda db: db.execute(text("SELECT 1")).scalar())
        return True
