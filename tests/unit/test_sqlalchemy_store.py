"""SQLAlchemy 저장소 테스트 (임시 SQLite 파일)"""

from __future__ import annotations

from datetime import date

import pytest

from tests.fixtures.voters import VALID_PAYLOAD
from voter_registry.core.database import create_db_engine, init_db, make_session_factory
from voter_registry.core.exceptions import StoreError, StoreNotFoundException
from voter_registry.engine.errors import ErrorKind
from voter_registry.engine.filters import FilterSpec
from voter_registry.repositories.impl.sqlalchemy_store import SqlAlchemyVoterStore
from voter_registry.services.voter_service import VoterService


CITIES = ["Recife", "Olinda", "Recife", "Caruaru", "Recife"]


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'eleitores.sqlite'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(engine):
    init_db(engine)
    return SqlAlchemyVoterStore(make_session_factory(engine))


@pytest.fixture
def sql_service(sql_store):
    return VoterService(sql_store, timeout_s=5.0, max_page_size=100)


async def seed(service: VoterService, n: int = 5) -> list[str]:
    created = []
    for i in range(n):
        result = await service.insert({
            **VALID_PAYLOAD,
            "nome": f"Eleitor {i}",
            "cidade": CITIES[i % len(CITIES)],
            "cpf": f"{i:03d}.000.000-00",
            "interacao": i % 2 == 0,
        })
        assert result.is_success, result.error
        created.append(result.data.id)
    return created


@pytest.mark.asyncio
async def test_insert_and_fetch(sql_service):
    created = await sql_service.insert({**VALID_PAYLOAD, "data_nascimento": "1990-05-17"})
    fetched = await sql_service.fetch_by_id(created.data.id)

    assert len(created.data.id) == 36
    assert fetched.data.nome == "Ana"
    assert fetched.data.data_nascimento == date(1990, 5, 17)
    assert fetched.data.created_at is not None


@pytest.mark.asyncio
async def test_duplicate_cpf_is_duplicate_entry(sql_service):
    await sql_service.insert({**VALID_PAYLOAD, "cpf": "123.456.789-00"})
    result = await sql_service.insert({**VALID_PAYLOAD, "cpf": "123.456.789-00"})

    assert result.error.kind is ErrorKind.DUPLICATE_ENTRY


@pytest.mark.asyncio
async def test_raw_unique_violation_code(sql_store):
    await sql_store.insert({**VALID_PAYLOAD, "cpf": "1"})
    with pytest.raises(StoreError) as exc_info:
        await sql_store.insert({**VALID_PAYLOAD, "cpf": "1"})

    assert exc_info.value.code == "23505"


@pytest.mark.asyncio
async def test_offset_page_with_count_and_filters(sql_service):
    await seed(sql_service)

    result = await sql_service.fetch_page(page=1, page_size=2, filters=FilterSpec(city="REC"))

    assert result.count == 3
    assert len(result.data) == 2
    assert all(r.cidade == "Recife" for r in result.data)


@pytest.mark.asyncio
async def test_search_group(sql_service):
    await seed(sql_service)

    by_name = await sql_service.fetch_page(page=1, page_size=10, filters=FilterSpec(search="eleitor 3"))
    by_cpf = await sql_service.fetch_page(page=1, page_size=10, filters=FilterSpec(search="004.000.000-00"))

    assert [r.nome for r in by_name.data] == ["Eleitor 3"]
    assert [r.nome for r in by_cpf.data] == ["Eleitor 4"]


@pytest.mark.asyncio
async def test_keyset_walk_matches_offset_order(sql_service):
    await seed(sql_service)
    full = await sql_service.fetch_page(page=1, page_size=10)

    seen = []
    cursor = None
    while True:
        batch = await sql_service.fetch_keyset(limit=2, cursor=cursor)
        seen.extend(r.id for r in batch.data)
        if batch.next_cursor is None:
            break
        cursor = batch.next_cursor

    assert seen == [r.id for r in full.data]
    assert len(set(seen)) == 5


@pytest.mark.asyncio
async def test_update_and_delete(sql_service):
    (record_id,) = await seed(sql_service, n=1)

    updated = await sql_service.update(record_id, {"observacoes": "visitado", "data_nascimento": "1985-01-02"})
    removed = await sql_service.remove(record_id)
    missing = await sql_service.fetch_by_id(record_id)

    assert updated.data.observacoes == "visitado"
    assert updated.data.data_nascimento == date(1985, 1, 2)
    assert removed.data.id == record_id
    assert missing.error.kind is ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_missing_row_raises_not_found(sql_store):
    with pytest.raises(StoreNotFoundException):
        await sql_store.delete("nao-existe")


@pytest.mark.asyncio
async def test_missing_table_is_schema_error(engine):
    store = SqlAlchemyVoterStore(make_session_factory(engine))
    service = VoterService(store, timeout_s=5.0, max_page_size=100)

    result = await service.fetch_page(page=1, page_size=10)

    assert result.error.kind is ErrorKind.SCHEMA_ERROR


@pytest.mark.asyncio
async def test_ping(sql_store):
    assert await sql_store.ping() is True
