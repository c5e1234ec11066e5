"""시드 유권자 데이터

- 두 건씩 같은 created_at (동일 타임스탬프 tie-break 검증용)
- 정렬(created_at DESC, id DESC) 결과는 seed_id(n-1) ... seed_id(0)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any


BASE_TIME = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
SEED_SIZE = 30

REGIOES = ["Norte", "Sul", "Leste", "Oeste", "Centro"]
CIDADES = ["Recife", "São Paulo", "Rio de Janeiro", "Olinda"]
GENEROS = ["MASCULINO", "FEMININO", "OUTROS"]
RELIGIOES = ["Cristianismo", "Budismo", None]

VALID_PAYLOAD = {
    "nome": "Ana",
    "regiao": "Sul",
    "cidade": "Recife",
    "genero": "FEMININO",
}


def seed_id(i: int) -> str:
    return f"00000000-0000-0000-0000-{i:012d}"


def make_rows(n: int = SEED_SIZE) -> list[dict[str, Any]]:
    rows = []
    for i in range(n):
        rows.append({
            "id": seed_id(i),
            "nome": f"Eleitor {i:02d}",
            "email": f"eleitor{i:02d}@email.com",
            "cpf": f"{i:03d}.456.789-00",
            "regiao": REGIOES[i % 5],
            "cidade": CIDADES[i % 4],
            "genero": GENEROS[i % 3],
            "religiao": RELIGIOES[i % 3],
            "interacao": i % 2 == 0,
            "created_at": BASE_TIME + timedelta(minutes=i // 2),
        })
    return rows


def expected_order(n: int = SEED_SIZE) -> list[str]:
    return [seed_id(i) for i in reversed(range(n))]


def ids(records) -> list[str]:
    return [r.id for r in records]


def assert_exactly_one(result) -> None:
    """data / error 중 정확히 하나만 non-null"""
    assert (result.data is None) != (result.error is None)
