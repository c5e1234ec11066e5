"""FilterSpec - UI 필터 상태를 저장소 독립적인 술어(predicate) 집합으로 정규화

UI 는 모든 필터를 문자열로 보관합니다 (빈 문자열 = 선택 안 함).
빈 값은 "빈 문자열과 일치" 조건으로 바뀌지 않고 술어 집합에서 빠집니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

from voter_registry.core.logging import logger


class PredicateKind(str, Enum):
    """저장소 어댑터가 해석해야 하는 술어 종류"""

    EXACT = "exact"  # col = value
    SUBSTRING = "substring"  # col ILIKE %value%
    BOOLEAN = "boolean"  # col = true/false
    ANY_OF = "any_of"  # (p1 OR p2 OR ...)


@dataclass(frozen=True)
class ExactMatch:
    column: str
    value: str
    kind: PredicateKind = PredicateKind.EXACT

    def matches(self, row: Mapping[str, Any]) -> bool:
        return row.get(self.column) == self.value


@dataclass(frozen=True)
class Substring:
    """대소문자 무시 부분 일치"""

    column: str
    value: str
    kind: PredicateKind = PredicateKind.SUBSTRING

    def matches(self, row: Mapping[str, Any]) -> bool:
        current = row.get(self.column)
        if current is None:
            return False
        return self.value.casefold() in str(current).casefold()


@dataclass(frozen=True)
class BooleanEquals:
    column: str
    value: bool
    kind: PredicateKind = PredicateKind.BOOLEAN

    def matches(self, row: Mapping[str, Any]) -> bool:
        return bool(row.get(self.column)) is self.value


@dataclass(frozen=True)
class AnyOf:
    """OR 그룹 (자유 텍스트 검색: 이름/이메일 부분 일치 또는 CPF 정확 일치)"""

    predicates: tuple[Union[ExactMatch, Substring, BooleanEquals], ...]
    kind: PredicateKind = PredicateKind.ANY_OF

    def matches(self, row: Mapping[str, Any]) -> bool:
        return any(p.matches(row) for p in self.predicates)


Predicate = Union[ExactMatch, Substring, BooleanEquals, AnyOf]


@dataclass(frozen=True)
class FilterSpec:
    """활성 필터 (None = 미적용)"""

    region: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = None
    religion: Optional[str] = None
    interaction: Optional[bool] = None
    search: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.predicates()

    def predicates(self) -> tuple[Predicate, ...]:
        """저장소에 전달할 술어 목록 (순서 고정)"""
        result: list[Predicate] = []
        if self.region is not None:
            result.append(ExactMatch("regiao", self.region))
        if self.city is not None:
            result.append(Substring("cidade", self.city))
        if self.gender is not None:
            result.append(ExactMatch("genero", self.gender))
        if self.religion is not None:
            result.append(ExactMatch("religiao", self.religion))
        if self.interaction is not None:
            result.append(BooleanEquals("interacao", self.interaction))
        if self.search is not None:
            result.append(search_group(self.search))
        return tuple(result)

    def matches(self, row: Mapping[str, Any]) -> bool:
        return all(p.matches(row) for p in self.predicates())


def search_group(term: str) -> AnyOf:
    return AnyOf((
        Substring("nome", term),
        Substring("email", term),
        ExactMatch("cpf", term),
    ))


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _tri_state(value: Any) -> Optional[bool]:
    """'' / None → 미설정, 'true' → True, 'false' → False"""
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    if text:
        logger.debug(f"[Filters] Unrecognized interaction value ignored: {text!r}")
    return None


def build_filter_spec(ui_state: Any = None) -> FilterSpec:
    """UI 필터 상태 → FilterSpec

    Args:
        ui_state: regiao/cidade/genero/religiao/interacao/search 키를 가진
            매핑 또는 같은 속성을 가진 객체 (UIFilterState 등)

    Returns:
        FilterSpec: 빈 필드는 제외된 필터
    """
    if ui_state is None:
        return FilterSpec()

    if isinstance(ui_state, Mapping):
        get = ui_state.get
    else:
        def get(key: str) -> Any:
            return getattr(ui_state, key, None)

    return FilterSpec(
        region=_text(get("regiao")),
        city=_text(get("cidade")),
        gender=_text(get("genero")),
        religion=_text(get("religiao")),
        interaction=_tri_state(get("interacao")),
        search=_text(get("search")),
    )
