"""Keyset Cursor - (created_at, id) 위치 표시자"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from voter_registry.core.exceptions import InvalidCursorException


@dataclass(frozen=True)
class Cursor:
    """마지막으로 본 레코드의 정렬 키

    정렬은 항상 (created_at DESC, id DESC). id 가 동일 타임스탬프의 순서를 고정합니다.
    타임존 없는 created_at 은 UTC 로 간주합니다 (저장소 타임스탬프는 모두 UTC).
    """

    created_at: datetime
    id: str

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.replace(tzinfo=timezone.utc))

    @classmethod
    def from_record(cls, record: Any) -> "Cursor":
        if isinstance(record, Mapping):
            created_at, record_id = record["created_at"], record["id"]
        else:
            created_at, record_id = record.created_at, record.id
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(created_at=created_at, id=str(record_id))

    def is_before(self, created_at: datetime, record_id: str) -> bool:
        """(created_at, id) 가 이 커서보다 뒤(정렬상 아래)에 오는지"""
        return (created_at, record_id) < (self.created_at, self.id)

    def encode(self) -> str:
        """HTTP 전달용 불투명 토큰"""
        payload = json.dumps({"created_at": self.created_at.isoformat(), "id": self.id})
        return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "Cursor":
        try:
            payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
            created_at = datetime.fromisoformat(payload["created_at"])
            record_id = str(payload["id"])
        except (binascii.Error, UnicodeError, ValueError, TypeError, KeyError) as e:
            raise InvalidCursorException(f"malformed cursor token: {type(e).__name__}")
        if not record_id:
            raise InvalidCursorException("cursor id is empty")
        return cls(created_at=created_at, id=record_id)
