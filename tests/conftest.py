"""전역 테스트 설정

역할:
- 테스트 환경 구성 (인메모리 저장소)
- 공통 저장소 / 서비스 픽스처
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


# 프로젝트 루트를 경로에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 설정은 import 시점에 로드되므로 모듈 로드 전에 지정
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "test")

from tests.fixtures.voters import make_rows  # noqa: E402
from voter_registry.repositories.impl.memory_store import InMemoryVoterStore  # noqa: E402
from voter_registry.services.voter_service import VoterService  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def test_env() -> None:
    """테스트 환경 변수 설정 (세션 전역)"""
    os.environ["ENVIRONMENT"] = "test"
    os.environ["LOG_LEVEL"] = "INFO"


@pytest.fixture
def memory_store() -> InMemoryVoterStore:
    """시드 30건이 적재된 인메모리 저장소"""
    return InMemoryVoterStore(make_rows())


@pytest.fixture
def voter_service(memory_store) -> VoterService:
    return VoterService(memory_store, timeout_s=5.0, max_page_size=100)


@pytest.fixture
def empty_service() -> VoterService:
    return VoterService(InMemoryVoterStore(), timeout_s=5.0, max_page_size=100)
