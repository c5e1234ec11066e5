"""Pydantic 스키마 / 설정 / 로그 마스킹 테스트"""

from __future__ import annotations

import logging
from datetime import date

import pytest
from pydantic import ValidationError

from voter_registry.core.config import Settings
from voter_registry.core.logging import PersonalDataFilter, sanitize_for_log
from voter_registry.schemas.voter_schema import (
    UIFilterState,
    VoterCreate,
    VoterRecord,
    VoterUpdate,
)


class TestVoterCreate:
    def test_required_fields_are_stripped(self):
        voter = VoterCreate(nome="  Ana ", regiao="Sul", cidade="Recife", genero="FEMININO")

        assert voter.nome == "Ana"
        assert voter.interacao is False

    def test_blank_optional_becomes_none(self):
        voter = VoterCreate(
            nome="Ana", regiao="Sul", cidade="Recife", genero="FEMININO",
            cpf="", email="   ", data_nascimento="",
        )

        assert voter.cpf is None
        assert voter.email is None
        assert voter.data_nascimento is None

    def test_birth_date_parsed(self):
        voter = VoterCreate(
            nome="Ana", regiao="Sul", cidade="Recife", genero="FEMININO",
            data_nascimento="1990-05-17",
        )

        assert voter.data_nascimento == date(1990, 5, 17)

    def test_missing_required(self):
        with pytest.raises(ValidationError):
            VoterCreate(nome="Ana", regiao="Sul", cidade="Recife")

    def test_cpf_too_long(self):
        with pytest.raises(ValidationError):
            VoterCreate(nome="Ana", regiao="Sul", cidade="Recife", genero="F", cpf="1" * 20)


class TestVoterUpdate:
    def test_only_sent_fields_are_set(self):
        update = VoterUpdate(observacoes="ligou")

        assert update.model_dump(exclude_unset=True) == {"observacoes": "ligou"}

    def test_optional_field_can_be_cleared(self):
        update = VoterUpdate(email="")

        assert update.model_dump(exclude_unset=True) == {"email": None}

    @pytest.mark.parametrize("field", ["nome", "regiao", "cidade", "genero", "interacao"])
    def test_required_field_cannot_be_null(self, field):
        with pytest.raises(ValidationError):
            VoterUpdate(**{field: None})


class TestVoterRecord:
    def test_extra_columns_ignored_and_id_coerced(self):
        record = VoterRecord.model_validate({
            "id": 12,
            "nome": "Ana",
            "regiao": "Sul",
            "cidade": "Recife",
            "genero": "FEMININO",
            "created_at": "2024-01-15T10:30:00Z",
            "coluna_nova": "x",
        })

        assert record.id == "12"
        assert not hasattr(record, "coluna_nova")

    def test_created_at_required(self):
        with pytest.raises(ValidationError):
            VoterRecord(id="1", nome="Ana", regiao="Sul", cidade="Recife", genero="F")


def test_ui_filter_state_defaults():
    state = UIFilterState()

    assert state.model_dump() == {
        "regiao": "", "cidade": "", "genero": "", "religiao": "", "interacao": "", "search": "",
    }


class TestSettings:
    def test_backend_normalized(self):
        assert Settings(store_backend=" SQLAlchemy ").store_backend == "sqlalchemy"

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            Settings(store_backend="redis")

    @pytest.mark.parametrize("field", ["default_page_size", "max_page_size", "store_timeout_s"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_postgrest_url_scheme(self):
        assert Settings(postgrest_url="https://x.supabase.co/").postgrest_url == "https://x.supabase.co"
        with pytest.raises(ValidationError):
            Settings(postgrest_url="x.supabase.co")


class TestSanitizeForLog:
    def test_masks_personal_data(self):
        masked = sanitize_for_log("cpf 123.456.789-00 email ana@email.com tel (81) 99999-1234")

        assert "123.456.789-00" not in masked
        assert "ana@email.com" not in masked
        assert "99999-1234" not in masked

    def test_truncates(self):
        assert sanitize_for_log("a" * 300, max_length=10) == "a" * 10 + "..."

    def test_empty(self):
        assert sanitize_for_log("") == "[empty]"

    def test_record_ids_are_not_masked(self):
        record_id = "00000000-0000-0000-0000-000000000025"

        assert sanitize_for_log(f"Voter created: {record_id}") == f"Voter created: {record_id}"

    def test_api_key_masked(self):
        assert "secret" not in sanitize_for_log("Authorization: Bearer secret")


def test_filter_masks_log_records():
    record = logging.LogRecord(
        "voter_registry", logging.WARNING, __file__, 1,
        "duplicate cpf %s for %s", ("123.456.789-00", "ana@email.com"), None,
    )

    assert PersonalDataFilter().filter(record) is True
    assert record.getMessage() == "duplicate cpf ***.***.***-** for ***@***"
