"""데이터베이스 모델"""
import uuid
from datetime import date, datetime, timezone
from sqlalchemy import Boolean, Column, Date, DateTime, Index, String, Text
from voter_registry.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Voter(Base):
    """유권자 테이블 (eleitores)"""

    __tablename__ = "eleitores"

    id = Column(String(36), primary_key=True, default=_new_id)

    # 필수 항목
    nome = Column(String(255), nullable=False, index=True)
    regiao = Column(String(50), nullable=False, index=True)
    cidade = Column(String(120), nullable=False, index=True)
    genero = Column(String(20), nullable=False, index=True)

    # 연락처
    email = Column(String(255), nullable=True, index=True)
    cpf = Column(String(14), nullable=True, unique=True)
    telefone = Column(String(30), nullable=True)

    # SNS
    instagram = Column(String(120), nullable=True)
    facebook = Column(String(120), nullable=True)
    tiktok = Column(String(120), nullable=True)

    # 주소
    bairro = Column(String(120), nullable=True)
    cep = Column(String(10), nullable=True)
    endereco = Column(String(255), nullable=True)

    # 인구통계
    religiao = Column(String(50), nullable=True, index=True)
    profissao = Column(String(120), nullable=True)
    escola = Column(String(255), nullable=True)
    data_nascimento = Column(Date, nullable=True)

    observacoes = Column(Text, nullable=True)
    interacao = Column(Boolean, nullable=False, default=False, index=True)

    # 타임스탬프 (저장소가 부여)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # keyset 페이지네이션용 복합 인덱스
    __table_args__ = (
        Index("idx_eleitores_created_id", "created_at", "id"),
    )

    def to_dict(self) -> dict:
        row = {}
        for column in self.__table__.columns:
            value = getattr(self, column.name)
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            row[column.name] = value
        return row

    def __repr__(self) -> str:
        return f"<Voter(id={self.id}, regiao={self.regiao}, cidade={self.cidade})>"
