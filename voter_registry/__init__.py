"""유권자(eleitores) 관리용 조회/페이지네이션 레이어"""

__version__ = "1.0.0"
