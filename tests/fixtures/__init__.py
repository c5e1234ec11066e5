"""테스트 데이터 (시드 유권자, API payload)"""
