# petvolunteer/core/config.py

import os


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명에 사용되는 키. 로그인 세션 복원(토큰 검증)에 사용됩니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 이미지가 업로드될 Firebase Storage 버킷 이름
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 이미지 첨부 제한 (기본 5MB) 및 업로드 시 Cache-Control max-age(초)
    IMAGE_MAX_BYTES = int(os.getenv('IMAGE_MAX_BYTES', 5 * 1024 * 1024))
    IMAGE_CACHE_CONTROL = os.getenv('IMAGE_CACHE_CONTROL', '3600')

    # 봉사활동 모집 인원을 지정하지 않았을 때의 기본값
    DEFAULT_MAX_PARTICIPANTS = int(os.getenv('DEFAULT_MAX_PARTICIPANTS', 10))

    # 업로드 요청 본문 최대 크기. 이미지 크기 검사는 IMAGE_MAX_BYTES로 따로 합니다.
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024


class DevelopmentConfig(Config):
    """개발 환경 설정. 코드 변경 시 자동 재시작, 상세 디버그 정보를 제공합니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경 설정. Firestore/Storage 클라이언트는 테스트에서 주입합니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-for-pet-volunteer-backend')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET', 'test-bucket')


class ProductionConfig(Config):
    """운영 환경 설정"""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig,
)
