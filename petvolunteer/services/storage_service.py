# petvolunteer/services/storage_service.py
import logging
from flask import Flask
from firebase_admin import storage


class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 범용 서비스 클래스입니다.
    이미지 바이트 업로드와 공개 URL 발급 기능을 제공합니다.
    """

    def __init__(self):
        """
        실제 버킷 객체는 init_app 메서드를 통해 주입됩니다.
        """
        self.bucket = None

    def init_app(self, app: Flask, bucket=None):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        :param bucket: 이미 만들어진 버킷 객체 (테스트 등에서 주입)
        """
        if bucket is not None:
            self.bucket = bucket
            return

        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def upload(self, path: str, data: bytes, content_type: str, cache_control: str = '3600') -> str:
        """
        바이트를 지정된 경로에 업로드합니다. 같은 경로의 기존 파일은 덮어쓰지 않습니다.

        :param path: 버킷 내 저장 경로 (예: "volunteer/1700000000000_ab12cd.jpg")
        :param data: 업로드할 파일 바이트
        :param content_type: 파일의 MIME 타입
        :param cache_control: Cache-Control max-age (초)
        :return: 업로드된 경로
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        blob = self.bucket.blob(path)
        blob.cache_control = f"max-age={cache_control}"
        blob.upload_from_string(data, content_type=content_type, if_generation_match=0)
        logging.info(f"Storage 업로드 완료 (path: {path}, size: {len(data)} bytes)")
        return path

    def make_public_and_get_url(self, file_path: str) -> str:
        """
        지정된 파일을 공개(public)로 설정하고 해당 URL을 반환합니다.

        :param file_path: 공개로 전환할 파일의 경로
        :return: 공개적으로 접근 가능한 URL
        """
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        blob = self.bucket.blob(file_path)

        if not blob.exists():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {file_path}")

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"파일 공개 전환 실패: {e}", exc_info=True)
            raise
