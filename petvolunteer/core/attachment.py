# petvolunteer/core/attachment.py
"""
글쓰기 화면의 이미지 첨부.

파일을 검사한 뒤 미리보기(data URL)를 먼저 만들고, Storage에 업로드해
레코드에 저장할 공개 URL을 얻습니다.
"""
import base64
import logging
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

from petvolunteer.services.storage_service import StorageService

MAX_IMAGE_BYTES = 5 * 1024 * 1024
DEFAULT_CONTENT_TYPE = 'image/jpeg'

# 레코드 종류별 Storage 폴더
IMAGE_FOLDERS = ('volunteer', 'restaurants', 'posts')

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


class ImageValidationError(ValueError):
    """업로드 전에 걸러지는 파일 오류 (크기 초과, 이미지가 아닌 파일)."""


class ImageUploadError(Exception):
    """Storage 업로드 또는 공개 URL 발급 실패."""


@dataclass
class ImageFile:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def generate_file_name(filename: str, timestamp_ms: Optional[int] = None, suffix: Optional[str] = None) -> str:
    """
    '<밀리초 타임스탬프>_<랜덤 문자열>.<확장자>' 형식의 충돌하기 어려운 파일명을 만듭니다.
    확장자는 원본 파일명의 마지막 '.' 뒤를 소문자로 사용합니다.
    """
    extension = filename.rsplit('.', 1)[-1].lower()
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = ''.join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"{timestamp_ms}_{suffix}.{extension}"


def to_data_url(image: ImageFile) -> str:
    encoded = base64.b64encode(image.data).decode('ascii')
    return f"data:{image.content_type or DEFAULT_CONTENT_TYPE};base64,{encoded}"


class ImageAttachment:
    """한 글쓰기 폼에 붙는 단일 이미지 첨부 상태."""

    def __init__(self, storage: StorageService, kind: str, max_bytes: int = MAX_IMAGE_BYTES, cache_control: str = '3600'):
        if kind not in IMAGE_FOLDERS:
            raise ValueError(f"'{kind}'은(는) 유효한 이미지 종류가 아닙니다.")
        self.storage = storage
        self.kind = kind
        self.max_bytes = max_bytes
        self.cache_control = cache_control
        self.preview: Optional[str] = None
        self.image_url: Optional[str] = None
        self.uploading = False

    def validate(self, image: ImageFile) -> None:
        if image.size > self.max_bytes:
            raise ImageValidationError(f"파일 크기는 {self.max_bytes // (1024 * 1024)}MB 이하만 가능합니다.")
        if not (image.content_type or '').startswith('image/'):
            raise ImageValidationError("이미지 파일만 업로드 가능합니다.")

    def select(self, image: ImageFile) -> str:
        """
        이미지를 검사하고 미리보기를 만든 뒤 업로드합니다.
        업로드에 실패하면 미리보기를 지우고 ImageUploadError를 던집니다.
        폼의 다른 입력값은 건드리지 않으므로 파일을 다시 골라 재시도할 수 있습니다.
        """
        self.validate(image)
        self.preview = to_data_url(image)

        self.uploading = True
        try:
            path = f"{self.kind}/{generate_file_name(image.filename)}"
            self.storage.upload(path, image.data, image.content_type or DEFAULT_CONTENT_TYPE, self.cache_control)
            self.image_url = self.storage.make_public_and_get_url(path)
        except Exception as e:
            logging.error(f"이미지 업로드 실패 (kind: {self.kind}, filename: {image.filename}): {e}", exc_info=True)
            self.preview = None
            raise ImageUploadError(f"이미지 업로드 오류: {str(e) or '알 수 없는 오류'}") from e
        finally:
            self.uploading = False

        return self.image_url

    def remove(self) -> None:
        self.image_url = None
        self.preview = None
