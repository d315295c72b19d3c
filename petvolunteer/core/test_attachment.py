# petvolunteer/core/test_attachment.py
import re

import pytest
from flask import Flask

from petvolunteer.core.attachment import (
    ImageAttachment,
    ImageFile,
    ImageUploadError,
    ImageValidationError,
    MAX_IMAGE_BYTES,
    generate_file_name,
    to_data_url,
)
from petvolunteer.services.storage_service import StorageService


@pytest.fixture
def storage(fake_bucket):
    service = StorageService()
    service.init_app(Flask(__name__), bucket=fake_bucket)
    return service


def test_generate_file_name():
    assert generate_file_name('Dog.PNG', timestamp_ms=1700000000000, suffix='ab12cd') == '1700000000000_ab12cd.png'
    assert re.fullmatch(r'\d{13}_[0-9a-z]{6}\.jpeg', generate_file_name('photo.jpeg'))


def test_to_data_url():
    assert to_data_url(ImageFile('a.png', 'image/png', b'abc')) == 'data:image/png;base64,YWJj'


def test_rejects_large_file_before_upload(storage, fake_bucket):
    attachment = ImageAttachment(storage, 'posts')
    big = ImageFile('big.jpg', 'image/jpeg', b'0' * (MAX_IMAGE_BYTES + 1))

    with pytest.raises(ImageValidationError, match='5MB'):
        attachment.select(big)

    assert attachment.preview is None
    assert fake_bucket.files == {}


def test_rejects_non_image(storage, fake_bucket):
    attachment = ImageAttachment(storage, 'posts')

    with pytest.raises(ImageValidationError, match='이미지 파일만'):
        attachment.select(ImageFile('notes.txt', 'text/plain', b'hello'))

    assert fake_bucket.files == {}


def test_select_uploads_and_returns_public_url(storage, fake_bucket):
    attachment = ImageAttachment(storage, 'volunteer')

    url = attachment.select(ImageFile('Dog.PNG', 'image/png', b'png-bytes'))

    [(path, stored)] = fake_bucket.files.items()
    assert re.fullmatch(r'volunteer/\d{13}_[0-9a-z]{6}\.png', path)
    assert stored['cache_control'] == 'max-age=3600'
    assert stored['public'] is True
    assert url == attachment.image_url == f"https://storage.googleapis.com/test-bucket/{path}"
    assert attachment.preview.startswith('data:image/png;base64,')
    assert attachment.uploading is False

    attachment.remove()
    assert attachment.image_url is None and attachment.preview is None


def test_upload_failure_clears_preview(storage, fake_bucket):
    attachment = ImageAttachment(storage, 'restaurants')
    fake_bucket.fail_upload = RuntimeError("network down")

    with pytest.raises(ImageUploadError, match='이미지 업로드 오류: network down'):
        attachment.select(ImageFile('a.jpg', 'image/jpeg', b'jpg'))

    assert attachment.preview is None
    assert attachment.image_url is None
    assert attachment.uploading is False


def test_unknown_kind():
    with pytest.raises(ValueError):
        ImageAttachment(StorageService(), 'avatars')
