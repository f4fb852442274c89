"""Image storage tests (S3-compatible client stubbed)."""
import io
from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError

from business.exceptions import UploadError, ValidationError
from business.storage import StorageService


class StubS3Client:
    """Records calls made through the boto3 S3 client interface."""

    def __init__(self, fail_on=None):
        self.uploads = []
        self.deleted = []
        self.fail_on = fail_on

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.fail_on and self.fail_on in key:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")
        self.uploads.append((bucket, key, fileobj.read(), ExtraArgs))

    def delete_object(self, Bucket, Key):
        if self.fail_on and self.fail_on in Key:
            raise ClientError({"Error": {"Code": "404", "Message": "missing"}}, "DeleteObject")
        self.deleted.append((Bucket, Key))

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://signed.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture
def s3():
    return StubS3Client()


@pytest.fixture
def storage(s3):
    return StorageService(client=s3, bucket="media", public_base_url="https://cdn.test")


class TestBuildKey:
    """Tests for StorageService.build_key."""

    def test_key_layout(self):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        key = StorageService.build_key("biz-1", "gallery", "Foto.PNG", now=now)
        prefix = f"businesses/biz-1/gallery/{int(now.timestamp() * 1000)}-"
        assert key.startswith(prefix)
        assert key.endswith(".png")
        assert len(key[len(prefix):-len(".png")]) == 8

    def test_missing_extension_defaults_to_jpg(self):
        assert StorageService.build_key("biz-1", "logo", "upload").endswith(".jpg")

    def test_business_id_required(self):
        with pytest.raises(ValidationError):
            StorageService.build_key("", "gallery", "a.jpg")


class TestUpload:
    """Tests for upload_image / upload_images."""

    def test_upload_image(self, storage, s3):
        url = storage.upload_image("biz-1", "gallery", io.BytesIO(b"img"), "a.jpg")
        bucket, key, body, extra = s3.uploads[0]
        assert bucket == "media"
        assert body == b"img"
        assert extra == {"ContentType": "image/jpeg"}
        assert url == f"https://cdn.test/{key}"

    def test_rejects_unknown_extension(self, storage, s3):
        with pytest.raises(UploadError) as exc:
            storage.upload_image("biz-1", "gallery", io.BytesIO(b"x"), "virus.exe")
        assert exc.value.filename == "virus.exe"
        assert s3.uploads == []

    def test_client_error_becomes_upload_error(self):
        storage = StorageService(client=StubS3Client(fail_on="gallery"), bucket="media",
                                 public_base_url="https://cdn.test")
        with pytest.raises(UploadError):
            storage.upload_image("biz-1", "gallery", io.BytesIO(b"x"), "a.jpg")

    def test_batch_continues_after_failure(self, storage, s3):
        urls, errors = storage.upload_images("biz-1", "gallery", [
            (io.BytesIO(b"1"), "a.jpg"),
            (io.BytesIO(b"2"), "b.bmp"),
            (io.BytesIO(b"3"), "c.webp"),
        ])
        assert len(urls) == 2
        assert [e.filename for e in errors] == ["b.bmp"]

    def test_batch_uses_given_content_type(self, storage, s3):
        storage.upload_images("biz-1", "gallery", [
            (io.BytesIO(b"1"), "a.png", "image/png"),
            (io.BytesIO(b"2"), "b.gif", None),
            (io.BytesIO(b"3"), "c.webp"),
        ])
        content_types = [extra["ContentType"] for _, _, _, extra in s3.uploads]
        assert content_types == ["image/png", "image/gif", "image/webp"]


class TestUrls:
    """Tests for signed URLs, key extraction and deletion."""

    def test_signed_url(self, storage):
        url = storage.signed_url("businesses/biz-1/logo/x.jpg", expires_in=60)
        assert url == "https://signed.test/media/businesses/biz-1/logo/x.jpg?expires=60"

    def test_key_from_public_url(self, storage):
        assert storage.key_from_url("https://cdn.test/businesses/b/x.jpg") == "businesses/b/x.jpg"

    def test_key_from_path_style_url(self, storage):
        assert storage.key_from_url("https://s3.test/media/businesses/b/x.jpg") == "businesses/b/x.jpg"

    def test_delete_image(self, storage, s3):
        assert storage.delete_image("https://cdn.test/businesses/b/x.jpg") is True
        assert s3.deleted == [("media", "businesses/b/x.jpg")]

    def test_delete_failure_returns_false(self):
        storage = StorageService(client=StubS3Client(fail_on="x.jpg"), bucket="media",
                                 public_base_url="https://cdn.test")
        assert storage.delete_image("https://cdn.test/businesses/b/x.jpg") is False

    def test_delete_empty_url(self, storage):
        assert storage.delete_image("") is False
