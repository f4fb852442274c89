"""图片存储（S3 兼容对象存储）

存储路径：businesses/{商家ID}/{子资源}/{毫秒时间戳}-{随机串}.{扩展名}

批量上传逐个进行，单个文件失败不会中断其余文件，
失败信息以 UploadError 列表返回给调用方。
"""
import os
import uuid
from datetime import datetime, timezone
from typing import BinaryIO, List, Optional, Tuple
from urllib.parse import urlparse

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from business.exceptions import UploadError, ValidationError
from config.settings import settings

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}
ALLOWED_EXTENSIONS = set(CONTENT_TYPES)


def guess_content_type(filename: Optional[str]) -> str:
    """按扩展名推断图片类型，未知时按 JPEG 处理"""
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    return CONTENT_TYPES.get(ext, "image/jpeg")


class StorageService:
    """对象存储服务

    Args:
        client: 可注入的 S3 客户端，默认按配置创建
        bucket: 存储桶名称
        public_base_url: 公开访问地址前缀，为空时使用 endpoint/bucket
    """

    def __init__(self, client=None, bucket: Optional[str] = None,
                 public_base_url: Optional[str] = None):
        self.bucket = bucket or settings.storage_bucket
        self.public_base_url = (
            public_base_url or settings.storage_public_base_url
            or f"{settings.storage_endpoint_url.rstrip('/')}/{self.bucket}"
        ).rstrip("/")
        self._client = client

    def _get_client(self):
        if self._client is None:
            if not settings.storage_endpoint_url or not self.bucket:
                raise UploadError("-", "El servicio de almacenamiento no está configurado.")
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.storage_endpoint_url,
                aws_access_key_id=settings.storage_access_key,
                aws_secret_access_key=settings.storage_secret_key,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    @staticmethod
    def build_key(business_id: str, subresource: str, filename: str,
                  now: Optional[datetime] = None) -> str:
        if not business_id:
            raise ValidationError("Se requiere el ID del negocio para subir imágenes.")
        now = now or datetime.now(timezone.utc)
        timestamp = int(now.timestamp() * 1000)
        ext = os.path.splitext(filename or "")[1].lstrip(".").lower() or "jpg"
        random_part = uuid.uuid4().hex[:8]
        return f"businesses/{business_id}/{subresource}/{timestamp}-{random_part}.{ext}"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def upload_image(self, business_id: str, subresource: str,
                     fileobj: BinaryIO, filename: str,
                     content_type: str = "image/jpeg") -> str:
        """上传单张图片，返回公开访问 URL

        Raises:
            UploadError: 扩展名不支持或存储服务返回错误
        """
        ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
        if ext and ext not in ALLOWED_EXTENSIONS:
            raise UploadError(filename, "Formato de imagen no permitido.")

        key = self.build_key(business_id, subresource, filename)
        try:
            self._get_client().upload_fileobj(
                fileobj, self.bucket, key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"图片上传失败 {key}: {e}")
            raise UploadError(filename, str(e)) from e
        logger.info(f"图片已上传: {key}")
        return self.public_url(key)

    def upload_images(self, business_id: str, subresource: str,
                      files: List[Tuple]
                      ) -> Tuple[List[str], List[UploadError]]:
        """逐个上传，返回 (成功的 URL 列表, 失败列表)

        files 中每项为 (fileobj, filename) 或 (fileobj, filename, content_type)，
        未给出 content_type 时按扩展名推断。
        """
        urls, errors = [], []
        for fileobj, filename, *rest in files:
            content_type = (rest[0] if rest else None) or guess_content_type(filename)
            try:
                urls.append(self.upload_image(business_id, subresource, fileobj,
                                              filename, content_type=content_type))
            except UploadError as e:
                errors.append(e)
        return urls, errors

    def signed_url(self, key: str, expires_in: Optional[int] = None) -> str:
        return self._get_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in or settings.storage_signed_url_expiry,
        )

    def key_from_url(self, url: str) -> Optional[str]:
        if url.startswith(self.public_base_url + "/"):
            return url[len(self.public_base_url) + 1:]
        path = urlparse(url).path.lstrip("/")
        if path.startswith(f"{self.bucket}/"):
            path = path[len(self.bucket) + 1:]
        return path or None

    def delete_image(self, url: str) -> bool:
        """删除图片，失败时返回 False（不抛出异常）"""
        key = self.key_from_url(url or "")
        if not key:
            return False
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=key)
            return True
        except Exception as e:
            logger.warning(f"图片删除失败 {url}: {e}")
            return False
