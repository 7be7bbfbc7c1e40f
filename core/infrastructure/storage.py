"""
文件存储服务模块。
提供对象存储接口，以及S3兼容存储和Django本地存储两种实现。
"""
from abc import ABC, abstractmethod
import io
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

import boto3
from botocore.exceptions import ClientError
from loguru import logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.domain.exceptions import EntityNotFoundException, ExternalServiceException

FileContent = Union[bytes, io.IOBase]


class FileStorageService(ABC):
    """对象存储服务接口"""

    @abstractmethod
    def upload_file(self, key: str, content: FileContent, content_type: str,
                    metadata: Optional[Dict[str, str]] = None) -> str:
        """
        上传文件。

        Args:
            key: 对象键，如 products/{product_id}/{uuid}.jpg
            content: 文件内容或文件对象
            content_type: MIME类型
            metadata: 对象元数据

        Returns:
            文件的访问URL

        Raises:
            ExternalServiceException: 存储服务调用失败
        """
        pass

    @abstractmethod
    def download_file(self, key: str) -> bytes:
        """
        下载文件。

        Raises:
            EntityNotFoundException: 文件不存在
        """
        pass

    @abstractmethod
    def delete_file(self, key: str) -> bool:
        pass

    @abstractmethod
    def file_exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def get_url(self, key: str) -> str:
        pass


def _read_content(content: FileContent) -> bytes:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    return content.read()


def _is_not_found(error: ClientError) -> bool:
    code = str(error.response.get("Error", {}).get("Code", ""))
    return code in ("404", "NoSuchKey", "NotFound")


class S3StorageService(FileStorageService):
    """
    S3兼容对象存储服务。
    支持AWS S3、DigitalOcean Spaces、Backblaze B2和MinIO，公开URL的格式由provider决定。
    """

    def __init__(
        self,
        s3_client: Any,
        bucket_name: str,
        provider: str = "AWS",
        service_url: Optional[str] = None,
        region: str = "us-east-1"
    ):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.provider = (provider or "AWS").upper()
        self.service_url = (service_url or "").rstrip("/")
        self.region = region

    @classmethod
    def from_settings(cls, options: Dict[str, Any]) -> 'S3StorageService':
        """
        根据S3_SETTINGS创建存储服务。

        Args:
            options: 包含ACCESS_KEY、SECRET_KEY、REGION、SERVICE_URL、BUCKET_NAME、PROVIDER、FORCE_PATH_STYLE

        Returns:
            S3存储服务
        """
        client_kwargs = {
            "region_name": options.get("REGION", "us-east-1"),
            "aws_access_key_id": options.get("ACCESS_KEY") or None,
            "aws_secret_access_key": options.get("SECRET_KEY") or None,
        }
        if options.get("SERVICE_URL"):
            client_kwargs["endpoint_url"] = options["SERVICE_URL"]
        if options.get("FORCE_PATH_STYLE"):
            from botocore.config import Config
            client_kwargs["config"] = Config(s3={"addressing_style": "path"})
        return cls(
            boto3.client("s3", **client_kwargs),
            bucket_name=options.get("BUCKET_NAME", ""),
            provider=options.get("PROVIDER", "AWS"),
            service_url=options.get("SERVICE_URL"),
            region=options.get("REGION", "us-east-1"),
        )

    def get_url(self, key: str) -> str:
        if self.provider == "DIGITALOCEAN" and self.service_url:
            return f"https://{self.bucket_name}.{urlparse(self.service_url).netloc}/{key}"
        if self.provider == "BACKBLAZE" and self.service_url:
            return f"https://{urlparse(self.service_url).netloc}/{key}"
        if self.service_url:
            return f"{self.service_url}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ClientError),
        reraise=True
    )
    def _put_object(self, key: str, body: bytes, content_type: str, metadata: Dict[str, str]) -> None:
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=metadata,
        )

    def upload_file(self, key: str, content: FileContent, content_type: str,
                    metadata: Optional[Dict[str, str]] = None) -> str:
        try:
            self._put_object(key, _read_content(content), content_type, metadata or {})
        except ClientError as e:
            logger.error(f"上传文件到S3失败: bucket={self.bucket_name}, key={key}: {e}")
            raise ExternalServiceException("S3", f"上传文件失败: {e}", code="Storage.UploadFailed")
        logger.debug(f"文件已上传: {key}")
        return self.get_url(key)

    def download_file(self, key: str) -> bytes:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise EntityNotFoundException("File", key)
            logger.error(f"从S3下载文件失败: key={key}: {e}")
            raise ExternalServiceException("S3", f"下载文件失败: {e}", code="Storage.DownloadFailed")
        return response["Body"].read()

    def delete_file(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            logger.error(f"从S3删除文件失败: key={key}: {e}")
            raise ExternalServiceException("S3", f"删除文件失败: {e}", code="Storage.DeleteFailed")
        return True

    def file_exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise ExternalServiceException("S3", f"检查文件失败: {e}", code="Storage.Failure")
        return True

    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        files = []
        try:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for item in page.get("Contents", []):
                    files.append({
                        "key": item["Key"],
                        "size": item.get("Size", 0),
                        "lastModified": item.get("LastModified"),
                        "eTag": str(item.get("ETag", "")).strip('"'),
                    })
        except ClientError as e:
            raise ExternalServiceException("S3", f"列出文件失败: {e}", code="Storage.Failure")
        return files


class LocalStorageService(FileStorageService):
    """
    基于Django默认存储后端的实现。
    用于开发与测试环境。
    """

    def __init__(self, storage: Any = None):
        if storage is None:
            from django.core.files.storage import default_storage
            storage = default_storage
        self.storage = storage

    def upload_file(self, key: str, content: FileContent, content_type: str,
                    metadata: Optional[Dict[str, str]] = None) -> str:
        from django.core.files.base import ContentFile

        if self.storage.exists(key):
            self.storage.delete(key)
        saved = self.storage.save(key, ContentFile(_read_content(content)))
        return self.storage.url(saved)

    def download_file(self, key: str) -> bytes:
        if not self.storage.exists(key):
            raise EntityNotFoundException("File", key)
        with self.storage.open(key, "rb") as f:
            return f.read()

    def delete_file(self, key: str) -> bool:
        if not self.storage.exists(key):
            return False
        self.storage.delete(key)
        return True

    def file_exists(self, key: str) -> bool:
        return self.storage.exists(key)

    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        directory, _, name_prefix = prefix.rpartition("/")
        try:
            _, filenames = self.storage.listdir(directory)
        except FileNotFoundError:
            return []
        keys = [
            f"{directory}/{name}" if directory else name
            for name in filenames if name.startswith(name_prefix)
        ]
        return [{"key": key, "size": self.storage.size(key)} for key in keys]

    def get_url(self, key: str) -> str:
        return self.storage.url(key)


def create_storage_service() -> FileStorageService:
    """
    根据settings.S3_SETTINGS创建存储服务，BACKEND为s3或local。
    """
    from django.conf import settings

    options = getattr(settings, "S3_SETTINGS", {})
    if str(options.get("BACKEND", "local")).lower() == "s3":
        return S3StorageService.from_settings(options)
    return LocalStorageService()
