"""Photo byte storage: local disk or a MinIO bucket"""
import io
import logging
import os
from typing import Iterator

from minio import Minio
from minio.error import S3Error

from cleancity_api.config import settings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class FileStore:
    """Where photo bytes live. Paths returned by write() are stored on the Photo row."""

    def write(self, name: str, data: bytes) -> str:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def open(self, path: str) -> Iterator[bytes]:
        raise NotImplementedError


class LocalFileStore(FileStore):
    def __init__(self, root: str):
        self.root = root
        os.makedirs(self.root, exist_ok=True)

    def write(self, name: str, data: bytes) -> str:
        path = os.path.join(self.root, os.path.basename(name))
        with open(path, "wb") as f:
            f.write(data)
        return path

    def delete(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.info(f"File already absent, nothing to delete: {path}")

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def open(self, path: str) -> Iterator[bytes]:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk


class MinioFileStore(FileStore):
    """Stores photos as objects; the object name doubles as the stored path."""

    def __init__(self, client: Minio, bucket: str):
        self.client = client
        self.bucket = bucket

    def ensure_bucket(self):
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
                logger.info(f"Created MinIO bucket: {self.bucket}")
            else:
                logger.info(f"MinIO bucket exists: {self.bucket}")
        except S3Error as e:
            logger.error(f"Error ensuring bucket exists: {e}")
            raise

    def write(self, name: str, data: bytes) -> str:
        object_name = f"photos/{name}"
        self.client.put_object(
            bucket_name=self.bucket,
            object_name=object_name,
            data=io.BytesIO(data),
            length=len(data),
        )
        return object_name

    def delete(self, path: str) -> None:
        # remove_object does not fail for missing keys
        self.client.remove_object(self.bucket, path)

    def exists(self, path: str) -> bool:
        try:
            self.client.stat_object(self.bucket, path)
            return True
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject", "NoSuchBucket"):
                return False
            raise

    def open(self, path: str) -> Iterator[bytes]:
        response = self.client.get_object(self.bucket, path)
        try:
            for chunk in response.stream(CHUNK_SIZE):
                yield chunk
        finally:
            response.close()
            response.release_conn()


def get_minio_client() -> Minio:
    """Create and return a MinIO client instance"""
    return Minio(
        settings.MINIO_ENDPOINT,
        access_key=settings.MINIO_ACCESS_KEY,
        secret_key=settings.MINIO_SECRET_KEY,
        secure=settings.MINIO_SECURE,
    )


_file_store = None


def get_file_store() -> FileStore:
    """Dependency returning the configured file store (created on first use)."""
    global _file_store
    if _file_store is None:
        if settings.STORAGE_BACKEND == "minio":
            store = MinioFileStore(get_minio_client(), settings.MINIO_BUCKET)
            store.ensure_bucket()
        else:
            store = LocalFileStore(settings.UPLOAD_PATH)
        _file_store = store
    return _file_store
