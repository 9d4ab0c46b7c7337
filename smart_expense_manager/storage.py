"""Key-value backends for the locally owned state (goals, category budgets).

Values are JSON text. A key that does not exist reads as ``None``; any other
I/O failure is raised as ``StoreError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from smart_expense_manager import config
from smart_expense_manager.errors import StoreError
from smart_expense_manager.logging_setup import get_logger

logger = get_logger(__name__)


class MemoryBackend:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put(self, key: str, body: str) -> None:
        self._data[key] = body

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class LocalBackend:
    """Files under a root folder, one file per key."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / key

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read %s: %s", path, e)
            raise StoreError(f"Could not read {key}") from e

    def put(self, key: str, body: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(body, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise StoreError(f"Could not save {key}") from e

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StoreError(f"Could not delete {key}") from e


class S3Backend:
    def __init__(self, bucket: str, client=None, prefix: str = "") -> None:
        self.bucket = bucket
        self.prefix = prefix
        self.client = client or boto3.client("s3", region_name=config.AWS_REGION)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=self._key(key))
            return obj["Body"].read().decode("utf-8")
        except self.client.exceptions.NoSuchKey:
            return None
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 Download Error for %s: %s", key, e)
            raise StoreError(f"Could not read {key}") from e

    def put(self, key: str, body: str) -> None:
        try:
            self.client.put_object(Bucket=self.bucket, Key=self._key(key), Body=body.encode("utf-8"))
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 Upload Error for %s: %s", key, e)
            raise StoreError(f"Could not save {key}") from e

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=self._key(key))
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Could not delete {key}") from e


def default_backend():
    """S3 when ``S3_BUCKET`` is set, otherwise the local data folder."""
    if config.S3_BUCKET:
        return S3Backend(config.S3_BUCKET)
    return LocalBackend(config.DATA_DIR)
