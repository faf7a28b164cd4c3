#!/usr/bin/env python3
"""
Fingerprint storage.

Every backend offers get_value(key, default) and set_value(key, value).
Failures never propagate: reads fall back to the default and writes are
logged, so a storage outage looks like "everything is new".
"""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FileSystemStorage:
    """One small JSON file per key in a cache directory."""

    def __init__(self, cache_dir: str = ".cache"):
        self.cache_dir = Path(cache_dir)

    def _path(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_\-]", "_", key)
        return self.cache_dir / f"{safe_key}.json"

    def get_value(self, key: str, default: str = "") -> str:
        path = self._path(key)
        try:
            if not path.exists():
                return default
            data = json.loads(path.read_text(encoding="utf-8"))
            return data.get("value") or default
        except (json.JSONDecodeError, OSError, AttributeError) as e:
            logger.warning(f"State read error for {key}: {e}")
            return default

    def set_value(self, key: str, value: str) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(
                json.dumps({"value": value, "updated": _now()}, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning(f"State write error for {key}: {e}")

    def items(self) -> dict[str, str]:
        """All stored values, keyed by file name."""
        if not self.cache_dir.exists():
            return {}
        return {path.stem: self.get_value(path.stem) for path in sorted(self.cache_dir.glob("*.json"))}

    def clear(self) -> int:
        """Delete every stored fingerprint. Returns the number removed."""
        removed = 0
        if not self.cache_dir.exists():
            return removed
        for path in self.cache_dir.glob("*.json"):
            path.unlink()
            removed += 1
        return removed


class DynamoDBStorage:
    """Fingerprints in a DynamoDB table with a string partition key "key"."""

    def __init__(self, table_name: str, table=None):
        self.table_name = table_name
        self.table = table if table is not None else boto3.resource("dynamodb").Table(table_name)

    def get_value(self, key: str, default: str = "") -> str:
        try:
            response = self.table.get_item(Key={"key": key})
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"DynamoDB read error for {key}: {e}")
            return default
        item = response.get("Item")
        if not item:
            return default
        return item.get("value") or default

    def set_value(self, key: str, value: str) -> None:
        try:
            self.table.put_item(Item={"key": key, "value": value, "updated": _now()})
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"DynamoDB write error for {key}: {e}")

    def items(self) -> dict[str, str]:
        try:
            response = self.table.scan()
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"DynamoDB scan error: {e}")
            return {}
        return {item["key"]: item.get("value", "") for item in response.get("Items", [])}


class PreviewStorage:
    """Reads through to another store; writes stay in memory."""

    def __init__(self, inner):
        self.inner = inner
        self.pending: dict[str, str] = {}

    def get_value(self, key: str, default: str = "") -> str:
        if key in self.pending:
            return self.pending[key]
        return self.inner.get_value(key, default)

    def set_value(self, key: str, value: str) -> None:
        self.pending[key] = value


def build_storage(config, table=None):
    """
    Create the backend selected by config.storage_backend.

    Args:
        config: Config instance
        table: Optional pre-built DynamoDB table resource

    Raises:
        ValueError: for an unknown backend name
    """
    backend = config.storage_backend
    if backend == "file":
        return FileSystemStorage(config.cache_dir)
    if backend == "dynamodb":
        return DynamoDBStorage(config.dynamodb_table, table=table)
    raise ValueError(f"Unknown storage backend: {backend}")
