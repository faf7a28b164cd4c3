import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from config import Config
from storage import DynamoDBStorage, FileSystemStorage, PreviewStorage, build_storage
from conftest import MemoryStorage


def client_error(operation):
    return ClientError({"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}}, operation)


class TestFileSystemStorage:
    def test_missing_key_returns_default(self, tmp_path):
        storage = FileSystemStorage(str(tmp_path / "cache"))
        assert storage.get_value("claude") == ""
        assert storage.get_value("claude", "fallback") == "fallback"

    def test_round_trip_creates_directory(self, tmp_path):
        storage = FileSystemStorage(str(tmp_path / "cache"))
        storage.set_value("aiSdk", "abc123")

        assert storage.get_value("aiSdk") == "abc123"
        data = json.loads((tmp_path / "cache" / "aiSdk.json").read_text())
        assert data["value"] == "abc123"
        assert "updated" in data

    def test_overwrites_previous_value(self, tmp_path):
        storage = FileSystemStorage(str(tmp_path))
        storage.set_value("viem", "old")
        storage.set_value("viem", "new")
        assert storage.get_value("viem") == "new"

    def test_corrupt_file_returns_default(self, tmp_path, caplog):
        (tmp_path / "wagmi.json").write_text("{not json")
        storage = FileSystemStorage(str(tmp_path))

        assert storage.get_value("wagmi") == ""
        assert "State read error for wagmi" in caplog.text

    def test_unreadable_directory_returns_default(self, tmp_path, monkeypatch, caplog):
        def exists(self):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "exists", exists)
        storage = FileSystemStorage(str(tmp_path))

        assert storage.get_value("viem", "fallback") == "fallback"
        assert "State read error for viem" in caplog.text

    def test_write_failure_is_logged(self, tmp_path, caplog):
        blocker = tmp_path / "cache"
        blocker.write_text("a file where the directory should be")
        storage = FileSystemStorage(str(blocker))

        storage.set_value("claude", "abc")

        assert "State write error for claude" in caplog.text

    def test_items_and_clear(self, tmp_path):
        storage = FileSystemStorage(str(tmp_path))
        storage.set_value("claude", "1")
        storage.set_value("cursor", "2")

        assert storage.items() == {"claude": "1", "cursor": "2"}
        assert storage.clear() == 2
        assert storage.items() == {}

    def test_items_without_directory(self, tmp_path):
        storage = FileSystemStorage(str(tmp_path / "missing"))
        assert storage.items() == {}
        assert storage.clear() == 0


class TestDynamoDBStorage:
    def test_get_value(self):
        table = MagicMock()
        table.get_item.return_value = {"Item": {"key": "v0", "value": "hash"}}
        storage = DynamoDBStorage("fingerprints", table=table)

        assert storage.get_value("v0") == "hash"
        table.get_item.assert_called_once_with(Key={"key": "v0"})

    def test_missing_item_returns_default(self):
        table = MagicMock()
        table.get_item.return_value = {}
        assert DynamoDBStorage("fingerprints", table=table).get_value("v0", "none") == "none"

    def test_read_error_returns_default(self, caplog):
        table = MagicMock()
        table.get_item.side_effect = client_error("GetItem")

        assert DynamoDBStorage("fingerprints", table=table).get_value("v0") == ""
        assert "DynamoDB read error for v0" in caplog.text

    def test_set_value(self):
        table = MagicMock()
        DynamoDBStorage("fingerprints", table=table).set_value("elements", "hash")

        item = table.put_item.call_args.kwargs["Item"]
        assert item["key"] == "elements"
        assert item["value"] == "hash"
        assert "updated" in item

    def test_write_error_is_logged(self, caplog):
        table = MagicMock()
        table.put_item.side_effect = client_error("PutItem")

        DynamoDBStorage("fingerprints", table=table).set_value("elements", "hash")

        assert "DynamoDB write error for elements" in caplog.text

    def test_items(self):
        table = MagicMock()
        table.scan.return_value = {"Items": [{"key": "v0", "value": "a"}, {"key": "viem", "value": "b"}]}
        assert DynamoDBStorage("fingerprints", table=table).items() == {"v0": "a", "viem": "b"}


class TestPreviewStorage:
    def test_writes_stay_in_memory(self):
        inner = MemoryStorage({"claude": "old"})
        preview = PreviewStorage(inner)

        assert preview.get_value("claude") == "old"
        preview.set_value("claude", "new")

        assert preview.get_value("claude") == "new"
        assert inner.values == {"claude": "old"}
        assert inner.writes == []


class TestBuildStorage:
    def test_file_backend(self, tmp_path):
        config = Config("token", "chat", cache_dir=str(tmp_path))
        storage = build_storage(config)
        assert isinstance(storage, FileSystemStorage)
        assert storage.cache_dir == tmp_path

    def test_dynamodb_backend(self):
        config = Config("token", "chat", storage_backend="dynamodb", dynamodb_table="fp")
        storage = build_storage(config, table=MagicMock())
        assert isinstance(storage, DynamoDBStorage)
        assert storage.table_name == "fp"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            build_storage(Config("token", "chat", storage_backend="redis"))
