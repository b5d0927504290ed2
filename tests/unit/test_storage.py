"""Unit tests for expense storage gateways."""

import json
import pytest
from decimal import Decimal
from unittest.mock import patch
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from expenses.storage import (
    DEFAULT_STORAGE_KEY,
    FileStorage,
    MemoryStorage,
    S3Storage,
    storage_from_env
)
from shared.exceptions import StorageError


class TestMemoryStorage:
    """Test cases for the shared load/save behaviour, using in-memory slots."""

    @pytest.fixture
    def slots(self):
        """Backing key-value slots."""
        return {}

    @pytest.fixture
    def storage(self, slots):
        """In-memory gateway over the slots."""
        return MemoryStorage(slots=slots)

    def test_load_missing_key_is_empty(self, storage):
        """Test a missing key loads as an empty collection without error."""
        result = storage.load()

        assert result.ok
        assert result.expenses == []

    def test_save_then_load_empty(self, storage):
        """Test saving an empty collection loads back as empty, not an error."""
        assert storage.save_all([]).ok

        result = storage.load()

        assert result.ok
        assert result.expenses == []

    def test_save_then_load(self, storage, sample_expenses):
        """Test the collection survives a save/load cycle."""
        storage.save_all(sample_expenses)

        result = storage.load()

        assert result.ok
        assert result.expenses == sample_expenses

    def test_wire_format(self, storage, slots, sample_expenses):
        """Test the stored document is a camelCase JSON array."""
        storage.save_all(sample_expenses[:1])

        stored = json.loads(slots[DEFAULT_STORAGE_KEY])

        assert stored == [{
            'id': 'exp1',
            'amount': 50,
            'category': 'Food',
            'description': 'Weekly groceries',
            'date': '2024-01-05',
            'createdAt': '2024-01-01T09:00:00+00:00',
            'updatedAt': '2024-01-01T09:00:00+00:00'
        }]

    def test_amounts_stay_exact(self, storage, make_expense):
        """Test fractional amounts are read back as exact decimals."""
        storage.save_all([make_expense('a', '0.1', 'Food', '2024-01-01')])

        assert storage.load().expenses[0].amount == Decimal('0.1')

    def test_save_overwrites(self, storage, sample_expenses):
        """Test every save replaces the whole collection."""
        storage.save_all(sample_expenses)
        storage.save_all(sample_expenses[1:])

        assert [e.id for e in storage.load().expenses] == ['exp2', 'exp3']

    @pytest.mark.parametrize('payload', [
        'not json',
        '{"id": "x"}',
        '[{"id": "x", "amount": 5}]',
        '[{"id": "x", "amount": 5, "category": "Travel", "description": "d", "date": "2024-01-01",'
        ' "createdAt": "2024-01-01T00:00:00Z", "updatedAt": "2024-01-01T00:00:00Z"}]'
    ])
    def test_load_malformed_is_empty(self, slots, storage, payload, caplog):
        """Test corrupt content loads as empty and is logged."""
        slots[DEFAULT_STORAGE_KEY] = payload

        result = storage.load()

        assert not result.ok
        assert result.expenses == []
        assert 'malformed' in result.error
        assert 'malformed' in caplog.text

    def test_load_malformed_strict_raises(self, slots):
        """Test strict mode surfaces corrupt content."""
        slots[DEFAULT_STORAGE_KEY] = 'not json'

        with pytest.raises(StorageError):
            MemoryStorage(slots=slots, strict=True).load()

    def test_load_drops_duplicate_ids(self, storage, sample_expenses):
        """Test duplicate ids in stored data keep the first record."""
        storage.save_all([sample_expenses[0], sample_expenses[0], sample_expenses[1]])

        assert [e.id for e in storage.load().expenses] == ['exp1', 'exp2']

    def test_save_failure_is_soft(self, storage, sample_expenses):
        """Test write errors are reported, not raised."""
        with patch.object(MemoryStorage, '_write', side_effect=OSError('quota exceeded')):
            result = storage.save_all(sample_expenses)

        assert not result.ok
        assert 'quota exceeded' in result.error

    def test_save_failure_strict_raises(self, sample_expenses):
        """Test strict mode raises on write errors."""
        storage = MemoryStorage(strict=True)

        with patch.object(MemoryStorage, '_write', side_effect=OSError('quota exceeded')):
            with pytest.raises(StorageError, match='quota exceeded'):
                storage.save_all(sample_expenses)

    def test_clear(self, storage, slots, sample_expenses):
        """Test clearing removes the stored key."""
        storage.save_all(sample_expenses)

        assert storage.clear().ok
        assert DEFAULT_STORAGE_KEY not in slots

    def test_shared_slots(self, slots, sample_expenses):
        """Test gateways over the same slots see each other's writes."""
        MemoryStorage(slots=slots).save_all(sample_expenses)

        assert len(MemoryStorage(slots=slots).load().expenses) == 3


class TestFileStorage:
    """Test cases for the JSON file gateway."""

    def test_missing_file_is_empty(self, tmp_path):
        """Test a missing file loads as empty."""
        result = FileStorage(tmp_path / 'expenses.json').load()

        assert result.ok
        assert result.expenses == []

    def test_round_trip_creates_directories(self, tmp_path, sample_expenses):
        """Test saving creates parent directories and leaves no temp files."""
        path = tmp_path / 'nested' / 'expenses.json'
        storage = FileStorage(path)

        assert storage.save_all(sample_expenses).ok
        assert storage.load().expenses == sample_expenses
        assert os.listdir(path.parent) == ['expenses.json']

    def test_corrupt_file_is_empty(self, tmp_path):
        """Test a corrupt file loads as empty."""
        path = tmp_path / 'expenses.json'
        path.write_text('{broken', encoding='utf-8')

        result = FileStorage(path).load()

        assert not result.ok
        assert result.expenses == []

    def test_undecodable_file_is_empty(self, tmp_path):
        """Test a file that isn't UTF-8 loads as empty instead of raising."""
        path = tmp_path / 'expenses.json'
        path.write_bytes(b'\xff\xfe[garbage')

        result = FileStorage(path).load()

        assert not result.ok
        assert result.expenses == []

    def test_undecodable_file_strict_raises(self, tmp_path):
        """Test strict mode reports undecodable files as StorageError."""
        path = tmp_path / 'expenses.json'
        path.write_bytes(b'\xff\xfe[garbage')

        with pytest.raises(StorageError, match='Error loading expenses'):
            FileStorage(path, strict=True).load()

    def test_clear_missing_file(self, tmp_path):
        """Test clearing when nothing was saved succeeds."""
        assert FileStorage(tmp_path / 'expenses.json').clear().ok


class TestStorageFromEnv:
    """Test cases for environment configuration."""

    def test_default_is_file(self, monkeypatch, tmp_path):
        """Test the file backend is the default."""
        monkeypatch.delenv('EXPENSES_STORAGE', raising=False)
        monkeypatch.delenv('EXPENSES_STRICT', raising=False)
        monkeypatch.setenv('EXPENSES_FILE', str(tmp_path / 'data.json'))

        storage = storage_from_env()

        assert isinstance(storage, FileStorage)
        assert storage.path == tmp_path / 'data.json'
        assert not storage.strict

    def test_memory_strict(self, monkeypatch):
        """Test backend selection and strict mode."""
        monkeypatch.setenv('EXPENSES_STORAGE', 'memory')
        monkeypatch.setenv('EXPENSES_STRICT', 'true')
        monkeypatch.setenv('EXPENSES_KEY', 'custom-key')

        storage = storage_from_env()

        assert isinstance(storage, MemoryStorage)
        assert storage.strict
        assert storage.key == 'custom-key'

    def test_s3_requires_bucket(self, monkeypatch):
        """Test S3 storage needs a bucket."""
        monkeypatch.setenv('EXPENSES_STORAGE', 's3')
        monkeypatch.delenv('EXPENSES_BUCKET', raising=False)

        with pytest.raises(StorageError, match='EXPENSES_BUCKET'):
            storage_from_env()

    def test_s3_backend(self, monkeypatch):
        """Test S3 storage uses the configured bucket."""
        monkeypatch.setenv('EXPENSES_STORAGE', 's3')
        monkeypatch.setenv('EXPENSES_BUCKET', 'expenses-bucket')
        monkeypatch.delenv('USE_LOCALSTACK', raising=False)

        with patch('shared.s3.boto3') as mock_boto3:
            storage = storage_from_env()

        assert isinstance(storage, S3Storage)
        assert storage.s3.bucket_name == 'expenses-bucket'
        mock_boto3.client.assert_called_once_with('s3')

    def test_unknown_backend(self, monkeypatch):
        """Test unknown backends are rejected."""
        monkeypatch.setenv('EXPENSES_STORAGE', 'redis')

        with pytest.raises(StorageError):
            storage_from_env()
