"""Storage gateways persisting the whole expense collection under one key."""

import os
import logging
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from shared.exceptions import StorageError
from shared.s3 import S3Client
from shared.serialization import dumps, loads
from expenses.models import Expense

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = 'expense-tracker-data'
DEFAULT_STORAGE_FILE = Path.home() / '.expense-tracker' / f'{DEFAULT_STORAGE_KEY}.json'

_EXPENSE_LIST = TypeAdapter(List[Expense])


@dataclass
class StorageResult:
    """Outcome of a storage call. Loads also carry the expenses that were read."""

    ok: bool
    expenses: List[Expense] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def success(cls, expenses: Optional[Iterable[Expense]] = None) -> 'StorageResult':
        return cls(ok=True, expenses=list(expenses or []))

    @classmethod
    def failure(cls, reason: str) -> 'StorageResult':
        return cls(ok=False, error=reason)


class StorageGateway(ABC):
    """
    Reads and writes the full expense list as one JSON document.

    By default failures are logged and reported through StorageResult so a
    broken or full store never interrupts the caller. With strict=True they
    raise StorageError instead.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    @abstractmethod
    def _read(self) -> Optional[str]:
        """Return the stored payload, or None if nothing is stored."""

    @abstractmethod
    def _write(self, payload: str) -> None:
        """Replace the stored payload."""

    @abstractmethod
    def _remove(self) -> None:
        """Delete the stored payload if present."""

    def load(self) -> StorageResult:
        """
        Load every stored expense.

        Returns:
            Successful result with the expenses (empty when nothing is stored),
            or a failed result with an empty list when the payload is unreadable

        Raises:
            StorageError: On failure, in strict mode only
        """
        try:
            payload = self._read()
        except (StorageError, OSError, UnicodeDecodeError) as e:
            return self._fail(f"Error loading expenses: {e}", e)

        if payload is None or not payload.strip():
            logger.debug("No stored expenses found")
            return StorageResult.success()

        try:
            expenses = _EXPENSE_LIST.validate_python(loads(payload))
        except (ValueError, PydanticValidationError) as e:
            return self._fail(f"Stored expenses are malformed: {e}", e)

        expenses = _drop_duplicate_ids(expenses)
        logger.debug(f"Loaded {len(expenses)} expenses")
        return StorageResult.success(expenses)

    def save_all(self, expenses: Iterable[Expense]) -> StorageResult:
        """
        Serialize and overwrite the stored collection.

        Args:
            expenses: The complete collection to store

        Returns:
            Result describing whether the write succeeded

        Raises:
            StorageError: On failure, in strict mode only
        """
        expenses = list(expenses)
        try:
            payload = dumps([expense.model_dump(by_alias=True) for expense in expenses])
            self._write(payload)
        except (StorageError, OSError, TypeError, ValueError) as e:
            return self._fail(f"Error saving expenses: {e}", e)

        logger.debug(f"Saved {len(expenses)} expenses")
        return StorageResult.success(expenses)

    def clear(self) -> StorageResult:
        try:
            self._remove()
        except (StorageError, OSError) as e:
            return self._fail(f"Error clearing expenses: {e}", e)

        logger.info("Cleared stored expenses")
        return StorageResult.success()

    def _fail(self, reason: str, cause: Exception) -> StorageResult:
        logger.error(reason)
        if self.strict:
            raise StorageError(reason) from cause
        return StorageResult.failure(reason)


def _drop_duplicate_ids(expenses: List[Expense]) -> List[Expense]:
    seen = set()
    unique = []
    for expense in expenses:
        if expense.id in seen:
            logger.warning(f"Ignoring stored expense with duplicate id {expense.id}")
            continue
        seen.add(expense.id)
        unique.append(expense)
    return unique


class MemoryStorage(StorageGateway):
    """In-process storage. Gateways sharing a slots dict see each other's writes."""

    def __init__(
        self,
        key: str = DEFAULT_STORAGE_KEY,
        slots: Optional[Dict[str, str]] = None,
        strict: bool = False
    ):
        super().__init__(strict=strict)
        self.key = key
        self.slots = {} if slots is None else slots

    def _read(self) -> Optional[str]:
        return self.slots.get(self.key)

    def _write(self, payload: str) -> None:
        self.slots[self.key] = payload

    def _remove(self) -> None:
        self.slots.pop(self.key, None)


class FileStorage(StorageGateway):
    """Stores the collection in a single JSON file."""

    def __init__(self, path: Optional[Path] = None, strict: bool = False):
        super().__init__(strict=strict)
        self.path = Path(path or DEFAULT_STORAGE_FILE).expanduser()

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding='utf-8')

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the target and swap in so readers never see a partial file
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f'.{self.path.name}.')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _remove(self) -> None:
        self.path.unlink(missing_ok=True)


class S3Storage(StorageGateway):
    """Stores the collection as one S3 object."""

    def __init__(
        self,
        bucket_name: str,
        key: str = DEFAULT_STORAGE_KEY,
        client=None,
        strict: bool = False
    ):
        super().__init__(strict=strict)
        self.key = key
        self.s3 = S3Client(bucket_name, client=client)

    def _read(self) -> Optional[str]:
        return self.s3.read_text(self.key)

    def _write(self, payload: str) -> None:
        self.s3.write_text(self.key, payload)

    def _remove(self) -> None:
        self.s3.delete(self.key)


def storage_from_env() -> StorageGateway:
    """
    Build the storage gateway selected by environment variables.

    EXPENSES_STORAGE picks the backend (file, s3 or memory; default file).
    EXPENSES_FILE, EXPENSES_BUCKET and EXPENSES_KEY locate the data and
    EXPENSES_STRICT=true turns on strict error handling.

    Raises:
        StorageError: If the configuration is incomplete or unknown
    """
    backend = os.environ.get('EXPENSES_STORAGE', 'file').lower()
    key = os.environ.get('EXPENSES_KEY', DEFAULT_STORAGE_KEY)
    strict = os.environ.get('EXPENSES_STRICT', 'false').lower() == 'true'

    if backend == 'file':
        path = os.environ.get('EXPENSES_FILE')
        return FileStorage(Path(path) if path else None, strict=strict)

    if backend == 's3':
        bucket = os.environ.get('EXPENSES_BUCKET')
        if not bucket:
            raise StorageError("EXPENSES_BUCKET is required for S3 storage")
        return S3Storage(bucket, key=key, strict=strict)

    if backend == 'memory':
        return MemoryStorage(key=key, strict=strict)

    raise StorageError(f"Unknown storage backend: {backend}")
