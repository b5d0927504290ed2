"""Expense repository: the in-memory expense list mirrored to storage."""

import logging
import threading
import datetime as dt
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from shared.exceptions import ConflictError
from expenses.models import Expense, ExpenseUpdate, utc_now
from expenses.storage import StorageGateway, StorageResult

logger = logging.getLogger(__name__)


class ExpenseRepository:
    """
    Authoritative list of expenses, persisted through a storage gateway.

    Every successful mutation rewrites the complete collection with exactly
    one save_all call. The in-memory list is updated even if that save
    fails; the failure is available from last_result (or raised, when the
    gateway is strict).
    """

    def __init__(self, storage: StorageGateway, clock: Callable[[], dt.datetime] = utc_now):
        """
        Initialize expense repository.

        Args:
            storage: Gateway used to load and persist the collection
            clock: Returns the current time for updated_at stamps
        """
        self.storage = storage
        self.clock = clock
        self.last_result: Optional[StorageResult] = None
        self._expenses: List[Expense] = []
        # Guards load/save so concurrent callers in one process can't lose updates
        self._lock = threading.RLock()

    @property
    def expenses(self) -> Tuple[Expense, ...]:
        """Snapshot of the current collection in insertion order."""
        with self._lock:
            return tuple(self._expenses)

    def initialize(self) -> Tuple[Expense, ...]:
        """
        Replace the in-memory list with what storage holds.

        Returns:
            The loaded expenses (empty if storage was empty or unreadable)
        """
        with self._lock:
            result = self.storage.load()
            self.last_result = result
            self._expenses = list(result.expenses)
            logger.info(f"Initialized repository with {len(self._expenses)} expenses")
            return tuple(self._expenses)

    def get(self, expense_id: str) -> Optional[Expense]:
        with self._lock:
            index = self._index_of(expense_id)
            return None if index is None else self._expenses[index]

    def add(self, expense: Expense) -> StorageResult:
        """
        Append an expense and persist the collection.

        Args:
            expense: Fully populated expense (id and timestamps assigned)

        Returns:
            Result of the save

        Raises:
            ConflictError: If an expense with the same id already exists
        """
        with self._lock:
            if self._index_of(expense.id) is not None:
                raise ConflictError(f"Expense {expense.id} already exists")

            self._expenses.append(expense)
            logger.info(f"Added expense {expense.id}")
            return self._persist()

    def update(
        self,
        expense_id: str,
        patch: Union[ExpenseUpdate, Dict[str, Any]]
    ) -> Optional[Expense]:
        """
        Merge patch fields over an existing expense and bump updated_at.

        Args:
            expense_id: Expense ID
            patch: Fields to replace

        Returns:
            The updated expense, or None if no expense has that id

        Raises:
            ValidationError: If a patch field is invalid
            pydantic.ValidationError: If the patch names an unknown field
        """
        if not isinstance(patch, ExpenseUpdate):
            patch = ExpenseUpdate(**patch)

        with self._lock:
            index = self._index_of(expense_id)
            if index is None:
                logger.info(f"Update ignored, expense {expense_id} not found")
                return None

            current = self._expenses[index]
            updated = current.model_copy(update={
                **patch.changes(),
                'updated_at': max(self.clock(), current.created_at)
            })
            self._expenses[index] = updated
            logger.info(f"Updated expense {expense_id}")
            self._persist()
            return updated

    def delete(self, expense_id: str) -> bool:
        """
        Remove an expense.

        Args:
            expense_id: Expense ID

        Returns:
            True if an expense was removed, False if the id was unknown
        """
        with self._lock:
            index = self._index_of(expense_id)
            if index is None:
                logger.info(f"Delete ignored, expense {expense_id} not found")
                return False

            del self._expenses[index]
            logger.info(f"Deleted expense {expense_id}")
            self._persist()
            return True

    def clear(self) -> StorageResult:
        """Remove every expense and the stored collection itself."""
        with self._lock:
            self._expenses = []
            self.last_result = self.storage.clear()
            return self.last_result

    def _index_of(self, expense_id: str) -> Optional[int]:
        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                return index
        return None

    def _persist(self) -> StorageResult:
        self.last_result = self.storage.save_all(list(self._expenses))
        if not self.last_result.ok:
            logger.warning(f"Expense changes kept in memory only: {self.last_result.error}")
        return self.last_result
