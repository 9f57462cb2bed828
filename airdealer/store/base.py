"""Generic record store contract.

The access gate and the order lifecycle are written purely against this
interface. Records are plain dicts keyed by column name. A filter is a dict of
``column -> value``; a list/tuple/set value means ``column IN values`` and
``None`` means ``column IS NULL``. All conditions are AND-ed.

Failure modes every implementation must surface:
  - :class:`~airdealer.exceptions.Unavailable` when the backend cannot be reached
  - :class:`~airdealer.exceptions.ConstraintViolation` when a write breaks a constraint
  - :class:`~airdealer.exceptions.NotFound` from :meth:`RecordStore.find_one` only
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]
Filter = Dict[str, Any]


class RecordStore(ABC):
    """Read/write/delete access to named tables"""

    @abstractmethod
    def find(
        self,
        table: str,
        filter: Optional[Filter] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        """Return every record matching ``filter`` (possibly none)."""

    @abstractmethod
    def find_one(self, table: str, filter: Filter) -> Record:
        """Return the first matching record or raise ``NotFound``."""

    @abstractmethod
    def insert(self, table: str, record: Record) -> Record:
        """Insert a record and return it as stored (defaults applied)."""

    @abstractmethod
    def update(self, table: str, filter: Filter, patch: Record) -> int:
        """Apply ``patch`` to matching records. Returns the affected row count.

        The filter doubles as a guard: callers implement compare-and-swap by
        including the expected old value, and treat ``0`` as "lost the race".
        """

    @abstractmethod
    def delete(self, table: str, filter: Filter) -> int:
        """Delete matching records. Returns the affected row count."""

    @abstractmethod
    def count(self, table: str, filter: Optional[Filter] = None) -> int:
        """Count matching records."""
