"""RecordStore backed by SQLAlchemy Core statements on the ORM tables"""
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, List, Optional

from sqlalchemy import Table, delete, func, insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from airdealer.database import Base
from airdealer.exceptions import ConstraintViolation, NotFound, Unavailable
from airdealer.store.base import Filter, Record, RecordStore
from airdealer.utils.logger import logger


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class SQLAlchemyRecordStore(RecordStore):
    """Record store over one request-scoped :class:`Session`.

    Every write commits immediately; there is no unit of work spanning calls.
    """

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _table(self, table: str) -> Table:
        import airdealer.models  # noqa: F401  make sure every table is registered

        try:
            return Base.metadata.tables[table]
        except KeyError:
            raise ValueError(f"Unknown table '{table}'")

    def _where(self, tbl: Table, filter: Optional[Filter]) -> list:
        clauses = []
        for column, value in (filter or {}).items():
            col = tbl.c[column]
            if isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(col.in_([_plain(v) for v in value]))
            elif value is None:
                clauses.append(col.is_(None))
            else:
                clauses.append(col == _plain(value))
        return clauses

    @contextmanager
    def _translate_errors(self, table: str) -> Iterator[None]:
        """Map driver errors onto the store's failure modes, rolling back first."""
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Constraint violation on {table}: {exc.orig}")
            raise ConstraintViolation(f"Write to '{table}' violates a constraint") from exc
        except (OperationalError, InterfaceError) as exc:
            self.db.rollback()
            logger.error(f"Record store unavailable while accessing {table}: {exc}")
            raise Unavailable(f"Record store unavailable while accessing '{table}'") from exc
        except DBAPIError as exc:
            # any other driver failure leaves the session unusable until rolled back
            self.db.rollback()
            logger.error(f"Record store error while accessing {table}: {exc}")
            raise Unavailable(f"Record store failed while accessing '{table}'") from exc

    # ------------------------------------------------------------------
    # RecordStore
    # ------------------------------------------------------------------

    def find(
        self,
        table: str,
        filter: Optional[Filter] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        tbl = self._table(table)
        stmt = select(tbl).where(*self._where(tbl, filter))
        if order_by:
            col = tbl.c[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._translate_errors(table):
            rows = self.db.execute(stmt).mappings().all()
        return [dict(row) for row in rows]

    def find_one(self, table: str, filter: Filter) -> Record:
        rows = self.find(table, filter, limit=1)
        if not rows:
            raise NotFound(f"No record in '{table}' matching {filter}")
        return rows[0]

    def insert(self, table: str, record: Record) -> Record:
        tbl = self._table(table)
        values = {key: _plain(value) for key, value in record.items()}

        with self._translate_errors(table):
            result = self.db.execute(insert(tbl).values(**values))
            self.db.commit()

        key = {col.name: value for col, value in zip(tbl.primary_key.columns, result.inserted_primary_key)}
        return self.find_one(table, key)

    def update(self, table: str, filter: Filter, patch: Record) -> int:
        if not filter:
            raise ValueError("update() requires a non-empty filter")
        tbl = self._table(table)
        stmt = update(tbl).where(*self._where(tbl, filter)).values(
            **{key: _plain(value) for key, value in patch.items()}
        )

        with self._translate_errors(table):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount

    def delete(self, table: str, filter: Filter) -> int:
        if not filter:
            raise ValueError("delete() requires a non-empty filter")
        tbl = self._table(table)
        stmt = delete(tbl).where(*self._where(tbl, filter))

        with self._translate_errors(table):
            result = self.db.execute(stmt)
            self.db.commit()
        return result.rowcount

    def count(self, table: str, filter: Optional[Filter] = None) -> int:
        tbl = self._table(table)
        stmt = select(func.count()).select_from(tbl).where(*self._where(tbl, filter))

        with self._translate_errors(table):
            return self.db.execute(stmt).scalar_one()
