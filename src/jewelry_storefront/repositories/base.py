import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from jewelry_storefront.core.exceptions import DatabaseError
from jewelry_storefront.db import Database

T = TypeVar('T')

Params = Optional[Dict[str, Any]]

logger = logging.getLogger(__name__)


def sqlstate_of(exc: SQLAlchemyError) -> Optional[str]:
    """SQLSTATE code reported by the driver, when it reports one"""
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


@contextmanager
def translate_errors(operation: str, statement: str = ""):
    """
    Log a driver failure and re-raise it as DatabaseError.

    The SQLSTATE travels with the error so services can tell a
    permission-denied insert from any other failure.
    """
    try:
        yield
    except IntegrityError as e:
        logger.error(f"Integrity constraint violation in {operation}: {statement.strip()} Error: {e}")
        raise DatabaseError(f"Data integrity violation: {e}", operation, sqlstate_of(e))
    except SQLAlchemyError as e:
        logger.error(f"{operation} failed: {statement.strip()} Error: {e}")
        raise DatabaseError(f"{operation} failed: {e}", operation, sqlstate_of(e))


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Every public method is one round trip: it opens a pooled connection,
    runs its statement(s) and commits. Failures are logged and re-raised as
    DatabaseError; nothing is retried.
    """

    def __init__(self, database: Database):
        self.database = database

    @contextmanager
    def transaction(self, operation: str = "TRANSACTION"):
        """Run several statements atomically; rolled back on any error"""
        with translate_errors(operation):
            with self.database.begin() as conn:
                yield conn

    def execute_query(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """Rows of a SELECT as plain dictionaries"""
        with translate_errors("SELECT", query), self.database.get_connection() as conn:
            return [dict(row._mapping) for row in conn.execute(text(query), params or {})]

    def execute_single_query(self, query: str, params: Params = None) -> Optional[Dict[str, Any]]:
        """First row of a SELECT, or None"""
        with translate_errors("SELECT", query), self.database.get_connection() as conn:
            row = conn.execute(text(query), params or {}).first()
            return dict(row._mapping) if row else None

    def execute_scalar(self, query: str, params: Params = None) -> Any:
        """Single value such as a COUNT or SUM"""
        with translate_errors("SELECT", query), self.database.get_connection() as conn:
            return conn.execute(text(query), params or {}).scalar()

    def execute_command(self, command: str, params: Params = None) -> int:
        """INSERT/UPDATE/DELETE; returns the affected row count"""
        with translate_errors("WRITE", command), self.database.get_connection() as conn:
            result = conn.execute(text(command), params or {})
            conn.commit()
            return result.rowcount

    def execute_insert_returning_id(self, command: str, params: Params = None) -> int:
        """INSERT returning the generated primary key"""
        with translate_errors("INSERT", command), self.database.get_connection() as conn:
            new_id = conn.execute(text(command + " RETURNING id"), params or {}).scalar()
            conn.commit()
            return new_id

    @abstractmethod
    def get_by_id(self, entity_id: int) -> T:
        """Get entity by ID"""
        pass

    def exists(self, entity_id: int) -> bool:
        query = f"SELECT 1 FROM {self.table_name} WHERE id = :id"
        return self.execute_scalar(query, {"id": entity_id}) is not None

    def count(self) -> int:
        return int(self.execute_scalar(f"SELECT COUNT(*) FROM {self.table_name}") or 0)

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Table name for the entity"""
        pass
