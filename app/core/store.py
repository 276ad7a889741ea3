"""
Data store adapter
Thin wrapper around an AsyncSession exposing query/get/run and explicit
transaction boundaries to the cart and order engines
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional
import logging

from fastapi import Depends
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from .database import get_db
from .exceptions import DuplicateEntry, StoreError

logger = logging.getLogger(__name__)

# SQLSTATE unique_violation
UNIQUE_VIOLATION = "23505"

def _is_unique_violation(error: IntegrityError) -> bool:
    """True for a duplicate key, False for FK/CHECK/NOT NULL failures"""
    orig = error.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION or getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    message = str(orig)
    return "UNIQUE constraint failed" in message or "duplicate key value" in message

@dataclass(frozen=True)
class RunResult:
    """Outcome of a write statement"""
    last_insert_id: Optional[int]
    affected_rows: int

class DataStore:
    """Executes parameterized statements against the relational schema"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def query(self, stmt: Executable) -> List[RowMapping]:
        try:
            result = await self.session.execute(stmt)
            return list(result.mappings().all())
        except SQLAlchemyError as e:
            logger.error(f"Query error: {e}")
            raise StoreError() from e

    async def get(self, stmt: Executable) -> Optional[RowMapping]:
        try:
            result = await self.session.execute(stmt)
            return result.mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"Get error: {e}")
            raise StoreError() from e

    async def run(self, stmt: Executable) -> RunResult:
        try:
            result = await self.session.execute(stmt)
        except IntegrityError as e:
            if _is_unique_violation(e):
                logger.info(f"Unique constraint hit: {e.orig}")
                raise DuplicateEntry() from e
            logger.error(f"Run error: {e}")
            raise StoreError() from e
        except SQLAlchemyError as e:
            logger.error(f"Run error: {e}")
            raise StoreError() from e

        last_insert_id = None
        inserted = getattr(result, "inserted_primary_key", None) if result.is_insert else None
        if inserted:
            last_insert_id = inserted[0]
        return RunResult(last_insert_id=last_insert_id, affected_rows=result.rowcount)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["DataStore"]:
        """
        Commit everything done inside the block, or nothing.

        Domain exceptions propagate unchanged after the rollback; driver
        failures surface as StoreError.
        """
        try:
            yield self
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise StoreError() from e
        except BaseException:
            await self.session.rollback()
            raise

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator["DataStore"]:
        """Nested transaction; an error rolls back only this block"""
        try:
            async with self.session.begin_nested():
                yield self
        except SQLAlchemyError as e:
            raise StoreError() from e

async def get_store(db: AsyncSession = Depends(get_db)) -> DataStore:
    """FastAPI dependency handing a request-scoped store to the services"""
    return DataStore(db)
