"""
Async Neo4j client: the only place that talks to the graph store
"""
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncManagedTransaction

from .values import normalize_record
from ..core.config import BaseSettings
from ..core.logging_config import get_component_logger

T = TypeVar("T")


async def fetch_records(
    tx: AsyncManagedTransaction, query: str, params: Optional[Dict[str, Any]] = None
) -> List[Dict[str, Any]]:
    """Run a statement inside a transaction and return normalized records"""
    result = await tx.run(query, params or {})
    return [normalize_record(record) async for record in result]


class Neo4jClient:
    """Executes parameterized Cypher in scoped sessions"""

    def __init__(
        self,
        driver: AsyncDriver,
        database: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.driver = driver
        self.database = database
        self.logger = get_component_logger(__name__, logger)

    @classmethod
    def from_settings(
        cls, settings: BaseSettings, logger: Optional[logging.Logger] = None
    ) -> "Neo4jClient":
        driver = AsyncGraphDatabase.driver(
            settings.neo4j_uri,
            auth=(settings.neo4j_user, settings.neo4j_password or ""),
        )
        return cls(driver, database=settings.neo4j_database, logger=logger)

    def _session(self):
        if self.database:
            return self.driver.session(database=self.database)
        return self.driver.session()

    async def run_read(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run a read-only query and return its records"""
        try:
            async with self._session() as session:
                return await session.execute_read(fetch_records, query, params)
        except Exception as e:
            self.logger.error(f"Graph read failed: {e}")
            raise

    async def run_write(
        self, query: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run a single write statement in its own transaction"""
        try:
            async with self._session() as session:
                return await session.execute_write(fetch_records, query, params)
        except Exception as e:
            self.logger.error(f"Graph write failed: {e}")
            raise

    async def execute_write(
        self, work: Callable[[AsyncManagedTransaction], Awaitable[T]]
    ) -> T:
        """
        Run several statements as one unit of work.

        Anything raised by ``work`` rolls back every statement it issued.
        """
        try:
            async with self._session() as session:
                return await session.execute_write(work)
        except Exception as e:
            self.logger.error(f"Graph unit of work failed: {e}")
            raise

    async def verify_connectivity(self) -> None:
        await self.driver.verify_connectivity()
        self.logger.info("Neo4j connected")

    async def close(self) -> None:
        await self.driver.close()
