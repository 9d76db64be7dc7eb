"""
Async Neo4j driver owner for the Neo4j graph store.

Settings normally supply the connection values. Anything left unset falls
back to the NEO4J_* environment variables, with a local .env loaded first.
"""

import os
import logging
from typing import Any

from dotenv import load_dotenv
from neo4j import AsyncGraphDatabase, AsyncDriver

logger = logging.getLogger("graph_explorer.neo4j_handler")


class Neo4jHandler:
    """Owns one async driver and runs read queries against a single database.

    ``Neo4jGraphStore`` is the only caller: it connects once, sends its
    parameterised Cypher through :meth:`run` and closes the handler when
    the store shuts down.
    """

    def __init__(
        self,
        uri: str | None = None,
        username: str | None = None,
        password: str | None = None,
        database: str | None = None,
    ):
        if not (uri and username and password and database):
            load_dotenv()

        self._uri = uri or os.getenv("NEO4J_URI")
        self._username = username or os.getenv("NEO4J_USERNAME")
        self._password = password or os.getenv("NEO4J_PASSWORD")
        self._database = database or os.getenv("NEO4J_DATABASE", "neo4j")
        self._driver: AsyncDriver | None = None

        for name, value in (
            ("NEO4J_URI", self._uri),
            ("NEO4J_USERNAME", self._username),
            ("NEO4J_PASSWORD", self._password),
        ):
            if not value:
                raise ValueError(f"{name} is not set (settings or environment)")

    async def connect(self) -> "Neo4jHandler":
        """Open the driver and verify connectivity. A second call is a no-op.

        A failed verification closes the half-open driver and re-raises.
        """
        if self._driver is not None:
            return self

        self._driver = AsyncGraphDatabase.driver(
            self._uri, auth=(self._username, self._password)
        )
        try:
            await self._driver.verify_connectivity()
            logger.info("Connected to Neo4j at %s (db=%s)", self._uri, self._database)
        except Exception:
            logger.error("Failed to connect to Neo4j at %s", self._uri)
            await self._driver.close()
            self._driver = None
            raise
        return self

    async def close(self) -> None:
        if self._driver:
            await self._driver.close()
            self._driver = None
            logger.info("Neo4j connection closed")

    async def __aenter__(self) -> "Neo4jHandler":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @property
    def driver(self) -> AsyncDriver:
        if self._driver is None:
            raise RuntimeError("Neo4jHandler is not connected, call connect() first")
        return self._driver

    async def run(self, query: str, params: dict[str, Any] | None = None) -> list[dict]:
        """Run one Cypher statement and return every record as a dict.

        Rows come back in driver order; the store layer does its own
        de-duplication and ordering on top.
        """
        async with self.driver.session(database=self._database) as session:
            result = await session.run(query, params or {})
            return [record.data() async for record in result]
