"""
MongoDB Connection
==================

One MongoClient for the whole process.

MongoClient is thread safe and keeps its own connection pool, so we build
it once in the app lifespan and every request handler borrows it. Handlers
are plain `def` functions, which FastAPI runs on its threadpool, so several
requests can be using the pool at the same time.

Retryable reads/writes are switched OFF: a failed operation is reported
straight back to the caller instead of being replayed by the driver.
"""

import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class MongoConnection:
    """
    Owns the shared MongoClient.

    HOW TO USE:
    ----------
    connection = MongoConnection("mongodb://localhost:27017", "ClimateDataDB")
    readings = connection.get_collection("ClimateData")
    ...
    connection.close()   # at shutdown
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 5000,
        socket_timeout_ms: int = 10000,
        max_pool_size: int = 50,
    ):
        """
        Create the client. No network traffic happens until the first query.

        Args:
            connection_string: MongoDB URI
            database_name: Default database for get_database()
            server_selection_timeout_ms: How long to look for a usable server
            connect_timeout_ms: How long to wait for a socket to open
            socket_timeout_ms: How long to wait on a single operation
            max_pool_size: Max connections in the pool
        """
        self.database_name = database_name
        self._client = MongoClient(
            connection_string,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
            connectTimeoutMS=connect_timeout_ms,
            socketTimeoutMS=socket_timeout_ms,
            maxPoolSize=max_pool_size,
            retryReads=False,
            retryWrites=False,
            tz_aware=True,
        )

    def get_database(self, database_name: Optional[str] = None) -> Database:
        """Configured database, or another one on the same server."""
        return self._client[database_name or self.database_name]

    def get_collection(self, collection_name: str) -> Collection:
        return self.get_database()[collection_name]

    def ping(self) -> bool:
        """True if the server answered a ping."""
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self):
        """Close every pooled connection."""
        self._client.close()
        logger.info("MongoDB client closed")
