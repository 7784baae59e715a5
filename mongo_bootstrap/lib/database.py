"""Database connection lifecycle."""

import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from mongoengine import (
    DEFAULT_CONNECTION_NAME,
    connect,
    disconnect,
    get_db,
)
from pymongo import MongoClient
from pymongo.database import Database

from ..config import config
from ..exc import DatabaseConnectionError, DatabaseNotConnectedError

_CREDENTIALS = re.compile(r"//([^:/@]+):[^@]*@")


def redact_uri(uri: str) -> str:
    """Hide the password of a connection string before logging it"""
    return _CREDENTIALS.sub(r"//\1:***@", uri)


class ConnectionManager:
    """Owns one MongoDB connection registered under a mongoengine alias

    ``connect`` and ``close`` are idempotent and never raise. Errors are
    logged and turned into return values so startup code can decide what to
    do with a missing database.
    """

    def __init__(
        self,
        alias: str | None = None,
        server_selection_timeout_ms: int | None = None,
    ) -> None:
        self.alias = alias or DEFAULT_CONNECTION_NAME
        self.server_selection_timeout_ms = (
            server_selection_timeout_ms
            or config.db_server_selection_timeout_ms
        )
        self._client: MongoClient | None = None
        self._drop_on_close = config.db_drop_on_close
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def database(self) -> Database:
        """Database selected by the connection URI

        Raises:
            DatabaseNotConnectedError: If ``connect`` has not succeeded
        """
        if self._client is None:
            raise DatabaseNotConnectedError(details={"alias": self.alias})
        return get_db(self.alias)

    def connect(
        self, uri: str, is_test: bool = False, quiet: bool = False
    ) -> bool:
        """Open the connection unless it is already open

        Args:
            uri: MongoDB connection string, database name in the path
            is_test: Clean-start connection, every collection is dropped
                when it is closed
            quiet: Do not log connection errors

        Returns:
            True when connected, False if the server could not be reached
        """
        with self._lock:
            if self._client is not None:
                logger.debug(f"MongoDB alias '{self.alias}' already connected")
                return True

            logger.info(f"Connecting to MongoDB: {redact_uri(uri)}")
            try:
                client = connect(
                    host=uri,
                    alias=self.alias,
                    uuidRepresentation="standard",
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                )
                # The driver connects lazily, ping to surface bad targets now
                client.admin.command("ping")
            except Exception as e:  # noqa: BLE001
                disconnect(alias=self.alias)
                if not quiet:
                    logger.error(f"Failed to connect to MongoDB: {e}")
                return False

            self._client = client
            self._drop_on_close = is_test or config.db_drop_on_close
            logger.info("Successfully connected to MongoDB")
            return True

    def close(self, drop: bool | None = None) -> None:
        """Close the connection, optionally dropping every collection first

        Args:
            drop: Drop all collections before disconnecting. Defaults to the
                clean-start setting of the current connection.
        """
        with self._lock:
            if self._client is None:
                return

            if self._drop_on_close if drop is None else drop:
                try:
                    self._drop_collections()
                except Exception as e:  # noqa: BLE001
                    logger.error(f"Failed to drop collections on close: {e}")

            try:
                disconnect(alias=self.alias)
                logger.info("Disconnected from MongoDB")
            except Exception as e:  # noqa: BLE001
                logger.error(f"Failed to close MongoDB connection: {e}")
            finally:
                self._client = None

    def _drop_collections(self) -> None:
        db = get_db(self.alias)
        for name in db.list_collection_names():
            if name.startswith("system."):
                continue
            db.drop_collection(name)
            logger.debug(f"Dropped collection '{name}'")
        logger.info(f"Dropped all collections of database '{db.name}'")

    @contextmanager
    def connected(
        self,
        uri: str | None = None,
        is_test: bool = False,
        quiet: bool = False,
    ) -> Iterator["ConnectionManager"]:
        """Context manager that connects and guarantees the close.

        Usage:
            with ConnectionManager().connected() as db:
                ...

        Raises:
            DatabaseConnectionError: If the connection cannot be opened
        """
        if not self.connect(uri or config.mongodb_url, is_test, quiet):
            raise DatabaseConnectionError(details={"alias": self.alias})
        try:
            yield self
        finally:
            self.close()
