"""
MongoDB connection management.

The connector owns the Motor client and the reconnect state. A failed attempt
schedules the next one on the scheduler with exponential backoff; once
``max_retries`` attempts have failed the ``on_exhausted`` callback is invoked
and no further attempt is scheduled.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional

import motor.motor_asyncio

from contact_backend.core.scheduler import cancel, schedule_at

# Set up logger
logger = logging.getLogger(__name__)

RECONNECT_JOB_ID = "mongo_reconnect_job"


class DatabaseNotConnectedError(RuntimeError):
    """Raised when the database is used before a connection is established."""


def retry_delay_ms(attempt: int, base_delay_ms: int = 5000, max_delay_ms: int = 60000) -> int:
    """Backoff delay before retrying after the ``attempt``-th failure (1-based)."""
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    return min(base_delay_ms * 2 ** (attempt - 1), max_delay_ms)


def mask_uri(uri: str) -> str:
    """Mask the password in a connection string for logging."""
    masked_uri = uri
    if '@' in uri and ':' in uri:
        credentials_part = uri.split('@')[0]
        user_pass = credentials_part.split('://')[-1]
        if ':' in user_pass:
            user, password = user_pass.split(':', 1)
            masked_uri = uri.replace(user_pass, f"{user}:{'*' * len(password)}", 1)
    return masked_uri


class MongoConnector:
    """Connects to MongoDB, retrying with backoff until ``max_retries`` is reached."""

    def __init__(
        self,
        uri: str,
        database_name: str = "contact_form",
        max_retries: int = 5,
        base_delay_ms: int = 5000,
        max_delay_ms: int = 60000,
        server_selection_timeout_ms: int = 5000,
        on_connected: Optional[Callable[[Any], Awaitable[None]]] = None,
        on_exhausted: Optional[Callable[[], None]] = None,
        client_factory: Callable[..., Any] = motor.motor_asyncio.AsyncIOMotorClient,
    ):
        self.uri = uri
        self.database_name = database_name
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.on_connected = on_connected
        self.on_exhausted = on_exhausted
        self.client_factory = client_factory

        self.attempts = 0
        self.client = None
        self.db = None
        self.closed = False

    @property
    def connected(self) -> bool:
        return self.db is not None

    async def connect(self) -> bool:
        """
        Make one connection attempt.

        Returns:
            bool: True if connected, False if the attempt failed (a retry is
            scheduled unless attempts are exhausted)
        """
        if self.closed:
            logger.info("Connector is closed, skipping connection attempt")
            return False

        logger.info(f"Connecting to MongoDB: {mask_uri(self.uri)}")
        client = None
        try:
            client = self.client_factory(
                self.uri,
                maxPoolSize=10,
                minPoolSize=0,
                maxIdleTimeMS=30000,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                connectTimeoutMS=10000,
            )
            await client.admin.command("ping")
            db = client.get_default_database(self.database_name)
        except Exception as e:
            if client is not None:
                client.close()
            if self.closed:
                logger.info(f"Connector closed during connection attempt: {str(e)}")
            else:
                self._record_failure(e)
            return False

        # close() may have run while the ping was in flight
        if self.closed:
            client.close()
            logger.info("Connector closed during connection attempt, discarding client")
            return False

        self.client = client
        self.db = db
        self.attempts = 0
        logger.info(f"✅ MongoDB connection established to database: {db.name}")

        if self.on_connected is not None:
            await self.on_connected(db)
        return True

    def _record_failure(self, error: Exception):
        self.attempts += 1
        logger.error(f"❌ MongoDB connection attempt {self.attempts}/{self.max_retries} failed: {str(error)}")

        if self.attempts >= self.max_retries:
            logger.error(f"❌ Giving up on MongoDB after {self.attempts} attempts")
            self._give_up()
            return

        delay = retry_delay_ms(self.attempts, self.base_delay_ms, self.max_delay_ms)
        logger.info(f"🔄 Retrying MongoDB connection in {delay / 1000:g}s")
        scheduled = schedule_at(
            RECONNECT_JOB_ID,
            self.connect,
            datetime.now(timezone.utc) + timedelta(milliseconds=delay),
        )
        if not scheduled:
            logger.error("❌ Could not schedule MongoDB reconnect attempt")
            self._give_up()

    def _give_up(self):
        if self.on_exhausted is not None:
            self.on_exhausted()

    def cancel_retry(self):
        """Drop a pending reconnect job, if any."""
        cancel(RECONNECT_JOB_ID)

    def close(self):
        """Cancel pending retries and close the client."""
        self.closed = True
        self.cancel_retry()
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connections closed successfully")
        self.client = None
        self.db = None


connector: Optional[MongoConnector] = None


def set_connector(new_connector: Optional[MongoConnector]):
    global connector
    connector = new_connector


def get_db():
    """Returns the database connection"""
    if connector is None or not connector.connected:
        raise DatabaseNotConnectedError("MongoDB connection is not established")
    return connector.db
