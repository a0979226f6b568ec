"""MongoDB helpers for the application."""

from __future__ import annotations

import logging
import time
from typing import Callable

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from . import config
from .entities import RESOURCES
from .errors import StorageUnavailableError
from .logging import mask_mongo_uri

logger = logging.getLogger(__name__)


def create_client(uri: str, *, max_pool_size: int = 50) -> MongoClient:
    """Create a MongoDB client; the driver owns the connection pool."""

    return MongoClient(
        uri,
        serverSelectionTimeoutMS=5000,
        connectTimeoutMS=30000,
        socketTimeoutMS=45000,
        maxPoolSize=max_pool_size,
        retryWrites=True,
        retryReads=True,
    )


def connect_with_retry(
    uri: str,
    db_name: str,
    *,
    attempts: int = 5,
    base_delay: float = 1.0,
    max_pool_size: int = 50,
    client_factory: Callable[..., MongoClient] = create_client,
    sleep: Callable[[float], None] = time.sleep,
) -> Database:
    """Connect and ping MongoDB, backing off exponentially between attempts.

    Raises ``StorageUnavailableError`` once every attempt has failed; the
    caller decides whether that is fatal.
    """

    masked = mask_mongo_uri(uri)
    for attempt in range(attempts):
        client = None
        try:
            logger.info("Connecting to MongoDB at %s (attempt %d/%d)", masked, attempt + 1, attempts)
            client = client_factory(uri, max_pool_size=max_pool_size)
            client.admin.command("ping")
            logger.info("MongoDB connection verified with ping")
            return client[db_name]
        except PyMongoError:
            logger.exception("MongoDB connection attempt %d failed", attempt + 1)
            if client is not None:
                client.close()
            if attempt + 1 < attempts:
                delay = base_delay * (2 ** attempt)
                logger.info("Retrying MongoDB connection in %.1fs", delay)
                sleep(delay)

    raise StorageUnavailableError(
        f"Failed to connect to MongoDB after {attempts} attempts."
    )


def connect_from_config() -> Database:
    return connect_with_retry(
        config.get_mongo_uri(),
        config.get_db_name(),
        attempts=config.get_connect_attempts(),
        base_delay=config.get_retry_delay(),
        max_pool_size=config.get_max_pool_size(),
    )


def ensure_indexes(database: Database) -> None:
    """Create the unique and secondary indexes for every collection."""

    try:
        for spec in RESOURCES.values():
            if spec.indexes:
                database[spec.collection].create_indexes(list(spec.indexes))
    except PyMongoError as exc:
        logger.exception("Failed to create indexes due to MongoDB error")
        raise StorageUnavailableError("Failed to prepare MongoDB collections.") from exc
    logger.debug("Indexes ensured for %d collections", len(RESOURCES))


__all__ = ["create_client", "connect_with_retry", "connect_from_config", "ensure_indexes"]
