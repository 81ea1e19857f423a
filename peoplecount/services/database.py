"""MongoDB connection helpers for the user directory.

The client is created once at application startup and handed to the store
adapter; nothing here keeps module-level connection state.
"""

import logging

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from peoplecount.config import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> MongoClient:
    """Create the MongoDB client for the configured profile.

    Args:
        settings: Loaded application settings.

    Returns:
        MongoClient instance (connects lazily, pools connections).
    """
    logger.info(
        "Connecting to MongoDB (%s profile)...",
        settings.app.env,
    )
    return MongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo.server_selection_timeout_ms,
    )


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Get the people-count database."""
    return client[settings.mongo.db_name]


def get_users_collection(client: MongoClient, settings: Settings) -> Collection:
    """Get the users collection.

    Args:
        client: Connected MongoDB client.
        settings: Loaded application settings.

    Returns:
        Collection instance.
    """
    return get_database(client, settings)[settings.mongo.users_collection]


def ensure_indexes(users_col: Collection) -> None:
    """Create the unique email index on the users collection."""
    logger.info("Ensuring database indexes...")
    users_col.create_index(
        [("email", ASCENDING)],
        name="email_unique",
        unique=True,
    )
    logger.info("Database indexes created successfully")


def close_client(client: MongoClient | None) -> None:
    """Close the MongoDB client connection gracefully."""
    if client is not None:
        logger.info("Closing MongoDB connection...")
        client.close()
        logger.info("MongoDB connection closed")
