"""
Database initialization module for the contact form backend.
Ensures the indexes the application relies on exist once a connection is up.
Safe to run on every start: create_index is a no-op for existing indexes.
"""

import logging

from pymongo import ASCENDING, DESCENDING

from contact_backend.models.contact import CONTACT_COLLECTION

# Set up logger
logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = [
    {
        "name": CONTACT_COLLECTION,
        "description": "Stores contact form submissions",
        "indexes": [
            {"keys": [("submittedAt", DESCENDING)], "unique": False},
            {"keys": [("email", ASCENDING)], "unique": False},
        ]
    },
]


async def ensure_indexes(db, collection_config):
    """
    Create the indexes for one collection.

    Returns:
        int: Number of indexes that failed to be created
    """
    collection_name = collection_config["name"]
    collection = db[collection_name]
    failures = 0

    for index_config in collection_config.get("indexes", []):
        keys = index_config["keys"]
        options = {k: v for k, v in index_config.items() if k != "keys"}
        try:
            await collection.create_index(keys, **options)
            logger.debug(f"✅ Index {keys} ensured for '{collection_name}'")
        except Exception as e:
            logger.warning(f"Failed to create index {keys} for '{collection_name}': {str(e)}")
            failures += 1

    return failures


async def initialize_database(db):
    """
    Ensure every required collection has its indexes.

    Returns:
        bool: True if all indexes exist, False if some could not be created
    """
    logger.info(f"🚀 Initializing database: {db.name}")
    failures = 0
    for collection_config in REQUIRED_COLLECTIONS:
        failures += await ensure_indexes(db, collection_config)

    if failures:
        logger.warning(f"⚠️ Database initialization completed with {failures} index errors")
        return False

    logger.info("✅ Database initialization completed successfully")
    return True
