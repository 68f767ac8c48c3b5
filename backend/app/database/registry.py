"""
Collection registry.

Collections are registered from database manifests at import time; the
registry drives index creation and the model list in connection info.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.logger import get_logger
from app.database.databases import auth_db

logger = get_logger("mongodb.registry")

# collection name -> index definitions
_collections: dict[str, list[dict]] = {}


def register_manifest(manifest: dict) -> None:
    """Register every collection declared by a database manifest."""
    indexes = manifest.get("indexes", {})
    for name in manifest["collections"]:
        _collections.setdefault(name, list(indexes.get(name, [])))


def registered_collections() -> list[str]:
    """Registered collection names, in a stable order."""
    return sorted(_collections)


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the indexes declared for every registered collection."""
    for collection_name, indexes in _collections.items():
        collection = db[collection_name]
        for index_def in indexes:
            keys = index_def["keys"]
            kwargs = {k: v for k, v in index_def.items() if k != "keys"}
            await collection.create_index(keys, **kwargs)
        logger.debug(f"Indexes ensured for {collection_name}")


register_manifest(auth_db.DB_MANIFEST)
