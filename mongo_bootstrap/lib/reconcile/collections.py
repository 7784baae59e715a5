from typing import Any

from loguru import logger
from pymongo.errors import CollectionInvalid

from .binding import CollectionCatalog, bind


def ensure_collection(
    model: CollectionCatalog | Any, create_indexes: bool = True
) -> None:
    """Create the model's collection if missing, then its declared indexes

    Index creation runs whether or not the collection already existed; the
    server treats an identical index as a no-op.

    Args:
        model: Document class or any ``CollectionCatalog``
        create_indexes: Build the model's declared indexes as well

    Raises:
        Exception: Whatever the driver raised, after logging it
    """
    catalog: CollectionCatalog = bind(model)
    try:
        if catalog.collection_name not in catalog.list_collection_names():
            try:
                catalog.create_collection()
                logger.info(
                    f"Created collection '{catalog.collection_name}' "
                    f"for {catalog.name}"
                )
            except CollectionInvalid:
                # Created concurrently by another process
                logger.debug(
                    f"Collection '{catalog.collection_name}' already exists"
                )

        if create_indexes:
            catalog.create_indexes()
            logger.debug(f"Ensured declared indexes of {catalog.name}")
    except Exception as e:
        logger.error(
            f"Failed to create collection "
            f"'{catalog.collection_name}' for {catalog.name}: {e}"
        )
        raise
