from typing import Any

from loguru import logger
from pymongo import TEXT
from pymongo.errors import PyMongoError

from ...exc import IndexReconciliationError
from ...types import IndexSpec, RoutineResult
from .binding import IndexedModel, bind


def find_index(
    indexes: list[dict[str, Any]], index_name: str
) -> dict[str, Any] | None:
    """Return the index called ``index_name`` or None"""
    return next((i for i in indexes if i.get("name") == index_name), None)


def index_matches(index: dict[str, Any], spec: IndexSpec) -> bool:
    """Compare an existing index against the desired keys and options"""
    # Directions may come back as floats, 1.0 == 1
    if list(index["key"].items()) != spec.keys:
        return False
    if bool(index.get("unique", False)) != spec.unique:
        return False
    return bool(index.get("sparse", False)) == spec.sparse


def ensure_index(model: IndexedModel | Any, spec: IndexSpec) -> bool:
    """Create a standard index, or recreate it if its shape drifted

    Args:
        model: Document class or any ``IndexedModel``
        spec: Desired index

    Returns:
        True if the index was created or recreated, False if already in shape

    Raises:
        IndexReconciliationError: If the driver rejected a change
    """
    indexed: IndexedModel = bind(model)
    label = f'"{indexed.name}.{spec.name}"'
    try:
        current = find_index(indexed.indexes(), spec.name)
        if current is not None:
            if index_matches(current, spec):
                return False
            logger.info(f"Index {label} drifted, dropping it")
            indexed.drop_index(spec.name)

        indexed.create_index(spec.keys, **spec.options())
        logger.info(f"Created index {label} on {spec.keys}")
        return True
    except PyMongoError as e:
        logger.error(f"Failed to reconcile index {label}: {e}")
        raise IndexReconciliationError(
            message=f"Failed to reconcile index {label}",
            details={"model": indexed.name, "index": spec.name},
        ) from e


def ensure_text_index(
    model: IndexedModel | Any, field: str, index_name: str
) -> RoutineResult:
    """(Re)create a text index on ``field``

    Text indexes cannot be altered in place, an existing index with the same
    name is always dropped first. Failures are logged and never raised since
    search is an enhancement, not a correctness requirement.

    Args:
        model: Document class or any ``IndexedModel``
        field: Field indexed for full-text search
        index_name: Index name

    Returns:
        ``ok`` on success, ``recovered`` carrying the error otherwise
    """
    indexed: IndexedModel = bind(model)
    routine = f"{indexed.name}.{index_name}"
    try:
        if find_index(indexed.indexes(), index_name) is not None:
            indexed.drop_index(index_name)
            logger.info(f'Dropped text index "{routine}"')

        # The collection may own a "language" field of its own
        indexed.create_index(
            [(field, TEXT)],
            name=index_name,
            default_language="none",
            language_override="_none",
            background=True,
        )
        logger.info(f'Created text index "{routine}" on {field}')
        return RoutineResult.ok(routine)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Failed to create text index: {e}")
        return RoutineResult.recovered(routine, e)
