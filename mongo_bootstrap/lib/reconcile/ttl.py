"""TTL index reconciliation.

A TTL index whose ``expireAfterSeconds`` drifted is dropped and recreated.
If the drop fails for any reason other than the index being gone already, the
error is raised: leaving the index in an unknown state risks keeping or
deleting data for the wrong amount of time.
"""

from time import sleep
from typing import Any

from loguru import logger
from pymongo import ASCENDING
from pymongo.errors import ConnectionFailure, OperationFailure

from ...config import config
from ...types import RoutineResult
from .binding import IndexedModel, bind
from .indexes import find_index

INDEX_NOT_FOUND = 27


def is_index_not_found(error: BaseException) -> bool:
    """Whether a drop failed only because the index no longer exists"""
    if not isinstance(error, OperationFailure):
        return False
    details = error.details or {}
    return (
        error.code == INDEX_NOT_FOUND
        or details.get("codeName") == "IndexNotFound"
    )


def create_ttl_index(
    model: IndexedModel | Any,
    field: str,
    index_name: str,
    expire_after_seconds: int,
) -> None:
    """Create a TTL index expiring documents ``expire_after_seconds`` after
    the date stored in ``field``"""
    indexed: IndexedModel = bind(model)
    indexed.create_index(
        [(field, ASCENDING)],
        name=index_name,
        expireAfterSeconds=expire_after_seconds,
        background=True,
    )
    logger.info(
        f'Created TTL index "{indexed.name}.{index_name}" on {field} '
        f"({expire_after_seconds}s)"
    )


def _field_of(index: dict[str, Any] | None, index_name: str) -> str:
    if index is not None and index.get("key"):
        return next(iter(index["key"]))
    field, _, direction = index_name.rpartition("_")
    return field if field and direction.lstrip("-").isdigit() else index_name


def _drop_index(indexed: IndexedModel, index_name: str) -> None:
    attempts = config.ttl_drop_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            indexed.drop_index(index_name)
            return
        except ConnectionFailure as e:
            if attempt == attempts:
                raise
            delay = config.ttl_drop_retry_delay_seconds * 2 ** (attempt - 1)
            logger.warning(
                f'Transient error dropping TTL index "{indexed.name}.'
                f'{index_name}" (attempt {attempt}/{attempts}), retrying in '
                f"{delay:.1f}s: {e}"
            )
            sleep(delay)


def check_and_update_ttl(
    model: IndexedModel | Any,
    index_name: str,
    expire_after_seconds: int,
    field: str | None = None,
) -> RoutineResult:
    """Converge a TTL index to ``expire_after_seconds``

    Args:
        model: Document class or any ``IndexedModel``
        index_name: Name of the TTL index
        expire_after_seconds: Desired expiry delay
        field: Indexed date field, defaults to the key of the existing index
            or to ``index_name`` without its direction suffix

    Returns:
        ``ok`` once the index has the desired expiry

    Raises:
        Exception: The drop error when the drifted index could not be
            dropped; the index is not recreated in that case
    """
    indexed: IndexedModel = bind(model)
    routine = f"{indexed.name}.{index_name}"

    current = find_index(indexed.indexes(), index_name)
    field = field or _field_of(current, index_name)

    if current is None:
        logger.info(f'TTL index "{routine}" is missing, creating it')
        create_ttl_index(indexed, field, index_name, expire_after_seconds)
        return RoutineResult.ok(routine)

    current_seconds = current.get("expireAfterSeconds")
    if current_seconds == expire_after_seconds:
        logger.debug(f'TTL index "{routine}" is up to date')
        return RoutineResult.ok(routine)

    logger.info(
        f'TTL index "{routine}" expires after {current_seconds}s instead of '
        f"{expire_after_seconds}s, recreating it"
    )
    try:
        _drop_index(indexed, index_name)
    except Exception as e:
        if not is_index_not_found(e):
            logger.error(f'Failed to drop TTL index "{routine}": {e}')
            raise
        logger.warning(f'TTL index "{routine}" was already dropped')

    create_ttl_index(indexed, field, index_name, expire_after_seconds)
    return RoutineResult.ok(routine)
