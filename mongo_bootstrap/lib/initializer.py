"""Startup reconciliation of the whole database.

Routines are grouped in lanes, one per registered model plus one for the
reference data. Routines inside a lane run in order (the collection before its
indexes), lanes run concurrently in worker threads. Every routine's outcome is
captured on its own so one failure never prevents the others from running.
"""

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Any

from loguru import logger

from ..models.registry import ModelRegistration, default_registry
from ..types import IndexSpec, Outcome, RoutineResult
from .database import ConnectionManager
from .reconcile.collections import ensure_collection
from .reconcile.indexes import ensure_index, ensure_text_index
from .reconcile.languages import initialize_categories
from .reconcile.ttl import check_and_update_ttl

FAILURE_MESSAGE = "Some parts of the database failed to initialize"

Routine = Callable[[], RoutineResult | bool | None]
Lane = list[tuple[str, Routine]]


def _standard_index(document: Any, spec: IndexSpec) -> RoutineResult:
    # ensure_index reports whether it changed anything, not success
    ensure_index(document, spec)
    return RoutineResult.ok(spec.name)


def build_lanes(
    db: ConnectionManager, registry: list[ModelRegistration]
) -> list[Lane]:
    """Turn model registrations into ordered lanes of named routines"""
    lanes: list[Lane] = []
    for registration in registry:
        document = registration.document
        lane: Lane = [
            (
                f"collection:{registration.name}",
                partial(ensure_collection, document),
            )
        ]
        for spec in registration.indexes:
            lane.append(
                (
                    f"{spec.kind.value}:{registration.name}.{spec.name}",
                    partial(_standard_index, document, spec),
                )
            )
        for spec in registration.ttl_indexes:
            lane.append(
                (
                    f"{spec.kind.value}:{registration.name}.{spec.index_name}",
                    partial(
                        check_and_update_ttl,
                        document,
                        spec.index_name,
                        spec.expire_after_seconds,
                        spec.field,
                    ),
                )
            )
        for spec in registration.text_indexes:
            lane.append(
                (
                    f"{spec.kind.value}:{registration.name}.{spec.name}",
                    partial(
                        ensure_text_index, document, spec.field, spec.name
                    ),
                )
            )
        lanes.append(lane)

    lanes.append([("seed:categories", partial(initialize_categories, db))])
    return lanes


def _as_result(
    name: str, outcome: RoutineResult | bool | None
) -> RoutineResult:
    if isinstance(outcome, RoutineResult):
        return outcome._replace(name=name)
    if outcome is False:
        return RoutineResult.failed(name)
    return RoutineResult.ok(name)


async def _run_routine(name: str, routine: Routine) -> RoutineResult:
    try:
        outcome = await asyncio.to_thread(routine)
    except Exception as e:  # noqa: BLE001
        return RoutineResult.fatal(name, e)
    return _as_result(name, outcome)


async def _run_lane(lane: Lane) -> list[RoutineResult]:
    return [await _run_routine(name, routine) for name, routine in lane]


async def run_initialization(
    db: ConnectionManager, registry: list[ModelRegistration] | None = None
) -> list[RoutineResult]:
    """Run every reconciliation routine and return their outcomes"""
    if registry is None:
        registry = default_registry()
    lanes = build_lanes(db, registry)
    results = await asyncio.gather(*(_run_lane(lane) for lane in lanes))
    return [result for lane_results in results for result in lane_results]


async def initialize(
    db: ConnectionManager, registry: list[ModelRegistration] | None = None
) -> bool:
    """Converge collections, indexes and reference data

    Never raises. Failures are logged one by one, followed by a single
    aggregate message.

    Args:
        db: Open connection
        registry: Models to reconcile, defaults to ``default_registry()``

    Returns:
        True only if every routine succeeded
    """
    if not db.is_connected:
        logger.error("Cannot initialize the database: not connected")
        return False

    logger.info("Initializing database...")
    try:
        results = await run_initialization(db, registry)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Database initialization aborted: {e}")
        logger.error(FAILURE_MESSAGE)
        return False

    failures = 0
    for result in results:
        if result.outcome is Outcome.recovered:
            logger.warning(f"{result.name} recovered from: {result.error}")
        elif not result.succeeded:
            failures += 1
            detail = f": {result.error}" if result.error else ""
            logger.error(f"{result.name} {result.outcome.value}{detail}")

    if failures:
        logger.error(FAILURE_MESSAGE)
        return False

    logger.info(f"Database initialized ({len(results)} routines)")
    return True


def initialize_sync(
    db: ConnectionManager, registry: list[ModelRegistration] | None = None
) -> bool:
    """Blocking variant of ``initialize`` for scripts"""
    return asyncio.run(initialize(db, registry))
