from __future__ import annotations

"""
Concurrent Unit Collection Stage.

Runs extraction tasks (one per compilation unit) on a thread pool and feeds
their output into a UnitRegistry from the collecting thread only, giving a
single-writer aggregation stage in front of the registry. A failing task or
a duplicate unit is reported in the result without stopping the others.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from navindex.core.services.registry import UnitRegistry
from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import DuplicateUnit, NavIndexError
from navindex.domain.tree_models import TreeNode
from navindex.domain.unit_models import Unit

logger = logging.getLogger(__name__)

UnitPayload = Union[Unit, Tuple[str, TreeNode, Catalog]]
ExtractionTask = Callable[[], UnitPayload]


# -----------------------------------------------------------------------------
# RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class CollectionFailure:
    """
    A task that did not yield a registered unit.

    Attributes:
        task: Label of the task (its index or the declared unit name).
        error: Human-readable failure description.
        duplicate: True when the unit was produced but its name was taken.
    """
    task: str
    error: str
    duplicate: bool = False


@dataclass
class CollectionResult:
    """
    Outcome of a collection run.

    Attributes:
        registry: Registry holding every successfully collected unit.
        registered: Unit names in the order they were registered.
        failures: Tasks that failed or produced a duplicate.
        cancelled: True if the run stopped early on a cancellation event.
    """
    registry: UnitRegistry
    registered: List[str] = field(default_factory=list)
    failures: List[CollectionFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.cancelled


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def collect_units(
        tasks: Iterable[ExtractionTask],
        registry: Optional[UnitRegistry] = None,
        max_workers: Optional[int] = None,
        cancellation_event: Optional[threading.Event] = None,
        freeze: bool = True,
) -> CollectionResult:
    """
    Execute extraction tasks in parallel and register their units.

    Workers only build data; registration happens in the calling thread as
    futures complete, so registry writes are never interleaved.

    Args:
        tasks: Callables returning a Unit or a (name, tree, catalog) triple.
        registry: Target registry; a new one is created when omitted.
        max_workers: Thread pool size (None lets the executor decide).
        cancellation_event: Optional event that stops dispatch and collection.
        freeze: Freeze the registry once all tasks are done.

    Returns:
        CollectionResult: Registered names, isolated failures and the registry.
    """
    target = registry if registry is not None else UnitRegistry()
    result = CollectionResult(registry=target)

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ExtractionWorker") as executor:
        futures: Dict[Future, str] = {}

        for index, task in enumerate(tasks):
            if cancellation_event and cancellation_event.is_set():
                result.cancelled = True
                break
            label = getattr(task, "unit_name", None) or f"task-{index}"
            futures[executor.submit(task)] = str(label)

        for future in as_completed(futures):
            label = futures[future]

            if cancellation_event and cancellation_event.is_set():
                result.cancelled = True
                for pending in futures:
                    pending.cancel()
                break

            try:
                unit = _as_unit(future.result())
            except Exception as e:
                logger.error(f"Collector: Extraction task '{label}' failed: {e}")
                result.failures.append(CollectionFailure(task=label, error=str(e)))
                continue

            try:
                target.add(unit)
            except DuplicateUnit as e:
                logger.warning(f"Collector: {e}")
                result.failures.append(CollectionFailure(task=label, error=str(e), duplicate=True))
                continue
            except (NavIndexError, ValueError) as e:
                logger.error(f"Collector: Unit '{unit.name}' rejected: {e}")
                result.failures.append(CollectionFailure(task=label, error=str(e)))
                continue

            result.registered.append(unit.name)

    if freeze:
        target.freeze()

    logger.info(
        f"Collector: {len(result.registered)} units registered, "
        f"{len(result.failures)} failures."
    )
    return result


# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _as_unit(payload: UnitPayload) -> Unit:
    """Normalize a task payload into a Unit."""
    if isinstance(payload, Unit):
        return payload
    if isinstance(payload, tuple) and len(payload) == 3:
        name, tree, catalog = payload
        if isinstance(tree, TreeNode) and isinstance(catalog, Catalog):
            return Unit(name=name, tree=tree, catalog=catalog)
    raise TypeError(f"Extraction task returned an unsupported payload: {type(payload).__name__}.")
