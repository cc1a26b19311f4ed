from __future__ import annotations

"""
Index Merger Service.

Combines partial registries (build shards, incremental rebuilds, workspace
members) into one site-wide registry. Units are atomic: when a name appears
in several sources the winner, chosen by the priority rule, replaces the
loser whole. Sources are only read; the result is a new frozen registry.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from navindex.core.services.registry import UnitRegistry
from navindex.domain.unit_models import Unit

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PRIORITY RULES
# -----------------------------------------------------------------------------

LAST_WINS = "last_wins"
FIRST_WINS = "first_wins"
PRIORITY_RULES: Tuple[str, ...] = (LAST_WINS, FIRST_WINS)


@dataclass(frozen=True)
class MergeReport:
    """
    Bookkeeping of a merge run.

    Attributes:
        sources: Number of source registries consumed.
        units: Number of units in the merged registry.
        replaced: Unit names that were resolved by priority, in first-conflict order.
    """
    sources: int
    units: int
    replaced: List[str] = field(default_factory=list)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def merge_registries(sources: Iterable[UnitRegistry], priority: str = LAST_WINS) -> UnitRegistry:
    """
    Merge registries in caller order.

    Args:
        sources: Registries ordered from oldest to newest.
        priority: 'last_wins' (newest source wins) or 'first_wins'.

    Returns:
        UnitRegistry: A new frozen registry. Unit order is the first-seen
        order of names across sources.

    Raises:
        ValueError: If the priority rule is unknown.
    """
    merged, _ = merge_with_report(sources, priority)
    return merged


def merge_with_report(
        sources: Iterable[UnitRegistry],
        priority: str = LAST_WINS,
) -> Tuple[UnitRegistry, MergeReport]:
    """
    Merge registries and describe which conflicts were resolved.

    Each unit of each source is visited exactly once.

    Args:
        sources: Registries ordered from oldest to newest.
        priority: 'last_wins' or 'first_wins'.

    Returns:
        Tuple[UnitRegistry, MergeReport]: The merged registry and its report.
    """
    if priority not in PRIORITY_RULES:
        raise ValueError(f"Unknown merge priority '{priority}'. Expected one of {PRIORITY_RULES}.")

    # Dict assignment keeps the first-seen slot while swapping the value
    chosen: Dict[str, Unit] = {}
    replaced: List[str] = []
    conflicted = set()
    source_count = 0

    for source in sources:
        source_count += 1
        for unit in source.all_units():
            if unit.name not in chosen:
                chosen[unit.name] = unit
                continue

            if unit.name not in conflicted:
                conflicted.add(unit.name)
                replaced.append(unit.name)

            if priority == LAST_WINS:
                logger.debug(f"Merger: Unit '{unit.name}' replaced by source #{source_count}.")
                chosen[unit.name] = unit
            else:
                logger.debug(f"Merger: Unit '{unit.name}' from source #{source_count} ignored.")

    merged = UnitRegistry(list(chosen.values())).freeze()
    report = MergeReport(sources=source_count, units=len(merged), replaced=replaced)

    logger.info(
        f"Merger: {source_count} sources merged into {report.units} units "
        f"({len(replaced)} conflicts resolved by {priority})."
    )
    return merged, report
