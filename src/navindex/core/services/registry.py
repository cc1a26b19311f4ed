from __future__ import annotations

"""
Unit Registry Service.

Holds the navigation data of every compilation unit produced during one
build invocation. Registration is write-once and atomic per unit name so
that any number of producer threads may feed the same registry. Once all
producers are done the registry is frozen and handed, read-only, to the
merger and the serializer.
"""

import logging
import threading
from typing import Dict, Iterator, List, Optional

from navindex.domain.catalog_models import Catalog
from navindex.domain.errors import DuplicateUnit, FrozenError, NotFound
from navindex.domain.tree_models import TreeNode, validate_name
from navindex.domain.unit_models import Unit

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# LAZY VIEW
# -----------------------------------------------------------------------------

class UnitsView:
    """
    Restartable, read-only iterable over the units of a registry.

    Every call to iter() walks a fresh snapshot in registration order;
    iterating has no side effect on the registry.
    """

    def __init__(self, registry: "UnitRegistry") -> None:
        self._registry = registry

    def __iter__(self) -> Iterator[Unit]:
        for unit in self._registry._snapshot():
            yield unit

    def __len__(self) -> int:
        return len(self._registry)


# -----------------------------------------------------------------------------
# REGISTRY
# -----------------------------------------------------------------------------

class UnitRegistry:
    """
    Write-once mapping from unit name to Unit, kept in registration order.
    """

    def __init__(self, units: Optional[List[Unit]] = None) -> None:
        """
        Initialize the registry with thread-safe storage.

        Args:
            units: Optional units to register immediately, in order.
        """
        self._units: Dict[str, Unit] = {}
        self._lock = threading.Lock()
        self._frozen = False

        for unit in units or []:
            self.add(unit)

    # -------------------------------------------------------------------------
    # REGISTRATION
    # -------------------------------------------------------------------------

    def register(self, unit_name: str, tree_root: TreeNode, catalog: Catalog) -> Unit:
        """
        Register the navigation data of a unit.

        The tree and catalog are sealed on success; they must not be
        modified by the producer afterwards.

        Args:
            unit_name: Unique unit identifier.
            tree_root: Root node of the unit source tree.
            catalog: Item catalog of the unit.

        Returns:
            Unit: The stored unit.

        Raises:
            DuplicateUnit: If the name is already registered.
            FrozenError: If the registry has been frozen.
            InvalidName: If the name is empty or not a single path segment.
        """
        return self.add(Unit(name=unit_name, tree=tree_root, catalog=catalog))

    def add(self, unit: Unit) -> Unit:
        """Register an already assembled Unit (see register)."""
        validate_name(unit.name, kind="unit")

        # Check-and-insert must be a single critical section
        with self._lock:
            if self._frozen:
                raise FrozenError("Registry is frozen; no further units can be registered.")
            if unit.name in self._units:
                raise DuplicateUnit(unit.name)
            unit.seal()
            self._units[unit.name] = unit

        logger.debug(f"Registry: Unit '{unit.name}' registered ({unit.tree.file_count()} files).")
        return unit

    def freeze(self) -> "UnitRegistry":
        """Mark the registry read-only and return it."""
        with self._lock:
            self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # -------------------------------------------------------------------------
    # LOOKUP
    # -------------------------------------------------------------------------

    def get(self, unit_name: str) -> Unit:
        """
        Fetch a registered unit.

        Raises:
            NotFound: If no unit carries that name.
        """
        with self._lock:
            unit = self._units.get(unit_name)
        if unit is None:
            raise NotFound("Unit", unit_name)
        return unit

    def all_units(self) -> UnitsView:
        """Return a lazy, restartable view over units in registration order."""
        return UnitsView(self)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._units)

    def __contains__(self, unit_name: object) -> bool:
        with self._lock:
            return unit_name in self._units

    def __len__(self) -> int:
        with self._lock:
            return len(self._units)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"UnitRegistry({len(self)} units, {state})"

    # -------------------------------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------------------------------

    def _snapshot(self) -> List[Unit]:
        with self._lock:
            return list(self._units.values())
