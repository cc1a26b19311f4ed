from __future__ import annotations

"""
Navigation Artifact Serializer.

Encodes a frozen registry as a UTF-8 JSON Lines document:

    line 1      {"format":"navindex","version":1,"units":[<names>]}
    line i + 2  {"name":...,"tree":{...},"catalog":{...}}   (unit i)

Keys are written in a fixed order with compact separators, so identical
registries always produce byte-identical artifacts. The header lists every
unit up front, which lets ArtifactReader answer lookups by streaming lines
and decoding only the requested record. Unknown keys are ignored on read
to keep older readers compatible with newer writers.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from navindex.core.services.registry import UnitRegistry
from navindex.domain.errors import DuplicateUnit, MalformedArtifact, NotFound
from navindex.domain.unit_models import Unit
from navindex.infra.fs import atomic_write_text

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FORMAT CONSTANTS
# -----------------------------------------------------------------------------

ARTIFACT_FORMAT = "navindex"
ARTIFACT_VERSION = 1
ARTIFACT_ENCODING = "utf-8"

_SEPARATORS = (",", ":")


@dataclass(frozen=True)
class ArtifactFailure:
    """
    An artifact that could not be loaded.

    Attributes:
        source: Path or URL of the artifact.
        error: Description of the failure.
    """
    source: str
    error: str


# -----------------------------------------------------------------------------
# ENCODING
# -----------------------------------------------------------------------------

def serialize_registry(registry: UnitRegistry) -> str:
    """
    Encode a registry into its artifact text.

    Args:
        registry: Registry to encode (normally frozen).

    Returns:
        str: JSON Lines document terminated by a newline.
    """
    units = list(registry.all_units())
    header = {
        "format": ARTIFACT_FORMAT,
        "version": ARTIFACT_VERSION,
        "units": [unit.name for unit in units],
    }

    lines = [_dump(header)]
    lines.extend(_dump(unit.to_dict()) for unit in units)
    return "\n".join(lines) + "\n"


def write_artifact(registry: UnitRegistry, path: str) -> str:
    """
    Serialize a registry and atomically persist it.

    Returns:
        str: Absolute path of the written artifact.
    """
    written = atomic_write_text(path, serialize_registry(registry), encoding=ARTIFACT_ENCODING)
    logger.info(f"Artifact: {len(registry)} units written to {written}")
    return written


# -----------------------------------------------------------------------------
# DECODING
# -----------------------------------------------------------------------------

def deserialize_registry(text: str, source: Optional[str] = None) -> UnitRegistry:
    """
    Decode artifact text into a frozen registry.

    Args:
        text: Full artifact content.
        source: Optional label used in error messages.

    Returns:
        UnitRegistry: Frozen registry with units in artifact order.

    Raises:
        MalformedArtifact: On any structural problem.
    """
    # Records end with "\n" only; splitlines() would also break on U+2028 inside text
    lines = [line for line in text.split("\n") if line.strip()]
    if not lines:
        raise MalformedArtifact("Artifact is empty.", source=source)

    names = _parse_header(lines[0], source)
    records = lines[1:]
    if len(records) != len(names):
        raise MalformedArtifact(
            f"Header announces {len(names)} units but {len(records)} records follow.",
            source=source,
        )

    registry = UnitRegistry()
    for offset, (expected, raw) in enumerate(zip(names, records)):
        line_no = offset + 2
        unit = _parse_unit(raw, source, line_no)
        if unit.name != expected:
            raise MalformedArtifact(
                f"Record '{unit.name}' does not match header entry '{expected}'.",
                source=source, line=line_no,
            )
        try:
            registry.add(unit)
        except DuplicateUnit as e:
            raise MalformedArtifact(str(e), source=source, line=line_no) from e

    return registry.freeze()


def read_artifact(path: str) -> UnitRegistry:
    """Load an artifact file eagerly into a frozen registry."""
    with open(path, "r", encoding=ARTIFACT_ENCODING) as f:
        text = f.read()
    return deserialize_registry(text, source=path)


def load_artifacts(paths: Iterable[str]) -> Tuple[List[UnitRegistry], List[ArtifactFailure]]:
    """
    Load several artifacts, isolating the failure of any single one.

    Args:
        paths: Artifact paths in caller order.

    Returns:
        Tuple[List[UnitRegistry], List[ArtifactFailure]]: Loaded registries
        (in input order, failures skipped) and the failures.
    """
    registries: List[UnitRegistry] = []
    failures: List[ArtifactFailure] = []

    for path in paths:
        try:
            registries.append(read_artifact(path))
        except (MalformedArtifact, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Artifact: Skipping '{path}': {e}")
            failures.append(ArtifactFailure(source=path, error=str(e)))

    return registries, failures


# -----------------------------------------------------------------------------
# LAZY READER
# -----------------------------------------------------------------------------

class ArtifactReader:
    """
    Lazy accessor over an artifact file.

    Only the header is decoded on construction. Lookups stream the file
    line by line and decode nothing but the requested record.
    """

    def __init__(self, path: str) -> None:
        self._path = path
        with open(path, "r", encoding=ARTIFACT_ENCODING) as f:
            first = f.readline()
        if not first.strip():
            raise MalformedArtifact("Artifact is empty.", source=path)
        self._names = _parse_header(first, path)
        self._positions: Dict[str, int] = {}
        for index, name in enumerate(self._names):
            if name in self._positions:
                raise MalformedArtifact(f"Unit '{name}' listed twice in header.", source=path)
            self._positions[name] = index

    @property
    def path(self) -> str:
        return self._path

    def unit_names(self) -> List[str]:
        return list(self._names)

    def __contains__(self, unit_name: object) -> bool:
        return unit_name in self._positions

    def __len__(self) -> int:
        return len(self._names)

    def get(self, unit_name: str) -> Unit:
        """
        Decode a single unit.

        Raises:
            NotFound: If the header does not list the unit.
            MalformedArtifact: If the record is missing or invalid.
        """
        index = self._positions.get(unit_name)
        if index is None:
            raise NotFound("Unit", unit_name)

        for position, line_no, raw in self._records():
            if position == index:
                unit = _parse_unit(raw, self._path, line_no)
                if unit.name != unit_name:
                    raise MalformedArtifact(
                        f"Record '{unit.name}' does not match header entry '{unit_name}'.",
                        source=self._path, line=line_no,
                    )
                return unit.seal()

        raise MalformedArtifact(f"Record for unit '{unit_name}' is missing.", source=self._path)

    def iter_units(self) -> Iterator[Unit]:
        """Yield every unit in artifact order, decoding one record at a time."""
        for position, line_no, raw in self._records():
            if position >= len(self._names):
                raise MalformedArtifact("More records than announced in header.", source=self._path)
            yield _parse_unit(raw, self._path, line_no).seal()

    def _records(self) -> Iterator[Tuple[int, int, str]]:
        """Yield (record index, line number, raw line) for non-empty lines after the header."""
        with open(self._path, "r", encoding=ARTIFACT_ENCODING) as f:
            f.readline()
            position = 0
            for line_no, raw in enumerate(f, start=2):
                if not raw.strip():
                    continue
                yield position, line_no, raw
                position += 1


# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _dump(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=_SEPARATORS)


def _load_line(raw: str, source: Optional[str], line_no: int) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedArtifact(f"Invalid JSON: {e}", source=source, line=line_no) from e


def _parse_header(raw: str, source: Optional[str]) -> List[str]:
    """Validate the header record and return the announced unit names."""
    header = _load_line(raw, source, 1)
    if not isinstance(header, dict):
        raise MalformedArtifact("Header must be an object.", source=source, line=1)
    if header.get("format") != ARTIFACT_FORMAT:
        raise MalformedArtifact(f"Unknown artifact format: {header.get('format')!r}.", source=source, line=1)

    version = header.get("version")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise MalformedArtifact(f"Invalid artifact version: {version!r}.", source=source, line=1)
    if version > ARTIFACT_VERSION:
        logger.debug(f"Artifact: Reading version {version} with a version {ARTIFACT_VERSION} reader.")

    names = header.get("units")
    if not isinstance(names, list) or not all(isinstance(n, str) and n for n in names):
        raise MalformedArtifact("Header 'units' must be a list of names.", source=source, line=1)
    return names


def _parse_unit(raw: str, source: Optional[str], line_no: int) -> Unit:
    data = _load_line(raw, source, line_no)
    try:
        return Unit.from_dict(data)
    except MalformedArtifact as e:
        raise MalformedArtifact(str(e), source=source, line=line_no) from e
