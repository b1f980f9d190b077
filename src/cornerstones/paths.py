"""Hamiltonian path catalog for the cross-shaped grid."""

import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

from .grid import ADJACENCY, CROSS_POSITIONS, is_adjacent


logger = logging.getLogger(__name__)

Path = Tuple[int, ...]

PATH_LENGTH = len(CROSS_POSITIONS)

# Indices are referenced by stored puzzles, so entries are never reordered
HAMILTONIAN_PATHS: Tuple[Path, ...] = (
    (1, 5, 4, 8, 9, 13, 14, 10, 6, 2, 7, 11),
    (4, 8, 13, 9, 5, 1, 2, 6, 10, 14, 11, 7),
    (1, 2, 7, 11, 14, 13, 8, 4, 5, 6, 10, 9),
    (5, 1, 2, 6, 7, 11, 10, 14, 13, 9, 8, 4),
    (11, 7, 2, 1, 6, 10, 14, 13, 9, 5, 4, 8),
    (8, 4, 5, 1, 6, 2, 7, 11, 14, 10, 9, 13),
    (9, 5, 4, 8, 13, 14, 10, 6, 1, 2, 7, 11),
    (14, 13, 9, 10, 11, 7, 6, 2, 1, 5, 4, 8),
    (2, 1, 4, 5, 9, 8, 13, 14, 11, 10, 6, 7),
    (7, 11, 10, 14, 9, 13, 8, 4, 5, 1, 2, 6),
)


def is_valid_hamiltonian_path(path: Sequence[int]) -> bool:
    """
    Check the Hamiltonian path invariant.

    The path must have exactly 12 entries, cover every cross position once,
    and step between adjacent positions only.
    """
    if path is None or len(path) != PATH_LENGTH:
        return False
    if set(path) != set(CROSS_POSITIONS):
        return False
    return all(is_adjacent(a, b) for a, b in zip(path, path[1:]))


def path_errors(path: Sequence[int]) -> List[str]:
    """Describe every way in which `path` breaks the Hamiltonian invariant."""
    errors: List[str] = []
    if len(path) != PATH_LENGTH:
        errors.append(f"Path has {len(path)} positions, expected {PATH_LENGTH}")

    outside = [p for p in path if p not in ADJACENCY]
    if outside:
        errors.append(f"Positions outside the cross: {outside}")

    repeated = sorted({p for p in path if list(path).count(p) > 1})
    if repeated:
        errors.append(f"Repeated positions: {repeated}")

    missing = sorted(set(CROSS_POSITIONS) - set(path))
    if missing:
        errors.append(f"Missing positions: {missing}")

    for a, b in zip(path, path[1:]):
        if not is_adjacent(a, b):
            errors.append(f"Positions {a} and {b} are not adjacent")
    return errors


def _extend_paths(
    current: List[int],
    visited: set,
    found: List[Path],
) -> None:
    if len(current) == PATH_LENGTH:
        found.append(tuple(current))
        return

    for neighbor in sorted(ADJACENCY[current[-1]]):
        if neighbor in visited:
            continue
        current.append(neighbor)
        visited.add(neighbor)
        try:
            _extend_paths(current, visited, found)
        finally:
            current.pop()
            visited.discard(neighbor)


def find_all_hamiltonian_paths() -> List[Path]:
    """
    Enumerate every Hamiltonian path of the cross by backtracking.

    Paths are directed, so a path and its reverse are both returned. The
    result is deduplicated and ordered by start position, then
    lexicographically.
    """
    found: List[Path] = []
    for start in CROSS_POSITIONS:
        _extend_paths([start], {start}, found)

    unique = remove_duplicate_paths(found)
    logger.info("Found %d unique Hamiltonian paths", len(unique))
    return unique


def remove_duplicate_paths(paths: Iterable[Sequence[int]]) -> List[Path]:
    """Drop repeated paths, keeping first-seen order."""
    seen = set()
    unique: List[Path] = []
    for path in paths:
        key = tuple(path)
        if key not in seen:
            seen.add(key)
            unique.append(key)
    return unique


class PathCatalog:
    """
    Immutable, ordered collection of valid Hamiltonian paths.

    Catalog order matters: the puzzle builder breaks ties by the lowest
    index, and stored puzzles refer to paths by index.
    """

    __slots__ = ("_paths",)

    def __init__(self, paths: Iterable[Sequence[int]] = HAMILTONIAN_PATHS):
        normalized = tuple(tuple(p) for p in paths)
        for index, path in enumerate(normalized):
            if not is_valid_hamiltonian_path(path):
                raise ValueError(
                    f"Catalog entry {index} is not a Hamiltonian path: "
                    + "; ".join(path_errors(path))
                )
        self._paths = normalized

    @property
    def paths(self) -> Tuple[Path, ...]:
        return self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __getitem__(self, index: int) -> Path:
        return self._paths[index]

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __contains__(self, path) -> bool:
        return tuple(path) in self._paths

    def __eq__(self, other) -> bool:
        return isinstance(other, PathCatalog) and self._paths == other._paths

    def __hash__(self) -> int:
        return hash(self._paths)

    def __repr__(self) -> str:
        return f"PathCatalog({len(self._paths)} paths)"

    def index_of(self, path: Sequence[int]) -> int:
        return self._paths.index(tuple(path))

    def extend(self, paths: Iterable[Sequence[int]]) -> "PathCatalog":
        """Return a new catalog with `paths` appended, skipping ones already present."""
        combined = list(self._paths)
        for path in paths:
            key = tuple(path)
            if key not in combined:
                combined.append(key)
        return PathCatalog(combined)

    def to_lists(self) -> List[List[int]]:
        return [list(p) for p in self._paths]


DEFAULT_CATALOG = PathCatalog(HAMILTONIAN_PATHS)
