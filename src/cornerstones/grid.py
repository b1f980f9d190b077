"""Cross-shaped grid topology and grid utilities."""

from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence


GRID_SIZE = 4
GRID_CELLS = GRID_SIZE * GRID_SIZE

# The four corners of the 4x4 square never hold a letter
CORNER_POSITIONS: FrozenSet[int] = frozenset({0, 3, 12, 15})
CROSS_POSITIONS: tuple = (1, 2, 4, 5, 6, 7, 8, 9, 10, 11, 13, 14)

ADJACENCY: Mapping[int, FrozenSet[int]] = MappingProxyType({
    1: frozenset({2, 4, 5, 6}),
    2: frozenset({1, 5, 6, 7}),
    4: frozenset({1, 5, 8, 9}),
    5: frozenset({1, 2, 4, 6, 8, 9, 10}),
    6: frozenset({1, 2, 5, 7, 9, 10, 11}),
    7: frozenset({2, 6, 10, 11}),
    8: frozenset({4, 5, 9, 13}),
    9: frozenset({4, 5, 6, 8, 10, 13, 14}),
    10: frozenset({5, 6, 7, 9, 11, 13, 14}),
    11: frozenset({6, 7, 10, 14}),
    13: frozenset({8, 9, 10, 14}),
    14: frozenset({9, 10, 11, 13}),
})

REGIONS: Mapping[str, FrozenSet[int]] = MappingProxyType({
    "top": frozenset({1, 2}),
    "center": frozenset({4, 5, 6, 7}),
    "left": frozenset({8, 9}),
    "right": frozenset({10, 11}),
    "bottom": frozenset({13, 14}),
})


def neighbors(position: int) -> FrozenSet[int]:
    """Active positions reachable from `position` in one step."""
    return ADJACENCY.get(position, frozenset())


def is_adjacent(a: int, b: int) -> bool:
    return b in ADJACENCY.get(a, ())


def is_filled(grid: Sequence[str], position: int) -> bool:
    """True if `position` is inside the grid and holds a non-blank letter."""
    if position < 0 or position >= len(grid):
        return False
    cell = grid[position]
    return bool(cell) and bool(cell.strip())


def empty_grid() -> List[str]:
    return [""] * GRID_CELLS


def build_grid(word: str, path: Sequence[int]) -> Optional[List[str]]:
    """
    Lay the letters of `word` onto the grid along `path`.

    Letter `word[i]` goes to cell `path[i]`. Returns None if the word and path
    lengths differ from the number of cross positions, or if the path touches
    a position outside the cross.
    """
    if len(word) != len(CROSS_POSITIONS) or len(path) != len(CROSS_POSITIONS):
        return None

    grid = empty_grid()
    for letter, position in zip(word.upper(), path):
        if position not in ADJACENCY:
            return None
        grid[position] = letter
    return grid


def grid_signature(grid: Sequence[str]) -> str:
    """Canonical string key for a grid, used for memoisation."""
    return "|".join(cell or "" for cell in grid)


def filled_positions(grid: Sequence[str]) -> List[int]:
    return [i for i in range(len(grid)) if is_filled(grid, i)]


def word_from_path(grid: Sequence[str], path: Sequence[int]) -> str:
    """Concatenate the letters found along `path`, skipping empty cells."""
    return "".join(grid[p] for p in path if is_filled(grid, p)).upper()


def path_is_connected(path: Sequence[int]) -> bool:
    """True if every consecutive pair in `path` is adjacent."""
    return all(is_adjacent(a, b) for a, b in zip(path, path[1:]))


def unreachable_positions(grid: Sequence[str]) -> List[int]:
    """
    Filled positions that cannot be reached from the first filled cell.

    Traversal only steps through filled cells along adjacency edges. An empty
    grid has no unreachable positions.
    """
    filled = filled_positions(grid)
    if not filled:
        return []

    visited = set()
    stack = [filled[0]]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        for neighbor in neighbors(current):
            if neighbor not in visited and is_filled(grid, neighbor):
                stack.append(neighbor)

    return [p for p in filled if p not in visited]


def region_of(position: int) -> Optional[str]:
    for name, members in REGIONS.items():
        if position in members:
            return name
    return None


def classify_positions_by_region(path: Sequence[int]) -> Dict[str, List[int]]:
    """Group the positions of `path` by the arm of the cross they sit in."""
    regions: Dict[str, List[int]] = {}
    for position in path:
        name = region_of(position)
        if name is not None:
            regions.setdefault(name, []).append(position)
    return regions


def render_grid(grid: Sequence[str], empty: str = ".") -> str:
    """Render the grid as four text rows."""
    cells = [cell if cell else empty for cell in grid]
    cells += [empty] * (GRID_CELLS - len(cells))
    return "\n".join(
        "".join(cells[row * GRID_SIZE:(row + 1) * GRID_SIZE])
        for row in range(GRID_SIZE)
    )
