"""Word discovery on the cross-shaped grid by depth-first search."""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set

from .grid import grid_signature, is_filled, neighbors, path_is_connected, word_from_path


logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 4
MAX_WORD_LENGTH = 12


def normalize_words(words: Iterable[str]) -> FrozenSet[str]:
    """Uppercase and strip a word collection into a frozenset."""
    return frozenset(w.strip().upper() for w in words if w and w.strip())


def build_prefix_set(words: Iterable[str], max_length: int = MAX_WORD_LENGTH) -> FrozenSet[str]:
    """Every prefix (including the full word) of each word up to `max_length`."""
    prefixes = set()
    for word in words:
        for i in range(1, min(len(word), max_length) + 1):
            prefixes.add(word[:i])
    return frozenset(prefixes)


class WordFinder:
    """
    Finds every dictionary word spellable on a grid.

    A word is spelled by walking between adjacent, filled cells without
    revisiting a cell. The dictionary is fixed for the lifetime of a finder;
    use `with_dictionary` to get a finder over a different word set.
    """

    def __init__(
        self,
        dictionary: Iterable[str] = (),
        min_word_length: int = MIN_WORD_LENGTH,
        max_word_length: int = MAX_WORD_LENGTH,
        cache_results: bool = True,
    ):
        self.dictionary: FrozenSet[str] = normalize_words(dictionary)
        self.min_word_length = min_word_length
        self.max_word_length = max_word_length
        self.cache_results = cache_results
        self._prefixes: Optional[FrozenSet[str]] = None
        self._cache: Dict[str, FrozenSet[str]] = {}

    @property
    def prefixes(self) -> FrozenSet[str]:
        if self._prefixes is None:
            self._prefixes = build_prefix_set(self.dictionary, self.max_word_length)
        return self._prefixes

    def with_dictionary(self, dictionary: Iterable[str]) -> "WordFinder":
        return type(self)(
            dictionary,
            min_word_length=self.min_word_length,
            max_word_length=self.max_word_length,
            cache_results=self.cache_results,
        )

    def clear_cache(self) -> None:
        self._cache.clear()

    def find_all_words(self, grid: Sequence[str]) -> Set[str]:
        """Return the set of dictionary words reachable on `grid`."""
        if not grid or not self.dictionary:
            return set()

        key = grid_signature(grid)
        if self.cache_results and key in self._cache:
            return set(self._cache[key])

        found: Set[str] = set()
        visited: Set[int] = set()
        for position in range(len(grid)):
            if is_filled(grid, position):
                self._search(grid, position, "", visited, found)

        if self.cache_results:
            self._cache[key] = frozenset(found)
        return found

    def _search(
        self,
        grid: Sequence[str],
        position: int,
        prefix: str,
        visited: Set[int],
        found: Set[str],
    ) -> None:
        current = prefix + grid[position].strip().upper()
        if current not in self.prefixes:
            return

        if self.min_word_length <= len(current) <= self.max_word_length and current in self.dictionary:
            found.add(current)

        if len(current) >= self.max_word_length:
            return

        visited.add(position)
        try:
            for neighbor in neighbors(position):
                if neighbor not in visited and is_filled(grid, neighbor):
                    self._search(grid, neighbor, current, visited, found)
        finally:
            visited.discard(position)

    def is_valid_path(self, grid: Sequence[str], path: Sequence[int]) -> bool:
        """True if `path` is a simple adjacent walk spelling a dictionary word."""
        if len(path) < 2 or len(set(path)) != len(path):
            return False
        if not all(is_filled(grid, p) for p in path):
            return False
        if not path_is_connected(path):
            return False
        word = word_from_path(grid, path)
        return len(word) >= self.min_word_length and word in self.dictionary

    def find_word_path(self, grid: Sequence[str], word: str) -> Optional[List[int]]:
        """First simple adjacent path spelling `word`, or None."""
        target = word.strip().upper()
        if not target:
            return None

        for start in range(len(grid)):
            if is_filled(grid, start) and grid[start].upper() == target[0]:
                path = self._trace(grid, target, [start])
                if path:
                    return path
        return None

    def _trace(self, grid: Sequence[str], target: str, path: List[int]) -> Optional[List[int]]:
        if len(path) == len(target):
            return list(path)

        next_letter = target[len(path)]
        for neighbor in sorted(neighbors(path[-1])):
            if neighbor in path or not is_filled(grid, neighbor):
                continue
            if grid[neighbor].upper() != next_letter:
                continue
            path.append(neighbor)
            try:
                result = self._trace(grid, target, path)
            finally:
                path.pop()
            if result:
                return result
        return None


def get_cornerstone_words(words: Iterable[str], common_words: Iterable[str]) -> List[str]:
    """Sorted subset of `words` that are common words."""
    common = common_words if isinstance(common_words, (set, frozenset)) else set(common_words)
    return sorted(w for w in words if w in common)


def find_all_words(grid: Sequence[str], dictionary: Iterable[str]) -> Set[str]:
    """Convenience wrapper: find every dictionary word on `grid`."""
    return WordFinder(dictionary, cache_results=False).find_all_words(grid)
