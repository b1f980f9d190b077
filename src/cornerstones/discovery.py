"""
Path-recording word discovery.

Extends the plain word finder by recording every distinct grid path that
spells each word. Used for diagnostics and by the validator's cross-check;
distinct paths never inflate the word count.
"""

import logging
import time
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, Field

from .finder import MAX_WORD_LENGTH, MIN_WORD_LENGTH, WordFinder
from .grid import GRID_CELLS, grid_signature, is_filled, neighbors


logger = logging.getLogger(__name__)


class DiscoveryStatistics(BaseModel):
    total_words: int = 0
    average_length: float = 0.0
    length_distribution: Dict[int, int] = Field(default_factory=dict)
    shortest_word: int = 0
    longest_word: int = 0
    unique_letters: int = 0
    search_time: float = 0.0
    paths_explored: int = 0


class DiscoveryResult(BaseModel):
    """Words found on a grid together with every path that spells them."""
    all_words: Set[str] = Field(default_factory=set)
    word_paths: Dict[str, List[List[int]]] = Field(default_factory=dict)
    words_by_length: Dict[int, Set[str]] = Field(default_factory=dict)
    statistics: DiscoveryStatistics = Field(default_factory=DiscoveryStatistics)


class SearchStats(BaseModel):
    total_searches: int = 0
    cache_hits: int = 0
    paths_explored: int = 0


class WordCoverage(BaseModel):
    position_usage: List[int] = Field(default_factory=lambda: [0] * GRID_CELLS)
    letter_usage: Dict[str, int] = Field(default_factory=dict)
    average_path_length: float = 0.0


class WordRelationships(BaseModel):
    """Word pairs grouped by the prefix or suffix they share."""
    shared_prefixes: Dict[str, List[Tuple[str, str]]] = Field(default_factory=dict)
    shared_suffixes: Dict[str, List[Tuple[str, str]]] = Field(default_factory=dict)


def common_prefix(a: str, b: str) -> str:
    length = 0
    for x, y in zip(a, b):
        if x != y:
            break
        length += 1
    return a[:length]


def common_suffix(a: str, b: str) -> str:
    return common_prefix(a[::-1], b[::-1])[::-1]


class WordDiscovery(WordFinder):
    """Word finder that also keeps every path for every discovered word."""

    def __init__(
        self,
        dictionary: Iterable[str] = (),
        min_word_length: int = MIN_WORD_LENGTH,
        max_word_length: int = MAX_WORD_LENGTH,
        cache_results: bool = True,
    ):
        super().__init__(
            dictionary,
            min_word_length=min_word_length,
            max_word_length=max_word_length,
            cache_results=cache_results,
        )
        self._results: Dict[str, DiscoveryResult] = {}
        self.stats = SearchStats()

    def without_words(self, words: Iterable[str]) -> "WordDiscovery":
        """A new discovery engine whose dictionary excludes `words`."""
        removed = {w.upper() for w in words}
        return self.with_dictionary(w for w in self.dictionary if w not in removed)

    def clear_cache(self) -> None:
        super().clear_cache()
        self._results.clear()
        self.stats = SearchStats()

    def discover(self, grid: Sequence[str]) -> DiscoveryResult:
        """Find all words on `grid` and record every path for each."""
        self.stats.total_searches += 1

        key = grid_signature(grid)
        if self.cache_results and key in self._results:
            self.stats.cache_hits += 1
            return self._results[key].model_copy(deep=True)

        started = time.perf_counter()
        result = DiscoveryResult()
        explored_before = self.stats.paths_explored

        if grid and self.dictionary:
            for position in range(len(grid)):
                if is_filled(grid, position):
                    self._walk(grid, position, "", [], result)

        self._fill_statistics(result)
        result.statistics.search_time = (time.perf_counter() - started) * 1000
        result.statistics.paths_explored = self.stats.paths_explored - explored_before

        logger.debug(
            "Word discovery complete: %d words in %.2fms",
            len(result.all_words), result.statistics.search_time,
        )

        if self.cache_results:
            self._results[key] = result.model_copy(deep=True)
        return result

    def _walk(
        self,
        grid: Sequence[str],
        position: int,
        prefix: str,
        path: List[int],
        result: DiscoveryResult,
    ) -> None:
        self.stats.paths_explored += 1
        current = prefix + grid[position].strip().upper()
        if current not in self.prefixes:
            return

        path.append(position)
        try:
            if self.min_word_length <= len(current) <= self.max_word_length and current in self.dictionary:
                result.all_words.add(current)
                result.word_paths.setdefault(current, []).append(list(path))
                result.words_by_length.setdefault(len(current), set()).add(current)

            if len(current) < self.max_word_length:
                for neighbor in sorted(neighbors(position)):
                    if neighbor not in path and is_filled(grid, neighbor):
                        self._walk(grid, neighbor, current, path, result)
        finally:
            path.pop()

    @staticmethod
    def _fill_statistics(result: DiscoveryResult) -> None:
        words = sorted(result.all_words)
        stats = result.statistics
        stats.total_words = len(words)
        if not words:
            return

        lengths = [len(w) for w in words]
        stats.average_length = sum(lengths) / len(words)
        distribution: Dict[int, int] = {}
        for length in lengths:
            distribution[length] = distribution.get(length, 0) + 1
        stats.length_distribution = distribution
        stats.shortest_word = min(lengths)
        stats.longest_word = max(lengths)
        stats.unique_letters = len(set("".join(words)))

    def find_all_paths_for_word(self, word: str, grid: Sequence[str]) -> List[List[int]]:
        """Every simple adjacent path on `grid` spelling `word`."""
        target = word.strip().upper()
        if not target or len(target) > self.max_word_length:
            return []

        paths: List[List[int]] = []
        for start in range(len(grid)):
            if is_filled(grid, start) and grid[start].upper() == target[0]:
                self._collect_paths(grid, target, [start], paths)
        return paths

    def _collect_paths(
        self,
        grid: Sequence[str],
        target: str,
        path: List[int],
        paths: List[List[int]],
    ) -> None:
        if len(path) == len(target):
            paths.append(list(path))
            return

        next_letter = target[len(path)]
        for neighbor in sorted(neighbors(path[-1])):
            if neighbor in path or not is_filled(grid, neighbor):
                continue
            if grid[neighbor].upper() == next_letter:
                path.append(neighbor)
                try:
                    self._collect_paths(grid, target, path, paths)
                finally:
                    path.pop()

    @staticmethod
    def validate_word_path(grid: Sequence[str], path: Sequence[int], expected_word: str) -> bool:
        """True if `path` is a simple adjacent walk spelling `expected_word`."""
        if not path or len(path) != len(expected_word):
            return False
        if len(set(path)) != len(path):
            return False
        for position, letter in zip(path, expected_word.upper()):
            if not is_filled(grid, position) or grid[position].upper() != letter:
                return False
        return all(b in neighbors(a) for a, b in zip(path, path[1:]))

    def find_shortest_path(self, word: str, grid: Sequence[str]) -> Optional[List[int]]:
        """
        First path spelling `word`, or None.

        Each cell holds one letter, so every path has exactly len(word) cells;
        shortest and longest differ only in which path of equal length is
        returned (first and last in search order).
        """
        paths = self.find_all_paths_for_word(word, grid)
        return min(paths, key=len) if paths else None

    def find_longest_path(self, word: str, grid: Sequence[str]) -> Optional[List[int]]:
        """Last path spelling `word` in search order, or None. See find_shortest_path."""
        paths = self.find_all_paths_for_word(word, grid)
        return max(paths, key=len) if paths else None

    @staticmethod
    def identify_cornerstone_words(words: Iterable[str], common_words: Iterable[str]) -> Set[str]:
        common = set(common_words)
        return {w for w in words if w in common}

    @staticmethod
    def analyze_word_coverage(result: DiscoveryResult) -> WordCoverage:
        """How often each grid position and letter is used by the first path of each word."""
        coverage = WordCoverage()
        path_lengths: List[int] = []

        for word, paths in result.word_paths.items():
            if not paths:
                continue
            path = paths[0]
            for position in path:
                if 0 <= position < len(coverage.position_usage):
                    coverage.position_usage[position] += 1
            for letter in word:
                coverage.letter_usage[letter] = coverage.letter_usage.get(letter, 0) + 1
            path_lengths.append(len(path))

        if path_lengths:
            coverage.average_path_length = sum(path_lengths) / len(path_lengths)
        return coverage

    @staticmethod
    def analyze_word_relationships(result: DiscoveryResult, min_length: int = 3) -> WordRelationships:
        """Pairs of discovered words sharing a prefix or suffix of at least `min_length` letters."""
        relationships = WordRelationships()
        words = sorted(result.all_words)
        for i, first in enumerate(words):
            for second in words[i + 1:]:
                prefix = common_prefix(first, second)
                if len(prefix) >= min_length:
                    relationships.shared_prefixes.setdefault(prefix, []).append((first, second))
                suffix = common_suffix(first, second)
                if len(suffix) >= min_length:
                    relationships.shared_suffixes.setdefault(suffix, []).append((first, second))
        return relationships

    @staticmethod
    def export_results(result: DiscoveryResult) -> Dict:
        return {
            "words": sorted(result.all_words),
            "wordPaths": {w: paths for w, paths in sorted(result.word_paths.items())},
            "wordsByLength": {
                length: sorted(words) for length, words in sorted(result.words_by_length.items())
            },
            "statistics": result.statistics.model_dump(),
            "exportedAt": datetime.now().isoformat(),
        }
