"""
Puzzle construction from keystone words.

For a keystone word the builder lays the letters along every catalog path,
finds all words on each resulting grid, and keeps the path with the most
cornerstone words, provided it reaches the configured minimum.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional, Tuple

from .definitions import DefinitionResolver, resolve_definitions
from .finder import WordFinder, get_cornerstone_words, normalize_words
from .grid import build_grid
from .models import (
    BuildReport,
    ClassifiedWord,
    CleaningOutcome,
    CleaningStats,
    Difficulty,
    DictionaryCleaningStats,
    PathReport,
    Puzzle,
    classify_difficulty,
)
from .paths import DEFAULT_CATALOG, PATH_LENGTH, PathCatalog


logger = logging.getLogger(__name__)

DEFAULT_MIN_CORNERSTONE_WORDS = 20
KEYSTONE_PATTERN = re.compile(r'^[A-Z]+$')


def check_keystone_word(word, dictionary: Iterable[str]) -> Optional[str]:
    """Return why `word` cannot be a keystone word, or None if it can."""
    if not isinstance(word, str) or not word.strip():
        return "Keystone word must be a non-empty string"

    normalized = word.strip().upper()
    if len(normalized) != PATH_LENGTH:
        return f"Keystone word must be {PATH_LENGTH} letters, got {len(normalized)}: {normalized}"
    if not KEYSTONE_PATTERN.match(normalized):
        return f"Keystone word must contain only letters A-Z: {normalized}"
    if normalized not in dictionary:
        return f"Keystone word not in dictionary: {normalized}"
    return None


def classify_words(words: Iterable[str], common_words: Iterable[str]) -> List[ClassifiedWord]:
    """Tag each word as cornerstone or ordinary, sorted by word."""
    common = common_words if isinstance(common_words, (set, frozenset)) else set(common_words)
    return [
        ClassifiedWord(word=w, kind="cornerstone" if w in common else "ordinary")
        for w in sorted(words)
    ]


class PuzzleBuilder:
    """
    Builds puzzles from keystone words.

    Word sets are immutable for the lifetime of a builder. Removing words
    (after a cleaning pass) produces a new builder via `without_words`.
    """

    def __init__(
        self,
        dictionary: Iterable[str],
        common_words: Iterable[str] = (),
        catalog: PathCatalog = DEFAULT_CATALOG,
        min_cornerstone_words: int = DEFAULT_MIN_CORNERSTONE_WORDS,
        finder: Optional[WordFinder] = None,
        cleaning_stats: Optional[DictionaryCleaningStats] = None,
    ):
        self.dictionary = normalize_words(dictionary)
        if cleaning_stats is None:
            cleaning_stats = DictionaryCleaningStats(
                original_word_count=len(self.dictionary),
                cleaned_word_count=len(self.dictionary),
            )
        self.cleaning_stats = cleaning_stats
        self.common_words = frozenset(w for w in normalize_words(common_words) if len(w) >= 4)
        self.catalog = catalog
        self.min_cornerstone_words = min_cornerstone_words
        self.finder = finder if finder is not None else WordFinder(self.dictionary)
        logger.debug(
            "Builder ready with %d dictionary words and %d common words",
            len(self.dictionary), len(self.common_words),
        )

    def without_words(self, words: Iterable[str]) -> "PuzzleBuilder":
        """
        A builder whose dictionary and common words exclude `words`.

        Cleaning totals carry over; a call that removes at least one
        dictionary word counts as one cleaned puzzle.
        """
        removed = normalize_words(words)
        dictionary = self.dictionary - removed
        stats = self.cleaning_stats.model_copy()
        dropped = len(self.dictionary) - len(dictionary)
        if dropped:
            stats.words_removed += dropped
            stats.puzzles_with_cleaning += 1
        stats.cleaned_word_count = len(dictionary)
        return PuzzleBuilder(
            dictionary,
            self.common_words - removed,
            catalog=self.catalog,
            min_cornerstone_words=self.min_cornerstone_words,
            finder=self.finder.with_dictionary(dictionary),
            cleaning_stats=stats,
        )

    def with_catalog(self, catalog: PathCatalog) -> "PuzzleBuilder":
        return PuzzleBuilder(
            self.dictionary,
            self.common_words,
            catalog=catalog,
            min_cornerstone_words=self.min_cornerstone_words,
            finder=self.finder,
            cleaning_stats=self.cleaning_stats,
        )

    def is_valid_keystone_word(self, word) -> bool:
        return check_keystone_word(word, self.dictionary) is None

    def evaluate(self, keystone_word) -> BuildReport:
        """
        Try every catalog path for a keystone word.

        The report always lists per-path yields; `puzzle` is set only when at
        least one path reaches the cornerstone threshold. Ties go to the
        lowest catalog index.
        """
        reason = check_keystone_word(keystone_word, self.dictionary)
        if reason:
            logger.info("Rejected keystone word: %s", reason)
            return BuildReport(keystone_word=str(keystone_word), rejection_reason=reason)

        word = keystone_word.strip().upper()
        report = BuildReport(keystone_word=word)
        best: Optional[Puzzle] = None

        for path_index, path in enumerate(self.catalog):
            grid = build_grid(word, path)
            if grid is None:
                continue

            found = self.finder.find_all_words(grid)
            cornerstones = get_cornerstone_words(found, self.common_words)
            meets = len(cornerstones) >= self.min_cornerstone_words
            report.path_reports.append(PathReport(
                path_index=path_index,
                total_words=len(found),
                cornerstone_count=len(cornerstones),
                meets_threshold=meets,
            ))
            logger.debug(
                "Path %d: %d total words, %d cornerstone words",
                path_index, len(found), len(cornerstones),
            )

            if meets and (best is None or len(cornerstones) > best.cornerstone_count):
                best = Puzzle(
                    keystone_word=word,
                    path_index=path_index,
                    grid=grid,
                    all_words=sorted(found),
                    cornerstone_words=cornerstones,
                )

        if best is None:
            report.rejection_reason = (
                f"No catalog path yields {self.min_cornerstone_words} cornerstone words"
            )
            logger.info("No puzzle for %s: %s", word, report.rejection_reason)
        else:
            logger.info(
                "Built puzzle for %s on path %d: %d words, %d cornerstone",
                word, best.path_index, best.total_words, best.cornerstone_count,
            )
        report.puzzle = best
        return report

    def build_puzzle(self, keystone_word) -> Optional[Puzzle]:
        return self.evaluate(keystone_word).puzzle

    def clean_puzzle(self, puzzle: Puzzle, resolver: DefinitionResolver) -> CleaningOutcome:
        """
        Drop every word without a resolvable definition.

        The cornerstone threshold is checked again afterwards; if the cleaned
        puzzle falls below it, the outcome carries no puzzle. Removed words
        are reported so callers can derive a smaller dictionary.
        """
        logger.info("Cleaning words for puzzle %s", puzzle.keystone_word)

        def report_progress(processed: int, total: int, found: int) -> None:
            if processed % 20 == 0:
                logger.debug("Processed %d/%d words (%d defined)", processed, total, found)

        batch = resolve_definitions(puzzle.all_words, resolver, progress=report_progress)
        removed = set(batch.missing)

        all_words = [w for w in puzzle.all_words if w not in removed]
        cornerstone_words = [w for w in puzzle.cornerstone_words if w not in removed]
        stats = CleaningStats(
            original_words=len(puzzle.all_words),
            cleaned_words=len(all_words),
            words_removed=len(removed),
            definitions_found=len(batch.found),
        )
        cleaned = puzzle.model_copy(update={
            "all_words": all_words,
            "cornerstone_words": cornerstone_words,
            "definitions": {**puzzle.definitions, **batch.found},
            "cleaning_stats": stats,
        })

        if removed:
            logger.info("Removing %d words without definitions", len(removed))

        outcome = CleaningOutcome(
            removed_words=sorted(removed),
            definitions=batch.found,
            stats=stats,
        )
        if len(cornerstone_words) < self.min_cornerstone_words:
            logger.info(
                "Puzzle %s failed after cleaning (%d cornerstone words remaining)",
                puzzle.keystone_word, len(cornerstone_words),
            )
            return outcome

        outcome.puzzle = cleaned
        return outcome

    def build_and_clean(
        self,
        keystone_word,
        resolver: DefinitionResolver,
    ) -> Tuple[Optional[Puzzle], "PuzzleBuilder"]:
        """
        Build then clean a puzzle.

        Returns the cleaned puzzle (or None) and the builder to use for the
        next keystone word, which excludes any words removed while cleaning.
        """
        puzzle = self.build_puzzle(keystone_word)
        if puzzle is None:
            return None, self

        outcome = self.clean_puzzle(puzzle, resolver)
        next_builder = self.without_words(outcome.removed_words) if outcome.removed_words else self
        return outcome.puzzle, next_builder

    def build_many(
        self,
        keystone_words: Iterable[str],
        resolver: Optional[DefinitionResolver] = None,
        validator=None,
        progress: Optional[Callable[[int, int, str, int], None]] = None,
    ) -> List[Puzzle]:
        """
        Build puzzles for many keystone words, cleaning when a resolver is given.

        When a validator is given, puzzles that fail validation are dropped.
        One failing word never stops the batch. `progress` receives
        (current, total, word, puzzles_built).
        """
        words = list(keystone_words)
        builder = self
        puzzles: List[Puzzle] = []

        for current, word in enumerate(words, start=1):
            if progress:
                progress(current, len(words), word, len(puzzles))
            try:
                if resolver is None:
                    puzzle = builder.build_puzzle(word)
                else:
                    puzzle, builder = builder.build_and_clean(word, resolver)
            except Exception:
                logger.exception("Error generating puzzle for %s", word)
                continue

            if puzzle is not None and validator is not None:
                result = validator.validate(
                    puzzle, builder.common_words, puzzle.definitions or None
                )
                if not result.is_valid:
                    logger.info("Puzzle %s failed validation: %s", word, ", ".join(result.error_codes))
                    continue

            if puzzle is not None:
                puzzles.append(puzzle)

        logger.info("Completed batch generation: %d/%d puzzles created", len(puzzles), len(words))
        return puzzles

    @staticmethod
    def calculate_difficulty(puzzle: Puzzle) -> Difficulty:
        return classify_difficulty(puzzle.cornerstone_ratio, puzzle.average_word_length)


def build_puzzle(
    keystone_word: str,
    catalog: PathCatalog,
    dictionary: Iterable[str],
    common_words: Iterable[str],
    min_cornerstone_words: int = DEFAULT_MIN_CORNERSTONE_WORDS,
) -> Optional[Puzzle]:
    """Build the best puzzle for `keystone_word`, or None if none qualifies."""
    builder = PuzzleBuilder(
        dictionary,
        common_words,
        catalog=catalog,
        min_cornerstone_words=min_cornerstone_words,
    )
    return builder.build_puzzle(keystone_word)
