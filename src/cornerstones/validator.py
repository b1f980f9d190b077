"""
Puzzle validation.

Checks, in order:
1. Basic structure (keystone word, word lists, count bounds)
2. Grid structure and the Hamiltonian path that spells the keystone word
3. Grid connectivity
4. Word discovery cross-check against an independent search
5. Definition coverage
6. Difficulty and balance
7. Solvability heuristics

Errors block acceptance; warnings only reduce the quality score.
"""

import logging
import re
import time
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, Field

from .definitions import DefinitionValue, definition_text, is_flagged
from .discovery import WordDiscovery
from .grid import CORNER_POSITIONS, CROSS_POSITIONS, GRID_CELLS, is_adjacent, is_filled, unreachable_positions
from .models import (
    DefinitionMetrics,
    Difficulty,
    DifficultyMetrics,
    OverallMetrics,
    Puzzle,
    SolvabilityMetrics,
    ValidationError,
    ValidationResult,
    WordDiscoveryMetrics,
    classify_difficulty,
)
from .paths import DEFAULT_CATALOG, PATH_LENGTH, PathCatalog


logger = logging.getLogger(__name__)

IDEAL_CORNERSTONE_RATIO = 0.6
IDEAL_WORD_LENGTH = 6.5


class ValidatorOptions(BaseModel):
    """Thresholds and switches for puzzle validation."""
    min_cornerstone_words: int = 20
    max_cornerstone_words: int = 100
    min_total_words: int = 50
    max_total_words: int = 300
    min_word_length: int = 4
    max_word_length: int = 12
    require_keystone_word: bool = True
    validate_definitions: bool = True
    missing_definitions_are_errors: bool = True
    strict_drift: bool = False
    difficulty_range: List[Difficulty] = Field(
        default_factory=lambda: ["Easy", "Medium", "Hard", "Expert"]
    )


class ValidationStats(BaseModel):
    total_validations: int = 0
    passed: int = 0
    failed: int = 0


def word_length_distribution(words: Iterable[str]) -> Dict[int, int]:
    distribution: Dict[int, int] = {}
    for word in words:
        distribution[len(word)] = distribution.get(len(word), 0) + 1
    return distribution


def calculate_balance_score(cornerstone_ratio: float, average_length: float) -> int:
    """0-100 score; 100 means the ideal ratio (0.6) and mean length (6.5)."""
    ratio_deviation = abs(cornerstone_ratio - IDEAL_CORNERSTONE_RATIO) / IDEAL_CORNERSTONE_RATIO
    length_deviation = abs(average_length - IDEAL_WORD_LENGTH) / IDEAL_WORD_LENGTH
    combined = (ratio_deviation + length_deviation) / 2
    return round(max(0.0, min(100.0, 100 - combined * 100)))


def _preview(words: List[str], limit: int) -> str:
    shown = ", ".join(words[:limit])
    if len(words) > limit:
        shown += f" and {len(words) - limit} more"
    return shown


class PuzzleValidator:
    """
    Validates constructed puzzles.

    When no dictionary is supplied the word discovery cross-check searches
    only for the puzzle's own words, so it can detect unreachable words but
    not extra ones. With a dictionary, puzzle words that have since left it
    are still searched for on the grid and reported as stale, not missing.
    """

    def __init__(
        self,
        options: Optional[ValidatorOptions] = None,
        catalog: PathCatalog = DEFAULT_CATALOG,
        dictionary: Optional[Iterable[str]] = None,
    ):
        self.options = options or ValidatorOptions()
        self.catalog = catalog
        self.discovery = WordDiscovery(dictionary) if dictionary is not None else None
        self.dictionary = self.discovery.dictionary if self.discovery is not None else None
        self.stats = ValidationStats()

    def validate(
        self,
        puzzle: Puzzle,
        common_words: Iterable[str] = (),
        definitions: Optional[Mapping[str, DefinitionValue]] = None,
    ) -> ValidationResult:
        """Run every check on `puzzle` and return the combined result."""
        self.stats.total_validations += 1
        started = time.perf_counter()
        common = {w.upper() for w in common_words}

        result = ValidationResult(validated_at=datetime.now().isoformat())
        try:
            self.validate_basic_structure(puzzle, result)
            self.validate_grid_structure(puzzle, result)
            self.validate_word_discovery(puzzle, common, result)
            if self.options.validate_definitions and definitions is not None:
                self.validate_definitions(puzzle, definitions, result)
            self.validate_difficulty_balance(puzzle, result)
            self.validate_solvability(puzzle, result)
        except Exception as e:
            logger.exception("Validation of %s raised", puzzle.keystone_word)
            result.errors.append(ValidationError(
                code="VALIDATION_EXCEPTION",
                message=f"Validation error: {e}",
            ))

        result.is_valid = len(result.errors) == 0
        self.generate_recommendations(result)
        self.calculate_quality(result)
        result.validation_time = (time.perf_counter() - started) * 1000

        if result.is_valid:
            self.stats.passed += 1
            logger.info("Puzzle %s passed validation", puzzle.keystone_word)
        else:
            self.stats.failed += 1
            logger.info(
                "Puzzle %s failed validation with %d errors",
                puzzle.keystone_word, len(result.errors),
            )
        return result

    def validate_basic_structure(self, puzzle: Puzzle, result: ValidationResult) -> None:
        opts = self.options
        keystone = puzzle.keystone_word

        if not keystone:
            result.errors.append(ValidationError(
                code="MISSING_KEYSTONE",
                message="Missing required property: keystone_word",
            ))
        elif len(keystone) != PATH_LENGTH:
            result.errors.append(ValidationError(
                code="INVALID_KEYSTONE",
                message=f"Keystone word must be {PATH_LENGTH} letters, got {len(keystone)}",
                word=keystone,
            ))
        elif not re.match(r'^[A-Z]+$', keystone):
            result.errors.append(ValidationError(
                code="INVALID_KEYSTONE",
                message="Keystone word must contain only uppercase letters",
                word=keystone,
            ))

        if not puzzle.grid:
            result.errors.append(ValidationError(
                code="MISSING_GRID",
                message="Missing required property: grid",
            ))

        cornerstone_count = len(puzzle.cornerstone_words)
        if cornerstone_count < opts.min_cornerstone_words:
            result.errors.append(ValidationError(
                code="INSUFFICIENT_CORNERSTONE_WORDS",
                message=f"Insufficient cornerstone words: {cornerstone_count} < {opts.min_cornerstone_words}",
            ))
        elif cornerstone_count > opts.max_cornerstone_words:
            result.warnings.append(ValidationError(
                code="HIGH_CORNERSTONE_COUNT",
                message=f"High cornerstone word count: {cornerstone_count} > {opts.max_cornerstone_words}",
            ))

        total = len(puzzle.all_words)
        if total < opts.min_total_words:
            result.errors.append(ValidationError(
                code="INSUFFICIENT_TOTAL_WORDS",
                message=f"Insufficient total words: {total} < {opts.min_total_words}",
            ))
        elif total > opts.max_total_words:
            result.warnings.append(ValidationError(
                code="HIGH_TOTAL_COUNT",
                message=f"High total word count: {total} > {opts.max_total_words}",
            ))

        all_words = set(puzzle.all_words)
        orphans = sorted(w for w in puzzle.cornerstone_words if w not in all_words)
        if orphans:
            result.errors.append(ValidationError(
                code="CORNERSTONE_NOT_IN_ALL_WORDS",
                message=f"Cornerstone words missing from all words: {_preview(orphans, 5)}",
            ))

        bad_lengths = sorted(
            w for w in puzzle.all_words
            if not opts.min_word_length <= len(w) <= opts.max_word_length
        )
        if bad_lengths:
            result.errors.append(ValidationError(
                code="WORD_LENGTH_OUT_OF_RANGE",
                message=(
                    f"Words outside {opts.min_word_length}-{opts.max_word_length} letters: "
                    f"{_preview(bad_lengths, 5)}"
                ),
            ))

    def validate_grid_structure(self, puzzle: Puzzle, result: ValidationResult) -> None:
        grid = puzzle.grid
        if not grid:
            return

        if len(grid) != GRID_CELLS:
            result.errors.append(ValidationError(
                code="INVALID_GRID_LENGTH",
                message=f"Grid must have {GRID_CELLS} cells, got {len(grid)}",
            ))
            return

        for position in range(GRID_CELLS):
            if position in CROSS_POSITIONS and not is_filled(grid, position):
                result.errors.append(ValidationError(
                    code="EMPTY_CROSS_POSITION",
                    message=f"Cross position {position} is empty",
                ))
            elif position in CORNER_POSITIONS and is_filled(grid, position):
                result.errors.append(ValidationError(
                    code="FILLED_CORNER",
                    message=f"Corner position {position} should be empty but contains '{grid[position]}'",
                ))

        if puzzle.path_index is not None:
            self.validate_hamiltonian_path(puzzle, result)

        self.validate_grid_connectivity(puzzle, result)

    def validate_hamiltonian_path(self, puzzle: Puzzle, result: ValidationResult) -> None:
        index = puzzle.path_index
        if index < 0 or index >= len(self.catalog):
            result.errors.append(ValidationError(
                code="INVALID_PATH_INDEX",
                message=f"Invalid path index: {index} (must be 0-{len(self.catalog) - 1})",
            ))
            return

        path = self.catalog[index]
        for a, b in zip(path, path[1:]):
            if not is_adjacent(a, b):
                result.errors.append(ValidationError(
                    code="PATH_NOT_ADJACENT",
                    message=f"Path positions {a} and {b} are not adjacent",
                ))

        if not puzzle.keystone_word:
            return

        letters = []
        for position in path:
            if is_filled(puzzle.grid, position):
                letters.append(puzzle.grid[position].upper())
            else:
                result.errors.append(ValidationError(
                    code="EMPTY_PATH_POSITION",
                    message=f"Path position {position} is empty",
                ))
        spelled = "".join(letters)
        if spelled != puzzle.keystone_word:
            result.errors.append(ValidationError(
                code="PATH_MISMATCH",
                message=(
                    f"Path {index} does not spell keystone word: "
                    f"expected '{puzzle.keystone_word}', got '{spelled}'"
                ),
                word=puzzle.keystone_word,
            ))

    def validate_grid_connectivity(self, puzzle: Puzzle, result: ValidationResult) -> None:
        if not any(is_filled(puzzle.grid, p) for p in range(len(puzzle.grid))):
            result.errors.append(ValidationError(
                code="EMPTY_GRID",
                message="No filled positions found in grid",
            ))
            return

        unreachable = unreachable_positions(puzzle.grid)
        if unreachable:
            result.errors.append(ValidationError(
                code="UNREACHABLE_POSITIONS",
                message=f"Unreachable grid positions: {', '.join(str(p) for p in unreachable)}",
            ))

    def validate_word_discovery(self, puzzle: Puzzle, common_words: set, result: ValidationResult) -> None:
        if not puzzle.grid:
            return

        expected = [w.upper() for w in puzzle.all_words]
        stale: List[str] = []
        if self.discovery is None:
            discovery = WordDiscovery(expected)
        else:
            stale = sorted({w for w in expected if w not in self.dictionary})
            discovery = self.discovery
            if stale:
                discovery = discovery.with_dictionary(self.dictionary | set(stale))
        found = discovery.discover(puzzle.grid)

        missing = sorted(w for w in expected if w not in found.all_words)
        stale = [w for w in stale if w in found.all_words]
        extra = sorted(w for w in found.all_words if w not in set(expected))

        if missing:
            result.errors.append(ValidationError(
                code="WORDS_NOT_FINDABLE",
                message=f"Words not findable in grid: {_preview(missing, 5)}",
            ))
        if stale:
            finding = ValidationError(
                code="STALE_WORDS",
                message=f"Puzzle words no longer in dictionary: {_preview(stale, 5)}",
            )
            if self.options.strict_drift:
                result.errors.append(finding)
            else:
                result.warnings.append(finding)
        if extra:
            finding = ValidationError(
                code="EXTRA_WORDS",
                message=f"Additional findable words not in puzzle: {_preview(extra, 3)}",
            )
            if self.options.strict_drift:
                result.errors.append(finding)
            else:
                result.warnings.append(finding)

        if common_words:
            discovered_cornerstones = discovery.identify_cornerstone_words(found.all_words, common_words)
            for word in sorted({w.upper() for w in puzzle.cornerstone_words}):
                if word not in discovered_cornerstones and word in common_words:
                    result.warnings.append(ValidationError(
                        code="CORNERSTONE_NOT_DISCOVERABLE",
                        message=f"Cornerstone word not discoverable: {word}",
                        word=word,
                    ))
                if word not in common_words:
                    result.warnings.append(ValidationError(
                        code="CORNERSTONE_NOT_COMMON",
                        message=f"Cornerstone word not in common words list: {word}",
                        word=word,
                    ))

        result.metrics.word_discovery = WordDiscoveryMetrics(
            discovered_word_count=len(found.all_words),
            expected_word_count=len(expected),
            match_rate=(len(expected) - len(missing)) / len(expected) if expected else 0.0,
            average_word_length=found.statistics.average_length,
            search_time=found.statistics.search_time,
        )

    def validate_definitions(
        self,
        puzzle: Puzzle,
        definitions: Mapping[str, DefinitionValue],
        result: ValidationResult,
    ) -> None:
        lookup = {word.upper(): value for word, value in definitions.items()}
        missing: List[str] = []
        flagged: List[str] = []

        for word in puzzle.all_words:
            value = lookup.get(word.upper())
            if definition_text(value) is None:
                missing.append(word)
            elif is_flagged(value):
                flagged.append(word)

        if missing:
            finding = ValidationError(
                code="MISSING_DEFINITIONS",
                message=f"Missing definitions for {len(missing)} words: {_preview(missing, 3)}",
            )
            if self.options.missing_definitions_are_errors:
                result.errors.append(finding)
            else:
                result.warnings.append(finding)

        if flagged:
            result.warnings.append(ValidationError(
                code="FLAGGED_DEFINITIONS",
                message=f"Flagged definitions for {len(flagged)} words: {_preview(flagged, 3)}",
            ))

        total = len(puzzle.all_words)
        result.metrics.definitions = DefinitionMetrics(
            total_words=total,
            with_definitions=total - len(missing),
            valid_definitions=total - len(missing) - len(flagged),
            definition_coverage=(total - len(missing)) / total if total else 0.0,
        )

    def validate_difficulty_balance(self, puzzle: Puzzle, result: ValidationResult) -> None:
        if not puzzle.all_words:
            return

        ratio = puzzle.cornerstone_ratio
        average = puzzle.average_word_length
        level = classify_difficulty(ratio, average)

        if level not in self.options.difficulty_range:
            result.warnings.append(ValidationError(
                code="DIFFICULTY_OUT_OF_RANGE",
                message=(
                    f"Puzzle difficulty '{level}' not in acceptable range: "
                    f"{', '.join(self.options.difficulty_range)}"
                ),
            ))

        if ratio < 0.2:
            result.warnings.append(ValidationError(
                code="LOW_CORNERSTONE_RATIO",
                message="Very low cornerstone word ratio may make puzzle too difficult",
            ))
        elif ratio > 0.8:
            result.warnings.append(ValidationError(
                code="HIGH_CORNERSTONE_RATIO",
                message="Very high cornerstone word ratio may make puzzle too easy",
            ))

        if average < 4.5:
            result.warnings.append(ValidationError(
                code="SHORT_AVERAGE_LENGTH",
                message="Low average word length may indicate simple vocabulary",
            ))
        elif average > 8:
            result.warnings.append(ValidationError(
                code="LONG_AVERAGE_LENGTH",
                message="High average word length may indicate complex vocabulary",
            ))

        result.metrics.difficulty = DifficultyMetrics(
            level=level,
            cornerstone_ratio=ratio,
            average_word_length=average,
            word_length_distribution=word_length_distribution(puzzle.all_words),
            balance_score=calculate_balance_score(ratio, average),
        )

    def validate_solvability(self, puzzle: Puzzle, result: ValidationResult) -> None:
        unique_letters = len(set(puzzle.keystone_word or ""))
        if unique_letters < 8:
            result.warnings.append(ValidationError(
                code="LOW_LETTER_DIVERSITY",
                message=f"Low letter diversity ({unique_letters} unique letters) may limit word variety",
            ))

        distribution = word_length_distribution(puzzle.all_words)
        total = len(puzzle.all_words)
        if total:
            if len(distribution) < 4:
                result.warnings.append(ValidationError(
                    code="LIMITED_LENGTH_VARIETY",
                    message="Limited word length variety may reduce solving interest",
                ))

            short_words = distribution.get(4, 0)
            long_words = sum(count for length, count in distribution.items() if length >= 10)
            if short_words / total > 0.6:
                result.warnings.append(ValidationError(
                    code="MANY_SHORT_WORDS",
                    message="High proportion of 4-letter words may make puzzle too easy",
                ))
            if long_words / total > 0.3:
                result.warnings.append(ValidationError(
                    code="MANY_LONG_WORDS",
                    message="High proportion of long words may make puzzle too difficult",
                ))

        findable = bool(puzzle.keystone_word) and puzzle.keystone_word in puzzle.all_words
        if self.options.require_keystone_word and puzzle.keystone_word and not findable:
            result.errors.append(ValidationError(
                code="KEYSTONE_NOT_FINDABLE",
                message="Keystone word is not findable in the puzzle grid",
                word=puzzle.keystone_word,
            ))

        result.metrics.solvability = SolvabilityMetrics(
            letter_diversity=unique_letters,
            length_variety=len(distribution),
            keystone_word_findable=findable,
        )

    @staticmethod
    def generate_recommendations(result: ValidationResult) -> None:
        metrics = result.metrics
        recommendations: List[str] = []

        if metrics.difficulty:
            if metrics.difficulty.cornerstone_ratio < 0.4:
                recommendations.append("Consider using a keystone word that generates more common English words")
            if metrics.difficulty.average_word_length < 5:
                recommendations.append("Try a keystone word with more complex letter combinations for longer words")
            if metrics.difficulty.balance_score < 70:
                recommendations.append("Puzzle balance could be improved; consider trying different Hamiltonian paths")
        if metrics.definitions and metrics.definitions.definition_coverage < 0.9:
            recommendations.append("Fetch missing word definitions before finalizing puzzle")
        if metrics.word_discovery and metrics.word_discovery.match_rate < 0.95:
            recommendations.append("Some words may not be discoverable in the grid; verify word paths")

        result.recommendations = recommendations

    @staticmethod
    def calculate_quality(result: ValidationResult) -> None:
        metrics = result.metrics
        score = 100
        score -= len(result.errors) * 20
        score -= len(result.warnings) * 5
        if metrics.difficulty and metrics.difficulty.balance_score > 80:
            score += 10
        if metrics.definitions and metrics.definitions.definition_coverage > 0.95:
            score += 5
        if metrics.word_discovery and metrics.word_discovery.match_rate > 0.98:
            score += 5

        metrics.overall = OverallMetrics(
            quality_score=max(0, min(100, score)),
            error_count=len(result.errors),
            warning_count=len(result.warnings),
            recommendation_count=len(result.recommendations),
        )

    def validate_many(
        self,
        puzzles: Iterable[Puzzle],
        common_words: Iterable[str] = (),
        definitions: Optional[Mapping[str, DefinitionValue]] = None,
    ) -> List[ValidationResult]:
        common = list(common_words)
        results = [self.validate(p, common, definitions) for p in puzzles]
        logger.info(
            "Batch validation complete: %d/%d puzzles valid",
            sum(1 for r in results if r.is_valid), len(results),
        )
        return results


def validate_puzzle(
    puzzle: Puzzle,
    common_words: Iterable[str] = (),
    definitions: Optional[Mapping[str, DefinitionValue]] = None,
    options: Optional[ValidatorOptions] = None,
) -> ValidationResult:
    """Validate a single puzzle with default or given options."""
    return PuzzleValidator(options).validate(puzzle, common_words, definitions)
