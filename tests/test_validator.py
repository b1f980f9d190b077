"""
Test suite for puzzle validation.

Tests validation cases:
- Structure errors (INVALID_KEYSTONE, INSUFFICIENT_CORNERSTONE_WORDS, CORNERSTONE_NOT_IN_ALL_WORDS)
- Grid errors (PATH_MISMATCH, FILLED_CORNER, EMPTY_CROSS_POSITION, UNREACHABLE_POSITIONS)
- Discovery drift (WORDS_NOT_FINDABLE, STALE_WORDS, EXTRA_WORDS)
- Definitions (MISSING_DEFINITIONS, FLAGGED_DEFINITIONS)
- Difficulty and solvability warnings at their thresholds
- Quality score arithmetic
- Unexpected failures (VALIDATION_EXCEPTION)
"""

from unittest.mock import patch
import pytest

from src.cornerstones.builder import PuzzleBuilder
from src.cornerstones.models import (
    DefinitionMetrics,
    DifficultyMetrics,
    Puzzle,
    ValidationError,
    ValidationResult,
    WordDiscoveryMetrics,
    classify_difficulty,
)
from src.cornerstones.validator import (
    PuzzleValidator,
    ValidatorOptions,
    calculate_balance_score,
    validate_puzzle,
)


DICTIONARY = {
    "CORNERSTONES", "CORE", "NOTE", "STONE", "TONE", "NOON", "COOT", "ROSE",
    "TOOT", "ZOOM", "ORE", "CONVERSATION", "SCORE", "STORE", "CENT", "SNORE",
    "TERN", "RENT", "NEST", "SENT", "TORN", "CORN", "ONSET",
}

COMMON_WORDS = {
    "CORE", "NOTE", "STONE", "TONE", "NOON", "SCORE", "STORE", "CENT",
    "SNORE", "TERN", "RENT", "NEST", "SENT", "TORN", "CORN", "ONSET",
}

LENIENT = ValidatorOptions(
    min_cornerstone_words=1,
    min_total_words=1,
    validate_definitions=False,
)


def make_puzzle(lengths, cornerstones=0):
    """Puzzle with one word per length; the first `cornerstones` are cornerstones."""
    words = [chr(ord("A") + i % 26) * n for i, n in enumerate(lengths)]
    return Puzzle(
        keystone_word="CORNERSTONES",
        all_words=words,
        cornerstone_words=words[:cornerstones],
    )


def warning_codes(check, puzzle, options=LENIENT):
    result = ValidationResult()
    check(PuzzleValidator(options), puzzle, result)
    return result.warning_codes


@pytest.fixture
def puzzle():
    builder = PuzzleBuilder(DICTIONARY, COMMON_WORDS, min_cornerstone_words=1)
    return builder.build_puzzle("CORNERSTONES")


@pytest.fixture
def validator():
    return PuzzleValidator(LENIENT, dictionary=DICTIONARY)


class TestRoundTrip:
    """Puzzles built by the builder pass validation."""

    def test_built_puzzle_is_valid(self, puzzle, validator):
        """No errors for an untouched puzzle."""
        result = validator.validate(puzzle, COMMON_WORDS)
        assert result.is_valid is True
        assert result.errors == []

    def test_metrics_filled(self, puzzle, validator):
        """Each check records its metrics."""
        result = validator.validate(puzzle, COMMON_WORDS)
        metrics = result.metrics
        assert metrics.word_discovery.match_rate == 1.0
        assert metrics.word_discovery.discovered_word_count == puzzle.total_words
        assert metrics.solvability.keystone_word_findable is True
        assert metrics.solvability.letter_diversity == 7
        assert metrics.difficulty.level in ("Easy", "Medium", "Hard", "Expert")
        assert 0 <= result.quality_score <= 100
        assert result.validated_at

    def test_low_letter_diversity_warning(self, puzzle, validator):
        """CORNERSTONES has only seven distinct letters."""
        result = validator.validate(puzzle, COMMON_WORDS)
        assert "LOW_LETTER_DIVERSITY" in result.warning_codes

    def test_without_dictionary(self, puzzle):
        """Without a dictionary the puzzle's own words are cross-checked."""
        result = PuzzleValidator(LENIENT).validate(puzzle)
        assert result.is_valid is True
        assert "EXTRA_WORDS" not in result.warning_codes

    def test_stats(self, puzzle, validator):
        """Pass and fail counts accumulate."""
        validator.validate(puzzle)
        validator.validate(puzzle.model_copy(update={"keystone_word": "SHORT"}))
        assert validator.stats.total_validations == 2
        assert validator.stats.passed == 1
        assert validator.stats.failed == 1


class TestStructureErrors:
    """Test cases for basic structure checks."""

    def test_invalid_keystone(self, puzzle, validator):
        """A keystone that is not 12 letters is an error."""
        result = validator.validate(puzzle.model_copy(update={"keystone_word": "SHORT"}))
        assert result.is_valid is False
        assert "INVALID_KEYSTONE" in result.error_codes

    def test_lowercase_keystone(self, puzzle, validator):
        """Keystones must be uppercase."""
        result = validator.validate(puzzle.model_copy(update={"keystone_word": "cornerstones"}))
        assert "INVALID_KEYSTONE" in result.error_codes

    def test_too_few_cornerstones(self, puzzle):
        """Below the minimum is an error under default options."""
        result = PuzzleValidator(ValidatorOptions(validate_definitions=False), dictionary=DICTIONARY).validate(puzzle)
        assert "INSUFFICIENT_CORNERSTONE_WORDS" in result.error_codes
        assert "INSUFFICIENT_TOTAL_WORDS" in result.error_codes

    def test_too_many_cornerstones_is_warning(self, puzzle):
        """Above the maximum is only a warning."""
        options = LENIENT.model_copy(update={"max_cornerstone_words": 2, "max_total_words": 2})
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(puzzle)
        assert result.is_valid is True
        assert "HIGH_CORNERSTONE_COUNT" in result.warning_codes
        assert "HIGH_TOTAL_COUNT" in result.warning_codes

    def test_cornerstone_not_in_all_words(self, puzzle, validator):
        """Cornerstone words must be a subset of all words."""
        tampered = puzzle.model_copy(update={"cornerstone_words": puzzle.cornerstone_words + ["ZOOM"]})
        result = validator.validate(tampered)
        assert "CORNERSTONE_NOT_IN_ALL_WORDS" in result.error_codes


class TestGridErrors:
    """Test cases for grid and path checks."""

    def test_path_mismatch(self, puzzle, validator):
        """A path index that does not spell the keystone is reported."""
        tampered = puzzle.model_copy(update={"path_index": 0})
        result = validator.validate(tampered)
        assert result.is_valid is False
        assert "PATH_MISMATCH" in result.error_codes
        mismatch = next(e for e in result.errors if e.code == "PATH_MISMATCH")
        assert "expected 'CORNERSTONES'" in mismatch.message

    def test_path_index_out_of_range(self, puzzle, validator):
        """Indices past the catalog end are errors."""
        result = validator.validate(puzzle.model_copy(update={"path_index": 10}))
        assert "INVALID_PATH_INDEX" in result.error_codes

    def test_filled_corner(self, puzzle, validator):
        """A letter on a corner is an error and is unreachable."""
        grid = list(puzzle.grid)
        grid[0] = "X"
        result = validator.validate(puzzle.model_copy(update={"grid": grid}))
        assert "FILLED_CORNER" in result.error_codes
        assert "UNREACHABLE_POSITIONS" in result.error_codes

    def test_empty_cross_cell(self, puzzle, validator):
        """Every cross cell must hold a letter."""
        grid = list(puzzle.grid)
        grid[5] = ""
        result = validator.validate(puzzle.model_copy(update={"grid": grid}))
        assert "EMPTY_CROSS_POSITION" in result.error_codes

    def test_wrong_grid_length(self, puzzle, validator):
        """Grids must have sixteen cells."""
        result = validator.validate(puzzle.model_copy(update={"grid": puzzle.grid[:12]}))
        assert "INVALID_GRID_LENGTH" in result.error_codes


class TestDiscoveryDrift:
    """Test cases for the word discovery cross-check."""

    def test_unfindable_word(self, puzzle, validator):
        """A listed word that cannot be spelled is an error."""
        tampered = puzzle.model_copy(update={"all_words": sorted(puzzle.all_words + ["ZOOM"])})
        result = validator.validate(tampered)
        assert "WORDS_NOT_FINDABLE" in result.error_codes

    def test_extra_word_is_warning(self, puzzle, validator):
        """A findable word missing from the puzzle is a warning by default."""
        tampered = puzzle.model_copy(update={
            "all_words": [w for w in puzzle.all_words if w != "NOTE"],
            "cornerstone_words": [w for w in puzzle.cornerstone_words if w != "NOTE"],
        })
        result = validator.validate(tampered)
        assert result.is_valid is True
        assert "EXTRA_WORDS" in result.warning_codes

    def test_extra_word_strict(self, puzzle):
        """Strict drift turns extra words into errors."""
        options = LENIENT.model_copy(update={"strict_drift": True})
        tampered = puzzle.model_copy(update={
            "all_words": [w for w in puzzle.all_words if w != "NOTE"],
            "cornerstone_words": [w for w in puzzle.cornerstone_words if w != "NOTE"],
        })
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(tampered)
        assert "EXTRA_WORDS" in result.error_codes

    def test_word_dropped_from_dictionary_is_stale(self, puzzle):
        """A puzzle word later removed from the dictionary is still spelled on the grid."""
        assert "CORE" in puzzle.all_words
        result = PuzzleValidator(LENIENT, dictionary=DICTIONARY - {"CORE"}).validate(puzzle)
        assert result.is_valid is True
        assert "WORDS_NOT_FINDABLE" not in result.error_codes
        assert "STALE_WORDS" in result.warning_codes
        assert "EXTRA_WORDS" not in result.warning_codes
        assert result.metrics.word_discovery.match_rate == 1.0
        stale = next(w for w in result.warnings if w.code == "STALE_WORDS")
        assert stale.message == "Puzzle words no longer in dictionary: CORE"

    def test_stale_word_strict(self, puzzle):
        """Strict drift turns stale words into errors."""
        options = LENIENT.model_copy(update={"strict_drift": True})
        result = PuzzleValidator(options, dictionary=DICTIONARY - {"CORE"}).validate(puzzle)
        assert result.is_valid is False
        assert "STALE_WORDS" in result.error_codes
        assert "WORDS_NOT_FINDABLE" not in result.error_codes

    def test_stale_and_unfindable_kept_apart(self, puzzle):
        """Only words the grid cannot spell are reported as not findable."""
        tampered = puzzle.model_copy(update={"all_words": sorted(puzzle.all_words + ["ZOOM"])})
        result = PuzzleValidator(LENIENT, dictionary=DICTIONARY - {"CORE"}).validate(tampered)
        missing = next(e for e in result.errors if e.code == "WORDS_NOT_FINDABLE")
        assert missing.message == "Words not findable in grid: ZOOM"
        assert "STALE_WORDS" in result.warning_codes

    def test_cornerstone_not_common(self, puzzle, validator):
        """A cornerstone missing from the common list is a warning."""
        result = validator.validate(puzzle, COMMON_WORDS - {"CORE"})
        assert "CORNERSTONE_NOT_COMMON" in result.warning_codes

    def test_keystone_not_findable(self, puzzle, validator):
        """A puzzle whose word list lacks the keystone fails."""
        tampered = puzzle.model_copy(update={
            "all_words": [w for w in puzzle.all_words if w != "CORNERSTONES"],
        })
        result = validator.validate(tampered)
        assert "KEYSTONE_NOT_FINDABLE" in result.error_codes


class TestDefinitions:
    """Test cases for definition coverage."""

    @pytest.fixture
    def definitions(self, puzzle):
        return {word: f"Definition of {word.lower()}" for word in puzzle.all_words}

    def test_full_coverage(self, puzzle, definitions):
        """Complete definitions pass."""
        options = LENIENT.model_copy(update={"validate_definitions": True})
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(puzzle, COMMON_WORDS, definitions)
        assert result.is_valid is True
        assert result.metrics.definitions.definition_coverage == 1.0

    def test_missing_definitions(self, puzzle, definitions):
        """Missing definitions are errors by default."""
        del definitions["CORE"]
        options = LENIENT.model_copy(update={"validate_definitions": True})
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(puzzle, COMMON_WORDS, definitions)
        assert "MISSING_DEFINITIONS" in result.error_codes

    def test_missing_definitions_as_warning(self, puzzle, definitions):
        """Missing definitions can be downgraded to warnings."""
        del definitions["CORE"]
        options = LENIENT.model_copy(update={
            "validate_definitions": True,
            "missing_definitions_are_errors": False,
        })
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(puzzle, COMMON_WORDS, definitions)
        assert result.is_valid is True
        assert "MISSING_DEFINITIONS" in result.warning_codes

    def test_flagged_definitions(self, puzzle, definitions):
        """Entries that failed a quality check are warnings."""
        definitions["CORE"] = {"definition": "the centre", "validationResult": {"valid": False}}
        options = LENIENT.model_copy(update={"validate_definitions": True})
        result = PuzzleValidator(options, dictionary=DICTIONARY).validate(puzzle, COMMON_WORDS, definitions)
        assert "FLAGGED_DEFINITIONS" in result.warning_codes
        assert result.metrics.definitions.valid_definitions == puzzle.total_words - 1


class TestDifficulty:
    """Test cases for difficulty labels and balance warnings."""

    def test_easy_cutoffs(self):
        """Easy needs a ratio above 0.7 and mean length below 6."""
        assert classify_difficulty(0.71, 5.9) == "Easy"
        assert classify_difficulty(0.7, 5.9) == "Medium"
        assert classify_difficulty(0.71, 6.0) == "Medium"

    def test_medium_cutoffs(self):
        """Medium needs a ratio above 0.5 and mean length below 7."""
        assert classify_difficulty(0.51, 6.9) == "Medium"
        assert classify_difficulty(0.5, 6.9) == "Hard"
        assert classify_difficulty(0.51, 7.0) == "Hard"

    def test_hard_cutoff(self):
        """Hard only depends on a ratio above 0.3."""
        assert classify_difficulty(0.31, 11.0) == "Hard"
        assert classify_difficulty(0.3, 5.0) == "Expert"
        assert classify_difficulty(0.0, 4.0) == "Expert"

    def test_low_cornerstone_ratio(self):
        """Below 0.2 warns, exactly 0.2 does not."""
        check = PuzzleValidator.validate_difficulty_balance
        assert "LOW_CORNERSTONE_RATIO" in warning_codes(check, make_puzzle([6] * 10, cornerstones=1))
        assert "LOW_CORNERSTONE_RATIO" not in warning_codes(check, make_puzzle([6] * 10, cornerstones=2))

    def test_high_cornerstone_ratio(self):
        """Above 0.8 warns, exactly 0.8 does not."""
        check = PuzzleValidator.validate_difficulty_balance
        assert "HIGH_CORNERSTONE_RATIO" in warning_codes(check, make_puzzle([6] * 10, cornerstones=9))
        assert "HIGH_CORNERSTONE_RATIO" not in warning_codes(check, make_puzzle([6] * 10, cornerstones=8))

    def test_short_average_length(self):
        """A mean below 4.5 letters warns, exactly 4.5 does not."""
        check = PuzzleValidator.validate_difficulty_balance
        assert "SHORT_AVERAGE_LENGTH" in warning_codes(check, make_puzzle([4, 4], cornerstones=1))
        assert "SHORT_AVERAGE_LENGTH" not in warning_codes(check, make_puzzle([4, 5], cornerstones=1))

    def test_long_average_length(self):
        """A mean above 8 letters warns, exactly 8 does not."""
        check = PuzzleValidator.validate_difficulty_balance
        assert "LONG_AVERAGE_LENGTH" in warning_codes(check, make_puzzle([8, 9], cornerstones=1))
        assert "LONG_AVERAGE_LENGTH" not in warning_codes(check, make_puzzle([8, 8], cornerstones=1))

    def test_balanced_puzzle_has_no_warnings(self):
        """Ratio 0.6 with mean length 6.5 triggers nothing."""
        check = PuzzleValidator.validate_difficulty_balance
        assert warning_codes(check, make_puzzle([6, 7] * 5, cornerstones=6)) == []

    def test_difficulty_out_of_range(self):
        """Labels outside the accepted range are warnings."""
        check = PuzzleValidator.validate_difficulty_balance
        easy = make_puzzle([4, 5] * 5, cornerstones=8)
        hard_only = LENIENT.model_copy(update={"difficulty_range": ["Hard", "Expert"]})
        easy_only = LENIENT.model_copy(update={"difficulty_range": ["Easy"]})
        assert "DIFFICULTY_OUT_OF_RANGE" in warning_codes(check, easy, hard_only)
        assert "DIFFICULTY_OUT_OF_RANGE" not in warning_codes(check, easy, easy_only)

    def test_metrics(self):
        """Difficulty metrics describe the word list."""
        result = ValidationResult()
        PuzzleValidator(LENIENT).validate_difficulty_balance(make_puzzle([6, 7] * 5, cornerstones=6), result)
        metrics = result.metrics.difficulty
        assert metrics.level == "Medium"
        assert metrics.word_length_distribution == {6: 5, 7: 5}
        assert metrics.balance_score == 100


class TestSolvability:
    """Test cases for word-length variety warnings."""

    def test_limited_length_variety(self):
        """Fewer than four distinct lengths warns."""
        check = PuzzleValidator.validate_solvability
        assert "LIMITED_LENGTH_VARIETY" in warning_codes(check, make_puzzle([4, 5, 6]))
        assert "LIMITED_LENGTH_VARIETY" not in warning_codes(check, make_puzzle([4, 5, 6, 7]))

    def test_many_short_words(self):
        """More than 60% four-letter words warns."""
        check = PuzzleValidator.validate_solvability
        assert "MANY_SHORT_WORDS" in warning_codes(check, make_puzzle([4] * 7 + [5, 6, 7]))
        assert "MANY_SHORT_WORDS" not in warning_codes(check, make_puzzle([4] * 6 + [5, 6, 7, 8]))

    def test_many_long_words(self):
        """More than 30% words of ten letters or more warns."""
        check = PuzzleValidator.validate_solvability
        assert "MANY_LONG_WORDS" in warning_codes(check, make_puzzle([10, 11, 12, 10, 4, 5, 6, 7, 8, 9]))
        assert "MANY_LONG_WORDS" not in warning_codes(check, make_puzzle([10, 11, 12, 4, 5, 6, 7, 8, 9, 4]))

    def test_letter_diversity(self):
        """Eight distinct letters are enough."""
        check = PuzzleValidator.validate_solvability
        puzzle = make_puzzle([4, 5, 6, 7])
        assert "LOW_LETTER_DIVERSITY" in warning_codes(check, puzzle)
        diverse = puzzle.model_copy(update={"keystone_word": "BREAKTHROUGH"})
        assert "LOW_LETTER_DIVERSITY" not in warning_codes(check, diverse)


def quality(errors=0, warnings=0, balance=None, coverage=None, match_rate=None) -> int:
    result = ValidationResult(
        errors=[ValidationError(code="E", message="error")] * errors,
        warnings=[ValidationError(code="W", message="warning")] * warnings,
    )
    if balance is not None:
        result.metrics.difficulty = DifficultyMetrics(
            level="Medium", cornerstone_ratio=0.6, average_word_length=6.5, balance_score=balance,
        )
    if coverage is not None:
        result.metrics.definitions = DefinitionMetrics(definition_coverage=coverage)
    if match_rate is not None:
        result.metrics.word_discovery = WordDiscoveryMetrics(match_rate=match_rate)
    PuzzleValidator.calculate_quality(result)
    return result.quality_score


class TestScoring:
    """Test cases for balance and quality scores."""

    def test_ideal_balance(self):
        """The ideal ratio and length score 100."""
        assert calculate_balance_score(0.6, 6.5) == 100

    def test_balance_is_clamped(self):
        """Extreme inputs never go below zero."""
        assert calculate_balance_score(10.0, 100.0) == 0

    def test_penalties_and_bonuses(self):
        """Errors cost 20, warnings 5, each strong metric adds its bonus."""
        assert quality(errors=1, warnings=2) == 70
        assert quality(errors=1, warnings=2, balance=85, coverage=1.0, match_rate=1.0) == 90
        assert quality(errors=2, balance=85) == 70
        assert quality(errors=2, coverage=0.96) == 65
        assert quality(errors=2, match_rate=0.99) == 65

    def test_bonus_thresholds_are_exclusive(self):
        """Metrics exactly at their thresholds earn nothing."""
        assert quality(errors=2, balance=80, coverage=0.95, match_rate=0.98) == 60
        assert quality(errors=2, balance=81, coverage=0.951, match_rate=0.981) == 80

    def test_quality_is_clamped(self):
        """Scores stay within 0-100."""
        assert quality(errors=6) == 0
        assert quality(balance=100, coverage=1.0, match_rate=1.0) == 100

    def test_overall_metrics(self):
        """Counts are recorded beside the score."""
        result = ValidationResult(
            errors=[ValidationError(code="E", message="error")],
            warnings=[ValidationError(code="W", message="warning")] * 3,
            recommendations=["try again"],
        )
        PuzzleValidator.calculate_quality(result)
        overall = result.metrics.overall
        assert (overall.quality_score, overall.error_count, overall.warning_count) == (65, 1, 3)
        assert overall.recommendation_count == 1

    def test_errors_lower_quality(self, puzzle, validator):
        """An invalid puzzle scores below a valid one."""
        good = validator.validate(puzzle)
        bad = validator.validate(puzzle.model_copy(update={"path_index": 0}))
        assert bad.quality_score < good.quality_score

    def test_recommendations(self, puzzle, validator):
        """Weak metrics produce recommendations."""
        tampered = puzzle.model_copy(update={"all_words": sorted(puzzle.all_words + ["ZOOM"])})
        result = validator.validate(tampered)
        assert any("discoverable" in r for r in result.recommendations)


class TestExceptions:
    """Unexpected failures are reported, not raised."""

    def test_validation_exception(self, puzzle, validator):
        """A crashing check becomes a VALIDATION_EXCEPTION error."""
        with patch.object(PuzzleValidator, "validate_grid_structure", side_effect=RuntimeError("boom")):
            result = validator.validate(puzzle)
        assert result.is_valid is False
        assert "VALIDATION_EXCEPTION" in result.error_codes
        assert "boom" in result.errors[-1].message

    def test_validate_many(self, puzzle, validator):
        """Batch validation returns one result per puzzle."""
        results = validator.validate_many([puzzle, puzzle.model_copy(update={"path_index": 0})])
        assert [r.is_valid for r in results] == [True, False]

    def test_module_function(self, puzzle):
        """The convenience wrapper uses the given options."""
        assert validate_puzzle(puzzle, COMMON_WORDS, options=LENIENT).is_valid is True
