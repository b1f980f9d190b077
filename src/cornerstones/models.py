"""Data models for puzzle construction and validation."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field


WordKind = Literal["cornerstone", "ordinary"]
Difficulty = Literal["Easy", "Medium", "Hard", "Expert"]


class ClassifiedWord(BaseModel):
    """A discovered word tagged as cornerstone (common) or ordinary."""
    word: str = Field(..., min_length=1, pattern=r'^[A-Z]+$')
    kind: WordKind

    @property
    def is_cornerstone(self) -> bool:
        return self.kind == "cornerstone"


class CleaningStats(BaseModel):
    """Bookkeeping from the definition cleaning pass."""
    original_words: int = 0
    cleaned_words: int = 0
    words_removed: int = 0
    definitions_found: int = 0


class DictionaryCleaningStats(BaseModel):
    """Running totals of words removed from a builder's dictionary by cleaning."""
    original_word_count: int = 0
    cleaned_word_count: int = 0
    words_removed: int = 0
    puzzles_with_cleaning: int = 0

    @computed_field
    @property
    def reduction_percentage(self) -> int:
        if not self.original_word_count:
            return 0
        return round(self.words_removed / self.original_word_count * 100)


class Puzzle(BaseModel):
    """
    A constructed puzzle.

    The model intentionally does not enforce gameplay invariants (threshold,
    path spelling, discoverability); the validator checks those so that broken
    puzzles can still be loaded and diagnosed.
    """
    keystone_word: str
    path_index: Optional[int] = None
    grid: List[str] = Field(default_factory=list)
    all_words: List[str] = Field(default_factory=list)
    cornerstone_words: List[str] = Field(default_factory=list)
    definitions: Dict[str, str] = Field(default_factory=dict)
    cleaning_stats: Optional[CleaningStats] = None

    @computed_field
    @property
    def total_words(self) -> int:
        return len(self.all_words)

    @computed_field
    @property
    def cornerstone_count(self) -> int:
        return len(self.cornerstone_words)

    @property
    def classified_words(self) -> List[ClassifiedWord]:
        cornerstones = set(self.cornerstone_words)
        return [
            ClassifiedWord(
                word=word,
                kind="cornerstone" if word in cornerstones else "ordinary",
            )
            for word in self.all_words
        ]

    @property
    def average_word_length(self) -> float:
        if not self.all_words:
            return 0.0
        return sum(len(w) for w in self.all_words) / len(self.all_words)

    @property
    def cornerstone_ratio(self) -> float:
        if not self.all_words:
            return 0.0
        return len(self.cornerstone_words) / len(self.all_words)

    def to_export(self) -> Dict:
        """Puzzle data in the shape the game runtime consumes."""
        lengths = [len(w) for w in self.all_words]
        return {
            "seedWord": self.keystone_word,
            "pathIndex": self.path_index,
            "grid": list(self.grid),
            "words": {
                "all": list(self.all_words),
                "cornerstone": list(self.cornerstone_words),
                "total": self.total_words,
                "cornerstoneCount": self.cornerstone_count,
            },
            "stats": {
                "difficulty": classify_difficulty(self.cornerstone_ratio, self.average_word_length),
                "averageWordLength": round(self.average_word_length, 1),
                "longestWord": max(lengths) if lengths else 0,
                "shortestWord": min(lengths) if lengths else 0,
            },
        }


def classify_difficulty(cornerstone_ratio: float, average_length: float) -> Difficulty:
    """Map cornerstone ratio and mean word length to a difficulty label."""
    if cornerstone_ratio > 0.7 and average_length < 6:
        return "Easy"
    if cornerstone_ratio > 0.5 and average_length < 7:
        return "Medium"
    if cornerstone_ratio > 0.3:
        return "Hard"
    return "Expert"


class PathReport(BaseModel):
    """Word yield of one catalog path for a keystone word."""
    path_index: int
    total_words: int
    cornerstone_count: int
    meets_threshold: bool


class BuildReport(BaseModel):
    """Outcome of trying every catalog path for a keystone word."""
    keystone_word: str
    puzzle: Optional[Puzzle] = None
    rejection_reason: Optional[str] = None
    path_reports: List[PathReport] = Field(default_factory=list)

    @property
    def best_path_index(self) -> Optional[int]:
        return self.puzzle.path_index if self.puzzle else None


class CleaningOutcome(BaseModel):
    """Result of removing words that have no resolvable definition."""
    puzzle: Optional[Puzzle] = None
    removed_words: List[str] = Field(default_factory=list)
    definitions: Dict[str, str] = Field(default_factory=dict)
    stats: CleaningStats = Field(default_factory=CleaningStats)


class ValidationError(BaseModel):
    """A single validation finding (used for both errors and warnings)."""
    code: str
    message: str
    word: Optional[str] = None


class WordDiscoveryMetrics(BaseModel):
    discovered_word_count: int = 0
    expected_word_count: int = 0
    match_rate: float = 0.0
    average_word_length: float = 0.0
    search_time: float = 0.0


class DefinitionMetrics(BaseModel):
    total_words: int = 0
    with_definitions: int = 0
    valid_definitions: int = 0
    definition_coverage: float = 0.0


class DifficultyMetrics(BaseModel):
    level: Difficulty
    cornerstone_ratio: float
    average_word_length: float
    word_length_distribution: Dict[int, int] = Field(default_factory=dict)
    balance_score: int = 0


class SolvabilityMetrics(BaseModel):
    letter_diversity: int = 0
    length_variety: int = 0
    keystone_word_findable: bool = False


class OverallMetrics(BaseModel):
    quality_score: int = 0
    error_count: int = 0
    warning_count: int = 0
    recommendation_count: int = 0


class ValidationMetrics(BaseModel):
    word_discovery: Optional[WordDiscoveryMetrics] = None
    definitions: Optional[DefinitionMetrics] = None
    difficulty: Optional[DifficultyMetrics] = None
    solvability: Optional[SolvabilityMetrics] = None
    overall: Optional[OverallMetrics] = None


class ValidationResult(BaseModel):
    """Result of puzzle validation."""
    is_valid: bool = False
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)
    metrics: ValidationMetrics = Field(default_factory=ValidationMetrics)
    recommendations: List[str] = Field(default_factory=list)
    validation_time: float = 0.0
    validated_at: str = ""

    @property
    def error_codes(self) -> List[str]:
        return [e.code for e in self.errors]

    @property
    def warning_codes(self) -> List[str]:
        return [w.code for w in self.warnings]

    @property
    def quality_score(self) -> int:
        return self.metrics.overall.quality_score if self.metrics.overall else 0
