"""
Pydantic models for the generation layer.

Configuration (loaded from YAML), per-keystone records and the run result.
The main logic classes (DefinitionClient, PuzzleGenerator) live in their
own files.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from ..cornerstones.models import DictionaryCleaningStats, PathReport, Puzzle, ValidationResult
from ..cornerstones.validator import ValidatorOptions


PuzzleStatus = Literal[
    "accepted",
    "rejected_input",
    "no_feasible_puzzle",
    "failed_cleaning",
    "failed_validation",
    "error",
]


class DefinitionClientConfig(BaseModel):
    """Settings for the network definition client."""
    datamuse_url: str = "https://api.datamuse.com/words"
    free_dictionary_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    use_fallback: bool = True
    rate_limit_per_second: float = 5.0
    timeout: float = 10.0
    retry_attempts: int = 2
    retry_delay: float = 1.0


class OptimizerConfig(BaseModel):
    """Genetic search used to extend the path catalog before a run."""
    enabled: bool = False
    population_size: int = 50
    generations: int = 100
    top_n: int = 10
    seed: Optional[int] = None


class GenerationConfig(BaseModel):
    """Configuration for a puzzle generation run."""
    keystone_words: List[str] = Field(default_factory=list)
    dictionary_path: Optional[str] = None
    common_words_path: Optional[str] = None
    definitions_path: Optional[str] = None
    min_cornerstone_words: int = 20
    clean_words: bool = True
    fetch_definitions: bool = False
    validate_puzzles: bool = True
    validator: ValidatorOptions = Field(default_factory=ValidatorOptions)
    definition_client: DefinitionClientConfig = Field(default_factory=DefinitionClientConfig)
    extend_catalog: OptimizerConfig = Field(default_factory=OptimizerConfig)


class PuzzleRecord(BaseModel):
    """Outcome for a single keystone word."""
    keystone_word: str
    status: PuzzleStatus
    reason: Optional[str] = None
    puzzle: Optional[Puzzle] = None
    validation: Optional[ValidationResult] = None
    path_reports: List[PathReport] = Field(default_factory=list)
    removed_words: List[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Result of a complete generation run."""
    config: GenerationConfig
    records: List[PuzzleRecord] = Field(default_factory=list)
    catalog_size: int = 0
    added_paths: List[List[int]] = Field(default_factory=list)
    status_counts: Dict[str, int] = Field(default_factory=dict)
    cleaning: DictionaryCleaningStats = Field(default_factory=DictionaryCleaningStats)
    started_at: str = ""
    ended_at: str = ""
    duration_seconds: float = 0.0

    @property
    def accepted_puzzles(self) -> List[Puzzle]:
        return [r.puzzle for r in self.records if r.status == "accepted" and r.puzzle is not None]
