"""Puzzle construction and validation for Cornerstones."""

from .grid import (
    ADJACENCY,
    CORNER_POSITIONS,
    CROSS_POSITIONS,
    build_grid,
    grid_signature,
    neighbors,
    render_grid,
    unreachable_positions,
)
from .paths import (
    DEFAULT_CATALOG,
    HAMILTONIAN_PATHS,
    PathCatalog,
    find_all_hamiltonian_paths,
    is_valid_hamiltonian_path,
)
from .models import ClassifiedWord, Puzzle, BuildReport, DictionaryCleaningStats, ValidationError, ValidationResult
from .finder import WordFinder, find_all_words, get_cornerstone_words
from .discovery import WordDiscovery, DiscoveryResult, WordRelationships
from .definitions import (
    DefinitionResolver,
    StaticDefinitionResolver,
    ChainedDefinitionResolver,
    resolve_definitions,
)
from .builder import PuzzleBuilder, build_puzzle, check_keystone_word, classify_words
from .optimizer import PathOptimizer, score_path, evaluate_path_fitness
from .validator import PuzzleValidator, ValidatorOptions, validate_puzzle
from .wordlists import load_word_list, load_definitions, load_keystone_table, load_sample_puzzles

__all__ = [
    # Grid
    "ADJACENCY",
    "CORNER_POSITIONS",
    "CROSS_POSITIONS",
    "build_grid",
    "grid_signature",
    "neighbors",
    "render_grid",
    "unreachable_positions",
    # Paths
    "DEFAULT_CATALOG",
    "HAMILTONIAN_PATHS",
    "PathCatalog",
    "find_all_hamiltonian_paths",
    "is_valid_hamiltonian_path",
    # Models
    "ClassifiedWord",
    "Puzzle",
    "BuildReport",
    "DictionaryCleaningStats",
    "ValidationError",
    "ValidationResult",
    # Word search
    "WordFinder",
    "find_all_words",
    "get_cornerstone_words",
    "WordDiscovery",
    "DiscoveryResult",
    "WordRelationships",
    # Definitions
    "DefinitionResolver",
    "StaticDefinitionResolver",
    "ChainedDefinitionResolver",
    "resolve_definitions",
    # Construction
    "PuzzleBuilder",
    "build_puzzle",
    "check_keystone_word",
    "classify_words",
    # Optimization
    "PathOptimizer",
    "score_path",
    "evaluate_path_fitness",
    # Validation
    "PuzzleValidator",
    "ValidatorOptions",
    "validate_puzzle",
    # Word lists
    "load_word_list",
    "load_definitions",
    "load_keystone_table",
    "load_sample_puzzles",
]
