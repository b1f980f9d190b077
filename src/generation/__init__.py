"""Batch puzzle generation for Cornerstones."""

from .models import (
    PuzzleStatus,
    DefinitionClientConfig,
    OptimizerConfig,
    GenerationConfig,
    PuzzleRecord,
    GenerationResult,
)
from .definition_client import DefinitionClient
from .pipeline import PuzzleGenerator

__all__ = [
    "PuzzleStatus",
    "DefinitionClientConfig",
    "OptimizerConfig",
    "GenerationConfig",
    "PuzzleRecord",
    "GenerationResult",
    "DefinitionClient",
    "PuzzleGenerator",
]
