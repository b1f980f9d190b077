import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Any
from pydantic import BaseModel, Field, ConfigDict

from ..cornerstones.builder import PuzzleBuilder
from ..cornerstones.definitions import ChainedDefinitionResolver, DefinitionResolver, StaticDefinitionResolver
from ..cornerstones.optimizer import PathOptimizer
from ..cornerstones.paths import DEFAULT_CATALOG, PathCatalog
from ..cornerstones.validator import PuzzleValidator
from ..cornerstones.wordlists import load_definitions, load_keystone_table, load_word_list
from .definition_client import DefinitionClient
from .models import GenerationConfig, GenerationResult, PuzzleRecord


logger = logging.getLogger(__name__)


class PuzzleGenerator(BaseModel):
    """
    Top-level orchestrator for batch puzzle generation.

    Runs every keystone word through construction, definition cleaning and
    validation. Words removed while cleaning one puzzle stay out of the
    dictionary for every later keystone word.

    Attributes:
        config: Generation configuration
        builder: Current puzzle builder (replaced as words are removed)
        resolver: Definition source used for cleaning
        definitions: Known definitions, used when cleaning is off
        keystone_words: Words to build puzzles for, in order
        catalog: Path catalog, possibly extended by the optimizer
        records: One record per processed keystone word
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: GenerationConfig = Field(default_factory=GenerationConfig)
    builder: PuzzleBuilder
    resolver: Optional[Any] = None
    definitions: Dict[str, str] = Field(default_factory=dict)
    keystone_words: List[str] = Field(default_factory=list)
    catalog: PathCatalog = DEFAULT_CATALOG
    added_paths: List[List[int]] = Field(default_factory=list)
    records: List[PuzzleRecord] = Field(default_factory=list)
    started_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        config: Optional[GenerationConfig] = None,
        dictionary: Optional[Iterable[str]] = None,
        common_words: Optional[Iterable[str]] = None,
        definitions: Optional[Mapping[str, str]] = None,
        resolver: Optional[DefinitionResolver] = None,
        **config_kwargs: Any
    ) -> "PuzzleGenerator":
        """
        Factory method to create a generator with loaded word data.

        Word data passed directly takes precedence over the paths in the
        config. Without keystone words in the config, the bundled keystone
        table is used.

        Raises:
            ValueError: If no dictionary is given or configured
        """
        if config is None:
            config = GenerationConfig(**config_kwargs)

        if dictionary is None:
            if not config.dictionary_path:
                raise ValueError("A dictionary is required: pass one or set dictionary_path")
            dictionary = load_word_list(config.dictionary_path)

        if common_words is None:
            if config.common_words_path:
                common_words = load_word_list(config.common_words_path)
            else:
                logger.warning("No common words configured; no word will count as a cornerstone word")
                common_words = ()

        keystone_table = load_keystone_table()
        known: Dict[str, str] = {w: d for w, d in keystone_table.items() if d}
        if definitions is None and config.definitions_path:
            definitions = load_definitions(config.definitions_path)
        known.update({w.upper(): d for w, d in (definitions or {}).items()})

        if resolver is None:
            resolver = StaticDefinitionResolver(known)
            if config.fetch_definitions:
                client = DefinitionClient.create(config.definition_client, known)
                resolver = ChainedDefinitionResolver([resolver, client])

        catalog = DEFAULT_CATALOG
        added_paths: List[List[int]] = []
        if config.extend_catalog.enabled:
            settings = config.extend_catalog
            optimizer = PathOptimizer(catalog, seed=settings.seed)
            candidates = optimizer.generate_optimized_paths(
                population_size=settings.population_size,
                generations=settings.generations,
                top_n=settings.top_n,
            )
            extended = catalog.extend(candidates)
            added_paths = [list(p) for p in extended[len(catalog):]]
            catalog = extended
            logger.info("Extended path catalog with %d new paths", len(added_paths))

        builder = PuzzleBuilder(
            dictionary,
            common_words,
            catalog=catalog,
            min_cornerstone_words=config.min_cornerstone_words,
        )
        keystone_words = [w.strip().upper() for w in config.keystone_words] or list(keystone_table)

        return cls(
            config=config,
            builder=builder,
            resolver=resolver,
            definitions=known,
            keystone_words=keystone_words,
            catalog=catalog,
            added_paths=added_paths,
        )

    def setup(self) -> None:
        self.records = []
        self.started_at = datetime.now()

    def step(self, keystone_word: str) -> PuzzleRecord:
        """
        Process one keystone word.

        Unexpected failures are recorded with status "error" rather than
        raised, so one bad word never ends a run.
        """
        try:
            record = self._process(keystone_word)
        except Exception as e:
            logger.exception("Error generating puzzle for %s", keystone_word)
            record = PuzzleRecord(keystone_word=keystone_word, status="error", reason=str(e))
        self.records.append(record)
        return record

    def _process(self, keystone_word: str) -> PuzzleRecord:
        report = self.builder.evaluate(keystone_word)
        record = PuzzleRecord(
            keystone_word=report.keystone_word,
            status="accepted",
            path_reports=report.path_reports,
        )

        if report.puzzle is None:
            record.status = "no_feasible_puzzle" if report.path_reports else "rejected_input"
            record.reason = report.rejection_reason
            return record

        puzzle = report.puzzle
        if self.config.clean_words:
            outcome = self.builder.clean_puzzle(puzzle, self.resolver)
            record.removed_words = outcome.removed_words
            if outcome.removed_words:
                self.builder = self.builder.without_words(outcome.removed_words)
            if outcome.puzzle is None:
                record.status = "failed_cleaning"
                record.reason = (
                    f"Fewer than {self.builder.min_cornerstone_words} cornerstone words "
                    f"remain after removing {len(outcome.removed_words)} undefined words"
                )
                return record
            puzzle = outcome.puzzle
        record.puzzle = puzzle

        if self.config.validate_puzzles:
            validator = PuzzleValidator(self.config.validator, self.catalog, self.builder.dictionary)
            definitions = puzzle.definitions or self.definitions or None
            record.validation = validator.validate(puzzle, self.builder.common_words, definitions)
            if not record.validation.is_valid:
                record.status = "failed_validation"
                record.reason = ", ".join(record.validation.error_codes)

        return record

    def run(
        self,
        on_puzzle: Optional[Callable[[PuzzleRecord], None]] = None,
        verbose: bool = False,
    ) -> GenerationResult:
        """
        Run every keystone word through the pipeline.

        Args:
            on_puzzle: Optional callback called after each keystone word
            verbose: If True, print progress to stdout

        Returns:
            GenerationResult containing every record
        """
        self.setup()

        if verbose:
            print(f"Generating puzzles for {len(self.keystone_words)} keystone words")
            print(f"Dictionary: {len(self.builder.dictionary)} words, "
                  f"common words: {len(self.builder.common_words)}")
            print(f"Path catalog: {len(self.catalog)} paths")
            print("-" * 40)

        for index, word in enumerate(self.keystone_words, start=1):
            record = self.step(word)

            if verbose:
                line = f"[{index}/{len(self.keystone_words)}] {record.keystone_word}: {record.status}"
                if record.puzzle is not None:
                    line += (f" (path {record.puzzle.path_index}, "
                             f"{record.puzzle.total_words} words, "
                             f"{record.puzzle.cornerstone_count} cornerstone)")
                print(line)
                if record.reason and record.status != "accepted":
                    print(f"  - {record.reason}")
                if record.validation and record.validation.warnings:
                    print(f"  {len(record.validation.warnings)} warnings, "
                          f"quality score {record.validation.quality_score}")

            if on_puzzle:
                on_puzzle(record)

        if isinstance(self.resolver, ChainedDefinitionResolver):
            for resolver in self.resolver.resolvers:
                if isinstance(resolver, DefinitionClient):
                    resolver.stop()

        if verbose:
            result = self.get_result()
            print("-" * 40)
            print(f"Generation complete: {len(result.accepted_puzzles)} puzzles accepted")
            print(f"Dictionary cleaning: {result.cleaning.words_removed} words removed "
                  f"({result.cleaning.reduction_percentage}%) across "
                  f"{result.cleaning.puzzles_with_cleaning} puzzles")

        return self.get_result()

    def get_result(self) -> GenerationResult:
        ended_at = datetime.now()
        duration = (ended_at - self.started_at).total_seconds() if self.started_at else 0.0

        counts: Dict[str, int] = {}
        for record in self.records:
            counts[record.status] = counts.get(record.status, 0) + 1

        return GenerationResult(
            config=self.config,
            records=self.records,
            catalog_size=len(self.catalog),
            added_paths=self.added_paths,
            status_counts=counts,
            cleaning=self.builder.cleaning_stats,
            started_at=self.started_at.isoformat() if self.started_at else "",
            ended_at=ended_at.isoformat(),
            duration_seconds=duration,
        )

    def save_result(self, path: str | Path) -> None:
        """
        Save the generation result to a JSON file.

        Args:
            path: Path to save the result file
        """
        result = self.get_result()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            json.dump(result.model_dump(), f, indent=2, default=str)

    def export_puzzles(self, path: str | Path) -> int:
        """
        Write accepted puzzles in the game's format, keyed by keystone word.

        Returns:
            Number of puzzles written
        """
        puzzles = self.get_result().accepted_puzzles
        export = {}
        for puzzle in puzzles:
            data = puzzle.to_export()
            data["definitions"] = dict(sorted(puzzle.definitions.items()))
            export[puzzle.keystone_word] = data

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(export, f, indent=2)
        return len(export)
