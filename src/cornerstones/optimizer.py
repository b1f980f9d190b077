"""
Heuristic path scoring and genetic search for new Hamiltonian paths.

The scores here are cheap proxies. They do not measure cornerstone word
yield, so paths suggested by the optimizer still have to be evaluated by the
puzzle builder before they are worth adding to the catalog.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .grid import CROSS_POSITIONS, build_grid, classify_positions_by_region, neighbors
from .paths import DEFAULT_CATALOG, PATH_LENGTH, Path, PathCatalog, is_valid_hamiltonian_path


logger = logging.getLogger(__name__)

LETTER_FREQUENCIES: Dict[str, float] = {
    "E": 12.7, "T": 9.1, "A": 8.2, "O": 7.5, "I": 7.0, "N": 6.7,
    "S": 6.3, "H": 6.1, "R": 6.0, "D": 4.3, "L": 4.0, "C": 2.8,
    "U": 2.8, "M": 2.4, "W": 2.4, "F": 2.2, "G": 2.0, "Y": 2.0,
    "P": 1.9, "B": 1.3, "V": 1.0, "K": 0.8, "J": 0.15, "X": 0.15,
    "Q": 0.10, "Z": 0.07,
}

VOWELS = frozenset("AEIOU")

GOOD_COMBINATIONS = frozenset({
    "TH", "HE", "IN", "ER", "AN", "RE", "ED", "ND", "ON", "EN",
    "AT", "OU", "IT", "ES", "OR", "TE", "OF", "BE", "TO", "AR",
    "THE", "AND", "ING", "HER", "HAT", "HIS", "THA", "ERE", "FOR", "ENT",
})

WORD_STARTERS = frozenset("STCPABFMDRLWH")

INVALID_FITNESS = -1000


def score_letter_frequency(word: str) -> float:
    return sum(LETTER_FREQUENCIES.get(letter, 0) for letter in word.upper())


def score_vowel_distribution(word: str) -> float:
    """Ten points per vowel plus the summed gaps between consecutive vowels."""
    positions = [i for i, letter in enumerate(word.upper()) if letter in VOWELS]
    if not positions:
        return 0
    spread = sum(b - a for a, b in zip(positions, positions[1:]))
    return len(positions) * 10 + spread


def score_letter_combinations(word: str) -> float:
    word = word.upper()
    score = 0
    for size, points in ((2, 5), (3, 10)):
        for i in range(len(word) - size + 1):
            if word[i:i + size] in GOOD_COMBINATIONS:
                score += points
    return score


def score_word_starters(word: str) -> float:
    return sum(3 for letter in word.upper() if letter in WORD_STARTERS)


def score_path(word: str, path: Sequence[int]) -> float:
    """
    Heuristic score of laying `word` along `path`.

    Returns -1 if the word cannot be laid on the path.
    """
    if not is_valid_hamiltonian_path(path) or build_grid(word, path) is None:
        return -1
    return (
        score_letter_frequency(word)
        + score_vowel_distribution(word)
        + score_letter_combinations(word)
        + score_word_starters(word)
    )


def evaluate_path_fitness(path: Sequence[int]) -> int:
    """Connectivity and region-coverage fitness used by the genetic search."""
    if not is_valid_hamiltonian_path(path):
        return INVALID_FITNESS

    fitness = sum(len(neighbors(position)) * 10 for position in path)
    fitness += len(classify_positions_by_region(path)) * 50
    return fitness


class PathQuality(BaseModel):
    vowel_count: int
    consonant_count: int
    vowel_ratio: float
    unique_letters: int
    letter_frequency_score: float
    vowel_distribution_score: float
    combination_score: float
    starter_score: float


class PathScore(BaseModel):
    path_index: int
    path: List[int]
    score: float
    details: PathQuality


class OptimalPathReport(BaseModel):
    best_path: Optional[PathScore] = None
    all_analysis: List[PathScore] = Field(default_factory=list)
    total_paths_tested: int = 0


def analyze_path_quality(word: str, path: Sequence[int]) -> PathQuality:
    word = word.upper()
    vowel_count = sum(1 for letter in word if letter in VOWELS)
    return PathQuality(
        vowel_count=vowel_count,
        consonant_count=len(word) - vowel_count,
        vowel_ratio=vowel_count / len(word) if word else 0.0,
        unique_letters=len(set(word)),
        letter_frequency_score=score_letter_frequency(word),
        vowel_distribution_score=score_vowel_distribution(word),
        combination_score=score_letter_combinations(word),
        starter_score=score_word_starters(word),
    )


class PathOptimizer:
    """
    Scores catalog paths and evolves new Hamiltonian paths.

    Randomness comes from a private `random.Random`, so a fixed seed gives a
    reproducible run.
    """

    def __init__(
        self,
        catalog: PathCatalog = DEFAULT_CATALOG,
        seed: Optional[int] = None,
        mutation_rate: float = 0.1,
    ):
        self.catalog = catalog
        self.mutation_rate = mutation_rate
        self._rng = random.Random(seed)

    def find_optimal_path(self, keystone_word: str) -> OptimalPathReport:
        """Rank every catalog path by heuristic score for `keystone_word`."""
        word = keystone_word.strip().upper()
        report = OptimalPathReport()

        for index, path in enumerate(self.catalog):
            if not is_valid_hamiltonian_path(path):
                logger.warning("Skipping invalid catalog path %d: %s", index, list(path))
                continue
            report.all_analysis.append(PathScore(
                path_index=index,
                path=list(path),
                score=score_path(word, path),
                details=analyze_path_quality(word, path),
            ))

        # Stable sort keeps catalog order among equal scores
        report.all_analysis.sort(key=lambda item: item.score, reverse=True)
        report.total_paths_tested = len(report.all_analysis)
        if report.all_analysis:
            report.best_path = report.all_analysis[0]
            logger.info(
                "Best heuristic path for %s: index %d with score %.2f",
                word, report.best_path.path_index, report.best_path.score,
            )
        return report

    def random_hamiltonian_path(self) -> Optional[Path]:
        """One randomized walk over the cross; None if it hits a dead end."""
        unvisited = set(CROSS_POSITIONS)
        current = self._rng.choice(CROSS_POSITIONS)
        path = [current]
        unvisited.discard(current)

        while unvisited:
            options = sorted(n for n in neighbors(current) if n in unvisited)
            if not options:
                return None
            current = self._rng.choice(options)
            path.append(current)
            unvisited.discard(current)

        return tuple(path)

    def random_population(self, size: int) -> List[Path]:
        """
        `size` valid paths from randomized walks.

        Walks that dead-end are retried up to `size * 10` attempts in total;
        any slots still empty are filled by cycling through the catalog.
        """
        population: List[Path] = []
        attempts = 0
        while len(population) < size and attempts < size * 10:
            attempts += 1
            path = self.random_hamiltonian_path()
            if path is not None and is_valid_hamiltonian_path(path):
                population.append(path)

        fallback = 0
        while len(population) < size and len(self.catalog) > 0:
            population.append(tuple(self.catalog[fallback % len(self.catalog)]))
            fallback += 1

        return population

    def crossover(self, parent_a: Sequence[int], parent_b: Sequence[int]) -> Optional[Path]:
        """Order crossover: a prefix of `parent_a`, then `parent_b`'s remaining positions in order."""
        point = self._rng.randint(1, PATH_LENGTH - 2)
        segment = list(parent_a[:point])
        taken = set(segment)
        child = segment + [p for p in parent_b if p not in taken]
        return tuple(child) if len(child) == PATH_LENGTH else None

    def mutate(self, path: Sequence[int]) -> Path:
        """Swap two randomly chosen entries."""
        mutated = list(path)
        if len(mutated) < 2:
            return tuple(mutated)
        i = self._rng.randrange(len(mutated))
        j = self._rng.randrange(len(mutated))
        mutated[i], mutated[j] = mutated[j], mutated[i]
        return tuple(mutated)

    @staticmethod
    def select_best(population: Sequence[Path], count: int) -> List[Path]:
        ranked = sorted(population, key=evaluate_path_fitness, reverse=True)
        return list(ranked[:count])

    def generate_offspring(self, parents: Sequence[Path], count: int) -> List[Path]:
        """
        Breed `count` children; a child that breaks the Hamiltonian
        invariant is replaced by a copy of its first parent.
        """
        offspring: List[Path] = []
        for _ in range(count):
            parent_a = self._rng.choice(parents)
            parent_b = self._rng.choice(parents)

            child = self.crossover(parent_a, parent_b)
            if child is not None and self._rng.random() < self.mutation_rate:
                child = self.mutate(child)

            if child is not None and is_valid_hamiltonian_path(child):
                offspring.append(child)
            else:
                offspring.append(tuple(parent_a))
        return offspring

    def generate_optimized_paths(
        self,
        population_size: int = 50,
        generations: int = 100,
        top_n: int = 10,
    ) -> List[Path]:
        """Evolve paths by selection, crossover and mutation; return the fittest."""
        if population_size < 2:
            raise ValueError("population_size must be at least 2")
        if generations < 0:
            raise ValueError("generations must not be negative")
        if top_n < 1:
            raise ValueError("top_n must be at least 1")

        logger.info(
            "Generating optimized paths (%d population, %d generations)",
            population_size, generations,
        )
        population = self.random_population(population_size)
        if not population:
            return []

        population = self.evolve(population, generations)
        ranked = sorted(population, key=evaluate_path_fitness, reverse=True)
        unique: List[Path] = []
        for path in ranked:
            if path not in unique:
                unique.append(path)
            if len(unique) == top_n:
                break
        return unique

    def evolve(self, population: Sequence[Path], generations: int) -> List[Path]:
        """Run `generations` rounds of selection and breeding over `population`."""
        population = list(population)
        for generation in range(generations):
            selected = self.select_best(population, max(1, len(population) // 2))
            offspring = self.generate_offspring(selected, len(population) - len(selected))
            population = selected + offspring

            if generation % 20 == 0:
                logger.debug(
                    "Generation %d: best fitness = %d",
                    generation, evaluate_path_fitness(selected[0]),
                )
        return population
