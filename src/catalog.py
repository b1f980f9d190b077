"""
Standalone CLI for inspecting and extending the Hamiltonian path catalog.

Usage:
    python -m src.catalog enumerate
    python -m src.catalog optimize --population 50 --generations 100 --seed 7
    python -m src.catalog score CORNERSTONES --show-grid
"""

import argparse
import json
import logging
import sys

from .cornerstones.optimizer import PathOptimizer, evaluate_path_fitness
from .cornerstones.paths import DEFAULT_CATALOG, find_all_hamiltonian_paths
from .cornerstones.wordlists import load_sample_puzzles
from .utils.grid_visualizer import render_path_order, visualize


def cmd_enumerate(args) -> int:
    paths = find_all_hamiltonian_paths()
    if args.json:
        print(json.dumps([list(p) for p in paths]))
        return 0

    for path in paths:
        marker = "*" if path in DEFAULT_CATALOG else " "
        print(f"{marker} {' '.join(str(p) for p in path)}")
    print(f"\n{len(paths)} Hamiltonian paths ({len(DEFAULT_CATALOG)} in catalog, marked *)")
    return 0


def cmd_optimize(args) -> int:
    optimizer = PathOptimizer(DEFAULT_CATALOG, seed=args.seed, mutation_rate=args.mutation_rate)
    paths = optimizer.generate_optimized_paths(
        population_size=args.population,
        generations=args.generations,
        top_n=args.top,
    )
    if args.json:
        print(json.dumps([
            {"path": list(p), "fitness": evaluate_path_fitness(p), "in_catalog": p in DEFAULT_CATALOG}
            for p in paths
        ], indent=2))
        return 0

    for rank, path in enumerate(paths, start=1):
        status = "catalog" if path in DEFAULT_CATALOG else "new"
        print(f"#{rank} fitness={evaluate_path_fitness(path)} ({status})")
        print(render_path_order(path))
        print()
    return 0


def cmd_score(args) -> int:
    word = args.word.strip().upper()
    report = PathOptimizer(DEFAULT_CATALOG).find_optimal_path(word)
    # Path the bundled sample puzzle uses for this word, if any
    sample_index = load_sample_puzzles().get(word)
    if args.json:
        data = report.model_dump()
        data["sample_path_index"] = sample_index
        print(json.dumps(data, indent=2))
        return 0

    for item in report.all_analysis:
        marker = " (sample puzzle)" if item.path_index == sample_index else ""
        print(f"Path {item.path_index}: score {item.score:.2f}{marker}")
        if args.show_grid and item.score >= 0:
            print(visualize(word, item.path))
            print()
    if report.best_path:
        print(f"\nBest path for {word}: {report.best_path.path_index}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Inspect and extend the Cornerstones path catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src.catalog enumerate --json > paths.json
  python -m src.catalog optimize --seed 42 --top 5
  python -m src.catalog score CONVERSATION --show-grid
        """
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at debug level"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    enumerate_parser = subparsers.add_parser("enumerate", help="List every Hamiltonian path of the cross")
    enumerate_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    enumerate_parser.set_defaults(func=cmd_enumerate)

    optimize_parser = subparsers.add_parser("optimize", help="Run the genetic path search")
    optimize_parser.add_argument("--population", type=int, default=50, help="Population size (default: 50)")
    optimize_parser.add_argument("--generations", type=int, default=100, help="Generations (default: 100)")
    optimize_parser.add_argument("--top", type=int, default=10, help="Paths to report (default: 10)")
    optimize_parser.add_argument("--mutation-rate", type=float, default=0.1, help="Mutation rate (default: 0.1)")
    optimize_parser.add_argument("--seed", type=int, help="Random seed for a reproducible run")
    optimize_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    optimize_parser.set_defaults(func=cmd_optimize)

    score_parser = subparsers.add_parser("score", help="Score catalog paths for a keystone word")
    score_parser.add_argument("word", help="12-letter keystone word")
    score_parser.add_argument("--show-grid", action="store_true", help="Render each scored grid")
    score_parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    score_parser.set_defaults(func=cmd_score)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='[%(levelname)s] %(message)s'
    )

    try:
        return args.func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    sys.exit(main())
