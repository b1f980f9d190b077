"""
Main entry point for batch puzzle generation.

Usage:
    python -m src.main config.yaml
    python -m src.main config.yaml --output results/run1.json --verbose
    python -m src.main config.yaml --export puzzles.json
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

import yaml

from .generation import GenerationConfig, PuzzleGenerator


def load_config(config_path: str) -> GenerationConfig:
    """Load generation configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return GenerationConfig(**(data or {}))


def main():
    parser = argparse.ArgumentParser(
        description="Generate Cornerstones puzzles from keystone words",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example config.yaml:
  dictionary_path: data/words.txt
  common_words_path: data/common.txt
  definitions_path: data/definitions.json
  keystone_words:
    - CORNERSTONES
    - CONVERSATION
  min_cornerstone_words: 20
  clean_words: true
  fetch_definitions: false
  validator:
    min_total_words: 50
    strict_drift: false
        """
    )
    parser.add_argument(
        "config",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to save results JSON (default: results/<timestamp>.json)"
    )
    parser.add_argument(
        "--export",
        help="Also write accepted puzzles in the game's format to this path"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print progress to stdout and log at debug level"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(levelname)s] %(message)s'
    )

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    else:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path("results") / f"generation_{timestamp}.json"

    try:
        generator = PuzzleGenerator.create(config=config)
    except Exception as e:
        print(f"Error loading word data: {e}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"Config: {args.config}")
        print(f"Output: {output_path}")
        print()

    try:
        result = generator.run(verbose=args.verbose)
    except KeyboardInterrupt:
        print("\nGeneration interrupted by user")
        result = generator.get_result()

    # Save results
    generator.save_result(output_path)

    if args.verbose:
        print()
        print(f"Results saved to: {output_path}")

    if args.export:
        count = generator.export_puzzles(args.export)
        print(f"Exported {count} puzzles to: {args.export}")

    # Print summary
    print()
    print("=== Generation Summary ===")
    print(f"Keystone words: {len(result.records)}")
    for status, count in sorted(result.status_counts.items()):
        print(f"  {status}: {count}")
    print(f"Path catalog: {result.catalog_size} paths")
    print(f"Words removed by cleaning: {result.cleaning.words_removed} "
          f"({result.cleaning.reduction_percentage}% of dictionary)")
    print(f"Duration: {result.duration_seconds:.2f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
