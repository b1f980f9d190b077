"""Loading of dictionaries, common-word lists, definitions and the keystone table."""

import json
import logging
import re
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Union

import yaml

from .paths import PATH_LENGTH


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
KEYSTONE_TABLE_FILE = DATA_DIR / "keystone_words.yaml"
SAMPLE_PUZZLES_FILE = DATA_DIR / "sample_puzzles.yaml"

_WORD_PATTERN = re.compile(r'^[A-Z]+$')

PathLike = Union[str, Path]


def _read_structured(path: Path):
    with open(path) as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def load_word_list(path: PathLike, min_length: int = 4) -> FrozenSet[str]:
    """
    Load a word list.

    Plain text files hold one word per line; lines starting with `#` are
    ignored. JSON files hold either a list of words or an object with a
    `words` list. Words are uppercased; anything non-alphabetic or shorter
    than `min_length` is dropped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Word list not found: {path}")

    if path.suffix.lower() == ".json":
        data = _read_structured(path)
        if isinstance(data, dict):
            data = data.get("words", [])
        raw = [w for w in data if isinstance(w, str)]
    else:
        with open(path) as f:
            raw = [line for line in f if not line.lstrip().startswith("#")]

    words = set()
    for entry in raw:
        word = entry.strip().upper()
        if len(word) >= min_length and _WORD_PATTERN.match(word):
            words.add(word)

    logger.info("Loaded %d words from %s", len(words), path)
    return frozenset(words)


def load_definitions(path: PathLike) -> Dict[str, str]:
    """
    Load a word -> definition mapping from JSON or YAML.

    Values may be plain strings or objects with a `definition` field;
    entries without usable text are skipped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Definitions file not found: {path}")

    data = _read_structured(path) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Definitions file must contain a mapping: {path}")

    definitions = {}
    for word, value in data.items():
        text = value.get("definition") if isinstance(value, dict) else value
        if isinstance(text, str) and text.strip():
            definitions[str(word).upper()] = text.strip()

    logger.info("Loaded %d definitions from %s", len(definitions), path)
    return definitions


def load_keystone_table(path: Optional[PathLike] = None) -> Dict[str, str]:
    """
    Load keystone words and their definitions, in file order.

    Defaults to the bundled table. Entries that are not 12-letter words are
    skipped; a word listed more than once keeps its last definition.
    """
    path = Path(path) if path is not None else KEYSTONE_TABLE_FILE
    entries = _read_structured(path) or []

    table: Dict[str, str] = {}
    for entry in entries:
        word = str(entry.get("word", "")).strip().upper()
        if len(word) != PATH_LENGTH or not _WORD_PATTERN.match(word):
            logger.warning("Skipping keystone entry %r: not a %d-letter word", word, PATH_LENGTH)
            continue
        if word in table:
            logger.debug("Duplicate keystone entry %s; keeping the later definition", word)
        table[word] = entry.get("definition") or ""
    return table


def load_sample_puzzles(path: Optional[PathLike] = None) -> Dict[str, int]:
    """Keystone word -> catalog path index for the hand-picked sample puzzles."""
    path = Path(path) if path is not None else SAMPLE_PUZZLES_FILE
    data = _read_structured(path) or {}
    return {str(word).upper(): int(index) for word, index in data.items()}
