"""
Tests for loading word lists, definitions and the keystone table.
"""

import json
import pytest
from src.cornerstones.wordlists import (
    load_definitions,
    load_keystone_table,
    load_sample_puzzles,
    load_word_list,
)
from src.cornerstones.paths import DEFAULT_CATALOG


class TestLoadWordList:
    """Test cases for dictionary and common-word files."""

    def test_text_file(self, tmp_path):
        """One word per line; comments, short and non-alphabetic entries dropped."""
        path = tmp_path / "words.txt"
        path.write_text("# common words\nstone\n  Tone \nore\nit's\n\nCORNERSTONES\n")
        assert load_word_list(path) == frozenset({"STONE", "TONE", "CORNERSTONES"})

    def test_json_list(self, tmp_path):
        """A JSON array of words is accepted."""
        path = tmp_path / "words.json"
        path.write_text(json.dumps(["stone", "tone", 5]))
        assert load_word_list(path) == frozenset({"STONE", "TONE"})

    def test_json_object(self, tmp_path):
        """A JSON object with a words list is accepted."""
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"words": ["stone"], "version": 2}))
        assert load_word_list(path) == frozenset({"STONE"})

    def test_min_length(self, tmp_path):
        """The length cut-off is configurable."""
        path = tmp_path / "words.txt"
        path.write_text("ore\nstone\n")
        assert load_word_list(path, min_length=3) == frozenset({"ORE", "STONE"})

    def test_missing_file(self, tmp_path):
        """Missing files raise."""
        with pytest.raises(FileNotFoundError):
            load_word_list(tmp_path / "nope.txt")


class TestLoadDefinitions:
    """Test cases for definition files."""

    def test_json(self, tmp_path):
        """Plain and object values are both read."""
        path = tmp_path / "defs.json"
        path.write_text(json.dumps({
            "stone": "a lump of rock",
            "tone": {"definition": "a musical sound", "source": "datamuse"},
            "note": {"source": "datamuse"},
            "core": "  ",
        }))
        assert load_definitions(path) == {"STONE": "a lump of rock", "TONE": "a musical sound"}

    def test_yaml(self, tmp_path):
        """YAML mappings are read the same way."""
        path = tmp_path / "defs.yaml"
        path.write_text("stone: a lump of rock\ntone:\n  definition: a musical sound\n")
        assert load_definitions(path) == {"STONE": "a lump of rock", "TONE": "a musical sound"}

    def test_not_a_mapping(self, tmp_path):
        """Lists are rejected."""
        path = tmp_path / "defs.json"
        path.write_text(json.dumps(["stone"]))
        with pytest.raises(ValueError):
            load_definitions(path)


class TestKeystoneTable:
    """Test cases for the keystone table."""

    def test_bundled_table(self):
        """The bundled table holds 12-letter words with definitions."""
        table = load_keystone_table()
        assert "CORNERSTONES" in table
        assert table["CORNERSTONES"]
        assert all(len(word) == 12 and word.isalpha() and word.isupper() for word in table)

    def test_duplicates_keep_last(self, tmp_path):
        """A repeated word keeps its later definition."""
        path = tmp_path / "keystones.yaml"
        path.write_text(
            "- word: CORNERSTONES\n  definition: first\n"
            "- word: CONVERSATION\n  definition: a talk\n"
            "- word: cornerstones\n  definition: second\n"
        )
        table = load_keystone_table(path)
        assert table == {"CORNERSTONES": "second", "CONVERSATION": "a talk"}
        assert list(table) == ["CORNERSTONES", "CONVERSATION"]

    def test_invalid_entries_skipped(self, tmp_path):
        """Words that are not 12 letters are left out."""
        path = tmp_path / "keystones.yaml"
        path.write_text(
            "- word: CHAMPIONSHIPS\n  definition: too long\n"
            "- word: CORNERSTONES\n  definition: ok\n"
        )
        assert list(load_keystone_table(path)) == ["CORNERSTONES"]

    def test_sample_puzzles(self):
        """Sample puzzles point at catalog paths."""
        samples = load_sample_puzzles()
        assert samples["CORNERSTONES"] == 0
        assert len(samples) == 10
        assert all(0 <= index < len(DEFAULT_CATALOG) for index in samples.values())
