import pytest

from src.cornerstones.grid import build_grid
from src.cornerstones.paths import DEFAULT_CATALOG
from src.utils.grid_visualizer import highlight_word, render_path_order, visualize


PATH = DEFAULT_CATALOG[0]


class TestGridVisualizer:
    """Test cases for text rendering of grids and paths."""

    def test_render_path_order(self):
        """Each cross cell shows its step number; corners stay blank."""
        assert render_path_order(PATH).split('\n') == [
            " .  1 10  .",
            " 3  2  9 11",
            " 4  5  8 12",
            " .  6  7  .",
        ]

    def test_highlight_word(self):
        """Cells on the word's path are uppercase, the rest lowercase."""
        grid = build_grid("CORNERSTONES", PATH)
        assert highlight_word(grid, [1, 5, 4, 8]) == ".Cn.\nROoe\nNets\n.rs."

    def test_visualize(self):
        """Letters and step order are shown side by side."""
        lines = visualize("CORNERSTONES", PATH).split('\n')
        assert len(lines) == 4
        assert lines[0] == ".CN.     .  1 10  ."

    def test_visualize_wrong_length(self):
        """Words that do not fit the path raise."""
        with pytest.raises(ValueError):
            visualize("SHORT", PATH)
