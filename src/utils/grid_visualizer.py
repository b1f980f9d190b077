from typing import List, Sequence

from ..cornerstones.grid import GRID_CELLS, GRID_SIZE, build_grid, render_grid


def render_path_order(path: Sequence[int]) -> str:
    """Render the step number of each path position on the 4x4 grid."""
    steps = {position: index + 1 for index, position in enumerate(path)}
    lines = []
    for row in range(GRID_SIZE):
        cells = []
        for col in range(GRID_SIZE):
            step = steps.get(row * GRID_SIZE + col)
            cells.append(f"{step:>2}" if step is not None else " .")
        lines.append(' '.join(cells))
    return '\n'.join(lines)

def highlight_word(grid: Sequence[str], word_path: Sequence[int]) -> str:
    """Render the grid with cells on `word_path` uppercase and the rest lowercase."""
    on_path = set(word_path)
    cells: List[str] = []
    for position in range(GRID_CELLS):
        letter = grid[position] if position < len(grid) else ''
        if letter and position not in on_path:
            letter = letter.lower()
        cells.append(letter)
    return render_grid(cells)

def visualize(word: str, path: Sequence[int]) -> str:
    """Main function: lay `word` along `path` and show the grid beside the step order."""
    grid = build_grid(word, path)
    if grid is None:
        raise ValueError(f"Cannot lay '{word}' along path {list(path)}")

    letters = render_grid(grid).split('\n')
    order = render_path_order(path).split('\n')
    return '\n'.join(f"{a}    {b}" for a, b in zip(letters, order))


if __name__ == '__main__':
    example_path = (1, 5, 4, 8, 9, 13, 14, 10, 6, 2, 7, 11)

    print("Keystone: CORNERSTONES")
    print(f"Path: {list(example_path)}")
    print("\nRendered grid:")
    print(visualize("CORNERSTONES", example_path))
