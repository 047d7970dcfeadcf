from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np


def column_heights(grid: np.ndarray) -> List[int]:
    height, width = grid.shape
    heights: List[int] = []
    for col in range(width):
        filled = np.where(grid[:, col] > 0)[0]
        heights.append(height - int(filled[0]) if filled.size else 0)
    return heights


def line_completion(grid: np.ndarray) -> List[Tuple[int, float]]:
    """(row, filled fraction) for every row, top to bottom."""
    width = grid.shape[1]
    return [(y, float(np.count_nonzero(grid[y] > 0)) / width) for y in range(grid.shape[0])]


def most_complete_lines(grid: np.ndarray, count: int = 3) -> List[int]:
    """Rows closest to clearing, ignoring empty and already full ones."""
    candidates = [(y, c) for y, c in line_completion(grid) if 0.0 < c < 1.0]
    # stable sort keeps lower row indices first on ties
    candidates.sort(key=lambda item: item[1], reverse=True)
    return [y for y, _ in candidates[:count]]


def board_features(grid: np.ndarray) -> Dict[str, float]:
    height, width = grid.shape
    filled = grid > 0
    heights = column_heights(grid)
    holes = 0
    for col in range(width):
        found_block = False
        for row in range(height):
            if filled[row, col]:
                found_block = True
            elif found_block:
                holes += 1
    bumpiness = sum(abs(heights[i] - heights[i + 1]) for i in range(width - 1))
    row_fill = filled.sum(axis=1)
    return {
        "max_height": max(heights) if heights else 0,
        "avg_height": float(np.mean(heights)) if heights else 0.0,
        "holes": holes,
        "bumpiness": bumpiness,
        "filled_cells": int(filled.sum()),
        "fill_ratio": float(filled.sum()) / float(height * width),
        "full_lines": int(np.sum(row_fill == width)),
        "almost_full_lines": int(np.sum(row_fill >= 0.8 * width)),
        "empty_lines": int(np.sum(row_fill == 0)),
    }
