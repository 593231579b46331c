"""
Puzzle size selection.

Chooses a board size and mirror flags for a viewport, favouring larger boards.
Viewport units are whatever the front end measures in (pixels, terminal cells).
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class DensityLevel(Enum):
    """How tightly tiles are packed into the viewport."""

    NORMAL = "normal"
    DENSE = "dense"
    SCROLLING = "scrolling"  # Custom size, may overflow the viewport


MIN_TILE = 40
MIN_TILE_DENSE = 20
MAX_TILE = 64

MAX_ROWS = 8
MAX_COLS = 17
MAX_COLS_MIRRORED = 16


@dataclass(frozen=True)
class PuzzleRequest:
    """Arguments for loopgrid.generate plus layout hints."""

    rows: int
    cols: int
    mirror_horizontal: bool = False
    mirror_vertical: bool = False
    requires_scroll: bool = False


def min_tile_size(dense: bool) -> int:
    return MIN_TILE_DENSE if dense else MIN_TILE


def max_grid_dimensions(avail_width: float, avail_height: float, dense: bool) -> tuple[int, int]:
    """(max_rows, max_cols) that fit the viewport at the minimum tile size; never below 2."""
    tile = min_tile_size(dense)
    return (max(2, int(avail_height // tile)), max(2, int(avail_width // tile)))


def tile_size(rows: int, cols: int, avail_width: float, avail_height: float, dense: bool) -> float:
    """Largest tile that fits, clamped to [minimum tile, MAX_TILE]."""
    if rows < 1 or cols < 1:
        return float(min_tile_size(dense))
    fit = min(avail_width / cols, avail_height / rows)
    return min(max(fit, float(min_tile_size(dense))), float(MAX_TILE))


def weighted_random(low: int, high: int, power: float, rng: random.Random) -> int:
    """
    Draw from [low, high] with weight (value - low + 1) ** power.

    Larger values are more likely; power=0 is uniform.
    """
    if high < low:
        raise ValueError(f"Empty range [{low}, {high}]")
    values = list(range(low, high + 1))
    weights = [float(v - low + 1) ** power for v in values]
    return rng.choices(values, weights=weights, k=1)[0]


def choose_puzzle_request(
    density: DensityLevel,
    max_rows: int,
    max_cols: int,
    rng: random.Random | None = None,
    custom_rows: int = 0,
    custom_cols: int = 0,
) -> PuzzleRequest:
    """
    Pick the next puzzle's size and mirror flags.

    SCROLLING uses the custom size and never mirrors. Otherwise half of the
    puzzles are mirrored, each axis on its own coin flip, and mirrored sizes
    are rounded up to even so both halves are the same width.

    Args:
        density: Packing level
        max_rows: Rows that fit the viewport
        max_cols: Columns that fit the viewport
        rng: Random source
        custom_rows: Row count for SCROLLING
        custom_cols: Column count for SCROLLING
    """
    if rng is None:
        rng = random.Random()

    if density == DensityLevel.SCROLLING:
        if custom_rows < 1 or custom_cols < 1:
            raise ValueError(f"Custom size must be positive, got {custom_rows}x{custom_cols}")
        rows, cols = custom_rows, custom_cols
        mirror_h = mirror_v = False
    else:
        should_mirror = rng.random() < 0.5
        mirror_h = should_mirror and rng.random() < 0.5
        mirror_v = should_mirror and rng.random() < 0.5

        rows = weighted_random(2, max(2, min(MAX_ROWS, max_rows)), 2.0, rng)
        col_cap = MAX_COLS_MIRRORED if should_mirror else MAX_COLS
        cols = weighted_random(2, max(2, min(col_cap, max_cols)), 2.0, rng)
        if should_mirror:
            rows += rows % 2
            cols += cols % 2

    request = PuzzleRequest(
        rows,
        cols,
        mirror_horizontal=mirror_h,
        mirror_vertical=mirror_v,
        requires_scroll=rows > max_rows or cols > max_cols,
    )
    logger.debug("choose_puzzle_request: %s -> %s", density.value, request)
    return request
