"""
Loop tile puzzle engine.
Pipeline: generate (greedy row-major fill, restart on dead end) -> mirror -> shuffle,
then incremental mismatch tracking as single tiles are rotated.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Mapping

from loopgrid_types import (
    Archetype,
    BoardState,
    Direction,
    Grid,
    OpenConnection,
    OpenConnections,
    Position,
    Tile,
    connectors_for,
    orientation_for,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRules:
    """Retry ceilings governing puzzle generation."""

    max_generation_attempts: int = 1000  # Wholesale restarts after a dead-end cell
    max_shuffle_attempts: int = 100  # Regenerations after an all-blank board


class GenerationError(RuntimeError):
    """Generation gave up after exhausting its retry ceiling."""

    def __init__(self, message: str, rows: int, cols: int, attempts: int) -> None:
        super().__init__(message)
        self.rows = rows
        self.cols = cols
        self.attempts = attempts


# =============================================================================
# Connection Analysis
# =============================================================================


def open_connections_for(tile: Tile, neighbors: Mapping[Direction, Tile]) -> set[OpenConnection]:
    """
    Find the unmatched connectors of a tile.

    A connector is open when there is no neighbour in its direction (boundary
    connectors can never be satisfied) or when the neighbour has no connector
    facing back. Only presence is compared; any two archetypes can meet.

    Args:
        tile: The tile to check
        neighbors: Existing neighbours keyed by the direction they lie in

    Returns:
        Set of OpenConnection entries for `tile`
    """
    found: set[OpenConnection] = set()
    for direction in tile.connectors:
        neighbor = neighbors.get(direction)
        if neighbor is None or not neighbor.has_connector(direction.opposite):
            found.add(OpenConnection(tile.position, direction))
    return found


def full_board_mismatches(grid: Grid) -> OpenConnections:
    """Open connections over the whole board. O(rows * cols)."""
    found: set[OpenConnection] = set()
    for tile in grid.tiles():
        found |= open_connections_for(tile, grid.neighbors(tile.position))
    return frozenset(found)


def is_consistent(grid: Grid) -> bool:
    """True when every connector meets a neighbour and none points off the board."""
    return not full_board_mismatches(grid)


def is_solved(open_connections: OpenConnections) -> bool:
    return not open_connections


def is_degenerate(grid: Grid) -> bool:
    """True for a board made entirely of blank tiles."""
    return all(tile.archetype == Archetype.BLANK for tile in grid.tiles())


# =============================================================================
# Generation
# =============================================================================


ALL_CANDIDATES: tuple[tuple[Archetype, Direction], ...] = tuple(
    (archetype, orientation) for archetype in Archetype for orientation in Direction
)


def candidates_for(
    position: Position,
    rows: int,
    cols: int,
    left: Tile | None,
    top: Tile | None,
    symmetric_cols: bool = False,
    symmetric_rows: bool = False,
) -> list[tuple[Archetype, Direction]]:
    """
    List every (archetype, orientation) pair that fits at `position`.

    Rules:
    1. No connector may point past the grid edge
    2. W presence must equal the left neighbour's E presence
    3. N presence must equal the top neighbour's S presence
    4. With `symmetric_cols` and odd `cols`, the centre column needs E == W
       (and likewise N == S on the centre row for `symmetric_rows`), so the
       board stays consistent after it is mirrored around that column/row
    """
    forbidden: set[Direction] = set()
    if position.row == 0:
        forbidden.add(Direction.N)
    if position.row == rows - 1:
        forbidden.add(Direction.S)
    if position.col == 0:
        forbidden.add(Direction.W)
    if position.col == cols - 1:
        forbidden.add(Direction.E)

    centre_col = symmetric_cols and cols % 2 == 1 and position.col == cols // 2
    centre_row = symmetric_rows and rows % 2 == 1 and position.row == rows // 2

    candidates: list[tuple[Archetype, Direction]] = []
    for archetype, orientation in ALL_CANDIDATES:
        connectors = connectors_for(archetype, orientation)
        if connectors & forbidden:
            continue
        if left is not None and left.has_connector(Direction.E) != (Direction.W in connectors):
            continue
        if top is not None and top.has_connector(Direction.S) != (Direction.N in connectors):
            continue
        if centre_col and (Direction.E in connectors) != (Direction.W in connectors):
            continue
        if centre_row and (Direction.N in connectors) != (Direction.S in connectors):
            continue
        candidates.append((archetype, orientation))
    return candidates


def fill_grid(
    rows: int,
    cols: int,
    rng: random.Random,
    symmetric_cols: bool = False,
    symmetric_rows: bool = False,
) -> Grid | None:
    """
    Single greedy pass over the board in row-major order.

    Each cell picks uniformly among the candidates that agree with the
    already-placed left and top neighbours.

    Returns:
        A connector-consistent Grid, or None if some cell had no candidate
    """
    placed: list[list[Tile]] = []
    for row in range(rows):
        current: list[Tile] = []
        for col in range(cols):
            position = Position(col, row)
            left = current[col - 1] if col > 0 else None
            top = placed[row - 1][col] if row > 0 else None
            candidates = candidates_for(
                position, rows, cols, left, top, symmetric_cols, symmetric_rows
            )
            if not candidates:
                logger.debug("fill_grid: dead end at %s", position)
                return None
            archetype, orientation = rng.choice(candidates)
            current.append(Tile.create(archetype, position, orientation))
        placed.append(current)
    return Grid.from_rows(placed)


def generate_grid(
    rows: int,
    cols: int,
    rng: random.Random | None = None,
    max_attempts: int = 1000,
    symmetric_cols: bool = False,
    symmetric_rows: bool = False,
) -> Grid:
    """
    Generate a solved (connector-consistent) reference board.

    A dead end restarts the whole board from scratch; there is no local
    backtracking. Restarts are capped at `max_attempts`.

    Raises:
        ValueError: If a dimension or `max_attempts` is not positive
        GenerationError: If every attempt hit a dead end
    """
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid size must be positive, got {rows}x{cols}")
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
    if rng is None:
        rng = random.Random()

    for attempt in range(1, max_attempts + 1):
        grid = fill_grid(rows, cols, rng, symmetric_cols, symmetric_rows)
        if grid is not None:
            if attempt > 1:
                logger.debug("generate_grid: %dx%d succeeded after %d attempts", rows, cols, attempt)
            return grid

    raise GenerationError(
        f"No consistent {rows}x{cols} grid after {max_attempts} attempts",
        rows,
        cols,
        max_attempts,
    )


# =============================================================================
# Mirroring
# =============================================================================


def reflected_orientation(
    archetype: Archetype, orientation: Direction, horizontal: bool, vertical: bool
) -> Direction:
    """
    Orientation of `archetype` whose connectors are the mirror image of
    `orientation`'s connectors.

    Horizontal reflection swaps E and W, vertical swaps N and S. For shapes
    that are symmetric under the swap this is the plain E<->W (or N<->S)
    orientation exchange; corners and tees land on whichever orientation
    carries the reflected connectors.
    """
    reflected = frozenset(
        d.reflected(horizontal, vertical) for d in connectors_for(archetype, orientation)
    )
    result = orientation_for(archetype, reflected)
    if result is None:
        raise ValueError(f"{archetype.value} has no orientation matching {sorted(d.value for d in reflected)}")
    return result


def mirror_grid(grid: Grid, mirror_horizontal: bool, mirror_vertical: bool) -> Grid:
    """
    Reflect the first half of the board onto the second half.

    Columns from ceil(cols/2) onward copy column cols-1-x mirrored E<->W
    (rows likewise with N<->S). The centre column/row of an odd axis is its
    own mirror and is copied as-is. Every destination cell gets a new Tile.
    """
    half_cols = (grid.cols + 1) // 2
    half_rows = (grid.rows + 1) // 2

    mirrored: list[list[Tile]] = []
    for y in range(grid.rows):
        row: list[Tile] = []
        for x in range(grid.cols):
            flip_h = mirror_horizontal and x >= half_cols
            flip_v = mirror_vertical and y >= half_rows
            src_x = grid.cols - 1 - x if flip_h else x
            src_y = grid.rows - 1 - y if flip_v else y
            source = grid.cells[src_y][src_x]
            position = Position(x, y)

            if flip_h or flip_v:
                orientation = reflected_orientation(
                    source.archetype, source.orientation, flip_h, flip_v
                )
                row.append(source.copy_to(position, orientation))
            else:
                row.append(source.copy_to(position))
        mirrored.append(row)

    return Grid.from_rows(mirrored)


# =============================================================================
# Shuffling
# =============================================================================


def shuffle_grid(grid: Grid, rng: random.Random | None = None) -> BoardState:
    """
    Independently spin every tile 0-3 quarter turns, then compute the
    initial mismatch set over the whole board.
    """
    if rng is None:
        rng = random.Random()
    for tile in grid.tiles():
        for _ in range(rng.randrange(4)):
            tile.rotate()
    return grid, full_board_mismatches(grid)


def generate(
    rows: int,
    cols: int,
    mirror_horizontal: bool = False,
    mirror_vertical: bool = False,
    rng: random.Random | None = None,
    rules: GenerationRules | None = None,
) -> BoardState:
    """
    Build a playable puzzle: generate, optionally mirror, shuffle.

    All-blank boards are thrown away and rebuilt from scratch.

    Args:
        rows: Number of rows (>= 1)
        cols: Number of columns (>= 1)
        mirror_horizontal: Mirror the left half onto the right half
        mirror_vertical: Mirror the top half onto the bottom half
        rng: Random source; a fresh unseeded one if omitted
        rules: Retry ceilings (default GenerationRules())

    Returns:
        (grid, open_connections) for the shuffled board

    Raises:
        GenerationError: If a retry ceiling is exhausted
    """
    if rng is None:
        rng = random.Random()
    if rules is None:
        rules = GenerationRules()

    for attempt in range(1, rules.max_shuffle_attempts + 1):
        grid = generate_grid(
            rows,
            cols,
            rng,
            rules.max_generation_attempts,
            symmetric_cols=mirror_horizontal,
            symmetric_rows=mirror_vertical,
        )
        if mirror_horizontal or mirror_vertical:
            grid = mirror_grid(grid, mirror_horizontal, mirror_vertical)
        grid, open_connections = shuffle_grid(grid, rng)

        if not is_degenerate(grid):
            logger.info(
                "generate: %dx%d (mirror h=%s v=%s) in %d attempt(s), %d open connections",
                rows,
                cols,
                mirror_horizontal,
                mirror_vertical,
                attempt,
                len(open_connections),
            )
            return grid, open_connections

        logger.debug("generate: rejected all-blank %dx%d board (attempt %d)", rows, cols, attempt)

    raise GenerationError(
        f"Only all-blank {rows}x{cols} boards after {rules.max_shuffle_attempts} attempts",
        rows,
        cols,
        rules.max_shuffle_attempts,
    )


# =============================================================================
# Rotation
# =============================================================================


def affected_positions(grid: Grid, position: Position) -> list[Position]:
    """`position` plus its in-bounds neighbours."""
    return [position] + [tile.position for tile in grid.neighbors(position).values()]


def rotate_tile(grid: Grid, position: Position) -> bool:
    """
    Immediate phase of a player rotation: turn one tile in place.

    Returns:
        False (and changes nothing) if `position` is off the board
    """
    if not grid.in_bounds(position):
        return False
    grid.rotate_tile(position)
    return True


def recompute_around(
    grid: Grid, position: Position, open_connections: OpenConnections
) -> OpenConnections:
    """
    Deferred phase of a player rotation: refresh the mismatch entries of the
    tile at `position` and its neighbours. At most five cells are examined
    regardless of board size.
    """
    if not grid.in_bounds(position):
        return open_connections

    affected = set(affected_positions(grid, position))
    updated = {oc for oc in open_connections if oc.position not in affected}
    for pos in affected:
        updated |= open_connections_for(grid.tile_at(pos), grid.neighbors(pos))
    return frozenset(updated)


def rotate_at(position: Position, grid: Grid, open_connections: OpenConnections) -> BoardState:
    """
    Rotate one tile and return the updated board state.

    Off-board positions are a no-op and return the inputs unchanged.
    """
    if not rotate_tile(grid, position):
        return grid, open_connections
    return grid, recompute_around(grid, position, open_connections)
