"""
Shared type definitions for the loop tile system.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class Direction(Enum):
    """Cardinal direction, declared in clockwise order.

    Also used as a rotation amount: N=0, E=1, S=2, W=3 quarter turns.
    """

    N = "N"  # Up (decreasing row)
    E = "E"  # Right (increasing col)
    S = "S"  # Down (increasing row)
    W = "W"  # Left (decreasing col)

    @property
    def steps(self) -> int:
        """Number of clockwise quarter turns from N."""
        return _CLOCKWISE.index(self)

    def rotated(self, steps: int = 1) -> Direction:
        """Return the direction reached after `steps` clockwise quarter turns."""
        return _CLOCKWISE[(self.steps + steps) % 4]

    @property
    def opposite(self) -> Direction:
        return self.rotated(2)

    @property
    def offset(self) -> tuple[int, int]:
        """(dcol, drow) of the neighbouring cell in this direction."""
        return _OFFSETS[self]

    def reflected(self, horizontal: bool, vertical: bool) -> Direction:
        """Mirror across the vertical axis (E<->W) and/or the horizontal axis (N<->S)."""
        if horizontal and self in (Direction.E, Direction.W):
            return self.opposite
        if vertical and self in (Direction.N, Direction.S):
            return self.opposite
        return self


_CLOCKWISE: tuple[Direction, ...] = tuple(Direction)

_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.N: (0, -1),
    Direction.E: (1, 0),
    Direction.S: (0, 1),
    Direction.W: (-1, 0),
}


class Archetype(Enum):
    """Tile shape family."""

    BLANK = "blank"
    SINGLE = "single"
    BEND_A = "bend-a"  # Straight pipe
    BEND_B = "bend-b"  # Corner
    TEE = "tee"
    CROSS = "cross"


# Connectors at zero rotation
BASE_CONNECTORS: dict[Archetype, frozenset[Direction]] = {
    Archetype.BLANK: frozenset(),
    Archetype.SINGLE: frozenset({Direction.N}),
    Archetype.BEND_A: frozenset({Direction.E, Direction.W}),
    Archetype.BEND_B: frozenset({Direction.S, Direction.W}),
    Archetype.TEE: frozenset({Direction.N, Direction.E, Direction.S}),
    Archetype.CROSS: frozenset({Direction.N, Direction.E, Direction.S, Direction.W}),
}


def connectors_for(archetype: Archetype, orientation: Direction) -> frozenset[Direction]:
    """Base connector set of `archetype` rotated clockwise by `orientation`."""
    return frozenset(d.rotated(orientation.steps) for d in BASE_CONNECTORS[archetype])


def orientation_for(archetype: Archetype, connectors: frozenset[Direction]) -> Direction | None:
    """First orientation (clockwise from N) that gives `archetype` exactly `connectors`."""
    for orientation in Direction:
        if connectors_for(archetype, orientation) == connectors:
            return orientation
    return None


# =============================================================================
# Board Types
# =============================================================================


@dataclass(frozen=True)
class Position:
    """A grid-local cell coordinate."""

    col: int
    row: int

    def moved(self, direction: Direction) -> Position:
        dcol, drow = direction.offset
        return Position(self.col + dcol, self.row + drow)


@dataclass(frozen=True)
class OpenConnection:
    """A connector on the tile at `position` facing `direction` that is not matched."""

    position: Position
    direction: Direction


OpenConnections = frozenset[OpenConnection]


@dataclass(eq=False)
class Tile:
    """
    A single puzzle tile.

    Tiles are mutable and compared by identity: rotating a tile changes it in
    place. `rotation_count` only ever grows, so renderers can animate a
    continuous angle of `rotation_count * 90` degrees.
    """

    archetype: Archetype
    position: Position
    orientation: Direction = Direction.N
    rotation_count: int = 0

    @classmethod
    def create(cls, archetype: Archetype, position: Position, orientation: Direction = Direction.N) -> Tile:
        return cls(archetype, position, orientation, orientation.steps)

    @property
    def connectors(self) -> frozenset[Direction]:
        return connectors_for(self.archetype, self.orientation)

    def has_connector(self, direction: Direction) -> bool:
        return direction in self.connectors

    def rotate(self) -> None:
        """Turn the tile one quarter clockwise."""
        self.orientation = self.orientation.rotated()
        self.rotation_count += 1

    def copy_to(self, position: Position, orientation: Direction | None = None) -> Tile:
        """Fresh tile of the same archetype; never shares state with `self`."""
        return Tile.create(self.archetype, position, self.orientation if orientation is None else orientation)


@dataclass(frozen=True)
class Grid:
    """
    A rows x cols board of tiles, stored row-major.

    The shape is fixed; tiles are mutated in place through `rotate_tile`.
    """

    cells: tuple[tuple[Tile, ...], ...]

    @classmethod
    def from_rows(cls, rows: list[list[Tile]]) -> Grid:
        if not rows or not rows[0]:
            raise ValueError("Grid must have at least one row and one column")
        cols = len(rows[0])
        mismatched = [(i, len(row)) for i, row in enumerate(rows) if len(row) != cols]
        if mismatched:
            error_msg = (
                f"Inconsistent row lengths\n"
                f"  Expected: {cols} columns (from row 0)\n"
            )
            for row_idx, actual_cols in mismatched:
                error_msg += f"    Row {row_idx}: {actual_cols} columns\n"
            raise ValueError(error_msg)
        return cls(tuple(tuple(row) for row in rows))

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.cols

    def tile_at(self, position: Position) -> Tile:
        return self.cells[position.row][position.col]

    def tiles(self) -> Iterator[Tile]:
        """All tiles in row-major order."""
        for row in self.cells:
            yield from row

    def neighbors(self, position: Position) -> dict[Direction, Tile]:
        """Existing neighbours of `position`, keyed by the direction they lie in."""
        found: dict[Direction, Tile] = {}
        for direction in Direction:
            other = position.moved(direction)
            if self.in_bounds(other):
                found[direction] = self.tile_at(other)
        return found

    def rotate_tile(self, position: Position) -> None:
        self.tile_at(position).rotate()

    def copy(self) -> Grid:
        """Deep copy; orientation and rotation count are preserved, tiles are not shared."""
        return Grid(
            tuple(
                tuple(Tile(t.archetype, t.position, t.orientation, t.rotation_count) for t in row)
                for row in self.cells
            )
        )


BoardState = tuple[Grid, OpenConnections]
