"""
Test rotation framework for systematic directional testing.

This module provides utilities to write tests once and automatically run them
on all 4 rotations of a board (0°, 90°, 180°, 270°), ensuring comprehensive
directional coverage of the connection analysis.
"""

from dataclasses import dataclass, field

from grid_parser import parse_grid_glyphs
from loopgrid import full_board_mismatches, rotate_at
from loopgrid_types import Direction, Grid, OpenConnection, OpenConnections, Position, Tile


# =============================================================================
# Rotation Utilities
# =============================================================================


def rotate_position_90(position: Position, rows: int) -> Position:
    """
    Rotate a position 90° clockwise within a board of `rows` rows.

    In an N×M board rotated 90° clockwise, it becomes M×N.
    (col, row) → (N - 1 - row, col)
    """
    return Position(rows - 1 - position.row, position.col)


def rotate_grid_90(grid: Grid) -> Grid:
    """
    Rotate a board 90° clockwise: every tile moves and turns one quarter.

    Returns a new Grid; the input's tiles are not reused.
    """
    new_cells: list[list[Tile | None]] = [[None] * grid.rows for _ in range(grid.cols)]

    for tile in grid.tiles():
        new_pos = rotate_position_90(tile.position, grid.rows)
        new_cells[new_pos.row][new_pos.col] = tile.copy_to(new_pos, tile.orientation.rotated())

    return Grid.from_rows(new_cells)  # type: ignore[arg-type]


def rotate_open_connections_90(open_connections: OpenConnections, rows: int) -> OpenConnections:
    """Rotate a mismatch set to match rotate_grid_90."""
    return frozenset(
        OpenConnection(rotate_position_90(oc.position, rows), oc.direction.rotated())
        for oc in open_connections
    )


def open_set(*entries: tuple[int, int, Direction]) -> OpenConnections:
    """Shorthand: open_set((col, row, Direction.E), ...)."""
    return frozenset(OpenConnection(Position(col, row), d) for col, row, d in entries)


# =============================================================================
# Test Case Data Structures
# =============================================================================


@dataclass
class TapVariation:
    """A sequence of taps and the open connections expected afterwards."""

    taps: list[Position]
    expected: OpenConnections
    description: str = ""

    __test__ = False

    def rotate_90(self, rows: int) -> "TapVariation":
        """Create a new TapVariation rotated 90° clockwise."""
        return TapVariation(
            taps=[rotate_position_90(p, rows) for p in self.taps],
            expected=rotate_open_connections_90(self.expected, rows),
            description=f"{self.description} [rotated 90°]" if self.description else "[rotated 90°]",
        )


@dataclass
class RotationalTestCase:
    """
    A board whose open connections are checked in all 4 rotations.

    Example usage:
        test = RotationalTestCase(
            name="single_into_blank",
            board="╶·",
            expected=open_set((0, 0, Direction.E)),
            variations=[
                TapVariation(
                    taps=[Position(0, 0)],
                    expected=open_set((0, 0, Direction.S)),
                    description="turn to face the floor",
                )
            ],
        )
    """

    name: str
    board: str
    expected: OpenConnections
    variations: list[TapVariation] = field(default_factory=list)

    __test__ = False

    def get_all_rotations(self) -> list[tuple[int, Grid, OpenConnections, list[TapVariation]]]:
        """
        Generate all 4 rotations of this test case.

        Returns:
            List of (rotation_degrees, grid, expected, variations) tuples
        """
        results = []

        grid = parse_grid_glyphs(self.board)
        expected = self.expected
        variations = self.variations

        for rotation in [0, 90, 180, 270]:
            results.append((rotation, grid, expected, variations))

            if rotation < 270:
                rows = grid.rows  # Use rows BEFORE rotation
                grid = rotate_grid_90(grid)
                expected = rotate_open_connections_90(expected, rows)
                variations = [v.rotate_90(rows) for v in variations]

        return results


# =============================================================================
# Test Runner
# =============================================================================


def run_rotational_test(test_case: RotationalTestCase) -> None:
    """
    Run a rotational test case through all 4 rotations.

    For each rotation the full-board analysis must give the expected set, and
    every variation's taps, applied incrementally from a fresh copy of the
    board, must give its expected set and agree with a full recompute.
    """
    for rotation, grid, expected, variations in test_case.get_all_rotations():
        actual = full_board_mismatches(grid)
        assert actual == expected, (
            f"{test_case.name} at {rotation}°: expected {sorted_entries(expected)}, "
            f"got {sorted_entries(actual)}"
        )

        for variation in variations:
            board = grid.copy()
            open_connections = actual
            for position in variation.taps:
                board, open_connections = rotate_at(position, board, open_connections)

            assert open_connections == variation.expected, (
                f"{test_case.name} at {rotation}° - {variation.description}: "
                f"expected {sorted_entries(variation.expected)}, got {sorted_entries(open_connections)}"
            )
            assert open_connections == full_board_mismatches(board), (
                f"{test_case.name} at {rotation}° - {variation.description}: "
                f"incremental result disagrees with full recompute"
            )


def sorted_entries(open_connections: OpenConnections) -> list[tuple[int, int, str]]:
    """Readable, ordered form for assertion messages."""
    return sorted((oc.position.col, oc.position.row, oc.direction.value) for oc in open_connections)


# =============================================================================
# Framework self-tests
# =============================================================================


class TestRotationUtilities:
    """Tests for the rotation helpers themselves."""

    def test_rotate_position_corners(self) -> None:
        """Corners of a 2-row board move clockwise."""
        assert rotate_position_90(Position(0, 0), 2) == Position(1, 0)
        assert rotate_position_90(Position(2, 0), 2) == Position(1, 2)
        assert rotate_position_90(Position(2, 1), 2) == Position(0, 2)
        assert rotate_position_90(Position(0, 1), 2) == Position(0, 0)

    def test_rotate_grid_swaps_dimensions(self) -> None:
        """A 2x3 board becomes 3x2 and tiles turn with it."""
        grid = parse_grid_glyphs("╶─╴|···")
        rotated = rotate_grid_90(grid)
        assert rotated.rows == 3
        assert rotated.cols == 2
        # The east-facing stub at top-left ends up top-right, facing south
        tile = rotated.tile_at(Position(1, 0))
        assert tile.connectors == frozenset({Direction.S})
        assert tile.position == Position(1, 0)

    def test_four_rotations_restore_board(self) -> None:
        """Rotating four times returns the same drawing."""
        from grid_parser import format_glyphs

        grid = parse_grid_glyphs("┌┬╴|╵└┘")
        rotated = grid
        for _ in range(4):
            rotated = rotate_grid_90(rotated)
        assert format_glyphs(rotated) == format_glyphs(grid)

    def test_consistency_survives_rotation(self) -> None:
        """A closed loop stays closed in every rotation."""
        grid = parse_grid_glyphs("┌┐|└┘")
        for _ in range(4):
            assert full_board_mismatches(grid) == frozenset()
            grid = rotate_grid_90(grid)
