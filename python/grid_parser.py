"""
Grid parsing utilities for loop tile boards.

Provides two formats:
1. Token format: archetype code + orientation per cell, space separated
2. Glyph format: one box-drawing character per cell
"""

from __future__ import annotations

from loopgrid_types import (
    Archetype,
    Direction,
    Grid,
    Position,
    Tile,
    orientation_for,
)

__all__ = [
    "ARCHETYPE_CODES",
    "GLYPHS",
    "archetype_for",
    "format_glyphs",
    "format_tokens",
    "parse_grid",
    "parse_grid_glyphs",
]


ARCHETYPE_CODES: dict[str, Archetype] = {
    "_": Archetype.BLANK,
    "s": Archetype.SINGLE,
    "a": Archetype.BEND_A,
    "b": Archetype.BEND_B,
    "t": Archetype.TEE,
    "x": Archetype.CROSS,
}

_N, _E, _S, _W = Direction.N, Direction.E, Direction.S, Direction.W

GLYPHS: dict[frozenset[Direction], str] = {
    frozenset(): "·",
    frozenset({_N}): "╵",
    frozenset({_E}): "╶",
    frozenset({_S}): "╷",
    frozenset({_W}): "╴",
    frozenset({_N, _S}): "│",
    frozenset({_E, _W}): "─",
    frozenset({_N, _E}): "└",
    frozenset({_E, _S}): "┌",
    frozenset({_S, _W}): "┐",
    frozenset({_W, _N}): "┘",
    frozenset({_N, _E, _S}): "├",
    frozenset({_E, _S, _W}): "┬",
    frozenset({_S, _W, _N}): "┤",
    frozenset({_W, _N, _E}): "┴",
    frozenset({_N, _E, _S, _W}): "┼",
}

_GLYPH_CONNECTORS: dict[str, frozenset[Direction]] = {glyph: conn for conn, glyph in GLYPHS.items()}
_GLYPH_CONNECTORS[" "] = frozenset()
_GLYPH_CONNECTORS["_"] = frozenset()


def archetype_for(connectors: frozenset[Direction]) -> Archetype:
    """The archetype whose rotations include `connectors`."""
    match len(connectors):
        case 0:
            return Archetype.BLANK
        case 1:
            return Archetype.SINGLE
        case 2:
            first = next(iter(connectors))
            return Archetype.BEND_A if first.opposite in connectors else Archetype.BEND_B
        case 3:
            return Archetype.TEE
        case _:
            return Archetype.CROSS


def parse_grid(definition: str) -> Grid:
    """
    Parse a board from the token format.

    Format:
    - Rows separated by |
    - Cells separated by spaces (runs of spaces count as one separator)
    - Each cell is an archetype code followed by an orientation:
      * Codes: _ blank, s single, a bend-a, b bend-b, t tee, x cross
      * Orientation: N, E, S or W (quarter turns clockwise from the base shape)
      * A bare "_" is a blank facing N

    Example:
        "sE _|aN tS" creates a 2x2 board with a single facing E at (0,0)

    Args:
        definition: Board definition string

    Returns:
        Grid with tiles at their parsed orientations

    Raises:
        ValueError: On unknown codes or ragged rows
    """
    row_strings = definition.strip().split("|")
    rows: list[list[Tile]] = []

    for row_idx, row_str in enumerate(row_strings):
        tokens = row_str.split()
        if not tokens:
            raise ValueError(f"Empty row {row_idx}: \"{row_str}\"")
        tiles: list[Tile] = []

        for col_idx, token in enumerate(tokens):
            position = Position(col_idx, row_idx)
            code = token[0].lower()
            if code not in ARCHETYPE_CODES or len(token) > 2 or (len(token) == 1 and code != "_"):
                error_msg = (
                    f"Invalid cell token: '{token}'\n"
                    f"  Row {row_idx}: \"{row_str}\"\n"
                    f"  Position: column {col_idx}\n"
                    f"  Valid formats:\n"
                    f"    - Archetype code (_ s a b t x) followed by N/E/S/W (e.g., 'sE', 'bW')\n"
                    f"    - '_': Blank tile"
                )
                raise ValueError(error_msg)

            orientation = Direction.N
            if len(token) == 2:
                try:
                    orientation = Direction(token[1].upper())
                except ValueError:
                    raise ValueError(
                        f"Invalid orientation '{token[1]}' in token '{token}'\n"
                        f"  Row {row_idx}, column {col_idx}\n"
                        f"  Valid orientations: N, E, S, W"
                    ) from None

            tiles.append(Tile.create(ARCHETYPE_CODES[code], position, orientation))
        rows.append(tiles)

    return Grid.from_rows(rows)


def parse_grid_glyphs(definition: str) -> Grid:
    """
    Parse a board drawn with box-drawing glyphs, one character per cell.

    Rows are separated by |. Blank tiles are written as '·', '_' or a space,
    so spaces are cells, not padding; only line breaks around the whole
    definition are dropped. Each glyph becomes the matching archetype in the
    first orientation (clockwise from N) that produces it.

    Example:
        "┌┐|└┘" creates a closed 2x2 loop of corners
        "┌┐ |└┘ " is 2x3 with a blank right-hand column

    Raises:
        ValueError: On characters that are not tile glyphs, or ragged rows
    """
    row_strings = definition.strip("\r\n").split("|")
    rows: list[list[Tile]] = []

    for row_idx, row_str in enumerate(row_strings):
        tiles: list[Tile] = []
        for col_idx, char in enumerate(row_str):
            connectors = _GLYPH_CONNECTORS.get(char)
            if connectors is None:
                raise ValueError(
                    f"Invalid glyph '{char}'\n"
                    f"  Row {row_idx}, column {col_idx}\n"
                    f"  Valid glyphs: {''.join(GLYPHS.values())} (or space/_ for blank)"
                )
            archetype = archetype_for(connectors)
            orientation = orientation_for(archetype, connectors)
            if orientation is None:
                raise ValueError(
                    f"Glyph '{char}' has no {archetype.value} orientation\n"
                    f"  Row {row_idx}, column {col_idx}"
                )
            tiles.append(Tile.create(archetype, Position(col_idx, row_idx), orientation))
        rows.append(tiles)

    return Grid.from_rows(rows)


def format_glyphs(grid: Grid) -> str:
    """Inverse of parse_grid_glyphs."""
    return "|".join("".join(GLYPHS[tile.connectors] for tile in row) for row in grid.cells)


def format_tokens(grid: Grid) -> str:
    """Inverse of parse_grid."""
    codes = {archetype: code for code, archetype in ARCHETYPE_CODES.items()}
    return "|".join(
        " ".join(f"{codes[tile.archetype]}{tile.orientation.value}" for tile in row)
        for row in grid.cells
    )
