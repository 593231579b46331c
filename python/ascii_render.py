"""
ASCII rendering for loop tile boards.

Each tile is drawn three characters wide: a west arm, its box-drawing glyph and
an east arm, so horizontal connections read as continuous pipes. Colours come
from a theme pair: the light colour for fully matched tiles and the darker one
for tiles with at least one open connector.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]

from grid_parser import GLYPHS
from loopgrid_types import Direction, Grid, OpenConnections, Position, Tile

logger = logging.getLogger(__name__)

ColorFn = Callable[[str], str]


@dataclass(frozen=True)
class Theme:
    """A (light, darker) colour pair."""

    name: str
    matched: ColorFn
    open: ColorFn


THEMES: list[Theme] = [
    Theme("red", chalk.redBright, chalk.red),
    Theme("green", chalk.greenBright, chalk.green),
    Theme("yellow", chalk.yellowBright, chalk.yellow),
    Theme("blue", chalk.blueBright, chalk.blue),
    Theme("magenta", chalk.magentaBright, chalk.magenta),
    Theme("cyan", chalk.cyanBright, chalk.cyan),
    Theme("grey", chalk.whiteBright, chalk.white),
]


def random_theme(rng: random.Random | None = None) -> Theme:
    """Pick the colour pair for a new puzzle."""
    return (rng or random.Random()).choice(THEMES)


def _identity(s: str) -> str:
    return s


def tile_cells(tile: Tile) -> str:
    """Three-character drawing of one tile, without colour."""
    connectors = tile.connectors
    west = "─" if Direction.W in connectors else " "
    east = "─" if Direction.E in connectors else " "
    glyph = GLYPHS[connectors] if connectors else " "
    return west + glyph + east


def render_grid(
    grid: Grid,
    open_connections: OpenConnections = frozenset(),
    highlight_pos: Position | None = None,
    theme: Theme | None = None,
    use_color: bool = True,
) -> str:
    """
    Render a board to a string.

    Args:
        grid: The board to draw
        open_connections: Current mismatch set, used to pick tile colours
        highlight_pos: Optional cell drawn in inverse video (the cursor)
        theme: Colour pair (default: first of THEMES)
        use_color: False for plain text without ANSI codes

    Returns:
        Rendered string, one line per grid row
    """
    if theme is None:
        theme = THEMES[0]
    open_positions = {oc.position for oc in open_connections}

    lines: list[str] = []
    for row in grid.cells:
        parts: list[str] = []
        for tile in row:
            text = tile_cells(tile)
            if use_color:
                if tile.position == highlight_pos:
                    colorize: ColorFn = chalk.bgWhite.black
                elif tile.position in open_positions:
                    colorize = theme.open
                else:
                    colorize = theme.matched
            elif tile.position == highlight_pos:
                text = "[" + text[1] + "]"
                colorize = _identity
            else:
                colorize = _identity
            parts.append(colorize(text))
        lines.append("".join(parts))

    logger.debug(
        "render_grid: %dx%d, %d open connections, theme=%s",
        grid.rows,
        grid.cols,
        len(open_connections),
        theme.name,
    )
    return "\n".join(lines)


def render_open_connections(open_connections: OpenConnections) -> str:
    """One line per open connector, sorted by row, column and direction."""
    ordered = sorted(
        open_connections,
        key=lambda oc: (oc.position.row, oc.position.col, oc.direction.steps),
    )
    return "\n".join(
        f"({oc.position.col}, {oc.position.row}) {oc.direction.value}" for oc in ordered
    )
