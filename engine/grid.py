"""Tile grid construction and occupancy queries for Trapwalk."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from models.game_state import Tile

if TYPE_CHECKING:
    from models.entities import Entity

WALL_GLYPH = "#"
FLOOR_GLYPH = "."


def create_grid(width: int, height: int) -> list[list[Tile]]:
    """Initialize a grid whose border tiles block and whose interior is floor.

    Args:
        width: Number of columns.
        height: Number of rows.

    Returns:
        A 2D list indexed as grid[y][x].
    """
    grid = []
    for y in range(height):
        row = []
        for x in range(width):
            border = x == 0 or y == 0 or x == width - 1 or y == height - 1
            row.append(Tile(
                x=x,
                y=y,
                glyph=WALL_GLYPH if border else FLOOR_GLYPH,
                blocks=border,
            ))
        grid.append(row)
    return grid


def in_bounds(pos: tuple[int, int], grid: list[list[Tile]]) -> bool:
    """Check if a position lies within grid bounds."""
    if not grid:
        return False
    x, y = pos
    return 0 <= y < len(grid) and 0 <= x < len(grid[0])


def clamp_to_grid(pos: tuple[int, int], grid: list[list[Tile]]) -> tuple[int, int]:
    """Clamp a position into the grid rectangle."""
    x, y = pos
    x = min(max(x, 0), len(grid[0]) - 1)
    y = min(max(y, 0), len(grid) - 1)
    return (x, y)


def is_blocked(pos: tuple[int, int], grid: list[list[Tile]]) -> bool:
    """True if the tile at pos blocks movement.

    Positions outside the grid count as blocked so callers never step off it.
    """
    if not in_bounds(pos, grid):
        return True
    x, y = pos
    return grid[y][x].blocks


def occupant_at(
    pos: tuple[int, int],
    entities: Iterable[Entity],
    include_traps: bool = True,
) -> Entity | None:
    """Return the entity standing at pos, if any.

    A player or monster may share its tile with a trap; in that case the
    player or monster is returned. With include_traps=False, traps are
    ignored entirely.
    """
    trap = None
    for entity in entities:
        if entity.position != pos:
            continue
        if not entity.is_trap:
            return entity
        if trap is None:
            trap = entity
    return trap if include_traps else None


def trap_at(pos: tuple[int, int], entities: Iterable[Entity]) -> Entity | None:
    """Return the trap at pos, if any."""
    for entity in entities:
        if entity.is_trap and entity.position == pos:
            return entity
    return None


def offset_position(pos: tuple[int, int], offset: tuple[int, int]) -> tuple[int, int]:
    return (pos[0] + offset[0], pos[1] + offset[1])


def sign(value: int) -> int:
    """-1, 0 or 1 according to the sign of value."""
    return (value > 0) - (value < 0)
