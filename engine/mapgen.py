"""Seedable level generation: wall decoration and entity placement."""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from config import (
    GOL_COUNT,
    PLACEMENT_ATTEMPTS,
    ROOK_COUNT,
    WALL_SEGMENT_LENGTH,
    WALL_SEGMENTS,
)
from engine.grid import WALL_GLYPH, create_grid, offset_position
from engine.monsters import create_monster
from engine.player import create_player
from engine.traps import create_trap
from models.entities import Direction, Species, TrapType

if TYPE_CHECKING:
    from models.entities import Entity
    from models.game_state import Tile

logger = logging.getLogger(__name__)

# Traps placed once per level, on top of the level exit.
LEVEL_TRAPS = [
    TrapType.BERSERK,
    TrapType.KILL,
    TrapType.BUMP,
    TrapType.TELEPORT,
    TrapType.TELEPORT,
    TrapType.COUNTDOWN,
    TrapType.ARROW,
]


def generate_map(
    width: int,
    height: int,
    rng: random.Random,
    segments: int = WALL_SEGMENTS,
    segment_length: int = WALL_SEGMENT_LENGTH,
) -> list[list[Tile]]:
    """Build a bordered grid decorated with random-walk wall segments.

    Each segment starts on a random interior tile and walks segment_length
    steps in random directions, never touching the border.

    Args:
        width: Number of columns.
        height: Number of rows.
        rng: Random instance; a seeded one gives a reproducible map.
        segments: Number of wall segments.
        segment_length: Tiles walled per segment (overlaps allowed).

    Returns:
        A 2D list indexed as grid[y][x].
    """
    grid = create_grid(width, height)
    if width < 3 or height < 3:
        return grid

    directions = list(Direction)
    for _ in range(segments):
        x, y = rng.randint(1, width - 2), rng.randint(1, height - 2)
        for _ in range(segment_length):
            tile = grid[y][x]
            tile.blocks = True
            tile.glyph = WALL_GLYPH
            nx, ny = offset_position((x, y), rng.choice(directions).offset)
            x = min(max(nx, 1), width - 2)
            y = min(max(ny, 1), height - 2)

    return grid


def random_free_position(
    grid: list[list[Tile]],
    taken: set[tuple[int, int]],
    rng: random.Random,
    attempts: int = PLACEMENT_ATTEMPTS,
) -> tuple[int, int]:
    """Rejection-sample a non-blocking tile that is not in taken.

    Raises:
        ValueError: If no free tile turns up within the attempt budget.
    """
    height, width = len(grid), len(grid[0])
    for _ in range(attempts):
        pos = (rng.randint(0, width - 1), rng.randint(0, height - 1))
        if pos in taken or grid[pos[1]][pos[0]].blocks:
            continue
        return pos
    raise ValueError(f"No free tile found after {attempts} attempts")


def place_entities(
    grid: list[list[Tile]],
    rng: random.Random,
    level: int,
    level_count: int,
    player: Entity | None = None,
) -> list[Entity]:
    """Populate a level with the player, monsters, and traps.

    Every entity gets its own tile. The exit is a NextLevel trap, except on
    the last level where it is a Win trap.

    Args:
        grid: The level grid.
        rng: Random instance for placement.
        level: Zero-based index of the level being built.
        level_count: Total levels in the run.
        player: Player carried over from the previous level, if any. It is
            moved to a fresh tile and keeps its HP.

    Returns:
        Entities in store order, player first.
    """
    taken: set[tuple[int, int]] = set()

    def claim() -> tuple[int, int]:
        pos = random_free_position(grid, taken, rng)
        taken.add(pos)
        return pos

    start = claim()
    if player is None:
        player = create_player(start)
    else:
        player.position = start
        player.previous_position = start
    entities = [player]

    for species, count in ((Species.GOL, GOL_COUNT), (Species.ROOK, ROOK_COUNT)):
        for _ in range(count):
            entities.append(create_monster(species, claim()))

    for trap in LEVEL_TRAPS:
        direction = rng.choice(list(Direction)) if trap == TrapType.ARROW else None
        entities.append(create_trap(trap, claim(), direction=direction))

    exit_trap = TrapType.WIN if level + 1 >= level_count else TrapType.NEXT_LEVEL
    entities.append(create_trap(exit_trap, claim()))

    logger.debug("Level %d populated with %d entities", level, len(entities))
    return entities
