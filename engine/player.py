"""Player creation and the one-step player move."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from config import PLAYER_MAX_HP
from engine.grid import clamp_to_grid, is_blocked, occupant_at, offset_position
from models.entities import Entity, InvariantViolation, PlayerKind

if TYPE_CHECKING:
    from models.entities import Direction
    from models.game_state import GameState

logger = logging.getLogger(__name__)


def create_player(
    position: tuple[int, int],
    max_hp: int = PLAYER_MAX_HP,
    hp: int | None = None,
) -> Entity:
    """Create the player entity, at full health unless hp is given."""
    return Entity(
        id=str(uuid4()),
        position=position,
        previous_position=position,
        glyph="@",
        color="orange",
        kind=PlayerKind(hp=max_hp if hp is None else hp, max_hp=max_hp),
    )


def get_player(game_state: GameState) -> Entity:
    """Return the player entity.

    Raises:
        InvariantViolation: If the store has lost its player.
    """
    player = game_state.entities.get(game_state.player_id)
    if player is None or not player.is_player:
        raise InvariantViolation("Entity store has no player")
    return player


def move_player(game_state: GameState, direction: Direction) -> bool:
    """Step the player one tile in direction.

    The move is rejected when the destination blocks or another player or
    monster stands there. Traps never reject a move. Refusing a move onto
    a monster keeps every player and monster on a tile of its own; the
    player never attacks.

    Args:
        game_state: Current game state (mutated in place).
        direction: Direction of the key press.

    Returns:
        True if the player moved, i.e. a turn was taken.
    """
    player = get_player(game_state)
    start = player.position
    candidate = clamp_to_grid(offset_position(start, direction.offset), game_state.grid)

    if candidate == start or is_blocked(candidate, game_state.grid):
        logger.debug("Player move %s blocked at %s", direction.value, candidate)
        return False

    occupant = occupant_at(candidate, game_state.entities.values(), include_traps=False)
    if occupant is not None:
        logger.debug("Player move %s blocked by %s at %s", direction.value, occupant.id, candidate)
        return False

    player.previous_position = start
    player.position = candidate
    return True
