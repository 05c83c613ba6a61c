"""End-of-turn bookkeeping: entity removal and the level state machine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from engine.effects import record_event
from engine.player import get_player
from models.game_state import LevelStatus

if TYPE_CHECKING:
    from models.actions import EffectOutcome
    from models.game_state import GameState, LevelState

logger = logging.getLogger(__name__)


def remove_dead_entities(game_state: GameState, consumed: list[str] | None = None) -> list[str]:
    """Remove dead monsters and used-up traps from the store.

    The player is never removed here, whatever its HP; defeat goes through
    the level state instead.

    Args:
        game_state: Current game state (mutated in place).
        consumed: Ids of one-shot traps used this turn.

    Returns:
        Ids of the removed entities, in store order.
    """
    consumed_ids = set(consumed or [])
    doomed = []
    for entity_id, entity in game_state.entities.items():
        if entity_id == game_state.player_id:
            continue
        if entity.is_trap and entity_id in consumed_ids:
            doomed.append(entity_id)
        elif entity.has_hp and entity.hp <= 0:
            doomed.append(entity_id)

    for entity_id in doomed:
        entity = game_state.entities.pop(entity_id)
        logger.info("Removed entity %s (%s) at %s", entity_id, entity.glyph, entity.position)
        record_event(
            game_state,
            "removed",
            f"{entity.glyph} is gone.",
            entity_id,
            {"position": entity.position},
        )

    return doomed


def update_level_state(game_state: GameState, outcome: EffectOutcome) -> LevelState:
    """Apply the end-of-turn level transition.

    Death beats everything; a win signal beats a next-level signal.
    Terminal states are left untouched.

    Args:
        game_state: Current game state (mutated in place).
        outcome: Signals gathered from the trap pass.

    Returns:
        The (possibly updated) level state.
    """
    level_state = game_state.level_state
    if level_state.is_terminal:
        return level_state

    player = get_player(game_state)
    previous = level_state.status

    if player.hp <= 0:
        level_state.status = LevelStatus.LOST
    elif outcome.win:
        level_state.status = LevelStatus.WON
    elif outcome.next_level:
        level_state.status = LevelStatus.NEXT_LEVEL

    if level_state.status != previous:
        logger.info(
            "Level %d: %s -> %s",
            level_state.level,
            previous.value,
            level_state.status.value,
        )
        record_event(
            game_state,
            "level",
            f"Level {level_state.level}: {level_state.status.value}.",
            player.id,
            {"from": previous.value, "to": level_state.status.value},
        )

    return level_state
