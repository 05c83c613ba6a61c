"""Snapshots, buffered effects, and the event log.

Monster movement, combat, and trap resolution all read from a snapshot
and emit Effect records; apply_effects is the only place those passes
touch the live entity store.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from engine.grid import is_blocked
from models.actions import Effect, EffectOutcome, EffectType
from models.entities import Animation, AnimationState, InvariantViolation
from models.game_state import GameEvent

if TYPE_CHECKING:
    from models.entities import Entity
    from models.game_state import GameState

logger = logging.getLogger(__name__)


def take_snapshot(game_state: GameState) -> list[Entity]:
    """Deep-copy every entity, in store order."""
    return [entity.model_copy(deep=True) for entity in game_state.entities.values()]


def record_event(
    game_state: GameState,
    event_type: str,
    description: str,
    entity_id: str | None = None,
    details: dict | None = None,
) -> GameEvent:
    """Append an event to the game's log and return it."""
    event = GameEvent(
        turn=game_state.turn_number,
        entity_id=entity_id,
        event_type=event_type,
        description=description,
        details=details or {},
        timestamp=datetime.now(timezone.utc),
    )
    game_state.event_log.append(event)
    return event


def _require(game_state: GameState, entity_id: str | None) -> Entity:
    entity = game_state.entities.get(entity_id) if entity_id is not None else None
    if entity is None:
        raise InvariantViolation(f"Effect targets unknown entity {entity_id!r}")
    return entity


def settle_moves(game_state: GameState, effects: list[Effect]) -> set[int]:
    """Indices of the move effects in a batch that may go ahead.

    Every move is judged against the store as it stood before the batch,
    never against another move in the same batch. A move is dropped when
    its destination blocks, when another player or monster stood there,
    or when any other mover in the batch targets the same tile. The result
    does not depend on the order of the store or of the effects.

    Raises:
        InvariantViolation: If a move has no destination.
    """
    held = {
        entity.position: entity.id
        for entity in game_state.entities.values()
        if not entity.is_trap
    }

    claims: dict[tuple[int, int], set[str]] = {}
    for effect in effects:
        if effect.effect_type != EffectType.MOVE:
            continue
        if effect.destination is None:
            raise InvariantViolation("Move effect without a destination")
        claims.setdefault(effect.destination, set()).add(effect.target_id)

    accepted = set()
    for index, effect in enumerate(effects):
        if effect.effect_type != EffectType.MOVE:
            continue
        dest = effect.destination
        if is_blocked(dest, game_state.grid):
            logger.debug("Entity %s move to %s dropped: blocked", effect.target_id, dest)
            continue
        holder = held.get(dest)
        if holder is not None and holder != effect.target_id:
            logger.debug("Entity %s move to %s dropped: held by %s", effect.target_id, dest, holder)
            continue
        if len(claims[dest]) > 1:
            logger.debug("Entity %s move to %s dropped: contested", effect.target_id, dest)
            continue
        accepted.add(index)
    return accepted


def apply_effects(game_state: GameState, effects: list[Effect]) -> EffectOutcome:
    """Apply buffered effects to the live store, in list order.

    Which moves go ahead is settled up front by settle_moves, so no move
    sees another move from the same batch.

    Args:
        game_state: Current game state (mutated in place).
        effects: Effects produced by a resolution pass.

    Returns:
        The turn-level signals carried by the effects.
    """
    outcome = EffectOutcome()
    accepted = settle_moves(game_state, effects)

    for index, effect in enumerate(effects):
        kind = effect.effect_type

        if kind == EffectType.MOVE:
            entity = _require(game_state, effect.target_id)
            if index not in accepted:
                continue
            dest = effect.destination
            entity.position = dest
            if effect.description:
                record_event(game_state, "trap", effect.description, entity.id, {"to": dest})

        elif kind == EffectType.ATTACK:
            attacker = _require(game_state, effect.source_id)
            defender = _require(game_state, effect.target_id)
            remaining = defender.lose_hp(effect.amount)
            attacker.animation = Animation(
                state=AnimationState.ATTACKING,
                frame=0,
                direction=effect.direction,
            )
            if defender.is_player:
                outcome.attacks_on_player += 1
            logger.info("Entity %s attacks %s (%d HP left)", attacker.id, defender.id, remaining)
            record_event(
                game_state,
                "attack",
                f"{attacker.glyph} hits {defender.glyph} for {effect.amount}.",
                attacker.id,
                {"target_id": defender.id, "damage": effect.amount, "hp_remaining": remaining},
            )

        elif kind == EffectType.DAMAGE:
            target = _require(game_state, effect.target_id)
            remaining = target.lose_hp(effect.amount)
            logger.info("Entity %s takes %d damage (%d HP left)", target.id, effect.amount, remaining)
            record_event(
                game_state,
                "trap",
                effect.description or f"{target.glyph} takes {effect.amount} damage.",
                target.id,
                {"source_id": effect.source_id, "damage": effect.amount, "hp_remaining": remaining},
            )

        elif kind == EffectType.STATUS:
            target = _require(game_state, effect.target_id)
            if not target.has_hp:
                raise InvariantViolation(f"Cannot set status on trap {target.id}")
            target.kind.status = effect.status
            record_event(game_state, "trap", effect.description, target.id, {"status": effect.status})

        elif kind == EffectType.COUNTDOWN:
            trap = _require(game_state, effect.target_id)
            if not trap.is_trap or trap.kind.counter is None:
                raise InvariantViolation(f"Entity {trap.id} is not a countdown trap")
            trap.kind.counter = max(0, trap.kind.counter - 1)
            trap.glyph = str(trap.kind.counter)
            record_event(game_state, "trap", effect.description, trap.id, {"counter": trap.kind.counter})

        elif kind == EffectType.CONSUME:
            if effect.target_id not in outcome.consumed:
                outcome.consumed.append(effect.target_id)

        elif kind == EffectType.NEXT_LEVEL:
            outcome.next_level = True

        elif kind == EffectType.WIN:
            outcome.win = True

        else:
            raise InvariantViolation(f"Unknown effect type: {kind}")

    return outcome
