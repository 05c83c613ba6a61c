"""Trap definitions and trap resolution.

Every player or monster standing on a trap after monsters have moved
triggers that trap once. Effects are computed against a snapshot of the
post-move store and applied only after the whole scan, so one entity's
teleport or slide never feeds into another entity's trap this turn.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING
from uuid import uuid4

from config import COUNTDOWN_START, TRAP_DAMAGE
from engine.effects import apply_effects, take_snapshot
from engine.grid import is_blocked, occupant_at, offset_position, trap_at
from models.actions import Effect, EffectOutcome, EffectType
from models.entities import (
    Animation,
    AnimationState,
    Direction,
    Entity,
    InvariantViolation,
    Status,
    TrapKind,
    TrapType,
)

if TYPE_CHECKING:
    from models.game_state import GameState, Tile

logger = logging.getLogger(__name__)

TRAP_GLYPHS = {
    TrapType.BERSERK: "B",
    TrapType.KILL: "x",
    TrapType.BUMP: "?",
    TrapType.TELEPORT: "o",
    TrapType.NEXT_LEVEL: "%",
    TrapType.WIN: "*",
}

ARROW_GLYPHS = {
    Direction.UP: "^",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
}

TRAP_COLORS = {
    TrapType.BERSERK: "purple",
    TrapType.KILL: "red",
    TrapType.BUMP: "yellow",
    TrapType.TELEPORT: "blue",
    TrapType.COUNTDOWN: "orange",
    TrapType.ARROW: "gray",
    TrapType.NEXT_LEVEL: "green",
    TrapType.WIN: "gold",
}

# Bump picks one of these uniformly; (0, 0) means the bump fizzles.
BUMP_OFFSETS = [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1)]


def trap_glyph(kind: TrapKind) -> str:
    if kind.trap == TrapType.COUNTDOWN:
        return str(kind.counter)
    if kind.trap == TrapType.ARROW:
        return ARROW_GLYPHS[kind.direction]
    return TRAP_GLYPHS[kind.trap]


def create_trap(
    trap: TrapType,
    position: tuple[int, int],
    counter: int | None = None,
    direction: Direction | None = None,
) -> Entity:
    """Create a trap entity.

    Countdown traps default to COUNTDOWN_START; Arrow traps need a direction.
    """
    if trap == TrapType.COUNTDOWN and counter is None:
        counter = COUNTDOWN_START
    kind = TrapKind(trap=trap, counter=counter, direction=direction)
    return Entity(
        id=str(uuid4()),
        position=position,
        glyph=trap_glyph(kind),
        color=TRAP_COLORS[trap],
        animation=Animation(state=AnimationState.NONE),
        kind=kind,
    )


def teleport_partner(trap: Entity, snapshot: list[Entity]) -> Entity | None:
    """The next Teleport trap after trap in store order, wrapping around.

    Returns None when trap is the only Teleport trap.
    """
    teleports = [
        e for e in snapshot
        if e.is_trap and e.kind.trap == TrapType.TELEPORT
    ]
    ids = [e.id for e in teleports]
    if trap.id not in ids:
        raise InvariantViolation(f"Trap {trap.id} is not a teleport in this snapshot")
    if len(teleports) < 2:
        return None
    return teleports[(ids.index(trap.id) + 1) % len(teleports)]


def slide_destination(
    start: tuple[int, int],
    direction: Direction,
    mover_id: str,
    grid: list[list[Tile]],
    snapshot: list[Entity],
) -> tuple[int, int]:
    """Where an Arrow trap slides an entity standing at start.

    The slide passes over traps and stops on the last free tile before a
    wall or another player or monster.
    """
    pos = start
    while True:
        nxt = offset_position(pos, direction.offset)
        if is_blocked(nxt, grid):
            return pos
        occupant = occupant_at(nxt, snapshot, include_traps=False)
        if occupant is not None and occupant.id != mover_id:
            return pos
        pos = nxt


def bump_destination(
    start: tuple[int, int],
    mover_id: str,
    grid: list[list[Tile]],
    snapshot: list[Entity],
    rng: random.Random,
) -> tuple[int, int] | None:
    """Random one-tile nudge from start, or None when it goes nowhere."""
    offset = rng.choice(BUMP_OFFSETS)
    if offset == (0, 0):
        return None
    dest = offset_position(start, offset)
    if is_blocked(dest, grid):
        return None
    occupant = occupant_at(dest, snapshot, include_traps=False)
    if occupant is not None and occupant.id != mover_id:
        return None
    return dest


def resolve_trap(
    entity: Entity,
    trap: Entity,
    game_state: GameState,
    snapshot: list[Entity],
    rng: random.Random,
) -> list[Effect]:
    """Effects of entity standing on trap.

    Raises:
        InvariantViolation: If entity is itself a trap or trap is not one.
    """
    if not entity.has_hp:
        raise InvariantViolation(f"Trap {trap.id} triggered by non-living entity {entity.id}")
    if not trap.is_trap:
        raise InvariantViolation(f"Entity {trap.id} is not a trap")

    kind = trap.kind.trap
    logger.info("Entity %s triggers %s trap at %s", entity.id, kind.value, trap.position)

    if kind == TrapType.BERSERK:
        return [Effect(
            effect_type=EffectType.STATUS,
            target_id=entity.id,
            source_id=trap.id,
            status=Status.BERSERK,
            description=f"{entity.glyph} goes berserk.",
        )]

    if kind == TrapType.KILL:
        return [
            Effect(
                effect_type=EffectType.DAMAGE,
                target_id=entity.id,
                source_id=trap.id,
                amount=TRAP_DAMAGE,
                description=f"A kill trap snaps shut on {entity.glyph}.",
            ),
            Effect(effect_type=EffectType.CONSUME, target_id=trap.id),
        ]

    if kind == TrapType.BUMP:
        dest = bump_destination(entity.position, entity.id, game_state.grid, snapshot, rng)
        if dest is None:
            return []
        return [Effect(
            effect_type=EffectType.MOVE,
            target_id=entity.id,
            source_id=trap.id,
            destination=dest,
            description=f"{entity.glyph} is bumped to {dest}.",
        )]

    if kind == TrapType.TELEPORT:
        partner = teleport_partner(trap, snapshot)
        if partner is None:
            return []
        return [Effect(
            effect_type=EffectType.MOVE,
            target_id=entity.id,
            source_id=trap.id,
            destination=partner.position,
            description=f"{entity.glyph} teleports to {partner.position}.",
        )]

    if kind == TrapType.COUNTDOWN:
        if trap.kind.counter == 0:
            return [Effect(
                effect_type=EffectType.DAMAGE,
                target_id=entity.id,
                source_id=trap.id,
                amount=TRAP_DAMAGE,
                description=f"A countdown trap goes off under {entity.glyph}.",
            )]
        return [Effect(
            effect_type=EffectType.COUNTDOWN,
            target_id=trap.id,
            source_id=entity.id,
            description=f"A countdown trap ticks down to {trap.kind.counter - 1}.",
        )]

    if kind == TrapType.ARROW:
        dest = slide_destination(
            entity.position, trap.kind.direction, entity.id, game_state.grid, snapshot,
        )
        if dest == entity.position:
            return []
        return [Effect(
            effect_type=EffectType.MOVE,
            target_id=entity.id,
            source_id=trap.id,
            destination=dest,
            description=f"{entity.glyph} slides {trap.kind.direction.value} to {dest}.",
        )]

    if kind == TrapType.NEXT_LEVEL:
        if entity.is_player:
            return [Effect(effect_type=EffectType.NEXT_LEVEL, target_id=entity.id, source_id=trap.id)]
        return []

    if kind == TrapType.WIN:
        if entity.is_player:
            return [Effect(effect_type=EffectType.WIN, target_id=entity.id, source_id=trap.id)]
        return []

    raise InvariantViolation(f"Unknown trap type: {kind}")


def plan_trap_effects(
    game_state: GameState,
    snapshot: list[Entity],
    rng: random.Random,
) -> list[Effect]:
    """Scan the snapshot in store order and collect every trap effect."""
    effects: list[Effect] = []
    for entity in snapshot:
        if entity.is_trap:
            continue
        trap = trap_at(entity.position, snapshot)
        if trap is not None:
            effects.extend(resolve_trap(entity, trap, game_state, snapshot, rng))
    return effects


def resolve_traps(game_state: GameState, rng: random.Random | None = None) -> EffectOutcome:
    """Run the trap phase of a turn: snapshot, plan, then apply.

    Args:
        game_state: Current game state (mutated in place).
        rng: Optional Random instance for seeded/testing bumps.

    Returns:
        Signals for the lifecycle pass: consumed traps, next level, win.
    """
    rng = rng or random.Random()
    snapshot = take_snapshot(game_state)
    effects = plan_trap_effects(game_state, snapshot, rng)
    return apply_effects(game_state, effects)
