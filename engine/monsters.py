"""Monster definitions, per-species movement, and monster combat."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import uuid4

from config import ATTACK_DAMAGE, MONSTER_MAX_HP
from engine.effects import apply_effects, take_snapshot
from engine.grid import is_blocked, occupant_at, offset_position, sign
from engine.player import get_player
from models.actions import Effect, EffectOutcome, EffectType
from models.entities import Direction, Entity, InvariantViolation, MonsterKind, Species

if TYPE_CHECKING:
    from models.game_state import GameState, Tile

logger = logging.getLogger(__name__)

MONSTER_GLYPHS = {
    Species.GOL: "g",
    Species.ROOK: "r",
}


def create_monster(
    species: Species,
    position: tuple[int, int],
    max_hp: int = MONSTER_MAX_HP,
) -> Entity:
    """Create a fresh monster of the given species at full health."""
    return Entity(
        id=str(uuid4()),
        position=position,
        previous_position=position,
        glyph=MONSTER_GLYPHS[species],
        color="red",
        kind=MonsterKind(hp=max_hp, max_hp=max_hp, species=species),
    )


def monster_step(
    species: Species,
    monster_pos: tuple[int, int],
    target_pos: tuple[int, int],
    grid: list[list[Tile]],
) -> tuple[int, int]:
    """Unit step a monster of this species takes toward target_pos.

    Gols step straight at the target, diagonals included. Rooks keep to one
    axis per turn: a diagonal step is replaced by the step along the axis
    with the larger distance (x on ties), or by the other axis when that
    step runs into a wall.

    Args:
        species: Monster species.
        monster_pos: (x, y) of the monster.
        target_pos: (x, y) it is heading for.
        grid: The level grid.

    Returns:
        (dx, dy) with each component in {-1, 0, 1}.
    """
    dist_x = target_pos[0] - monster_pos[0]
    dist_y = target_pos[1] - monster_pos[1]
    step = (sign(dist_x), sign(dist_y))

    if species == Species.GOL:
        return step

    if species == Species.ROOK:
        if step[0] == 0 or step[1] == 0:
            return step
        horizontal = (step[0], 0)
        vertical = (0, step[1])
        if abs(dist_x) >= abs(dist_y):
            preferred, fallback = horizontal, vertical
        else:
            preferred, fallback = vertical, horizontal
        if not is_blocked(offset_position(monster_pos, preferred), grid):
            return preferred
        return fallback

    raise InvariantViolation(f"Unknown monster species: {species}")


def facing(step: tuple[int, int]) -> Direction | None:
    """Direction a monster faces when it attempts step; horizontal wins."""
    dx, dy = step
    if dx > 0:
        return Direction.RIGHT
    if dx < 0:
        return Direction.LEFT
    if dy > 0:
        return Direction.DOWN
    if dy < 0:
        return Direction.UP
    return None


def plan_monster_turn(game_state: GameState, snapshot: list[Entity]) -> list[Effect]:
    """Decide every monster's move or attack from a pre-turn snapshot.

    No monster sees another's move from the same turn. A monster whose step
    lands on the player attacks instead of moving; one whose step lands on
    another monster, or on a wall, stays put.

    Args:
        game_state: Current game state (read only).
        snapshot: Entity copies taken before any monster acted.

    Returns:
        Move and attack effects, in store order.
    """
    player = next((e for e in snapshot if e.id == game_state.player_id), None)
    if player is None:
        raise InvariantViolation("Snapshot has no player")

    effects: list[Effect] = []
    for monster in snapshot:
        if not monster.is_monster:
            continue

        step = monster_step(monster.kind.species, monster.position, player.position, game_state.grid)
        if step == (0, 0):
            continue
        dest = offset_position(monster.position, step)

        if is_blocked(dest, game_state.grid):
            logger.debug("Monster %s blocked by wall at %s", monster.id, dest)
            continue

        occupant = occupant_at(dest, snapshot, include_traps=False)
        if occupant is not None and occupant.is_player:
            effects.append(Effect(
                effect_type=EffectType.ATTACK,
                source_id=monster.id,
                target_id=occupant.id,
                amount=ATTACK_DAMAGE,
                direction=facing(step),
            ))
            continue
        if occupant is not None:
            logger.debug("Monster %s blocked by %s at %s", monster.id, occupant.id, dest)
            continue

        effects.append(Effect(
            effect_type=EffectType.MOVE,
            target_id=monster.id,
            destination=dest,
        ))

    return effects


def resolve_monsters(game_state: GameState) -> EffectOutcome:
    """Run the monster phase of a turn: snapshot, plan, then apply."""
    get_player(game_state)
    snapshot = take_snapshot(game_state)
    effects = plan_monster_turn(game_state, snapshot)
    return apply_effects(game_state, effects)
