"""Turn orchestration: game creation, the turn pipeline, input, and levels."""

from __future__ import annotations

import logging
import random

from config import ATTACK_FRAMES, LEVEL_COUNT, MAP_HEIGHT, MAP_WIDTH
from engine.effects import record_event
from engine.grid import in_bounds, occupant_at, trap_at
from engine.lifecycle import remove_dead_entities, update_level_state
from engine.mapgen import generate_map, place_entities
from engine.monsters import resolve_monsters
from engine.player import get_player, move_player
from engine.traps import resolve_traps
from models.actions import TurnResult
from models.entities import Animation, AnimationState, Direction, Entity
from models.game_state import GameState, LevelState, LevelStatus, RenderView

logger = logging.getLogger(__name__)


def _level_rng(seed: int | None, level: int) -> random.Random:
    """Generator for one level's map; reproducible when the run is seeded."""
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{level}")


def create_game(
    seed: int | None = None,
    level_count: int = LEVEL_COUNT,
    width: int = MAP_WIDTH,
    height: int = MAP_HEIGHT,
) -> GameState:
    """Generate level 0 of a new run.

    Args:
        seed: Map seed; None draws a fresh random layout.
        level_count: Levels in the run.
        width: Grid width in tiles.
        height: Grid height in tiles.

    Returns:
        A GameState in Playing(0).
    """
    if level_count < 1:
        raise ValueError("A run needs at least one level")

    rng = _level_rng(seed, 0)
    grid = generate_map(width, height, rng)
    entities = place_entities(grid, rng, 0, level_count)
    game_state = GameState(
        seed=seed,
        grid=grid,
        entities={entity.id: entity for entity in entities},
        player_id=entities[0].id,
        level_count=level_count,
    )
    logger.info("New run (seed=%s, levels=%d)", seed, level_count)
    return game_state


def restart_game(game_state: GameState, seed: int | None = None) -> GameState:
    """Start a fresh run with the same number of levels.

    This is the only way out of the Won and Lost states.
    """
    return create_game(
        seed=seed,
        level_count=game_state.level_count,
        width=game_state.width,
        height=game_state.height,
    )


def add_entity(game_state: GameState, entity: Entity) -> GameState:
    """Place an entity into the store at its current position.

    A player or monster may share a tile with a trap, never with another
    player or monster; two traps never share a tile.

    Raises:
        ValueError: If the position is out of bounds, a wall, or taken.
    """
    x, y = entity.position
    if not in_bounds(entity.position, game_state.grid):
        raise ValueError(f"Position ({x}, {y}) is out of bounds")
    if game_state.grid[y][x].blocks:
        raise ValueError(f"Position ({x}, {y}) is a wall")

    entities = game_state.entities.values()
    if entity.is_trap and trap_at(entity.position, entities) is not None:
        raise ValueError(f"Position ({x}, {y}) already has a trap")
    if not entity.is_trap and occupant_at(entity.position, entities, include_traps=False) is not None:
        raise ValueError(f"Position ({x}, {y}) is already occupied")

    game_state.entities[entity.id] = entity
    return game_state


def _result(game_state: GameState, took_turn: bool, description: str) -> TurnResult:
    return TurnResult(
        took_turn=took_turn,
        description=description,
        player_hp=get_player(game_state).hp,
        level_state=game_state.level_state.model_copy(),
    )


def take_turn(
    game_state: GameState,
    direction: Direction,
    rng: random.Random | None = None,
) -> TurnResult:
    """Run one full turn for a player key press.

    Player move, then monsters, then traps, then removals and the level
    state. Nothing runs unless the player's move is accepted, and nothing
    runs at all once the run has been won or lost.

    Args:
        game_state: Current game state (mutated in place).
        direction: Direction of the key press.
        rng: Optional Random instance for seeded/testing bump traps.

    Returns:
        TurnResult summarising the turn.
    """
    if game_state.level_state.status != LevelStatus.PLAYING:
        return _result(game_state, False, f"The run is over ({game_state.level_state.status.value}).")

    for entity in game_state.entities.values():
        if not entity.is_trap:
            entity.previous_position = entity.position

    if not move_player(game_state, direction):
        return _result(game_state, False, f"Can't move {direction.value}.")

    game_state.turn_number += 1
    monster_outcome = resolve_monsters(game_state)
    trap_outcome = resolve_traps(game_state, rng)
    removed = remove_dead_entities(game_state, trap_outcome.consumed)
    level_state = update_level_state(game_state, trap_outcome)
    player_hp = get_player(game_state).hp

    description = f"Turn {game_state.turn_number}: moved {direction.value}."
    if monster_outcome.attacks_on_player:
        description += f" Hit {monster_outcome.attacks_on_player} time(s)."

    if level_state.status == LevelStatus.LOST:
        description += " You died."
    elif level_state.status == LevelStatus.WON:
        description += " You won!"
    elif level_state.status == LevelStatus.NEXT_LEVEL:
        advance_level(game_state)
        if game_state.level_state.status == LevelStatus.WON:
            description += " You won!"
        else:
            description += f" Descended to level {game_state.level_state.level}."

    return TurnResult(
        took_turn=True,
        description=description,
        attacks=monster_outcome.attacks_on_player,
        removed=removed,
        player_hp=player_hp,
        level_state=game_state.level_state.model_copy(),
    )


def tick_animations(game_state: GameState) -> None:
    """Advance every attack animation by one frame, ending in Idle(0)."""
    for entity in game_state.entities.values():
        animation = entity.animation
        if animation.state != AnimationState.ATTACKING:
            continue
        if animation.frame + 1 >= ATTACK_FRAMES:
            entity.animation = Animation()
        else:
            animation.frame += 1


def advance_frame(
    game_state: GameState,
    held: Direction | None,
    rng: random.Random | None = None,
) -> TurnResult | None:
    """Feed the key held during one frame.

    Attack animations advance first. A turn is attempted only on the frame
    a key goes down, not while it stays held, so one press gives one step.

    Returns:
        The TurnResult if a fresh press was seen, else None.
    """
    tick_animations(game_state)
    fresh = held is not None and held != game_state.held_key
    game_state.held_key = held
    if not fresh:
        return None
    return take_turn(game_state, held, rng)


def advance_level(game_state: GameState, rng: random.Random | None = None) -> LevelState:
    """Leave NextLevel(k) for Playing(k+1), or for Won after the last level.

    The new level gets a fresh grid and population; the player keeps its
    current HP.

    Raises:
        ValueError: If the level state is not NextLevel.
    """
    level_state = game_state.level_state
    if level_state.status != LevelStatus.NEXT_LEVEL:
        raise ValueError(f"Cannot advance from {level_state.status.value}")

    next_level = level_state.level + 1
    if next_level >= game_state.level_count:
        level_state.status = LevelStatus.WON
        logger.info("Cleared final level %d", level_state.level)
        record_event(game_state, "level", "The final level is cleared.", game_state.player_id)
        return level_state

    rng = rng or _level_rng(game_state.seed, next_level)
    player = get_player(game_state)
    grid = generate_map(game_state.width, game_state.height, rng)
    entities = place_entities(grid, rng, next_level, game_state.level_count, player=player)

    game_state.grid = grid
    game_state.entities = {entity.id: entity for entity in entities}
    level_state.level = next_level
    level_state.status = LevelStatus.PLAYING
    logger.info("Entered level %d", next_level)
    record_event(game_state, "level", f"Entered level {next_level}.", player.id)
    return level_state


def render_view(game_state: GameState) -> RenderView:
    """Everything a renderer needs to draw the current frame."""
    player = get_player(game_state)
    return RenderView(
        width=game_state.width,
        height=game_state.height,
        tiles=game_state.grid,
        entities=list(game_state.entities.values()),
        player_hp=player.hp,
        player_max_hp=player.max_hp,
        level_state=game_state.level_state,
        turn_number=game_state.turn_number,
    )
