"""Tests for turn orchestration: the pipeline, input edges, and levels."""

import random

import pytest

from config import ATTACK_FRAMES
from engine.grid import create_grid
from engine.monsters import create_monster
from engine.player import create_player, get_player
from engine.traps import create_trap
from engine.turn import (
    add_entity,
    advance_frame,
    advance_level,
    create_game,
    render_view,
    restart_game,
    take_turn,
)
from models.entities import AnimationState, Direction, Species, TrapType
from models.game_state import GameState, LevelStatus


def _make_game_state(
    player_pos: tuple[int, int] = (1, 1),
    hp: int = 10,
    size: int = 10,
    level_count: int = 3,
) -> GameState:
    """Helper to create a hand-built level with just the player."""
    player = create_player(player_pos, max_hp=hp)
    return GameState(
        grid=create_grid(size, size),
        entities={player.id: player},
        player_id=player.id,
        level_count=level_count,
    )


def _assert_invariants(gs: GameState) -> None:
    positions = [e.position for e in gs.entities.values() if not e.is_trap]
    assert len(positions) == len(set(positions)), "two creatures share a tile"
    for entity in gs.entities.values():
        x, y = entity.position
        assert not gs.grid[y][x].blocks, f"{entity.id} stands in a wall"


class TestCreateGame:
    """Tests for create_game()."""

    def test_starts_playing_level_zero(self):
        gs = create_game(seed=1)
        assert gs.level_state.status == LevelStatus.PLAYING
        assert gs.level_state.level == 0
        assert gs.turn_number == 0

    def test_player_is_first_in_store(self):
        gs = create_game(seed=1)
        assert next(iter(gs.entities)) == gs.player_id
        assert get_player(gs).hp == get_player(gs).max_hp

    def test_seed_reproduces_layout(self):
        a = create_game(seed=42)
        b = create_game(seed=42)
        assert [[t.blocks for t in row] for row in a.grid] == [[t.blocks for t in row] for row in b.grid]
        assert [e.position for e in a.entities.values()] == [e.position for e in b.entities.values()]

    def test_needs_a_level(self):
        with pytest.raises(ValueError):
            create_game(level_count=0)

    def test_restart_keeps_level_count(self):
        gs = create_game(seed=1, level_count=5)
        gs.level_state.status = LevelStatus.LOST
        fresh = restart_game(gs, seed=2)
        assert fresh.level_count == 5
        assert fresh.level_state.status == LevelStatus.PLAYING
        assert fresh.seed == 2


class TestAddEntity:
    """Tests for add_entity()."""

    def test_add(self):
        gs = _make_game_state()
        gol = create_monster(Species.GOL, (5, 5))
        add_entity(gs, gol)
        assert gol.id in gs.entities

    def test_wall_rejected(self):
        gs = _make_game_state()
        with pytest.raises(ValueError, match="wall"):
            add_entity(gs, create_monster(Species.GOL, (0, 5)))

    def test_out_of_bounds_rejected(self):
        gs = _make_game_state()
        with pytest.raises(ValueError, match="out of bounds"):
            add_entity(gs, create_monster(Species.GOL, (20, 5)))

    def test_occupied_rejected(self):
        gs = _make_game_state((1, 1))
        with pytest.raises(ValueError, match="occupied"):
            add_entity(gs, create_monster(Species.GOL, (1, 1)))

    def test_monster_may_share_with_trap(self):
        gs = _make_game_state()
        add_entity(gs, create_trap(TrapType.BUMP, (4, 4)))
        add_entity(gs, create_monster(Species.GOL, (4, 4)))
        with pytest.raises(ValueError, match="trap"):
            add_entity(gs, create_trap(TrapType.KILL, (4, 4)))


class TestTakeTurn:
    """Tests for take_turn()."""

    def test_blocked_move_takes_no_turn(self):
        gs = _make_game_state((1, 1))
        gol = create_monster(Species.GOL, (5, 5))
        add_entity(gs, gol)
        result = take_turn(gs, Direction.LEFT)
        assert not result.took_turn
        assert gs.turn_number == 0
        assert gol.position == (5, 5)

    def test_accepted_move_runs_monsters(self):
        gs = _make_game_state((1, 1))
        gol = create_monster(Species.GOL, (5, 5))
        add_entity(gs, gol)
        result = take_turn(gs, Direction.RIGHT)
        assert result.took_turn
        assert gs.turn_number == 1
        assert get_player(gs).position == (2, 1)
        assert gol.position == (4, 4)
        assert gol.previous_position == (5, 5)

    def test_attack_reported(self):
        gs = _make_game_state((1, 1), hp=10)
        add_entity(gs, create_monster(Species.GOL, (3, 2)))
        result = take_turn(gs, Direction.RIGHT)
        assert result.attacks == 1
        assert result.player_hp == 9

    def test_kill_trap_is_one_shot(self):
        gs = _make_game_state((1, 1), hp=20)
        trap = create_trap(TrapType.KILL, (2, 1))
        add_entity(gs, trap)

        result = take_turn(gs, Direction.RIGHT)
        assert result.player_hp == 15
        assert trap.id in result.removed
        assert trap.id not in gs.entities

        take_turn(gs, Direction.LEFT)
        take_turn(gs, Direction.RIGHT)
        assert get_player(gs).hp == 15

    def test_death_loses_and_absorbs(self):
        gs = _make_game_state((1, 1), hp=1)
        gol = create_monster(Species.GOL, (3, 2))
        add_entity(gs, gol)
        result = take_turn(gs, Direction.RIGHT)
        assert result.level_state.status == LevelStatus.LOST
        assert gs.player_id in gs.entities

        player = get_player(gs)
        before = (player.position, player.hp, gol.position, gs.turn_number)
        result = take_turn(gs, Direction.DOWN)
        assert not result.took_turn
        assert (player.position, player.hp, gol.position, gs.turn_number) == before

    def test_win_trap_wins_and_absorbs(self):
        gs = _make_game_state((1, 1))
        add_entity(gs, create_trap(TrapType.WIN, (2, 1)))
        result = take_turn(gs, Direction.RIGHT)
        assert result.level_state.status == LevelStatus.WON
        assert not take_turn(gs, Direction.LEFT).took_turn
        assert get_player(gs).position == (2, 1)

    def test_next_level_regenerates(self):
        gs = _make_game_state((1, 1), hp=10, level_count=3)
        old_grid = gs.grid
        get_player(gs).lose_hp(4)
        add_entity(gs, create_trap(TrapType.NEXT_LEVEL, (2, 1)))

        result = take_turn(gs, Direction.RIGHT)

        assert result.level_state.status == LevelStatus.PLAYING
        assert result.level_state.level == 1
        assert gs.grid is not old_grid
        assert get_player(gs).hp == 6
        assert next(iter(gs.entities)) == gs.player_id
        assert len(gs.entities) > 1
        _assert_invariants(gs)

    def test_next_level_on_last_level_wins(self):
        gs = _make_game_state((1, 1), level_count=1)
        add_entity(gs, create_trap(TrapType.NEXT_LEVEL, (2, 1)))
        result = take_turn(gs, Direction.RIGHT)
        assert result.level_state.status == LevelStatus.WON

    def test_advance_level_requires_signal(self):
        gs = _make_game_state()
        with pytest.raises(ValueError):
            advance_level(gs)

    def test_random_run_keeps_invariants(self):
        rng = random.Random(2024)
        for seed in range(5):
            gs = create_game(seed=seed)
            _assert_invariants(gs)
            for _ in range(60):
                take_turn(gs, rng.choice(list(Direction)), rng=rng)
                _assert_invariants(gs)
                if gs.level_state.is_terminal:
                    break


class TestAdvanceFrame:
    """Tests for advance_frame() edge detection."""

    def test_one_step_per_press(self):
        gs = _make_game_state((1, 1))
        assert advance_frame(gs, Direction.RIGHT).took_turn
        assert advance_frame(gs, Direction.RIGHT) is None
        assert advance_frame(gs, Direction.RIGHT) is None
        assert get_player(gs).position == (2, 1)

    def test_release_and_press_again(self):
        gs = _make_game_state((1, 1))
        advance_frame(gs, Direction.RIGHT)
        assert advance_frame(gs, None) is None
        assert advance_frame(gs, Direction.RIGHT).took_turn
        assert get_player(gs).position == (3, 1)

    def test_switching_keys_is_a_fresh_press(self):
        gs = _make_game_state((1, 1))
        advance_frame(gs, Direction.RIGHT)
        assert advance_frame(gs, Direction.DOWN).took_turn
        assert get_player(gs).position == (2, 2)

    def test_attack_animation_returns_to_idle(self):
        gs = _make_game_state((1, 1))
        gol = create_monster(Species.GOL, (3, 2))
        add_entity(gs, gol)
        assert advance_frame(gs, Direction.RIGHT).attacks == 1
        assert gol.animation.state == AnimationState.ATTACKING
        assert gol.animation.frame == 0
        assert gol.animation.direction == Direction.LEFT

        frames = []
        for _ in range(ATTACK_FRAMES):
            assert advance_frame(gs, Direction.RIGHT) is None
            frames.append((gol.animation.state, gol.animation.frame))
        expected = [(AnimationState.ATTACKING, f) for f in range(1, ATTACK_FRAMES)]
        assert frames == expected + [(AnimationState.IDLE, 0)]


class TestRenderView:
    def test_view_contents(self):
        gs = _make_game_state((1, 1), hp=8)
        add_entity(gs, create_trap(TrapType.BUMP, (3, 3)))
        view = render_view(gs)
        assert view.width == 10 and view.height == 10
        assert view.player_hp == 8
        assert view.player_max_hp == 8
        assert len(view.entities) == 2
        assert view.level_state.status == LevelStatus.PLAYING
