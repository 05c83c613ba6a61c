"""Tests for monster movement rules and monster combat."""

from engine.grid import create_grid
from engine.monsters import create_monster, facing, monster_step, resolve_monsters
from engine.player import create_player, get_player
from engine.traps import create_trap
from models.entities import AnimationState, Direction, Species, TrapType
from models.game_state import GameState


def _make_game_state(player_pos: tuple[int, int], hp: int = 10, size: int = 10) -> GameState:
    """Helper to create a game state with just the player on an open grid."""
    player = create_player(player_pos, max_hp=hp)
    return GameState(grid=create_grid(size, size), entities={player.id: player}, player_id=player.id)


def _add_monster(gs: GameState, species: Species, pos: tuple[int, int]):
    monster = create_monster(species, pos)
    gs.entities[monster.id] = monster
    return monster


def _non_trap_positions(gs: GameState) -> list[tuple[int, int]]:
    return [e.position for e in gs.entities.values() if not e.is_trap]


class TestCreateMonster:
    def test_properties(self):
        rook = create_monster(Species.ROOK, (3, 4), max_hp=2)
        assert rook.is_monster
        assert rook.glyph == "r"
        assert rook.hp == 2
        assert rook.kind.species == Species.ROOK
        assert rook.kind.status is None


class TestMonsterStep:
    """Tests for monster_step()."""

    def test_gol_moves_diagonally(self):
        grid = create_grid(10, 10)
        assert monster_step(Species.GOL, (5, 5), (2, 8), grid) == (-1, 1)

    def test_gol_orthogonal(self):
        grid = create_grid(10, 10)
        assert monster_step(Species.GOL, (5, 5), (5, 1), grid) == (0, -1)

    def test_rook_takes_longer_axis(self):
        grid = create_grid(10, 10)
        step = monster_step(Species.ROOK, (3, 1), (0, 0), grid)
        assert step == (-1, 0)
        assert 0 in step

    def test_rook_longer_vertical_axis(self):
        grid = create_grid(10, 10)
        assert monster_step(Species.ROOK, (5, 5), (4, 1), grid) == (0, -1)

    def test_rook_tie_prefers_horizontal(self):
        grid = create_grid(10, 10)
        assert monster_step(Species.ROOK, (5, 5), (3, 3), grid) == (-1, 0)

    def test_rook_falls_back_when_preferred_axis_walled(self):
        grid = create_grid(10, 10)
        grid[5][4].blocks = True
        assert monster_step(Species.ROOK, (5, 5), (1, 4), grid) == (0, -1)

    def test_rook_orthogonal_unchanged(self):
        grid = create_grid(10, 10)
        assert monster_step(Species.ROOK, (5, 5), (5, 8), grid) == (0, 1)

    def test_rook_never_diagonal(self):
        grid = create_grid(12, 12)
        for mx in range(1, 11):
            for my in range(1, 11):
                step = monster_step(Species.ROOK, (mx, my), (6, 6), grid)
                assert step[0] == 0 or step[1] == 0


class TestFacing:
    def test_horizontal_wins(self):
        assert facing((-1, -1)) == Direction.LEFT
        assert facing((1, 1)) == Direction.RIGHT

    def test_vertical(self):
        assert facing((0, -1)) == Direction.UP
        assert facing((0, 1)) == Direction.DOWN

    def test_none(self):
        assert facing((0, 0)) is None


class TestResolveMonsters:
    """Tests for resolve_monsters()."""

    def test_gol_steps_toward_player(self):
        gs = _make_game_state((1, 1))
        gol = _add_monster(gs, Species.GOL, (5, 5))
        resolve_monsters(gs)
        assert gol.position == (4, 4)

    def test_wall_stops_monster(self):
        gs = _make_game_state((1, 5))
        gs.grid[5][2].blocks = True
        gol = _add_monster(gs, Species.GOL, (3, 5))
        resolve_monsters(gs)
        assert gol.position == (3, 5)

    def test_attack_instead_of_move(self):
        gs = _make_game_state((3, 3), hp=10)
        gol = _add_monster(gs, Species.GOL, (4, 4))
        outcome = resolve_monsters(gs)
        assert outcome.attacks_on_player == 1
        assert get_player(gs).hp == 9
        assert gol.position == (4, 4)
        assert gol.animation.state == AnimationState.ATTACKING
        assert gol.animation.frame == 0
        assert gol.animation.direction == Direction.LEFT

    def test_every_attacker_deals_damage(self):
        gs = _make_game_state((5, 5), hp=10)
        attackers = [
            _add_monster(gs, Species.GOL, (4, 4)),
            _add_monster(gs, Species.GOL, (6, 6)),
            _add_monster(gs, Species.ROOK, (5, 4)),
        ]
        outcome = resolve_monsters(gs)
        assert outcome.attacks_on_player == 3
        assert get_player(gs).hp == 7
        for monster in attackers:
            assert monster.position != (5, 5)

    def test_monster_blocked_by_monster(self):
        gs = _make_game_state((1, 5))
        front = _add_monster(gs, Species.GOL, (3, 5))
        back = _add_monster(gs, Species.GOL, (4, 5))
        resolve_monsters(gs)
        assert front.position == (2, 5)
        # The snapshot still had front at (3, 5)
        assert back.position == (4, 5)

    def test_result_independent_of_store_order(self):
        gs = _make_game_state((1, 5))
        back = _add_monster(gs, Species.GOL, (4, 5))
        front = _add_monster(gs, Species.GOL, (3, 5))
        resolve_monsters(gs)
        assert front.position == (2, 5)
        assert back.position == (4, 5)

    def test_contested_tile_taken_by_nobody(self):
        for order in ([(4, 3), (6, 3)], [(6, 3), (4, 3)]):
            gs = _make_game_state((5, 1))
            gols = {pos: _add_monster(gs, Species.GOL, pos) for pos in order}
            resolve_monsters(gs)
            assert gols[(4, 3)].position == (4, 3)
            assert gols[(6, 3)].position == (6, 3)
            positions = _non_trap_positions(gs)
            assert len(positions) == len(set(positions))

    def test_uncontested_mover_unaffected_by_contest(self):
        gs = _make_game_state((5, 1))
        left = _add_monster(gs, Species.GOL, (4, 3))
        right = _add_monster(gs, Species.GOL, (6, 3))
        far = _add_monster(gs, Species.GOL, (8, 8))
        resolve_monsters(gs)
        assert (left.position, right.position) == ((4, 3), (6, 3))
        assert far.position == (7, 7)

    def test_monsters_do_not_hurt_each_other(self):
        gs = _make_game_state((1, 5))
        front = _add_monster(gs, Species.GOL, (2, 5))
        back = _add_monster(gs, Species.GOL, (3, 5))
        resolve_monsters(gs)
        assert front.hp == front.max_hp
        assert back.hp == back.max_hp

    def test_monster_may_step_onto_trap(self):
        gs = _make_game_state((1, 5))
        trap = create_trap(TrapType.BERSERK, (2, 5))
        gs.entities[trap.id] = trap
        gol = _add_monster(gs, Species.GOL, (3, 5))
        resolve_monsters(gs)
        assert gol.position == (2, 5)
