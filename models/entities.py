"""Entity data models for Trapwalk: players, monsters, and traps."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator


class InvariantViolation(AssertionError):
    """Raised when the entity store is in a state the engine never produces."""


class Direction(str, Enum):
    """The four grid directions a move, slide, or attack can face."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def offset(self) -> tuple[int, int]:
        return _OFFSETS[self]


_OFFSETS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class Species(str, Enum):
    """Monster species, each with its own movement rule."""
    GOL = "gol"                     # Steps straight at the player, diagonals allowed
    ROOK = "rook"                   # One axis per turn (lane movement)


class Status(str, Enum):
    """Optional status carried by players and monsters."""
    BERSERK = "berserk"


class TrapType(str, Enum):
    """Every kind of trap that can sit on a tile."""
    BERSERK = "berserk"
    KILL = "kill"
    BUMP = "bump"
    TELEPORT = "teleport"
    COUNTDOWN = "countdown"
    ARROW = "arrow"
    NEXT_LEVEL = "next_level"
    WIN = "win"


class AnimationState(str, Enum):
    """Which cosmetic timeline the renderer shows for an entity."""
    IDLE = "idle"
    ATTACKING = "attacking"
    NONE = "none"                   # Static single frame (traps)


class Animation(BaseModel):
    """Logical animation state. Attacks play for ATTACK_FRAMES frames, then go idle."""
    state: AnimationState = AnimationState.IDLE
    frame: int = 0
    direction: Direction | None = None


class PlayerKind(BaseModel):
    kind: Literal["player"] = "player"
    hp: int
    max_hp: int
    status: Status | None = None


class MonsterKind(BaseModel):
    kind: Literal["monster"] = "monster"
    hp: int
    max_hp: int
    status: Status | None = None
    species: Species


class TrapKind(BaseModel):
    """Trap payload. Countdown traps carry a counter, Arrow traps a direction."""
    kind: Literal["trap"] = "trap"
    trap: TrapType
    counter: int | None = None
    direction: Direction | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> "TrapKind":
        if self.trap == TrapType.COUNTDOWN and (self.counter is None or self.counter < 0):
            raise ValueError("Countdown traps need a non-negative counter")
        if self.trap == TrapType.ARROW and self.direction is None:
            raise ValueError("Arrow traps need a direction")
        return self


EntityKind = Annotated[
    Union[PlayerKind, MonsterKind, TrapKind],
    Field(discriminator="kind"),
]


class Entity(BaseModel):
    """Anything that lives on the grid above the tiles."""
    id: str                         # Stable store key
    position: tuple[int, int]       # Grid position (x, y)
    previous_position: tuple[int, int] | None = None  # For interpolated drawing
    glyph: str
    color: str = "white"
    animation: Animation = Field(default_factory=Animation)
    kind: EntityKind

    @property
    def is_player(self) -> bool:
        return isinstance(self.kind, PlayerKind)

    @property
    def is_monster(self) -> bool:
        return isinstance(self.kind, MonsterKind)

    @property
    def is_trap(self) -> bool:
        return isinstance(self.kind, TrapKind)

    @property
    def has_hp(self) -> bool:
        """Whether hit points apply to this entity at all."""
        return isinstance(self.kind, (PlayerKind, MonsterKind))

    @property
    def hp(self) -> int:
        return self._living_kind().hp

    @property
    def max_hp(self) -> int:
        return self._living_kind().max_hp

    def lose_hp(self, amount: int) -> int:
        """Subtract hit points and return what is left.

        HP may go negative; the lifecycle pass treats anything <= 0 as dead.
        """
        kind = self._living_kind()
        kind.hp -= amount
        return kind.hp

    def _living_kind(self) -> PlayerKind | MonsterKind:
        if isinstance(self.kind, (PlayerKind, MonsterKind)):
            return self.kind
        raise InvariantViolation(f"Entity {self.id} is a trap and has no hit points")
