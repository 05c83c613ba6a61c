"""Input request and turn result models for Trapwalk."""

from enum import Enum

from pydantic import BaseModel

from models.entities import Direction, Status
from models.game_state import LevelState


class MoveRequest(BaseModel):
    """A single directional key press."""
    direction: Direction


class FrameRequest(BaseModel):
    """The key held during one frame, or None when nothing is pressed."""
    held: Direction | None = None


class RestartRequest(BaseModel):
    """Start a new run, optionally with a fixed map seed."""
    seed: int | None = None


class TurnResult(BaseModel):
    """What happened when the player tried to take a turn."""
    took_turn: bool
    description: str                # Human-readable summary
    attacks: int = 0                # Monster attacks that landed on the player
    removed: list[str] = []         # Entity ids removed this turn
    player_hp: int
    level_state: LevelState


class EffectType(str, Enum):
    """Kinds of buffered change a resolution pass can produce."""
    MOVE = "move"
    ATTACK = "attack"               # Monster bump: damage plus attack animation
    DAMAGE = "damage"
    STATUS = "status"
    COUNTDOWN = "countdown"         # Decrement a Countdown trap
    CONSUME = "consume"             # One-shot trap used up
    NEXT_LEVEL = "next_level"
    WIN = "win"


class Effect(BaseModel):
    """A change computed against a snapshot and applied after the scan."""
    effect_type: EffectType
    target_id: str | None = None
    source_id: str | None = None
    amount: int = 0
    destination: tuple[int, int] | None = None
    status: Status | None = None
    direction: Direction | None = None
    description: str = ""


class EffectOutcome(BaseModel):
    """What applying a batch of effects means for the rest of the turn."""
    attacks_on_player: int = 0
    consumed: list[str] = []        # Trap ids to remove
    next_level: bool = False
    win: bool = False
