"""Grid, level state, game state, and event models for Trapwalk."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from models.entities import Direction, Entity


class Tile(BaseModel):
    """A single tile of the level grid."""
    x: int
    y: int
    glyph: str = "."                # Cosmetic
    blocks: bool = False


class LevelStatus(str, Enum):
    """Run-level state machine."""
    PLAYING = "playing"
    NEXT_LEVEL = "next_level"       # Transient: the driver regenerates right away
    WON = "won"
    LOST = "lost"


class LevelState(BaseModel):
    """Where the run stands: which level, and whether it is still going."""
    status: LevelStatus = LevelStatus.PLAYING
    level: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in (LevelStatus.WON, LevelStatus.LOST)


class GameEvent(BaseModel):
    """A logged event from the game."""
    turn: int
    entity_id: str | None = None
    event_type: str                 # "attack", "trap", "removed", "level"
    description: str
    details: dict = {}
    timestamp: datetime


class GameState(BaseModel):
    """The full state of a run: current grid, entity store, and bookkeeping."""
    seed: int | None = None
    grid: list[list[Tile]]          # 2D grid [y][x]
    entities: dict[str, Entity] = {}  # entity_id -> Entity, in store order
    player_id: str
    level_state: LevelState = Field(default_factory=LevelState)
    level_count: int = 1
    turn_number: int = 0
    held_key: Direction | None = None  # Last sampled input, for edge detection
    event_log: list[GameEvent] = []

    @property
    def width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def height(self) -> int:
        return len(self.grid)


class RenderView(BaseModel):
    """Read-only per-frame data handed to a renderer.

    Attack animations advance once per /frame call and return to Idle(0)
    after ATTACK_FRAMES frames.
    """
    width: int
    height: int
    tiles: list[list[Tile]]
    entities: list[Entity]
    player_hp: int
    player_max_hp: int
    level_state: LevelState
    turn_number: int
