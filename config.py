"""Game-wide configuration constants for Trapwalk."""

import os

MAP_WIDTH = 20           # Grid width in tiles
MAP_HEIGHT = 15          # Grid height in tiles
LEVEL_COUNT = 3          # Levels in a run; clearing the last one wins
PLAYER_MAX_HP = 10
MONSTER_MAX_HP = 3
ATTACK_DAMAGE = 1        # Damage of a monster bumping into the player
ATTACK_FRAMES = 3        # Frames an attack animation plays before returning to idle
TRAP_DAMAGE = 5          # Damage of Kill and expired Countdown traps
COUNTDOWN_START = 3      # Initial counter of a freshly placed Countdown trap
GOL_COUNT = 2            # Gols spawned per level
ROOK_COUNT = 1           # Rooks spawned per level
WALL_SEGMENTS = 4        # Random-walk wall segments per level
WALL_SEGMENT_LENGTH = 5  # Steps per wall segment
PLACEMENT_ATTEMPTS = 1000  # Rejection-sampling budget per entity

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
MAP_SEED = int(os.environ["MAP_SEED"]) if os.environ.get("MAP_SEED") else None
