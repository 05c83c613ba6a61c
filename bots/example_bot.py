"""Reference bot that plays Trapwalk via the REST API.

Starts a fresh run and, every turn, heads for the level exit:
  - Step along the axis with the larger distance to the exit.
  - If that step is refused, try the other directions in random order.
  - Stop when the run is won or lost, or the move budget runs out.

Usage:
    1. Start the server:  uvicorn main:app --reload  (or: python main.py)
    2. Run this bot:      python bots/example_bot.py

Environment variables:
    TRAPWALK_URL  server base URL (default: "http://127.0.0.1:8000")
"""

import os
import random

import httpx

BASE_URL = os.environ.get("TRAPWALK_URL", "http://127.0.0.1:8000")
EXIT_TRAPS = ("next_level", "win")
DIRECTIONS = ["up", "down", "left", "right"]


def _find_exit(state: dict) -> tuple[int, int] | None:
    """Position of the current level's exit trap, if it is on the map."""
    for entity in state["entities"]:
        kind = entity["kind"]
        if kind["kind"] == "trap" and kind["trap"] in EXIT_TRAPS:
            return tuple(entity["position"])
    return None


def _find_player(state: dict) -> tuple[int, int]:
    for entity in state["entities"]:
        if entity["kind"]["kind"] == "player":
            return tuple(entity["position"])
    raise RuntimeError("Server state has no player")


def choose_directions(
    player: tuple[int, int],
    target: tuple[int, int] | None,
    rng: random.Random,
) -> list[str]:
    """Directions to try this turn, best first."""
    others = DIRECTIONS[:]
    rng.shuffle(others)
    if target is None:
        return others

    dx = target[0] - player[0]
    dy = target[1] - player[1]
    horizontal = "right" if dx > 0 else "left" if dx < 0 else None
    vertical = "down" if dy > 0 else "up" if dy < 0 else None
    if abs(dx) >= abs(dy):
        preferred = [d for d in (horizontal, vertical) if d]
    else:
        preferred = [d for d in (vertical, horizontal) if d]
    return preferred + [d for d in others if d not in preferred]


def play(
    client: httpx.Client,
    max_moves: int = 200,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> dict:
    """Play one run and return the final level state.

    Args:
        client: HTTP client pointed at the server.
        max_moves: Give up after this many accepted turns.
        seed: Map seed for the new run.
        rng: Optional Random instance for reproducible tie-breaking.
    """
    rng = rng or random.Random()
    resp = client.post("/game/restart", json={"seed": seed})
    resp.raise_for_status()
    state = resp.json()

    moves = 0
    while moves < max_moves and state["level_state"]["status"] == "playing":
        player = _find_player(state)
        target = _find_exit(state)
        for direction in choose_directions(player, target, rng):
            resp = client.post("/game/move", json={"direction": direction})
            resp.raise_for_status()
            if resp.json()["took_turn"]:
                moves += 1
                break
        else:
            # Boxed in on every side; nothing left to try.
            break

        resp = client.get("/game/state")
        resp.raise_for_status()
        state = resp.json()

    return state["level_state"]


def main() -> None:
    """Play a single run against a running server."""
    client = httpx.Client(base_url=BASE_URL, timeout=10.0)
    print("Starting a new run...")
    level_state = play(client)
    print(f"Finished on level {level_state['level']}: {level_state['status']}")

    resp = client.get("/game/log")
    resp.raise_for_status()
    for event in resp.json()[-10:]:
        print(f"  [turn {event['turn']}] {event['description']}")


if __name__ == "__main__":
    main()
