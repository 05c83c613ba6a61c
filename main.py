"""FastAPI app entry point for Trapwalk."""

import logging

from fastapi import FastAPI

from api.game import router as game_router
from config import LOG_LEVEL, MAP_SEED
from engine.turn import create_game

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Trapwalk",
    description="A headless turn engine for a trap-and-monster grid roguelike",
    version="0.1.0",
)

app.state.game = create_game(seed=MAP_SEED)

app.include_router(game_router, prefix="/game", tags=["Game"])


@app.get("/")
def root() -> dict:
    """Root endpoint returning server info."""
    return {"name": "Trapwalk", "version": "0.1.0", "status": "running"}


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"healthy": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000, log_level=LOG_LEVEL.lower())
