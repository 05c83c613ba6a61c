"""Turn submission, frame input, render state, and game log endpoints."""

from fastapi import APIRouter, HTTPException, Request

from engine.turn import advance_frame, render_view, restart_game, take_turn
from models.actions import FrameRequest, MoveRequest, RestartRequest, TurnResult
from models.game_state import GameState, RenderView

router = APIRouter()


def _get_game(request: Request) -> GameState:
    """Get the singleton game from app state."""
    return request.app.state.game


@router.get("/state", response_model=RenderView)
def get_game_state(request: Request) -> RenderView:
    """Get everything a renderer needs to draw the current frame."""
    return render_view(_get_game(request))


@router.post("/move", response_model=TurnResult)
def submit_move(body: MoveRequest, request: Request) -> TurnResult:
    """Take one turn for a single key press.

    A blocked move is not an error: the result just reports took_turn=False.
    """
    game_state = _get_game(request)
    if game_state.level_state.is_terminal:
        raise HTTPException(
            status_code=400,
            detail=f"Game is over (status: {game_state.level_state.status.value})",
        )
    return take_turn(game_state, body.direction)


@router.post("/frame", response_model=TurnResult | None)
def submit_frame(body: FrameRequest, request: Request) -> TurnResult | None:
    """Report the key held this frame; a turn runs only on a fresh press."""
    return advance_frame(_get_game(request), body.held)


@router.post("/restart", response_model=RenderView)
def restart(request: Request, body: RestartRequest | None = None) -> RenderView:
    """Throw away the current run and start a new one."""
    seed = body.seed if body is not None else None
    request.app.state.game = restart_game(_get_game(request), seed=seed)
    return render_view(request.app.state.game)


@router.get("/log")
def get_game_log(request: Request) -> list[dict]:
    """Get the event log for the current run."""
    game_state = _get_game(request)
    return [event.model_dump(mode="json") for event in game_state.event_log]
