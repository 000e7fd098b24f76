import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import globals
from cricket_rules import PLAYERS, VARIANTS, Target
from game_logic import MATCH_TYPES, InvalidMatchConfig, MatchConfig, MatchSession

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


class StartMatchRequest(BaseModel):
    variant: Optional[str] = None
    total_legs: Optional[int] = None
    match_type: str = "custom"
    player_names: list[str] = ["Player 1", "Player 2"]


class ThrowRequest(BaseModel):
    target: str
    multiplier: int = 1


class RestartMatchRequest(BaseModel):
    total_legs: int


# ===============================
# --- Helpers
# ===============================
def no_match_response():
    return JSONResponse({"error": "No match in progress"}, status_code=400)


def state_response(snapshot, message: str):
    return {
        "status": "success" if snapshot.accepted else "rejected",
        "message": message if snapshot.accepted else f"{message}: not allowed right now",
        "game_state": snapshot.to_dict(),
    }


def parse_target(value: str) -> Optional[Target]:
    try:
        return Target(value.upper())
    except ValueError:
        return None


# ===============================
# --- FastAPI App
# ===============================
app = FastAPI(title="Cricket Scorer API", version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info("Cricket Scorer API starting up on %s:%s", globals.HOST, globals.PORT)
    logger.info("Default variant=%s legs=%d", globals.DEFAULT_VARIANT, globals.DEFAULT_TOTAL_LEGS)


@app.post("/start-match")
async def start_match(request: StartMatchRequest):
    """Start a new match, replacing any match in progress."""
    total_legs = request.total_legs
    if total_legs is None and request.match_type == "custom":
        total_legs = globals.DEFAULT_TOTAL_LEGS

    try:
        config = MatchConfig(
            variant=request.variant or globals.DEFAULT_VARIANT,
            total_legs=total_legs,
            match_type=request.match_type,
            player_names=tuple(request.player_names),
        )
    except InvalidMatchConfig as e:
        logger.warning("[start-match] rejected config: %s", e)
        return JSONResponse({"error": str(e)}, status_code=400)

    if globals.current_session is None:
        globals.current_session = MatchSession(config)
    snapshot = globals.current_session.new_match(config)
    return state_response(snapshot, "Match started")


@app.post("/restart-match")
async def restart_match(request: RestartMatchRequest):
    """Start over with the same variant and players."""
    session = globals.current_session
    if session is None:
        return no_match_response()
    try:
        snapshot = session.start_match(request.total_legs)
    except InvalidMatchConfig as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    return state_response(snapshot, "Match restarted")


@app.post("/throw")
async def record_throw(request: ThrowRequest):
    session = globals.current_session
    if session is None:
        return no_match_response()
    snapshot = session.record_throw(request.target, request.multiplier)
    return state_response(snapshot, "Throw recorded")


@app.post("/undo")
async def undo_last():
    session = globals.current_session
    if session is None:
        return no_match_response()
    return state_response(session.undo_last(), "Last throw undone")


@app.post("/switch-player")
async def switch_player():
    session = globals.current_session
    if session is None:
        return no_match_response()
    return state_response(session.switch_player(), "Player switched")


@app.post("/reset-leg")
async def reset_leg():
    session = globals.current_session
    if session is None:
        return no_match_response()
    return state_response(session.reset_leg(), "Leg reset")


@app.post("/advance-leg")
async def advance_leg():
    session = globals.current_session
    if session is None:
        return no_match_response()
    return state_response(session.advance_leg(), "Leg completed")


@app.get("/game-state")
async def get_game_state():
    session = globals.current_session
    if session is None:
        return no_match_response()
    return {
        "status": "success",
        "game_state": session.snapshot().to_dict(),
    }


@app.get("/stats/{player}")
async def get_stats(player: int):
    session = globals.current_session
    if session is None:
        return no_match_response()
    if player not in PLAYERS:
        return JSONResponse({"error": f"Unknown player {player}"}, status_code=404)
    return {
        "status": "success",
        "player": player,
        "name": session.config.player_names[player - 1],
        "stats": session.get_stats(player).to_dict(),
    }


@app.get("/targets/{target}")
async def get_target(target: str):
    """Whether a target is locked and which multipliers the thrower may use on it."""
    session = globals.current_session
    if session is None:
        return no_match_response()
    parsed = parse_target(target)
    if parsed is None or parsed not in session.variant:
        return JSONResponse({"error": f"Unknown target {target!r}"}, status_code=404)
    return {
        "status": "success",
        "target": parsed.value,
        "disabled": session.is_target_disabled(parsed),
        "multipliers": {m: session.is_multiplier_available(parsed, m) for m in (1, 2, 3)},
    }


@app.get("/")
def root():
    return {
        "status": "Cricket Scorer API is running",
        "version": API_VERSION,
        "variants": sorted(VARIANTS),
        "match_types": list(MATCH_TYPES),
        "match_in_progress": globals.current_session is not None,
        "endpoints": [
            "/start-match (POST)",
            "/restart-match (POST)",
            "/throw (POST)",
            "/undo (POST)",
            "/switch-player (POST)",
            "/reset-leg (POST)",
            "/advance-leg (POST)",
            "/game-state (GET)",
            "/stats/{player} (GET)",
            "/targets/{target} (GET)",
            "/healthz (GET)",
        ],
    }


@app.get("/ping")
def ping():
    return {"pong": True}


@app.get("/healthz")
def healthz():
    import psutil
    memory_info = psutil.virtual_memory()

    return {
        "ok": True,
        "memory_usage": {
            "total": f"{memory_info.total / (1024**3):.2f} GB",
            "available": f"{memory_info.available / (1024**3):.2f} GB",
            "percent": f"{memory_info.percent:.1f}%",
        },
    }


# ===============================
# --- Run
# ===============================
if __name__ == "__main__":
    logging.basicConfig(
        level=globals.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=globals.HOST, port=globals.PORT, log_level=globals.LOG_LEVEL, access_log=True)
