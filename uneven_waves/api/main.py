"""
FastAPI backend for Uneven Waves.
Players register, open a match on one side, and an opponent joins by code.
Each side submits one action per round; the round resolves when both are in.
"""

import json
import secrets
import string
import threading
import uuid
from typing import Any, Literal

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from .database import get_db, init_db
from .models import Match, Player
from .auth import (
    check_credentials,
    current_player,
    hash_password,
    issue_token,
    verify_password,
)

from uneven_waves.config import CORS_ORIGINS, DEFAULT_RULES, JOIN_CODE_LENGTH
from uneven_waves.engine import RESISTANCE, SUPPRESSION
from uneven_waves.engine.actions import Action, claim, suppress
from uneven_waves.engine.queries import get_round_summary, public_view
from uneven_waves.engine.round_manager import (
    GameOverError,
    intake_resistance_action,
    intake_suppression_action,
)
from uneven_waves.engine.state import RoundState, new_round_state

app = FastAPI(
    title="Uneven Waves API",
    description="Backend API for Uneven Waves - an asymmetric territory-capture game",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Print method and path of failing requests so 500s can be traced to an endpoint."""
    try:
        response = await call_next(request)
    except Exception:
        print(f"[500] {request.method} {request.url.path} (exception)", flush=True)
        raise
    if response.status_code >= 500:
        print(f"[{response.status_code}] {request.method} {request.url.path}", flush=True)
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    """Return a JSON 500 with CORS headers so the frontend can read the error."""
    import traceback
    traceback.print_exc()
    origin = request.headers.get("origin")
    allow_origin = origin if origin in CORS_ORIGINS else CORS_ORIGINS[0]
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc)},
        headers={
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Credentials": "true",
        },
    )


# One lock per match: intake and the resolution it triggers must not interleave
_match_locks: dict[str, threading.Lock] = {}
_match_locks_guard = threading.Lock()

JOIN_CODE_CHARS = string.ascii_uppercase + string.digits


# ===== Pydantic Models =====

class RegisterRequest(BaseModel):
    username: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateMatchRequest(BaseModel):
    name: str
    side: Literal["resistance", "suppression"] = RESISTANCE
    max_turns: int | None = None
    temp_turn_count: int | None = None
    score_to_win: int | None = None


class JoinMatchRequest(BaseModel):
    join_code: str


class ClaimRequest(BaseModel):
    public_coord: list[int]
    private_coord: list[int] | None = None  # defaults to public_coord


class SuppressRequest(BaseModel):
    suppression_zone: list[list[int]]


# ===== Helper Functions =====

def _lock_for(match_id: str) -> threading.Lock:
    with _match_locks_guard:
        return _match_locks.setdefault(match_id, threading.Lock())


def generate_join_code(db: Session) -> str:
    """Generate a unique join code."""
    for _ in range(20):
        code = "".join(secrets.choice(JOIN_CODE_CHARS) for _ in range(JOIN_CODE_LENGTH))
        if db.query(Match).filter(Match.join_code == code).first() is None:
            return code
    raise HTTPException(status_code=500, detail="Could not generate unique join code")


def _get_match_row(match_id: str, db: Session) -> Match:
    row = db.get(Match, match_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Match {match_id} not found")
    return row


def load_state(row: Match) -> RoundState:
    """Parse the stored round state; a corrupt row is treated as missing."""
    try:
        return RoundState.from_json(row.round_state)
    except (TypeError, ValueError):
        raise HTTPException(status_code=404, detail=f"Match {row.id} not found")


def save_state(row: Match, state: RoundState, db: Session) -> None:
    row.round_state = state.to_json(indent=None)
    if state.game_over:
        row.status = "finished"
    db.commit()


def match_meta(row: Match, player: Player) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "join_code": row.join_code,
        "status": row.status,
        "created_at": row.created_at.isoformat() if row.created_at else None,
        "seat": row.seat_of(player.id),
        "open_seat": (
            RESISTANCE if row.resistance_player_id is None
            else SUPPRESSION if row.suppression_player_id is None
            else None
        ),
    }


def player_dict(player: Player) -> dict[str, Any]:
    return {"id": player.id, "username": player.username}


def _submit(match_id: str, side: str, action: Action, player: Player, db: Session) -> dict[str, Any]:
    """Feed one side's action into the match, holding its lock across load, intake and save."""
    with _lock_for(match_id):
        row = _get_match_row(match_id, db)
        if row.seat_of(player.id) != side:
            raise HTTPException(status_code=403, detail=f"You are not playing {side} in this match")
        if row.status == "lobby":
            raise HTTPException(status_code=400, detail="Waiting for an opponent to join")

        state = load_state(row)
        try:
            if side == RESISTANCE:
                events = intake_resistance_action(state, action)
            else:
                events = intake_suppression_action(state, action)
        except GameOverError as e:
            raise HTTPException(status_code=409, detail=str(e))

        save_state(row, state, db)
        return {
            "state": public_view(state, side),
            "events": [e.to_dict() for e in events],
        }


@app.on_event("startup")
def on_startup():
    init_db()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Uneven Waves API", "version": app.version}


@app.get("/rules")
def get_rules():
    """Default rule settings for a new match."""
    return {"rules": DEFAULT_RULES}


# ----- Auth -----

@app.post("/auth/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    problem = check_credentials(request.username, request.password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)
    if db.query(Player).filter(Player.username == request.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    player = Player(
        id=str(uuid.uuid4()),
        username=request.username,
        password_hash=hash_password(request.password),
    )
    db.add(player)
    db.commit()
    return {"access_token": issue_token(player.id), "player": player_dict(player)}


@app.post("/auth/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.username == request.username).first()
    if not player or not verify_password(request.password, player.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"access_token": issue_token(player.id), "player": player_dict(player)}


@app.get("/auth/me")
def auth_me(player: Player = Depends(current_player)):
    return player_dict(player)


# ----- Matches -----

@app.post("/matches")
def create_match(
    request: CreateMatchRequest,
    player: Player = Depends(current_player),
    db: Session = Depends(get_db),
):
    """Open a match on the requested side. The opponent joins with the returned code."""
    rules = dict(DEFAULT_RULES)
    for key in rules:
        value = getattr(request, key)
        if value is not None:
            rules[key] = value
    try:
        state = new_round_state(**rules)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    row = Match(
        id=str(uuid.uuid4()),
        name=request.name,
        join_code=generate_join_code(db),
        created_by=player.id,
        status="lobby",
        round_state=state.to_json(indent=None),
    )
    if request.side == RESISTANCE:
        row.resistance_player_id = player.id
    else:
        row.suppression_player_id = player.id
    db.add(row)
    db.commit()
    return {"match_id": row.id, "join_code": row.join_code, "side": request.side, "rules": rules}


@app.post("/matches/join")
def join_match(
    request: JoinMatchRequest,
    player: Player = Depends(current_player),
    db: Session = Depends(get_db),
):
    """Take the open seat of a match by its join code."""
    code = request.join_code.strip().upper()
    if len(code) != JOIN_CODE_LENGTH:
        raise HTTPException(status_code=400, detail=f"Join code must be {JOIN_CODE_LENGTH} characters")
    row = db.query(Match).filter(Match.join_code == code).first()
    if not row:
        raise HTTPException(status_code=404, detail="Match not found")
    with _lock_for(row.id):
        db.refresh(row)
        seat = row.seat_of(player.id)
        if seat is not None:
            return {"match_id": row.id, "side": seat, "message": "Already in match"}
        if row.status != "lobby":
            raise HTTPException(status_code=400, detail="Match already started")
        if row.resistance_player_id is None:
            row.resistance_player_id = player.id
            seat = RESISTANCE
        else:
            row.suppression_player_id = player.id
            seat = SUPPRESSION
        row.status = "active"
        db.commit()
    return {"match_id": row.id, "side": seat, "name": row.name}


@app.get("/matches")
def list_my_matches(player: Player = Depends(current_player), db: Session = Depends(get_db)):
    """Unfinished matches the current player sits in."""
    rows = (
        db.query(Match)
        .filter(Match.status != "finished")
        .filter(or_(Match.resistance_player_id == player.id, Match.suppression_player_id == player.id))
        .order_by(Match.created_at.desc())
        .all()
    )
    matches = []
    for row in rows:
        entry = match_meta(row, player)
        try:
            entry["summary"] = get_round_summary(RoundState.from_json(row.round_state))
        except (TypeError, ValueError):
            entry["summary"] = None
        matches.append(entry)
    return {"matches": matches}


@app.get("/matches/{match_id}")
def get_match(match_id: str, player: Player = Depends(current_player), db: Session = Depends(get_db)):
    """Match metadata plus the state as the caller's side may see it."""
    row = _get_match_row(match_id, db)
    state = load_state(row)
    return {"match": match_meta(row, player), "state": public_view(state, row.seat_of(player.id))}


@app.get("/matches/{match_id}/history")
def get_match_history(match_id: str, player: Player = Depends(current_player), db: Session = Depends(get_db)):
    row = _get_match_row(match_id, db)
    state = load_state(row)
    return {"history": public_view(state, row.seat_of(player.id))["history"]}


@app.post("/matches/{match_id}/claim")
def do_claim(
    match_id: str,
    request: ClaimRequest,
    player: Player = Depends(current_player),
    db: Session = Depends(get_db),
):
    """Submit this round's resistance claim. Replaces an unresolved earlier claim."""
    try:
        action = claim(request.public_coord, request.private_coord)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _submit(match_id, RESISTANCE, action, player, db)


@app.post("/matches/{match_id}/suppress")
def do_suppress(
    match_id: str,
    request: SuppressRequest,
    player: Player = Depends(current_player),
    db: Session = Depends(get_db),
):
    """Submit this round's suppression zone. Replaces an unresolved earlier zone."""
    try:
        action = suppress(request.suppression_zone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _submit(match_id, SUPPRESSION, action, player, db)


@app.delete("/matches/{match_id}")
def delete_match(match_id: str, player: Player = Depends(current_player), db: Session = Depends(get_db)):
    """Delete a match. Only its creator may."""
    row = _get_match_row(match_id, db)
    if row.created_by != player.id:
        raise HTTPException(status_code=403, detail="Only the creator can delete this match")
    with _lock_for(match_id):
        db.delete(row)
        db.commit()
    with _match_locks_guard:
        _match_locks.pop(match_id, None)
    return {"message": f"Match {match_id} deleted"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
