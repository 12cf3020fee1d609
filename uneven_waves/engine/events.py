"""
Round events for UI hooks and logging.
Events describe what happened during intake and resolution.
"""

from dataclasses import dataclass
from typing import Any

from uneven_waves.engine.tilemap import Coord


@dataclass
class RoundEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Intake events
ACTION_BUFFERED = "action_buffered"

# Territory events
TEMPORARY_GAINED = "temporary_gained"
POINT_GAINED = "point_gained"
TEMPORARY_EXPIRED = "temporary_expired"

# Turn events
ROUND_RESOLVED = "round_resolved"
TURN_ADVANCED = "turn_advanced"

# End of game
GAME_OVER = "game_over"


# ===== Event Factory Functions =====

def action_buffered(side: str, turn: int, replaced: bool) -> RoundEvent:
    """replaced is True when an unresolved action for the same side was overwritten."""
    return RoundEvent(ACTION_BUFFERED, {
        "side": side,
        "turn": turn,
        "replaced": replaced,
    })


def temporary_gained(coord: Coord, remaining: int) -> RoundEvent:
    return RoundEvent(TEMPORARY_GAINED, {
        "coord": list(coord),
        "remaining": remaining,
    })


def point_gained(coord: Coord, score: int) -> RoundEvent:
    return RoundEvent(POINT_GAINED, {
        "coord": list(coord),
        "score": score,
    })


def temporary_expired(coord: Coord) -> RoundEvent:
    return RoundEvent(TEMPORARY_EXPIRED, {"coord": list(coord)})


def round_resolved(turn: int, public_coord: Coord, suppression_zone: list[Coord], results: list[dict]) -> RoundEvent:
    """
    Emitted once per resolution, after history is appended.
    The private coordinate is deliberately left out; events are shown to both sides.
    """
    return RoundEvent(ROUND_RESOLVED, {
        "turn": turn,
        "public_coord": list(public_coord),
        "suppression_zone": [list(c) for c in suppression_zone],
        "results": results,
    })


def turn_advanced(old_turn: int, new_turn: int) -> RoundEvent:
    return RoundEvent(TURN_ADVANCED, {
        "old_turn": old_turn,
        "new_turn": new_turn,
    })


def game_over(outcome: str, score: int, score_to_win: int, turn: int) -> RoundEvent:
    """
    Emitted when the match reaches a terminal state.

    Args:
        outcome: "resistance_win" or "turns_exhausted"
        score: permanent tiles held by resistance
        score_to_win: the threshold resistance needed
        turn: current_turn when the game ended
    """
    return RoundEvent(GAME_OVER, {
        "outcome": outcome,
        "score": score,
        "score_to_win": score_to_win,
        "turn": turn,
    })
