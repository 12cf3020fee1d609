"""
Round state representation.
RoundState is the aggregate root of a match: both actors, the intake buffer,
resistance territory and the resolved history.
Includes JSON serialization for save/load and transport.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from uneven_waves.engine import (
    DEFAULT_MAX_TURNS,
    DEFAULT_SCORE_TO_WIN,
    DEFAULT_TEMP_TURN_COUNT,
    OUTCOME_RESISTANCE_WIN,
    OUTCOME_TURNS_EXHAUSTED,
)
from uneven_waves.engine.actions import ResistanceAction, SuppressionAction
from uneven_waves.engine.actors import ResistanceActor, SuppressionActor
from uneven_waves.engine.tilemap import Coord, to_coord


def _int(value: Any, default: int) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _ensure_coord_list(value: Any) -> list[Coord]:
    """Parse a list of [x, y] pairs, dropping malformed entries and duplicates."""
    if not isinstance(value, list):
        return []
    coords: list[Coord] = []
    for item in value:
        try:
            coord = to_coord(item)
        except ValueError:
            continue
        if coord not in coords:
            coords.append(coord)
    return coords


def _ensure_temp_tiles(value: Any) -> dict[Coord, int]:
    """Parse [{"coord": [x, y], "remaining": n}, ...]; entries with n < 1 are already expired."""
    if not isinstance(value, list):
        return {}
    tiles: dict[Coord, int] = {}
    for item in value:
        if not isinstance(item, dict):
            continue
        try:
            coord = to_coord(item.get("coord"))
        except ValueError:
            continue
        remaining = _int(item.get("remaining"), 0)
        if remaining >= 1:
            tiles[coord] = remaining
    return tiles


@dataclass
class TurnBuffer:
    """One pending slot per side. A round resolves exactly when both are filled."""
    suppression: SuppressionAction | None = None
    resistance: ResistanceAction | None = None

    def is_full(self) -> bool:
        return self.suppression is not None and self.resistance is not None

    def is_empty(self) -> bool:
        return self.suppression is None and self.resistance is None

    def clear(self) -> None:
        self.suppression = None
        self.resistance = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "suppression": self.suppression.to_dict() if self.suppression else None,
            "resistance": self.resistance.to_dict() if self.resistance else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TurnBuffer":
        if not isinstance(data, dict):
            data = {}
        sup = data.get("suppression")
        res = data.get("resistance")
        return cls(
            suppression=SuppressionAction.from_dict(sup) if isinstance(sup, dict) else None,
            resistance=ResistanceAction.from_dict(res) if isinstance(res, dict) else None,
        )


@dataclass
class ResolvedRound:
    """One entry of the audit log: the pair of actions a round was resolved with."""
    suppression: SuppressionAction
    resistance: ResistanceAction

    def to_dict(self) -> dict[str, Any]:
        return {
            "suppression": self.suppression.to_dict(),
            "resistance": self.resistance.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResolvedRound":
        return cls(
            suppression=SuppressionAction.from_dict(data.get("suppression")),
            resistance=ResistanceAction.from_dict(data.get("resistance")),
        )


def _ensure_history(value: Any) -> list[ResolvedRound]:
    """Parse turn_history, skipping entries that lack a usable action for either side."""
    if not isinstance(value, list):
        return []
    history: list[ResolvedRound] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        try:
            history.append(ResolvedRound.from_dict(item))
        except ValueError:
            continue
    return history


@dataclass
class RoundState:
    """Complete state of one match."""
    resistance: ResistanceActor = field(default_factory=ResistanceActor)
    suppression: SuppressionActor = field(default_factory=SuppressionActor)
    max_turns: int = DEFAULT_MAX_TURNS  # turns the resistance player has to win
    current_turn: int = 0
    temp_turn_count: int = DEFAULT_TEMP_TURN_COUNT  # rounds a new temporary tile survives
    turn_buffer: TurnBuffer = field(default_factory=TurnBuffer)
    turn_history: list[ResolvedRound] = field(default_factory=list)
    resistance_perm_tiles: list[Coord] = field(default_factory=list)
    # coord -> rounds left before it expires; insertion order is the promotion order
    resistance_temp_tiles: dict[Coord, int] = field(default_factory=dict)
    score_to_win: int = DEFAULT_SCORE_TO_WIN  # perm tiles needed for a resistance win
    # None while running, else OUTCOME_RESISTANCE_WIN or OUTCOME_TURNS_EXHAUSTED
    outcome: str | None = None

    @property
    def game_over(self) -> bool:
        return self.outcome is not None

    @property
    def score(self) -> int:
        return len(self.resistance_perm_tiles)

    def is_resistance_controlled(self, coord: Coord) -> bool:
        return coord in self.resistance_temp_tiles or coord in self.resistance_perm_tiles

    def copy(self) -> "RoundState":
        """Return a deep copy of this round state."""
        return deepcopy(self)

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert RoundState to a dictionary for JSON serialization."""
        return {
            "resistance": self.resistance.to_dict(),
            "suppression": self.suppression.to_dict(),
            "max_turns": self.max_turns,
            "current_turn": self.current_turn,
            "temp_turn_count": self.temp_turn_count,
            "turn_buffer": self.turn_buffer.to_dict(),
            "turn_history": [r.to_dict() for r in self.turn_history],
            "resistance_perm_tiles": [list(c) for c in self.resistance_perm_tiles],
            "resistance_temp_tiles": [
                {"coord": list(c), "remaining": n}
                for c, n in self.resistance_temp_tiles.items()
            ],
            "score_to_win": self.score_to_win,
            "outcome": self.outcome,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoundState":
        """Create RoundState from a dictionary (missing or malformed fields fall back to defaults)."""
        if not isinstance(data, dict):
            data = {}
        outcome = data.get("outcome")
        if outcome not in (OUTCOME_RESISTANCE_WIN, OUTCOME_TURNS_EXHAUSTED):
            outcome = None
        perm = _ensure_coord_list(data.get("resistance_perm_tiles"))
        temps = {
            c: n for c, n in _ensure_temp_tiles(data.get("resistance_temp_tiles")).items()
            if c not in perm
        }
        return cls(
            resistance=ResistanceActor.from_dict(data.get("resistance") or {}),
            suppression=SuppressionActor.from_dict(data.get("suppression") or {}),
            max_turns=_int(data.get("max_turns"), DEFAULT_MAX_TURNS),
            current_turn=_int(data.get("current_turn"), 0),
            temp_turn_count=_int(data.get("temp_turn_count"), DEFAULT_TEMP_TURN_COUNT),
            turn_buffer=TurnBuffer.from_dict(data.get("turn_buffer")),
            turn_history=_ensure_history(data.get("turn_history")),
            resistance_perm_tiles=perm,
            resistance_temp_tiles=temps,
            score_to_win=_int(data.get("score_to_win"), DEFAULT_SCORE_TO_WIN),
            outcome=outcome,
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize RoundState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "RoundState":
        """Deserialize RoundState from a JSON string."""
        return cls.from_dict(json.loads(json_str))

    def save(self, filepath: str) -> None:
        """Save RoundState to a JSON file."""
        with open(filepath, "w") as f:
            f.write(self.to_json())

    @classmethod
    def load(cls, filepath: str) -> "RoundState":
        """Load RoundState from a JSON file."""
        with open(filepath, "r") as f:
            return cls.from_json(f.read())


def new_round_state(
    max_turns: int = DEFAULT_MAX_TURNS,
    temp_turn_count: int = DEFAULT_TEMP_TURN_COUNT,
    score_to_win: int = DEFAULT_SCORE_TO_WIN,
) -> RoundState:
    """
    Create the starting state of a match.
    All three settings must be positive.
    """
    for name, value in (
        ("max_turns", max_turns),
        ("temp_turn_count", temp_turn_count),
        ("score_to_win", score_to_win),
    ):
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return RoundState(
        max_turns=max_turns,
        temp_turn_count=temp_turn_count,
        score_to_win=score_to_win,
    )
