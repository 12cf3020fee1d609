"""
Read-only queries over RoundState.
Validation without mutation, per-side projections for transports, and board views.
"""

from dataclasses import dataclass
from typing import Any

from uneven_waves.engine import RESISTANCE, SIDES, SUPPRESSION
from uneven_waves.engine.actions import Action, ResistanceAction, SuppressionAction
from uneven_waves.engine.state import RoundState
from uneven_waves.engine.tilemap import Coord, Tile, TileState, to_coord


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error}


# ===== Action Validation =====

def validate_action(state: RoundState, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with error message.
    Claims on occupied cells or inside the zone are legal; they just produce no result.
    """
    if state.outcome is not None:
        return ValidationResult(False, f"Game is over ({state.outcome}).")

    try:
        if isinstance(action, ResistanceAction):
            to_coord(action.public_coord)
            to_coord(action.private_coord)
        elif isinstance(action, SuppressionAction):
            for coord in action.suppression_zone:
                to_coord(coord)
        else:
            return ValidationResult(False, f"Unknown action type: {type(action).__name__}")
    except ValueError as e:
        return ValidationResult(False, str(e))

    return ValidationResult(True)


# ===== State Queries =====

def pending_sides(state: RoundState) -> list[str]:
    """Sides that have an action waiting in the buffer for the current round."""
    pending = []
    if state.turn_buffer.resistance is not None:
        pending.append(RESISTANCE)
    if state.turn_buffer.suppression is not None:
        pending.append(SUPPRESSION)
    return pending


def awaiting_sides(state: RoundState) -> list[str]:
    """Sides the current round is still waiting on (empty once the game is over)."""
    if state.outcome is not None:
        return []
    pending = pending_sides(state)
    return [side for side in SIDES if side not in pending]


def get_tiles(state: RoundState, zone: list[Coord] | None = None) -> list[Tile]:
    """
    All resistance tiles, permanent first. Cells of zone that are not
    resistance territory are added as suppressed tiles.
    """
    tiles = [Tile(c, TileState.RESISTANCE) for c in state.resistance_perm_tiles]
    tiles.extend(Tile(c, TileState.TEMPORARY_RESISTANCE) for c in state.resistance_temp_tiles)
    for coord in zone or []:
        if not state.is_resistance_controlled(coord):
            tiles.append(Tile(coord, TileState.SUPPRESSED))
    return tiles


def public_view(state: RoundState, viewer: str | None = None) -> dict[str, Any]:
    """
    Serializable projection of the state for one side.

    Pending buffered actions are never included, only which sides have acted.
    The resistance private_coord is hidden from everyone except the resistance
    player until the game is over.
    """
    reveal_private = viewer == RESISTANCE or state.outcome is not None
    history = []
    for number, resolved in enumerate(state.turn_history):
        entry = {
            "round": number,
            "suppression_zone": [list(c) for c in sorted(resolved.suppression.suppression_zone)],
            "public_coord": list(resolved.resistance.public_coord),
        }
        if reveal_private:
            entry["private_coord"] = list(resolved.resistance.private_coord)
        history.append(entry)

    return {
        "viewer": viewer,
        "current_turn": state.current_turn,
        "max_turns": state.max_turns,
        "temp_turn_count": state.temp_turn_count,
        "score": state.score,
        "score_to_win": state.score_to_win,
        "outcome": state.outcome,
        "game_over": state.game_over,
        "resistance_perm_tiles": [list(c) for c in state.resistance_perm_tiles],
        "resistance_temp_tiles": [
            {"coord": list(c), "remaining": n} for c, n in state.resistance_temp_tiles.items()
        ],
        "pending_sides": pending_sides(state),
        "awaiting_sides": awaiting_sides(state),
        "history": history,
    }


def render_board(state: RoundState, margin: int = 1, zone: list[Coord] | None = None) -> list[str]:
    """
    Text rows of the smallest box containing every known tile, padded by margin.
    North is up. '#' permanent, digit = temporary with that many rounds left,
    'x' suppressed, '.' empty.
    """
    tiles = get_tiles(state, zone)
    coords = [t.coord for t in tiles] or [(0, 0)]
    min_x = min(c[0] for c in coords) - margin
    max_x = max(c[0] for c in coords) + margin
    min_y = min(c[1] for c in coords) - margin
    max_y = max(c[1] for c in coords) + margin

    by_coord = {t.coord: t for t in tiles}
    rows = []
    for y in range(max_y, min_y - 1, -1):
        cells = []
        for x in range(min_x, max_x + 1):
            tile = by_coord.get((x, y))
            if tile is None:
                cells.append(".")
            elif tile.state == TileState.RESISTANCE:
                cells.append("#")
            elif tile.state == TileState.TEMPORARY_RESISTANCE:
                cells.append(str(min(state.resistance_temp_tiles[tile.coord], 9)))
            else:
                cells.append("x")
        rows.append(f"{y:>4} " + " ".join(cells))
    rows.append("     " + " ".join(str(x)[-1] for x in range(min_x, max_x + 1)))
    return rows


def get_round_summary(state: RoundState) -> dict[str, Any]:
    """Short status used by the CLI and the match list."""
    return {
        "turn": state.current_turn,
        "max_turns": state.max_turns,
        "score": state.score,
        "score_to_win": state.score_to_win,
        "temporary_tiles": len(state.resistance_temp_tiles),
        "outcome": state.outcome,
        "awaiting": awaiting_sides(state),
    }
