"""
Round management logic.
Intake buffers one action per side; when both are present the round resolves:
capture results are computed, applied, the win is checked, timers and the turn
counter advance, and the pair is appended to the history.

Intake and resolution mutate the given state in place and return the events
they produced. apply_action() is the copy-on-write entry point.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from uneven_waves.engine import (
    OUTCOME_RESISTANCE_WIN,
    OUTCOME_TURNS_EXHAUSTED,
    RESISTANCE,
    SUPPRESSION,
)
from uneven_waves.engine.actions import Action, ResistanceAction, SuppressionAction
from uneven_waves.engine.events import (
    RoundEvent,
    action_buffered,
    game_over,
    point_gained,
    round_resolved,
    temporary_expired,
    temporary_gained,
    turn_advanced,
)
from uneven_waves.engine.state import ResolvedRound, RoundState
from uneven_waves.engine.tilemap import Coord, neighbors_of


class GameOverError(ValueError):
    """Raised when an action arrives after the match reached a terminal state."""

    def __init__(self, outcome: str):
        super().__init__(f"Game is over ({outcome}). No further rounds are accepted.")
        self.outcome = outcome


class RoundInvariantError(RuntimeError):
    """The capture rule and result application disagree. Indicates a bug, never bad input."""


# ===== Round Results =====

@dataclass(frozen=True)
class ResistanceGainsPoint:
    """A temporary tile is fully enclosed and becomes permanent."""
    coord: Coord

    def to_dict(self) -> dict[str, Any]:
        return {"type": "resistance_gains_point", "coord": list(self.coord)}


@dataclass(frozen=True)
class ResistanceGainsTemporary:
    """A claim landed outside the suppression zone and becomes a temporary tile."""
    coord: Coord

    def to_dict(self) -> dict[str, Any]:
        return {"type": "resistance_gains_temporary", "coord": list(self.coord)}


RoundResult = ResistanceGainsPoint | ResistanceGainsTemporary


# ===== Intake =====

def _ensure_running(state: RoundState) -> None:
    if state.outcome is not None:
        raise GameOverError(state.outcome)


def intake_suppression_action(state: RoundState, action: SuppressionAction) -> list[RoundEvent]:
    """
    Buffer the suppression action for this round, then resolve if resistance has also acted.
    A second action before resolution replaces the first (last write wins).
    """
    _ensure_running(state)
    if not isinstance(action, SuppressionAction):
        raise TypeError(f"Expected SuppressionAction, got {type(action).__name__}")

    replaced = state.turn_buffer.suppression is not None
    if replaced:
        # The superseded action never took effect; drop it from the history too
        state.suppression.undo_action()
    state.turn_buffer.suppression = action
    state.suppression.take_action(action)

    events = [action_buffered(SUPPRESSION, state.current_turn, replaced)]
    events.extend(process_turn_buffer(state))
    return events


def intake_resistance_action(state: RoundState, action: ResistanceAction) -> list[RoundEvent]:
    """
    Buffer the resistance action for this round, then resolve if suppression has also acted.
    A second action before resolution replaces the first (last write wins).
    """
    _ensure_running(state)
    if not isinstance(action, ResistanceAction):
        raise TypeError(f"Expected ResistanceAction, got {type(action).__name__}")

    replaced = state.turn_buffer.resistance is not None
    if replaced:
        state.resistance.undo_action()
    state.turn_buffer.resistance = action
    state.resistance.take_action(action)

    events = [action_buffered(RESISTANCE, state.current_turn, replaced)]
    events.extend(process_turn_buffer(state))
    return events


def process_turn_buffer(state: RoundState) -> list[RoundEvent]:
    """If the turn buffer is full, resolve the round."""
    if state.turn_buffer.is_full():
        return resolve_turn(state)
    return []


# ===== Resolution =====

def resolve_turn(state: RoundState) -> list[RoundEvent]:
    """
    Resolve the buffered pair of actions.

    Order:
    1. Compute capture results from the pre-round territory
    2. Apply them
    3. Check for a resistance win
    4. Decrement timers / advance the turn (may end the game on max_turns)
    5. Append the pair to turn_history and empty the buffer
    """
    suppression = state.turn_buffer.suppression
    resistance = state.turn_buffer.resistance
    if suppression is None or resistance is None:
        raise RoundInvariantError("resolve_turn called without both actions buffered")

    turn = state.current_turn
    events: list[RoundEvent] = []

    results = round_results(state, resistance, suppression)
    events.extend(process_results(state, results))
    events.extend(_check_victory(state))
    events.extend(decrement_timers(state))

    state.turn_history.append(ResolvedRound(suppression=suppression, resistance=resistance))
    state.turn_buffer.clear()

    events.append(round_resolved(
        turn,
        resistance.public_coord,
        sorted(suppression.suppression_zone),
        [r.to_dict() for r in results],
    ))
    return events


def number_of_suppressed_neighbors(state: RoundState, coord: Coord, temps: Iterable[Coord]) -> int:
    """Count the neighbors of coord held by neither a permanent nor a temporary resistance tile."""
    temp_set = set(temps)
    return sum(
        1 for neighbor in neighbors_of(coord)
        if neighbor not in temp_set and neighbor not in state.resistance_perm_tiles
    )


def round_results(
    state: RoundState,
    resistance: ResistanceAction,
    suppression: SuppressionAction,
) -> list[RoundResult]:
    """
    Compare a resistance and a suppression action against the current territory.
    Does not mutate state.

    - A claim that is not already resistance territory and lies outside the
      suppression zone becomes a new temporary tile.
    - Every temporary tile (the new one included) whose four neighbors are all
      resistance territory is promoted.

    The new temporary result comes first, then promotions in temp-tile order.
    """
    results: list[RoundResult] = []
    temps: list[Coord] = list(state.resistance_temp_tiles)
    target = resistance.public_coord

    if not state.is_resistance_controlled(target) and not suppression.covers(target):
        results.append(ResistanceGainsTemporary(target))
        temps.append(target)

    for coord in temps:
        if number_of_suppressed_neighbors(state, coord, temps) == 0:
            # Totally surrounded
            results.append(ResistanceGainsPoint(coord))

    return results


def process_results(state: RoundState, results: list[RoundResult]) -> list[RoundEvent]:
    """Apply round results in order."""
    events: list[RoundEvent] = []
    for result in results:
        if isinstance(result, ResistanceGainsPoint):
            if result.coord not in state.resistance_temp_tiles:
                raise RoundInvariantError(
                    f"Cannot promote {result.coord}: not a temporary resistance tile"
                )
            del state.resistance_temp_tiles[result.coord]
            state.resistance_perm_tiles.append(result.coord)
            events.append(point_gained(result.coord, state.score))
        elif isinstance(result, ResistanceGainsTemporary):
            state.resistance_temp_tiles[result.coord] = state.temp_turn_count
            events.append(temporary_gained(result.coord, state.temp_turn_count))
        else:
            raise RoundInvariantError(f"Unknown round result: {result!r}")
    return events


def _check_victory(state: RoundState) -> list[RoundEvent]:
    """End the game with a resistance win once enough permanent tiles are held."""
    if state.outcome is None and state.score >= state.score_to_win:
        state.outcome = OUTCOME_RESISTANCE_WIN
        return [game_over(state.outcome, state.score, state.score_to_win, state.current_turn)]
    return []


def decrement_timers(state: RoundState) -> list[RoundEvent]:
    """
    Tick every temporary tile down by one and drop the ones that reach 0.
    Then advance the turn counter; reaching max_turns ends the game unless it
    already ended this round.
    """
    events: list[RoundEvent] = []

    for coord in list(state.resistance_temp_tiles):
        remaining = state.resistance_temp_tiles[coord] - 1
        if remaining <= 0:
            # Expired unpromoted: lost
            del state.resistance_temp_tiles[coord]
            events.append(temporary_expired(coord))
        else:
            state.resistance_temp_tiles[coord] = remaining

    if state.current_turn < state.max_turns:
        old_turn = state.current_turn
        state.current_turn += 1
        events.append(turn_advanced(old_turn, state.current_turn))

    if state.current_turn >= state.max_turns and state.outcome is None:
        state.outcome = OUTCOME_TURNS_EXHAUSTED
        events.append(game_over(state.outcome, state.score, state.score_to_win, state.current_turn))

    return events


# ===== Reducer entry points =====

def apply_action(state: RoundState, action: Action) -> tuple[RoundState, list[RoundEvent]]:
    """
    Apply a single action to a copy of state.

    Returns:
        Tuple of (new_state, events). The input state is left untouched.
    """
    _ensure_running(state)
    new_state = state.copy()

    if isinstance(action, ResistanceAction):
        events = intake_resistance_action(new_state, action)
    elif isinstance(action, SuppressionAction):
        events = intake_suppression_action(new_state, action)
    else:
        raise ValueError(f"Unknown action type: {type(action).__name__}")

    return new_state, events


def replay_rounds(
    initial_state: RoundState,
    rounds: list[ResolvedRound],
) -> tuple[RoundState, list[RoundEvent]]:
    """
    Replay resolved rounds from an initial state.
    Territory is derived from the history alone, so this doubles as an audit of turn_history.

    Args:
        initial_state: Starting state (its rule settings are used)
        rounds: Resolved (suppression, resistance) pairs, oldest first

    Returns:
        Tuple of (final_state, all_events)
    """
    current_state = initial_state.copy()
    all_events: list[RoundEvent] = []

    for resolved in rounds:
        all_events.extend(intake_suppression_action(current_state, resolved.suppression))
        all_events.extend(intake_resistance_action(current_state, resolved.resistance))

    return current_state, all_events
