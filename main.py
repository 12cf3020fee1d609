"""
Main entry point for the Uneven Waves round engine.
Plays a few scripted scenarios and prints what the engine reports.
"""

from uneven_waves.engine.actions import claim, suppress
from uneven_waves.engine.queries import get_round_summary, render_board
from uneven_waves.engine.round_manager import (
    GameOverError,
    intake_resistance_action,
    intake_suppression_action,
    replay_rounds,
)
from uneven_waves.engine.state import new_round_state


def play_round(state, public_coord, zone, private_coord=None):
    """Feed one suppression and one resistance action; print the resulting events."""
    events = intake_suppression_action(state, suppress(zone))
    events += intake_resistance_action(state, claim(public_coord, private_coord))
    print(f"  claim {public_coord} vs zone {zone}")
    for event in events:
        if event.type != "action_buffered":
            print(f"    - {event.type}: {event.payload}")


def print_board(state):
    for row in render_board(state):
        print(f"  {row}")
    print(f"  {get_round_summary(state)}")


def main():
    print("Uneven Waves - round engine demo")
    print("=" * 60)

    # ===== SCENARIO 1: Suppressed claim =====
    print("\n[SCENARIO 1: Claim inside the suppression zone]")
    state = new_round_state()
    play_round(state, (0, 0), [(0, 0), (0, 1), (1, 0), (1, 1)])
    print(f"  Temporary tiles: {dict(state.resistance_temp_tiles)}")

    # ===== SCENARIO 2: Temporary tile expires =====
    print("\n[SCENARIO 2: Unsupported claim runs out of time]")
    state = new_round_state()
    play_round(state, (0, 0), [(5, 5)])
    for _ in range(state.temp_turn_count - 1):
        play_round(state, (9, 9), [(9, 9)])
    print(f"  Temporary tiles: {dict(state.resistance_temp_tiles)}")

    # ===== SCENARIO 3: Enclosure and a resistance win =====
    # With the default 3-round timer at most three temporary tiles are alive at
    # once, too few to enclose a cell from an empty board; give tiles 5 rounds.
    print("\n[SCENARIO 3: Enclose (0, 0), then (0, -1), to win 2-0]")
    state = new_round_state(temp_turn_count=5, score_to_win=2)
    for coord in [(0, 0), (0, 1), (1, 0), (0, -1), (-1, 0)]:
        play_round(state, coord, [(5, 5)])
    print_board(state)
    for coord in [(1, -1), (0, -2), (-1, -1)]:
        play_round(state, coord, [(3, 3), (3, 4)])
    print_board(state)

    try:
        intake_resistance_action(state, claim((7, 7)))
    except GameOverError as e:
        print(f"  ✓ Further intake rejected: {e}")

    # ===== SCENARIO 4: History replays to the same territory =====
    print("\n[SCENARIO 4: Replay turn_history]")
    replayed, _ = replay_rounds(new_round_state(temp_turn_count=5, score_to_win=2), state.turn_history)
    same = (
        replayed.resistance_perm_tiles == state.resistance_perm_tiles
        and replayed.resistance_temp_tiles == state.resistance_temp_tiles
        and replayed.outcome == state.outcome
    )
    print(f"  Rounds replayed: {len(state.turn_history)}, territory matches: {same}")


if __name__ == "__main__":
    main()
