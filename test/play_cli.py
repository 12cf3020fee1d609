#!/usr/bin/env python3
"""
Interactive hot-seat CLI for the Uneven Waves round engine.
Run: python test/play_cli.py [save.json]
"""

import sys

from uneven_waves.engine import RESISTANCE, SUPPRESSION
from uneven_waves.engine.actions import claim, suppress
from uneven_waves.engine.queries import awaiting_sides, render_board, validate_action
from uneven_waves.engine.round_manager import apply_action
from uneven_waves.engine.state import RoundState, new_round_state


def clear_screen():
    print("\n" * 2)


def print_header(state):
    print("=" * 60)
    print(
        f"  TURN {state.current_turn}/{state.max_turns} | SCORE {state.score}/{state.score_to_win}"
        f" | temp tiles last {state.temp_turn_count} rounds")
    if state.outcome:
        print(f"  *** GAME OVER - {state.outcome.upper()} ***")
    print("=" * 60)


def parse_coord(text):
    """'3,-1' -> (3, -1). Returns None on bad input."""
    parts = text.replace(" ", "").split(",")
    if len(parts) != 2:
        return None
    try:
        return (int(parts[0]), int(parts[1]))
    except ValueError:
        return None


def prompt_claim():
    public = parse_coord(input("Claim cell (x,y): "))
    if public is None:
        print("Invalid coordinate")
        return None
    private_text = input("Private cell (x,y, Enter for same): ").strip()
    private = parse_coord(private_text) if private_text else public
    if private is None:
        print("Invalid coordinate")
        return None
    return claim(public, private)


def prompt_suppress():
    text = input("Zone cells (x,y; x,y; ...): ")
    zone = []
    for chunk in text.split(";"):
        if not chunk.strip():
            continue
        coord = parse_coord(chunk)
        if coord is None:
            print(f"Invalid coordinate: {chunk.strip()}")
            return None
        zone.append(coord)
    return suppress(zone)


def main_loop():
    if len(sys.argv) > 1:
        state = RoundState.load(sys.argv[1])
        print(f"Loaded {sys.argv[1]}")
    else:
        state = new_round_state()

    while True:
        clear_screen()
        print_header(state)
        for row in render_board(state):
            print(row)

        if state.outcome:
            break

        waiting = awaiting_sides(state)
        side = SUPPRESSION if SUPPRESSION in waiting else RESISTANCE
        print(f"\n--- {side.upper()} to act (look away, {RESISTANCE if side == SUPPRESSION else SUPPRESSION}) ---")
        print("  [a] Submit action")
        print("  [s] Save game")
        print("  [q] Quit game")

        choice = input("\nAction: ").strip().lower()
        if choice == "q":
            print("Thanks for playing!")
            break
        elif choice == "s":
            filename = input("Save filename (default: save.json): ").strip() or "save.json"
            state.save(filename)
            print(f"Game saved to {filename}")
            continue
        elif choice != "a":
            continue

        action = prompt_suppress() if side == SUPPRESSION else prompt_claim()
        if action is None:
            continue
        result = validate_action(state, action)
        if not result.valid:
            print(f"\nInvalid action: {result.error}")
            continue

        state, events = apply_action(state, action)
        for e in events:
            p = e.payload
            if e.type == "temporary_gained":
                print(f"  Resistance holds {tuple(p['coord'])} for {p['remaining']} rounds")
            elif e.type == "point_gained":
                print(f"  {tuple(p['coord'])} is now permanent (score {p['score']})")
            elif e.type == "temporary_expired":
                print(f"  {tuple(p['coord'])} slipped away")
            elif e.type == "round_resolved":
                print(f"  Round {p['turn']}: claim {tuple(p['public_coord'])}, zone {len(p['suppression_zone'])} cells")
            elif e.type == "game_over":
                print(f"  *** {p['outcome'].upper()} ***")


if __name__ == "__main__":
    try:
        main_loop()
    except KeyboardInterrupt:
        print("\n\nGame interrupted. Goodbye!")
        sys.exit(0)
