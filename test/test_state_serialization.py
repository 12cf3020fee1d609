"""
Save/load of RoundState and the read-only views built on it.
"""

import json

from uneven_waves.engine import OUTCOME_TURNS_EXHAUSTED, RESISTANCE, SUPPRESSION
from uneven_waves.engine.actions import claim, suppress
from uneven_waves.engine.queries import (
    awaiting_sides,
    get_round_summary,
    get_tiles,
    pending_sides,
    public_view,
    render_board,
    validate_action,
)
from uneven_waves.engine.round_manager import intake_resistance_action, intake_suppression_action
from uneven_waves.engine.state import ResolvedRound, RoundState, new_round_state
from uneven_waves.engine.tilemap import TileState


def played_state():
    state = new_round_state(temp_turn_count=4)
    intake_suppression_action(state, suppress([(1, 1), (2, 2)]))
    intake_resistance_action(state, claim((0, 0), (5, -5)))
    intake_suppression_action(state, suppress([(0, 1)]))
    intake_resistance_action(state, claim((1, 0)))
    # Third round half submitted
    intake_resistance_action(state, claim((3, 3), (4, 4)))
    return state


def test_json_round_trip_keeps_pending_buffer():
    state = played_state()
    restored = RoundState.from_json(state.to_json())

    assert restored == state
    assert restored.turn_buffer.resistance == claim((3, 3), (4, 4))
    assert restored.turn_buffer.suppression is None
    assert list(restored.resistance_temp_tiles) == [(0, 0), (1, 0)]


def test_restored_state_keeps_playing():
    state = played_state()
    restored = RoundState.from_json(state.to_json())

    intake_suppression_action(state, suppress([(9, 9)]))
    intake_suppression_action(restored, suppress([(9, 9)]))

    assert restored == state
    assert restored.current_turn == 3


def test_temp_tiles_serialize_with_remaining_rounds():
    data = played_state().to_dict()
    assert data["resistance_temp_tiles"] == [
        {"coord": [0, 0], "remaining": 2},
        {"coord": [1, 0], "remaining": 3},
    ]
    assert data["turn_history"][0]["resistance"] == {"public_coord": [0, 0], "private_coord": [5, -5]}
    assert data["turn_history"][0]["suppression"] == {"suppression_zone": [[1, 1], [2, 2]]}


def test_save_and_load(tmp_path):
    state = played_state()
    path = tmp_path / "save.json"
    state.save(str(path))

    assert json.loads(path.read_text())["current_turn"] == 2
    assert RoundState.load(str(path)) == state


def test_from_dict_tolerates_malformed_fields():
    state = RoundState.from_dict({
        "max_turns": "abc",
        "current_turn": None,
        "resistance_perm_tiles": [[0, 0], [0, 0], "x", [1, True]],
        "resistance_temp_tiles": [
            {"coord": [0, 0], "remaining": 2},  # already permanent
            {"coord": [2, 2], "remaining": 0},
            {"coord": [3, 3], "remaining": "2"},
            "junk",
        ],
        "turn_history": ["nope"],
        "turn_buffer": "nope",
        "outcome": "bogus",
    })

    assert state.max_turns == 20
    assert state.current_turn == 0
    assert state.resistance_perm_tiles == [(0, 0)]
    assert state.resistance_temp_tiles == {(3, 3): 2}
    assert state.turn_history == []
    assert state.turn_buffer.is_empty()
    assert state.outcome is None


def test_from_dict_skips_incomplete_history_entries():
    data = played_state().to_dict()
    del data["turn_history"][0]["resistance"]
    data["turn_history"][1]["suppression"] = {"suppression_zone": [[1, "y"]]}
    data["turn_history"].append({"suppression": {"suppression_zone": []}, "resistance": {"public_coord": [2, 2]}})

    restored = RoundState.from_dict(data)

    assert restored.turn_history == [ResolvedRound(suppress([]), claim((2, 2)))]


def test_from_dict_of_nothing_is_a_fresh_state():
    assert RoundState.from_dict({}) == RoundState()
    assert RoundState.from_dict(None) == RoundState()


def test_pending_and_awaiting_sides():
    state = new_round_state()
    assert pending_sides(state) == []
    assert awaiting_sides(state) == [RESISTANCE, SUPPRESSION]

    intake_suppression_action(state, suppress([(0, 0)]))
    assert pending_sides(state) == [SUPPRESSION]
    assert awaiting_sides(state) == [RESISTANCE]


def test_public_view_hides_pending_actions():
    state = new_round_state()
    intake_resistance_action(state, claim((7, 7), (8, 8)))

    view = public_view(state, SUPPRESSION)
    assert view["pending_sides"] == [RESISTANCE]
    assert "7" not in json.dumps(view)
    assert view["history"] == []


def test_public_view_hides_private_coord_from_suppression():
    state = played_state()

    sup_view = public_view(state, SUPPRESSION)
    res_view = public_view(state, RESISTANCE)

    assert sup_view["history"][0] == {
        "round": 0,
        "suppression_zone": [[1, 1], [2, 2]],
        "public_coord": [0, 0],
    }
    assert res_view["history"][0]["private_coord"] == [5, -5]
    assert "private_coord" not in public_view(state)["history"][0]


def test_public_view_reveals_private_coord_after_game_over():
    state = new_round_state(max_turns=1)
    intake_suppression_action(state, suppress([]))
    intake_resistance_action(state, claim((0, 0), (6, 6)))

    view = public_view(state, SUPPRESSION)
    assert view["outcome"] == OUTCOME_TURNS_EXHAUSTED
    assert view["game_over"] is True
    assert view["awaiting_sides"] == []
    assert view["history"][0]["private_coord"] == [6, 6]


def test_public_view_is_json_serializable():
    view = public_view(played_state(), RESISTANCE)
    assert json.loads(json.dumps(view)) == view
    assert view["resistance_temp_tiles"][0] == {"coord": [0, 0], "remaining": 2}


def test_validate_action():
    state = new_round_state()
    assert validate_action(state, claim((0, 0))).valid
    assert validate_action(state, suppress([])).valid
    assert not validate_action(state, "claim").valid

    state.outcome = OUTCOME_TURNS_EXHAUSTED
    result = validate_action(state, claim((0, 0)))
    assert not result.valid
    assert "over" in result.error


def test_get_tiles_marks_zone_cells_outside_territory():
    state = RoundState()
    state.resistance_perm_tiles.append((0, 0))
    state.resistance_temp_tiles[(1, 0)] = 2

    tiles = get_tiles(state, zone=[(0, 0), (0, 1)])

    assert [(t.coord, t.state) for t in tiles] == [
        ((0, 0), TileState.RESISTANCE),
        ((1, 0), TileState.TEMPORARY_RESISTANCE),
        ((0, 1), TileState.SUPPRESSED),
    ]


def test_render_board():
    state = RoundState()
    state.resistance_perm_tiles.append((0, 0))
    state.resistance_temp_tiles[(1, 0)] = 2

    rows = render_board(state, margin=0, zone=[(0, 1)])

    assert rows[:2] == [
        "   1 x .",
        "   0 # 2",
    ]
    assert len(rows) == 3


def test_render_empty_board():
    rows = render_board(RoundState())
    assert len(rows) == 4
    assert rows[1] == "   0 . . ."


def test_round_summary():
    summary = get_round_summary(played_state())
    assert summary == {
        "turn": 2,
        "max_turns": 20,
        "score": 0,
        "score_to_win": 5,
        "temporary_tiles": 2,
        "outcome": None,
        "awaiting": [SUPPRESSION],
    }
