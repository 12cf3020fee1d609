"""
Uneven Waves round engine.
Core rules only - no web framework, database, or transport.
"""

DEFAULT_MAX_TURNS = 20
DEFAULT_TEMP_TURN_COUNT = 3
DEFAULT_SCORE_TO_WIN = 5

# Outcomes stored in RoundState.outcome once the game is over.
OUTCOME_RESISTANCE_WIN = "resistance_win"
OUTCOME_TURNS_EXHAUSTED = "turns_exhausted"

RESISTANCE = "resistance"
SUPPRESSION = "suppression"
SIDES = (RESISTANCE, SUPPRESSION)
