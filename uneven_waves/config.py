"""
Single place for default match, service and transport configuration.
Rule defaults live in uneven_waves.engine; environment variables override the service values.
"""

import os

from uneven_waves.engine import DEFAULT_MAX_TURNS, DEFAULT_SCORE_TO_WIN, DEFAULT_TEMP_TURN_COUNT

DEFAULT_RULES = {
    "max_turns": DEFAULT_MAX_TURNS,
    "temp_turn_count": DEFAULT_TEMP_TURN_COUNT,
    "score_to_win": DEFAULT_SCORE_TO_WIN,
}

# TCP host for client/host matches (see uneven_waves.net)
TCP_HOST = os.environ.get("UNEVEN_WAVES_TCP_HOST", "0.0.0.0")
TCP_PORT = int(os.environ.get("UNEVEN_WAVES_TCP_PORT", "9942"))

# Frontend origins allowed by the HTTP API
CORS_ORIGINS = ["http://localhost:5173", "http://localhost:5174", "http://localhost:3000"]

# Join codes handed out for new matches
JOIN_CODE_LENGTH = 4
