"""
SQLAlchemy models for players and matches.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from .database import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(String(36), primary_key=True)  # uuid
    username = Column(String(32), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(36), primary_key=True)  # uuid
    name = Column(String(128), nullable=False)
    join_code = Column(String(8), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    created_by = Column(String(36), ForeignKey("players.id"), nullable=True)
    # Seats; the open one is null until someone joins
    resistance_player_id = Column(String(36), ForeignKey("players.id"), nullable=True)
    suppression_player_id = Column(String(36), ForeignKey("players.id"), nullable=True)
    status = Column(String(32), nullable=False, default="lobby")  # lobby | active | finished
    round_state = Column(Text, nullable=False)  # JSON of RoundState.to_dict()

    def seat_of(self, player_id: str) -> str | None:
        """Side the player sits on in this match, if any."""
        if self.resistance_player_id == player_id:
            return "resistance"
        if self.suppression_player_id == player_id:
            return "suppression"
        return None
