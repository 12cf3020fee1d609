"""
Player authentication: bcrypt password hashes and JWT bearer tokens.
bcrypt only looks at the first 72 bytes of a password, so longer passwords are cut there before hashing.
"""

import bcrypt
import os
import re
from datetime import datetime, timedelta
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from .models import Player

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]{2,32}$")
MIN_PASSWORD_LENGTH = 6

SECRET_KEY = os.environ.get("JWT_SECRET", "change-me-in-production-use-env")
ALGORITHM = "HS256"
TOKEN_TTL = timedelta(days=int(os.environ.get("TOKEN_TTL_DAYS", "30")))

BCRYPT_MAX_BYTES = 72
BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "10"))

bearer = HTTPBearer(auto_error=False)


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), password_hash.encode("ascii"))


def check_credentials(username: str, password: str) -> str | None:
    """Return why these registration credentials are unacceptable, or None if they are fine."""
    if not USERNAME_PATTERN.match(username):
        return "Username must be 2-32 characters: letters, digits and underscore"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def issue_token(player_id: str) -> str:
    claims = {"sub": player_id, "exp": datetime.utcnow() + TOKEN_TTL}
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def player_id_from_token(token: str) -> str | None:
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub")


def current_player(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Player:
    """Dependency: the authenticated player, or 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    player_id = player_id_from_token(credentials.credentials)
    player = db.get(Player, player_id) if player_id else None
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return player
