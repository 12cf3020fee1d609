"""
Shared test setup.
The API reads DATABASE_URL at import time, so point it at a throwaway SQLite file first.
"""

import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="uneven_waves_test_")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_db_dir, 'test.db')}")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET", "test-secret")
