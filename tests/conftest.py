"""Root conftest — shared test configuration."""

import os

# Tests never touch a real database or signing key
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_FORMAT", "text")
