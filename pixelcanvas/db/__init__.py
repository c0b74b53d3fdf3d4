"""Database Package — SQLAlchemy declarative Base.

Invariants:
    - Single async engine per app (DatabaseSessionManager on app.state.db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
