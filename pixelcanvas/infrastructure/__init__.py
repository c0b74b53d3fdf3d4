"""Infrastructure Layer — DB session management, logging and token verification.

Invariants:
    - Infrastructure never imports from core/ domain logic (errors excepted)
    - All SQLAlchemy failures surface as DatabaseError

Design Decisions:
    - Thin wrappers over external libraries (SQLAlchemy, python-jose)
"""
