"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Grid, registry, lifecycle and gallery rules are deterministic and testable without mocks

Design Decisions:
    - Functional core separated from imperative shell (services/ orchestrates IO around it)
"""
