"""Pydantic Schemas — request/response validation and the realtime protocol.

Invariants:
    - Schemas validate at system boundary (HTTP bodies, websocket frames)
    - Bounds come from core/domain_types.py constants, not repeated literals

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
