"""Services Layer — store adapter, moderation, gallery, lifecycle and realtime fan-out.

Invariants:
    - Services own all IO (DB sessions, socket sends)
    - Realtime dispatch uses an explicit dict mapping (no auto-discovery)

Design Decisions:
    - One service per concern; routes and the websocket handler stay thin
"""
