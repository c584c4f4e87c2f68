"""API Layer — FastAPI routes, shared dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes: rules live in core/, IO adapters in services/
"""
