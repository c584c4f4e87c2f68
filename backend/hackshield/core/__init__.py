"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure; the current time is always passed in by the caller

Design Decisions:
    - Functional core separated from imperative shell (routes + services)
"""
