"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Decisions (eligibility, scoring, validation) delegated to core/

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
