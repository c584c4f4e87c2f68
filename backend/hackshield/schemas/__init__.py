"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Domain enums from core/ used for constrained fields

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
