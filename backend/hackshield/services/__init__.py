"""Services Layer — IO-bound helpers used by routes.

Invariants:
    - Services never import from api/
    - Subprocess, filesystem and mail side effects live here, not in core/

Design Decisions:
    - One module per side-effect boundary (processes, files, mail, tokens)
"""
