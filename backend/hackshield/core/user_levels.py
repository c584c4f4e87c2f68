"""User Levels — XP rewards and level thresholds.

Invariants:
    - level is a pure function of xp (recomputed on every award)
    - Levels run 1..5; 5 has no upper bound
"""

REGISTRATION_XP = 10
TEAM_CREATED_XP = 15

# (exclusive upper bound, level)
_LEVEL_THRESHOLDS = ((100, 1), (500, 2), (1500, 3), (5000, 4))


def level_for_xp(xp: int) -> int:
    for upper, level in _LEVEL_THRESHOLDS:
        if xp < upper:
            return level
    return 5


def award_xp(current_xp: int, amount: int) -> tuple[int, int]:
    """Return (new_xp, new_level) after adding amount."""
    new_xp = max(0, current_xp + amount)
    return new_xp, level_for_xp(new_xp)
