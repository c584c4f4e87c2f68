"""User Levels — verifies XP thresholds and awards."""

from hackshield.core.user_levels import REGISTRATION_XP, award_xp, level_for_xp


def test_level_thresholds():
    assert level_for_xp(0) == 1
    assert level_for_xp(99) == 1
    assert level_for_xp(100) == 2
    assert level_for_xp(1499) == 3
    assert level_for_xp(4999) == 4
    assert level_for_xp(5000) == 5
    assert level_for_xp(100_000) == 5


def test_award_xp_recomputes_level():
    assert award_xp(95, REGISTRATION_XP) == (105, 2)


def test_award_xp_never_negative():
    assert award_xp(5, -50) == (0, 1)
