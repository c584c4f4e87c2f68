"""Domain Types — verifies enum wire values.

Tests:
    - Enum values are the strings stored in JSON and DB columns
    - Hackathon lifecycle has exactly five states
"""

from hackshield.core.domain_types import (
    ActivityType, AIAssistanceLevel, HackathonStatus, MatchingStatus, ParticipantStatus,
    UserRole,
)


def test_hackathon_lifecycle_has_five_states():
    assert [s.value for s in HackathonStatus] == [
        "draft", "published", "active", "judging", "completed",
    ]


def test_hyphenated_wire_values():
    assert ParticipantStatus.CHECKED_IN.value == "checked-in"
    assert MatchingStatus.NOT_NEEDED.value == "not-needed"


def test_enums_compare_equal_to_wire_strings():
    assert UserRole.ORGANIZATION == "organization"
    assert AIAssistanceLevel("strict") is AIAssistanceLevel.STRICT
    assert ActivityType("ai_query") is ActivityType.AI_QUERY
