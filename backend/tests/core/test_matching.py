"""Matching — verifies skill-overlap scores, ranking and team compatibility.

Tests:
    - skill_match_score weighs shared (30) and complementary (70) skills
    - Empty skill lists score 0; comparison ignores case and whitespace
    - rank_smart_matches sorts descending and truncates
    - compatibility_score combines the four weighted factors deterministically
"""

from hackshield.core.matching import (
    MatchCandidate, availability_compatibility, compatibility_score,
    complementary_skills, experience_compatibility, rank_smart_matches,
    shared_interests, skill_complementarity, skill_match_score,
)


def test_identical_skills_score_only_common_weight():
    assert skill_match_score(["React"], ["React"]) == 30


def test_half_shared_half_complementary():
    # 1 shared of 2 → 15, 1 of own 2 missing from the other → 35
    assert skill_match_score(["React", "Python"], ["python", "Go"]) == 50


def test_disjoint_skills_score_full_complementary_weight():
    assert skill_match_score(["React", "CSS"], ["Go"]) == 70


def test_empty_skills_score_zero():
    assert skill_match_score([], ["React"]) == 0
    assert skill_match_score(["React"], []) == 0
    assert skill_match_score(["  "], ["React"]) == 0


def test_comparison_trims_and_ignores_case():
    assert skill_match_score([" REACT "], ["react"]) == 30


def _candidate(pid: str, skills: list[str]) -> MatchCandidate:
    return MatchCandidate(
        participant_id=pid, user_id=f"u-{pid}", name=pid, email=f"{pid}@x.dev", skills=skills,
    )


def test_rank_smart_matches_sorts_highest_first():
    ranked = rank_smart_matches(
        ["React", "Python"],
        [_candidate("same", ["React", "Python"]), _candidate("other", ["Go"])],
    )
    assert [m["participant_id"] for m in ranked] == ["other", "same"]
    assert ranked[0]["match_score"] == 70
    assert ranked[1]["match_score"] == 30


def test_rank_smart_matches_truncates_to_limit():
    candidates = [_candidate(str(i), ["Go"]) for i in range(15)]
    assert len(rank_smart_matches(["React"], candidates)) == 10
    assert len(rank_smart_matches(["React"], candidates, limit=3)) == 3


def test_complementarity_rewards_distinct_categories():
    assert skill_complementarity(["React"], ["Figma"]) == 1.0
    assert skill_complementarity(["React"], ["Vue"]) == 0.5
    assert skill_complementarity([], []) == 0.0


def test_experience_compatibility_by_level_gap():
    assert experience_compatibility("beginner", "intermediate") == 1.0
    assert experience_compatibility("beginner", "advanced") == 0.7
    assert experience_compatibility("beginner", "expert") == 0.4
    assert experience_compatibility(None, None) == 1.0


def test_availability_compatibility():
    assert availability_compatibility("weekends", "weekends") == 1.0
    assert availability_compatibility("weekends", "evenings") == 0.5


def test_compatibility_score_is_deterministic():
    profile = {"skills": ["React"], "experience": "beginner", "availability": "weekends"}
    candidate = {"skills": ["Figma"], "experience": "beginner", "availability": "weekends"}
    first = compatibility_score(profile, candidate)
    assert first == compatibility_score(profile, candidate)
    assert first == 97


def test_compatibility_score_without_skills():
    assert compatibility_score({}, {}) == 57


def test_compatibility_score_never_exceeds_100():
    profile = {"skills": ["React", "Figma", "AWS"], "experience": "expert", "availability": "x"}
    candidate = {"skills": ["Swift", "Go"], "experience": "expert", "availability": "x"}
    assert compatibility_score(profile, candidate) <= 100


def test_complementary_skills_lists_uncovered_categories():
    assert complementary_skills(["React"], ["Python", "Vue", "Figma", "Go"]) == ["Python", "Figma"]


def test_shared_interests_keeps_candidate_order():
    assert shared_interests(["React", "Go"], ["Go", "Rust", "React"]) == ["Go", "React"]
