"""Matching — skill-overlap scoring for smart matching and team compatibility.

Invariants:
    - skill_match_score is 0 when either skill list is empty, otherwise 0..100
    - Skills are compared case-insensitively after trimming
    - compatibility_score is capped at 100
    - Weights: skills 0.4, experience 0.2, communication 0.2, availability 0.2

Design Decisions:
    - Communication has no observable signal in a profile, so it contributes a
      constant (COMMUNICATION_SCORE) instead of a random draw: rankings are
      reproducible and testable
    - Category tables are data, not code: editing them never touches scoring logic
"""

from dataclasses import dataclass, field

SMART_MATCH_LIMIT = 10
COMMON_WEIGHT = 30
COMPLEMENTARY_WEIGHT = 70

SKILL_WEIGHT = 0.4
EXPERIENCE_WEIGHT = 0.2
COMMUNICATION_WEIGHT = 0.2
AVAILABILITY_WEIGHT = 0.2
COMMUNICATION_SCORE = 0.85

SKILL_CATEGORIES: dict[str, tuple[str, ...]] = {
    "frontend": ("React", "Vue", "Angular", "JavaScript", "TypeScript", "HTML", "CSS"),
    "backend": ("Node.js", "Python", "Java", "Go", "PHP", "Ruby"),
    "design": ("UI/UX Design", "Figma", "Adobe XD", "Photoshop"),
    "mobile": ("React Native", "Flutter", "Swift", "Kotlin"),
    "data": ("Machine Learning", "AI", "Data Science", "Python"),
    "devops": ("AWS", "Docker", "Kubernetes", "DevOps"),
}

# Narrower map used only to suggest what a candidate brings to the table.
_SUGGESTION_CATEGORIES: dict[str, tuple[str, ...]] = {
    "frontend": ("React", "Vue", "Angular"),
    "backend": ("Node.js", "Python", "Java"),
    "design": ("UI/UX Design", "Figma"),
}

_EXPERIENCE_LEVELS = {"beginner": 1, "intermediate": 2, "advanced": 3, "expert": 4}


def _normalize(skills: list[str]) -> list[str]:
    return [s.strip().lower() for s in skills if s and s.strip()]


def skill_match_score(skills_a: list[str], skills_b: list[str]) -> int:
    """30 × shared / longer list + 70 × (a's skills b lacks) / |a|, rounded."""
    a = _normalize(skills_a)
    b = _normalize(skills_b)
    if not a or not b:
        return 0
    b_set = set(b)
    common = sum(1 for s in a if s in b_set)
    complementary = len(a) - common
    score = (common / max(len(a), len(b))) * COMMON_WEIGHT
    score += (complementary / len(a)) * COMPLEMENTARY_WEIGHT
    return round(score)


@dataclass
class MatchCandidate:
    participant_id: str
    user_id: str
    name: str
    email: str
    skills: list[str] = field(default_factory=list)
    preferred_team_size: int | None = None


def rank_smart_matches(
    own_skills: list[str], candidates: list[MatchCandidate], limit: int = SMART_MATCH_LIMIT,
) -> list[dict]:
    """Score every candidate against own_skills, highest first, truncated to limit."""
    scored = [
        {
            "participant_id": c.participant_id,
            "user_id": c.user_id,
            "name": c.name,
            "email": c.email,
            "skills": c.skills,
            "preferred_team_size": c.preferred_team_size,
            "match_score": skill_match_score(own_skills, c.skills),
        }
        for c in candidates
    ]
    scored.sort(key=lambda m: m["match_score"], reverse=True)
    return scored[:limit]


# ─── Team compatibility ──────────────────────────────────────────

def _categories_of(skills: list[str], table: dict[str, tuple[str, ...]]) -> set[str]:
    return {cat for cat, members in table.items() if any(s in members for s in skills)}


def skill_complementarity(skills_a: list[str], skills_b: list[str]) -> float:
    """(distinct categories − 0.5 × shared categories) / distinct categories."""
    cats_a = _categories_of(skills_a, SKILL_CATEGORIES)
    cats_b = _categories_of(skills_b, SKILL_CATEGORIES)
    total = cats_a | cats_b
    if not total:
        return 0.0
    overlap = cats_a & cats_b
    return (len(total) - len(overlap) * 0.5) / len(total)


def experience_compatibility(exp_a: str | None, exp_b: str | None) -> float:
    a = _EXPERIENCE_LEVELS.get((exp_a or "").lower(), 2)
    b = _EXPERIENCE_LEVELS.get((exp_b or "").lower(), 2)
    diff = abs(a - b)
    if diff <= 1:
        return 1.0
    if diff == 2:
        return 0.7
    return 0.4


def availability_compatibility(avail_a: str | None, avail_b: str | None) -> float:
    return 1.0 if avail_a == avail_b else 0.5


def compatibility_score(profile: dict, candidate: dict) -> int:
    """Weighted 0..100 compatibility between two {skills, experience, availability} dicts."""
    score = (
        skill_complementarity(profile.get("skills") or [], candidate.get("skills") or [])
        * SKILL_WEIGHT
        + experience_compatibility(profile.get("experience"), candidate.get("experience"))
        * EXPERIENCE_WEIGHT
        + COMMUNICATION_SCORE * COMMUNICATION_WEIGHT
        + availability_compatibility(profile.get("availability"), candidate.get("availability"))
        * AVAILABILITY_WEIGHT
    )
    return min(round(score * 100), 100)


def complementary_skills(own_skills: list[str], candidate_skills: list[str]) -> list[str]:
    """Candidate skills in categories the caller does not cover yet."""
    own_cats = _categories_of(own_skills, _SUGGESTION_CATEGORIES)
    return [
        skill for skill in candidate_skills
        if any(
            skill in members and cat not in own_cats
            for cat, members in _SUGGESTION_CATEGORIES.items()
        )
    ]


def shared_interests(own_skills: list[str], candidate_skills: list[str]) -> list[str]:
    own = set(own_skills)
    return [s for s in candidate_skills if s in own]
