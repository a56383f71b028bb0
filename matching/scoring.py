"""
matching/scoring.py - Multi-factor relevance scoring and ranking
=================================================================

Each eligible resource gets an additive integer score from the caller's
needs profile. Scores are recomputed for every request and never cached,
since they depend on the transcript.

Scoring factors, in order:
1. Need relevance      (+2 / +3 / +4 per detected need)
2. Proximity           (+2 in area, +1 when no service area is listed)
3. Affordability       (+2 free, -1 paid for cost-sensitive callers)
4. Language            (+1)
5. Eligibility wording (+1 each for teen, gender, demographic)
6. Urgency             (+1 for 24-hour services when urgent)
7. Training penalty    (-3)
"""

from typing import Sequence

from matching.models import NeedsProfile, Resource, ScoredCandidate, mentions


def _need_relevance(resource: Resource, needs: Sequence[str]) -> int:
    topic = resource.topic_text
    relevance = 0
    for need in needs:
        if need.split(" ")[0] in topic:
            relevance += 2
        if need.replace(" ", "") in topic:
            relevance += 3
        if need in topic:
            relevance += 4
    return relevance


def _proximity(resource: Resource, location) -> int:
    if resource.service_area is None:
        return 1
    if location and mentions(resource.service_area, location):
        return 2
    return 0


def _affordability(resource: Resource, cost_sensitive: bool) -> int:
    if resource.cost is None:
        return 0
    if mentions(resource.cost, "free", "no cost"):
        return 2
    return -1 if cost_sensitive else 0


def _eligibility_bonus(resource: Resource, profile: NeedsProfile) -> int:
    if resource.eligibility is None:
        return 0
    bonus = 0
    if profile.get("age_group") == "teen" and mentions(resource.eligibility, "teen"):
        bonus += 1
    gender = profile.get("gender")
    if gender and mentions(resource.eligibility, gender):
        bonus += 1
    demographic = profile.get("demographic")
    if demographic and mentions(resource.eligibility, demographic):
        bonus += 1
    return bonus


def match_score(resource: Resource, profile: NeedsProfile) -> int:
    """
    Score one filtered resource against a needs profile.

    The result is deterministic for a given (profile, resource) pair and
    may be negative.
    """
    score = _need_relevance(resource, profile.needs)
    score += _proximity(resource, profile.get("location"))
    score += _affordability(resource, profile.get("cost_sensitive") is True)

    language = profile.get("language")
    if language and mentions(resource.language, language):
        score += 1

    score += _eligibility_bonus(resource, profile)

    if profile.get("urgency") == "immediate" and "24" in (resource.hours or ""):
        score += 1

    # Filter already drops training resources; kept for relaxed filters
    if mentions(resource.category, "training"):
        score -= 3

    return score


def rank_resources(resources: Sequence[Resource], profile: NeedsProfile) -> list[ScoredCandidate]:
    """
    Score and sort resources, highest first.

    Ties keep their input order (sorted() is stable).
    """
    scored = [ScoredCandidate(resource=r, score=match_score(r, profile)) for r in resources]
    return sorted(scored, key=lambda c: -c.score)
