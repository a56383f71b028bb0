"""
matching/filters.py - Eligibility and relevance filtering
==========================================================

Removes resources that cannot serve the caller before any scoring happens.
A resource passes only when the location, eligibility and exclusion checks
all hold. Missing service-area or eligibility text never excludes anyone.
"""

import re
from typing import Any, Mapping, Optional, Sequence

from matching.models import Resource, mentions
from matching.vocabulary import Vocabulary, get_vocabulary

EXCLUDED_CATEGORY_TERMS = ("training",)
EXCLUDED_DESCRIPTION_TERMS = ("training program", "not for public use")
OUTDATED_STATUS = "outdated"

TEEN_AGE_RANGE = (12, 19)

# "men only" must not fire inside "women only"
MEN_ONLY = re.compile(r"\bmen only")


def location_ok(resource: Resource, context: Mapping[str, Any], vocabulary: Vocabulary) -> bool:
    terms = vocabulary.service_areas.get(context.get("location"))
    if not terms:
        return True
    if resource.service_area is None:
        return True
    return mentions(resource.service_area, *terms)


def eligibility_ok(resource: Resource, context: Mapping[str, Any]) -> bool:
    if resource.eligibility is None:
        return True

    age = context.get("age")
    age_group = context.get("age_group")
    gender = context.get("gender")

    if mentions(resource.eligibility, "adults only") and age is not None and age < 18:
        return False
    if mentions(resource.eligibility, "teens only") and age_group != "teen":
        low, high = TEEN_AGE_RANGE
        if age is None or not low <= age <= high:
            return False
    if mentions(resource.eligibility, "women only") and gender == "male":
        return False
    if MEN_ONLY.search(resource.eligibility.lower()) and gender == "female":
        return False
    return True


def is_excluded(resource: Resource) -> bool:
    """Training material, outdated records and non-public services."""
    if mentions(resource.category, *EXCLUDED_CATEGORY_TERMS):
        return True
    if (resource.status or "").lower() == OUTDATED_STATUS:
        return True
    return mentions(resource.description, *EXCLUDED_DESCRIPTION_TERMS)


def filter_resources(
    resources: Sequence[Resource],
    context: Mapping[str, Any],
    vocabulary: Optional[Vocabulary] = None,
) -> list[Resource]:
    """
    Keep the resources eligible for this caller, preserving input order.

    Args:
        resources: Candidate resources
        context: NeedsProfile.context for the transcript
        vocabulary: Phrase tables (service-area wording per location bucket)

    Returns:
        list[Resource]: The eligible subset
    """
    vocab = vocabulary or get_vocabulary()
    return [
        r for r in resources
        if not is_excluded(r)
        and location_ok(r, context, vocab)
        and eligibility_ok(r, context)
    ]
