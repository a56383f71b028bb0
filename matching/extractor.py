"""
matching/extractor.py - Needs and context extraction
=====================================================

Turns a raw transcript into a NeedsProfile using deterministic keyword and
regex heuristics. This is best-effort signal, not language understanding:
"trans" also fires inside "transportation", "now" inside "know".

Rules run in a fixed order. When two rules write the same field the later
rule wins, except where a rule is documented as first-match-wins.
"""

import re
from typing import Optional

from loguru import logger

from matching.models import NeedsProfile
from matching.vocabulary import (
    Vocabulary,
    all_matches,
    first_match,
    get_vocabulary,
    matched_phrase,
)

# "17 years old", "17 year old", "17yo"
AGE_PATTERN = re.compile(r"(\d{1,2})\s*(years? old|yo)")


def extract_profile(transcript: Optional[str], vocabulary: Optional[Vocabulary] = None) -> NeedsProfile:
    """
    Extract crisis needs and situational context from a transcript.

    Args:
        transcript: Raw transcript text; None or empty yields an empty profile
        vocabulary: Phrase tables to match against (defaults to the
                    process-wide vocabulary)

    Returns:
        NeedsProfile with detected needs and a sparse context mapping

    Example:
        >>> profile = extract_profile("I have no money and no car")
        >>> profile.context["cost_sensitive"], profile.context["transportation"]
        (True, 'limited')
    """
    vocab = vocabulary or get_vocabulary()
    profile = NeedsProfile()
    if not transcript:
        return profile

    lc = transcript.lower()
    context = profile.context

    # Crisis types are independent; each label stops at its first phrase
    for label in all_matches(lc, vocab.crisis_types):
        profile.add_need(label)
        if label == vocab.imminent_risk_label:
            context["imminent_risk"] = True

    # Age
    age_match = AGE_PATTERN.search(lc)
    if age_match:
        context["age"] = int(age_match.group(1))
    elif matched_phrase(lc, vocab.signal("teen")):
        context["age_group"] = "teen"

    # Gender (first label wins)
    genders = all_matches(lc, vocab.genders)
    if genders:
        context["gender"] = genders[0]

    # Demographic tag (last label wins)
    demographics = all_matches(lc, vocab.demographics)
    if demographics:
        context["demographic"] = demographics[-1]

    # Family status
    family = first_match(lc, vocab.family)
    if family:
        context["family"] = family
    if matched_phrase(lc, vocab.signal("has_children")):
        context["has_children"] = True

    # Logistical constraints
    if matched_phrase(lc, vocab.signal("transportation_limited")):
        context["transportation"] = "limited"
    if matched_phrase(lc, vocab.signal("cost_sensitive")):
        context["cost_sensitive"] = True

    # Location bucket (whole words, first bucket wins)
    locations = all_matches(lc, vocab.locations, whole_word=True)
    if locations:
        context["location"] = locations[0]

    language = first_match(lc, vocab.languages)
    if language:
        context["language"] = language

    if matched_phrase(lc, vocab.signal("urgency")) or profile.imminent_risk:
        context["urgency"] = "immediate"

    _log_overlaps(locations, demographics, genders)
    return profile


def _log_overlaps(locations: list[str], demographics: list[str], genders: list[str]) -> None:
    # Overlapping exclusive rules are resolved by order; surface them for review
    if len(genders) > 1:
        logger.debug("Transcript matched several genders {}; kept {}", genders, genders[0])
    if len(locations) > 1:
        logger.debug("Transcript matched several location buckets {}; kept {}", locations, locations[0])
    if len(demographics) > 1:
        logger.debug("Transcript matched several demographic tags {}; kept {}", demographics, demographics[-1])
