"""
matching/service.py - Matching engine entry points
===================================================

This module provides the two operations callers use. The HTTP backend, the
chat engine and the responder console should ONLY call functions from this
module.

`select_resources()`:
1. Extracts a needs profile from the transcript
2. Filters out ineligible and irrelevant resources
3. Pins 911/988 when imminent risk is detected
4. Scores and ranks the remaining candidates
5. Returns the safety entries plus the top ranked resources, justified

`select_questions()`:
1. Resolves the question category (explicit, or inferred from a transcript)
2. Withholds rapport-only questions until rapport is established
3. Caps the list (3 for a specific category, 2 for the general fallback)
"""

from collections.abc import Sequence
from typing import Optional

from loguru import logger

import config
from matching.extractor import extract_profile
from matching.filters import filter_resources
from matching.models import (
    InvalidInputError,
    NeedsProfile,
    Question,
    RankedResource,
    RankedResult,
    Resource,
    mentions,
)
from matching.questions import QuestionBankMapping, select_for_category, select_for_transcript
from matching.safety import apply_safety_override
from matching.scoring import rank_resources
from matching.vocabulary import Vocabulary, get_vocabulary

# =============================================================================
# JUSTIFICATIONS
# =============================================================================

PRIMARY_CONCERN = "Directly addresses the caller's primary concern."
IN_AREA = "Located within the caller's geographic area."
NO_COST = "No cost/affordable, reducing barriers to access."
LANGUAGE_TEMPLATE = "Service available in {language}."
GENERAL_MATCH = "Matches several needs identified in the caller's context."


def build_justification(resource: Resource, profile: NeedsProfile) -> str:
    """Explain, in one or more short sentences, why a resource was ranked."""
    reasons = []

    primary = profile.primary_need
    if primary and primary.split(" ")[0] in resource.topic_text:
        reasons.append(PRIMARY_CONCERN)

    location = profile.get("location")
    if location and mentions(resource.service_area, location):
        reasons.append(IN_AREA)

    if mentions(resource.cost, "free"):
        reasons.append(NO_COST)

    language = profile.get("language")
    if language and mentions(resource.language, language):
        reasons.append(LANGUAGE_TEMPLATE.format(language=language))

    return " ".join(reasons) if reasons else GENERAL_MATCH


# =============================================================================
# RESOURCES
# =============================================================================

def rank_for_profile(
    profile: NeedsProfile,
    candidates: Sequence[Resource],
    *,
    vocabulary: Optional[Vocabulary] = None,
    limit: int = config.MAX_RANKED_RESOURCES,
) -> RankedResult:
    """Run filter, safety override, scoring and top-k for an existing profile."""
    if candidates is None or isinstance(candidates, (str, bytes)) or not isinstance(candidates, Sequence):
        raise InvalidInputError("candidates must be a sequence of Resource objects")

    # -------------------------------------------------------------------------
    # Step 1: Filter (strictly before scoring)
    # -------------------------------------------------------------------------
    filtered = filter_resources(candidates, profile.context, vocabulary)

    # -------------------------------------------------------------------------
    # Step 2: Safety override
    # -------------------------------------------------------------------------
    pinned, remaining = apply_safety_override(profile, filtered)

    # -------------------------------------------------------------------------
    # Step 3: Score, rank, justify the top `limit`
    # -------------------------------------------------------------------------
    ranked = rank_resources(remaining, profile)[:limit]
    entries = pinned + [
        RankedResource(resource=c.resource, justification=build_justification(c.resource, profile))
        for c in ranked
    ]

    if not entries:
        logger.warning("No resources matched (needs={}, {} candidates)", profile.needs, len(candidates))
    else:
        logger.debug(
            "Shortlisted {} of {} candidates ({} filtered, {} pinned)",
            len(entries), len(candidates), len(filtered), len(pinned),
        )
    return RankedResult(entries=entries)


def select_resources(
    transcript: Optional[str],
    candidates: Sequence[Resource],
    *,
    vocabulary: Optional[Vocabulary] = None,
    limit: int = config.MAX_RANKED_RESOURCES,
) -> RankedResult:
    """
    Shortlist resources for a transcript.

    Args:
        transcript: Raw transcript text (may be empty)
        candidates: Catalog resources to choose from
        vocabulary: Phrase tables (defaults to the process-wide vocabulary)
        limit: Maximum ranked entries after any safety entries

    Returns:
        RankedResult: 911/988 entries first when imminent risk is detected,
        followed by at most `limit` ranked resources

    Raises:
        InvalidInputError: If candidates is None or not a sequence
    """
    vocab = vocabulary or get_vocabulary()
    profile = extract_profile(transcript, vocab)
    return rank_for_profile(profile, candidates, vocabulary=vocab, limit=limit)


# =============================================================================
# QUESTIONS
# =============================================================================

def select_questions(
    category_or_transcript: Optional[str],
    has_rapport: bool,
    bank: QuestionBankMapping,
    *,
    from_transcript: bool = False,
    vocabulary: Optional[Vocabulary] = None,
) -> list[Question]:
    """
    Pick interview questions.

    Args:
        category_or_transcript: A category key, or a transcript when
                                `from_transcript` is True
        has_rapport: Whether rapport with the caller is established
        bank: Mapping of category -> questions in authored order
        from_transcript: Infer the category from transcript keywords

    Returns:
        list[Question]: At most 3 questions for a category (2 on the
        general fallback path); empty for an unknown category
    """
    if from_transcript:
        return select_for_transcript(bank, category_or_transcript, has_rapport, vocabulary)
    if not category_or_transcript:
        return []
    return select_for_category(bank, category_or_transcript, has_rapport)
