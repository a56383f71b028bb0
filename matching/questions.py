"""
matching/questions.py - Interview question selection
=====================================================

Maps a transcript onto the question-bank taxonomy and picks a short list of
questions for the responder to ask. Questions keep the order they were
authored in; questions that need established rapport are withheld until the
responder says rapport exists.
"""

from typing import Mapping, Optional, Sequence

from loguru import logger

import config
from matching.models import Question
from matching.vocabulary import Vocabulary, all_matches, get_vocabulary

QuestionBankMapping = Mapping[str, Sequence[Question]]


def infer_question_category(transcript: Optional[str], vocabulary: Optional[Vocabulary] = None) -> tuple[str, int]:
    """
    Pick the question category for a transcript.

    The first category (in vocabulary order) with a matching phrase wins.
    A match on the general category, or no match at all, falls back to the
    general category with the smaller cap.

    Returns:
        tuple[str, int]: (category, maximum number of questions)
    """
    vocab = vocabulary or get_vocabulary()
    matches = all_matches((transcript or "").lower(), vocab.question_categories)
    category = matches[0] if matches else None
    if len(matches) > 1:
        logger.debug("Transcript matched several question categories {}; kept {}", matches, category)
    if category is None or category == vocab.general_category:
        return vocab.general_category, config.GENERAL_QUESTION_LIMIT
    return category, config.SPECIFIC_QUESTION_LIMIT


def questions_for_situation(bank: QuestionBankMapping, category: str, has_rapport: bool) -> list[Question]:
    """
    Questions for a category in stored order.

    Without rapport, questions flagged use_after_rapport are dropped. An
    unknown category yields an empty list.
    """
    questions = list(bank.get(category, ()))
    if not has_rapport:
        questions = [q for q in questions if not q.use_after_rapport]
    return questions


def select_for_category(
    bank: QuestionBankMapping,
    category: str,
    has_rapport: bool,
    limit: int = config.SPECIFIC_QUESTION_LIMIT,
) -> list[Question]:
    return questions_for_situation(bank, category, has_rapport)[:limit]


def select_for_transcript(
    bank: QuestionBankMapping,
    transcript: Optional[str],
    has_rapport: bool,
    vocabulary: Optional[Vocabulary] = None,
) -> list[Question]:
    category, limit = infer_question_category(transcript, vocabulary)
    return select_for_category(bank, category, has_rapport, limit)
