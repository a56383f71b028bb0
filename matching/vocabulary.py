"""
matching/vocabulary.py - Trigger-phrase tables and phrase matching
===================================================================

All keyword heuristics in the engine are driven by tables that map a label
to an ordered list of trigger phrases. The defaults live in config.py; a
JSON file can replace any table without touching the matching logic.

Two shared routines do every lookup:
- first_match(): the first label (in table order) with a matching phrase
- all_matches(): every label with a matching phrase, in table order
"""

import json
import re
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

import config

PhraseTable = Mapping[str, tuple[str, ...]]


# =============================================================================
# PHRASE MATCHING
# =============================================================================

def _phrase_hits(text: str, phrase: str, whole_word: bool) -> bool:
    if whole_word:
        return re.search(rf"\b{re.escape(phrase)}\b", text) is not None
    return phrase in text


def matched_phrase(text: str, phrases: tuple[str, ...], whole_word: bool = False) -> Optional[str]:
    """
    Return the first phrase found in ``text``, or None.

    ``text`` must already be lower-cased. Phrases are tested in order and
    the search stops at the first hit.
    """
    for phrase in phrases:
        if _phrase_hits(text, phrase.lower(), whole_word):
            return phrase
    return None


def first_match(text: str, table: PhraseTable, whole_word: bool = False) -> Optional[str]:
    """Return the first label in ``table`` whose phrases occur in ``text``."""
    for label, phrases in table.items():
        if matched_phrase(text, phrases, whole_word) is not None:
            return label
    return None


def all_matches(text: str, table: PhraseTable, whole_word: bool = False) -> list[str]:
    """Return every label in ``table`` whose phrases occur in ``text``."""
    return [
        label for label, phrases in table.items()
        if matched_phrase(text, phrases, whole_word) is not None
    ]


# =============================================================================
# VOCABULARY
# =============================================================================

def _freeze(table: Mapping[str, list[str]]) -> PhraseTable:
    return MappingProxyType({label: tuple(phrases) for label, phrases in table.items()})


@dataclass(frozen=True)
class Vocabulary:
    """
    Immutable set of phrase tables consumed by the extractor, filter and
    question selector.
    """
    crisis_types: PhraseTable
    genders: PhraseTable
    demographics: PhraseTable
    family: PhraseTable
    signals: PhraseTable
    languages: PhraseTable
    locations: PhraseTable
    service_areas: PhraseTable
    question_categories: PhraseTable
    imminent_risk_label: str = config.IMMINENT_RISK_LABEL
    general_category: str = config.GENERAL_QUESTION_CATEGORY

    def signal(self, name: str) -> tuple[str, ...]:
        """Phrases for a named flag signal; empty when the table omits it."""
        return self.signals.get(name, ())


class VocabularyFile(BaseModel):
    """Schema of a vocabulary override file. Omitted tables keep their defaults."""
    model_config = ConfigDict(extra="forbid")

    crisis_types: Optional[dict[str, list[str]]] = None
    genders: Optional[dict[str, list[str]]] = None
    demographics: Optional[dict[str, list[str]]] = None
    family: Optional[dict[str, list[str]]] = None
    signals: Optional[dict[str, list[str]]] = None
    languages: Optional[dict[str, list[str]]] = None
    locations: Optional[dict[str, list[str]]] = None
    service_areas: Optional[dict[str, list[str]]] = None
    question_categories: Optional[dict[str, list[str]]] = None
    imminent_risk_label: Optional[str] = None
    general_category: Optional[str] = None


def default_vocabulary() -> Vocabulary:
    """Build the vocabulary from the tables in config.py."""
    return Vocabulary(
        crisis_types=_freeze(config.CRISIS_TYPE_PHRASES),
        genders=_freeze(config.GENDER_PHRASES),
        demographics=_freeze(config.DEMOGRAPHIC_PHRASES),
        family=_freeze(config.FAMILY_PHRASES),
        signals=_freeze(config.SIGNAL_PHRASES),
        languages=_freeze(config.LANGUAGE_PHRASES),
        locations=_freeze(config.LOCATION_TERMS),
        service_areas=_freeze(config.SERVICE_AREA_TERMS),
        question_categories=_freeze(config.QUESTION_CATEGORY_PHRASES),
    )


def load_vocabulary(path: Union[str, Path, None] = None) -> Vocabulary:
    """
    Load the matching vocabulary.

    Starts from the defaults in config.py and replaces every table present
    in the JSON file at ``path`` (or VOCABULARY_PATH when omitted). Each
    table in the file replaces the default wholesale; key order in the file
    is the evaluation order.

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file is not valid JSON, has an unknown shape, or
                    names a general_category missing from question_categories
    """
    base = default_vocabulary()
    path = path or config.VOCABULARY_PATH
    if not path:
        return base

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vocabulary file not found at {path}.")

    try:
        with open(path, "r", encoding="utf-8") as f:
            overrides = VocabularyFile.model_validate(json.load(f))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid vocabulary file {path}: {e}") from e

    replaced = {}
    for name, value in overrides.model_dump(exclude_none=True).items():
        replaced[name] = _freeze(value) if isinstance(value, dict) else value

    vocabulary = replace(base, **replaced)
    # The general fallback must be reachable through its own trigger phrases
    if vocabulary.general_category not in vocabulary.question_categories:
        raise ValueError(
            f"Invalid vocabulary file {path}: general_category "
            f"'{vocabulary.general_category}' is not a key of question_categories"
        )

    logger.info("Loaded vocabulary overrides from {}: {}", path, sorted(replaced))
    return vocabulary


_default: Optional[Vocabulary] = None


def get_vocabulary() -> Vocabulary:
    """Process-wide vocabulary, loaded on first use."""
    global _default
    if _default is None:
        _default = load_vocabulary()
    return _default
