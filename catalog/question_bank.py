"""
catalog/question_bank.py - Read-only question bank
===================================================

Wraps the category -> questions mapping loaded from question_bank.json and
adds the lookups a responder needs: by id, by tier, by situation, sorted
recommendations and summary statistics.

A QuestionBank is itself a Mapping, so it can be passed straight to
matching.service.select_questions().
"""

from collections import Counter
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Iterator, Optional

from matching.models import Question
from matching.questions import questions_for_situation

HIGH_PRIORITY_TIER = 3


@dataclass(frozen=True)
class QuestionBankStatistics:
    total_questions: int
    categories: dict[str, int]
    escalation_tiers: dict[int, int]
    risk_levels: dict[str, int]
    tones: dict[str, int]

    def to_dict(self) -> dict:
        return asdict(self)


class QuestionBank(Mapping):
    """
    Immutable category -> questions mapping with id indexes.

    Usage:
        bank = QuestionBank({"adolescent": [Question(id=1, question="...")]})
        bank["adolescent"]          # tuple of questions, authored order
        bank.category_for_id(1)     # "adolescent"
    """

    def __init__(self, categories: Mapping[str, list[Question]]):
        self._categories = MappingProxyType({
            name: tuple(questions) for name, questions in categories.items()
        })
        self._by_id: dict[int, Question] = {}
        self._category_by_id: dict[int, str] = {}
        for name, questions in self._categories.items():
            for question in questions:
                self._by_id[question.id] = question
                self._category_by_id[question.id] = name

    # -------------------------------------------------------------------------
    # Mapping protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, category: str) -> tuple[Question, ...]:
        return self._categories[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def question_ids(self) -> set[int]:
        return set(self._by_id)

    @property
    def total_questions(self) -> int:
        return len(self._by_id)

    def by_category(self, category: str) -> list[Question]:
        return list(self._categories.get(category, ()))

    def by_id(self, question_id: int) -> Optional[Question]:
        return self._by_id.get(question_id)

    def category_for_id(self, question_id: int) -> Optional[str]:
        return self._category_by_id.get(question_id)

    def filter_questions(
        self,
        category: Optional[str] = None,
        escalation_tier: Optional[int] = None,
        risk_level: Optional[str] = None,
        tone: Optional[str] = None,
        use_after_rapport: Optional[bool] = None,
        require_rapport: bool = False,
    ) -> list[Question]:
        """
        Filter questions on any combination of criteria.

        Args:
            category: Restrict to one category (None for all, unknown -> [])
            escalation_tier: Exact tier
            risk_level: Exact risk level
            tone: Exact tone
            use_after_rapport: Exact value of the rapport flag
            require_rapport: Keep only questions flagged use_after_rapport

        Returns:
            list[Question]: Matches, grouped by category in bank order
        """
        names = [category] if category is not None else self.categories
        matches = []
        for name in names:
            for q in self._categories.get(name, ()):
                if escalation_tier is not None and q.escalation_tier != escalation_tier:
                    continue
                if risk_level is not None and q.risk_level != risk_level:
                    continue
                if tone is not None and q.tone != tone:
                    continue
                if use_after_rapport is not None and q.use_after_rapport != use_after_rapport:
                    continue
                if require_rapport and not q.use_after_rapport:
                    continue
                matches.append(q)
        return matches

    def high_priority(self, category: Optional[str] = None) -> list[Question]:
        """Tier 3 questions, optionally for one category."""
        return self.filter_questions(category=category, escalation_tier=HIGH_PRIORITY_TIER)

    def for_situation(self, category: str, has_rapport: bool) -> list[Question]:
        return questions_for_situation(self, category, has_rapport)

    def recommendations(
        self,
        category: str,
        escalation_tier: Optional[int] = None,
        has_rapport: bool = False,
    ) -> list[Question]:
        """Situation questions ordered by escalation tier (highest first), then id."""
        questions = self.for_situation(category, has_rapport)
        if escalation_tier is not None:
            questions = [q for q in questions if q.escalation_tier == escalation_tier]
        return sorted(questions, key=lambda q: (-q.escalation_tier, q.id))

    def statistics(self) -> QuestionBankStatistics:
        questions = list(self._by_id.values())
        return QuestionBankStatistics(
            total_questions=len(questions),
            categories={name: len(qs) for name, qs in self._categories.items()},
            escalation_tiers=dict(sorted(Counter(q.escalation_tier for q in questions).items())),
            risk_levels=dict(Counter(q.risk_level or "unspecified" for q in questions)),
            tones=dict(Counter(q.tone or "unspecified" for q in questions)),
        )
