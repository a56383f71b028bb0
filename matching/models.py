"""
matching/models.py - Data structures for the matching engine
==============================================================

Resources and questions are read-only records shared by every request.
Needs profiles, scored candidates and ranked results are created fresh for
each transcript and discarded afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


class InvalidInputError(ValueError):
    """Raised when a caller hands the engine a malformed collection."""


def mentions(value: Optional[str], *terms: str) -> bool:
    """
    Case-insensitive substring test against an optional text field.

    An absent field never mentions anything. Filter and scoring rules decide
    separately whether absence means "unconstrained" for their check.
    """
    if value is None:
        return False
    lowered = value.lower()
    return any(term.lower() in lowered for term in terms)


# =============================================================================
# CATALOG RECORDS
# =============================================================================

@dataclass(frozen=True)
class Resource:
    """
    A single assistance resource, flattened for matching.

    Every text field except ``name`` is optional. A missing service area,
    eligibility, cost, hours or language never excludes a resource.

    Attributes:
        name: Display name; also the best-effort identity
        title: Alternate display title (some catalogs use it for hotlines)
        category: Category labels, comma-joined
        description: Free-text description
        service_area: Areas covered, comma-joined
        eligibility: General eligibility wording
        cost: Fee wording
        hours: Opening hours wording
        language: Languages offered, comma-joined
        status: Record status flag, e.g. "active" or "outdated"
        phone: Primary or hotline number, display only
        website: Contact website, display only
    """
    name: str
    title: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    service_area: Optional[str] = None
    eligibility: Optional[str] = None
    cost: Optional[str] = None
    hours: Optional[str] = None
    language: Optional[str] = None
    status: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None

    @property
    def topic_text(self) -> str:
        """Category and description run together, lower-cased."""
        return ((self.category or "") + (self.description or "")).lower()

    def labelled(self, marker: str) -> bool:
        """True when the name or title contains ``marker`` verbatim."""
        return marker in (self.name or "") or marker in (self.title or "")


@dataclass(frozen=True)
class Question:
    """One interview question from the risk-assessment question bank."""
    id: int
    question: str
    tone: Optional[str] = None
    risk_level: Optional[str] = None
    escalation_tier: int = 1
    use_after_rapport: bool = False
    notes: Optional[str] = None


# =============================================================================
# PER-REQUEST STRUCTURES
# =============================================================================

@dataclass
class NeedsProfile:
    """
    Structured signals extracted from one transcript.

    Attributes:
        needs: Detected crisis-type labels in detection order, no duplicates
        context: Sparse mapping of situational signals, only set when detected
    """
    needs: list[str] = field(default_factory=list)
    context: dict[str, Any] = field(default_factory=dict)

    def add_need(self, label: str) -> None:
        if label not in self.needs:
            self.needs.append(label)

    @property
    def primary_need(self) -> Optional[str]:
        return self.needs[0] if self.needs else None

    @property
    def imminent_risk(self) -> bool:
        return self.context.get("imminent_risk") is True

    def get(self, key: str, default: Any = None) -> Any:
        return self.context.get(key, default)


@dataclass
class ScoredCandidate:
    resource: Resource
    score: int


@dataclass
class RankedResource:
    """A shortlisted resource with the reason it was chosen."""
    resource: Resource
    justification: str
    is_safety: bool = False


@dataclass
class RankedResult:
    """
    Final shortlist handed to response assembly.

    Safety entries, when present, always occupy the leading positions.
    """
    entries: list[RankedResource] = field(default_factory=list)

    def __iter__(self) -> Iterator[RankedResource]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> RankedResource:
        return self.entries[index]

    @property
    def safety_entries(self) -> list[RankedResource]:
        return [e for e in self.entries if e.is_safety]

    @property
    def ranked_entries(self) -> list[RankedResource]:
        return [e for e in self.entries if not e.is_safety]

    @property
    def resources(self) -> list[Resource]:
        return [e.resource for e in self.entries]
