"""
matching/ - Transcript to resource and question matching
=========================================================

This package contains the deterministic matching engine:
- vocabulary.py: Trigger-phrase tables and the shared phrase matchers
- extractor.py: Transcript -> NeedsProfile
- filters.py: Eligibility and relevance filtering
- scoring.py: Multi-factor scoring and ranking
- safety.py: 911/988 pinning on imminent risk
- questions.py: Interview question category inference and selection
- service.py: select_resources() / select_questions() entry points
"""

from matching.models import InvalidInputError, Question, RankedResult, Resource
from matching.service import select_questions, select_resources

__all__ = [
    "InvalidInputError",
    "Question",
    "RankedResult",
    "Resource",
    "select_questions",
    "select_resources",
]
