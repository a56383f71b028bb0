"""Shared fixtures: a small in-memory catalog plus the sample data files."""

from pathlib import Path

import pytest

from catalog.loader import load_question_bank, load_resources
from catalog.store import Catalog, CatalogStore
from matching.models import Question, Resource

DATA_DIR = Path(__file__).parent.parent / "data"
RESOURCES_FILE = DATA_DIR / "resources.json"
QUESTION_BANK_FILE = DATA_DIR / "question_bank.json"


EMERGENCY_911 = Resource(
    name="911 Emergency Services",
    category="Emergency",
    service_area="Statewide",
    cost="Free",
    hours="24/7",
)
LIFELINE_988 = Resource(
    name="988 Suicide & Crisis Lifeline",
    category="Crisis Hotline, Suicide Prevention",
    service_area="Statewide",
    cost="Free",
    hours="24/7",
)
SAFE_HAVEN = Resource(
    name="Nashville Safe Haven Shelter",
    category="Domestic Violence, Shelter",
    description="Emergency shelter for survivors of domestic violence.",
    service_area="Greater Nashville",
    eligibility="Women only",
    cost="Free",
    hours="24 hours",
    language="English, Spanish",
)
TEEN_LINE = Resource(
    name="Teen Line",
    category="Youth Services",
    service_area="Middle Tennessee",
    eligibility="Teens only",
    cost="Free",
)
VETERANS = Resource(
    name="Sumner Veterans Outreach",
    category="Veterans, Mental Health",
    service_area="Sumner County",
    eligibility="Veterans and their families",
    cost="No cost for eligible veterans",
)
ROOM_AT_THE_INN = Resource(
    name="Room at the Inn",
    category="Homelessness, Shelter",
    service_area="Nashville",
    eligibility="Adults only",
    cost="Free",
)
RECOVERY = Resource(
    name="Rutherford Recovery Center",
    category="Substance Use, Treatment",
    service_area="Rutherford, Williamson",
    cost="Sliding scale",
    language="English, Spanish",
)
TRAINING = Resource(name="Crisis Counselor Certification", category="Training", cost="$250")
OUTDATED = Resource(
    name="Old Drop-In",
    category="Homelessness",
    service_area="Nashville",
    status="outdated",
)

SAMPLE_RESOURCES = [
    EMERGENCY_911,
    LIFELINE_988,
    SAFE_HAVEN,
    TEEN_LINE,
    VETERANS,
    ROOM_AT_THE_INN,
    RECOVERY,
    TRAINING,
    OUTDATED,
]


def q(id, tier, rapport=False):
    return Question(
        id=id,
        question=f"Question {id}?",
        tone="direct",
        risk_level="high" if tier == 3 else "moderate",
        escalation_tier=tier,
        use_after_rapport=rapport,
    )


SAMPLE_BANK = {
    "attempt_in_progress": [q(1, 3), q(2, 3), q(3, 3), q(4, 2), q(5, 2, rapport=True)],
    "recent_suicidal_thoughts": [q(10, 2), q(11, 1), q(12, 3, rapport=True)],
    "adolescent": [q(20, 1), q(21, 2, rapport=True), q(22, 2), q(23, 3)],
    "veteran": [q(30, 1), q(31, 3, rapport=True), q(32, 2)],
}


@pytest.fixture
def resources():
    return list(SAMPLE_RESOURCES)


@pytest.fixture
def bank():
    return SAMPLE_BANK


@pytest.fixture
def data_catalog():
    return Catalog(
        resources=load_resources(RESOURCES_FILE),
        questions=load_question_bank(QUESTION_BANK_FILE),
    )


@pytest.fixture
def data_store(data_catalog):
    return CatalogStore(catalog=data_catalog)
