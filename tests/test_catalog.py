import json

import pytest

from catalog.loader import CatalogError, load_question_bank, load_resources
from catalog.models import CatalogResource
from catalog.question_bank import QuestionBank
from catalog.store import Catalog, CatalogStore
from conftest import QUESTION_BANK_FILE, RESOURCES_FILE


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# =============================================================================
# RESOURCES
# =============================================================================

def test_load_resources_keeps_file_order():
    catalog = load_resources(RESOURCES_FILE)
    assert len(catalog) == 11
    assert catalog.records[0].name == "911 Emergency Services"
    assert [r.name for r in catalog.resources] == [r.name for r in catalog.records]


def test_to_resource_flattens_nested_record():
    record = load_resources(RESOURCES_FILE).find("Nashville Safe Haven Shelter")
    resource = record.to_resource()

    assert resource.category == "Domestic Violence, Shelter"
    assert resource.service_area == "Greater Nashville"
    assert resource.eligibility == "Women only; children welcome"
    assert resource.cost == "Free"
    assert resource.language == "English, Spanish"
    assert resource.phone == "615-555-0101"
    assert resource.website == "https://example.org/safe-haven"
    assert resource.status == "active"


def test_hotline_number_used_when_no_primary():
    record = load_resources(RESOURCES_FILE).find("988 Suicide & Crisis Lifeline")
    assert record.to_resource().phone == "988"


def test_absent_lists_flatten_to_none():
    resource = CatalogResource(name="Bare").to_resource()
    assert resource.category is None
    assert resource.service_area is None
    assert resource.language is None
    assert resource.eligibility is None


def test_snake_case_keys_accepted(tmp_path):
    path = write_json(tmp_path / "resources.json", [{
        "name": "Snake",
        "service_area": {"areas_covered": ["Davidson"]},
        "languages_offered": ["Spanish"],
    }])
    resource = load_resources(path).resources[0]
    assert resource.service_area == "Davidson"
    assert resource.language == "Spanish"


def test_missing_resource_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="RESOURCES_PATH"):
        load_resources(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ["[{broken", json.dumps([{"description": "no name"}]), json.dumps({"a": 1})])
def test_malformed_resource_file(tmp_path, content):
    path = tmp_path / "resources.json"
    path.write_text(content)
    with pytest.raises(CatalogError):
        load_resources(path)


def test_search_by_partial_category():
    catalog = load_resources(RESOURCES_FILE)
    assert [r.name for r in catalog.search(category="shelter")] == [
        "Nashville Safe Haven Shelter",
        "Room at the Inn Nashville",
    ]


def test_search_by_county():
    names = [r.name for r in load_resources(RESOURCES_FILE).search(county="sumner")]
    assert names == [
        "911 Emergency Services",
        "988 Suicide & Crisis Lifeline",
        "Teen Line Middle Tennessee",
        "Sumner Veterans Outreach",
    ]


def test_search_term_checks_name_and_description():
    names = {r.name for r in load_resources(RESOURCES_FILE).search(term="GRIEF")}
    assert names == {"Grief Share Circle", "Centro de Apoyo Familiar"}


def test_search_criteria_combine():
    names = [r.name for r in load_resources(RESOURCES_FILE).search(category="crisis hotline", county="rutherford")]
    assert names == ["988 Suicide & Crisis Lifeline", "Teen Line Middle Tennessee"]


def test_indexes():
    catalog = load_resources(RESOURCES_FILE)
    assert catalog.counties() == ["Davidson", "Robertson", "Rutherford", "Sumner", "Williamson"]
    assert "Training" in catalog.categories()
    assert [r.name for r in catalog.by_county("ROBERTSON")] == [
        "911 Emergency Services",
        "988 Suicide & Crisis Lifeline",
    ]
    assert [r.name for r in catalog.by_category("grief")] == ["Grief Share Circle"]


# =============================================================================
# QUESTION BANK
# =============================================================================

@pytest.fixture
def question_bank():
    return load_question_bank(QUESTION_BANK_FILE)


def test_load_question_bank(question_bank):
    assert isinstance(question_bank, QuestionBank)
    assert question_bank.categories == [
        "attempt_in_progress",
        "recent_suicidal_thoughts",
        "adolescent",
        "veteran",
        "elderly",
    ]
    question = question_bank.by_id(5)
    assert question.escalation_tier == 2
    assert question.use_after_rapport is True
    assert question.risk_level == "high"
    assert question_bank.category_for_id(31) == "veteran"
    assert question_bank.by_id(999) is None


def test_duplicate_question_ids_rejected(tmp_path):
    path = write_json(tmp_path / "bank.json", {
        "a": [{"id": 1, "question": "One?"}],
        "b": [{"id": 1, "question": "Again?"}],
    })
    with pytest.raises(CatalogError, match="Question id 1"):
        load_question_bank(path)


def test_missing_question_bank(tmp_path):
    with pytest.raises(FileNotFoundError, match="QUESTION_BANK_PATH"):
        load_question_bank(tmp_path / "missing.json")


def test_high_priority(question_bank):
    assert [q.id for q in question_bank.high_priority("attempt_in_progress")] == [1, 2, 3]
    assert len(question_bank.high_priority()) == 7


def test_recommendations_sorted_by_tier_then_id(question_bank):
    assert [q.id for q in question_bank.recommendations("adolescent")] == [23, 22, 20]
    assert [q.id for q in question_bank.recommendations("adolescent", escalation_tier=2, has_rapport=True)] == [21, 22]


def test_filter_questions(question_bank):
    assert [q.id for q in question_bank.filter_questions(require_rapport=True)] == [5, 12, 21, 31, 42]
    assert [q.id for q in question_bank.filter_questions(category="veteran", tone="direct")] == [31]
    assert [q.id for q in question_bank.filter_questions(category="elderly", use_after_rapport=False)] == [40, 41]
    assert question_bank.filter_questions(category="nope") == []


def test_statistics(question_bank):
    stats = question_bank.statistics()
    assert stats.total_questions == 18
    assert stats.categories["adolescent"] == 4
    assert stats.escalation_tiers == {1: 4, 2: 7, 3: 7}
    assert sum(stats.risk_levels.values()) == 18
    assert stats.to_dict()["total_questions"] == 18


# =============================================================================
# STORE
# =============================================================================

def test_store_loads_lazily_and_reloads(tmp_path):
    resources = write_json(tmp_path / "resources.json", [{"name": "One"}])
    bank = write_json(tmp_path / "bank.json", {"general": [{"id": 1, "question": "Hi?"}]})
    store = CatalogStore(resources_path=resources, question_bank_path=bank)

    assert not store.loaded
    first = store.current
    assert len(first.resources) == 1

    write_json(resources, [{"name": "One"}, {"name": "Two"}])
    assert store.current is first

    second = store.reload()
    assert store.current is second
    assert len(second.resources) == 2
    assert len(first.resources) == 1


def test_failed_reload_keeps_previous_snapshot(tmp_path):
    resources = write_json(tmp_path / "resources.json", [{"name": "One"}])
    bank = write_json(tmp_path / "bank.json", {})
    store = CatalogStore(resources_path=resources, question_bank_path=bank)
    before = store.current

    resources.write_text("{broken")
    with pytest.raises(CatalogError):
        store.reload()
    assert store.current is before


def test_store_with_prebuilt_catalog(data_catalog):
    store = CatalogStore(catalog=data_catalog)
    assert store.loaded
    assert isinstance(store.current, Catalog)
    assert store.current.questions.total_questions == 18
