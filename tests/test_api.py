import pytest
from fastapi.testclient import TestClient

import config
from assistant.chat_engine import ChatEngine, get_chat_engine
from backend.main import app
from catalog.store import CatalogStore, get_store


@pytest.fixture
def client(data_store, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    app.dependency_overrides[get_store] = lambda: data_store
    app.dependency_overrides[get_chat_engine] = lambda: ChatEngine(store=data_store)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def missing_store(tmp_path):
    return CatalogStore(tmp_path / "resources.json", tmp_path / "question_bank.json")


@pytest.fixture
def unavailable_client(missing_store, monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    app.dependency_overrides[get_store] = lambda: missing_store
    app.dependency_overrides[get_chat_engine] = lambda: ChatEngine(store=missing_store)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "catalog_loaded": True,
        "total_resources": 11,
        "total_questions": 18,
    }


def test_health_degraded_without_catalog(unavailable_client):
    data = unavailable_client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["catalog_loaded"] is False


# =============================================================================
# RESOURCES
# =============================================================================

@pytest.mark.parametrize("body", [{}, {"transcript": ""}, {"transcript": "   "}])
def test_resources_requires_transcript(client, body):
    assert client.post("/api/resources", json=body).status_code == 400


def test_resources_imminent_risk(client):
    response = client.post("/api/resources", json={"transcript": "He has a gun and can't keep himself safe"})
    assert response.status_code == 200

    top = response.json()["top_resources"]
    assert len(top) == 5
    assert [r["name"] for r in top[:2]] == ["911 Emergency Services", "988 Suicide & Crisis Lifeline"]
    assert all(r["is_safety"] for r in top[:2])
    assert not any(r["is_safety"] for r in top[2:])
    assert top[1]["phone"] == "988"


def test_resources_without_risk(client):
    transcript = "I'm a woman in Nashville and my partner hit me. I have no money."
    top = client.post("/api/resources", json={"transcript": transcript}).json()["top_resources"]
    assert len(top) == 3
    assert top[0]["name"] == "Nashville Safe Haven Shelter"
    assert top[0]["justification"]


def test_search_by_county_uses_catalog_keys(client):
    response = client.get("/api/resources/search", params={"county": "sumner"})
    assert response.status_code == 200

    records = response.json()
    assert len(records) == 4
    assert "serviceArea" in records[0]
    assert "languagesOffered" in records[0]


def test_search_by_text(client):
    records = client.get("/api/resources/search", params={"search": "grief"}).json()
    assert {r["name"] for r in records} == {"Grief Share Circle", "Centro de Apoyo Familiar"}


# =============================================================================
# QUESTIONS
# =============================================================================

def test_questions_without_rapport(client):
    data = client.get("/api/questions", params={"category": "adolescent"}).json()
    assert [q["id"] for q in data] == [20, 22, 23]


def test_questions_with_rapport(client):
    data = client.get("/api/questions", params={"category": "adolescent", "has_rapport": True}).json()
    assert len(data) == 4


def test_questions_by_tier(client):
    data = client.get("/api/questions", params={"escalation_tier": 3}).json()
    assert [q["id"] for q in data] == [1, 2, 3, 23]


def test_questions_invalid_tier(client):
    assert client.get("/api/questions", params={"escalation_tier": 0}).status_code == 422


def test_statistics(client):
    data = client.get("/api/statistics").json()
    assert data["total_questions"] == 18
    assert data["total_resources"] == 11
    assert data["escalation_tiers"] == {"1": 4, "2": 7, "3": 7}
    assert data["counties"] == ["Davidson", "Robertson", "Rutherford", "Sumner", "Williamson"]


# =============================================================================
# CHAT
# =============================================================================

def test_chat_requires_message(client):
    assert client.post("/api/chat", json={"message": " "}).status_code == 400


def test_chat_fallback_response(client):
    response = client.post("/api/chat", json={
        "message": "What should I ask him?",
        "history": [{"role": "user", "content": "The caller is a veteran"}],
    })
    assert response.status_code == 200

    data = response.json()
    assert data["used_llm"] is False
    assert data["message"]
    assert data["suggested_resources"]
    assert [q["id"] for q in data["questions"]] == [30, 32]


def test_catalog_unavailable(unavailable_client):
    assert unavailable_client.post("/api/resources", json={"transcript": "help"}).status_code == 503
    assert unavailable_client.get("/api/questions").status_code == 503
    assert unavailable_client.post("/api/chat", json={"message": "help"}).status_code == 503
    assert unavailable_client.post("/api/reload").status_code == 503


# =============================================================================
# RELOAD
# =============================================================================

def test_reload(client):
    response = client.post("/api/reload")
    assert response.status_code == 200
    assert response.json() == {"status": "reloaded", "total_resources": 11, "total_questions": 18}


def test_reload_rejects_malformed_catalog(tmp_path, data_catalog):
    resources = tmp_path / "resources.json"
    resources.write_text("{broken")
    store = CatalogStore(resources, config.QUESTION_BANK_PATH, catalog=data_catalog)
    app.dependency_overrides[get_store] = lambda: store
    try:
        response = TestClient(app).post("/api/reload")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 422
    assert store.current is data_catalog
