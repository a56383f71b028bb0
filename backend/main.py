"""
backend/main.py
===============

FastAPI backend for the Crisis Resource Navigator.

Provides REST API endpoints for crisis responders:
- GET  /health                 - Health check with catalog sizes
- GET  /api/questions          - Browse/filter the interview question bank
- POST /api/resources          - Shortlist resources for a transcript
- GET  /api/resources/search   - Browse the resource catalog
- POST /api/chat               - Conversational suggestion for a responder
- GET  /api/statistics         - Question bank and catalog statistics
- POST /api/reload             - Reload both catalogs from disk

Run with:
    uvicorn backend.main:app --reload --port 8000

Or from project root:
    python -m uvicorn backend.main:app --reload --port 8000
"""

import sys
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import config
from assistant.chat_engine import ChatEngine, get_chat_engine
from catalog.loader import CatalogError
from catalog.models import CatalogResource
from catalog.store import Catalog, CatalogStore, get_store
from matching.models import InvalidInputError, RankedResource
from matching.service import select_resources

config.configure_logging()


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class TranscriptRequest(BaseModel):
    """Request model for the resource shortlist endpoint."""
    transcript: Optional[str] = Field(None, max_length=20000, description="Call transcript or notes")


class ChatTurn(BaseModel):
    role: str = Field(..., description="'user' or 'assistant'")
    content: str = ""


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""
    message: Optional[str] = Field(None, max_length=4000, description="Responder's message")
    history: Optional[list[ChatTurn]] = Field(
        default=None,
        description="Conversation history as list of {role, content} dicts"
    )
    has_rapport: bool = Field(False, description="Whether rapport with the caller is established")


class QuestionModel(BaseModel):
    """Interview question."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    question: str
    tone: Optional[str] = None
    risk_level: Optional[str] = None
    escalation_tier: int
    use_after_rapport: bool
    notes: Optional[str] = None


class RankedResourceModel(BaseModel):
    """A shortlisted resource with its justification."""
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    service_area: Optional[str] = None
    eligibility: Optional[str] = None
    cost: Optional[str] = None
    hours: Optional[str] = None
    language: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    justification: str
    is_safety: bool = False

    @classmethod
    def from_entry(cls, entry: RankedResource) -> "RankedResourceModel":
        r = entry.resource
        return cls(
            name=r.name,
            title=r.title,
            description=r.description,
            category=r.category,
            service_area=r.service_area,
            eligibility=r.eligibility,
            cost=r.cost,
            hours=r.hours,
            language=r.language,
            phone=r.phone,
            website=r.website,
            justification=entry.justification,
            is_safety=entry.is_safety,
        )


class ResourcesResponse(BaseModel):
    top_resources: list[RankedResourceModel] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""
    message: str = Field(..., description="Suggestion for the responder")
    suggested_resources: list[RankedResourceModel] = Field(default_factory=list)
    questions: list[QuestionModel] = Field(default_factory=list)
    used_llm: bool = Field(..., description="False when the rule-based fallback answered")


class StatisticsResponse(BaseModel):
    total_questions: int
    question_categories: dict[str, int]
    escalation_tiers: dict[int, int]
    risk_levels: dict[str, int]
    tones: dict[str, int]
    total_resources: int
    resource_categories: list[str]
    counties: list[str]


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    catalog_loaded: bool
    total_resources: Optional[int] = None
    total_questions: Optional[int] = None


class ReloadResponse(BaseModel):
    status: str
    total_resources: int
    total_questions: int


# =============================================================================
# FASTAPI APP
# =============================================================================

app = FastAPI(
    title="Crisis Resource Navigator API",
    description="Resource and interview-question matching for crisis responders",
    version="1.0.0",
)

# CORS configuration
# Allow requests from the local responder console and dashboards
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8501",      # Streamlit console
    "http://127.0.0.1:8501",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

CATALOG_UNAVAILABLE = "Catalog not loaded. Check RESOURCES_PATH and QUESTION_BANK_PATH."


def current_catalog(store: CatalogStore = Depends(get_store)) -> Catalog:
    """Resolve the active catalog snapshot, or answer 503."""
    try:
        return store.current
    except (FileNotFoundError, CatalogError) as e:
        logger.error("Catalog unavailable: {}", e)
        raise HTTPException(status_code=503, detail=CATALOG_UNAVAILABLE)


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(store: CatalogStore = Depends(get_store)):
    """
    Health check endpoint.

    Returns the status of the API and the catalog sizes.
    """
    try:
        catalog = store.current
    except (FileNotFoundError, CatalogError):
        return HealthResponse(status="degraded", catalog_loaded=False)
    return HealthResponse(
        status="healthy",
        catalog_loaded=True,
        total_resources=len(catalog.resources),
        total_questions=catalog.questions.total_questions,
    )


@app.get("/api/questions", response_model=list[QuestionModel], tags=["Questions"])
async def get_questions(
    category: Optional[str] = None,
    escalation_tier: Optional[int] = Query(None, ge=1),
    risk_level: Optional[str] = None,
    has_rapport: bool = False,
    catalog: Catalog = Depends(current_catalog),
):
    """
    Browse the question bank.

    Without rapport, questions meant for after rapport is built are left out.
    Every other filter is optional and exact.
    """
    questions = catalog.questions.filter_questions(
        category=category,
        escalation_tier=escalation_tier,
        risk_level=risk_level,
        use_after_rapport=None if has_rapport else False,
    )
    return [QuestionModel.model_validate(q) for q in questions]


@app.post("/api/resources", response_model=ResourcesResponse, tags=["Resources"])
async def get_resources(request: TranscriptRequest, catalog: Catalog = Depends(current_catalog)):
    """
    Shortlist resources for a transcript.

    When the transcript signals imminent risk, 911 and 988 lead the list.
    """
    if not request.transcript or not request.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript is required")

    try:
        result = select_resources(request.transcript, catalog.resources.resources)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ResourcesResponse(top_resources=[RankedResourceModel.from_entry(e) for e in result])


@app.get("/api/resources/search", response_model=list[CatalogResource], tags=["Resources"])
async def search_resources(
    category: Optional[str] = None,
    county: Optional[str] = None,
    search: Optional[str] = None,
    catalog: Catalog = Depends(current_catalog),
):
    """Browse the catalog by category, county and name/description text."""
    return catalog.resources.search(category=category, county=county, term=search)


@app.post("/api/chat", response_model=ChatResponse, tags=["Chat"])
def chat(request: ChatRequest, engine: ChatEngine = Depends(get_chat_engine)):
    """
    Send a message and get a suggestion for the responder.

    The endpoint:
    1. Matches resources and questions against the whole conversation
    2. Phrases a recommendation with the LLM (or the rule-based fallback)
    3. Returns the text with the matched resources and questions

    For multi-turn conversations, include the conversation history
    in the request so earlier details keep informing the match.
    """
    if not request.message or not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    history = [turn.model_dump() for turn in request.history or []]
    try:
        result = engine.respond(request.message, history=history, has_rapport=request.has_rapport)
    except (FileNotFoundError, CatalogError) as e:
        logger.error("Catalog unavailable: {}", e)
        raise HTTPException(status_code=503, detail=CATALOG_UNAVAILABLE)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ChatResponse(
        message=result.message,
        suggested_resources=[RankedResourceModel.from_entry(e) for e in result.resources],
        questions=[QuestionModel.model_validate(q) for q in result.questions],
        used_llm=result.used_llm,
    )


@app.get("/api/statistics", response_model=StatisticsResponse, tags=["System"])
async def get_statistics(catalog: Catalog = Depends(current_catalog)):
    """Counts for the question bank plus the catalog's categories and counties."""
    stats = catalog.questions.statistics()
    return StatisticsResponse(
        total_questions=stats.total_questions,
        question_categories=stats.categories,
        escalation_tiers=stats.escalation_tiers,
        risk_levels=stats.risk_levels,
        tones=stats.tones,
        total_resources=len(catalog.resources),
        resource_categories=catalog.resources.categories(),
        counties=catalog.resources.counties(),
    )


@app.post("/api/reload", response_model=ReloadResponse, tags=["System"])
def reload_catalog(store: CatalogStore = Depends(get_store)):
    """Reload both catalogs from disk; the previous snapshot stays on failure."""
    try:
        catalog = store.reload()
    except FileNotFoundError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except CatalogError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return ReloadResponse(
        status="reloaded",
        total_resources=len(catalog.resources),
        total_questions=catalog.questions.total_questions,
    )


# =============================================================================
# MAIN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
