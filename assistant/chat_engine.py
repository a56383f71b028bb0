"""
assistant/chat_engine.py
========================

Responder-facing chat engine. It turns a conversation with a crisis
responder into matched resources, interview questions and a written
suggestion, and can be used by any frontend (FastAPI, Streamlit, CLI).

The pipeline:
1. Builds a transcript from the user turns of the history plus the message
2. Shortlists resources and questions with the matching engine
3. Asks the LLM to phrase a recommendation using ONLY that shortlist
4. Falls back to a rule-based reply when the LLM is unavailable

Usage:
    from assistant.chat_engine import ChatEngine

    engine = ChatEngine()
    result = engine.respond("Caller is a veteran with no car in Nashville")
    print(result.message)
"""

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from openai import OpenAI, OpenAIError

import config
from catalog.store import CatalogStore, get_store
from matching.models import Question, RankedResource
from matching.service import select_questions, select_resources


# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_HEADER = """You are an assistant for CRISIS RESPONDERS at a suicide prevention center.
You help responders (hotline workers, counselors, support staff) choose questions to ask
and resources to suggest while they help a person in crisis.

IMPORTANT: The user is a CRISIS RESPONDER helping someone else, NOT a person in crisis.

The resources and questions below were matched to this situation.
Reference them in your response. Do NOT give generic advice and do NOT make up resources."""

RESPONSE_REQUIREMENTS = """RESPONSE REQUIREMENTS:
1. CONTEXT: Acknowledge what the responder is dealing with (1-2 sentences).
2. RESOURCES: Suggest at least ONE resource by its EXACT NAME from the list above,
   with its phone number if provided, and say why it fits.
3. QUESTIONS: Recommend at least ONE question from the list above, word-for-word
   or naturally adapted, and say why it helps here.
4. GUIDANCE: 2-3 sentences of professional guidance on using these resources and questions.

If resources marked SAFETY are listed, lead with them."""

NO_RESOURCES_NOTE = "No specific resources matched, but you can still provide general support."
NO_QUESTIONS_NOTE = "(No specific questions matched for this situation)"

# Wording that makes the rule-based reply lead with safety advice
CRISIS_WORDING = ("suicidal", "kill myself", "end my life", "can't go on")
IMMEDIATE_RISK_WORDING = ("right now", "immediately", "going to do it", "plan to")

FALLBACK_DESCRIPTION_CHARS = 150
FALLBACK_RESOURCE_LIMIT = 3
ENHANCED_MESSAGE_RESOURCE_LIMIT = 3


@dataclass
class ChatResult:
    """
    Output of one chat turn.

    Attributes:
        message: Text shown to the responder
        resources: Shortlisted resources, safety entries first
        questions: Suggested interview questions
        used_llm: False when the rule-based fallback wrote the message
    """
    message: str
    resources: list[RankedResource] = field(default_factory=list)
    questions: list[Question] = field(default_factory=list)
    used_llm: bool = False


def build_transcript(message: str, history: Optional[list[dict]] = None) -> str:
    """Space-join the user turns of ``history`` followed by ``message``."""
    turns = [m.get("content", "") for m in (history or []) if m.get("role") == "user"]
    return " ".join(turns + [message])


def _get_openai_client() -> OpenAI:
    """
    Get OpenAI client instance.

    Raises:
        ValueError: If OPENAI_API_KEY is not set
    """
    if not config.OPENAI_API_KEY:
        raise ValueError("OPENAI_API_KEY not set. Add it to your .env file.")
    return OpenAI(api_key=config.OPENAI_API_KEY)


# =============================================================================
# CHAT ENGINE CLASS
# =============================================================================

class ChatEngine:
    """
    Matching-backed chat engine for crisis responders.

    Usage:
        engine = ChatEngine()
        result = engine.respond("She is 16 and says she wants to die")

        # With conversation history
        history = [
            {"role": "user", "content": "Caller is a teen"},
            {"role": "assistant", "content": "..."},
        ]
        result = engine.respond("She mentioned a knife", history=history)
    """

    def __init__(self, store: Optional[CatalogStore] = None, client: Optional[OpenAI] = None):
        self._store = store
        self._client = client

    @property
    def store(self) -> CatalogStore:
        if self._store is None:
            self._store = get_store()
        return self._store

    @property
    def client(self) -> OpenAI:
        """Lazy-load OpenAI client."""
        if self._client is None:
            self._client = _get_openai_client()
        return self._client

    def respond(
        self,
        message: str,
        history: Optional[list[dict]] = None,
        has_rapport: bool = False,
    ) -> ChatResult:
        """
        Main entry point: shortlist resources and questions and write a reply.

        Args:
            message: The responder's latest message
            history: Optional conversation history as list of
                     {"role": "user"|"assistant", "content": str}
            has_rapport: Whether rapport with the caller is established

        Returns:
            ChatResult with the reply, shortlisted resources and questions

        Raises:
            FileNotFoundError: If the catalogs have not been provided
        """
        history = history or []
        catalog = self.store.current

        # Step 1: One transcript for both pipelines
        transcript = build_transcript(message, history)

        # Step 2: Match
        resources = list(select_resources(transcript, catalog.resources.resources))
        questions = select_questions(transcript, has_rapport, catalog.questions, from_transcript=True)
        logger.info("Matched {} resources and {} questions", len(resources), len(questions))

        # Step 3: Phrase the suggestion
        try:
            reply = self._generate_answer(message, resources, questions, history)
            return ChatResult(message=reply, resources=resources, questions=questions, used_llm=True)
        except (ValueError, OpenAIError) as e:
            logger.warning("LLM unavailable, using rule-based response: {}", e)

        reply = generate_fallback_response(message, resources, questions)
        return ChatResult(message=reply, resources=resources, questions=questions, used_llm=False)

    def _generate_answer(
        self,
        message: str,
        resources: list[RankedResource],
        questions: list[Question],
        history: list[dict],
    ) -> str:
        """Generate a reply with the LLM, grounded in the shortlist."""
        messages = [{"role": "system", "content": build_system_prompt(resources, questions)}]
        for turn in history[-(config.MAX_HISTORY_TURNS * 2):]:
            messages.append({"role": turn.get("role", "user"), "content": turn.get("content", "")})
        messages.append({"role": "user", "content": build_user_message(message, resources)})

        response = self.client.chat.completions.create(
            model=config.LLM_MODEL,
            messages=messages,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
        )

        content = response.choices[0].message.content
        if not content:
            raise ValueError("LLM returned an empty response")
        return content


# =============================================================================
# PROMPT FORMATTING
# =============================================================================

def build_system_prompt(resources: list[RankedResource], questions: list[Question]) -> str:
    """List up to 5 resources and 3 questions for the LLM to draw on."""
    parts = [SYSTEM_PROMPT_HEADER, "", "AVAILABLE RESOURCES TO SUGGEST:"]

    if resources:
        for i, entry in enumerate(resources[:config.PROMPT_RESOURCE_LIMIT], 1):
            r = entry.resource
            label = " (SAFETY)" if entry.is_safety else ""
            parts.append(f"{i}. {r.name}{label}")
            if r.description:
                parts.append(f"   Description: {r.description}")
            if r.category:
                parts.append(f"   Categories: {r.category}")
            if r.phone:
                parts.append(f"   Phone: {r.phone}")
            if r.cost:
                parts.append(f"   Cost: {r.cost}")
            parts.append(f"   Why: {entry.justification}")
    else:
        parts.append(NO_RESOURCES_NOTE)

    parts += ["", "RELEVANT QUESTIONS FOR THE RESPONDER TO ASK:"]
    if questions:
        for i, q in enumerate(questions[:config.PROMPT_QUESTION_LIMIT], 1):
            parts.append(f"{i}. {q.question}")
            if q.tone:
                parts.append(f"   (Tone: {q.tone})")
    else:
        parts.append(NO_QUESTIONS_NOTE)

    parts += ["", RESPONSE_REQUIREMENTS]
    return "\n".join(parts)


def build_user_message(message: str, resources: list[RankedResource]) -> str:
    """Append the names of the top resources to the responder's message."""
    names = [e.resource.name for e in resources[:ENHANCED_MESSAGE_RESOURCE_LIMIT] if e.resource.name]
    if not names:
        return message
    return (
        f"{message}\n\n[CONTEXT FOR RESPONDER: The following resources are available to "
        f"suggest to the person in crisis: {', '.join(names)}. "
        "Recommend at least one of these to the responder.]"
    )


def _shorten(text: str, limit: int = FALLBACK_DESCRIPTION_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def generate_fallback_response(
    message: str,
    resources: list[RankedResource],
    questions: list[Question],
) -> str:
    """
    Rule-based reply used when no LLM is configured or the call fails.

    Opens empathetically, adds 911/988 advice when the message signals
    immediate risk, lists up to 3 resources and ends with the first
    suggested question and a closing line.
    """
    lc = message.lower()
    has_crisis_wording = any(w in lc for w in CRISIS_WORDING)
    has_immediate_risk = any(w in lc for w in IMMEDIATE_RISK_WORDING)

    parts = []
    if has_crisis_wording or has_immediate_risk:
        opening = (
            "I'm really glad you reached out. It takes courage to ask for help, "
            "and I want you to know that you're not alone in this."
        )
        if has_immediate_risk:
            opening += (
                "\n\nIf you're in immediate danger, please call 911 right away, "
                "or contact the 988 Suicide & Crisis Lifeline. Your safety is the "
                "most important thing right now."
            )
        parts.append(opening)
    else:
        parts.append("Thank you for sharing that with me. I'm here to help you find the support you need.")

    if resources:
        parts.append("Based on what you've shared, I'd like to connect you with some resources that might help:")
        for entry in resources[:FALLBACK_RESOURCE_LIMIT]:
            r = entry.resource
            line = f"• {r.name}"
            if r.description:
                line += f" - {_shorten(r.description)}"
            if r.phone:
                line += f" You can reach them at {r.phone}."
            parts.append(line)
    else:
        parts.append("I want to help you find the right support.")

    if questions:
        text = questions[0].question
        if not text.endswith(("?", ".", "!")):
            text += "?"
        parts.append(text)

    parts.append(
        "Remember, reaching out for help is a sign of strength, not weakness. "
        "You deserve support, and there are people who want to help you through this."
    )
    return "\n\n".join(parts)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

# Global engine instance for simple usage
_engine: Optional[ChatEngine] = None


def get_chat_engine() -> ChatEngine:
    """Get or create the process-wide chat engine."""
    global _engine
    if _engine is None:
        _engine = ChatEngine()
    return _engine
