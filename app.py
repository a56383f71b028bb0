"""
app.py - Streamlit responder console for the Crisis Resource Navigator
=======================================================================

A console for crisis responders. Paste call notes or a transcript, mark
whether rapport is established, and get:

1. Emergency contacts pinned first when imminent risk is detected
2. Up to three ranked resources, each with a justification
3. Interview questions chosen for the caller's situation

The Chat tab keeps a running conversation: every responder message is
matched against the whole conversation so far, and the reply is written by
the LLM (or by the rule-based fallback when no API key is set).

Run with: streamlit run app.py
"""

from typing import Optional

import streamlit as st

import config
from assistant.chat_engine import ChatEngine
from catalog.loader import CatalogError
from catalog.store import Catalog, get_store
from matching.extractor import extract_profile
from matching.models import RankedResource
from matching.service import rank_for_profile, select_questions

config.configure_logging()

# Demo transcripts for quick testing
DEMO_TRANSCRIPTS = [
    "I'm a 17 year old girl in Nashville, my boyfriend hit me and I have no money.",
    "He says he has a gun and is going to do it now.",
    "Caller is an elderly veteran in Sumner county, no car, feeling depressed.",
]


# =============================================================================
# PAGE CONFIGURATION
# =============================================================================

st.set_page_config(
    page_title="Crisis Resource Navigator",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded",
)


# =============================================================================
# CATALOG LOADING (cached for performance)
# =============================================================================

@st.cache_resource
def get_engine() -> ChatEngine:
    """One chat engine per server process, sharing the global catalog store."""
    return ChatEngine(store=get_store())


def load_catalog() -> tuple[Optional[Catalog], str]:
    """
    Resolve the current catalog snapshot.

    Returns:
        tuple: (catalog or None, error message)
    """
    try:
        return get_store().current, ""
    except FileNotFoundError as e:
        return None, str(e)
    except CatalogError as e:
        return None, f"Catalog files are malformed: {e}"


# =============================================================================
# SESSION STATE INITIALIZATION
# =============================================================================

def init_session_state():
    """Initialize session state variables."""
    if "messages" not in st.session_state:
        st.session_state.messages = []
    if "transcript" not in st.session_state:
        st.session_state.transcript = ""


init_session_state()


def reset_conversation():
    """Reset the chat to start fresh."""
    st.session_state.messages = []


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def display_resource(entry: RankedResource, rank: int):
    """Show one shortlisted resource; safety entries are highlighted."""
    r = entry.resource
    details = [f"**{rank}. {r.name}**"]
    if r.phone:
        details.append(f"📞 {r.phone}")
    if r.website:
        details.append(f"[Website]({r.website})")
    header = " · ".join(details)

    body = []
    if r.description:
        body.append(r.description)
    for label, value in (("Cost", r.cost), ("Hours", r.hours), ("Area", r.service_area)):
        if value:
            body.append(f"*{label}:* {value}")
    body.append(f"➡️ {entry.justification}")

    if entry.is_safety:
        st.error(header + "\n\n" + "\n\n".join(body), icon="🚨")
    else:
        st.info(header + "\n\n" + "\n\n".join(body))


def display_questions(questions):
    if not questions:
        st.markdown("*No questions for this situation.*")
        return
    for q in questions:
        meta = " | ".join(x for x in (q.tone, q.risk_level, f"tier {q.escalation_tier}") if x)
        st.markdown(f"- {q.question}  \n  <small>{meta}</small>", unsafe_allow_html=True)


# =============================================================================
# HEADER
# =============================================================================

st.title("🧭 Crisis Resource Navigator")
st.markdown("*Resource and question suggestions for crisis responders*")

catalog, error_msg = load_catalog()
if catalog is None:
    st.error(f"⚠️ {error_msg}")
    st.stop()

st.markdown("---")

match_tab, chat_tab = st.tabs(["🔎 Match transcript", "💬 Chat"])


# =============================================================================
# MATCH TAB
# =============================================================================

with match_tab:
    st.markdown("**Try a demo transcript:**")
    cols = st.columns(len(DEMO_TRANSCRIPTS))
    for i, demo in enumerate(DEMO_TRANSCRIPTS):
        with cols[i]:
            display_text = demo[:40] + "..." if len(demo) > 40 else demo
            if st.button(display_text, key=f"demo_{i}", help=demo):
                st.session_state.transcript = demo

    transcript = st.text_area("Transcript or call notes", key="transcript", height=150)
    has_rapport = st.checkbox("Rapport established", key="match_rapport")

    if transcript.strip():
        profile = extract_profile(transcript)
        result = rank_for_profile(profile, catalog.resources.resources)
        questions = select_questions(transcript, has_rapport, catalog.questions, from_transcript=True)

        left, right = st.columns([3, 2])
        with left:
            st.subheader("Resources")
            if not len(result):
                st.warning("No resources matched this transcript.")
            for rank, entry in enumerate(result, 1):
                display_resource(entry, rank)
        with right:
            st.subheader("Questions to ask")
            display_questions(questions)

            with st.expander("Detected needs and context"):
                st.json({"needs": profile.needs, "context": profile.context})


# =============================================================================
# CHAT TAB
# =============================================================================

def process_user_input(user_input: str, has_rapport: bool):
    """
    Match the conversation so far and store the reply.

    Flow:
    1. Capture conversation history BEFORE adding the new message
    2. Ask the chat engine for a reply grounded in matched resources
    3. Store both turns, with the matched resources on the reply
    """
    conversation_history = [
        {"role": m["role"], "content": m["content"]} for m in st.session_state.messages
    ]
    st.session_state.messages.append({"role": "user", "content": user_input})

    with st.spinner("Matching resources..."):
        try:
            result = get_engine().respond(user_input, history=conversation_history, has_rapport=has_rapport)
            reply, resources, used_llm = result.message, result.resources, result.used_llm
        except (FileNotFoundError, CatalogError) as e:
            reply, resources, used_llm = f"⚠️ Error: {e}", [], False

    st.session_state.messages.append({
        "role": "assistant",
        "content": reply,
        "resources": resources,
        "used_llm": used_llm,
    })


with chat_tab:
    chat_rapport = st.checkbox("Rapport established", key="chat_rapport")

    for message in st.session_state.messages:
        with st.chat_message(message["role"]):
            st.markdown(message["content"])
            if message["role"] == "assistant":
                if not message.get("used_llm"):
                    st.caption("Rule-based response (LLM not available)")
                if message.get("resources"):
                    with st.expander("📋 **Matched resources**"):
                        for rank, entry in enumerate(message["resources"], 1):
                            display_resource(entry, rank)

    user_input = st.chat_input("Describe the caller's situation...")
    if user_input:
        process_user_input(user_input, chat_rapport)
        st.rerun()


# =============================================================================
# SIDEBAR
# =============================================================================

with st.sidebar:
    st.markdown("### About")
    st.markdown("""
    Suggestions are produced by deterministic keyword matching over the
    resource catalog and question bank. They support, and never replace,
    the responder's judgement.

    **If a caller is in immediate danger, call 911 or 988.**
    """)

    st.markdown("---")

    st.markdown("### Catalog")
    st.markdown(f"- **Resources:** {len(catalog.resources)}")
    st.markdown(f"- **Questions:** {catalog.questions.total_questions}")
    st.markdown(f"- **Question categories:** {len(catalog.questions)}")
    st.markdown(f"- **Loaded:** {catalog.loaded_at:%Y-%m-%d %H:%M} UTC")

    if st.button("♻️ Reload catalog"):
        try:
            get_store().reload()
            st.rerun()
        except (FileNotFoundError, CatalogError) as e:
            st.error(f"Reload failed: {e}")

    st.markdown("---")

    if st.button("🔄 Start New Conversation"):
        reset_conversation()
        st.rerun()

    st.markdown("---")
    st.markdown("*Built with Streamlit + FastAPI + OpenAI*")
