"""
config.py - Configuration settings for the Crisis Resource Navigator
=====================================================================

This file centralizes all configuration values: catalog locations, result
policy caps, LLM settings, logging, and the default matching vocabulary.

Sensitive values (API keys) and deployment-specific paths come from
environment variables or a local .env file.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file if it exists
load_dotenv()

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Base directory (where this file lives)
BASE_DIR = Path(__file__).parent

# Catalog files loaded once at startup
DATA_DIR = BASE_DIR / "data"
RESOURCES_PATH = Path(os.getenv("RESOURCES_PATH", str(DATA_DIR / "resources.json")))
QUESTION_BANK_PATH = Path(os.getenv("QUESTION_BANK_PATH", str(DATA_DIR / "question_bank.json")))

# Optional JSON file that replaces any of the default vocabulary tables below
VOCABULARY_PATH = os.getenv("VOCABULARY_PATH") or None

# =============================================================================
# RESULT POLICY
# =============================================================================

# Ranked (non-safety) resources returned after the 911/988 entries
MAX_RANKED_RESOURCES = 3

# Question caps: a specific category match vs. the general fallback
SPECIFIC_QUESTION_LIMIT = 3
GENERAL_QUESTION_LIMIT = 2

# Category used when the transcript names no specific situation
GENERAL_QUESTION_CATEGORY = "recent_suicidal_thoughts"

# =============================================================================
# LLM CONFIGURATION
# =============================================================================

# OpenAI API key - leave empty to run with rule-based responses only
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Model used to phrase guidance for the crisis responder
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")

LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS = 1000

# Maximum conversation history turns forwarded to the LLM
MAX_HISTORY_TURNS = 6

# How much matched context goes into the system prompt
PROMPT_RESOURCE_LIMIT = 5
PROMPT_QUESTION_LIMIT = 3

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


# =============================================================================
# MATCHING VOCABULARY
# =============================================================================

# Every table maps a label to an ordered list of trigger phrases. Table order
# and phrase order both matter: they decide which rule wins when a transcript
# triggers more than one. Matching is lower-case substring containment unless
# noted otherwise.

# Crisis types; every label that matches is recorded, in this order
CRISIS_TYPE_PHRASES = {
    "suicidal ideation": [
        "suicidal", "want to end my life", "kill myself", "suicide", "can't go on",
    ],
    "domestic violence": [
        "abuse", "hit me", "violent home", "partner hurt", "domestic", "beaten",
    ],
    "homelessness": [
        "homeless", "no place to stay", "nowhere to go", "live on the street",
    ],
    "substance use": [
        "drugs", "addiction", "alcohol", "overdose", "substance", "drinking problem",
    ],
    "grief": [
        "loss", "passed away", "grief", "mourning", "lost someone",
    ],
    "imminent risk": [
        "immediate danger", "in danger", "hurt myself", "going to do it now",
        "can't keep myself safe", "overdose", "gun", "knife",
    ],
}

# Label whose detection triggers the 911/988 safety override
IMMINENT_RISK_LABEL = "imminent risk"

# Gender; first matching label wins
GENDER_PHRASES = {
    "female": ["woman", "female", "girl"],
    "male": ["man", "male", "boy"],
}

# Demographic tag; evaluated in order, the last matching label wins
DEMOGRAPHIC_PHRASES = {
    "veteran": ["veteran"],
    "lgbtq+": ["lgbt", "gay", "lesbian", "trans"],
}

# Family status; first matching label wins
FAMILY_PHRASES = {
    "single mother": ["single mother", "single mom"],
}

# Boolean and flag-style signals
SIGNAL_PHRASES = {
    "teen": ["teen"],
    "has_children": ["child", "children", "son", "daughter"],
    "transportation_limited": ["no car", "can't drive", "bus only", "no transportation"],
    "cost_sensitive": ["no money", "can't afford", "broke", "no insurance", "uninsured"],
    "urgency": ["urgent", "now", "immediately"],
}

# Preferred service language; first matching label wins
LANGUAGE_PHRASES = {
    "spanish": ["spanish"],
}

# Location buckets, matched on whole words; first matching bucket wins
LOCATION_TERMS = {
    "Davidson": ["davidson", "nashville"],
    "Middle TN Outside Davidson": ["williamson", "sumner", "rutherford", "robertson"],
}

# Service-area wording accepted for each location bucket by the filter
SERVICE_AREA_TERMS = {
    "Davidson": ["nashville", "davidson", "greater nashville", "statewide"],
    "Middle TN Outside Davidson": [
        "sumner", "rutherford", "williamson", "robertson", "middle tennessee", "statewide",
    ],
}

# Question-bank category inference; first matching category wins
QUESTION_CATEGORY_PHRASES = {
    "attempt_in_progress": ["suicidal", "suicide", "kill myself", "end my life", "want to die"],
    "adolescent": ["teen", "adolescent", "young"],
    "veteran": ["veteran"],
    "elderly": ["elderly", "senior"],
    GENERAL_QUESTION_CATEGORY: ["depression", "depressed", "sad"],
}
