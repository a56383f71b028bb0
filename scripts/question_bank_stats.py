#!/usr/bin/env python3
"""
scripts/question_bank_stats.py - Summarize the interview question bank
=======================================================================

Prints question counts per category, escalation tier, risk level and tone,
then the high-priority (tier 3) questions and the questions available
before rapport for a few common situations.

Usage:
    python scripts/question_bank_stats.py
    python scripts/question_bank_stats.py --questions path/to/question_bank.json

Run this after editing the question bank to sanity-check the taxonomy.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from catalog.loader import CatalogError, load_question_bank

HIGH_PRIORITY_CATEGORY = "attempt_in_progress"
NO_RAPPORT_CATEGORY = "adolescent"


def print_counts(title: str, counts: dict, label: str = ""):
    print(f"\n{title}:")
    for key, count in counts.items():
        print(f"  {label}{key}: {count} questions")


def main():
    parser = argparse.ArgumentParser(description="Summarize the interview question bank")
    parser.add_argument("--questions", type=str, help="Question bank JSON (default: QUESTION_BANK_PATH)")
    args = parser.parse_args()

    try:
        bank = load_question_bank(args.questions)
    except (FileNotFoundError, CatalogError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    stats = bank.statistics()

    print("Question Bank Statistics:")
    print("=" * 50)
    print(f"Total Questions: {stats.total_questions}")
    print_counts("Categories", stats.categories)
    print_counts("Escalation Tiers", stats.escalation_tiers, label="Tier ")
    print_counts("Risk Levels", stats.risk_levels)
    print_counts("Tones", stats.tones)

    print()
    print("=" * 50)
    print(f"High Priority Questions (Tier 3) - {HIGH_PRIORITY_CATEGORY}:")
    print("=" * 50)
    for q in bank.high_priority(HIGH_PRIORITY_CATEGORY):
        print(f"\nID: {q.id}")
        print(f"Question: {q.question}")
        print(f"Tone: {q.tone} | Risk: {q.risk_level} | Notes: {q.notes}")

    print()
    print("=" * 50)
    print(f"Questions for '{NO_RAPPORT_CATEGORY}' situation (no rapport):")
    print("=" * 50)
    for q in bank.for_situation(NO_RAPPORT_CATEGORY, has_rapport=False):
        print(f"\nID: {q.id} | Tier: {q.escalation_tier}")
        print(f"Question: {q.question}")


if __name__ == "__main__":
    main()
