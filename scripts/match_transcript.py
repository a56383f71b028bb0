#!/usr/bin/env python3
"""
scripts/match_transcript.py
===========================

CLI for running the matching engine against a transcript.

Usage:
    # Match a transcript given on the command line
    python scripts/match_transcript.py "17 year old girl in Nashville, no money"

    # Read the transcript from a file (or "-" for stdin)
    python scripts/match_transcript.py --file notes.txt

    # Rapport established, alternate catalogs
    python scripts/match_transcript.py --rapport \\
        --resources data/resources.json \\
        --questions data/question_bank.json \\
        "caller is a veteran and feels hopeless"
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import config
from catalog.loader import CatalogError, load_question_bank, load_resources
from matching.extractor import extract_profile
from matching.service import rank_for_profile, select_questions
from matching.vocabulary import load_vocabulary


def read_transcript(args: argparse.Namespace) -> str:
    if args.file == "-":
        return sys.stdin.read()
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return " ".join(args.transcript)


def main():
    parser = argparse.ArgumentParser(
        description="Shortlist resources and interview questions for a transcript",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("transcript", nargs="*", help="Transcript text")
    parser.add_argument("--file", type=str, help="Read the transcript from a file ('-' for stdin)")
    parser.add_argument("--rapport", action="store_true", help="Rapport has been established")
    parser.add_argument("--resources", type=str, help="Resource catalog JSON (default: RESOURCES_PATH)")
    parser.add_argument("--questions", type=str, help="Question bank JSON (default: QUESTION_BANK_PATH)")
    parser.add_argument("--vocabulary", type=str, help="Vocabulary override JSON (default: VOCABULARY_PATH)")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Log level (default: WARNING)")

    args = parser.parse_args()
    config.configure_logging(args.log_level)

    transcript = read_transcript(args)
    if not transcript.strip():
        parser.error("a transcript is required (argument, --file or stdin)")

    try:
        resources = load_resources(args.resources)
        bank = load_question_bank(args.questions)
        vocabulary = load_vocabulary(args.vocabulary)
    except (FileNotFoundError, CatalogError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    profile = extract_profile(transcript, vocabulary)
    result = rank_for_profile(profile, resources.resources, vocabulary=vocabulary)
    questions = select_questions(transcript, args.rapport, bank, from_transcript=True, vocabulary=vocabulary)

    print("=" * 60)
    print("CRISIS RESOURCE NAVIGATOR - Transcript Match")
    print("=" * 60)
    print()

    print("🧩 DETECTED NEEDS AND CONTEXT")
    print("-" * 40)
    print(f"   Needs: {', '.join(profile.needs) or '(none)'}")
    for key, value in profile.context.items():
        print(f"   {key}: {value}")
    print()

    print("📋 RESOURCES")
    print("-" * 40)
    if not len(result):
        print("   (no resources matched)")
    for rank, entry in enumerate(result, 1):
        marker = "🚨 " if entry.is_safety else ""
        r = entry.resource
        print(f"   {rank}. {marker}{r.name}" + (f"  ({r.phone})" if r.phone else ""))
        print(f"      {entry.justification}")
    print()

    print("❓ QUESTIONS")
    print("-" * 40)
    if not questions:
        print("   (no questions for this situation)")
    for q in questions:
        print(f"   [{q.id}] {q.question}")
        print(f"       Tone: {q.tone} | Risk: {q.risk_level} | Tier: {q.escalation_tier}")
    print()


if __name__ == "__main__":
    main()
