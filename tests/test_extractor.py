from dataclasses import replace
from types import MappingProxyType

import pytest
from loguru import logger

from matching.extractor import extract_profile
from matching.vocabulary import default_vocabulary


@pytest.mark.parametrize("transcript", [None, ""])
def test_empty_transcript_gives_empty_profile(transcript):
    profile = extract_profile(transcript)
    assert profile.needs == []
    assert profile.context == {}


def test_crisis_types_in_vocabulary_order():
    profile = extract_profile("I have a gun and I want to kill myself")
    assert profile.needs == ["suicidal ideation", "imminent risk"]
    assert profile.context["imminent_risk"] is True
    assert profile.context["urgency"] == "immediate"


def test_label_recorded_once_even_with_several_phrases():
    profile = extract_profile("suicidal, suicide, can't go on")
    assert profile.needs == ["suicidal ideation"]


def test_overdose_counts_as_substance_use_and_imminent_risk():
    profile = extract_profile("he took an overdose")
    assert profile.needs == ["substance use", "imminent risk"]


def test_imminent_risk_only_from_imminent_phrases():
    profile = extract_profile("I feel suicidal")
    assert "imminent risk" not in profile.needs
    assert "imminent_risk" not in profile.context


@pytest.mark.parametrize("transcript,age", [
    ("I'm 17 years old", 17),
    ("she is 15yo", 15),
    ("a 16 year old caller", 16),
])
def test_age_extraction(transcript, age):
    profile = extract_profile(transcript)
    assert profile.context["age"] == age
    assert "age_group" not in profile.context


def test_teen_without_age_sets_age_group():
    assert extract_profile("caller is a teen").context["age_group"] == "teen"


def test_explicit_age_wins_over_teen_wording():
    context = extract_profile("a teen, 17 years old").context
    assert context["age"] == 17
    assert "age_group" not in context


def test_gender_first_label_wins():
    assert extract_profile("a woman and a man").context["gender"] == "female"
    assert extract_profile("the boy next door").context["gender"] == "male"


def test_demographic_later_rule_wins():
    assert extract_profile("I'm a veteran").context["demographic"] == "veteran"
    assert extract_profile("a gay veteran").context["demographic"] == "lgbtq+"


def test_family_and_children():
    context = extract_profile("single mom with two children").context
    assert context["family"] == "single mother"
    assert context["has_children"] is True


def test_logistics():
    context = extract_profile("I have no car and no money").context
    assert context["transportation"] == "limited"
    assert context["cost_sensitive"] is True


@pytest.mark.parametrize("transcript,location", [
    ("I live in Nashville", "Davidson"),
    ("we're in Sumner county", "Middle TN Outside Davidson"),
    ("Nashville, sometimes Sumner", "Davidson"),
])
def test_location_buckets(transcript, location):
    assert extract_profile(transcript).context["location"] == location


def test_location_needs_whole_words():
    assert "location" not in extract_profile("Davidsonville road").context


def test_language_and_urgency():
    context = extract_profile("she only speaks Spanish, please help immediately").context
    assert context["language"] == "spanish"
    assert context["urgency"] == "immediate"
    assert "imminent_risk" not in context


def test_context_is_sparse():
    profile = extract_profile("hello there")
    assert profile.needs == []
    assert profile.context == {}


def test_custom_vocabulary():
    vocab = replace(
        default_vocabulary(),
        crisis_types=MappingProxyType({"eviction": ("evicted", "eviction notice")}),
    )
    profile = extract_profile("we got evicted yesterday", vocab)
    assert profile.needs == ["eviction"]


def test_overlapping_locations_are_logged():
    messages = []
    handler = logger.add(messages.append, level="DEBUG")
    try:
        extract_profile("Nashville or Sumner")
    finally:
        logger.remove(handler)
    assert any("several location buckets" in str(m) for m in messages)


def test_overlapping_genders_are_logged():
    messages = []
    handler = logger.add(messages.append, level="DEBUG")
    try:
        profile = extract_profile("a woman called about her son")
    finally:
        logger.remove(handler)
    assert profile.context["gender"] == "female"
    assert any("several genders" in str(m) for m in messages)


def test_suicidal_caller_without_money_or_car():
    profile = extract_profile(
        "I'm feeling suicidal and don't know what to do, I have no money and no car"
    )
    assert profile.needs == ["suicidal ideation"]
    # "now" inside "know" still reads as urgency
    assert profile.context == {
        "transportation": "limited",
        "cost_sensitive": True,
        "urgency": "immediate",
    }


def test_teen_in_nashville_needing_help_now():
    profile = extract_profile("17 year old teen in Nashville needs help now")
    assert profile.context["age"] == 17
    assert profile.context["location"] == "Davidson"
    assert profile.context["urgency"] == "immediate"
    assert "imminent_risk" not in profile.context
