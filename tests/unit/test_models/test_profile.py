"""Unit tests for lookalike profile normalization and views."""

from __future__ import annotations

import pytest

from osint_helper.models.profile import (
    NA,
    group_profiles,
    normalize_profile,
    normalize_profiles,
    summarize_profiles,
)
from osint_helper.utils.exceptions import ModelResponseParsingError


@pytest.fixture
def raw_profile() -> dict:
    return {
        "description": "Director of Romashka LLC",
        "mainData": {
            "fullName": "Ivan Petrov",
            "possibleNicknames": ["ipetrov"],
            "dateOfBirth": "1980-01-01",
        },
        "contacts": {"email": "ivan@example.com", "residenceAddress": "Moscow"},
        "socialMedia": {"VK": "vk.com/ipetrov"},
        "professionalActivity": {"workplacePosition": ["Director, Romashka LLC"]},
        "conclusion": "Likely the target",
        "accuracyAssessment": "High",
        "sources": ["https://example.com/a", "https://example.com/b"],
    }


def test_normalize_full_profile(raw_profile):
    profile = normalize_profile(raw_profile)

    assert profile.main_data.full_name == "Ivan Petrov"
    assert profile.main_data.possible_nicknames == ["ipetrov"]
    assert profile.main_data.place_of_birth == NA
    assert profile.contacts.email == ["ivan@example.com"]
    assert profile.contacts.phone == []
    assert profile.social_media.VK == "vk.com/ipetrov"
    assert profile.social_media.Telegram == NA
    assert profile.media_mentions.court_records == []
    assert profile.sources == ["https://example.com/a", "https://example.com/b"]


def test_main_and_main_data_spellings_agree(raw_profile):
    renamed = dict(raw_profile)
    renamed["main"] = renamed.pop("mainData")

    assert normalize_profile(renamed) == normalize_profile(raw_profile)


def test_profile_without_name_or_description_is_dropped():
    assert normalize_profile({"contacts": {"email": ["x@example.com"]}}) is None
    assert normalize_profile("Ivan Petrov") is None


def test_normalize_profiles_accepts_wrapped_array(raw_profile):
    profiles = normalize_profiles({"profiles": [raw_profile, {"junk": True}]})
    assert len(profiles) == 1


def test_normalize_profiles_accepts_bare_array(raw_profile):
    assert len(normalize_profiles([raw_profile])) == 1


def test_normalize_profiles_rejects_missing_array():
    with pytest.raises(ModelResponseParsingError, match="no profile array"):
        normalize_profiles({"summary": "nothing here"})


def test_camel_case_dump(raw_profile):
    dumped = normalize_profile(raw_profile).model_dump(by_alias=True)
    assert dumped["mainData"]["fullName"] == "Ivan Petrov"
    assert dumped["socialMedia"]["LinkedIn"] == NA
    assert dumped["accuracyAssessment"] == "High"


def test_summarize_profiles(raw_profile):
    (summary,) = summarize_profiles([normalize_profile(raw_profile)])

    assert summary.name == "Ivan Petrov"
    assert summary.region == "Moscow"
    assert summary.activity == "Director, Romashka LLC"
    assert summary.certainty == "High. Likely the target"
    assert summary.url == "https://example.com/a"


def test_summary_without_sources_links_nowhere():
    (summary,) = summarize_profiles([normalize_profile({"description": "someone"})])
    assert summary.url == "#"
    assert summary.activity == NA


def test_group_profiles_by_lowercased_name(raw_profile):
    other = dict(raw_profile)
    other["mainData"] = {"fullName": "IVAN PETROV"}
    other["sources"] = ["https://example.com/b", "https://example.com/c"]
    other["conclusion"] = "Namesake"
    unnamed = {"description": "unnamed person"}

    groups = group_profiles([normalize_profile(p) for p in (raw_profile, other, unnamed)])

    assert [g.key for g in groups] == ["ivan petrov", "unknown"]
    assert groups[0].count == 2
    assert groups[0].sources == [
        "https://example.com/a",
        "https://example.com/b",
        "https://example.com/c",
    ]
    assert groups[0].conclusion == "Likely the target | Namesake"
