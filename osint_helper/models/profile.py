"""Lookalike profiles produced by the analysis step.

LLM output drifts between runs: sections get renamed (``mainData`` vs
``main``), lists come back as comma-joined strings, scalars come back as
lists or go missing. :func:`normalize_profiles` is the only place that maps
such payloads onto :class:`LookalikeProfile`. Missing scalars become
``"N/A"`` and missing lists become ``[]``; only a missing top-level profile
array is an error.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from osint_helper.models.case import CamelModel
from osint_helper.utils.exceptions import ModelResponseParsingError
from osint_helper.utils.logging import get_logger

logger = get_logger(__name__)

NA = "N/A"

# Keys under which an object-shaped response may carry the profile array.
PROFILE_LIST_KEYS = ("profiles", "lookalikes", "tsezki", "reports", "results", "data")


class MainData(CamelModel):
    full_name: str = NA
    possible_nicknames: list[str] = Field(default_factory=list)
    date_of_birth: str = NA
    place_of_birth: str = NA
    citizenship: str = NA
    photo_link: str = NA


class Contacts(CamelModel):
    email: list[str] = Field(default_factory=list)
    phone: list[str] = Field(default_factory=list)
    residence_address: str = NA


class SocialMedia(BaseModel):
    VK: str = NA
    Facebook: str = NA
    LinkedIn: str = NA
    Telegram: str = NA
    other: list[str] = Field(default_factory=list)


class ProfessionalActivity(CamelModel):
    education: list[str] = Field(default_factory=list)
    workplace_position: list[str] = Field(default_factory=list)
    legal_entity_involvement: list[str] = Field(default_factory=list)


class MediaMentions(CamelModel):
    court_records: list[str] = Field(default_factory=list)
    media_mentions: list[str] = Field(default_factory=list)
    data_breaches: str = NA
    achievements: list[str] = Field(default_factory=list)


class LookalikeProfile(CamelModel):
    description: str = NA
    main_data: MainData = Field(default_factory=MainData)
    contacts: Contacts = Field(default_factory=Contacts)
    social_media: SocialMedia = Field(default_factory=SocialMedia)
    professional_activity: ProfessionalActivity = Field(default_factory=ProfessionalActivity)
    media_mentions: MediaMentions = Field(default_factory=MediaMentions)
    conclusion: str = NA
    accuracy_assessment: str = NA
    additional_info: str = NA
    sources: list[str] = Field(default_factory=list)


class ProfileSummary(BaseModel):
    """One-line view of a profile for tables."""

    name: str
    region: str
    activity: str
    certainty: str
    url: str


class LookalikeGroup(CamelModel):
    """Profiles sharing one (case-insensitive) full name."""

    key: str
    count: int
    main_data: MainData
    contacts: Contacts
    sources: list[str]
    conclusion: str
    accuracy_assessment: str


# ── Normalization ────────────────────────────────────────────────────


def _pick(raw: dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return None


def _section(raw: dict[str, Any], *names: str) -> dict[str, Any]:
    value = _pick(raw, *names)
    return value if isinstance(value, dict) else {}


def _text(value: Any) -> str:
    if value is None:
        return NA
    if isinstance(value, str):
        return value.strip() or NA
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, list):
        parts = [_text(v) for v in value]
        parts = [p for p in parts if p != NA]
        return ", ".join(parts) if parts else NA
    return NA


def _text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        if not value or value.upper() == NA:
            return []
        return [value]
    if isinstance(value, list):
        result: list[str] = []
        for item in value:
            text = _text(item)
            if text != NA and text not in result:
                result.append(text)
        return result
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [str(value)]
    return []


def normalize_profile(raw: Any) -> LookalikeProfile | None:
    """Map one loosely-shaped profile dict onto :class:`LookalikeProfile`.

    Returns ``None`` for non-objects and for profiles with neither a full
    name nor a description, since those identify nobody.
    """
    if not isinstance(raw, dict):
        return None

    main = _section(raw, "mainData", "main", "main_data")
    contacts = _section(raw, "contacts", "contact")
    social = _section(raw, "socialMedia", "social", "social_media")
    work = _section(raw, "professionalActivity", "professional", "professional_activity")
    media = _section(raw, "mediaMentions", "media", "media_mentions")

    full_name = _text(_pick(main, "fullName", "full_name", "name") or _pick(raw, "fullName", "name"))
    description = _text(_pick(raw, "description", "summary"))
    if full_name == NA and description == NA:
        return None

    return LookalikeProfile(
        description=description,
        main_data=MainData(
            full_name=full_name,
            possible_nicknames=_text_list(_pick(main, "possibleNicknames", "nicknames", "aliases")),
            date_of_birth=_text(_pick(main, "dateOfBirth", "date_of_birth", "dob")),
            place_of_birth=_text(_pick(main, "placeOfBirth", "place_of_birth")),
            citizenship=_text(_pick(main, "citizenship")),
            photo_link=_text(_pick(main, "photoLink", "photo_link", "photo")),
        ),
        contacts=Contacts(
            email=_text_list(_pick(contacts, "email", "emails")),
            phone=_text_list(_pick(contacts, "phone", "phones")),
            residence_address=_text(
                _pick(contacts, "residenceAddress", "residence_address", "address", "region")
                or _pick(raw, "region")
            ),
        ),
        social_media=SocialMedia(
            VK=_text(_pick(social, "VK", "vk")),
            Facebook=_text(_pick(social, "Facebook", "facebook")),
            LinkedIn=_text(_pick(social, "LinkedIn", "linkedin", "linkedIn")),
            Telegram=_text(_pick(social, "Telegram", "telegram")),
            other=_text_list(_pick(social, "other")),
        ),
        professional_activity=ProfessionalActivity(
            education=_text_list(_pick(work, "education")),
            workplace_position=_text_list(
                _pick(work, "workplacePosition", "workplace_position", "positions")
                or _pick(raw, "activity")
            ),
            legal_entity_involvement=_text_list(
                _pick(work, "legalEntityInvolvement", "legal_entity_involvement")
            ),
        ),
        media_mentions=MediaMentions(
            court_records=_text_list(_pick(media, "courtRecords", "court_records")),
            media_mentions=_text_list(_pick(media, "mediaMentions", "media_mentions", "mentions")),
            data_breaches=_text(_pick(media, "dataBreaches", "data_breaches")),
            achievements=_text_list(_pick(media, "achievements")),
        ),
        conclusion=_text(_pick(raw, "conclusion")),
        accuracy_assessment=_text(_pick(raw, "accuracyAssessment", "accuracy_assessment", "certainty")),
        additional_info=_text(_pick(raw, "additionalInfo", "additional_info")),
        sources=_text_list(_pick(raw, "sources", "urls") or _pick(raw, "url")),
    )


def normalize_profiles(payload: Any) -> list[LookalikeProfile]:
    """Normalize a parsed LLM response into a list of profiles.

    Accepts a bare array or an object holding the array under one of
    :data:`PROFILE_LIST_KEYS`.

    Raises:
        ModelResponseParsingError: no profile array is present.
    """
    items: Any = payload
    if isinstance(payload, dict):
        items = next(
            (payload[key] for key in PROFILE_LIST_KEYS if isinstance(payload.get(key), list)),
            None,
        )
    if not isinstance(items, list):
        raise ModelResponseParsingError(
            "LLM response has no profile array "
            f"(expected a JSON array or an object with one of {', '.join(PROFILE_LIST_KEYS)})"
        )

    profiles: list[LookalikeProfile] = []
    for idx, raw in enumerate(items):
        profile = normalize_profile(raw)
        if profile is None:
            logger.warning("profile_dropped", index=idx, reason="no name or description")
            continue
        profiles.append(profile)
    return profiles


# ── Views ────────────────────────────────────────────────────────────


def summarize_profiles(profiles: list[LookalikeProfile]) -> list[ProfileSummary]:
    summaries: list[ProfileSummary] = []
    for p in profiles:
        positions = p.professional_activity.workplace_position
        conclusion = "" if p.conclusion == NA else p.conclusion
        summaries.append(
            ProfileSummary(
                name=p.main_data.full_name,
                region=p.contacts.residence_address,
                activity=", ".join(positions) if positions else NA,
                certainty=f"{p.accuracy_assessment}. {conclusion}".strip(),
                url=p.sources[0] if p.sources else "#",
            )
        )
    return summaries


def group_profiles(profiles: list[LookalikeProfile]) -> list[LookalikeGroup]:
    """Group profiles by lowercased full name, first-seen order."""
    buckets: dict[str, list[LookalikeProfile]] = {}
    for p in profiles:
        key = p.main_data.full_name.lower().strip() if p.main_data.full_name != NA else "unknown"
        buckets.setdefault(key, []).append(p)

    groups: list[LookalikeGroup] = []
    for key, members in buckets.items():
        first = members[0]
        sources: list[str] = []
        for member in members:
            for src in member.sources:
                if src not in sources:
                    sources.append(src)
        groups.append(
            LookalikeGroup(
                key=key,
                count=len(members),
                main_data=first.main_data,
                contacts=first.contacts,
                sources=sources,
                conclusion=" | ".join(m.conclusion for m in members),
                accuracy_assessment=first.accuracy_assessment,
            )
        )
    return groups


def dump_profiles(profiles: list[LookalikeProfile]) -> list[dict]:
    return [p.model_dump(mode="json", by_alias=True) for p in profiles]
