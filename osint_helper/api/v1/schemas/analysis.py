"""Response model for the analysis endpoint."""

from __future__ import annotations

from osint_helper.models.case import CamelModel
from osint_helper.models.profile import LookalikeGroup, LookalikeProfile, ProfileSummary


class AnalyzeResponse(CamelModel):
    message: str = "Analysis complete"
    analysis_data: list[LookalikeProfile]
    summaries: list[ProfileSummary]
    groups: list[LookalikeGroup]
    batches: int
