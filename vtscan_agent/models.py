from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class ScanRequest(BaseModel):
    url: str = Field(..., min_length=1)


class AnalysisStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    harmless: int = Field(0, ge=0)
    malicious: int = Field(0, ge=0)
    suspicious: int = Field(0, ge=0)
    timeout: int = Field(0, ge=0)
    undetected: int = Field(0, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def flagged(self) -> int:
        return self.malicious + self.suspicious


class TotalVotes(BaseModel):
    model_config = ConfigDict(frozen=True)

    harmless: int = Field(0, ge=0)
    malicious: int = Field(0, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


# Upstream envelopes. Only the fields we read are declared; the rest of the
# (large) upstream payload is ignored.


class UrlReportAttributes(BaseModel):
    last_analysis_date: int | None = None
    last_submission_date: int | None = None
    times_submitted: int | None = None
    last_analysis_stats: AnalysisStats | None = None
    total_votes: TotalVotes | None = None


class UrlReportData(BaseModel):
    id: str | None = None
    type: str | None = None
    attributes: UrlReportAttributes = Field(default_factory=UrlReportAttributes)


class UrlReport(BaseModel):
    data: UrlReportData = Field(default_factory=UrlReportData)

    @property
    def attributes(self) -> UrlReportAttributes:
        return self.data.attributes


class SubmitUrlData(BaseModel):
    id: str | None = None
    type: str | None = None


class SubmitUrlResponse(BaseModel):
    data: SubmitUrlData | None = None


class AnalysisAttributes(BaseModel):
    status: str | None = None
    date: int | None = None


class AnalysisData(BaseModel):
    id: str | None = None
    type: str | None = None
    attributes: AnalysisAttributes = Field(default_factory=AnalysisAttributes)


class AnalysisResponse(BaseModel):
    data: AnalysisData = Field(default_factory=AnalysisData)


class AnalysisJob(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    status: str | None = None
    date: int | None = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    @property
    def pending(self) -> bool:
        # No status yet is treated like queued.
        return self.status in (None, "", "queued", "running")


class ScanSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    safe: bool
    was_stale: bool = Field(alias="wasStale")
    stale_age_human: str
    last_submitted_ago: str
    last_analysis_date: str | None = None
    last_submission_date: str | None = None
    times_submitted: int | None = None
    total_votes: TotalVotes = Field(default_factory=TotalVotes)
    last_analysis_stats: AnalysisStats = Field(default_factory=AnalysisStats)


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None
