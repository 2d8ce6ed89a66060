"""Data models for the application."""

from datetime import date
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ALL = "All"
UNASSIGNED = "Unassigned"
UNCATEGORIZED = "Uncategorized"

SEGMENTS = ("Agency", "ISV", "Franchise/Multi-location", "Media", "MSP")

ActivityType = Literal["note", "email", "meeting"]
Segment = Literal["Agency", "ISV", "Franchise/Multi-location", "Media", "MSP", "Uncategorized"]
Sentiment = Literal["Positive", "Negative", "Neutral"]


class Activity(BaseModel):
    """A single dated interaction (note, email or meeting) on an account."""

    id: str
    type: ActivityType
    date: str  # Kept raw; unparseable dates never match a date window
    summary: str
    content: str  # Email body, note text or meeting transcript


class Account(BaseModel):
    """CRM account with ownership, classification and activity history."""

    id: str
    name: str
    ae: str = UNASSIGNED
    team: str = UNASSIGNED
    tier: int = Field(ge=1, le=5)
    segment: Segment = UNCATEGORIZED
    activities: list[Activity] = Field(default_factory=list)

    @field_validator("ae", "team", mode="before")
    @classmethod
    def _default_owner(cls, value):
        return UNASSIGNED if value in (None, "") else value

    @field_validator("segment", mode="before")
    @classmethod
    def _default_segment(cls, value):
        return UNCATEGORIZED if value in (None, "") else value


class FilterCriteria(BaseModel):
    """Filters for one analysis request. "All" is the wildcard."""

    team: str = ALL
    ae: str = ALL
    tier: str = ALL
    segment: str = ALL
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")

    model_config = ConfigDict(populate_by_name=True)


class FilterOptions(BaseModel):
    """Choices available for each filter, each list led by "All"."""

    teams: list[str] = Field(default_factory=lambda: [ALL])
    aes: list[str] = Field(default_factory=lambda: [ALL])
    tiers: list[str] = Field(default_factory=lambda: [ALL])
    segments: list[str] = Field(default_factory=lambda: [ALL])


class KeyMoment(BaseModel):
    """A quoted moment from a transcript with its sentiment."""

    quote: str
    sentiment: Sentiment
    account_name: str = Field(alias="accountName")

    model_config = ConfigDict(populate_by_name=True)


class SentimentResult(BaseModel):
    """Overall sentiment across meeting transcripts."""

    overall_score: float = Field(alias="overallScore", ge=-1.0, le=1.0)
    summary: str
    key_moments: list[KeyMoment] = Field(alias="keyMoments")

    model_config = ConfigDict(populate_by_name=True)


class AnalysisStatus(str, Enum):
    """Lifecycle of a single analysis request."""

    IDLE = "idle"
    FILTERING = "filtering"
    FORMATTING = "formatting"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"


class AnalysisResult(BaseModel):
    """Outcome of one analysis request."""

    insight: str
    sentiment: Optional[SentimentResult] = None
    status: AnalysisStatus = AnalysisStatus.COMPLETE
    error: Optional[str] = None  # Set only when status is FAILED
    account_count: int = 0
    activity_count: int = 0
