"""
Pydantic schemas for reports.

Field aliases follow the remote authority's camelCase wire format
(``imageUrl``, ``pointsAwarded``) so records round-trip unchanged whichever
path created them.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
from civicsense.config import DEFAULT_CONTRIBUTOR_NAME
from ..db.enums import ReportCategory, ReportStatus, ReportSource, Destination


def _none_to_empty(v: Any) -> Any:
    return "" if v is None else v


class Location(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: str = ""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, v):
        v = _none_to_empty(v)
        return v.strip() if isinstance(v, str) else v


class ReportDraft(BaseModel):
    """Raw submission input, normalised the way the report form does it."""
    name: str = Field(DEFAULT_CONTRIBUTOR_NAME, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    # None => auto-detect from the description
    category: Optional[ReportCategory] = None
    location: Location = Field(default_factory=Location)
    image_url: str = Field("", alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True, json_schema_extra={
        "example": {
            "name": "Jane",
            "description": "Deep pothole on the road near the school gate",
            "location": {"lat": 28.6139, "lng": 77.209, "address": "School Rd"},
        }
    })

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CONTRIBUTOR_NAME
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("image_url", mode="before")
    @classmethod
    def normalize_image(cls, v):
        return _none_to_empty(v)


class Report(BaseModel):
    """A triaged report. Identical shape for remote and locally synthesized records."""
    id: str = Field(min_length=1)
    name: str = DEFAULT_CONTRIBUTOR_NAME
    description: str = Field(min_length=1)
    category: ReportCategory = ReportCategory.OTHER
    location: Location = Field(default_factory=Location)
    image_url: str = Field("", alias="imageUrl")
    status: ReportStatus
    points_awarded: int = Field(0, alias="pointsAwarded")
    timestamp: int = Field(ge=0, description="Creation instant, epoch milliseconds")

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        # Remote ids may arrive as numbers or ObjectId-like strings
        return str(v) if v is not None and not isinstance(v, str) else v

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, v):
        if v is None:
            return ReportCategory.OTHER
        try:
            return ReportCategory(v)
        except ValueError:
            return ReportCategory.OTHER

    @field_validator("image_url", mode="before")
    @classmethod
    def normalize_image(cls, v):
        return _none_to_empty(v)

    @field_validator("points_awarded", mode="before")
    @classmethod
    def default_points(cls, v):
        return 0 if v is None else v

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class StatusUpdate(BaseModel):
    status: ReportStatus


class SubmissionRead(BaseModel):
    report: Report
    source: ReportSource
    next_destination: Destination
    stored: bool = True


class MapMarker(BaseModel):
    id: str
    lat: float
    lng: float
    label: str


class CleanupResult(BaseModel):
    removed: int
    remaining: int
    max_age_days: int


class LeaderboardEntryRead(BaseModel):
    name: str
    points: int
    report_count: int = Field(alias="reportCount")

    model_config = ConfigDict(populate_by_name=True)


class LeaderboardRead(BaseModel):
    entries: List[LeaderboardEntryRead]
    total_contributors: int
