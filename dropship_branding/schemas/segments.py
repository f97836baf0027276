from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


HELIX_SEGMENTS_FALLBACK = (
    "Socially Aware Urbanites",
    "Rural Traditionalists",
    "Affluent and Ambitious",
    "Family-Focused Suburbanites",
    "Young Professional Urbanites",
    "Retirement-Age Traditionalists",
    "Creative and Alternative",
    "Health and Wellness Enthusiasts",
    "Tech-Savvy Early Adopters",
    "Value-Conscious Pragmatists",
)


class HelixSegment(BaseModel):
    id: str
    label: str
    groupName: str | None = None
    description: str | None = None


class SegmentRecommendation(BaseModel):
    recommendedSegments: list[str] = Field(default_factory=list)
    reasoningSummary: str | None = None
    productName: str | None = None
    productDescription: str | None = None


class SegmentMatch(BaseModel):
    label: str
    matchedLabel: str | None = None
    isCustom: bool


class AnalyzeWebsiteRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(min_length=1)
    availableSegments: list[str] | None = None
    locale: str | None = None
    topN: int | None = Field(default=None, ge=1, le=10)

    @field_validator("availableSegments", mode="before")
    @classmethod
    def coerce_segments(cls, value):
        if value is None:
            return None
        if not isinstance(value, list):
            raise ValueError("availableSegments must be a list of labels")
        return [str(item).strip() for item in value if item is not None and str(item).strip()]


class AnalyzeWebsiteResponse(BaseModel):
    success: bool = True
    recommendedSegments: list[str]
    reasoningSummary: str | None = None
    productName: str | None = None
    productDescription: str | None = None
    segmentMatches: list[SegmentMatch] = Field(default_factory=list)
    analyzedUrl: str
    isGenericPage: bool


class HelixSegmentsResponse(BaseModel):
    success: bool = True
    source: Literal["database", "fallback"]
    segments: list[HelixSegment]
