from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Timeframe(BaseModel):
    start: str
    end: str


class GeographyInput(BaseModel):
    country: str = Field(min_length=1)
    stateOrTerritory: str | None = None
    city: str | None = None
    suburb: str | None = None
    postcode: str | None = None


class CrmAssets(BaseModel):
    hashedEmailsAvailable: bool | None = None
    customerCount: int | None = None
    pastPurchasersEligibleForSeed: bool | None = None


class MarketingPlanInput(BaseModel):
    brand: str = Field(min_length=1)
    productOrService: str = Field(min_length=1)
    pricePoint: str = Field(min_length=1)
    objectives: list[str] = Field(default_factory=list)
    primaryKPIs: list[str] = Field(default_factory=list)
    timeframe: Timeframe
    totalBudget: float | None = None
    geographyInput: GeographyInput
    helixSegmentsSelected: list[str] = Field(min_length=1)
    approvedChannels: list[str] | None = None
    disallowedChannels: list[str] | None = None
    crmAssets: CrmAssets = Field(default_factory=CrmAssets)
    promotionsOffers: list[str] | None = None
    competitors: list[str] | None = None
    seasonalityNotes: list[str] | None = None
    constraints: list[str] | None = None


class MarketingPlanResult(BaseModel):
    executiveSummary: str | None = None
    plan: dict[str, Any]


class MarketingPlanResponse(MarketingPlanResult):
    success: bool = True
