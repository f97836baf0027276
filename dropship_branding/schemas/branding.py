from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


BRANDING_STRING_FIELDS = ("brandName", "tagline", "landingPageCopy", "budgetStrategy")
BRANDING_LIST_FIELDS = ("adHeadlines", "tiktokScripts", "adPlatforms")
BRANDING_REQUIRED_FIELDS = (
    "brandName",
    "tagline",
    "landingPageCopy",
    "adHeadlines",
    "tiktokScripts",
    "adPlatforms",
    "budgetStrategy",
)


class BrandingInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: str
    persona: str
    tone: str
    location: str


class BrandingResult(BaseModel):
    brandName: str = Field(min_length=1)
    tagline: str = Field(min_length=1)
    landingPageCopy: str = Field(min_length=1)
    adHeadlines: list[str] = Field(min_length=1)
    tiktokScripts: list[str] = Field(min_length=1)
    adPlatforms: list[str] = Field(min_length=1)
    budgetStrategy: str = Field(min_length=1)

    def to_output_row(self, *, project_id: str) -> dict[str, Any]:
        return {
            "project_id": project_id,
            "brand_name": self.brandName,
            "tagline": self.tagline,
            "landing_page_copy": self.landingPageCopy,
            "ad_headlines": list(self.adHeadlines),
            "tiktok_scripts": list(self.tiktokScripts),
            "ad_platforms": list(self.adPlatforms),
            "budget_strategy": self.budgetStrategy,
        }


class GenerateBrandingRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    product: str = Field(min_length=1)
    persona: str = Field(min_length=1)
    tone: str = Field(min_length=1)
    location: str = Field(min_length=1)
    userId: str = Field(min_length=1)
    description: str | None = None

    def to_branding_input(self) -> BrandingInput:
        return BrandingInput(
            product=self.product,
            persona=self.persona,
            tone=self.tone,
            location=self.location,
        )


class RegenerateBrandingRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    projectId: str = Field(min_length=1)


class Project(BaseModel):
    """Row of the `projects` table as returned by the hosted database."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str | None = None
    product_name: str
    product_description: str | None = None
    target_persona: str
    locality: str
    brand_tone: str | None = None
    created_at: datetime | None = None


class Output(BaseModel):
    """Row of the `outputs` table. Append-only."""

    model_config = ConfigDict(extra="ignore")

    id: str
    project_id: str
    brand_name: str
    tagline: str
    landing_page_copy: str
    ad_headlines: list[str] = Field(default_factory=list)
    tiktok_scripts: list[str] = Field(default_factory=list)
    ad_platforms: list[str] = Field(default_factory=list)
    budget_strategy: str
    created_at: datetime | None = None


class ProjectWithOutputs(Project):
    outputs: list[Output] = Field(default_factory=list)


class GenerateBrandingResponse(BaseModel):
    success: bool = True
    project: Project
    output: Output
    branding: BrandingResult


class RegenerateBrandingResponse(BaseModel):
    success: bool = True
    output: Output
    branding: BrandingResult


class ProjectHistoryResponse(BaseModel):
    success: bool = True
    projects: list[ProjectWithOutputs]


class ProjectOutputsResponse(BaseModel):
    success: bool = True
    projectId: str
    outputs: list[Output]
