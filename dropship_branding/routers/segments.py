from __future__ import annotations

from fastapi import APIRouter, Depends

from dropship_branding.db.deps import get_helix_segments_repository
from dropship_branding.db.repositories.helix_segments import HelixSegmentsRepository
from dropship_branding.llm.client import CompletionClient
from dropship_branding.schemas.segments import (
    AnalyzeWebsiteRequest,
    AnalyzeWebsiteResponse,
    HelixSegmentsResponse,
)
from dropship_branding.services.deps import get_completion_client, get_website_fetcher
from dropship_branding.services.segments import analyze_website
from dropship_branding.services.website import WebsiteFetcher

router = APIRouter(tags=["segments"])


@router.post("/analyze-website", response_model=AnalyzeWebsiteResponse)
async def analyze_website_route(
    payload: AnalyzeWebsiteRequest,
    fetcher: WebsiteFetcher = Depends(get_website_fetcher),
    llm: CompletionClient = Depends(get_completion_client),
):
    return await analyze_website(fetcher=fetcher, llm=llm, request=payload)


@router.get("/helix-segments", response_model=HelixSegmentsResponse)
async def list_helix_segments(
    repository: HelixSegmentsRepository = Depends(get_helix_segments_repository),
):
    segments, from_database = await repository.list_or_fallback()
    return HelixSegmentsResponse(
        source="database" if from_database else "fallback",
        segments=segments,
    )
