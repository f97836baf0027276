from __future__ import annotations

from fastapi import APIRouter, Depends

from dropship_branding.llm.client import CompletionClient
from dropship_branding.schemas.marketing_plan import MarketingPlanInput, MarketingPlanResponse
from dropship_branding.services.deps import get_completion_client
from dropship_branding.services.marketing_plan import generate_marketing_plan

router = APIRouter(tags=["marketing-plan"])


@router.post("/generate-marketing-plan", response_model=MarketingPlanResponse)
async def generate_marketing_plan_route(
    payload: MarketingPlanInput,
    llm: CompletionClient = Depends(get_completion_client),
):
    result = await generate_marketing_plan(llm, payload)
    return MarketingPlanResponse(executiveSummary=result.executiveSummary, plan=result.plan)
