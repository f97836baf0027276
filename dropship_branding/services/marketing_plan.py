from __future__ import annotations

from dropship_branding.llm.client import CompletionClient, marketing_plan_params
from dropship_branding.llm.parsing import normalize_marketing_plan
from dropship_branding.prompts.marketing_plan import (
    MARKETING_PLAN_REQUIRED_KEYS,
    MARKETING_PLAN_SYSTEM_PROMPT,
    build_marketing_plan_prompt,
)
from dropship_branding.schemas.marketing_plan import MarketingPlanInput, MarketingPlanResult


async def generate_marketing_plan(llm: CompletionClient, plan_input: MarketingPlanInput) -> MarketingPlanResult:
    prompt = build_marketing_plan_prompt(plan_input)
    text = await llm.complete(
        prompt,
        system_prompt=MARKETING_PLAN_SYSTEM_PROMPT,
        params=marketing_plan_params(),
    )
    return normalize_marketing_plan(text, required_keys=MARKETING_PLAN_REQUIRED_KEYS)
