from __future__ import annotations

import json
from typing import Any

from dropship_branding.schemas.marketing_plan import MarketingPlanInput

MARKETING_PLAN_SYSTEM_PROMPT = (
    "You are a senior marketing strategist specializing in Australian Helix Personas and "
    "localized, data-driven media planning."
)

MARKETING_PLAN_REQUIRED_KEYS = ("geoHierarchy", "segments", "crossSegmentBestFit")

_CHANNEL_PLAN_SHAPE = """{
            "objectives": [string],
            "kpis": [string],
            "channels": [
              {
                "name": string,
                "budgetPercent": number,
                "budgetAmount": number | null,
                "geoTargeting": { "radiusKm": number | null, "postcodes": [string] | null, "hotspots": [string] | null },
                "biddingOptimization": string,
                "frequencyCap": string | null,
                "creative": {
                  "messages": [string],
                  "hooks": [string],
                  "formats": [string],
                  "examples": { "headline": [string], "primaryText": [string], "cta": [string] }
                },
                "landing": { "url": string | null, "modules": [string], "localProofPoints": [string] },
                "experiments": [string]
              }
            ],
            "flighting": { "phases": [string], "daypartingNotes": [string] | null },
            "measurement": { "tracking": [string], "incrementality": [string], "successGates": [string] }
          }"""

MARKETING_PLAN_SCHEMA = f"""{{
  "inputs": {{ ...echo of the inputs below, with inferred defaults filled in... }},
  "geoHierarchy": {{
    "micro": {{ "label": string, "postcodes": [string] | null, "notableHotspots": [string] }},
    "subRegion": {{ "label": string, "suburbsIncluded": [string], "postcodesIncluded": [string] }},
    "region": {{ "label": string }}
  }},
  "segments": [
    {{
      "name": string,
      "fitScores": {{ "micro": number, "subRegion": number }},
      "fitRationale": string,
      "audienceStrategy": {{
        "crmSeed": {{ "available": boolean, "recommendedSize": number | null }},
        "lookalike": {{ "percent": number, "geo": "micro" | "subRegion", "notes": string }},
        "interestBehavioral": [string],
        "retargeting": [string]
      }},
      "plans": {{
        "micro": {_CHANNEL_PLAN_SHAPE},
        "subRegion": {_CHANNEL_PLAN_SHAPE}
      }}
    }}
  ],
  "crossSegmentBestFit": {{
    "strategy": [string],
    "channelCore": [string],
    "geoPrioritization": [string],
    "budgetSummary": {{
      "byChannelPercent": [{{ "channel": string, "percent": number }}],
      "byGeoPercent": [{{ "geo": "micro" | "subRegion", "percent": number }}]
    }},
    "calendar": [{{ "phase": string, "start": string, "end": string }}],
    "measurement": {{ "sharedAudiences": [string], "reportingCadence": string, "upliftDesign": [string] }},
    "risks": [{{ "risk": string, "mitigation": string }}]
  }}
}}"""


def _json_or_null(value: Any) -> str:
    if value is None:
        return "null"
    return json.dumps(value, ensure_ascii=False)


def _plain(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_marketing_plan_prompt(plan_input: MarketingPlanInput) -> str:
    geo = plan_input.geographyInput
    crm = plan_input.crmAssets
    budget = _plain(plan_input.totalBudget)

    return f"""You are a senior marketing strategist specializing in Australian Helix Personas and localized, data-driven media planning. Create bespoke, geo-aware plans that align segment psychographics with sub-regional context. Output only concise rationales, follow the requested output format, include actionable geo-targeting parameters, and give concrete, testable recommendations.

Method:
1) Location expansion
- Treat the location input (suburb, postcode, LGA or city) as the seed of a practical market area.
- Produce a 3-level geo hierarchy: micro (suburb/postcode/local hotspots), sub-region (a named cluster of suburbs and postcodes), region (the wider metro or regional label).
- Outside Australia, use the closest equivalent sub-regional groupings.

2) Segment-location fit
- For each selected Helix Persona segment, profile local behaviours and likely hotspots. Give a fit score (0-100) with a short rationale.
- Localized lookalike audiences (1-5%) are purchasable on the major platforms; recommend seed size and lookalike % per segment.

3) Per-segment, per-geo plans
- For each segment at micro and sub-region level: objectives and KPIs, channel mix with budget split (% and $ when a budget is given), geo-targeting, audience build, creative (messages, hooks, CTAs, 2-3 headline and primary text examples), landing experience, bidding and frequency caps, flighting, 2-3 experiments, measurement and success gates.

4) Cross-segment best fit
- Combine overlaps into one plan: shared creative platforms, channel core, geo prioritization, budget summary and a single calendar.

5) Risks
- Note compliance, supply, seasonality, tourist or commuter surges and brand safety, each with a mitigation.

6) Output
A) Executive summary as short bullets
B) One JSON object strictly matching this schema:
{MARKETING_PLAN_SCHEMA}

Inputs (infer sensible defaults for null fields and state the assumptions):
- brand: {plan_input.brand}
- productOrService: {plan_input.productOrService}
- pricePoint: {plan_input.pricePoint}
- objectives: {_json_or_null(plan_input.objectives)}
- primaryKPIs: {_json_or_null(plan_input.primaryKPIs)}
- timeframe: {plan_input.timeframe.start} to {plan_input.timeframe.end}
- totalBudget: {budget}
- geographyInput:
  country: {_plain(geo.country)}
  stateOrTerritory: {_plain(geo.stateOrTerritory)}
  city: {_plain(geo.city)}
  suburb: {_plain(geo.suburb)}
  postcode: {_plain(geo.postcode)}
- helixSegmentsSelected: {_json_or_null(plan_input.helixSegmentsSelected)}
- approvedChannels: {_json_or_null(plan_input.approvedChannels)}
- disallowedChannels: {_json_or_null(plan_input.disallowedChannels)}
- crmAssets:
  hashedEmailsAvailable: {_plain(crm.hashedEmailsAvailable)}
  customerCount: {_plain(crm.customerCount)}
  pastPurchasersEligibleForSeed: {_plain(crm.pastPurchasersEligibleForSeed)}
- promotionsOffers: {_json_or_null(plan_input.promotionsOffers)}
- competitors: {_json_or_null(plan_input.competitors)}
- seasonalityNotes: {_json_or_null(plan_input.seasonalityNotes)}
- constraints: {_json_or_null(plan_input.constraints)}

Deliver the executive summary first, then the JSON object."""
