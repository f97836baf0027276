from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Literal

from dropship_branding.config import Settings, settings
from dropship_branding.llm.client import CompletionClient, segment_params
from dropship_branding.llm.parsing import normalize_segment_recommendation
from dropship_branding.prompts.segments import SEGMENTS_SYSTEM_PROMPT, build_segment_recommendation_prompt
from dropship_branding.schemas.segments import (
    HELIX_SEGMENTS_FALLBACK,
    AnalyzeWebsiteRequest,
    AnalyzeWebsiteResponse,
    SegmentMatch,
    SegmentRecommendation,
)
from dropship_branding.services.website import WebsiteFetcher

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3


async def recommend_segments(
    llm: CompletionClient,
    *,
    website_text: str,
    available_segments: Sequence[str],
    locale: str,
    top_n: int,
) -> SegmentRecommendation:
    prompt = build_segment_recommendation_prompt(
        website_text=website_text,
        helix_segments=available_segments,
        locale=locale,
        top_n=top_n,
    )
    text = await llm.complete(prompt, system_prompt=SEGMENTS_SYSTEM_PROMPT, params=segment_params())
    return normalize_segment_recommendation(text)


def resolve_segment_labels(
    labels: Sequence[str],
    available: Sequence[str],
    *,
    policy: Literal["admit", "reject"] = "admit",
) -> list[SegmentMatch]:
    """
    Match model labels to the allowed set: exact first, then case-insensitive.

    Unmatched labels become custom entries under the "admit" policy and are
    dropped under "reject". With no allowed set every label is kept as given.
    """

    by_casefold = {label.casefold(): label for label in available}
    exact = set(available)
    matches: list[SegmentMatch] = []
    seen: set[str] = set()
    for label in labels:
        if label in exact:
            matched = label
        else:
            matched = by_casefold.get(label.casefold())

        if matched is None and available and policy == "reject":
            logger.info("Dropping segment label outside the allowed set", extra={"label": label})
            continue

        key = (matched or label).casefold()
        if key in seen:
            continue
        seen.add(key)
        matches.append(
            SegmentMatch(label=label, matchedLabel=matched, isCustom=bool(available) and matched is None)
        )
    return matches


async def analyze_website(
    *,
    fetcher: WebsiteFetcher,
    llm: CompletionClient,
    request: AnalyzeWebsiteRequest,
    config: Settings | None = None,
) -> AnalyzeWebsiteResponse:
    config = config or settings
    origin, website_text = await fetcher.fetch_site_text(request.url)

    available = list(request.availableSegments or [])
    locale = request.locale or config.DEFAULT_SEGMENT_LOCALE
    recommendation = await recommend_segments(
        llm,
        website_text=website_text,
        available_segments=available,
        locale=locale,
        top_n=request.topN or DEFAULT_TOP_N,
    )

    # The prompt offers the built-in labels when the caller sends none.
    matches = resolve_segment_labels(
        recommendation.recommendedSegments,
        available or list(HELIX_SEGMENTS_FALLBACK),
        policy=config.SEGMENT_LABEL_POLICY,
    )
    return AnalyzeWebsiteResponse(
        recommendedSegments=[match.matchedLabel or match.label for match in matches],
        reasoningSummary=recommendation.reasoningSummary,
        productName=recommendation.productName,
        productDescription=recommendation.productDescription,
        segmentMatches=matches,
        analyzedUrl=origin,
        isGenericPage=not recommendation.productName,
    )
