from __future__ import annotations

from collections.abc import Sequence

from dropship_branding.schemas.segments import HELIX_SEGMENTS_FALLBACK

SEGMENTS_SYSTEM_PROMPT = (
    "You are a market segmentation specialist. Always respond with valid JSON only."
)


def build_segment_recommendation_prompt(
    *,
    website_text: str,
    helix_segments: Sequence[str],
    locale: str,
    top_n: int,
) -> str:
    segment_list = ", ".join(helix_segments) if helix_segments else ", ".join(HELIX_SEGMENTS_FALLBACK)

    return f"""You are a market segmentation specialist familiar with Helix persona segments in {locale}.

Analyze the following dropshipping website content and recommend the top {top_n} Helix persona segments to target. Pick ONLY from this list of allowed segment labels: {segment_list}.

Website content (truncated):
\"\"\"
{website_text}
\"\"\"

Output strictly valid JSON with the following shape:
{{
  "recommendedSegments": ["Segment Label 1", "Segment Label 2", "Segment Label 3"],
  "reasoningSummary": "2-3 sentences explaining why these segments are a fit based on product, message, tone, and value props.",
  "productName": "Concise product title extracted from the page (leave empty if not clearly a single product page)",
  "productDescription": "2-4 sentence summary of the product features/benefits in plain language (leave empty if not applicable)"
}}

Rules:
- Use only labels from the provided list; do not invent new Helix segment names.
- Base your choices on audience signals (needs, lifestyle, price sensitivity, interests) inferred from the website content.
- If the page appears to be a generic homepage or collection page with multiple products, still provide recommended segments but leave productName and productDescription empty.
- If uncertain, choose the closest matches and optimize for practical media buying.
"""
