from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from typing import Any

from dropship_branding.schemas.branding import (
    BRANDING_LIST_FIELDS,
    BRANDING_REQUIRED_FIELDS,
    BRANDING_STRING_FIELDS,
    BrandingResult,
)
from dropship_branding.schemas.marketing_plan import MarketingPlanResult
from dropship_branding.schemas.segments import SegmentRecommendation

logger = logging.getLogger(__name__)

# Newlines, bullet glyphs and asterisks separate list items.
_LIST_SPLIT_PATTERN = re.compile(r"\r?\n|[•●▪◦·]|\*+")
_NUMBERED_MARKER_PATTERN = re.compile(r"(?:^|\s)(?P<number>\d{1,2})[.)](?=\s)")
_LEADING_MARKER_PATTERN = re.compile(r"^(?:[-–—>]+\s+)+")


class ModelResponseError(ValueError):
    """The completion text could not be turned into the expected shape."""


class MalformedJsonError(ModelResponseError):
    pass


class MissingFieldError(ModelResponseError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


def parse_json_document(text: str) -> dict[str, Any]:
    """
    Parse a completion into a JSON object.

    The full text is tried first; when that fails the span between the first `{`
    and the last `}` is tried, which recovers objects wrapped in prose or
    markdown fences.
    """

    if not isinstance(text, str) or not text.strip():
        raise MalformedJsonError("Completion text is empty")

    raw = text.strip()
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # Fall back to the outermost braces.
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        raise MalformedJsonError("Completion text does not contain a JSON object")
    try:
        parsed = json.loads(raw[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(f"Completion JSON could not be parsed: {exc.msg}") from exc

    if not isinstance(parsed, dict):
        raise MalformedJsonError(f"Completion JSON must be an object, got {type(parsed).__name__}")
    return parsed


def _split_numbered(segment: str) -> list[str]:
    """
    Split on "1." / "2)" markers when the segment opens with one.

    Only markers continuing the sequence count, so "Top 10. Reasons" and
    "1. Top 10 picks" keep their inner numbers.
    """

    cuts: list[re.Match[str]] = []
    expected: int | None = None
    for match in _NUMBERED_MARKER_PATTERN.finditer(segment):
        number = int(match.group("number"))
        if expected is None:
            if segment[: match.start()].strip():
                return [segment]
        elif number != expected:
            continue
        cuts.append(match)
        expected = number + 1

    if not cuts:
        return [segment]
    pieces: list[str] = []
    start = 0
    for match in cuts:
        pieces.append(segment[start : match.start()])
        start = match.end()
    pieces.append(segment[start:])
    return pieces


def split_list_text(text: str) -> list[str]:
    items: list[str] = []
    for segment in _LIST_SPLIT_PATTERN.split(text):
        for piece in _split_numbered(segment):
            cleaned = _LEADING_MARKER_PATTERN.sub("", piece.strip()).strip()
            if cleaned:
                items.append(cleaned)
    return items


def _item_to_text(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, str):
        return item.strip()
    if isinstance(item, dict):
        return " ".join(_item_to_text(value) for value in item.values() if _item_to_text(value))
    return str(item).strip()


def coerce_string_list(value: Any) -> list[str]:
    """
    Coerce a model value that should be a list of strings.

    Native lists keep their order with each element trimmed and empties dropped.
    A single string is split on list markers; when splitting leaves nothing
    usable the whole string is kept as the only entry.
    """

    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [text for text in (_item_to_text(item) for item in value) if text]
    text = _item_to_text(value)
    if not text:
        return []
    items = split_list_text(text)
    return items or [text]


def coerce_string(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "\n".join(coerce_string_list(value))
    return _item_to_text(value)


def _require_fields(document: dict[str, Any], fields: Iterable[str]) -> None:
    for field in fields:
        value = document.get(field)
        if value is None or value == "" or value == [] or value == {}:
            raise MissingFieldError(field)


def normalize_branding(text: str) -> BrandingResult:
    try:
        document = parse_json_document(text)
        _require_fields(document, BRANDING_REQUIRED_FIELDS)

        values: dict[str, Any] = {}
        for field in BRANDING_STRING_FIELDS:
            values[field] = coerce_string(document[field])
            if not values[field]:
                raise MissingFieldError(field)
        for field in BRANDING_LIST_FIELDS:
            values[field] = coerce_string_list(document[field])
            if not values[field]:
                raise MissingFieldError(field)
    except ModelResponseError as exc:
        logger.error(
            "Failed to normalize branding completion",
            extra={"error": str(exc), "raw_response": text},
        )
        raise

    return BrandingResult(**values)


def _optional_text(value: Any) -> str | None:
    text = coerce_string(value)
    return text or None


def normalize_segment_recommendation(text: str) -> SegmentRecommendation:
    """Labels are returned verbatim; resolving them against the lookup set is the caller's job."""

    try:
        document = parse_json_document(text)
        if "recommendedSegments" not in document or document["recommendedSegments"] is None:
            raise MissingFieldError("recommendedSegments")
        segments = coerce_string_list(document["recommendedSegments"])
    except ModelResponseError as exc:
        logger.error(
            "Failed to normalize segment recommendation completion",
            extra={"error": str(exc), "raw_response": text},
        )
        raise

    return SegmentRecommendation(
        recommendedSegments=segments,
        reasoningSummary=_optional_text(document.get("reasoningSummary")),
        productName=_optional_text(document.get("productName")),
        productDescription=_optional_text(document.get("productDescription")),
    )


def split_leading_prose(text: str) -> tuple[str | None, str]:
    """Return the prose before the first `{` (if any) and the remainder."""

    start = text.find("{")
    if start <= 0:
        return None, text
    prose = text[:start].strip().strip("`").strip()
    if prose.lower().endswith("json"):
        prose = prose[: -len("json")].rstrip().rstrip("`").rstrip()
    return prose or None, text[start:]


def normalize_marketing_plan(text: str, *, required_keys: Iterable[str]) -> MarketingPlanResult:
    try:
        summary, remainder = split_leading_prose(text or "")
        plan = parse_json_document(remainder)
        _require_fields(plan, required_keys)
    except ModelResponseError as exc:
        logger.error(
            "Failed to normalize marketing plan completion",
            extra={"error": str(exc), "raw_response": text},
        )
        raise

    return MarketingPlanResult(executiveSummary=summary, plan=plan)
