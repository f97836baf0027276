from __future__ import annotations

import logging
from typing import Any

from dropship_branding.db.supabase import PersistenceError, SupabaseClient
from dropship_branding.schemas.segments import HELIX_SEGMENTS_FALLBACK, HelixSegment

logger = logging.getLogger(__name__)

_LABEL_KEYS = ("label", "name", "segment_name", "title", "code", "slug")
_ID_KEYS = ("id", "code", "label")


def fallback_segments() -> list[HelixSegment]:
    return [HelixSegment(id=label, label=label) for label in HELIX_SEGMENTS_FALLBACK]


def _first_text(row: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def segment_from_row(row: dict[str, Any]) -> HelixSegment | None:
    label = _first_text(row, _LABEL_KEYS)
    segment_id = _first_text(row, _ID_KEYS)
    if not label or not segment_id:
        return None
    group_name = row.get("group_name") or row.get("group")
    description = row.get("description")
    return HelixSegment(
        id=segment_id,
        label=label,
        groupName=str(group_name) if group_name else None,
        description=str(description) if description else None,
    )


class HelixSegmentsRepository:
    table = "helix_segments"

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client

    async def list(self) -> list[HelixSegment]:
        # Only columns guaranteed to exist; extra ones vary between deployments.
        rows = await self.client.select(self.table, columns="label,group_name,description")
        segments = [segment_from_row(row) for row in rows or [] if isinstance(row, dict)]
        return [segment for segment in segments if segment is not None]

    async def list_or_fallback(self) -> tuple[list[HelixSegment], bool]:
        """Return `(segments, from_database)`; the built-in list is used on any read failure."""

        try:
            segments = await self.list()
        except PersistenceError as exc:
            logger.warning(
                "Failed to load helix_segments; using fallback list",
                extra={"code": exc.code, "error": exc.message},
            )
            return fallback_segments(), False
        if not segments:
            return fallback_segments(), False
        return segments, True
