from __future__ import annotations

import logging
from typing import Any, Optional

from dropship_branding.db.supabase import PersistenceError, RecordNotFoundError, SupabaseClient
from dropship_branding.schemas.branding import Project, ProjectWithOutputs

logger = logging.getLogger(__name__)

# Added after the first schema version; older databases do not have it yet.
OPTIONAL_PROJECT_COLUMNS = ("brand_tone",)


class ProjectsRepository:
    table = "projects"

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client

    async def check_schema(self) -> None:
        await self.client.select(self.table, limit=0)

    async def create(
        self,
        *,
        user_id: str,
        product_name: str,
        product_description: str,
        target_persona: str,
        locality: str,
        brand_tone: str,
    ) -> Project:
        row: dict[str, Any] = {
            "user_id": user_id,
            "product_name": product_name,
            "product_description": product_description,
            "target_persona": target_persona,
            "locality": locality,
            "brand_tone": brand_tone,
        }
        try:
            created = await self.client.insert(self.table, row)
        except PersistenceError as exc:
            if not exc.is_unknown_column:
                raise
            logger.warning(
                "Optional project column missing; inserting without it",
                extra={"code": exc.code, "columns": list(OPTIONAL_PROJECT_COLUMNS)},
            )
            reduced = {key: value for key, value in row.items() if key not in OPTIONAL_PROJECT_COLUMNS}
            created = await self.client.insert(self.table, reduced)
        return Project.model_validate(created)

    async def get(self, *, project_id: str) -> Optional[Project]:
        try:
            row = await self.client.select(
                self.table,
                columns="id,user_id,product_name,product_description,target_persona,locality,brand_tone,created_at",
                filters={"id": f"eq.{project_id}"},
                single=True,
            )
        except RecordNotFoundError:
            return None
        except PersistenceError as exc:
            if not exc.is_unknown_column:
                raise
            row = await self.client.select(
                self.table,
                columns="id,user_id,product_name,product_description,target_persona,locality,created_at",
                filters={"id": f"eq.{project_id}"},
                single=True,
            )
        if not row:
            return None
        return Project.model_validate(row)

    async def list_with_outputs(self, *, user_id: str | None = None, limit: int = 50) -> list[ProjectWithOutputs]:
        filters = {"user_id": f"eq.{user_id}"} if user_id else None
        rows = await self.client.select(
            self.table,
            columns="*,outputs(*)",
            filters=filters,
            order="created_at.desc",
            limit=limit,
            extra_params={"outputs.order": "created_at.desc"},
        )
        return [ProjectWithOutputs.model_validate(row) for row in rows or []]
