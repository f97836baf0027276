from __future__ import annotations

from dropship_branding.db.supabase import SupabaseClient
from dropship_branding.schemas.branding import BrandingResult, Output


class OutputsRepository:
    table = "outputs"

    def __init__(self, client: SupabaseClient) -> None:
        self.client = client

    async def create(self, *, project_id: str, branding: BrandingResult) -> Output:
        created = await self.client.insert(self.table, branding.to_output_row(project_id=project_id))
        return Output.model_validate(created)

    async def list_for_project(self, *, project_id: str) -> list[Output]:
        rows = await self.client.select(
            self.table,
            filters={"project_id": f"eq.{project_id}"},
            order="created_at.desc",
        )
        return [Output.model_validate(row) for row in rows or []]
