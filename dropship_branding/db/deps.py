from __future__ import annotations

from fastapi import Depends

from dropship_branding.auth.dependencies import get_access_token
from dropship_branding.db.repositories.helix_segments import HelixSegmentsRepository
from dropship_branding.db.repositories.outputs import OutputsRepository
from dropship_branding.db.repositories.projects import ProjectsRepository
from dropship_branding.db.supabase import SupabaseClient


def get_user_client(access_token: str = Depends(get_access_token)) -> SupabaseClient:
    return SupabaseClient.from_settings(access_token=access_token)


def get_public_client() -> SupabaseClient:
    return SupabaseClient.from_settings()


def get_projects_repository(client: SupabaseClient = Depends(get_user_client)) -> ProjectsRepository:
    return ProjectsRepository(client)


def get_outputs_repository(client: SupabaseClient = Depends(get_user_client)) -> OutputsRepository:
    return OutputsRepository(client)


def get_helix_segments_repository(
    client: SupabaseClient = Depends(get_public_client),
) -> HelixSegmentsRepository:
    return HelixSegmentsRepository(client)
