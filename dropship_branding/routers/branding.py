from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from dropship_branding.db.deps import get_outputs_repository, get_projects_repository
from dropship_branding.db.repositories.outputs import OutputsRepository
from dropship_branding.db.repositories.projects import ProjectsRepository
from dropship_branding.db.supabase import RecordNotFoundError
from dropship_branding.llm.client import CompletionClient
from dropship_branding.schemas.branding import (
    GenerateBrandingRequest,
    GenerateBrandingResponse,
    ProjectHistoryResponse,
    ProjectOutputsResponse,
    RegenerateBrandingRequest,
    RegenerateBrandingResponse,
)
from dropship_branding.services.branding import create_generation, rerun_generation
from dropship_branding.services.deps import get_completion_client

router = APIRouter(tags=["branding"])


@router.post("/generate-branding", response_model=GenerateBrandingResponse)
async def generate_branding(
    payload: GenerateBrandingRequest,
    projects: ProjectsRepository = Depends(get_projects_repository),
    outputs: OutputsRepository = Depends(get_outputs_repository),
    llm: CompletionClient = Depends(get_completion_client),
):
    project, output, branding = await create_generation(
        llm=llm,
        projects=projects,
        outputs=outputs,
        request=payload,
    )
    return GenerateBrandingResponse(project=project, output=output, branding=branding)


@router.post("/regenerate-branding", response_model=RegenerateBrandingResponse)
async def regenerate_branding(
    payload: RegenerateBrandingRequest,
    projects: ProjectsRepository = Depends(get_projects_repository),
    outputs: OutputsRepository = Depends(get_outputs_repository),
    llm: CompletionClient = Depends(get_completion_client),
):
    output, branding = await rerun_generation(
        llm=llm,
        projects=projects,
        outputs=outputs,
        project_id=payload.projectId,
    )
    return RegenerateBrandingResponse(output=output, branding=branding)


@router.get("/projects", response_model=ProjectHistoryResponse)
async def list_projects(
    user_id: str | None = Query(default=None, alias="userId"),
    limit: int = Query(default=50, ge=1, le=200),
    projects: ProjectsRepository = Depends(get_projects_repository),
):
    history = await projects.list_with_outputs(user_id=user_id, limit=limit)
    return ProjectHistoryResponse(projects=history)


@router.get("/projects/{project_id}/outputs", response_model=ProjectOutputsResponse)
async def list_project_outputs(
    project_id: str,
    projects: ProjectsRepository = Depends(get_projects_repository),
    outputs: OutputsRepository = Depends(get_outputs_repository),
):
    project = await projects.get(project_id=project_id)
    if project is None:
        raise RecordNotFoundError("Project not found or inaccessible")
    rows = await outputs.list_for_project(project_id=project.id)
    return ProjectOutputsResponse(projectId=project.id, outputs=rows)
