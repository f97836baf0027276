from __future__ import annotations

import logging

from dropship_branding.db.repositories.outputs import OutputsRepository
from dropship_branding.db.repositories.projects import ProjectsRepository
from dropship_branding.db.supabase import PersistenceError, RecordNotFoundError
from dropship_branding.llm.client import CompletionClient, branding_params
from dropship_branding.llm.parsing import normalize_branding
from dropship_branding.prompts.branding import BRANDING_SYSTEM_PROMPT, build_branding_prompt
from dropship_branding.schemas.branding import (
    BrandingInput,
    BrandingResult,
    GenerateBrandingRequest,
    Output,
    Project,
)

logger = logging.getLogger(__name__)

DEFAULT_BRAND_TONE = "professional"


async def generate_branding(llm: CompletionClient, branding_input: BrandingInput) -> BrandingResult:
    prompt = build_branding_prompt(branding_input)
    text = await llm.complete(prompt, system_prompt=BRANDING_SYSTEM_PROMPT, params=branding_params())
    return normalize_branding(text)


async def create_generation(
    *,
    llm: CompletionClient,
    projects: ProjectsRepository,
    outputs: OutputsRepository,
    request: GenerateBrandingRequest,
) -> tuple[Project, Output, BrandingResult]:
    """
    Generate branding, then persist the project and its first output.

    The two inserts are not atomic: if the output insert fails the project row
    remains and can be recovered through a regeneration.
    """

    branding = await generate_branding(llm, request.to_branding_input())

    try:
        await projects.check_schema()
    except PersistenceError as exc:
        raise exc.relabel("Database schema issue") from exc

    try:
        project = await projects.create(
            user_id=request.userId,
            product_name=request.product,
            product_description=request.description or request.product,
            target_persona=request.persona,
            locality=request.location,
            brand_tone=request.tone,
        )
    except PersistenceError as exc:
        raise exc.relabel("Failed to save project") from exc

    try:
        output = await outputs.create(project_id=project.id, branding=branding)
    except PersistenceError as exc:
        logger.error(
            "Output insert failed after project was created",
            extra={"project_id": project.id, "code": exc.code},
        )
        raise exc.relabel("Failed to save output") from exc

    logger.info("Branding generated", extra={"project_id": project.id, "output_id": output.id})
    return project, output, branding


async def rerun_generation(
    *,
    llm: CompletionClient,
    projects: ProjectsRepository,
    outputs: OutputsRepository,
    project_id: str,
) -> tuple[Output, BrandingResult]:
    """Generate a new output for a stored project; the project row is left untouched."""

    try:
        project = await projects.get(project_id=project_id)
    except PersistenceError as exc:
        raise RecordNotFoundError(
            "Project not found or inaccessible", code=exc.code, details=exc.message
        ) from exc
    if project is None:
        raise RecordNotFoundError("Project not found or inaccessible")

    branding = await generate_branding(
        llm,
        BrandingInput(
            product=project.product_name,
            persona=project.target_persona,
            tone=project.brand_tone or DEFAULT_BRAND_TONE,
            location=project.locality,
        ),
    )

    try:
        output = await outputs.create(project_id=project.id, branding=branding)
    except PersistenceError as exc:
        raise exc.relabel("Failed to save output") from exc

    logger.info("Branding regenerated", extra={"project_id": project.id, "output_id": output.id})
    return output, branding
