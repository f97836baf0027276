import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dropship_branding.config import ConfigurationError, settings
from dropship_branding.db.supabase import PersistenceError
from dropship_branding.errors import InputValidationError
from dropship_branding.llm.parsing import ModelResponseError
from dropship_branding.routers import branding, marketing_plan, segments
from dropship_branding.services.website import UpstreamFetchError

logger = logging.getLogger(__name__)

INVALID_MODEL_RESPONSE_MESSAGE = "Invalid response format from AI"


def _validation_details(exc: RequestValidationError) -> list[str]:
    details: list[str] = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        details.append(f"{field}: {error.get('msg', 'invalid value')}")
    return details


def _persistence_content(exc: PersistenceError) -> dict:
    content: dict = {"error": exc.message}
    if exc.details:
        content["details"] = exc.details
    if exc.code:
        content["code"] = exc.code
    if exc.hint:
        content["hint"] = exc.hint
    return content


def create_app() -> FastAPI:
    app = FastAPI(
        title="Dropship Branding API",
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(_request: Request, exc: RequestValidationError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=400,
            content={"error": "Missing required fields", "details": _validation_details(exc)},
        )

    @app.exception_handler(InputValidationError)
    async def input_validation_error_handler(_request: Request, exc: InputValidationError) -> ORJSONResponse:
        content: dict = {"error": str(exc)}
        if exc.field:
            content["details"] = [exc.field]
        return ORJSONResponse(status_code=400, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
        return ORJSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> ORJSONResponse:
        logger.error("Server misconfiguration", extra={"variable": exc.variable})
        return ORJSONResponse(status_code=500, content={"error": "Server misconfiguration"})

    @app.exception_handler(UpstreamFetchError)
    async def upstream_fetch_error_handler(_request: Request, exc: UpstreamFetchError) -> ORJSONResponse:
        logger.warning("Website fetch failed", extra={"url": exc.url})
        return ORJSONResponse(status_code=502, content={"error": "Failed to fetch website content"})

    @app.exception_handler(ModelResponseError)
    async def model_response_error_handler(_request: Request, exc: ModelResponseError) -> ORJSONResponse:
        # Raw completion text is logged where parsing failed; only a generic message leaves the server.
        logger.error("Model response rejected", extra={"error": str(exc), "error_type": type(exc).__name__})
        return ORJSONResponse(status_code=500, content={"error": INVALID_MODEL_RESPONSE_MESSAGE})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(_request: Request, exc: PersistenceError) -> ORJSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Database operation failed",
                extra={"error": exc.message, "code": exc.code, "details": exc.details},
            )
        return ORJSONResponse(status_code=exc.status_code, content=_persistence_content(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    app.include_router(segments.router)
    app.include_router(branding.router)
    app.include_router(marketing_plan.router)

    return app


app = create_app()
