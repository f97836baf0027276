from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from dropship_branding.db.deps import (
    get_helix_segments_repository,
    get_outputs_repository,
    get_projects_repository,
)
from dropship_branding.db.repositories.helix_segments import fallback_segments
from dropship_branding.db.supabase import PersistenceError
from dropship_branding.main import app
from dropship_branding.schemas.branding import BrandingResult, Output, Project, ProjectWithOutputs
from dropship_branding.schemas.segments import HELIX_SEGMENTS_FALLBACK, HelixSegment
from dropship_branding.services.deps import get_completion_client, get_website_fetcher
from dropship_branding.services.website import UpstreamFetchError, normalize_site_url

AUTH = {"Authorization": "Bearer user-token"}

BRANDING_JSON = json.dumps(
    {
        "brandName": "BambooBrite",
        "tagline": "Brush green, smile bright",
        "landingPageCopy": "Eco-friendly brushing made simple. Join the bamboo switch.",
        "adHeadlines": ["Go Plastic-Free Today", "Smile Greener", "Bamboo Beats Plastic"],
        "tiktokScripts": ["Hook: your toothbrush outlives you...", "POV: you switched to bamboo"],
        "adPlatforms": ["Instagram", "TikTok", "Facebook"],
        "budgetStrategy": "Start with $30/day on Instagram, $20/day on TikTok.",
    }
)

GENERATE_PAYLOAD = {
    "product": "Bamboo Toothbrush",
    "persona": "Socially Aware Urbanites",
    "tone": "playful",
    "location": "Sydney",
    "userId": "user-1",
}


class FakeCompletionClient:
    def __init__(self, responses: list[str]) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def complete(self, prompt: str, *, system_prompt: str, params) -> str:
        self.prompts.append(prompt)
        return self.responses.pop(0)


class FakeProjectsRepository:
    def __init__(self) -> None:
        self.rows: dict[str, Project] = {}
        self.schema_error: PersistenceError | None = None
        self.outputs_by_project: dict[str, list[Output]] = {}

    async def check_schema(self) -> None:
        if self.schema_error:
            raise self.schema_error

    async def create(self, **values) -> Project:
        project = Project(
            id=f"proj-{len(self.rows) + 1}",
            created_at=datetime.now(timezone.utc),
            **values,
        )
        self.rows[project.id] = project
        return project

    async def get(self, *, project_id: str) -> Project | None:
        return self.rows.get(project_id)

    async def list_with_outputs(self, *, user_id: str | None = None, limit: int = 50) -> list[ProjectWithOutputs]:
        projects = [p for p in self.rows.values() if user_id is None or p.user_id == user_id]
        return [
            ProjectWithOutputs(**project.model_dump(), outputs=self.outputs_by_project.get(project.id, []))
            for project in projects[:limit]
        ]


class FakeOutputsRepository:
    def __init__(self) -> None:
        self.rows: list[Output] = []
        self.error: PersistenceError | None = None

    async def create(self, *, project_id: str, branding: BrandingResult) -> Output:
        if self.error:
            raise self.error
        output = Output(id=f"out-{len(self.rows) + 1}", **branding.to_output_row(project_id=project_id))
        self.rows.append(output)
        return output

    async def list_for_project(self, *, project_id: str) -> list[Output]:
        return [row for row in reversed(self.rows) if row.project_id == project_id]


class FakeFetcher:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def fetch_site_text(self, url: str) -> tuple[str, str]:
        origin = normalize_site_url(url)
        if self.error:
            raise self.error
        return origin, "Bamboo toothbrushes for eco-conscious city dwellers"


class FakeHelixRepository:
    def __init__(self, segments: list[HelixSegment] | None = None) -> None:
        self.segments = segments

    async def list_or_fallback(self) -> tuple[list[HelixSegment], bool]:
        if self.segments:
            return self.segments, True
        return fallback_segments(), False


@pytest.fixture
def fakes():
    state = {
        "projects": FakeProjectsRepository(),
        "outputs": FakeOutputsRepository(),
        "llm": FakeCompletionClient([BRANDING_JSON, BRANDING_JSON]),
        "fetcher": FakeFetcher(),
        "helix": FakeHelixRepository(),
    }
    app.dependency_overrides[get_projects_repository] = lambda: state["projects"]
    app.dependency_overrides[get_outputs_repository] = lambda: state["outputs"]
    app.dependency_overrides[get_completion_client] = lambda: state["llm"]
    app.dependency_overrides[get_website_fetcher] = lambda: state["fetcher"]
    app.dependency_overrides[get_helix_segments_repository] = lambda: state["helix"]
    try:
        yield state
    finally:
        app.dependency_overrides.clear()


def test_health_endpoint():
    with TestClient(app) as client:
        resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_branding_routes_require_access_token():
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        generate = client.post("/generate-branding", json=GENERATE_PAYLOAD)
        regenerate = client.post("/regenerate-branding", json={"projectId": "proj-1"})

    assert generate.status_code == 401
    assert generate.json() == {"error": "Unauthorized: missing access token"}
    assert regenerate.status_code == 401


def test_generate_branding_persists_project_and_output(fakes):
    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert len(body["branding"]["adHeadlines"]) == 3
    assert body["project"]["product_name"] == "Bamboo Toothbrush"
    assert body["project"]["product_description"] == "Bamboo Toothbrush"
    assert body["project"]["brand_tone"] == "playful"
    assert body["output"]["project_id"] == body["project"]["id"]
    assert body["output"]["ad_headlines"] == body["branding"]["adHeadlines"]
    assert len(fakes["projects"].rows) == 1
    assert len(fakes["outputs"].rows) == 1

    prompt = fakes["llm"].prompts[0]
    assert "Bamboo Toothbrush" in prompt
    assert "Socially Aware Urbanites segment in Australia" in prompt
    assert "playful" in prompt
    assert "Sydney" in prompt


def test_generate_branding_bamboo_toothbrush_example(fakes):
    payload = {
        "product": "Bamboo Toothbrush",
        "persona": "Health and Wellness Enthusiasts",
        "tone": "Eco-conscious",
        "location": "Bondi, 2026",
        "userId": "user-1",
    }

    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=payload)

    assert resp.status_code == 200
    branding = resp.json()["branding"]
    assert len(branding["adHeadlines"]) == 3
    assert branding["budgetStrategy"].strip()
    assert len(fakes["projects"].rows) == 1
    assert len(fakes["outputs"].rows) == 1
    assert fakes["projects"].rows["proj-1"].locality == "Bondi, 2026"


def test_generate_branding_uses_description_when_given(fakes):
    with TestClient(app) as client:
        resp = client.post(
            "/generate-branding",
            headers=AUTH,
            json={**GENERATE_PAYLOAD, "description": "Compostable handle, charcoal bristles"},
        )

    assert resp.status_code == 200
    assert resp.json()["project"]["product_description"] == "Compostable handle, charcoal bristles"


def test_missing_token_is_reported_before_missing_fields():
    app.dependency_overrides.clear()
    with TestClient(app) as client:
        resp = client.post("/generate-branding", json={"product": "Bamboo Toothbrush"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized: missing access token"}


def test_generate_branding_missing_fields(fakes):
    payload = {key: value for key, value in GENERATE_PAYLOAD.items() if key != "tone"}

    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=payload)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"
    assert any(detail.startswith("tone") for detail in resp.json()["details"])
    assert fakes["llm"].prompts == []


def test_generate_branding_blank_field_is_rejected(fakes):
    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json={**GENERATE_PAYLOAD, "product": "   "})

    assert resp.status_code == 400


def test_generate_branding_malformed_completion_returns_generic_error(fakes):
    fakes["llm"].responses = ["Sorry, I cannot help with that."]

    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Invalid response format from AI"}
    assert fakes["projects"].rows == {}


def test_generate_branding_schema_issue(fakes):
    fakes["projects"].schema_error = PersistenceError('relation "projects" does not exist', code="42P01")

    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Database schema issue"
    assert resp.json()["code"] == "42P01"
    assert resp.json()["details"] == 'relation "projects" does not exist'


def test_generate_branding_output_failure_keeps_project(fakes):
    fakes["outputs"].error = PersistenceError("insert failed", code="23502")

    with TestClient(app) as client:
        resp = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to save output"
    assert len(fakes["projects"].rows) == 1


def test_regenerate_branding_appends_output_to_same_project(fakes):
    with TestClient(app) as client:
        created = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD).json()
        resp = client.post("/regenerate-branding", headers=AUTH, json={"projectId": created["project"]["id"]})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["output"]["project_id"] == created["project"]["id"]
    assert body["output"]["id"] != created["output"]["id"]
    assert len(fakes["projects"].rows) == 1
    assert len(fakes["outputs"].rows) == 2
    assert "playful" in fakes["llm"].prompts[1]


def test_regenerate_branding_defaults_missing_tone(fakes):
    project = Project(
        id="legacy",
        user_id="user-1",
        product_name="Bamboo Toothbrush",
        target_persona="Rural Traditionalists",
        locality="Perth",
    )
    fakes["projects"].rows[project.id] = project

    with TestClient(app) as client:
        resp = client.post("/regenerate-branding", headers=AUTH, json={"projectId": "legacy"})

    assert resp.status_code == 200
    assert "The brand should feel: professional" in fakes["llm"].prompts[0]


def test_regenerate_branding_unknown_project(fakes):
    with TestClient(app) as client:
        resp = client.post("/regenerate-branding", headers=AUTH, json={"projectId": "missing"})

    assert resp.status_code == 404
    assert resp.json()["error"] == "Project not found or inaccessible"
    assert fakes["llm"].prompts == []


def test_regenerate_branding_missing_project_id(fakes):
    with TestClient(app) as client:
        resp = client.post("/regenerate-branding", headers=AUTH, json={})

    assert resp.status_code == 400


def test_project_history_and_outputs(fakes):
    with TestClient(app) as client:
        created = client.post("/generate-branding", headers=AUTH, json=GENERATE_PAYLOAD).json()
        project_id = created["project"]["id"]
        client.post("/regenerate-branding", headers=AUTH, json={"projectId": project_id})
        history = client.get("/projects", headers=AUTH, params={"userId": "user-1"})
        outputs = client.get(f"/projects/{project_id}/outputs", headers=AUTH)
        missing = client.get("/projects/nope/outputs", headers=AUTH)

    assert history.status_code == 200
    assert [project["id"] for project in history.json()["projects"]] == [project_id]
    assert outputs.status_code == 200
    assert outputs.json()["projectId"] == project_id
    assert [row["id"] for row in outputs.json()["outputs"]] == ["out-2", "out-1"]
    assert missing.status_code == 404


def test_analyze_website(fakes):
    fakes["llm"].responses = [
        json.dumps(
            {
                "recommendedSegments": ["socially aware urbanites"],
                "reasoningSummary": "Eco-minded city buyers.",
                "productName": "Bamboo Toothbrush",
                "productDescription": "A compostable toothbrush.",
            }
        )
    ]

    with TestClient(app) as client:
        resp = client.post(
            "/analyze-website",
            json={"url": "shop.example.com/products/brush", "availableSegments": ["Socially Aware Urbanites"]},
        )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["recommendedSegments"] == ["Socially Aware Urbanites"]
    assert body["analyzedUrl"] == "https://shop.example.com"
    assert body["isGenericPage"] is False


def test_analyze_website_requires_url(fakes):
    with TestClient(app) as client:
        resp = client.post("/analyze-website", json={"topN": 3})

    assert resp.status_code == 400


@pytest.mark.parametrize("url", ["https://", "xn--.com"])
def test_analyze_website_rejects_invalid_url(fakes, url):
    with TestClient(app) as client:
        resp = client.post("/analyze-website", json={"url": url})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid URL"
    assert fakes["llm"].prompts == []


def test_analyze_website_fetch_failure_is_bad_gateway(fakes):
    fakes["fetcher"] = FakeFetcher(error=UpstreamFetchError("https://shop.example.com"))

    with TestClient(app) as client:
        resp = client.post("/analyze-website", json={"url": "shop.example.com"})

    assert resp.status_code == 502
    assert resp.json() == {"error": "Failed to fetch website content"}


def test_helix_segments_fallback(fakes):
    with TestClient(app) as client:
        resp = client.get("/helix-segments")

    assert resp.status_code == 200
    assert resp.json()["source"] == "fallback"
    assert [segment["label"] for segment in resp.json()["segments"]] == list(HELIX_SEGMENTS_FALLBACK)


def test_helix_segments_from_database(fakes):
    fakes["helix"] = FakeHelixRepository([HelixSegment(id="1", label="Metro Mavens", groupName="Urban")])

    with TestClient(app) as client:
        resp = client.get("/helix-segments")

    assert resp.json()["source"] == "database"
    assert resp.json()["segments"][0]["groupName"] == "Urban"


def test_generate_marketing_plan(fakes):
    plan = {
        "geoHierarchy": {"micro": ["Bondi"], "subRegion": "Eastern Suburbs", "region": "Sydney"},
        "segments": [{"segment": "Socially Aware Urbanites"}],
        "crossSegmentBestFit": {"channelCore": ["Meta"]},
    }
    fakes["llm"].responses = [f"- Lead with Meta in the Eastern Suburbs\n```json\n{json.dumps(plan)}\n```"]

    with TestClient(app) as client:
        resp = client.post(
            "/generate-marketing-plan",
            json={
                "brand": "BambooBrite",
                "productOrService": "Bamboo Toothbrush",
                "pricePoint": "$12",
                "timeframe": {"start": "2024-07-01", "end": "2024-09-30"},
                "totalBudget": 5000,
                "geographyInput": {"country": "Australia", "city": "Sydney", "suburb": "Bondi"},
                "helixSegmentsSelected": ["Socially Aware Urbanites"],
            },
        )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["executiveSummary"] == "- Lead with Meta in the Eastern Suburbs"
    assert body["plan"] == plan
    assert "Bondi" in fakes["llm"].prompts[0]


def test_generate_marketing_plan_requires_segments(fakes):
    with TestClient(app) as client:
        resp = client.post(
            "/generate-marketing-plan",
            json={
                "brand": "BambooBrite",
                "productOrService": "Bamboo Toothbrush",
                "pricePoint": "$12",
                "timeframe": {"start": "2024-07-01", "end": "2024-09-30"},
                "geographyInput": {"country": "Australia"},
                "helixSegmentsSelected": [],
            },
        )

    assert resp.status_code == 400
