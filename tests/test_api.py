"""Tests for the FastAPI endpoints."""
import json
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sse_starlette.sse import AppStatus

from git_wrapped.api.server import app
from git_wrapped.fetchers.github import GitHubRateLimitError, SubjectNotFound
from git_wrapped.models import DeveloperDocument, RepositoryDocument

pytestmark = pytest.mark.asyncio

DEVELOPER = DeveloperDocument.model_validate({
    "type": "developer",
    "subject": {"login": "octocat"},
    "totals": {"commits": 3},
    "calendar": {"weeks": [{"contributionDays": [
        {"date": "2025-01-01", "contributionCount": 3, "weekday": 3},
    ]}]},
})

REPOSITORY = RepositoryDocument.model_validate({
    "type": "repository",
    "repository": {"nameWithOwner": "octo/widget"},
    "stargazerCount": 2000,
})


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    # sse-starlette keeps a module-level exit event bound to the first event loop
    AppStatus.should_exit_event = None
    yield


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


def _events(body: str) -> list[tuple[str, dict]]:
    events, name = [], None
    for line in body.splitlines():
        if line.startswith("event:"):
            name = line.removeprefix("event:").strip()
        elif line.startswith("data:"):
            events.append((name, json.loads(line.removeprefix("data:").strip())))
    return events


async def test_health_without_token(client, monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    r = await client.get("/api/health")
    assert r.status_code == 503


async def test_health_with_token(client, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    r = await client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_wrapped_streams_progress_then_result(client):
    with patch("git_wrapped.api.server.fetch_developer_document", return_value=DEVELOPER) as fetch:
        r = await client.post("/api/wrapped/@octocat?year=2025")
    events = _events(r.text)
    assert [name for name, _ in events] == ["progress", "progress", "result"]
    result = events[-1][1]
    assert result["subject"]["login"] == "octocat"
    assert result["year"] == 2025
    assert result["activity"]["longestStreak"] == 1
    assert fetch.call_args.args[:2] == ("octocat", 2025)


async def test_wrapped_reports_errors_with_fix(client):
    with patch("git_wrapped.api.server.fetch_developer_document", side_effect=SubjectNotFound('User "ghost" not found')):
        r = await client.post("/api/wrapped/ghost?year=2025")
    name, data = _events(r.text)[-1]
    assert name == "error"
    assert "ghost" in data["error"]
    assert data["fix"]


async def test_wrapped_rate_limit_fix_hint(client):
    with patch("git_wrapped.api.server.fetch_developer_document", side_effect=GitHubRateLimitError("limits exceeded")):
        r = await client.post("/api/wrapped/octocat?year=2025")
    name, data = _events(r.text)[-1]
    assert name == "error"
    assert "few minutes" in data["fix"]


async def test_project_streams_result(client):
    with patch("git_wrapped.api.server.fetch_repository_document", return_value=REPOSITORY):
        r = await client.post("/api/project/octo/widget?year=2025")
    name, data = _events(r.text)[-1]
    assert name == "result"
    assert data["type"] == "repository"
    assert data["personality"]["archetype"] == "rising-project"


async def test_analyze_document(client):
    r = await client.post("/api/analyze?year=2025", json=DEVELOPER.model_dump(mode="json", by_alias=True))
    assert r.status_code == 200
    data = r.json()
    assert data["contributions"]["commits"] == 3
    assert data["personality"]["archetype"] == "craftsman"


async def test_analyze_malformed_document(client):
    r = await client.post("/api/analyze", json={"type": "developer", "subject": {}})
    assert r.status_code == 422
    detail = r.json()["detail"]
    assert "login" in detail["error"]
    assert detail["errors"]
