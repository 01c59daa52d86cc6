"""FastAPI server exposing git_wrapped analysis as SSE endpoints."""
import asyncio
import json
import logging
import os

from dotenv import load_dotenv

load_dotenv()
from typing import Any, AsyncGenerator

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sse_starlette.sse import EventSourceResponse

from git_wrapped.config import Settings
from git_wrapped.engine import analyze as run_analysis
from git_wrapped.fetchers.github import (
    GitHubRateLimitError,
    SubjectNotFound,
    fetch_developer_document,
    fetch_repository_document,
)
from git_wrapped.models import InvalidActivityDocument

_log = logging.getLogger(__name__)

app = FastAPI(title="git-wrapped API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def _progress(stage: str, message: str) -> dict:
    return {"event": "progress", "data": json.dumps({"stage": stage, "message": message})}


def _error_event(exc: Exception) -> dict:
    msg = str(exc)
    fix = ""
    if isinstance(exc, GitHubRateLimitError):
        fix = "Wait a few minutes and try again"
    elif isinstance(exc, SubjectNotFound):
        fix = "Check the spelling of the username or repository"
    elif "GITHUB_TOKEN" in msg:
        fix = "Set GITHUB_TOKEN in your .env file"
    return {"event": "error", "data": json.dumps({"error": msg, "fix": fix})}


def _result_event(stats) -> dict:
    return {
        "event": "result",
        "data": json.dumps(stats.model_dump(mode="json", by_alias=True), ensure_ascii=False),
    }


# ── Endpoints ────────────────────────────────────────────────────────────────

@app.get("/api/health")
def health():
    """Check that required env vars are set."""
    if not os.getenv("GITHUB_TOKEN"):
        raise HTTPException(status_code=503, detail="GITHUB_TOKEN not set")
    return {"status": "ok"}


@app.post("/api/wrapped/{username}")
async def wrapped(username: str, year: int | None = None):
    """Stream SSE events: progress stages then the developer's wrapped statistics."""
    username = username.lstrip("@")
    settings = Settings.from_env()
    year = year or settings.year

    async def _generate() -> AsyncGenerator[dict, None]:
        try:
            yield _progress("fetching", f"Fetching @{username}'s {year} from GitHub…")
            document = await asyncio.to_thread(fetch_developer_document, username, year, settings)

            yield _progress("analyzing", "Crunching streaks, languages and impact…")
            stats = run_analysis(document, year)
            yield _result_event(stats)

        except Exception as exc:
            _log.warning("Wrapped for %s failed: %s", username, exc)
            yield _error_event(exc)

    return EventSourceResponse(_generate())


@app.post("/api/project/{owner}/{repo}")
async def project(owner: str, repo: str, year: int | None = None):
    """Stream SSE events: progress stages then the repository's wrapped statistics."""
    settings = Settings.from_env()
    year = year or settings.year

    async def _generate() -> AsyncGenerator[dict, None]:
        try:
            yield _progress("fetching", f"Fetching {owner}/{repo} from GitHub…")
            document = await asyncio.to_thread(fetch_repository_document, owner, repo, year, settings)

            yield _progress("analyzing", "Summarizing releases and activity…")
            stats = run_analysis(document, year)
            yield _result_event(stats)

        except Exception as exc:
            _log.warning("Project wrapped for %s/%s failed: %s", owner, repo, exc)
            yield _error_event(exc)

    return EventSourceResponse(_generate())


@app.post("/api/analyze")
def analyze(document: dict[str, Any] = Body(...), year: int | None = None):
    """Analyze a complete activity document sent in the request body."""
    year = year or Settings.from_env().year
    try:
        stats = run_analysis(document, year)
    except InvalidActivityDocument as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "error": str(exc),
                "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors],
            },
        )
    return stats.model_dump(mode="json", by_alias=True)
