"""Fetch a developer's or repository's year from the GitHub API.

The GraphQL API supplies almost everything; a few yearly repository figures
(issues, pull requests, forks, stars gained, weekly commits) only exist on the
REST API. The payloads are normalized into the engine's input documents.
"""
import datetime as dt
import logging
from typing import Any

import httpx

from git_wrapped.config import Settings
from git_wrapped.models import DeveloperDocument, RepositoryDocument
from git_wrapped.utils.retry import call_with_retry

_log = logging.getLogger(__name__)

MAX_REST_PAGES = 5
PER_PAGE = 100

DEVELOPER_QUERY = """
query DeveloperWrapped($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    login
    name
    avatarUrl
    bio
    followers { totalCount }
    following { totalCount }

    contributionsCollection(from: $from, to: $to) {
      totalCommitContributions
      totalPullRequestContributions
      totalIssueContributions
      totalPullRequestReviewContributions
      totalRepositoriesWithContributedCommits
      restrictedContributionsCount

      commitContributionsByRepository(maxRepositories: 30) {
        repository {
          name
          nameWithOwner
          owner { login }
          isPrivate
          stargazerCount
          primaryLanguage { name color }
        }
        contributions { totalCount }
      }

      pullRequestContributionsByRepository(maxRepositories: 10) {
        repository {
          name
          nameWithOwner
          owner { login }
          stargazerCount
        }
        contributions { totalCount }
      }

      issueContributionsByRepository(maxRepositories: 10) {
        repository {
          name
          nameWithOwner
          owner { login }
          stargazerCount
        }
        contributions { totalCount }
      }

      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
            weekday
          }
        }
      }
    }

    repositories(first: 20, ownerAffiliations: OWNER, orderBy: { field: STARGAZERS, direction: DESC }) {
      totalCount
      nodes {
        name
        nameWithOwner
        description
        stargazerCount
        forkCount
        isFork
        isArchived
        primaryLanguage { name color }
        languages(first: 3, orderBy: { field: SIZE, direction: DESC }) {
          edges {
            size
            node { name color }
          }
        }
      }
    }
  }
}
"""

REPOSITORY_QUERY = """
query RepoWrapped($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    name
    nameWithOwner
    description
    url
    createdAt
    stargazerCount
    forkCount
    watchers { totalCount }
    primaryLanguage { name color }
    languages(first: 10, orderBy: { field: SIZE, direction: DESC }) {
      edges {
        size
        node { name color }
      }
      totalSize
    }
    licenseInfo { name }
    releases(first: 100, orderBy: { field: CREATED_AT, direction: DESC }) {
      nodes {
        name
        tagName
        publishedAt
        isPrerelease
        isDraft
        releaseAssets(first: 50) {
          nodes { name downloadCount }
        }
      }
    }
    issues(states: [OPEN, CLOSED]) { totalCount }
    openIssues: issues(states: [OPEN]) { totalCount }
    closedIssues: issues(states: [CLOSED]) { totalCount }
    pullRequests(states: [OPEN, CLOSED, MERGED]) { totalCount }
    openPRs: pullRequests(states: [OPEN]) { totalCount }
    mergedPRs: pullRequests(states: [MERGED]) { totalCount }
    repositoryTopics(first: 10) {
      nodes { topic { name } }
    }
    owner { login avatarUrl }
  }
}
"""

_RATE_LIMIT_MARKERS = ("resource", "limit", "timeout")


class GitHubAPIError(RuntimeError):
    """The GitHub API answered with an error."""


class GitHubRateLimitError(GitHubAPIError):
    """GitHub refused the request for resource or rate limits; worth retrying later."""


class SubjectNotFound(GitHubAPIError):
    """The requested user or repository does not exist."""


# ── Transport ────────────────────────────────────────────────────────────────

def _headers(token: str, accept: str = "application/json") -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Accept": accept}


def _raise_for_graphql_errors(errors: list[dict[str, Any]]) -> None:
    first = errors[0] if errors else {}
    message = first.get("message") or "GraphQL query failed"
    if first.get("type") == "NOT_FOUND":
        raise SubjectNotFound(message)
    if first.get("type") == "RATE_LIMITED" or any(m in message.lower() for m in _RATE_LIMIT_MARKERS):
        raise GitHubRateLimitError(f"GitHub API resource limits exceeded: {message}")
    raise GitHubAPIError(message)


def _post_graphql(client: httpx.Client, settings: Settings, query: str, variables: dict[str, Any]) -> dict[str, Any]:
    response = client.post(
        settings.graphql_url,
        json={"query": query, "variables": variables},
        headers=_headers(settings.require_token()),
    )
    if response.status_code in (403, 429):
        raise GitHubRateLimitError(f"GitHub API rate limit hit (HTTP {response.status_code})")
    if response.status_code == 401:
        raise GitHubAPIError("GitHub rejected the token (HTTP 401)")
    if response.is_error:
        raise GitHubAPIError(f"GitHub API error: HTTP {response.status_code}")

    payload = response.json()
    if payload.get("errors"):
        _raise_for_graphql_errors(payload["errors"])
    return payload.get("data") or {}


def graphql(client: httpx.Client, settings: Settings, query: str, variables: dict[str, Any]) -> dict[str, Any]:
    """Run one GraphQL query, retrying rate-limit and transport failures with backoff."""
    _log.info("GraphQL request %s", ", ".join(f"{k}={v}" for k, v in variables.items()))
    return call_with_retry(
        _post_graphql, client, settings, query, variables,
        retry_on=(GitHubRateLimitError, httpx.TransportError),
    )


def _rest_get(client: httpx.Client, settings: Settings, endpoint: str, accept: str = "application/vnd.github+json") -> Any:
    response = client.get(f"{settings.rest_url}{endpoint}", headers=_headers(settings.require_token(), accept))
    if response.status_code != 200:
        _log.debug("REST %s answered HTTP %d", endpoint, response.status_code)
        return None
    return response.json()


def _rest_pages(client: httpx.Client, settings: Settings, endpoint: str, max_pages: int = MAX_REST_PAGES) -> list[dict]:
    """Collect up to ``max_pages`` pages of a list endpoint; stops at the first short or failed page."""
    results: list[dict] = []
    separator = "&" if "?" in endpoint else "?"
    for page in range(1, max_pages + 1):
        data = _rest_get(client, settings, f"{endpoint}{separator}per_page={PER_PAGE}&page={page}")
        if not isinstance(data, list) or not data:
            break
        results.extend(data)
        if len(data) < PER_PAGE:
            break
    return results


def _created_in(item: dict[str, Any], year: int, key: str = "created_at") -> bool:
    value = item.get(key)
    return bool(value) and value[:4] == str(year)


# ── Normalization ────────────────────────────────────────────────────────────

def _language_edges(languages: dict[str, Any] | None) -> list[dict[str, Any]]:
    edges = (languages or {}).get("edges") or []
    return [{"name": e["node"]["name"], "color": e["node"].get("color"), "size": e.get("size", 0)} for e in edges]


def _contribution(item: dict[str, Any]) -> dict[str, Any]:
    repo = item["repository"]
    return {
        "repository": {
            "nameWithOwner": repo["nameWithOwner"],
            "name": repo.get("name"),
            "owner": (repo.get("owner") or {}).get("login"),
            "isPrivate": repo.get("isPrivate", False),
            "stargazerCount": repo.get("stargazerCount") or 0,
            "primaryLanguage": repo.get("primaryLanguage"),
        },
        "count": item["contributions"]["totalCount"],
    }


def normalize_user_payload(user: dict[str, Any]) -> DeveloperDocument:
    """Turn the ``user`` object of DEVELOPER_QUERY into a DeveloperDocument."""
    contrib = user.get("contributionsCollection") or {}
    repos = user.get("repositories") or {}
    return DeveloperDocument.model_validate({
        "type": "developer",
        "subject": {
            "login": user["login"],
            "name": user.get("name"),
            "avatarUrl": user.get("avatarUrl"),
            "bio": user.get("bio"),
            "followers": (user.get("followers") or {}).get("totalCount", 0),
            "following": (user.get("following") or {}).get("totalCount", 0),
        },
        "totals": {
            "commits": contrib.get("totalCommitContributions", 0),
            "pullRequests": contrib.get("totalPullRequestContributions", 0),
            "issues": contrib.get("totalIssueContributions", 0),
            "reviews": contrib.get("totalPullRequestReviewContributions", 0),
            "reposContributedTo": contrib.get("totalRepositoriesWithContributedCommits", 0),
            "restricted": contrib.get("restrictedContributionsCount", 0),
        },
        "calendar": contrib.get("contributionCalendar") or {},
        "repositories": [
            {
                "nameWithOwner": node["nameWithOwner"],
                "name": node.get("name"),
                "description": node.get("description"),
                "stargazerCount": node.get("stargazerCount") or 0,
                "forkCount": node.get("forkCount") or 0,
                "isFork": node.get("isFork", False),
                "isArchived": node.get("isArchived", False),
                "primaryLanguage": node.get("primaryLanguage"),
                "languages": _language_edges(node.get("languages")),
            }
            for node in repos.get("nodes") or []
        ],
        "repositoryCount": repos.get("totalCount"),
        "commitContributions": [_contribution(i) for i in contrib.get("commitContributionsByRepository") or []],
        "pullRequestContributions": [_contribution(i) for i in contrib.get("pullRequestContributionsByRepository") or []],
        "issueContributions": [_contribution(i) for i in contrib.get("issueContributionsByRepository") or []],
    })


def normalize_repository_payload(repo: dict[str, Any], yearly: dict[str, Any] | None = None) -> RepositoryDocument:
    """Turn the ``repository`` object of REPOSITORY_QUERY plus REST yearly figures into a RepositoryDocument."""
    yearly = yearly or {}
    languages = repo.get("languages") or {}
    owner = repo.get("owner") or {}
    return RepositoryDocument.model_validate({
        "type": "repository",
        "repository": {
            "nameWithOwner": repo["nameWithOwner"],
            "name": repo.get("name"),
            "owner": owner.get("login"),
            "ownerAvatarUrl": owner.get("avatarUrl"),
            "description": repo.get("description"),
            "url": repo.get("url"),
            "createdAt": repo.get("createdAt"),
            "license": (repo.get("licenseInfo") or {}).get("name"),
            "topics": [n["topic"]["name"] for n in (repo.get("repositoryTopics") or {}).get("nodes") or []],
            "primaryLanguage": repo.get("primaryLanguage"),
        },
        "stargazerCount": repo.get("stargazerCount") or 0,
        "forkCount": repo.get("forkCount") or 0,
        "watcherCount": (repo.get("watchers") or {}).get("totalCount", 0),
        "languages": {"totalSize": languages.get("totalSize", 0), "edges": _language_edges(languages)},
        "issueCounts": {
            "total": (repo.get("issues") or {}).get("totalCount", 0),
            "open": (repo.get("openIssues") or {}).get("totalCount", 0),
            "closed": (repo.get("closedIssues") or {}).get("totalCount", 0),
        },
        "pullRequestCounts": {
            "total": (repo.get("pullRequests") or {}).get("totalCount", 0),
            "open": (repo.get("openPRs") or {}).get("totalCount", 0),
            "merged": (repo.get("mergedPRs") or {}).get("totalCount", 0),
        },
        "releases": [
            {
                "name": node.get("name"),
                "tagName": node.get("tagName") or "",
                "publishedAt": node.get("publishedAt"),
                "isPrerelease": node.get("isPrerelease", False),
                "isDraft": node.get("isDraft", False),
                "assets": (node.get("releaseAssets") or {}).get("nodes") or [],
            }
            for node in (repo.get("releases") or {}).get("nodes") or []
        ],
        "contributors": yearly.get("contributors", []),
        "weeklyCommits": yearly.get("weekly_commits", []),
        "issuesCreated": yearly.get("issues_created", 0),
        "pullRequestsCreated": yearly.get("pull_requests_created", 0),
        "pullRequestsMerged": yearly.get("pull_requests_merged", 0),
        "starsGained": yearly.get("stars_gained", 0),
        "forksGained": yearly.get("forks_gained", 0),
    })


def _yearly_repository_stats(client: httpx.Client, settings: Settings, owner: str, name: str, year: int) -> dict[str, Any]:
    base = f"/repos/{owner}/{name}"

    issues = _rest_pages(client, settings, f"{base}/issues?state=all&since={year}-01-01T00:00:00Z&sort=created&direction=desc")
    pulls = _rest_pages(client, settings, f"{base}/pulls?state=all&sort=created&direction=desc")
    contributors = _rest_pages(client, settings, f"{base}/contributors", max_pages=3)
    forks = _rest_pages(client, settings, f"{base}/forks?sort=newest", max_pages=3)
    stargazers = _rest_get(client, settings, f"{base}/stargazers?per_page={PER_PAGE}", accept="application/vnd.github.star+json")
    activity = _rest_get(client, settings, f"{base}/stats/commit_activity")

    pulls_in_year = [pr for pr in pulls if _created_in(pr, year)]
    return {
        "issues_created": sum(1 for i in issues if _created_in(i, year) and "pull_request" not in i),
        "pull_requests_created": len(pulls_in_year),
        "pull_requests_merged": sum(1 for pr in pulls_in_year if pr.get("merged_at")),
        "contributors": [
            {"login": c["login"], "avatarUrl": c.get("avatar_url"), "contributions": c.get("contributions", 0)}
            for c in contributors
            if c.get("login")
        ],
        "forks_gained": sum(1 for f in forks if _created_in(f, year)),
        "stars_gained": sum(1 for s in stargazers or [] if _created_in(s, year, key="starred_at")),
        "weekly_commits": [
            {
                "weekStart": dt.datetime.fromtimestamp(week["week"], tz=dt.timezone.utc).date(),
                "total": week.get("total", 0),
            }
            for week in (activity if isinstance(activity, list) else [])
        ],
    }


# ── Public entry points ──────────────────────────────────────────────────────

def fetch_developer_document(
    login: str,
    year: int,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> DeveloperDocument:
    settings = settings or Settings.from_env()
    variables = {"login": login, "from": f"{year}-01-01T00:00:00Z", "to": f"{year}-12-31T23:59:59Z"}

    owns_client = client is None
    client = client or httpx.Client(timeout=settings.timeout)
    try:
        data = graphql(client, settings, DEVELOPER_QUERY, variables)
    finally:
        if owns_client:
            client.close()

    user = data.get("user")
    if not user:
        raise SubjectNotFound(f'User "{login}" not found')
    return normalize_user_payload(user)


def fetch_repository_document(
    owner: str,
    name: str,
    year: int,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> RepositoryDocument:
    settings = settings or Settings.from_env()

    owns_client = client is None
    client = client or httpx.Client(timeout=settings.timeout)
    try:
        data = graphql(client, settings, REPOSITORY_QUERY, {"owner": owner, "name": name})
        repo = data.get("repository")
        if not repo:
            raise SubjectNotFound(f'Repository "{owner}/{name}" not found')
        yearly = _yearly_repository_stats(client, settings, owner, name, year)
    finally:
        if owns_client:
            client.close()

    _log.info("Fetched %s/%s: %d contributor(s)", owner, name, len(yearly["contributors"]))
    return normalize_repository_payload(repo, yearly)
