"""Entry point of the analysis engine.

``analyze`` takes one activity document (a developer's year or a repository's
year) and returns the complete statistics document, or raises. Every stage is
a pure function of its input, so independent documents can be analyzed on
separate threads with ``analyze_many``.
"""
import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from git_wrapped.analyzers.activity import summarize_activity
from git_wrapped.analyzers.calendar import flatten_calendar
from git_wrapped.analyzers.impact import summarize_impact
from git_wrapped.analyzers.languages import aggregate_languages
from git_wrapped.analyzers.personality import PersonalityMetrics, classify_personality
from git_wrapped.analyzers.project import analyze_project
from git_wrapped.models import (
    ActivitySummary,
    ContributionSummary,
    DeveloperDocument,
    DeveloperStatistics,
    ImpactSummary,
    LanguageSummary,
    ProjectStatistics,
    RepositoryDocument,
    parse_document,
)

_log = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

Statistics = DeveloperStatistics | ProjectStatistics


def build_metrics(
    contributions: ContributionSummary,
    activity: ActivitySummary,
    languages: LanguageSummary,
    impact: ImpactSummary,
) -> PersonalityMetrics:
    return PersonalityMetrics(
        streak=activity.longest_streak,
        commits=contributions.commits,
        prs=contributions.pull_requests,
        reviews=contributions.reviews,
        issues=contributions.issues,
        is_polyglot=languages.is_polyglot,
        is_specialist=languages.is_specialist,
        top_language=languages.top.name if languages.top else None,
        stars=impact.total_stars,
        repos_contributed=contributions.repos_contributed_to,
        active_days=activity.total_active_days,
        oss_repo_count=impact.oss_contributions.repo_count,
        prs_to_popular_repos=impact.oss_contributions.prs_to_popular_repos,
    )


def analyze_developer(document: DeveloperDocument, reference_year: int) -> DeveloperStatistics:
    days = flatten_calendar(document.calendar)
    counted = sum(day.count for day in days)
    total = document.calendar.total_contributions
    if total is None:
        total = counted

    totals = document.totals
    contributions = ContributionSummary(
        total=total,
        commits=totals.commits,
        pull_requests=totals.pull_requests,
        issues=totals.issues,
        reviews=totals.reviews,
        repos_contributed_to=totals.repos_contributed_to,
        restricted=totals.restricted,
    )
    activity = summarize_activity(days, total)
    languages = aggregate_languages(document.repositories, document.commit_contributions)
    impact = summarize_impact(
        document.subject.login,
        document.repositories,
        document.commit_contributions,
        document.pull_request_contributions,
        document.issue_contributions,
        repository_count=document.repository_count,
    )
    personality = classify_personality(build_metrics(contributions, activity, languages, impact))

    _log.debug("Analyzed %s for %d: %s", document.subject.login, reference_year, personality.archetype)
    return DeveloperStatistics(
        year=reference_year,
        subject=document.subject,
        contributions=contributions,
        activity=activity,
        languages=languages,
        impact=impact,
        personality=personality,
    )


def analyze(document: DeveloperDocument | RepositoryDocument | Mapping[str, Any], reference_year: int) -> Statistics:
    """Analyze one document.

    Plain mappings are validated first; malformed input raises
    InvalidActivityDocument before any stage runs.
    """
    parsed = parse_document(document)
    if isinstance(parsed, DeveloperDocument):
        return analyze_developer(parsed, reference_year)
    if isinstance(parsed, RepositoryDocument):
        return analyze_project(parsed, reference_year)
    raise TypeError(f"Unsupported document type: {type(parsed).__name__}")


def analyze_many(
    documents: Iterable[DeveloperDocument | RepositoryDocument | Mapping[str, Any]],
    reference_year: int,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> list[Statistics]:
    """Analyze documents concurrently; results keep the input order.

    The first failing document's exception propagates.
    """
    documents = list(documents)
    if not documents:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(pool.map(lambda doc: analyze(doc, reference_year), documents))
    _log.info("Analyzed %d document(s) for %d", len(results), reference_year)
    return results
