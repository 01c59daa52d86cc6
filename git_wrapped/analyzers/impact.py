"""Per-repository contribution merging, OSS split and star/fork impact."""
import logging
from collections.abc import Iterable

from git_wrapped.models import (
    ImpactSummary,
    OssContributions,
    RepoHighlight,
    Repository,
    RepositoryContribution,
    RepositoryContributionRecord,
)
from git_wrapped.utils.patterns import one_decimal

_log = logging.getLogger(__name__)

POPULAR_REPO_STARS = 1000
TOP_REPOSITORIES = 6


def merge_contributions(
    subject_login: str,
    commits: Iterable[RepositoryContribution],
    pull_requests: Iterable[RepositoryContribution] = (),
    issues: Iterable[RepositoryContribution] = (),
) -> dict[str, RepositoryContributionRecord]:
    """Combine the three contributions-by-repository collections, keyed by ``owner/name``.

    Only the commit collection creates entries and sets ownership. Pull request
    and issue counts are added to repositories already present; a repository
    that appears only in those collections is left out.
    """
    merged: dict[str, RepositoryContributionRecord] = {}
    login = subject_login.lower()

    for item in commits:
        repo = item.repository
        record = merged.get(repo.name_with_owner)
        if record is None:
            record = RepositoryContributionRecord(
                repo_id=repo.name_with_owner,
                name=repo.short_name,
                is_owned_by_subject=repo.owner_login.lower() == login,
                star_count=repo.stargazer_count,
            )
            merged[repo.name_with_owner] = record
        record.commit_count += item.count

    dropped = 0
    for field_name, collection in (("pr_count", pull_requests), ("issue_count", issues)):
        for item in collection:
            record = merged.get(item.repository.name_with_owner)
            if record is None:
                dropped += 1
                continue
            setattr(record, field_name, getattr(record, field_name) + item.count)

    if dropped:
        _log.debug("Dropped %d PR/issue entr(ies) for repositories without commits", dropped)
    return merged


def rank_contributions(merged: dict[str, RepositoryContributionRecord]) -> list[RepositoryContributionRecord]:
    """Records by descending total; equal totals keep merge order."""
    return sorted(merged.values(), key=lambda record: record.total, reverse=True)


def summarize_oss(
    merged: dict[str, RepositoryContributionRecord],
    pull_requests: Iterable[RepositoryContribution] = (),
) -> OssContributions:
    """Contributions to repositories the subject does not own."""
    external = [record for record in merged.values() if not record.is_owned_by_subject]
    external_ids = {record.repo_id for record in external}
    popular_prs = sum(
        item.count
        for item in pull_requests
        if item.repository.name_with_owner in external_ids
        and item.repository.stargazer_count >= POPULAR_REPO_STARS
    )
    return OssContributions(
        repo_count=len(external),
        total_contributions=sum(record.total for record in external),
        prs_to_popular_repos=popular_prs,
    )


def _highlight(repo: Repository, commits: dict[str, int]) -> RepoHighlight:
    language = repo.primary_language
    return RepoHighlight(
        name=repo.short_name,
        name_with_owner=repo.name_with_owner,
        description=repo.description,
        stars=repo.stargazer_count,
        forks=repo.fork_count,
        language=language.name if language else None,
        language_color=language.color if language else None,
        commits=commits.get(repo.name_with_owner, 0),
    )


def _first_max(repositories: list[Repository], key) -> Repository | None:
    best = None
    for repo in repositories:
        if best is None or key(repo) > key(best):
            best = repo
    return best


def summarize_impact(
    subject_login: str,
    repositories: list[Repository],
    commits: list[RepositoryContribution],
    pull_requests: list[RepositoryContribution],
    issues: list[RepositoryContribution],
    repository_count: int | None = None,
) -> ImpactSummary:
    """Stars, forks and contribution ranking for one subject."""
    merged = merge_contributions(subject_login, commits, pull_requests, issues)
    ranked = rank_contributions(merged)
    commit_counts = {record.repo_id: record.commit_count for record in merged.values()}

    total_stars = sum(repo.stargazer_count for repo in repositories)
    total_forks = sum(repo.fork_count for repo in repositories)
    most_starred = _first_max(repositories, lambda repo: repo.stargazer_count)
    most_forked = _first_max(repositories, lambda repo: repo.fork_count)

    candidates = [repo for repo in repositories if not repo.is_fork and not repo.is_archived]
    top = sorted(candidates, key=lambda repo: repo.stargazer_count, reverse=True)[:TOP_REPOSITORIES]

    summary = ImpactSummary(
        total_stars=total_stars,
        total_forks=total_forks,
        repository_count=repository_count if repository_count is not None else len(repositories),
        stars_per_repo=one_decimal(total_stars, len(repositories)),
        most_starred_repo=_highlight(most_starred, commit_counts) if most_starred else None,
        most_forked_repo=_highlight(most_forked, commit_counts) if most_forked else None,
        top_repositories=[_highlight(repo, commit_counts) for repo in top],
        most_contributed_repo=ranked[0] if ranked and ranked[0].total > 0 else None,
        oss_contributions=summarize_oss(merged, pull_requests),
    )
    _log.debug(
        "Impact: %d star(s), %d merged repo(s), %d external",
        total_stars, len(merged), summary.oss_contributions.repo_count,
    )
    return summary
