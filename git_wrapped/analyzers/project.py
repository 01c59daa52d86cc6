"""Yearly summary of a single repository ("project wrapped")."""
import logging

from git_wrapped.analyzers.languages import color_for
from git_wrapped.models import (
    GrowthStat,
    Personality,
    ProjectActivity,
    ProjectLanguage,
    ProjectStatistics,
    ProjectStats,
    Release,
    ReleaseStats,
    ReleaseSummary,
    RepositoryDocument,
    RepositoryLanguages,
    Trait,
    WeeklyCommits,
)
from git_wrapped.utils.patterns import find_peak, percentage

_log = logging.getLogger(__name__)

TOP_RELEASES = 10
TOP_CONTRIBUTORS = 10
MAX_TRAITS = 4
DEFAULT_ARCHETYPE = "growing-project"

_UNSTABLE_TAG_MARKERS = ("alpha", "beta", "-rc", "preview")
_UNSTABLE_NAME_MARKERS = ("alpha", "beta", "preview")

PROJECT_COPY = {
    "community-powerhouse": {
        "title": "Community Powerhouse",
        "emoji": "🏛️",
        "tagline": "A pillar of the open source community",
        "description": "Massive adoption, active community, continuous improvements. This is what open source success looks like.",
    },
    "rising-project": {
        "title": "Rising Star Project",
        "emoji": "🚀",
        "tagline": "On the path to greatness",
        "description": "Strong growth, engaged contributors, and momentum that can't be ignored.",
    },
    "community-driven": {
        "title": "Community Driven",
        "emoji": "🤝",
        "tagline": "Built by the community, for the community",
        "description": "A diverse group of contributors working together to build something amazing.",
    },
    DEFAULT_ARCHETYPE: {
        "title": "Growing Project",
        "emoji": "🌱",
        "tagline": "Every great project started somewhere",
        "description": "Building momentum, attracting attention, and laying the foundation for future success.",
    },
}


def summarize_languages(languages: RepositoryLanguages) -> list[ProjectLanguage]:
    return [
        ProjectLanguage(
            name=edge.name,
            color_hint=color_for(edge.name, edge.color),
            percentage=percentage(edge.size, languages.total_size),
        )
        for edge in languages.edges
    ]


def is_stable_release(release: Release, year: int) -> bool:
    """Published in ``year`` and neither a draft, a prerelease nor an alpha/beta/rc/preview build."""
    if release.published_at is None or release.published_at.year != year:
        return False
    if release.is_prerelease or release.is_draft:
        return False
    tag = release.tag_name.lower()
    name = (release.name or "").lower()
    if any(marker in tag for marker in _UNSTABLE_TAG_MARKERS):
        return False
    return not any(marker in name for marker in _UNSTABLE_NAME_MARKERS)


def summarize_releases(releases: list[Release], year: int) -> ReleaseStats:
    stable = [release for release in releases if is_stable_release(release, year)]
    summaries = [
        ReleaseSummary(
            name=release.name or release.tag_name,
            tag_name=release.tag_name,
            published_at=release.published_at,
            downloads=sum(asset.download_count for asset in release.assets),
            assets=release.assets,
        )
        for release in stable
    ]
    return ReleaseStats(
        count=len(stable),
        total_downloads=sum(summary.downloads for summary in summaries),
        releases=summaries[:TOP_RELEASES],
    )


def summarize_commit_activity(weeks: list[WeeklyCommits], year: int) -> ProjectActivity:
    """Fold weekly commit buckets starting in ``year`` into ``YYYY-MM`` totals."""
    in_year = [week for week in weeks if week.week_start.year == year]
    monthly: dict[str, int] = {}
    for week in in_year:
        month = week.week_start.strftime("%Y-%m")
        monthly[month] = monthly.get(month, 0) + week.total
    monthly = dict(sorted(monthly.items()))

    peak = find_peak(monthly, order=sorted(monthly)) if sum(monthly.values()) else None
    return ProjectActivity(
        monthly_commits=monthly,
        weekly_commits=in_year,
        peak_month=peak[0] if peak else None,
        peak_month_count=peak[1] if peak else 0,
    )


def classify_project(
    stars: int,
    forks: int,
    prs: int,
    contributors: int,
    releases: int,
    commits: int,
) -> Personality:
    archetype = DEFAULT_ARCHETYPE
    traits: list[Trait] = []

    if stars >= 10000:
        archetype = "community-powerhouse"
        traits.append(Trait(name="Massively Popular", description=f"{stars / 1000:.1f}k stars", icon="🌟"))
    elif stars >= 1000:
        archetype = "rising-project"
        traits.append(Trait(name="Rising Star", description=f"{stars:,} stars", icon="⭐"))

    if contributors >= 100:
        if archetype != "community-powerhouse":
            archetype = "community-driven"
        traits.append(Trait(name="Community Driven", description=f"{contributors} contributors", icon="👥"))

    if releases >= 10:
        traits.append(Trait(name="Active Releaser", description=f"{releases} releases", icon="📦"))
    if commits >= 1000:
        traits.append(Trait(name="Highly Active", description=f"{commits:,} commits", icon="⚡"))
    if prs >= 500:
        traits.append(Trait(name="PR Machine", description=f"{prs} PRs", icon="🔄"))
    if forks >= 1000:
        traits.append(Trait(name="Fork Magnet", description=f"{forks:,} forks", icon="🍴"))

    if not traits:
        traits.append(Trait(name="Growing Project", description="Building momentum", icon="🌱"))

    details = PROJECT_COPY.get(archetype, PROJECT_COPY[DEFAULT_ARCHETYPE])
    return Personality(archetype=archetype, **details, traits=traits[:MAX_TRAITS])


def analyze_project(document: RepositoryDocument, reference_year: int) -> ProjectStatistics:
    releases = summarize_releases(document.releases, reference_year)
    activity = summarize_commit_activity(document.weekly_commits, reference_year)
    commits = sum(activity.monthly_commits.values())

    personality = classify_project(
        stars=document.stargazer_count,
        forks=document.fork_count,
        prs=document.pull_requests_created,
        contributors=len(document.contributors),
        releases=releases.count,
        commits=commits,
    )
    _log.debug(
        "Project %s: %d stable release(s), %d commit(s) in %d -> %s",
        document.repository.name_with_owner, releases.count, commits, reference_year, personality.archetype,
    )
    return ProjectStatistics(
        year=reference_year,
        repository=document.repository,
        stats=ProjectStats(
            stars=GrowthStat(total=document.stargazer_count, gained=document.stars_gained),
            forks=GrowthStat(total=document.fork_count, gained=document.forks_gained),
            watchers=document.watcher_count,
            issues=document.issue_counts,
            issues_created=document.issues_created,
            pull_requests=document.pull_request_counts,
            pull_requests_created=document.pull_requests_created,
            pull_requests_merged=document.pull_requests_merged,
            commits_this_year=commits,
            contributors_total=len(document.contributors),
            top_contributors=document.contributors[:TOP_CONTRIBUTORS],
        ),
        languages=summarize_languages(document.languages),
        releases=releases,
        activity=activity,
        personality=personality,
    )
