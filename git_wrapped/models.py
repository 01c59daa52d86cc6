"""Activity documents (engine input) and wrapped statistics (engine output).

Every model accepts and emits camelCase aliases, the shape GitHub returns and
the renderer consumes, while Python code uses the snake_case field names.
"""
import datetime as dt
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, computed_field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvalidActivityDocument(ValueError):
    """Raised when an activity document cannot be analyzed as given."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


# ── Input: shared pieces ─────────────────────────────────────────────────────

class PrimaryLanguage(_Model):
    name: str
    color: str | None = None


class LanguageEdge(_Model):
    name: str
    color: str | None = None
    size: int = Field(0, ge=0)


# ── Input: developer document ────────────────────────────────────────────────

class CalendarDay(_Model):
    date: dt.date
    contribution_count: int = Field(ge=0)
    weekday: int = Field(ge=0, le=6)  # 0 = Sunday


class CalendarWeek(_Model):
    contribution_days: list[CalendarDay] = Field(default_factory=list)


class ContributionCalendar(_Model):
    total_contributions: int | None = None
    weeks: list[CalendarWeek] = Field(default_factory=list)


class Subject(_Model):
    login: str
    name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    followers: int = 0
    following: int = 0


class ContributionTotals(_Model):
    commits: int = 0
    pull_requests: int = 0
    issues: int = 0
    reviews: int = 0
    repos_contributed_to: int = 0
    restricted: int = 0


class Repository(_Model):
    name_with_owner: str
    name: str | None = None
    description: str | None = None
    stargazer_count: int = 0
    fork_count: int = 0
    primary_language: PrimaryLanguage | None = None
    languages: list[LanguageEdge] = Field(default_factory=list)
    is_fork: bool = False
    is_archived: bool = False

    @property
    def short_name(self) -> str:
        return self.name or self.name_with_owner.rpartition("/")[2]


class ContributionRepository(_Model):
    name_with_owner: str
    name: str | None = None
    owner: str | None = None
    is_private: bool = False
    primary_language: PrimaryLanguage | None = None
    stargazer_count: int = 0

    @property
    def owner_login(self) -> str:
        return self.owner or self.name_with_owner.partition("/")[0]

    @property
    def short_name(self) -> str:
        return self.name or self.name_with_owner.rpartition("/")[2]


class RepositoryContribution(_Model):
    repository: ContributionRepository
    count: int = Field(0, ge=0)


class DeveloperDocument(_Model):
    type: Literal["developer"] = "developer"
    subject: Subject
    totals: ContributionTotals = Field(default_factory=ContributionTotals)
    calendar: ContributionCalendar = Field(default_factory=ContributionCalendar)
    repositories: list[Repository] = Field(default_factory=list)
    repository_count: int | None = None
    commit_contributions: list[RepositoryContribution] = Field(default_factory=list)
    pull_request_contributions: list[RepositoryContribution] = Field(default_factory=list)
    issue_contributions: list[RepositoryContribution] = Field(default_factory=list)


# ── Input: repository document ───────────────────────────────────────────────

class RepositoryInfo(_Model):
    name_with_owner: str
    name: str | None = None
    owner: str | None = None
    owner_avatar_url: str | None = None
    description: str | None = None
    url: str | None = None
    created_at: dt.datetime | None = None
    license: str | None = None
    topics: list[str] = Field(default_factory=list)
    primary_language: PrimaryLanguage | None = None


class RepositoryLanguages(_Model):
    total_size: int = 0
    edges: list[LanguageEdge] = Field(default_factory=list)


class IssueCounts(_Model):
    total: int = 0
    open: int = 0
    closed: int = 0


class PullRequestCounts(_Model):
    total: int = 0
    open: int = 0
    merged: int = 0


class Contributor(_Model):
    login: str
    avatar_url: str | None = None
    contributions: int = 0


class ReleaseAsset(_Model):
    name: str = ""
    download_count: int = 0


class Release(_Model):
    name: str | None = None
    tag_name: str = ""
    published_at: dt.datetime | None = None
    is_prerelease: bool = False
    is_draft: bool = False
    assets: list[ReleaseAsset] = Field(default_factory=list)


class WeeklyCommits(_Model):
    week_start: dt.date
    total: int = 0


class RepositoryDocument(_Model):
    type: Literal["repository"] = "repository"
    repository: RepositoryInfo
    stargazer_count: int = 0
    fork_count: int = 0
    watcher_count: int = 0
    languages: RepositoryLanguages = Field(default_factory=RepositoryLanguages)
    issue_counts: IssueCounts = Field(default_factory=IssueCounts)
    pull_request_counts: PullRequestCounts = Field(default_factory=PullRequestCounts)
    contributors: list[Contributor] = Field(default_factory=list)
    releases: list[Release] = Field(default_factory=list)
    weekly_commits: list[WeeklyCommits] = Field(default_factory=list)
    issues_created: int = 0
    pull_requests_created: int = 0
    pull_requests_merged: int = 0
    stars_gained: int = 0
    forks_gained: int = 0


ActivityDocument = Annotated[Union[DeveloperDocument, RepositoryDocument], Field(discriminator="type")]

_document_adapter: TypeAdapter = TypeAdapter(ActivityDocument)


def parse_document(raw: Any) -> DeveloperDocument | RepositoryDocument:
    """Validate a raw mapping into the matching document type.

    Raises InvalidActivityDocument with the pydantic error list attached.
    """
    if isinstance(raw, (DeveloperDocument, RepositoryDocument)):
        return raw
    try:
        return _document_adapter.validate_python(raw)
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        raise InvalidActivityDocument(
            f"Invalid activity document at {where or '<root>'}: {first.get('msg', 'validation failed')}",
            errors=errors,
        ) from exc


# ── Engine records ───────────────────────────────────────────────────────────

class ActivityDay(_Model):
    date: dt.date
    count: int = Field(ge=0)
    weekday: int = Field(ge=0, le=6)


class StreakResult(_Model):
    longest: int = 0
    longest_start: dt.date | None = None
    longest_end: dt.date | None = None
    current: int = 0


class HourlyEstimate(_Model):
    """Synthetic hour-of-day spread of a contribution total, not measured data."""

    estimated: Literal[True] = True
    peak_hour: int | None = None
    distribution: dict[int, float] = Field(default_factory=dict)


class LanguageStat(_Model):
    name: str
    color_hint: str
    byte_size: int = 0
    percentage: str = "0"
    repo_count: int = 0
    commit_count: int = 0


class LanguageSummary(_Model):
    all: list[LanguageStat] = Field(default_factory=list)
    top: LanguageStat | None = None
    count: int = 0
    total_size: int = 0
    is_polyglot: bool = False
    is_specialist: bool = False
    top_language_percentage: float = 0.0


class RepositoryContributionRecord(_Model):
    repo_id: str
    name: str
    is_owned_by_subject: bool
    commit_count: int = 0
    pr_count: int = 0
    issue_count: int = 0
    star_count: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return self.commit_count + self.pr_count + self.issue_count


class RepoHighlight(_Model):
    name: str
    name_with_owner: str
    description: str | None = None
    stars: int = 0
    forks: int = 0
    language: str | None = None
    language_color: str | None = None
    commits: int = 0


class OssContributions(_Model):
    repo_count: int = 0
    total_contributions: int = 0
    prs_to_popular_repos: int = 0


class ImpactSummary(_Model):
    total_stars: int = 0
    total_forks: int = 0
    repository_count: int = 0
    stars_per_repo: str = "0"
    most_starred_repo: RepoHighlight | None = None
    most_forked_repo: RepoHighlight | None = None
    top_repositories: list[RepoHighlight] = Field(default_factory=list)
    most_contributed_repo: RepositoryContributionRecord | None = None
    oss_contributions: OssContributions = Field(default_factory=OssContributions)


class ActivitySummary(_Model):
    longest_streak: int = 0
    longest_streak_start: dt.date | None = None
    longest_streak_end: dt.date | None = None
    current_streak: int = 0
    busiest_day: str | None = None
    busiest_day_count: int = 0
    busiest_hour: int | None = None
    hourly_estimate: HourlyEstimate = Field(default_factory=HourlyEstimate)
    peak_month: str | None = None
    peak_month_count: int = 0
    total_active_days: int = 0
    total_days: int = 0
    first_contribution: dt.date | None = None
    last_contribution: dt.date | None = None
    average_per_day: str = "0"
    average_per_week: str = "0"
    weekend_ratio: float = 0.0
    weekday_distribution: dict[int, int] = Field(default_factory=dict)
    monthly_distribution: dict[str, int] = Field(default_factory=dict)


class ContributionSummary(_Model):
    total: int = 0
    commits: int = 0
    pull_requests: int = 0
    issues: int = 0
    reviews: int = 0
    repos_contributed_to: int = 0
    restricted: int = 0


class Trait(_Model):
    name: str
    description: str
    score: int | None = None
    icon: str = ""


class Personality(_Model):
    archetype: str
    title: str
    emoji: str
    tagline: str
    description: str
    traits: list[Trait] = Field(default_factory=list)
    badges: list[str] = Field(default_factory=list)


class DeveloperStatistics(_Model):
    type: Literal["developer"] = "developer"
    year: int
    subject: Subject
    contributions: ContributionSummary
    activity: ActivitySummary
    languages: LanguageSummary
    impact: ImpactSummary
    personality: Personality


# ── Project output ───────────────────────────────────────────────────────────

class ProjectLanguage(_Model):
    name: str
    color_hint: str
    percentage: str = "0"


class ReleaseSummary(_Model):
    name: str
    tag_name: str
    published_at: dt.datetime | None = None
    downloads: int = 0
    assets: list[ReleaseAsset] = Field(default_factory=list)


class ReleaseStats(_Model):
    count: int = 0
    total_downloads: int = 0
    releases: list[ReleaseSummary] = Field(default_factory=list)


class GrowthStat(_Model):
    total: int = 0
    gained: int = 0


class ProjectStats(_Model):
    stars: GrowthStat = Field(default_factory=GrowthStat)
    forks: GrowthStat = Field(default_factory=GrowthStat)
    watchers: int = 0
    issues: IssueCounts = Field(default_factory=IssueCounts)
    issues_created: int = 0
    pull_requests: PullRequestCounts = Field(default_factory=PullRequestCounts)
    pull_requests_created: int = 0
    pull_requests_merged: int = 0
    commits_this_year: int = 0
    contributors_total: int = 0
    top_contributors: list[Contributor] = Field(default_factory=list)


class ProjectActivity(_Model):
    monthly_commits: dict[str, int] = Field(default_factory=dict)
    weekly_commits: list[WeeklyCommits] = Field(default_factory=list)
    peak_month: str | None = None
    peak_month_count: int = 0


class ProjectStatistics(_Model):
    type: Literal["repository"] = "repository"
    year: int
    repository: RepositoryInfo
    stats: ProjectStats
    languages: list[ProjectLanguage] = Field(default_factory=list)
    releases: ReleaseStats
    activity: ProjectActivity
    personality: Personality
