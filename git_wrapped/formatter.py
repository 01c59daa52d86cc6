from datetime import date

from git_wrapped.models import DeveloperStatistics, Personality, ProjectStatistics
from git_wrapped.utils.patterns import WEEKDAY_NAMES


def _personality_section(personality: Personality) -> list[str]:
    sections = [
        f"## {personality.emoji} {personality.title}\n",
        f"*{personality.tagline}*\n",
        personality.description + "\n",
    ]
    if personality.traits:
        sections.append("**Traits:**\n")
        for trait in personality.traits:
            sections.append(f"- {trait.icon} **{trait.name}**: {trait.description}")
        sections.append("")
    if personality.badges:
        sections.append("**Badges:** " + " · ".join(personality.badges) + "\n")
    return sections


def format_developer_report(stats: DeveloperStatistics) -> str:
    """Format a developer's wrapped statistics into a Markdown report string."""
    subject = stats.subject
    c = stats.contributions
    a = stats.activity
    title = subject.name or subject.login

    sections = [f"# {title}'s {stats.year} Wrapped\n\n*@{subject.login} · generated {date.today()}*\n"]

    sections.append("## Contributions\n")
    sections.append(f"- **Total**: {c.total:,}")
    sections.append(f"- **Commits**: {c.commits:,} · **PRs**: {c.pull_requests:,} · **Issues**: {c.issues:,} · **Reviews**: {c.reviews:,}")
    sections.append(f"- **Repositories contributed to**: {c.repos_contributed_to}")
    sections.append("")

    sections.append("## Activity\n")
    streak_dates = ""
    if a.longest_streak_start and a.longest_streak_end:
        streak_dates = f" ({a.longest_streak_start} → {a.longest_streak_end})"
    sections.append(f"- **Longest streak**: {a.longest_streak} days{streak_dates}")
    current_note = ""
    if a.current_streak == 0 and a.last_contribution:
        current_note = f" (last contribution {a.last_contribution})"
    sections.append(f"- **Current streak**: {a.current_streak} days{current_note}")
    sections.append(f"- **Active days**: {a.total_active_days} of {a.total_days}")
    sections.append(f"- **Busiest day**: {a.busiest_day or 'N/A'}")
    sections.append(f"- **Peak month**: {a.peak_month or 'N/A'}")
    if a.busiest_hour is not None:
        sections.append(f"- **Typical peak hour (estimated)**: {a.busiest_hour:02d}:00")
    sections.append(f"- **Average per active day**: {a.average_per_day} · **per week**: {a.average_per_week}")
    sections.append("")

    if a.weekday_distribution:
        sections.append("| Day | Contributions |")
        sections.append("|---|---|")
        for weekday in range(7):
            sections.append(f"| {WEEKDAY_NAMES[weekday]} | {a.weekday_distribution.get(weekday, 0)} |")
        sections.append("")

    if stats.languages.all:
        sections.append("## Languages\n")
        sections.append("| Language | Share | Repos |")
        sections.append("|---|---|---|")
        for lang in stats.languages.all:
            sections.append(f"| {lang.name} | {lang.percentage}% | {lang.repo_count} |")
        sections.append("")

    impact = stats.impact
    sections.append("## Impact\n")
    sections.append(f"- **Stars**: {impact.total_stars:,} · **Forks**: {impact.total_forks:,}")
    if impact.most_starred_repo:
        sections.append(f"- **Most starred**: {impact.most_starred_repo.name_with_owner} ({impact.most_starred_repo.stars:,} ★)")
    if impact.most_contributed_repo:
        sections.append(f"- **Most contributed**: {impact.most_contributed_repo.repo_id} ({impact.most_contributed_repo.total} contributions)")
    oss = impact.oss_contributions
    if oss.repo_count:
        sections.append(f"- **Open source**: {oss.total_contributions} contributions across {oss.repo_count} external repos")
    sections.append("")

    sections.extend(_personality_section(stats.personality))
    return "\n".join(sections)


def format_project_report(stats: ProjectStatistics) -> str:
    """Format a repository's wrapped statistics into a Markdown report string."""
    repo = stats.repository
    s = stats.stats

    sections = [f"# {repo.name_with_owner} · {stats.year} Wrapped\n\n*Generated {date.today()}*\n"]
    if repo.description:
        sections.append(repo.description + "\n")

    sections.append("## Stats\n")
    sections.append(f"- **Stars**: {s.stars.total:,} (+{s.stars.gained:,} this year)")
    sections.append(f"- **Forks**: {s.forks.total:,} (+{s.forks.gained:,} this year)")
    sections.append(f"- **Commits this year**: {s.commits_this_year:,}")
    sections.append(f"- **Pull requests**: {s.pull_requests_created} opened, {s.pull_requests_merged} merged")
    sections.append(f"- **Issues opened**: {s.issues_created}")
    sections.append(f"- **Contributors**: {s.contributors_total}")
    sections.append("")

    if stats.releases.releases:
        sections.append("## Releases\n")
        sections.append("| Release | Downloads |")
        sections.append("|---|---|")
        for release in stats.releases.releases:
            sections.append(f"| {release.name} | {release.downloads:,} |")
        sections.append("")

    if stats.languages:
        langs = ", ".join(f"{lang.name} {lang.percentage}%" for lang in stats.languages)
        sections.append(f"**Languages:** {langs}\n")

    sections.extend(_personality_section(stats.personality))
    return "\n".join(sections)


def format_report(stats: DeveloperStatistics | ProjectStatistics) -> str:
    if isinstance(stats, ProjectStatistics):
        return format_project_report(stats)
    return format_developer_report(stats)
