"""Merge per-repository language sizes into a ranked language breakdown."""
import logging
from collections.abc import Iterable

from git_wrapped.models import LanguageEdge, LanguageStat, LanguageSummary, Repository, RepositoryContribution
from git_wrapped.utils.patterns import percentage

_log = logging.getLogger(__name__)

TOP_LANGUAGES = 8
POLYGLOT_SHARE = 10.0
POLYGLOT_MIN_LANGUAGES = 4
SPECIALIST_SHARE = 70.0

DEFAULT_COLOR = "#6366f1"
LANGUAGE_COLORS = {
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Python": "#3572a5",
    "Java": "#b07219",
    "Go": "#00add8",
    "Rust": "#dea584",
    "Ruby": "#701516",
    "PHP": "#4f5d95",
    "C#": "#178600",
    "C++": "#f34b7d",
    "C": "#555555",
    "Swift": "#f05138",
    "Kotlin": "#a97bff",
    "Dart": "#00b4ab",
    "Vue": "#41b883",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "Shell": "#89e051",
    "Scala": "#c22d40",
    "Elixir": "#6e4a7e",
    "Haskell": "#5e5086",
    "Lua": "#000080",
    "R": "#198ce7",
    "Julia": "#a270ba",
    "Clojure": "#db5855",
    "Erlang": "#b83998",
    "OCaml": "#3be133",
    "Zig": "#ec915c",
    "Nim": "#ffc200",
}


def color_for(name: str, color: str | None = None) -> str:
    return color or LANGUAGE_COLORS.get(name, DEFAULT_COLOR)


def _merge_edges(repositories: Iterable[list[LanguageEdge]]) -> dict[str, dict]:
    merged: dict[str, dict] = {}
    for edges in repositories:
        counted: set[str] = set()
        for edge in edges:
            entry = merged.setdefault(edge.name, {"color": None, "size": 0, "repos": 0})
            entry["size"] += edge.size
            entry["color"] = entry["color"] or edge.color
            if edge.name not in counted:
                entry["repos"] += 1
                counted.add(edge.name)
    return merged


def _commits_by_language(contributions: Iterable[RepositoryContribution]) -> dict[str, int]:
    commits: dict[str, int] = {}
    for item in contributions:
        if item.repository.is_private:
            continue
        language = item.repository.primary_language
        if language:
            commits[language.name] = commits.get(language.name, 0) + item.count
    return commits


def aggregate_languages(
    repositories: list[Repository],
    commit_contributions: Iterable[RepositoryContribution] = (),
) -> LanguageSummary:
    """Rank languages by accumulated byte size across ``repositories``.

    Percentages are shares of the size of every language seen, before the
    list is cut to the top TOP_LANGUAGES entries. ``commit_contributions``
    only annotates each language with commits made to repositories whose
    primary language it is; it does not affect the ranking.
    """
    merged = _merge_edges(repo.languages for repo in repositories)
    commits = _commits_by_language(commit_contributions)
    total_size = sum(entry["size"] for entry in merged.values())

    ranked = sorted(merged.items(), key=lambda item: item[1]["size"], reverse=True)[:TOP_LANGUAGES]
    languages = [
        LanguageStat(
            name=name,
            color_hint=color_for(name, entry["color"]),
            byte_size=entry["size"],
            percentage=percentage(entry["size"], total_size),
            repo_count=entry["repos"],
            commit_count=commits.get(name, 0),
        )
        for name, entry in ranked
    ]

    top = languages[0] if languages else None
    top_share = float(top.percentage) if top else 0.0
    summary = LanguageSummary(
        all=languages,
        top=top,
        count=len(languages),
        total_size=total_size,
        is_polyglot=is_polyglot(languages),
        is_specialist=top_share > SPECIALIST_SHARE,
        top_language_percentage=top_share,
    )
    _log.debug("Languages: %d ranked of %d seen, total size %d", len(languages), len(merged), total_size)
    return summary


def is_polyglot(languages: list[LanguageStat]) -> bool:
    return sum(1 for lang in languages if float(lang.percentage) > POLYGLOT_SHARE) >= POLYGLOT_MIN_LANGUAGES
