"""Score a developer's year against fixed archetypes and pick a personality.

Each rule is a pure function of the metrics returning score deltas and an
optional trait. The scoreboard is the sum of all deltas; the archetype is its
first maximum in ARCHETYPES order, unless that maximum is below SCORE_FLOOR.
"""
import logging
from dataclasses import asdict, dataclass, field
from functools import reduce
from typing import Callable, Mapping, Sequence

from git_wrapped.models import Personality, Trait
from git_wrapped.utils.patterns import find_peak

_log = logging.getLogger(__name__)

DEFAULT_ARCHETYPE = "craftsman"
SCORE_FLOOR = 40
MAX_TRAITS = 4
MAX_BADGES = 6

# Scoreboard order; also the tie-break order.
ARCHETYPES = (
    "streak-demon",
    "code-ninja",
    "open-source-warrior",
    "polyglot-wizard",
    "laser-focused",
    "review-sensei",
    "issue-hunter",
    "prolific-machine",
    "rising-star",
    "repo-hopper",
    "silent-guardian",
    "legendary-shipper",
)


class ArchetypeTableError(RuntimeError):
    """Scoreboard archetypes and descriptive copy are out of sync."""


@dataclass(frozen=True)
class PersonalityMetrics:
    streak: int = 0
    commits: int = 0
    prs: int = 0
    reviews: int = 0
    issues: int = 0
    is_polyglot: bool = False
    is_specialist: bool = False
    top_language: str | None = None
    stars: int = 0
    repos_contributed: int = 0
    active_days: int = 0
    oss_repo_count: int = 0
    prs_to_popular_repos: int = 0


@dataclass(frozen=True)
class RuleOutcome:
    deltas: Mapping[str, int] = field(default_factory=dict)
    trait: Trait | None = None


@dataclass(frozen=True)
class ArchetypeCopy:
    title: str
    emoji: str
    tagline: str
    description: str


Rule = Callable[[PersonalityMetrics], RuleOutcome]

NO_MATCH = RuleOutcome()


# ── Scoring rules ────────────────────────────────────────────────────────────

def streak_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.streak >= 100:
        return RuleOutcome({"streak-demon": 100}, Trait(name="Unstoppable", description=f"{m.streak} day streak", score=98, icon="🔥"))
    if m.streak >= 50:
        return RuleOutcome({"streak-demon": 70}, Trait(name="Streak Demon", description=f"{m.streak} day streak", score=90, icon="🔥"))
    if m.streak >= 30:
        return RuleOutcome({"streak-demon": 40}, Trait(name="Consistent", description=f"{m.streak} day streak", score=80, icon="📅"))
    return NO_MATCH


def polyglot_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.is_polyglot:
        return RuleOutcome({"polyglot-wizard": 80}, Trait(name="Language Wizard", description="4+ languages", score=88, icon="🧙"))
    return NO_MATCH


def specialist_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.is_specialist:
        return RuleOutcome({"laser-focused": 85}, Trait(name="Laser Focused", description=f"{m.top_language} master", score=85, icon="🎯"))
    return NO_MATCH


def commits_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.commits >= 2000:
        return RuleOutcome({"legendary-shipper": 100}, Trait(name="Legendary Shipper", description=f"{m.commits:,} commits", score=99, icon="🚀"))
    if m.commits >= 1000:
        return RuleOutcome({"prolific-machine": 80}, Trait(name="Prolific Machine", description=f"{m.commits:,} commits", score=92, icon="⚡"))
    if m.commits >= 500:
        return RuleOutcome({"code-ninja": 60}, Trait(name="Code Ninja", description=f"{m.commits} commits", score=85, icon="🥷"))
    return NO_MATCH


def reviews_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.reviews >= 200:
        return RuleOutcome({"review-sensei": 90}, Trait(name="Review Sensei", description=f"{m.reviews} reviews", score=95, icon="👁️"))
    if m.reviews >= 50:
        return RuleOutcome({"silent-guardian": 60}, Trait(name="Code Guardian", description=f"{m.reviews} reviews", score=82, icon="🛡️"))
    return NO_MATCH


def issues_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.issues >= 100:
        return RuleOutcome({"issue-hunter": 70}, Trait(name="Issue Hunter", description=f"{m.issues} issues", score=80, icon="🎯"))
    return NO_MATCH


def stars_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.stars >= 10000:
        return RuleOutcome({"rising-star": 100}, Trait(name="Superstar", description=f"{m.stars / 1000:.1f}k stars", score=99, icon="🌟"))
    if m.stars >= 1000:
        return RuleOutcome({"rising-star": 70}, Trait(name="Rising Star", description=f"{m.stars:,} stars", score=88, icon="⭐"))
    if m.stars >= 100:
        return RuleOutcome({}, Trait(name="Star Collector", description=f"{m.stars} stars", score=70, icon="✨"))
    return NO_MATCH


def repos_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.repos_contributed >= 30:
        return RuleOutcome({"repo-hopper": 70}, Trait(name="Repo Hopper", description=f"{m.repos_contributed} repos", score=78, icon="🦘"))
    return NO_MATCH


def pull_requests_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.prs >= 100:
        return RuleOutcome({"open-source-warrior": 70}, Trait(name="PR Machine", description=f"{m.prs} PRs", score=85, icon="🔄"))
    return NO_MATCH


def oss_rule(m: PersonalityMetrics) -> RuleOutcome:
    if m.oss_repo_count >= 10 or m.prs_to_popular_repos >= 5:
        return RuleOutcome(
            {"open-source-warrior": 50},
            Trait(name="Community Builder", description=f"{m.oss_repo_count} external repos", score=84, icon="🤝"),
        )
    return NO_MATCH


RULES: tuple[Rule, ...] = (
    streak_rule,
    polyglot_rule,
    specialist_rule,
    commits_rule,
    reviews_rule,
    issues_rule,
    stars_rule,
    repos_rule,
    pull_requests_rule,
    oss_rule,
)


# ── Badges ───────────────────────────────────────────────────────────────────

def _streak_badge(m: PersonalityMetrics) -> str | None:
    if m.streak >= 100:
        return "👹 Streak Demon"
    if m.streak >= 50:
        return "🔥 Streak Master"
    if m.streak >= 30:
        return "⚡ Month Warrior"
    if m.streak >= 7:
        return "📅 Week Starter"
    return None


def _commits_badge(m: PersonalityMetrics) -> str | None:
    if m.commits >= 2000:
        return "🚀 Legendary Shipper"
    if m.commits >= 1000:
        return "💎 Diamond Committer"
    if m.commits >= 500:
        return "🏅 Commit Champion"
    if m.commits >= 100:
        return "💪 Centurion"
    return None


def _stars_badge(m: PersonalityMetrics) -> str | None:
    if m.stars >= 10000:
        return "🌟 Superstar"
    if m.stars >= 1000:
        return "⭐ Star Collector"
    if m.stars >= 100:
        return "✨ Rising Star"
    return None


def _reviews_badge(m: PersonalityMetrics) -> str | None:
    if m.reviews >= 100:
        return "🧘 Review Sensei"
    if m.reviews >= 50:
        return "👁️ Eagle Eye"
    return None


def _prs_badge(m: PersonalityMetrics) -> str | None:
    return "🎯 PR Master" if m.prs >= 100 else None


def _active_days_badge(m: PersonalityMetrics) -> str | None:
    return "📆 All-Year Coder" if m.active_days >= 300 else None


def _repos_badge(m: PersonalityMetrics) -> str | None:
    return "🦘 Repo Explorer" if m.repos_contributed >= 30 else None


def _oss_badge(m: PersonalityMetrics) -> str | None:
    return "🤝 Open Source Ally" if m.oss_repo_count >= 5 else None


BADGE_RULES: tuple[Callable[[PersonalityMetrics], str | None], ...] = (
    _streak_badge,
    _commits_badge,
    _stars_badge,
    _reviews_badge,
    _prs_badge,
    _active_days_badge,
    _repos_badge,
    _oss_badge,
)


def generate_badges(metrics: PersonalityMetrics) -> list[str]:
    badges = [badge for rule in BADGE_RULES if (badge := rule(metrics))]
    return badges[:MAX_BADGES]


# ── Copy ─────────────────────────────────────────────────────────────────────

ARCHETYPE_COPY: dict[str, ArchetypeCopy] = {
    "streak-demon": ArchetypeCopy("The Streak Demon", "👹", "Consistency is your middle name", "{streak} days of unbroken contributions."),
    "polyglot-wizard": ArchetypeCopy("The Polyglot Wizard", "🧙‍♂️", "Master of the coding multiverse", "You speak fluent code in multiple languages."),
    "laser-focused": ArchetypeCopy("The Laser Focused", "🎯", "{top_language} runs through your veins", "{top_language} is your weapon of choice."),
    "prolific-machine": ArchetypeCopy("The Prolific Machine", "🤖", "Output levels: Legendary", "{commits:,} commits. You're a force of nature."),
    "legendary-shipper": ArchetypeCopy("The Legendary Shipper", "🚀", "Ship it. Ship it again. Never stop.", "{commits:,} commits this year alone."),
    "code-ninja": ArchetypeCopy("The Code Ninja", "🥷", "Silent but deadly productive", "Swift, precise, and effective."),
    "review-sensei": ArchetypeCopy("The Review Sensei", "🧘", "Guardian of code quality", "{reviews} code reviews. You elevate everyone's code."),
    "open-source-warrior": ArchetypeCopy("The Open Source Warrior", "⚔️", "Fighting for the community", "Your PRs make a difference."),
    "issue-hunter": ArchetypeCopy("The Issue Hunter", "🏹", "No bug escapes your sight", "{issues} issues filed."),
    "rising-star": ArchetypeCopy("The Rising Star", "🌟", "The world is watching", "{stars:,} stars. Your code inspires."),
    "repo-hopper": ArchetypeCopy("The Repo Hopper", "🦘", "Everywhere at once", "{repos_contributed} repositories touched."),
    "silent-guardian": ArchetypeCopy("The Silent Guardian", "🦇", "The hero code deserves", "Watching over the codebase."),
    DEFAULT_ARCHETYPE: ArchetypeCopy("The Craftsman", "🔨", "Every line, a work of art", "Building software with intention and care."),
}

def _craftsman_trait() -> Trait:
    return Trait(name="Craftsman", description="Building with care", score=70, icon="🔨")


def check_archetype_table(archetypes: Sequence[str], copy: Mapping[str, ArchetypeCopy]) -> None:
    """Every scored archetype and the default must have copy, and nothing else."""
    expected = set(archetypes) | {DEFAULT_ARCHETYPE}
    missing = expected - set(copy)
    extra = set(copy) - expected
    if missing or extra:
        raise ArchetypeTableError(f"Archetype copy mismatch: missing={sorted(missing)} extra={sorted(extra)}")


check_archetype_table(ARCHETYPES, ARCHETYPE_COPY)


# ── Classification ───────────────────────────────────────────────────────────

def _add_deltas(scoreboard: Mapping[str, int], deltas: Mapping[str, int]) -> dict[str, int]:
    unknown = set(deltas) - set(scoreboard)
    if unknown:
        raise ArchetypeTableError(f"Rule scored unknown archetype(s): {sorted(unknown)}")
    return {name: score + deltas.get(name, 0) for name, score in scoreboard.items()}


def score_archetypes(
    metrics: PersonalityMetrics,
    rules: Sequence[Rule] = RULES,
    archetypes: Sequence[str] = ARCHETYPES,
) -> tuple[dict[str, int], list[Trait]]:
    """Run every rule and fold the deltas into a fresh scoreboard."""
    outcomes = [rule(metrics) for rule in rules]
    zero = {name: 0 for name in archetypes}
    scoreboard = reduce(_add_deltas, (outcome.deltas for outcome in outcomes), zero)
    traits = [outcome.trait for outcome in outcomes if outcome.trait is not None]
    return scoreboard, traits


def select_archetype(scoreboard: Mapping[str, int], archetypes: Sequence[str] = ARCHETYPES) -> str:
    peak = find_peak(scoreboard, order=archetypes)
    if peak is None or peak[1] < SCORE_FLOOR:
        return DEFAULT_ARCHETYPE
    return peak[0]


def _render(copy: ArchetypeCopy, metrics: PersonalityMetrics) -> dict[str, str]:
    context = asdict(metrics)
    context["top_language"] = metrics.top_language or "Your language"
    return {
        "title": copy.title,
        "emoji": copy.emoji,
        "tagline": copy.tagline.format(**context),
        "description": copy.description.format(**context),
    }


def classify_personality(
    metrics: PersonalityMetrics,
    rules: Sequence[Rule] = RULES,
    archetypes: Sequence[str] = ARCHETYPES,
    copy: Mapping[str, ArchetypeCopy] = ARCHETYPE_COPY,
) -> Personality:
    check_archetype_table(archetypes, copy)
    scoreboard, traits = score_archetypes(metrics, rules, archetypes)
    archetype = select_archetype(scoreboard, archetypes)
    if archetype == DEFAULT_ARCHETYPE and not traits:
        traits = [_craftsman_trait()]

    details = copy.get(archetype, copy[DEFAULT_ARCHETYPE])
    _log.debug("Personality scoreboard %s -> %s", scoreboard, archetype)
    return Personality(
        archetype=archetype,
        **_render(details, metrics),
        traits=traits[:MAX_TRAITS],
        badges=generate_badges(metrics),
    )
