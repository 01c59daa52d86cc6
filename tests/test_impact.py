from git_wrapped.analyzers.impact import merge_contributions, rank_contributions, summarize_impact, summarize_oss
from git_wrapped.models import ContributionRepository, Repository, RepositoryContribution


def _contrib(repo_id: str, count: int, stars: int = 0) -> RepositoryContribution:
    return RepositoryContribution(
        repository=ContributionRepository(name_with_owner=repo_id, stargazer_count=stars),
        count=count,
    )


COMMITS = [
    _contrib("octocat/hello", 30),
    _contrib("rust-lang/rust", 5, stars=90000),
    _contrib("someone/tool", 10, stars=50),
]
PULL_REQUESTS = [
    _contrib("rust-lang/rust", 8, stars=90000),
    _contrib("ghost/pr-only", 50, stars=5000),
]
ISSUES = [_contrib("someone/tool", 3)]

REPOSITORIES = [
    Repository(name_with_owner="octocat/hello", stargazer_count=120, fork_count=4),
    Repository(name_with_owner="octocat/fork", stargazer_count=300, fork_count=1, is_fork=True),
    Repository(name_with_owner="octocat/old", stargazer_count=5, fork_count=9, is_archived=True),
]


def test_merges_counts_by_repository():
    merged = merge_contributions("octocat", COMMITS, PULL_REQUESTS, ISSUES)
    rust = merged["rust-lang/rust"]
    assert (rust.commit_count, rust.pr_count, rust.issue_count) == (5, 8, 0)
    assert rust.total == 13
    assert merged["someone/tool"].total == 13


def test_pr_only_repository_is_dropped():
    merged = merge_contributions("octocat", COMMITS, PULL_REQUESTS, ISSUES)
    assert "ghost/pr-only" not in merged
    ranked = rank_contributions(merged)
    assert all(record.repo_id != "ghost/pr-only" for record in ranked)


def test_ownership_comes_from_commit_owner_case_insensitively():
    merged = merge_contributions("OctoCat", COMMITS)
    assert merged["octocat/hello"].is_owned_by_subject
    assert not merged["rust-lang/rust"].is_owned_by_subject


def test_rank_is_stable_for_equal_totals():
    merged = merge_contributions("octocat", COMMITS, PULL_REQUESTS, ISSUES)
    ranked = rank_contributions(merged)
    assert [r.repo_id for r in ranked] == ["octocat/hello", "rust-lang/rust", "someone/tool"]


def test_oss_split_counts_external_repositories():
    merged = merge_contributions("octocat", COMMITS, PULL_REQUESTS, ISSUES)
    oss = summarize_oss(merged, PULL_REQUESTS)
    assert oss.repo_count == 2
    assert oss.total_contributions == 26
    assert oss.prs_to_popular_repos == 8


def test_summarize_impact():
    impact = summarize_impact("octocat", REPOSITORIES, COMMITS, PULL_REQUESTS, ISSUES, repository_count=42)
    assert impact.total_stars == 425
    assert impact.total_forks == 14
    assert impact.repository_count == 42
    assert impact.most_starred_repo.name_with_owner == "octocat/fork"
    assert impact.most_forked_repo.name_with_owner == "octocat/old"
    assert [r.name_with_owner for r in impact.top_repositories] == ["octocat/hello"]
    assert impact.top_repositories[0].commits == 30
    assert impact.most_contributed_repo.repo_id == "octocat/hello"
    assert impact.stars_per_repo == "141.7"


def test_empty_impact_has_zero_defaults():
    impact = summarize_impact("octocat", [], [], [], [])
    assert impact.total_stars == 0
    assert impact.stars_per_repo == "0"
    assert impact.most_starred_repo is None
    assert impact.most_contributed_repo is None
    assert impact.top_repositories == []
    assert impact.oss_contributions.repo_count == 0


def test_zero_count_contributions_have_no_most_contributed():
    impact = summarize_impact("octocat", [], [_contrib("octocat/a", 0)], [], [])
    assert impact.most_contributed_repo is None
