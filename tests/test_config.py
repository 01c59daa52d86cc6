from datetime import date

import pytest

from git_wrapped.config import DEFAULT_GRAPHQL_URL, Settings

ENV_VARS = ("GITHUB_TOKEN", "GITHUB_GRAPHQL_URL", "GITHUB_REST_URL", "GITHUB_TIMEOUT", "WRAPPED_YEAR")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.github_token is None
    assert settings.graphql_url == DEFAULT_GRAPHQL_URL
    assert settings.timeout == 30.0
    assert settings.year == date.today().year


def test_reads_environment(clean_env):
    clean_env.setenv("GITHUB_TOKEN", "ghp_abc")
    clean_env.setenv("GITHUB_GRAPHQL_URL", "https://ghe.example/api/graphql")
    clean_env.setenv("GITHUB_REST_URL", "https://ghe.example/api/v3/")
    clean_env.setenv("GITHUB_TIMEOUT", "5")
    clean_env.setenv("WRAPPED_YEAR", "2023")
    settings = Settings.from_env()
    assert settings.require_token() == "ghp_abc"
    assert settings.graphql_url == "https://ghe.example/api/graphql"
    assert settings.rest_url == "https://ghe.example/api/v3"
    assert settings.timeout == 5.0
    assert settings.year == 2023


def test_require_token_without_token(clean_env):
    with pytest.raises(RuntimeError, match="GITHUB_TOKEN"):
        Settings.from_env().require_token()
