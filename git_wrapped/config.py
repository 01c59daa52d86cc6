import os
from dataclasses import dataclass
from datetime import date

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_REST_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment (and ``.env`` via python-dotenv)."""

    github_token: str | None = None
    graphql_url: str = DEFAULT_GRAPHQL_URL
    rest_url: str = DEFAULT_REST_URL
    timeout: float = DEFAULT_TIMEOUT
    year: int = 0

    @classmethod
    def from_env(cls) -> "Settings":
        year = os.getenv("WRAPPED_YEAR")
        return cls(
            github_token=os.getenv("GITHUB_TOKEN") or None,
            graphql_url=os.getenv("GITHUB_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
            rest_url=os.getenv("GITHUB_REST_URL", DEFAULT_REST_URL).rstrip("/"),
            timeout=float(os.getenv("GITHUB_TIMEOUT", DEFAULT_TIMEOUT)),
            year=int(year) if year else date.today().year,
        )

    def require_token(self) -> str:
        if not self.github_token:
            raise RuntimeError("GITHUB_TOKEN not set")
        return self.github_token
