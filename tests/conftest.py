"""Shared fixtures: a fake GitHub API and an in-memory metrics database."""

import re
from typing import Dict, List, Optional, Tuple, Union

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from metrics_sync.fetcher import GitHubClient
from metrics_sync.store import MetricsStore

API_URL = "https://api.github.test"

ContributorSpec = Union[List[Dict], int]


class FakeGitHub:
    """
    Serve /user, /user/repos and /repos/{owner}/{repo}/contributors.

    ``contributors`` maps repo name to a contributor list, or to an HTTP
    status code the endpoint should fail with.
    """

    def __init__(
        self,
        username: str = "me",
        repos: Optional[List[Tuple[str, str]]] = None,
        contributors: Optional[Dict[str, ContributorSpec]] = None,
        user_status: int = 200,
        repos_status: int = 200,
    ):
        self.username = username
        self.repos = repos or []
        self.contributors = contributors or {}
        self.user_status = user_status
        self.repos_status = repos_status
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/user":
            if self.user_status != 200:
                return httpx.Response(self.user_status, json={"message": "nope"})
            return httpx.Response(200, json={"login": self.username})

        if path == "/user/repos":
            if self.repos_status != 200:
                return httpx.Response(self.repos_status, json={"message": "nope"})
            per_page = int(request.url.params["per_page"])
            page = int(request.url.params["page"])
            chunk = self.repos[(page - 1) * per_page : page * per_page]
            return httpx.Response(
                200,
                json=[{"name": name, "owner": {"login": owner}} for owner, name in chunk],
            )

        match = re.fullmatch(r"/repos/([^/]+)/([^/]+)/contributors", path)
        if match:
            spec = self.contributors.get(match.group(2), [])
            if isinstance(spec, int):
                return httpx.Response(spec, json={"message": "error"})
            if not spec:
                return httpx.Response(204)
            return httpx.Response(200, json=spec)

        return httpx.Response(404, json={"message": "Not Found"})

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def contributor_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/contributors")]

    def client(self) -> GitHubClient:
        return GitHubClient(
            token="test-token",
            base_url=API_URL,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    """Metrics store with the table created and seeded."""
    store = MetricsStore(engine=engine)
    store.init_schema()
    return store


@pytest.fixture
def empty_store(engine):
    """Metrics store with the table created but no row."""
    from metrics_sync.store import metadata

    metadata.create_all(engine)
    return MetricsStore(engine=engine)


@pytest.fixture
def fake_github():
    """Factory for FakeGitHub instances."""
    return FakeGitHub
