"""GitHub REST API access for the metrics sync job."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from shared.logger import get_logger

from .config import DEFAULT_API_URL
from .errors import GitHubAPIError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Repository:
    """A repository owned by the authenticated user."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class Contributor:
    """A contributor entry for one repository."""

    login: str
    contributions: int


class GitHubClient:
    """
    Minimal client for the three endpoints the sync job needs.

    Uses GitHub API v3 (REST). Every failure is raised as ``GitHubAPIError``;
    callers decide which failures are fatal.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: GitHub personal access token
            base_url: API root URL
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "github-metrics-sync",
            "Authorization": f"Bearer {token}",
        }
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_authenticated_user(self) -> str:
        """
        Get the login of the token's owner.

        Returns:
            GitHub login
        """
        data = self._get("/user")
        login = data.get("login") if isinstance(data, dict) else None
        if not login:
            raise GitHubAPIError("GET /user returned no login")
        return login

    def list_owned_repositories(self, per_page: int, page: int) -> List[Repository]:
        """
        List one page of repositories owned by the authenticated user.

        Args:
            per_page: Page size (GitHub caps this at 100)
            page: 1-based page index

        Returns:
            Repositories on that page
        """
        params = {"per_page": per_page, "page": page, "affiliation": "owner"}
        data = self._get("/user/repos", params=params)

        return [
            Repository(owner=item["owner"]["login"], name=item["name"])
            for item in data or []
        ]

    def list_contributors(self, owner: str, name: str) -> List[Contributor]:
        """
        List contributors of a repository.

        Args:
            owner: Repository owner login
            name: Repository name

        Returns:
            Contributors with their contribution counts (empty for empty repos)
        """
        data = self._get(f"/repos/{owner}/{name}/contributors")

        contributors = []
        for contrib in data or []:
            # Anonymous contributors carry no login
            if not contrib.get("login"):
                continue
            contributors.append(
                Contributor(
                    login=contrib["login"],
                    contributions=int(contrib.get("contributions", 0)),
                )
            )
        return contributors

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug(f"GET {path} {params or ''}")

        try:
            response = self._client.get(path, params=params)
        except httpx.RequestError as e:
            raise GitHubAPIError(f"Network error on GET {path}: {e}") from e

        # 204: repository has no commits yet
        if response.status_code == 204:
            return None

        if response.status_code == 401:
            raise GitHubAPIError("Bad credentials", status_code=401)
        elif response.status_code == 403:
            raise GitHubAPIError(
                f"Rate limit exceeded or access forbidden: GET {path}", status_code=403
            )
        elif response.status_code == 404:
            raise GitHubAPIError(f"Not found: GET {path}", status_code=404)
        elif response.status_code != 200:
            raise GitHubAPIError(
                f"API error {response.status_code} on GET {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from GET {path}") from e
