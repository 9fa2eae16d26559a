"""
Pytest fixtures and API payload builders for testing the bots.

The ``make_*`` helpers build JSON payloads shaped like the source-control
API's responses; the fixtures wire a GitHubClient to a MockGitHubAPI.
"""

import base64
from collections.abc import Generator
from typing import Any

import pytest

from repobots.client import GitHubClient
from repobots.config import BotConfig, TargetRepo
from repobots.testing.mock import MockGitHubAPI

API_URL = "https://api.github.com"


def make_repo(owner: str, name: str, repo_id: int = 1, default_branch: str = "master") -> dict[str, Any]:
    """Repository payload."""
    return {
        "id": repo_id,
        "name": name,
        "owner": {"login": owner},
        "default_branch": default_branch,
    }


def make_issue(
    number: int,
    login: str = "greenkeeperio-bot",
    updated_at: str = "2020-01-01T00:00:00Z",
    owner: str = "octo",
    repo: str = "app",
    pull_request: bool = True,
) -> dict[str, Any]:
    """Issue listing entry; a pull request unless ``pull_request`` is False."""
    data: dict[str, Any] = {
        "number": number,
        "title": f"Issue {number}",
        "user": {"login": login},
        "updated_at": updated_at,
        "html_url": f"https://github.com/{owner}/{repo}/issues/{number}",
    }
    if pull_request:
        data["pull_request"] = {"url": f"{API_URL}/repos/{owner}/{repo}/pulls/{number}"}
    return data


def make_pull_request(
    number: int,
    owner: str = "octo",
    repo: str = "app",
    mergeable: bool | None = True,
    head_ref: str = "update-dep",
    head_sha: str = "abc123",
    fork: bool = False,
    login: str = "greenkeeperio-bot",
) -> dict[str, Any]:
    """Full pull request payload."""
    base_repo = make_repo(owner, repo, repo_id=1)
    head_repo = make_repo(login, repo, repo_id=2) if fork else base_repo
    return {
        "number": number,
        "title": f"Update dependency #{number}",
        "user": {"login": login},
        "mergeable": mergeable,
        "head": {"ref": head_ref, "sha": head_sha, "repo": head_repo},
        "base": {"ref": "master", "sha": "base000", "repo": base_repo},
        "commits_url": f"{API_URL}/repos/{owner}/{repo}/pulls/{number}/commits",
        "statuses_url": f"{API_URL}/repos/{owner}/{repo}/statuses/{head_sha}",
        "html_url": f"https://github.com/{owner}/{repo}/pull/{number}",
        "updated_at": "2020-01-01T00:00:00Z",
    }


def make_status(context: str, state: str, created_at: str) -> dict[str, Any]:
    """Commit status entry."""
    return {"context": context, "state": state, "created_at": created_at}


def make_commit(message: str, sha: str = "c0ffee") -> dict[str, Any]:
    """Pull request commit entry."""
    return {"sha": sha, "commit": {"message": message}}


def make_content(text: str, path: str = "package.json", type: str = "file") -> dict[str, Any]:
    """Contents API payload with base64 content."""
    return {
        "type": type,
        "path": path,
        "encoding": "base64",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


def make_release(version: str, lts: str | bool = False) -> dict[str, Any]:
    """Release index entry."""
    return {"version": version, "lts": lts}


def make_tags(*names: str) -> list[dict[str, Any]]:
    """CI image tag list."""
    return [{"name": name} for name in names]


@pytest.fixture
def mock_api() -> Generator[MockGitHubAPI, None, None]:
    """
    Provide a MockGitHubAPI for testing.

    Example:
        ```python
        async def test_my_feature(mock_api, github_client):
            mock_api.add("GET", "/repos/octo/app", make_repo("octo", "app"))
            repo = await github_client.repos.get("octo", "app")
            assert mock_api.was_called("GET", "/repos/octo/app")
        ```
    """
    api = MockGitHubAPI()
    yield api
    api.reset()


@pytest.fixture
def github_client(mock_api: MockGitHubAPI) -> GitHubClient:
    """Provide a GitHubClient wired to the mock API."""
    return GitHubClient(token="test-token", base_url=API_URL, transport=mock_api.transport)


@pytest.fixture
def target_repo() -> TargetRepo:
    """Provide a single update target."""
    return TargetRepo(owner="octo", repo="app")


@pytest.fixture
def bot_config(target_repo: TargetRepo) -> BotConfig:
    """Provide a configuration pointing at the mock API."""
    return BotConfig(token="test-token", api_url=API_URL, target_repos=(target_repo,))
