"""Async repositories resource client."""

import base64
from typing import TYPE_CHECKING, Any

from repobots.exceptions import AssertionViolation, NotFoundError
from repobots.types.repos import Branch, FileContent, Repository

if TYPE_CHECKING:
    from repobots.transport import AsyncHTTPTransport


class ReposClient:
    """Async client for repository, branch and content reads."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get(self, owner: str, repo: str) -> Repository:
        """Get repository information, including its default branch."""
        data = await self.transport.get(
            "/repos/:owner/:repo", {"owner": owner, "repo": repo}
        )
        return Repository(
            id=data["id"],
            owner_login=data["owner"]["login"],
            name=data["name"],
            default_branch=data["default_branch"],
        )

    async def get_content(self, owner: str, repo: str, path: str) -> str:
        """
        Fetch and decode the content of a file.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path within the repository

        Returns:
            The file's text

        Raises:
            NotFoundError: If the file does not exist
            AssertionViolation: If the path is not a regular file (directory,
                symlink, submodule) or carries no inline content
        """
        data = await self.transport.get(
            "/repos/:owner/:repo/contents/:path",
            {"owner": owner, "repo": repo, "path": path},
        )
        if not isinstance(data, dict) or data.get("type") != "file":
            raise AssertionViolation(f"Expected {path} to be a file")
        content = data.get("content")
        if not isinstance(content, str):
            # This validation is security critical
            raise AssertionViolation(f"Expected the content of {path} to be a string")
        return self._decode(content, data.get("encoding"))

    async def try_get_content(self, owner: str, repo: str, path: str) -> FileContent:
        """Like get_content, but a missing file yields ``exists=False``."""
        try:
            content = await self.get_content(owner, repo, path)
        except NotFoundError:
            return FileContent(path=path, exists=False)
        return FileContent(path=path, exists=True, content=content)

    async def get_branch(self, owner: str, repo: str, branch: str) -> Branch:
        """
        Get a branch.

        Raises:
            NotFoundError: If the branch does not exist
        """
        data = await self.transport.get(
            "/repos/:owner/:repo/branches/:branch",
            {"owner": owner, "repo": repo, "branch": branch},
        )
        if not isinstance(data, dict) or data.get("name") != branch:
            raise AssertionViolation(f"Expected branch lookup to return {branch}")
        return Branch(name=data["name"], sha=data["commit"]["sha"])

    async def branch_exists(self, owner: str, repo: str, branch: str) -> bool:
        """Check whether a branch exists. Only a 404 counts as absence."""
        try:
            await self.get_branch(owner, repo, branch)
        except NotFoundError:
            return False
        return True

    @staticmethod
    def _decode(content: str, encoding: Any) -> str:
        if encoding == "base64":
            return base64.b64decode(content).decode("utf-8")
        return content
