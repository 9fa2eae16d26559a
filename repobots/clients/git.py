"""Async git data resource client (refs, trees and commits)."""

from typing import TYPE_CHECKING

from repobots.exceptions import AssertionViolation
from repobots.types.repos import Branch, FileUpdate

if TYPE_CHECKING:
    from repobots.transport import AsyncHTTPTransport

# Mode of a regular, non-executable file in a git tree
FILE_MODE = "100644"


class GitClient:
    """Async client for low-level git operations."""

    def __init__(self, transport: "AsyncHTTPTransport") -> None:
        """
        Initialize the git client.

        Args:
            transport: Async HTTP transport for making requests
        """
        self.transport = transport

    async def get_ref_sha(self, owner: str, repo: str, ref: str) -> str:
        """Resolve a ref such as ``heads/main`` to the sha it points at."""
        data = await self.transport.get(
            "/repos/:owner/:repo/git/ref/:ref",
            {"owner": owner, "repo": repo, "ref": ref},
        )
        try:
            return data["object"]["sha"]
        except (KeyError, TypeError) as e:
            raise AssertionViolation(f"Expected {ref} to resolve to a single object") from e

    async def create_branch(
        self, owner: str, repo: str, from_branch: str, to_branch: str
    ) -> Branch:
        """
        Create ``to_branch`` pointing at the current head of ``from_branch``.

        Raises:
            ValidationError: If the branch already exists (422)
        """
        sha = await self.get_ref_sha(owner, repo, f"heads/{from_branch}")
        await self.transport.post(
            "/repos/:owner/:repo/git/refs",
            {"owner": owner, "repo": repo, "ref": f"refs/heads/{to_branch}", "sha": sha},
        )
        return Branch(name=to_branch, sha=sha)

    async def commit_files(
        self,
        owner: str,
        repo: str,
        branch: str,
        message: str,
        updates: list[FileUpdate],
    ) -> str:
        """
        Commit several files to a branch in one commit.

        Builds a tree on top of the branch head's tree, creates a commit
        whose parent is the branch head and fast-forwards the branch to it.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch to commit to
            message: Commit message
            updates: Files to write

        Returns:
            Sha of the new commit
        """
        params = {"owner": owner, "repo": repo}
        head = await self.get_ref_sha(owner, repo, f"heads/{branch}")
        head_commit = await self.transport.get(
            "/repos/:owner/:repo/git/commits/:sha", {**params, "sha": head}
        )
        tree = await self.transport.post(
            "/repos/:owner/:repo/git/trees",
            {
                **params,
                "base_tree": head_commit["tree"]["sha"],
                "tree": [
                    {
                        "path": update.path,
                        "mode": FILE_MODE,
                        "type": "blob",
                        "content": update.content,
                    }
                    for update in updates
                ],
            },
        )
        commit = await self.transport.post(
            "/repos/:owner/:repo/git/commits",
            {**params, "message": message, "tree": tree["sha"], "parents": [head]},
        )
        await self.transport.patch(
            "/repos/:owner/:repo/git/refs/:ref",
            {**params, "ref": f"heads/{branch}", "sha": commit["sha"], "force": False},
        )
        return commit["sha"]

    async def delete_ref(self, owner: str, repo: str, ref: str) -> None:
        """Delete a ref such as ``heads/feature``."""
        await self.transport.delete(
            "/repos/:owner/:repo/git/refs/:ref",
            {"owner": owner, "repo": repo, "ref": ref},
        )
