"""Repository, branch and content data models."""

from dataclasses import dataclass


@dataclass
class Repository:
    """Repository information."""

    id: int
    owner_login: str
    name: str
    default_branch: str


@dataclass
class Branch:
    """A branch and the sha it points at."""

    name: str
    sha: str


@dataclass
class FileContent:
    """Decoded content of a file, or a marker that the file does not exist."""

    path: str
    exists: bool
    content: str | None = None


@dataclass
class FileUpdate:
    """New content for one file of a commit."""

    path: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "content": self.content}
