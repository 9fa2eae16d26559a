"""Issue listing data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Issue:
    """An entry of the issue listing (issues and pull requests share it)."""

    number: int
    title: str
    user_login: str
    updated_at: datetime
    html_url: str
    pull_request_url: str | None  # set only when the issue is a pull request

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request_url is not None
