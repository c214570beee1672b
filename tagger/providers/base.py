"""Abstract base class for issue tracker clients."""

from abc import ABC, abstractmethod

from tagger.models import Comment, Issue, Label


class TrackerError(RuntimeError):
    """Raised when the remote tracker rejects a request or cannot be reached."""


class IssueTrackerClient(ABC):
    @abstractmethod
    def fetch_all_issues(self, org: str, repo: str) -> list[Issue]: ...

    @abstractmethod
    def fetch_all_comments(self, org: str, repo: str, issue_number: int) -> list[Comment]: ...

    @abstractmethod
    def fetch_all_labels(self, org: str, repo: str) -> list[Label]: ...

    @abstractmethod
    def update_issue_labels(
        self,
        org: str,
        repo: str,
        issue_number: int,
        add_label: str | None = None,
        remove_label: str | None = None,
    ) -> None: ...

    @abstractmethod
    def search_open_issues_by_label(self, org: str, repo: str, label: str) -> list[Issue]: ...
