"""Per-repository cache of issues and labels already fetched from the tracker."""

import logging

from tagger.models import Comment, Issue, Label
from tagger.providers.base import IssueTrackerClient
from tagger.queries import label_by_id

logger = logging.getLogger(__name__)


class TrackerSession:
    """Wraps a client so repeated reports in one run reuse fetched lists.

    Nothing is invalidated: label mutations go straight to the client, and a
    new session is needed to observe them.
    """

    def __init__(self, client: IssueTrackerClient) -> None:
        self.client = client
        self._issues: dict[tuple[str, str], list[Issue]] = {}
        self._labels: dict[tuple[str, str], list[Label]] = {}
        self._searches: dict[tuple[str, str, str], list[Issue]] = {}

    def issues(self, org: str, repo: str) -> list[Issue]:
        key = (org, repo)
        if key not in self._issues:
            self._issues[key] = self.client.fetch_all_issues(org, repo)
            logger.debug("Fetched %d issues for %s/%s", len(self._issues[key]), org, repo)
        return self._issues[key]

    def labels(self, org: str, repo: str) -> list[Label]:
        key = (org, repo)
        if key not in self._labels:
            self._labels[key] = self.client.fetch_all_labels(org, repo)
            logger.debug("Fetched %d labels for %s/%s", len(self._labels[key]), org, repo)
        return self._labels[key]

    def label_by_id(self, org: str, repo: str, label_id: int) -> Label | None:
        return label_by_id(self.labels(org, repo), label_id)

    def open_issues_with_label(self, org: str, repo: str, label: str) -> list[Issue]:
        key = (org, repo, label)
        if key not in self._searches:
            self._searches[key] = self.client.search_open_issues_by_label(org, repo, label)
        return self._searches[key]

    def comments(self, org: str, repo: str, issue_number: int) -> list[Comment]:
        return self.client.fetch_all_comments(org, repo, issue_number)
