"""Add or remove a single label across every matching issue in a repository."""

import logging
from collections.abc import Callable

from tagger.models import Issue, LabelUpdateFailure, LabelUpdateReport
from tagger.providers.base import IssueTrackerClient, TrackerError
from tagger.queries import has_label

logger = logging.getLogger(__name__)


def _apply(
    client: IssueTrackerClient,
    org: str,
    repo: str,
    issues: list[Issue],
    label: str,
    action: str,
) -> LabelUpdateReport:
    report = LabelUpdateReport(label=label, action=action)
    for issue in issues:
        try:
            if action == "add":
                client.update_issue_labels(org, repo, issue.number, add_label=label)
            else:
                client.update_issue_labels(org, repo, issue.number, remove_label=label)
        except TrackerError as exc:
            logger.error("Unhandled issue %s: %s", issue.url, exc)
            report.failures.append(LabelUpdateFailure(issue_number=issue.number, url=issue.url, error=str(exc)))
            continue
        logger.info("Updated issue: %s", issue.url)
        report.updated.append(issue.url)
    return report


def add_label_to_matching_issues(
    client: IssueTrackerClient,
    org: str,
    repo: str,
    label: str,
    predicate: Callable[[Issue], bool],
) -> LabelUpdateReport:
    """Add label to every issue in org/repo for which predicate is true.

    One update per issue, in fetch order. A failed update is recorded and the
    batch carries on; there is no rollback.
    """
    matching = [issue for issue in client.fetch_all_issues(org, repo) if predicate(issue)]
    return _apply(client, org, repo, matching, label, "add")


def remove_label_from_all_issues(client: IssueTrackerClient, org: str, repo: str, label: str) -> LabelUpdateReport:
    """Remove label from every issue in org/repo currently carrying it."""
    matching = [issue for issue in client.fetch_all_issues(org, repo) if has_label(issue, label)]
    return _apply(client, org, repo, matching, label, "remove")
