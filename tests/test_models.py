"""Tests for tagger.models."""

import pytest

from tagger.models import Issue, Label, LabelUpdateFailure, LabelUpdateReport, RankedIssue


def test_issue_frozen(bug_issue: Issue) -> None:
    with pytest.raises(Exception):  # ValidationError or TypeError depending on pydantic version
        bug_issue.title = "changed"  # type: ignore[misc]


def test_issue_defaults() -> None:
    issue = Issue(id=1, number=1, title="Test", url="https://example.com", author="me")
    assert issue.assignees == []
    assert issue.milestone is None
    assert issue.labels == []
    assert issue.comments == 0
    assert issue.reactions == 0
    assert issue.state == "open"


def test_label_helpers(bug_issue: Issue) -> None:
    assert bug_issue.label_names == ["Type:Bug", "Area:Restore"]
    assert bug_issue.label_ids == {180116450, 345983287}
    assert bug_issue.assignee_display == "alice,bob"


def test_label_equality_uses_id() -> None:
    renamed = Label(id=7, name="Area: Restore")
    assert Label(id=7, name="Area:Restore") == renamed
    assert Label(id=8, name="Area:Restore") != renamed
    assert renamed in {Label(id=7, name="Area:Restore")}


def test_ranked_issue_columns(bug_issue: Issue) -> None:
    ranked = RankedIssue(issue=bug_issue, score=7.5)
    assert ranked.link == "https://github.com/nuget/home/issues/42"
    assert ranked.title == "Restore fails offline"
    assert ranked.assignee == "alice,bob"
    assert ranked.milestone == "6.9"


def test_update_report_attempted() -> None:
    report = LabelUpdateReport(label="x", action="add", updated=["u1", "u2"])
    report.failures.append(LabelUpdateFailure(issue_number=3, url="u3", error="boom"))
    assert report.attempted == 3


def test_update_reports_do_not_share_lists() -> None:
    first = LabelUpdateReport(label="x", action="add")
    first.updated.append("u1")
    second = LabelUpdateReport(label="x", action="add")
    assert second.updated == []
