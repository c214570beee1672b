"""Shared test fixtures."""

import pytest

from tagger.models import Comment, Issue, Label

BUG = Label(id=180116450, name="Type:Bug")
PIPELINE = Label(id=1, name="Pipeline:Added")
AREA_RESTORE = Label(id=345983287, name="Area:Restore")


def make_issue(number: int = 1, **kwargs) -> Issue:
    defaults = {
        "id": 1000 + number,
        "number": number,
        "title": f"Issue {number}",
        "url": f"https://github.com/nuget/home/issues/{number}",
        "author": "reporter",
    }
    defaults.update(kwargs)
    return Issue(**defaults)


@pytest.fixture
def labels() -> list[Label]:
    return [BUG, PIPELINE, AREA_RESTORE, Label(id=2, name="area:lowercase"), Label(id=3, name="priority:1")]


@pytest.fixture
def bug_issue() -> Issue:
    return make_issue(
        42,
        title="Restore fails offline",
        author="jdoe",
        assignees=["alice", "bob"],
        milestone="6.9",
        labels=[BUG, AREA_RESTORE],
        comments=3,
        reactions=5,
    )


@pytest.fixture
def comments() -> list[Comment]:
    return [
        Comment(issue_number=42, author="jdoe"),
        Comment(issue_number=42, author="alice"),
        Comment(issue_number=42, author="jdoe"),
    ]
