"""Shared pydantic models exchanged by the providers, the core and main.py."""

from pydantic import BaseModel, ConfigDict


class Label(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int  # assigned by the tracker, authoritative for equality
    name: str

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Label):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)


class Issue(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    number: int
    title: str
    url: str
    author: str
    assignees: list[str] = []
    milestone: str | None = None  # milestone title
    labels: list[Label] = []
    comments: int = 0  # total comment count reported by the tracker
    reactions: int = 0  # total reaction count
    state: str = "open"

    @property
    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]

    @property
    def label_ids(self) -> set[int]:
        return {label.id for label in self.labels}

    @property
    def assignee_display(self) -> str:
        return ",".join(self.assignees)


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue_number: int
    author: str


class RankedIssue(BaseModel):
    """An issue with its computed score. Built fresh for each report."""

    model_config = ConfigDict(frozen=True)

    issue: Issue
    score: float

    @property
    def link(self) -> str:
        return self.issue.url

    @property
    def title(self) -> str:
        return self.issue.title

    @property
    def assignee(self) -> str:
        return self.issue.assignee_display

    @property
    def milestone(self) -> str | None:
        return self.issue.milestone


class LabelUpdateFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    issue_number: int
    url: str
    error: str


class LabelUpdateReport(BaseModel):
    """Outcome of a batch label mutation, in processing order."""

    label: str
    action: str  # "add" | "remove"
    updated: list[str] = []
    failures: list[LabelUpdateFailure] = []

    @property
    def attempted(self) -> int:
        return len(self.updated) + len(self.failures)


class CategoryCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    total: int
    missing_types: int = 0
