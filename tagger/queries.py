"""Filters over already-fetched issue and label lists.

Every function here is a pure list-to-list transform: nothing is fetched,
nothing is mutated, and results keep the input order.
"""

from collections.abc import Callable, Iterable, Sequence

from tagger.models import Issue, Label

UNPROCESSED_PREFIX = "Pipeline"
AREA_PREFIX = "Area:"


def has_label(issue: Issue, name: str) -> bool:
    return any(label.name == name for label in issue.labels)


def filter_by_label(issues: Iterable[Issue], name: str) -> list[Issue]:
    return [issue for issue in issues if has_label(issue, name)]


def filter_by_all_labels(issues: Iterable[Issue], label_names: Sequence[str]) -> list[Issue]:
    """Return issues carrying every one of label_names (exact, case-sensitive)."""
    return [issue for issue in issues if all(has_label(issue, name) for name in label_names)]


def is_unprocessed(issue: Issue) -> bool:
    """True when the issue has no labels, or only labels added by the CI pipeline."""
    return not issue.labels or all(label.name.startswith(UNPROCESSED_PREFIX) for label in issue.labels)


def filter_unprocessed(issues: Iterable[Issue]) -> list[Issue]:
    return [issue for issue in issues if is_unprocessed(issue)]


def filter_by_milestone_and_predicate(
    issues: Iterable[Issue],
    milestone_name: str,
    predicate: Callable[[Issue], bool],
) -> list[Issue]:
    return [issue for issue in issues if issue.milestone == milestone_name and predicate(issue)]


def label_by_id(labels: Iterable[Label], label_id: int) -> Label | None:
    return next((label for label in labels if label.id == label_id), None)


def area_labels(labels: Iterable[Label]) -> list[Label]:
    prefix = AREA_PREFIX.lower()
    return [label for label in labels if label.name.lower().startswith(prefix)]


def exclude_label_ids(issues: Iterable[Issue], label_ids: Iterable[int]) -> list[Issue]:
    ids = set(label_ids)
    return [issue for issue in issues if not issue.label_ids & ids]


def filter_by_any_label_id(issues: Iterable[Issue], label_ids: Iterable[int]) -> list[Issue]:
    ids = set(label_ids)
    return [issue for issue in issues if issue.label_ids & ids]


def count_missing_types(issues: Iterable[Issue], type_label_ids: Iterable[int]) -> int:
    """Count issues that carry none of the valid type labels."""
    return len(exclude_label_ids(issues, type_label_ids))
