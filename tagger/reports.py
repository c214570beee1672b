"""Report building: area-owner counts, markdown ranking tables, JSON snapshots."""

import json
from collections.abc import Iterable, Sequence
from pathlib import Path

from tagger.models import CategoryCount, Issue, Label, RankedIssue
from tagger.queries import count_missing_types, exclude_label_ids, filter_by_any_label_id, label_by_id
from tagger.settings import LabelCategory

RANKING_COLUMNS = ("Link", "Title", "Assignee", "Milestone", "Score")


def area_owner_report(
    issues: Iterable[Issue],
    labels: Sequence[Label],
    categories: Iterable[LabelCategory],
    ignore_label_ids: Iterable[int],
    type_label_ids: Iterable[int],
) -> list[CategoryCount]:
    """Count issues per category, and how many of those lack a type label.

    Issues carrying an ignored label are dropped first. Category label ids that
    do not exist in the repository are skipped; a category left with no ids is
    omitted from the report.
    """
    known_ignored = [i for i in ignore_label_ids if label_by_id(labels, i) is not None]
    known_types = [i for i in type_label_ids if label_by_id(labels, i) is not None]
    included = exclude_label_ids(issues, known_ignored)

    rows = []
    for category in categories:
        ids = [i for i in category.label_ids if label_by_id(labels, i) is not None]
        if not ids:
            continue
        matching = filter_by_any_label_id(included, ids)
        rows.append(
            CategoryCount(
                name=category.name,
                total=len(matching),
                missing_types=count_missing_types(matching, known_types),
            )
        )
    return rows


def format_category_line(row: CategoryCount) -> str:
    line = f"{row.name}\t{row.total}"
    if row.missing_types > 0:
        line += f" (Missing Types: {row.missing_types})"
    return line


def _cell(value: object) -> str:
    if value is None:
        return ""
    return str(value).replace("|", "\\|")


def markdown_table(ranked: Iterable[RankedIssue]) -> str:
    lines = [
        "| " + " | ".join(RANKING_COLUMNS) + " |",
        "|" + "|".join("---" for _ in RANKING_COLUMNS) + "|",
    ]
    for row in ranked:
        cells = [row.link, row.title, row.assignee, row.milestone, f"{row.score:g}"]
        lines.append("| " + " | ".join(_cell(c) for c in cells) + " |")
    return "\n".join(lines)


def snapshot_payload(issues: Iterable[Issue]) -> list[dict]:
    return [issue.model_dump(mode="json") for issue in issues]


def write_snapshot(issues: Iterable[Issue], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot_payload(issues), indent=2))
    return path
