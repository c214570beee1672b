"""github-issue-tagger CLI commands."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tagger.labeling import add_label_to_matching_issues, remove_label_from_all_issues
from tagger.models import Issue, Label, LabelUpdateReport
from tagger.providers.base import IssueTrackerClient, TrackerError
from tagger.providers.github import GitHubProvider
from tagger.queries import (
    area_labels,
    filter_by_all_labels,
    filter_by_milestone_and_predicate,
    filter_unprocessed,
    has_label,
    is_unprocessed,
)
from tagger.reports import area_owner_report, format_category_line, markdown_table, write_snapshot
from tagger.scoring import rank_issues
from tagger.session import TrackerSession
from tagger.settings import TaggerSettings, get_settings, split_repo

app = typer.Typer(help="github-issue-tagger: triage reports and label bulk-edits for GitHub issues")

TrackerOpt = Annotated[
    str | None,
    typer.Option("--tracker", "-k", help="Profile name from ~/.config/tagger/config.toml"),
]
RepoOpt = Annotated[
    str | None,
    typer.Option("--repo", "-r", help="owner/repo (defaults to github_repo of the profile)"),
]
PatOpt = Annotated[
    str | None,
    typer.Option("--pat", help="A GitHub PAT with sufficient permissions for the invoked action."),
]
WithLabelOpt = Annotated[
    list[str] | None,
    typer.Option("--with-label", "-l", help="Only issues carrying this label (repeatable, all must match)"),
]


# ---------------------------------------------------------------------------
# Plumbing
# ---------------------------------------------------------------------------


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def get_provider(settings: TaggerSettings, pat: str | None = None) -> IssueTrackerClient:
    return GitHubProvider(settings, token=pat)


def _resolve_repo(settings: TaggerSettings, repo: str | None) -> tuple[str, str]:
    full_name = repo or settings.github_repo
    if not full_name:
        rprint("[red]No repository specified. Use --repo or set github_repo in your config profile.[/red]")
        raise typer.Exit(1)
    try:
        return split_repo(full_name)
    except ValueError as exc:
        rprint(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc


@contextmanager
def _tracker_errors() -> Iterator[None]:
    try:
        yield
    except TrackerError as exc:
        rprint(f"[red]error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _open(tracker: str | None, repo: str | None, pat: str | None) -> tuple[TaggerSettings, TrackerSession, str, str]:
    settings = get_settings(tracker=tracker)
    org, name = _resolve_repo(settings, repo)
    with _tracker_errors():
        session = TrackerSession(get_provider(settings, pat))
    return settings, session, org, name


def _issue_predicate(
    with_labels: list[str] | None,
    milestone: str | None,
    unprocessed_only: bool,
) -> Callable[[Issue], bool]:
    checks: list[Callable[[Issue], bool]] = []
    if with_labels:
        checks.append(lambda issue: all(has_label(issue, name) for name in with_labels))
    if milestone:
        checks.append(lambda issue: issue.milestone == milestone)
    if unprocessed_only:
        checks.append(is_unprocessed)
    return lambda issue: all(check(issue) for check in checks)


# ---------------------------------------------------------------------------
# Report helpers (shared by commands and the prompt loop)
# ---------------------------------------------------------------------------


def _show_unprocessed(session: TrackerSession, org: str, repo: str) -> None:
    for issue in filter_unprocessed(session.issues(org, repo)):
        typer.echo(issue.url)


def _show_labels(labels: list[Label]) -> None:
    typer.echo("(ID\tName)")
    for label in labels:
        typer.echo(f"{label.id}\t{label.name}")


def _show_area_owner_report(session: TrackerSession, settings: TaggerSettings, org: str, repo: str) -> None:
    if not settings.area_categories:
        rprint("[yellow]No area_categories configured for this profile.[/yellow]")
        return
    rows = area_owner_report(
        session.issues(org, repo),
        session.labels(org, repo),
        settings.area_categories,
        settings.ignore_label_ids,
        settings.type_label_ids,
    )
    for row in rows:
        typer.echo(format_category_line(row))


def _show_ranking(
    session: TrackerSession,
    settings: TaggerSettings,
    org: str,
    repo: str,
    labels: list[str],
    markdown: bool = False,
    limit: int | None = None,
) -> None:
    issues = filter_by_all_labels(session.issues(org, repo), labels)
    ranked = rank_issues(
        issues,
        lambda issue: session.comments(org, repo, issue.number),
        settings.internal_aliases,
    )
    if limit:
        ranked = ranked[:limit]

    if markdown:
        typer.echo(markdown_table(ranked))
        return

    table = Table(title=f"Ranked issues: {', '.join(labels) or 'all'}")
    table.add_column("Link", style="cyan")
    table.add_column("Title")
    table.add_column("Assignee")
    table.add_column("Milestone")
    table.add_column("Score", justify="right")
    for row in ranked:
        table.add_row(row.link, row.title, row.assignee, row.milestone or "", f"{row.score:g}")
    rprint(table)


def _write_priority_snapshots(
    session: TrackerSession,
    settings: TaggerSettings,
    repos: list[tuple[str, str]],
    output_dir: Path,
) -> None:
    for org, repo in repos:
        issues = session.open_issues_with_label(org, repo, settings.snapshot_label)
        path = write_snapshot(issues, output_dir / f"{org}-{repo}-issues.json")
        rprint(f"[green]✓[/green] {org}/{repo}: wrote {len(issues)} issue(s) to {path}")


def _print_update_report(report: LabelUpdateReport) -> None:
    # per-issue progress is logged by tagger.labeling; this is the recap
    for failure in report.failures:
        rprint(f"[red]Unhandled issue {failure.url}[/red] {failure.error}")
    verb = "Added" if report.action == "add" else "Removed"
    rprint(f"{verb} '{report.label}' on {len(report.updated)} issue(s), {len(report.failures)} failed.")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Runs the unprocessed report when no command is given."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        unprocessed(tracker=None, repo=None, pat=None)


@app.command("unprocessed")
def unprocessed(tracker: TrackerOpt = None, repo: RepoOpt = None, pat: PatOpt = None) -> None:
    """List issues with no labels, or only Pipeline labels."""
    _, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        _show_unprocessed(session, org, name)


@app.command("labels")
def labels_cmd(tracker: TrackerOpt = None, repo: RepoOpt = None, pat: PatOpt = None) -> None:
    """List every label of the repository."""
    _, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        _show_labels(session.labels(org, name))


@app.command("area-labels")
def area_labels_cmd(tracker: TrackerOpt = None, repo: RepoOpt = None, pat: PatOpt = None) -> None:
    """List the Area: labels of the repository."""
    _, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        _show_labels(area_labels(session.labels(org, name)))


@app.command("area-owner-report")
def area_owner_report_cmd(tracker: TrackerOpt = None, repo: RepoOpt = None, pat: PatOpt = None) -> None:
    """Count issues per configured area, flagging those without a type label."""
    settings, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        _show_area_owner_report(session, settings, org, name)


@app.command("milestone")
def milestone_cmd(
    milestone: Annotated[str, typer.Argument(help="Milestone title")],
    with_label: WithLabelOpt = None,
    unprocessed_only: Annotated[bool, typer.Option("--unprocessed", help="Only unprocessed issues")] = False,
    tracker: TrackerOpt = None,
    repo: RepoOpt = None,
    pat: PatOpt = None,
) -> None:
    """List issues in a milestone, optionally narrowed by labels."""
    _, session, org, name = _open(tracker, repo, pat)
    predicate = _issue_predicate(with_label, None, unprocessed_only)
    with _tracker_errors():
        issues = filter_by_milestone_and_predicate(session.issues(org, name), milestone, predicate)
    for issue in issues:
        typer.echo(f"{issue.url}\t{issue.title}")


@app.command("rank")
def rank_cmd(
    labels: Annotated[list[str] | None, typer.Argument(help="Labels every ranked issue must carry")] = None,
    markdown: Annotated[bool, typer.Option("--markdown", help="Print a markdown table")] = False,
    limit: Annotated[int | None, typer.Option("--limit", "-n", min=1, help="Show only the top N")] = None,
    tracker: TrackerOpt = None,
    repo: RepoOpt = None,
    pat: PatOpt = None,
) -> None:
    """Rank issues by engagement score, highest first."""
    settings, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        _show_ranking(session, settings, org, name, labels or [], markdown=markdown, limit=limit)


@app.command("priority-snapshot")
def priority_snapshot(
    output_dir: Annotated[Path, typer.Option("--output-dir", "-o", help="Directory for the JSON files")] = Path("."),
    tracker: TrackerOpt = None,
    repo: RepoOpt = None,
    pat: PatOpt = None,
) -> None:
    """Write open issues carrying the snapshot label to <owner>-<repo>-issues.json."""
    settings = get_settings(tracker=tracker)
    if repo:
        repos = [_resolve_repo(settings, repo)]
    elif settings.snapshot_repos:
        repos = [_resolve_repo(settings, r) for r in settings.snapshot_repos]
    else:
        repos = [_resolve_repo(settings, None)]
    with _tracker_errors():
        session = TrackerSession(get_provider(settings, pat))
        _write_priority_snapshots(session, settings, repos, output_dir)


@app.command("add-label")
def add_label(
    label: Annotated[str, typer.Argument(help="Label to add")],
    with_label: WithLabelOpt = None,
    milestone: Annotated[str | None, typer.Option("--milestone", "-m", help="Only issues in this milestone")] = None,
    unprocessed_only: Annotated[bool, typer.Option("--unprocessed", help="Only unprocessed issues")] = False,
    all_issues: Annotated[bool, typer.Option("--all", help="Match every issue in the repository")] = False,
    tracker: TrackerOpt = None,
    repo: RepoOpt = None,
    pat: PatOpt = None,
) -> None:
    """Add a label to every issue matching the given criteria."""
    if not (with_label or milestone or unprocessed_only or all_issues):
        rprint("[red]No criteria given. Use --with-label, --milestone, --unprocessed or --all.[/red]")
        raise typer.Exit(1)
    _, session, org, name = _open(tracker, repo, pat)
    predicate = _issue_predicate(with_label, milestone, unprocessed_only)
    with _tracker_errors():
        report = add_label_to_matching_issues(session.client, org, name, label, predicate)
    _print_update_report(report)
    if report.failures:
        raise typer.Exit(1)


@app.command("remove-label")
def remove_label(
    label: Annotated[str, typer.Argument(help="Label to remove")],
    tracker: TrackerOpt = None,
    repo: RepoOpt = None,
    pat: PatOpt = None,
) -> None:
    """Remove a label from every issue carrying it."""
    _, session, org, name = _open(tracker, repo, pat)
    with _tracker_errors():
        report = remove_label_from_all_issues(session.client, org, name, label)
    _print_update_report(report)
    if report.failures:
        raise typer.Exit(1)


_MENU = ("unprocessed", "labels", "area-labels", "area-owner-report", "priority-snapshot", "rank")


@app.command("prompt")
def prompt_cmd(tracker: TrackerOpt = None, repo: RepoOpt = None, pat: PatOpt = None) -> None:
    """Interactive menu; fetched issues and labels are reused between queries."""
    settings, session, org, name = _open(tracker, repo, pat)

    rprint("[bold]******************* GitHub Issue Tagger ************************[/bold]")
    rprint("")

    while True:
        rprint("Enter a # to query:")
        for number, entry in enumerate(_MENU, start=1):
            rprint(f"{number}: {entry}")
        try:
            choice = typer.prompt("", default="", show_default=False, prompt_suffix="> ").strip()
        except typer.Abort:
            break
        if not choice:
            continue
        if choice == "quit":
            break
        if not choice.isdigit() or not 1 <= int(choice) <= len(_MENU):
            rprint(f"[yellow]Unknown selection '{choice}'[/yellow]")
            continue

        executed = _MENU[int(choice) - 1]
        rprint(f"*** Executing... {executed} ***")
        try:
            with _tracker_errors():
                match executed:
                    case "unprocessed":
                        _show_unprocessed(session, org, name)
                    case "labels":
                        _show_labels(session.labels(org, name))
                    case "area-labels":
                        _show_labels(area_labels(session.labels(org, name)))
                    case "area-owner-report":
                        _show_area_owner_report(session, settings, org, name)
                    case "priority-snapshot":
                        repos = [split_repo(r) for r in settings.snapshot_repos] or [(org, name)]
                        _write_priority_snapshots(session, settings, repos, Path("."))
                    case "rank":
                        raw = typer.prompt("Labels (comma-separated)", default="", show_default=False)
                        wanted = [part.strip() for part in raw.split(",") if part.strip()]
                        _show_ranking(session, settings, org, name, wanted)
        except typer.Exit:
            # error already printed; keep the loop alive
            pass
        except ValueError as exc:
            rprint(f"[red]{exc}[/red]")
        rprint(f"*** Done Executing {executed} ***")


@app.command("config-show")
def config_show(tracker: TrackerOpt = None) -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings(tracker=tracker)

    def mask(val: str | None, prefix: str = "") -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"{prefix}...{val[-5:]}"

    table = Table(title="Tagger Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("default_tracker", settings.default_tracker or "[dim](not set)[/dim]")
    table.add_row(
        "github_token",
        mask(settings.github_token.get_secret_value() if settings.github_token else None, prefix="ghp_"),
    )
    table.add_row("github_auth", settings.github_auth)
    table.add_row("github_repo", settings.github_repo or "[dim](not set)[/dim]")
    table.add_row("internal_aliases", str(len(settings.internal_aliases)))
    table.add_row("area_categories", ", ".join(c.name for c in settings.area_categories) or "[dim](none)[/dim]")
    table.add_row("snapshot_label", settings.snapshot_label)
    table.add_row("snapshot_repos", ", ".join(settings.snapshot_repos) or "[dim](none)[/dim]")

    rprint(table)
