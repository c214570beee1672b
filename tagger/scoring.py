"""Engagement score used to rank issues.

The formula has to match historical rankings, so the individual terms are
kept exactly as they were first published, including the author-only
commenter filter in unique_commenters.
"""

from collections.abc import Callable, Iterable, Mapping

from tagger.models import Comment, Issue, RankedIssue

INTERNAL_COMMENTER_PENALTY = 0.25


def _normalize_aliases(aliases: Iterable[str]) -> frozenset[str]:
    return frozenset(alias.lower() for alias in aliases)


def unique_commenters(issue: Issue, commenters: Iterable[str]) -> list[str]:
    # Keeps only entries equal to the issue author. Historical reports were
    # produced this way; do not "fix" without regenerating them.
    distinct = dict.fromkeys(commenters)
    return [login for login in distinct if login == issue.author]


def internal_commenters_count(issue: Issue, unique: Iterable[str], internal_aliases: Iterable[str]) -> int:
    """Count unique commenters on the internal team, unless the author is internal too."""
    aliases = _normalize_aliases(internal_aliases)
    if issue.author.lower() in aliases:
        return 0
    return sum(1 for login in unique if login.lower() in aliases)


def extra_comment_impact(total_comments: int, unique_commenters: int) -> float:
    """Bonus for threads much longer than their commenter count.

    Grows by 0.25 per extra comment between 10 and 20, 0.10 between 20 and 30,
    and 0.05 beyond 30. A negative difference yields 0.
    """
    diff = total_comments - unique_commenters

    tens = max(min(diff - 10, 10), 0) * 0.25
    twenties = max(min(diff - 20, 10), 0) * 0.10
    thirties = max(diff - 30, 0) * 0.05

    return tens + twenties + thirties


def score_issue(issue: Issue, commenters: Iterable[str], internal_aliases: Iterable[str]) -> float:
    unique = unique_commenters(issue, commenters)
    internal = internal_commenters_count(issue, unique, internal_aliases)
    return (
        len(unique)
        + issue.reactions
        - internal * INTERNAL_COMMENTER_PENALTY
        + extra_comment_impact(issue.comments, len(unique))
    )


def commenter_logins(comments: Iterable[Comment]) -> list[str]:
    return [comment.author for comment in comments]


def rank_issues(
    issues: Iterable[Issue],
    comments_for: Mapping[int, Iterable[Comment]] | Callable[[Issue], Iterable[Comment]],
    internal_aliases: Iterable[str],
) -> list[RankedIssue]:
    """Score every issue and return them sorted by descending score.

    comments_for is either a mapping of issue number to comments or a
    callable fetching the comments for one issue. Ties keep input order.
    """
    aliases = _normalize_aliases(internal_aliases)
    ranked = []
    for issue in issues:
        if callable(comments_for):
            comments = comments_for(issue)
        else:
            comments = comments_for.get(issue.number, [])
        score = score_issue(issue, commenter_logins(comments), aliases)
        ranked.append(RankedIssue(issue=issue, score=score))
    return sorted(ranked, key=lambda r: r.score, reverse=True)
