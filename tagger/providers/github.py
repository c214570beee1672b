"""GitHub REST API v3 provider."""

import logging
import subprocess
from urllib.parse import quote

import httpx

from tagger.models import Comment, Issue, Label
from tagger.providers.base import IssueTrackerClient, TrackerError
from tagger.settings import TaggerSettings

BASE_URL = "https://api.github.com"
PER_PAGE = 100

logger = logging.getLogger(__name__)


class GitHubProvider(IssueTrackerClient):
    def __init__(self, settings: TaggerSettings, token: str | None = None) -> None:
        self._token = token or self._resolve_token(settings)
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "github-issue-tagger",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"
        else:
            logger.warning(
                "Unable to get a GitHub token. Making unauthenticated HTTP requests, which have lower request limits."
            )

    def _resolve_token(self, settings: TaggerSettings) -> str | None:
        if settings.github_auth == "gh-cli":
            try:
                result = subprocess.run(
                    ["gh", "auth", "token"],
                    capture_output=True,
                    text=True,
                )
            except FileNotFoundError as exc:
                raise TrackerError("gh CLI not found on PATH. Install it or set github_auth = \"token\"") from exc
            if result.returncode != 0:
                raise TrackerError("gh auth token failed. Run: gh auth login")
            return result.stdout.strip()
        if settings.github_token:
            return settings.github_token.get_secret_value()
        return None

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if url.startswith("/"):
            url = f"{BASE_URL}{url}"
        logger.debug("%s %s", method, url)
        try:
            response = httpx.request(method, url, headers=self._headers, timeout=30, **kwargs)
        except httpx.HTTPError as exc:
            raise TrackerError(f"GitHub request failed: {exc}") from exc
        if response.status_code == 401:
            raise TrackerError("GitHub API returned 401. Check the token for the active profile or pass --pat.")
        if response.is_error:
            raise TrackerError(f"GitHub API error {response.status_code} for {method} {url}: {response.text[:300]}")
        return response

    def _get_all(self, path: str, params: dict | None = None) -> list[dict]:
        """GET every page of a list endpoint, following Link rel="next"."""
        items: list[dict] = []
        url: str | None = path
        query: dict | None = {"per_page": str(PER_PAGE), **(params or {})}
        while url:
            response = self._request("GET", url, params=query)
            payload = response.json()
            if isinstance(payload, dict):
                # search endpoints wrap results
                payload = payload.get("items", [])
            items.extend(payload)
            url = response.links.get("next", {}).get("url")
            # the next link already carries the query string
            query = None
        return items

    def _issue_from_node(self, node: dict) -> Issue:
        milestone = node.get("milestone") or {}
        return Issue(
            id=node["id"],
            number=node["number"],
            title=node["title"],
            url=node["html_url"],
            author=(node.get("user") or {}).get("login", "ghost"),
            assignees=[a["login"] for a in node.get("assignees") or []],
            milestone=milestone.get("title"),
            labels=[Label(id=label["id"], name=label["name"]) for label in node.get("labels") or []],
            comments=node.get("comments", 0),
            reactions=(node.get("reactions") or {}).get("total_count", 0),
            state=node.get("state", "open"),
        )

    def fetch_all_issues(self, org: str, repo: str) -> list[Issue]:
        nodes = self._get_all(f"/repos/{org}/{repo}/issues", params={"state": "all", "filter": "all"})
        # /issues also returns pull requests; they carry a pull_request key
        return [self._issue_from_node(node) for node in nodes if "pull_request" not in node]

    def fetch_all_comments(self, org: str, repo: str, issue_number: int) -> list[Comment]:
        nodes = self._get_all(f"/repos/{org}/{repo}/issues/{issue_number}/comments")
        return [Comment(issue_number=issue_number, author=(node.get("user") or {}).get("login", "ghost")) for node in nodes]

    def fetch_all_labels(self, org: str, repo: str) -> list[Label]:
        nodes = self._get_all(f"/repos/{org}/{repo}/labels")
        return [Label(id=node["id"], name=node["name"]) for node in nodes]

    def update_issue_labels(
        self,
        org: str,
        repo: str,
        issue_number: int,
        add_label: str | None = None,
        remove_label: str | None = None,
    ) -> None:
        if add_label:
            self._request("POST", f"/repos/{org}/{repo}/issues/{issue_number}/labels", json={"labels": [add_label]})
        if remove_label:
            self._request("DELETE", f"/repos/{org}/{repo}/issues/{issue_number}/labels/{quote(remove_label, safe='')}")

    def search_open_issues_by_label(self, org: str, repo: str, label: str) -> list[Issue]:
        query = f'repo:{org}/{repo} is:issue is:open label:"{label}"'
        nodes = self._get_all("/search/issues", params={"q": query})
        return [self._issue_from_node(node) for node in nodes]
