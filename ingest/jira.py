"""
Jira ingestion client.
Downloads raw issues by key or by JQL search from the Jira REST API.
"""

import logging
from typing import List, Dict, Any, Sequence

import requests

from errors import TrackerError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class JiraClient:
    """Minimal Jira client returning raw issue dicts.

    Network interaction stays in _get so tests can mock requests.get.
    """

    def __init__(self, host: str, api_key: str, page_size: int = 50):
        self.host = host.rstrip('/')
        self.base_url = f"{self.host}/rest/api/2"
        self.page_size = page_size
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = requests.get(url, headers=self.headers, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise TrackerError(f"Failed to download tickets from Jira: {exc}") from exc
        if resp.status_code != 200:
            raise TrackerError(f"Jira request to {url} failed with status {resp.status_code}.")
        return resp.json()

    def search(self, jql: str) -> List[Dict[str, Any]]:
        """Return all issues matching the JQL query, following pagination."""
        url = f"{self.base_url}/search"
        issues: List[Dict[str, Any]] = []
        start_at = 0
        while True:
            # unknown keys in an `issuekey in (...)` query become warnings instead of a 400
            params = {"jql": jql, "startAt": start_at, "maxResults": self.page_size, "fields": "*all", "validateQuery": "warn"}
            data = self._get(url, params)
            page = data.get('issues', [])
            issues.extend(page)
            if len(page) < self.page_size or start_at + len(page) >= data.get('total', 0):
                break
            start_at += len(page)
        logger.debug("Jira search %r returned %d issues", jql, len(issues))
        return issues

    def issues(self, keys: Sequence[str]) -> List[Dict[str, Any]]:
        """Return the issues with the given keys. Unknown keys are simply absent from the result."""
        if not keys:
            return []
        return self.search(f"issuekey in ({','.join(keys)})")

    def issue(self, key: str) -> Dict[str, Any]:
        return self._get(f"{self.base_url}/issue/{key}", {})

    # names shared with BugzillaClient
    by_keys = issues
    by_key = issue
