"""
Bugzilla ingestion client.
Downloads raw bugs by ID or by a free-form search query from the Bugzilla REST API.
"""

import logging
from typing import List, Dict, Any, Sequence
from urllib.parse import parse_qsl

import requests

from errors import TrackerError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30

# _default covers the standard fields, _extra adds flags and custom fields
INCLUDE_FIELDS = "_default,_extra,pool,flags"


class BugzillaClient:
    """Minimal Bugzilla client returning raw bug dicts."""

    def __init__(self, host: str, api_key: str):
        self.host = host.rstrip('/')
        self.base_url = f"{self.host}/rest/bug"
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }

    def _get(self, url: str, params) -> List[Dict[str, Any]]:
        try:
            resp = requests.get(url, headers=self.headers, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise TrackerError(f"Failed to download tickets from Bugzilla: {exc}") from exc
        if resp.status_code != 200:
            raise TrackerError(f"Bugzilla request to {url} failed with status {resp.status_code}.")
        return resp.json().get('bugs', [])

    def bugs(self, ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Return the bugs with the given IDs. Bugzilla silently skips IDs that don't exist."""
        if not ids:
            return []
        params = {"id": ",".join(str(i) for i in ids), "include_fields": INCLUDE_FIELDS}
        bugs = self._get(self.base_url, params)
        logger.debug("Bugzilla returned %d of %d requested bugs", len(bugs), len(ids))
        return bugs

    def bug(self, bug_id: str) -> Dict[str, Any]:
        bugs = self._get(f"{self.base_url}/{bug_id}", {"include_fields": INCLUDE_FIELDS})
        if not bugs:
            raise TrackerError(f"Bug {bug_id} was not found in Bugzilla.")
        return bugs[0]

    def search(self, query: str) -> List[Dict[str, Any]]:
        """Run a search written as a Bugzilla URL query string, such as `product=Foo&status=NEW`."""
        params = parse_qsl(query.lstrip('?'), keep_blank_values=True)
        params.append(("include_fields", INCLUDE_FIELDS))
        return self._get(self.base_url, params)

    # names shared with JiraClient
    by_keys = bugs
    by_key = bug
