"""
Ingest package: download raw records for every configured query and normalize them.
"""
from typing import Dict, List, Optional, Tuple

from config.loader import resolve_api_key, tracker_for
from correlate.models import Key, QueryArena
from correlate.resolver import SearchResults
from normalize.models import AbstractTicket, Service, TrackerInstance
from normalize.trackers import normalize_records

from .bugzilla import BugzillaClient
from .jira import JiraClient

CLIENTS = {
    Service.BUGZILLA: BugzillaClient,
    Service.JIRA: JiraClient,
}


def client_for(instance: TrackerInstance, api_key: Optional[str] = None):
    """Build the client for a tracker. Without an explicit key, the configured or environment key is used."""
    return CLIENTS[instance.service](instance.host, api_key or resolve_api_key(instance))


def fetch_tickets(arena: QueryArena, trackers: Dict[Service, TrackerInstance], clients: Optional[Dict[Service, object]] = None) -> Tuple[List[AbstractTicket], SearchResults]:
    """
    Download and normalize the tickets of every query in the arena.

    Parameters:
        arena: configured queries.
        trackers: configured tracker instances.
        clients: optional pre-built clients per service.

    Returns:
        (tickets fetched by key, tickets per (service, search string)), ready for resolve_queries().
    """
    clients = dict(clients or {})
    tickets: List[AbstractTicket] = []
    searches: SearchResults = {}
    for service in Service:
        queries = arena.by_tracker(service)
        if not queries:
            continue
        instance = tracker_for(trackers, service)
        client = clients.get(service) or client_for(instance)
        keys: List[str] = []
        for q in queries:
            if isinstance(q.using, Key) and q.using.value not in keys:
                keys.append(q.using.value)
        if keys:
            tickets.extend(normalize_records(client.by_keys(keys), instance))
        for q in queries:
            if not isinstance(q.using, Key) and (service, q.using.value) not in searches:
                searches[(service, q.using.value)] = normalize_records(client.search(q.using.value), instance)
    return tickets, searches


def fetch_single(key: str, instance: TrackerInstance, api_key: Optional[str] = None) -> AbstractTicket:
    """Download and normalize one ticket, as requested on the command line."""
    raw = client_for(instance, api_key).by_key(key)
    return normalize_records([raw], instance)[0]


__all__ = ["BugzillaClient", "JiraClient", "client_for", "fetch_tickets", "fetch_single"]
