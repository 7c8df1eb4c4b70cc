"""
Match fetched tickets back to the configured queries.

The output follows the configuration order: all matches of the first query,
then all matches of the second, and so on. A query that matches nothing
aborts the whole run, because a silently missing ticket would produce an
incomplete release notes document.
"""
from typing import Dict, List, Optional, Tuple

from errors import QueryResolutionError
from correlate.models import Key, QueryArena, TicketQuery
from normalize.models import AbstractTicket, Service

SearchResults = Dict[Tuple[Service, str], List[AbstractTicket]]


def match_query(query: TicketQuery, tickets: List[AbstractTicket], searches: Optional[SearchResults] = None) -> List[AbstractTicket]:
    """Return every ticket produced by the query, in tracker order."""
    if isinstance(query.using, Key):
        return [t for t in tickets if t.id.tracker is query.tracker and t.id.key == query.using.value]
    return list((searches or {}).get((query.tracker, query.using.value), []))


def _matches_or_fail(query: TicketQuery, tickets, searches) -> List[AbstractTicket]:
    matching = match_query(query, tickets, searches)
    if not matching:
        raise QueryResolutionError(query)
    return matching


def resolve_queries(arena: QueryArena, tickets: List[AbstractTicket], searches: Optional[SearchResults] = None) -> List[AbstractTicket]:
    """
    Sort the fetched tickets into the order of the configured queries.

    Parameters:
        arena: all configured queries, including entries that are only referenced.
        tickets: tickets fetched by key, in any order.
        searches: tickets fetched for each (tracker, search string).

    Returns:
        copies of the matching tickets with query overrides applied and references attached.
    """
    resolved: List[AbstractTicket] = []
    for query in arena.configured():
        matching = _matches_or_fail(query, tickets, searches)
        references: List[AbstractTicket] = []
        for ref in arena.referenced(query):
            references.extend(t.with_overrides(ref.overrides) for t in _matches_or_fail(ref, tickets, searches))
        for ticket in matching:
            result = ticket.with_overrides(query.overrides)
            # each ticket owns its own copies of the references
            result.references = [r.with_overrides(None) for r in references]
            resolved.append(result)
    return resolved
