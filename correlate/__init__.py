"""
Correlate package: expose query resolution for matching fetched tickets to configured queries.
"""

from .models import Key, Search, TicketQuery, QueryArena
from .resolver import resolve_queries, match_query

__all__ = ["Key", "Search", "TicketQuery", "QueryArena", "resolve_queries", "match_query"]
