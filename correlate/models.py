"""
Ticket queries as configured by the user.

A query asks one tracker for either a single ticket key or a free-form search.
Queries live in a QueryArena and refer to each other by index; a query can only
refer to entries that are already in the arena, so references never form cycles.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from normalize.models import Overrides, Service


@dataclass(frozen=True)
class Key:
    """Request a specific ticket by its key."""
    value: str

    def __str__(self):
        return f"key {self.value}"


@dataclass(frozen=True)
class Search:
    """Request all tickets matching a free-form search string."""
    value: str

    def __str__(self):
        return f"search {self.value!r}"


KeyOrSearch = Union[Key, Search]


@dataclass(frozen=True)
class TicketQuery:
    tracker: Service
    using: KeyOrSearch
    overrides: Optional[Overrides] = None
    references: tuple = ()

    def __str__(self):
        return f"{self.tracker.value}: {self.using}"


@dataclass
class QueryArena:
    """Append-only storage of queries addressed by their index."""
    queries: List[TicketQuery] = field(default_factory=list)
    top_level: List[int] = field(default_factory=list)

    def add(self, query: TicketQuery, top_level: bool = True) -> int:
        for ref in query.references:
            if not isinstance(ref, int) or not 0 <= ref < len(self.queries):
                raise ValueError(f"Query {query} references an unknown entry: {ref!r}")
        self.queries.append(query)
        index = len(self.queries) - 1
        if top_level:
            self.top_level.append(index)
        return index

    def __getitem__(self, index: int) -> TicketQuery:
        return self.queries[index]

    def __len__(self):
        return len(self.queries)

    def configured(self) -> List[TicketQuery]:
        """Top-level queries in the order of the configuration file."""
        return [self.queries[i] for i in self.top_level]

    def referenced(self, query: TicketQuery) -> List[TicketQuery]:
        return [self.queries[i] for i in query.references]

    def by_tracker(self, tracker: Service) -> List[TicketQuery]:
        return [q for q in self.queries if q.tracker is tracker]
