"""
Project-wide release note statistics.
Folds per-ticket check results into overall progress and per-writer statistics.
Everything here is recomputed for every report and never cached.
"""
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import List, Optional, Tuple

from normalize.models import AbstractTicket
from scoring.checks import Checks, Severity, check_ticket
from scoring.utils import percentage, most_common, list_or_placeholder


class OverallProgress:
    """
    Completeness across all tickets.
    """

    def __init__(self, all: int = 0, complete: int = 0, warnings: int = 0, incomplete: int = 0):
        self.all = all
        self.complete = complete
        self.warnings = warnings
        self.incomplete = incomplete
        self.complete_pct = percentage(complete, all)
        self.warnings_pct = percentage(warnings, all)
        self.incomplete_pct = percentage(incomplete, all)

    @classmethod
    def from_checks(cls, checks: List[Checks]) -> "OverallProgress":
        overall = [c.overall().severity for c in checks]
        return cls(
            all=len(overall),
            complete=overall.count(Severity.OK),
            warnings=overall.count(Severity.WARNING),
            incomplete=overall.count(Severity.ERROR),
        )

    def to_dict(self) -> dict:
        return {
            'all': self.all,
            'complete': self.complete,
            'complete_pct': self.complete_pct,
            'warnings': self.warnings,
            'warnings_pct': self.warnings_pct,
            'incomplete': self.incomplete,
            'incomplete_pct': self.incomplete_pct,
        }


class WriterStats:
    """Release notes assigned to one docs contact and how complete they are."""

    def __init__(self, name: str):
        self.name = name
        self.total = 0
        self.complete = 0
        self.warnings = 0
        self.incomplete = 0

    def update(self, checks: Checks):
        self.total += 1
        severity = checks.overall().severity
        if severity is Severity.OK:
            self.complete += 1
        elif severity is Severity.WARNING:
            self.warnings += 1
        else:
            self.incomplete += 1

    def percent(self) -> float:
        return percentage(self.complete, self.total)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'total': self.total,
            'complete': self.complete,
            'warnings': self.warnings,
            'incomplete': self.incomplete,
            'percent': self.percent(),
        }


def calculate_writer_stats(tickets_with_checks: List[Tuple[AbstractTicket, Checks]]) -> List[WriterStats]:
    """Group tickets by docs contact, sorted by the number of assigned release notes, descending.
    Tickets without a docs contact share the placeholder group.
    """
    writers = {}
    for ticket, checks in tickets_with_checks:
        name = ticket.docs_contact.as_str()
        if name not in writers:
            writers[name] = WriterStats(name)
        writers[name].update(checks)
    return sorted(writers.values(), key=lambda w: -w.total)


def combined_products(tickets: List[AbstractTicket]) -> List[str]:
    """Up to 3 most common products across the tickets."""
    return most_common(t.product for t in tickets)


def combined_releases(tickets: List[AbstractTicket]) -> List[str]:
    """Up to 3 most common target releases; every release of every ticket counts."""
    return most_common(release for t in tickets for release in t.target_releases)


class StatusReport:
    """Everything the status table renders."""

    def __init__(self, products: str, release: str, likely_release: Optional[str], overall_progress: OverallProgress, tickets_with_checks: List[Tuple[AbstractTicket, Checks]], per_writer_stats: List[WriterStats], generated_date: str):
        self.products = products
        self.release = release
        self.likely_release = likely_release
        self.overall_progress = overall_progress
        self.tickets_with_checks = tickets_with_checks
        self.per_writer_stats = per_writer_stats
        self.generated_date = generated_date

    def to_dict(self) -> dict:
        return {
            'products': self.products,
            'release': self.release,
            'likely_release': self.likely_release,
            'generated_date': self.generated_date,
            'overall_progress': self.overall_progress.to_dict(),
            'per_writer_stats': [w.to_dict() for w in self.per_writer_stats],
            'tickets': [
                {'ticket': t.to_dict(), 'checks': c.to_dict()} for t, c in self.tickets_with_checks
            ],
        }


def analyze_status(tickets: List[AbstractTicket], now: Optional[datetime] = None) -> StatusReport:
    """
    Check every ticket and compute the project-wide statistics.

    The most common target release across all tickets is the likely release
    that each ticket's target release is compared against.
    """
    products = combined_products(tickets)
    releases = combined_releases(tickets)
    likely_release = releases[0] if releases else None

    tickets_with_checks = [(t, check_ticket(t, likely_release)) for t in tickets]
    overall_progress = OverallProgress.from_checks([c for _t, c in tickets_with_checks])
    writer_stats = calculate_writer_stats(tickets_with_checks)

    return StatusReport(
        products=list_or_placeholder(products, 'products'),
        release=list_or_placeholder(releases, 'releases'),
        likely_release=likely_release,
        overall_progress=overall_progress,
        tickets_with_checks=tickets_with_checks,
        per_writer_stats=writer_stats,
        generated_date=format_datetime(now or datetime.now(timezone.utc)),
    )
