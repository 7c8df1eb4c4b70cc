"""
Release note quality checks.
Each ticket gets one Status per check category; Checks.overall() reduces them to the most severe one.
"""
import enum
import re
from typing import Optional, Sequence

from normalize.models import AbstractTicket, DocTextStatus

# statuses that mean the ticket is still in early development
EARLY_DEVELOPMENT_STATUSES = ('to do', 'new', 'assigned', 'modified')

# placeholder doc type that the author never changed
UNSET_DOC_TYPE = 'If docs needed, set a value'

# these doc types don't belong to any particular target release
UNCHECKED_DOC_TYPES = ('known issue', 'technology preview', 'deprecated functionality')

COMMENT_PREFIX = '//'
TITLE_PATTERN = re.compile(r"\.\S+")


class Severity(enum.IntEnum):
    OK = 0
    WARNING = 1
    ERROR = 2


class Status:
    """The outcome of a single check: OK, or a warning or error with a reason."""

    COLORS = {Severity.OK: 'green', Severity.WARNING: 'orange', Severity.ERROR: 'red'}

    def __init__(self, severity: Severity = Severity.OK, reason: str = ''):
        self.severity = severity
        self.reason = reason

    @classmethod
    def ok(cls) -> "Status":
        return cls(Severity.OK)

    @classmethod
    def warning(cls, reason: str) -> "Status":
        return cls(Severity.WARNING, reason)

    @classmethod
    def error(cls, reason: str) -> "Status":
        return cls(Severity.ERROR, reason)

    @property
    def message(self) -> str:
        return self.reason if self.severity is not Severity.OK else 'OK'

    @property
    def color(self) -> str:
        return self.COLORS[self.severity]

    def __eq__(self, other):
        if isinstance(other, Status):
            return (self.severity, self.reason) == (other.severity, other.reason)
        return NotImplemented

    def __hash__(self):
        return hash((self.severity, self.reason))

    def __repr__(self):
        if self.severity is Severity.OK:
            return "Status.ok()"
        return f"Status.{self.severity.name.lower()}({self.reason!r})"


class Checks:
    """
    All check results of a single ticket.
    """

    def __init__(self, development: Status, doc_type: Status, doc_status: Status, title_and_text: Status, target_release: Status):
        self.development = development
        self.doc_type = doc_type
        self.doc_status = doc_status
        self.title_and_text = title_and_text
        self.target_release = target_release

    def items(self):
        return [self.doc_type, self.title_and_text, self.doc_status, self.development, self.target_release]

    def overall(self) -> Status:
        """Return an error with all error reasons if any check failed,
        otherwise a warning with all warning reasons if any check warned, otherwise OK.
        """
        errors = [s.reason for s in self.items() if s.severity is Severity.ERROR]
        if errors:
            return Status.error(" ".join(errors))
        warnings = [s.reason for s in self.items() if s.severity is Severity.WARNING]
        if warnings:
            return Status.warning(" ".join(warnings))
        return Status.ok()

    def to_dict(self) -> dict:
        return {
            'development': self.development.message,
            'doc_type': self.doc_type.message,
            'doc_status': self.doc_status.message,
            'title_and_text': self.title_and_text.message,
            'target_release': self.target_release.message,
            'overall': self.overall().message,
        }


def check_devel_status(status: str) -> Status:
    if (status or '').lower() in EARLY_DEVELOPMENT_STATUSES:
        return Status.warning("Early development.")
    return Status.ok()


def check_title(text: Optional[str]) -> Status:
    """The first line that is neither blank nor a comment must be an AsciiDoc block title."""
    for line in (text or '').splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        if TITLE_PATTERN.match(stripped):
            return Status.ok()
        return Status.error("First line is not a title.")
    return Status.error("The release note is empty.")


def check_doc_type(doc_type: Optional[str]) -> Status:
    if doc_type == UNSET_DOC_TYPE:
        return Status.error("Bad doc type.")
    return Status.ok()


def check_doc_text_status(status: DocTextStatus) -> Status:
    if status is DocTextStatus.APPROVED:
        return Status.ok()
    if status is DocTextStatus.IN_PROGRESS:
        return Status.error("Release note not approved.")
    return Status.error("Release note disabled.")


def check_target_release(ticket_releases: Sequence[str], likely_release: Optional[str], doc_type: Optional[str]) -> Status:
    if likely_release is None:
        return Status.ok()
    if likely_release in ticket_releases or (doc_type or '').lower() in UNCHECKED_DOC_TYPES:
        return Status.ok()
    return Status.warning("Check target release.")


def check_ticket(ticket: AbstractTicket, likely_release: Optional[str] = None) -> Checks:
    """Analyze the release note status of the ticket against the most likely release of the project."""
    return Checks(
        development=check_devel_status(ticket.status),
        doc_type=check_doc_type(ticket.doc_type),
        doc_status=check_doc_text_status(ticket.doc_text_status),
        title_and_text=check_title(ticket.doc_text),
        target_release=check_target_release(ticket.target_releases, likely_release, ticket.doc_type),
    )
