"""
Unified data models for normalized tickets.
Every tracker-specific record is converted into an AbstractTicket before any checks run.
"""
import copy
import enum
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Tuple

DOCS_CONTACT_PLACEHOLDER = "Missing docs contact"


class Service(enum.Enum):
    """An issue-tracking service, as in the platform."""
    BUGZILLA = "Bugzilla"
    JIRA = "Jira"

    @classmethod
    def parse(cls, name) -> "Service":
        """Parse a service name as written in the configuration. `BZ` is an alias for Bugzilla."""
        lowered = str(name).strip().lower()
        if lowered in ("bugzilla", "bz"):
            return cls.BUGZILLA
        if lowered == "jira":
            return cls.JIRA
        raise ValueError(f"Unknown issue tracker: {name!r}")

    @property
    def short_name(self) -> str:
        return "BZ" if self is Service.BUGZILLA else "Jira"

    def __str__(self):
        return self.value


class DocTextStatus(enum.Enum):
    """The status or progress of the release note."""
    APPROVED = "Done"
    IN_PROGRESS = "WIP"
    NO_DOCUMENTATION = "No docs"

    def __str__(self):
        return self.value


class DocsContact:
    """
    The docs contact email address of a ticket.
    Displays a placeholder when the address is absent or empty.
    """

    def __init__(self, email: Optional[str] = None):
        self.email = email

    def as_str(self) -> str:
        return self.email or DOCS_CONTACT_PLACEHOLDER

    def is_set(self) -> bool:
        return bool(self.email)

    def __str__(self):
        return self.as_str()

    def __eq__(self, other):
        if isinstance(other, DocsContact):
            return self.email == other.email
        return NotImplemented

    def __hash__(self):
        return hash(self.email)

    def __repr__(self):
        return f"DocsContact({self.email!r})"


@dataclass(frozen=True)
class TicketId:
    """Identification of the original ticket on the issue tracker."""
    key: str
    tracker: Service

    def __str__(self):
        return f"{self.tracker.short_name}#{self.key}"


@dataclass(frozen=True)
class FieldsConfig:
    """
    Ordered candidate field names for each logical field of a tracker.
    The first usable field wins, so the order is a priority list.
    """
    doc_type: Tuple[str, ...] = ()
    doc_text: Tuple[str, ...] = ()
    doc_text_status: Tuple[str, ...] = ()
    target_release: Tuple[str, ...] = ()
    subsystems: Tuple[str, ...] = ()
    docs_contact: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TrackerInstance:
    """A configured issue tracker: host URL, credentials and field names."""
    service: Service
    host: str
    fields: FieldsConfig
    api_key: Optional[str] = None


@dataclass(frozen=True)
class Overrides:
    """Configured values that replace what the tracker reports for a ticket."""
    doc_type: Optional[str] = None
    components: Optional[Tuple[str, ...]] = None
    subsystems: Optional[Tuple[str, ...]] = None

    def is_empty(self) -> bool:
        return self.doc_type is None and self.components is None and self.subsystems is None


def _unique(values) -> List[str]:
    seen = []
    for v in values or []:
        if v not in seen:
            seen.append(v)
    return seen


def _email_prefix(email: str) -> str:
    return email.split('@', 1)[0]


class AbstractTicket:
    """
    Tracker-agnostic ticket representation.
    Downstream code (checks, statistics, rendering) only ever sees this type.
    """

    def __init__(
        self,
        ticket_id: TicketId,
        summary: str,
        doc_text_status: DocTextStatus,
        description: Optional[str] = None,
        doc_type: Optional[str] = None,
        doc_text: Optional[str] = None,
        docs_contact: Optional[DocsContact] = None,
        status: str = '',
        is_open: bool = True,
        priority: str = '',
        url: str = '',
        assignee: Optional[str] = None,
        components: Optional[List[str]] = None,
        product: str = '',
        labels: Optional[List[str]] = None,
        flags: Optional[List[str]] = None,
        target_releases: Optional[List[str]] = None,
        subsystems: Optional[List[str]] = None,
        groups: Optional[List[str]] = None,
        public: bool = False,
        duplicates: Optional[List["AbstractTicket"]] = None,
        references: Optional[List["AbstractTicket"]] = None,
    ):
        if not isinstance(doc_text_status, DocTextStatus):
            raise TypeError(f"doc_text_status must be a DocTextStatus, not {doc_text_status!r}")
        self.id = ticket_id
        self.summary = summary
        self.description = description
        self.doc_type = doc_type
        self.doc_text = doc_text
        self.docs_contact = docs_contact or DocsContact(None)
        self.status = status
        self.is_open = is_open
        self.priority = priority
        self.url = url
        self.assignee = assignee
        self.components = _unique(components)
        self.product = product
        self.labels = labels
        self.flags = flags
        self.target_releases = list(target_releases or [])
        self.subsystems = list(subsystems or [])
        self.groups = groups
        self.public = public
        self.doc_text_status = doc_text_status
        self.duplicates: List[AbstractTicket] = []
        self.references: List[AbstractTicket] = []
        if duplicates:
            self.add_duplicates(duplicates)
        if references:
            self.references = [copy.deepcopy(r) for r in references]

    def add_duplicates(self, duplicates: List["AbstractTicket"]):
        """Attach owned copies of duplicate tickets.
        A ticket cannot duplicate itself, directly or through a duplicate's own duplicates.
        """
        for dup in duplicates:
            if self.id in dup._duplicate_ids():
                raise ValueError(f"Ticket {self.id} cannot be its own duplicate.")
            self.duplicates.append(copy.deepcopy(dup))

    def _duplicate_ids(self) -> List[TicketId]:
        ids = [self.id]
        for dup in self.duplicates:
            ids.extend(dup._duplicate_ids())
        return ids

    def with_overrides(self, overrides: Optional[Overrides]) -> "AbstractTicket":
        """Return a copy of this ticket with the configured overrides applied."""
        ticket = copy.deepcopy(self)
        if overrides is None:
            return ticket
        if overrides.doc_type is not None:
            ticket.doc_type = overrides.doc_type
        if overrides.components is not None:
            ticket.components = _unique(overrides.components)
        if overrides.subsystems is not None:
            ticket.subsystems = list(overrides.subsystems)
        return ticket

    # display helpers used by the status table

    def docs_contact_short(self) -> str:
        return _email_prefix(self.docs_contact.as_str())

    def assignee_short(self) -> str:
        if self.assignee:
            return _email_prefix(self.assignee)
        return "No assignee"

    def flags_or_labels(self) -> str:
        if self.flags:
            return ", ".join(self.flags)
        if self.labels:
            return ", ".join(self.labels)
        return "No flags or labels"

    def display_target_releases(self) -> str:
        return ", ".join(self.target_releases) if self.target_releases else "No releases"

    def display_subsystems(self) -> str:
        return ", ".join(self.subsystems) if self.subsystems else "No subsystems"

    def display_components(self) -> str:
        return ", ".join(self.components) if self.components else "No components"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': {'key': self.id.key, 'tracker': self.id.tracker.value},
            'summary': self.summary,
            'description': self.description,
            'doc_type': self.doc_type,
            'doc_text': self.doc_text,
            'docs_contact': self.docs_contact.email,
            'status': self.status,
            'is_open': self.is_open,
            'priority': self.priority,
            'url': self.url,
            'assignee': self.assignee,
            'components': list(self.components),
            'product': self.product,
            'labels': self.labels,
            'flags': self.flags,
            'target_releases': list(self.target_releases),
            'subsystems': list(self.subsystems),
            'groups': self.groups,
            'public': self.public,
            'doc_text_status': self.doc_text_status.name,
            'duplicates': [d.to_dict() for d in self.duplicates],
            'references': [r.to_dict() for r in self.references],
        }

    def __repr__(self):
        return f"AbstractTicket({self.id}, {self.summary!r})"
