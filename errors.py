"""
Error kinds raised while building the release notes status.
Every error carries enough context (ticket, field, query) to be reported as is.
"""
from typing import List, Optional, Sequence


class ReleaseNotesError(Exception):
    """Base class for all errors that abort a run."""


class FieldResolutionError(ReleaseNotesError):
    """
    None of the candidate fields of a ticket produced a usable value.
    """

    def __init__(self, message: str, fields: Optional[Sequence[str]] = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])
        self.errors = list(errors or [])


class ClassificationError(ReleaseNotesError):
    """A doc text status token is not one of the recognized values."""

    def __init__(self, token, ticket_id=None):
        message = f"Unrecognized doc text status value: {token!r}"
        if ticket_id is not None:
            message += f" in ticket {ticket_id}"
        super().__init__(message)
        self.token = token
        self.ticket_id = ticket_id


class QueryResolutionError(ReleaseNotesError):
    """A configured query matched no tickets."""

    def __init__(self, query):
        super().__init__(f"Query produced no tickets: {query}")
        self.query = query


class CredentialError(ReleaseNotesError):
    """No API key is configured for a tracker."""

    def __init__(self, variable: str):
        super().__init__(f"Set the {variable} environment variable or configure the api_key.")
        self.variable = variable


class ConfigError(ReleaseNotesError):
    """The configuration files are missing, unreadable or invalid."""


class TrackerError(ReleaseNotesError):
    """The issue tracker could not be reached or answered with an error."""
