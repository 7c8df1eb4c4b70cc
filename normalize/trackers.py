"""
Tracker adapters: convert raw Bugzilla bugs and Jira issues into AbstractTicket objects.

Each adapter knows the field layout of one tracker. Callers pick the adapter
once per record with adapter_for() and never branch on the tracker afterwards.
"""
import logging
from typing import Dict, Any, List, Optional

from errors import FieldResolutionError, ClassificationError
from normalize.models import (
    AbstractTicket,
    DocsContact,
    DocTextStatus,
    Overrides,
    Service,
    TicketId,
    TrackerInstance,
)
from normalize.util import (
    extract_field,
    classify_doc_text_status,
    readable_errors,
    DEFAULT_DOC_TEXT_STATUS,
)

logger = logging.getLogger(__name__)

# Bugzilla represents an unset release with a placeholder value
UNSET_RELEASES = ('---', '')


def _name_of(obj: Any) -> str:
    if isinstance(obj, dict):
        return obj.get('name') or ''
    return obj or ''


class TrackerAdapter:
    """
    The capability set that every tracker adapter implements.
    """
    service: Service

    def __init__(self, instance: TrackerInstance):
        self.instance = instance
        self.fields = instance.fields

    def ticket_id(self, record: Dict[str, Any]) -> TicketId:
        raise NotImplementedError

    def doc_type(self, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    def doc_text(self, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    def doc_text_status(self, record: Dict[str, Any]) -> DocTextStatus:
        raise NotImplementedError

    def target_releases(self, record: Dict[str, Any]) -> List[str]:
        raise NotImplementedError

    def subsystems(self, record: Dict[str, Any]) -> List[str]:
        raise NotImplementedError

    def docs_contact(self, record: Dict[str, Any]) -> DocsContact:
        raise NotImplementedError

    def url(self, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    def build(self, record: Dict[str, Any]) -> AbstractTicket:
        raise NotImplementedError


class BugzillaAdapter(TrackerAdapter):
    """Bugzilla keeps its custom fields at the top level of the bug, next to the standard ones."""
    service = Service.BUGZILLA

    def ticket_id(self, record):
        return TicketId(key=str(record.get('id', '')), tracker=self.service)

    def doc_type(self, record):
        bug_id = record.get('id')
        try:
            return extract_field(record, self.fields.doc_type, bug_id)
        except FieldResolutionError as exc:
            raise FieldResolutionError(f"Failed to extract the doc type of bug {bug_id}.\n{exc}", exc.fields, exc.errors) from exc

    def doc_text(self, record):
        bug_id = record.get('id')
        try:
            return extract_field(record, self.fields.doc_text, bug_id)
        except FieldResolutionError as exc:
            raise FieldResolutionError(f"Failed to extract the doc text of bug {bug_id}.\n{exc}", exc.fields, exc.errors) from exc

    def target_releases(self, record):
        bug_id = record.get('id')
        fields = self.fields.target_release or ('target_release',)
        try:
            release = extract_field(record, fields, bug_id)
        except FieldResolutionError:
            # the target release is not critical
            logger.warning("Failed to extract the target release of bug %s.", bug_id)
            return []
        if release in UNSET_RELEASES:
            return []
        return [release]

    def subsystems(self, record):
        bug_id = record.get('id')
        if not self.fields.subsystems:
            return []
        errors: List[str] = []
        for field in self.fields.subsystems:
            if field not in record:
                errors.append(f"Field `{field}` is missing in bug {bug_id}.")
                continue
            pool = record[field]
            team = pool.get('team') if isinstance(pool, dict) else None
            name = team.get('name') if isinstance(team, dict) else None
            if isinstance(name, str):
                # a bug belongs to exactly one pool
                return [name]
            errors.append(f"Field `{field}` has an unexpected structure in bug {bug_id}: {pool!r}")
        raise FieldResolutionError(
            f"The pool field is missing or malformed in bug {bug_id}.\n"
            f"The configured fields are: {list(self.fields.subsystems)}{readable_errors(errors)}",
            self.fields.subsystems,
            errors,
        )

    def doc_text_status(self, record):
        bug_id = record.get('id')
        flag_name = self.fields.doc_text_status[0] if self.fields.doc_text_status else 'requires_doc_text'
        token = None
        for flag in record.get('flags') or []:
            if isinstance(flag, dict) and flag.get('name') == flag_name:
                token = flag.get('status')
                break
        if token is None:
            logger.warning("The `%s` flag is missing in bug %s.", flag_name, bug_id)
            token = DEFAULT_DOC_TEXT_STATUS
        try:
            return classify_doc_text_status(token)
        except ClassificationError as exc:
            raise ClassificationError(token, bug_id) from exc

    def docs_contact(self, record):
        fields = self.fields.docs_contact or ('docs_contact',)
        for field in fields:
            value = record.get(field)
            if isinstance(value, str):
                return DocsContact(value)
        logger.warning("The `docs_contact` field is missing in bug %s.", record.get('id'))
        return DocsContact(None)

    def url(self, record):
        return f"{self.instance.host.rstrip('/')}/show_bug.cgi?id={record.get('id')}"

    def _flags(self, record) -> Optional[List[str]]:
        flags = record.get('flags')
        if flags is None:
            return None
        return [f"{f.get('name')}: {f.get('status')}" for f in flags if isinstance(f, dict)]

    def build(self, record):
        groups = list(record.get('groups') or [])
        return AbstractTicket(
            ticket_id=self.ticket_id(record),
            summary=record.get('summary') or '',
            description=None,
            doc_type=self.doc_type(record),
            doc_text=self.doc_text(record),
            doc_text_status=self.doc_text_status(record),
            docs_contact=self.docs_contact(record),
            status=record.get('status') or '',
            is_open=bool(record.get('is_open', True)),
            priority=record.get('priority') or '',
            url=self.url(record),
            assignee=record.get('assigned_to'),
            components=list(record.get('component') or []),
            product=record.get('product') or '',
            labels=None,
            flags=self._flags(record),
            target_releases=self.target_releases(record),
            subsystems=self.subsystems(record),
            groups=groups,
            public=not groups,
        )


class JiraAdapter(TrackerAdapter):
    """Jira nests all fields, custom ones included, under the `fields` object of the issue."""
    service = Service.JIRA

    @staticmethod
    def _extra(record) -> Dict[str, Any]:
        fields = record.get('fields')
        return fields if isinstance(fields, dict) else {}

    def ticket_id(self, record):
        return TicketId(key=str(record.get('key', '')), tracker=self.service)

    def doc_type(self, record):
        key = record.get('key')
        if not self.fields.doc_type:
            raise FieldResolutionError(f"No doc type field is configured for issue {key}.")
        field = self.fields.doc_type[0]
        extra = self._extra(record)
        if field not in extra:
            raise FieldResolutionError(f"The `{field}` field is missing in issue {key}.", [field])
        value = extra[field]
        if not isinstance(value, dict) or not isinstance(value.get('value'), str):
            raise FieldResolutionError(
                f"The doc type field has an unexpected structure in issue {key}:\n{value!r}", [field]
            )
        return value['value']

    def doc_text(self, record):
        key = record.get('key')
        try:
            return extract_field(self._extra(record), self.fields.doc_text, key)
        except FieldResolutionError as exc:
            raise FieldResolutionError(f"Failed to extract the doc text of issue {key}.\n{exc}", exc.fields, exc.errors) from exc

    def target_releases(self, record):
        return [_name_of(v) for v in self._extra(record).get('fixVersions') or []]

    def subsystems(self, record):
        key = record.get('key')
        if not self.fields.subsystems:
            return []
        extra = self._extra(record)
        errors: List[str] = []
        for field in self.fields.subsystems:
            if field not in extra:
                continue
            ssts = extra[field]
            if isinstance(ssts, list) and all(isinstance(s, dict) and isinstance(s.get('value'), str) for s in ssts):
                return [s['value'] for s in ssts]
            errors.append(f"Field `{field}` is not a list of values in issue {key}: {ssts!r}")
        raise FieldResolutionError(
            f"The subsystems field is missing or has an unexpected structure in issue {key}.\n"
            f"The configured fields are: {list(self.fields.subsystems)}{readable_errors(errors)}",
            self.fields.subsystems,
            errors,
        )

    def doc_text_status(self, record):
        key = record.get('key')
        extra = self._extra(record)
        for field in self.fields.doc_text_status:
            value = extra.get(field)
            token = value.get('value') if isinstance(value, dict) else None
            if isinstance(token, str):
                try:
                    return classify_doc_text_status(token)
                except ClassificationError as exc:
                    raise ClassificationError(token, key) from exc
        raise FieldResolutionError(
            f"The doc text status field is missing or has an unexpected structure in issue {key}.\n"
            f"The configured fields are: {list(self.fields.doc_text_status)}",
            self.fields.doc_text_status,
        )

    def docs_contact(self, record):
        extra = self._extra(record)
        for field in self.fields.docs_contact:
            value = extra.get(field)
            email = value.get('emailAddress') if isinstance(value, dict) else None
            if isinstance(email, str):
                return DocsContact(email)
        logger.warning("The docs contact field is missing or has an unexpected structure in issue %s.", record.get('key'))
        logger.warning("The configured fields are: %s", list(self.fields.docs_contact))
        return DocsContact(None)

    def url(self, record):
        return f"{self.instance.host.rstrip('/')}/browse/{record.get('key')}"

    def build(self, record):
        extra = self._extra(record)
        status = _name_of(extra.get('status'))
        assignee = extra.get('assignee') or {}
        return AbstractTicket(
            ticket_id=self.ticket_id(record),
            summary=extra.get('summary') or '',
            description=extra.get('description'),
            doc_type=self.doc_type(record),
            doc_text=self.doc_text(record),
            doc_text_status=self.doc_text_status(record),
            docs_contact=self.docs_contact(record),
            status=status,
            is_open=status != 'Closed',
            priority=_name_of(extra.get('priority')),
            url=self.url(record),
            assignee=assignee.get('emailAddress') or assignee.get('name') or assignee.get('displayName') or None,
            components=[_name_of(c) for c in extra.get('components') or []],
            product=_name_of(extra.get('project')),
            labels=list(extra.get('labels') or []),
            flags=None,
            target_releases=self.target_releases(record),
            subsystems=self.subsystems(record),
            groups=None,
            public=False,
        )


ADAPTERS = {
    Service.BUGZILLA: BugzillaAdapter,
    Service.JIRA: JiraAdapter,
}


def adapter_for(instance: TrackerInstance) -> TrackerAdapter:
    return ADAPTERS[instance.service](instance)


def normalize_ticket(raw: Dict[str, Any], instance: TrackerInstance, overrides: Optional[Overrides] = None) -> AbstractTicket:
    """Create a normalized AbstractTicket from a raw tracker record.
    Overrides, when given, replace the doc type, components and subsystems reported by the tracker.
    """
    ticket = adapter_for(instance).build(raw)
    if overrides is not None and not overrides.is_empty():
        ticket = ticket.with_overrides(overrides)
    return ticket


def normalize_records(records: List[Dict[str, Any]], instance: TrackerInstance) -> List[AbstractTicket]:
    adapter = adapter_for(instance)
    return [adapter.build(r) for r in records or []]
