"""
Configuration loader for a release notes project.

Reads the trackers configuration (host, credentials and field names per tracker)
and the tickets configuration (the list of queries) from YAML files.
"""
import logging
import os
from typing import Dict, Any, Optional, Tuple

import yaml

from errors import ConfigError, CredentialError
from correlate.models import Key, KeyOrSearch, Search, TicketQuery, QueryArena
from normalize.models import FieldsConfig, Overrides, Service, TrackerInstance

logger = logging.getLogger(__name__)

TRACKERS_FILENAME = 'trackers.yaml'
TICKETS_FILENAME = 'tickets.yaml'

# environment variables consulted when a tracker has no api_key configured
API_KEY_VARIABLES = {
    Service.BUGZILLA: 'BZ_API_KEY',
    Service.JIRA: 'JIRA_API_KEY',
}

FIELD_NAMES = ('doc_type', 'doc_text', 'doc_text_status', 'target_release', 'subsystems', 'docs_contact')
REQUIRED_FIELDS = {
    Service.BUGZILLA: ('doc_type', 'doc_text', 'doc_text_status'),
    Service.JIRA: ('doc_type', 'doc_text', 'doc_text_status', 'docs_contact'),
}
TRACKER_KEYS = ('host', 'api_key', 'fields')
QUERY_OPTION_KEYS = ('overrides', 'references')
OVERRIDE_KEYS = ('doc_type', 'components', 'subsystems')


def _read_yaml(path: str, description: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read the {description} file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse the {description} file {path}: {exc}") from exc


def _reject_unknown(mapping: Dict[str, Any], allowed, where: str):
    unknown = sorted(set(mapping) - set(allowed))
    if unknown:
        raise ConfigError(f"Unknown keys in {where}: {', '.join(map(str, unknown))}")


def _string_list(value, where: str) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where} must be a list of strings, not {value!r}")
    return tuple(value)


def parse_fields(raw, service: Service) -> FieldsConfig:
    where = f"the {service.value} fields"
    if not isinstance(raw, dict):
        raise ConfigError(f"Missing {where} configuration.")
    _reject_unknown(raw, FIELD_NAMES, where)
    for name in REQUIRED_FIELDS[service]:
        if name not in raw:
            raise ConfigError(f"The `{name}` entry is required in {where}.")
    values = {name: _string_list(raw[name], f"`{name}` in {where}") for name in FIELD_NAMES if raw.get(name) is not None}
    return FieldsConfig(**values)


def parse_trackers(data) -> Dict[Service, TrackerInstance]:
    """Convert the parsed trackers YAML document into TrackerInstance objects keyed by service."""
    if not isinstance(data, dict):
        raise ConfigError("The trackers configuration must be a mapping with `bugzilla` and `jira` entries.")
    trackers: Dict[Service, TrackerInstance] = {}
    for name, raw in data.items():
        try:
            service = Service.parse(name)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        if not isinstance(raw, dict) or 'host' not in raw:
            raise ConfigError(f"The {service.value} tracker needs at least a `host` entry.")
        _reject_unknown(raw, TRACKER_KEYS, f"the {service.value} tracker")
        trackers[service] = TrackerInstance(
            service=service,
            host=str(raw['host']),
            fields=parse_fields(raw.get('fields'), service),
            api_key=raw.get('api_key'),
        )
    return trackers


def _parse_key(value) -> str:
    # Bugzilla keys are often written as bare numbers
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ConfigError(f"A ticket key must be a string or a number, not {value!r}")
    return str(value)


def _parse_identifier(raw) -> KeyOrSearch:
    if not isinstance(raw, dict):
        raise ConfigError(f"A ticket identifier must be a mapping with `key` or `search`, not {raw!r}")
    _reject_unknown(raw, ('key', 'search'), 'a ticket identifier')
    key, search = raw.get('key'), raw.get('search')
    if key is not None and search is not None:
        raise ConfigError(f"Please specify only one of `key` or `search`: {raw!r}")
    if key is None and search is None:
        raise ConfigError(f"Please specify either `key` or `search`: {raw!r}")
    if key is not None:
        return Key(_parse_key(key))
    if not isinstance(search, str):
        raise ConfigError(f"A search must be a string, not {search!r}")
    return Search(search)


def _parse_overrides(raw) -> Optional[Overrides]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError(f"Overrides must be a mapping, not {raw!r}")
    _reject_unknown(raw, OVERRIDE_KEYS, 'overrides')
    doc_type = raw.get('doc_type')
    if doc_type is not None and not isinstance(doc_type, str):
        raise ConfigError(f"The doc_type override must be a string, not {doc_type!r}")
    components = raw.get('components')
    subsystems = raw.get('subsystems')
    return Overrides(
        doc_type=doc_type,
        components=_string_list(components, 'The components override') if components is not None else None,
        subsystems=_string_list(subsystems, 'The subsystems override') if subsystems is not None else None,
    )


def _add_entry(arena: QueryArena, entry, top_level: bool) -> int:
    """Add a query entry and, before it, every entry it references. Returns the entry index."""
    if not isinstance(entry, list) or len(entry) not in (2, 3):
        raise ConfigError(f"A ticket entry must be a list of [tracker, identifier, options]: {entry!r}")
    try:
        tracker = Service.parse(entry[0])
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    using = _parse_identifier(entry[1])
    options = entry[2] if len(entry) == 3 else {}
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError(f"Ticket options must be a mapping, not {options!r}")
    _reject_unknown(options, QUERY_OPTION_KEYS, 'ticket options')
    refs = options.get('references') or []
    if not isinstance(refs, list):
        raise ConfigError(f"References must be a list of ticket entries, not {refs!r}")
    ref_indices = tuple(_add_entry(arena, ref, top_level=False) for ref in refs)
    query = TicketQuery(tracker=tracker, using=using, overrides=_parse_overrides(options.get('overrides')), references=ref_indices)
    return arena.add(query, top_level=top_level)


def parse_tickets(data) -> QueryArena:
    """Convert the parsed tickets YAML document into a QueryArena."""
    if data is None:
        data = []
    if not isinstance(data, list):
        raise ConfigError("The tickets configuration must be a list of ticket entries.")
    arena = QueryArena()
    for entry in data:
        _add_entry(arena, entry, top_level=True)
    return arena


def load_trackers(path: str) -> Dict[Service, TrackerInstance]:
    trackers = parse_trackers(_read_yaml(path, 'trackers configuration'))
    logger.debug("Trackers: %r", trackers)
    return trackers


def load_tickets(path: str) -> QueryArena:
    arena = parse_tickets(_read_yaml(path, 'tickets configuration'))
    logger.debug("Ticket queries: %r", arena.queries)
    return arena


def load_project(directory: str) -> Tuple[Dict[Service, TrackerInstance], QueryArena]:
    """Load trackers.yaml and tickets.yaml from a project directory."""
    if not os.path.isdir(directory):
        raise ConfigError(f"The configuration directory is missing: {directory}")
    trackers_path = os.path.join(directory, TRACKERS_FILENAME)
    tickets_path = os.path.join(directory, TICKETS_FILENAME)
    logger.debug("Configuration files:\n* %s\n* %s", trackers_path, tickets_path)
    return load_trackers(trackers_path), load_tickets(tickets_path)


def resolve_api_key(instance: TrackerInstance, environ: Optional[Dict[str, str]] = None) -> str:
    """Return the configured API key, falling back on the tracker's environment variable."""
    if instance.api_key:
        return instance.api_key
    env = os.environ if environ is None else environ
    variable = API_KEY_VARIABLES[instance.service]
    value = env.get(variable)
    if not value:
        raise CredentialError(variable)
    return value


def tracker_for(trackers: Dict[Service, TrackerInstance], service: Service) -> TrackerInstance:
    try:
        return trackers[service]
    except KeyError:
        raise ConfigError(f"The {service.value} tracker is not configured.") from None
