"""Raw tracker records and tracker configuration shared by the tests."""
import copy

from normalize.models import FieldsConfig, Service, TrackerInstance

BZ = TrackerInstance(
    service=Service.BUGZILLA,
    host='https://bugzilla.example.com',
    fields=FieldsConfig(
        doc_type=('cf_doc_type',),
        doc_text=('cf_release_notes',),
        doc_text_status=('requires_doc_text',),
        target_release=('target_release',),
        subsystems=('pool',),
        docs_contact=('docs_contact',),
    ),
)

JIRA = TrackerInstance(
    service=Service.JIRA,
    host='https://jira.example.com/',
    fields=FieldsConfig(
        doc_type=('customfield_1',),
        doc_text=('customfield_2', 'customfield_20'),
        doc_text_status=('customfield_3',),
        subsystems=('customfield_50', 'customfield_5'),
        docs_contact=('customfield_40', 'customfield_4'),
    ),
)

BUG = {
    'id': 123,
    'summary': 'Crash on start',
    'status': 'VERIFIED',
    'is_open': True,
    'priority': 'high',
    'assigned_to': 'dev@example.com',
    'component': ['kernel', 'kernel'],
    'product': 'Fedora',
    'flags': [{'name': 'needinfo', 'status': '?'}, {'name': 'requires_doc_text', 'status': '+'}],
    'groups': [],
    'docs_contact': 'writer@example.com',
    'target_release': '9.0.1',
    'cf_doc_type': 'Bug Fix',
    'cf_release_notes': '.Crash fixed\nThe crash no longer happens.',
    'pool': {'team': {'name': 'sst_kernel'}},
}

ISSUE = {
    'key': 'ABC-1',
    'self': 'https://jira.example.com/rest/api/2/issue/1',
    'fields': {
        'summary': 'Add export',
        'description': 'Export to CSV',
        'status': {'name': 'In Progress'},
        'priority': {'name': 'Major'},
        'assignee': {'name': 'dev', 'emailAddress': 'dev@example.com'},
        'components': [{'name': 'api'}],
        'project': {'name': 'ABC'},
        'labels': ['docs'],
        'fixVersions': [{'name': '9.0'}, {'name': '9.1'}, {'name': '9.0'}],
        'customfield_1': {'value': 'Enhancement'},
        'customfield_2': '.Export\nYou can export now.',
        'customfield_3': {'value': 'Done'},
        'customfield_4': {'emailAddress': 'writer@example.com'},
        'customfield_5': [{'value': 'sst_a'}, {'value': 'sst_b'}],
    },
}


def bug(**changes):
    record = copy.deepcopy(BUG)
    record.update(changes)
    return record


def issue(**changes):
    record = copy.deepcopy(ISSUE)
    record['fields'].update(changes)
    return record
