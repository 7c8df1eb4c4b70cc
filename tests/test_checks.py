import unittest

import pytest

from normalize.models import AbstractTicket, DocTextStatus, Service, TicketId
from scoring.checks import (
    Checks,
    Severity,
    Status,
    check_devel_status,
    check_doc_text_status,
    check_doc_type,
    check_target_release,
    check_ticket,
    check_title,
    UNSET_DOC_TYPE,
)


class TestTitleCheck(unittest.TestCase):
    def test_title_first(self):
        self.assertEqual(check_title('.Better logging\nText.'), Status.ok())

    def test_comments_and_blank_lines_are_skipped(self):
        self.assertEqual(check_title('\n// draft\n   \n  .Title\nText'), Status.ok())

    def test_text_without_title(self):
        self.assertEqual(check_title('Plain text.\n.Title'), Status.error('First line is not a title.'))

    def test_dot_followed_by_space(self):
        self.assertEqual(check_title('. Title'), Status.error('First line is not a title.'))

    def test_empty(self):
        for text in (None, '', '\n\n', '// only a comment'):
            self.assertEqual(check_title(text), Status.error('The release note is empty.'))


class TestSimpleChecks(unittest.TestCase):
    def test_devel_status(self):
        for status in ('NEW', 'Assigned', 'To Do', 'modified'):
            self.assertEqual(check_devel_status(status), Status.warning('Early development.'))
        for status in ('ON_QA', 'Verified', 'Closed', ''):
            self.assertEqual(check_devel_status(status), Status.ok())

    def test_doc_type(self):
        self.assertEqual(check_doc_type(UNSET_DOC_TYPE), Status.error('Bad doc type.'))
        self.assertEqual(check_doc_type('Bug Fix'), Status.ok())
        self.assertEqual(check_doc_type(None), Status.ok())

    def test_doc_text_status(self):
        self.assertEqual(check_doc_text_status(DocTextStatus.APPROVED), Status.ok())
        self.assertEqual(check_doc_text_status(DocTextStatus.IN_PROGRESS), Status.error('Release note not approved.'))
        self.assertEqual(check_doc_text_status(DocTextStatus.NO_DOCUMENTATION), Status.error('Release note disabled.'))


@pytest.mark.parametrize('releases, likely, doc_type, expected', [
    (['9.0', '9.1'], '9.0', 'Bug Fix', Status.ok()),
    (['9.1'], '9.0', 'Bug Fix', Status.warning('Check target release.')),
    ([], '9.0', 'Enhancement', Status.warning('Check target release.')),
    ([], '9.0', 'Known Issue', Status.ok()),
    (['8.0'], '9.0', 'technology preview', Status.ok()),
    (['8.0'], '9.0', 'Deprecated Functionality', Status.ok()),
    ([], None, 'Bug Fix', Status.ok()),
])
def test_target_release(releases, likely, doc_type, expected):
    assert check_target_release(releases, likely, doc_type) == expected


def test_target_release_never_errors():
    for releases in ([], ['1'], ['2', '3']):
        assert check_target_release(releases, '9', 'Bug Fix').severity is not Severity.ERROR


def _checks(**kwargs):
    values = dict(development=Status.ok(), doc_type=Status.ok(), doc_status=Status.ok(), title_and_text=Status.ok(), target_release=Status.ok())
    values.update(kwargs)
    return Checks(**values)


def test_overall_ok():
    overall = _checks().overall()
    assert overall == Status.ok()
    assert overall.message == 'OK'
    assert overall.color == 'green'


def test_overall_collects_warnings():
    overall = _checks(development=Status.warning('Early development.'), target_release=Status.warning('Check target release.')).overall()
    assert overall.severity is Severity.WARNING
    assert 'Early development.' in overall.reason
    assert 'Check target release.' in overall.reason


def test_overall_errors_win_over_warnings():
    overall = _checks(
        development=Status.warning('Early development.'),
        doc_status=Status.error('Release note not approved.'),
        title_and_text=Status.error('First line is not a title.'),
    ).overall()
    assert overall.severity is Severity.ERROR
    assert overall.color == 'red'
    assert 'Release note not approved.' in overall.reason
    assert 'First line is not a title.' in overall.reason
    assert 'Early development.' not in overall.reason


def test_check_ticket():
    t = AbstractTicket(
        TicketId('ABC-1', Service.JIRA),
        'summary',
        DocTextStatus.APPROVED,
        doc_type='Bug Fix',
        doc_text='.Title\nText',
        status='Verified',
        target_releases=['9.1'],
    )
    checks = check_ticket(t, '9.0')
    assert checks.target_release == Status.warning('Check target release.')
    assert checks.overall().severity is Severity.WARNING
    assert checks.to_dict()['overall'] == 'Check target release.'
    assert check_ticket(t, '9.1').overall() == Status.ok()
