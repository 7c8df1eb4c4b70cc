import logging
import unittest

import pytest

from errors import FieldResolutionError, ClassificationError
from normalize.models import DocTextStatus
from normalize.util import extract_field, classify_doc_text_status, DEFAULT_DOC_TEXT_STATUS


class TestExtractField(unittest.TestCase):
    def test_first_string_wins(self):
        extra = {'cf_a': 'first', 'cf_b': 'second'}
        self.assertEqual(extract_field(extra, ['cf_a', 'cf_b'], 1), 'first')

    def test_later_candidates_not_consulted(self):
        # a malformed later field would fail on its own, but is never reached
        extra = {'cf_a': 'value', 'cf_b': {'nested': True}}
        self.assertEqual(extract_field(extra, ['cf_a', 'cf_b', 'cf_missing'], 1), 'value')

    def test_falls_back_past_missing_and_malformed(self):
        extra = {'cf_b': 42, 'cf_c': 'fallback'}
        self.assertEqual(extract_field(extra, ['cf_a', 'cf_b', 'cf_c'], 1), 'fallback')

    def test_all_missing_lists_each_field_once(self):
        fields = ['cf_one', 'cf_two', 'cf_three']
        with self.assertRaises(FieldResolutionError) as ctx:
            extract_field({}, fields, 'ABC-1')
        message = str(ctx.exception)
        for f in fields:
            self.assertEqual(message.count(f"`{f}`"), 1)
        self.assertIn('ABC-1', message)
        self.assertEqual(ctx.exception.fields, fields)
        self.assertEqual(len(ctx.exception.errors), 3)

    def test_malformed_field_is_reported(self):
        with self.assertRaises(FieldResolutionError) as ctx:
            extract_field({'cf_a': ['list']}, ['cf_a'], 7)
        self.assertIn('is not a string', str(ctx.exception))

    def test_single_null_field_returns_empty_string(self):
        self.assertEqual(extract_field({'cf_b': None}, ['cf_a', 'cf_b', 'cf_c'], 1), '')

    def test_null_field_does_not_hide_a_later_string(self):
        self.assertEqual(extract_field({'cf_a': None, 'cf_b': 'text'}, ['cf_a', 'cf_b'], 1), 'text')

    def test_non_dict_extension_map(self):
        with self.assertRaises(FieldResolutionError):
            extract_field(None, ['cf_a'], 1)

    def test_empty_string_value_is_returned(self):
        self.assertEqual(extract_field({'cf_a': ''}, ['cf_a'], 1), '')


def test_empty_fields_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger='normalize.util'):
        assert extract_field({'cf_a': None}, ['cf_a'], 99) == ''
    assert 'Fields are empty in ticket 99: cf_a' in caplog.text


@pytest.mark.parametrize('token, expected', [
    ('+', DocTextStatus.APPROVED),
    ('Done', DocTextStatus.APPROVED),
    ('?', DocTextStatus.IN_PROGRESS),
    ('Proposed', DocTextStatus.IN_PROGRESS),
    ('In progress', DocTextStatus.IN_PROGRESS),
    ('Unset', DocTextStatus.IN_PROGRESS),
    ('-', DocTextStatus.NO_DOCUMENTATION),
    ('Rejected', DocTextStatus.NO_DOCUMENTATION),
    ('Upstream only', DocTextStatus.NO_DOCUMENTATION),
])
def test_classify_documented_tokens(token, expected):
    assert classify_doc_text_status(token) is expected
    # classifying twice gives the same answer
    assert classify_doc_text_status(token) is classify_doc_text_status(token)


@pytest.mark.parametrize('token', ['weird', 'done', 'in progress', '', None])
def test_classify_rejects_unknown_tokens(token):
    with pytest.raises(ClassificationError) as excinfo:
        classify_doc_text_status(token)
    assert repr(token) in str(excinfo.value)


def test_default_token_means_in_progress():
    assert classify_doc_text_status(DEFAULT_DOC_TEXT_STATUS) is DocTextStatus.IN_PROGRESS


if __name__ == '__main__':
    unittest.main()
