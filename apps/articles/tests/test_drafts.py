"""
Tests for the signed draft carried through the HTML and preview views.
"""

import pytest
from django.core import signing

from apps.articles.drafts import DRAFT_SALT, collect_fields, pack_draft, unpack_draft
from apps.core.exceptions import ErrorCode, ValidationError


class TestCollectFields:

    def test_known_fields_only(self):
        fields = collect_fields({'Title': 'Hello', 'evil': 'x', 'custom_1': 'one'})

        assert fields['Title'] == 'Hello'
        assert fields['custom_1'] == 'one'
        assert fields['Body'] == ''
        assert 'evil' not in fields

    def test_inactive_custom_fields_dropped(self):
        assert 'custom_3' not in collect_fields({'custom_3': 'three'})


class TestRoundTrip:

    def test_pack_then_unpack(self):
        store = pack_draft({'Title': 'Hello', 'Body': 'Line one\nLine two', 'Status': 4})

        fields = unpack_draft(store)

        assert fields['Title'] == 'Hello'
        assert fields['Body'] == 'Line one\nLine two'
        assert fields['Status'] == '4'


class TestRejected:

    def assert_rejected(self, store):
        with pytest.raises(ValidationError) as excinfo:
            unpack_draft(store)
        assert excinfo.value.error_code == ErrorCode.INVALID_DRAFT
        assert excinfo.value.message == 'Draft could not be restored.'

    def test_tampered(self):
        store = pack_draft({'Title': 'Hello'})
        self.assert_rejected(store[:-2] + ('AA' if not store.endswith('AA') else 'BB'))

    def test_empty(self):
        self.assert_rejected('')
        self.assert_rejected(None)

    def test_wrong_salt(self):
        self.assert_rejected(signing.dumps({'v': 1, 'fields': {}}, salt='elsewhere'))

    def test_wrong_version(self):
        self.assert_rejected(signing.dumps({'v': 2, 'fields': {}}, salt=DRAFT_SALT))

    def test_unknown_field(self):
        self.assert_rejected(signing.dumps({'v': 1, 'fields': {'evil': 'x'}}, salt=DRAFT_SALT))

    def test_non_string_value(self):
        self.assert_rejected(signing.dumps({'v': 1, 'fields': {'Title': ['x']}}, salt=DRAFT_SALT))

    def test_fields_not_an_object(self):
        self.assert_rejected(signing.dumps({'v': 1, 'fields': 'Title'}, salt=DRAFT_SALT))

    def test_expired(self, settings):
        store = pack_draft({'Title': 'Hello'})
        settings.DRAFT_MAX_AGE = -1

        self.assert_rejected(store)
