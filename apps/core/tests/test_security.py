"""
Tests for the form token and the step bouncer.
"""

import pytest
from django.contrib.auth.models import AnonymousUser
from django.test import RequestFactory

from apps.core.exceptions import TokenMismatchError
from apps.core.security import TOKEN_FIELD, bouncer, check_form_token, form_token

STEPS = {'create': False, 'edit': False, 'save': True, 'publish': True}


@pytest.fixture
def rf():
    return RequestFactory()


def post(rf, user, **data):
    request = rf.post('/write/', data)
    request.user = user
    return request


@pytest.mark.django_db
class TestFormToken:

    def test_anonymous_user_has_no_token(self):
        assert form_token(AnonymousUser()) == ''

    def test_token_is_stable_for_a_user(self, publisher):
        assert form_token(publisher) == form_token(publisher)
        assert len(form_token(publisher)) == 64

    def test_tokens_differ_between_users(self, publisher, freelancer):
        assert form_token(publisher) != form_token(freelancer)

    def test_rotating_the_nonce_invalidates_the_token(self, publisher):
        before = form_token(publisher)
        publisher.author_profile.rotate_nonce()
        publisher.refresh_from_db()

        assert form_token(publisher) != before

    def test_check_form_token(self, rf, publisher):
        request = post(rf, publisher)
        assert check_form_token(request, form_token(publisher))
        assert not check_form_token(request, 'forged')
        assert not check_form_token(request, '')


@pytest.mark.django_db
class TestBouncer:

    def test_empty_step_passes_through(self, rf, publisher):
        assert bouncer('', STEPS, post(rf, publisher)) == ''

    def test_unknown_step(self, rf, publisher):
        assert bouncer('delete', STEPS, post(rf, publisher)) is None

    def test_step_without_token_requirement(self, rf, publisher):
        assert bouncer('edit', STEPS, post(rf, publisher)) == 'edit'

    def test_valid_token(self, rf, publisher):
        request = post(rf, publisher, **{TOKEN_FIELD: form_token(publisher)})
        assert bouncer('save', STEPS, request) == 'save'

    def test_token_in_query_string(self, rf, publisher):
        request = rf.get('/write/', {TOKEN_FIELD: form_token(publisher)})
        request.user = publisher
        assert bouncer('publish', STEPS, request) == 'publish'

    def test_missing_token(self, rf, publisher):
        with pytest.raises(TokenMismatchError):
            bouncer('save', STEPS, post(rf, publisher))

    def test_token_of_another_user(self, rf, publisher, freelancer):
        request = post(rf, publisher, **{TOKEN_FIELD: form_token(freelancer)})
        with pytest.raises(TokenMismatchError):
            bouncer('publish', STEPS, request)
