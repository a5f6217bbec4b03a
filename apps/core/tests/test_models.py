"""
Tests for author profiles, preferences and role privileges.
"""

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.db import IntegrityError, transaction

from apps.core.models import AuthorProfile, Preference
from apps.core.permissions import get_user_role, has_privs

User = get_user_model()


@pytest.mark.django_db
class TestAuthorProfile:

    def test_profile_created_with_user(self):
        user = User.objects.create_user('someone', password='password')

        profile = AuthorProfile.objects.get(user=user)
        assert profile.role == 'freelancer'
        assert len(profile.nonce) == 32

    def test_rotate_nonce(self, publisher):
        profile = publisher.author_profile
        old = profile.nonce

        new = profile.rotate_nonce()

        assert new != old
        assert AuthorProfile.objects.get(pk=profile.pk).nonce == new


@pytest.mark.django_db
class TestPreference:

    def test_site_value(self):
        Preference.set_value('lastmod', '2024-01-01T00:00:00')
        Preference.set_value('lastmod', '2024-02-01T00:00:00')

        assert Preference.get_value('lastmod') == '2024-02-01T00:00:00'
        assert Preference.objects.filter(name='lastmod').count() == 1

    def test_user_values_are_private(self, publisher, freelancer):
        Preference.set_value('pane_article_recent_visible', '1', user=publisher)

        assert Preference.get_value('pane_article_recent_visible', user=publisher) == '1'
        assert Preference.get_value('pane_article_recent_visible', user=freelancer, default='0') == '0'
        assert Preference.get_value('pane_article_recent_visible') == ''

    def test_one_site_wide_row_per_name(self):
        Preference.objects.create(name='lastmod', value='first')

        with pytest.raises(IntegrityError), transaction.atomic():
            Preference.objects.create(name='lastmod', value='second')

        assert Preference.get_value('lastmod') == 'first'

    def test_one_row_per_user_and_name(self, publisher, freelancer):
        Preference.objects.create(name='pane_article_dates_visible', user=publisher, value='1')
        Preference.objects.create(name='pane_article_dates_visible', user=freelancer, value='0')
        Preference.objects.create(name='pane_article_dates_visible', value='1')

        with pytest.raises(IntegrityError), transaction.atomic():
            Preference.objects.create(name='pane_article_dates_visible', user=publisher, value='0')


@pytest.mark.django_db
class TestPrivileges:

    def test_anonymous(self):
        assert get_user_role(AnonymousUser()) is None
        assert not has_privs(AnonymousUser(), 'article')

    def test_superuser_is_publisher(self):
        admin = User.objects.create_superuser('admin', 'admin@example.com', 'password')
        assert get_user_role(admin) == 'publisher'
        assert has_privs(admin, 'article.edit.published')

    @pytest.mark.parametrize('privilege, allowed', [
        ('article', True),
        ('article.edit.own', True),
        ('article.publish', False),
        ('article.edit', False),
        ('article.edit.published', False),
        ('article.edit.own.published', False),
    ])
    def test_freelancer(self, freelancer, privilege, allowed):
        assert has_privs(freelancer, privilege) is allowed

    @pytest.mark.parametrize('privilege, allowed', [
        ('article.publish', True),
        ('article.edit.own.published', True),
        ('article.edit', False),
        ('article.edit.published', False),
    ])
    def test_staff_writer(self, staff_writer, privilege, allowed):
        assert has_privs(staff_writer, privilege) is allowed

    def test_unknown_privilege(self, publisher):
        assert not has_privs(publisher, 'no.such.privilege')
