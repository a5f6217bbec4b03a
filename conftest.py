"""
Shared fixtures: users per editorial role and the lookup rows the Write
panel validates against.
"""

import pytest


def make_user(username, role, **extra):
    from django.contrib.auth import get_user_model

    user = get_user_model().objects.create_user(username=username, password='password', **extra)
    profile = user.author_profile
    profile.role = role
    profile.save()
    return user


@pytest.fixture
def publisher(db):
    return make_user('publisher', 'publisher')


@pytest.fixture
def managing_editor(db):
    return make_user('managing', 'managing_editor')


@pytest.fixture
def staff_writer(db):
    return make_user('writer', 'staff_writer')


@pytest.fixture
def freelancer(db):
    return make_user('freelancer', 'freelancer')


@pytest.fixture
def lookups(db):
    """Sections, article categories and forms."""
    from apps.articles.models import ArticleForm, Category, Section

    Section.objects.create(name='default', title='Default')
    Section.objects.create(name='articles', title='Articles')
    Section.objects.create(name='about', title='About')
    Category.objects.create(name='news', type='article', title='News')
    Category.objects.create(name='reviews', type='article', title='Reviews')
    Category.objects.create(name='photos', type='image', title='Photos')
    ArticleForm.objects.create(name='default', type='article')
    ArticleForm.objects.create(name='long_form', type='article')
    ArticleForm.objects.create(name='comment_form', type='comment')


@pytest.fixture
def registry():
    """A fresh callback registry, independent of EDITOR_PLUGINS."""
    from apps.core.callbacks import CallbackRegistry

    return CallbackRegistry()
