"""
Article fixtures.
"""

import pytest

from apps.articles.models import Article, ArticleStatus

from .helpers import LAST_MODIFIED, POSTED


@pytest.fixture
def make_article(lookups, publisher):
    """Factory for stored articles; live, in 'articles', by the publisher."""
    def make(**fields):
        values = {
            'title': 'First post',
            'url_title': 'first-post',
            'body': 'Body text',
            'body_html': '<p>Body text</p>',
            'status': ArticleStatus.LIVE,
            'section': 'articles',
            'keywords': 'alpha,beta',
            'posted': POSTED,
            'last_modified': LAST_MODIFIED,
            'author': publisher,
            'last_modified_by': publisher,
        }
        values.update(fields)
        return Article.objects.create(**values)
    return make


@pytest.fixture
def article(make_article):
    return make_article()
