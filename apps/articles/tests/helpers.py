"""
Write panel form builders for tests.
"""

from datetime import datetime, timezone as dt_timezone

from apps.articles.models import ArticleStatus, epoch_seconds
from apps.core.security import TOKEN_FIELD, form_token

POSTED = datetime(2024, 1, 1, 12, 0, 0, tzinfo=dt_timezone.utc)
LAST_MODIFIED = datetime(2024, 1, 2, 8, 30, 15, 123456, tzinfo=dt_timezone.utc)


def date_fields(value, prefix=''):
    return {
        f'{prefix}year': f'{value.year:04d}',
        f'{prefix}month': f'{value.month:02d}',
        f'{prefix}day': f'{value.day:02d}',
        f'{prefix}hour': f'{value.hour:02d}',
        f'{prefix}minute': f'{value.minute:02d}',
        f'{prefix}second': f'{value.second:02d}',
    }


def publish_data(user, **overrides):
    """A Publish submission from the create screen."""
    data = {
        'step': 'publish',
        'publish': 'Publish',
        'Title': 'Hello',
        'Body': 'World',
        'Status': str(ArticleStatus.LIVE),
        'Section': 'articles',
        'textile_body': '1',
        'textile_excerpt': '1',
        'Annotate': '0',
        TOKEN_FIELD: form_token(user),
    }
    data.update(date_fields(datetime(2024, 1, 1, 0, 0, 0)))
    data.update(overrides)
    return data


def save_data(article, user, **overrides):
    """A Save submission for a stored article, as the edit form posts it."""
    data = {
        'step': 'edit',
        'save': 'Save',
        'ID': str(article.pk),
        'Title': article.title,
        'Body': article.body,
        'Excerpt': article.excerpt,
        'textile_body': article.body_filter,
        'textile_excerpt': article.excerpt_filter,
        'Status': str(article.status),
        'Section': article.section,
        'Category1': article.category1,
        'Category2': article.category2,
        'Keywords': article.keywords,
        'url_title': article.url_title,
        'Annotate': '1' if article.annotate else '0',
        'AnnotateInvite': article.annotate_invite,
        'sLastMod': str(article.fingerprint),
        'sPosted': str(epoch_seconds(article.posted)),
        TOKEN_FIELD: form_token(user),
    }
    data.update(date_fields(article.posted))
    data.update(overrides)
    return data
