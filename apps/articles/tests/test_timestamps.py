"""
Tests for posted/expiry timestamp resolution.
"""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from apps.articles.timestamps import (
    compose,
    echoed_expires,
    echoed_posted,
    lastmod_for_new,
    resolve_expires,
    resolve_posted,
    resolve_timestamps,
)
from apps.core.exceptions import ErrorCode, ValidationError

from .helpers import date_fields

NOW = datetime(2024, 6, 1, 10, 0, 0, tzinfo=dt_timezone.utc)


class TestCompose:

    def test_site_time_zone(self, settings):
        settings.TIME_ZONE = 'UTC'
        assert compose('2024', '1', '2', '3', '4', '5') == datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt_timezone.utc)

    def test_non_numeric_part(self):
        with pytest.raises(ValueError):
            compose('2024', 'jan', '1', '0', '0', '0')

    def test_impossible_date(self):
        with pytest.raises(ValueError):
            compose('2024', '2', '30', '0', '0', '0')

    def test_before_epoch(self):
        with pytest.raises(ValueError):
            compose('1960', '1', '1', '0', '0', '0')


class TestResolvePosted:

    def test_publish_now_wins(self):
        data = dict(date_fields(datetime(2020, 1, 1)), publish_now='1')
        assert resolve_posted(data, NOW) == NOW

    def test_reset_time_field(self):
        data = dict(date_fields(datetime(2020, 1, 1)), reset_time='1')
        assert resolve_posted(data, NOW, reset_field='reset_time') == NOW
        assert resolve_posted(data, NOW, reset_field='publish_now') != NOW

    def test_sub_fields(self):
        data = date_fields(datetime(2024, 1, 1, 0, 0, 0))
        assert resolve_posted(data, NOW) == datetime(2024, 1, 1, tzinfo=dt_timezone.utc)

    @pytest.mark.parametrize('field, value', [
        ('year', 'abcd'),
        ('month', '13'),
        ('day', ''),
        ('year', '1969'),
    ])
    def test_invalid_post_date(self, field, value):
        data = date_fields(datetime(2024, 1, 1))
        data[field] = value

        with pytest.raises(ValidationError) as excinfo:
            resolve_posted(data, NOW)

        assert excinfo.value.error_code == ErrorCode.INVALID_POSTDATE
        assert excinfo.value.message == 'Invalid post date.'


class TestResolveExpires:

    def test_no_expiry_without_year(self):
        assert resolve_expires({'exp_month': '5'}) is None
        assert resolve_expires({'exp_year': ''}) is None

    def test_missing_parts_default(self):
        assert resolve_expires({'exp_year': '2025'}) == datetime(2025, 1, 1, tzinfo=dt_timezone.utc)

    def test_all_parts(self):
        data = date_fields(datetime(2025, 3, 4, 5, 6, 7), prefix='exp_')
        assert resolve_expires(data) == datetime(2025, 3, 4, 5, 6, 7, tzinfo=dt_timezone.utc)

    def test_invalid_expiry(self):
        with pytest.raises(ValidationError) as excinfo:
            resolve_expires({'exp_year': '2025', 'exp_month': '99'})
        assert excinfo.value.error_code == ErrorCode.INVALID_EXPIRYDATE


class TestResolveTimestamps:

    def test_expiry_before_posting_is_rejected(self):
        data = dict(date_fields(datetime(2024, 1, 1)), exp_year='2023')

        with pytest.raises(ValidationError) as excinfo:
            resolve_timestamps(data, NOW)

        assert excinfo.value.error_code == ErrorCode.EXPIRES_BEFORE_POSTDATE
        assert 'expires before post date' in excinfo.value.message

    def test_expiry_equal_to_posting_is_rejected(self):
        data = dict(date_fields(datetime(2024, 1, 1)), exp_year='2024')

        with pytest.raises(ValidationError):
            resolve_timestamps(data, NOW)

    def test_unset_expiry_is_accepted(self):
        posted, expires = resolve_timestamps(date_fields(datetime(2024, 1, 1)), NOW)
        assert expires is None
        assert posted == datetime(2024, 1, 1, tzinfo=dt_timezone.utc)

    def test_expiry_after_posting(self):
        data = dict(date_fields(datetime(2024, 1, 1)), exp_year='2025')
        posted, expires = resolve_timestamps(data, NOW)
        assert expires - posted == timedelta(days=366)


class TestHelpers:

    def test_future_articles_are_stamped_now(self):
        assert lastmod_for_new(NOW + timedelta(days=1), NOW) == NOW

    def test_past_articles_are_stamped_posted(self):
        past = NOW - timedelta(days=1)
        assert lastmod_for_new(past, NOW) == past

    def test_echoed_values_never_raise(self):
        assert echoed_posted({'year': 'abc'}) is None
        assert echoed_posted({}) is None
        assert echoed_expires({'exp_year': '2025', 'exp_day': '40'}) is None
        assert echoed_expires({'exp_year': '2025'}) == datetime(2025, 1, 1, tzinfo=dt_timezone.utc)
