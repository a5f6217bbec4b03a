"""
Posted/expiry timestamp resolution from the Write form's date sub-fields.

Sub-fields are interpreted in the site time zone. Any failure raises a
ValidationError; callers abort the write and re-render with the input kept.
"""

import logging
from datetime import datetime
from typing import Mapping, Optional, Tuple

from django.utils import timezone
from django.utils.translation import gettext as _

from apps.core.exceptions import ErrorCode, ValidationError

from .models import EPOCH
from .workflow import EXPIRES_FIELDS, POSTED_FIELDS

logger = logging.getLogger(__name__)

# Defaults for missing expiry sub-fields once exp_year is given
EXPIRY_DEFAULTS = {'exp_month': 1, 'exp_day': 1, 'exp_hour': 0, 'exp_minute': 0, 'exp_second': 0}


def _is_empty(value) -> bool:
    return value is None or str(value).strip() in ('', '0')


def _is_checked(value) -> bool:
    return not _is_empty(value) and str(value).strip().lower() not in ('false', 'off')


def compose(year, month, day, hour, minute, second) -> datetime:
    """
    Aware datetime from six sub-field values.

    Raises ValueError when a part is not an integer, the date does not exist,
    or the instant precedes the epoch.
    """
    parts = [int(str(part).strip()) for part in (year, month, day, hour, minute, second)]
    naive = datetime(*parts)
    value = timezone.make_aware(naive, timezone.get_current_timezone())
    if value < EPOCH:
        raise ValueError("timestamp before epoch")
    return value


def compose_fields(data: Mapping, names) -> datetime:
    return compose(*(data.get(name) for name in names))


def resolve_posted(data: Mapping, now: datetime, reset_field: str = 'publish_now') -> datetime:
    """Posting time: now when reset_field is checked, else the sub-fields."""
    if _is_checked(data.get(reset_field)):
        return now
    try:
        return compose_fields(data, POSTED_FIELDS)
    except (TypeError, ValueError, OverflowError):
        logger.info("Invalid post date submitted")
        raise ValidationError(_("Invalid post date."), code=ErrorCode.INVALID_POSTDATE, field='posted')


def expiry_parts(data: Mapping) -> Optional[dict]:
    """Expiry sub-fields with defaults applied; None when no exp_year."""
    if _is_empty(data.get('exp_year')):
        return None
    parts = {'exp_year': data.get('exp_year')}
    for name in EXPIRES_FIELDS[1:]:
        value = data.get(name)
        parts[name] = EXPIRY_DEFAULTS[name] if _is_empty(value) else value
    return parts


def resolve_expires(data: Mapping) -> Optional[datetime]:
    parts = expiry_parts(data)
    if parts is None:
        return None
    try:
        return compose_fields(parts, EXPIRES_FIELDS)
    except (TypeError, ValueError, OverflowError):
        logger.info("Invalid expiry date submitted")
        raise ValidationError(_("Invalid expiry date."), code=ErrorCode.INVALID_EXPIRYDATE, field='expires')


def check_expiry(posted: datetime, expires: Optional[datetime]) -> None:
    if expires is not None and expires <= posted:
        raise ValidationError(
            _("Article expires before post date."),
            code=ErrorCode.EXPIRES_BEFORE_POSTDATE,
            field='expires',
        )


def resolve_timestamps(
    data: Mapping,
    now: Optional[datetime] = None,
    reset_field: str = 'publish_now',
) -> Tuple[datetime, Optional[datetime]]:
    """(posted, expires) for a publish or save submission."""
    now = now or timezone.now()
    posted = resolve_posted(data, now, reset_field)
    expires = resolve_expires(data)
    check_expiry(posted, expires)
    return posted, expires


def lastmod_for_new(posted: datetime, now: datetime) -> datetime:
    """Future-dated articles are stamped now to keep the recent list ordered."""
    return now if posted > now else posted


def echoed_posted(data: Mapping) -> Optional[datetime]:
    """Best-effort posted time from echoed sub-fields, for redisplay only."""
    if _is_empty(data.get('year')):
        return None
    try:
        return compose_fields(data, POSTED_FIELDS)
    except (TypeError, ValueError, OverflowError):
        return None


def echoed_expires(data: Mapping) -> Optional[datetime]:
    parts = expiry_parts(data)
    if parts is None:
        return None
    try:
        return compose_fields(parts, EXPIRES_FIELDS)
    except (TypeError, ValueError, OverflowError):
        return None
