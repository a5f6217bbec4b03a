"""
Security utilities for Scriptorium.

Provides the editor form token and the per-step token gate.

The token is reproducible only by someone who has read the rendered form:
it is an HMAC of the user's AuthorProfile.nonce keyed with SECRET_KEY.
Rotating the nonce invalidates every outstanding token for that user.

Usage:
    steps = {'edit': False, 'save': True}
    step = bouncer(step, steps, request)   # raises TokenMismatchError
"""

import logging
from typing import Dict, Optional

from django.utils.crypto import constant_time_compare, salted_hmac

from .exceptions import TokenMismatchError
from .metrics import increment_token_rejections

logger = logging.getLogger(__name__)

TOKEN_FIELD = '_txp_token'
TOKEN_SALT = 'scriptorium.core.form_token'


def form_token(user) -> str:
    """Token for forms rendered to user; '' for anonymous users."""
    if not user or not user.is_authenticated:
        return ''

    from apps.core.models import AuthorProfile
    profile, _created = AuthorProfile.objects.get_or_create(user=user)
    return salted_hmac(TOKEN_SALT, profile.nonce, algorithm='sha256').hexdigest()


def check_form_token(request, token: Optional[str]) -> bool:
    expected = form_token(request.user)
    return bool(expected) and bool(token) and constant_time_compare(token, expected)


def bouncer(step: str, steps: Dict[str, bool], request) -> Optional[str]:
    """
    Gate a step by its token requirement.

    Returns the step when it may run, None when the step is unknown, and
    raises TokenMismatchError when the step needs a token the request lacks.
    An empty step passes through unchanged.
    """
    if not step:
        return step

    if step not in steps:
        logger.info("Unknown editor step %r", step)
        return None

    if not steps[step]:
        return step

    token = request.POST.get(TOKEN_FIELD) or request.GET.get(TOKEN_FIELD)
    if check_form_token(request, token):
        return step

    increment_token_rejections(step)
    logger.warning(
        "Form token mismatch for step %s",
        step,
        extra={'user_id': getattr(request.user, 'pk', None)},
    )
    raise TokenMismatchError(f"Form token mismatch for step '{step}'", field=TOKEN_FIELD)
