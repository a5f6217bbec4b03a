"""
Draft round-trip for the HTML and preview views.

While the user looks at the rendered HTML or the preview, the unsaved form
values travel in the hidden 'store' input. They are packed as a versioned
structure, signed with the site secret and validated on the way back in;
nothing from the client is deserialized beyond plain JSON.

Usage:
    store = pack_draft(fields)
    fields = unpack_draft(request.POST['store'])   # raises ValidationError
"""

import logging
from typing import Dict, Mapping

from django.conf import settings
from django.core import signing
from django.utils.translation import gettext as _

from apps.core.exceptions import ErrorCode, ValidationError

from .serializers import DRAFT_VERSION, DraftStateSerializer
from .workflow import form_fields

logger = logging.getLogger(__name__)

DRAFT_SALT = 'apps.articles.draft'


def draft_max_age() -> int:
    return getattr(settings, 'DRAFT_MAX_AGE', 86400)


def collect_fields(data: Mapping) -> Dict[str, str]:
    """Known form fields from a request mapping, as strings."""
    return {name: str(data.get(name, '') or '') for name in form_fields()}


def pack_draft(fields: Mapping) -> str:
    state = {'v': DRAFT_VERSION, 'fields': collect_fields(fields)}
    return signing.dumps(state, salt=DRAFT_SALT, compress=True)


def unpack_draft(store: str) -> Dict[str, str]:
    """
    Verify and validate a packed draft.

    Raises ValidationError (INVALID_DRAFT) for a bad signature, an expired
    draft, a wrong version or fields outside the form.
    """
    try:
        state = signing.loads(store or '', salt=DRAFT_SALT, max_age=draft_max_age())
    except signing.BadSignature as exc:
        logger.info("Rejected draft: %s", exc)
        raise ValidationError(_("Draft could not be restored."), code=ErrorCode.INVALID_DRAFT, field='store')

    serializer = DraftStateSerializer(data=state)
    if not serializer.is_valid():
        logger.info("Rejected draft: %s", serializer.errors)
        raise ValidationError(
            _("Draft could not be restored."),
            code=ErrorCode.INVALID_DRAFT,
            field='store',
            details={'errors': serializer.errors},
        )

    return serializer.validated_data['fields']
