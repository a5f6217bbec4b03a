"""
Write panel workflow: steps, their token requirements and the form fields.

Steps:
    create ─┬─> publish ─┐
            └─> save ────┴─> edit (re-entrant)
    save_pane_state (side-step, answers with XML)

Every mutating step falls through to edit; the controller never finishes
anywhere else.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

from django.conf import settings

logger = logging.getLogger(__name__)


class EditorStep(Enum):
    CREATE = 'create'
    EDIT = 'edit'
    PUBLISH = 'publish'
    SAVE = 'save'
    SAVE_PANE_STATE = 'save_pane_state'

    @classmethod
    def from_string(cls, value: str) -> 'EditorStep':
        for step in cls:
            if step.value == value:
                return step
        raise ValueError(f"Unknown step: {value}")

    @property
    def is_mutation(self) -> bool:
        return self in (EditorStep.PUBLISH, EditorStep.SAVE, EditorStep.SAVE_PANE_STATE)


# step name -> form token required
STEP_TOKENS: Dict[str, bool] = {
    'create': False,
    'publish': True,
    'edit': False,
    'save': True,
    'save_pane_state': True,
}


class EditorView(Enum):
    """Main column display mode."""
    TEXT = 'text'
    HTML = 'html'
    PREVIEW = 'preview'


class MessageLevel(Enum):
    SUCCESS = 'success'
    WARNING = 'warning'
    ERROR = 'error'


@dataclass
class EditorMessage:
    text: str = ''
    level: MessageLevel = MessageLevel.SUCCESS

    def __bool__(self):
        return bool(self.text)

    @classmethod
    def error(cls, text: str) -> 'EditorMessage':
        return cls(text, MessageLevel.ERROR)

    @classmethod
    def warning(cls, text: str) -> 'EditorMessage':
        return cls(text, MessageLevel.WARNING)


PANES = (
    'textfilter_help', 'custom_field', 'image',
    'meta', 'recent', 'comments', 'dates',
)

POSTED_FIELDS = ('year', 'month', 'day', 'hour', 'minute', 'second')
EXPIRES_FIELDS = ('exp_year', 'exp_month', 'exp_day', 'exp_hour', 'exp_minute', 'exp_second')

BASE_FORM_FIELDS = (
    'ID', 'Title', 'Body', 'Excerpt', 'textile_excerpt', 'Image',
    'textile_body', 'Keywords', 'Status', 'Section', 'Category1', 'Category2',
    'Annotate', 'AnnotateInvite', 'publish_now', 'reset_time', 'AuthorID', 'sPosted',
    'LastModID', 'sLastMod', 'override_form', 'from_view',
) + POSTED_FIELDS + ('url_title',) + EXPIRES_FIELDS + ('sExpires',)


def active_custom_fields() -> Dict[int, str]:
    """Configured custom fields, number -> label, in number order."""
    configured = getattr(settings, 'ARTICLE_CUSTOM_FIELDS', {}) or {}
    return {int(num): label for num, label in sorted(configured.items(), key=lambda kv: int(kv[0])) if label}


def form_fields() -> List[str]:
    """Every field name the Write form submits."""
    return list(BASE_FORM_FIELDS) + [f'custom_{num}' for num in active_custom_fields()]


def resolve_step(data) -> str:
    """
    Step named by the request. The 'save' and 'publish' submit buttons win
    over the step field; nothing means create.
    """
    if data.get('save'):
        return EditorStep.SAVE.value
    if data.get('publish'):
        return EditorStep.PUBLISH.value
    return data.get('step') or EditorStep.CREATE.value
