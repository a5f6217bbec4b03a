"""
Text filters: raw field source to rendered HTML.

Filters are identified by short string ids, stored on the article per field
(body_filter, excerpt_filter). Built-ins:

    '0'  leave text untouched
    '1'  convert line breaks to <p> and <br>
    '2'  sanitized HTML (bleach) with bare URLs linkified

Plugins register more with register_textfilter() from their register hook.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import bleach
from django.utils.html import format_html, linebreaks

logger = logging.getLogger(__name__)

LEAVE_TEXT_UNTOUCHED = '0'
CONVERT_LINEBREAKS = '1'
SANITIZED_HTML = '2'

BLOCK_TAGS = [
    'p', 'br', 'strong', 'em', 'b', 'i', 'code', 'pre', 'blockquote',
    'h2', 'h3', 'h4', 'h5', 'h6', 'ul', 'ol', 'li', 'a', 'img', 'hr',
    'table', 'thead', 'tbody', 'tr', 'th', 'td', 'span', 'div',
]
INLINE_TAGS = ['strong', 'em', 'b', 'i', 'code', 'span', 'abbr']
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'rel'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'abbr': ['title'],
    '*': ['class'],
}


@dataclass
class TextFilter:
    id: str
    title: str
    help: str
    render: Callable[[str], str]


def _untouched(text: str) -> str:
    return text


def _linebreaks(text: str) -> str:
    if not text.strip():
        return ''
    return linebreaks(text, autoescape=True)


def _sanitized(text: str) -> str:
    cleaned = bleach.clean(text, tags=BLOCK_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True)
    return bleach.linkify(cleaned)


_filters: Dict[str, TextFilter] = {}


def register_textfilter(text_filter: TextFilter) -> None:
    _filters[text_filter.id] = text_filter


def get_textfilter(filter_id) -> Optional[TextFilter]:
    return _filters.get(str(filter_id))


def textfilter_ids() -> List[str]:
    return list(_filters)


def textfilter_choices() -> List[Tuple[str, str]]:
    return [(f.id, f.title) for f in _filters.values()]


def apply_textfilter(filter_id, text: str) -> str:
    """Render text with the named filter; unknown ids leave text untouched."""
    text_filter = get_textfilter(filter_id)
    if text_filter is None:
        logger.warning("Unknown text filter %r, leaving text untouched", filter_id)
        return text or ''
    return text_filter.render(text or '')


def textfilter_help(filter_id) -> str:
    text_filter = get_textfilter(filter_id)
    if text_filter is None or not text_filter.help:
        return ''
    return format_html('<p class="textfilter-help">{}</p>', text_filter.help)


def inline_html(title: str) -> str:
    """Title HTML: inline markup only."""
    return bleach.clean(title or '', tags=INLINE_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True)


def plain_text(html: str) -> str:
    return bleach.clean(html or '', tags=[], strip=True)


register_textfilter(TextFilter(
    LEAVE_TEXT_UNTOUCHED, 'Leave text untouched',
    'Text is published exactly as written.', _untouched,
))
register_textfilter(TextFilter(
    CONVERT_LINEBREAKS, 'Convert line breaks',
    'Blank lines start a new paragraph; single line breaks become <br>.', _linebreaks,
))
register_textfilter(TextFilter(
    SANITIZED_HTML, 'Sanitized HTML',
    'Basic HTML is allowed; scripts and unknown tags are stripped and URLs become links.',
    _sanitized,
))
