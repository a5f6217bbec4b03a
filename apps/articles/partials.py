"""
Write panel regions.

build_regions() registers every region of the edit screen, in layout order,
with its render mode and client-side selector. Producers take the view state
(a dict of form field name -> value plus a few editor keys such as 'step',
'view', 'prev_id' and 'next_id') and return markup, or the bare control value
for VOLATILE_VALUE regions.

Plugins can replace the default markup of most regions through
pluggable_ui('article_ui', <element>, default, view_state).
"""

import logging
import re
from datetime import datetime, timezone as dt_timezone

from django.conf import settings
from django.utils import timezone
from django.utils.html import format_html, format_html_join
from django.utils.http import urlencode
from django.utils.safestring import mark_safe
from django.utils.translation import gettext as _

from apps.core.callbacks import CallbackRegistry
from apps.core.partials import RegionRegistry, RenderMode
from apps.core.textfilters import (
    LEAVE_TEXT_UNTOUCHED,
    apply_textfilter,
    textfilter_choices,
    textfilter_help,
)

from .models import Article, ArticleForm, ArticleStatus, Category, Section
from .workflow import EXPIRES_FIELDS, POSTED_FIELDS, EditorStep, EditorView, active_custom_fields

logger = logging.getLogger(__name__)

STATIC = RenderMode.STATIC
VOLATILE = RenderMode.VOLATILE
VOLATILE_VALUE = RenderMode.VOLATILE_VALUE

DATE_FORMAT = '%d %b %Y %H:%M'

SELECTED = mark_safe(' selected')
CHECKED = mark_safe(' checked')


def _flag(value) -> bool:
    return str(value or '').strip() not in ('', '0', 'false', 'off')


def _as_int(value, default=0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def local_time(epoch_seconds):
    """Site-local datetime for an epoch-seconds value; None for 0 or junk."""
    seconds = _as_int(epoch_seconds)
    if seconds <= 0:
        return None
    return timezone.localtime(datetime.fromtimestamp(seconds, tz=dt_timezone.utc))


def display_keywords(keywords) -> str:
    """'a,b,c' -> 'a, b, c'."""
    return re.sub(r',(\S)', r', \1', keywords or '')


def select(name, element_id, options, selected, blank=False):
    choices = [('', '')] + list(options) if blank else list(options)
    rendered = format_html_join(
        '',
        '<option value="{}"{}>{}</option>',
        ((value, SELECTED if str(value) == str(selected) else '', label) for value, label in choices),
    )
    return format_html('<select id="{}" name="{}">{}</select>', element_id, name, rendered)


def text_input(name, element_id, value, size=32):
    return format_html(
        '<input type="text" id="{}" name="{}" value="{}" size="{}">',
        element_id, name, value or '', size,
    )


def date_inputs(view_state, names, prefix):
    """Six sub-field inputs: year/month/day, then hour/minute/second."""
    sizes = (4, 2, 2, 2, 2, 2)
    inputs = [
        text_input(name, f'{prefix}-{name.replace("exp_", "")}', view_state.get(name, ''), size)
        for name, size in zip(names, sizes)
    ]
    return format_html(
        '<span class="date">{} / {} / {}</span> <span class="time">{} : {} : {}</span>',
        *inputs
    )


class ArticleRegions:
    """Producers for the Write panel, bound to one callback registry."""

    def __init__(self, registry: CallbackRegistry, event: str = 'article_ui'):
        self.registry = registry
        self.event = event

    def ui(self, element, default, view_state):
        return self.registry.pluggable_ui(self.event, element, default, view_state)

    # Hidden fingerprints

    def last_mod_value(self, view_state, key):
        return str(view_state.get('sLastMod') or '')

    def posted_value(self, view_state, key):
        return str(view_state.get('sPosted') or '')

    # Side column

    def sidehelp(self, view_state, key):
        body_filter = str(view_state.get('textile_body', ''))
        excerpt_filter = str(view_state.get('textile_excerpt', ''))
        choices = textfilter_choices()

        controls = [format_html(
            '<p class="markup-body"><label for="markup-body">{}</label> {}</p>',
            _('Body markup'), select('textile_body', 'markup-body', choices, body_filter),
        )]
        if settings.ARTICLES_USE_EXCERPTS:
            controls.append(format_html(
                '<p class="markup-excerpt"><label for="markup-excerpt">{}</label> {}</p>',
                _('Excerpt markup'), select('textile_excerpt', 'markup-excerpt', choices, excerpt_filter),
            ))

        help_text = textfilter_help(body_filter)
        if excerpt_filter != body_filter:
            help_text += textfilter_help(excerpt_filter)

        default = format_html(
            '<div id="textfilter_group">{}{}</div>',
            mark_safe(''.join(controls)), mark_safe(help_text),
        )
        return self.ui('sidehelp', default, view_state)

    def custom_field(self, view_state, key):
        num = int(key.rsplit('_', 1)[-1])
        label = active_custom_fields().get(num, '')
        return format_html(
            '<p class="custom-field custom-{0}"><label for="custom-{0}">{1}</label> {2}</p>',
            num, label, text_input(f'custom_{num}', f'custom-{num}', view_state.get(f'custom_{num}', '')),
        )

    def custom_value(self, view_state, key):
        return str(view_state.get(key) or '')

    def custom_fields(self, view_state, key):
        fields = mark_safe(''.join(
            self.custom_field(view_state, f'custom_field_{num}') for num in active_custom_fields()
        ))
        default = format_html('<div id="custom_field_group">{}</div>', fields)
        return self.ui('custom_fields', default, view_state)

    def image(self, view_state, key):
        default = format_html(
            '<div id="image_group"><p class="article-image"><label for="article-image">{}</label> {}</p></div>',
            _('Article image'), text_input('Image', 'article-image', view_state.get('Image', '')),
        )
        return self.ui('article_image', default, view_state)

    def keywords(self, view_state, key):
        default = format_html(
            '<p class="keywords"><label for="keywords">{}</label> {}</p>',
            _('Keywords'), text_input('Keywords', 'keywords', display_keywords(view_state.get('Keywords'))),
        )
        return self.ui('keywords', default, view_state)

    def keywords_value(self, view_state, key):
        return display_keywords(view_state.get('Keywords'))

    def url_title(self, view_state, key):
        default = format_html(
            '<p class="url-title"><label for="url-title">{}</label> {}</p>',
            _('URL-only title'), text_input('url_title', 'url-title', view_state.get('url_title', '')),
        )
        return self.ui('url_title', default, view_state)

    def url_title_value(self, view_state, key):
        return str(view_state.get('url_title') or '')

    def recent_articles(self, view_state, key):
        limit = getattr(settings, 'WRITE_RECENT_ARTICLES_COUNT', 10)
        items = format_html_join(
            '',
            '<li class="recent-article"><a href="?{}">{}</a></li>',
            (
                (urlencode({'step': 'edit', 'ID': article.pk}), article.title or _('Untitled'))
                for article in Article.recent(limit)
            ),
        )
        default = format_html('<ol class="recent">{}</ol>', items)
        return self.ui('recent_articles', default, view_state)

    # Main column

    def title(self, view_state, key):
        if view_state.get('view', EditorView.TEXT.value) == EditorView.TEXT.value:
            default = format_html(
                '<p class="title"><label for="title">{}</label> {}</p>',
                _('Title'), text_input('Title', 'title', view_state.get('Title', ''), size=64),
            )
        else:
            default = format_html('<h1 class="title">{}</h1>', view_state.get('Title', ''))
        return self.ui('title', default, view_state)

    def title_value(self, view_state, key):
        return str(view_state.get('Title') or '')

    def article_view(self, view_state, key):
        article_id = _as_int(view_state.get('ID'))
        link = ''
        if article_id and view_state.get('step') != EditorStep.CREATE.value:
            if ArticleStatus.is_public_value(view_state.get('Status')):
                href = '{}/{}/{}/'.format(
                    settings.SITE_URL.rstrip('/'), view_state.get('Section', ''), view_state.get('url_title', ''),
                )
            else:
                stamp = int(timezone.now().timestamp())
                href = '{}/?{}'.format(
                    settings.SITE_URL.rstrip('/'), urlencode({'txpreview': f'{article_id}.{stamp}'}),
                )
            link = format_html('<a class="article-view" href="{}">{}</a>', href, _('View'))
        default = format_html('<span id="article_partial_article_view">{}</span>', link)
        return self.ui('article_view', default, view_state)

    def _text_area(self, view_state, field, filter_field, css_class, label, rows):
        view = view_state.get('view', EditorView.TEXT.value)
        text = view_state.get(field, '') or ''
        if view == EditorView.TEXT.value:
            return format_html(
                '<p class="{0}"><label for="{0}">{1}</label> '
                '<textarea id="{0}" name="{2}" cols="64" rows="{3}">{4}</textarea></p>',
                css_class, label, field, rows, text,
            )
        html = apply_textfilter(view_state.get(filter_field, LEAVE_TEXT_UNTOUCHED), text)
        if view == EditorView.HTML.value:
            return format_html('<pre class="{}"><code>{}</code></pre>', css_class, html)
        return format_html('<div class="{}">{}</div>', css_class, mark_safe(html))

    def body(self, view_state, key):
        default = self._text_area(view_state, 'Body', 'textile_body', 'body', _('Body'), 24)
        return self.ui('body', default, view_state)

    def excerpt(self, view_state, key):
        if not settings.ARTICLES_USE_EXCERPTS:
            return ''
        default = self._text_area(view_state, 'Excerpt', 'textile_excerpt', 'excerpt', _('Excerpt'), 6)
        return self.ui('excerpt', default, view_state)

    def author(self, view_state, key):
        posted = local_time(view_state.get('sPosted'))
        if view_state.get('step') == EditorStep.CREATE.value or posted is None:
            return self.ui('author', mark_safe('<p class="author"></p>'), view_state)

        modified = ''
        last_modified = local_time(_as_int(view_state.get('sLastMod')) // 1_000_000)
        if last_modified is not None and _as_int(view_state.get('sPosted')) != int(last_modified.timestamp()):
            modified = format_html(
                '<br>{}: {} &#183; {}',
                _('Modified by'), view_state.get('LastModID', ''), last_modified.strftime(DATE_FORMAT),
            )
        default = format_html(
            '<p class="author"><small>{}: {} &#183; {}{}</small></p>',
            _('Posted by'), view_state.get('AuthorID', ''), posted.strftime(DATE_FORMAT), modified,
        )
        return self.ui('author', default, view_state)

    def view_modes(self, view_state, key):
        filters = (str(view_state.get('textile_body', '')), str(view_state.get('textile_excerpt', '')))
        if all(f == LEAVE_TEXT_UNTOUCHED for f in filters):
            default = mark_safe('&#160;')
        else:
            current = view_state.get('view', EditorView.TEXT.value)
            labels = {EditorView.TEXT: _('Text'), EditorView.HTML: _('HTML'), EditorView.PREVIEW: _('Preview')}
            tabs = format_html_join(
                '',
                '<li class="view-mode{}"><button type="submit" name="view" value="{}">{}</button></li>',
                ((' active' if mode.value == current else '', mode.value, label) for mode, label in labels.items()),
            )
            default = format_html('<ul class="view-modes">{}</ul>', tabs)
        # plugins replace the tabs, the container stays for the patch selector
        return format_html('<div id="view_modes">{}</div>', mark_safe(self.ui('view', default, view_state)))

    def article_nav(self, view_state, key):
        def link(direction, label):
            article_id = _as_int(view_state.get(f'{direction}_id'))
            if article_id:
                return format_html(
                    '<a class="navlink" rel="{}" href="?{}">{}</a>',
                    direction, urlencode({'step': 'edit', 'ID': article_id}), label,
                )
            return format_html('<span class="navlink-disabled">{}</span>', label)

        default = format_html(
            '<p role="navigation" class="nav-tertiary">{}{}</p>',
            link('prev', _('Previous')), link('next', _('Next')),
        )
        return self.ui('article_nav', default, view_state)

    def status(self, view_state, key):
        current = _as_int(view_state.get('Status')) or ArticleStatus.LIVE
        radios = format_html_join(
            '',
            '<li class="status-{0}"><input type="radio" name="Status" id="status-{0}" value="{0}"{1}>'
            ' <label for="status-{0}">{2}</label></li>',
            ((value, CHECKED if value == current else '', label) for value, label in ArticleStatus.choices),
        )
        default = format_html(
            '<div id="write-status"><fieldset><legend>{}</legend><ul class="status">{}</ul></fieldset></div>',
            _('Status'), radios,
        )
        return self.ui('status', default, view_state)

    def categories(self, view_state, key):
        options = [(c.name, c.title or c.name) for c in Category.objects.filter(type='article')]
        default = format_html(
            '<div id="categories_group">'
            '<p class="category-1"><label for="category-1">{}</label> {}</p>'
            '<p class="category-2"><label for="category-2">{}</label> {}</p>'
            '</div>',
            _('Category 1'), select('Category1', 'category-1', options, view_state.get('Category1', ''), blank=True),
            _('Category 2'), select('Category2', 'category-2', options, view_state.get('Category2', ''), blank=True),
        )
        return self.ui('categories', default, view_state)

    def section(self, view_state, key):
        options = [(s.name, s.title or s.name) for s in Section.selectable()]
        override = ''
        if settings.ALLOW_FORM_OVERRIDE:
            forms = [(f.name, f.name) for f in ArticleForm.overridable()]
            override = format_html(
                '<p class="override-form"><label for="override-form">{}</label> {}</p>',
                _('Override form'), select('override_form', 'override-form', forms,
                                            view_state.get('override_form', ''), blank=True),
            )
        default = format_html(
            '<p class="section"><label for="section">{}</label> {}</p>{}',
            _('Section'), select('Section', 'section', options, view_state.get('Section', '')), override,
        )
        return self.ui('section', default, view_state)

    def comments_expired(self, view_state) -> bool:
        days = _as_int(getattr(settings, 'COMMENTS_DISABLED_AFTER', 0))
        posted = _as_int(view_state.get('sPosted'))
        if view_state.get('step') == EditorStep.CREATE.value or not days or not posted:
            return False
        return int(timezone.now().timestamp()) - posted > days * 86400

    def comments(self, view_state, key):
        if not settings.USE_COMMENTS:
            return ''

        if self.comments_expired(view_state):
            default = format_html('<p class="comment-annotate" id="write-comments">{}</p>', _('Expired'))
            return self.ui('annotate_invite', default, view_state)

        annotate = _flag(view_state.get('Annotate'))
        radios = format_html(
            '<p class="comment-annotate">'
            '<input type="radio" name="Annotate" id="annotate-1" value="1"{}> <label for="annotate-1">{}</label> '
            '<input type="radio" name="Annotate" id="annotate-0" value="0"{}> <label for="annotate-0">{}</label>'
            '</p>',
            CHECKED if annotate else '', _('On'), '' if annotate else CHECKED, _('Off'),
        )
        default = format_html(
            '<div id="write-comments">{}<p class="comment-invite"><label for="comment-invite">{}</label> {}</p></div>',
            radios, _('Comment invitation'),
            text_input('AnnotateInvite', 'comment-invite', view_state.get('AnnotateInvite', '')),
        )
        return self.ui('annotate_invite', default, view_state)

    def posted(self, view_state, key):
        if view_state.get('step') == EditorStep.CREATE.value:
            reset_field, reset_label = 'publish_now', _('Set timestamp to now')
        else:
            reset_field, reset_label = 'reset_time', _('Reset time to now')

        default = format_html(
            '<div id="write-timestamp"><fieldset><legend>{0}</legend>'
            '<p class="{1}-option"><input type="checkbox" name="{1}" id="{1}" value="1"{2}>'
            ' <label for="{1}">{3}</label></p>'
            '<p class="posted">{4}</p></fieldset></div>',
            _('Date and time'), reset_field, CHECKED if _flag(view_state.get(reset_field)) else '',
            reset_label, date_inputs(view_state, POSTED_FIELDS, 'posted'),
        )
        return self.ui('timestamp', default, view_state)

    def expires(self, view_state, key):
        default = format_html(
            '<div id="write-expires"><fieldset><legend>{}</legend><p class="expires">{}</p></fieldset></div>',
            _('Expires'), date_inputs(view_state, EXPIRES_FIELDS, 'expires'),
        )
        return self.ui('expires', default, view_state)


def build_regions(registry: CallbackRegistry, custom_fields=None) -> RegionRegistry:
    """Every Write panel region, in layout order."""
    producers = ArticleRegions(registry)
    regions = RegionRegistry()

    regions.add('sLastMod', VOLATILE_VALUE, '[name=sLastMod]', producers.last_mod_value)
    regions.add('sPosted', VOLATILE_VALUE, '[name=sPosted]', producers.posted_value)
    regions.add('sidehelp', VOLATILE, '#textfilter_group', producers.sidehelp)
    regions.add('custom_fields', STATIC, '#custom_field_group', producers.custom_fields)
    regions.add('image', STATIC, '#image_group', producers.image)
    regions.add('keywords', STATIC, 'p.keywords', producers.keywords)
    regions.add('keywords_value', VOLATILE_VALUE, '#keywords', producers.keywords_value)
    regions.add('url_title', STATIC, 'p.url-title', producers.url_title)
    regions.add('url_title_value', VOLATILE_VALUE, '#url-title', producers.url_title_value)
    regions.add('recent_articles', VOLATILE, '#recent_group .recent', producers.recent_articles)
    regions.add('title', STATIC, 'p.title', producers.title)
    regions.add('title_value', VOLATILE_VALUE, '#title', producers.title_value)
    regions.add('article_view', VOLATILE, '#article_partial_article_view', producers.article_view)
    regions.add('body', STATIC, 'p.body', producers.body)
    regions.add('excerpt', STATIC, 'p.excerpt', producers.excerpt)
    regions.add('author', VOLATILE, 'p.author', producers.author)
    regions.add('view_modes', VOLATILE, '#view_modes', producers.view_modes)
    regions.add('article_nav', VOLATILE, 'p.nav-tertiary', producers.article_nav)
    regions.add('status', VOLATILE, '#write-status', producers.status)
    regions.add('categories', STATIC, '#categories_group', producers.categories)
    regions.add('section', STATIC, 'p.section', producers.section)
    regions.add('comments', VOLATILE, '#write-comments', producers.comments)
    regions.add('posted', VOLATILE, '#write-timestamp', producers.posted)
    regions.add('expires', VOLATILE, '#write-expires', producers.expires)

    numbers = active_custom_fields() if custom_fields is None else custom_fields
    for num in numbers:
        regions.add(f'custom_field_{num}', STATIC, f'p.custom-field.custom-{num}', producers.custom_field)
        regions.add(f'custom_{num}', STATIC, f'#custom-{num}', producers.custom_value)

    return regions
