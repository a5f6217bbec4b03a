"""
Write panel lifecycle.

ArticleEditor runs one editor step for one request:

    create           empty form with site defaults
    edit             stored article, echoed input, or a restored draft
    publish          insert a new article
    save             update an existing article under the fingerprint check
    save_pane_state  remember which side panes the user keeps open

Every step except save_pane_state ends in edit(), which renders the full page
or, for async requests after a save, a patch script of the volatile regions.
Validation failures and concurrent edits never raise out of a step; they
become the message shown with the re-rendered form, with the user's input
kept.
"""

import html
import logging
import re
from http import HTTPStatus
from typing import Any, Dict, Optional

from django.conf import settings
from django.http import HttpResponse
from django.shortcuts import render
from django.utils import timezone
from django.utils.text import slugify
from django.utils.translation import gettext as _
from lxml import etree

from apps.core.callbacks import CallbackRegistry, Phase, get_registry
from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from apps.core.metrics import (
    increment_article_saves,
    increment_validation_failures,
    observe_editor_step,
)
from apps.core.middleware import celery_request_id_headers
from apps.core.models import Preference
from apps.core.partials import PartialRenderer
from apps.core.permissions import has_privs
from apps.core.security import TOKEN_FIELD, form_token
from apps.core.textfilters import apply_textfilter, get_textfilter, inline_html, plain_text
from apps.core.validators import ConstraintSet, build_constraint, validate_record

from . import constraints  # noqa: F401  registers the article constraint types
from .concurrency import (
    Conflict,
    can_edit,
    check_and_lock,
    fetch_snapshot,
    insert_article,
    stamp_update,
)
from .drafts import collect_fields, pack_draft, unpack_draft
from .models import Article, ArticleStatus, Section, epoch_seconds
from .partials import build_regions
from .tasks import ping_update_services
from .timestamps import echoed_expires, echoed_posted, lastmod_for_new, resolve_timestamps
from .workflow import (
    EXPIRES_FIELDS,
    PANES,
    POSTED_FIELDS,
    EditorMessage,
    EditorStep,
    EditorView,
    active_custom_fields,
)

logger = logging.getLogger(__name__)

EVENT = 'article_ui'

STATUS_MESSAGES = {
    ArticleStatus.PENDING: "Article saved as pending.",
    ArticleStatus.HIDDEN: "Article saved as hidden.",
    ArticleStatus.DRAFT: "Article saved as draft.",
}

KEYWORD_SPACES = re.compile(r' +')
KEYWORD_SEPARATORS = re.compile(r'( ?[\r\n\t,])+ ?')


def _as_int(value, default=0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _flag(value) -> bool:
    return str(value or '').strip() not in ('', '0', 'false', 'off')


def normalize_keywords(keywords: str) -> str:
    """'a  b,\n c ,d' -> 'a b,c,d'."""
    keywords = KEYWORD_SPACES.sub(' ', keywords or '')
    keywords = KEYWORD_SEPARATORS.sub(',', keywords)
    return keywords.strip(', ')


def status_message(status) -> str:
    return _(STATUS_MESSAGES.get(status, "Article posted."))


def check_url_title(url_title: str) -> str:
    """Warning text for a blank or shared url_title, else ''."""
    if not url_title:
        return _("URL-only title is blank.")
    count = Article.objects.filter(url_title=url_title).count()
    if count > 1:
        return _("Same URL-only title is used by %(count)d different articles.") % {'count': count}
    return ''


def update_site_lastmod() -> None:
    """Mark the public site as changed."""
    Preference.set_value('lastmod', timezone.now().isoformat())


def xml_response(status: int = 200, **values) -> HttpResponse:
    """Status envelope for background requests."""
    root = etree.Element('scriptorium')
    etree.SubElement(root, 'http-status').text = f'{status} {HTTPStatus(status).phrase}'
    for name, value in values.items():
        etree.SubElement(root, name).text = str(value)
    body = etree.tostring(root, xml_declaration=True, encoding='UTF-8')
    return HttpResponse(body, content_type='text/xml; charset=utf-8', status=status)


class ArticleEditor:
    """
    One Write panel request.

    The callback registry is injected; it defaults to the process-wide one
    built from EDITOR_PLUGINS.
    """

    def __init__(self, request, registry: Optional[CallbackRegistry] = None):
        self.request = request
        self.user = request.user
        self.registry = registry if registry is not None else get_registry()
        self.data: Dict[str, Any] = request.GET.dict()
        self.data.update(request.POST.dict())
        self.step = EditorStep.CREATE

    @property
    def is_async(self) -> bool:
        headers = self.request.headers
        return (
            headers.get('HX-Request', '').lower() == 'true'
            or headers.get('X-Requested-With') == 'XMLHttpRequest'
        )

    @property
    def can_publish(self) -> bool:
        return has_privs(self.user, 'article.publish')

    def dispatch(self, step: str) -> HttpResponse:
        self.step = EditorStep.from_string(step)
        handlers = {
            EditorStep.CREATE: self.create,
            EditorStep.EDIT: self.edit,
            EditorStep.PUBLISH: self.publish,
            EditorStep.SAVE: self.save,
            EditorStep.SAVE_PANE_STATE: self.save_pane_state,
        }
        with observe_editor_step(self.step.value):
            return handlers[self.step]()

    # ------------------------------------------------------------------
    # Submitted form -> article fields
    # ------------------------------------------------------------------

    def normalize(self, data) -> Dict[str, Any]:
        status = str(data.get('Status') or '').strip()
        record = {
            'title': (data.get('Title') or '').strip(),
            'body': data.get('Body') or '',
            'excerpt': data.get('Excerpt') or '',
            'body_filter': str(data.get('textile_body') or settings.DEFAULT_TEXTFILTER),
            'excerpt_filter': str(data.get('textile_excerpt') or settings.DEFAULT_TEXTFILTER),
            'image': (data.get('Image') or '').strip(),
            'status': _as_int(status) if status else ArticleStatus.LIVE,
            'section': (data.get('Section') or '').strip() or settings.DEFAULT_SECTION,
            'category1': (data.get('Category1') or '').strip(),
            'category2': (data.get('Category2') or '').strip(),
            'keywords': normalize_keywords(data.get('Keywords')),
            'annotate': _flag(data.get('Annotate')),
            'annotate_invite': (data.get('AnnotateInvite') or '').strip(),
            'override_form': (data.get('override_form') or '').strip(),
            'url_title': (data.get('url_title') or '').strip(),
        }
        for num in active_custom_fields():
            record[f'custom_{num}'] = (data.get(f'custom_{num}') or '').strip()
        return record

    def downgrade_status(self, status: int) -> int:
        """Live and sticky need the publish privilege; others get pending."""
        if ArticleStatus.is_public_value(status) and not self.can_publish:
            logger.info("Status %s downgraded to pending for user %s", status, self.user.pk)
            return ArticleStatus.PENDING
        return status

    def sanitize_for_url(self, text: str) -> str:
        url = self.registry.dispatch('sanitize_for_url', '', Phase.AFTER, text)
        return url if url else slugify(text)

    def title_slug(self, title: str) -> str:
        return self.sanitize_for_url(html.unescape(plain_text(inline_html(title))))

    def url_title_for(self, record, stored=None) -> str:
        """
        Derive url_title from the title when it is blank, or when the stored
        article is unpublished, still carries the slug of its stored title,
        the submitted url_title is unchanged and the title changed.
        """
        if not record['url_title']:
            return self.title_slug(record['title'])
        if (
            stored is not None
            and not stored.is_public
            and record['url_title'] == stored.url_title
            and stored.url_title == self.title_slug(stored.title)
            and record['title'] != stored.title
        ):
            return self.title_slug(record['title'])
        return record['url_title']

    def article_constraints(self, record) -> ConstraintSet:
        rules = ConstraintSet(
            status=build_constraint(
                'choice', record['status'], choices=ArticleStatus.values, message='invalid_status',
            ),
            section=build_constraint('section', record['section']),
            category1=build_constraint('category', record['category1'], type='article'),
            category2=build_constraint('category', record['category2'], type='article'),
            body_filter=build_constraint(
                'textfilter', record['body_filter'], message='invalid_textfilter_body',
            ),
            excerpt_filter=build_constraint(
                'textfilter', record['excerpt_filter'], message='invalid_textfilter_excerpt',
            ),
        )

        if not settings.ARTICLES_USE_EXCERPTS:
            rules.add('excerpt_blank', build_constraint(
                'blank', record['excerpt'], message='excerpt_not_blank',
            ))

        if not settings.USE_COMMENTS:
            rules.add('annotate_invite_blank', build_constraint(
                'blank', record['annotate_invite'], message='invite_not_blank',
            ))
            rules.add('annotate_false', build_constraint(
                'false', record['annotate'], message='comments_are_on',
            ))

        if settings.ALLOW_FORM_OVERRIDE:
            rules.add('override_form', build_constraint(
                'form', record['override_form'], type='article',
            ))
        else:
            rules.add('override_form_blank', build_constraint(
                'blank', record['override_form'], message='override_form_not_blank',
            ))

        return rules

    def validate(self, step: str, record) -> tuple:
        return validate_record(step, record, self.article_constraints(record), self.registry, EVENT)

    def render_markup(self, record) -> Dict[str, str]:
        return {
            'title_html': inline_html(record['title']),
            'body_html': apply_textfilter(record['body_filter'], record['body']),
            'excerpt_html': apply_textfilter(record['excerpt_filter'], record['excerpt']),
        }

    def do_pings(self, article_id) -> None:
        ping_update_services.apply_async(args=[article_id], headers=celery_request_id_headers())

    def reject(self, step: EditorStep, text: str, edit_step: EditorStep) -> HttpResponse:
        """Abort a write and re-render the submitted input with text as error."""
        increment_validation_failures(step.value)
        increment_article_saves(step.value, 'invalid')
        return self.edit(
            message=EditorMessage.error(text),
            step=edit_step.value,
            echo=True,
            refresh=self.is_async and edit_step is EditorStep.EDIT,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def create(self) -> HttpResponse:
        return self.edit(step=EditorStep.CREATE.value)

    def publish(self) -> HttpResponse:
        record = self.normalize(self.data)
        if not (record['title'] or record['body'] or record['excerpt']):
            return self.edit(step=EditorStep.CREATE.value, echo=True)

        now = timezone.now()
        try:
            posted, expires = resolve_timestamps(self.data, now, reset_field='publish_now')
        except ValidationError as exc:
            return self.reject(EditorStep.PUBLISH, exc.message, EditorStep.CREATE)

        record['status'] = self.downgrade_status(record['status'])
        record['url_title'] = self.url_title_for(record)

        ok, message = self.validate(EditorStep.PUBLISH.value, record)
        if not ok:
            return self.reject(EditorStep.PUBLISH, message, EditorStep.CREATE)

        record.update(self.render_markup(record))
        try:
            article = insert_article(
                posted=posted,
                expires=expires,
                last_modified=lastmod_for_new(posted, now),
                feed_time=posted,
                author=self.user,
                last_modified_by=self.user,
                **record,
            )
        except PersistenceError:
            increment_article_saves(EditorStep.PUBLISH.value, 'error')
            return self.edit(
                message=EditorMessage.error(_("Article save failed.")),
                step=EditorStep.CREATE.value,
                echo=True,
            )

        if article.is_public:
            self.do_pings(article.pk)
            update_site_lastmod()

        self.registry.dispatch('article_posted', '', Phase.AFTER, article)

        increment_article_saves(EditorStep.PUBLISH.value, 'success')
        logger.info("Article %s published with status %s", article.pk, article.status)

        warning = check_url_title(article.url_title)
        text = f"{status_message(article.status)} {warning}".strip()
        message = EditorMessage.warning(text) if warning else EditorMessage(text)
        return self.edit(message=message, step=EditorStep.EDIT.value, article_id=article.pk)

    def save(self) -> HttpResponse:
        article_id = _as_int(self.data.get('ID'))
        if not article_id:
            raise NotFoundError("No article to save", field='ID')

        try:
            guard = check_and_lock(article_id, self.data.get('sLastMod'), self.user)
        except AuthorizationError:
            increment_article_saves(EditorStep.SAVE.value, 'denied')
            raise

        if isinstance(guard, Conflict):
            return self.conflict(guard.modified_by, guard.snapshot.fingerprint)

        stored = guard.snapshot
        record = self.normalize(self.data)
        record['status'] = self.downgrade_status(record['status'])

        try:
            posted, expires = resolve_timestamps(self.data, timezone.now(), reset_field='reset_time')
        except ValidationError as exc:
            return self.reject(EditorStep.SAVE, exc.message, EditorStep.EDIT)

        record['url_title'] = self.url_title_for(record, stored)

        ok, message = self.validate(EditorStep.SAVE.value, record)
        if not ok:
            return self.reject(EditorStep.SAVE, message, EditorStep.EDIT)

        record.update(self.render_markup(record))
        record.update(posted=posted, expires=expires)

        try:
            stamp_update(stored.id, stored.fingerprint, record, self.user)
        except ConflictError as exc:
            return self.conflict(exc.modified_by, fetch_snapshot(stored.id).fingerprint)
        except PersistenceError:
            increment_article_saves(EditorStep.SAVE.value, 'error')
            return self.edit(
                message=EditorMessage.error(_("Article save failed.")),
                step=EditorStep.EDIT.value,
                echo=True,
                refresh=self.is_async,
            )

        now_public = ArticleStatus.is_public_value(record['status'])
        if now_public and not stored.is_public:
            self.do_pings(stored.id)
        if now_public or stored.is_public:
            update_site_lastmod()

        self.registry.dispatch('article_saved', '', Phase.AFTER, dict(record, id=stored.id))

        increment_article_saves(EditorStep.SAVE.value, 'success')
        logger.info("Article %s saved with status %s", stored.id, record['status'])

        warning = check_url_title(record['url_title'])
        text = f"{status_message(record['status'])} {warning}".strip()
        message = EditorMessage.warning(text) if warning else EditorMessage(text)
        return self.edit(
            message=message,
            step=EditorStep.EDIT.value,
            article_id=stored.id,
            refresh=self.is_async,
        )

    def conflict(self, modified_by: str, stored_fingerprint: int) -> HttpResponse:
        increment_article_saves(EditorStep.SAVE.value, 'conflict')
        return self.edit(
            message=EditorMessage.error(_("Concurrent edit by %(user)s.") % {'user': modified_by}),
            step=EditorStep.EDIT.value,
            concurrent=True,
            stored_fingerprint=stored_fingerprint,
            refresh=self.is_async,
        )

    def save_pane_state(self) -> HttpResponse:
        pane = self.data.get('pane', '')
        if pane not in PANES:
            logger.info("Unknown pane %r", pane)
            return xml_response(400, error=_("Invalid pane."))

        visible = '1' if self.data.get('visible') == 'true' else '0'
        Preference.set_value(f'pane_article_{pane}_visible', visible, user=self.user)
        return xml_response(200, pane=pane, visible=visible)

    def pane_visibility(self) -> Dict[str, bool]:
        """Stored pane state for the user; panes never toggled are open."""
        names = {f'pane_article_{pane}_visible': pane for pane in PANES}
        stored = dict(
            Preference.objects.filter(user=self.user, name__in=names).values_list('name', 'value')
        )
        return {pane: stored.get(name, '1') == '1' for name, pane in names.items()}

    # ------------------------------------------------------------------
    # Edit screen
    # ------------------------------------------------------------------

    def stored_state(self, article_id: int) -> Dict[str, str]:
        """Form field values for a stored article."""
        try:
            article = Article.objects.select_related('author', 'last_modified_by').get(pk=article_id)
        except Article.DoesNotExist:
            raise NotFoundError(f"Article {article_id} not found", field='ID')

        state = {
            'ID': str(article.pk),
            'Title': article.title,
            'Body': article.body,
            'Excerpt': article.excerpt,
            'textile_body': article.body_filter,
            'textile_excerpt': article.excerpt_filter,
            'Image': article.image,
            'Keywords': article.keywords,
            'Status': str(article.status),
            'Section': article.section,
            'Category1': article.category1,
            'Category2': article.category2,
            'Annotate': '1' if article.annotate else '0',
            'AnnotateInvite': article.annotate_invite,
            'AuthorID': article.author.username if article.author_id else '',
            'LastModID': article.last_modified_by.username if article.last_modified_by_id else '',
            'sPosted': str(epoch_seconds(article.posted)),
            'sLastMod': str(article.fingerprint),
            'sExpires': str(epoch_seconds(article.expires)),
            'override_form': article.override_form,
            'url_title': article.url_title,
            'publish_now': '0',
            'reset_time': '0',
        }

        posted = timezone.localtime(article.posted)
        state.update(zip(POSTED_FIELDS, (
            f'{posted.year:04d}', f'{posted.month:02d}', f'{posted.day:02d}',
            f'{posted.hour:02d}', f'{posted.minute:02d}', f'{posted.second:02d}',
        )))
        if article.expires:
            expires = timezone.localtime(article.expires)
            state.update(zip(EXPIRES_FIELDS, (
                f'{expires.year:04d}', f'{expires.month:02d}', f'{expires.day:02d}',
                f'{expires.hour:02d}', f'{expires.minute:02d}', f'{expires.second:02d}',
            )))
        else:
            state.update((name, '') for name in EXPIRES_FIELDS)

        for num in active_custom_fields():
            state[f'custom_{num}'] = getattr(article, f'custom_{num}')
        return state

    def create_defaults(self) -> Dict[str, str]:
        return {
            'Status': str(ArticleStatus.LIVE),
            'Section': settings.DEFAULT_SECTION,
            'textile_body': settings.DEFAULT_TEXTFILTER,
            'textile_excerpt': settings.DEFAULT_TEXTFILTER,
            'Annotate': '1' if settings.COMMENTS_ON_DEFAULT else '0',
            'AnnotateInvite': settings.COMMENTS_DEFAULT_INVITE,
            'AuthorID': self.user.get_username(),
            'publish_now': '1',
        }

    def editable(self, article_id: int) -> bool:
        if not article_id:
            return has_privs(self.user, 'article')
        stored = Article.objects.filter(pk=article_id).values('status', 'author_id').first()
        return stored is not None and can_edit(self.user, stored['status'], stored['author_id'])

    def edit(
        self,
        message: Optional[EditorMessage] = None,
        concurrent: bool = False,
        refresh: bool = False,
        step: Optional[str] = None,
        article_id: Optional[int] = None,
        echo: bool = False,
        stored_fingerprint: Optional[int] = None,
    ) -> HttpResponse:
        """
        Render the edit screen.

        The field values come from the stored row when a text-view edit is
        requested, from the signed draft when returning from the HTML or
        preview view, and from the submitted form otherwise.
        """
        message = message or EditorMessage()
        step = step or self.data.get('step') or EditorStep.EDIT.value
        article_id = article_id or _as_int(self.data.get('ID'))
        from_view = self.data.get('from_view', '')
        draft_views = (EditorView.HTML.value, EditorView.PREVIEW.value)

        view = EditorView.TEXT.value
        if not self.step.is_mutation and self.data.get('view') in {v.value for v in EditorView}:
            view = self.data['view']

        if (
            step == EditorStep.EDIT.value
            and view == EditorView.TEXT.value
            and article_id
            and from_view not in draft_views
            and not concurrent
            and not echo
        ):
            state = self.stored_state(article_id)
        else:
            if from_view in draft_views and not self.step.is_mutation:
                try:
                    state = unpack_draft(self.data.get('store', ''))
                except ValidationError as exc:
                    if not message:
                        message = EditorMessage.warning(exc.message)
                    state = collect_fields(self.data)
            else:
                state = collect_fields(self.data)
                if step == EditorStep.CREATE.value:
                    for name, value in self.create_defaults().items():
                        if name not in self.data:
                            state[name] = value

            if concurrent and stored_fingerprint is not None:
                state['sLastMod'] = str(stored_fingerprint)

            posted = echoed_posted(state)
            if posted is not None:
                state['sPosted'] = str(epoch_seconds(posted))
            expires = echoed_expires(state)
            state['sExpires'] = str(epoch_seconds(expires)) if expires else '0'

        if get_textfilter(state.get('textile_body')) is None:
            state['textile_body'] = settings.DEFAULT_TEXTFILTER
        if get_textfilter(state.get('textile_excerpt')) is None:
            state['textile_excerpt'] = settings.DEFAULT_TEXTFILTER
        if not Section.selectable().filter(name=state.get('Section', '')).exists():
            state['Section'] = settings.DEFAULT_SECTION
        if not state.get('Status'):
            state['Status'] = str(ArticleStatus.LIVE)
        if article_id:
            state['ID'] = str(article_id)

        view_state: Dict[str, Any] = dict(
            state,
            step=step,
            view=view,
            prev_id=0,
            next_id=0,
            can_edit=self.editable(article_id if step != EditorStep.CREATE.value else 0),
            can_publish=self.can_publish,
        )
        if step != EditorStep.CREATE.value and article_id:
            posted_at = Article.objects.filter(pk=article_id).values_list('posted', flat=True).first()
            if posted_at is not None:
                view_state['prev_id'] = Article.neighbour_id(posted_at, 'prev')
                view_state['next_id'] = Article.neighbour_id(posted_at, 'next')

        renderer = PartialRenderer(build_regions(self.registry), self.registry, EVENT)

        if refresh:
            script = renderer.render(view_state, refresh=True, message=message.text, level=message.level.value)
            return HttpResponse(script.render(), content_type='text/javascript; charset=utf-8')

        regions = renderer.render(view_state)
        context = {
            'regions': regions,
            'message': message,
            'view_state': view_state,
            'step': EditorStep.EDIT.value if article_id and step != EditorStep.CREATE.value else EditorStep.CREATE.value,
            'article_id': article_id if step != EditorStep.CREATE.value else 0,
            'view': view,
            'token_field': TOKEN_FIELD,
            'token': form_token(self.user),
            'store': pack_draft(state) if view != EditorView.TEXT.value else '',
            'custom_fields': active_custom_fields(),
            'panes': self.pane_visibility(),
            'use_excerpts': settings.ARTICLES_USE_EXCERPTS,
            'use_comments': settings.USE_COMMENTS,
        }
        return render(self.request, 'articles/edit.html', context)
