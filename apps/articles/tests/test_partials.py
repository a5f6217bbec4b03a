"""
Tests for the Write panel regions.
"""

import pytest

from apps.articles.models import ArticleStatus
from apps.articles.partials import ArticleRegions, build_regions, display_keywords, local_time
from apps.core.callbacks import Phase
from apps.core.partials import PartialRenderer, RenderMode

VOLATILE_KEYS = [
    'sLastMod', 'sPosted', 'sidehelp', 'keywords_value', 'url_title_value',
    'recent_articles', 'title_value', 'article_view', 'author', 'view_modes',
    'article_nav', 'status', 'comments', 'posted', 'expires',
]


def view_state(**values):
    state = {
        'step': 'edit',
        'view': 'text',
        'ID': '7',
        'Title': 'Hello',
        'Body': 'World',
        'Excerpt': '',
        'Status': str(ArticleStatus.LIVE),
        'Section': 'articles',
        'url_title': 'hello',
        'Keywords': 'alpha,beta',
        'textile_body': '1',
        'textile_excerpt': '1',
        'Annotate': '0',
        'AnnotateInvite': 'Comment',
        'sLastMod': '1704184215123456',
        'sPosted': '1704110400',
        'AuthorID': 'publisher',
        'LastModID': 'publisher',
        'prev_id': 0,
        'next_id': 0,
    }
    state.update(values)
    return state


# ============================================================================
# Registration
# ============================================================================

class TestBuildRegions:

    def test_volatile_regions_in_order(self, registry):
        regions = build_regions(registry, custom_fields=[])
        assert [region.key for region in regions.volatile()] == VOLATILE_KEYS

    def test_modes_and_selectors(self, registry):
        regions = build_regions(registry, custom_fields=[])

        assert regions.get('sLastMod').mode is RenderMode.VOLATILE_VALUE
        assert regions.get('sLastMod').selector == '[name=sLastMod]'
        assert regions.get('title_value').selector == '#title'
        assert regions.get('body').mode is RenderMode.STATIC
        assert regions.get('body').selector == 'p.body'
        assert regions.get('comments').selector == '#write-comments'

    def test_custom_field_regions(self, registry):
        regions = build_regions(registry, custom_fields=[1, 3])

        assert regions.get('custom_field_3').selector == 'p.custom-field.custom-3'
        assert regions.get('custom_1').selector == '#custom-1'
        assert 'custom_2' not in regions
        assert len(regions.volatile()) == len(VOLATILE_KEYS)

    def test_configured_custom_fields_by_default(self, registry):
        regions = build_regions(registry)
        assert 'custom_field_1' in regions
        assert 'custom_field_2' in regions


# ============================================================================
# Producers
# ============================================================================

class TestHelpers:

    def test_display_keywords(self):
        assert display_keywords('a,b,c') == 'a, b, c'
        assert display_keywords('') == ''

    def test_local_time(self):
        assert local_time('0') is None
        assert local_time('junk') is None
        assert local_time('1704110400').year == 2024


class TestProducers:

    @pytest.fixture
    def producers(self, registry):
        return ArticleRegions(registry)

    def test_view_modes_placeholder_when_untouched(self, producers):
        html = producers.view_modes(view_state(textile_body='0', textile_excerpt='0'), 'view_modes')
        assert html == '<div id="view_modes">&#160;</div>'

    def test_view_modes_tabs(self, producers):
        html = producers.view_modes(view_state(view='html'), 'view_modes')
        assert '<li class="view-mode active"><button type="submit" name="view" value="html">' in html

    def test_article_nav(self, producers):
        html = producers.article_nav(view_state(prev_id=3, next_id=0), 'article_nav')

        assert html.startswith('<p role="navigation" class="nav-tertiary">')
        assert 'rel="prev"' in html
        assert 'ID=3' in html
        assert '<span class="navlink-disabled">Next</span>' in html

    def test_status_checked(self, producers):
        html = producers.status(view_state(Status=str(ArticleStatus.DRAFT)), 'status')
        assert 'id="status-1" value="1" checked' in html
        assert 'id="status-4" value="4">' in html

    def test_status_defaults_to_live(self, producers):
        html = producers.status(view_state(Status=''), 'status')
        assert 'id="status-4" value="4" checked' in html

    def test_value_regions(self, producers):
        state = view_state()
        assert producers.last_mod_value(state, 'sLastMod') == '1704184215123456'
        assert producers.keywords_value(state, 'keywords_value') == 'alpha, beta'
        assert producers.title_value(state, 'title_value') == 'Hello'

    def test_title_escaped(self, producers):
        html = producers.title(view_state(Title='<b>x</b>'), 'title')
        assert '&lt;b&gt;x&lt;/b&gt;' in html

    def test_body_preview_renders_markup(self, producers):
        html = producers.body(view_state(view='preview', Body='one\ntwo'), 'body')
        assert html == '<div class="body"><p>one<br>two</p></div>'

    def test_body_html_view_shows_source(self, producers):
        html = producers.body(view_state(view='html', Body='one'), 'body')
        assert html == '<pre class="body"><code>&lt;p&gt;one&lt;/p&gt;</code></pre>'

    def test_author_blank_on_create(self, producers):
        assert producers.author(view_state(step='create'), 'author') == '<p class="author"></p>'

    def test_author_shows_modifier(self, producers):
        html = producers.author(view_state(LastModID='managing'), 'author')
        assert 'Posted by: publisher' in html
        assert 'Modified by: managing' in html

    def test_posted_reset_option(self, producers):
        assert 'name="publish_now"' in producers.posted(view_state(step='create'), 'posted')
        assert 'name="reset_time"' in producers.posted(view_state(), 'posted')

    def test_comments_expired(self, producers, settings):
        settings.COMMENTS_DISABLED_AFTER = 1
        html = producers.comments(view_state(), 'comments')
        assert html == '<p class="comment-annotate" id="write-comments">Expired</p>'

    def test_comments_never_expire_when_disabled_after_is_zero(self, producers, settings):
        settings.COMMENTS_DISABLED_AFTER = 0
        html = producers.comments(view_state(Annotate='1'), 'comments')
        assert 'id="annotate-1" value="1" checked' in html

    def test_comments_off(self, producers, settings):
        settings.USE_COMMENTS = False
        assert producers.comments(view_state(), 'comments') == ''

    def test_excerpt_off(self, producers, settings):
        settings.ARTICLES_USE_EXCERPTS = False
        assert producers.excerpt(view_state(), 'excerpt') == ''

    def test_pluggable_title(self, registry):
        registry.register(
            'article_ui',
            lambda event, step, default, state: '<p class="title">Plugged</p>',
            step='title',
            phase=Phase.BEFORE,
        )

        html = ArticleRegions(registry).title(view_state(), 'title')

        assert html == '<p class="title">Plugged</p>'

    def test_pluggable_view_tabs_keep_container(self, registry):
        registry.register(
            'article_ui',
            lambda event, step, default, state: '<ul class="tabs">Mine</ul>',
            step='view',
            phase=Phase.BEFORE,
        )
        producers = ArticleRegions(registry)

        html = producers.view_modes(view_state(), 'view_modes')

        assert html == '<div id="view_modes"><ul class="tabs">Mine</ul></div>'
        assert 'Mine' not in producers.article_view(view_state(), 'article_view')

    def test_pluggable_article_nav(self, registry):
        seen = []

        def nav(event, step, default, state):
            seen.append(default)
            return '<p class="nav-tertiary">Elsewhere</p>'

        registry.register('article_ui', nav, step='article_nav', phase=Phase.BEFORE)

        html = ArticleRegions(registry).article_nav(view_state(prev_id=3), 'article_nav')

        assert html == '<p class="nav-tertiary">Elsewhere</p>'
        assert 'ID=3' in seen[0]


# ============================================================================
# Rendering
# ============================================================================

@pytest.mark.django_db
class TestRendering:

    def test_full_page_renders_every_region(self, registry, lookups):
        regions = build_regions(registry)

        html = PartialRenderer(regions, registry).render(view_state())

        assert set(html) == {region.key for region in regions}
        assert 'name="Title"' in html['title']
        assert '<option value="articles" selected>' in html['section']

    def test_refresh_patches_volatile_regions_only(self, registry, lookups):
        regions = build_regions(registry)

        script = PartialRenderer(regions, registry).render(view_state(), refresh=True, message='Saved')

        assert len(script) == len(VOLATILE_KEYS)
        assert [instruction.selector for instruction in script.instructions][:2] == [
            '[name=sLastMod]', '[name=sPosted]',
        ]
        body = script.render()
        assert body.count('$("') == len(VOLATILE_KEYS)
        assert '$("p.body")' not in body
        assert 'editor.announce({"message": "Saved", "level": "success"})' in body
