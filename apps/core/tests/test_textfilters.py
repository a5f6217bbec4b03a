"""
Tests for the text filter registry.
"""

import pytest

from apps.core.textfilters import (
    CONVERT_LINEBREAKS,
    LEAVE_TEXT_UNTOUCHED,
    SANITIZED_HTML,
    TextFilter,
    apply_textfilter,
    get_textfilter,
    inline_html,
    plain_text,
    register_textfilter,
    textfilter_choices,
    textfilter_help,
    textfilter_ids,
)


class TestBuiltInFilters:

    def test_ids(self):
        assert textfilter_ids()[:3] == ['0', '1', '2']
        assert textfilter_choices()[0] == ('0', 'Leave text untouched')

    def test_leave_untouched(self):
        assert apply_textfilter(LEAVE_TEXT_UNTOUCHED, '<b>raw</b>\n') == '<b>raw</b>\n'

    def test_convert_linebreaks(self):
        html = apply_textfilter(CONVERT_LINEBREAKS, 'one\ntwo\n\nthree <b>')
        assert html == '<p>one<br>two</p>\n\n<p>three &lt;b&gt;</p>'

    def test_sanitized_html_strips_scripts(self):
        html = apply_textfilter(SANITIZED_HTML, '<p>Hi<script>alert(1)</script></p>')
        assert '<script>' not in html
        assert html.startswith('<p>Hi')

    def test_sanitized_html_linkifies(self):
        html = apply_textfilter(SANITIZED_HTML, 'see https://example.com')
        assert '<a href="https://example.com"' in html

    def test_unknown_filter_leaves_text(self):
        assert apply_textfilter('99', 'text') == 'text'

    def test_none_text(self):
        assert apply_textfilter(CONVERT_LINEBREAKS, None) == ''

    @pytest.mark.parametrize('filter_id', [LEAVE_TEXT_UNTOUCHED, CONVERT_LINEBREAKS, SANITIZED_HTML])
    def test_blank_text_renders_nothing(self, filter_id):
        assert apply_textfilter(filter_id, '') == ''

    def test_whitespace_only_breaks(self):
        assert apply_textfilter(CONVERT_LINEBREAKS, ' \n\n ') == ''


class TestHelpers:

    def test_help_markup(self):
        assert textfilter_help(LEAVE_TEXT_UNTOUCHED).startswith('<p class="textfilter-help">')
        assert textfilter_help('99') == ''

    def test_inline_html_keeps_inline_tags_only(self):
        assert inline_html('<p>Hello <em>world</em></p>') == 'Hello <em>world</em>'

    def test_plain_text(self):
        assert plain_text('Hello <em>world</em>') == 'Hello world'


class TestRegistration:

    def test_plugins_register_filters(self):
        register_textfilter(TextFilter('upper', 'Upper case', '', lambda text: text.upper()))
        try:
            assert get_textfilter('upper') is not None
            assert apply_textfilter('upper', 'abc') == 'ABC'
        finally:
            from apps.core import textfilters
            textfilters._filters.pop('upper', None)
