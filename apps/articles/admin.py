"""
Admin interface for articles and their lookup tables.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Article, ArticleForm, ArticleStatus, Category, Section


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin interface for Article model.

    Editing happens on the Write panel; the admin is for lookup and triage.
    """

    list_display = [
        'title_short',
        'status_badge',
        'section',
        'author',
        'posted',
        'last_modified',
        'last_modified_by',
    ]

    list_filter = [
        'status',
        'section',
        'annotate',
        ('posted', admin.DateFieldListFilter),
    ]

    search_fields = [
        'title',
        'url_title',
        'keywords',
        'body',
    ]

    readonly_fields = [
        'id',
        'uid',
        'title_html',
        'body_html',
        'excerpt_html',
        'last_modified',
        'last_modified_by',
    ]

    raw_id_fields = ['author']

    date_hierarchy = 'posted'

    fieldsets = (
        ('Content', {
            'fields': ('id', 'title', 'url_title', 'body', 'body_filter', 'excerpt', 'excerpt_filter', 'image')
        }),
        ('Classification', {
            'fields': ('status', 'section', 'category1', 'category2', 'keywords', 'override_form')
        }),
        ('Dates', {
            'fields': ('posted', 'expires', 'last_modified', 'last_modified_by', 'feed_time')
        }),
        ('Comments', {
            'fields': ('annotate', 'annotate_invite'),
            'classes': ('collapse',)
        }),
        ('Rendered', {
            'fields': ('uid', 'title_html', 'body_html', 'excerpt_html'),
            'classes': ('collapse',)
        }),
    )

    def title_short(self, obj):
        """Display truncated title."""
        if len(obj.title) > 60:
            return obj.title[:60] + '...'
        return obj.title or '(untitled)'
    title_short.short_description = 'Title'
    title_short.admin_order_field = 'title'

    def status_badge(self, obj):
        colors = {
            ArticleStatus.DRAFT: '#6c757d',
            ArticleStatus.HIDDEN: '#343a40',
            ArticleStatus.PENDING: '#ffc107',
            ArticleStatus.LIVE: '#28a745',
            ArticleStatus.STICKY: '#17a2b8',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display(),
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    list_display = ['name', 'title']
    search_fields = ['name', 'title']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'title', 'parent']
    list_filter = ['type']
    search_fields = ['name', 'title']


@admin.register(ArticleForm)
class ArticleFormAdmin(admin.ModelAdmin):
    list_display = ['name', 'type']
    list_filter = ['type']
