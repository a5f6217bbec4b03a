"""
Article models for Scriptorium.
Articles plus the lookup tables the editor validates against.
"""

import calendar
import uuid
from datetime import datetime, timedelta, timezone as dt_timezone

from django.conf import settings
from django.db import models
from django.utils import timezone


EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def generate_uid():
    return uuid.uuid4().hex


def fingerprint_of(value):
    """Integer microseconds since the epoch; 0 for None."""
    if value is None:
        return 0
    return calendar.timegm(value.utctimetuple()) * 1_000_000 + value.microsecond


def from_fingerprint(fingerprint):
    """Inverse of fingerprint_of; exact to the microsecond."""
    return EPOCH + timedelta(microseconds=int(fingerprint))


def epoch_seconds(value):
    if value is None:
        return 0
    return calendar.timegm(value.utctimetuple())


class ArticleStatus(models.IntegerChoices):
    DRAFT = 1, 'Draft'
    HIDDEN = 2, 'Hidden'
    PENDING = 3, 'Pending'
    LIVE = 4, 'Live'
    STICKY = 5, 'Sticky'

    @classmethod
    def is_public_value(cls, value):
        try:
            return int(value) >= cls.LIVE
        except (TypeError, ValueError):
            return False


class Section(models.Model):
    """Site section an article is filed under."""

    name = models.CharField(
        max_length=128,
        unique=True,
        verbose_name='Name'
    )

    title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title'
    )

    class Meta:
        db_table = 'sections'
        ordering = ['name']
        verbose_name = 'Section'
        verbose_name_plural = 'Sections'

    def __str__(self):
        return self.title or self.name

    @classmethod
    def selectable(cls):
        """Sections offered in the editor; 'default' never is."""
        return cls.objects.exclude(name='default')


class Category(models.Model):
    """Category tree node; only type 'article' is used by the editor."""

    TYPE_CHOICES = [
        ('article', 'Article'),
        ('image', 'Image'),
        ('link', 'Link'),
        ('file', 'File'),
    ]

    name = models.CharField(
        max_length=128,
        verbose_name='Name'
    )

    type = models.CharField(
        max_length=20,
        choices=TYPE_CHOICES,
        default='article',
        db_index=True,
        verbose_name='Type'
    )

    title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title'
    )

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children',
        verbose_name='Parent'
    )

    class Meta:
        db_table = 'categories'
        ordering = ['type', 'name']
        unique_together = [('name', 'type')]
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'

    def __str__(self):
        return f"{self.title or self.name} ({self.type})"


class ArticleForm(models.Model):
    """Named presentation form an article may override its section's default with."""

    name = models.CharField(
        max_length=64,
        unique=True,
        verbose_name='Name'
    )

    type = models.CharField(
        max_length=20,
        default='article',
        db_index=True,
        verbose_name='Type'
    )

    body = models.TextField(
        blank=True,
        verbose_name='Body'
    )

    class Meta:
        db_table = 'article_forms'
        ordering = ['name']
        verbose_name = 'Form'
        verbose_name_plural = 'Forms'

    def __str__(self):
        return self.name

    @classmethod
    def overridable(cls):
        return cls.objects.filter(type='article').exclude(name='default')


class Article(models.Model):
    """
    An article as edited on the Write panel.

    last_modified is the concurrency fingerprint: it is stamped by the
    server on every successful write and echoed back by the edit form.
    """

    # Content
    title = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title'
    )

    title_html = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Title HTML',
        help_text='Title with inline markup applied'
    )

    body = models.TextField(
        blank=True,
        verbose_name='Body'
    )

    body_html = models.TextField(
        blank=True,
        verbose_name='Body HTML',
        help_text='Body rendered through body_filter'
    )

    body_filter = models.CharField(
        max_length=16,
        default='1',
        verbose_name='Body Filter',
        help_text='Text filter id used to render the body'
    )

    excerpt = models.TextField(
        blank=True,
        verbose_name='Excerpt'
    )

    excerpt_html = models.TextField(
        blank=True,
        verbose_name='Excerpt HTML',
        help_text='Excerpt rendered through excerpt_filter'
    )

    excerpt_filter = models.CharField(
        max_length=16,
        default='1',
        verbose_name='Excerpt Filter',
        help_text='Text filter id used to render the excerpt'
    )

    image = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Image',
        help_text='Image reference (id or URL)'
    )

    # Classification
    status = models.PositiveSmallIntegerField(
        choices=ArticleStatus.choices,
        default=ArticleStatus.LIVE,
        db_index=True,
        verbose_name='Status'
    )

    section = models.CharField(
        max_length=128,
        blank=True,
        db_index=True,
        verbose_name='Section'
    )

    category1 = models.CharField(
        max_length=128,
        blank=True,
        db_index=True,
        verbose_name='Category 1'
    )

    category2 = models.CharField(
        max_length=128,
        blank=True,
        db_index=True,
        verbose_name='Category 2'
    )

    keywords = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Keywords',
        help_text='Comma-separated, normalized on save'
    )

    # Temporal
    posted = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name='Posted',
        help_text='Publication time; may be in the future'
    )

    expires = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Expires',
        help_text='Must be after Posted when set'
    )

    last_modified = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        verbose_name='Last Modified'
    )

    feed_time = models.DateTimeField(
        default=timezone.now,
        verbose_name='Feed Time'
    )

    # Authorship
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='articles',
        verbose_name='Author'
    )

    last_modified_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='modified_articles',
        verbose_name='Last Modified By'
    )

    # Comments and presentation
    annotate = models.BooleanField(
        default=False,
        verbose_name='Comments On'
    )

    annotate_invite = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Comment Invitation'
    )

    override_form = models.CharField(
        max_length=64,
        blank=True,
        verbose_name='Override Form'
    )

    url_title = models.CharField(
        max_length=255,
        blank=True,
        db_index=True,
        verbose_name='URL Title',
        help_text='Unique by convention only'
    )

    uid = models.CharField(
        max_length=32,
        default=generate_uid,
        editable=False,
        verbose_name='UID'
    )

    # Custom fields; only those in ARTICLE_CUSTOM_FIELDS are editable
    custom_1 = models.CharField(max_length=255, blank=True, verbose_name='Custom 1')
    custom_2 = models.CharField(max_length=255, blank=True, verbose_name='Custom 2')
    custom_3 = models.CharField(max_length=255, blank=True, verbose_name='Custom 3')
    custom_4 = models.CharField(max_length=255, blank=True, verbose_name='Custom 4')
    custom_5 = models.CharField(max_length=255, blank=True, verbose_name='Custom 5')
    custom_6 = models.CharField(max_length=255, blank=True, verbose_name='Custom 6')
    custom_7 = models.CharField(max_length=255, blank=True, verbose_name='Custom 7')
    custom_8 = models.CharField(max_length=255, blank=True, verbose_name='Custom 8')
    custom_9 = models.CharField(max_length=255, blank=True, verbose_name='Custom 9')
    custom_10 = models.CharField(max_length=255, blank=True, verbose_name='Custom 10')

    CUSTOM_FIELD_COUNT = 10

    class Meta:
        db_table = 'articles'
        ordering = ['-posted']
        verbose_name = 'Article'
        verbose_name_plural = 'Articles'
        indexes = [
            models.Index(fields=['status', 'posted'], name='articles_status_posted_idx'),
        ]

    def __str__(self):
        return self.title or f"Untitled {self.pk}"

    @property
    def fingerprint(self):
        return fingerprint_of(self.last_modified)

    @property
    def is_public(self):
        return ArticleStatus.is_public_value(self.status)

    @classmethod
    def neighbour_id(cls, posted, direction):
        """Id of the article posted just before ('prev') or after ('next')."""
        if direction == 'prev':
            qs = cls.objects.filter(posted__lt=posted).order_by('-posted')
        else:
            qs = cls.objects.filter(posted__gt=posted).order_by('posted')
        return qs.values_list('pk', flat=True).first() or 0

    @classmethod
    def recent(cls, limit):
        return cls.objects.order_by('-last_modified').only('pk', 'title')[:limit]
