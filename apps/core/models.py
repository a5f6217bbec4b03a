"""
Core models for Scriptorium.
Base classes, author profiles and preferences.
"""

import secrets
import uuid

from django.conf import settings
from django.db import models
from django.db.models.signals import post_save
from django.dispatch import receiver
from django.utils import timezone


def generate_nonce():
    return secrets.token_hex(16)


class BaseModel(models.Model):
    """
    Abstract base model with common fields.
    Provides UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name='ID',
        help_text='Unique identifier (UUID)'
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        verbose_name='Created At',
        help_text='Timestamp when record was created'
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated At',
        help_text='Timestamp when record was last updated'
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.__class__.__name__} ({self.id})"


class AuthorProfile(BaseModel):
    """
    Editorial role and form-token nonce for a user.
    Linked 1:1 with Django User model.
    """

    ROLE_CHOICES = [
        ('publisher', 'Publisher'),
        ('managing_editor', 'Managing Editor'),
        ('copy_editor', 'Copy Editor'),
        ('staff_writer', 'Staff Writer'),
        ('freelancer', 'Freelancer'),
        ('designer', 'Designer'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='author_profile',
        verbose_name='User',
        help_text='The associated Django user account'
    )

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default='freelancer',
        db_index=True,
        verbose_name='Role',
        help_text='Editorial role determining privileges'
    )

    nonce = models.CharField(
        max_length=64,
        default=generate_nonce,
        verbose_name='Nonce',
        help_text='Per-user secret mixed into the editor form token'
    )

    class Meta:
        db_table = 'author_profiles'
        verbose_name = 'Author Profile'
        verbose_name_plural = 'Author Profiles'

    def __str__(self):
        return f"{self.user.username} ({self.role})"

    def rotate_nonce(self):
        """Invalidate every form token issued so far."""
        self.nonce = generate_nonce()
        self.save(update_fields=['nonce', 'updated_at'])
        return self.nonce


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_author_profile(sender, instance, created, **kwargs):
    """Auto-create AuthorProfile when a new User is created."""
    if created:
        AuthorProfile.objects.create(user=instance)


class Preference(BaseModel):
    """
    Named site or per-user setting.

    user=None holds site-wide values such as 'lastmod'.
    """

    name = models.CharField(
        max_length=255,
        db_index=True,
        verbose_name='Name'
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='preferences',
        verbose_name='User',
        help_text='Owner of a private preference; empty for site-wide values'
    )

    value = models.TextField(
        blank=True,
        default='',
        verbose_name='Value'
    )

    class Meta:
        db_table = 'preferences'
        verbose_name = 'Preference'
        verbose_name_plural = 'Preferences'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['name', 'user'],
                condition=models.Q(user__isnull=False),
                name='preferences_user_name_uniq',
            ),
            models.UniqueConstraint(
                fields=['name'],
                condition=models.Q(user__isnull=True),
                name='preferences_site_name_uniq',
            ),
        ]

    def __str__(self):
        owner = self.user.username if self.user_id else 'site'
        return f"{self.name} ({owner})"

    @classmethod
    def get_value(cls, name, user=None, default=''):
        pref = cls.objects.filter(name=name, user=user).first()
        return pref.value if pref else default

    @classmethod
    def set_value(cls, name, value, user=None):
        pref, _created = cls.objects.update_or_create(
            name=name,
            user=user,
            defaults={'value': str(value)},
        )
        return pref
