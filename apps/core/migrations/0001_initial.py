import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.core.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuthorProfile',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('role', models.CharField(choices=[('publisher', 'Publisher'), ('managing_editor', 'Managing Editor'), ('copy_editor', 'Copy Editor'), ('staff_writer', 'Staff Writer'), ('freelancer', 'Freelancer'), ('designer', 'Designer')], db_index=True, default='freelancer', help_text='Editorial role determining privileges', max_length=20, verbose_name='Role')),
                ('nonce', models.CharField(default=apps.core.models.generate_nonce, help_text='Per-user secret mixed into the editor form token', max_length=64, verbose_name='Nonce')),
                ('user', models.OneToOneField(help_text='The associated Django user account', on_delete=django.db.models.deletion.CASCADE, related_name='author_profile', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Author Profile',
                'verbose_name_plural': 'Author Profiles',
                'db_table': 'author_profiles',
            },
        ),
        migrations.CreateModel(
            name='Preference',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Unique identifier (UUID)', primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False, help_text='Timestamp when record was created', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated', verbose_name='Updated At')),
                ('name', models.CharField(db_index=True, max_length=255, verbose_name='Name')),
                ('value', models.TextField(blank=True, default='', verbose_name='Value')),
                ('user', models.ForeignKey(blank=True, help_text='Owner of a private preference; empty for site-wide values', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='preferences', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Preference',
                'verbose_name_plural': 'Preferences',
                'db_table': 'preferences',
                'ordering': ['name'],
                'unique_together': {('name', 'user')},
            },
        ),
    ]
