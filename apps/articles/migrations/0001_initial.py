import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.articles.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Section',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128, unique=True, verbose_name='Name')),
                ('title', models.CharField(blank=True, max_length=255, verbose_name='Title')),
            ],
            options={
                'verbose_name': 'Section',
                'verbose_name_plural': 'Sections',
                'db_table': 'sections',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=128, verbose_name='Name')),
                ('type', models.CharField(choices=[('article', 'Article'), ('image', 'Image'), ('link', 'Link'), ('file', 'File')], db_index=True, default='article', max_length=20, verbose_name='Type')),
                ('title', models.CharField(blank=True, max_length=255, verbose_name='Title')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='articles.category', verbose_name='Parent')),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'db_table': 'categories',
                'ordering': ['type', 'name'],
                'unique_together': {('name', 'type')},
            },
        ),
        migrations.CreateModel(
            name='ArticleForm',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=64, unique=True, verbose_name='Name')),
                ('type', models.CharField(db_index=True, default='article', max_length=20, verbose_name='Type')),
                ('body', models.TextField(blank=True, verbose_name='Body')),
            ],
            options={
                'verbose_name': 'Form',
                'verbose_name_plural': 'Forms',
                'db_table': 'article_forms',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Article',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(blank=True, max_length=255, verbose_name='Title')),
                ('title_html', models.CharField(blank=True, help_text='Title with inline markup applied', max_length=255, verbose_name='Title HTML')),
                ('body', models.TextField(blank=True, verbose_name='Body')),
                ('body_html', models.TextField(blank=True, help_text='Body rendered through body_filter', verbose_name='Body HTML')),
                ('body_filter', models.CharField(default='1', help_text='Text filter id used to render the body', max_length=16, verbose_name='Body Filter')),
                ('excerpt', models.TextField(blank=True, verbose_name='Excerpt')),
                ('excerpt_html', models.TextField(blank=True, help_text='Excerpt rendered through excerpt_filter', verbose_name='Excerpt HTML')),
                ('excerpt_filter', models.CharField(default='1', help_text='Text filter id used to render the excerpt', max_length=16, verbose_name='Excerpt Filter')),
                ('image', models.CharField(blank=True, help_text='Image reference (id or URL)', max_length=255, verbose_name='Image')),
                ('status', models.PositiveSmallIntegerField(choices=[(1, 'Draft'), (2, 'Hidden'), (3, 'Pending'), (4, 'Live'), (5, 'Sticky')], db_index=True, default=4, verbose_name='Status')),
                ('section', models.CharField(blank=True, db_index=True, max_length=128, verbose_name='Section')),
                ('category1', models.CharField(blank=True, db_index=True, max_length=128, verbose_name='Category 1')),
                ('category2', models.CharField(blank=True, db_index=True, max_length=128, verbose_name='Category 2')),
                ('keywords', models.CharField(blank=True, help_text='Comma-separated, normalized on save', max_length=255, verbose_name='Keywords')),
                ('posted', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='Publication time; may be in the future', verbose_name='Posted')),
                ('expires', models.DateTimeField(blank=True, help_text='Must be after Posted when set', null=True, verbose_name='Expires')),
                ('last_modified', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Last Modified')),
                ('feed_time', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Feed Time')),
                ('annotate', models.BooleanField(default=False, verbose_name='Comments On')),
                ('annotate_invite', models.CharField(blank=True, max_length=255, verbose_name='Comment Invitation')),
                ('override_form', models.CharField(blank=True, max_length=64, verbose_name='Override Form')),
                ('url_title', models.CharField(blank=True, db_index=True, help_text='Unique by convention only', max_length=255, verbose_name='URL Title')),
                ('uid', models.CharField(default=apps.articles.models.generate_uid, editable=False, max_length=32, verbose_name='UID')),
                ('custom_1', models.CharField(blank=True, max_length=255, verbose_name='Custom 1')),
                ('custom_2', models.CharField(blank=True, max_length=255, verbose_name='Custom 2')),
                ('custom_3', models.CharField(blank=True, max_length=255, verbose_name='Custom 3')),
                ('custom_4', models.CharField(blank=True, max_length=255, verbose_name='Custom 4')),
                ('custom_5', models.CharField(blank=True, max_length=255, verbose_name='Custom 5')),
                ('custom_6', models.CharField(blank=True, max_length=255, verbose_name='Custom 6')),
                ('custom_7', models.CharField(blank=True, max_length=255, verbose_name='Custom 7')),
                ('custom_8', models.CharField(blank=True, max_length=255, verbose_name='Custom 8')),
                ('custom_9', models.CharField(blank=True, max_length=255, verbose_name='Custom 9')),
                ('custom_10', models.CharField(blank=True, max_length=255, verbose_name='Custom 10')),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='articles', to=settings.AUTH_USER_MODEL, verbose_name='Author')),
                ('last_modified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='modified_articles', to=settings.AUTH_USER_MODEL, verbose_name='Last Modified By')),
            ],
            options={
                'verbose_name': 'Article',
                'verbose_name_plural': 'Articles',
                'db_table': 'articles',
                'ordering': ['-posted'],
                'indexes': [models.Index(fields=['status', 'posted'], name='articles_status_posted_idx')],
            },
        ),
    ]
