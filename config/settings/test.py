"""
Test settings for Scriptorium project.
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

MIDDLEWARE = [m for m in MIDDLEWARE if not m.startswith('whitenoise.')]

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PRODUCTION_STATUS = 'testing'

ARTICLE_CUSTOM_FIELDS = {1: 'custom1', 2: 'custom2'}
ARTICLES_USE_EXCERPTS = True
USE_COMMENTS = True
COMMENTS_ON_DEFAULT = False
COMMENTS_DEFAULT_INVITE = 'Comment'
COMMENTS_DISABLED_AFTER = 42
ALLOW_FORM_OVERRIDE = True
DEFAULT_SECTION = 'articles'
DEFAULT_TEXTFILTER = '1'
WRITE_RECENT_ARTICLES_COUNT = 10
PING_ENDPOINTS = ['http://rpc.example.test/']
EDITOR_PLUGINS = []

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps']['level'] = 'WARNING'
LOGGING['loggers']['django']['level'] = 'WARNING'
