"""
Django settings for Scriptorium project.
Base settings shared across all environments.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-change-this-in-production')

# Application definition
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third-party apps
    'rest_framework',

    # Scriptorium apps
    'apps.core',
    'apps.articles',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    # Custom middleware
    'apps.core.middleware.RequestIDMiddleware',  # Request ID tracing
    'apps.core.middleware.EditorErrorMiddleware',  # Fatal editor errors -> JSON
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

# Database
# https://docs.djangoproject.com/en/5.0/ref/settings/#databases
# Use SQLite for development if no PostgreSQL configured
if os.getenv('DB_NAME'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME'),
            'USER': os.getenv('DB_USER'),
            'PASSWORD': os.getenv('DB_PASSWORD'),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
            'CONN_HEALTH_CHECKS': True,
            'OPTIONS': {
                'connect_timeout': 10,
            },
        }
    }
else:
    # SQLite fallback for initial development
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

LOGIN_URL = '/admin/login/'

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

# Default primary key field type
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Celery Configuration
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_TIME_LIMIT = 120
CELERY_TASK_SOFT_TIME_LIMIT = 90
CELERY_TASK_ALWAYS_EAGER = os.getenv('CELERY_TASK_ALWAYS_EAGER', 'False').lower() == 'true'
CELERY_TASK_EAGER_PROPAGATES = True

# Additional Celery settings for production reliability
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_TASK_ACKS_LATE = True
CELERY_WORKER_PREFETCH_MULTIPLIER = 1

# Redis Configuration
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# Caching
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'db': 0,
        }
    }
}

# Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'request_id': {
            '()': 'apps.core.middleware.RequestIDFilter',
        },
    },
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} [{request_id}] {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
            'filters': ['request_id'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'INFO',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('APPS_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}


# =============================================================================
# Site
# =============================================================================

SITE_NAME = os.getenv('SITE_NAME', 'Scriptorium')
SITE_URL = os.getenv('SITE_URL', 'http://localhost:8000/')

# 'debug', 'testing' or 'live'. Pings only go out when live; non-callable
# plugin handlers are only reported when not live.
PRODUCTION_STATUS = os.getenv('PRODUCTION_STATUS', 'testing')


# =============================================================================
# Article Editor
# =============================================================================

# Active custom fields: number -> label. Inactive numbers are absent.
ARTICLE_CUSTOM_FIELDS = {
    1: os.getenv('ARTICLE_CUSTOM_1_LABEL', 'custom1'),
    2: os.getenv('ARTICLE_CUSTOM_2_LABEL', 'custom2'),
}

ARTICLES_USE_EXCERPTS = os.getenv('ARTICLES_USE_EXCERPTS', 'true').lower() == 'true'

USE_COMMENTS = os.getenv('USE_COMMENTS', 'true').lower() == 'true'
COMMENTS_ON_DEFAULT = os.getenv('COMMENTS_ON_DEFAULT', 'false').lower() == 'true'
COMMENTS_DEFAULT_INVITE = os.getenv('COMMENTS_DEFAULT_INVITE', 'Comment')
# Days after posting when comments close; 0 keeps them open.
COMMENTS_DISABLED_AFTER = int(os.getenv('COMMENTS_DISABLED_AFTER', '42'))

ALLOW_FORM_OVERRIDE = os.getenv('ALLOW_FORM_OVERRIDE', 'true').lower() == 'true'

DEFAULT_SECTION = os.getenv('DEFAULT_SECTION', 'articles')

# Text filter id: '0' untouched, '1' line breaks, '2' sanitized HTML
DEFAULT_TEXTFILTER = os.getenv('DEFAULT_TEXTFILTER', '1')

WRITE_RECENT_ARTICLES_COUNT = int(os.getenv('WRITE_RECENT_ARTICLES_COUNT', '10'))

# XML-RPC weblogUpdates.ping endpoints
PING_ENDPOINTS = [
    url.strip()
    for url in os.getenv('PING_ENDPOINTS', 'http://rpc.pingomatic.com/').split(',')
    if url.strip()
]
PING_TIMEOUT = int(os.getenv('PING_TIMEOUT', '10'))

# Dotted paths to register(registry) callables, loaded once at startup
EDITOR_PLUGINS = [
    path.strip()
    for path in os.getenv('EDITOR_PLUGINS', '').split(',')
    if path.strip()
]

# Seconds a signed Write panel draft stays valid
DRAFT_MAX_AGE = int(os.getenv('DRAFT_MAX_AGE', '86400'))
