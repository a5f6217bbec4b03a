"""
Prometheus Metrics for Scriptorium.

Metrics included:
- article_saves_total: Counter for publish/save outcomes
- article_conflicts_total: Counter for concurrent-edit conflicts
- article_validation_failures_total: Counter for rejected submissions
- token_rejections_total: Counter for form token mismatches
- partial_render_duration_seconds: Histogram for editor region rendering
- pings_total: Counter for update-service pings

Cardinality Guidelines:
- All labels MUST be low-cardinality (small, bounded set of values)
- ALLOWED label values: step names, outcome enums, render modes
- FORBIDDEN label values: article ids, titles, usernames

Usage:
    from apps.core.metrics import increment_article_saves, observe_editor_step

    increment_article_saves(step='save', outcome='success')

    with observe_editor_step('save'):
        ...

Setup:
    Add to urls.py:
        from apps.core.metrics import metrics_view
        urlpatterns = [
            path('metrics/', metrics_view, name='prometheus-metrics'),
        ]
"""

import time
import logging
from contextlib import contextmanager

from django.http import HttpResponse
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

logger = logging.getLogger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

article_saves_total = Counter(
    'scriptorium_article_saves_total',
    'Total article publish/save attempts',
    ['step', 'outcome']  # step: publish/save, outcome: success/invalid/conflict/denied/error
)

article_conflicts_total = Counter(
    'scriptorium_article_conflicts_total',
    'Total concurrent-edit conflicts detected',
)

article_validation_failures_total = Counter(
    'scriptorium_article_validation_failures_total',
    'Total submissions rejected by validation',
    ['step']
)

token_rejections_total = Counter(
    'scriptorium_token_rejections_total',
    'Total requests rejected for a missing or stale form token',
    ['step']
)

partial_render_duration_seconds = Histogram(
    'scriptorium_partial_render_duration_seconds',
    'Editor partial render duration',
    ['mode'],  # mode: initial/refresh
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

editor_step_duration_seconds = Histogram(
    'scriptorium_editor_step_duration_seconds',
    'Editor step duration, including rendering',
    ['step'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

pings_total = Counter(
    'scriptorium_pings_total',
    'Total update-service pings',
    ['status']  # status: success/error/skipped
)


# ============================================================================
# Helper Functions
# ============================================================================

def increment_article_saves(step='save', outcome='success'):
    """Increment article save counter."""
    article_saves_total.labels(step=step, outcome=outcome).inc()


def increment_conflicts():
    """Increment concurrent-edit conflict counter."""
    article_conflicts_total.inc()


def increment_validation_failures(step='save'):
    """Increment validation failure counter."""
    article_validation_failures_total.labels(step=step).inc()


def increment_token_rejections(step=''):
    """Increment form token rejection counter."""
    token_rejections_total.labels(step=step or 'unknown').inc()


def increment_pings(status='success'):
    """Increment update-service ping counter."""
    pings_total.labels(status=status).inc()


def observe_partial_render(mode, duration_seconds):
    """Record partial render duration."""
    partial_render_duration_seconds.labels(mode=mode).observe(duration_seconds)


# ============================================================================
# Context Managers
# ============================================================================

@contextmanager
def observe_editor_step(step):
    """Context manager to time one editor step."""
    start = time.time()
    try:
        yield
    finally:
        editor_step_duration_seconds.labels(step=step).observe(time.time() - start)


# ============================================================================
# Metrics View
# ============================================================================

def metrics_view(request):
    """
    Django view to expose Prometheus metrics.

    Returns metrics in Prometheus text format.
    """
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
