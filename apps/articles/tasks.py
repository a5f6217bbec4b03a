"""
Celery tasks for publication side effects.
"""

import logging
import xmlrpc.client

import requests
from celery import shared_task
from django.conf import settings

from apps.core.callbacks import Phase, get_registry
from apps.core.metrics import increment_pings

logger = logging.getLogger(__name__)


def ping_payload() -> str:
    """XML-RPC weblogUpdates.ping body for this site."""
    return xmlrpc.client.dumps((settings.SITE_NAME, settings.SITE_URL), 'weblogUpdates.ping')


@shared_task
def ping_update_services(article_id: int):
    """
    Tell update services the site changed.

    Fires the 'ping' callback event, then posts weblogUpdates.ping to each
    PING_ENDPOINTS entry. Only a live site pings.
    """
    if getattr(settings, 'PRODUCTION_STATUS', 'live') != 'live':
        logger.info("Skipping pings for article %s: site is not live", article_id)
        increment_pings('skipped')
        return {"article_id": article_id, "status": "skipped"}

    get_registry().dispatch('ping', '', Phase.AFTER, article_id)

    payload = ping_payload()
    failed = []
    for endpoint in getattr(settings, 'PING_ENDPOINTS', []):
        try:
            response = requests.post(
                endpoint,
                data=payload.encode('utf-8'),
                headers={'Content-Type': 'text/xml'},
                timeout=getattr(settings, 'PING_TIMEOUT', 10),
            )
            response.raise_for_status()
            increment_pings('success')
        except requests.RequestException as exc:
            logger.warning("Ping to %s failed for article %s: %s", endpoint, article_id, exc)
            increment_pings('error')
            failed.append(endpoint)

    return {"article_id": article_id, "status": "pinged", "failed": failed}
