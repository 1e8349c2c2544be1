import logging

import requests
from celery import shared_task
from django.conf import settings

logger = logging.getLogger(__name__)


@shared_task
def deliver_lifecycle_event(event, payload):
    url = settings.EXCLUSIVES_EVENTS_WEBHOOK_URL
    if not url:
        logger.info('Lifecycle event %s skipped: no webhook configured', event)
        return 'skip'

    try:
        response = requests.post(
            url,
            json={'event': event, 'data': payload},
            timeout=settings.EXCLUSIVES_EVENTS_TIMEOUT_SEC,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.exception('Lifecycle event %s delivery failed: %s', event, exc)
        return 'error'
    return 'ok'
