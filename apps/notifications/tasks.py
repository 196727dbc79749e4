import logging

import requests
from celery import shared_task
from django.conf import settings

from . import models, services

logger = logging.getLogger(__name__)


@shared_task
def send_notification_email(notification_id: str) -> bool:
    """
    POST the email copy of a notification to the email function.
    One attempt; failures are logged and never retried.
    """
    try:
        notif = models.Notification.objects.select_related("user").get(id=notification_id)
    except models.Notification.DoesNotExist:
        logger.error("Notification %s does not exist", notification_id)
        return False

    url = settings.EMAIL_FUNCTION_URL
    if not url:
        logger.info("EMAIL_FUNCTION_URL not set; skipping email for notification %s", notification_id)
        return False

    payload = {
        "to": notif.user.email,
        "subject": notif.title,
        "message": services.render_email_message(notif),
    }
    headers = {"Content-Type": "application/json"}
    if settings.EMAIL_FUNCTION_KEY:
        headers["Authorization"] = f"Bearer {settings.EMAIL_FUNCTION_KEY}"

    try:
        response = requests.post(url, json=payload, headers=headers, timeout=settings.EMAIL_FUNCTION_TIMEOUT)
    except requests.RequestException as exc:
        logger.warning("Email service unavailable for notification %s: %s", notification_id, exc)
        return False

    if response.status_code >= 400:
        logger.warning(
            "Email function error (%s) for notification %s: %s",
            response.status_code,
            notification_id,
            response.text[:500],
        )
        return False
    return True
