"""
Notification and activity writers.

Both are side effects of some primary action (approving a join request,
liking a post, ...). `notify` and `record_activity` run the insert in a
savepoint and log failures instead of raising, so the caller's own writes
are never rolled back by them. Emails are enqueued only once the surrounding
transaction commits.
"""
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from . import models

logger = logging.getLogger(__name__)

SIGNATURE = "<br>\n<p>Best regards,</p>\n<p>The U-Connect Team</p>"


def render_email_message(notification: models.Notification) -> str:
    """HTML body for the email copy of a notification."""
    meta = notification.metadata or {}
    project_title = meta.get("project_title", "")

    if notification.type == models.NotificationType.REQUEST_ACCEPTED:
        return (
            "<p>Hello!</p>\n"
            f'<p>Great news! Your request to join the project "{project_title}" has been accepted.</p>\n'
            "<p>The project admin will schedule an interview with you soon to discuss your role "
            "and responsibilities.</p>\n"
            "<p>You'll receive another notification when the interview is scheduled.</p>\n"
            + SIGNATURE
        )

    if notification.type == models.NotificationType.INTERVIEW_SCHEDULED:
        when = parse_datetime(meta.get("interview_date") or "")
        details = [
            f"<li>Date: {when.strftime('%Y-%m-%d') if when else ''}</li>",
            f"<li>Time: {when.strftime('%H:%M') if when else ''}</li>",
            f"<li>Location: {meta.get('location') or ''}</li>",
        ]
        if meta.get("notes"):
            details.append(f"<li>Additional Notes: {meta['notes']}</li>")
        return (
            "<p>Hello!</p>\n"
            f'<p>An interview has been scheduled for your request to join "{project_title}".</p>\n'
            "<p><strong>Interview Details:</strong></p>\n"
            "<ul>\n" + "\n".join(details) + "\n</ul>\n"
            "<p>Please make sure to be on time for the interview.</p>\n"
            + SIGNATURE
        )

    if notification.type == models.NotificationType.PROJECT_APPROVED:
        return (
            "<p>Hello!</p>\n"
            "<p>Congratulations!</p>\n"
            f"<p>We're excited to inform you that you have been approved to join the project "
            f'"{project_title}".</p>\n'
            "<p>You can now access all project resources and start collaborating with the team.</p>\n"
            + SIGNATURE
        )

    return notification.content


def create_notification(
    *,
    user,
    type: str,
    title: str,
    content: str = "",
    metadata: Optional[dict] = None,
    project_id=None,
    request_id=None,
    send_email: bool = True,
) -> models.Notification:
    """Insert a notification row and enqueue its email after commit."""
    notif = models.Notification.objects.create(
        user=user,
        type=type,
        title=title,
        content=content,
        metadata=metadata or {},
        project_id=project_id,
        request_id=request_id,
    )

    if send_email:
        from .tasks import send_notification_email

        transaction.on_commit(lambda: send_notification_email.delay(str(notif.id)))
    return notif


def notify(**kwargs) -> Optional[models.Notification]:
    """
    Best-effort `create_notification`: failures are logged and swallowed.
    """
    try:
        with transaction.atomic():
            return create_notification(**kwargs)
    except Exception:
        logger.exception("Failed to create %s notification for %s", kwargs.get("type"), kwargs.get("user"))
        return None


def create_activity(*, user, activity_type: str, content: str = "", related_id=None) -> models.Activity:
    return models.Activity.objects.create(
        user=user,
        activity_type=activity_type,
        content=content,
        related_id=related_id,
    )


def record_activity(**kwargs) -> Optional[models.Activity]:
    try:
        with transaction.atomic():
            return create_activity(**kwargs)
    except Exception:
        logger.exception("Failed to record %s activity for %s", kwargs.get("activity_type"), kwargs.get("user"))
        return None


def mark_all_read(user) -> int:
    return models.Notification.objects.filter(user=user, read=False).update(read=True, read_at=timezone.now())


def unread_count(user) -> int:
    return models.Notification.objects.filter(user=user, read=False).count()
