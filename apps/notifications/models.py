from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.accounts.models import BaseEntity


class NotificationType(models.TextChoices):
    JOIN_REQUEST = "join_request", "Join request"
    REQUEST_ACCEPTED = "request_accepted", "Request accepted"
    REQUEST_DECLINED = "request_declined", "Request declined"
    INTERVIEW_SCHEDULED = "interview_scheduled", "Interview scheduled"
    PROJECT_APPROVED = "project_approved", "Project approved"
    FRIEND_REQUEST = "friend_request", "Friend request"
    MESSAGE = "message", "Message"


class ActivityType(models.TextChoices):
    FRIEND_REQUEST = "friend_request", "Friend request"
    POST_LIKE = "post_like", "Post like"
    POST_SHARE = "post_share", "Post share"
    POST_COMMENT = "post_comment", "Post comment"


class Notification(BaseEntity):
    """
    In-app notification. `metadata` is free-form and carries whatever the
    email renderer needs (project_title, interview_date, location, ...).
    """
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="notifications", on_delete=models.CASCADE)
    type = models.CharField(max_length=64, choices=NotificationType.choices, db_index=True)
    title = models.CharField(max_length=400)
    content = models.TextField(blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    # loose references; the project may be deleted while the notification stays
    project_id = models.UUIDField(null=True, blank=True, db_index=True)
    request_id = models.UUIDField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read", "created_at"]),
        ]

    def __str__(self):
        return f"{self.type} -> {self.user_id}"

    def mark_read(self):
        if not self.read:
            self.read = True
            self.read_at = timezone.now()
            self.save(update_fields=["read", "read_at", "updated_at"])


class Activity(BaseEntity):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="activities", on_delete=models.CASCADE)
    activity_type = models.CharField(max_length=64, choices=ActivityType.choices, db_index=True)
    content = models.TextField(blank=True)
    related_id = models.UUIDField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "Activities"
