# chat/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.accounts.models import BaseEntity


# ---------------------------------------------------------------------------
# Groups & Membership
# ---------------------------------------------------------------------------
class Group(BaseEntity):
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="created_groups", on_delete=models.CASCADE)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name


class GroupMember(BaseEntity):
    group = models.ForeignKey(Group, related_name="members", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="group_memberships", on_delete=models.CASCADE)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["group", "user"], name="uniq_group_member"),
        ]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class Message(BaseEntity):
    """
    A direct message (receiver set) or a group message (group set), never both.
    """
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="sent_messages", on_delete=models.CASCADE)
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="received_messages",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
    )
    group = models.ForeignKey(Group, related_name="messages", on_delete=models.CASCADE, null=True, blank=True)
    content = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True, null=True)
    read = models.BooleanField(default=False)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["sender", "receiver", "created_at"]),
            models.Index(fields=["group", "created_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                check=(Q(receiver__isnull=False, group__isnull=True) | Q(receiver__isnull=True, group__isnull=False)),
                name="message_receiver_xor_group",
            ),
        ]
