from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.accounts.models import BaseEntity


class FriendRequestStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACCEPTED = "accepted", "Accepted"
    REJECTED = "rejected", "Rejected"


class FriendRequest(BaseEntity):
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="sent_friend_requests", on_delete=models.CASCADE)
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL, related_name="received_friend_requests", on_delete=models.CASCADE
    )
    status = models.CharField(max_length=16, choices=FriendRequestStatus.choices, default=FriendRequestStatus.PENDING)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["sender", "receiver"], name="uniq_friend_request_pair"),
            models.CheckConstraint(check=~Q(sender=models.F("receiver")), name="friend_request_not_self"),
        ]

    def __str__(self):
        return f"{self.sender_id} -> {self.receiver_id} ({self.status})"


class Friend(BaseEntity):
    """Symmetric friendship; either column may hold either user."""
    user1 = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    user2 = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user1", "user2"], name="uniq_friend_pair"),
        ]

    def other(self, user_id):
        return self.user2_id if self.user1_id == user_id else self.user1_id
