from django.conf import settings
from django.db import models

from apps.accounts.models import BaseEntity


class ForumPost(BaseEntity):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="forum_posts", on_delete=models.CASCADE)
    title = models.CharField(max_length=300)
    content = models.TextField()
    category = models.CharField(max_length=120, blank=True, db_index=True)
    attachment_url = models.CharField(max_length=500, blank=True, null=True)
    share_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class ForumComment(BaseEntity):
    post = models.ForeignKey(ForumPost, related_name="comments", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="forum_comments", on_delete=models.CASCADE)
    content = models.TextField()
    attachment_url = models.CharField(max_length=500, blank=True, null=True)

    class Meta:
        ordering = ["created_at"]


class Like(BaseEntity):
    post = models.ForeignKey(ForumPost, related_name="likes", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="likes", on_delete=models.CASCADE)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["post", "user"], name="uniq_like_post_user"),
        ]
