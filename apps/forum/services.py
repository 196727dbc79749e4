"""
Forum write paths that touch more than one row.
"""
import logging

from django.db import transaction
from django.db.models import F

from apps.notifications.models import ActivityType
from apps.notifications.services import record_activity
from apps.realtime.services import touch

from .models import ForumPost, ForumComment, Like

logger = logging.getLogger(__name__)


@transaction.atomic
def delete_forum_post(*, post: ForumPost):
    """Remove comments, then likes, then the post itself."""
    post_id = post.id
    comments, _ = ForumComment.objects.filter(post_id=post_id).delete()
    likes, _ = Like.objects.filter(post_id=post_id).delete()
    post.delete()
    logger.info("Deleted forum post %s (%s comments, %s likes)", post_id, comments, likes)


@transaction.atomic
def toggle_like(*, post: ForumPost, user) -> bool:
    """
    Unlike if the user already likes the post, like otherwise.
    Returns True when the post is liked after the call.
    """
    existing = Like.objects.filter(post=post, user=user)
    if existing.exists():
        for like in existing:
            like.delete()
        return False

    _, created = Like.objects.get_or_create(post=post, user=user)
    if created and post.user_id != user.id:
        record_activity(
            user=post.user,
            activity_type=ActivityType.POST_LIKE,
            content=f'{user.username or "Someone"} liked your post: "{post.title}"',
            related_id=post.id,
        )
    return True


@transaction.atomic
def share_post(*, post: ForumPost) -> int:
    ForumPost.objects.filter(pk=post.pk).update(share_count=F("share_count") + 1)
    post.refresh_from_db(fields=["share_count"])
    touch("forum_posts")
    record_activity(
        user=post.user,
        activity_type=ActivityType.POST_SHARE,
        content=f'Someone shared your post: "{post.title}"',
        related_id=post.id,
    )
    return post.share_count
