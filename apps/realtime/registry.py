"""
Change feeds exposed to clients.

A feed is a table name, the model behind it, the foreign-key columns a
subscriber may filter on (`<column>=eq.<value>`) and the list query that a
client re-runs when the feed changes.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from django.apps import apps
from django.db.models import Q
from django.utils.module_loading import import_string


@dataclass(frozen=True)
class Feed:
    table: str
    model: str
    serializer: str
    filter_fields: Tuple[str, ...] = ()
    ordering: Tuple[str, ...] = ("-created_at",)
    scope: Optional[str] = None

    def get_model(self):
        return apps.get_model(self.model)

    def get_serializer_class(self):
        return import_string(self.serializer)

    def queryset_for(self, user):
        qs = self.get_model().objects.all()
        if self.scope:
            qs = import_string(self.scope)(qs, user)
        return qs.order_by(*self.ordering)


def own_rows(queryset, user):
    return queryset.filter(user=user)


def visible_messages(queryset, user):
    return queryset.filter(
        Q(sender=user) | Q(receiver=user) | Q(group__members__user=user)
    ).distinct()


def visible_join_requests(queryset, user):
    return queryset.filter(Q(project__creator=user) | Q(user=user))


FEEDS: Dict[str, Feed] = {
    feed.table: feed
    for feed in (
        Feed(
            table="forum_posts",
            model="forum.ForumPost",
            serializer="apps.forum.serializers.ForumPostSerializer",
        ),
        Feed(
            table="forum_comments",
            model="forum.ForumComment",
            serializer="apps.forum.serializers.ForumCommentSerializer",
            filter_fields=("post_id",),
            ordering=("created_at",),
        ),
        Feed(
            table="likes",
            model="forum.Like",
            serializer="apps.forum.serializers.LikeSerializer",
            filter_fields=("post_id",),
        ),
        Feed(
            table="messages",
            model="chat.Message",
            serializer="apps.chat.serializers.MessageSerializer",
            filter_fields=("receiver_id", "sender_id", "group_id"),
            ordering=("created_at",),
            scope="apps.realtime.registry.visible_messages",
        ),
        Feed(
            table="notifications",
            model="notifications.Notification",
            serializer="apps.notifications.serializers.NotificationSerializer",
            filter_fields=("user_id",),
            scope="apps.realtime.registry.own_rows",
        ),
        Feed(
            table="project_discussions",
            model="academic.ProjectDiscussion",
            serializer="apps.academic.serializers.ProjectDiscussionSerializer",
            filter_fields=("project_id",),
            ordering=("created_at",),
        ),
        Feed(
            table="project_join_requests",
            model="academic.ProjectJoinRequest",
            serializer="apps.academic.serializers.ProjectJoinRequestSerializer",
            filter_fields=("project_id",),
            scope="apps.realtime.registry.visible_join_requests",
        ),
    )
}


def get_feed(table: str) -> Feed:
    try:
        return FEEDS[table]
    except KeyError:
        raise LookupError(f"Unknown realtime table: {table}")

