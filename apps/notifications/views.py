# notifications/views.py
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.realtime.services import touch

from . import models, serializers as srl, services


@extend_schema_view(
    list=extend_schema(summary="List my notifications (newest first)", tags=["Notifications"]),
    retrieve=extend_schema(summary="Retrieve notification", tags=["Notifications"]),
    destroy=extend_schema(summary="Delete notification", tags=["Notifications"]),
)
class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Notification endpoints. Users only ever see their own rows.
    """
    serializer_class = srl.NotificationSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["read", "type"]
    ordering_fields = ["created_at"]

    def get_queryset(self):
        return models.Notification.objects.filter(user=self.request.user).order_by("-created_at")

    @extend_schema(request=None, responses={200: srl.NotificationSerializer}, tags=["Notifications"])
    @action(detail=True, methods=["post"], url_path="mark-read")
    def mark_read(self, request, pk=None):
        notif = self.get_object()
        notif.mark_read()
        return Response(self.get_serializer(notif).data)

    @extend_schema(request=None, responses={200: srl.MarkAllReadResponseSerializer}, tags=["Notifications"])
    @action(detail=False, methods=["post"], url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = services.mark_all_read(request.user)
        if updated:
            touch("notifications", user_id=request.user.id)
        return Response({"updated": updated})

    @extend_schema(responses={200: srl.UnreadCountSerializer}, tags=["Notifications"])
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        return Response({"unread": services.unread_count(request.user)})


@extend_schema_view(
    list=extend_schema(summary="List my activity feed", tags=["Notifications"]),
)
class ActivityViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = srl.ActivitySerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["activity_type"]

    def get_queryset(self):
        return models.Activity.objects.filter(user=self.request.user).order_by("-created_at")
