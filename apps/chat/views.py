from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.models import User
from apps.friends.services import friend_ids
from common.permissions import IsOwnerOrReadOnly

from . import services
from .models import Group
from .serializers import (
    ConversationPartnerSerializer,
    GroupMemberSerializer,
    GroupSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)

PARSERS = [JSONParser, MultiPartParser, FormParser]


# ---------------------------------------------------------------------------
# Direct messages
# ---------------------------------------------------------------------------
@extend_schema_view(
    list=extend_schema(summary="Conversation partners (accepted friends)", tags=["Chat"]),
    messages=extend_schema(
        summary="List or send direct messages with a user (pk is the partner's user id)",
        request=MessageCreateSerializer,
        responses={200: MessageSerializer(many=True), 201: MessageSerializer},
        tags=["Chat"],
    ),
    read=extend_schema(summary="Mark messages from a partner as read", request=None, tags=["Chat"]),
)
class DirectMessageViewSet(viewsets.GenericViewSet):
    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated]
    parser_classes = PARSERS

    def get_queryset(self):
        user = self.request.user
        return (
            User.objects.select_related("profile")
            .filter(id__in=friend_ids(user.id))
            .annotate(unread=Count("sent_messages", filter=Q(sent_messages__receiver=user, sent_messages__read=False)))
            .order_by("username")
        )

    def list(self, request):
        qs = self.get_queryset()
        return Response(ConversationPartnerSerializer(qs, many=True, context={"request": request}).data)

    @action(detail=True, methods=["get", "post"])
    def messages(self, request, pk=None):
        partner = get_object_or_404(User, pk=pk)
        if request.method == "GET":
            qs = services.conversation(request.user.id, partner.id)
            page = self.paginate_queryset(qs)
            if page is not None:
                return self.get_paginated_response(self.get_serializer(page, many=True).data)
            return Response(self.get_serializer(qs, many=True).data)

        body = MessageCreateSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        message = services.send_direct_message(
            sender=request.user,
            receiver=partner,
            content=body.validated_data.get("content", ""),
            image_url=body.image_url(),
        )
        return Response(self.get_serializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        partner = get_object_or_404(User, pk=pk)
        return Response({"updated": services.mark_conversation_read(reader=request.user, partner_id=partner.id)})


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------
@extend_schema_view(
    list=extend_schema(summary="List groups (newest first)", tags=["Groups"]),
    retrieve=extend_schema(summary="Retrieve group", tags=["Groups"]),
    create=extend_schema(summary="Create group (creator joins automatically)", tags=["Groups"]),
    update=extend_schema(summary="Update group", tags=["Groups"]),
    partial_update=extend_schema(summary="Partially update group", tags=["Groups"]),
    destroy=extend_schema(summary="Delete group", tags=["Groups"]),
    join=extend_schema(summary="Join group", request=None, tags=["Groups"]),
    leave=extend_schema(summary="Leave group", request=None, tags=["Groups"]),
    members=extend_schema(summary="List group members", tags=["Groups"]),
    messages=extend_schema(
        summary="List or post group messages (members only)",
        request=MessageCreateSerializer,
        responses={200: MessageSerializer(many=True), 201: MessageSerializer},
        tags=["Groups"],
    ),
)
class GroupViewSet(viewsets.ModelViewSet):
    serializer_class = GroupSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    search_fields = ["name", "description"]

    def get_queryset(self):
        return (
            Group.objects.select_related("created_by__profile")
            .annotate(member_count=Count("members", distinct=True))
            .order_by("-created_at")
        )

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = services.create_group(
            creator=self.request.user,
            name=data["name"],
            description=data.get("description", ""),
            image_url=data.get("image_url"),
        )
        serializer.instance.member_count = 1

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def join(self, request, pk=None):
        group = self.get_object()
        services.join_group(group=group, user=request.user)
        return Response({"joined": True})

    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def leave(self, request, pk=None):
        group = self.get_object()
        services.leave_group(group=group, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated])
    def members(self, request, pk=None):
        group = self.get_object()
        qs = group.members.select_related("user__profile").order_by("created_at")
        return Response(GroupMemberSerializer(qs, many=True, context={"request": request}).data)

    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated], parser_classes=PARSERS)
    def messages(self, request, pk=None):
        group = self.get_object()
        if request.method == "GET":
            if not services.is_member(group.id, request.user.id):
                raise PermissionDenied("Only members can read this group.")
            qs = group.messages.select_related("sender__profile").order_by("created_at")
            page = self.paginate_queryset(qs)
            ser = MessageSerializer(page if page is not None else qs, many=True, context={"request": request})
            return self.get_paginated_response(ser.data) if page is not None else Response(ser.data)

        body = MessageCreateSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        message = services.send_group_message(
            group=group,
            sender=request.user,
            content=body.validated_data.get("content", ""),
            image_url=body.image_url(),
        )
        return Response(MessageSerializer(message, context={"request": request}).data, status=status.HTTP_201_CREATED)
