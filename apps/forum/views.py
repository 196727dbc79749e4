from django.db.models import Count
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from common.permissions import IsOwnerOrReadOnly

from . import services
from .models import ForumPost, ForumComment
from .serializers import (
    ForumCommentSerializer,
    ForumPostSerializer,
    LikeToggleResponseSerializer,
    ShareResponseSerializer,
)

PARSERS = [JSONParser, MultiPartParser, FormParser]


@extend_schema_view(
    list=extend_schema(summary="List forum posts (newest first)", tags=["Forum"]),
    retrieve=extend_schema(summary="Retrieve forum post", tags=["Forum"]),
    create=extend_schema(summary="Create forum post with optional attachment", tags=["Forum"]),
    update=extend_schema(summary="Update forum post", tags=["Forum"]),
    partial_update=extend_schema(summary="Partially update forum post", tags=["Forum"]),
    destroy=extend_schema(summary="Delete forum post with its comments and likes", tags=["Forum"]),
)
class ForumPostViewSet(viewsets.ModelViewSet):
    serializer_class = ForumPostSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    parser_classes = PARSERS
    filterset_fields = ["user", "category"]
    search_fields = ["title"]
    ordering_fields = ["created_at", "share_count"]

    def get_queryset(self):
        return (
            ForumPost.objects.select_related("user", "user__profile")
            .annotate(like_total=Count("likes", distinct=True), comment_total=Count("comments", distinct=True))
            .order_by("-created_at")
        )

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def perform_destroy(self, instance):
        services.delete_forum_post(post=instance)

    @extend_schema(request=None, responses={200: LikeToggleResponseSerializer}, tags=["Forum"])
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def like(self, request, pk=None):
        post = self.get_object()
        liked = services.toggle_like(post=post, user=request.user)
        return Response({"liked": liked, "like_count": post.likes.count()})

    @extend_schema(request=None, responses={200: ShareResponseSerializer}, tags=["Forum"])
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def share(self, request, pk=None):
        post = self.get_object()
        return Response({"share_count": services.share_post(post=post)})

    @extend_schema(request=ForumCommentSerializer, responses={200: ForumCommentSerializer(many=True)}, tags=["Forum"])
    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated])
    def comments(self, request, pk=None):
        post = self.get_object()
        if request.method == "GET":
            qs = post.comments.select_related("user", "user__profile").order_by("created_at")
            page = self.paginate_queryset(qs)
            ser = ForumCommentSerializer(page if page is not None else qs, many=True, context={"request": request})
            return self.get_paginated_response(ser.data) if page is not None else Response(ser.data)

        ser = ForumCommentSerializer(data=request.data, context={"request": request})
        ser.is_valid(raise_exception=True)
        ser.save(post=post, user=request.user)
        return Response(ser.data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    retrieve=extend_schema(summary="Retrieve comment", tags=["Forum"]),
    partial_update=extend_schema(summary="Edit own comment", tags=["Forum"]),
    destroy=extend_schema(summary="Delete own comment", tags=["Forum"]),
)
class ForumCommentViewSet(
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = ForumComment.objects.select_related("user", "user__profile").all()
    serializer_class = ForumCommentSerializer
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    parser_classes = PARSERS
    http_method_names = ["get", "patch", "delete", "head", "options"]
