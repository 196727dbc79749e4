from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.models import User
from apps.accounts.serializers import ProfileSerializer, UserSummarySerializer

from . import services
from .models import FriendRequest
from .serializers import FriendRequestResponseSerializer, FriendRequestSerializer, SuggestionSerializer


@extend_schema_view(
    list=extend_schema(summary="List friend requests I sent or received", tags=["Friends"]),
    create=extend_schema(summary="Send a friend request", tags=["Friends"]),
    destroy=extend_schema(summary="Cancel a pending request I sent", tags=["Friends"]),
)
class FriendRequestViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = FriendRequestSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status"]

    def get_queryset(self):
        user = self.request.user
        qs = FriendRequest.objects.select_related("sender__profile", "receiver__profile").filter(
            Q(sender=user) | Q(receiver=user)
        )
        box = self.request.query_params.get("box")
        if box == "received":
            qs = qs.filter(receiver=user)
        elif box == "sent":
            qs = qs.filter(sender=user)
        return qs.order_by("-created_at")

    def perform_create(self, serializer):
        serializer.instance = services.send_friend_request(
            sender=self.request.user, receiver=serializer.validated_data["receiver"]
        )

    def perform_destroy(self, instance):
        services.cancel_request(request=instance, user=self.request.user)

    @extend_schema(request=FriendRequestResponseSerializer, responses={200: FriendRequestSerializer}, tags=["Friends"])
    @action(detail=True, methods=["post"])
    def respond(self, request, pk=None):
        friend_request = self.get_object()
        body = FriendRequestResponseSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        friend_request = services.respond_to_request(
            request=friend_request, user=request.user, accept=body.validated_data["accept"]
        )
        return Response(self.get_serializer(friend_request).data)


@extend_schema_view(
    list=extend_schema(summary="List my friends", tags=["Friends"]),
    destroy=extend_schema(summary="Unfriend (pk is the friend's user id)", tags=["Friends"]),
    suggestions=extend_schema(summary="People you may know", responses={200: SuggestionSerializer(many=True)}, tags=["Friends"]),
    recommended=extend_schema(summary="Recommended users", responses={200: ProfileSerializer(many=True)}, tags=["Friends"]),
)
class FriendViewSet(viewsets.GenericViewSet):
    serializer_class = UserSummarySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        ids = services.friend_ids(self.request.user.id)
        return User.objects.select_related("profile").filter(id__in=ids).order_by("username")

    def list(self, request):
        qs = self.get_queryset()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    def destroy(self, request, pk=None):
        friend = get_object_or_404(User, pk=pk)
        if not services.unfriend(user=request.user, friend_id=friend.id):
            return Response({"detail": "Not friends."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def suggestions(self, request):
        rows = services.suggest_friends_of_friends(request.user)
        data = [{"profile": profile, "mutual_friends": n} for profile, n in rows]
        return Response(SuggestionSerializer(data, many=True, context={"request": request}).data)

    @action(detail=False, methods=["get"])
    def recommended(self, request):
        excluded = services.request_party_ids(request.user.id) | set(services.friend_ids(request.user.id))
        profiles = [p for p in services.recommended_users(request.user) if p.user_id not in excluded]
        return Response(ProfileSerializer(profiles, many=True, context={"request": request}).data)
