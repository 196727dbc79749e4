"""
Accounts views with JWT-based auth.

- Register & Login issue SimpleJWT tokens (access + refresh).
- Logout is a 204; clients discard their tokens.
- Profiles are readable by any signed-in user and searchable by name and
  academic fields; only the owner edits their own via /profiles/me/.
"""
import logging

from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from common.storage import IMAGE_MIME_TYPES, upload_with_retry

from .models import User, Profile
from .serializers import (
    AvatarUploadSerializer,
    JWTTokensSerializer,
    LoginSerializer,
    PasswordChangeSerializer,
    ProfileSerializer,
    RegisterSerializer,
)

logger = logging.getLogger(__name__)


# -----------------------------
# JWT helpers
# -----------------------------
def issue_tokens_for_user(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
        "token_type": "Bearer",
    }


# -----------------------------
# Auth endpoints: Register/Login/Logout (JWT)
# -----------------------------
@extend_schema_view(
    create=extend_schema(
        summary="Register a new account (returns JWT)",
        description="Create user + profile and return access/refresh JWT tokens plus the profile payload.",
        request=RegisterSerializer,
        responses={201: OpenApiResponse(response=ProfileSerializer)},
        tags=["Auth"],
    )
)
class RegisterView(mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.all()
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s", user.id)

        profile_payload = ProfileSerializer(user.profile, context={"request": request}).data
        return Response({**profile_payload, **issue_tokens_for_user(user)}, status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Login (email + password) -> returns JWT",
    request=LoginSerializer,
    responses={200: JWTTokensSerializer},
    tags=["Auth"],
)
class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        tokens = issue_tokens_for_user(user)
        return Response(
            {
                **tokens,
                "user": {"id": user.id, "email": user.email, "username": user.username},
            },
            status=status.HTTP_200_OK,
        )


@extend_schema(summary="Logout (JWT)", request=None, responses={204: None}, tags=["Auth"])
class LogoutView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        logger.info("User %s signed out", request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -----------------------------
# Profiles
# -----------------------------
@extend_schema_view(
    list=extend_schema(summary="Search profiles", description="`search` matches username or full name."),
    retrieve=extend_schema(summary="Retrieve profile"),
    me=extend_schema(summary="Get or update the current user's profile"),
    avatar=extend_schema(summary="Upload a new avatar", request=AvatarUploadSerializer),
    change_password=extend_schema(summary="Change password", request=PasswordChangeSerializer, responses={204: None}),
)
class ProfileViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Profile.objects.select_related("user").all()
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["user", "university", "field_of_study", "sub_field", "nationality"]
    search_fields = ["user__username", "full_name"]
    ordering_fields = ["created_at", "full_name"]

    @action(detail=False, methods=["get", "patch"])
    def me(self, request):
        profile = request.user.profile
        if request.method == "GET":
            return Response(self.get_serializer(profile).data)
        serializer = self.get_serializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=["post"], parser_classes=[MultiPartParser, FormParser])
    def avatar(self, request):
        serializer = AvatarUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        url = upload_with_retry(serializer.validated_data["file"], "avatars", allowed_types=IMAGE_MIME_TYPES)

        profile = request.user.profile
        profile.avatar_url = url
        profile.save(update_fields=["avatar_url", "updated_at"])
        return Response(self.get_serializer(profile).data)

    @action(detail=False, methods=["post"], url_path="change-password")
    def change_password(self, request):
        serializer = PasswordChangeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            serializer.save()
        return Response(status=status.HTTP_204_NO_CONTENT)
