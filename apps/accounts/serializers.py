"""
Serializers for accounts app. Signup validation, login, profile settings and
the compact user payload embedded by the other apps.
"""
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import User, Profile
from .validators import (
    PASSWORD_MIN_LENGTH,
    academic_year_errors,
    is_valid_email,
    passwords_match,
    username_error,
)

PROFILE_FIELDS = (
    "full_name",
    "university",
    "field_of_study",
    "sub_field",
    "year_of_enroll",
    "year_of_completion",
    "nationality",
    "interests",
    "bio",
)


# -------------------------------------------------------------------
# Compact payloads
# -------------------------------------------------------------------
class UserSummarySerializer(serializers.ModelSerializer):
    """Author / sender / member block used in forum, chat and project payloads."""
    full_name = serializers.CharField(source="profile.full_name", read_only=True, default="")
    avatar_url = serializers.CharField(source="profile.avatar_url", read_only=True, default=None)
    university = serializers.CharField(source="profile.university", read_only=True, default="")

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "avatar_url", "university"]
        read_only_fields = fields


# -------------------------------------------------------------------
# Profile serializer
# -------------------------------------------------------------------
class ProfileSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(read_only=True)
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    username = serializers.CharField(source="user.username", required=False)
    email = serializers.EmailField(source="user.email", read_only=True)
    interests = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = Profile
        fields = [
            "id",
            "user",
            "username",
            "email",
            "full_name",
            "avatar_url",
            "university",
            "field_of_study",
            "sub_field",
            "year_of_enroll",
            "year_of_completion",
            "nationality",
            "interests",
            "bio",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "user", "email", "avatar_url", "created_at", "updated_at")

    def validate_username(self, value):
        error = username_error(value)
        if error:
            raise serializers.ValidationError(error)
        qs = User.objects.filter(username__iexact=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.user_id)
        if qs.exists():
            raise serializers.ValidationError("Username is already taken")
        return value

    def validate(self, attrs):
        enroll = attrs.get("year_of_enroll", getattr(self.instance, "year_of_enroll", None))
        completion = attrs.get("year_of_completion", getattr(self.instance, "year_of_completion", None))
        errors = academic_year_errors(enroll, completion)
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    @transaction.atomic
    def update(self, instance, validated_data):
        user_data = validated_data.pop("user", {})
        username = user_data.get("username")
        if username and username != instance.user.username:
            instance.user.username = username
            instance.user.save(update_fields=["username", "updated_at"])
        return super().update(instance, validated_data)


# -------------------------------------------------------------------
# Registration
# -------------------------------------------------------------------
class RegisterSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)
    password_confirm = serializers.CharField(write_only=True, trim_whitespace=False)
    username = serializers.CharField()
    full_name = serializers.CharField(required=False, allow_blank=True, default="")
    university = serializers.CharField(required=False, allow_blank=True, default="")
    field_of_study = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    sub_field = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    year_of_enroll = serializers.IntegerField(required=False, allow_null=True)
    year_of_completion = serializers.IntegerField(required=False, allow_null=True)
    nationality = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    interests = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    bio = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_email(self, value):
        value = value.strip()
        if not is_valid_email(value):
            raise serializers.ValidationError("Please enter a valid email address")
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("An account with this email already exists")
        return value

    def validate_username(self, value):
        error = username_error(value)
        if error:
            raise serializers.ValidationError(error)
        if User.objects.filter(username__iexact=value).exists():
            raise serializers.ValidationError("Username is already taken")
        return value

    def validate(self, attrs):
        if not passwords_match(attrs.get("password"), attrs.get("password_confirm")):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match"})
        if len(attrs["password"]) < PASSWORD_MIN_LENGTH:
            raise serializers.ValidationError(
                {"password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"}
            )
        try:
            validate_password(attrs["password"])
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"password": list(exc.messages)})

        errors = academic_year_errors(attrs.get("year_of_enroll"), attrs.get("year_of_completion"))
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def create(self, validated_data):
        validated_data.pop("password_confirm", None)
        password = validated_data.pop("password")
        email = validated_data.pop("email")
        username = validated_data.pop("username")
        profile_data = {k: v for k, v in validated_data.items() if k in PROFILE_FIELDS and v is not None}

        try:
            with transaction.atomic():
                user = User.objects.create_user(email=email, password=password, username=username)
                profile = user.profile
                for key, value in profile_data.items():
                    setattr(profile, key, value)
                profile.save()
        except IntegrityError:
            raise serializers.ValidationError({"detail": "An account with this email or username already exists"})
        return user


# -------------------------------------------------------------------
# Login / password
# -------------------------------------------------------------------
class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        req = self.context.get("request")
        if hasattr(req, "_request"):
            req = req._request

        user = authenticate(request=req, username=attrs.get("email", "").strip(), password=attrs.get("password"))
        if user is None:
            raise serializers.ValidationError({"detail": _("Invalid email or password.")})
        if not user.is_active:
            raise serializers.ValidationError({"detail": _("User account is disabled.")})

        attrs["user"] = user
        return attrs


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password = serializers.CharField(write_only=True, trim_whitespace=False)
    new_password_confirm = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_current_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect")
        return value

    def validate(self, attrs):
        if not passwords_match(attrs["new_password"], attrs["new_password_confirm"]):
            raise serializers.ValidationError({"new_password_confirm": "Passwords do not match"})
        try:
            validate_password(attrs["new_password"], user=self.context["request"].user)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({"new_password": list(exc.messages)})
        return attrs

    def save(self, **kwargs):
        user = self.context["request"].user
        user.set_password(self.validated_data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        return user


class AvatarUploadSerializer(serializers.Serializer):
    file = serializers.FileField()


class JWTTokensSerializer(serializers.Serializer):
    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    token_type = serializers.CharField(default="Bearer", read_only=True)
