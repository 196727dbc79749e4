"""
Accounts models: the login identity (User) and the public academic profile
(Profile) shown across the forum, friends, chat and project screens.
"""
from typing import Optional
import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone


# ---------------------------------------------------------------------
# BaseEntity
# ---------------------------------------------------------------------
class BaseEntity(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]


# ---------------------------------------------------------------------
# User manager
# ---------------------------------------------------------------------
class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, *, email: str, username: str, password: Optional[str], **extra):
        if not email:
            raise ValueError("Users must have an email address")
        if not username:
            raise ValueError("Users must have a username")

        user = self.model(email=self.normalize_email(email), username=username, **extra)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: Optional[str] = None, username: Optional[str] = None, **extra):
        extra.setdefault("is_staff", False)
        extra.setdefault("is_superuser", False)
        username = username or (email.split("@")[0] if email else None)
        return self._create_user(email=email, username=username, password=password, **extra)

    def create_superuser(self, email: str, password: str, username: Optional[str] = None, **extra):
        if not password:
            raise ValueError("Superuser must have a password")
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        if extra.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self.create_user(email, password=password, username=username, **extra)

    def get_by_natural_key(self, key: str):
        return self.get(email__iexact=key)


# ---------------------------------------------------------------------
# User model
# ---------------------------------------------------------------------
class User(AbstractBaseUser, PermissionsMixin, BaseEntity):
    email = models.EmailField(unique=True, db_index=True)
    username = models.CharField(unique=True, max_length=150, db_index=True)

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self) -> str:
        return self.username or self.email


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
class Profile(BaseEntity):
    """
    Academic profile. Created with the user, edited from settings, never deleted
    on its own.
    """
    user = models.OneToOneField(User, related_name="profile", on_delete=models.CASCADE)
    full_name = models.CharField(max_length=200, blank=True)
    avatar_url = models.URLField(max_length=500, blank=True, null=True)
    university = models.CharField(max_length=255, blank=True, db_index=True)
    field_of_study = models.CharField(max_length=255, blank=True, null=True, db_index=True)
    sub_field = models.CharField(max_length=255, blank=True, null=True)
    year_of_enroll = models.PositiveIntegerField(blank=True, null=True)
    year_of_completion = models.PositiveIntegerField(blank=True, null=True)
    nationality = models.CharField(max_length=100, blank=True, null=True)
    interests = models.JSONField(default=list, blank=True)
    bio = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["user__username"]
        indexes = [
            models.Index(fields=["university", "field_of_study"]),
        ]

    def __str__(self) -> str:
        return f"Profile<{self.user.username}>"

    @property
    def username(self) -> str:
        return self.user.username
