from rest_framework import serializers

from apps.accounts.serializers import UserSummarySerializer
from common.storage import upload_with_retry

from .models import ForumPost, ForumComment, Like


class AttachmentMixin:
    """Stores an optional uploaded `file` and records its URL as attachment_url."""
    upload_folder = "forum"

    def _store_attachment(self, validated_data):
        upload = validated_data.pop("file", None)
        if upload is not None:
            validated_data["attachment_url"] = upload_with_retry(upload, self.upload_folder)
        return validated_data

    def create(self, validated_data):
        return super().create(self._store_attachment(validated_data))

    def update(self, instance, validated_data):
        return super().update(instance, self._store_attachment(validated_data))


class ForumPostSerializer(AttachmentMixin, serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    file = serializers.FileField(write_only=True, required=False)
    like_count = serializers.SerializerMethodField()
    comment_count = serializers.SerializerMethodField()
    liked = serializers.SerializerMethodField()

    class Meta:
        model = ForumPost
        fields = [
            "id",
            "user",
            "title",
            "content",
            "category",
            "attachment_url",
            "file",
            "share_count",
            "like_count",
            "comment_count",
            "liked",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "user", "attachment_url", "share_count", "created_at", "updated_at")

    def get_like_count(self, obj) -> int:
        if hasattr(obj, "like_total"):
            return obj.like_total
        return obj.likes.count()

    def get_comment_count(self, obj) -> int:
        if hasattr(obj, "comment_total"):
            return obj.comment_total
        return obj.comments.count()

    def get_liked(self, obj) -> bool:
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return False
        return obj.likes.filter(user=request.user).exists()


class ForumCommentSerializer(AttachmentMixin, serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    file = serializers.FileField(write_only=True, required=False)

    class Meta:
        model = ForumComment
        fields = ["id", "post", "user", "content", "attachment_url", "file", "created_at"]
        read_only_fields = ("id", "post", "user", "attachment_url", "created_at")


class LikeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Like
        fields = ["id", "post", "user", "created_at"]
        read_only_fields = fields


class LikeToggleResponseSerializer(serializers.Serializer):
    liked = serializers.BooleanField()
    like_count = serializers.IntegerField()


class ShareResponseSerializer(serializers.Serializer):
    share_count = serializers.IntegerField()
