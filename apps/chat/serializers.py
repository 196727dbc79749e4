from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import UserSummarySerializer
from common.storage import IMAGE_MIME_TYPES, upload_with_retry

from .models import Group, GroupMember, Message


class MessageSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)

    class Meta:
        model = Message
        fields = ["id", "sender", "receiver", "group", "content", "image_url", "read", "created_at"]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(required=False, allow_blank=True, default="")
    image = serializers.FileField(required=False, write_only=True)

    def validate(self, attrs):
        if not attrs.get("content", "").strip() and not attrs.get("image"):
            raise serializers.ValidationError({"content": "A message needs text or an image."})
        return attrs

    def image_url(self):
        upload = self.validated_data.get("image")
        if upload is None:
            return None
        return upload_with_retry(upload, "chat", allowed_types=IMAGE_MIME_TYPES)


class ConversationPartnerSerializer(UserSummarySerializer):
    unread = serializers.IntegerField(read_only=True, default=0)

    class Meta(UserSummarySerializer.Meta):
        model = User
        fields = UserSummarySerializer.Meta.fields + ["unread"]
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    member_count = serializers.IntegerField(read_only=True, default=0)
    is_member = serializers.SerializerMethodField()

    class Meta:
        model = Group
        fields = [
            "id",
            "name",
            "description",
            "image_url",
            "created_by",
            "member_count",
            "is_member",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "created_by", "member_count", "is_member", "created_at", "updated_at")

    def get_is_member(self, obj) -> bool:
        request = self.context.get("request")
        if request is None:
            return False
        return obj.members.filter(user_id=request.user.id).exists()


class GroupMemberSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = GroupMember
        fields = ["id", "user", "created_at"]
        read_only_fields = fields
