from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import ProfileSerializer, UserSummarySerializer

from .models import FriendRequest


class FriendRequestSerializer(serializers.ModelSerializer):
    sender = UserSummarySerializer(read_only=True)
    receiver = UserSummarySerializer(read_only=True)
    receiver_id = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), source="receiver", write_only=True
    )

    class Meta:
        model = FriendRequest
        fields = ["id", "sender", "receiver", "receiver_id", "status", "created_at", "updated_at"]
        read_only_fields = ("id", "sender", "receiver", "status", "created_at", "updated_at")


class FriendRequestResponseSerializer(serializers.Serializer):
    accept = serializers.BooleanField()


class SuggestionSerializer(serializers.Serializer):
    profile = ProfileSerializer()
    mutual_friends = serializers.IntegerField()
