from rest_framework import serializers

from . import models


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = models.Notification
        fields = [
            "id",
            "type",
            "title",
            "content",
            "metadata",
            "read",
            "read_at",
            "project_id",
            "request_id",
            "created_at",
        ]
        read_only_fields = fields


class ActivitySerializer(serializers.ModelSerializer):
    class Meta:
        model = models.Activity
        fields = ["id", "activity_type", "content", "related_id", "created_at"]
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    unread = serializers.IntegerField()


class MarkAllReadResponseSerializer(serializers.Serializer):
    updated = serializers.IntegerField()
