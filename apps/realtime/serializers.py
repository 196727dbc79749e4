from rest_framework import serializers


class PollQuerySerializer(serializers.Serializer):
    table = serializers.CharField()
    filter = serializers.CharField(required=False, allow_blank=True)
    since = serializers.IntegerField(required=False, min_value=0)
    wait = serializers.FloatField(required=False, min_value=0, default=0)


class PollResponseSerializer(serializers.Serializer):
    table = serializers.CharField()
    filter = serializers.CharField(allow_null=True)
    version = serializers.IntegerField()
    changed = serializers.BooleanField()
    results = serializers.ListField(child=serializers.DictField(), allow_null=True)
