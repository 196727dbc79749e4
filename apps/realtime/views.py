import time

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .registry import get_feed
from .serializers import PollQuerySerializer, PollResponseSerializer
from .services import get_version, parse_filter


@extend_schema(
    summary="Poll a change feed and refetch on change",
    description=(
        "Returns the feed version. When it differs from `since` (or `since` is omitted) "
        "the full list query is re-run and returned in `results`. `wait` holds the request "
        "open for up to that many seconds waiting for a change."
    ),
    parameters=[PollQuerySerializer],
    responses={200: PollResponseSerializer},
    tags=["Realtime"],
)
class PollView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = PollQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data

        try:
            feed = get_feed(params["table"])
            flt = parse_filter(feed, params.get("filter"))
        except (LookupError, ValueError) as exc:
            raise serializers.ValidationError({"detail": str(exc)})

        since = params.get("since")
        version = get_version(feed.table, flt)
        wait = min(params["wait"], settings.REALTIME_POLL_MAX_WAIT_SECONDS)
        deadline = time.monotonic() + wait
        while since is not None and version == since and time.monotonic() < deadline:
            time.sleep(settings.REALTIME_POLL_INTERVAL_SECONDS)
            version = get_version(feed.table, flt)

        changed = since is None or version != since
        results = None
        if changed:
            qs = feed.queryset_for(request.user)
            if flt is not None:
                qs = qs.filter(**{flt[0]: flt[1]})
            qs = qs[: settings.REALTIME_POLL_MAX_ROWS]
            results = feed.get_serializer_class()(qs, many=True, context={"request": request}).data

        return Response(
            {
                "table": feed.table,
                "filter": params.get("filter") or None,
                "version": version,
                "changed": changed,
                "results": results,
            }
        )
