from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

urlpatterns = [
    path("admin/", admin.site.urls),

    # --- Versioned app routes ---
    path("api/v1/", include("apps.accounts.urls")),
    path("api/v1/", include("apps.notifications.urls")),
    path("api/v1/", include("apps.forum.urls")),
    path("api/v1/", include("apps.friends.urls")),
    path("api/v1/", include("apps.chat.urls", namespace="chat")),
    path("api/v1/", include("apps.academic.urls")),
    path("api/v1/", include("apps.realtime.urls")),

    # --- OpenAPI / Docs ---
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/docs/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
