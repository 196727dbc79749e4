from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from .views import LoginView, LogoutView, ProfileViewSet, RegisterView

router = DefaultRouter()

# Auth (registration via ViewSet create)
router.register(r"auth/register", RegisterView, basename="auth-register")
router.register(r"profiles", ProfileViewSet, basename="profiles")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/jwt/verify/", TokenVerifyView.as_view(), name="jwt-verify"),

    path("", include(router.urls)),
]
