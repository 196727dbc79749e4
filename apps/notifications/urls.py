from rest_framework.routers import DefaultRouter

from .views import ActivityViewSet, NotificationViewSet

router = DefaultRouter()
router.register(r"notifications", NotificationViewSet, basename="notifications")
router.register(r"activities", ActivityViewSet, basename="activities")

urlpatterns = router.urls
