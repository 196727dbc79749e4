from rest_framework.routers import DefaultRouter

from .views import DirectMessageViewSet, GroupViewSet

app_name = "chat"

router = DefaultRouter()
router.register(r"chats", DirectMessageViewSet, basename="chats")
router.register(r"groups", GroupViewSet, basename="groups")

urlpatterns = router.urls
