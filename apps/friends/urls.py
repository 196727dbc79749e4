from rest_framework.routers import DefaultRouter

from .views import FriendRequestViewSet, FriendViewSet

router = DefaultRouter()
router.register(r"friend-requests", FriendRequestViewSet, basename="friend-requests")
router.register(r"friends", FriendViewSet, basename="friends")

urlpatterns = router.urls
