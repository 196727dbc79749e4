from rest_framework.routers import DefaultRouter

from .views import ForumCommentViewSet, ForumPostViewSet

router = DefaultRouter()
router.register(r"forum/posts", ForumPostViewSet, basename="forum-posts")
router.register(r"forum/comments", ForumCommentViewSet, basename="forum-comments")

urlpatterns = router.urls
