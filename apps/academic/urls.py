from rest_framework.routers import DefaultRouter

from .views import (
    AcademicProjectViewSet,
    ProjectInterviewViewSet,
    ProjectJoinRequestViewSet,
    ProjectMilestoneViewSet,
    SkillViewSet,
)

router = DefaultRouter()
router.register(r"academic/projects", AcademicProjectViewSet, basename="academic-projects")
router.register(r"academic/join-requests", ProjectJoinRequestViewSet, basename="academic-join-requests")
router.register(r"academic/interviews", ProjectInterviewViewSet, basename="academic-interviews")
router.register(r"academic/milestones", ProjectMilestoneViewSet, basename="academic-milestones")
router.register(r"academic/skills", SkillViewSet, basename="academic-skills")

urlpatterns = router.urls
