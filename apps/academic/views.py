from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from common.permissions import IsOwnerOrReadOnly

from . import services
from .models import (
    AcademicProject,
    ProjectInterview,
    ProjectJoinRequest,
    ProjectMilestone,
    Skill,
)
from .serializers import (
    AcademicProjectDetailSerializer,
    AcademicProjectSerializer,
    InterviewScheduleSerializer,
    InterviewStatusSerializer,
    JoinRequestCreateSerializer,
    ProjectCollaboratorSerializer,
    ProjectDiscussionSerializer,
    ProjectInterviewSerializer,
    ProjectJoinRequestSerializer,
    ProjectMilestoneSerializer,
    SkillSerializer,
)

TRUTHY = ("1", "true", "yes")


def _paginated(view, qs, serializer_class):
    page = view.paginate_queryset(qs)
    context = view.get_serializer_context()
    if page is not None:
        return view.get_paginated_response(serializer_class(page, many=True, context=context).data)
    return Response(serializer_class(qs, many=True, context=context).data)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
@extend_schema_view(
    list=extend_schema(
        summary="Search academic projects (newest first)",
        parameters=[
            OpenApiParameter("q", str, description="Case-insensitive title match"),
            OpenApiParameter("type", str, description="research_paper | academic_project | study_group | all"),
            OpenApiParameter("mine", bool, description="Only projects I created"),
            OpenApiParameter("status", str),
        ],
        tags=["Academic"],
    ),
    retrieve=extend_schema(summary="Project with collaborators and milestones", tags=["Academic"]),
    create=extend_schema(summary="Create project", tags=["Academic"]),
    update=extend_schema(summary="Update project", tags=["Academic"]),
    partial_update=extend_schema(summary="Partially update project", tags=["Academic"]),
    destroy=extend_schema(summary="Delete project and everything attached to it", tags=["Academic"]),
)
class AcademicProjectViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, IsOwnerOrReadOnly]
    filter_backends = []

    def get_serializer_class(self):
        if self.action == "retrieve":
            return AcademicProjectDetailSerializer
        return AcademicProjectSerializer

    def get_queryset(self):
        params = self.request.query_params
        if self.action != "list":
            return AcademicProject.objects.select_related("creator__profile").prefetch_related("skills")
        return services.search_projects(
            user=self.request.user,
            q=params.get("q"),
            project_type=params.get("type"),
            mine=params.get("mine", "").lower() in TRUTHY,
            status=params.get("status"),
        ).prefetch_related("skills")

    def perform_create(self, serializer):
        serializer.save(creator=self.request.user)

    def perform_destroy(self, instance):
        services.delete_project(project=instance, actor=self.request.user)

    @extend_schema(request=JoinRequestCreateSerializer, responses={201: ProjectJoinRequestSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def join(self, request, pk=None):
        project = self.get_object()
        body = JoinRequestCreateSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        join_request = services.submit_join_request(
            project=project, user=request.user, message=body.validated_data["message"]
        )
        return Response(ProjectJoinRequestSerializer(join_request).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ProjectJoinRequestSerializer(many=True)}, tags=["Academic"])
    @action(detail=True, methods=["get"], url_path="join-requests", permission_classes=[IsAuthenticated])
    def join_requests(self, request, pk=None):
        project = self.get_object()
        qs = project.join_requests.select_related("user__profile", "project").order_by("-created_at")
        if project.creator_id != request.user.id:
            qs = qs.filter(user=request.user)
        return _paginated(self, qs, ProjectJoinRequestSerializer)

    @extend_schema(request=None, responses={200: AcademicProjectSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"], permission_classes=[IsAuthenticated])
    def close(self, request, pk=None):
        project = services.close_project(project=self.get_object(), actor=request.user)
        return Response(AcademicProjectSerializer(project, context=self.get_serializer_context()).data)

    @extend_schema(responses={200: ProjectCollaboratorSerializer(many=True)}, tags=["Academic"])
    @action(detail=True, methods=["get"], permission_classes=[IsAuthenticated])
    def collaborators(self, request, pk=None):
        project = self.get_object()
        qs = project.collaborators.select_related("user__profile")
        return Response(ProjectCollaboratorSerializer(qs, many=True).data)

    @extend_schema(request=ProjectDiscussionSerializer, responses={200: ProjectDiscussionSerializer(many=True)}, tags=["Academic"])
    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated])
    def discussions(self, request, pk=None):
        project = self.get_object()
        if request.method == "GET":
            qs = project.discussions.select_related("user__profile").order_by("created_at")
            return _paginated(self, qs, ProjectDiscussionSerializer)

        body = ProjectDiscussionSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        discussion = services.add_discussion(project=project, user=request.user, content=body.validated_data["content"])
        return Response(ProjectDiscussionSerializer(discussion).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ProjectMilestoneSerializer, responses={200: ProjectMilestoneSerializer(many=True)}, tags=["Academic"])
    @action(detail=True, methods=["get", "post"], permission_classes=[IsAuthenticated])
    def milestones(self, request, pk=None):
        project = self.get_object()
        if request.method == "GET":
            return Response(ProjectMilestoneSerializer(project.milestones.all(), many=True).data)

        body = ProjectMilestoneSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        milestone = services.add_milestone(project=project, actor=request.user, **body.validated_data)
        return Response(ProjectMilestoneSerializer(milestone).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=InterviewScheduleSerializer, responses={201: ProjectInterviewSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"], url_path="interviews", permission_classes=[IsAuthenticated])
    def schedule_interview(self, request, pk=None):
        project = self.get_object()
        body = InterviewScheduleSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        interview = services.schedule_interview(project=project, actor=request.user, **body.validated_data)
        return Response(ProjectInterviewSerializer(interview).data, status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------------
# Join requests
# ---------------------------------------------------------------------------
@extend_schema_view(
    list=extend_schema(summary="Join requests I sent or received on my projects", tags=["Academic"]),
    retrieve=extend_schema(summary="Retrieve join request", tags=["Academic"]),
)
class ProjectJoinRequestViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = ProjectJoinRequestSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "project"]

    def get_queryset(self):
        user = self.request.user
        return (
            ProjectJoinRequest.objects.select_related("user__profile", "project")
            .filter(Q(user=user) | Q(project__creator=user))
            .order_by("-created_at")
        )

    @extend_schema(request=None, responses={200: ProjectCollaboratorSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        collaborator = services.approve_join_request(join_request=self.get_object(), actor=request.user)
        return Response(ProjectCollaboratorSerializer(collaborator).data)

    @extend_schema(request=None, responses={200: ProjectJoinRequestSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"])
    def decline(self, request, pk=None):
        join_request = services.decline_join_request(join_request=self.get_object(), actor=request.user)
        return Response(self.get_serializer(join_request).data)

    @extend_schema(request=None, responses={200: ProjectJoinRequestSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        join_request = services.cancel_join_request(join_request=self.get_object(), actor=request.user)
        return Response(self.get_serializer(join_request).data)


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------
@extend_schema_view(
    list=extend_schema(summary="My interviews (as interviewer or interviewee), soonest first", tags=["Academic"]),
    retrieve=extend_schema(summary="Retrieve interview", tags=["Academic"]),
)
class ProjectInterviewViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = ProjectInterviewSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["status", "project"]

    def get_queryset(self):
        return services.interviews_for(self.request.user)

    @extend_schema(request=InterviewStatusSerializer, responses={200: ProjectInterviewSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        body = InterviewStatusSerializer(data=request.data)
        body.is_valid(raise_exception=True)
        interview = services.update_interview_status(
            interview=self.get_object(), actor=request.user, status=body.validated_data["status"]
        )
        return Response(self.get_serializer(interview).data)

    @extend_schema(request=None, responses={200: ProjectCollaboratorSerializer}, tags=["Academic"])
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        collaborator = services.approve_after_interview(interview=self.get_object(), actor=request.user)
        return Response(ProjectCollaboratorSerializer(collaborator).data)


# ---------------------------------------------------------------------------
# Milestones & skills
# ---------------------------------------------------------------------------
@extend_schema_view(
    retrieve=extend_schema(summary="Retrieve milestone", tags=["Academic"]),
    partial_update=extend_schema(summary="Update milestone (project creator only)", tags=["Academic"]),
    destroy=extend_schema(summary="Delete milestone (project creator only)", tags=["Academic"]),
)
class ProjectMilestoneViewSet(
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = ProjectMilestone.objects.select_related("project").all()
    serializer_class = ProjectMilestoneSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "patch", "delete", "head", "options"]

    def _check_creator(self, milestone):
        if milestone.project.creator_id != self.request.user.id:
            raise PermissionDenied("Only the project creator can change milestones.")

    def perform_update(self, serializer):
        self._check_creator(serializer.instance)
        serializer.save()

    def perform_destroy(self, instance):
        self._check_creator(instance)
        instance.delete()


class SkillViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Skill.objects.all()
    serializer_class = SkillSerializer
    permission_classes = [IsAuthenticated]
    search_fields = ["name", "category"]
    filterset_fields = ["category"]
