from rest_framework import serializers

from apps.accounts.models import User
from apps.accounts.serializers import UserSummarySerializer

from . import services
from .models import (
    AcademicProject,
    InterviewStatus,
    ProjectCollaborator,
    ProjectDiscussion,
    ProjectInterview,
    ProjectJoinRequest,
    ProjectMilestone,
    Skill,
)


class SkillSerializer(serializers.ModelSerializer):
    class Meta:
        model = Skill
        fields = ["id", "name", "category"]


class ProjectCollaboratorSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = ProjectCollaborator
        fields = ["id", "project", "user", "role", "status", "joined_at"]
        read_only_fields = fields


class ProjectMilestoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectMilestone
        fields = ["id", "project", "title", "description", "due_date", "status", "created_at", "updated_at"]
        read_only_fields = ("id", "project", "created_at", "updated_at")


class ProjectDiscussionSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = ProjectDiscussion
        fields = ["id", "project", "user", "content", "created_at", "updated_at"]
        read_only_fields = ("id", "project", "user", "created_at", "updated_at")


class ProjectJoinRequestSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    project_title = serializers.CharField(source="project.title", read_only=True)

    class Meta:
        model = ProjectJoinRequest
        fields = ["id", "project", "project_title", "user", "message", "status", "created_at", "updated_at"]
        read_only_fields = ("id", "project", "project_title", "user", "status", "created_at", "updated_at")


class JoinRequestCreateSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="")


class ResourceSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=64)
    url = serializers.URLField(max_length=500)
    label = serializers.CharField(max_length=200, required=False, allow_blank=True, default="")


class AcademicProjectSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    skills = SkillSerializer(many=True, read_only=True)
    skill_names = serializers.ListField(
        child=serializers.CharField(max_length=120), write_only=True, required=False
    )
    resources = ResourceSerializer(many=True, required=False)
    collaborator_count = serializers.SerializerMethodField()

    class Meta:
        model = AcademicProject
        fields = [
            "id",
            "title",
            "description",
            "abstract",
            "project_type",
            "status",
            "creator",
            "university",
            "department",
            "max_collaborators",
            "deadline",
            "paper_title",
            "paper_abstract",
            "paper_link",
            "is_verified",
            "resources",
            "skills",
            "skill_names",
            "collaborator_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ("id", "creator", "status", "is_verified", "skills", "created_at", "updated_at")

    def create(self, validated_data):
        skill_names = validated_data.pop("skill_names", [])
        validated_data["resources"] = [dict(r) for r in validated_data.get("resources", [])]
        return services.create_project(skills=skill_names, **validated_data)

    def update(self, instance, validated_data):
        skill_names = validated_data.pop("skill_names", None)
        if "resources" in validated_data:
            validated_data["resources"] = [dict(r) for r in validated_data["resources"]]
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        if skill_names is not None:
            services.set_project_skills(project=instance, skills=skill_names)
        return instance

    def get_collaborator_count(self, obj) -> int:
        return obj.collaborators.filter(status="active").count()

    def validate_max_collaborators(self, value):
        if value < 1:
            raise serializers.ValidationError("A project needs room for at least one collaborator.")
        return value


class AcademicProjectDetailSerializer(AcademicProjectSerializer):
    collaborators = ProjectCollaboratorSerializer(many=True, read_only=True)
    milestones = ProjectMilestoneSerializer(many=True, read_only=True)

    class Meta(AcademicProjectSerializer.Meta):
        fields = AcademicProjectSerializer.Meta.fields + ["collaborators", "milestones"]


class ProjectInterviewSerializer(serializers.ModelSerializer):
    interviewer = UserSummarySerializer(read_only=True)
    interviewee = UserSummarySerializer(read_only=True)
    project_title = serializers.CharField(source="project.title", read_only=True)

    class Meta:
        model = ProjectInterview
        fields = [
            "id",
            "project",
            "project_title",
            "interviewer",
            "interviewee",
            "scheduled_time",
            "duration_minutes",
            "location",
            "meeting_link",
            "notes",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InterviewScheduleSerializer(serializers.Serializer):
    interviewee_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), source="interviewee")
    scheduled_time = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField(min_value=5, max_value=480, default=30)
    location = serializers.CharField(required=False, allow_blank=True, default="")
    meeting_link = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class InterviewStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[InterviewStatus.COMPLETED, InterviewStatus.CANCELLED])
