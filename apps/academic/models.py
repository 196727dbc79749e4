"""
Academic collaboration: projects, who may join them and how.

A user asks to join an open project (ProjectJoinRequest), the creator approves
or declines, approved users become ProjectCollaborators and may be invited to
a ProjectInterview. Closing a project completes it for everyone.
"""
from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.accounts.models import BaseEntity


class ProjectType(models.TextChoices):
    RESEARCH_PAPER = "research_paper", "Research paper"
    ACADEMIC_PROJECT = "academic_project", "Academic project"
    STUDY_GROUP = "study_group", "Study group"


class ProjectStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    OPEN = "open", "Open"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    CLOSED = "closed", "Closed"


class JoinRequestStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    DECLINED = "declined", "Declined"
    CANCELLED = "cancelled", "Cancelled"


class CollaboratorStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    COMPLETED = "completed", "Completed"


class MilestoneStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"


class InterviewStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------
class Skill(BaseEntity):
    name = models.CharField(max_length=120, unique=True)
    category = models.CharField(max_length=120, blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
class AcademicProject(BaseEntity):
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    abstract = models.TextField(blank=True)
    project_type = models.CharField(max_length=32, choices=ProjectType.choices, db_index=True)
    status = models.CharField(max_length=32, choices=ProjectStatus.choices, default=ProjectStatus.OPEN, db_index=True)
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="academic_projects", on_delete=models.CASCADE)
    university = models.CharField(max_length=255, blank=True)
    department = models.CharField(max_length=255, blank=True)
    max_collaborators = models.PositiveIntegerField(default=5)
    deadline = models.DateField(null=True, blank=True)
    paper_title = models.CharField(max_length=300, blank=True)
    paper_abstract = models.TextField(blank=True)
    paper_link = models.CharField(max_length=500, blank=True)
    is_verified = models.BooleanField(default=False)
    # [{"type": "...", "url": "...", "label": "..."}]
    resources = models.JSONField(default=list, blank=True)
    skills = models.ManyToManyField(Skill, through="ProjectSkill", related_name="projects", blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class ProjectSkill(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="project_skills", on_delete=models.CASCADE)
    skill = models.ForeignKey(Skill, related_name="project_skills", on_delete=models.CASCADE)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["project", "skill"], name="uniq_project_skill"),
        ]


class ProjectJoinRequest(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="join_requests", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="project_join_requests", on_delete=models.CASCADE)
    message = models.TextField(blank=True)
    status = models.CharField(
        max_length=16, choices=JoinRequestStatus.choices, default=JoinRequestStatus.PENDING, db_index=True
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["project", "user"],
                condition=Q(status="pending"),
                name="uniq_pending_join_request",
            ),
        ]


class ProjectCollaborator(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="collaborators", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="project_collaborations", on_delete=models.CASCADE)
    role = models.CharField(max_length=64, default="member")
    status = models.CharField(max_length=16, choices=CollaboratorStatus.choices, default=CollaboratorStatus.ACTIVE)
    joined_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["joined_at", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["project", "user"], name="uniq_project_collaborator"),
        ]


class ProjectMilestone(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="milestones", on_delete=models.CASCADE)
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=16, choices=MilestoneStatus.choices, default=MilestoneStatus.PENDING)

    class Meta:
        ordering = ["due_date", "created_at"]


class ProjectDiscussion(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="discussions", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="project_discussions", on_delete=models.CASCADE)
    content = models.TextField()

    class Meta:
        ordering = ["created_at"]


class ProjectInterview(BaseEntity):
    project = models.ForeignKey(AcademicProject, related_name="interviews", on_delete=models.CASCADE)
    interviewer = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="interviews_given", on_delete=models.CASCADE)
    interviewee = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="interviews_taken", on_delete=models.CASCADE)
    scheduled_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=30)
    location = models.CharField(max_length=255, blank=True)
    meeting_link = models.CharField(max_length=500, blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=InterviewStatus.choices, default=InterviewStatus.SCHEDULED)

    class Meta:
        ordering = ["scheduled_time"]
