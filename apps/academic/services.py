"""
Join/approval workflow for academic projects.

Every state change runs in one transaction. Notifications go through
`notify`, which writes in a savepoint and logs instead of raising, so a
failed notification never undoes the state change it reports.
"""
import logging
from collections import OrderedDict
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied

from apps.notifications.models import NotificationType
from apps.notifications.services import notify
from apps.realtime.services import touch
from common.exceptions import WorkflowError

from .models import (
    AcademicProject,
    CollaboratorStatus,
    InterviewStatus,
    JoinRequestStatus,
    ProjectCollaborator,
    ProjectDiscussion,
    ProjectInterview,
    ProjectJoinRequest,
    ProjectMilestone,
    ProjectSkill,
    ProjectStatus,
    Skill,
)

logger = logging.getLogger(__name__)

FINISHED_STATUSES = (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)


def _require_creator(project: AcademicProject, user):
    if project.creator_id != user.id:
        raise PermissionDenied("Only the project creator can do this.")


def _lock_request(join_request: ProjectJoinRequest) -> ProjectJoinRequest:
    return (
        ProjectJoinRequest.objects.select_for_update()
        .select_related("project", "user")
        .get(pk=join_request.pk)
    )


def is_collaborator(project_id, user_id, statuses=(CollaboratorStatus.ACTIVE,)) -> bool:
    return ProjectCollaborator.objects.filter(project_id=project_id, user_id=user_id, status__in=statuses).exists()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------
@transaction.atomic
def create_project(*, creator, skills=None, **fields) -> AcademicProject:
    fields.setdefault("status", ProjectStatus.OPEN)
    fields["is_verified"] = False
    project = AcademicProject.objects.create(creator=creator, **fields)
    set_project_skills(project=project, skills=skills or [])
    return project


def set_project_skills(*, project: AcademicProject, skills):
    """`skills` is a list of skill names; unknown names are created."""
    ProjectSkill.objects.filter(project=project).delete()
    names = OrderedDict()
    for raw in skills:
        name = (raw or "").strip()
        if name:
            names.setdefault(name.casefold(), name)
    for name in names.values():
        skill = Skill.objects.filter(name__iexact=name).first() or Skill.objects.create(name=name)
        ProjectSkill.objects.create(project=project, skill=skill)


def search_projects(
    *,
    user=None,
    q: Optional[str] = None,
    project_type: Optional[str] = None,
    mine: bool = False,
    status: Optional[str] = None,
):
    qs = AcademicProject.objects.select_related("creator__profile")
    if project_type and project_type != "all":
        qs = qs.filter(project_type=project_type)
    if q:
        qs = qs.filter(title__icontains=q)
    if mine and user is not None:
        qs = qs.filter(creator=user)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


@transaction.atomic
def close_project(*, project: AcademicProject, actor) -> AcademicProject:
    """
    Complete a project: pending requests are cancelled and every active or
    pending collaborator is marked completed.
    """
    project = AcademicProject.objects.select_for_update().get(pk=project.pk)
    _require_creator(project, actor)
    if project.status in FINISHED_STATUSES:
        raise WorkflowError("This project is already completed or cancelled.")

    cancelled = ProjectJoinRequest.objects.filter(project=project, status=JoinRequestStatus.PENDING).update(
        status=JoinRequestStatus.CANCELLED, updated_at=timezone.now()
    )
    ProjectCollaborator.objects.filter(
        project=project, status__in=[CollaboratorStatus.ACTIVE, CollaboratorStatus.PENDING]
    ).update(status=CollaboratorStatus.COMPLETED, updated_at=timezone.now())

    project.status = ProjectStatus.COMPLETED
    project.save(update_fields=["status", "updated_at"])
    if cancelled:
        touch("project_join_requests", project_id=project.id)
    logger.info("Project %s closed by %s (%s pending requests cancelled)", project.id, actor.id, cancelled)
    return project


@transaction.atomic
def delete_project(*, project: AcademicProject, actor):
    """Remove the project and every row hanging off it."""
    _require_creator(project, actor)
    project_id = project.id
    ProjectJoinRequest.objects.filter(project_id=project_id).delete()
    ProjectDiscussion.objects.filter(project_id=project_id).delete()
    ProjectCollaborator.objects.filter(project_id=project_id).delete()
    ProjectMilestone.objects.filter(project_id=project_id).delete()
    ProjectInterview.objects.filter(project_id=project_id).delete()
    ProjectSkill.objects.filter(project_id=project_id).delete()
    project.delete()
    logger.info("Project %s deleted by %s", project_id, actor.id)


# ---------------------------------------------------------------------------
# Join requests
# ---------------------------------------------------------------------------
@transaction.atomic
def submit_join_request(*, project: AcademicProject, user, message: str = "") -> ProjectJoinRequest:
    if project.status != ProjectStatus.OPEN:
        raise WorkflowError("This project is not accepting join requests.")
    if project.creator_id == user.id:
        raise WorkflowError("You cannot request to join your own project.")
    if is_collaborator(project.id, user.id):
        raise WorkflowError("You are already a collaborator on this project.")
    if ProjectJoinRequest.objects.filter(project=project, user=user, status=JoinRequestStatus.PENDING).exists():
        raise WorkflowError("You already have a pending request for this project.")

    try:
        with transaction.atomic():
            join_request = ProjectJoinRequest.objects.create(project=project, user=user, message=message)
    except IntegrityError:
        raise WorkflowError("You already have a pending request for this project.")

    profile = getattr(user, "profile", None)
    notify(
        user=project.creator,
        type=NotificationType.JOIN_REQUEST,
        title="New Join Request",
        content=f'{user.username} has requested to join your project "{project.title}"',
        metadata={
            "requester_username": user.username,
            "requester_avatar": getattr(profile, "avatar_url", None),
            "project_title": project.title,
            "request_message": message,
        },
        project_id=project.id,
        request_id=join_request.id,
        send_email=False,
    )
    return join_request


@transaction.atomic
def approve_join_request(*, join_request: ProjectJoinRequest, actor) -> ProjectCollaborator:
    join_request = _lock_request(join_request)
    project = join_request.project
    _require_creator(project, actor)
    if join_request.status != JoinRequestStatus.PENDING:
        raise WorkflowError("Only pending requests can be approved.")

    join_request.status = JoinRequestStatus.APPROVED
    join_request.save(update_fields=["status", "updated_at"])

    collaborator, created = ProjectCollaborator.objects.get_or_create(
        project=project,
        user=join_request.user,
        defaults={"role": "member", "status": CollaboratorStatus.ACTIVE, "joined_at": timezone.now()},
    )
    if not created and collaborator.status != CollaboratorStatus.ACTIVE:
        collaborator.status = CollaboratorStatus.ACTIVE
        collaborator.joined_at = timezone.now()
        collaborator.save(update_fields=["status", "joined_at", "updated_at"])

    notify(
        user=join_request.user,
        type=NotificationType.REQUEST_ACCEPTED,
        title="Project Request Accepted",
        content=(
            f'Your request to join "{project.title}" has been accepted! '
            "The project admin will schedule an interview with you soon."
        ),
        metadata={"project_title": project.title},
        project_id=project.id,
        request_id=join_request.id,
    )
    return collaborator


@transaction.atomic
def decline_join_request(*, join_request: ProjectJoinRequest, actor) -> ProjectJoinRequest:
    join_request = _lock_request(join_request)
    project = join_request.project
    _require_creator(project, actor)
    if join_request.status != JoinRequestStatus.PENDING:
        raise WorkflowError("Only pending requests can be declined.")

    join_request.status = JoinRequestStatus.DECLINED
    join_request.save(update_fields=["status", "updated_at"])

    notify(
        user=join_request.user,
        type=NotificationType.REQUEST_DECLINED,
        title="Project Request Declined",
        content=f'Your request to join project "{project.title}" has been declined.',
        metadata={"project_title": project.title},
        project_id=project.id,
        request_id=join_request.id,
        send_email=False,
    )
    return join_request


@transaction.atomic
def cancel_join_request(*, join_request: ProjectJoinRequest, actor) -> ProjectJoinRequest:
    join_request = _lock_request(join_request)
    if join_request.user_id != actor.id:
        raise PermissionDenied("Only the requester can cancel this request.")
    if join_request.status != JoinRequestStatus.PENDING:
        raise WorkflowError("Only pending requests can be cancelled.")
    join_request.status = JoinRequestStatus.CANCELLED
    join_request.save(update_fields=["status", "updated_at"])
    return join_request


# ---------------------------------------------------------------------------
# Interviews
# ---------------------------------------------------------------------------
@transaction.atomic
def schedule_interview(
    *,
    project: AcademicProject,
    actor,
    interviewee,
    scheduled_time,
    duration_minutes: int = 30,
    location: str = "",
    meeting_link: str = "",
    notes: str = "",
) -> ProjectInterview:
    _require_creator(project, actor)
    if project.status in FINISHED_STATUSES:
        raise WorkflowError("Interviews cannot be scheduled on a finished project.")
    approved = ProjectJoinRequest.objects.filter(
        project=project, user=interviewee, status=JoinRequestStatus.APPROVED
    ).exists()
    if not approved and not is_collaborator(project.id, interviewee.id):
        raise WorkflowError("Interviews can only be scheduled with approved applicants.")

    interview = ProjectInterview.objects.create(
        project=project,
        interviewer=actor,
        interviewee=interviewee,
        scheduled_time=scheduled_time,
        duration_minutes=duration_minutes,
        location=location,
        meeting_link=meeting_link,
        notes=notes,
    )

    local = timezone.localtime(scheduled_time) if timezone.is_aware(scheduled_time) else scheduled_time
    notify(
        user=interviewee,
        type=NotificationType.INTERVIEW_SCHEDULED,
        title="Interview Scheduled",
        content=(
            f'An interview has been scheduled for your request to join "{project.title}" '
            f"on {local:%Y-%m-%d} at {local:%H:%M}."
        ),
        metadata={
            "project_title": project.title,
            "interview_id": str(interview.id),
            "interview_date": scheduled_time.isoformat(),
            "location": location,
            "meeting_link": meeting_link,
            "notes": notes,
        },
        project_id=project.id,
    )
    return interview


@transaction.atomic
def update_interview_status(*, interview: ProjectInterview, actor, status: str) -> ProjectInterview:
    interview = ProjectInterview.objects.select_for_update().get(pk=interview.pk)
    if actor.id not in (interview.interviewer_id, interview.interviewee_id):
        raise PermissionDenied("Only the interviewer or interviewee can update this interview.")
    if status not in (InterviewStatus.COMPLETED, InterviewStatus.CANCELLED):
        raise WorkflowError("Interviews can only be marked completed or cancelled.")
    if interview.status != InterviewStatus.SCHEDULED:
        raise WorkflowError("Only scheduled interviews can change status.")
    interview.status = status
    interview.save(update_fields=["status", "updated_at"])
    return interview


@transaction.atomic
def approve_after_interview(*, interview: ProjectInterview, actor) -> ProjectCollaborator:
    interview = ProjectInterview.objects.select_related("project", "interviewee").get(pk=interview.pk)
    project = interview.project
    _require_creator(project, actor)
    if interview.status != InterviewStatus.COMPLETED:
        raise WorkflowError("The interview must be completed first.")

    collaborator, _ = ProjectCollaborator.objects.update_or_create(
        project=project,
        user=interview.interviewee,
        defaults={"status": CollaboratorStatus.ACTIVE},
    )
    if collaborator.joined_at is None:
        collaborator.joined_at = timezone.now()
        collaborator.save(update_fields=["joined_at", "updated_at"])

    notify(
        user=interview.interviewee,
        type=NotificationType.PROJECT_APPROVED,
        title="Project Request Approved",
        content=f'Congratulations! You have been approved to join "{project.title}" after your successful interview.',
        metadata={"project_title": project.title},
        project_id=project.id,
    )
    return collaborator


# ---------------------------------------------------------------------------
# Discussions & milestones
# ---------------------------------------------------------------------------
def can_participate(project: AcademicProject, user) -> bool:
    if project.creator_id == user.id:
        return True
    return is_collaborator(project.id, user.id, statuses=(CollaboratorStatus.ACTIVE, CollaboratorStatus.COMPLETED))


def add_discussion(*, project: AcademicProject, user, content: str) -> ProjectDiscussion:
    if not can_participate(project, user):
        raise PermissionDenied("Only project members can post in the discussion.")
    return ProjectDiscussion.objects.create(project=project, user=user, content=content)


def add_milestone(*, project: AcademicProject, actor, **fields) -> ProjectMilestone:
    _require_creator(project, actor)
    return ProjectMilestone.objects.create(project=project, **fields)


def interviews_for(user):
    return (
        ProjectInterview.objects.select_related("project", "interviewer__profile", "interviewee__profile")
        .filter(Q(interviewer=user) | Q(interviewee=user))
        .order_by("scheduled_time")
    )
