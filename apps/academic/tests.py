from datetime import timedelta
from unittest import mock

from django.test import TestCase
from django.utils import timezone
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APITestCase

from apps.accounts.models import User
from apps.notifications.models import Notification
from common.exceptions import WorkflowError
from . import services
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
    ProjectType,
    Skill,
)


def make_user(name):
    return User.objects.create_user(email=f"{name}@uni.edu", password="secret1", username=name)


class JoinWorkflowTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.student = make_user("student")
        self.project = services.create_project(
            creator=self.owner,
            title="Graphene sensors",
            project_type=ProjectType.RESEARCH_PAPER,
            skills=["Python", "python", "Optics"],
        )

    def test_create_forces_open_unverified_and_dedupes_skills(self):
        self.assertEqual(self.project.status, ProjectStatus.OPEN)
        self.assertFalse(self.project.is_verified)
        self.assertEqual(sorted(s.name for s in self.project.skills.all()), ["Optics", "Python"])

    def test_join_request_notifies_creator(self):
        join_request = services.submit_join_request(project=self.project, user=self.student, message="hi")
        self.assertEqual(join_request.status, JoinRequestStatus.PENDING)

        notif = Notification.objects.get(user=self.owner)
        self.assertEqual(notif.type, "join_request")
        self.assertEqual(notif.request_id, join_request.id)
        self.assertEqual(notif.metadata["requester_username"], "student")

    def test_second_pending_request_is_rejected(self):
        services.submit_join_request(project=self.project, user=self.student)
        with self.assertRaises(WorkflowError):
            services.submit_join_request(project=self.project, user=self.student)
        self.assertEqual(ProjectJoinRequest.objects.filter(project=self.project, user=self.student).count(), 1)

    def test_creator_cannot_join_own_project(self):
        with self.assertRaises(WorkflowError):
            services.submit_join_request(project=self.project, user=self.owner)

    def test_approve_creates_one_collaborator_and_one_notification(self):
        join_request = services.submit_join_request(project=self.project, user=self.student)
        collaborator = services.approve_join_request(join_request=join_request, actor=self.owner)

        self.assertEqual(collaborator.status, CollaboratorStatus.ACTIVE)
        self.assertEqual(ProjectCollaborator.objects.filter(project=self.project, user=self.student).count(), 1)
        notifs = Notification.objects.filter(user=self.student, type="request_accepted")
        self.assertEqual(notifs.count(), 1)
        self.assertFalse(notifs.get().read)

        join_request.refresh_from_db()
        self.assertEqual(join_request.status, JoinRequestStatus.APPROVED)
        with self.assertRaises(WorkflowError):
            services.approve_join_request(join_request=join_request, actor=self.owner)
        self.assertEqual(ProjectCollaborator.objects.filter(project=self.project).count(), 1)

    @mock.patch("apps.notifications.services.create_notification", side_effect=RuntimeError("db down"))
    def test_failed_notification_does_not_undo_approval(self, create_notification):
        join_request = ProjectJoinRequest.objects.create(project=self.project, user=self.student)

        with self.assertLogs("apps.notifications.services", level="ERROR"):
            collaborator = services.approve_join_request(join_request=join_request, actor=self.owner)

        create_notification.assert_called_once()
        join_request.refresh_from_db()
        self.assertEqual(join_request.status, JoinRequestStatus.APPROVED)
        self.assertEqual(collaborator.status, CollaboratorStatus.ACTIVE)
        self.assertEqual(
            ProjectCollaborator.objects.filter(
                project=self.project, user=self.student, status=CollaboratorStatus.ACTIVE
            ).count(),
            1,
        )
        self.assertFalse(Notification.objects.exists())

    @mock.patch("apps.notifications.services.create_notification", side_effect=RuntimeError("db down"))
    def test_failed_notification_does_not_undo_decline(self, create_notification):
        join_request = ProjectJoinRequest.objects.create(project=self.project, user=self.student)

        with self.assertLogs("apps.notifications.services", level="ERROR"):
            services.decline_join_request(join_request=join_request, actor=self.owner)

        join_request.refresh_from_db()
        self.assertEqual(join_request.status, JoinRequestStatus.DECLINED)
        self.assertFalse(ProjectCollaborator.objects.exists())

    def test_skill_names_differing_in_case_share_one_skill(self):
        services.set_project_skills(project=self.project, skills=["optics", " OPTICS ", "Lasers", ""])
        self.assertEqual(sorted(s.name for s in self.project.skills.all()), ["Lasers", "Optics"])
        self.assertEqual(Skill.objects.filter(name__iexact="optics").count(), 1)

    def test_only_creator_can_approve(self):
        join_request = services.submit_join_request(project=self.project, user=self.student)
        with self.assertRaises(PermissionDenied):
            services.approve_join_request(join_request=join_request, actor=self.student)

    def test_close_cancels_pending_and_completes_collaborators(self):
        other = make_user("other")
        approved = services.submit_join_request(project=self.project, user=self.student)
        services.approve_join_request(join_request=approved, actor=self.owner)
        pending = services.submit_join_request(project=self.project, user=other)

        services.close_project(project=self.project, actor=self.owner)

        self.project.refresh_from_db()
        pending.refresh_from_db()
        self.assertEqual(self.project.status, ProjectStatus.COMPLETED)
        self.assertEqual(pending.status, JoinRequestStatus.CANCELLED)
        self.assertEqual(
            ProjectCollaborator.objects.get(project=self.project, user=self.student).status,
            CollaboratorStatus.COMPLETED,
        )
        with self.assertRaises(WorkflowError):
            services.close_project(project=self.project, actor=self.owner)
        with self.assertRaises(WorkflowError):
            services.submit_join_request(project=self.project, user=make_user("late"))

    def test_delete_removes_dependent_rows(self):
        join_request = services.submit_join_request(project=self.project, user=self.student)
        services.approve_join_request(join_request=join_request, actor=self.owner)
        services.add_discussion(project=self.project, user=self.student, content="hello")
        services.add_milestone(project=self.project, actor=self.owner, title="Draft")
        services.schedule_interview(
            project=self.project, actor=self.owner, interviewee=self.student, scheduled_time=timezone.now()
        )
        project_id = self.project.id

        services.delete_project(project=self.project, actor=self.owner)

        self.assertFalse(AcademicProject.objects.filter(id=project_id).exists())
        for model in (ProjectJoinRequest, ProjectDiscussion, ProjectCollaborator, ProjectMilestone, ProjectInterview, ProjectSkill):
            self.assertFalse(model.objects.filter(project_id=project_id).exists(), model.__name__)
        self.assertTrue(Skill.objects.filter(name="Optics").exists())


class InterviewTests(TestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.student = make_user("student")
        self.project = services.create_project(creator=self.owner, title="Study group", project_type="study_group")
        join_request = services.submit_join_request(project=self.project, user=self.student)
        services.approve_join_request(join_request=join_request, actor=self.owner)

    def test_schedule_notifies_interviewee(self):
        when = timezone.now() + timedelta(days=2)
        interview = services.schedule_interview(
            project=self.project, actor=self.owner, interviewee=self.student, scheduled_time=when, location="Room 4"
        )
        self.assertEqual(interview.status, InterviewStatus.SCHEDULED)
        notif = Notification.objects.get(user=self.student, type="interview_scheduled")
        self.assertEqual(notif.metadata["location"], "Room 4")
        self.assertEqual(notif.metadata["interview_id"], str(interview.id))

    def test_cannot_interview_stranger(self):
        with self.assertRaises(WorkflowError):
            services.schedule_interview(
                project=self.project, actor=self.owner, interviewee=make_user("x"), scheduled_time=timezone.now()
            )

    def test_approve_after_completed_interview(self):
        interview = services.schedule_interview(
            project=self.project, actor=self.owner, interviewee=self.student, scheduled_time=timezone.now()
        )
        with self.assertRaises(WorkflowError):
            services.approve_after_interview(interview=interview, actor=self.owner)

        services.update_interview_status(interview=interview, actor=self.student, status=InterviewStatus.COMPLETED)
        services.approve_after_interview(interview=interview, actor=self.owner)
        self.assertTrue(Notification.objects.filter(user=self.student, type="project_approved").exists())
        self.assertEqual(ProjectCollaborator.objects.filter(project=self.project, user=self.student).count(), 1)


class AcademicApiTests(APITestCase):
    def setUp(self):
        self.owner = make_user("owner")
        self.student = make_user("student")
        self.client.force_authenticate(self.owner)

    def test_create_project(self):
        resp = self.client.post(
            "/api/v1/academic/projects/",
            {
                "title": "Research on Graphene",
                "project_type": "research_paper",
                "status": "completed",
                "skill_names": ["Python"],
                "resources": [{"type": "link", "url": "https://example.org/paper"}],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["status"], "open")
        self.assertEqual(resp.data["creator"]["username"], "owner")
        self.assertEqual([s["name"] for s in resp.data["skills"]], ["Python"])

    def test_create_with_duplicate_skill_spellings(self):
        resp = self.client.post(
            "/api/v1/academic/projects/",
            {"title": "X", "project_type": "research_paper", "skill_names": ["Python", "python"]},
            format="json",
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual([s["name"] for s in resp.data["skills"]], ["Python"])

        resp = self.client.patch(
            f"/api/v1/academic/projects/{resp.data['id']}/",
            {"skill_names": ["SQL", "sql", "Python"]},
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(sorted(s["name"] for s in resp.data["skills"]), ["Python", "SQL"])

    def test_search_by_title_and_type_newest_first(self):
        older = services.create_project(creator=self.owner, title="Research methods", project_type="research_paper")
        newer = services.create_project(creator=self.student, title="Reservoir research", project_type="research_paper")
        services.create_project(creator=self.owner, title="Research club", project_type="study_group")
        AcademicProject.objects.filter(id=older.id).update(created_at=timezone.now() - timedelta(days=1))

        resp = self.client.get("/api/v1/academic/projects/", {"q": "Rese", "type": "research_paper"})
        self.assertEqual([p["id"] for p in resp.data["results"]], [str(newer.id), str(older.id)])

        resp = self.client.get("/api/v1/academic/projects/", {"mine": "true", "type": "all"})
        self.assertEqual(resp.data["meta"]["count"], 2)

    def test_join_twice_conflicts(self):
        project = services.create_project(creator=self.owner, title="Lab", project_type="academic_project")
        self.client.force_authenticate(self.student)
        url = f"/api/v1/academic/projects/{project.id}/join/"
        self.assertEqual(self.client.post(url, {"message": "please"}, format="json").status_code, 201)
        self.assertEqual(self.client.post(url, {}, format="json").status_code, 409)
        self.assertEqual(ProjectJoinRequest.objects.filter(project=project, status="pending").count(), 1)

    def test_approve_endpoint_and_non_owner_forbidden(self):
        project = services.create_project(creator=self.owner, title="Lab", project_type="academic_project")
        join_request = services.submit_join_request(project=project, user=self.student)

        self.client.force_authenticate(self.student)
        url = f"/api/v1/academic/join-requests/{join_request.id}/approve/"
        self.assertEqual(self.client.post(url).status_code, 403)

        self.client.force_authenticate(self.owner)
        resp = self.client.post(url)
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["user"]["username"], "student")

    def test_close_and_delete_endpoints(self):
        project = services.create_project(creator=self.owner, title="Lab", project_type="academic_project")
        resp = self.client.post(f"/api/v1/academic/projects/{project.id}/close/")
        self.assertEqual(resp.data["status"], "completed")
        self.assertEqual(self.client.post(f"/api/v1/academic/projects/{project.id}/close/").status_code, 409)

        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.delete(f"/api/v1/academic/projects/{project.id}/").status_code, 403)
        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.delete(f"/api/v1/academic/projects/{project.id}/").status_code, 204)

    def test_discussion_requires_membership(self):
        project = services.create_project(creator=self.owner, title="Lab", project_type="academic_project")
        url = f"/api/v1/academic/projects/{project.id}/discussions/"
        self.client.force_authenticate(self.student)
        self.assertEqual(self.client.post(url, {"content": "hi"}, format="json").status_code, 403)

        self.client.force_authenticate(self.owner)
        self.assertEqual(self.client.post(url, {"content": "welcome"}, format="json").status_code, 201)
        resp = self.client.get(url)
        self.assertEqual([d["content"] for d in resp.data["results"]], ["welcome"])

    def test_schedule_interview_endpoint(self):
        project = services.create_project(creator=self.owner, title="Lab", project_type="academic_project")
        join_request = services.submit_join_request(project=project, user=self.student)
        services.approve_join_request(join_request=join_request, actor=self.owner)

        resp = self.client.post(
            f"/api/v1/academic/projects/{project.id}/interviews/",
            {"interviewee_id": str(self.student.id), "scheduled_time": "2030-03-01T14:30:00Z", "location": "Lab 2"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201, resp.data)

        self.client.force_authenticate(self.student)
        resp = self.client.get("/api/v1/academic/interviews/")
        self.assertEqual(resp.data["meta"]["count"], 1)
        self.assertEqual(resp.data["results"][0]["location"], "Lab 2")
