from unittest import mock

import requests
from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from apps.accounts.models import User
from . import models, services, tasks


class NotificationServiceTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="ren@uni.edu", password="secret1", username="ren")

    @mock.patch("apps.notifications.tasks.requests.post")
    def test_create_enqueues_email_on_commit(self, post):
        post.return_value = mock.Mock(status_code=200, text="ok")
        with self.captureOnCommitCallbacks(execute=True):
            notif = services.create_notification(
                user=self.user,
                type=models.NotificationType.REQUEST_ACCEPTED,
                title="Project Request Accepted",
                content="accepted",
                metadata={"project_title": "Graphene"},
            )
        self.assertFalse(notif.read)
        post.assert_called_once()
        kwargs = post.call_args.kwargs
        self.assertEqual(kwargs["json"]["to"], "ren@uni.edu")
        self.assertIn('"Graphene"', kwargs["json"]["message"])
        self.assertIn("The U-Connect Team", kwargs["json"]["message"])
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer test-key")

    @mock.patch("apps.notifications.tasks.requests.post", side_effect=requests.ConnectionError("down"))
    def test_email_failure_is_swallowed(self, post):
        with self.captureOnCommitCallbacks(execute=True):
            notif = services.create_notification(user=self.user, type="message", title="Hi", content="yo")
        self.assertTrue(models.Notification.objects.filter(id=notif.id).exists())
        self.assertFalse(tasks.send_notification_email(str(notif.id)))

    @override_settings(EMAIL_FUNCTION_URL="")
    @mock.patch("apps.notifications.tasks.requests.post")
    def test_no_email_url_skips_post(self, post):
        notif = services.create_notification(user=self.user, type="message", title="Hi", send_email=False)
        self.assertFalse(tasks.send_notification_email(str(notif.id)))
        post.assert_not_called()

    def test_notify_logs_and_returns_none_on_failure(self):
        with mock.patch.object(services, "create_notification", side_effect=RuntimeError("boom")):
            with self.assertLogs("apps.notifications.services", level="ERROR"):
                self.assertIsNone(services.notify(user=self.user, type="message", title="x"))

    def test_interview_email_lists_details(self):
        notif = models.Notification(
            user=self.user,
            type=models.NotificationType.INTERVIEW_SCHEDULED,
            title="Interview Scheduled",
            metadata={
                "project_title": "Graphene",
                "interview_date": "2025-03-01T14:30:00+00:00",
                "location": "Room 4",
                "notes": "Bring a CV",
            },
        )
        body = services.render_email_message(notif)
        self.assertIn("Date: 2025-03-01", body)
        self.assertIn("Time: 14:30", body)
        self.assertIn("Location: Room 4", body)
        self.assertIn("Additional Notes: Bring a CV", body)


class NotificationApiTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="ren@uni.edu", password="secret1", username="ren")
        self.other = User.objects.create_user(email="ida@uni.edu", password="secret1", username="ida")
        for i in range(3):
            services.create_notification(user=self.user, type="message", title=f"n{i}", send_email=False)
        services.create_notification(user=self.other, type="message", title="theirs", send_email=False)
        self.client.force_authenticate(self.user)

    def test_list_only_own(self):
        resp = self.client.get("/api/v1/notifications/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["meta"]["count"], 3)

    def test_mark_read_and_unread_count(self):
        notif = models.Notification.objects.filter(user=self.user).first()
        resp = self.client.post(f"/api/v1/notifications/{notif.id}/mark-read/")
        self.assertTrue(resp.data["read"])
        self.assertEqual(self.client.get("/api/v1/notifications/unread-count/").data["unread"], 2)

        resp = self.client.post("/api/v1/notifications/mark-all-read/")
        self.assertEqual(resp.data["updated"], 2)
        self.assertEqual(self.client.get("/api/v1/notifications/unread-count/").data["unread"], 0)

    def test_cannot_touch_others(self):
        theirs = models.Notification.objects.get(user=self.other)
        resp = self.client.post(f"/api/v1/notifications/{theirs.id}/mark-read/")
        self.assertEqual(resp.status_code, 404)

    def test_activity_feed(self):
        services.record_activity(user=self.user, activity_type=models.ActivityType.POST_LIKE, content="liked")
        resp = self.client.get("/api/v1/activities/")
        self.assertEqual(resp.data["results"][0]["activity_type"], "post_like")
