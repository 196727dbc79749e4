from unittest import mock

from django.test import TestCase
from rest_framework.test import APITestCase

from apps.accounts.models import User
from apps.chat.models import Message
from apps.forum.models import ForumComment, ForumPost
from . import services
from .registry import get_feed


def make_user(name):
    return User.objects.create_user(email=f"{name}@uni.edu", password="secret1", username=name)


class FilterParsingTests(TestCase):
    def setUp(self):
        self.feed = get_feed("forum_comments")

    def test_parses_equality_filter(self):
        value = "3F2504E0-4F89-11D3-9A0C-0305E82C3301"
        self.assertEqual(
            services.parse_filter(self.feed, f"post_id=eq.{value}"),
            ("post_id", value.lower()),
        )

    def test_empty_filter_is_none(self):
        self.assertIsNone(services.parse_filter(self.feed, ""))

    def test_rejects_unknown_column_and_operator(self):
        for raw in ("user_id=eq.3f2504e0-4f89-11d3-9a0c-0305e82c3301", "post_id=gt.1", "post_id", "post_id=eq.abc"):
            with self.subTest(raw=raw), self.assertRaises(ValueError):
                services.parse_filter(self.feed, raw)

    def test_unknown_table(self):
        with self.assertRaises(LookupError):
            get_feed("auth_user")


class VersionTests(TestCase):
    def setUp(self):
        self.user = make_user("ana")
        self.post = ForumPost.objects.create(user=self.user, title="Q", content="x")

    def test_insert_bumps_table_and_filter_versions(self):
        flt = ("post_id", str(self.post.id))
        table_before = services.get_version("forum_comments")
        filtered_before = services.get_version("forum_comments", flt)

        with self.captureOnCommitCallbacks(execute=True):
            ForumComment.objects.create(post=self.post, user=self.user, content="hi")

        self.assertEqual(services.get_version("forum_comments"), table_before + 1)
        self.assertEqual(services.get_version("forum_comments", flt), filtered_before + 1)

    def test_other_post_filter_unchanged(self):
        other = ForumPost.objects.create(user=self.user, title="R", content="y")
        flt = ("post_id", str(other.id))
        before = services.get_version("forum_comments", flt)

        with self.captureOnCommitCallbacks(execute=True):
            ForumComment.objects.create(post=self.post, user=self.user, content="hi")

        self.assertEqual(services.get_version("forum_comments", flt), before)

    def test_delete_publishes(self):
        before = services.get_version("forum_posts")
        with self.captureOnCommitCallbacks(execute=True):
            self.post.delete()
        self.assertEqual(services.get_version("forum_posts"), before + 1)


class SubscriptionTests(TestCase):
    def setUp(self):
        self.ana = make_user("ana")
        self.bo = make_user("bo")

    def test_callback_fires_until_unsubscribed(self):
        callback = mock.Mock()
        sub = services.subscribe("messages", f"receiver_id=eq.{self.bo.id}", callback)
        try:
            with self.captureOnCommitCallbacks(execute=True):
                Message.objects.create(sender=self.ana, receiver=self.bo, content="hey")
            callback.assert_called_once_with("INSERT", "messages")

            with self.captureOnCommitCallbacks(execute=True):
                Message.objects.create(sender=self.bo, receiver=self.ana, content="back")
            self.assertEqual(callback.call_count, 1)
        finally:
            sub.unsubscribe()

        with self.captureOnCommitCallbacks(execute=True):
            Message.objects.create(sender=self.ana, receiver=self.bo, content="again")
        self.assertEqual(callback.call_count, 1)

    def test_failing_callback_is_logged(self):
        sub = services.subscribe("forum_posts", None, mock.Mock(side_effect=RuntimeError("boom")))
        try:
            with self.assertLogs("apps.realtime.services", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    ForumPost.objects.create(user=self.ana, title="T", content="x")
        finally:
            services.unsubscribe(sub)


class PollApiTests(APITestCase):
    def setUp(self):
        self.ana = make_user("ana")
        self.bo = make_user("bo")
        self.eve = make_user("eve")
        self.client.force_authenticate(self.ana)

    def test_poll_returns_rows_and_reports_changes(self):
        post = ForumPost.objects.create(user=self.ana, title="Q", content="x")
        flt = f"post_id=eq.{post.id}"

        resp = self.client.get("/api/v1/realtime/poll/", {"table": "forum_comments", "filter": flt})
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertTrue(resp.data["changed"])
        self.assertEqual(resp.data["results"], [])
        version = resp.data["version"]

        resp = self.client.get("/api/v1/realtime/poll/", {"table": "forum_comments", "filter": flt, "since": version})
        self.assertFalse(resp.data["changed"])
        self.assertIsNone(resp.data["results"])

        with self.captureOnCommitCallbacks(execute=True):
            ForumComment.objects.create(post=post, user=self.bo, content="first")

        resp = self.client.get("/api/v1/realtime/poll/", {"table": "forum_comments", "filter": flt, "since": version})
        self.assertTrue(resp.data["changed"])
        self.assertEqual(resp.data["version"], version + 1)
        self.assertEqual([c["content"] for c in resp.data["results"]], ["first"])

    def test_messages_are_scoped_to_participants(self):
        Message.objects.create(sender=self.bo, receiver=self.ana, content="for ana")
        Message.objects.create(sender=self.bo, receiver=self.eve, content="for eve")

        resp = self.client.get("/api/v1/realtime/poll/", {"table": "messages"})
        self.assertEqual([m["content"] for m in resp.data["results"]], ["for ana"])

    def test_bad_table_or_filter(self):
        self.assertEqual(self.client.get("/api/v1/realtime/poll/", {"table": "users"}).status_code, 400)
        resp = self.client.get("/api/v1/realtime/poll/", {"table": "likes", "filter": "user_id=eq.1"})
        self.assertEqual(resp.status_code, 400)

    def test_requires_authentication(self):
        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/v1/realtime/poll/", {"table": "forum_posts"}).status_code, 401)
