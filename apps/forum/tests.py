from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from rest_framework.test import APITestCase

from apps.accounts.models import User
from apps.notifications.models import Activity
from . import services
from .models import ForumPost, ForumComment, Like


class ForumServiceTests(TestCase):
    def setUp(self):
        self.author = User.objects.create_user(email="ana@uni.edu", password="secret1", username="ana")
        self.reader = User.objects.create_user(email="bo@uni.edu", password="secret1", username="bo")
        self.post = ForumPost.objects.create(user=self.author, title="Lab tips", content="...", category="Physics")

    def test_delete_removes_comments_and_likes(self):
        ForumComment.objects.create(post=self.post, user=self.reader, content="thanks")
        Like.objects.create(post=self.post, user=self.reader)
        post_id = self.post.id

        services.delete_forum_post(post=self.post)

        self.assertFalse(ForumPost.objects.filter(id=post_id).exists())
        self.assertFalse(ForumComment.objects.filter(post_id=post_id).exists())
        self.assertFalse(Like.objects.filter(post_id=post_id).exists())

    def test_like_toggle_records_activity_for_author(self):
        self.assertTrue(services.toggle_like(post=self.post, user=self.reader))
        self.assertEqual(Like.objects.filter(post=self.post).count(), 1)
        activity = Activity.objects.get(user=self.author)
        self.assertEqual(activity.activity_type, "post_like")
        self.assertIn('"Lab tips"', activity.content)

        self.assertFalse(services.toggle_like(post=self.post, user=self.reader))
        self.assertEqual(Like.objects.filter(post=self.post).count(), 0)

    def test_liking_own_post_skips_activity(self):
        services.toggle_like(post=self.post, user=self.author)
        self.assertFalse(Activity.objects.exists())

    def test_share_increments_counter(self):
        self.assertEqual(services.share_post(post=self.post), 1)
        self.assertEqual(services.share_post(post=self.post), 2)
        self.assertEqual(Activity.objects.filter(activity_type="post_share").count(), 2)


class ForumApiTests(APITestCase):
    def setUp(self):
        self.author = User.objects.create_user(email="ana@uni.edu", password="secret1", username="ana")
        self.reader = User.objects.create_user(email="bo@uni.edu", password="secret1", username="bo")
        self.client.force_authenticate(self.author)

    def test_create_with_attachment(self):
        upload = SimpleUploadedFile("notes.pdf", b"%PDF-1.4", content_type="application/pdf")
        resp = self.client.post(
            "/api/v1/forum/posts/",
            {"title": "Notes", "content": "week 1", "category": "Math", "file": upload},
            format="multipart",
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertIn("forum/", resp.data["attachment_url"])
        self.assertEqual(resp.data["user"]["username"], "ana")

    def test_rejects_disallowed_attachment(self):
        upload = SimpleUploadedFile("run.exe", b"MZ", content_type="application/x-msdownload")
        resp = self.client.post(
            "/api/v1/forum/posts/",
            {"title": "Bad", "content": "x", "file": upload},
            format="multipart",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(ForumPost.objects.exists())

    def test_only_author_can_delete(self):
        post = ForumPost.objects.create(user=self.author, title="Mine", content="x")
        self.client.force_authenticate(self.reader)
        self.assertEqual(self.client.delete(f"/api/v1/forum/posts/{post.id}/").status_code, 403)

        self.client.force_authenticate(self.author)
        self.assertEqual(self.client.delete(f"/api/v1/forum/posts/{post.id}/").status_code, 204)

    def test_comments_oldest_first_and_like_endpoint(self):
        post = ForumPost.objects.create(user=self.author, title="Q", content="x")
        self.client.force_authenticate(self.reader)
        self.client.post(f"/api/v1/forum/posts/{post.id}/comments/", {"content": "first"}, format="json")
        self.client.post(f"/api/v1/forum/posts/{post.id}/comments/", {"content": "second"}, format="json")

        resp = self.client.get(f"/api/v1/forum/posts/{post.id}/comments/")
        self.assertEqual([c["content"] for c in resp.data["results"]], ["first", "second"])

        resp = self.client.post(f"/api/v1/forum/posts/{post.id}/like/")
        self.assertEqual(resp.data, {"liked": True, "like_count": 1})

    def test_list_filters_by_category_and_title(self):
        ForumPost.objects.create(user=self.author, title="Quantum intro", content="x", category="Physics")
        ForumPost.objects.create(user=self.author, title="Essay help", content="x", category="Arts")

        resp = self.client.get("/api/v1/forum/posts/", {"category": "Physics"})
        self.assertEqual([p["title"] for p in resp.data["results"]], ["Quantum intro"])

        resp = self.client.get("/api/v1/forum/posts/", {"search": "essay"})
        self.assertEqual([p["title"] for p in resp.data["results"]], ["Essay help"])
