from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.test import APITestCase

from apps.accounts.models import User
from apps.friends.models import Friend
from . import services
from .models import Group, GroupMember, Message


def make_user(name):
    return User.objects.create_user(email=f"{name}@uni.edu", password="secret1", username=name)


class MessageModelTest(TestCase):
    def test_message_needs_receiver_or_group(self):
        a = make_user("ann")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Message.objects.create(sender=a, content="nowhere")

    def test_conversation_is_ordered_oldest_first(self):
        a, b, c = make_user("ann"), make_user("ben"), make_user("cal")
        services.send_direct_message(sender=a, receiver=b, content="one")
        services.send_direct_message(sender=b, receiver=a, content="two")
        services.send_direct_message(sender=a, receiver=c, content="elsewhere")

        self.assertEqual([m.content for m in services.conversation(a.id, b.id)], ["one", "two"])
        self.assertEqual(services.mark_conversation_read(reader=a, partner_id=b.id), 1)


class GroupServiceTest(TestCase):
    def test_creator_is_member(self):
        a = make_user("ann")
        group = services.create_group(creator=a, name="Study buddies")
        self.assertTrue(GroupMember.objects.filter(group=group, user=a).exists())


class ChatApiTests(APITestCase):
    def setUp(self):
        self.a, self.b, self.c = make_user("ann"), make_user("ben"), make_user("cal")
        Friend.objects.create(user1=self.a, user2=self.b)
        self.client.force_authenticate(self.a)

    def test_partners_and_messages(self):
        resp = self.client.get("/api/v1/chats/")
        self.assertEqual([p["username"] for p in resp.data], ["ben"])

        resp = self.client.post(f"/api/v1/chats/{self.b.id}/messages/", {"content": "hi"}, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)

        self.client.force_authenticate(self.b)
        resp = self.client.get("/api/v1/chats/")
        self.assertEqual(resp.data[0]["unread"], 1)
        resp = self.client.get(f"/api/v1/chats/{self.a.id}/messages/")
        self.assertEqual([m["content"] for m in resp.data["results"]], ["hi"])

    def test_empty_message_rejected(self):
        resp = self.client.post(f"/api/v1/chats/{self.b.id}/messages/", {"content": "  "}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_group_flow(self):
        resp = self.client.post("/api/v1/groups/", {"name": "Thesis club", "description": "weekly"}, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        group_id = resp.data["id"]
        self.assertEqual(resp.data["member_count"], 1)

        self.client.force_authenticate(self.c)
        denied = self.client.post(f"/api/v1/groups/{group_id}/messages/", {"content": "hey"}, format="json")
        self.assertEqual(denied.status_code, 403)

        self.client.post(f"/api/v1/groups/{group_id}/join/")
        ok = self.client.post(f"/api/v1/groups/{group_id}/messages/", {"content": "hey"}, format="json")
        self.assertEqual(ok.status_code, 201)

        listing = self.client.get("/api/v1/groups/")
        self.assertEqual(listing.data["results"][0]["member_count"], 2)

        self.assertEqual(self.client.post(f"/api/v1/groups/{group_id}/leave/").status_code, 204)
        self.assertEqual(self.client.delete(f"/api/v1/groups/{group_id}/").status_code, 403)
        self.assertTrue(Group.objects.filter(id=group_id).exists())
