from django.test import TestCase
from rest_framework.test import APITestCase

from apps.accounts.models import User, Profile
from apps.notifications.models import Activity
from common.exceptions import WorkflowError
from . import services
from .models import Friend, FriendRequest


def make_user(name, **profile):
    user = User.objects.create_user(email=f"{name}@uni.edu", password="secret1", username=name)
    if profile:
        Profile.objects.filter(user=user).update(**profile)
        user = User.objects.select_related("profile").get(pk=user.pk)
    return user


class SuggestionTests(TestCase):
    def setUp(self):
        self.a, self.b, self.c, self.d, self.e = (make_user(n) for n in ("a_user", "b_user", "c_user", "d_user", "e_user"))

    def befriend(self, x, y):
        Friend.objects.create(user1=x, user2=y)

    def test_no_friends_means_no_suggestions(self):
        self.assertEqual(services.suggest_friends_of_friends(self.a), [])

    def test_mutual_count_ranking(self):
        # A-B, A-C, B-D, C-D, B-E: D has two mutual friends, E has one
        self.befriend(self.a, self.b)
        self.befriend(self.a, self.c)
        self.befriend(self.b, self.e)
        self.befriend(self.b, self.d)
        self.befriend(self.c, self.d)

        rows = services.suggest_friends_of_friends(self.a)
        self.assertEqual([(p.user_id, n) for p, n in rows], [(self.d.id, 2), (self.e.id, 1)])

    def test_excludes_anyone_with_a_request(self):
        self.befriend(self.a, self.b)
        self.befriend(self.b, self.d)
        FriendRequest.objects.create(sender=self.d, receiver=self.a, status="rejected")

        self.assertEqual(services.suggest_friends_of_friends(self.a), [])

    def test_ties_keep_first_seen_order(self):
        self.befriend(self.a, self.b)
        self.befriend(self.b, self.e)
        self.befriend(self.b, self.d)

        rows = services.suggest_friends_of_friends(self.a)
        self.assertEqual([p.user_id for p, _ in rows], [self.e.id, self.d.id])


class FriendRequestFlowTests(TestCase):
    def setUp(self):
        self.a = make_user("ann")
        self.b = make_user("ben")

    def test_send_accept_unfriend(self):
        req = services.send_friend_request(sender=self.a, receiver=self.b)
        self.assertTrue(Activity.objects.filter(user=self.b, activity_type="friend_request").exists())

        services.respond_to_request(request=req, user=self.b, accept=True)
        self.assertTrue(services.are_friends(self.a.id, self.b.id))
        self.assertEqual(services.friend_ids(self.b.id), [self.a.id])

        self.assertEqual(services.unfriend(user=self.b, friend_id=self.a.id), 1)
        self.assertFalse(services.are_friends(self.a.id, self.b.id))
        self.assertFalse(services.request_between(self.a.id, self.b.id).exists())

        again = services.send_friend_request(sender=self.b, receiver=self.a)
        self.assertEqual(again.status, "pending")

    def test_duplicate_in_either_direction_rejected(self):
        services.send_friend_request(sender=self.a, receiver=self.b)
        with self.assertRaises(WorkflowError):
            services.send_friend_request(sender=self.b, receiver=self.a)
        with self.assertRaises(WorkflowError):
            services.send_friend_request(sender=self.a, receiver=self.a)

    def test_only_receiver_responds(self):
        req = services.send_friend_request(sender=self.a, receiver=self.b)
        with self.assertRaises(WorkflowError):
            services.respond_to_request(request=req, user=self.a, accept=True)


class FriendsApiTests(APITestCase):
    def setUp(self):
        self.a = make_user("ann", university="Uni A")
        self.b = make_user("ben", university="Uni A")
        self.c = make_user("cal", university="Uni B")
        self.client.force_authenticate(self.a)

    def test_request_and_accept_over_http(self):
        resp = self.client.post("/api/v1/friend-requests/", {"receiver_id": str(self.b.id)}, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)

        again = self.client.post("/api/v1/friend-requests/", {"receiver_id": str(self.b.id)}, format="json")
        self.assertEqual(again.status_code, 409)

        self.client.force_authenticate(self.b)
        received = self.client.get("/api/v1/friend-requests/", {"box": "received"})
        self.assertEqual(received.data["meta"]["count"], 1)
        resp = self.client.post(f"/api/v1/friend-requests/{resp.data['id']}/respond/", {"accept": True}, format="json")
        self.assertEqual(resp.data["status"], "accepted")

        friends = self.client.get("/api/v1/friends/")
        self.assertEqual([f["username"] for f in friends.data["results"]], ["ann"])

        self.assertEqual(self.client.delete(f"/api/v1/friends/{self.a.id}/").status_code, 204)

    def test_recommended_same_university(self):
        resp = self.client.get("/api/v1/friends/recommended/")
        self.assertEqual([p["username"] for p in resp.data], ["ben"])
