from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APITestCase

from .models import User, Profile
from .validators import academic_year_errors, is_valid_username


class ValidatorTests(TestCase):
    def test_username_rules(self):
        self.assertTrue(is_valid_username("abc"))
        self.assertTrue(is_valid_username("jane_doe_99"))
        self.assertFalse(is_valid_username("ab"))
        self.assertFalse(is_valid_username("jane-doe"))
        self.assertFalse(is_valid_username("jane doe"))
        self.assertFalse(is_valid_username(None))

    def test_year_range(self):
        this_year = 2024
        self.assertEqual(academic_year_errors(2020, 2024, current_year=this_year), {})
        self.assertEqual(academic_year_errors(2030, 2034, current_year=this_year), {})
        self.assertIn("year_of_enroll", academic_year_errors(1899, 2020, current_year=this_year))
        self.assertIn("year_of_completion", academic_year_errors(2020, 2035, current_year=this_year))
        self.assertIn("year_of_enroll", academic_year_errors(2024, 2020, current_year=this_year))

    def test_years_optional(self):
        self.assertEqual(academic_year_errors(None, None), {})


class ProfileSignalTest(TestCase):
    def test_profile_created_with_user(self):
        user = User.objects.create_user(email="ana@uni.edu", password="secret1", username="ana")
        self.assertTrue(Profile.objects.filter(user=user).exists())
        self.assertEqual(user.profile.username, "ana")


class RegisterLoginTests(APITestCase):
    def payload(self, **overrides):
        data = {
            "email": "sam@uni.edu",
            "password": "secret12",
            "password_confirm": "secret12",
            "username": "sam_k",
            "full_name": "Sam K",
            "university": "Uni A",
            "field_of_study": "Physics",
            "year_of_enroll": timezone.now().year - 1,
            "year_of_completion": timezone.now().year + 2,
            "interests": ["optics"],
        }
        data.update(overrides)
        return data

    def test_register_returns_tokens_and_profile(self):
        resp = self.client.post("/api/v1/auth/register/", self.payload(), format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertIn("access", resp.data)
        self.assertEqual(resp.data["username"], "sam_k")
        profile = Profile.objects.get(user__email="sam@uni.edu")
        self.assertEqual(profile.university, "Uni A")
        self.assertEqual(profile.interests, ["optics"])

    def test_password_mismatch_blocks_registration(self):
        resp = self.client.post("/api/v1/auth/register/", self.payload(password_confirm="other123"), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(User.objects.filter(email="sam@uni.edu").exists())

    def test_invalid_username_and_email(self):
        resp = self.client.post("/api/v1/auth/register/", self.payload(username="s!", email="nope"), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("username", resp.data)
        self.assertIn("email", resp.data)

    def test_enroll_after_completion_blocked(self):
        resp = self.client.post(
            "/api/v1/auth/register/",
            self.payload(year_of_enroll=2022, year_of_completion=2020),
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("year_of_enroll", resp.data)

    def test_login_with_email(self):
        User.objects.create_user(email="lee@uni.edu", password="secret12", username="lee")
        resp = self.client.post("/api/v1/auth/login/", {"email": "lee@uni.edu", "password": "secret12"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("refresh", resp.data)

        bad = self.client.post("/api/v1/auth/login/", {"email": "lee@uni.edu", "password": "wrong"}, format="json")
        self.assertEqual(bad.status_code, 400)


class ProfileApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="kim@uni.edu", password="secret12", username="kim")
        Profile.objects.filter(user=self.user).update(full_name="Kim Lee", university="Uni A", field_of_study="CS")
        self.other = User.objects.create_user(email="bo@uni.edu", password="secret12", username="bo")
        Profile.objects.filter(user=self.other).update(full_name="Bo Park", university="Uni B", nationality="KR")
        self.client.force_authenticate(self.user)

    def test_update_me(self):
        resp = self.client.patch("/api/v1/profiles/me/", {"bio": "hello", "username": "kim_2"}, format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.user.refresh_from_db()
        self.assertEqual(self.user.username, "kim_2")
        self.assertEqual(self.user.profile.bio, "hello")

    def test_username_taken(self):
        resp = self.client.patch("/api/v1/profiles/me/", {"username": "bo"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_search_and_filters(self):
        resp = self.client.get("/api/v1/profiles/", {"search": "park"})
        self.assertEqual([r["username"] for r in resp.data["results"]], ["bo"])

        resp = self.client.get("/api/v1/profiles/", {"university": "Uni A"})
        self.assertEqual([r["username"] for r in resp.data["results"]], ["kim"])

    def test_avatar_upload(self):
        image = SimpleUploadedFile("me.png", b"\x89PNG\r\n", content_type="image/png")
        resp = self.client.post("/api/v1/profiles/avatar/", {"file": image}, format="multipart")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertIn("avatars/", resp.data["avatar_url"])

    def test_avatar_rejects_non_image(self):
        doc = SimpleUploadedFile("cv.pdf", b"%PDF-1.4", content_type="application/pdf")
        resp = self.client.post("/api/v1/profiles/avatar/", {"file": doc}, format="multipart")
        self.assertEqual(resp.status_code, 400)

    def test_change_password(self):
        resp = self.client.post(
            "/api/v1/profiles/change-password/",
            {"current_password": "secret12", "new_password": "newpass1", "new_password_confirm": "newpass1"},
            format="json",
        )
        self.assertEqual(resp.status_code, 204)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("newpass1"))
