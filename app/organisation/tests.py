from io import StringIO
from rest_framework import status
from rest_framework.test import APITestCase
from django.core.management import call_command
from django.urls import reverse
from django.contrib.auth import get_user_model
from organisation.models import Organisation
from organisation.utils import slugify_organisation_name, ensure_invite_codes


class OrganisationTests(APITestCase):
    def setUp(self):
        acme = Organisation.objects.create(
            name="Acme Corp", slug="acme-corp", invite_code="482913"
        )
        Organisation.objects.create(
            name="Closed Ltd", slug="closed-ltd", invite_code="111111", is_active=False
        )

        admin_data = {
            "organisation": acme,
            "email": "admin@acme.com",
            "password": "admin12345",
            "name": "Asha Admin",
            "role": "ADMIN",
        }
        employee_data = {
            "organisation": acme,
            "email": "employee@acme.com",
            "password": "employee123",
            "name": "Esha Employee",
        }
        get_user_model().objects.create_user(**admin_data)
        get_user_model().objects.create_user(**employee_data)

    def authenticator(self, email, password):
        url = reverse("user:login")
        data = {"email": email, "password": password}
        response = self.client.post(url, data, format="json")
        token = response.json()["access"]
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)

    def test_anyone_can_list_active_organisations(self):
        url = reverse("organisation:organisation-list")
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.json()["results"]
        self.assertEqual([org["slug"] for org in results], ["acme-corp"])
        self.assertNotIn("invite_code", results[0])

    def test_verify_invite_code(self):
        url = reverse("organisation:organisation-verify-invite-code")
        response = self.client.get(url, {"invite_code": "482913"})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["name"], "Acme Corp")

        response = self.client.get(url, {"invite_code": "111111"})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_can_view_invite_code(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("organisation:invite-code-list")
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["invite_code"], "482913")

    def test_employee_cannot_view_invite_code(self):
        self.authenticator("employee@acme.com", "employee123")
        url = reverse("organisation:invite-code-list")
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["code"], "authorization_error")
        self.assertEqual(response.json()["action"], "manage_users")

    def test_anonymous_cannot_view_invite_code(self):
        url = reverse("organisation:invite-code-list")
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_ensure_invite_codes_fills_missing_codes(self):
        legacy = Organisation.objects.create(name="Legacy", slug="legacy")
        blank = Organisation.objects.create(name="Blank", slug="blank", invite_code="")

        updated = ensure_invite_codes()

        self.assertEqual({org.slug for org in updated}, {"legacy", "blank"})
        legacy.refresh_from_db()
        blank.refresh_from_db()
        self.assertEqual(len(legacy.invite_code), 6)
        self.assertTrue(legacy.invite_code.isdigit())
        self.assertNotEqual(legacy.invite_code, blank.invite_code)
        self.assertEqual(ensure_invite_codes(), [])

    def test_ensure_invite_codes_command(self):
        Organisation.objects.create(name="Legacy", slug="legacy")
        out = StringIO()
        call_command("ensure_invite_codes", stdout=out)
        self.assertIn("Generated invite codes for 1 organisations", out.getvalue())
        self.assertFalse(Organisation.objects.filter(invite_code__isnull=True).exists())

    def test_slugify_organisation_name(self):
        self.assertEqual(slugify_organisation_name("Acme Corp"), "acme-corp")
        self.assertEqual(slugify_organisation_name("  R&D -- Labs!! "), "r-d-labs")
