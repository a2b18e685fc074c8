from rest_framework import status
from rest_framework.test import APITestCase
from django.urls import reverse
from django.contrib.auth import get_user_model
from category.models import Category
from organisation.models import Organisation
from user.models import User


class AuthenticationTests(APITestCase):
    def setUp(self):
        active_org = Organisation.objects.create(
            name="Active Org", slug="active-org", invite_code="123456"
        )
        inactive_org = Organisation.objects.create(
            name="Inactive Org", slug="inactive-org", invite_code="654321", is_active=False
        )

        get_user_model().objects.create_user(
            organisation=active_org,
            email="active_user@acme.com",
            password="passer123",
            name="Active User",
            role="ADMIN",
        )
        get_user_model().objects.create_user(
            organisation=inactive_org,
            email="inactive_org_user@acme.com",
            password="passer123",
        )
        get_user_model().objects.create_user(
            organisation=active_org,
            email="deactivated@acme.com",
            password="passer123",
            is_active=False,
        )

    def test_active_user_login(self):
        """Authenticate a user from Active Org"""
        url = reverse("user:login")
        data = {
            "email": "Active_User@acme.com ",
            "password": "passer123",
        }
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertIn("access", body)
        self.assertIn("refresh", body)
        self.assertEqual(body["user"]["role"], "ADMIN")
        self.assertEqual(body["user"]["organisation_name"], "Active Org")

    def test_inactive_org_user_login(self):
        """Deny login to user from Inactive Org"""
        url = reverse("user:login")
        data = {"email": "inactive_org_user@acme.com", "password": "passer123"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deactivated_user_login(self):
        url = reverse("user:login")
        data = {"email": "deactivated@acme.com", "password": "passer123"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_wrong_password_login(self):
        url = reverse("user:login")
        data = {"email": "active_user@acme.com", "password": "wrong-password"}
        response = self.client.post(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        response = self.client.post(
            reverse("user:login"),
            {"email": "active_user@acme.com", "password": "passer123"},
            format="json",
        )
        refresh = response.json()["refresh"]
        response = self.client.post(
            reverse("user:token-refresh"), {"refresh": refresh}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.json())

    def test_me(self):
        response = self.client.post(
            reverse("user:login"),
            {"email": "active_user@acme.com", "password": "passer123"},
            format="json",
        )
        self.client.credentials(
            HTTP_AUTHORIZATION="Bearer " + response.json()["access"]
        )
        response = self.client.get(reverse("user:auth-me"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["email"], "active_user@acme.com")

    def test_me_requires_token(self):
        response = self.client.get(reverse("user:auth-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class RegistrationTests(APITestCase):
    def setUp(self):
        self.url = reverse("user:auth-register")
        self.empty_org = Organisation.objects.create(
            name="Empty Org", slug="empty-org", invite_code="777777"
        )

    def test_register_new_organisation(self):
        data = {
            "name": "Founder",
            "email": "founder@newco.com",
            "password": "founder123",
            "organisation_name": "New Co",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn("access", response.json())
        self.assertEqual(response.json()["user"]["role"], "ADMIN")

        organisation = Organisation.objects.get(slug="new-co")
        self.assertEqual(len(organisation.invite_code), 6)
        self.assertEqual(Category.objects.filter(organisation=organisation).count(), 8)

    def test_second_user_joins_as_employee(self):
        self.client.post(
            self.url,
            {
                "name": "Founder",
                "email": "founder@newco.com",
                "password": "founder123",
                "organisation_name": "New Co",
            },
            format="json",
        )
        invite_code = Organisation.objects.get(slug="new-co").invite_code
        data = {
            "name": "Joiner",
            "email": "joiner@newco.com",
            "password": "joiner123",
            "department": "Sales",
            "invite_code": invite_code,
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email="joiner@newco.com")
        self.assertEqual(user.role, "EMPLOYEE")
        self.assertEqual(user.department, "Sales")

    def test_first_user_of_existing_organisation_becomes_admin(self):
        data = {
            "name": "First",
            "email": "first@empty.com",
            "password": "first1234",
            "invite_code": "777777",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email="first@empty.com").role, "ADMIN")

    def test_register_requires_exactly_one_target(self):
        base = {"name": "X", "email": "x@x.com", "password": "password1"}
        response = self.client.post(self.url, base, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        both = dict(base, invite_code="777777", organisation_name="Another")
        response = self.client.post(self.url, both, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_with_invalid_invite_code(self):
        data = {
            "name": "X",
            "email": "x@x.com",
            "password": "password1",
            "invite_code": "000000",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("invite_code", response.json())

    def test_register_with_taken_organisation_name(self):
        data = {
            "name": "X",
            "email": "x@x.com",
            "password": "password1",
            "organisation_name": "Empty Org",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("organisation_name", response.json())

    def test_register_with_short_password(self):
        data = {
            "name": "X",
            "email": "x@x.com",
            "password": "short",
            "invite_code": "777777",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.json())

    def test_register_with_existing_email(self):
        get_user_model().objects.create_user(
            organisation=self.empty_org, email="taken@empty.com", password="passer123"
        )
        data = {
            "name": "X",
            "email": "Taken@empty.com",
            "password": "password1",
            "invite_code": "777777",
        }
        response = self.client.post(self.url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", response.json())


class AdminUserTests(APITestCase):
    def setUp(self):
        org = Organisation.objects.create(name="Acme", slug="acme", invite_code="100200")
        other_org = Organisation.objects.create(
            name="Other", slug="other", invite_code="300400"
        )

        self.admin = get_user_model().objects.create_user(
            organisation=org, email="admin@acme.com", password="admin12345", role="ADMIN"
        )
        self.employee = get_user_model().objects.create_user(
            organisation=org, email="employee@acme.com", password="employee123"
        )
        self.outsider = get_user_model().objects.create_user(
            organisation=other_org, email="outsider@other.com", password="outsider123"
        )

    def authenticator(self, email, password):
        url = reverse("user:login")
        response = self.client.post(
            url, {"email": email, "password": password}, format="json"
        )
        token = response.json()["access"]
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)
        return token

    def test_admin_lists_users_of_own_organisation(self):
        self.authenticator("admin@acme.com", "admin12345")
        response = self.client.get(reverse("user:user-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        emails = {user["email"] for user in response.json()["results"]}
        self.assertEqual(emails, {"admin@acme.com", "employee@acme.com"})

    def test_employee_cannot_list_users(self):
        self.authenticator("employee@acme.com", "employee123")
        response = self.client.get(reverse("user:user-list"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["code"], "authorization_error")
        self.assertEqual(response.json()["role"], "EMPLOYEE")

    def test_admin_changes_role(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-role", kwargs={"pk": self.employee.id})
        response = self.client.put(url, {"role": "FINANCE"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"]["role"], "FINANCE")
        self.employee.refresh_from_db()
        self.assertEqual(self.employee.role, "FINANCE")

    def test_admin_cannot_change_own_role(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-role", kwargs={"pk": self.admin.id})
        response = self.client.put(url, {"role": "EMPLOYEE"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.admin.refresh_from_db()
        self.assertEqual(self.admin.role, "ADMIN")

    def test_invalid_role(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-role", kwargs={"pk": self.employee.id})
        response = self.client.put(url, {"role": "OWNER"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_touch_other_organisation(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-role", kwargs={"pk": self.outsider.id})
        response = self.client.put(url, {"role": "MANAGER"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_updates_department(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-department", kwargs={"pk": self.employee.id})
        response = self.client.put(url, {"department": "Engineering"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.employee.refresh_from_db()
        self.assertEqual(self.employee.department, "Engineering")

    def test_deactivated_user_is_locked_out(self):
        employee_client = self.client_class()
        login = employee_client.post(
            reverse("user:login"),
            {"email": "employee@acme.com", "password": "employee123"},
            format="json",
        )
        employee_client.credentials(
            HTTP_AUTHORIZATION="Bearer " + login.json()["access"]
        )

        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-toggle-active", kwargs={"pk": self.employee.id})
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.json()["data"]["is_active"])

        response = employee_client.get(reverse("user:auth-me"))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client_class().post(
            reverse("user:login"),
            {"email": "employee@acme.com", "password": "employee123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        response = self.client.post(url)
        self.assertTrue(response.json()["data"]["is_active"])

    def test_admin_cannot_deactivate_self(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-toggle-active", kwargs={"pk": self.admin.id})
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "validation_error")

    def test_admin_resets_password(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-reset-password", kwargs={"pk": self.employee.id})
        response = self.client.post(url, {"new_password": "short"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"new_password": "brand-new-pass"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.employee.refresh_from_db()
        self.assertTrue(self.employee.check_password("brand-new-pass"))

    def test_admin_cannot_reset_own_password(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("user:user-reset-password", kwargs={"pk": self.admin.id})
        response = self.client.post(url, {"new_password": "brand-new-pass"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
