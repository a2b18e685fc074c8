from rest_framework import status
from rest_framework.test import APITestCase
from django.urls import reverse
from django.contrib.auth import get_user_model
from organisation.models import Organisation
from .models import Category
from .utils import seed_default_categories, DEFAULT_CATEGORIES


class CategoryTests(APITestCase):
    def setUp(self):
        self.org = Organisation.objects.create(
            name="Acme", slug="acme", invite_code="100200"
        )
        get_user_model().objects.create_user(
            organisation=self.org,
            email="admin@acme.com",
            password="admin12345",
            role="ADMIN",
        )
        get_user_model().objects.create_user(
            organisation=self.org, email="employee@acme.com", password="employee123"
        )

    def authenticator(self, email, password):
        url = reverse("user:login")
        response = self.client.post(
            url, {"email": email, "password": password}, format="json"
        )
        token = response.json()["access"]
        self.client.credentials(HTTP_AUTHORIZATION="Bearer " + token)

    def test_list_seeds_default_categories(self):
        self.authenticator("employee@acme.com", "employee123")
        response = self.client.get(reverse("category:category-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [category["name"] for category in response.json()["results"]]
        self.assertCountEqual(names, [name for name, _, _ in DEFAULT_CATEGORIES])

    def test_seed_skips_existing_names(self):
        Category.objects.create(organisation=self.org, name="Travel", icon="🚆")
        created = seed_default_categories(self.org)
        self.assertEqual(len(created), len(DEFAULT_CATEGORIES) - 1)
        self.assertEqual(Category.objects.get(name="Travel").icon, "🚆")

    def test_list_hides_inactive_categories(self):
        Category.objects.create(organisation=self.org, name="Travel")
        Category.objects.create(organisation=self.org, name="Legacy", is_active=False)
        self.authenticator("employee@acme.com", "employee123")
        response = self.client.get(reverse("category:category-list"))
        names = [category["name"] for category in response.json()["results"]]
        self.assertEqual(names, ["Travel"])

    def test_admin_creates_category(self):
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("category:category-list")
        response = self.client.post(url, {"name": "Conferences"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["icon"], "📋")

        response = self.client.post(url, {"name": "Conferences"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(url, {"name": "   "}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_employee_cannot_create_category(self):
        self.authenticator("employee@acme.com", "employee123")
        url = reverse("category:category-list")
        response = self.client.post(url, {"name": "Conferences"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["action"], "manage_categories")

    def test_admin_updates_and_toggles_category(self):
        category = Category.objects.create(organisation=self.org, name="Travel")
        self.authenticator("admin@acme.com", "admin12345")

        url = reverse("category:category-detail", kwargs={"pk": category.id})
        response = self.client.patch(url, {"icon": "✈️"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["icon"], "✈️")

        url = reverse("category:category-toggle-active", kwargs={"pk": category.id})
        response = self.client.post(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.json()["data"]["is_active"])

        response = self.client.get(reverse("category:category-all"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["results"][0]["name"], "Travel")
        self.assertFalse(response.json()["results"][0]["is_active"])

    def test_categories_cannot_be_deleted(self):
        category = Category.objects.create(organisation=self.org, name="Travel")
        self.authenticator("admin@acme.com", "admin12345")
        url = reverse("category:category-detail", kwargs={"pk": category.id})
        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertTrue(Category.objects.filter(id=category.id).exists())
