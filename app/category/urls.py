from rest_framework.routers import DefaultRouter
from django.urls import path, include
from .views import CategoryViewSets

app_name = "category"
router = DefaultRouter()
router.register("", CategoryViewSets)

urlpatterns = [
    path("", include(router.urls)),
]
