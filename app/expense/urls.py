from rest_framework.routers import DefaultRouter
from django.urls import path, include
from .views import ExpenseViewSets

app_name = "expenses"
router = DefaultRouter()
router.register("", ExpenseViewSets, basename="expense")

urlpatterns = [
    path("", include(router.urls)),
]
