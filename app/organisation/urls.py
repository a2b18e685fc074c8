from rest_framework.routers import DefaultRouter
from django.urls import path, include
from .views import OrganisationViewSets, InviteCodeViewSet

app_name = "organisation"

router = DefaultRouter()
router.register("invite-code", InviteCodeViewSet, basename="invite-code")
router.register("", OrganisationViewSets)

urlpatterns = [
    path("", include(router.urls)),
]
