from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView
from django.urls import path, include
from .views import CustomObtainTokenPairView, AuthViewSets, AdminUserViewSets

app_name = "user"

router = DefaultRouter()
router.register("users", AdminUserViewSets, basename="user")
router.register("", AuthViewSets, basename="auth")

urlpatterns = [
    path("login/", CustomObtainTokenPairView.as_view(), name="login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("", include(router.urls)),
]
