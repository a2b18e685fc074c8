import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, mixins, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView
from django_filters.rest_framework import DjangoFilterBackend
from policy import ValidationError
from .permissions import CanManageUsers
from .serializers import (
    CustomObtainTokenPairSerializer,
    ListUserSerializer,
    RegisterSerializer,
    UserProfileSerializer,
    UpdateRoleSerializer,
    UpdateDepartmentSerializer,
    ResetPasswordSerializer,
)

logger = logging.getLogger(__name__)


class CustomObtainTokenPairView(TokenObtainPairView):
    """Login with email and password"""

    serializer_class = CustomObtainTokenPairSerializer


class AuthViewSets(viewsets.GenericViewSet):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]

    @extend_schema(responses=UserProfileSerializer)
    @action(
        methods=["POST"],
        detail=False,
        url_path="register",
        authentication_classes=[],
        permission_classes=[AllowAny],
    )
    def register(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        refresh = CustomObtainTokenPairSerializer.get_token(user)
        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserProfileSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(
        methods=["GET"],
        detail=False,
        url_path="me",
        permission_classes=[IsAuthenticated],
        serializer_class=UserProfileSerializer,
    )
    def me(self, request, pk=None):
        serializer = self.get_serializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)


class AdminUserViewSets(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    """User management for admins of an organisation."""

    queryset = get_user_model().objects.all()
    serializer_class = ListUserSerializer
    permission_classes = [CanManageUsers]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_fields = ["role", "is_active"]
    search_fields = ["name", "email", "department"]
    ordering_fields = ["created_at", "name", "email", "role"]

    def get_queryset(self):
        """Returns users of the authenticated admin's organisation."""
        return get_user_model().objects.filter(
            organisation=self.request.user.organisation
        )

    def get_other_user(self, message, field):
        user = self.get_object()
        if user.id == self.request.user.id:
            raise ValidationError(message, field=field)
        return user

    def updated_response(self, user):
        serializer = ListUserSerializer(user)
        return Response(
            {"success": True, "data": serializer.data}, status=status.HTTP_200_OK
        )

    @action(
        methods=["PUT"],
        detail=True,
        url_path="role",
        serializer_class=UpdateRoleSerializer,
    )
    def role(self, request, pk=None):
        user = self.get_other_user("Cannot change your own role", "role")
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.role = serializer.validated_data["role"]
        user.save(update_fields=["role", "updated_at"])
        logger.info("%s set role of %s to %s", request.user.email, user.email, user.role)
        return self.updated_response(user)

    @action(
        methods=["PUT"],
        detail=True,
        url_path="department",
        serializer_class=UpdateDepartmentSerializer,
    )
    def department(self, request, pk=None):
        user = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.department = serializer.validated_data["department"] or None
        user.save(update_fields=["department", "updated_at"])
        return self.updated_response(user)

    @extend_schema(request=None)
    @action(methods=["POST"], detail=True, url_path="toggle-active")
    def toggle_active(self, request, pk=None):
        user = self.get_other_user("Cannot deactivate your own account", "is_active")
        user.is_active = not user.is_active
        user.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "%s %s %s",
            request.user.email,
            "activated" if user.is_active else "deactivated",
            user.email,
        )
        return self.updated_response(user)

    @action(
        methods=["POST"],
        detail=True,
        url_path="reset-password",
        serializer_class=ResetPasswordSerializer,
    )
    def reset_password(self, request, pk=None):
        user = self.get_other_user(
            "Cannot reset your own password via admin panel", "new_password"
        )
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user.set_password(serializer.validated_data["new_password"])
        user.save(update_fields=["password", "updated_at"])
        logger.info("%s reset the password of %s", request.user.email, user.email)
        return Response(
            {"success": True, "message": "Password updated successfully"},
            status=status.HTTP_200_OK,
        )
