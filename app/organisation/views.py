from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets, filters, mixins
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from user.permissions import CanManageUsers
from .filters import VERIFY_INVITE_CODE_PARAMETERS
from .models import Organisation
from .serializers import OrganisationSerializer, InviteCodeSerializer


class OrganisationViewSets(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Active organisations, listed for people registering."""

    queryset = Organisation.objects.filter(is_active=True)
    serializer_class = OrganisationSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "slug"]
    ordering_fields = ["created_at", "name"]

    @extend_schema(parameters=VERIFY_INVITE_CODE_PARAMETERS)
    @action(methods=["GET"], detail=False, url_path="verify-invite-code")
    def verify_invite_code(self, request, pk=None):
        invite_code: str = self.request.query_params.get("invite_code", "").strip()
        org = self.get_queryset().filter(invite_code=invite_code).first()
        if not invite_code or not org:
            return Response(
                {"success": False, "detail": "Organisation not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        serializer = OrganisationSerializer(org, many=False)
        return Response(
            {"success": True, "data": serializer.data}, status=status.HTTP_200_OK
        )


class InviteCodeViewSet(viewsets.ViewSet):
    """The invite code of the caller's own organisation."""

    permission_classes = [CanManageUsers]
    serializer_class = InviteCodeSerializer

    @extend_schema(responses=InviteCodeSerializer)
    def list(self, request):
        serializer = InviteCodeSerializer(request.user.organisation)
        return Response(serializer.data, status=status.HTTP_200_OK)
