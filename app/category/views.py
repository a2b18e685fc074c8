from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from user.permissions import CanManageCategories
from .models import Category
from .serializers import CategorySerializer
from .utils import seed_default_categories


class CategoryViewSets(viewsets.ModelViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "put", "patch"]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "description"]
    ordering_fields = ["created_at", "name"]

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [IsAuthenticated()]
        return [CanManageCategories()]

    def get_queryset(self):
        """Returns categories of the authenticated user's organisation."""
        queryset = Category.objects.filter(organisation=self.request.user.organisation)
        if self.action == "list":
            return queryset.filter(is_active=True)
        return queryset

    def list(self, request, *args, **kwargs):
        organisation = request.user.organisation
        if organisation and not self.get_queryset().exists():
            seed_default_categories(organisation)
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(organisation=self.request.user.organisation)

    @action(methods=["GET"], detail=False, url_path="all")
    def all(self, request, pk=None):
        """Every category of the organisation, including inactive ones."""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(request=None)
    @action(methods=["POST"], detail=True, url_path="toggle-active")
    def toggle_active(self, request, pk=None):
        category = self.get_object()
        category.is_active = not category.is_active
        category.save(update_fields=["is_active", "updated_at"])
        serializer = self.get_serializer(category)
        return Response(
            {"success": True, "data": serializer.data}, status=status.HTTP_200_OK
        )
