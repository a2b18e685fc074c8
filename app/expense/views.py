from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from policy import is_allowed
from policy.enums import APPROVE
from user.permissions import CanApprove, CanReimburse
from . import workflow
from .enums import SUBMITTED, APPROVED, REVIEWED_STATUSES
from .models import Expense
from .serializers import (
    ExpenseSerializer,
    RejectExpenseSerializer,
    ExpenseApprovalSerializer,
)


class ExpenseViewSets(viewsets.ModelViewSet):
    queryset = Expense.objects.all()
    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "put"]
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_fields = ["status", "category"]
    search_fields = ["title", "description", "category__name", "user__name"]
    ordering_fields = [
        "created_at",
        "updated_at",
        "expense_date",
        "amount",
        "status",
        "title",
    ]

    def get_permissions(self):
        if self.action in ["pending", "approval_history"]:
            return [CanApprove()]
        if self.action == "approved":
            return [CanReimburse()]
        return [IsAuthenticated()]

    def get_queryset(self):
        """Returns expenses of the authenticated user's organisation
        narrowed to what the current action lists."""
        user = self.request.user
        queryset = Expense.objects.filter(
            organisation=user.organisation
        ).select_related("user", "category", "approved_by", "rejected_by", "reimbursed_by")

        if self.action == "list":
            return queryset.filter(user=user)
        if self.action == "pending":
            return queryset.filter(status=SUBMITTED).exclude(user=user)
        if self.action == "approved":
            return queryset.filter(status=APPROVED).exclude(user=user)
        if self.action == "approval_history":
            return queryset.filter(status__in=REVIEWED_STATUSES).order_by("-updated_at")
        if self.action in ["retrieve", "history"] and not is_allowed(user.role, APPROVE):
            return queryset.filter(user=user)
        return queryset

    def paginated_list(self):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def updated_response(self, expense):
        serializer = ExpenseSerializer(expense, context=self.get_serializer_context())
        return Response(
            {"success": True, "data": serializer.data}, status=status.HTTP_200_OK
        )

    def perform_destroy(self, instance):
        workflow.delete_draft(self.request.user, instance)

    @action(methods=["GET"], detail=False, url_path="pending")
    def pending(self, request, pk=None):
        """Submitted expenses of other users waiting for review."""
        return self.paginated_list()

    @action(methods=["GET"], detail=False, url_path="approved")
    def approved(self, request, pk=None):
        """Approved expenses of other users waiting for reimbursement."""
        return self.paginated_list()

    @action(methods=["GET"], detail=False, url_path="approval-history")
    def approval_history(self, request, pk=None):
        return self.paginated_list()

    @action(
        methods=["GET"],
        detail=True,
        url_path="history",
        serializer_class=ExpenseApprovalSerializer,
        pagination_class=None,
    )
    def history(self, request, pk=None):
        expense = self.get_object()
        serializer = self.get_serializer(expense.approvals.select_related("actor"), many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    @extend_schema(request=None, responses=ExpenseSerializer)
    @action(methods=["POST"], detail=True, url_path="submit")
    def submit(self, request, pk=None):
        expense = workflow.submit(request.user, self.get_object())
        return self.updated_response(expense)

    @extend_schema(request=None, responses=ExpenseSerializer)
    @action(methods=["POST"], detail=True, url_path="approve")
    def approve(self, request, pk=None):
        expense = workflow.approve(request.user, self.get_object())
        return self.updated_response(expense)

    @extend_schema(request=RejectExpenseSerializer, responses=ExpenseSerializer)
    @action(
        methods=["POST"],
        detail=True,
        url_path="reject",
        serializer_class=RejectExpenseSerializer,
    )
    def reject(self, request, pk=None):
        expense = self.get_object()
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        expense = workflow.reject(
            request.user, expense, serializer.validated_data.get("reason")
        )
        return self.updated_response(expense)

    @extend_schema(request=None, responses=ExpenseSerializer)
    @action(methods=["POST"], detail=True, url_path="reimburse")
    def reimburse(self, request, pk=None):
        expense = workflow.reimburse(request.user, self.get_object())
        return self.updated_response(expense)
