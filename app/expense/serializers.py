from rest_framework import serializers
from category.models import Category
from . import workflow
from .models import Expense, ExpenseApproval


class ExpenseSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    user_name = serializers.CharField(source="user.name", read_only=True)
    user_department = serializers.CharField(
        source="user.department", read_only=True, default=None
    )
    category_name = serializers.CharField(source="category.name", read_only=True)
    category_icon = serializers.CharField(source="category.icon", read_only=True)
    approved_by_name = serializers.CharField(
        source="approved_by.name", read_only=True, default=None
    )
    rejected_by_name = serializers.CharField(
        source="rejected_by.name", read_only=True, default=None
    )
    reimbursed_by_name = serializers.CharField(
        source="reimbursed_by.name", read_only=True, default=None
    )

    class Meta:
        model = Expense
        fields = [
            "id",
            "title",
            "description",
            "amount",
            "status",
            "rejection_reason",
            "user",
            "user_name",
            "user_department",
            "category",
            "category_name",
            "category_icon",
            "expense_date",
            "receipt_url",
            "receipt",
            "created_at",
            "updated_at",
            "submitted_at",
            "approved_at",
            "approved_by",
            "approved_by_name",
            "rejected_by",
            "rejected_by_name",
            "reimbursed_at",
            "reimbursed_by",
            "reimbursed_by_name",
        ]
        read_only_fields = [
            "status",
            "rejection_reason",
            "user",
            "submitted_at",
            "approved_at",
            "approved_by",
            "rejected_by",
            "reimbursed_at",
            "reimbursed_by",
        ]
        extra_kwargs = {
            "receipt": {"required": False, "allow_null": True},
        }

    def validate_category(self, category):
        organisation = self.context["request"].user.organisation
        if category.organisation_id != getattr(organisation, "id", None):
            raise serializers.ValidationError("Category not found")
        unchanged = self.instance and self.instance.category_id == category.id
        if not category.is_active and not unchanged:
            raise serializers.ValidationError("Category is not active")
        return category

    def create(self, validated_data):
        return workflow.create_expense(self.context["request"].user, **validated_data)

    def update(self, instance, validated_data):
        return workflow.edit_draft(
            self.context["request"].user, instance, **validated_data
        )


class RejectExpenseSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ExpenseApprovalSerializer(serializers.ModelSerializer):
    actor_name = serializers.CharField(
        source="actor.name", read_only=True, default=None
    )

    class Meta:
        model = ExpenseApproval
        fields = ["id", "action", "comment", "actor", "actor_name", "created_at"]
