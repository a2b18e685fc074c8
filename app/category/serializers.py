from rest_framework import serializers
from .models import Category


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "icon", "description", "is_active", "created_at"]
        extra_kwargs = {
            "is_active": {"read_only": True},
            "icon": {"required": False},
            "description": {"required": False},
        }

    def validate_name(self, value):
        name = value.strip()
        if not name:
            raise serializers.ValidationError("Category name is required")
        organisation = self.context["request"].user.organisation
        categories = Category.objects.filter(organisation=organisation, name=name)
        if self.instance:
            categories = categories.exclude(id=self.instance.id)
        if categories.exists():
            raise serializers.ValidationError("Category with this name already exists")
        return name
