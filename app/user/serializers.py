import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers, exceptions
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from category.utils import seed_default_categories
from organisation.models import Organisation
from organisation.utils import generate_invite_code, slugify_organisation_name
from .enums import ROLE_OPTIONS, ADMIN, EMPLOYEE

logger = logging.getLogger(__name__)


class ListUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = get_user_model()
        fields = [
            "id",
            "name",
            "email",
            "role",
            "department",
            "is_active",
            "last_login",
            "created_at",
        ]


class UserProfileSerializer(serializers.ModelSerializer):
    organisation_name = serializers.CharField(
        source="organisation.name", read_only=True, default=None
    )

    class Meta:
        model = get_user_model()
        fields = [
            "id",
            "name",
            "email",
            "role",
            "department",
            "is_active",
            "organisation",
            "organisation_name",
            "created_at",
        ]


class RegisterSerializer(serializers.Serializer):
    """
    Creates a user in an existing organisation (invite_code) or in a new
    one (organisation_name). The first user of an organisation is its admin.
    """

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True, min_length=8, style={"input_type": "password"}
    )
    department = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    invite_code = serializers.CharField(required=False, allow_blank=True)
    organisation_name = serializers.CharField(
        required=False, allow_blank=True, max_length=300
    )

    def validate_email(self, value):
        email = value.lower().strip()
        if get_user_model().objects.filter(email=email).exists():
            raise serializers.ValidationError("Email already registered")
        return email

    def validate(self, attrs):
        invite_code = (attrs.get("invite_code") or "").strip()
        organisation_name = (attrs.get("organisation_name") or "").strip()

        if bool(invite_code) == bool(organisation_name):
            raise serializers.ValidationError(
                "Provide either an invite code or a new organisation name."
            )

        if invite_code:
            organisation = Organisation.objects.filter(
                invite_code=invite_code, is_active=True
            ).first()
            if not organisation:
                raise serializers.ValidationError(
                    {"invite_code": "Invalid invite code. Please check and try again."}
                )
            attrs["organisation"] = organisation
        else:
            slug = slugify_organisation_name(organisation_name)
            if not slug:
                raise serializers.ValidationError(
                    {"organisation_name": "Organisation name is not valid."}
                )
            if Organisation.objects.filter(slug=slug).exists():
                raise serializers.ValidationError(
                    {
                        "organisation_name": "Organisation name already taken. Please choose a different name."
                    }
                )
            attrs["slug"] = slug
            attrs["organisation_name"] = organisation_name
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        organisation = validated_data.get("organisation")
        if organisation is None:
            organisation = Organisation.objects.create(
                name=validated_data["organisation_name"],
                slug=validated_data["slug"],
                invite_code=generate_invite_code(),
            )
            seed_default_categories(organisation)
            logger.info("Created organisation %s", organisation.slug)

        is_first_user = not organisation.users.exists()
        user = get_user_model().objects.create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            department=validated_data.get("department") or None,
            organisation=organisation,
            role=ADMIN if is_first_user else EMPLOYEE,
        )
        logger.info("Registered %s as %s of %s", user.email, user.role, organisation.slug)
        return user


class CustomObtainTokenPairSerializer(TokenObtainPairSerializer):
    @classmethod
    def get_token(cls, user):
        if user.organisation and not user.organisation.is_active:
            raise exceptions.AuthenticationFailed(
                _("Organisation not Active."), code="authentication"
            )
        token = super().get_token(user)
        # Add custom claims
        token["email"] = user.email
        token["role"] = user.role
        token["name"] = user.name
        if user.organisation:
            token["organisation"] = str(user.organisation.id)
        return token

    def validate(self, attrs):
        attrs[self.username_field] = attrs.get(self.username_field, "").lower().strip()
        data = super().validate(attrs)
        self.user.save_last_login()
        data["user"] = UserProfileSerializer(self.user).data
        return data


class UpdateRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ROLE_OPTIONS)


class UpdateDepartmentSerializer(serializers.Serializer):
    department = serializers.CharField(
        allow_blank=True, allow_null=True, max_length=255
    )


class ResetPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(
        write_only=True, min_length=8, style={"input_type": "password"}
    )
