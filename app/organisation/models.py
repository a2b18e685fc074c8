from django.db import models
from core.models import AuditableModel


class Organisation(AuditableModel):
    name = models.CharField(max_length=300)
    slug = models.SlugField(max_length=320, unique=True)
    invite_code = models.CharField(max_length=12, unique=True, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("created_at",)

    def __str__(self):
        return self.name
