from django.db import models
from core.models import AuditableModel

DEFAULT_ICON = "📋"


class Category(AuditableModel):
    organisation = models.ForeignKey(
        "organisation.Organisation",
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=100)
    icon = models.CharField(max_length=16, default=DEFAULT_ICON)
    description = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("created_at",)
        unique_together = ("name", "organisation")
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name
