import logging

from .models import Category

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Travel", "✈️", "Flights, hotels, and transport"),
    ("Meals", "🍽️", "Business meals and entertainment"),
    ("Office Supplies", "📦", "Stationery, equipment, and supplies"),
    ("Software", "💻", "Software subscriptions and licenses"),
    ("Transport", "🚕", "Taxi, uber, and local transport"),
    ("Training", "📚", "Courses, books, and learning materials"),
    ("Equipment", "🖥️", "Hardware and office equipment"),
    ("Other", "📋", "Miscellaneous expenses"),
]


def seed_default_categories(organisation):
    """Create the default categories the organisation does not have yet."""
    created = []
    for name, icon, description in DEFAULT_CATEGORIES:
        category, was_created = Category.objects.get_or_create(
            organisation=organisation,
            name=name,
            defaults={"icon": icon, "description": description},
        )
        if was_created:
            created.append(category)
    if created:
        logger.info(
            "Seeded %s default categories for organisation %s",
            len(created),
            organisation.name,
        )
    return created
