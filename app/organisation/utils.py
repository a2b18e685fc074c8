import logging
import random
import re

from django.db.models import Q

from .models import Organisation

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6


def slugify_organisation_name(name: str) -> str:
    """Lower-case the name and collapse every run of other characters into one dash."""
    slug = re.sub(r"[^a-z0-9]", "-", name.lower())
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def generate_invite_code() -> str:
    """Returns a six digit code not used by any other organisation."""
    while True:
        code = str(random.randint(100000, 999999))
        if not Organisation.objects.filter(invite_code=code).exists():
            return code


def ensure_invite_codes() -> list:
    """
    Assign an invite code to every organisation that has none.

    returns: the organisations that were updated
    """
    updated = []
    missing = Q(invite_code__isnull=True) | Q(invite_code="")
    for organisation in Organisation.objects.filter(missing):
        organisation.invite_code = generate_invite_code()
        organisation.save(update_fields=["invite_code", "updated_at"])
        logger.info(
            "Generated invite code %s for organisation %s",
            organisation.invite_code,
            organisation.name,
        )
        updated.append(organisation)
    return updated
