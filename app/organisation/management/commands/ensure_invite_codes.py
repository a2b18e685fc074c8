from django.core.management.base import BaseCommand

from organisation.utils import ensure_invite_codes


class Command(BaseCommand):
    help = "Assign an invite code to every organisation that has none."

    def handle(self, *args, **options):
        updated = ensure_invite_codes()
        for organisation in updated:
            self.stdout.write(f"{organisation.name}: {organisation.invite_code}")
        self.stdout.write(
            self.style.SUCCESS(f"Generated invite codes for {len(updated)} organisations")
        )
