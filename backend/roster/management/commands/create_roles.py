from __future__ import annotations

from django.core.management.base import BaseCommand

from roster.domain.models import ServiceRole

DEFAULT_ROLES = [
    ("Worship Leader", 3),
    ("Singer", 4),
    ("Keyboardist", 2),
    ("Bassist", 1),
    ("Guitarist", 1),
    ("Drummer", 1),
    ("Usher", 2),
    ("OBS & Sound", 2),
    ("Multimedia", 2),
]

class Command(BaseCommand):
    help = "Create/Sync the default service roles with their occupancy limits."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset-limits",
            action="store_true",
            help="Overwrite the limit of roles that already exist.",
        )

    def handle(self, *args, **kwargs):
        reset = kwargs["reset_limits"]
        created_count = 0
        updated_count = 0

        for position, (name, limit) in enumerate(DEFAULT_ROLES):
            role, created = ServiceRole.objects.get_or_create(
                name=name,
                defaults={"order": position, "max_occupants": limit, "is_active": True},
            )
            if created:
                created_count += 1
            elif reset and role.max_occupants != limit:
                role.max_occupants = limit
                role.save(update_fields=["max_occupants"])
                updated_count += 1

        self.stdout.write(self.style.SUCCESS(
            f"Roles synced. created={created_count}, updated={updated_count}, "
            f"total={ServiceRole.objects.count()}."
        ))
