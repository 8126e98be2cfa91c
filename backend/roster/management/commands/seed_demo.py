from __future__ import annotations

from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.utils import timezone

from roster.domain.models import Member, Verse
from roster.domain.repositories import AvailabilityRepository
from roster.services.calendar import sundays_in_month
from roster.services.members import create_member

DEFAULT_NAMES = [
    "John Smith", "Mary Jones", "Peter Brown", "Grace Kim", "Daniel Lee",
    "Ruth Adams", "Samuel Clark", "Esther Young", "David Hall", "Hannah King",
]

DEFAULT_VERSES = [
    ("Each of you should use whatever gift you have received to serve others, "
     "as faithful stewards of God's grace in its various forms.", "1 Peter 4:10"),
    ("For even the Son of Man did not come to be served, but to serve, "
     "and to give his life as a ransom for many.", "Mark 10:45"),
    ("Serve wholeheartedly, as if you were serving the Lord, not people.", "Ephesians 6:7"),
    ("Let us not become weary in doing good, for at the proper time we will reap "
     "a harvest if we do not give up.", "Galatians 6:9"),
]

class Command(BaseCommand):
    help = "Seed demo data (roles, admin, members, verses, next month's availability). Idempotent."

    def add_arguments(self, parser):
        parser.add_argument(
            "--names",
            type=str,
            help="Comma-separated 'First Last' names. Ex.: 'Ann Lee,Bob Ray'. "
                 "Defaults to a built-in list.",
        )
        parser.add_argument(
            "--admin-name",
            type=str,
            default="Church Admin",
            help="Name of the demo admin member (default: Church Admin).",
        )
        parser.add_argument(
            "--admin-email",
            type=str,
            default="admin@example.com",
            help="E-mail of the demo admin member (default: admin@example.com).",
        )

    def _ensure_member(self, full_name: str, *, email=None, is_admin=False):
        first, _, last = full_name.strip().partition(" ")
        last = last or first
        member = Member.objects.filter(first_name=first, last_name=last).first()
        if member is not None:
            return member, False
        return create_member(first, last, email=email, is_admin=is_admin), True

    def handle(self, *args, **kwargs):
        call_command("create_roles", stdout=self.stdout)

        admin, created = self._ensure_member(kwargs["admin_name"], email=kwargs["admin_email"], is_admin=True)
        if created:
            self.stdout.write(self.style.SUCCESS(f"Created admin member {admin} (initials {admin.initials})"))
        else:
            self.stdout.write(self.style.WARNING(f"Admin member {admin} already exists."))

        names_arg = kwargs.get("names")
        names = [n.strip() for n in names_arg.split(",") if n.strip()] if names_arg else DEFAULT_NAMES

        today = timezone.localdate()
        year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
        sundays = sundays_in_month(year, month)

        created_count = 0
        for n in names:
            member, created = self._ensure_member(n)
            created_count += int(created)
            for d in sundays:
                AvailabilityRepository.upsert(member, d, True)

        for text, reference in DEFAULT_VERSES:
            Verse.objects.get_or_create(reference=reference, defaults={"text": text, "category": "serving"})

        self.stdout.write(self.style.SUCCESS(
            f"Seed completed. members created={created_count}, total={Member.objects.count()}, "
            f"availability for {len(sundays)} Sunday(s) of {year}-{month:02d}."
        ))
