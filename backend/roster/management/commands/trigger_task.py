from __future__ import annotations

from typing import Optional

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from roster.tasks import deadline_reminder, email_roster_pdf

class Command(BaseCommand):
    help = (
        "Runs Celery tasks by hand for testing.\n"
        "Use --sync to run the task in this process (no Celery worker)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "name",
            choices=["deadline_reminder", "email_roster"],
            help="Task to enqueue/run.",
        )
        parser.add_argument("--year", type=int, help="Year (email_roster).")
        parser.add_argument("--month", type=int, help="Month 1-12 (email_roster).")
        parser.add_argument("--email", type=str, help="Recipient (email_roster).")
        parser.add_argument(
            "--sync",
            action="store_true",
            help="Run the task synchronously (no broker/worker).",
        )

    def handle(self, *args, **opts):
        name: str = opts["name"]
        sync: bool = bool(opts.get("sync"))

        if name == "deadline_reminder":
            task, args = deadline_reminder, ()
        else:
            email: Optional[str] = opts.get("email")
            if not email:
                raise CommandError("--email is required for email_roster.")
            now = timezone.localtime()
            args = (opts.get("year") or now.year, opts.get("month") or now.month, email)
            task = email_roster_pdf

        if sync:
            result = task(*args)
            self.stdout.write(self.style.SUCCESS(f"[sync] {task.name}{args} -> {result!r}"))
            return
        try:
            res = task.delay(*args)
        except Exception as e:
            self.stderr.write(self.style.ERROR(f"Failed to enqueue '{name}': {e}"))
            self.stderr.write("Tip: use --sync to run without Celery.")
            raise SystemExit(2)
        self.stdout.write(self.style.SUCCESS(f"[async] enqueued {task.name}: {res.id}"))
