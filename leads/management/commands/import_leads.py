from pathlib import Path

from django.contrib.auth import get_user_model
from django.core.files import File
from django.core.management.base import BaseCommand, CommandError

from authentication.session import Session
from services.csv_import import import_leads_csv
from services.exceptions import LeadManagementError, ValidationError


class Command(BaseCommand):
    help = "Import leads from a CSV file, acting as the given user"

    def add_arguments(self, parser):
        parser.add_argument("path", help="CSV file to import")
        parser.add_argument("--user", required=True, help="Username the import runs as")
        parser.add_argument(
            "--assign-to",
            help="Sales username to assign every imported lead to (admin imports only)",
        )

    def handle(self, *args, **options):
        csv_path = Path(options["path"])
        if not csv_path.exists():
            raise CommandError(f"CSV file not found at {csv_path}")

        User = get_user_model()
        try:
            actor = User.objects.get(username=options["user"], is_active=True)
        except User.DoesNotExist:
            raise CommandError(f"No active user named {options['user']}")

        assign_to_id = None
        if options["assign_to"]:
            assignee = User.objects.filter(username=options["assign_to"]).first()
            if assignee is None:
                raise CommandError(f"No user named {options['assign_to']}")
            assign_to_id = assignee.pk

        with open(csv_path, "rb") as handle:
            try:
                summary = import_leads_csv(Session.from_user(actor), File(handle, name=csv_path.name), assign_to_id)
            except ValidationError as exc:
                raise CommandError("; ".join(exc.errors))
            except LeadManagementError as exc:
                raise CommandError(exc.message)

        for error in summary.error_details:
            self.stdout.write(self.style.WARNING(error))

        self.stdout.write(
            self.style.SUCCESS(
                f"Import completed: {summary.imported} imported, "
                f"{summary.skipped} skipped, {summary.errors} errors "
                f"({summary.total_rows} rows)"
            )
        )
