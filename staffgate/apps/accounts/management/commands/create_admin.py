from django.contrib.auth.hashers import make_password
from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email

from staffgate.apps.accounts.models import Account, AccountStatus, Role


class Command(BaseCommand):
    help = (
        "Create (or reset) the administrator account that approves company "
        "registrations. The admin binds a chat by logging in through the bot."
    )

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--name", default="Administrator")
        parser.add_argument("--password", required=True)

    def handle(self, *args, **options):
        email = options["email"].strip()
        try:
            validate_email(email)
        except ValidationError:
            raise CommandError(f"Invalid email: {email}")
        if len(options["password"]) < 6:
            raise CommandError("Password must be at least 6 characters long.")

        account, created = Account.objects.update_or_create(
            email=email,
            defaults={
                "name": options["name"],
                "password": make_password(options["password"]),
                "role": Role.ADMIN,
                "status": AccountStatus.APPROVED,
            },
        )
        verb = "Created" if created else "Updated"
        self.stdout.write(self.style.SUCCESS(f"{verb} admin account {account.email}"))
