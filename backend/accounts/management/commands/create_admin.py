# accounts/management/commands/create_admin.py

import os

from django.core.management.base import BaseCommand, CommandError

from accounts.commands import create_admin_user


class Command(BaseCommand):
    help = "Create the initial ADMIN user if it does not exist yet"

    def add_arguments(self, parser):
        parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL"))
        parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
        parser.add_argument("--name", default="Administrator")

    def handle(self, *args, **options):
        email = options["email"]
        password = options["password"]
        if not email or not password:
            raise CommandError("--email and --password (or ADMIN_EMAIL / ADMIN_PASSWORD) are required.")

        result = create_admin_user(email, password, options["name"])
        if not result.success:
            self.stdout.write(self.style.WARNING(result.error))
            return

        self.stdout.write(self.style.SUCCESS(f"Created admin user {result.data.email}."))
