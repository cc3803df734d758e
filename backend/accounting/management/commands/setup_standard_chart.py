# accounting/management/commands/setup_standard_chart.py
"""
Provision the standard chart of accounts.

Usage:
    # One organization
    python manage.py setup_standard_chart --organization acme

    # Every active organization that has no chart yet, enabling accounting
    python manage.py setup_standard_chart --all --enable

    # Show what would happen without writing
    python manage.py setup_standard_chart --all --dry-run
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import Organization
from accounting.chart import STANDARD_CHART, has_standard_chart, setup_standard_chart


class Command(BaseCommand):
    help = "Create the standard chart of accounts for organizations that have none"

    def add_arguments(self, parser):
        parser.add_argument(
            "--organization",
            type=str,
            help="Organization slug",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            dest="all_organizations",
            help="Every active organization",
        )
        parser.add_argument(
            "--enable",
            action="store_true",
            help="Also turn accounting on for the organization",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would happen without making changes",
        )

    def handle(self, *args, **options):
        slug = options["organization"]
        if bool(slug) == options["all_organizations"]:
            raise CommandError("Pass exactly one of --organization or --all.")

        if slug:
            try:
                organizations = [Organization.objects.get(slug=slug)]
            except Organization.DoesNotExist:
                raise CommandError(f"Organization '{slug}' not found.")
        else:
            organizations = list(Organization.objects.filter(is_active=True).order_by("slug"))

        created = skipped = 0
        for organization in organizations:
            if has_standard_chart(organization):
                skipped += 1
                self.stdout.write(f"  {organization.slug}: chart already present, skipped")
                continue

            if options["dry_run"]:
                self.stdout.write(f"  {organization.slug}: would create {len(STANDARD_CHART)} accounts")
                continue

            with transaction.atomic():
                accounts = setup_standard_chart(organization)
                if options["enable"] and not organization.enable_accounting:
                    organization.enable_accounting = True
                    organization.save(update_fields=["enable_accounting", "updated_at"])
            created += 1
            self.stdout.write(f"  {organization.slug}: created {len(accounts)} accounts")

        prefix = "[dry run] " if options["dry_run"] else ""
        self.stdout.write(self.style.SUCCESS(
            f"{prefix}Done! Provisioned {created}, skipped {skipped}."
        ))
