# crp_accounting/management/commands/seed_coa.py
import logging

from django.core.management.base import BaseCommand, CommandError

from company.models import Company
from crp_accounting.exceptions import AlreadySeeded
from crp_accounting.services.coa_seeding_service import seed_default_chart, seeding_summary

logger = logging.getLogger(__name__)


# =============================================================================
# Command Class
# =============================================================================
class Command(BaseCommand):
    help = 'Seeds the default Chart of Accounts for a company that has no accounts yet.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--company-subdomain', type=str, required=True,
            help='The unique subdomain prefix of the Company to seed the COA for.',
        )

    def handle(self, *args, **options):
        company_subdomain = options['company_subdomain']
        try:
            target_company = Company.objects.get(subdomain_prefix=company_subdomain)
        except Company.DoesNotExist:
            raise CommandError(f"Company with subdomain prefix '{company_subdomain}' not found.")

        self.stdout.write(
            self.style.SUCCESS(f"\n--- Processing COA for Company: '{target_company.name}' ({company_subdomain}) ---"))
        try:
            created = seed_default_chart(target_company)
        except AlreadySeeded as e:
            raise CommandError(f"{e.message} ({e.existing_count} existing accounts). Nothing was changed.")

        summary = seeding_summary(target_company.pk)
        self.stdout.write(self.style.SUCCESS(f"  Accounts created: {created}"))
        for account_type, count in summary['by_type'].items():
            self.stdout.write(f"    {account_type}: {count}")
        self.stdout.write(self.style.SUCCESS(f"--- Finished COA for '{target_company.name}' ---"))
