"""
Flag sent invoices past their due date as overdue. Meant to run daily from cron.
"""
from django.core.management.base import BaseCommand

from logistics.billing.services import mark_overdue_invoices


class Command(BaseCommand):
    help = 'Mark sent invoices past their due date as overdue'

    def handle(self, *args, **options):
        updated = mark_overdue_invoices()
        self.stdout.write(self.style.SUCCESS(f"{updated} invoice(s) marked overdue"))
