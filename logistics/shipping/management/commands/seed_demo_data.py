"""
Populate the database with sample containers, customers, orders and invoices.
Safe to run repeatedly: existing rows are left in place.
"""
from django.core.management.base import BaseCommand

from logistics.shipping.seed_data import seed_containers, seed_orders, seed_customers_and_invoices


class Command(BaseCommand):
    help = 'Seed sample containers, customers, orders and invoices'

    def add_arguments(self, parser):
        parser.add_argument(
            '--skip-invoices',
            action='store_true',
            help='Do not derive customers and invoices from the seeded orders',
        )

    def handle(self, *args, **options):
        container_results = seed_containers()
        ok = sum(1 for r in container_results if r['ok'])
        self.stdout.write(f"Containers: {ok}/{len(container_results)} ok")
        for failure in (r for r in container_results if not r['ok']):
            self.stdout.write(self.style.WARNING(f"  {failure['code']}: {failure['message']}"))

        results, summary = seed_orders()
        for section, data in results.items():
            self.stdout.write(f"{section.capitalize()}: {data['created']} upserted")
            for error in data['errors']:
                self.stdout.write(self.style.WARNING(f"  {error}"))

        if not options['skip_invoices']:
            invoice_results = seed_customers_and_invoices()
            self.stdout.write(
                f"Customers created: {invoice_results['customersCreated']}, "
                f"orders linked: {invoice_results['ordersLinked']}, "
                f"invoices created: {invoice_results['invoicesCreated']}"
            )
            for error in invoice_results['errors']:
                self.stdout.write(self.style.WARNING(f"  {error}"))

        self.stdout.write(self.style.SUCCESS(
            f"Done: {summary['total_customers']} customers, {summary['total_containers']} containers, "
            f"{summary['total_orders']} orders"
        ))
