"""Invoice number generation"""
from django.utils import timezone

from .models import Invoice


def format_invoice_number(year, sequence):
    return f"FAC-{year}-{sequence:06d}"


def generate_invoice_number(issue_date=None):
    """Next free FAC-<year>-<6-digit sequence>"""
    year = issue_date.year if issue_date else timezone.localdate().year
    prefix = f"FAC-{year}-"
    sequence = Invoice.objects.filter(invoice_number__startswith=prefix).count() + 1
    invoice_number = format_invoice_number(year, sequence)

    # Ensure uniqueness
    while Invoice.objects.filter(invoice_number=invoice_number).exists():
        sequence += 1
        invoice_number = format_invoice_number(year, sequence)

    return invoice_number
