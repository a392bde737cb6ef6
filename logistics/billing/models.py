from decimal import Decimal, ROUND_HALF_UP

from django.db import models

DEFAULT_TAX_RATE = Decimal('21.00')
CENT = Decimal('0.01')


class Invoice(models.Model):
    """Customer invoice. Tax and total are derived from subtotal and tax_rate."""
    STATUS_CHOICES = [
        ('draft', 'Brouillon'),
        ('sent', 'Envoyée'),
        ('paid', 'Payée'),
        ('overdue', 'En retard'),
        ('cancelled', 'Annulée'),
    ]

    invoice_number = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    order = models.ForeignKey('shipping.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    issue_date = models.DateField()
    due_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=DEFAULT_TAX_RATE)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, default='EUR')
    notes = models.TextField(blank=True, null=True)
    payment_date = models.DateField(blank=True, null=True)
    payment_method = models.CharField(max_length=50, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'invoices'
        ordering = ['-issue_date', '-created_at']
        indexes = [
            models.Index(fields=['status', 'due_date'], name='invoices_status_due_idx'),
        ]

    def __str__(self):
        return self.invoice_number

    def calculate_totals(self):
        subtotal = Decimal(self.subtotal or 0)
        rate = Decimal(self.tax_rate if self.tax_rate is not None else DEFAULT_TAX_RATE)
        self.tax_amount = (subtotal * rate / Decimal('100')).quantize(CENT, rounding=ROUND_HALF_UP)
        self.total_amount = (subtotal + self.tax_amount).quantize(CENT, rounding=ROUND_HALF_UP)

    def save(self, *args, **kwargs):
        if not self.invoice_number:
            from .utils import generate_invoice_number
            self.invoice_number = generate_invoice_number(self.issue_date)
        self.calculate_totals()
        super().save(*args, **kwargs)
