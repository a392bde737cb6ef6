from django.contrib import admin
from .models import Invoice


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'customer', 'issue_date', 'due_date', 'status', 'total_amount', 'currency']
    list_filter = ['status', 'currency', 'issue_date']
    search_fields = ['invoice_number', 'customer__name', 'customer__email', 'order__order_number']
    readonly_fields = ['invoice_number', 'tax_amount', 'total_amount', 'created_at', 'updated_at']
    ordering = ['-issue_date']
