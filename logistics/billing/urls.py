from django.urls import path
from .views import (
    invoice_list_create, invoice_detail, invoice_mark_overdue,
    order_invoice_pdf, order_proforma, clients_by_container,
)

urlpatterns = [
    path('invoices/', invoice_list_create, name='invoice-list-create'),
    path('invoices/mark-overdue/', invoice_mark_overdue, name='invoice-mark-overdue'),
    path('invoices/<int:pk>/', invoice_detail, name='invoice-detail'),

    # Documents
    path('orders/<int:pk>/invoice-pdf/', order_invoice_pdf, name='order-invoice-pdf'),
    path('orders/<int:pk>/proforma/', order_proforma, name='order-proforma'),
    path('documents/clients-by-container/', clients_by_container, name='clients-by-container'),
]
