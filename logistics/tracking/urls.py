from django.urls import path
from .views import order_search, package_by_qr, qr_scan, qr_decode, order_qr_pdf

urlpatterns = [
    path('orders/search/', order_search, name='order-search'),
    path('orders/<int:pk>/qr-pdf/', order_qr_pdf, name='order-qr-pdf'),
    path('packages/<str:qr>/', package_by_qr, name='package-by-qr'),
    path('qr/scan/', qr_scan, name='qr-scan'),
    path('qr/decode/', qr_decode, name='qr-decode'),
]
