from django.urls import path
from .views import (
    client_list_create, client_detail,
    customer_list_create, customer_detail,
)

urlpatterns = [
    # Client endpoints
    path('clients/', client_list_create, name='client-list-create'),
    path('clients/<int:pk>/', client_detail, name='client-detail'),

    # Customer endpoints
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
]
