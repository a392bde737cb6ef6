from django.urls import path
from .views import (
    container_list_create, container_detail, container_inventory,
    order_list_create, order_detail, order_tracking, order_history,
    package_list_create,
    seed_containers_view, seed_customers_view, seed_orders_view,
    seed_users_view, reseed_data_view,
)

urlpatterns = [
    # Container endpoints
    path('containers/', container_list_create, name='container-list-create'),
    path('containers/<int:pk>/', container_detail, name='container-detail'),
    path('containers/<int:pk>/inventory/', container_inventory, name='container-inventory'),

    # Order endpoints
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/tracking/', order_tracking, name='order-tracking'),
    path('orders/<int:pk>/history/', order_history, name='order-history'),

    # Package endpoints
    path('packages/', package_list_create, name='package-list-create'),

    # Seeding (X-Admin-Seed-Key)
    path('admin/seed-containers/', seed_containers_view, name='seed-containers'),
    path('admin/seed-customers/', seed_customers_view, name='seed-customers'),
    path('admin/seed-orders/', seed_orders_view, name='seed-orders'),
    path('admin/seed-users/', seed_users_view, name='seed-users'),
    path('admin/reseed-data/', reseed_data_view, name='reseed-data'),
]
