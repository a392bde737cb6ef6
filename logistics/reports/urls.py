from django.urls import path
from .views import order_stats, analytics_export

urlpatterns = [
    path('stats/', order_stats, name='order-stats'),
    path('reports/analytics/export/', analytics_export, name='analytics-export'),
]
