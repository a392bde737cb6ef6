from django.urls import path
from .views import container_event, container_status, order_status, send_status_email

urlpatterns = [
    path('notifications/container-event/', container_event, name='notify-container-event'),
    path('notifications/container-status/', container_status, name='notify-container-status'),
    path('notifications/order-status/', order_status, name='notify-order-status'),
    path('send-email/', send_status_email, name='send-email'),
]
