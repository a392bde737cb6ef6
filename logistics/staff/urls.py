from django.urls import path
from .views import employee_list_create, employee_detail, employee_activities

urlpatterns = [
    path('employees/', employee_list_create, name='employee-list-create'),
    path('employees/<int:pk>/', employee_detail, name='employee-detail'),
    path('employees/<int:pk>/activities/', employee_activities, name='employee-activities'),
]
