from django.contrib import admin
from .models import Client, Customer


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'company', 'created_at']
    search_fields = ['name', 'email', 'phone', 'company']
    ordering = ['name']


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'company', 'city', 'status', 'created_at']
    list_filter = ['status', 'country']
    search_fields = ['name', 'email', 'phone', 'company', 'tax_id']
    ordering = ['-created_at']
