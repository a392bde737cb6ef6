from django.contrib import admin
from .models import InventoryItem


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['reference', 'type', 'client', 'status', 'location', 'container', 'date_ajout']
    list_filter = ['type', 'status']
    search_fields = ['reference', 'description', 'client']
    ordering = ['-created_at']
