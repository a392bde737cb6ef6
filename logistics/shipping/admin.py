from django.contrib import admin
from .models import Container, Order, Package, TrackingEvent


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    fk_name = 'order'
    extra = 0
    fields = ['status', 'location', 'description', 'operator', 'event_date']


@admin.register(Container)
class ContainerAdmin(admin.ModelAdmin):
    list_display = ['code', 'vessel', 'departure_port', 'arrival_port', 'etd', 'eta', 'status']
    list_filter = ['status']
    search_fields = ['code', 'vessel']
    ordering = ['-created_at']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'client_name', 'client_email', 'service_type', 'status', 'container', 'created_at']
    list_filter = ['status', 'service_type']
    search_fields = ['order_number', 'client_name', 'client_email', 'qr_code']
    readonly_fields = ['order_number', 'qr_code', 'created_at', 'updated_at']
    inlines = [TrackingEventInline]


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ['qr_code', 'reference', 'client', 'container', 'order', 'status', 'last_scan_at']
    list_filter = ['status']
    search_fields = ['qr_code', 'reference', 'description']


@admin.register(TrackingEvent)
class TrackingEventAdmin(admin.ModelAdmin):
    list_display = ['order', 'package', 'status', 'location', 'operator', 'event_date']
    list_filter = ['status']
    search_fields = ['order__order_number', 'package__qr_code', 'location']
    ordering = ['-event_date']
