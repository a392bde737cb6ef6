"""URL configuration for the logistics project. Every API lives under /api/v1/."""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Danemo Administration"
admin.site.site_title = "Danemo Admin Portal"
admin.site.index_title = "Gestion logistique Danemo"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('logistics.core.urls')),
    path('api/v1/', include('logistics.parties.urls')),
    path('api/v1/', include('logistics.shipping.urls')),
    path('api/v1/', include('logistics.tracking.urls')),
    path('api/v1/', include('logistics.inventory.urls')),
    path('api/v1/', include('logistics.staff.urls')),
    path('api/v1/', include('logistics.billing.urls')),
    path('api/v1/', include('logistics.notifications.urls')),
    path('api/v1/', include('logistics.reports.urls')),
]
