from django.contrib import admin
from .models import Employee, EmployeeActivity


class EmployeeActivityInline(admin.TabularInline):
    model = EmployeeActivity
    extra = 0
    readonly_fields = ['activity_type', 'description', 'metadata', 'created_at']


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'role', 'position', 'hire_date', 'is_active', 'last_login']
    list_filter = ['role', 'is_active']
    search_fields = ['name', 'email', 'position']
    inlines = [EmployeeActivityInline]


@admin.register(EmployeeActivity)
class EmployeeActivityAdmin(admin.ModelAdmin):
    list_display = ['employee', 'activity_type', 'description', 'created_at']
    list_filter = ['activity_type']
    search_fields = ['employee__name', 'description']
    ordering = ['-created_at']
