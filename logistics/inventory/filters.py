import django_filters
from django.db.models import Q

from .models import InventoryItem


class InventoryItemFilter(django_filters.FilterSet):
    """Inventory filters; 'all' disables the type and status filters"""
    search = django_filters.CharFilter(method='filter_search', label='Search')
    type = django_filters.CharFilter(method='filter_unless_all', label='Type')
    status = django_filters.CharFilter(method='filter_unless_all', label='Status')
    container_id = django_filters.NumberFilter(field_name='container_id', lookup_expr='exact')

    class Meta:
        model = InventoryItem
        fields = ['search', 'type', 'status', 'container_id']

    def filter_search(self, queryset, name, value):
        value = (value or '').strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(reference__icontains=value) |
            Q(description__icontains=value) |
            Q(client__icontains=value)
        )

    def filter_unless_all(self, queryset, name, value):
        if not value or value == 'all':
            return queryset
        return queryset.filter(**{name: value})
