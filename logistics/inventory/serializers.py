from rest_framework import serializers

from logistics.shipping.models import Container
from .models import InventoryItem


class InventoryItemSerializer(serializers.ModelSerializer):
    container_id = serializers.PrimaryKeyRelatedField(
        source='container', queryset=Container.objects.all(), required=False, allow_null=True
    )
    container_code = serializers.SerializerMethodField()

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'type', 'reference', 'description', 'client', 'status', 'location',
            'poids', 'dimensions', 'valeur', 'date_ajout', 'container_id', 'container_code',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_container_code(self, obj):
        return obj.container.code if obj.container_id else None

    def to_internal_value(self, data):
        # Forms send an empty string for "no container"
        if hasattr(data, 'get') and data.get('container_id') == '':
            data = data.copy() if hasattr(data, 'copy') else dict(data)
            data['container_id'] = None
        return super().to_internal_value(data)
