from rest_framework import serializers

from logistics.parties.models import Client
from logistics.shipping.models import Container, Order, Package, TrackingEvent


class PublicOrderSerializer(serializers.ModelSerializer):
    """Order fields safe to expose on the public tracking page"""
    container_code = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'client_name', 'client_email', 'service_type', 'origin',
            'destination', 'weight', 'value', 'status', 'estimated_delivery', 'container_code',
            'qr_code', 'created_at', 'updated_at'
        ]


class PublicPackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Package
        fields = ['id', 'qr_code', 'reference', 'description', 'weight', 'status', 'last_scan_at', 'created_at', 'updated_at']


class PublicClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ['id', 'name', 'company']


class PublicContainerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Container
        fields = ['id', 'code', 'vessel', 'departure_port', 'arrival_port', 'etd', 'eta', 'status']


class PublicTrackingEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrackingEvent
        fields = ['id', 'status', 'location', 'description', 'event_date']
