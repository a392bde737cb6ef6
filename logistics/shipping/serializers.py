from rest_framework import serializers

from logistics.parties.models import Client, Customer
from .models import Container, Order, Package, TrackingEvent


class ContainerSerializer(serializers.ModelSerializer):
    client_id = serializers.PrimaryKeyRelatedField(
        source='client', queryset=Client.objects.all(), required=False, allow_null=True
    )
    client_name = serializers.CharField(source='client.name', read_only=True, default=None)

    class Meta:
        model = Container
        fields = [
            'id', 'code', 'vessel', 'departure_port', 'arrival_port', 'etd', 'eta',
            'status', 'client_id', 'client_name', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']


class OrderSerializer(serializers.ModelSerializer):
    customer_id = serializers.PrimaryKeyRelatedField(
        source='customer', queryset=Customer.objects.all(), required=False, allow_null=True
    )
    container_id = serializers.PrimaryKeyRelatedField(
        source='container', queryset=Container.objects.all(), required=False, allow_null=True
    )
    container_code = serializers.CharField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'client_name', 'client_email', 'client_phone',
            'recipient_name', 'recipient_email', 'recipient_phone', 'recipient_address',
            'recipient_city', 'recipient_postal_code', 'recipient_country',
            'service_type', 'origin', 'destination', 'weight', 'value', 'status',
            'estimated_delivery', 'customer_id', 'container_id', 'container_code',
            'qr_code', 'created_at', 'updated_at'
        ]
        read_only_fields = ['order_number', 'qr_code', 'created_at', 'updated_at']


class ContainerInventoryOrderSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'client_name', 'client_email', 'service_type',
            'origin', 'destination', 'status', 'value', 'weight', 'created_at'
        ]


class PackageSerializer(serializers.ModelSerializer):
    client_id = serializers.PrimaryKeyRelatedField(
        source='client', queryset=Client.objects.all(), required=False, allow_null=True
    )
    container_id = serializers.PrimaryKeyRelatedField(
        source='container', queryset=Container.objects.all(), required=False, allow_null=True
    )
    order_id = serializers.PrimaryKeyRelatedField(
        source='order', queryset=Order.objects.all(), required=False, allow_null=True
    )

    class Meta:
        model = Package
        fields = [
            'id', 'qr_code', 'reference', 'description', 'client_id', 'container_id', 'order_id',
            'weight', 'value', 'status', 'last_scan_at', 'created_at', 'updated_at'
        ]
        read_only_fields = ['last_scan_at', 'created_at', 'updated_at']


class TrackingEventSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(read_only=True)
    package_id = serializers.IntegerField(read_only=True)
    event_date = serializers.DateTimeField(required=False)

    class Meta:
        model = TrackingEvent
        fields = ['id', 'order_id', 'package_id', 'status', 'location', 'description', 'operator', 'event_date', 'created_at']
        read_only_fields = ['created_at']
