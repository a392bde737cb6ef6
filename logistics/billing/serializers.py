from rest_framework import serializers

from logistics.parties.models import Customer
from logistics.shipping.models import Order
from .models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    customer_id = serializers.PrimaryKeyRelatedField(
        source='customer', queryset=Customer.objects.all(), required=False, allow_null=True
    )
    order_id = serializers.PrimaryKeyRelatedField(
        source='order', queryset=Order.objects.all(), required=False, allow_null=True
    )
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    order_number = serializers.CharField(source='order.order_number', read_only=True, default=None)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoice_number', 'customer_id', 'customer_name', 'order_id', 'order_number',
            'issue_date', 'due_date', 'status', 'subtotal', 'tax_rate', 'tax_amount',
            'total_amount', 'currency', 'notes', 'payment_date', 'payment_method',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['invoice_number', 'tax_amount', 'total_amount', 'created_at', 'updated_at']

    def validate(self, attrs):
        issue_date = attrs.get('issue_date', getattr(self.instance, 'issue_date', None))
        due_date = attrs.get('due_date', getattr(self.instance, 'due_date', None))
        if issue_date and due_date and due_date < issue_date:
            raise serializers.ValidationError({'due_date': "La date d'échéance précède la date d'émission."})
        return attrs
