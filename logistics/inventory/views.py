import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from logistics.core.responses import success_response, error_response, validation_error_response
from logistics.core.utils import create_audit_log, diff_fields
from .filters import InventoryItemFilter
from .models import InventoryItem
from .serializers import InventoryItemSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def inventory_list_create(request):
    """List inventory items (search, type, status filters) or add one"""
    if request.method == 'GET':
        queryset = InventoryItem.objects.select_related('container').all()
        filterset = InventoryItemFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return validation_error_response(filterset.errors)
        return success_response(InventoryItemSerializer(filterset.qs, many=True).data)

    if not str(request.data.get('reference') or '').strip():
        return error_response('Missing required field: reference')

    serializer = InventoryItemSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    item = serializer.save()
    logger.info(f"Inventory item created: {item.reference}")
    create_audit_log(request=request, action='create', model_name='InventoryItem', object_id=item.id, object_reference=item.reference)
    return success_response(InventoryItemSerializer(item).data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_detail(request, pk):
    item = InventoryItem.objects.select_related('container').filter(pk=pk).first()
    if item is None:
        return error_response('Inventory item not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(InventoryItemSerializer(item).data)

    if request.method == 'PUT':
        serializer = InventoryItemSerializer(item, data=request.data, partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        changes = diff_fields(item, serializer.validated_data)
        item = serializer.save()
        create_audit_log(
            request=request, action='update', model_name='InventoryItem', object_id=item.id,
            object_reference=item.reference, changes=changes,
        )
        return success_response(InventoryItemSerializer(item).data)

    item_id, reference = item.id, item.reference
    item.delete()
    create_audit_log(request=request, action='delete', model_name='InventoryItem', object_id=item_id, object_reference=reference)
    return success_response(message='Inventory item deleted successfully')
