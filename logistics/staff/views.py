import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from logistics.core.permissions import IsAdminRole
from logistics.core.responses import success_response, error_response, validation_error_response
from logistics.core.utils import create_audit_log, diff_fields
from logistics.core.validators import missing_fields
from .models import Employee
from .serializers import EmployeeSerializer, EmployeeActivitySerializer
from .services import create_employee_with_account, sync_account, delete_employee_with_account

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ['name', 'email', 'role', 'salary', 'position', 'hire_date']
DEFAULT_ACTIVITY_LIMIT = 50


def _employee_payload(data):
    return {k: v for k, v in data.items() if k != 'password'}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def employee_list_create(request):
    """List employees (search, role, is_active filters) or create one with its login account"""
    if request.method == 'GET':
        employees = Employee.objects.select_related('user').all()
        search = request.query_params.get('search')
        role = request.query_params.get('role')
        is_active = request.query_params.get('is_active')
        if search:
            employees = employees.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(position__icontains=search)
            )
        if role and role != 'all':
            employees = employees.filter(role=role)
        if is_active in ('true', 'false'):
            employees = employees.filter(is_active=is_active == 'true')
        return success_response(EmployeeSerializer(employees, many=True).data)

    missing = missing_fields(request.data, REQUIRED_FIELDS)
    if missing:
        return error_response(f"Le champ {missing[0]} est requis")

    serializer = EmployeeSerializer(data=_employee_payload(request.data))
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    try:
        employee, temp_password = create_employee_with_account(
            serializer.validated_data, password=request.data.get('password'),
        )
    except IntegrityError as e:
        logger.warning(f"Employee account creation failed: {str(e)}")
        return error_response('Un compte existe déjà pour cet email', status.HTTP_409_CONFLICT)

    create_audit_log(request=request, action='create', model_name='Employee', object_id=employee.id, object_name=employee.name)
    data = EmployeeSerializer(employee).data
    if temp_password:
        data['temporary_password'] = temp_password
    return success_response(data, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def employee_detail(request, pk):
    employee = Employee.objects.select_related('user').filter(pk=pk).first()
    if employee is None:
        return error_response('Employee not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(EmployeeSerializer(employee).data)

    if request.method == 'PUT':
        if not request.data.get('name') or not request.data.get('email'):
            return error_response('Nom et email sont requis')
        serializer = EmployeeSerializer(employee, data=_employee_payload(request.data), partial=True)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        changes = diff_fields(employee, serializer.validated_data)
        try:
            with transaction.atomic():
                employee = serializer.save()
                sync_account(employee, password=request.data.get('password'))
        except IntegrityError as e:
            logger.warning(f"Employee {pk} account sync failed: {str(e)}")
            return error_response('Un compte existe déjà pour cet email', status.HTTP_409_CONFLICT)
        create_audit_log(
            request=request, action='update', model_name='Employee', object_id=employee.id,
            object_name=employee.name, changes=changes,
        )
        return success_response(EmployeeSerializer(employee).data)

    employee_id, name = employee.id, employee.name
    delete_employee_with_account(employee)
    create_audit_log(request=request, action='delete', model_name='Employee', object_id=employee_id, object_name=name)
    return success_response(message='Employee deleted successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def employee_activities(request, pk):
    """Latest activities of an employee (limit, type filters) or record one"""
    employee = Employee.objects.filter(pk=pk).first()
    if employee is None:
        return error_response('Employee not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        try:
            limit = int(request.query_params.get('limit', DEFAULT_ACTIVITY_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_ACTIVITY_LIMIT
        activities = employee.activities.order_by('-created_at')
        activity_type = request.query_params.get('type')
        if activity_type and activity_type != 'all':
            activities = activities.filter(activity_type=activity_type)
        return success_response(EmployeeActivitySerializer(activities[:max(limit, 1)], many=True).data)

    serializer = EmployeeActivitySerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    activity = serializer.save(employee=employee)
    return success_response(EmployeeActivitySerializer(activity).data, status.HTTP_201_CREATED)
