from rest_framework import serializers

from .models import Employee, EmployeeActivity


class EmployeeActivitySerializer(serializers.ModelSerializer):
    employee_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = EmployeeActivity
        fields = ['id', 'employee_id', 'activity_type', 'description', 'metadata', 'created_at']
        read_only_fields = ['created_at']


class EmployeeSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)
    auth_user = serializers.SerializerMethodField()

    class Meta:
        model = Employee
        fields = [
            'id', 'user_id', 'name', 'email', 'role', 'salary', 'position', 'hire_date',
            'is_active', 'last_login', 'auth_user', 'created_at', 'updated_at'
        ]
        read_only_fields = ['last_login', 'created_at', 'updated_at']

    def validate_email(self, value):
        return value.strip().lower()

    def get_auth_user(self, obj):
        user = obj.user
        return {
            'id': user.id,
            'username': user.username,
            'email': user.email,
            'role': user.role,
            'is_active': user.is_active,
            'last_login': user.last_login,
            'date_joined': user.date_joined,
        }
