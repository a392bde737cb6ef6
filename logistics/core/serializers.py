from rest_framework import serializers
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role', 'is_active', 'is_staff', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class AuditLogSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    user_email = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ['id', 'action', 'description', 'changes', 'created_at', 'user_name', 'user_email']

    def get_user_name(self, obj):
        if not obj.user:
            return 'Système'
        return obj.user.get_full_name() or obj.user.username

    def get_user_email(self, obj):
        return obj.user.email if obj.user else None
