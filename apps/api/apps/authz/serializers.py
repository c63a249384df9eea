"""
Authz serializers for the permission catalog and role permissions.

Response keys are camelCase to match the frontend contract.
"""
from rest_framework import serializers
from apps.authz.models import Permission, RoleChoices, RolePermission


class PermissionSerializer(serializers.ModelSerializer):
    """
    Catalog entry. The permission code is the public ``id``.

    Used for:
    - Listing permissions (GET /api/v1/permissions/)
    """
    id = serializers.CharField(source='code', read_only=True)
    isActive = serializers.BooleanField(source='is_active', read_only=True)

    class Meta:
        model = Permission
        fields = ['id', 'name', 'description', 'module', 'isActive']
        read_only_fields = fields


class RolePermissionSerializer(serializers.ModelSerializer):
    """
    Role binding.

    Used for:
    - Listing role bindings (GET /api/v1/permissions/roles/)
    - Fetching one role (GET /api/v1/permissions/roles/{role}/)
    """
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = RolePermission
        fields = ['id', 'role', 'permissions', 'description', 'isActive', 'createdAt', 'updatedAt']
        read_only_fields = fields


class RolePermissionWriteSerializer(serializers.Serializer):
    """One role's replacement permission set."""
    role = serializers.CharField()
    permissions = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_role(self, value):
        if value not in RoleChoices.values:
            raise serializers.ValidationError(f'Invalid role: {value}')
        return value


class RolePermissionUpdateSerializer(serializers.Serializer):
    """Single-role body for PUT /api/v1/permissions/roles/{role}/ (role comes from the URL)."""
    permissions = serializers.ListField(child=serializers.CharField(), allow_empty=True)
    description = serializers.CharField(required=False, allow_blank=True, max_length=255)


class RolePermissionBulkSerializer(serializers.Serializer):
    """Body for PUT /api/v1/permissions/roles/."""
    rolePermissions = RolePermissionWriteSerializer(many=True, allow_empty=False)

    def validate_rolePermissions(self, value):
        roles = [entry['role'] for entry in value]
        duplicates = sorted({role for role in roles if roles.count(role) > 1})
        if duplicates:
            raise serializers.ValidationError(
                f"Duplicate roles: {', '.join(duplicates)}"
            )
        return value
