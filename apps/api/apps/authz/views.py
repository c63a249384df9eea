"""
Authz views for the permission catalog and role permissions.
"""
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated

from apps.authz import services
from apps.authz.permissions import IsAdmin
from apps.authz.serializers import (
    PermissionSerializer,
    RolePermissionBulkSerializer,
    RolePermissionSerializer,
    RolePermissionUpdateSerializer,
)
from apps.core.responses import success_response


class PermissionViewSet(viewsets.ViewSet):
    """
    ViewSet for the permission system.

    Endpoints:
    - GET  /api/v1/permissions/                    - Active permissions (Admin)
    - POST /api/v1/permissions/initialize/         - Seed defaults once (Admin)
    - GET  /api/v1/permissions/roles/              - Active role bindings (Admin)
    - PUT  /api/v1/permissions/roles/              - Replace several roles' sets (Admin)
    - GET  /api/v1/permissions/roles/{role}/       - One role's binding (Admin)
    - PUT  /api/v1/permissions/roles/{role}/       - Replace one role's set (Admin)
    - GET  /api/v1/permissions/check/{permission}/ - Does the caller's role hold it? (any user)
    """
    permission_classes = [IsAdmin]

    def list(self, request):
        serializer = PermissionSerializer(services.list_permissions(), many=True)
        return success_response(serializer.data)

    @action(detail=False, methods=['post'])
    def initialize(self, request):
        result = services.initialize_defaults(actor=request.user, request=request)
        return success_response(
            result,
            message='Permissions initialized successfully',
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=['get', 'put'], url_path='roles')
    def roles(self, request):
        if request.method == 'GET':
            serializer = RolePermissionSerializer(services.list_role_permissions(), many=True)
            return success_response(serializer.data)

        payload = RolePermissionBulkSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        updated = services.set_many_role_permissions(
            payload.validated_data['rolePermissions'],
            actor=request.user,
            request=request,
        )
        return success_response(
            RolePermissionSerializer(updated, many=True).data,
            message='Role permissions updated successfully',
        )

    @action(detail=False, methods=['get', 'put'], url_path=r'roles/(?P<role>[^/.]+)')
    def role_detail(self, request, role=None):
        if request.method == 'GET':
            role_permission = services.get_role_permission(role)
            if role_permission is None:
                raise NotFound(f'Role permissions not found for: {role}')
            return success_response(RolePermissionSerializer(role_permission).data)

        payload = RolePermissionUpdateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        role_permission = services.set_role_permissions(
            role,
            payload.validated_data['permissions'],
            description=payload.validated_data.get('description'),
            actor=request.user,
            request=request,
        )
        return success_response(
            RolePermissionSerializer(role_permission).data,
            message='Role permissions updated successfully',
        )

    @action(
        detail=False,
        methods=['get'],
        url_path=r'check/(?P<permission>[^/]+)',
        permission_classes=[IsAuthenticated],
    )
    def check(self, request, permission=None):
        role = request.user.role
        return success_response({
            'hasPermission': services.has_permission(role, permission),
            'permission': permission,
            'role': role,
        })
