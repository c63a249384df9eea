from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from apps.audit.models import AuditActionChoices
from apps.audit.services import AuditLogService

from .models import User, Permission, RolePermission


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['email', 'first_name', 'last_name', 'role', 'is_active', 'is_staff', 'created_at']
    list_filter = ['role', 'is_active', 'is_staff']
    search_fields = ['email', 'first_name', 'last_name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'last_login']

    fieldsets = (
        (None, {'fields': ('id', 'email', 'password')}),
        ('Personal Info', {'fields': ('first_name', 'last_name')}),
        ('Access', {'fields': ('role', 'is_active', 'is_staff', 'is_superuser')}),
        ('Important dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'first_name', 'last_name', 'role', 'is_active', 'is_staff'),
        }),
    )

    ordering = ['email']


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'module', 'is_active']
    list_filter = ['module', 'is_active']
    search_fields = ['code', 'name']
    readonly_fields = ['id', 'code', 'created_at', 'updated_at']


@admin.register(RolePermission)
class RolePermissionAdmin(admin.ModelAdmin):
    """
    Read and deactivate only. Permission sets are replaced through the API
    so that every change is validated against the catalog. Deactivations
    made here are audited like API updates.
    """
    list_display = ['role', 'description', 'is_active', 'updated_at']
    list_filter = ['is_active']
    readonly_fields = ['id', 'role', 'permissions', 'created_at', 'updated_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        state = 'active' if obj.is_active else 'inactive'
        AuditLogService.log_system_activity(
            AuditActionChoices.SETTINGS_UPDATED,
            request.user,
            'Role Permissions',
            request=request,
            details=f'Marked role {obj.role} {state} from admin',
            metadata={'role': obj.role, 'isActive': obj.is_active},
        )
