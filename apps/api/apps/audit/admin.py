from django.contrib import admin
from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['timestamp', 'action', 'severity', 'resource', 'user_email', 'success']
    list_filter = ['severity', 'action', 'success', 'timestamp']
    search_fields = ['details', 'user_email', 'user_name', 'resource']
    date_hierarchy = 'timestamp'

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        # Audit logs are written by the application only
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        # Audit logs should not be deleted
        return False
