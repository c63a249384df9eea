from django.contrib import admin
from .models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_name', 'email', 'is_deleted', 'created_at']
    list_filter = ['is_deleted']
    search_fields = ['first_name', 'last_name', 'email']
    readonly_fields = ['id', 'created_by', 'created_at', 'updated_at']
