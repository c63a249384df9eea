"""
Audit models: audit_log
"""
import uuid
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


# ============================================================================
# Enums
# ============================================================================

class AuditActionChoices(models.TextChoices):
    """Stable action identifiers, consumed by the frontend and CSV exports."""
    # Authentication
    LOGIN = 'LOGIN', 'Login'
    LOGOUT = 'LOGOUT', 'Logout'
    LOGIN_FAILED = 'LOGIN_FAILED', 'Login Failed'
    PASSWORD_CHANGED = 'PASSWORD_CHANGED', 'Password Changed'

    # User management
    USER_CREATED = 'USER_CREATED', 'User Created'
    USER_UPDATED = 'USER_UPDATED', 'User Updated'
    USER_DELETED = 'USER_DELETED', 'User Deleted'
    USER_STATUS_CHANGED = 'USER_STATUS_CHANGED', 'User Status Changed'

    # Patients
    PATIENT_CREATED = 'PATIENT_CREATED', 'Patient Created'
    PATIENT_UPDATED = 'PATIENT_UPDATED', 'Patient Updated'
    PATIENT_DELETED = 'PATIENT_DELETED', 'Patient Deleted'
    PATIENT_VIEWED = 'PATIENT_VIEWED', 'Patient Viewed'
    PATIENT_MEDICAL_HISTORY_UPDATED = 'PATIENT_MEDICAL_HISTORY_UPDATED', 'Patient Medical History Updated'

    # Appointments
    APPOINTMENT_CREATED = 'APPOINTMENT_CREATED', 'Appointment Created'
    APPOINTMENT_UPDATED = 'APPOINTMENT_UPDATED', 'Appointment Updated'
    APPOINTMENT_DELETED = 'APPOINTMENT_DELETED', 'Appointment Deleted'
    APPOINTMENT_STATUS_CHANGED = 'APPOINTMENT_STATUS_CHANGED', 'Appointment Status Changed'

    # Prescriptions
    PRESCRIPTION_CREATED = 'PRESCRIPTION_CREATED', 'Prescription Created'
    PRESCRIPTION_UPDATED = 'PRESCRIPTION_UPDATED', 'Prescription Updated'
    PRESCRIPTION_DELETED = 'PRESCRIPTION_DELETED', 'Prescription Deleted'
    PRESCRIPTION_VIEWED = 'PRESCRIPTION_VIEWED', 'Prescription Viewed'

    # Billing
    BILLING_CREATED = 'BILLING_CREATED', 'Billing Created'
    BILLING_UPDATED = 'BILLING_UPDATED', 'Billing Updated'
    BILLING_DELETED = 'BILLING_DELETED', 'Billing Deleted'
    BILLING_VIEWED = 'BILLING_VIEWED', 'Billing Viewed'
    INVOICE_GENERATED = 'INVOICE_GENERATED', 'Invoice Generated'

    # System
    SETTINGS_UPDATED = 'SETTINGS_UPDATED', 'Settings Updated'
    BACKUP_CREATED = 'BACKUP_CREATED', 'Backup Created'
    BACKUP_DOWNLOADED = 'BACKUP_DOWNLOADED', 'Backup Downloaded'
    ANALYTICS_VIEWED = 'ANALYTICS_VIEWED', 'Analytics Viewed'
    REPORT_GENERATED = 'REPORT_GENERATED', 'Report Generated'

    # Security
    UNAUTHORIZED_ACCESS_ATTEMPT = 'UNAUTHORIZED_ACCESS_ATTEMPT', 'Unauthorized Access Attempt'
    PERMISSION_DENIED = 'PERMISSION_DENIED', 'Permission Denied'


class AuditSeverityChoices(models.TextChoices):
    """Escalation order: LOW < MEDIUM < HIGH < CRITICAL."""
    LOW = 'LOW', 'Low'
    MEDIUM = 'MEDIUM', 'Medium'
    HIGH = 'HIGH', 'High'
    CRITICAL = 'CRITICAL', 'Critical'


# ============================================================================
# Audit Log
# ============================================================================

class AuditLogImmutableError(Exception):
    """Raised on any attempt to modify or delete a written audit entry."""


class AuditLogQuerySet(models.QuerySet):
    """Append-only: bulk update and delete are refused."""

    def update(self, **kwargs):
        # on_delete=SET_NULL detaches entries from a deleted user through update()
        if kwargs == {'user': None}:
            return super().update(**kwargs)
        raise AuditLogImmutableError('Audit log entries cannot be updated')

    def delete(self):
        raise AuditLogImmutableError('Audit log entries cannot be deleted')


class AuditLog(models.Model):
    """
    Immutable record of one notable system event.

    Actor columns are denormalized (email, name, role) so the entry stays
    readable after the user is deleted, and so failed logins can record the
    attempted email without a resolved user.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='audit_logs',
        help_text='Acting user (null for anonymous or system events)'
    )
    user_email = models.CharField(max_length=255, blank=True, null=True)
    user_name = models.CharField(max_length=255, blank=True, null=True)
    user_role = models.CharField(max_length=20, blank=True, null=True)

    action = models.CharField(
        max_length=50,
        choices=AuditActionChoices.choices
    )
    resource = models.CharField(max_length=255)
    resource_id = models.CharField(max_length=255, blank=True, null=True)
    details = models.TextField()
    severity = models.CharField(
        max_length=10,
        choices=AuditSeverityChoices.choices,
        default=AuditSeverityChoices.MEDIUM
    )

    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.CharField(max_length=255, blank=True, null=True)
    timestamp = models.DateTimeField(default=timezone.now)

    metadata = models.JSONField(
        default=dict,
        blank=True,
        encoder=DjangoJSONEncoder,
        help_text='Domain identifiers for the event (patient id, invoice number, ...)'
    )
    success = models.BooleanField(default=True)
    error_message = models.TextField(blank=True, null=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        db_table = 'audit_log'
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['-timestamp'], name='idx_audit_log_timestamp'),
            models.Index(fields=['user', '-timestamp'], name='idx_audit_log_user_ts'),
            models.Index(fields=['action', '-timestamp'], name='idx_audit_log_action_ts'),
            models.Index(fields=['severity', '-timestamp'], name='idx_audit_log_severity_ts'),
            models.Index(fields=['resource', '-timestamp'], name='idx_audit_log_resource_ts'),
        ]

    def __str__(self):
        return f'{self.timestamp:%Y-%m-%d %H:%M:%S} {self.action} {self.resource}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutableError('Audit log entries cannot be updated')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutableError('Audit log entries cannot be deleted')
