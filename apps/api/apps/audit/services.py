"""
Audit log writer.

Audit logging is best-effort by intent: every write runs in its own
savepoint, and any failure is logged, counted and dropped. No caller ever
sees an audit error and nothing is retried or queued, so an audit store
outage cannot take the business operation that triggered it down with it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from apps.audit.models import AuditLog, AuditSeverityChoices
from apps.core.observability import metrics
from apps.core.observability.events import log_audit_write_failed

logger = logging.getLogger(__name__)

UNKNOWN = 'Unknown'


@dataclass(frozen=True)
class AuditEntry:
    """One event to record. Unset severity/success take the service defaults."""
    action: str
    resource: str
    details: str
    user: Any = None
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    user_role: Optional[str] = None
    resource_id: Optional[str] = None
    severity: Optional[str] = None
    success: Optional[bool] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None


def get_client_ip(request):
    """First hop of X-Forwarded-For, else REMOTE_ADDR."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def _describe(action):
    """``PATIENT_VIEWED`` -> ``patient viewed``"""
    return str(action).replace('_', ' ').lower()


def _user_name(user):
    if user is None:
        return None
    return f'{user.first_name} {user.last_name}'.strip() or user.email


def _clip_to_columns(values):
    """Cut string values to their column's max_length (headers and emails are unbounded)."""
    for name, value in values.items():
        if not isinstance(value, str):
            continue
        max_length = AuditLog._meta.get_field(name).max_length
        if max_length is not None and len(value) > max_length:
            values[name] = value[:max_length]
    return values


def _authenticated(user):
    """Return ``user`` when it is a real account, else None (AnonymousUser)."""
    if user is not None and getattr(user, 'is_authenticated', False):
        return user
    return None


class AuditLogService:
    """
    Central audit writer plus one convenience logger per event category.

    Every method returns the saved ``AuditLog`` or ``None`` when the write
    failed; callers are not expected to look at the result.
    """

    @staticmethod
    def log(entry: AuditEntry, request=None) -> Optional[AuditLog]:
        user = _authenticated(entry.user)

        values = {
            'user': user,
            'user_email': entry.user_email or (user.email if user else None),
            'user_name': entry.user_name or _user_name(user),
            'user_role': entry.user_role or (user.role if user else None),
            'action': entry.action,
            'resource': entry.resource,
            'resource_id': str(entry.resource_id) if entry.resource_id is not None else None,
            'details': entry.details,
            'severity': entry.severity or AuditSeverityChoices.MEDIUM,
            'success': True if entry.success is None else entry.success,
            'metadata': entry.metadata or {},
            'error_message': entry.error_message,
            'timestamp': timezone.now(),
        }

        if request is not None:
            values['ip_address'] = get_client_ip(request) or UNKNOWN
            values['user_agent'] = request.META.get('HTTP_USER_AGENT') or UNKNOWN

        _clip_to_columns(values)

        try:
            with transaction.atomic():
                audit_log = AuditLog.objects.create(**values)
        except Exception as exc:
            metrics.audit_log_writes_total.labels(action=entry.action, result='failure').inc()
            logger.exception(
                'Audit log write failed',
                extra={'event': 'audit_log_write_failed', 'action': entry.action},
            )
            log_audit_write_failed(entry.action, entry.resource, exc.__class__.__name__)
            return None

        metrics.audit_log_writes_total.labels(action=entry.action, result='success').inc()
        return audit_log

    # ------------------------------------------------------------------
    # Category loggers
    # ------------------------------------------------------------------

    @staticmethod
    def log_auth(action, email, success=True, request=None, user=None, error_message=None):
        """
        Authentication events. The attempted email is kept even when no
        user resolves (failed login).
        """
        if success:
            details = f'User {email} {_describe(action)} successfully'
        else:
            # LOGIN_FAILED -> "Failed login attempt for ..."
            details = f"Failed {_describe(action).removesuffix(' failed')} attempt for {email}"

        return AuditLogService.log(AuditEntry(
            action=action,
            resource='Authentication',
            details=details,
            user=user,
            user_email=email,
            severity=AuditSeverityChoices.LOW if success else AuditSeverityChoices.HIGH,
            success=success,
            error_message=error_message,
        ), request)

    @staticmethod
    def log_user_management(action, actor, target_user, request=None, details=None):
        return AuditLogService.log(AuditEntry(
            action=action,
            resource='User Management',
            resource_id=str(target_user.pk),
            details=details or f'{_describe(action).capitalize()}: {target_user.email}',
            user=actor,
            severity=AuditSeverityChoices.HIGH,
            metadata={
                'targetUserId': str(target_user.pk),
                'targetUserEmail': target_user.email,
                'targetUserRole': getattr(target_user, 'role', None),
            },
        ), request)

    @staticmethod
    def log_patient_activity(action, actor, patient, request=None, details=None):
        severity = (
            AuditSeverityChoices.LOW if 'VIEWED' in action
            else AuditSeverityChoices.MEDIUM
        )
        patient_name = f'{patient.first_name} {patient.last_name}'.strip()
        return AuditLogService.log(AuditEntry(
            action=action,
            resource='Patient Data',
            resource_id=str(patient.pk),
            details=details or f'{_describe(action).capitalize()}: {patient_name}',
            user=actor,
            severity=severity,
            metadata={
                'patientId': str(patient.pk),
                'patientName': patient_name,
                'patientEmail': getattr(patient, 'email', None),
            },
        ), request)

    @staticmethod
    def log_appointment_activity(action, actor, appointment_id, appointment_date=None,
                                 patient_id=None, dermatologist_id=None, request=None, details=None):
        return AuditLogService.log(AuditEntry(
            action=action,
            resource='Appointment',
            resource_id=str(appointment_id),
            details=details or f'{_describe(action).capitalize()}: appointment {appointment_id}',
            user=actor,
            severity=AuditSeverityChoices.MEDIUM,
            metadata={
                'appointmentId': str(appointment_id),
                'appointmentDate': appointment_date,
                'patientId': str(patient_id) if patient_id else None,
                'dermatologistId': str(dermatologist_id) if dermatologist_id else None,
            },
        ), request)

    @staticmethod
    def log_prescription_activity(action, actor, prescription_id, patient_id=None,
                                  medication_count=0, request=None, details=None):
        return AuditLogService.log(AuditEntry(
            action=action,
            resource='Prescription',
            resource_id=str(prescription_id),
            details=details or f'{_describe(action).capitalize()}: prescription {prescription_id}',
            user=actor,
            severity=AuditSeverityChoices.MEDIUM,
            metadata={
                'prescriptionId': str(prescription_id),
                'patientId': str(patient_id) if patient_id else None,
                'medicationCount': medication_count,
            },
        ), request)

    @staticmethod
    def log_billing_activity(action, actor, billing_id, invoice_number, amount=None,
                             patient_id=None, request=None, details=None):
        return AuditLogService.log(AuditEntry(
            action=action,
            resource='Billing',
            resource_id=str(billing_id),
            details=details or f'{_describe(action).capitalize()}: billing record {invoice_number}',
            user=actor,
            severity=AuditSeverityChoices.MEDIUM,
            metadata={
                'billingId': str(billing_id),
                'invoiceNumber': invoice_number,
                'amount': amount,
                'patientId': str(patient_id) if patient_id else None,
            },
        ), request)

    @staticmethod
    def log_system_activity(action, actor, resource, request=None, details=None, metadata=None):
        """Settings, backups and permission administration."""
        return AuditLogService.log(AuditEntry(
            action=action,
            resource=resource,
            details=details or f'System {_describe(action)}: {resource}',
            user=actor,
            severity=AuditSeverityChoices.HIGH,
            metadata=metadata or {},
        ), request)

    @staticmethod
    def log_security_event(action, actor, resource, request=None, details=None, metadata=None):
        """Always CRITICAL, always recorded as a failed operation."""
        actor = _authenticated(actor)
        return AuditLogService.log(AuditEntry(
            action=action,
            resource=resource,
            details=details or f'Security event: {_describe(action)} on {resource}',
            user=actor,
            user_name=None if actor else UNKNOWN,
            severity=AuditSeverityChoices.CRITICAL,
            success=False,
            metadata=metadata or {},
        ), request)

