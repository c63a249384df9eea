# Generated migration for audit app

import uuid
import django.core.serializers.json
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_email', models.CharField(blank=True, max_length=255, null=True)),
                ('user_name', models.CharField(blank=True, max_length=255, null=True)),
                ('user_role', models.CharField(blank=True, max_length=20, null=True)),
                ('action', models.CharField(choices=[('LOGIN', 'Login'), ('LOGOUT', 'Logout'), ('LOGIN_FAILED', 'Login Failed'), ('PASSWORD_CHANGED', 'Password Changed'), ('USER_CREATED', 'User Created'), ('USER_UPDATED', 'User Updated'), ('USER_DELETED', 'User Deleted'), ('USER_STATUS_CHANGED', 'User Status Changed'), ('PATIENT_CREATED', 'Patient Created'), ('PATIENT_UPDATED', 'Patient Updated'), ('PATIENT_DELETED', 'Patient Deleted'), ('PATIENT_VIEWED', 'Patient Viewed'), ('PATIENT_MEDICAL_HISTORY_UPDATED', 'Patient Medical History Updated'), ('APPOINTMENT_CREATED', 'Appointment Created'), ('APPOINTMENT_UPDATED', 'Appointment Updated'), ('APPOINTMENT_DELETED', 'Appointment Deleted'), ('APPOINTMENT_STATUS_CHANGED', 'Appointment Status Changed'), ('PRESCRIPTION_CREATED', 'Prescription Created'), ('PRESCRIPTION_UPDATED', 'Prescription Updated'), ('PRESCRIPTION_DELETED', 'Prescription Deleted'), ('PRESCRIPTION_VIEWED', 'Prescription Viewed'), ('BILLING_CREATED', 'Billing Created'), ('BILLING_UPDATED', 'Billing Updated'), ('BILLING_DELETED', 'Billing Deleted'), ('BILLING_VIEWED', 'Billing Viewed'), ('INVOICE_GENERATED', 'Invoice Generated'), ('SETTINGS_UPDATED', 'Settings Updated'), ('BACKUP_CREATED', 'Backup Created'), ('BACKUP_DOWNLOADED', 'Backup Downloaded'), ('ANALYTICS_VIEWED', 'Analytics Viewed'), ('REPORT_GENERATED', 'Report Generated'), ('UNAUTHORIZED_ACCESS_ATTEMPT', 'Unauthorized Access Attempt'), ('PERMISSION_DENIED', 'Permission Denied')], max_length=50)),
                ('resource', models.CharField(max_length=255)),
                ('resource_id', models.CharField(blank=True, max_length=255, null=True)),
                ('details', models.TextField()),
                ('severity', models.CharField(choices=[('LOW', 'Low'), ('MEDIUM', 'Medium'), ('HIGH', 'High'), ('CRITICAL', 'Critical')], default='MEDIUM', max_length=10)),
                ('ip_address', models.CharField(blank=True, max_length=64, null=True)),
                ('user_agent', models.CharField(blank=True, max_length=255, null=True)),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('metadata', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder, help_text='Domain identifiers for the event (patient id, invoice number, ...)')),
                ('success', models.BooleanField(default=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('user', models.ForeignKey(blank=True, help_text='Acting user (null for anonymous or system events)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'db_table': 'audit_log',
                'ordering': ['-timestamp'],
                'indexes': [
                    models.Index(fields=['-timestamp'], name='idx_audit_log_timestamp'),
                    models.Index(fields=['user', '-timestamp'], name='idx_audit_log_user_ts'),
                    models.Index(fields=['action', '-timestamp'], name='idx_audit_log_action_ts'),
                    models.Index(fields=['severity', '-timestamp'], name='idx_audit_log_severity_ts'),
                    models.Index(fields=['resource', '-timestamp'], name='idx_audit_log_resource_ts'),
                ],
            },
        ),
    ]
