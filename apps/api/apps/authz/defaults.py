"""
Default permission catalog and default role grants.

Seeded once by ``initialize_defaults``.
"""
from apps.authz.models import RoleChoices

# (code, name, description, module)
DEFAULT_PERMISSIONS = [
    # Patient Management
    ('patient_view', 'View Patients', 'View patient information', 'Patient Management'),
    ('patient_create', 'Create Patients', 'Create new patient records', 'Patient Management'),
    ('patient_edit', 'Edit Patients', 'Edit patient information', 'Patient Management'),
    ('patient_delete', 'Delete Patients', 'Delete patient records', 'Patient Management'),
    ('patient_medical_view', 'View Medical History', 'View patient medical history', 'Patient Management'),
    ('patient_medical_edit', 'Edit Medical History', 'Edit patient medical history', 'Patient Management'),

    # Appointment Management
    ('appointment_view', 'View Appointments', 'View appointment schedules', 'Appointment Management'),
    ('appointment_create', 'Create Appointments', 'Schedule new appointments', 'Appointment Management'),
    ('appointment_edit', 'Edit Appointments', 'Modify appointment details', 'Appointment Management'),
    ('appointment_delete', 'Delete Appointments', 'Cancel appointments', 'Appointment Management'),
    ('appointment_complete', 'Complete Appointments', 'Mark appointments as completed', 'Appointment Management'),

    # Prescription Management
    ('prescription_view', 'View Prescriptions', 'View prescription records', 'Prescription Management'),
    ('prescription_create', 'Create Prescriptions', 'Create new prescriptions', 'Prescription Management'),
    ('prescription_edit', 'Edit Prescriptions', 'Modify prescription details', 'Prescription Management'),
    ('prescription_delete', 'Delete Prescriptions', 'Delete prescription records', 'Prescription Management'),

    # Billing Management
    ('billing_view', 'View Billing', 'View billing information', 'Billing Management'),
    ('billing_create', 'Create Bills', 'Generate new bills', 'Billing Management'),
    ('billing_edit', 'Edit Bills', 'Modify billing details', 'Billing Management'),
    ('billing_delete', 'Delete Bills', 'Delete billing records', 'Billing Management'),
    ('billing_payment', 'Process Payments', 'Process bill payments', 'Billing Management'),

    # User Management
    ('user_view', 'View Users', 'View user accounts', 'User Management'),
    ('user_create', 'Create Users', 'Create new user accounts', 'User Management'),
    ('user_edit', 'Edit Users', 'Modify user account details', 'User Management'),
    ('user_delete', 'Delete Users', 'Delete user accounts', 'User Management'),
    ('user_permissions', 'Manage Permissions', 'Manage user permissions', 'User Management'),

    # Analytics
    ('analytics_view', 'View Analytics', 'View system analytics and reports', 'Analytics'),
    ('analytics_export', 'Export Reports', 'Export analytics reports', 'Analytics'),

    # Settings
    ('settings_view', 'View Settings', 'View system settings', 'Settings'),
    ('settings_edit', 'Edit Settings', 'Edit system settings', 'Settings'),

    # Backup
    ('backup_create', 'Create Backups', 'Create system backups', 'Backup'),
    ('backup_restore', 'Restore Backups', 'Restore system from backups', 'Backup'),
    ('backup_download', 'Download Backups', 'Download backup files', 'Backup'),

    # Audit Logs
    ('audit_view', 'View Audit Logs', 'View system audit logs', 'Audit Logs'),
    ('audit_export', 'Export Audit Logs', 'Export audit log reports', 'Audit Logs'),
]

ALL_PERMISSION_CODES = [code for code, _name, _description, _module in DEFAULT_PERMISSIONS]

# role -> (permission codes, description). Total over RoleChoices.
DEFAULT_ROLE_PERMISSIONS = {
    RoleChoices.ADMIN: (
        ALL_PERMISSION_CODES,
        'Full system access with all permissions',
    ),
    RoleChoices.DERMATOLOGIST: (
        [
            'patient_view',
            'patient_medical_view',
            'patient_medical_edit',
            'appointment_view',
            'appointment_complete',
            'prescription_view',
            'prescription_create',
            'prescription_edit',
            'analytics_view',
        ],
        'Medical staff with access to patient records and prescriptions',
    ),
    RoleChoices.RECEPTIONIST: (
        [
            'patient_view',
            'patient_create',
            'patient_edit',
            'appointment_view',
            'appointment_create',
            'appointment_edit',
            'appointment_delete',
            'billing_view',
            'billing_create',
            'billing_payment',
            'prescription_view',
        ],
        'Front desk staff with access to appointments and billing',
    ),
}


def default_permissions_for_role(role):
    """Default grant for a role; defined for every member of RoleChoices."""
    codes, _description = DEFAULT_ROLE_PERMISSIONS[RoleChoices(role)]
    return frozenset(codes)
