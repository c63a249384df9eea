"""
Tests for the permission store: catalog reads, wholesale replacement of
role permission sets, and one-time initialization of the defaults.
"""
import pytest
from rest_framework.exceptions import ValidationError

from apps.audit.models import AuditActionChoices, AuditLog
from apps.authz import services
from apps.authz.defaults import DEFAULT_PERMISSIONS, DEFAULT_ROLE_PERMISSIONS, default_permissions_for_role
from apps.authz.models import Permission, RoleChoices, RolePermission
from apps.core.exceptions import ConflictError


# ============================================================================
# Defaults
# ============================================================================

class TestDefaults:
    """The default grant is a total function over the role enumeration."""

    def test_every_role_has_a_default_grant(self):
        assert set(DEFAULT_ROLE_PERMISSIONS) == set(RoleChoices)

    def test_admin_default_is_full_catalog(self):
        catalog = {code for code, _name, _description, _module in DEFAULT_PERMISSIONS}
        assert default_permissions_for_role('admin') == frozenset(catalog)

    def test_role_defaults_only_reference_catalog_codes(self):
        catalog = {code for code, _name, _description, _module in DEFAULT_PERMISSIONS}
        for role in RoleChoices:
            assert default_permissions_for_role(role) <= catalog

    def test_catalog_codes_are_unique(self):
        codes = [code for code, _name, _description, _module in DEFAULT_PERMISSIONS]
        assert len(codes) == len(set(codes)) == 34

    def test_unknown_role_has_no_default(self):
        with pytest.raises(ValueError):
            default_permissions_for_role('nurse')


# ============================================================================
# Initialization
# ============================================================================

@pytest.mark.django_db
class TestInitializeDefaults:

    def test_seeds_catalog_and_role_grants(self):
        result = services.initialize_defaults()

        assert result == {'permissionsCreated': 34, 'rolePermissionsCreated': 3}
        assert Permission.objects.count() == 34
        assert set(RolePermission.objects.values_list('role', flat=True)) == {
            'admin', 'dermatologist', 'receptionist'
        }

    def test_seeded_role_sets_match_defaults(self):
        services.initialize_defaults()

        for role in RoleChoices:
            assert services.get_permissions_for_role(role) == default_permissions_for_role(role)

    def test_records_system_audit_event(self, admin_user):
        services.initialize_defaults(actor=admin_user)

        entry = AuditLog.objects.get(resource='Permission System')
        assert entry.action == AuditActionChoices.SETTINGS_UPDATED
        assert entry.severity == 'HIGH'
        assert entry.user == admin_user
        assert entry.details == 'Initialized default permissions and role permissions'

    def test_second_call_conflicts_and_leaves_catalog_unchanged(self):
        services.initialize_defaults()
        before = sorted(Permission.objects.values_list('code', 'name', 'is_active'))

        with pytest.raises(ConflictError) as exc_info:
            services.initialize_defaults()

        assert str(exc_info.value.detail) == 'Permissions already initialized'
        assert sorted(Permission.objects.values_list('code', 'name', 'is_active')) == before
        assert RolePermission.objects.count() == 3

    def test_conflicts_when_any_permission_exists(self):
        Permission.objects.create(code='custom_permission', name='Custom', description='Custom', module='Custom')

        with pytest.raises(ConflictError):
            services.initialize_defaults()

        assert Permission.objects.count() == 1
        assert RolePermission.objects.count() == 0

    def test_overwrites_role_records_written_before_catalog(self):
        services.set_role_permissions('receptionist', [])
        RolePermission.objects.create(role='dermatologist', permissions=[], is_active=False)

        result = services.initialize_defaults()

        assert result == {'permissionsCreated': 34, 'rolePermissionsCreated': 3}
        assert RolePermission.objects.count() == 3
        for role in RoleChoices:
            assert services.get_permissions_for_role(role) == default_permissions_for_role(role)

    def test_seeded_codes_follow_catalog_order(self):
        services.initialize_defaults()

        catalog = [code for code, _name, _description, _module in DEFAULT_PERMISSIONS]
        stored = RolePermission.objects.get(role='receptionist').permissions
        assert stored == [code for code in catalog if code in stored]


# ============================================================================
# Reads
# ============================================================================

@pytest.mark.django_db
class TestReads:

    def test_list_permissions_ordered_by_module_then_name(self, seeded_permissions):
        permissions = list(services.list_permissions())

        keys = [(p.module, p.name) for p in permissions]
        assert keys == sorted(keys)
        assert permissions[0].code == 'analytics_export'

    def test_list_permissions_excludes_inactive(self, seeded_permissions):
        Permission.objects.filter(code='backup_restore').update(is_active=False)

        codes = {p.code for p in services.list_permissions()}
        assert 'backup_restore' not in codes
        assert len(codes) == 33

    def test_list_role_permissions_ordered_by_role(self, seeded_permissions):
        roles = [rp.role for rp in services.list_role_permissions()]
        assert roles == ['admin', 'dermatologist', 'receptionist']

    def test_missing_record_means_no_permissions(self):
        assert services.get_role_permission('receptionist') is None
        assert services.get_permissions_for_role('receptionist') == frozenset()
        assert services.has_permission('receptionist', 'patient_view') is False

    def test_inactive_record_means_no_permissions(self, seeded_permissions):
        RolePermission.objects.filter(role='dermatologist').update(is_active=False)

        assert services.get_role_permission('dermatologist') is None
        assert services.get_permissions_for_role('dermatologist') == frozenset()

    def test_invalid_role_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            services.get_role_permission('nurse')

        assert 'Invalid role: nurse' in str(exc_info.value.detail)

    def test_grants_are_not_revalidated_on_read(self, seeded_permissions):
        Permission.objects.filter(code='patient_view').update(is_active=False)

        assert services.has_permission('receptionist', 'patient_view') is True


# ============================================================================
# Replacement
# ============================================================================

@pytest.mark.django_db
class TestSetRolePermissions:

    def test_replace_not_merge(self, seeded_permissions):
        services.set_role_permissions('receptionist', ['appointment_view', 'billing_create'])
        services.set_role_permissions('receptionist', ['billing_view'])

        assert services.get_permissions_for_role('receptionist') == frozenset({'billing_view'})

    def test_granted_permission_passes_and_others_fail(self, seeded_permissions):
        services.set_role_permissions('dermatologist', ['audit_view'])

        assert services.has_permission('dermatologist', 'audit_view') is True
        assert services.has_permission('dermatologist', 'patient_view') is False

    def test_empty_set_revokes_everything(self, seeded_permissions):
        services.set_role_permissions('receptionist', [])

        assert services.get_permissions_for_role('receptionist') == frozenset()

    def test_duplicates_collapse(self, seeded_permissions):
        role_permission = services.set_role_permissions(
            'receptionist', ['billing_view', 'billing_view', 'patient_view']
        )

        assert role_permission.permissions == ['billing_view', 'patient_view']

    def test_creates_record_when_missing(self):
        Permission.objects.create(code='patient_view', name='View Patients', description='x', module='Patient Management')

        services.set_role_permissions('dermatologist', ['patient_view'], description='Clinic doctors')

        record = RolePermission.objects.get(role='dermatologist')
        assert record.permissions == ['patient_view']
        assert record.description == 'Clinic doctors'

    def test_replace_reactivates_inactive_record(self, seeded_permissions):
        RolePermission.objects.filter(role='receptionist').update(is_active=False)
        assert services.has_permission('receptionist', 'billing_view') is False

        services.set_role_permissions('receptionist', ['billing_view'])

        assert RolePermission.objects.get(role='receptionist').is_active is True
        assert services.has_permission('receptionist', 'billing_view') is True

    def test_description_kept_when_omitted(self, seeded_permissions):
        services.set_role_permissions('receptionist', ['billing_view'])

        record = RolePermission.objects.get(role='receptionist')
        assert record.description == 'Front desk staff with access to appointments and billing'

    def test_invalid_id_rejects_whole_update(self, seeded_permissions):
        before = services.get_permissions_for_role('receptionist')

        with pytest.raises(ValidationError) as exc_info:
            services.set_role_permissions('receptionist', ['billing_view', 'bogus_permission'])

        assert 'bogus_permission' in str(exc_info.value.detail)
        assert services.get_permissions_for_role('receptionist') == before

    def test_error_names_every_invalid_id(self, seeded_permissions):
        with pytest.raises(ValidationError) as exc_info:
            services.set_role_permissions(
                'receptionist', ['not_a_permission', 'billing_view', 'also_bogus']
            )

        message = str(exc_info.value.detail['permissions'][0])
        assert message == 'Invalid permissions: also_bogus, not_a_permission'

    def test_validation_is_case_sensitive(self, seeded_permissions):
        with pytest.raises(ValidationError) as exc_info:
            services.set_role_permissions('receptionist', ['Patient_View'])

        assert 'Patient_View' in str(exc_info.value.detail)

    def test_inactive_catalog_entry_rejected_on_write(self, seeded_permissions):
        Permission.objects.filter(code='backup_restore').update(is_active=False)

        with pytest.raises(ValidationError):
            services.set_role_permissions('admin', ['backup_restore'])

    def test_invalid_role_rejected_before_store_access(self, seeded_permissions):
        with pytest.raises(ValidationError) as exc_info:
            services.set_role_permissions('nurse', ['patient_view'])

        assert 'Invalid role: nurse' in str(exc_info.value.detail)
        assert not RolePermission.objects.filter(role='nurse').exists()

    def test_records_system_audit_event(self, seeded_permissions, admin_user):
        services.set_role_permissions('receptionist', ['billing_view'], actor=admin_user)

        entry = AuditLog.objects.get(resource='Role Permissions')
        assert entry.action == AuditActionChoices.SETTINGS_UPDATED
        assert entry.severity == 'HIGH'
        assert entry.details == 'Updated permissions for role: receptionist'
        assert entry.user_email == admin_user.email

    def test_no_audit_event_when_rejected(self, seeded_permissions):
        with pytest.raises(ValidationError):
            services.set_role_permissions('receptionist', ['bogus'])

        assert not AuditLog.objects.filter(resource='Role Permissions').exists()


@pytest.mark.django_db
class TestSetManyRolePermissions:

    def test_applies_every_entry(self, seeded_permissions):
        services.set_many_role_permissions([
            {'role': 'receptionist', 'permissions': ['billing_view']},
            {'role': 'dermatologist', 'permissions': ['patient_view', 'analytics_view']},
        ])

        assert services.get_permissions_for_role('receptionist') == {'billing_view'}
        assert services.get_permissions_for_role('dermatologist') == {'patient_view', 'analytics_view'}

    def test_one_invalid_entry_blocks_all(self, seeded_permissions):
        receptionist_before = services.get_permissions_for_role('receptionist')

        with pytest.raises(ValidationError) as exc_info:
            services.set_many_role_permissions([
                {'role': 'receptionist', 'permissions': ['billing_view']},
                {'role': 'dermatologist', 'permissions': ['ghost_a', 'ghost_b']},
            ])

        message = str(exc_info.value.detail['permissions'][0])
        assert 'ghost_a' in message and 'ghost_b' in message
        assert services.get_permissions_for_role('receptionist') == receptionist_before
