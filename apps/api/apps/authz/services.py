"""
Permission store: catalog reads, role permission replacement and
one-time initialization of the defaults.

Role permission sets are read from the database on every call. There is
no in-process cache, so a revoked permission takes effect on the next
request.
"""
import logging

from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from apps.audit.models import AuditActionChoices
from apps.audit.services import AuditLogService
from apps.authz.defaults import (
    ALL_PERMISSION_CODES,
    DEFAULT_PERMISSIONS,
    DEFAULT_ROLE_PERMISSIONS,
    default_permissions_for_role,
)
from apps.authz.models import Permission, RoleChoices, RolePermission
from apps.core.exceptions import ConflictError
from apps.core.observability import log_domain_event, metrics
from apps.core.observability.events import log_role_permissions_updated

logger = logging.getLogger(__name__)


def parse_role(value):
    """Return ``value`` as a RoleChoices member or raise a validation error."""
    try:
        return RoleChoices(value)
    except ValueError:
        raise ValidationError({'role': [f'Invalid role: {value}']}) from None


# ============================================================================
# Reads
# ============================================================================

def list_permissions():
    return Permission.objects.filter(is_active=True).order_by('module', 'name')


def list_role_permissions():
    return RolePermission.objects.filter(is_active=True).order_by('role')


def get_role_permission(role):
    """Active RolePermission for ``role``, or None when none is stored."""
    role = parse_role(role)
    return RolePermission.objects.filter(role=role, is_active=True).first()


@metrics.track_duration(metrics.permission_check_duration_seconds)
def get_permissions_for_role(role):
    """
    Permission codes granted to ``role``; empty when no active record exists.

    Stored codes are trusted as-is (no catalog join), so the result may
    contain codes whose catalog entry was disabled after the grant.
    """
    record = get_role_permission(role)
    if record is None:
        return frozenset()
    return frozenset(record.permissions)


def has_permission(role, code):
    return code in get_permissions_for_role(role)


# ============================================================================
# Writes
# ============================================================================

def _invalid_permission_ids(permission_ids):
    """Codes in ``permission_ids`` with no active catalog entry (exact match)."""
    requested = set(permission_ids)
    known = set(
        Permission.objects.filter(code__in=requested, is_active=True)
        .values_list('code', flat=True)
    )
    return sorted(requested - known)


def _invalid_permissions_error(invalid):
    return ValidationError({
        'permissions': [f"Invalid permissions: {', '.join(invalid)}"],
        'invalidPermissions': invalid,
    })


def _replace(role, permission_ids, description):
    defaults = {'permissions': list(dict.fromkeys(permission_ids)), 'is_active': True}
    if description is not None:
        defaults['description'] = description
    role_permission, _created = RolePermission.objects.update_or_create(
        role=role,
        defaults=defaults,
    )
    metrics.role_permission_updates_total.labels(role=role).inc()
    log_role_permissions_updated(role, len(role_permission.permissions))
    return role_permission


def _log_role_update(role, actor, request):
    AuditLogService.log_system_activity(
        AuditActionChoices.SETTINGS_UPDATED,
        actor,
        'Role Permissions',
        request=request,
        details=f'Updated permissions for role: {role}',
        metadata={'role': role},
    )


def set_role_permissions(role, permission_ids, description=None, actor=None, request=None):
    """
    Replace ``role``'s permission set with exactly ``permission_ids``.

    Every id is checked against the active catalog first; if any is
    unknown nothing is written and the error names all of them. Omitted
    permissions are removed (replace, not merge). Concurrent writers are
    not serialized: the last one wins.
    """
    role = parse_role(role)
    invalid = _invalid_permission_ids(permission_ids)
    if invalid:
        raise _invalid_permissions_error(invalid)

    role_permission = _replace(role, permission_ids, description)
    _log_role_update(role, actor, request)
    return role_permission


def set_many_role_permissions(entries, actor=None, request=None):
    """
    Bulk form of ``set_role_permissions``.

    ``entries`` is a list of ``{'role', 'permissions', 'description'}``.
    All roles and ids are validated before any write, and the writes share
    one transaction, so either every role is replaced or none is.
    """
    roles = [parse_role(entry['role']) for entry in entries]

    requested = [code for entry in entries for code in entry['permissions']]
    invalid = _invalid_permission_ids(requested)
    if invalid:
        raise _invalid_permissions_error(invalid)

    with transaction.atomic():
        updated = [
            _replace(role, entry['permissions'], entry.get('description'))
            for role, entry in zip(roles, entries)
        ]

    for role_permission in updated:
        _log_role_update(role_permission.role, actor, request)

    return updated


def _seed_role(role):
    granted = default_permissions_for_role(role)
    _codes, description = DEFAULT_ROLE_PERMISSIONS[role]
    role_permission, _created = RolePermission.objects.update_or_create(
        role=role,
        defaults={
            # catalog order
            'permissions': [code for code in ALL_PERMISSION_CODES if code in granted],
            'description': description,
            'is_active': True,
        },
    )
    return role_permission


def initialize_defaults(actor=None, request=None):
    """
    Seed the permission catalog and the default grant for every role.

    Refuses with a conflict when any Permission already exists, including
    when a concurrent initializer commits first. Role records written
    before the catalog existed are overwritten with the defaults and
    reactivated. Nothing is re-seeded.
    """
    if Permission.objects.exists():
        log_domain_event('permissions_initialize_rejected', entity_type='Permission', result='conflict')
        raise ConflictError('Permissions already initialized')

    with transaction.atomic():
        try:
            with transaction.atomic():
                permissions = Permission.objects.bulk_create([
                    Permission(code=code, name=name, description=description, module=module)
                    for code, name, description, module in DEFAULT_PERMISSIONS
                ])
        except IntegrityError:
            log_domain_event('permissions_initialize_rejected', entity_type='Permission', result='conflict')
            raise ConflictError('Permissions already initialized')

        role_permissions = [_seed_role(role) for role in RoleChoices]

    log_domain_event(
        'permissions_initialized',
        entity_type='Permission',
        result='success',
        permissions_created=len(permissions),
        role_permissions_created=len(role_permissions),
    )

    AuditLogService.log_system_activity(
        AuditActionChoices.SETTINGS_UPDATED,
        actor,
        'Permission System',
        request=request,
        details='Initialized default permissions and role permissions',
    )

    return {
        'permissionsCreated': len(permissions),
        'rolePermissionsCreated': len(role_permissions),
    }
