"""
Authz permission gates for DRF views.

Two kinds of gate:

- Role gates (``IsAdmin``, ``HasRole``): fixed role membership, used by the
  permission administration and audit log endpoints.
- Permission gates (``require_permission``, ``require_any_permission``,
  ``require_all_permissions``): read the caller's role permission set from
  the store on every request and write a CRITICAL ``PERMISSION_DENIED``
  audit entry for every denial.

A missing caller is a precondition failure (401, never audited). A store
read failure fails closed with a 500, distinct from a 403.
"""
import logging

from django.db import DatabaseError
from rest_framework import permissions
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from apps.audit.models import AuditActionChoices
from apps.audit.services import AuditLogService
from apps.authz.models import RoleChoices
from apps.authz.services import get_permissions_for_role
from apps.core.exceptions import PermissionCheckFailed
from apps.core.observability import metrics
from apps.core.observability.correlation import bind_request_user
from apps.core.observability.events import log_permission_denied

logger = logging.getLogger(__name__)


class HasRole(permissions.BasePermission):
    """Allow users whose role is in ``allowed_roles``."""
    allowed_roles = frozenset()

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.role in self.allowed_roles


class IsAdmin(HasRole):
    """
    Permission class that only allows Admin role users.

    Used for permission administration and audit log endpoints.
    """
    allowed_roles = frozenset({RoleChoices.ADMIN})


class PermissionGate(permissions.BasePermission):
    """
    Base class for permission-set gates. Subclasses set ``required`` and
    ``policy`` and implement ``missing`` and ``denial_message``.
    """
    required = ()
    policy = 'single'

    def missing(self, granted):
        raise NotImplementedError

    def denial_message(self, missing):
        raise NotImplementedError

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            raise NotAuthenticated('Authentication required')

        bind_request_user(user)

        try:
            granted = get_permissions_for_role(user.role)
        except DatabaseError:
            metrics.permission_checks_total.labels(policy=self.policy, result='error').inc()
            logger.exception(
                'Permission store read failed',
                extra={'event': 'permission_check_failed', 'role': user.role, 'path': request.path},
            )
            raise PermissionCheckFailed()

        missing = self.missing(granted)
        if not missing:
            metrics.permission_checks_total.labels(policy=self.policy, result='allowed').inc()
            return True

        self.deny(request, user, missing)

    def deny(self, request, user, missing):
        metrics.permission_checks_total.labels(policy=self.policy, result='denied').inc()
        metrics.permission_denied_total.labels(role=user.role).inc()
        log_permission_denied(user.role, request.path, self.policy, missing)

        message = self.denial_message(missing)
        AuditLogService.log_security_event(
            AuditActionChoices.PERMISSION_DENIED,
            user,
            request.path,
            request=request,
            details=f'{message} for role {user.role}',
            metadata={
                'method': request.method,
                'policy': self.policy,
                'requiredPermissions': list(self.required),
                'missingPermissions': sorted(missing),
            },
        )
        raise PermissionDenied(message)


class _SinglePermissionGate(PermissionGate):
    policy = 'single'

    def missing(self, granted):
        return [] if self.required[0] in granted else [self.required[0]]

    def denial_message(self, missing):
        return f'Permission denied: {self.required[0]}'


class _AnyPermissionGate(PermissionGate):
    policy = 'any'

    def missing(self, granted):
        if granted.intersection(self.required):
            return []
        return list(self.required)

    def denial_message(self, missing):
        return f"Permission denied: requires one of {', '.join(self.required)}"


class _AllPermissionsGate(PermissionGate):
    policy = 'all'

    def missing(self, granted):
        return [code for code in self.required if code not in granted]

    def denial_message(self, missing):
        return f"Permission denied: missing {', '.join(missing)}"


def require_permission(code):
    """Gate passing iff the caller's role holds ``code``."""
    return type(f'RequirePermission_{code}', (_SinglePermissionGate,), {'required': (code,)})


def require_any_permission(codes):
    """Gate passing iff the caller's role holds at least one of ``codes``."""
    return type('RequireAnyPermission', (_AnyPermissionGate,), {'required': tuple(codes)})


def require_all_permissions(codes):
    """Gate passing iff the caller's role holds every one of ``codes``."""
    return type('RequireAllPermissions', (_AllPermissionsGate,), {'required': tuple(codes)})
