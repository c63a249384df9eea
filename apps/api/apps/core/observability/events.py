"""
Domain events logging helpers.

Provides structured event logging for authorization and audit operations.
"""
from typing import Dict, Optional, Iterable
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'permission_denied', 'role_permissions_updated')
        entity_type: Type of entity (e.g., 'RolePermission', 'AuditLog')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, failure, blocked, ...)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'role_permissions_updated',
            entity_type='RolePermission',
            entity_id='receptionist',
            result='success',
            permissions_count=2,
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'conflict']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_permission_denied(role: str, path: str, policy: str, missing: Iterable[str]):
    """Log a blocked permission check."""
    log_domain_event(
        'permission_denied',
        entity_type='RolePermission',
        entity_id=role,
        result='blocked',
        path=path,
        policy=policy,
        missing_permissions=sorted(missing),
    )


def log_role_permissions_updated(role: str, permissions_count: int):
    """Log a wholesale replacement of a role's permission set."""
    log_domain_event(
        'role_permissions_updated',
        entity_type='RolePermission',
        entity_id=role,
        result='success',
        permissions_count=permissions_count,
    )


def log_audit_write_failed(action: str, resource: str, exception_type: str):
    """Log an audit log entry that could not be persisted."""
    log_domain_event(
        'audit_log_write_failed',
        entity_type='AuditLog',
        result='failure',
        action=action,
        resource=resource,
        exception_type=exception_type,
    )
