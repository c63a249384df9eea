"""
Audit log read side: filtered listing, period statistics and CSV export.
"""
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Q
from django.utils import timezone

from apps.audit.models import AuditLog, AuditSeverityChoices

STATS_PERIODS = {
    '24h': timedelta(hours=24),
    '7d': timedelta(days=7),
    '30d': timedelta(days=30),
    '90d': timedelta(days=90),
}
DEFAULT_STATS_PERIOD = '7d'

CSV_HEADER = [
    'Timestamp',
    'User',
    'Email',
    'Role',
    'Action',
    'Resource',
    'Resource ID',
    'Details',
    'Severity',
    'IP Address',
    'Success',
    'Error Message',
]


def _date_range(queryset, start_date=None, end_date=None):
    if start_date:
        queryset = queryset.filter(timestamp__gte=start_date)
    if end_date:
        queryset = queryset.filter(timestamp__lte=end_date)
    return queryset


def filter_audit_logs(
    action=None,
    severity=None,
    resource=None,
    user_id=None,
    start_date=None,
    end_date=None,
    search=None,
):
    """Audit entries matching every given filter, newest first."""
    queryset = AuditLog.objects.select_related('user')

    if action:
        queryset = queryset.filter(action=action)
    if severity:
        queryset = queryset.filter(severity=severity)
    if resource:
        queryset = queryset.filter(resource=resource)
    if user_id:
        queryset = queryset.filter(user_id=user_id)

    queryset = _date_range(queryset, start_date, end_date)

    if search:
        queryset = queryset.filter(
            Q(details__icontains=search)
            | Q(user_email__icontains=search)
            | Q(user_name__icontains=search)
        )

    return queryset.order_by('-timestamp')


def _breakdown(queryset, field):
    rows = (
        queryset.order_by()
        .values(field)
        .annotate(count=Count('id'))
        .order_by('-count', field)
    )
    return [{'_id': row[field], 'count': row['count']} for row in rows]


def audit_log_stats(period=DEFAULT_STATS_PERIOD):
    """
    Totals and breakdowns for the window ending now.

    Unknown periods fall back to 7 days. Returns the recent CRITICAL
    entries as model instances; the caller serializes them.
    """
    if period not in STATS_PERIODS:
        period = DEFAULT_STATS_PERIOD

    since = timezone.now() - STATS_PERIODS[period]
    queryset = AuditLog.objects.filter(timestamp__gte=since)

    return {
        'period': period,
        'totalLogs': queryset.count(),
        'failedOperations': queryset.filter(success=False).count(),
        'uniqueUsers': (
            queryset.filter(user__isnull=False)
            .order_by()
            .values('user')
            .distinct()
            .count()
        ),
        'logsBySeverity': _breakdown(queryset, 'severity'),
        'logsByAction': _breakdown(queryset, 'action')[:settings.AUDIT_LOG_TOP_ACTIONS_LIMIT],
        'logsByResource': _breakdown(queryset, 'resource'),
        'criticalEvents': list(
            queryset.filter(severity=AuditSeverityChoices.CRITICAL)
            .select_related('user')
            .order_by('-timestamp')[:settings.AUDIT_LOG_RECENT_CRITICAL_LIMIT]
        ),
    }


# ============================================================================
# CSV export
# ============================================================================

def _csv_field(value, always_quote=False):
    """
    RFC 4180 field: quoted when asked to, or when it holds a comma, quote or
    line break; internal quotes are doubled.
    """
    text = '' if value is None else str(value)
    if always_quote or any(char in text for char in ',"\r\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def _actor_column(audit_log, attribute, fallback):
    value = getattr(audit_log, attribute)
    if not value and audit_log.user is not None:
        value = fallback(audit_log.user)
    return value or 'Unknown'


def audit_log_csv_row(audit_log):
    """One CSV line for ``audit_log``. The details column is always quoted."""
    fields = [
        _csv_field(audit_log.timestamp.isoformat()),
        _csv_field(_actor_column(audit_log, 'user_name', lambda user: user.full_name)),
        _csv_field(_actor_column(audit_log, 'user_email', lambda user: user.email)),
        _csv_field(_actor_column(audit_log, 'user_role', lambda user: user.role)),
        _csv_field(audit_log.action),
        _csv_field(audit_log.resource),
        _csv_field(audit_log.resource_id),
        _csv_field(audit_log.details, always_quote=True),
        _csv_field(audit_log.severity),
        _csv_field(audit_log.ip_address),
        'true' if audit_log.success else 'false',
        _csv_field(audit_log.error_message),
    ]
    return ','.join(fields)


def export_audit_logs_csv(start_date=None, end_date=None):
    """CSV document of every entry in the range, newest first."""
    queryset = _date_range(
        AuditLog.objects.select_related('user'), start_date, end_date
    ).order_by('-timestamp')

    lines = [','.join(CSV_HEADER)]
    lines.extend(audit_log_csv_row(audit_log) for audit_log in queryset.iterator())
    return '\n'.join(lines) + '\n'
