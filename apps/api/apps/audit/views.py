"""
Audit log views (Admin only).
"""
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from apps.audit import selectors
from apps.audit.models import AuditLog
from apps.audit.pagination import AuditLogPagination
from apps.audit.serializers import (
    AuditLogExportQuerySerializer,
    AuditLogQuerySerializer,
    AuditLogSerializer,
)
from apps.authz.permissions import IsAdmin
from apps.core.responses import success_response


class AuditLogViewSet(viewsets.GenericViewSet):
    """
    ViewSet for audit log queries.

    Endpoints:
    - GET /api/v1/audit-logs/         - Filtered, paginated list (newest first)
    - GET /api/v1/audit-logs/stats/   - Totals and breakdowns for a period
    - GET /api/v1/audit-logs/export/  - CSV download
    - GET /api/v1/audit-logs/{id}/    - One entry

    Query parameters (list):
    - ?page=1&limit=50
    - ?action=PERMISSION_DENIED, ?severity=CRITICAL, ?resource=..., ?userId=<uuid>
    - ?startDate=2024-01-01&endDate=2024-01-31 (inclusive bounds)
    - ?search=term - case-insensitive match on details, user email, user name

    There are no write endpoints: entries are append-only.
    """
    permission_classes = [IsAdmin]
    serializer_class = AuditLogSerializer
    pagination_class = AuditLogPagination
    queryset = AuditLog.objects.all()
    lookup_value_regex = '[0-9a-fA-F-]{36}'

    def list(self, request):
        params = AuditLogQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        filters = params.validated_data

        queryset = selectors.filter_audit_logs(
            action=filters.get('action'),
            severity=filters.get('severity'),
            resource=filters.get('resource'),
            user_id=filters.get('userId'),
            start_date=filters.get('startDate'),
            end_date=filters.get('endDate'),
            search=filters.get('search'),
        )

        page = self.paginator.paginate_queryset(
            queryset,
            request,
            view=self,
            page=filters['page'],
            limit=filters.get('limit'),
        )
        serializer = self.get_serializer(page, many=True)
        return self.paginator.get_paginated_response(serializer.data)

    def retrieve(self, request, pk=None):
        audit_log = AuditLog.objects.select_related('user').filter(pk=pk).first()
        if audit_log is None:
            raise NotFound('Audit log not found')
        return success_response(self.get_serializer(audit_log).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        stats = selectors.audit_log_stats(request.query_params.get('period', selectors.DEFAULT_STATS_PERIOD))
        stats['criticalEvents'] = self.get_serializer(stats['criticalEvents'], many=True).data
        return success_response(stats)

    @action(detail=False, methods=['get'])
    def export(self, request):
        params = AuditLogExportQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        content = selectors.export_audit_logs_csv(
            start_date=params.validated_data.get('startDate'),
            end_date=params.validated_data.get('endDate'),
        )

        filename = f'audit-logs-{timezone.now():%Y-%m-%d}.csv'
        response = HttpResponse(content, content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
