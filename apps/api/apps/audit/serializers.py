"""
Audit serializers.

Response keys are camelCase to match the frontend contract.
"""
from django.conf import settings
from rest_framework import serializers

from apps.audit.models import AuditActionChoices, AuditLog, AuditSeverityChoices

DATE_INPUT_FORMATS = ['iso-8601', '%Y-%m-%d']


class AuditLogSerializer(serializers.ModelSerializer):
    """Read-only representation of one audit entry."""
    userId = serializers.UUIDField(source='user_id', read_only=True)
    userEmail = serializers.CharField(source='user_email', read_only=True)
    userName = serializers.CharField(source='user_name', read_only=True)
    userRole = serializers.CharField(source='user_role', read_only=True)
    resourceId = serializers.CharField(source='resource_id', read_only=True)
    ipAddress = serializers.CharField(source='ip_address', read_only=True)
    userAgent = serializers.CharField(source='user_agent', read_only=True)
    errorMessage = serializers.CharField(source='error_message', read_only=True)

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'userId',
            'userEmail',
            'userName',
            'userRole',
            'action',
            'resource',
            'resourceId',
            'details',
            'severity',
            'ipAddress',
            'userAgent',
            'timestamp',
            'metadata',
            'success',
            'errorMessage',
        ]
        read_only_fields = fields


class AuditLogQuerySerializer(serializers.Serializer):
    """
    Query parameters for GET /api/v1/audit-logs/.

    Unknown actions or severities, unparseable dates and out of range
    paging values are rejected with a 400.
    """
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1)
    action = serializers.ChoiceField(required=False, choices=AuditActionChoices.choices)
    severity = serializers.ChoiceField(required=False, choices=AuditSeverityChoices.choices)
    resource = serializers.CharField(required=False)
    userId = serializers.UUIDField(required=False)
    startDate = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)
    endDate = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)
    search = serializers.CharField(required=False)

    def validate_limit(self, value):
        max_limit = settings.AUDIT_LOG_MAX_PAGE_SIZE
        if value > max_limit:
            raise serializers.ValidationError(f'Ensure this value is less than or equal to {max_limit}.')
        return value

    def validate(self, attrs):
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError({'endDate': 'endDate must not be before startDate.'})
        return attrs


class AuditLogExportQuerySerializer(serializers.Serializer):
    """Query parameters for GET /api/v1/audit-logs/export/."""
    startDate = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)
    endDate = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)
