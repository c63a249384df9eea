"""
Clinical views for Patient.
"""
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.audit.models import AuditActionChoices
from apps.audit.services import AuditLogService
from apps.authz.permissions import (
    IsAdmin,
    require_all_permissions,
    require_any_permission,
    require_permission,
)
from apps.clinical.models import Patient
from apps.clinical.serializers import PatientMedicalHistorySerializer, PatientSerializer


class PatientViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Patient endpoints.

    Endpoints:
    - GET    /api/v1/patients/                      - patient_view
    - POST   /api/v1/patients/                      - patient_create
    - GET    /api/v1/patients/{id}/                 - patient_view
    - PUT    /api/v1/patients/{id}/                 - patient_edit
    - PATCH  /api/v1/patients/{id}/                 - patient_edit
    - DELETE /api/v1/patients/{id}/                 - patient_delete (soft delete)
    - GET    /api/v1/patients/{id}/medical-history/ - patient_medical_view or patient_medical_edit
    - POST   /api/v1/patients/{id}/medical-history/ - patient_view and patient_medical_edit

    Query parameters:
    - ?q=search_term - Search by first name, last name or email

    Every operation records a patient audit event; a failed audit write
    never changes the response.
    """
    serializer_class = PatientSerializer

    action_permissions = {
        'list': [require_permission('patient_view')],
        'retrieve': [require_permission('patient_view')],
        'create': [require_permission('patient_create')],
        'update': [require_permission('patient_edit')],
        'partial_update': [require_permission('patient_edit')],
        'destroy': [require_permission('patient_delete')],
        'medical_history': [require_any_permission(['patient_medical_view', 'patient_medical_edit'])],
        'update_medical_history': [require_all_permissions(['patient_view', 'patient_medical_edit'])],
    }

    def get_permissions(self):
        permission_classes = self.action_permissions.get(self.action, [IsAdmin])
        return [permission() for permission in permission_classes]

    def get_queryset(self):
        queryset = Patient.objects.filter(is_deleted=False)

        q = self.request.query_params.get('q')
        if q:
            queryset = (
                queryset.filter(first_name__icontains=q)
                | queryset.filter(last_name__icontains=q)
                | queryset.filter(email__icontains=q)
            )

        return queryset.order_by('last_name', 'first_name')

    def _audit(self, action_name, patient):
        AuditLogService.log_patient_activity(action_name, self.request.user, patient, request=self.request)

    def retrieve(self, request, *args, **kwargs):
        patient = self.get_object()
        self._audit(AuditActionChoices.PATIENT_VIEWED, patient)
        return Response(self.get_serializer(patient).data)

    def perform_create(self, serializer):
        patient = serializer.save(created_by=self.request.user)
        self._audit(AuditActionChoices.PATIENT_CREATED, patient)

    def perform_update(self, serializer):
        patient = serializer.save()
        self._audit(AuditActionChoices.PATIENT_UPDATED, patient)

    def perform_destroy(self, instance):
        instance.is_deleted = True
        instance.save(update_fields=['is_deleted', 'updated_at'])
        self._audit(AuditActionChoices.PATIENT_DELETED, instance)

    @action(detail=True, methods=['get'], url_path='medical-history')
    def medical_history(self, request, pk=None):
        patient = self.get_object()
        self._audit(AuditActionChoices.PATIENT_VIEWED, patient)
        return Response(PatientMedicalHistorySerializer(patient).data)

    @medical_history.mapping.post
    def update_medical_history(self, request, pk=None):
        patient = self.get_object()
        serializer = PatientMedicalHistorySerializer(patient, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        self._audit(AuditActionChoices.PATIENT_MEDICAL_HISTORY_UPDATED, patient)
        return Response(serializer.data)
