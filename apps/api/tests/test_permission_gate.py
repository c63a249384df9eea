"""
Tests for the permission gates, exercised through the patient endpoints.

- Allowed requests pass without any gate audit entry
- Every denial writes exactly one CRITICAL PERMISSION_DENIED entry
- Missing caller is a 401 with no audit entry
- Store read failure is a 500, distinct from a 403
"""
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from rest_framework import status

from apps.audit.models import AuditActionChoices, AuditLog
from apps.authz import services
from apps.authz.models import RolePermission
from apps.authz.permissions import (
    require_all_permissions,
    require_any_permission,
    require_permission,
)

PATIENTS = '/api/v1/patients/'


def denial_entries():
    return AuditLog.objects.filter(action=AuditActionChoices.PERMISSION_DENIED)


@pytest.mark.django_db
class TestPatientGatesByRole:
    """Default role grants applied to the patient endpoints."""

    @pytest.mark.parametrize('client_fixture,expected_status', [
        ('admin_client', status.HTTP_200_OK),
        ('dermatologist_client', status.HTTP_200_OK),
        ('receptionist_client', status.HTTP_200_OK),
    ])
    def test_list_patients_by_role(self, client_fixture, expected_status, request, seeded_permissions):
        client = request.getfixturevalue(client_fixture)
        response = client.get(PATIENTS)
        assert response.status_code == expected_status

    @pytest.mark.parametrize('client_fixture,expected_status', [
        ('admin_client', status.HTTP_201_CREATED),
        ('dermatologist_client', status.HTTP_403_FORBIDDEN),
        ('receptionist_client', status.HTTP_201_CREATED),
    ])
    def test_create_patient_by_role(self, client_fixture, expected_status, request, seeded_permissions):
        client = request.getfixturevalue(client_fixture)
        payload = {'first_name': 'Jane', 'last_name': 'Roe', 'email': 'jane.roe@example.com'}
        response = client.post(PATIENTS, payload, format='json')
        assert response.status_code == expected_status

    @pytest.mark.parametrize('client_fixture,expected_status', [
        ('admin_client', status.HTTP_204_NO_CONTENT),
        ('dermatologist_client', status.HTTP_403_FORBIDDEN),
        ('receptionist_client', status.HTTP_403_FORBIDDEN),
    ])
    def test_delete_patient_by_role(self, client_fixture, expected_status, request, seeded_permissions, patient):
        client = request.getfixturevalue(client_fixture)
        response = client.delete(f'{PATIENTS}{patient.id}/')
        assert response.status_code == expected_status

    @pytest.mark.parametrize('client_fixture,expected_status', [
        ('admin_client', status.HTTP_200_OK),
        ('dermatologist_client', status.HTTP_200_OK),
        ('receptionist_client', status.HTTP_403_FORBIDDEN),
    ])
    def test_view_medical_history_requires_any(self, client_fixture, expected_status, request, seeded_permissions, patient):
        client = request.getfixturevalue(client_fixture)
        response = client.get(f'{PATIENTS}{patient.id}/medical-history/')
        assert response.status_code == expected_status

    @pytest.mark.parametrize('client_fixture,expected_status', [
        ('admin_client', status.HTTP_200_OK),
        ('dermatologist_client', status.HTTP_200_OK),
        ('receptionist_client', status.HTTP_403_FORBIDDEN),
    ])
    def test_edit_medical_history_requires_all(self, client_fixture, expected_status, request, seeded_permissions, patient):
        client = request.getfixturevalue(client_fixture)
        response = client.post(
            f'{PATIENTS}{patient.id}/medical-history/',
            {'medical_history': 'Atopic dermatitis'},
            format='json',
        )
        assert response.status_code == expected_status


@pytest.mark.django_db
class TestDenialAudit:

    def test_denial_writes_exactly_one_critical_entry(self, dermatologist_client, dermatologist_user, seeded_permissions):
        response = dermatologist_client.post(
            PATIENTS, {'first_name': 'Jane', 'last_name': 'Roe'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert denial_entries().count() == 1

        entry = denial_entries().get()
        assert entry.severity == 'CRITICAL'
        assert entry.success is False
        assert entry.user == dermatologist_user
        assert entry.user_role == 'dermatologist'
        assert entry.resource == PATIENTS
        assert entry.details == 'Permission denied: patient_create for role dermatologist'
        assert entry.metadata['missingPermissions'] == ['patient_create']
        assert entry.metadata['method'] == 'POST'

    def test_denial_message_single(self, dermatologist_client, seeded_permissions):
        response = dermatologist_client.post(PATIENTS, {'first_name': 'A', 'last_name': 'B'}, format='json')

        assert response.data['success'] is False
        assert response.data['error']['code'] == 'permission_denied'
        assert response.data['error']['message'] == 'Permission denied: patient_create'

    def test_denial_message_any(self, receptionist_client, seeded_permissions, patient):
        response = receptionist_client.get(f'{PATIENTS}{patient.id}/medical-history/')

        assert response.data['error']['message'] == (
            'Permission denied: requires one of patient_medical_view, patient_medical_edit'
        )
        entry = denial_entries().get()
        assert entry.metadata['policy'] == 'any'
        assert sorted(entry.metadata['missingPermissions']) == ['patient_medical_edit', 'patient_medical_view']

    def test_denial_message_all_names_only_missing(self, receptionist_client, seeded_permissions, patient):
        response = receptionist_client.post(
            f'{PATIENTS}{patient.id}/medical-history/', {'medical_history': 'x'}, format='json'
        )

        assert response.data['error']['message'] == 'Permission denied: missing patient_medical_edit'
        assert denial_entries().get().metadata['missingPermissions'] == ['patient_medical_edit']

    def test_each_denial_is_audited_separately(self, dermatologist_client, seeded_permissions):
        for _ in range(3):
            dermatologist_client.post(PATIENTS, {'first_name': 'A', 'last_name': 'B'}, format='json')

        assert denial_entries().count() == 3

    def test_allowed_request_writes_no_audit_entry(self, receptionist_client, seeded_permissions):
        before = AuditLog.objects.count()

        response = receptionist_client.get(PATIENTS)

        assert response.status_code == status.HTTP_200_OK
        assert AuditLog.objects.count() == before

    def test_role_without_record_is_denied(self, receptionist_client):
        response = receptionist_client.get(PATIENTS)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert denial_entries().count() == 1

    def test_inactive_record_is_denied(self, dermatologist_client, seeded_permissions):
        RolePermission.objects.filter(role='dermatologist').update(is_active=False)

        response = dermatologist_client.get(PATIENTS)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_denied_request_does_not_reach_handler(self, dermatologist_client, seeded_permissions):
        dermatologist_client.post(PATIENTS, {'first_name': 'A', 'last_name': 'B'}, format='json')

        assert not AuditLog.objects.filter(action=AuditActionChoices.PATIENT_CREATED).exists()


@pytest.mark.django_db
class TestAuthenticationPrecondition:

    def test_unauthenticated_request_is_401_without_audit(self, api_client, seeded_permissions):
        before = AuditLog.objects.count()

        response = api_client.get(PATIENTS)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error']['code'] == 'not_authenticated'
        assert AuditLog.objects.count() == before

    def test_unauthenticated_write_is_401(self, api_client, seeded_permissions):
        response = api_client.post(PATIENTS, {'first_name': 'A', 'last_name': 'B'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert denial_entries().count() == 0


@pytest.mark.django_db
class TestStoreFailure:

    def test_store_read_failure_is_500_not_403(self, receptionist_client, seeded_permissions):
        with patch('apps.authz.permissions.get_permissions_for_role', side_effect=DatabaseError('store down')):
            response = receptionist_client.get(PATIENTS)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['error']['code'] == 'permission_check_failed'
        assert response.data['error']['message'] == 'Permission check failed'
        assert denial_entries().count() == 0


@pytest.mark.django_db
class TestNoStaleGrants:

    def test_revocation_applies_to_next_request(self, receptionist_client, seeded_permissions):
        assert receptionist_client.get(PATIENTS).status_code == status.HTTP_200_OK

        services.set_role_permissions('receptionist', ['appointment_view'])

        assert receptionist_client.get(PATIENTS).status_code == status.HTTP_403_FORBIDDEN

    def test_grant_applies_to_next_request(self, dermatologist_client, seeded_permissions):
        payload = {'first_name': 'A', 'last_name': 'B'}
        assert dermatologist_client.post(PATIENTS, payload, format='json').status_code == status.HTTP_403_FORBIDDEN

        services.set_role_permissions('dermatologist', ['patient_create'])

        assert dermatologist_client.post(PATIENTS, payload, format='json').status_code == status.HTTP_201_CREATED


class TestGateFactories:

    def test_single_gate_carries_code(self):
        gate = require_permission('patient_view')
        assert gate.required == ('patient_view',)
        assert gate.policy == 'single'

    def test_set_gates_carry_codes_in_order(self):
        assert require_any_permission(['a', 'b']).required == ('a', 'b')
        assert require_all_permissions(['c', 'd']).policy == 'all'

    def test_all_gate_reports_missing_subset(self):
        gate = require_all_permissions(['patient_view', 'patient_medical_edit'])()
        assert gate.missing(frozenset({'patient_view'})) == ['patient_medical_edit']
        assert gate.missing(frozenset({'patient_view', 'patient_medical_edit'})) == []

    def test_any_gate_passes_on_one_match(self):
        gate = require_any_permission(['patient_medical_view', 'patient_medical_edit'])()
        assert gate.missing(frozenset({'patient_medical_edit'})) == []
