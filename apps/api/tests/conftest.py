"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Authenticated API clients by role
- Users by role
- Seeded permission catalog
- Model instances (Patient)
"""
import pytest
from rest_framework.test import APIClient

from apps.authz.models import RoleChoices, User
from apps.authz.services import initialize_defaults
from apps.clinical.models import Patient


def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ============================================================================
# User Fixtures
# ============================================================================

@pytest.fixture
def admin_user(db):
    """Admin role user (without authenticated client)."""
    return User.objects.create_user(
        email='admin@test.com',
        password='testpass123',
        first_name='Ada',
        last_name='Admin',
        role=RoleChoices.ADMIN,
        is_staff=True,
    )


@pytest.fixture
def dermatologist_user(db):
    """Dermatologist role user (without authenticated client)."""
    return User.objects.create_user(
        email='dermatologist@test.com',
        password='testpass123',
        first_name='Derek',
        last_name='Derm',
        role=RoleChoices.DERMATOLOGIST,
    )


@pytest.fixture
def receptionist_user(db):
    """Receptionist role user (without authenticated client)."""
    return User.objects.create_user(
        email='receptionist@test.com',
        password='testpass123',
        first_name='Rita',
        last_name='Desk',
        role=RoleChoices.RECEPTIONIST,
    )


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    """Authenticated API client with Admin role."""
    return _client_for(admin_user)


@pytest.fixture
def dermatologist_client(dermatologist_user):
    """Authenticated API client with Dermatologist role."""
    return _client_for(dermatologist_user)


@pytest.fixture
def receptionist_client(receptionist_user):
    """Authenticated API client with Receptionist role."""
    return _client_for(receptionist_user)


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def seeded_permissions(db):
    """Default permission catalog and role grants."""
    return initialize_defaults()


@pytest.fixture
def patient(db, admin_user):
    """Create a patient."""
    return Patient.objects.create(
        first_name='John',
        last_name='Doe',
        email='john.doe@test.com',
        phone='+33600000000',
        medical_history='Mild psoriasis since 2015',
        created_by=admin_user,
    )
