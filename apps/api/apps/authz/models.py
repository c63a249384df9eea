"""
Authz models: auth_user, authz_permission, authz_role_permission
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin


# ============================================================================
# Enums
# ============================================================================

class RoleChoices(models.TextChoices):
    """
    Closed set of clinic roles.

    - ADMIN: clinic administrator, full system access
    - DERMATOLOGIST: clinical staff (patient records, prescriptions)
    - RECEPTIONIST: front desk (appointments, billing)
    """
    ADMIN = 'admin', 'Admin'
    DERMATOLOGIST = 'dermatologist', 'Dermatologist'
    RECEPTIONIST = 'receptionist', 'Receptionist'


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', RoleChoices.ADMIN)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Clinic staff account. Authentication is email + password (JWT issued
    by simplejwt); authorization is driven by ``role`` alone.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255)
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    role = models.CharField(
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.RECEPTIONIST,
    )
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['email'], name='idx_user_email'),
            models.Index(fields=['role', 'is_active'], name='idx_user_role_active'),
        ]

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        return f'{self.first_name} {self.last_name}'.strip()


# ============================================================================
# Permission catalog
# ============================================================================

class Permission(models.Model):
    """
    A named capability, e.g. ``patient_view``.

    ``code`` is the public identifier (exposed as ``id`` by the API). Created
    in bulk by initialization and soft-disabled through ``is_active``.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=100, unique=True)
    name = models.CharField(max_length=150)
    description = models.CharField(max_length=255)
    module = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'authz_permission'
        verbose_name = 'Permission'
        verbose_name_plural = 'Permissions'
        ordering = ['module', 'name']
        indexes = [
            models.Index(fields=['module', 'is_active'], name='idx_permission_module_active'),
        ]

    def __str__(self):
        return self.code


class RolePermission(models.Model):
    """
    The permission set bound to one role.

    ``permissions`` holds permission codes by value (weak reference):
    codes are validated against the catalog when written, never when read,
    so disabling a catalog entry does not rewrite stored grants.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    role = models.CharField(
        max_length=20,
        choices=RoleChoices.choices,
        unique=True
    )
    permissions = models.JSONField(default=list)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'authz_role_permission'
        verbose_name = 'Role Permission'
        verbose_name_plural = 'Role Permissions'
        ordering = ['role']

    def __str__(self):
        return f'{self.role} ({len(self.permissions)} permissions)'
