"""
Clinical models: clinical_patient
"""
import uuid
from django.conf import settings
from django.db import models


class Patient(models.Model):
    """
    Patient record with demographics, contact info and medical history.

    Deletion is soft (``is_deleted``); deleted patients drop out of the API.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(blank=True, null=True)

    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)

    medical_history = models.TextField(blank=True, default='')
    allergies = models.TextField(blank=True, default='')

    is_deleted = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='created_patients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clinical_patient'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='idx_patient_name'),
            models.Index(fields=['email'], name='idx_patient_email'),
        ]

    def __str__(self):
        return f'{self.first_name} {self.last_name}'
