"""
Clinical serializers for Patient.
"""
from rest_framework import serializers
from apps.clinical.models import Patient


class PatientSerializer(serializers.ModelSerializer):
    """
    Demographics and contact info. Medical history is served separately
    because it sits behind its own permissions.
    """

    class Meta:
        model = Patient
        fields = [
            'id',
            'first_name',
            'last_name',
            'date_of_birth',
            'email',
            'phone',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class PatientMedicalHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'medical_history', 'allergies', 'updated_at']
        read_only_fields = ['id', 'updated_at']
