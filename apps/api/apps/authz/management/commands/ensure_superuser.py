"""
Management command to ensure an admin account exists (for Docker startup).
"""
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from apps.authz.models import RoleChoices


class Command(BaseCommand):
    help = 'Create the admin superuser if it does not exist (for Docker initialization)'

    def handle(self, *args, **options):
        User = get_user_model()

        email = os.environ.get('DJANGO_SUPERUSER_EMAIL', 'admin@example.com')
        password = os.environ.get('DJANGO_SUPERUSER_PASSWORD', 'admin123dev')

        user = User.objects.filter(email=email).first()
        if user is None:
            User.objects.create_superuser(email=email, password=password)
            self.stdout.write(
                self.style.SUCCESS(f'Admin "{email}" created successfully')
            )
        elif user.role != RoleChoices.ADMIN:
            self.stdout.write(
                self.style.WARNING(f'User "{email}" exists with role "{user.role}", not admin')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'Admin "{email}" already exists')
            )
