"""
Management command to seed the default permission catalog and role grants.

Usage:
    python manage.py init_permissions
"""
from django.core.management.base import BaseCommand, CommandError

from apps.authz.services import initialize_defaults
from apps.core.exceptions import ConflictError


class Command(BaseCommand):
    help = 'Create the default permissions and role permissions (runs once)'

    def handle(self, *args, **options):
        try:
            result = initialize_defaults()
        except ConflictError as exc:
            raise CommandError(str(exc.detail))

        self.stdout.write(
            self.style.SUCCESS(
                f"Created {result['permissionsCreated']} permissions and "
                f"{result['rolePermissionsCreated']} role permissions"
            )
        )
