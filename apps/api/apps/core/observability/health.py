"""
Health check endpoints.

Provides /healthz and /readyz endpoints for monitoring.
"""
import logging
from django.http import JsonResponse
from django.views import View
from django.db import DatabaseError, connection
from django.conf import settings

logger = logging.getLogger(__name__)


class HealthzView(View):
    """
    Liveness endpoint. Does not touch dependencies.
    """

    def get(self, request):
        health_data = {
            'status': 'ok',
            'version': getattr(settings, 'VERSION', 'unknown'),
        }

        commit_hash = getattr(settings, 'COMMIT_HASH', None)
        if commit_hash:
            health_data['commit'] = commit_hash

        return JsonResponse(health_data, status=200)


class ReadyzView(View):
    """
    Readiness endpoint.

    Ready when the database answers. The permission catalog state is
    reported but does not gate readiness: an uninitialized catalog only
    means every gated route denies until an admin runs initialization.
    """

    def get(self, request):
        database_ok = self._check_database()
        checks = {
            'database': database_ok,
            'permissions_initialized': self._check_permissions() if database_ok else False,
        }

        response_data = {
            'status': 'ready' if database_ok else 'not_ready',
            'checks': checks,
        }

        return JsonResponse(response_data, status=200 if database_ok else 503)

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
                return True
        except DatabaseError as e:
            logger.error(
                'Database health check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'database',
                    'error': str(e)
                }
            )
            return False

    def _check_permissions(self):
        from apps.authz.models import Permission

        try:
            return Permission.objects.filter(is_active=True).exists()
        except DatabaseError as e:
            logger.error(
                'Permission catalog health check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'permissions',
                    'error': str(e)
                }
            )
            return False
