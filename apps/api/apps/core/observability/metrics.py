"""
Metrics instrumentation wrapper around prometheus_client.
"""
from functools import wraps
import time

from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry for the clinic API.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _setup_metrics(self):
        """Setup all application metrics."""

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = self._create_counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'status']
        )

        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Authorization Metrics
        # ===================================================================
        self.permission_checks_total = self._create_counter(
            'permission_checks_total',
            'Permission gate evaluations',
            ['policy', 'result']  # policy: single|any|all, result: allowed|denied|error
        )

        self.permission_denied_total = self._create_counter(
            'permission_denied_total',
            'Permission denials by role',
            ['role']
        )

        self.permission_check_duration_seconds = self._create_histogram(
            'permission_check_duration_seconds',
            'Duration of the role permission lookup',
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25]
        )

        self.role_permission_updates_total = self._create_counter(
            'role_permission_updates_total',
            'Role permission set replacements',
            ['role']
        )

        # ===================================================================
        # Audit Metrics
        # ===================================================================
        self.audit_log_writes_total = self._create_counter(
            'audit_log_writes_total',
            'Audit log write attempts',
            ['action', 'result']  # result: success|failure
        )

    def track_duration(self, histogram_metric):
        """
        Decorator to track function duration.

        Usage:
            @metrics.track_duration(metrics.permission_check_duration_seconds)
            def get_permissions_for_role(role):
                ...
        """
        def decorator(func):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    return func(*args, **kwargs)
                finally:
                    histogram_metric.observe(time.time() - start_time)
            return wrapper
        return decorator


# Global metrics instance
metrics = MetricsRegistry()
