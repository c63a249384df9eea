"""
Authz URLs - JWT authentication, permission catalog and role permissions
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from .views import PermissionViewSet
from .views_auth import AuditedTokenObtainPairView, LogoutView

router = DefaultRouter()
router.register(r'permissions', PermissionViewSet, basename='permission')

urlpatterns = [
    # JWT Authentication
    path('auth/token/', AuditedTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),
    path('auth/logout/', LogoutView.as_view(), name='logout'),

    path('', include(router.urls)),
]
