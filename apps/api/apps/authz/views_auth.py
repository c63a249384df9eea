"""
Authentication views with audit trail.

JWT issuance is simplejwt's; these views only add LOGIN, LOGIN_FAILED
and LOGOUT audit entries around it.
"""
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.audit.models import AuditActionChoices
from apps.audit.services import AuditLogService


class AuditedTokenObtainPairView(TokenObtainPairView):
    """
    POST /api/v1/auth/token/

    Records LOGIN (LOW) on success and LOGIN_FAILED (HIGH) with the
    attempted email when the credentials are rejected.
    """

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        email = str(request.data.get('email', ''))

        try:
            serializer.is_valid(raise_exception=True)
        except AuthenticationFailed as exc:
            AuditLogService.log_auth(
                AuditActionChoices.LOGIN_FAILED,
                email,
                success=False,
                request=request,
                error_message=str(exc.detail),
            )
            raise
        except TokenError as exc:
            raise InvalidToken(exc.args[0])

        AuditLogService.log_auth(
            AuditActionChoices.LOGIN,
            email,
            success=True,
            request=request,
            user=serializer.user,
        )
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    POST /api/v1/auth/logout/

    Tokens are stateless; the client discards them. This endpoint records
    the LOGOUT event.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        AuditLogService.log_auth(
            AuditActionChoices.LOGOUT,
            request.user.email,
            success=True,
            request=request,
            user=request.user,
        )
        return Response({'success': True, 'message': 'Logged out successfully'})
