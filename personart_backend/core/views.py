"""Core app views.

Contains:
- health: Health check endpoint
- LoginView: JWT token obtain, opens the clinic session
- RefreshView: JWT token refresh
- LogoutView: tears the clinic session down
- MeView: Current authenticated user info
"""

import logging

from django.db import connection
from django.http import JsonResponse

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from rest_framework_simplejwt.tokens import RefreshToken

from personart_backend.core.serializers import (
    LoginSerializer,
    RefreshSerializer,
    UserMeSerializer,
)
from personart_backend.sync.session import session_registry

logger = logging.getLogger(__name__)


def health(request):
    """Health check endpoint - no authentication required."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1;')
    except Exception as exc:
        return JsonResponse({'status': 'error', 'detail': str(exc)}, status=503)

    return JsonResponse({'status': 'ok'})


class LoginView(APIView):
    """Obtain JWT access and refresh tokens and open the clinic session.

    POST /api/auth/login/
    Body: {"username": "...", "password": "..."}
    Returns: {"user": {...}, "access": "...", "refresh": "...",
              "connection_status": "connected|offline|error"}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user']

        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role_name
        if user.professional_id:
            refresh['professional_id'] = user.professional_id

        access = refresh.access_token

        # Initial fetch happens here; remote trouble only degrades the status.
        session = session_registry().open(user)
        logger.info(
            'login user=%s role=%s connection=%s',
            user.username,
            user.role_name,
            session.status,
        )

        return Response(
            {
                'user': UserMeSerializer(user).data,
                'access': str(access),
                'refresh': str(refresh),
                'connection_status': session.status,
            },
            status=status.HTTP_200_OK,
        )


class RefreshView(APIView):
    """Refresh JWT access token.

    POST /api/auth/refresh/
    Body: {"refresh": "..."}
    Returns: {"access": "..."}
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refresh = RefreshToken(serializer.validated_data['refresh'])
        return Response({'access': str(refresh.access_token)}, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """Close the clinic session of the current user.

    POST /api/auth/logout/
    Transient state (inbox, pending toasts) is dropped. The local cache and
    the outbox stay.
    """

    permission_classes = [IsAuthenticated]

    def post(self, request, *args, **kwargs):
        closed = session_registry().close(request.user)
        logger.info('logout user=%s had_session=%s', request.user.username, closed)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    """Get current authenticated user info.

    GET /api/auth/me/
    """

    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        serializer = UserMeSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)
