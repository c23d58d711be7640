"""Serializers for the core app.

Contains serializers for Role, Professional and User, plus the
authentication payloads. Follows the Read/Write serializer pattern.
"""

from rest_framework import serializers

from personart_backend.core.models import Professional, Role, User


# -----------------------------------------------------------------------------
# Role / Professional Serializers
# -----------------------------------------------------------------------------


class RoleSerializer(serializers.ModelSerializer):
    """Read-only serializer for Role model."""

    class Meta:
        model = Role
        fields = ['id', 'name', 'label']
        read_only_fields = fields


class ProfessionalSerializer(serializers.ModelSerializer):
    """Read-only serializer for the professional directory."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Professional
        fields = ['id', 'name', 'credential', 'display_name', 'active']
        read_only_fields = fields


# -----------------------------------------------------------------------------
# User Serializers
# -----------------------------------------------------------------------------


class UserMeSerializer(serializers.ModelSerializer):
    """Serializer for the /auth/me/ endpoint.

    Returns current user info with role and professional details.
    """

    role = RoleSerializer(read_only=True)
    professional = ProfessionalSerializer(read_only=True)
    display_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'is_active',
            'display_name',
            'role',
            'professional',
        ]
        read_only_fields = fields

    def get_display_name(self, obj):
        return obj.display_name()


# -----------------------------------------------------------------------------
# Authentication Serializers
# -----------------------------------------------------------------------------


class LoginSerializer(serializers.Serializer):
    """Serializer for user login.

    Validates credentials and returns user with role info.
    """

    username = serializers.CharField(required=True)
    password = serializers.CharField(required=True, write_only=True)

    def validate(self, attrs):
        from django.contrib.auth import authenticate

        username = attrs.get('username')
        password = attrs.get('password')

        if not username or not password:
            raise serializers.ValidationError('Username and password are required.')

        user = authenticate(username=username, password=password)

        if user is None:
            raise serializers.ValidationError('Invalid credentials.')

        if not user.is_active:
            raise serializers.ValidationError('User account is disabled.')

        attrs['user'] = user
        return attrs


class RefreshSerializer(serializers.Serializer):
    """Serializer for token refresh.

    Validates refresh token and returns new access token.
    """

    refresh = serializers.CharField(required=True)

    def validate_refresh(self, value):
        from rest_framework_simplejwt.tokens import RefreshToken
        from rest_framework_simplejwt.exceptions import TokenError

        try:
            RefreshToken(value)
            return value
        except TokenError as e:
            raise serializers.ValidationError(f'Invalid or expired refresh token: {str(e)}')
