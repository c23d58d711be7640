from rest_framework.permissions import SAFE_METHODS

from personart_backend.appointments.access import can_access
from personart_backend.core.permissions import RBACPermission


class PatientPermission(RBACPermission):
    """RBAC for Patient endpoints (local cache).

    - clinic: full access (read + write)
    - admin: full access (read + write)
    - professional: read-only, only patients assigned to them
    """

    read_roles = {"clinic", "admin", "professional"}
    write_roles = {"clinic", "admin"}

    def has_object_permission(self, request, view, obj):
        role_name = self._role_name(request)
        if not role_name:
            return False

        if role_name == "professional":
            return request.method in SAFE_METHODS and can_access(obj, request.user)

        return True
