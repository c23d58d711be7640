from rest_framework.permissions import SAFE_METHODS

from personart_backend.appointments.access import can_access
from personart_backend.core.permissions import RBACPermission


class AppointmentPermission(RBACPermission):
    """RBAC for appointments.

    - clinic: everything
    - admin: everything
    - professional: read own appointments, PATCH (status only) on own appointments
    """

    read_roles = {"clinic", "admin", "professional"}
    write_roles = {"clinic", "admin"}
    status_roles = {"professional"}

    def has_permission(self, request, view):
        if super().has_permission(request, view):
            return True
        if request.method != "PATCH":
            return False
        return self._role_name(request) in self.status_roles

    def has_object_permission(self, request, view, obj):
        role_name = self._role_name(request)
        if not role_name:
            return False

        if role_name == "professional":
            if request.method not in SAFE_METHODS and request.method != "PATCH":
                return False
            return can_access(obj, request.user)

        return True


class CalendarPermission(RBACPermission):
    """Calendar views are read-only; professionals get a filtered agenda."""

    read_roles = {"clinic", "admin", "professional"}
    write_roles = set()
