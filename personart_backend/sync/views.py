"""Sync and inbox endpoints.

Contains:
- SyncStatusView: connection status, outbox size, cache revision
- SyncRefreshView: explicit reconnect (re-runs the initial load)
- SyncRetryView: replay the outbox now
- NotificationsView: drain pending toasts
- InboxListView / InboxApproveView / InboxDetailView: pre-registrations
"""

from django.http import Http404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from personart_backend.appointments.exceptions import ValidationError
from personart_backend.appointments.serializers import AppointmentSerializer
from personart_backend.core.permissions import InboxPermission, SyncPermission
from personart_backend.core.models import AuditLog
from personart_backend.core.utils import log_patient_action
from personart_backend.sync.codec import patient_document
from personart_backend.sync.exceptions import RecordNotFound
from personart_backend.sync.session import session_for


def _status_payload(session):
    coordinator = session.coordinator
    return {
        'status': coordinator.status,
        'pending_effects': coordinator.outbox.count(),
        'revision': coordinator.revision.value,
        'inbox': len(coordinator.inbox),
    }


class SyncStatusView(APIView):
    """GET /api/sync/status/"""

    permission_classes = [SyncPermission]

    def get(self, request, *args, **kwargs):
        return Response(_status_payload(session_for(request.user)), status=status.HTTP_200_OK)


class SyncRefreshView(APIView):
    """POST /api/sync/refresh/ - reconnect and reload from the remote store."""

    permission_classes = [SyncPermission]

    def post(self, request, *args, **kwargs):
        session = session_for(request.user)
        refreshed = session.coordinator.reconnect()
        payload = _status_payload(session)
        payload['refreshed'] = refreshed
        return Response(payload, status=status.HTTP_200_OK)


class SyncRetryView(APIView):
    """POST /api/sync/retry/ - replay failed remote writes."""

    permission_classes = [SyncPermission]

    def post(self, request, *args, **kwargs):
        session = session_for(request.user)
        sent = session.coordinator.retry_pending()
        payload = _status_payload(session)
        payload['sent'] = sent
        return Response(payload, status=status.HTTP_200_OK)


class NotificationsView(APIView):
    """GET /api/sync/notifications/ - returns and clears pending toasts."""

    permission_classes = [SyncPermission]

    def get(self, request, *args, **kwargs):
        notifications = session_for(request.user).notifier.drain()
        return Response([n.to_dict() for n in notifications], status=status.HTTP_200_OK)


class InboxListView(APIView):
    """GET /api/inbox/"""

    permission_classes = [InboxPermission]

    def get(self, request, *args, **kwargs):
        entries = session_for(request.user).coordinator.inbox
        return Response([e.to_dict() for e in entries], status=status.HTTP_200_OK)


class InboxApproveView(APIView):
    """POST /api/inbox/<id>/approve/ - create the patient (and first appointment)."""

    permission_classes = [InboxPermission]

    def post(self, request, pk, *args, **kwargs):
        coordinator = session_for(request.user).coordinator
        try:
            patient, appointments = coordinator.approve_inbox(pk)
        except RecordNotFound:
            raise Http404
        except ValidationError as e:
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        log_patient_action(request.user, AuditLog.INBOX_APPROVED, patient_id=patient.id, meta={'inbox_id': pk})
        return Response(
            {
                'patient': patient_document(patient),
                'appointments': AppointmentSerializer(appointments, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class InboxDetailView(APIView):
    """DELETE /api/inbox/<id>/ - dismiss a pre-registration."""

    permission_classes = [InboxPermission]

    def delete(self, request, pk, *args, **kwargs):
        coordinator = session_for(request.user).coordinator
        try:
            coordinator.dismiss_inbox(pk)
        except RecordNotFound:
            raise Http404
        return Response(status=status.HTTP_204_NO_CONTENT)
