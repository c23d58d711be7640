"""Patient endpoints.

Every write goes through the clinic session's sync coordinator (local cache
first, remote mirror best-effort). Reads are served from the local cache and
narrowed by the access filter for professional accounts.
"""

from django.http import Http404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from personart_backend.appointments.exceptions import ValidationError
from personart_backend.core.models import AuditLog
from personart_backend.core.utils import log_patient_action
from personart_backend.patients.permissions import PatientPermission
from personart_backend.patients.serializers import (
    InsurancePlanSerializer,
    PatientDocumentSerializer,
    RegisterSessionSerializer,
    RenewAuthorizationSerializer,
)
from personart_backend.sync.codec import patient_document
from personart_backend.sync.exceptions import RecordNotFound
from personart_backend.sync.session import session_for


class _PatientBaseView(APIView):
    permission_classes = [PatientPermission]

    def get_session(self):
        return session_for(self.request.user)

    def get_object(self, pk):
        try:
            patient = self.get_session().coordinator.get_patient(pk)
        except RecordNotFound:
            raise Http404
        self.check_object_permissions(self.request, patient)
        return patient


class PatientListCreateView(_PatientBaseView):
    """List patients or create one from a legacy document."""

    def get(self, request, *args, **kwargs):
        patients = self.get_session().visible_patients()
        log_patient_action(request.user, AuditLog.PATIENT_LIST)
        return Response([patient_document(p) for p in patients], status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        serializer = PatientDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            patient = self.get_session().coordinator.save_patient(serializer.validated_data)
        except ValidationError as e:
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        log_patient_action(request.user, AuditLog.PATIENT_CREATED, patient_id=patient.id)
        return Response(patient_document(patient), status=status.HTTP_201_CREATED)


class PatientDetailView(_PatientBaseView):
    """Retrieve, replace or delete a patient."""

    def get(self, request, pk, *args, **kwargs):
        patient = self.get_object(pk)
        log_patient_action(request.user, AuditLog.PATIENT_VIEW, patient_id=patient.id)
        return Response(patient_document(patient), status=status.HTTP_200_OK)

    def put(self, request, pk, *args, **kwargs):
        self.get_object(pk)
        serializer = PatientDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        document = {**serializer.validated_data, 'id': pk}

        try:
            patient = self.get_session().coordinator.save_patient(document)
        except ValidationError as e:
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        log_patient_action(request.user, AuditLog.PATIENT_UPDATED, patient_id=patient.id)
        return Response(patient_document(patient), status=status.HTTP_200_OK)

    def delete(self, request, pk, *args, **kwargs):
        self.get_object(pk)
        self.get_session().coordinator.delete_patient(pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PatientSessionView(_PatientBaseView):
    """Register one used insurer session.

    POST /api/patients/<id>/sessions/
    Body: {"date": "YYYY-MM-DD"} (optional, defaults to today)
    """

    def post(self, request, pk, *args, **kwargs):
        self.get_object(pk)
        serializer = RegisterSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        plan = self.get_session().coordinator.register_insurance_session(
            pk,
            on=serializer.validated_data.get('date'),
        )
        log_patient_action(request.user, AuditLog.SESSION_REGISTERED, patient_id=pk)
        return Response(InsurancePlanSerializer(plan).data, status=status.HTTP_200_OK)


class PatientRenewView(_PatientBaseView):
    """Renew the insurer authorization (counter and history reset).

    POST /api/patients/<id>/renew/
    """

    def post(self, request, pk, *args, **kwargs):
        self.get_object(pk)
        serializer = RenewAuthorizationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            plan = self.get_session().coordinator.renew_insurance_authorization(
                pk,
                on=data.get('date'),
                total_sessions=data.get('total_sessions'),
                authorization_number=data.get('numero_autorizacao'),
                authorization_date=data.get('data_autorizacao'),
            )
        except ValidationError as e:
            return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)

        log_patient_action(request.user, AuditLog.AUTHORIZATION_RENEWED, patient_id=pk)
        return Response(InsurancePlanSerializer(plan).data, status=status.HTTP_200_OK)
