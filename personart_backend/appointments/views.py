"""Appointment and calendar endpoints.

Bookings go through the clinic session's sync coordinator. Calendar views
are projections over the appointments the current user may see.
"""

from __future__ import annotations

from datetime import datetime

from django.http import Http404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from personart_backend.appointments.exceptions import SchedulingError, SlotConflictError, ValidationError
from personart_backend.appointments.permissions import AppointmentPermission, CalendarPermission
from personart_backend.appointments.serializers import (
	AppointmentSerializer,
	AppointmentUpdateSerializer,
	BookingSerializer,
)
from personart_backend.core.models import AuditLog, Role
from personart_backend.core.utils import log_patient_action
from personart_backend.sync.exceptions import RecordNotFound
from personart_backend.sync.session import session_for


class _AppointmentBaseView(APIView):
	permission_classes = [AppointmentPermission]

	def get_session(self):
		return session_for(self.request.user)

	def get_object(self, pk):
		try:
			appointment = self.get_session().coordinator.get_appointment(pk)
		except RecordNotFound:
			raise Http404
		self.check_object_permissions(self.request, appointment)
		return appointment


class AppointmentListCreateView(_AppointmentBaseView):
	"""
	List and book appointments.

	GET  /api/appointments/?date=YYYY-MM-DD&patient_id=...
	POST /api/appointments/
	Body: {"patient_id", "professional", "date", "time", "type", "note",
	       "recurrence": {"policy": "none|weekly|biweekly", "count": 2..52}}
	"""

	def get(self, request, *args, **kwargs):
		appointments = self.get_session().visible_appointments()

		date_str = request.query_params.get('date')
		if date_str:
			appointments = [a for a in appointments if a.date.isoformat() == date_str]
		patient_id = request.query_params.get('patient_id')
		if patient_id:
			appointments = [a for a in appointments if a.patient_id == patient_id]

		log_patient_action(request.user, AuditLog.APPOINTMENT_LIST)
		return Response(AppointmentSerializer(appointments, many=True).data, status=status.HTTP_200_OK)

	def post(self, request, *args, **kwargs):
		"""
		Book one appointment or a recurring series.

		Booking errors are translated to HTTP responses:
		- ValidationError -> 400 {"detail", "field"}
		- SlotConflictError -> 409 {"detail", "conflicts"}
		"""
		serializer = BookingSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)

		coordinator = self.get_session().coordinator
		patient = None
		patient_id = serializer.validated_data['patient_id']
		if patient_id:
			try:
				patient = coordinator.get_patient(patient_id)
			except RecordNotFound:
				return Response(
					ValidationError(f'patient {patient_id!r} not found.', field='patient').to_dict(),
					status=status.HTTP_400_BAD_REQUEST,
				)

		booking, recurrence = serializer.build(patient)
		try:
			appointments = coordinator.book(booking, recurrence)
		except ValidationError as e:
			return Response(e.to_dict(), status=status.HTTP_400_BAD_REQUEST)
		except SlotConflictError as e:
			return Response(e.to_dict(), status=status.HTTP_409_CONFLICT)
		except SchedulingError as e:
			return Response({'detail': str(e)}, status=status.HTTP_400_BAD_REQUEST)

		log_patient_action(
			request.user,
			AuditLog.APPOINTMENT_CREATE,
			patient_id=patient.id,
			meta={'count': len(appointments), 'policy': recurrence.policy},
		)
		return Response(AppointmentSerializer(appointments, many=True).data, status=status.HTTP_201_CREATED)


class AppointmentDetailView(_AppointmentBaseView):
	def get(self, request, pk, *args, **kwargs):
		appointment = self.get_object(pk)
		log_patient_action(request.user, AuditLog.APPOINTMENT_VIEW, patient_id=appointment.patient_id)
		return Response(AppointmentSerializer(appointment).data, status=status.HTTP_200_OK)

	def patch(self, request, pk, *args, **kwargs):
		appointment = self.get_object(pk)
		serializer = AppointmentUpdateSerializer(appointment, data=request.data, partial=True)
		serializer.is_valid(raise_exception=True)
		changes = dict(serializer.validated_data)

		# Professionals may only move their appointments through the status flow.
		if request.user.role_name == Role.PROFESSIONAL and set(changes) - {'status'}:
			return Response(
				{'detail': 'Professionals may only change the appointment status.'},
				status=status.HTTP_403_FORBIDDEN,
			)

		coordinator = self.get_session().coordinator
		if set(changes) == {'status'}:
			updated = coordinator.set_appointment_status(pk, changes['status'])
		else:
			for attr, value in changes.items():
				setattr(appointment, attr, value)
			updated = coordinator.update_appointment(appointment)

		log_patient_action(request.user, AuditLog.APPOINTMENT_UPDATE, patient_id=updated.patient_id)
		return Response(AppointmentSerializer(updated).data, status=status.HTTP_200_OK)

	def delete(self, request, pk, *args, **kwargs):
		appointment = self.get_object(pk)
		self.get_session().coordinator.delete_appointment(pk)
		log_patient_action(request.user, AuditLog.APPOINTMENT_DELETE, patient_id=appointment.patient_id)
		return Response(status=status.HTTP_204_NO_CONTENT)


class _CalendarBaseView(APIView):
	permission_classes = [CalendarPermission]

	def _parse_date(self, request):
		date_str = request.query_params.get('date')
		if not date_str:
			return None, Response(
				{'detail': 'date query parameter is required (YYYY-MM-DD).'},
				status=status.HTTP_400_BAD_REQUEST,
			)
		try:
			return datetime.strptime(date_str, '%Y-%m-%d').date(), None
		except ValueError:
			return None, Response(
				{'detail': 'date must be in format YYYY-MM-DD.'},
				status=status.HTTP_400_BAD_REQUEST,
			)

	def get_projector(self):
		return session_for(self.request.user).calendar()


class CalendarDayView(_CalendarBaseView):
	"""GET /api/calendar/day/?date=YYYY-MM-DD"""

	def get(self, request, *args, **kwargs):
		day, err = self._parse_date(request)
		if err is not None:
			return err

		appointments = self.get_projector().day(day)
		return Response(
			{
				'date': day.isoformat(),
				'appointments': AppointmentSerializer(appointments, many=True).data,
			},
			status=status.HTTP_200_OK,
		)


class CalendarWeekView(_CalendarBaseView):
	"""GET /api/calendar/week/?date=YYYY-MM-DD (Sunday-first week containing date)"""

	def get(self, request, *args, **kwargs):
		day, err = self._parse_date(request)
		if err is not None:
			return err

		grid = self.get_projector().week(day)
		rows = []
		for row in grid['rows']:
			rows.append(
				{
					'time': row['time'],
					'cells': [AppointmentSerializer(cell, many=True).data for cell in row['cells']],
				}
			)
		return Response(
			{
				'week_start': grid['days'][0].isoformat(),
				'days': [d.isoformat() for d in grid['days']],
				'labels': grid['labels'],
				'rows': rows,
				'prev_week': grid['prev_week'].isoformat(),
				'next_week': grid['next_week'].isoformat(),
			},
			status=status.HTTP_200_OK,
		)


class CalendarMonthView(_CalendarBaseView):
	"""GET /api/calendar/month/?date=YYYY-MM-DD (month is returned 0-indexed)"""

	def get(self, request, *args, **kwargs):
		day, err = self._parse_date(request)
		if err is not None:
			return err

		projector = self.get_projector()
		weeks = projector.month(day.year, day.month - 1)
		counts = {}
		for week in weeks:
			for cell in week:
				if cell is not None:
					counts[cell.isoformat()] = len(projector.day(cell))

		return Response(
			{
				'year': day.year,
				'month': day.month - 1,
				'weeks': [[cell.isoformat() if cell else None for cell in week] for week in weeks],
				'counts': counts,
			},
			status=status.HTTP_200_OK,
		)
